"""
Seed the configured store with the default portfolio, skills and settings.
Collections that already hold content are left alone.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from folio.actions.settings import seed_database
from folio.dependencies import get_cache, get_store
from folio.logging_utils import configure_script_logging

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Seed default content")
    parser.parse_args(argv)

    configure_script_logging()
    result = seed_database(get_store(), cache=get_cache())
    if not result.success:
        logger.error(result.message)
        return 1
    logger.info(result.message)
    return 0


if __name__ == "__main__":
    sys.exit(main())
