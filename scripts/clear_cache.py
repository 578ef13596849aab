"""
Clear the tagged content cache and local build caches.

Also prints the steps for clearing the Firebase data a browser keeps for the
site (IndexedDB, local and session storage), which no server-side tool can reach.
"""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from pathlib import Path
from typing import Iterable, Optional

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from folio.cache import CacheTag, TaggedCache
from folio.dependencies import get_cache
from folio.logging_utils import configure_script_logging

logger = logging.getLogger(__name__)

LOCAL_CACHE_DIRS = (".pytest_cache",)

BROWSER_STEPS = """\
Firebase browser cache clearing:
1. Open your browser's Developer Tools (F12)
2. Go to the Application/Storage tab
3. Under "Storage", find "IndexedDB"
4. Delete any Firebase-related databases:
   - firebaseLocalStorageDb
   - firestore/[your-project-id]
5. Clear "Local Storage" and "Session Storage"
6. Refresh the site
"""


def clear_tagged_cache(cache: TaggedCache, tags: Optional[Iterable[str]] = None) -> int:
    if not tags:
        removed = cache.clear()
        logger.info("Cleared %d cache entries", removed)
        return removed
    removed = 0
    for tag in tags:
        count = cache.invalidate_tag(tag)
        logger.info("Invalidated %d entries tagged %s", count, tag)
        removed += count
    return removed


def remove_local_caches(root: Path, extra: Iterable[str] = ()) -> list[Path]:
    targets = [root / name for name in (*LOCAL_CACHE_DIRS, *extra)]
    targets.extend(
        path for path in root.rglob("__pycache__") if ".venv" not in path.parts
    )
    removed = []
    for path in targets:
        if not path.is_dir():
            continue
        try:
            shutil.rmtree(path)
        except OSError as exc:
            logger.warning("Could not remove %s: %s", path, exc)
            continue
        removed.append(path)
    logger.info("Removed %d local cache directories", len(removed))
    return removed


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Clear content and local caches")
    parser.add_argument(
        "--tag",
        action="append",
        choices=[str(tag) for tag in CacheTag],
        help="Only invalidate this cache tag (repeatable); default clears everything",
    )
    parser.add_argument(
        "--extra",
        action="append",
        default=[],
        help="Additional directory (relative to the project root) to remove",
    )
    parser.add_argument("--root", default=str(ROOT), help="Project root")
    args = parser.parse_args(argv)

    configure_script_logging()
    try:
        clear_tagged_cache(get_cache(), args.tag)
    except Exception:
        logger.exception("Error clearing the content cache")
        return 1
    remove_local_caches(Path(args.root), args.extra)
    print(BROWSER_STEPS)
    return 0


if __name__ == "__main__":
    sys.exit(main())
