"""
Deploy storage.rules to Firebase Storage.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from folio.firebase_cli import INSTALL_HINT, FirebaseCli, FirebaseCliError
from folio.logging_utils import configure_script_logging

logger = logging.getLogger(__name__)

RULES_SUMMARY = (
    "Read access: public (all images can be viewed)",
    "Write access: authenticated users only",
    "File size limit: 10MB per image",
    "Allowed formats: JPG, PNG, WebP, AVIF, GIF, SVG, BMP, TIFF, ICO",
    "Folders: portfolio-images, blog-images, images, admin-uploads, temp",
)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Deploy Firebase Storage rules")
    parser.add_argument("--project-dir", default=str(ROOT), help="Directory containing storage.rules")
    args = parser.parse_args(argv)

    configure_script_logging()
    project_dir = Path(args.project_dir)
    if not (project_dir / "storage.rules").exists():
        logger.error("storage.rules not found in %s", project_dir)
        return 1

    cli = FirebaseCli(cwd=project_dir)
    if not cli.is_installed():
        logger.error("Firebase CLI not found. Install it with: %s", INSTALL_HINT)
        return 1
    if not cli.is_authenticated():
        logger.error("Not authenticated with Firebase. Run: firebase login")
        return 1

    try:
        cli.deploy("storage")
    except FirebaseCliError as exc:
        logger.error("Error deploying storage rules: %s", exc)
        return 1

    logger.info("Storage rules deployed successfully")
    for line in RULES_SUMMARY:
        logger.info("  - %s", line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
