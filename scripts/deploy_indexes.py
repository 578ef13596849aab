"""
Deploy the Firestore composite indexes with the Firebase CLI.
Run from the project root (where firebase.json lives).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from folio.firebase_cli import (
    FIRESTORE_INDEXES,
    INSTALL_HINT,
    FirebaseCli,
    FirebaseCliError,
    describe_index,
    write_indexes_file,
)
from folio.logging_utils import configure_script_logging

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Deploy Firestore indexes")
    parser.add_argument("--project-dir", default=".", help="Directory containing firebase.json")
    parser.add_argument(
        "--write",
        action="store_true",
        help="Regenerate firestore.indexes.json before deploying",
    )
    args = parser.parse_args(argv)

    configure_script_logging()
    project_dir = Path(args.project_dir)
    cli = FirebaseCli(cwd=project_dir)

    if not cli.is_installed():
        logger.error("Firebase CLI not found. Install it with: %s, then run: firebase login", INSTALL_HINT)
        return 1
    if not (project_dir / "firebase.json").exists():
        logger.error("firebase.json not found. Run this script from the project root.")
        return 1
    indexes_path = project_dir / "firestore.indexes.json"
    if args.write:
        write_indexes_file(indexes_path)
    if not indexes_path.exists():
        logger.error("firestore.indexes.json not found (use --write to generate it).")
        return 1

    try:
        cli.deploy("firestore:indexes")
    except FirebaseCliError as exc:
        logger.error("Error deploying indexes: %s", exc)
        logger.error(
            "Make sure you are logged in (firebase login), the right project is "
            "selected (firebase use <project-id>) and you have permission on it."
        )
        return 1

    logger.info("Firestore indexes deployed successfully")
    for index in FIRESTORE_INDEXES:
        logger.info("  - %s", describe_index(index))
    try:
        print(cli.list_indexes())
    except FirebaseCliError as exc:
        logger.warning("Could not list deployed indexes: %s", exc)
    return 0


if __name__ == "__main__":
    sys.exit(main())
