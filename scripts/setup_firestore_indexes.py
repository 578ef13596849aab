"""
Interactive Firestore index setup: checks the Firebase CLI and login,
selects a project, writes firestore.indexes.json and deploys it.

Pass --yes (and --project) to run without prompts.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, Optional

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from folio.firebase_cli import INSTALL_HINT, FirebaseCli, FirebaseCliError, write_indexes_file
from folio.logging_utils import configure_script_logging

logger = logging.getLogger(__name__)


def _confirm(prompt: str, ask: Callable[[str], str], assume_yes: bool) -> bool:
    if assume_yes:
        return True
    return ask(f"{prompt} (y/n): ").strip().lower() == "y"


def run_setup(
    cli: FirebaseCli,
    project_dir: Path,
    *,
    project_id: Optional[str] = None,
    assume_yes: bool = False,
    ask: Callable[[str], str] = input,
) -> bool:
    if not cli.is_installed():
        logger.error("Firebase CLI not found. Install it with: %s", INSTALL_HINT)
        return False
    logger.info("Firebase CLI is installed")

    if not cli.is_authenticated():
        if not _confirm("Not logged in. Open the browser to log in to Firebase?", ask, assume_yes):
            logger.error("Login cancelled")
            return False
        try:
            cli.login()
        except FirebaseCliError as exc:
            logger.error("Failed to log in to Firebase: %s", exc)
            return False
    logger.info("Firebase CLI is authenticated")

    if not project_id:
        if assume_yes:
            logger.error("--project is required with --yes")
            return False
        print(cli.list_projects())
        project_id = ask("Enter your project ID: ")
    try:
        cli.use_project(project_id)
    except FirebaseCliError as exc:
        logger.error("Failed to select project %s: %s", project_id, exc)
        return False
    logger.info("Selected project: %s", project_id.strip())

    write_indexes_file(project_dir / "firestore.indexes.json")
    try:
        cli.deploy("firestore:indexes")
    except FirebaseCliError as exc:
        logger.error("Failed to deploy indexes: %s", exc)
        return False
    logger.info("Setup completed successfully; Firestore queries should now be faster")
    return True


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Set up Firestore indexes")
    parser.add_argument("--project", default=None, help="Firebase project ID")
    parser.add_argument("--project-dir", default=".", help="Directory containing firebase.json")
    parser.add_argument("--yes", action="store_true", help="Answer yes to every prompt")
    args = parser.parse_args(argv)

    configure_script_logging()
    project_dir = Path(args.project_dir)
    ok = run_setup(
        FirebaseCli(cwd=project_dir),
        project_dir,
        project_id=args.project,
        assume_yes=args.yes,
    )
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
