"""
Thin wrapper around the `firebase` command line tool used by the deploy
scripts, plus the Firestore composite index definitions.
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from shared.constants import (
    ANNOUNCEMENTS_COLLECTION,
    BLOG_POSTS_COLLECTION,
    CONTACT_MESSAGES_COLLECTION,
    PORTFOLIO_COLLECTION,
    TESTIMONIALS_COLLECTION,
)

logger = logging.getLogger(__name__)

INSTALL_HINT = "npm install -g firebase-tools"


class FirebaseCliError(RuntimeError):
    pass


def _index(collection: str, *fields: tuple[str, str]) -> dict:
    return {
        "collectionGroup": collection,
        "queryScope": "COLLECTION",
        "fields": [
            {"fieldPath": path, "arrayConfig": "CONTAINS"}
            if mode == "CONTAINS"
            else {"fieldPath": path, "order": mode}
            for path, mode in fields
        ],
    }


# Single-field indexes are created automatically; only composites are listed.
FIRESTORE_INDEXES = [
    _index(PORTFOLIO_COLLECTION, ("title", "ASCENDING"), ("createdAt", "DESCENDING")),
    _index(PORTFOLIO_COLLECTION, ("tags", "CONTAINS"), ("createdAt", "DESCENDING")),
    _index(BLOG_POSTS_COLLECTION, ("status", "ASCENDING"), ("createdAt", "DESCENDING")),
    _index(BLOG_POSTS_COLLECTION, ("status", "ASCENDING"), ("publishedAt", "DESCENDING")),
    _index(ANNOUNCEMENTS_COLLECTION, ("isActive", "ASCENDING"), ("createdAt", "DESCENDING")),
    _index(TESTIMONIALS_COLLECTION, ("status", "ASCENDING"), ("createdAt", "DESCENDING")),
    _index(CONTACT_MESSAGES_COLLECTION, ("isRead", "ASCENDING"), ("submittedAt", "DESCENDING")),
]


def describe_index(index: dict) -> str:
    parts = []
    for field in index["fields"]:
        if "arrayConfig" in field:
            parts.append(f"{field['fieldPath']} (array contains)")
        elif field["order"] == "DESCENDING":
            parts.append(f"{field['fieldPath']} (desc)")
        else:
            parts.append(field["fieldPath"])
    return f"{index['collectionGroup']} by {' + '.join(parts)}"


def write_indexes_file(path: Path) -> Path:
    path = Path(path)
    path.write_text(
        json.dumps({"indexes": FIRESTORE_INDEXES, "fieldOverrides": []}, indent=2) + "\n",
        encoding="utf-8",
    )
    logger.info("Wrote %d composite indexes to %s", len(FIRESTORE_INDEXES), path)
    return path


class FirebaseCli:
    def __init__(self, executable: str = "firebase", cwd: Optional[Path] = None):
        self.executable = executable
        self.cwd = Path(cwd) if cwd else None

    def _run(self, args: Sequence[str], *, capture: bool = True) -> subprocess.CompletedProcess:
        command = [self.executable, *args]
        logger.debug("Running %s", " ".join(command))
        try:
            result = subprocess.run(
                command,
                cwd=self.cwd,
                capture_output=capture,
                text=True,
                check=False,
            )
        except FileNotFoundError as exc:
            raise FirebaseCliError(
                f"Firebase CLI not found. Install it with: {INSTALL_HINT}"
            ) from exc
        if result.returncode != 0:
            detail = (result.stderr or result.stdout or "").strip() if capture else ""
            raise FirebaseCliError(
                f"`{' '.join(command)}` failed with exit code {result.returncode}"
                + (f": {detail}" if detail else "")
            )
        return result

    def is_installed(self) -> bool:
        try:
            self._run(["--version"])
        except FirebaseCliError:
            return False
        return True

    def is_authenticated(self) -> bool:
        try:
            self._run(["projects:list"])
        except FirebaseCliError:
            return False
        return True

    def list_projects(self) -> str:
        return self._run(["projects:list"]).stdout

    def list_indexes(self) -> str:
        return self._run(["firestore:indexes"]).stdout

    def use_project(self, project_id: str) -> None:
        if not project_id or not project_id.strip():
            raise FirebaseCliError("A project ID is required.")
        self._run(["use", project_id.strip()])

    def login(self) -> None:
        self._run(["login"], capture=False)

    def deploy(self, only: str) -> None:
        """Deploys one target (e.g. `firestore:indexes`), streaming CLI output."""
        self._run(["deploy", "--only", only], capture=False)
