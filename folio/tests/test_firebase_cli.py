import json
import subprocess
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from folio.firebase_cli import (
    FIRESTORE_INDEXES,
    FirebaseCli,
    FirebaseCliError,
    describe_index,
    write_indexes_file,
)


def completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class FirestoreIndexTests(unittest.TestCase):
    def test_describe_index(self):
        self.assertEqual(
            describe_index(FIRESTORE_INDEXES[1]),
            "portfolioItems by tags (array contains) + createdAt (desc)",
        )

    def test_write_indexes_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = write_indexes_file(Path(tmp) / "firestore.indexes.json")
            data = json.loads(path.read_text(encoding="utf-8"))
        self.assertEqual(data["fieldOverrides"], [])
        self.assertEqual(len(data["indexes"]), len(FIRESTORE_INDEXES))
        self.assertEqual(data["indexes"][0]["queryScope"], "COLLECTION")


class FirebaseCliTests(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch("folio.firebase_cli.subprocess.run")
        self.run = patcher.start()
        self.addCleanup(patcher.stop)
        self.cli = FirebaseCli(cwd=Path("/srv/site"))

    def test_is_installed(self):
        self.run.return_value = completed(stdout="13.0.0")
        self.assertTrue(self.cli.is_installed())
        self.run.assert_called_once_with(
            ["firebase", "--version"],
            cwd=Path("/srv/site"),
            capture_output=True,
            text=True,
            check=False,
        )

    def test_missing_executable(self):
        self.run.side_effect = FileNotFoundError()
        self.assertFalse(self.cli.is_installed())
        with self.assertRaises(FirebaseCliError) as ctx:
            self.cli.list_projects()
        self.assertIn("npm install -g firebase-tools", str(ctx.exception))

    def test_not_authenticated(self):
        self.run.return_value = completed(returncode=1, stderr="Failed to authenticate")
        self.assertFalse(self.cli.is_authenticated())

    def test_failure_includes_stderr(self):
        self.run.return_value = completed(returncode=2, stderr="no such project")
        with self.assertRaises(FirebaseCliError) as ctx:
            self.cli.use_project("demo")
        self.assertIn("no such project", str(ctx.exception))
        self.assertEqual(self.run.call_args[0][0], ["firebase", "use", "demo"])

    def test_use_project_requires_id(self):
        with self.assertRaises(FirebaseCliError):
            self.cli.use_project("  ")
        self.run.assert_not_called()

    def test_deploy_streams_output(self):
        self.run.return_value = completed()
        self.cli.deploy("firestore:indexes")
        args, kwargs = self.run.call_args
        self.assertEqual(args[0], ["firebase", "deploy", "--only", "firestore:indexes"])
        self.assertFalse(kwargs["capture_output"])


if __name__ == "__main__":
    unittest.main()
