import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from folio.cache import CacheTag, InMemoryTaggedCache
from folio.config import Settings, get_settings
from folio.dependencies import get_store, reset_dependencies
from folio.firebase_cli import FirebaseCliError
from folio.store import InMemoryDocumentStore
from scripts import (
    clear_cache,
    deploy_indexes,
    deploy_storage_rules,
    generate_content_sitemaps,
    generate_rss_feed,
    seed_database,
    setup_firestore_indexes,
)
from shared.constants import BLOG_POSTS_COLLECTION, PORTFOLIO_COLLECTION


class TempDirTestCase(unittest.TestCase):
    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.tmp = Path(tmp.name)


class GenerateSitemapsTests(TempDirTestCase):
    def test_writes_content_sitemaps_and_index(self):
        store = InMemoryDocumentStore()
        store.set(BLOG_POSTS_COLLECTION, "b1", {"slug": "hello", "status": "published"})
        store.set(BLOG_POSTS_COLLECTION, "b2", {"slug": "draft", "status": "draft"})
        store.set(PORTFOLIO_COLLECTION, "p1", {"slug": "site", "title": "Site"})

        written = generate_content_sitemaps.generate_sitemaps(store, self.tmp / "public", "https://folio.test")

        self.assertEqual(
            [path.name for path in written],
            ["sitemap-pages.xml", "sitemap-blog.xml", "sitemap-portfolio.xml", "sitemap-index.xml"],
        )
        blog = (self.tmp / "public" / "sitemap-blog.xml").read_text(encoding="utf-8")
        self.assertIn("https://folio.test/blog/hello", blog)
        self.assertNotIn("/blog/draft", blog)
        index = (self.tmp / "public" / "sitemap-index.xml").read_text(encoding="utf-8")
        self.assertIn("https://folio.test/sitemap-portfolio.xml", index)


class GenerateFeedTests(TempDirTestCase):
    def test_writes_feed(self):
        store = InMemoryDocumentStore()
        store.set(
            BLOG_POSTS_COLLECTION,
            "b1",
            {"slug": "hello", "title": "Hello", "status": "published", "publishedAt": "2024-01-01T00:00:00+00:00"},
        )
        settings = Settings(SITE_URL="https://folio.test", SITE_NAME="Folio")
        output = generate_rss_feed.generate_feed(store, self.tmp / "out" / "feed.xml", settings)
        text = output.read_text(encoding="utf-8")
        self.assertIn("<title>Folio Blog</title>", text)
        self.assertIn("https://folio.test/blog/hello", text)


class ClearCacheTests(TempDirTestCase):
    def test_clear_everything_or_by_tag(self):
        cache = InMemoryTaggedCache()
        cache.set("a", 1, ttl=60, tags=[CacheTag.BLOG])
        cache.set("b", 2, ttl=60, tags=[CacheTag.SKILLS])
        self.assertEqual(clear_cache.clear_tagged_cache(cache, ["blog"]), 1)
        self.assertEqual(cache.get("b"), 2)
        self.assertEqual(clear_cache.clear_tagged_cache(cache), 1)

    def test_remove_local_caches(self):
        (self.tmp / ".pytest_cache").mkdir()
        (self.tmp / "pkg" / "__pycache__").mkdir(parents=True)
        (self.tmp / ".venv" / "lib" / "__pycache__").mkdir(parents=True)
        (self.tmp / "build-cache").mkdir()

        removed = clear_cache.remove_local_caches(self.tmp, ["build-cache", "missing"])

        self.assertEqual(len(removed), 3)
        self.assertFalse((self.tmp / "pkg" / "__pycache__").exists())
        self.assertTrue((self.tmp / ".venv" / "lib" / "__pycache__").exists())


class FirebaseScriptTests(TempDirTestCase):
    def patch_cli(self, module):
        patcher = mock.patch.object(module, "FirebaseCli")
        cli_class = patcher.start()
        self.addCleanup(patcher.stop)
        return cli_class.return_value

    def test_deploy_indexes_requires_firebase_json(self):
        cli = self.patch_cli(deploy_indexes)
        cli.is_installed.return_value = True
        self.assertEqual(deploy_indexes.main(["--project-dir", str(self.tmp)]), 1)
        cli.deploy.assert_not_called()

    def test_deploy_indexes_writes_and_deploys(self):
        cli = self.patch_cli(deploy_indexes)
        cli.is_installed.return_value = True
        cli.list_indexes.return_value = "indexes"
        (self.tmp / "firebase.json").write_text("{}", encoding="utf-8")

        self.assertEqual(deploy_indexes.main(["--project-dir", str(self.tmp), "--write"]), 0)
        self.assertTrue((self.tmp / "firestore.indexes.json").exists())
        cli.deploy.assert_called_once_with("firestore:indexes")

    def test_deploy_indexes_failure(self):
        cli = self.patch_cli(deploy_indexes)
        cli.is_installed.return_value = True
        cli.deploy.side_effect = FirebaseCliError("permission denied")
        (self.tmp / "firebase.json").write_text("{}", encoding="utf-8")
        (self.tmp / "firestore.indexes.json").write_text("{}", encoding="utf-8")
        self.assertEqual(deploy_indexes.main(["--project-dir", str(self.tmp)]), 1)

    def test_deploy_storage_rules(self):
        cli = self.patch_cli(deploy_storage_rules)
        (self.tmp / "storage.rules").write_text("rules_version = '2';", encoding="utf-8")

        cli.is_authenticated.return_value = False
        self.assertEqual(deploy_storage_rules.main(["--project-dir", str(self.tmp)]), 1)

        cli.is_authenticated.return_value = True
        self.assertEqual(deploy_storage_rules.main(["--project-dir", str(self.tmp)]), 0)
        cli.deploy.assert_called_once_with("storage")

    def test_setup_non_interactive(self):
        cli = mock.Mock()
        ok = setup_firestore_indexes.run_setup(cli, self.tmp, project_id="demo", assume_yes=True)
        self.assertTrue(ok)
        cli.use_project.assert_called_once_with("demo")
        cli.login.assert_not_called()
        self.assertTrue((self.tmp / "firestore.indexes.json").exists())

    def test_setup_prompts_for_login_and_project(self):
        cli = mock.Mock()
        cli.is_authenticated.return_value = False
        answers = iter(["y", "my-project"])
        ok = setup_firestore_indexes.run_setup(cli, self.tmp, ask=lambda prompt: next(answers))
        self.assertTrue(ok)
        cli.login.assert_called_once()
        cli.use_project.assert_called_once_with("my-project")

    def test_setup_declined_login(self):
        cli = mock.Mock()
        cli.is_authenticated.return_value = False
        ok = setup_firestore_indexes.run_setup(cli, self.tmp, ask=lambda prompt: "n")
        self.assertFalse(ok)
        cli.deploy.assert_not_called()

    def test_setup_yes_requires_project(self):
        cli = mock.Mock()
        self.assertFalse(setup_firestore_indexes.run_setup(cli, self.tmp, assume_yes=True))


class SeedScriptTests(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch.dict(os.environ, {"FOLIO_USE_IN_MEMORY_BACKENDS": "1"})
        patcher.start()
        self.addCleanup(patcher.stop)
        get_settings.cache_clear()
        self.addCleanup(get_settings.cache_clear)
        reset_dependencies()
        self.addCleanup(reset_dependencies)

    def test_seeds_configured_store(self):
        self.assertEqual(seed_database.main([]), 0)
        self.assertEqual(len(get_store().list(PORTFOLIO_COLLECTION)), 2)

    def test_logging_follows_settings(self):
        with mock.patch.dict(os.environ, {"LOG_LEVEL": "DEBUG", "VERBOSE_FIREBASE_LOGS": "1"}):
            get_settings.cache_clear()
            with mock.patch("folio.logging_utils.configure_logging") as configure:
                self.assertEqual(seed_database.main([]), 0)
        configure.assert_called_once_with("DEBUG", True)


if __name__ == "__main__":
    unittest.main()
