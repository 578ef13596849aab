import os
import unittest
from unittest import mock

from folio import dependencies
from folio.cache import InMemoryTaggedCache, RedisTaggedCache
from folio.config import Settings, get_settings
from folio.images import process_image_input
from folio.storage import InMemoryStorageClient, S3StorageClient
from folio.store import InMemoryDocumentStore, SqlDocumentStore
from folio.tests.test_images_storage import png_data_url


class SettingsTests(unittest.TestCase):
    def test_admin_email_list_is_normalised(self):
        settings = Settings(ADMIN_EMAILS=" Owner@Example.com, ,second@example.com")
        self.assertEqual(settings.admin_email_list, ["owner@example.com", "second@example.com"])

    def test_base_url_strips_trailing_slash(self):
        self.assertEqual(Settings(SITE_URL="https://folio.test/").base_url, "https://folio.test")


class DependencySelectionTests(unittest.TestCase):
    def use_env(self, **values):
        patcher = mock.patch.dict(os.environ, values, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)
        get_settings.cache_clear()
        self.addCleanup(get_settings.cache_clear)
        dependencies.reset_dependencies()
        self.addCleanup(dependencies.reset_dependencies)

    def test_in_memory_backends(self):
        self.use_env(FOLIO_USE_IN_MEMORY_BACKENDS="1", REDIS_URL="redis://localhost:6379/0")
        self.assertIsInstance(dependencies.get_store(), InMemoryDocumentStore)
        self.assertIsInstance(dependencies.get_storage_client(), InMemoryStorageClient)
        self.assertIsInstance(dependencies.get_cache(), InMemoryTaggedCache)
        self.assertIs(dependencies.get_store(), dependencies.get_store())

    def test_sql_store_and_redis_cache(self):
        self.use_env(DATABASE_URL="sqlite+pysqlite:///:memory:", REDIS_URL="redis://localhost:6379/0")
        with mock.patch("folio.cache.redis.Redis.from_url") as from_url:
            cache = dependencies.get_cache()
        self.assertIsInstance(dependencies.get_store(), SqlDocumentStore)
        self.assertIsInstance(cache, RedisTaggedCache)
        from_url.assert_called_once_with("redis://localhost:6379/0")

    def test_s3_storage(self):
        self.use_env(S3_BUCKET="media", S3_REGION="eu-west-1")
        with mock.patch("folio.storage.boto3.client"):
            client = dependencies.get_storage_client()
        self.assertIsInstance(client, S3StorageClient)
        self.assertEqual(client.public_url("a.png"), "https://media.s3.eu-west-1.amazonaws.com/a.png")

    def test_firebase_storage_uses_default_bucket(self):
        self.use_env(FIREBASE_PROJECT_ID="folio-site")
        with mock.patch.object(dependencies, "init_firebase_app"), mock.patch.object(
            dependencies, "FirebaseStorageClient"
        ) as client_cls:
            client = dependencies.get_storage_client()
        client_cls.assert_called_once_with("folio-site.appspot.com")
        self.assertIs(client, client_cls.return_value)

    def test_firebase_storage_prefers_configured_bucket(self):
        self.use_env(FIREBASE_PROJECT_ID="folio-site", FIREBASE_STORAGE_BUCKET="media-bucket")
        with mock.patch.object(dependencies, "init_firebase_app"), mock.patch.object(
            dependencies, "FirebaseStorageClient"
        ) as client_cls:
            dependencies.get_storage_client()
        client_cls.assert_called_once_with("media-bucket")

    def test_unconfigured_storage_disables_uploads(self):
        self.use_env()
        with self.assertLogs("folio.dependencies", level="ERROR"):
            self.assertIsNone(dependencies.get_storage_client())
        # Resolved once; later calls do not log again.
        self.assertIsNone(dependencies.get_storage_client())
        result = process_image_input(png_data_url(), "portfolio-images", None)
        self.assertFalse(result.success)
        self.assertEqual(result.error, "Storage is not configured")

    def test_unconfigured_store_falls_back_to_memory(self):
        self.use_env()
        self.assertIsInstance(dependencies.get_store(), InMemoryDocumentStore)


if __name__ == "__main__":
    unittest.main()
