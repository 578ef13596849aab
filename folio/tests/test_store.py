import unittest
from datetime import datetime, timezone
from unittest import mock

from folio.store import (
    SERVER_TIMESTAMP,
    FirestoreDocumentStore,
    InMemoryDocumentStore,
    SqlDocumentStore,
)


class DocumentStoreContract:
    """CRUD behaviour shared by every store; mixed into a TestCase."""

    def make_store(self):
        raise NotImplementedError

    def setUp(self):
        self.store = self.make_store()

    def test_add_and_get_resolves_server_timestamp(self):
        doc_id = self.store.add("posts", {"title": "Hello", "createdAt": SERVER_TIMESTAMP})
        data = self.store.get("posts", doc_id)
        self.assertEqual(data["title"], "Hello")
        self.assertIsInstance(data["createdAt"], str)
        datetime.fromisoformat(data["createdAt"])

    def test_get_missing_returns_none(self):
        self.assertIsNone(self.store.get("posts", "nope"))

    def test_set_with_merge_keeps_other_fields(self):
        self.store.set("config", "site", {"siteName": "One", "maintenanceMode": False})
        self.store.set("config", "site", {"maintenanceMode": True}, merge=True)
        self.assertEqual(
            self.store.get("config", "site"), {"siteName": "One", "maintenanceMode": True}
        )

    def test_set_without_merge_replaces(self):
        self.store.set("config", "site", {"siteName": "One", "extra": 1})
        self.store.set("config", "site", {"siteName": "Two"})
        self.assertEqual(self.store.get("config", "site"), {"siteName": "Two"})

    def test_list_filters_orders_and_limits(self):
        self.store.set("posts", "a", {"slug": "a", "status": "published", "publishedAt": "2024-01-01"})
        self.store.set("posts", "b", {"slug": "b", "status": "draft", "publishedAt": "2024-03-01"})
        self.store.set("posts", "c", {"slug": "c", "status": "published", "publishedAt": "2024-02-01"})

        ordered = self.store.list("posts", order_by="publishedAt", descending=True)
        self.assertEqual([doc_id for doc_id, _ in ordered], ["b", "c", "a"])

        published = self.store.list(
            "posts", where=[("status", "published")], order_by="publishedAt"
        )
        self.assertEqual([doc_id for doc_id, _ in published], ["a", "c"])

        self.assertEqual(len(self.store.list("posts", limit=1)), 1)

    def test_delete_reports_whether_document_existed(self):
        self.store.set("skills", "py", {"name": "Python"})
        self.assertTrue(self.store.delete("skills", "py"))
        self.assertFalse(self.store.delete("skills", "py"))

    def test_increment(self):
        self.store.set("posts", "a", {"views": 2})
        self.store.increment("posts", "a", "views")
        self.store.increment("posts", "missing", "views")
        self.assertEqual(self.store.get("posts", "a")["views"], 3)

    def test_returned_documents_are_copies(self):
        self.store.set("posts", "a", {"tags": ["x"]})
        data = self.store.get("posts", "a")
        data["tags"].append("y")
        self.assertEqual(self.store.get("posts", "a")["tags"], ["x"])


class InMemoryDocumentStoreTests(DocumentStoreContract, unittest.TestCase):
    def make_store(self):
        return InMemoryDocumentStore()

    def test_reset(self):
        self.store.add("posts", {"title": "x"})
        self.store.reset()
        self.assertEqual(self.store.list("posts"), [])


class SqlDocumentStoreTests(DocumentStoreContract, unittest.TestCase):
    def make_store(self):
        return SqlDocumentStore("sqlite+pysqlite:///:memory:")

    def test_requires_database_url(self):
        with self.assertRaises(ValueError):
            SqlDocumentStore("")


class FirestoreDocumentStoreTests(unittest.TestCase):
    def setUp(self):
        self.client = mock.MagicMock()
        self.store = FirestoreDocumentStore(client=self.client)

    def test_get_decodes_datetimes(self):
        snapshot = self.client.collection.return_value.document.return_value.get.return_value
        snapshot.exists = True
        snapshot.to_dict.return_value = {
            "title": "Hi",
            "createdAt": datetime(2024, 5, 1, tzinfo=timezone.utc),
        }
        data = self.store.get("posts", "a")
        self.assertEqual(data["createdAt"], "2024-05-01T00:00:00+00:00")
        self.client.collection.assert_called_with("posts")

    def test_get_missing_document(self):
        snapshot = self.client.collection.return_value.document.return_value.get.return_value
        snapshot.exists = False
        self.assertIsNone(self.store.get("posts", "a"))

    def test_set_replaces_server_timestamp_sentinel(self):
        self.store.set("posts", "a", {"updatedAt": SERVER_TIMESTAMP}, merge=True)
        doc_ref = self.client.collection.return_value.document.return_value
        args, kwargs = doc_ref.set.call_args
        self.assertIsNot(args[0]["updatedAt"], SERVER_TIMESTAMP)
        self.assertTrue(kwargs["merge"])

    def test_add_returns_new_id(self):
        doc_ref = mock.Mock(id="new-id")
        self.client.collection.return_value.add.return_value = (None, doc_ref)
        self.assertEqual(self.store.add("posts", {"title": "x"}), "new-id")


if __name__ == "__main__":
    unittest.main()
