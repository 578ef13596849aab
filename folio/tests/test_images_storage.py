import base64
import io
import unittest
from unittest import mock

from botocore.exceptions import ClientError
from PIL import Image

from folio.images import delete_image, process_image_input
from folio.storage import FirebaseStorageClient, InMemoryStorageClient, S3StorageClient


def png_data_url(size=(4, 4)) -> str:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 30, 30)).save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode()


class ProcessImageInputTests(unittest.TestCase):
    def setUp(self):
        self.storage = InMemoryStorageClient()

    def test_blank_value_succeeds_without_url(self):
        result = process_image_input("  ", "images", self.storage)
        self.assertTrue(result.success)
        self.assertIsNone(result.url)

    def test_http_url_is_kept(self):
        result = process_image_input("https://cdn.example.com/a.png", "images", self.storage)
        self.assertEqual(result.url, "https://cdn.example.com/a.png")
        self.assertEqual(self.storage.stored_objects, {})

    def test_data_url_is_uploaded(self):
        result = process_image_input(png_data_url(), "portfolio-images", self.storage)
        self.assertTrue(result.success, result.error)
        [path] = self.storage.stored_objects
        self.assertRegex(path, r"^portfolio-images/\d+-[a-z0-9]{10}\.png$")
        self.assertEqual(self.storage.stored_objects[path][1], "image/png")
        self.assertEqual(result.url, f"https://example.test/storage/{path}")

    def test_rejects_unknown_input(self):
        result = process_image_input("not an image", "images", self.storage)
        self.assertFalse(result.success)
        self.assertEqual(result.error, "Invalid image input format")

    def test_rejects_unsupported_type(self):
        result = process_image_input("data:image/x-foo;base64,AAAA", "images", self.storage)
        self.assertEqual(result.error, "Unsupported image type: image/x-foo")

    def test_rejects_bad_base64(self):
        result = process_image_input("data:image/png;base64,@@@", "images", self.storage)
        self.assertEqual(result.error, "Failed to process base64 image")

    def test_rejects_oversized_image(self):
        with mock.patch("folio.images.MAX_IMAGE_BYTES", 10):
            result = process_image_input(png_data_url(), "images", self.storage)
        self.assertEqual(result.error, "Image must be 10MB or smaller")

    def test_rejects_bytes_that_are_not_an_image(self):
        payload = base64.b64encode(b"definitely not a png").decode()
        result = process_image_input(f"data:image/png;base64,{payload}", "images", self.storage)
        self.assertEqual(result.error, "Uploaded file is not a valid image")

    def test_requires_storage_for_uploads(self):
        result = process_image_input(png_data_url(), "images", None)
        self.assertEqual(result.error, "Storage is not configured")

    def test_upload_failure_is_reported(self):
        storage = mock.Mock()
        storage.upload_bytes.side_effect = RuntimeError("bucket unavailable")
        result = process_image_input(png_data_url(), "images", storage)
        self.assertFalse(result.success)
        self.assertEqual(result.error, "bucket unavailable")


class DeleteImageTests(unittest.TestCase):
    def test_deletes_only_own_objects(self):
        storage = InMemoryStorageClient()
        url = storage.upload_bytes("images/a.png", b"x", "image/png")
        self.assertFalse(delete_image("https://elsewhere.test/a.png", storage))
        self.assertTrue(delete_image(url, storage))
        self.assertEqual(storage.stored_objects, {})


class FirebaseStorageClientTests(unittest.TestCase):
    def setUp(self):
        self.bucket = mock.MagicMock()
        self.bucket.name = "folio.appspot.com"
        self.client = FirebaseStorageClient(bucket=self.bucket)

    def test_upload_makes_blob_public(self):
        blob = self.bucket.blob.return_value
        blob.public_url = "https://storage.googleapis.com/folio.appspot.com/images/a.png"
        url = self.client.upload_bytes("images/a.png", b"data", "image/png")
        blob.upload_from_string.assert_called_once_with(b"data", content_type="image/png")
        blob.make_public.assert_called_once()
        self.assertEqual(url, blob.public_url)

    def test_delete_missing_blob(self):
        self.bucket.blob.return_value.exists.return_value = False
        self.assertFalse(self.client.delete("images/a.png"))

    def test_path_from_url(self):
        self.assertEqual(
            self.client.path_from_url(self.client.public_url("images/a.png")), "images/a.png"
        )
        download = (
            "https://firebasestorage.googleapis.com/v0/b/folio.appspot.com/o/"
            "portfolio-images%2Fb.png?alt=media"
        )
        self.assertEqual(self.client.path_from_url(download), "portfolio-images/b.png")
        self.assertIsNone(self.client.path_from_url("https://example.com/a.png"))


class S3StorageClientTests(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch("folio.storage.boto3.client")
        self.boto_client = patcher.start()
        self.addCleanup(patcher.stop)
        self.s3 = self.boto_client.return_value

    def make_client(self, **overrides):
        options = dict(
            bucket="media",
            region="us-east-1",
            endpoint="",
            access_key_id="key",
            secret_access_key="secret",
        )
        options.update(overrides)
        return S3StorageClient(**options)

    def test_upload_puts_object(self):
        client = self.make_client()
        url = client.upload_bytes("images/a.png", b"data", "image/png")
        self.s3.put_object.assert_called_once_with(
            Bucket="media", Key="images/a.png", Body=b"data", ContentType="image/png"
        )
        self.assertEqual(url, "https://media.s3.us-east-1.amazonaws.com/images/a.png")

    def test_public_url_prefers_public_base_url(self):
        client = self.make_client(public_base_url="https://cdn.example.com/")
        self.assertEqual(client.public_url("images/a.png"), "https://cdn.example.com/images/a.png")
        self.assertEqual(
            client.path_from_url("https://cdn.example.com/images/a.png"), "images/a.png"
        )

    def test_custom_endpoint_host(self):
        client = self.make_client(endpoint="https://acct.r2.cloudflarestorage.com")
        self.assertEqual(
            client.public_url("x.png"), "https://media.acct.r2.cloudflarestorage.com/x.png"
        )

    def test_delete_missing_object(self):
        self.s3.head_object.side_effect = ClientError(
            {"Error": {"Code": "404", "Message": "Not Found"}}, "HeadObject"
        )
        client = self.make_client()
        self.assertFalse(client.delete("images/a.png"))
        self.s3.delete_object.assert_not_called()


if __name__ == "__main__":
    unittest.main()
