import io
import unittest
from datetime import datetime, timezone
from unittest import mock

from bson import ObjectId
from gridfs.errors import NoFile
from pymongo.errors import PyMongoError

from rptra.storage import GridFSBlobStore, InMemoryBlobStore, InvalidFileId


class InMemoryBlobStoreTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryBlobStore(chunk_size=4)

    def test_upload_and_retrieve(self):
        file_id = self.store.upload(b"hello world", "hello.txt", "text/plain")
        stored = self.store.retrieve(file_id)
        self.assertIsNotNone(stored)
        self.assertEqual(stored.read(), b"hello world")
        self.assertEqual(stored.content_type, "text/plain")
        self.assertEqual(stored.length, 11)
        # Content is streamed in chunk_size pieces.
        self.assertEqual(next(stored.iter_chunks()), b"hell")

    def test_upload_accepts_file_objects(self):
        file_id = self.store.upload(io.BytesIO(b"abc"), "a.bin", "")
        stored = self.store.retrieve(file_id)
        self.assertEqual(stored.read(), b"abc")
        self.assertEqual(stored.content_type, "application/octet-stream")

    def test_remove(self):
        file_id = self.store.upload(b"x", "x.txt", "text/plain")
        self.assertTrue(self.store.remove(file_id))
        self.assertIsNone(self.store.retrieve(file_id))
        self.assertFalse(self.store.remove(file_id))
        self.assertFalse(self.store.remove(str(ObjectId())))

    def test_malformed_ids_raise(self):
        with self.assertRaises(InvalidFileId):
            self.store.retrieve("not-an-id")
        with self.assertRaises(InvalidFileId):
            self.store.remove("123")

    def test_list_files_is_paged(self):
        for index in range(3):
            self.store.upload(b"x", f"{index}.txt", "text/plain")
        page = self.store.list_files(page=1, limit=2)
        self.assertEqual(page.total, 3)
        self.assertEqual(page.total_pages, 2)
        self.assertEqual(len(page.files), 2)
        self.assertEqual(len(self.store.list_files(page=2, limit=2).files), 1)


class GridFSBlobStoreTests(unittest.TestCase):
    def setUp(self):
        patcher = mock.patch("rptra.storage.GridFSBucket")
        self.bucket_cls = patcher.start()
        self.addCleanup(patcher.stop)
        self.bucket = self.bucket_cls.return_value
        self.database = mock.MagicMock()
        self.store = GridFSBlobStore(self.database, bucket_name="uploads")

    def test_uses_configured_bucket(self):
        self.bucket_cls.assert_called_once_with(self.database, bucket_name="uploads")

    def test_upload_streams_source_and_records_content_type(self):
        new_id = ObjectId()
        self.bucket.upload_from_stream.return_value = new_id
        file_id = self.store.upload(b"data", "a.png", "image/png", {"owner": "news"})
        self.assertEqual(file_id, str(new_id))
        args, kwargs = self.bucket.upload_from_stream.call_args
        self.assertEqual(args[0], "a.png")
        self.assertEqual(args[1].read(), b"data")
        self.assertEqual(
            kwargs["metadata"], {"owner": "news", "contentType": "image/png"}
        )

    def test_retrieve_reads_in_chunks_and_closes(self):
        oid = ObjectId()
        grid_out = mock.MagicMock()
        grid_out._id = oid
        grid_out.filename = "a.png"
        grid_out.length = 6
        grid_out.upload_date = datetime(2024, 1, 1, tzinfo=timezone.utc)
        grid_out.metadata = {"contentType": "image/png"}
        grid_out.read.side_effect = [b"abc", b"def", b""]
        self.bucket.open_download_stream.return_value = grid_out

        stored = self.store.retrieve(str(oid))
        self.assertEqual(stored.content_type, "image/png")
        self.assertEqual(stored.metadata, {})
        self.assertEqual(stored.read(), b"abcdef")
        grid_out.close.assert_called_once()
        self.bucket.open_download_stream.assert_called_once_with(oid)

    def test_retrieve_falls_back_to_file_document_content_type(self):
        oid = ObjectId()
        grid_out = mock.MagicMock()
        grid_out._id = oid
        grid_out.filename = "lama.png"
        grid_out.length = 3
        grid_out.upload_date = datetime(2023, 6, 1, tzinfo=timezone.utc)
        grid_out.metadata = None
        grid_out._file = {"_id": oid, "filename": "lama.png", "contentType": "image/png"}
        self.bucket.open_download_stream.return_value = grid_out

        stored = self.store.retrieve(str(oid))
        self.assertEqual(stored.content_type, "image/png")
        self.assertEqual(stored.metadata, {})

    def test_close_releases_unread_stream(self):
        grid_out = mock.MagicMock()
        grid_out._id = ObjectId()
        grid_out.metadata = {"contentType": "image/png"}
        self.bucket.open_download_stream.return_value = grid_out

        stored = self.store.retrieve(str(grid_out._id))
        stored.close()
        grid_out.close.assert_called_once()
        grid_out.read.assert_not_called()

    def test_retrieve_missing_file(self):
        self.bucket.open_download_stream.side_effect = NoFile("missing")
        self.assertIsNone(self.store.retrieve(str(ObjectId())))

    def test_remove_reports_failures_without_raising(self):
        self.bucket.delete.side_effect = NoFile("missing")
        self.assertFalse(self.store.remove(str(ObjectId())))
        self.bucket.delete.side_effect = PyMongoError("down")
        self.assertFalse(self.store.remove(str(ObjectId())))
        self.bucket.delete.side_effect = None
        self.assertTrue(self.store.remove(str(ObjectId())))

    def test_malformed_id_never_reaches_gridfs(self):
        with self.assertRaises(InvalidFileId):
            self.store.retrieve("zzz")
        self.bucket.open_download_stream.assert_not_called()


if __name__ == "__main__":
    unittest.main()
