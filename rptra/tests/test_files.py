import unittest
from unittest import mock

from bson import ObjectId
from fastapi.testclient import TestClient

from rptra.app import create_app
from rptra.config import Settings
from rptra.db import InMemoryDbClient
from rptra.dependencies import get_blob_store, get_db_client
from rptra.storage import InMemoryBlobStore, StoredFile


class FilesApiTests(unittest.TestCase):
    def setUp(self):
        self.client = TestClient(create_app())
        db = get_db_client()
        if isinstance(db, InMemoryDbClient):
            db.reset()
        store = get_blob_store()
        if isinstance(store, InMemoryBlobStore):
            store.reset()

    def upload(self, content=b"\x89PNG fake", filename="foto.png", content_type="image/png"):
        response = self.client.post(
            "/api/upload", files={"file": (filename, content, content_type)}
        )
        self.assertEqual(response.status_code, 201)
        return response.json()

    def test_upload_and_download(self):
        payload = self.upload()
        self.assertTrue(payload["success"])
        file_id = payload["fileId"]
        self.assertEqual(payload["url"], f"/api/files/{file_id}")

        response = self.client.get(f"/api/files/{file_id}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, b"\x89PNG fake")
        self.assertEqual(response.headers["content-type"], "image/png")
        self.assertEqual(response.headers["content-length"], "9")
        self.assertEqual(response.headers["etag"], file_id)
        self.assertEqual(
            response.headers["cache-control"], "public, max-age=31536000, immutable"
        )
        self.assertEqual(
            response.headers["content-disposition"], 'inline; filename="foto.png"'
        )

    def test_matching_etag_returns_not_modified(self):
        file_id = self.upload()["fileId"]
        response = self.client.get(
            f"/api/files/{file_id}", headers={"If-None-Match": file_id}
        )
        self.assertEqual(response.status_code, 304)
        self.assertEqual(response.content, b"")

    def test_not_modified_releases_stream(self):
        file_id = self.upload()["fileId"]
        with mock.patch.object(StoredFile, "close", autospec=True) as close:
            self.client.get(f"/api/files/{file_id}", headers={"If-None-Match": file_id})
        close.assert_called_once()

    def test_non_ascii_filename(self):
        file_id = self.upload(filename="foto_😀.png")["fileId"]
        response = self.client.get(f"/api/files/{file_id}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, b"\x89PNG fake")
        self.assertEqual(
            response.headers["content-disposition"],
            "inline; filename=\"foto_.png\"; filename*=UTF-8''foto_%F0%9F%98%80.png",
        )

    def test_filename_quotes_are_stripped(self):
        file_id = self.upload(filename='a"b\\c.txt', content_type="text/plain")["fileId"]
        response = self.client.get(f"/api/files/{file_id}")
        self.assertEqual(
            response.headers["content-disposition"], 'inline; filename="abc.txt"'
        )

    def test_delete(self):
        file_id = self.upload()["fileId"]
        response = self.client.delete(f"/api/files/{file_id}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.client.get(f"/api/files/{file_id}").status_code, 404)
        response = self.client.delete(f"/api/files/{file_id}")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"error": "File not found"})

    def test_invalid_file_id(self):
        response = self.client.get("/api/files/undefined")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Invalid file ID format"})
        self.assertEqual(self.client.delete("/api/files/123").status_code, 400)

    def test_unknown_file(self):
        response = self.client.get(f"/api/files/{ObjectId()}")
        self.assertEqual(response.status_code, 404)

    def test_upload_without_file(self):
        response = self.client.post("/api/upload", data={"note": "no file"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "File tidak ditemukan"})

    def test_upload_size_limit(self):
        with mock.patch(
            "rptra.routes.files.get_settings",
            return_value=Settings(max_upload_bytes=4),
        ):
            response = self.client.post(
                "/api/upload", files={"file": ("big.bin", b"12345", "application/octet-stream")}
            )
        self.assertEqual(response.status_code, 413)

    def test_list_files(self):
        for index in range(3):
            self.upload(filename=f"{index}.png")
        listing = self.client.get("/api/files", params={"limit": 2}).json()
        self.assertEqual(len(listing["files"]), 2)
        self.assertEqual(listing["pagination"]["total"], 3)
        self.assertEqual(listing["pagination"]["pages"], 2)
        self.assertTrue(listing["files"][0]["url"].startswith("/api/files/"))


if __name__ == "__main__":
    unittest.main()
