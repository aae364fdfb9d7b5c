import unittest

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING
from pymongo.errors import DuplicateKeyError

from rptra.db import ADMINS, NEWS, InMemoryDbClient, serialize_document, to_document_id


class InMemoryDbClientTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()

    def test_insert_assigns_object_id(self):
        doc = self.db.insert(NEWS, {"title": "Hello"})
        self.assertIsInstance(doc["_id"], ObjectId)
        self.assertEqual(self.db.get(NEWS, str(doc["_id"]))["title"], "Hello")

    def test_returned_documents_are_copies(self):
        doc = self.db.insert(NEWS, {"title": "Hello", "tags": ["a"]})
        doc["tags"].append("b")
        self.assertEqual(self.db.get(NEWS, doc["_id"])["tags"], ["a"])

    def test_unique_admin_fields(self):
        self.db.insert(ADMINS, {"username": "a", "email": "a@example.com"})
        with self.assertRaises(DuplicateKeyError):
            self.db.insert(ADMINS, {"username": "b", "email": "a@example.com"})
        other = self.db.insert(ADMINS, {"username": "b", "email": "b@example.com"})
        with self.assertRaises(DuplicateKeyError):
            self.db.update(ADMINS, other["_id"], {"username": "a"})

    def test_find_sort_skip_limit(self):
        for index in range(5):
            self.db.insert(NEWS, {"title": f"n{index}", "rank": index})
        found = self.db.find(NEWS, sort=[("rank", DESCENDING)], skip=1, limit=2)
        self.assertEqual([doc["rank"] for doc in found], [3, 2])
        found = self.db.find(NEWS, {"rank": {"$gte": 3}}, sort=[("rank", ASCENDING)])
        self.assertEqual([doc["rank"] for doc in found], [3, 4])

    def test_regex_and_or_queries(self):
        self.db.insert(ADMINS, {"username": "Budi", "email": "budi@example.com"})
        self.db.insert(ADMINS, {"username": "sari", "email": "sari@example.com"})
        query = {
            "$or": [
                {"username": {"$regex": "bud", "$options": "i"}},
                {"email": {"$regex": "nobody"}},
            ]
        }
        self.assertEqual([doc["username"] for doc in self.db.find(ADMINS, query)], ["Budi"])
        self.assertEqual(self.db.count(ADMINS), 2)

    def test_update_and_delete_missing_documents(self):
        missing = str(ObjectId())
        self.assertIsNone(self.db.update(NEWS, missing, {"title": "x"}))
        self.assertIsNone(self.db.delete(NEWS, missing))

    def test_get_or_create_keeps_existing_document(self):
        first = self.db.get_or_create("operationals", "current", {"status": True})
        self.db.update("operationals", "current", {"status": False})
        again = self.db.get_or_create("operationals", "current", {"status": True})
        self.assertEqual(first["_id"], "current")
        self.assertFalse(again["status"])

    def test_projection_keeps_id(self):
        self.db.insert(ADMINS, {"username": "a", "email": "a@x.com", "password": "h"})
        (doc,) = self.db.find(ADMINS, projection=("username",))
        self.assertEqual(set(doc), {"_id", "username"})


class HelperTests(unittest.TestCase):
    def test_to_document_id(self):
        oid = ObjectId()
        self.assertEqual(to_document_id(str(oid)), oid)
        self.assertEqual(to_document_id("main"), "main")

    def test_serialize_document(self):
        oid = ObjectId()
        doc = serialize_document({"_id": oid, "images": [oid], "nested": {"id": oid}})
        self.assertEqual(doc, {"_id": str(oid), "images": [str(oid)], "nested": {"id": str(oid)}})


if __name__ == "__main__":
    unittest.main()
