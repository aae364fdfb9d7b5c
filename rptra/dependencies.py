"""
Dependency wiring for the FastAPI app.

The db client and blob store are created on first use and reused for the
life of the process; ``close_clients`` runs at application shutdown.
"""

from __future__ import annotations

import logging

from rptra.config import get_settings
from rptra.db import DbClient, InMemoryDbClient, MongoDbClient
from rptra.storage import BlobStore, GridFSBlobStore, InMemoryBlobStore

logger = logging.getLogger(__name__)

_db_client: DbClient | None = None
_blob_store: BlobStore | None = None


def _use_in_memory() -> bool:
    settings = get_settings()
    return settings.use_in_memory_backends or not settings.mongodb_uri


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so the connection pool is shared across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if _use_in_memory():
        logger.warning("MONGODB_URI not set, using in-memory database")
        _db_client = InMemoryDbClient()
    else:
        client = MongoDbClient(
            settings.mongodb_uri,
            database=settings.mongodb_database,
            timeout_ms=settings.mongodb_timeout_ms,
        )
        client.ensure_indexes()
        _db_client = client
    return _db_client


def get_blob_store() -> BlobStore:
    global _blob_store
    if _blob_store:
        return _blob_store

    settings = get_settings()
    db = get_db_client()
    if isinstance(db, MongoDbClient):
        _blob_store = GridFSBlobStore(db.database, bucket_name=settings.gridfs_bucket)
    else:
        _blob_store = InMemoryBlobStore()
    return _blob_store


def close_clients() -> None:
    global _db_client, _blob_store
    if _db_client is not None:
        _db_client.close()
    _db_client = None
    _blob_store = None
