"""
Binary object storage on a MongoDB GridFS bucket, plus an in-memory double.
"""

from __future__ import annotations

import io
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, BinaryIO, Callable, Iterator, Optional, Protocol, Union

from bson import ObjectId
from gridfs import GridFSBucket
from gridfs.errors import NoFile
from pymongo.database import Database
from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
STREAM_CHUNK_SIZE = 255 * 1024

Source = Union[bytes, bytearray, BinaryIO]


class InvalidFileId(ValueError):
    """Raised when a file id does not have the store's id format."""


def parse_file_id(file_id: str) -> ObjectId:
    if not isinstance(file_id, str) or not ObjectId.is_valid(file_id):
        raise InvalidFileId(file_id)
    return ObjectId(file_id)


@dataclass
class StoredFile:
    """A stored blob's descriptor plus a lazy byte stream."""

    file_id: str
    filename: str
    content_type: str
    length: int
    upload_date: Optional[datetime] = None
    metadata: dict = field(default_factory=dict)
    _opener: Optional[Callable[[], Iterator[bytes]]] = field(
        default=None, repr=False
    )
    _closer: Optional[Callable[[], None]] = field(default=None, repr=False)

    def iter_chunks(self) -> Iterator[bytes]:
        if self._opener is None:
            return iter(())
        return self._opener()

    def close(self) -> None:
        """Release the backing stream when the content will not be read."""
        if self._closer is not None:
            self._closer()

    def read(self) -> bytes:
        return b"".join(self.iter_chunks())

    def describe(self) -> dict:
        return {
            "id": self.file_id,
            "filename": self.filename,
            "contentType": self.content_type,
            "length": self.length,
            "uploadDate": self.upload_date.isoformat() if self.upload_date else None,
            "metadata": self.metadata,
        }


@dataclass
class FilePage:
    files: list[StoredFile]
    total: int
    page: int
    total_pages: int


class BlobStore(Protocol):
    """Defines the operations the API needs from binary object storage."""

    def upload(
        self,
        source: Source,
        filename: str,
        content_type: str,
        metadata: Optional[dict] = None,
    ) -> str:
        ...

    def retrieve(self, file_id: str) -> Optional[StoredFile]:
        ...

    def remove(self, file_id: str) -> bool:
        ...

    def list_files(self, page: int = 1, limit: int = 10) -> FilePage:
        ...


def _total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0


@dataclass
class InMemoryBlobStore:
    """Test double for blob storage."""

    chunk_size: int = STREAM_CHUNK_SIZE
    files: dict = field(default_factory=dict)

    def upload(
        self,
        source: Source,
        filename: str,
        content_type: str,
        metadata: Optional[dict] = None,
    ) -> str:
        data = bytes(source) if isinstance(source, (bytes, bytearray)) else source.read()
        file_id = ObjectId()
        self.files[file_id] = {
            "filename": filename,
            "content_type": content_type or DEFAULT_CONTENT_TYPE,
            "data": data,
            "upload_date": datetime.now(timezone.utc),
            "metadata": dict(metadata or {}),
        }
        return str(file_id)

    def _describe(self, oid: ObjectId, record: dict) -> StoredFile:
        data = record["data"]

        def opener() -> Iterator[bytes]:
            for offset in range(0, len(data), self.chunk_size):
                yield data[offset : offset + self.chunk_size]

        return StoredFile(
            file_id=str(oid),
            filename=record["filename"],
            content_type=record["content_type"],
            length=len(data),
            upload_date=record["upload_date"],
            metadata=record["metadata"],
            _opener=opener,
        )

    def retrieve(self, file_id: str) -> Optional[StoredFile]:
        oid = parse_file_id(file_id)
        record = self.files.get(oid)
        if record is None:
            return None
        return self._describe(oid, record)

    def remove(self, file_id: str) -> bool:
        oid = parse_file_id(file_id)
        return self.files.pop(oid, None) is not None

    def list_files(self, page: int = 1, limit: int = 10) -> FilePage:
        ordered = sorted(
            self.files.items(), key=lambda item: item[1]["upload_date"], reverse=True
        )
        skip = (page - 1) * limit
        window = ordered[skip : skip + limit]
        return FilePage(
            files=[self._describe(oid, record) for oid, record in window],
            total=len(ordered),
            page=page,
            total_pages=_total_pages(len(ordered), limit),
        )

    def reset(self) -> None:
        self.files.clear()


@dataclass
class GridFSBlobStore:
    """
    GridFS-backed storage. Content is written and read chunk by chunk, so a
    large upload or download never sits in memory as a single copy.
    """

    database: Database
    bucket_name: str = "uploads"

    def __post_init__(self):
        self._bucket = GridFSBucket(self.database, bucket_name=self.bucket_name)

    def upload(
        self,
        source: Source,
        filename: str,
        content_type: str,
        metadata: Optional[dict] = None,
    ) -> str:
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(source)
        file_metadata = dict(metadata or {})
        file_metadata["contentType"] = content_type or DEFAULT_CONTENT_TYPE
        file_id = self._bucket.upload_from_stream(
            filename, source, metadata=file_metadata
        )
        logger.info("Stored %s (%s) as %s", filename, content_type, file_id)
        return str(file_id)

    def _describe(self, grid_out: Any) -> StoredFile:
        metadata = dict(grid_out.metadata or {})
        # Files written by the previous site keep contentType on the file document.
        content_type = (
            metadata.pop("contentType", None)
            or grid_out._file.get("contentType")
            or DEFAULT_CONTENT_TYPE
        )

        def opener() -> Iterator[bytes]:
            try:
                while True:
                    chunk = grid_out.read(STREAM_CHUNK_SIZE)
                    if not chunk:
                        break
                    yield chunk
            finally:
                grid_out.close()

        return StoredFile(
            file_id=str(grid_out._id),
            filename=grid_out.filename or str(grid_out._id),
            content_type=content_type,
            length=grid_out.length,
            upload_date=grid_out.upload_date,
            metadata=metadata,
            _opener=opener,
            _closer=grid_out.close,
        )

    def retrieve(self, file_id: str) -> Optional[StoredFile]:
        oid = parse_file_id(file_id)
        try:
            grid_out = self._bucket.open_download_stream(oid)
        except NoFile:
            return None
        return self._describe(grid_out)

    def remove(self, file_id: str) -> bool:
        oid = parse_file_id(file_id)
        try:
            self._bucket.delete(oid)
        except NoFile:
            logger.warning("GridFS delete: no file %s", file_id)
            return False
        except PyMongoError:
            logger.exception("GridFS delete failed for %s", file_id)
            return False
        return True

    def list_files(self, page: int = 1, limit: int = 10) -> FilePage:
        skip = (page - 1) * limit
        cursor = self._bucket.find({}).sort("uploadDate", -1).skip(skip).limit(limit)
        files = [self._describe(grid_out) for grid_out in cursor]
        total = self.database[f"{self.bucket_name}.files"].count_documents({})
        return FilePage(
            files=files,
            total=total,
            page=page,
            total_pages=_total_pages(total, limit),
        )
