"""
Repository layer exports.
"""

from db.repositories.blob_store import (
    BlobStore,
    InMemoryBlobStore,
    LocalFileBlobStore,
    SQLAlchemyBlobStore,
)
from db.repositories.errors import BlobStoreError, BlobDecodeError

__all__ = [
    "BlobStore",
    "BlobStoreError",
    "InMemoryBlobStore",
    "LocalFileBlobStore",
    "SQLAlchemyBlobStore",
    "BlobDecodeError",
]
