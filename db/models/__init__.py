"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.blob_entry import BlobEntry

__all__ = [
    "BlobEntry",
]
