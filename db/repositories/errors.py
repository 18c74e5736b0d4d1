"""
Repository-layer exceptions for blob persistence flows.
"""

from __future__ import annotations


class BlobStoreError(Exception):
    """Raised when a blob backend fails to read or write a value."""


class BlobDecodeError(BlobStoreError):
    """Raised when a stored snapshot or settings payload cannot be decoded."""
