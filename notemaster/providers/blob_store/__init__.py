"""Blob store implementations."""

from notemaster.providers.blob_store.local_blob_store import LocalBlobStore

__all__ = ["LocalBlobStore"]
