"""Abstract base class for the blob store holding original uploads."""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementation: LocalBlobStore (notemaster/providers/blob_store/)
class IBlobStore(ABC):
    """Contract for storing the raw bytes of uploaded documents by key."""

    @abstractmethod
    async def put(self, key: str, data: bytes, content_type: str = "") -> str:
        """Store *data* under *key* and return the key actually used.

        Raises
        ------
        notemaster.utils.errors.BlobStoreError
            If the write fails or the key is invalid.
        """

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Return the bytes stored under *key*.

        Raises
        ------
        notemaster.utils.errors.BlobStoreError
            If the key does not exist or cannot be read.
        """

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete *key*.  Returns ``False`` when nothing was stored there.

        Raises
        ------
        notemaster.utils.errors.BlobStoreError
            If the delete itself fails.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"local_blob"``."""
