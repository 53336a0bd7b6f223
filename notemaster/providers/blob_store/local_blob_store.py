"""Filesystem blob store.

Keeps each upload's original bytes under ``settings.blob_store_dir`` using
the blob key as a relative path (``<owner>/<timestamp>-<filename>``).
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from notemaster.interfaces.blob_store import IBlobStore
from notemaster.utils.errors import BlobStoreError

logger = structlog.get_logger(logger_name=__name__)


class LocalBlobStore(IBlobStore):
    """Blob store rooted at a local directory.

    File I/O runs in a worker thread so large uploads do not block the
    event loop.
    """

    def __init__(self, root_dir: str | Path = "./data/blobs") -> None:
        self._root = Path(root_dir).resolve()

    async def put(self, key: str, data: bytes, content_type: str = "") -> str:
        path = self._resolve(key)
        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as exc:
            raise BlobStoreError(
                message=f"Failed to write blob '{key}': {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("blob_stored", key=key, size_bytes=len(data), content_type=content_type)
        return key

    async def get(self, key: str) -> bytes:
        path = self._resolve(key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            raise BlobStoreError(
                message=f"Failed to read blob '{key}': {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def delete(self, key: str) -> bool:
        path = self._resolve(key)
        if not path.exists():
            logger.info("blob_delete_missing", key=key)
            return False
        try:
            await asyncio.to_thread(path.unlink)
        except OSError as exc:
            raise BlobStoreError(
                message=f"Failed to delete blob '{key}': {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("blob_deleted", key=key)
        return True

    def get_provider_name(self) -> str:
        return "local_blob"

    def _resolve(self, key: str) -> Path:
        """Map *key* to a path under the root, rejecting traversal."""
        if not key or key.startswith("/"):
            raise BlobStoreError(
                message=f"Invalid blob key: {key!r}",
                provider_name=self.get_provider_name(),
            )
        path = (self._root / key).resolve()
        if not path.is_relative_to(self._root):
            raise BlobStoreError(
                message=f"Blob key escapes the store root: {key!r}",
                provider_name=self.get_provider_name(),
            )
        return path

    @staticmethod
    def _write(path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
