"""Unit tests for LocalBlobStore."""

from __future__ import annotations

import pytest

from notemaster.providers.blob_store.local_blob_store import LocalBlobStore
from notemaster.utils.errors import BlobStoreError


@pytest.fixture
def store(tmp_path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path / "blobs")


class TestLocalBlobStore:
    @pytest.mark.asyncio
    async def test_put_get_delete(self, store, tmp_path) -> None:
        key = await store.put("alice/1-bio.txt", b"notes", content_type="text/plain")
        assert key == "alice/1-bio.txt"
        assert (tmp_path / "blobs" / "alice" / "1-bio.txt").read_bytes() == b"notes"
        assert await store.get(key) == b"notes"
        assert await store.delete(key) is True
        assert await store.delete(key) is False

    @pytest.mark.asyncio
    async def test_get_missing_raises(self, store) -> None:
        with pytest.raises(BlobStoreError):
            await store.get("alice/missing.txt")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("key", ["../escape.txt", "alice/../../escape.txt", "/etc/passwd", ""])
    async def test_rejects_keys_outside_root(self, store, key) -> None:
        with pytest.raises(BlobStoreError):
            await store.put(key, b"x")

    @pytest.mark.asyncio
    async def test_dot_segments_inside_root_allowed(self, store) -> None:
        await store.put("alice/sub/../1-a.txt", b"x")
        assert await store.get("alice/1-a.txt") == b"x"

    def test_provider_name(self, store) -> None:
        assert store.get_provider_name() == "local_blob"
