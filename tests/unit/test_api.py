"""Unit tests for the HTTP API using FastAPI's TestClient.

The app is built without its lifespan and the in-memory fakes from
conftest are placed on ``app.state`` directly.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from notemaster.api.middleware import status_for_error
from notemaster.main import create_app
from notemaster.utils.errors import DocumentStoreError, EmbeddingProviderError
from tests.conftest import PPTX_MIME, build_pptx

_NOTES = b"The mitochondria is the powerhouse of the cell."


@pytest.fixture
def app(
    test_settings,
    mock_embedding_provider,
    mock_vector_store,
    document_service,
    retrieval_service,
):
    application = create_app(use_lifespan=False)
    application.state.settings = test_settings
    application.state.embedding_provider = mock_embedding_provider
    application.state.vector_store = mock_vector_store
    application.state.document_service = document_service
    application.state.retrieval_service = retrieval_service
    return application


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


def _upload(
    client: TestClient,
    data: bytes = _NOTES,
    name: str = "bio.txt",
    mime: str = "text/plain",
    owner: str = "alice",
):
    return client.post(
        "/api/v1/documents",
        files={"file": (name, data, mime)},
        data={"owner_id": owner},
    )


class TestStatusMapping:
    @pytest.mark.parametrize(
        "error_type,status",
        [
            ("ValueError", 400),
            ("UnsupportedFormatError", 415),
            ("ExtractionError", 422),
            ("UploadTooLargeError", 413),
            ("DuplicateDocumentError", 409),
            ("DocumentNotFoundError", 404),
            ("EmbeddingProviderError", 502),
            ("SomethingElse", 500),
            (None, 500),
        ],
    )
    def test_status_for_error(self, error_type, status) -> None:
        assert status_for_error(error_type) == status


class TestDocumentsEndpoints:
    def test_upload_success(self, client) -> None:
        response = _upload(client)
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["chunkCount"] == 1
        assert body["documentId"]

    def test_upload_pptx(self, client) -> None:
        response = _upload(
            client, build_pptx({1: ["Glycolysis"], 2: ["Krebs cycle"]}), "deck.pptx", PPTX_MIME
        )
        assert response.status_code == 201

    def test_upload_guesses_mime_from_suffix(self, client) -> None:
        response = _upload(client, mime="application/octet-stream")
        assert response.status_code == 201

    def test_upload_unsupported_type(self, client) -> None:
        response = _upload(client, b"\x89PNG", "pic.png", "image/png")
        assert response.status_code == 415
        body = response.json()
        assert body["success"] is False
        assert body["errorType"] == "UnsupportedFormatError"

    def test_upload_legacy_ppt(self, client) -> None:
        response = _upload(client, b"\xd0\xcf\x11\xe0", "old.ppt", "application/vnd.ms-powerpoint")
        assert response.status_code == 415
        assert ".pptx" in response.json()["error"]

    def test_upload_empty_document(self, client) -> None:
        response = _upload(client, b"   ", "blank.txt")
        assert response.status_code == 422

    def test_upload_duplicate(self, client) -> None:
        assert _upload(client).status_code == 201
        assert _upload(client).status_code == 409

    def test_upload_missing_owner(self, client) -> None:
        response = client.post(
            "/api/v1/documents", files={"file": ("bio.txt", _NOTES, "text/plain")}
        )
        assert response.status_code == 422

    def test_upload_too_large(self, app, client, test_settings) -> None:
        app.state.settings = test_settings.model_copy(update={"max_upload_bytes": 10})
        response = _upload(client)
        assert response.status_code == 413

    def test_list_documents(self, client) -> None:
        _upload(client, name="a.txt")
        _upload(client, name="b.txt")
        _upload(client, name="c.txt", owner="bob")
        response = client.get("/api/v1/documents", params={"owner_id": "alice"})
        assert response.status_code == 200
        body = response.json()
        assert body["owner_id"] == "alice"
        assert {d["file_name"] for d in body["documents"]} == {"a.txt", "b.txt"}

    def test_list_requires_owner(self, client) -> None:
        assert client.get("/api/v1/documents").status_code == 422

    def test_delete_document(self, client) -> None:
        document_id = _upload(client).json()["documentId"]
        response = client.delete(f"/api/v1/documents/{document_id}", params={"owner_id": "alice"})
        assert response.status_code == 200
        assert response.json()["success"] is True
        listing = client.get("/api/v1/documents", params={"owner_id": "alice"}).json()
        assert listing["documents"] == []

    def test_delete_other_owner_is_404(self, client) -> None:
        document_id = _upload(client).json()["documentId"]
        response = client.delete(f"/api/v1/documents/{document_id}", params={"owner_id": "bob"})
        assert response.status_code == 404
        assert response.json()["errorType"] == "DocumentNotFoundError"

    def test_store_error_handled_by_middleware(self, client, memory_repository) -> None:
        memory_repository.list_for_owner = AsyncMock(
            side_effect=DocumentStoreError(message="database locked", provider_name="sqlite")
        )
        response = client.get("/api/v1/documents", params={"owner_id": "alice"})
        assert response.status_code == 502
        assert response.json() == {"error": "DocumentStoreError", "detail": "database locked"}


class TestSearchEndpoint:
    def test_search_owner_scoped(self, client) -> None:
        _upload(client, owner="alice")
        _upload(client, b"Bob's private diary about mitochondria.", owner="bob")
        response = client.post(
            "/api/v1/search", json={"query": "mitochondria", "owner_id": "alice"}
        )
        assert response.status_code == 200
        results = response.json()["results"]
        assert results
        assert all(r["metadata"]["ownerId"] == "alice" for r in results)

    def test_search_without_documents_is_empty_success(self, client) -> None:
        response = client.post("/api/v1/search", json={"query": "anything", "owner_id": "new"})
        assert response.status_code == 200
        assert response.json()["success"] is True
        assert response.json()["results"] == []

    def test_search_top_k_out_of_range(self, client) -> None:
        response = client.post(
            "/api/v1/search", json={"query": "q", "owner_id": "alice", "top_k": 21}
        )
        assert response.status_code == 400
        assert response.json()["errorType"] == "ValueError"

    def test_search_provider_failure_is_502(self, client, mock_embedding_provider) -> None:
        mock_embedding_provider.embed_single = AsyncMock(
            side_effect=EmbeddingProviderError(message="upstream down")
        )
        response = client.post("/api/v1/search", json={"query": "q", "owner_id": "alice"})
        assert response.status_code == 502

    def test_search_validation(self, client) -> None:
        assert client.post("/api/v1/search", json={"query": "", "owner_id": "a"}).status_code == 422


class TestHealthEndpoint:
    def test_healthy(self, client) -> None:
        _upload(client)
        body = client.get("/api/v1/health").json()
        assert body["status"] == "healthy"
        assert body["providers"]["embedding"] == "mock-embedding"
        assert body["providers"]["embedding_model"] == "mock-embedding-model"
        assert body["providers"]["vector_records"] == 1

    def test_unhealthy_without_providers(self) -> None:
        client = TestClient(create_app(use_lifespan=False))
        assert client.get("/api/v1/health").json()["status"] == "unhealthy"
