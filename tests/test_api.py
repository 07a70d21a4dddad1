"""Integration tests for the Blockfolio FastAPI application.

Each test builds its own app around an injected workspace (memory store,
optional fake renderer) so no state leaks between tests.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from typing import Any

import pytest
from fastapi.testclient import TestClient

from blockfolio import __version__ as PKG_VERSION
from blockfolio.api.app import create_app
from blockfolio.api.workspace import Workspace
from blockfolio.core.contracts.output import DocumentInfo, RenderedDocument
from blockfolio.core.storage.memory import MemoryStore
from blockfolio.pipelines.export_flow import ExportState


class FakeRenderer:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.titles: list[str] = []

    async def render(self, document: RenderedDocument, info: DocumentInfo) -> bytes:
        self.titles.append(info.title)
        if self.fail:
            raise RuntimeError("renderer offline")
        return b"%PDF-fake"


def _client(workspace: Workspace) -> Iterator[TestClient]:
    with TestClient(create_app(workspace)) as client:
        yield client


@pytest.fixture  # type: ignore[misc]
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture  # type: ignore[misc]
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture  # type: ignore[misc]
def client(store: MemoryStore, renderer: FakeRenderer) -> Iterator[TestClient]:
    yield from _client(Workspace(store, key="api-doc", renderer=renderer))


def test_health_endpoint_contract(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "version": PKG_VERSION}


def test_get_document_defaults(client: TestClient) -> None:
    resp = client.get("/document")
    assert resp.status_code == 200
    data = resp.json()
    assert data["key"] == "api-doc"
    assert data["stored"] is False
    assert [b["type"] for b in data["blocks"]] == ["paragraph", "paragraph"]


def test_put_document_sanitizes_and_persists(
    client: TestClient, store: MemoryStore, sample_document: list[dict[str, Any]]
) -> None:
    payload = {"blocks": [*sample_document, {"no": "type"}, 5]}
    resp = client.put("/document", json=payload)

    assert resp.status_code == 200, resp.text
    data = resp.json()
    assert data["stored"] is True
    assert [b["id"] for b in data["blocks"]] == [b["id"] for b in sample_document]

    loaded = store.load("api-doc")
    assert loaded is not None and len(loaded) == len(sample_document)


def test_stored_document_is_loaded_on_startup(
    store: MemoryStore, sample_document: list[dict[str, Any]]
) -> None:
    seeded = Workspace(store, key="api-doc", renderer=FakeRenderer())
    seeded.replace_document(sample_document)

    for client in _client(Workspace(store, key="api-doc", renderer=FakeRenderer())):
        blocks = client.get("/document").json()["blocks"]
        assert blocks[0]["id"] == "h1"


def test_delete_document(
    client: TestClient, store: MemoryStore, sample_document: list[dict[str, Any]]
) -> None:
    client.put("/document", json={"blocks": sample_document})
    resp = client.delete("/document")

    assert resp.status_code == 200
    assert resp.json() == {"key": "api-doc", "cleared": True}
    assert store.exists("api-doc") is False
    assert client.get("/document").json()["blocks"][0]["type"] == "paragraph"


def test_export_returns_pdf_attachment(
    client: TestClient, renderer: FakeRenderer, sample_document: list[dict[str, Any]]
) -> None:
    client.put("/document", json={"blocks": sample_document})
    resp = client.post("/export", json={"title": "API Export"})

    assert resp.status_code == 200, resp.text
    assert resp.headers["content-type"] == "application/pdf"
    assert "attachment; filename=" in resp.headers["content-disposition"]
    assert resp.content == b"%PDF-fake"
    assert renderer.titles == ["API Export"]

    status = client.get("/export/status").json()
    assert status["state"] == "succeeded"
    assert status["last_filename"].endswith(".pdf")


def test_export_without_body_uses_default_title(client: TestClient, renderer: FakeRenderer) -> None:
    resp = client.post("/export")
    assert resp.status_code == 200, resp.text
    assert renderer.titles == ["BlockNote Document"]


def test_export_renderer_failure_maps_to_502(
    store: MemoryStore, sample_document: list[dict[str, Any]]
) -> None:
    workspace = Workspace(store, key="api-doc", renderer=FakeRenderer(fail=True))
    for client in _client(workspace):
        client.put("/document", json={"blocks": sample_document})
        resp = client.post("/export")
        assert resp.status_code == 502
        assert "renderer offline" in resp.json()["detail"]
        assert client.get("/export/status").json()["state"] == "failed"
        # the live document is untouched
        assert client.get("/document").json()["blocks"][0]["id"] == "h1"


def test_export_nothing_maps_to_422(store: MemoryStore) -> None:
    workspace = Workspace(store, key="api-doc", renderer=FakeRenderer())
    for client in _client(workspace):
        workspace.editor._blocks = []
        resp = client.post("/export")
        assert resp.status_code == 422
        assert "Nothing to export" in resp.json()["detail"]


def test_export_busy_maps_to_409(store: MemoryStore) -> None:
    workspace = Workspace(store, key="api-doc", renderer=FakeRenderer())
    for client in _client(workspace):
        workspace.exporter.state = ExportState.PENDING
        resp = client.post("/export")
        assert resp.status_code == 409


def test_workspace_export_directly(store: MemoryStore) -> None:
    workspace = Workspace(store, key="direct", renderer=FakeRenderer())
    result = asyncio.run(workspace.export())
    assert result.is_ok()
    assert result.unwrap().filename.startswith("blockfolio-document-")
