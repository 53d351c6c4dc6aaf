"""Store outages render a notice and an empty list; unexpected errors get the static error page."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from stk_community.main import app
from stk_community.routers import admin as admin_router, api as api_router, pages as pages_router


def _store_down(*args, **kwargs):
    raise OperationalError("SELECT ...", {}, Exception("database is locked"))


def test_index_shows_notice_on_store_error(client, monkeypatch):
    monkeypatch.setattr(pages_router, "list_cards", _store_down)
    resp = client.get("/")
    assert resp.status_code == 200
    assert "Error fetching universities" in resp.text
    assert "database is locked" in resp.text
    assert "No universities found." in resp.text


def test_documents_page_shows_notice_on_store_error(client, monkeypatch):
    monkeypatch.setattr(pages_router, "list_documents", _store_down)
    resp = client.get("/unterlagen")
    assert resp.status_code == 200
    assert "Failed to load documents" in resp.text
    assert "No documents found." in resp.text


def test_admin_universities_notice_on_store_error(admin_client, monkeypatch):
    monkeypatch.setattr(admin_router, "list_institutions", _store_down)
    resp = admin_client.get("/admin")
    assert resp.status_code == 200
    assert "Failed to load universities" in resp.text
    assert "No universities yet." in resp.text


def test_admin_save_shows_store_error_verbatim(admin_client, monkeypatch):
    monkeypatch.setattr(admin_router, "save_page", _store_down)
    resp = admin_client.post("/admin/pages/informationen",
                             data={"title": "t", "content": "c", "video_url": ""})
    assert resp.status_code == 400
    assert "database is locked" in resp.text


def test_api_returns_503_on_store_error(client, monkeypatch):
    monkeypatch.setattr(api_router, "list_cards", _store_down)
    resp = client.get("/api/institutions")
    assert resp.status_code == 503
    assert resp.json() == {"detail": "database is locked"}


@pytest.fixture
def lenient_client(db):
    with TestClient(app, raise_server_exceptions=False) as c:
        yield c


def test_unhandled_error_renders_error_page(lenient_client, monkeypatch):
    def broken():
        raise RuntimeError("boom")

    monkeypatch.setattr(pages_router, "cached_articles", broken)
    resp = lenient_client.get("/informationen")
    assert resp.status_code == 500
    assert "Application encountered an error" in resp.text


def test_unhandled_api_error_is_json(lenient_client, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(api_router, "list_documents", broken)
    resp = lenient_client.get("/api/documents")
    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal server error"}
