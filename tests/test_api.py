"""Tests for the HTTP binding of the paste service."""

import inspect

import pytest

from pastebin.config import settings
from pastebin.errors import StoreError
from pastebin.models import PasteRecord
from pastebin.routes import health, pastes

from conftest import T0

NOW_HEADER = "x-test-now-ms"


def _create(client, **body):
    response = client.post("/api/pastes", json=body)
    assert response.status_code == 201, response.text
    return response.json()


class TestCreate:
    def test_create_returns_id_and_url(self, client):
        data = _create(client, content="hello")

        assert len(data["id"]) == 10
        assert data["url"] == f"http://test/p/{data['id']}"

    @pytest.mark.parametrize(
        "body",
        [
            {"content": ""},
            {"content": "   "},
            {},
            {"content": 5},
            {"content": "x", "ttl_seconds": 0},
            {"content": "x", "ttl_seconds": 1.5},
            {"content": "x", "ttl_seconds": "10"},
            {"content": "x", "max_views": -1},
            {"content": "x", "max_views": True},
        ],
    )
    def test_invalid_body_is_400(self, client, store, body):
        response = client.post("/api/pastes", json=body)

        assert response.status_code == 400
        assert "error" in response.json()
        assert store.store == {}

    def test_malformed_json_is_400(self, client):
        response = client.post(
            "/api/pastes",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400

    def test_expiry_beyond_year_9999_is_400(self, client, store):
        response = client.post("/api/pastes", json={"content": "x", "ttl_seconds": 10**12})

        assert response.status_code == 400
        assert store.store == {}

    def test_far_future_test_clock_with_ttl_is_400(self, client, store):
        response = client.post(
            "/api/pastes",
            json={"content": "x", "ttl_seconds": 10},
            headers={NOW_HEADER: str(10**17)},
        )

        assert response.status_code == 400
        assert store.store == {}

    def test_store_failure_is_500(self, client, store, monkeypatch):
        def broken(record):
            raise StoreError("redis down")

        monkeypatch.setattr(store, "insert", broken)
        response = client.post("/api/pastes", json={"content": "x"})

        assert response.status_code == 500
        assert response.json() == {"error": "Internal store error"}


class TestFetch:
    def test_fetch_counts_down_views(self, client):
        paste_id = _create(client, content="secret", max_views=2)["id"]

        first = client.get(f"/api/pastes/{paste_id}")
        second = client.get(f"/api/pastes/{paste_id}")
        third = client.get(f"/api/pastes/{paste_id}")

        assert first.json() == {"content": "secret", "remaining_views": 1, "expires_at": None}
        assert second.json()["remaining_views"] == 0
        assert third.status_code == 404
        assert "error" in third.json()

    def test_unrepresentable_expiry_is_500_without_spending_a_view(self, client, store):
        store.insert(PasteRecord(id="big", content="x", created_at=T0, ttl_seconds=10**12, max_views=3))

        response = client.get("/api/pastes/big")

        assert response.status_code == 500
        assert store.get_by_id("big").views_count == 0

    def test_unknown_paste_is_404(self, client):
        assert client.get("/api/pastes/doesnotexist").status_code == 404

    def test_ttl_with_test_clock(self, client):
        created = client.post(
            "/api/pastes",
            json={"content": "timed", "ttl_seconds": 10},
            headers={NOW_HEADER: "1000000"},
        )
        paste_id = created.json()["id"]

        live = client.get(f"/api/pastes/{paste_id}", headers={NOW_HEADER: "1009999"})
        expired = client.get(f"/api/pastes/{paste_id}", headers={NOW_HEADER: "1010000"})

        assert live.status_code == 200
        assert live.json()["expires_at"] == "1970-01-01T00:16:50.000Z"
        assert expired.status_code == 404

    def test_invalid_test_clock_header_is_400(self, client):
        paste_id = _create(client, content="x")["id"]
        response = client.get(f"/api/pastes/{paste_id}", headers={NOW_HEADER: "later"})
        assert response.status_code == 400

    def test_test_clock_ignored_outside_test_mode(self, client, monkeypatch):
        monkeypatch.setattr(settings, "TEST_MODE", False)
        paste_id = _create(client, content="x", ttl_seconds=60)["id"]

        far_future = str(T0 + 10**9)
        response = client.get(f"/api/pastes/{paste_id}", headers={NOW_HEADER: far_future})

        assert response.status_code == 200


class TestMetadata:
    def test_metadata_does_not_consume(self, client):
        paste_id = _create(client, content="peek", max_views=1)["id"]

        for _ in range(3):
            meta = client.get(f"/api/pastes/{paste_id}/meta")
            assert meta.json() == {"remaining_views": 1, "expires_at": None, "is_available": True}

        assert client.get(f"/api/pastes/{paste_id}").status_code == 200
        assert client.get(f"/api/pastes/{paste_id}/meta").json()["is_available"] is False

    def test_metadata_unknown_is_404(self, client):
        assert client.get("/api/pastes/missing/meta").status_code == 404


class TestHtmlView:
    def test_view_escapes_content(self, client):
        paste_id = _create(client, content="<script>alert(1)</script>")["id"]

        response = client.get(f"/p/{paste_id}")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "&lt;script&gt;alert(1)&lt;/script&gt;" in response.text
        assert "<script>" not in response.text

    def test_view_consumes_and_then_404s(self, client):
        paste_id = _create(client, content="once", max_views=1)["id"]

        assert client.get(f"/p/{paste_id}").status_code == 200
        gone = client.get(f"/p/{paste_id}")

        assert gone.status_code == 404
        assert "404" in gone.text


class TestHealth:
    def test_healthy(self, client):
        response = client.get("/api/healthz")
        assert response.status_code == 200
        assert response.json() == {"ok": True}

    def test_unhealthy_store(self, client, store, monkeypatch):
        def broken():
            raise StoreError("down")

        monkeypatch.setattr(store, "ping", broken)
        response = client.get("/api/healthz")

        assert response.status_code == 500
        assert response.json() == {"ok": False}


class TestRouting:
    def test_error_responses_are_documented(self, client):
        schema = client.get("/openapi.json").json()
        fetch = schema["paths"]["/api/pastes/{paste_id}"]["get"]["responses"]

        assert fetch["404"]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")
        assert "400" in schema["paths"]["/api/pastes"]["post"]["responses"]

    @pytest.mark.parametrize(
        "handler",
        [pastes.create_paste, pastes.fetch_paste, pastes.paste_metadata, pastes.view_paste, health.health_check],
    )
    def test_blocking_handlers_run_in_threadpool(self, handler):
        assert not inspect.iscoroutinefunction(handler)
