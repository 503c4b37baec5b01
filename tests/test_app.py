"""Tests for web/app.py — JSON API over a LookupSession."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from config.settings import Settings
from core.errors import ServiceError
from core.models import Collocation
from web.app import create_app


@pytest.fixture
def analyzer() -> MagicMock:
    return MagicMock(
        return_value=[
            Collocation(collocate="coffee", frequency=12, example_sentences=["I need strong coffee."])
        ]
    )


@pytest.fixture
def app(tmp_path, analyzer, scheduler):
    settings = Settings(anthropic_api_key="test-key", db_path=tmp_path / "history.db")
    app = create_app(settings, analyzer=analyzer, scheduler=scheduler)
    app.config["TESTING"] = True
    yield app
    app.extensions["lookup_session"].close()


@pytest.fixture
def client(app):
    return app.test_client()


class TestLookupRoute:
    def test_found(self, client):
        resp = client.post("/api/collocations", json={"word": "strong"})
        assert resp.status_code == 200
        data = resp.get_json()
        assert data["outcome"] == "found"
        assert data["collocations"] == [
            {"collocate": "coffee", "frequency": 12, "exampleSentences": ["I need strong coffee."]}
        ]
        assert data["history"] == ["strong"]
        assert data["notifications"][0]["title"] == "Success"

    def test_blank_word_is_400(self, client, analyzer):
        resp = client.post("/api/collocations", json={"word": "  "})
        assert resp.status_code == 400
        assert resp.get_json()["outcome"] == "invalid"
        analyzer.assert_not_called()

    def test_missing_body_is_invalid(self, client):
        resp = client.post("/api/collocations")
        assert resp.status_code == 400

    def test_non_string_word_is_400(self, client):
        resp = client.post("/api/collocations", json={"word": 5})
        assert resp.status_code == 400
        assert "error" in resp.get_json()

    def test_empty_result(self, client, analyzer):
        analyzer.return_value = []
        resp = client.post("/api/collocations", json={"word": "xyzzy"})
        assert resp.status_code == 200
        assert resp.get_json()["outcome"] == "empty"
        assert resp.get_json()["history"] == []

    def test_service_failure_is_502(self, client, analyzer):
        analyzer.side_effect = ServiceError("Service unavailable")
        resp = client.post("/api/collocations", json={"word": "strong"})
        assert resp.status_code == 502
        data = resp.get_json()
        assert data["outcome"] == "failed"
        assert data["collocations"] == []
        assert data["notifications"][0]["description"] == "Service unavailable"
        assert data["notifications"][0]["severity"] == "destructive"


class TestHistoryRoutes:
    def test_history_list(self, client):
        client.post("/api/collocations", json={"word": "quick"})
        client.post("/api/collocations", json={"word": "strong"})
        assert client.get("/api/history").get_json() == ["strong", "quick"]

    def test_select_sets_current_word(self, client):
        resp = client.post("/api/history/select", json={"word": "quick"})
        assert resp.get_json() == {"word": "quick"}
        assert client.get("/api/state").get_json()["word"] == "quick"

    def test_select_requires_word(self, client):
        assert client.post("/api/history/select", json={}).status_code == 400

    def test_history_survives_new_app(self, tmp_path, analyzer, scheduler, client):
        client.post("/api/collocations", json={"word": "strong"})
        settings = Settings(anthropic_api_key="test-key", db_path=tmp_path / "history.db")
        other = create_app(settings, analyzer=analyzer, scheduler=scheduler)
        assert other.test_client().get("/api/history").get_json() == ["strong"]
        other.extensions["lookup_session"].close()


class TestNotificationRoutes:
    def test_dismiss_one(self, client):
        client.post("/api/collocations", json={"word": "strong"})
        notification_id = client.get("/api/notifications").get_json()[0]["id"]

        resp = client.post("/api/notifications/dismiss", json={"id": notification_id})

        assert resp.status_code == 200
        assert resp.get_json()[0]["visible"] is False

    def test_dismiss_all_then_removed(self, client, scheduler):
        client.post("/api/collocations", json={"word": ""})
        client.post("/api/notifications/dismiss")
        scheduler.advance(5.0)
        assert client.get("/api/notifications").get_json() == []

    def test_dismiss_unknown_is_404(self, client):
        assert client.post("/api/notifications/dismiss", json={"id": "999"}).status_code == 404

    def test_dismiss_evicted_is_404_and_list_still_renders(self, client):
        client.post("/api/collocations", json={"word": ""})
        evicted = client.get("/api/notifications").get_json()[0]["id"]
        client.post("/api/collocations", json={"word": "strong"})

        resp = client.post("/api/notifications/dismiss", json={"id": evicted})

        assert resp.status_code == 404
        listing = client.get("/api/notifications").get_json()
        assert isinstance(listing, list)
        assert [n["title"] for n in listing] == ["Success"]

    def test_page_rerenders_toasts_from_list_after_dismiss(self, client):
        page = client.get("/").data.decode()
        assert 'await post("/api/notifications/dismiss", { id: n.id });\n          await refreshToasts();' in page
        assert "if (response.ok) renderToasts" in page


class TestIndex:
    def test_index_renders(self, client):
        resp = client.get("/")
        assert resp.status_code == 200
        assert b"WordSmith Collocate" in resp.data


class TestAppFactory:
    @patch("web.app.atexit.register")
    def test_create_app_registers_no_exit_hook(self, register, tmp_path, analyzer, scheduler):
        settings = Settings(anthropic_api_key="test-key", db_path=tmp_path / "history.db")
        app = create_app(settings, analyzer=analyzer, scheduler=scheduler)
        app.extensions["lookup_session"].close()
        register.assert_not_called()
