"""
Test suite for the HTTP API

Tests:
1. Health endpoints and middleware
2. /api/v1/vocabulary - CRUD, due queue, reviews
3. /api/v1/progress - overview, streak, daily stats, review sessions
4. /api/v1/sync - configure, push / pull, status, error mapping

Running tests:
    pytest test_api.py -v
"""
import json
import pytest
import httpx
from fastapi.testclient import TestClient

from wordflow.main import create_app
from wordflow.services import SupabaseRemoteStore


class RemoteTable:
    """Minimal stand-in for the remote REST table behind httpx.MockTransport"""

    def __init__(self):
        self.rows = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "GET":
            return httpx.Response(200, json=self.rows)
        body = json.loads(request.content)
        row = dict(body, id=f"srv-{len(self.rows) + 1}")
        self.rows.append(row)
        return httpx.Response(201, json=[row])


@pytest.fixture
def remote_table():
    return RemoteTable()


@pytest.fixture(scope="function")
def client(test_engine, remote_table):
    """Create a test client bound to the per-test database"""
    remote_store = SupabaseRemoteStore(transport=httpx.MockTransport(remote_table.handler))
    app = create_app(bind=test_engine, remote_store=remote_store)

    with TestClient(app) as test_client:
        # Ignore sync credentials picked up from the environment at startup
        app.state.sync_engine.remote_url = None
        app.state.sync_engine.api_key = None
        yield test_client


def add_word(client, word, **fields):
    response = client.post("/api/v1/vocabulary", json=dict(word=word, **fields))
    assert response.status_code == 201, response.text
    return response.json()


# ============================================================
# Health
# ============================================================

class TestHealth:

    def test_root(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "running"
        assert "X-Process-Time" in response.headers

    def test_health(self, client):
        data = client.get("/health").json()

        assert data["status"] == "healthy"
        assert data["database"] == "connected"
        assert data["sync_enabled"] is False

    def test_sessions_bound_to_app_engine(self, client, test_engine):
        with client.app.state.session_factory() as db:
            assert db.get_bind() is test_engine


# ============================================================
# Vocabulary
# ============================================================

class TestVocabularyApi:

    def test_add_and_get(self, client):
        created = add_word(client, "Tenacious", definition_en="persistent", synonyms=["determined"])

        assert created["word"] == "tenacious"
        assert created["mastery_level"] == 0
        assert created["sync_status"] == "pending"

        fetched = client.get(f"/api/v1/vocabulary/{created['id']}").json()
        assert fetched["synonyms"] == ["determined"]

    def test_duplicate_word(self, client):
        add_word(client, "plethora")

        response = client.post("/api/v1/vocabulary", json={"word": "PLETHORA"})

        assert response.status_code == 409
        assert "already exists" in response.json()["detail"]

    def test_invalid_body(self, client):
        assert client.post("/api/v1/vocabulary", json={"word": ""}).status_code == 422

    def test_unknown_entry(self, client):
        response = client.get("/api/v1/vocabulary/does-not-exist")

        assert response.status_code == 404
        assert "not found" in response.json()["detail"]

    def test_list_and_filters(self, client):
        add_word(client, "apple", category="food")
        add_word(client, "sprint", category="sport")

        assert len(client.get("/api/v1/vocabulary").json()) == 2
        food = client.get("/api/v1/vocabulary", params={"category": "food"}).json()
        assert [item["word"] for item in food] == ["apple"]
        assert client.get("/api/v1/vocabulary/categories").json() == ["food", "sport"]

    def test_due_queue_and_review(self, client):
        entry = add_word(client, "zealous")

        due = client.get("/api/v1/vocabulary/due").json()
        assert due["total"] == 1
        assert due["estimated_minutes"] == 1
        assert due["words"][0]["id"] == entry["id"]

        response = client.post(f"/api/v1/vocabulary/{entry['id']}/review", json={"quality": 2})
        assert response.status_code == 200
        result = response.json()
        assert result["was_correct"] is True
        assert result["next_interval"] == 1
        assert result["new_mastery_level"] == 1
        assert result["mastery_level_name"] == "Learning"
        assert result["entry"]["review_count"] == 1
        assert result["entry"]["correct_count"] == 1
        assert result["entry"]["accuracy"] == 100.0

        assert client.get("/api/v1/vocabulary/due").json()["total"] == 0

    def test_review_quality_out_of_range(self, client):
        entry = add_word(client, "wary")

        response = client.post(f"/api/v1/vocabulary/{entry['id']}/review", json={"quality": 3})

        assert response.status_code == 422

    def test_update_favorite_archive_delete(self, client):
        entry = add_word(client, "brisk")
        base = f"/api/v1/vocabulary/{entry['id']}"

        updated = client.patch(base, json={"notes": "cold morning"}).json()
        assert updated["notes"] == "cold morning"

        assert client.post(f"{base}/favorite").json()["is_favorite"] is True

        archived = client.post(f"{base}/archive", json={"archived": True}).json()
        assert archived["is_archived"] is True
        assert client.get("/api/v1/vocabulary").json() == []

        assert client.delete(base).status_code == 204
        assert client.get(base).status_code == 404


# ============================================================
# Progress
# ============================================================

class TestProgressApi:

    def test_overview_and_streak(self, client):
        first = add_word(client, "astute")
        add_word(client, "benign")
        client.post(f"/api/v1/vocabulary/{first['id']}/review", json={"quality": 0})

        overview = client.get("/api/v1/progress/overview").json()
        assert overview["total_words"] == 2
        assert overview["new_words"] == 1
        assert overview["learning_words"] == 1
        assert overview["accuracy"] == 0.0
        assert overview["current_streak"] == 1

        streak = client.get("/api/v1/progress/streak").json()
        assert streak == {"current_streak": 1, "learned_today": True}

        daily = client.get("/api/v1/progress/daily", params={"days": 3}).json()
        assert len(daily["days"]) == 1
        today = daily["days"][0]
        assert today["words_added"] == 2
        assert today["words_reviewed"] == 1
        assert today["incorrect_reviews"] == 1

    def test_empty_overview(self, client):
        overview = client.get("/api/v1/progress/overview").json()

        assert overview["total_words"] == 0
        assert overview["average_ease_factor"] == 2.5
        assert overview["current_streak"] == 0

    def test_review_session_lifecycle(self, client):
        created = client.post("/api/v1/progress/sessions", json={"total_words": 5, "review_mode": "context"})
        assert created.status_code == 201
        session_id = created.json()["id"]

        completed = client.post(
            f"/api/v1/progress/sessions/{session_id}/complete",
            json={"correct_count": 4, "incorrect_count": 1}
        )
        assert completed.status_code == 200
        assert completed.json()["completed_at"] is not None
        assert completed.json()["accuracy"] == 80.0

        again = client.post(
            f"/api/v1/progress/sessions/{session_id}/complete",
            json={"correct_count": 1, "incorrect_count": 0}
        )
        assert again.status_code == 409

        sessions = client.get("/api/v1/progress/sessions").json()
        assert [s["id"] for s in sessions] == [session_id]

    def test_complete_unknown_session(self, client):
        response = client.post(
            "/api/v1/progress/sessions/missing/complete",
            json={"correct_count": 0, "incorrect_count": 0}
        )
        assert response.status_code == 404


# ============================================================
# Sync
# ============================================================

class TestSyncApi:

    def test_not_configured(self, client):
        status = client.get("/api/v1/sync/status").json()
        assert status["is_enabled"] is False

        response = client.post("/api/v1/sync/push")
        assert response.status_code == 400
        assert response.json()["detail"] == "Sync not configured"

    def test_configure_and_full_sync(self, client, remote_table):
        add_word(client, "cogent")
        remote_table.rows.append(
            {"id": "srv-remote", "word": "lucid", "updated_at": "2024-01-01T00:00:00Z"}
        )

        configured = client.post(
            "/api/v1/sync/configure",
            json={"remote_url": "https://example.supabase.co", "api_key": "key"}
        ).json()
        assert configured["is_enabled"] is True
        assert configured["pending_count"] == 1

        result = client.post("/api/v1/sync/full").json()
        assert result["pushed"] == 1
        # The pushed row comes back on pull and is a no-op merge
        assert result["pulled"] == 2

        words = {item["word"]: item for item in client.get("/api/v1/vocabulary").json()}
        assert set(words) == {"cogent", "lucid"}
        assert words["cogent"]["sync_status"] == "synced"
        assert words["lucid"]["backend_id"] == "srv-remote"

        status = client.get("/api/v1/sync/status").json()
        assert status["pending_count"] == 0
        assert status["last_sync_date"] is not None
        assert status["last_pull_cursor"] is not None
