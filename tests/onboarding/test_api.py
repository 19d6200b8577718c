"""
Tests for the onboarding HTTP endpoints.
"""

import asyncio
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from onboarding import api
from onboarding.api import get_wizard
from onboarding.storage import MemoryProgressStore
from onboarding.wizard import OnboardingWizard
from wandercrew import config
from wandercrew.config import Settings
from wandercrew.web import auth
from wandercrew.web.app import app
from wandercrew.web.auth import AuthenticatedUser, get_current_user

from conftest import RecordingCommitter


def _user(user_id: str) -> AuthenticatedUser:
    return AuthenticatedUser(id=user_id, email=None, access_token="t")


@pytest.fixture
def wizard(committer, memory_store):
    return OnboardingWizard(committer, memory_store, autosave=False)


@pytest.fixture
def client(wizard):
    app.dependency_overrides[get_wizard] = lambda: wizard
    yield TestClient(app)
    app.dependency_overrides.clear()
    api.discard_wizards()


class TestAuth:
    def test_missing_header(self):
        response = TestClient(app).get("/onboarding/state")
        assert response.status_code == 401
        assert response.json()["detail"] == "Missing or invalid authorization header"

    @pytest.mark.parametrize("header", ["Token abc", "Bearer ", "Bearer    "])
    def test_malformed_header(self, header):
        with pytest.raises(HTTPException) as exc:
            asyncio.run(get_current_user(header))
        assert exc.value.status_code == 401

    def test_valid_token(self, monkeypatch):
        client = MagicMock()
        client.auth.get_user.return_value = MagicMock(user=MagicMock(id="user-1", email="ada@example.com"))
        monkeypatch.setattr(auth, "get_service_client", lambda: client)

        user = asyncio.run(get_current_user("Bearer tok"))

        assert user == AuthenticatedUser(id="user-1", email="ada@example.com", access_token="tok")
        client.auth.get_user.assert_called_once_with("tok")

    def test_rejected_token(self, monkeypatch):
        client = MagicMock()
        client.auth.get_user.side_effect = RuntimeError("jwt expired")
        monkeypatch.setattr(auth, "get_service_client", lambda: client)

        with pytest.raises(HTTPException) as exc:
            asyncio.run(get_current_user("Bearer tok"))
        assert exc.value.status_code == 401

    def test_unknown_user(self, monkeypatch):
        client = MagicMock()
        client.auth.get_user.return_value = MagicMock(user=None)
        monkeypatch.setattr(auth, "get_service_client", lambda: client)

        with pytest.raises(HTTPException) as exc:
            asyncio.run(get_current_user("Bearer tok"))
        assert exc.value.detail == "Invalid token"

    def test_unconfigured_server(self, monkeypatch):
        def unconfigured():
            raise RuntimeError("SUPABASE_URL is not configured")

        monkeypatch.setattr(auth, "get_service_client", unconfigured)
        with pytest.raises(HTTPException) as exc:
            asyncio.run(get_current_user("Bearer tok"))
        assert exc.value.status_code == 503


class TestWizardRegistry:
    @pytest.fixture(autouse=True)
    def registry(self, monkeypatch):
        built = []

        def fake_build(user_id):
            built.append(user_id)
            return OnboardingWizard(RecordingCommitter(), MemoryProgressStore(), autosave=False)

        monkeypatch.setattr(api, "build_wizard", fake_build)
        monkeypatch.setattr(
            config.settings, "_instance", Settings(_env_file=None, onboarding_max_active_wizards=2)
        )
        yield built
        api.discard_wizards()

    def test_wizard_per_user(self, registry):
        first = get_wizard(_user("user-1"))
        assert get_wizard(_user("user-1")) is first
        assert registry == ["user-1"]

    def test_least_recently_used_is_evicted(self, registry):
        get_wizard(_user("user-1"))
        get_wizard(_user("user-2"))
        get_wizard(_user("user-1"))
        get_wizard(_user("user-3"))

        assert list(api._wizards) == ["user-1", "user-3"]
        assert registry == ["user-1", "user-2", "user-3"]

    def test_evicted_draft_is_saved(self, registry):
        store = MemoryProgressStore()
        wizard = OnboardingWizard(RecordingCommitter(), store, autosave=False)
        api._wizards["user-1"] = wizard
        wizard.update_data({"personal_info": {"first_name": "Ada"}})

        get_wizard(_user("user-2"))
        get_wizard(_user("user-3"))

        assert "user-1" not in api._wizards
        assert store.load()["personal_info"] == {"first_name": "Ada"}

    def test_completed_wizard_is_released(self, registry, complete_draft):
        app.dependency_overrides[get_current_user] = lambda: _user("user-1")
        try:
            http = TestClient(app)
            http.patch("/onboarding/data", json={"data": complete_draft})
            http.post("/onboarding/next")
            http.post("/onboarding/next")
            assert "user-1" in api._wizards

            body = http.post("/onboarding/skip").json()
        finally:
            app.dependency_overrides.clear()

        assert body["is_completed"] is True
        assert "user-1" not in api._wizards


class TestReadEndpoints:
    def test_health(self, client):
        assert client.get("/health").json()["status"] == "ok"

    def test_state(self, client):
        body = client.get("/onboarding/state").json()
        assert body["current_step"] == 0
        assert body["total_steps"] == 3
        assert body["step"]["id"] == "personal-info"
        assert body["error"] is None
        assert body["data"]["travel_preferences"]["budget_range"]["currency"] == "USD"

    def test_steps(self, client):
        steps = client.get("/onboarding/steps").json()
        assert [step["is_optional"] for step in steps] == [False, False, True]

    def test_options(self, client):
        assert "currencies" in client.get("/onboarding/options").json()


class TestTransitions:
    def test_blocked_next(self, client):
        body = client.post("/onboarding/next").json()
        assert body["current_step"] == 0
        assert body["error"] == "First name is required"

    def test_walk_to_completion(self, client, committer, complete_draft):
        client.patch("/onboarding/data", json={"data": complete_draft})
        assert client.post("/onboarding/next").json()["current_step"] == 1
        assert client.post("/onboarding/next").json()["current_step"] == 2

        body = client.post("/onboarding/skip").json()
        assert body["is_completed"] is True
        assert body["progress"] == 100
        assert len(committer.calls) == 1

    def test_skip_required_step(self, client):
        response = client.post("/onboarding/skip")
        assert response.status_code == 400
        assert response.json()["detail"] == "Step 0 cannot be skipped"

    def test_previous_and_set_step(self, client):
        assert client.post("/onboarding/step", json={"step": 9}).json()["current_step"] == 2
        assert client.post("/onboarding/previous").json()["current_step"] == 1

    def test_reset(self, client, memory_store, personal_info):
        client.patch("/onboarding/data", json={"data": {"personal_info": personal_info}})
        client.post("/onboarding/step", json={"step": 1})
        wizard_state = client.post("/onboarding/reset").json()
        assert wizard_state["current_step"] == 0
        assert wizard_state["data"]["personal_info"]["first_name"] == ""
        assert memory_store.load() is None


class TestValidateEndpoint:
    def test_valid_update(self, client, sample_profile):
        body = client.post(
            "/onboarding/validate",
            json={"update": {"bio": "New bio"}, "current_profile": sample_profile},
        ).json()
        assert body["is_valid"] is True
        assert body["errors"] == []
        assert body["completion"] == 89

    def test_errors_and_warnings(self, client):
        body = client.post(
            "/onboarding/validate",
            json={"update": {"email": "nope", "first_name": "Ada", "last_name": "Byron"}},
        ).json()
        assert body["is_valid"] is False
        assert body["errors"] == [
            {"field": "email", "message": "Please enter a valid email address", "code": "INVALID_EMAIL"}
        ]
        assert len(body["warnings"]) == 1
