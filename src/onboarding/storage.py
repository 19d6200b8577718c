"""
Onboarding Progress Storage.

Saves the in-progress draft so an interrupted onboarding can resume.
A snapshot is the draft plus a `saved_at` timestamp, which is stripped again
on load.

Backends:
- MemoryProgressStore: process-local, for tests and throwaway sessions
- FileProgressStore: one JSON file per storage key
- SupabaseProgressStore: a row in the onboarding_sessions table

Stores may raise on failure; OnboardingWizard catches and logs those errors
because auto-save is best-effort.
"""

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Protocol

logger = logging.getLogger(__name__)

SAVED_AT_KEY = "saved_at"
DEFAULT_STORAGE_KEY = "wandercrew-onboarding-progress"
SESSIONS_TABLE = "onboarding_sessions"


class ProgressStore(Protocol):
    """Persistence contract used by the wizard."""

    def save(self, snapshot: Mapping[str, Any]) -> None: ...

    def load(self) -> dict | None: ...

    def clear(self) -> None: ...


# =============================================================================
# Snapshot Helpers
# =============================================================================

def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_jsonable(data: Mapping[str, Any]) -> dict:
    """Round-trip through JSON so dates become ISO strings and nothing is shared."""
    return json.loads(json.dumps(dict(data), default=_json_default))


def build_snapshot(data: Mapping[str, Any]) -> dict:
    """Serializable copy of the draft tagged with the save time."""
    snapshot = to_jsonable(data)
    snapshot[SAVED_AT_KEY] = datetime.now(timezone.utc).isoformat()
    return snapshot


def strip_snapshot_metadata(snapshot: Mapping[str, Any]) -> dict:
    """Drop save metadata so the snapshot can be merged back into a draft."""
    return {key: value for key, value in snapshot.items() if key != SAVED_AT_KEY}


# =============================================================================
# Backends
# =============================================================================

class MemoryProgressStore:
    """Keeps the snapshot in memory, serialized like the persistent stores."""

    def __init__(self) -> None:
        self._payload: str | None = None

    def save(self, snapshot: Mapping[str, Any]) -> None:
        self._payload = json.dumps(dict(snapshot), default=_json_default)

    def load(self) -> dict | None:
        if self._payload is None:
            return None
        return strip_snapshot_metadata(json.loads(self._payload))

    def clear(self) -> None:
        self._payload = None


class FileProgressStore:
    """One JSON file per storage key, the local analogue of browser storage."""

    def __init__(self, directory: Path | str, key: str = DEFAULT_STORAGE_KEY) -> None:
        self.directory = Path(directory)
        self.key = key

    @property
    def path(self) -> Path:
        return self.directory / f"{self.key}.json"

    def save(self, snapshot: Mapping[str, Any]) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(dict(snapshot), default=_json_default, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)

    def load(self) -> dict | None:
        if not self.path.exists():
            return None
        payload = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(payload, dict):
            logger.warning(f"Ignoring malformed onboarding snapshot at {self.path}")
            return None
        return strip_snapshot_metadata(payload)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class SupabaseProgressStore:
    """
    Stores the snapshot in onboarding_sessions, one row per (user, key).

    The Supabase client is synchronous; calls are short single-row operations.
    """

    def __init__(self, user_id: str, key: str = DEFAULT_STORAGE_KEY, client=None) -> None:
        self.user_id = user_id
        self.key = key
        self._client = client

    @property
    def client(self):
        if self._client is None:
            from wandercrew.db.client import get_service_client
            self._client = get_service_client()
        return self._client

    def save(self, snapshot: Mapping[str, Any]) -> None:
        payload = to_jsonable(snapshot)
        self.client.table(SESSIONS_TABLE).upsert({
            "user_id": self.user_id,
            "storage_key": self.key,
            "state": payload,
            "updated_at": payload.get(SAVED_AT_KEY) or datetime.now(timezone.utc).isoformat(),
        }).execute()

    def load(self) -> dict | None:
        result = (
            self.client.table(SESSIONS_TABLE)
            .select("state")
            .eq("user_id", self.user_id)
            .eq("storage_key", self.key)
            .limit(1)
            .execute()
        )
        if not result.data:
            return None
        state = result.data[0].get("state")
        if not isinstance(state, dict):
            return None
        return strip_snapshot_metadata(state)

    def clear(self) -> None:
        (
            self.client.table(SESSIONS_TABLE)
            .delete()
            .eq("user_id", self.user_id)
            .eq("storage_key", self.key)
            .execute()
        )


def create_progress_store(user_id: str = "") -> ProgressStore:
    """Build the backend selected by settings.onboarding_store."""
    from wandercrew.config import settings

    backend = settings.onboarding_store
    key = settings.onboarding_storage_key
    if backend == "memory":
        return MemoryProgressStore()
    if backend == "supabase":
        return SupabaseProgressStore(user_id=user_id, key=key)
    # File store: keep one file per user when a user id is known
    file_key = f"{key}-{user_id}" if user_id else key
    return FileProgressStore(settings.onboarding_progress_dir, key=file_key)
