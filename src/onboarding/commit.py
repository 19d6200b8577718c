"""
Profile Commit.

The terminal step of onboarding: turn the finished draft into a profile
update and write it to the profiles table exactly once. Any failure is
raised; the wizard shows the exception message to the user verbatim.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Protocol

from .draft import PERSONAL_INFO, PROFILE_SETUP, TRAVEL_PREFERENCES, get_section
from .storage import to_jsonable
from .validation import (
    calculate_profile_completion,
    sanitize_profile_data,
    validate_profile_update,
)

logger = logging.getLogger(__name__)

PROFILES_TABLE = "profiles"


class ProfileCommitError(Exception):
    """The finished profile could not be written."""


class ProfileCommitter(Protocol):
    """Commit contract used by the wizard."""

    async def commit(self, data: Mapping[str, Any]) -> None: ...


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def build_profile_update(data: Mapping[str, Any]) -> dict:
    """
    Map an onboarding draft onto profile fields.

    Optional values are only included when the user provided them.
    """
    info = get_section(data, PERSONAL_INFO)
    prefs = get_section(data, TRAVEL_PREFERENCES)
    setup = get_section(data, PROFILE_SETUP)

    first_name = _text(info.get("first_name"))
    last_name = _text(info.get("last_name"))

    update: dict[str, Any] = {
        "name": f"{first_name} {last_name}".strip(),
        "first_name": first_name,
        "last_name": last_name,
        "travel_preferences": dict(prefs),
        "is_onboarding_complete": True,
    }

    for key in ("phone_number", "bio"):
        if _text(info.get(key)):
            update[key] = _text(info[key])
    for key in ("date_of_birth", "location"):
        if info.get(key):
            update[key] = info[key]

    for key in ("social_links", "privacy_settings", "notification_settings"):
        if setup.get(key):
            update[key] = setup[key]
    if _text(setup.get("profile_picture_url")):
        update["profile_picture"] = _text(setup["profile_picture_url"])

    return update


class SupabaseProfileCommitter:
    """Writes the finished profile to the Supabase profiles table."""

    def __init__(self, user_id: str, client=None) -> None:
        self.user_id = user_id
        self._client = client

    @property
    def client(self):
        if self._client is None:
            from wandercrew.db.client import get_service_client
            self._client = get_service_client()
        return self._client

    def _current_profile(self) -> dict:
        try:
            result = self.client.table(PROFILES_TABLE).select("*").eq("id", self.user_id).limit(1).execute()
        except Exception as e:
            logger.warning(f"Could not load current profile for {self.user_id}: {e}")
            return {}
        return result.data[0] if result.data else {}

    async def commit(self, data: Mapping[str, Any]) -> None:
        if not self.user_id:
            raise ProfileCommitError("No user found. Please sign in again.")

        update = sanitize_profile_data(to_jsonable(build_profile_update(data)))
        current = self._current_profile()

        validation = validate_profile_update(update, current or None)
        if not validation.is_valid:
            raise ProfileCommitError(f"Validation failed: {validation.errors[0].message}")
        for warning in validation.warnings:
            logger.info(f"Profile commit warning for {self.user_id}: {warning}")

        record = {
            **update,
            "id": self.user_id,
            "updated_at": datetime.now(timezone.utc).isoformat(),
            "profile_completion": calculate_profile_completion({**current, **update}),
        }

        try:
            self.client.table(PROFILES_TABLE).upsert(record).execute()
        except Exception as e:
            logger.error(f"Error updating user profile {self.user_id}: {e}")
            raise ProfileCommitError(f"Failed to update user profile: {e}") from e

        logger.info(f"Committed onboarding profile for {self.user_id}")
