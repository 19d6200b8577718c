"""
Tests for building and committing the finished profile.
"""

import asyncio
from datetime import date
from unittest.mock import MagicMock

import pytest

from onboarding.commit import (
    PROFILES_TABLE,
    ProfileCommitError,
    SupabaseProfileCommitter,
    build_profile_update,
)


class TestBuildProfileUpdate:
    def test_maps_sections(self, complete_draft):
        update = build_profile_update(complete_draft)
        assert update["name"] == "Ada Lovelace"
        assert update["first_name"] == "Ada"
        assert update["last_name"] == "Lovelace"
        assert update["phone_number"] == "+44 20 7946 0958"
        assert update["is_onboarding_complete"] is True
        assert update["travel_preferences"]["destinations"] == ["Lisbon, Portugal", "Tokyo, Japan"]
        assert update["privacy_settings"]["profile_visibility"] == "public"
        assert "notification_settings" in update

    def test_optional_values_omitted_when_blank(self, complete_draft):
        complete_draft["personal_info"].update(phone_number="  ", bio="")
        update = build_profile_update(complete_draft)
        assert "phone_number" not in update
        assert "bio" not in update
        assert "date_of_birth" not in update
        assert "profile_picture" not in update

    def test_names_are_trimmed(self):
        update = build_profile_update({"personal_info": {"first_name": " Ada ", "last_name": ""}})
        assert update["name"] == "Ada"

    def test_profile_picture(self, complete_draft):
        complete_draft["profile_setup"]["profile_picture_url"] = "https://cdn.example.com/ada.png"
        assert build_profile_update(complete_draft)["profile_picture"] == "https://cdn.example.com/ada.png"


class TestSupabaseProfileCommitter:
    def test_upserts_profile(self, mock_supabase, complete_draft):
        complete_draft["personal_info"]["date_of_birth"] = date(1990, 12, 10)
        committer = SupabaseProfileCommitter("user-1", client=mock_supabase)

        asyncio.run(committer.commit(complete_draft))

        mock_supabase.table.assert_called_with(PROFILES_TABLE)
        record = mock_supabase.table.return_value.upsert.call_args.args[0]
        assert record["id"] == "user-1"
        assert record["name"] == "Ada Lovelace"
        assert record["date_of_birth"] == "1990-12-10"
        assert record["is_onboarding_complete"] is True
        assert "updated_at" in record
        assert 0 < record["profile_completion"] <= 100

    def test_requires_user(self, mock_supabase, complete_draft):
        committer = SupabaseProfileCommitter("", client=mock_supabase)
        with pytest.raises(ProfileCommitError, match="No user found"):
            asyncio.run(committer.commit(complete_draft))
        mock_supabase.table.return_value.upsert.assert_not_called()

    def test_validation_failure(self, mock_supabase, complete_draft):
        complete_draft["profile_setup"]["social_links"] = {"website": "not a url"}
        committer = SupabaseProfileCommitter("user-1", client=mock_supabase)
        with pytest.raises(ProfileCommitError, match="Validation failed: Please enter a valid URL"):
            asyncio.run(committer.commit(complete_draft))
        mock_supabase.table.return_value.upsert.assert_not_called()

    def test_write_failure(self, mock_supabase, complete_draft):
        mock_supabase.table.return_value.upsert.side_effect = RuntimeError("connection reset")
        committer = SupabaseProfileCommitter("user-1", client=mock_supabase)
        with pytest.raises(ProfileCommitError, match="Failed to update user profile: connection reset"):
            asyncio.run(committer.commit(complete_draft))

    def test_completion_includes_current_profile(self, mock_supabase, complete_draft):
        table = mock_supabase.table.return_value
        table.execute.return_value = MagicMock(data=[{"id": "user-1", "email": "ada@example.com"}])
        committer = SupabaseProfileCommitter("user-1", client=mock_supabase)

        asyncio.run(committer.commit(complete_draft))

        record = table.upsert.call_args.args[0]
        # name, email, bio, phone_number, travel_preferences of 9 fields
        assert record["profile_completion"] == 56

    def test_unreadable_current_profile_is_tolerated(self, mock_supabase, complete_draft):
        table = mock_supabase.table.return_value
        table.select.side_effect = RuntimeError("timeout")
        committer = SupabaseProfileCommitter("user-1", client=mock_supabase)
        asyncio.run(committer.commit(complete_draft))
        table.upsert.assert_called_once()
