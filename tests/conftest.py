"""
Pytest configuration and fixtures for WanderCrew tests.
"""

import asyncio
import os
from unittest.mock import MagicMock

import pytest

# Set test environment before importing wandercrew modules
os.environ["WANDERCREW_ENV"] = "development"
os.environ["ONBOARDING_STORE"] = "memory"
os.environ["ONBOARDING_AUTOSAVE_INTERVAL_SECONDS"] = "0.05"

from onboarding.draft import default_profile_draft
from onboarding.storage import MemoryProgressStore


class RecordingCommitter:
    """Commit adapter that records every call and optionally fails."""

    def __init__(self, error: Exception | None = None, delay: float = 0.0):
        self.calls: list[dict] = []
        self.error = error
        self.delay = delay

    async def commit(self, data):
        self.calls.append(data)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error


class FailingStore:
    """Progress store whose every operation fails."""

    def save(self, snapshot):
        raise OSError("disk full")

    def load(self):
        raise OSError("unreadable")

    def clear(self):
        raise OSError("read-only")


@pytest.fixture
def mock_supabase():
    """Mock Supabase client for unit tests."""
    mock_client = MagicMock()

    # Mock table operations
    mock_table = MagicMock()
    mock_table.select.return_value = mock_table
    mock_table.insert.return_value = mock_table
    mock_table.upsert.return_value = mock_table
    mock_table.update.return_value = mock_table
    mock_table.delete.return_value = mock_table
    mock_table.eq.return_value = mock_table
    mock_table.limit.return_value = mock_table
    mock_table.execute.return_value = MagicMock(data=[])

    mock_client.table.return_value = mock_table

    return mock_client


@pytest.fixture
def committer():
    return RecordingCommitter()


@pytest.fixture
def memory_store():
    return MemoryProgressStore()


@pytest.fixture
def personal_info():
    return {
        "first_name": "Ada",
        "last_name": "Lovelace",
        "phone_number": "+44 20 7946 0958",
        "bio": "Analytical traveller",
    }


@pytest.fixture
def travel_preferences():
    return {
        "destinations": ["Lisbon, Portugal", "Tokyo, Japan"],
        "interests": ["food", "history"],
        "budget_range": {"min": 800, "max": 2500, "currency": "EUR"},
        "group_size_preference": "small",
        "travel_style": "cultural",
        "languages": ["English"],
    }


@pytest.fixture
def complete_draft(personal_info, travel_preferences):
    """A draft that passes every step validator."""
    draft = default_profile_draft()
    draft["personal_info"] = personal_info
    draft["travel_preferences"] = {**draft["travel_preferences"], **travel_preferences}
    return draft


@pytest.fixture
def sample_profile():
    """A complete, valid stored profile."""
    return {
        "id": "user-1",
        "email": "ada@example.com",
        "name": "Ada Lovelace",
        "bio": "Analytical traveller",
        "date_of_birth": "1990-12-10",
        "phone_number": "+44 20 7946 0958",
        "location": {"country": "United Kingdom", "city": "London", "timezone": "Europe/London"},
        "travel_preferences": {
            "destinations": ["Lisbon, Portugal"],
            "interests": ["food"],
            "budget_range": {"min": 800, "max": 2500, "currency": "EUR"},
        },
        "social_links": {"website": "https://ada.example.com"},
    }
