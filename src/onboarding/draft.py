"""
Profile Draft - the data collected across onboarding steps.

A draft is a plain JSON-compatible dict with three sections:
- personal_info: names, contact details, optional birth date and location
- travel_preferences: destinations, budget, travel style and interests
- profile_setup: picture, social links, privacy and notification settings

Hosts merge partial sections into the draft; step validators decide when a
section is good enough to move on.
"""

import copy
from typing import Any, Mapping

PERSONAL_INFO = "personal_info"
TRAVEL_PREFERENCES = "travel_preferences"
PROFILE_SETUP = "profile_setup"

SECTIONS = (PERSONAL_INFO, TRAVEL_PREFERENCES, PROFILE_SETUP)


# =============================================================================
# Valid Options
# =============================================================================

GROUP_SIZE_PREFERENCES = ["solo", "small", "medium", "large"]
TRAVEL_STYLES = ["adventure", "relaxed", "cultural", "budget", "luxury", "business"]
ACCOMMODATION_PREFERENCES = ["hotel", "hostel", "airbnb", "camping", "any"]
TRANSPORTATION_PREFERENCES = ["flight", "train", "bus", "car", "any"]
TRAVEL_FREQUENCIES = ["rarely", "occasionally", "frequently", "constantly"]
PROFILE_VISIBILITY = ["public", "friends", "private"]

TRAVEL_INTERESTS = [
    "culture",
    "nature",
    "adventure",
    "food",
    "history",
    "art",
    "photography",
    "nightlife",
    "beach",
    "mountains",
    "cities",
    "wildlife",
    "religion",
    "architecture",
    "music",
    "sports",
    "wellness",
    "shopping",
    "festivals",
    "local experiences",
]

POPULAR_DESTINATIONS = [
    "Paris, France",
    "Tokyo, Japan",
    "New York, USA",
    "London, UK",
    "Rome, Italy",
    "Barcelona, Spain",
    "Amsterdam, Netherlands",
    "Sydney, Australia",
    "Dubai, UAE",
    "Bangkok, Thailand",
    "Istanbul, Turkey",
    "Prague, Czech Republic",
    "Vienna, Austria",
    "Berlin, Germany",
    "Madrid, Spain",
    "Athens, Greece",
    "Lisbon, Portugal",
    "Copenhagen, Denmark",
    "Stockholm, Sweden",
    "Zurich, Switzerland",
]

CURRENCY_OPTIONS = [
    {"code": "USD", "symbol": "$", "name": "US Dollar"},
    {"code": "EUR", "symbol": "€", "name": "Euro"},
    {"code": "GBP", "symbol": "£", "name": "British Pound"},
    {"code": "JPY", "symbol": "¥", "name": "Japanese Yen"},
    {"code": "CAD", "symbol": "C$", "name": "Canadian Dollar"},
    {"code": "AUD", "symbol": "A$", "name": "Australian Dollar"},
    {"code": "CHF", "symbol": "CHF", "name": "Swiss Franc"},
    {"code": "CNY", "symbol": "¥", "name": "Chinese Yuan"},
    {"code": "INR", "symbol": "₹", "name": "Indian Rupee"},
    {"code": "BRL", "symbol": "R$", "name": "Brazilian Real"},
]

LANGUAGE_OPTIONS = [
    "English",
    "Spanish",
    "French",
    "German",
    "Italian",
    "Portuguese",
    "Russian",
    "Japanese",
    "Chinese",
    "Korean",
    "Arabic",
    "Hindi",
    "Dutch",
    "Swedish",
    "Norwegian",
    "Danish",
    "Finnish",
    "Polish",
    "Czech",
    "Hungarian",
]


# =============================================================================
# Defaults
# =============================================================================

# date_of_birth, location, profile_picture_url and social_links are optional
# and absent from a fresh draft.
_DEFAULT_DRAFT: dict[str, Any] = {
    PERSONAL_INFO: {
        "first_name": "",
        "last_name": "",
        "phone_number": "",
        "bio": "",
    },
    TRAVEL_PREFERENCES: {
        "destinations": [],
        "budget_range": {"min": 500, "max": 2000, "currency": "USD"},
        "group_size_preference": "medium",
        "travel_style": "relaxed",
        "interests": [],
        "accommodation_preference": "any",
        "transportation_preference": "any",
        "dietary_restrictions": [],
        "accessibility_needs": [],
        "languages": ["English"],
        "travel_frequency": "occasionally",
    },
    PROFILE_SETUP: {
        "privacy_settings": {
            "profile_visibility": "public",
            "show_email": False,
            "show_phone": False,
            "show_location": True,
            "show_travel_history": True,
            "allow_friend_requests": True,
            "allow_trip_invitations": True,
            "data_sharing": {
                "analytics": True,
                "marketing": False,
                "third_party": False,
            },
        },
        "notification_settings": {
            "email": {
                "trip_updates": True,
                "friend_requests": True,
                "trip_invitations": True,
                "marketing": False,
                "security": True,
            },
            "push": {
                "trip_updates": True,
                "friend_requests": True,
                "trip_invitations": True,
                "messages": True,
            },
            "sms": {
                "trip_updates": False,
                "security": True,
            },
        },
    },
}


def default_profile_draft() -> dict[str, Any]:
    """Fresh draft with default preferences. Callers own the returned copy."""
    return copy.deepcopy(_DEFAULT_DRAFT)


def get_section(data: Mapping[str, Any], section: str) -> Mapping[str, Any]:
    """Return a section of the draft, or an empty mapping when missing or malformed."""
    value = data.get(section)
    return value if isinstance(value, Mapping) else {}


def merge_draft(data: Mapping[str, Any], partial: Mapping[str, Any]) -> dict[str, Any]:
    """Shallow merge: keys in partial replace whole sections of data."""
    return {**data, **copy.deepcopy(dict(partial))}


# =============================================================================
# API Response Helpers
# =============================================================================

def get_form_options() -> dict:
    """
    Get all option lists a host needs to render the onboarding steps.

    Returns dict with:
    - interests / destinations: suggestion lists for the travel step
    - currencies / languages: selectable codes and names
    - choice lists for every enumerated preference
    """
    return {
        "interests": TRAVEL_INTERESTS,
        "destinations": POPULAR_DESTINATIONS,
        "currencies": CURRENCY_OPTIONS,
        "languages": LANGUAGE_OPTIONS,
        "group_size_preferences": GROUP_SIZE_PREFERENCES,
        "travel_styles": TRAVEL_STYLES,
        "accommodation_preferences": ACCOMMODATION_PREFERENCES,
        "transportation_preferences": TRANSPORTATION_PREFERENCES,
        "travel_frequencies": TRAVEL_FREQUENCIES,
        "profile_visibility": PROFILE_VISIBILITY,
    }
