"""
Profile Fields - identifiers, rule table and error codes.

Every field the validation engine knows about is a member of ProfileField.
The rule table carries the tunable constraints (required, length, age) that
validators read through the ValidationContext.
"""

from dataclasses import dataclass
from enum import Enum


class ProfileField(str, Enum):
    """Closed set of profile fields with registered validator chains."""
    NAME = "name"
    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    EMAIL = "email"
    BIO = "bio"
    PHONE_NUMBER = "phone_number"
    DATE_OF_BIRTH = "date_of_birth"
    WEBSITE = "website"
    INSTAGRAM = "instagram"
    TWITTER = "twitter"
    FACEBOOK = "facebook"
    LINKEDIN = "linkedin"
    TIKTOK = "tiktok"
    YOUTUBE = "youtube"
    COUNTRY = "country"
    CITY = "city"
    TIMEZONE = "timezone"
    CURRENCY = "currency"
    LANGUAGE = "language"
    INTERESTS = "interests"
    DESTINATIONS = "destinations"
    BUDGET_RANGE = "budget_range"
    COORDINATES = "coordinates"

    @classmethod
    def lookup(cls, field: "str | ProfileField") -> "ProfileField | None":
        """Resolve a raw field name, returning None for unknown fields."""
        if isinstance(field, cls):
            return field
        try:
            return cls(field)
        except ValueError:
            return None


class ValidationErrorCode(str, Enum):
    """Machine-readable codes attached to every ProfileValidationError."""
    REQUIRED = "REQUIRED"
    INVALID_FORMAT = "INVALID_FORMAT"
    TOO_SHORT = "TOO_SHORT"
    TOO_LONG = "TOO_LONG"
    INVALID_AGE = "INVALID_AGE"
    INVALID_URL = "INVALID_URL"
    INVALID_PHONE = "INVALID_PHONE"
    INVALID_EMAIL = "INVALID_EMAIL"
    INVALID_DATE = "INVALID_DATE"
    INVALID_CURRENCY = "INVALID_CURRENCY"
    INVALID_LANGUAGE = "INVALID_LANGUAGE"
    INVALID_TIMEZONE = "INVALID_TIMEZONE"
    INVALID_COORDINATES = "INVALID_COORDINATES"
    INVALID_RANGE = "INVALID_RANGE"
    DUPLICATE_VALUE = "DUPLICATE_VALUE"
    INVALID_SELECTION = "INVALID_SELECTION"


@dataclass(frozen=True)
class FieldRules:
    """Tunable constraints for one field."""
    required: bool = False
    min_length: int | None = None
    max_length: int | None = None
    min_age: int | None = None
    max_age: int | None = None


FieldRuleTable = dict[ProfileField, FieldRules]


# =============================================================================
# Defaults
# =============================================================================

MIN_AGE = 13
MAX_AGE = 120

DEFAULT_VALIDATION_RULES: FieldRuleTable = {
    ProfileField.NAME: FieldRules(required=True, min_length=2, max_length=50),
    ProfileField.EMAIL: FieldRules(required=True),
    ProfileField.BIO: FieldRules(max_length=500),
    ProfileField.FIRST_NAME: FieldRules(max_length=50),
    ProfileField.LAST_NAME: FieldRules(max_length=50),
    ProfileField.CITY: FieldRules(max_length=100),
    ProfileField.DATE_OF_BIRTH: FieldRules(min_age=MIN_AGE, max_age=MAX_AGE),
}

# Labels that don't follow the "capitalise the first word" convention
_DISPLAY_NAMES = {
    "first_name": "First name",
    "last_name": "Last name",
    "date_of_birth": "Date of birth",
    "phone_number": "Phone number",
    "profile_picture": "Profile picture",
    "travel_preferences": "Travel preferences",
    "privacy_settings": "Privacy settings",
    "notification_settings": "Notification settings",
    "budget_range": "Budget range",
    "social_links": "Social links",
    "linkedin": "LinkedIn",
    "youtube": "YouTube",
    "tiktok": "TikTok",
    "id": "ID",
}


def get_field_display_name(field: "str | ProfileField") -> str:
    """Human label for a field name (e.g. date_of_birth -> 'Date of birth')."""
    key = field.value if isinstance(field, ProfileField) else str(field)
    if key in _DISPLAY_NAMES:
        return _DISPLAY_NAMES[key]
    if not key:
        return key
    words = key.replace("_", " ")
    return words[0].upper() + words[1:]
