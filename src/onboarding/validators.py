"""
Field Validators.

Pure rule functions: each takes a ValidationContext and returns a Violation
or None. Validators never raise - a value of the wrong type simply fails the
rule with its standard message.

Most format checks skip blank values; emptiness is the job of
validate_required, which sits first in any chain that needs it.
"""

import math
import re
from dataclasses import dataclass
from datetime import date, datetime
from functools import lru_cache
from typing import Any, Callable, Mapping, NamedTuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError, available_timezones

from pydantic import AnyUrl, TypeAdapter, ValidationError

from .fields import (
    DEFAULT_VALIDATION_RULES,
    FieldRules,
    FieldRuleTable,
    MAX_AGE,
    MIN_AGE,
    ProfileField,
    ValidationErrorCode,
    get_field_display_name,
)


@dataclass(frozen=True)
class ValidationContext:
    """Everything a validator may look at. Built fresh per validation call."""
    field: str
    value: Any
    profile: Mapping[str, Any] | None = None
    rules: FieldRuleTable | None = None

    @property
    def field_rules(self) -> FieldRules:
        table = self.rules if self.rules is not None else DEFAULT_VALIDATION_RULES
        key = ProfileField.lookup(self.field)
        if key is None:
            return FieldRules()
        return table.get(key, FieldRules())

    @property
    def label(self) -> str:
        return get_field_display_name(self.field)


class Violation(NamedTuple):
    """A failed rule: user-facing message plus error code."""
    message: str
    code: ValidationErrorCode


Validator = Callable[[ValidationContext], Violation | None]


# =============================================================================
# Patterns & Limits
# =============================================================================

NAME_PATTERN = re.compile(r"^[a-zA-Z\s\-']+$")
EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[\d\s\-()]+$")
HANDLE_PATTERN = re.compile(r"^[a-zA-Z0-9_.]+$")
COUNTRY_PATTERN = re.compile(r"^[a-zA-Z\s\-']{2,50}$")
CURRENCY_PATTERN = re.compile(r"^[A-Z]{3}$")
LANGUAGE_PATTERN = re.compile(r"^[a-z]{2}(-[A-Z]{2})?$")

PHONE_MIN_DIGITS = 7
PHONE_MAX_DIGITS = 15
HANDLE_MAX_LENGTH = 30

MAX_INTERESTS = 20
MAX_INTEREST_LENGTH = 50
MAX_DESTINATIONS = 50
MAX_DESTINATION_LENGTH = 100
MAX_BUDGET = 1_000_000

_URL_ADAPTER = TypeAdapter(AnyUrl)


# =============================================================================
# Helpers
# =============================================================================

def _filled_string(value: Any) -> str | None:
    """Return the trimmed string, or None for non-strings and blanks."""
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def parse_date(value: Any) -> date | None:
    """Coerce a date, datetime or ISO-8601 string to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def age_on(born: date, today: date) -> int:
    """Whole years between born and today."""
    before_birthday = (today.month, today.day) < (born.month, born.day)
    return today.year - born.year - int(before_birthday)


# =============================================================================
# Generic Rules
# =============================================================================

def validate_required(context: ValidationContext) -> Violation | None:
    """Absent values and blank strings fail when the rule table marks the field required."""
    if not context.field_rules.required:
        return None
    value = context.value
    if value is None or (isinstance(value, str) and not value.strip()):
        return Violation(f"{context.label} is required", ValidationErrorCode.REQUIRED)
    return None


def validate_length(context: ValidationContext) -> Violation | None:
    if not isinstance(context.value, str):
        return None
    rules = context.field_rules
    length = len(context.value.strip())
    if rules.min_length is not None and length < rules.min_length:
        return Violation(
            f"{context.label} must be at least {rules.min_length} characters",
            ValidationErrorCode.TOO_SHORT,
        )
    if rules.max_length is not None and length > rules.max_length:
        return Violation(
            f"{context.label} must be no more than {rules.max_length} characters",
            ValidationErrorCode.TOO_LONG,
        )
    return None


# =============================================================================
# Format Rules
# =============================================================================

def validate_name_format(context: ValidationContext) -> Violation | None:
    text = _filled_string(context.value)
    if text and not NAME_PATTERN.match(text):
        return Violation(
            "Name can only contain letters, spaces, hyphens, and apostrophes",
            ValidationErrorCode.INVALID_FORMAT,
        )
    return None


def validate_email(context: ValidationContext) -> Violation | None:
    text = _filled_string(context.value)
    if text and not EMAIL_PATTERN.match(text):
        return Violation("Please enter a valid email address", ValidationErrorCode.INVALID_EMAIL)
    return None


def validate_phone(context: ValidationContext) -> Violation | None:
    text = _filled_string(context.value)
    if not text:
        return None
    if not PHONE_PATTERN.match(text):
        return Violation("Please enter a valid phone number", ValidationErrorCode.INVALID_PHONE)
    digits = re.sub(r"\D", "", text)
    if not PHONE_MIN_DIGITS <= len(digits) <= PHONE_MAX_DIGITS:
        return Violation(
            f"Phone number must be between {PHONE_MIN_DIGITS} and {PHONE_MAX_DIGITS} digits",
            ValidationErrorCode.INVALID_PHONE,
        )
    return None


def validate_url(context: ValidationContext) -> Violation | None:
    """Parse-and-catch URL check; only http(s) is accepted."""
    text = _filled_string(context.value)
    if not text:
        return None
    try:
        url = _URL_ADAPTER.validate_python(text)
    except ValidationError:
        return Violation("Please enter a valid URL", ValidationErrorCode.INVALID_URL)
    if url.scheme not in ("http", "https"):
        return Violation("URL must start with http:// or https://", ValidationErrorCode.INVALID_URL)
    return None


def validate_social_handle(context: ValidationContext) -> Violation | None:
    text = _filled_string(context.value)
    if not text:
        return None
    handle = text[1:] if text.startswith("@") else text
    if not HANDLE_PATTERN.match(handle):
        return Violation(
            f"{context.label} handle can only contain letters, numbers, underscores, and dots",
            ValidationErrorCode.INVALID_FORMAT,
        )
    if len(handle) > HANDLE_MAX_LENGTH:
        return Violation(
            f"{context.label} handle must be between 1 and {HANDLE_MAX_LENGTH} characters",
            ValidationErrorCode.TOO_LONG,
        )
    return None


def _validate_site_url(context: ValidationContext, domains: tuple[str, ...], message: str) -> Violation | None:
    text = _filled_string(context.value)
    if not text:
        return None
    if not any(domain in text.lower() for domain in domains):
        return Violation(message, ValidationErrorCode.INVALID_URL)
    return validate_url(context)


def validate_linkedin(context: ValidationContext) -> Violation | None:
    return _validate_site_url(context, ("linkedin.com",), "Please enter a valid LinkedIn profile URL")


def validate_youtube(context: ValidationContext) -> Violation | None:
    return _validate_site_url(
        context, ("youtube.com", "youtu.be"), "Please enter a valid YouTube channel URL"
    )


def validate_country(context: ValidationContext) -> Violation | None:
    text = _filled_string(context.value)
    if text and not COUNTRY_PATTERN.match(text):
        return Violation("Please enter a valid country name", ValidationErrorCode.INVALID_FORMAT)
    return None


@lru_cache(maxsize=1)
def _timezone_names() -> dict[str, str]:
    return {name.lower(): name for name in available_timezones()}


def canonical_timezone(name: str) -> str | None:
    """
    IANA name for a timezone, matched case-insensitively.

    zoneinfo lookups are case-sensitive on most filesystems, so
    "europe/london" is resolved through the list of available zones.
    """
    canonical = _timezone_names().get(name.lower())
    if canonical is not None:
        return canonical
    # Zones zoneinfo can load but does not list
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError):
        return None
    return name


def validate_timezone(context: ValidationContext) -> Violation | None:
    text = _filled_string(context.value)
    if text and canonical_timezone(text) is None:
        return Violation("Please enter a valid timezone", ValidationErrorCode.INVALID_TIMEZONE)
    return None


def validate_currency(context: ValidationContext) -> Violation | None:
    text = _filled_string(context.value)
    if text and not CURRENCY_PATTERN.match(text):
        return Violation(
            "Please enter a valid 3-letter currency code (e.g., USD, EUR)",
            ValidationErrorCode.INVALID_CURRENCY,
        )
    return None


def validate_language(context: ValidationContext) -> Violation | None:
    text = _filled_string(context.value)
    if text and not LANGUAGE_PATTERN.match(text):
        return Violation(
            "Please enter a valid language code (e.g., en, en-US)",
            ValidationErrorCode.INVALID_LANGUAGE,
        )
    return None


# =============================================================================
# Range Rules
# =============================================================================

def validate_date_of_birth(context: ValidationContext) -> Violation | None:
    """
    Birth date must parse, must not be in the future, and must put the
    user's age inside the configured [min_age, max_age] window.
    """
    value = context.value
    if value is None or (isinstance(value, str) and not value.strip()):
        return None

    born = parse_date(value)
    if born is None:
        return Violation("Please enter a valid date", ValidationErrorCode.INVALID_DATE)

    today = date.today()
    if born > today:
        return Violation("Birth date cannot be in the future", ValidationErrorCode.INVALID_DATE)

    rules = context.field_rules
    min_age = rules.min_age if rules.min_age is not None else MIN_AGE
    max_age = rules.max_age if rules.max_age is not None else MAX_AGE
    age = age_on(born, today)
    if age < min_age:
        return Violation(f"You must be at least {min_age} years old", ValidationErrorCode.INVALID_AGE)
    if age > max_age:
        return Violation("Please enter a valid birth date", ValidationErrorCode.INVALID_AGE)
    return None


def validate_budget_range(context: ValidationContext) -> Violation | None:
    value = context.value
    if value is None:
        return None
    if not isinstance(value, Mapping):
        return Violation(
            "Budget range must have valid min and max values", ValidationErrorCode.INVALID_RANGE
        )

    low, high = value.get("min"), value.get("max")
    if not _is_number(low) or not _is_number(high):
        return Violation(
            "Budget range must have valid min and max values", ValidationErrorCode.INVALID_RANGE
        )
    if low < 0 or high < 0:
        return Violation("Budget values cannot be negative", ValidationErrorCode.INVALID_RANGE)
    if low > high:
        return Violation(
            "Minimum budget cannot be greater than maximum budget", ValidationErrorCode.INVALID_RANGE
        )
    if high > MAX_BUDGET:
        return Violation(f"Maximum budget cannot exceed {MAX_BUDGET:,}", ValidationErrorCode.INVALID_RANGE)

    currency = value.get("currency")
    if not isinstance(currency, str) or not currency.strip():
        return Violation("Currency is required", ValidationErrorCode.REQUIRED)
    return None


def validate_coordinates(context: ValidationContext) -> Violation | None:
    value = context.value
    if value is None:
        return None
    if not isinstance(value, Mapping):
        return Violation(
            "Coordinates must have valid latitude and longitude values",
            ValidationErrorCode.INVALID_COORDINATES,
        )

    latitude, longitude = value.get("latitude"), value.get("longitude")
    if not _is_number(latitude) or not _is_number(longitude):
        return Violation(
            "Coordinates must have valid latitude and longitude values",
            ValidationErrorCode.INVALID_COORDINATES,
        )
    if not -90 <= latitude <= 90:
        return Violation(
            "Latitude must be between -90 and 90 degrees", ValidationErrorCode.INVALID_COORDINATES
        )
    if not -180 <= longitude <= 180:
        return Violation(
            "Longitude must be between -180 and 180 degrees", ValidationErrorCode.INVALID_COORDINATES
        )
    return None


# =============================================================================
# Collection Rules
# =============================================================================

def _validate_string_list(value: Any, *, noun: str, max_items: int, max_length: int) -> Violation | None:
    if value is None:
        return None
    if not isinstance(value, (list, tuple)):
        return Violation(f"{noun.capitalize()} must be a list", ValidationErrorCode.INVALID_FORMAT)
    if len(value) > max_items:
        return Violation(f"You can select up to {max_items} {noun}", ValidationErrorCode.TOO_LONG)

    singular = noun[:-1]
    for item in value:
        if not isinstance(item, str) or not item.strip():
            return Violation(f"All {noun} must be non-empty strings", ValidationErrorCode.INVALID_FORMAT)
        if len(item.strip()) > max_length:
            return Violation(
                f"Each {singular} must be {max_length} characters or less", ValidationErrorCode.TOO_LONG
            )
    return None


def validate_interests(context: ValidationContext) -> Violation | None:
    return _validate_string_list(
        context.value, noun="interests", max_items=MAX_INTERESTS, max_length=MAX_INTEREST_LENGTH
    )


def validate_destinations(context: ValidationContext) -> Violation | None:
    return _validate_string_list(
        context.value,
        noun="destinations",
        max_items=MAX_DESTINATIONS,
        max_length=MAX_DESTINATION_LENGTH,
    )


# =============================================================================
# Registry
# =============================================================================

# Order matters: the first failing validator wins, so cheap and specific
# checks come before format and cross-reference checks.
VALIDATION_RULES: dict[ProfileField, tuple[Validator, ...]] = {
    ProfileField.NAME: (validate_required, validate_length, validate_name_format),
    ProfileField.FIRST_NAME: (validate_length, validate_name_format),
    ProfileField.LAST_NAME: (validate_length, validate_name_format),
    ProfileField.EMAIL: (validate_required, validate_email),
    ProfileField.BIO: (validate_length,),
    ProfileField.PHONE_NUMBER: (validate_phone,),
    ProfileField.DATE_OF_BIRTH: (validate_date_of_birth,),
    ProfileField.WEBSITE: (validate_url,),
    ProfileField.INSTAGRAM: (validate_social_handle,),
    ProfileField.TWITTER: (validate_social_handle,),
    ProfileField.FACEBOOK: (validate_social_handle,),
    ProfileField.LINKEDIN: (validate_linkedin,),
    ProfileField.TIKTOK: (validate_social_handle,),
    ProfileField.YOUTUBE: (validate_youtube,),
    ProfileField.COUNTRY: (validate_required, validate_country),
    ProfileField.CITY: (validate_length,),
    ProfileField.TIMEZONE: (validate_timezone,),
    ProfileField.CURRENCY: (validate_currency,),
    ProfileField.LANGUAGE: (validate_language,),
    ProfileField.INTERESTS: (validate_interests,),
    ProfileField.DESTINATIONS: (validate_destinations,),
    ProfileField.BUDGET_RANGE: (validate_budget_range,),
    ProfileField.COORDINATES: (validate_coordinates,),
}
