"""
Profile Validation Engine.

Runs the per-field validator chains from validators.py and aggregates the
results:

- validate_field: one field, first failing rule wins
- validate_profile_update: every field present in a partial update, plus
  non-blocking cross-field warnings
- validate_user_profile: a whole profile, including the always-required set
- calculate_profile_completion: how much of the profile is filled in

Errors block; warnings never do.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterator, Mapping

from .fields import (
    FieldRuleTable,
    ProfileField,
    ValidationErrorCode,
    get_field_display_name,
)
from .validators import (
    VALIDATION_RULES,
    ValidationContext,
    age_on,
    parse_date,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProfileValidationError:
    """A blocking validation failure on one field."""
    field: str
    message: str
    code: ValidationErrorCode

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message, "code": self.code.value}


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a validation pass. Built fresh each time, never mutated."""
    is_valid: bool
    errors: tuple[ProfileValidationError, ...] = ()
    warnings: tuple[str, ...] = ()

    @classmethod
    def from_findings(
        cls, errors: list[ProfileValidationError], warnings: list[str]
    ) -> "ValidationResult":
        return cls(is_valid=not errors, errors=tuple(errors), warnings=tuple(warnings))

    @property
    def messages(self) -> list[str]:
        return [error.message for error in self.errors]


# Fields that are always required on a complete profile
REQUIRED_PROFILE_FIELDS = ("id", "email", "name")

# Fields counted by calculate_profile_completion
COMPLETION_FIELDS = (
    "name",
    "email",
    "bio",
    "date_of_birth",
    "phone_number",
    "location",
    "profile_picture",
    "travel_preferences",
    "social_links",
)

# Nested sections whose children carry their own validator chains
NESTED_SECTIONS = ("location", "social_links", "travel_preferences")

LOW_COMPLETION_THRESHOLD = 50

NAME_CHANGE_WARNING = "Consider updating your full name when changing first or last name"
AGE_CHANGE_WARNING = "Significant age change detected. Please verify your birth date."
LOW_COMPLETION_WARNING = (
    "Your profile is less than 50% complete. Consider adding more information."
)


# =============================================================================
# Single Field
# =============================================================================

def validate_field(
    field: "str | ProfileField",
    value: Any,
    profile: Mapping[str, Any] | None = None,
    rules: FieldRuleTable | None = None,
) -> ProfileValidationError | None:
    """
    Run a field's validator chain and return the first error.

    Later validators are not evaluated once one fails. Fields without a
    registered chain always pass.
    """
    key = ProfileField.lookup(field)
    if key is None:
        return None

    context = ValidationContext(field=key.value, value=value, profile=profile, rules=rules)
    for validator in VALIDATION_RULES.get(key, ()):
        violation = validator(context)
        if violation is not None:
            return ProfileValidationError(
                field=key.value, message=violation.message, code=violation.code
            )
    return None


def _iter_present_fields(data: Mapping[str, Any]) -> Iterator[tuple[str, Any]]:
    """Yield (field, value) for every non-None entry, expanding nested sections."""
    for name, value in data.items():
        if value is None:
            continue
        if name in NESTED_SECTIONS and isinstance(value, Mapping):
            for child, child_value in value.items():
                if child_value is not None:
                    yield child, child_value
            continue
        yield name, value


def _collect_errors(
    data: Mapping[str, Any],
    profile: Mapping[str, Any] | None,
    skip: set[str] | None = None,
) -> list[ProfileValidationError]:
    errors = []
    for name, value in _iter_present_fields(data):
        if skip and name in skip:
            continue
        error = validate_field(name, value, profile)
        if error is not None:
            errors.append(error)
    return errors


# =============================================================================
# Partial Updates
# =============================================================================

def _age_from(value: Any, today: date) -> int | None:
    born = parse_date(value)
    return age_on(born, today) if born is not None else None


def validate_profile_update(
    update: Mapping[str, Any],
    current_profile: Mapping[str, Any] | None = None,
) -> ValidationResult:
    """
    Validate only the fields present in a partial update.

    Every provided field is checked (no short-circuit across fields), and
    cross-field warnings are attached.
    """
    errors = _collect_errors(update, current_profile)
    warnings = []

    if update.get("first_name") and update.get("last_name") and not update.get("name"):
        warnings.append(NAME_CHANGE_WARNING)

    if update.get("date_of_birth") and current_profile and current_profile.get("date_of_birth"):
        today = date.today()
        new_age = _age_from(update["date_of_birth"], today)
        current_age = _age_from(current_profile["date_of_birth"], today)
        if new_age is not None and current_age is not None and abs(new_age - current_age) > 1:
            warnings.append(AGE_CHANGE_WARNING)

    if errors:
        logger.debug(f"Profile update rejected: {[e.field for e in errors]}")
    return ValidationResult.from_findings(errors, warnings)


# =============================================================================
# Whole Profile
# =============================================================================

def validate_user_profile(profile: Mapping[str, Any]) -> ValidationResult:
    """Validate a complete profile, enforcing the always-required fields."""
    errors = []
    missing = set()
    for name in REQUIRED_PROFILE_FIELDS:
        value = profile.get(name)
        if not value or (isinstance(value, str) and not value.strip()):
            missing.add(name)
            errors.append(
                ProfileValidationError(
                    field=name,
                    message=f"{get_field_display_name(name)} is required",
                    code=ValidationErrorCode.REQUIRED,
                )
            )

    errors.extend(_collect_errors(profile, profile, skip=missing))

    warnings = []
    if calculate_profile_completion(profile) < LOW_COMPLETION_THRESHOLD:
        warnings.append(LOW_COMPLETION_WARNING)

    return ValidationResult.from_findings(errors, warnings)


def _is_populated(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, (bool, int, float, date)):
        return True
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (Mapping, list, tuple, set)):
        return len(value) > 0
    return False


def calculate_profile_completion(profile: Mapping[str, Any]) -> int:
    """Percentage (0-100) of COMPLETION_FIELDS that are populated."""
    populated = sum(1 for name in COMPLETION_FIELDS if _is_populated(profile.get(name)))
    # Half-up rounding; round() would bank 12.5 down to 12
    return int(populated * 100 / len(COMPLETION_FIELDS) + 0.5)


# =============================================================================
# Helpers
# =============================================================================

def sanitize_profile_data(data: Any) -> Any:
    """Recursively trim whitespace from every string."""
    if isinstance(data, str):
        return data.strip()
    if isinstance(data, (list, tuple)):
        return [sanitize_profile_data(item) for item in data]
    if isinstance(data, Mapping):
        return {key: sanitize_profile_data(value) for key, value in data.items()}
    return data


def format_validation_errors(errors: "list[ProfileValidationError] | tuple[ProfileValidationError, ...]") -> list[str]:
    """Render errors as 'Label: message' lines."""
    return [f"{get_field_display_name(error.field)}: {error.message}" for error in errors]


def get_validation_summary(result: ValidationResult) -> str:
    """One-line summary, e.g. '2 errors and 1 warning'."""
    if result.is_valid:
        return "Profile is valid"

    error_count = len(result.errors)
    warning_count = len(result.warnings)
    summary = f"{error_count} error{'s' if error_count != 1 else ''}"
    if warning_count:
        summary += f" and {warning_count} warning{'s' if warning_count != 1 else ''}"
    return summary
