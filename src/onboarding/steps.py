"""
Onboarding Step Definitions.

The wizard walks these steps in order; the tuple index is the step index.
Each step validator reads the whole draft and returns blocking messages for
the fields that step collects. An empty list means the step may be left.
"""

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

from .draft import (
    PERSONAL_INFO,
    PROFILE_SETUP,
    PROFILE_VISIBILITY,
    TRAVEL_PREFERENCES,
    get_section,
)
from .validation import validate_field, validate_profile_update

StepValidator = Callable[[Mapping[str, Any]], list[str]]


@dataclass(frozen=True)
class StepDefinition:
    """One page of the wizard."""
    id: str
    title: str
    description: str
    validate: StepValidator
    is_optional: bool = False

    def to_dict(self) -> dict:
        """Serializable view for hosts (the validator is omitted)."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "is_optional": self.is_optional,
        }


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def _is_empty_list(value: Any) -> bool:
    return not isinstance(value, (list, tuple)) or len(value) == 0


def _pick(section: Mapping[str, Any], keys: Sequence[str]) -> dict[str, Any]:
    return {key: section[key] for key in keys if key in section}


# =============================================================================
# Step Validators
# =============================================================================

PERSONAL_INFO_FIELDS = ("first_name", "last_name", "phone_number", "bio", "date_of_birth", "location")
TRAVEL_PREFERENCE_FIELDS = ("destinations", "interests", "budget_range")
PROFILE_SETUP_FIELDS = ("social_links",)


def validate_personal_info(data: Mapping[str, Any]) -> list[str]:
    """First and last name are required; everything else must be well-formed if given."""
    info = get_section(data, PERSONAL_INFO)
    messages = []
    if _is_blank(info.get("first_name")):
        messages.append("First name is required")
    if _is_blank(info.get("last_name")):
        messages.append("Last name is required")

    result = validate_profile_update(_pick(info, PERSONAL_INFO_FIELDS))
    messages.extend(result.messages)

    if not messages:
        # The commit stores "first last" as name, which has its own limits
        full_name = f"{info['first_name'].strip()} {info['last_name'].strip()}"
        error = validate_field("name", full_name)
        if error is not None:
            messages.append(error.message)
    return messages


def validate_travel_preferences(data: Mapping[str, Any]) -> list[str]:
    """At least one destination and one interest, and a coherent budget."""
    prefs = get_section(data, TRAVEL_PREFERENCES)
    messages = []
    if _is_empty_list(prefs.get("destinations")):
        messages.append("Please select at least one destination")
    if _is_empty_list(prefs.get("interests")):
        messages.append("Please select at least one interest")

    result = validate_profile_update(_pick(prefs, TRAVEL_PREFERENCE_FIELDS))
    messages.extend(result.messages)
    return messages


def validate_profile_setup(data: Mapping[str, Any]) -> list[str]:
    """Nothing is required here; social links and visibility must be valid if set."""
    setup = get_section(data, PROFILE_SETUP)
    result = validate_profile_update(_pick(setup, PROFILE_SETUP_FIELDS))
    messages = list(result.messages)

    privacy = setup.get("privacy_settings")
    if isinstance(privacy, Mapping):
        visibility = privacy.get("profile_visibility")
        if visibility is not None and visibility not in PROFILE_VISIBILITY:
            messages.append("Please select a valid profile visibility")
    return messages


# =============================================================================
# Step Order
# =============================================================================

ONBOARDING_STEPS: tuple[StepDefinition, ...] = (
    StepDefinition(
        id="personal-info",
        title="Personal Information",
        description="Tell us a bit about yourself",
        validate=validate_personal_info,
    ),
    StepDefinition(
        id="travel-preferences",
        title="Travel Preferences",
        description="Help us understand your travel style",
        validate=validate_travel_preferences,
    ),
    StepDefinition(
        id="profile-setup",
        title="Profile Setup",
        description="Complete your profile with a photo and preferences",
        validate=validate_profile_setup,
        is_optional=True,
    ),
)


def get_step(steps: Sequence[StepDefinition], index: int) -> StepDefinition | None:
    """Step at index, or None when out of range."""
    if 0 <= index < len(steps):
        return steps[index]
    return None


def can_skip_step(steps: Sequence[StepDefinition], index: int) -> bool:
    """Check if the step at index can be skipped."""
    step = get_step(steps, index)
    return step is not None and step.is_optional
