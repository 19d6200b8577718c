"""
WanderCrew Onboarding System.

Collects a new user's profile through a short wizard and commits it to the
profiles table once the last step passes validation.

Steps:
1. Personal Information - names (required), contact details, birth date, location
2. Travel Preferences - destinations, interests, budget
3. Profile Setup (optional) - picture, social links, privacy and notifications

Modules:
- validators / validation: field rules and the profile validation engine
- steps / state: step definitions and pure wizard transitions
- wizard: the stateful controller hosts talk to
- storage / commit: progress persistence and the final profile write
"""

from .state import WizardState
from .steps import ONBOARDING_STEPS, StepDefinition
from .validation import (
    ProfileValidationError,
    ValidationResult,
    calculate_profile_completion,
    validate_field,
    validate_profile_update,
    validate_user_profile,
)
from .wizard import OnboardingWizard

__all__ = [
    "OnboardingWizard",
    "WizardState",
    "StepDefinition",
    "ONBOARDING_STEPS",
    "ProfileValidationError",
    "ValidationResult",
    "validate_field",
    "validate_profile_update",
    "validate_user_profile",
    "calculate_profile_completion",
]
