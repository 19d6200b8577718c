"""
Onboarding API Endpoints.

HTTP host for the onboarding wizard. Each authenticated user gets one
OnboardingWizard, kept in a bounded in-memory registry; the draft itself is
auto-saved through the configured progress store, so a user whose wizard was
evicted (or who lands on another worker) resumes from the saved draft.

A wizard is dropped from the registry as soon as its commit succeeds.
Whether a user still needs onboarding is the profile's
`is_onboarding_complete` flag, not the registry.
"""

import logging
from collections import OrderedDict
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from wandercrew.web.auth import AuthenticatedUser, get_current_user

from .commit import SupabaseProfileCommitter
from .draft import get_form_options
from .state import progress_percentage
from .storage import create_progress_store
from .validation import calculate_profile_completion, validate_profile_update
from .wizard import OnboardingWizard

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


# =============================================================================
# Wizard Registry
# =============================================================================

# Active wizards keyed by user_id, least recently used first
_wizards: "OrderedDict[str, OnboardingWizard]" = OrderedDict()


def build_wizard(user_id: str) -> OnboardingWizard:
    """Create and resume a wizard for a user with the configured adapters."""
    wizard = OnboardingWizard.from_settings(
        committer=SupabaseProfileCommitter(user_id),
        store=create_progress_store(user_id),
    )
    wizard.start()
    return wizard


def _evict_oldest(limit: int) -> None:
    while len(_wizards) > limit:
        user_id, wizard = _wizards.popitem(last=False)
        # Write the pending draft now; the next request rebuilds from it
        wizard.save_progress()
        wizard.close()
        logger.debug(f"Evicted onboarding wizard for {user_id}")


def get_wizard(user: AuthenticatedUser = Depends(get_current_user)) -> OnboardingWizard:
    """Return the user's wizard, creating it on first use."""
    from wandercrew.config import settings

    wizard = _wizards.get(user.id)
    if wizard is None:
        wizard = build_wizard(user.id)
        _wizards[user.id] = wizard
        _evict_oldest(max(1, settings.onboarding_max_active_wizards))
    else:
        _wizards.move_to_end(user.id)
    return wizard


def release_wizard(wizard: OnboardingWizard) -> None:
    """Remove a wizard from the registry and stop its auto-save."""
    for user_id, active in list(_wizards.items()):
        if active is wizard:
            del _wizards[user_id]
    wizard.close()


def discard_wizards() -> None:
    """Cancel pending auto-saves and drop every wizard (shutdown and tests)."""
    for wizard in _wizards.values():
        wizard.close()
    _wizards.clear()


# =============================================================================
# Request/Response Models
# =============================================================================

class UpdateDataRequest(BaseModel):
    """Partial draft: any subset of personal_info, travel_preferences, profile_setup."""
    data: dict[str, Any] = Field(default_factory=dict)


class SetStepRequest(BaseModel):
    step: int


class ValidateRequest(BaseModel):
    """Profile update to check, optionally against the current profile."""
    update: dict[str, Any] = Field(default_factory=dict)
    current_profile: dict[str, Any] | None = None


class StepInfo(BaseModel):
    id: str
    title: str
    description: str
    is_optional: bool


class StateResponse(BaseModel):
    """Current onboarding state."""
    current_step: int
    total_steps: int
    data: dict[str, Any]
    is_completed: bool
    is_loading: bool
    error: str | None = None
    progress: float
    step: StepInfo | None = None


class ValidationErrorItem(BaseModel):
    field: str
    message: str
    code: str


class ValidationResponse(BaseModel):
    is_valid: bool
    errors: list[ValidationErrorItem]
    warnings: list[str]
    completion: int


def _state_response(wizard: OnboardingWizard) -> StateResponse:
    state = wizard.state
    step = wizard.current_step_definition
    return StateResponse(
        current_step=state.current_step,
        total_steps=state.total_steps,
        data=state.data,
        is_completed=state.is_completed,
        is_loading=state.is_loading,
        error=state.error,
        progress=progress_percentage(state),
        step=StepInfo(**step.to_dict()) if step is not None else None,
    )


def _finish_if_completed(wizard: OnboardingWizard) -> StateResponse:
    response = _state_response(wizard)
    if response.is_completed:
        release_wizard(wizard)
    return response


# =============================================================================
# Endpoints: Read
# =============================================================================

@router.get("/state", response_model=StateResponse)
async def get_onboarding_state(wizard: OnboardingWizard = Depends(get_wizard)) -> StateResponse:
    """Get current onboarding progress."""
    return _state_response(wizard)


@router.get("/steps", response_model=list[StepInfo])
async def get_steps(wizard: OnboardingWizard = Depends(get_wizard)) -> list[StepInfo]:
    """Ordered step list for progress indicators."""
    return [StepInfo(**step.to_dict()) for step in wizard.steps]


@router.get("/options")
async def get_options():
    """Option lists for rendering the onboarding forms."""
    return get_form_options()


# =============================================================================
# Endpoints: Transitions
# =============================================================================

@router.patch("/data", response_model=StateResponse)
async def update_data(request: UpdateDataRequest, wizard: OnboardingWizard = Depends(get_wizard)) -> StateResponse:
    """Merge form input into the draft (no validation)."""
    wizard.update_data(request.data)
    return _state_response(wizard)


@router.post("/next", response_model=StateResponse)
async def next_step(wizard: OnboardingWizard = Depends(get_wizard)) -> StateResponse:
    """Validate the current step and advance, committing on the last step."""
    await wizard.next()
    return _finish_if_completed(wizard)


@router.post("/previous", response_model=StateResponse)
async def previous_step(wizard: OnboardingWizard = Depends(get_wizard)) -> StateResponse:
    wizard.previous()
    return _state_response(wizard)


@router.post("/skip", response_model=StateResponse)
async def skip_step(wizard: OnboardingWizard = Depends(get_wizard)) -> StateResponse:
    """Skip the current step if it is optional."""
    step = wizard.current_step_definition
    if step is None or not step.is_optional:
        raise HTTPException(
            status_code=400,
            detail=f"Step {wizard.state.current_step} cannot be skipped",
        )
    await wizard.skip()
    return _finish_if_completed(wizard)


@router.post("/step", response_model=StateResponse)
async def set_step(request: SetStepRequest, wizard: OnboardingWizard = Depends(get_wizard)) -> StateResponse:
    """Jump to a step directly (clamped into range, no validation)."""
    wizard.set_step(request.step)
    return _state_response(wizard)


@router.post("/reset", response_model=StateResponse)
async def reset(wizard: OnboardingWizard = Depends(get_wizard)) -> StateResponse:
    """Start over and discard saved progress."""
    wizard.reset()
    return _state_response(wizard)


# =============================================================================
# Endpoints: Validation
# =============================================================================

@router.post("/validate", response_model=ValidationResponse)
async def validate(request: ValidateRequest) -> ValidationResponse:
    """Check a profile update without touching any wizard."""
    result = validate_profile_update(request.update, request.current_profile)
    merged = {**(request.current_profile or {}), **request.update}
    return ValidationResponse(
        is_valid=result.is_valid,
        errors=[ValidationErrorItem(**error.to_dict()) for error in result.errors],
        warnings=list(result.warnings),
        completion=calculate_profile_completion(merged),
    )
