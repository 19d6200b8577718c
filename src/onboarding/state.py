"""
Onboarding Wizard State.

WizardState is the whole state of one onboarding flow. It is changed only by
the transition functions below; each takes a state and returns a new one
without touching the input, so hosts can keep old snapshots around safely.

The only I/O around these transitions (the profile commit and the debounced
auto-save) lives in wizard.py.
"""

import json
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Mapping, NamedTuple, Sequence

from .draft import default_profile_draft, merge_draft
from .steps import StepDefinition, can_skip_step, get_step


@dataclass
class WizardState:
    """
    Onboarding flow state.

    current_step is always within [0, total_steps - 1]. Completion is the
    terminal state; a failed validation or commit leaves the flow on the
    same step with error set.
    """
    current_step: int = 0
    total_steps: int = 1
    data: dict = field(default_factory=default_profile_draft)
    is_completed: bool = False
    is_loading: bool = False
    error: str | None = None

    @property
    def is_last_step(self) -> bool:
        return self.current_step == self.total_steps - 1

    def to_dict(self) -> dict:
        """Serialize state to dict for JSON responses."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "WizardState":
        """Deserialize state from dict."""
        return cls(**data)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    @classmethod
    def from_json(cls, json_str: str) -> "WizardState":
        return cls.from_dict(json.loads(json_str))


class Transition(NamedTuple):
    """Result of a forward move: the new state and whether the commit should run."""
    state: WizardState
    commit_required: bool = False


def initial_state(total_steps: int, data: Mapping[str, Any] | None = None) -> WizardState:
    """Fresh state at step 0, seeded from data or the default draft."""
    if total_steps < 1:
        raise ValueError("total_steps must be at least 1")
    draft = dict(data) if data is not None else default_profile_draft()
    return WizardState(current_step=0, total_steps=total_steps, data=draft)


# =============================================================================
# Transitions
# =============================================================================

def update_data(state: WizardState, partial: Mapping[str, Any]) -> WizardState:
    """Merge partial sections into the draft and clear the error. Never validates."""
    if state.is_completed:
        return state
    return replace(state, data=merge_draft(state.data, partial), error=None)


def _advance(state: WizardState) -> Transition:
    if state.current_step < state.total_steps - 1:
        return Transition(replace(state, current_step=state.current_step + 1, error=None))
    # Last step: the caller commits instead of moving past the end
    return Transition(replace(state, error=None), commit_required=True)


def next_step(state: WizardState, steps: Sequence[StepDefinition]) -> Transition:
    """
    Validate the current step and move forward.

    On failure the first message becomes the error and the step is unchanged,
    so repeating the call with the same data gives the same result.
    """
    if state.is_completed or state.is_loading:
        return Transition(state)

    step = get_step(steps, state.current_step)
    messages = step.validate(state.data) if step is not None else []
    if messages:
        return Transition(replace(state, error=messages[0]))
    return _advance(state)


def skip_step(state: WizardState, steps: Sequence[StepDefinition]) -> Transition:
    """Move past an optional step without validating it. No-op on required steps."""
    if state.is_completed or state.is_loading:
        return Transition(state)
    if not can_skip_step(steps, state.current_step):
        return Transition(state)
    return _advance(state)


def previous_step(state: WizardState) -> WizardState:
    """Step back one page. No-op at step 0."""
    if state.is_completed or state.current_step == 0:
        return state
    return replace(state, current_step=state.current_step - 1, error=None)


def set_step(state: WizardState, step: int) -> WizardState:
    """Jump to a step (clamped into range) without validating."""
    clamped = max(0, min(step, state.total_steps - 1))
    return replace(state, current_step=clamped, error=None)


def begin_commit(state: WizardState) -> WizardState:
    return replace(state, is_loading=True)


def commit_succeeded(state: WizardState) -> WizardState:
    return replace(state, is_completed=True, is_loading=False, error=None)


def commit_failed(state: WizardState, message: str) -> WizardState:
    return replace(state, is_loading=False, error=message)


def reset_state(state: WizardState) -> WizardState:
    """Back to defaults, keeping the configured number of steps."""
    return initial_state(state.total_steps)


def load_progress(state: WizardState, data: Mapping[str, Any]) -> WizardState:
    """Replace the draft with restored data. The step position is left alone."""
    return replace(state, data=dict(data), error=None)


def clear_error(state: WizardState) -> WizardState:
    return replace(state, error=None)


def set_total_steps(state: WizardState, total_steps: int) -> WizardState:
    """Reconfigure the step count (test/harness use only)."""
    if total_steps < 1:
        raise ValueError("total_steps must be at least 1")
    return replace(
        state,
        total_steps=total_steps,
        current_step=min(state.current_step, total_steps - 1),
    )


def progress_percentage(state: WizardState) -> float:
    """Share of steps reached, counting the current one."""
    return (state.current_step + 1) / state.total_steps * 100
