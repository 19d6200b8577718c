"""
Onboarding Wizard.

OnboardingWizard owns one WizardState and is the only thing that changes it.
Hosts (the HTTP router, the CLI, tests) read `wizard.state` and call the
transition methods:

    wizard = OnboardingWizard(committer=SupabaseProfileCommitter(user_id), store=store)
    wizard.start()                      # resume saved draft, if any
    wizard.update_data({"personal_info": {...}})
    await wizard.next()                 # validate, advance or commit

Everything is synchronous except the commit. Auto-save is debounced and
best-effort: store failures are logged, never shown to the user.

Only one wizard should be active per storage key at a time; this is not
enforced here.
"""

import asyncio
import copy
import logging
from typing import Any, Mapping, Sequence

from . import state as transitions
from .autosave import DEFAULT_AUTOSAVE_INTERVAL, Debouncer
from .commit import ProfileCommitter
from .state import WizardState
from .steps import ONBOARDING_STEPS, StepDefinition, can_skip_step, get_step
from .storage import ProgressStore, build_snapshot

logger = logging.getLogger(__name__)

DEFAULT_COMMIT_ERROR = "Failed to complete onboarding"


class OnboardingWizard:
    """Step sequencing, validation gating, auto-save and the final commit."""

    def __init__(
        self,
        committer: ProfileCommitter,
        store: ProgressStore | None = None,
        steps: Sequence[StepDefinition] = ONBOARDING_STEPS,
        *,
        autosave: bool = True,
        autosave_interval: float = DEFAULT_AUTOSAVE_INTERVAL,
    ) -> None:
        if not steps:
            raise ValueError("An onboarding flow needs at least one step")
        self.steps = tuple(steps)
        self._committer = committer
        self._store = store
        self._state = transitions.initial_state(len(self.steps))
        self._autosave = (
            Debouncer(self.save_progress, autosave_interval)
            if autosave and store is not None
            else None
        )

    @classmethod
    def from_settings(
        cls,
        committer: ProfileCommitter,
        store: ProgressStore | None = None,
        steps: Sequence[StepDefinition] = ONBOARDING_STEPS,
    ) -> "OnboardingWizard":
        """Build a wizard with the auto-save options from settings."""
        from wandercrew.config import settings

        return cls(
            committer,
            store,
            steps,
            autosave=settings.onboarding_autosave,
            autosave_interval=settings.onboarding_autosave_interval_seconds,
        )

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    @property
    def state(self) -> WizardState:
        """A copy of the current state; changing it has no effect on the wizard."""
        return copy.deepcopy(self._state)

    @property
    def current_step_definition(self) -> StepDefinition | None:
        return get_step(self.steps, self._state.current_step)

    @property
    def progress(self) -> float:
        return transitions.progress_percentage(self._state)

    @property
    def autosave_pending(self) -> bool:
        return self._autosave is not None and self._autosave.pending

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> WizardState:
        """
        Resume from storage.

        A saved draft replaces the default data. The step position is not
        saved, so the flow always resumes at step 0 unless the host calls
        set_step.
        """
        if self._store is None:
            return self.state
        try:
            snapshot = self._store.load()
        except Exception as e:
            logger.warning(f"Failed to load onboarding progress: {e}")
            return self.state
        if snapshot:
            self._state = transitions.load_progress(self._state, snapshot)
            logger.info("Resumed onboarding from saved progress")
        return self.state

    def close(self) -> None:
        """Cancel the pending auto-save so it cannot fire after teardown."""
        if self._autosave is not None:
            self._autosave.cancel()

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def update_data(self, partial: Mapping[str, Any]) -> WizardState:
        """Merge partial draft sections and schedule an auto-save."""
        if self._state.is_completed:
            logger.debug("Ignoring update on completed onboarding")
            return self.state
        self._state = transitions.update_data(self._state, partial)
        if self._autosave is not None:
            self._autosave.arm()
        return self.state

    async def next(self) -> WizardState:
        """Validate the current step, then advance or (on the last step) commit."""
        transition = transitions.next_step(self._state, self.steps)
        self._state = transition.state
        if self._state.error:
            logger.debug(f"Step {self._state.current_step} blocked: {self._state.error}")
        if transition.commit_required:
            return await self.complete()
        return self.state

    async def skip(self) -> WizardState:
        """Leave an optional step without validating it."""
        if not can_skip_step(self.steps, self._state.current_step):
            logger.info(f"Step {self._state.current_step} is not optional, skip ignored")
            return self.state
        transition = transitions.skip_step(self._state, self.steps)
        self._state = transition.state
        if transition.commit_required:
            return await self.complete()
        return self.state

    def previous(self) -> WizardState:
        self._state = transitions.previous_step(self._state)
        return self.state

    def set_step(self, step: int) -> WizardState:
        self._state = transitions.set_step(self._state, step)
        return self.state

    def clear_error(self) -> WizardState:
        self._state = transitions.clear_error(self._state)
        return self.state

    async def complete(self) -> WizardState:
        """
        Commit the draft to the profile store.

        A call made while a commit is already in flight is ignored, so at most
        one commit runs per wizard. On failure the error is shown and the
        flow stays on the last step for a retry.
        """
        if self._state.is_completed:
            return self.state
        if self._state.is_loading:
            logger.warning("Onboarding commit already in progress, ignoring")
            return self.state

        self._state = transitions.begin_commit(self._state)
        data = copy.deepcopy(self._state.data)
        try:
            await self._committer.commit(data)
        except asyncio.CancelledError:
            self._state = transitions.commit_failed(self._state, DEFAULT_COMMIT_ERROR)
            raise
        except Exception as e:
            message = str(e) or DEFAULT_COMMIT_ERROR
            logger.error(f"Onboarding commit failed: {message}")
            self._state = transitions.commit_failed(self._state, message)
            return self.state

        self._state = transitions.commit_succeeded(self._state)
        self.close()
        self.clear_progress()
        logger.info("Onboarding completed")
        return self.state

    def reset(self) -> WizardState:
        """Start over with a fresh draft and forget saved progress."""
        if self._state.is_loading:
            logger.warning("Onboarding commit in progress, reset ignored")
            return self.state
        self.close()
        self._state = transitions.reset_state(self._state)
        self.clear_progress()
        return self.state

    def set_total_steps(self, total_steps: int) -> WizardState:
        """Change the step count. Test and harness configuration only."""
        self._state = transitions.set_total_steps(self._state, total_steps)
        return self.state

    # -------------------------------------------------------------------------
    # Persistence
    # -------------------------------------------------------------------------

    def save_progress(self) -> None:
        """Write the current draft to the store now."""
        if self._store is None:
            return
        try:
            self._store.save(build_snapshot(self._state.data))
        except Exception as e:
            logger.warning(f"Failed to save onboarding progress: {e}")

    def clear_progress(self) -> None:
        if self._store is None:
            return
        try:
            self._store.clear()
        except Exception as e:
            logger.warning(f"Failed to clear onboarding progress: {e}")
