"""Basic health check tests."""


def test_import_wandercrew():
    """Test that wandercrew package can be imported."""
    import wandercrew
    assert wandercrew.__version__ == "1.0.0"


def test_import_onboarding():
    """Test that the onboarding public API can be imported."""
    from onboarding import (
        ONBOARDING_STEPS,
        OnboardingWizard,
        WizardState,
        validate_field,
    )

    assert len(ONBOARDING_STEPS) == 3
    assert WizardState().total_steps == 1
    assert OnboardingWizard is not None
    assert validate_field("email", "ada@example.com") is None


def test_settings_defaults():
    """Test that settings load with the test environment."""
    from wandercrew.config import Settings

    settings = Settings(_env_file=None)
    assert settings.onboarding_store == "memory"
    assert settings.onboarding_autosave is True
    assert settings.is_development


def test_service_client_requires_configuration(monkeypatch):
    """Test that the Supabase client refuses to start without credentials."""
    import pytest
    from wandercrew.config import Settings
    from wandercrew.db import client

    monkeypatch.setattr(client, "_service_client", None)
    monkeypatch.setattr(client, "settings", Settings(_env_file=None, supabase_url=None))

    with pytest.raises(RuntimeError, match="SUPABASE_URL is not configured"):
        client.get_service_client()
