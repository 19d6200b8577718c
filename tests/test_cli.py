"""Tests for the wandercrew command line."""

import json

import pytest
from typer.testing import CliRunner

from wandercrew import config
from wandercrew.config import get_settings
from wandercrew.main import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def progress_dir(monkeypatch, tmp_path):
    """Keep saved progress inside a temp directory."""
    monkeypatch.setenv("ONBOARDING_STORE", "file")
    monkeypatch.setenv("ONBOARDING_PROGRESS_DIR", str(tmp_path))
    get_settings.cache_clear()
    monkeypatch.setattr(config.settings, "_instance", None)
    yield tmp_path
    get_settings.cache_clear()


class TestValidateCommand:
    def test_valid_profile(self, tmp_path, sample_profile):
        path = tmp_path / "profile.json"
        path.write_text(json.dumps(sample_profile))

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 0
        assert "Completion: 89%" in result.output
        assert "Profile is valid" in result.output

    def test_invalid_profile(self, tmp_path):
        path = tmp_path / "profile.json"
        path.write_text(json.dumps({"id": "user-1", "email": "nope", "name": "Ada"}))

        result = runner.invoke(app, ["validate", str(path)])

        assert result.exit_code == 1
        assert "1 error and 1 warning" in result.output

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
    def test_unreadable_profile(self, tmp_path, content):
        path = tmp_path / "profile.json"
        path.write_text(content)
        assert runner.invoke(app, ["validate", str(path)]).exit_code == 2


class TestProgressCommands:
    def test_show_empty(self):
        result = runner.invoke(app, ["progress", "show"])
        assert result.exit_code == 0
        assert "No saved onboarding progress" in result.output

    def test_show_and_clear(self, progress_dir):
        path = progress_dir / "wandercrew-onboarding-progress-user-1.json"
        path.write_text(json.dumps({"personal_info": {"first_name": "Ada"}, "saved_at": "2026-01-01"}))

        shown = runner.invoke(app, ["progress", "show", "-u", "user-1"])
        assert shown.exit_code == 0
        assert "Ada" in shown.output
        assert "saved_at" not in shown.output

        cleared = runner.invoke(app, ["progress", "clear", "-u", "user-1"])
        assert cleared.exit_code == 0
        assert not path.exists()


class TestOnboardCommand:
    def test_dry_run_walkthrough(self, progress_dir):
        answers = "\n".join([
            "Ada",              # first name
            "Lovelace",         # last name
            "",                 # phone
            "",                 # bio
            "Lisbon, Tokyo",    # destinations
            "food",             # interests
            "",                 # min budget
            "",                 # max budget
            "",                 # currency
            "y",                # skip profile setup
        ]) + "\n"

        result = runner.invoke(app, ["onboard", "--dry-run", "-u", "user-1"], input=answers)

        assert result.exit_code == 0, result.output
        assert "Ada Lovelace" in result.output
        assert "Onboarding complete!" in result.output
        assert list(progress_dir.glob("*.json")) == []

    def test_interrupt_saves_progress(self, progress_dir):
        # Input ends after the first name, so the next prompt aborts
        result = runner.invoke(app, ["onboard", "--dry-run", "-u", "user-1"], input="Ada\n")

        assert result.exit_code == 1
        saved = json.loads((progress_dir / "wandercrew-onboarding-progress-user-1.json").read_text())
        assert saved["personal_info"]["first_name"] == ""
        assert "Progress saved" in result.output


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "1.0.0" in result.output
