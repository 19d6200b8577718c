"""
WanderCrew - CLI Entry Point.

Usage:
    wandercrew onboard             Walk through onboarding in the terminal
    wandercrew validate FILE       Validate a profile JSON file
    wandercrew progress show       Show saved onboarding progress
    wandercrew progress clear      Discard saved onboarding progress
    wandercrew health              Check configuration
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Mapping

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

app = typer.Typer(
    name="wandercrew",
    help="WanderCrew - travel profile onboarding and validation.",
    add_completion=False,
)
progress_app = typer.Typer(help="Inspect or discard saved onboarding progress.")
app.add_typer(progress_app, name="progress")

console = Console()


@app.callback()
def main() -> None:
    """Configure logging from settings."""
    from wandercrew.config import settings

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _split_list(text: str) -> list[str]:
    return [item.strip() for item in text.split(",") if item.strip()]


def _file_store(user_id: str):
    from wandercrew.config import settings
    from onboarding.storage import FileProgressStore

    key = settings.onboarding_storage_key
    return FileProgressStore(
        settings.onboarding_progress_dir,
        key=f"{key}-{user_id}" if user_id else key,
    )


class PreviewCommitter:
    """Prints the profile that would be written instead of writing it."""

    async def commit(self, data: Mapping[str, Any]) -> None:
        from onboarding.commit import build_profile_update
        from onboarding.storage import to_jsonable

        update = to_jsonable(build_profile_update(data))
        console.print(Panel(json.dumps(update, indent=2), title="Profile (dry run)", border_style="cyan"))


# =============================================================================
# Onboarding
# =============================================================================

def _prompt_step(step_id: str, data: Mapping[str, Any]) -> dict:
    """Ask for the fields of one step, defaulting to what the draft already has."""
    from onboarding.draft import get_section

    if step_id == "personal-info":
        info = dict(get_section(data, "personal_info"))
        info["first_name"] = typer.prompt("First name", default=info.get("first_name") or "")
        info["last_name"] = typer.prompt("Last name", default=info.get("last_name") or "")
        info["phone_number"] = typer.prompt("Phone number", default=info.get("phone_number") or "", show_default=False)
        info["bio"] = typer.prompt("Short bio", default=info.get("bio") or "", show_default=False)
        return {"personal_info": info}

    if step_id == "travel-preferences":
        prefs = dict(get_section(data, "travel_preferences"))
        prefs["destinations"] = _split_list(
            typer.prompt("Destinations (comma separated)", default=", ".join(prefs.get("destinations") or []))
        )
        prefs["interests"] = _split_list(
            typer.prompt("Interests (comma separated)", default=", ".join(prefs.get("interests") or []))
        )
        budget = dict(prefs.get("budget_range") or {})
        budget["min"] = typer.prompt("Minimum budget", default=budget.get("min", 500), type=float)
        budget["max"] = typer.prompt("Maximum budget", default=budget.get("max", 2000), type=float)
        budget["currency"] = typer.prompt("Currency", default=budget.get("currency", "USD"))
        prefs["budget_range"] = budget
        return {"travel_preferences": prefs}

    setup = dict(get_section(data, "profile_setup"))
    links = dict(setup.get("social_links") or {})
    for name in ("website", "instagram", "twitter"):
        value = typer.prompt(name.capitalize(), default=links.get(name) or "", show_default=False)
        if value:
            links[name] = value
    if links:
        setup["social_links"] = links
    return {"profile_setup": setup}


@app.command()
def onboard(
    user_id: str = typer.Option("", "--user-id", "-u", help="Profile id to commit to"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the profile instead of writing it"),
) -> None:
    """Walk through onboarding in the terminal."""
    from onboarding.commit import SupabaseProfileCommitter
    from onboarding.wizard import OnboardingWizard

    committer = PreviewCommitter() if dry_run else SupabaseProfileCommitter(user_id)
    wizard = OnboardingWizard.from_settings(committer=committer, store=_file_store(user_id))
    wizard.start()

    console.print(Panel.fit(
        "[bold green]Welcome to WanderCrew![/bold green]\n"
        "Let's set up your profile to get started.",
        title="Onboarding",
        border_style="green",
    ))

    try:
        while not wizard.state.is_completed:
            state = wizard.state
            step = wizard.current_step_definition
            console.print(f"\n[bold]Step {state.current_step + 1}/{state.total_steps}: {step.title}[/bold]")
            console.print(f"[dim]{step.description}[/dim]")

            if step.is_optional and typer.confirm("Skip this step?", default=False):
                state = asyncio.run(wizard.skip())
            else:
                wizard.update_data(_prompt_step(step.id, state.data))
                state = asyncio.run(wizard.next())

            if state.error:
                console.print(f"[red]{state.error}[/red]")
                if state.current_step == state.total_steps - 1 and not typer.confirm("Try again?", default=True):
                    raise typer.Exit(1)
    except (KeyboardInterrupt, typer.Abort):
        wizard.save_progress()
        console.print("\n[dim]Progress saved. Run onboard again to resume.[/dim]")
        raise typer.Exit(1)
    finally:
        wizard.close()

    console.print("\n[green]Onboarding complete![/green]")


# =============================================================================
# Validation
# =============================================================================

@app.command()
def validate(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Profile JSON file"),
) -> None:
    """Validate a profile JSON file and report its completion."""
    from onboarding.validation import (
        calculate_profile_completion,
        format_validation_errors,
        get_validation_summary,
        validate_user_profile,
    )

    try:
        profile = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]❌ Invalid JSON: {e}[/red]")
        raise typer.Exit(2)
    if not isinstance(profile, dict):
        console.print("[red]❌ Profile must be a JSON object[/red]")
        raise typer.Exit(2)

    result = validate_user_profile(profile)
    completion = calculate_profile_completion(profile)

    if result.errors:
        table = Table(title="Errors")
        table.add_column("Field")
        table.add_column("Code")
        table.add_column("Message")
        for error, line in zip(result.errors, format_validation_errors(result.errors)):
            table.add_row(error.field, error.code.value, line)
        console.print(table)

    for warning in result.warnings:
        console.print(f"⚠️  {warning}")

    console.print(f"\nCompletion: {completion}%")
    if result.is_valid:
        console.print(f"[green]✅ {get_validation_summary(result)}[/green]")
    else:
        console.print(f"[red]❌ {get_validation_summary(result)}[/red]")
        raise typer.Exit(1)


# =============================================================================
# Saved Progress
# =============================================================================

@progress_app.command("show")
def progress_show(
    user_id: str = typer.Option("", "--user-id", "-u", help="Whose progress to show"),
) -> None:
    """Print the saved onboarding draft."""
    store = _file_store(user_id)
    snapshot = store.load()
    if snapshot is None:
        console.print("[dim]No saved onboarding progress.[/dim]")
        return
    console.print(Panel(json.dumps(snapshot, indent=2), title=str(store.path)))


@progress_app.command("clear")
def progress_clear(
    user_id: str = typer.Option("", "--user-id", "-u", help="Whose progress to clear"),
) -> None:
    """Delete the saved onboarding draft."""
    _file_store(user_id).clear()
    console.print("✅ Onboarding progress cleared")


# =============================================================================
# Diagnostics
# =============================================================================

@app.command()
def health() -> None:
    """Check configuration."""
    from wandercrew.config import get_settings

    console.print("\n[bold]WanderCrew Health Check[/bold]\n")

    try:
        settings = get_settings()
    except Exception as e:
        console.print(f"\n[red]❌ Configuration error: {e}[/red]")
        console.print("[dim]Make sure you have a .env file with required variables.[/dim]")
        raise typer.Exit(1)

    console.print("✅ Configuration loaded")
    console.print(f"   Environment: {settings.wandercrew_env}")
    console.print(f"   Log level: {settings.log_level}")
    console.print(f"   Onboarding store: {settings.onboarding_store}")

    if settings.supabase_url and settings.supabase_url.startswith("https://"):
        console.print("✅ Supabase URL configured")
    else:
        console.print("ℹ️  Supabase URL not configured (file and memory stores only)")


@app.command()
def version() -> None:
    """Show version information."""
    from wandercrew import __version__

    console.print(f"WanderCrew version {__version__}")


if __name__ == "__main__":
    app()
