"""Llanfair settings CLI.

This module provides the command-line interface to inspect and change the
global settings and the overrides of a run.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Final

import typer

from llanfair.settings import (
    SettingsError,
    SettingsPaths,
    SettingsService,
    Tier,
)

# ── CLI setup ────────────────────────────────────────────────────────────────
app = typer.Typer(help="Llanfair settings CLI", add_completion=False)
settings_app = typer.Typer(help="Inspect and change settings")
app.add_typer(settings_app, name="settings")

logger: Final = logging.getLogger(__name__)  # Will be "llanfair.cli"

HOME_OPTION = typer.Option(
    None, "--home", file_okay=False, help="Application home (default: $LLANFAIR_HOME or cwd)"
)
RUN_OPTION = typer.Option(None, "--run", "-r", file_okay=False, help="Run directory")
DEBUG_OPTION = typer.Option(False, "--debug", help="Enable debug logging")
LOCAL_OPTION = typer.Option(False, "--local", "-l", help="Override the value for the run only")
NAME_ARGUMENT = typer.Argument(..., help="Property name")
VALUE_ARGUMENT = typer.Argument(..., help="New value")


@dataclass
class CliOptions:
    home: Path | None
    run: Path | None


def _fail(message: str) -> typer.Exit:
    typer.secho(message, fg=typer.colors.RED, err=True)
    return typer.Exit(code=1)


def _open_settings(ctx: typer.Context) -> SettingsService:
    """Initialize the settings and load the overrides of the run."""
    options: CliOptions = ctx.obj
    try:
        paths = (
            SettingsPaths.from_base_dir(options.home)
            if options.home is not None
            else SettingsPaths.from_env()
        )
    except FileNotFoundError as exc:
        raise _fail(str(exc)) from exc

    settings = SettingsService(paths)
    if not settings.initialize():
        raise _fail(f"Unable to initialize settings from {paths.global_dir}")

    try:
        settings.load_run(options.run)
    except SettingsError as exc:
        raise _fail(str(exc)) from exc
    return settings


@app.callback()
def main(
    ctx: typer.Context,
    home: Path | None = HOME_OPTION,
    run: Path | None = RUN_OPTION,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Manage the global settings and the settings of a run."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    ctx.obj = CliOptions(home=home, run=run)


# ───────────────────────── settings sub-commands ─────────────────────────────
@settings_app.command("list")
def list_settings(ctx: typer.Context) -> None:
    """Show every property with its value and the tier supplying it."""
    settings = _open_settings(ctx)
    for name, value in settings.snapshot().items():
        typer.echo(f"{name:<18} {value!r:<24} {settings.source(name).value}")


@settings_app.command("get")
def get_setting(ctx: typer.Context, name: str = NAME_ARGUMENT) -> None:
    """Print the effective value of a property."""
    settings = _open_settings(ctx)
    try:
        typer.echo(settings.get(name))
    except SettingsError as exc:
        raise _fail(str(exc)) from exc


@settings_app.command("set")
def set_setting(
    ctx: typer.Context,
    name: str = NAME_ARGUMENT,
    value: str = VALUE_ARGUMENT,
    local: bool = LOCAL_OPTION,
) -> None:
    """Change a property, globally or for the run, and save."""
    settings = _open_settings(ctx)
    scope = Tier.LOCAL if local else Tier.GLOBAL
    try:
        settings.set(name, settings.registry[name].parse(value), scope)
    except SettingsError as exc:
        raise _fail(str(exc)) from exc

    settings.save()
    typer.secho(f"{name} set to {settings.get(name)!r} ({scope.value})", fg=typer.colors.GREEN)


@settings_app.command("unset")
def unset_setting(ctx: typer.Context, name: str = NAME_ARGUMENT) -> None:
    """Remove the run override of a property and save."""
    settings = _open_settings(ctx)
    try:
        settings.undefine(name)
    except SettingsError as exc:
        raise _fail(str(exc)) from exc

    settings.save()
    typer.echo(f"{name} is now {settings.get(name)!r} ({settings.source(name).value})")


@settings_app.command("unsaved")
def unsaved(ctx: typer.Context) -> None:
    """List the tier/category pairs holding unsaved changes."""
    for label in _open_settings(ctx).get_unsaved():
        typer.echo(label)


# ───────────────────────── module entrypoint ────────────────────────────────
if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        sys.exit(0)
