"""Live Earth Wallpaper CLI application.

This module provides the command-line interface for the wallpaper
refresher: the long-running scheduler, one-shot refreshes, cleanup of
old wallpaper files, and configuration utilities.
"""

from __future__ import annotations

import logging
import signal
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Final

import typer
import yaml
from pydantic import ValidationError

from liveearth.controller import EarthWallpaper
from liveearth.display import UiThread, create_desktop
from liveearth.notifications import ConsoleListener, FanOutListener, LoggingListener
from liveearth.scheduling import Scheduler
from liveearth.settings.application import AppPaths
from liveearth.settings.user import UserSettings
from liveearth.wallpaper.reaper import reap

# ── CLI setup ────────────────────────────────────────────────────────────────
app = typer.Typer(help="Live Earth Wallpaper CLI", add_completion=False)
config_app = typer.Typer(help="Config helpers")
app.add_typer(config_app, name="config")

logger: Final = logging.getLogger(__name__)  # Will be "liveearth.cli"

# Options for the main command
CONFIG_OPTION = typer.Option(..., "--config", "-c", exists=True, dir_okay=False)
DEBUG_OPTION = typer.Option(False, "--debug", help="Enable debug logging")
DST_ARGUMENT = typer.Argument(..., help="Output config.yaml")
ONCE_OPTION = typer.Option(False, "--once", "-1", help="Run one cycle then exit")
AT_OPTION = typer.Option(None, "--at", help="Render the Earth at this ISO datetime")
MAX_AGE_OPTION = typer.Option(24.0, "--max-age-hours", min=0.0, help="Delete files older than this")
DIR_OPTION = typer.Option(None, "--dir", file_okay=False, help="Wallpaper directory to clean")


def _create_controller(config: Path, debug: bool, ui_thread: UiThread) -> EarthWallpaper:
    try:
        return EarthWallpaper.from_config(
            config,
            create_desktop(),
            ui_thread=ui_thread,
            listener=FanOutListener(LoggingListener(), ConsoleListener()),
            debug=debug,
        )
    except RuntimeError as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc


@app.command()
def run(
    config: Path = CONFIG_OPTION,
    once: bool = ONCE_OPTION,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Keep the desktop wallpaper updated until interrupted."""
    # The main thread owns every display change
    ui_thread = UiThread(dedicated=False)
    controller = _create_controller(config, debug, ui_thread)
    controller.start_housekeeping()

    if once:
        ok = controller.refresh()
        controller.stop_housekeeping()
        if not ok:
            raise typer.Exit(code=1)
        return

    scheduler = Scheduler(controller, listener=controller.listener)
    scheduler.attach(controller.store)
    controller.store.subscribe(lambda _settings: controller.start_housekeeping())
    scheduler.trigger_manual()

    if hasattr(signal, "SIGHUP"):

        def _reload(signum: int, frame: object) -> None:
            try:
                if controller.store.reload(config):
                    logger.info("Configuration reloaded from %s", config)
            except (FileNotFoundError, RuntimeError) as exc:
                logger.error("Keeping previous configuration: %s", exc)

        signal.signal(signal.SIGHUP, _reload)

    typer.echo("Live Earth Wallpaper running - press Ctrl+C to quit")
    try:
        ui_thread.run_forever()
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")
    finally:
        scheduler.shutdown()
        controller.stop_housekeeping()
        ui_thread.stop()


@app.command()
def refresh(
    config: Path = CONFIG_OPTION,
    at: datetime | None = AT_OPTION,
    debug: bool = DEBUG_OPTION,
) -> None:
    """Fetch one composite and set it as wallpaper now."""
    controller = _create_controller(config, debug, UiThread(dedicated=False))
    if not controller.refresh(at=at):
        raise typer.Exit(code=1)


@app.command()
def cleanup(
    max_age_hours: float = MAX_AGE_OPTION,
    directory: Path | None = DIR_OPTION,
) -> None:
    """Delete saved wallpapers older than the given age."""
    target = directory or AppPaths.from_temp_dir().wallpaper_dir
    removed = reap(target, timedelta(hours=max_age_hours))
    typer.echo(f"Removed {len(removed)} file(s) from {target}")


# ───────────────────────── config sub-commands ───────────────────────────────
@config_app.command("validate")
def validate_config(file: Path):
    """Validate a YAML config file against the schema."""
    try:
        cfg = UserSettings.load(file)
        typer.echo("✅ Config valid")
        if not cfg.has_token:
            typer.secho("No API token set; automatic refresh is disabled", fg=typer.colors.YELLOW)
    except (FileNotFoundError, RuntimeError) as exc:
        typer.secho(str(exc), fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc


@config_app.command("wizard")
def wizard(dst: Path = DST_ARGUMENT):
    """Interactive prompt to create a config file."""
    typer.echo("Interactive config builder - press Enter for defaults.")

    while True:
        data: dict[str, Any] = {
            "api_token": typer.prompt("API token", hide_input=True, default="", show_default=False),
            "marine": typer.confirm("Shade ocean depth", default=True),
            "twilight_angle": typer.prompt("Twilight angle (0-18)", default=6.0, type=float),
            "image_size": typer.prompt("Image size [small|medium|large|full]", default="large"),
            "quality": typer.prompt("JPEG quality (0-100)", default=90, type=int),
            "refresh_minutes": typer.prompt("Refresh interval (minutes)", default=60, type=int),
        }
        try:
            cfg = UserSettings(**data)
            break  # valid → exit loop
        except ValidationError as err:
            typer.secho("\nConfig error(s):", fg=typer.colors.RED, err=True)
            for e in err.errors():
                typer.secho(f"  • {e['loc'][0]} - {e['msg']}", fg=typer.colors.RED, err=True)
            typer.echo("Please re-enter the values.\n")

    dst.write_text(
        yaml.safe_dump(cfg.model_dump(exclude_none=True), sort_keys=False), encoding="utf-8"
    )
    typer.secho(f"Config written to {dst}", fg=typer.colors.GREEN)


# ───────────────────────── module entrypoint ────────────────────────────────
if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        sys.exit(0)
