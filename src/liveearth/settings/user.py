"""User-configurable settings loaded from config.yaml."""

from __future__ import annotations

import os
import re
from datetime import timedelta
from pathlib import Path
from typing import ClassVar, Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from liveearth.constants import DEFAULT_BASE_URL, MIN_REFRESH_MINUTES

# Load environment variables from .env file(s)
load_dotenv()

ImageSize = Literal["small", "medium", "large", "full"]


def _interpolate_env(content: str) -> str:
    return re.sub(r"\$\{(\w+)\}", lambda m: os.getenv(m.group(1), ""), content)


class UserSettings(BaseModel):
    """Refresh configuration for the wallpaper.

    One immutable snapshot is read at the start of every refresh cycle.
    A missing or blank ``api_token`` disables automatic refreshes.
    """

    model_config = ConfigDict(frozen=True)

    # Default search paths for configuration
    DEFAULT_CONFIG_PATHS: ClassVar[list[Path]] = [
        Path("config.yaml"),
        Path("~/.config/liveearth/config.yaml").expanduser(),
        Path("/etc/liveearth/config.yaml"),
    ]

    # API settings
    api_token: str | None = Field(None, description="Bearer token for the compositor API")
    base_url: str = Field(DEFAULT_BASE_URL, description="Compositor API base URL")

    # Earth settings
    marine: bool = Field(True, description="Shade ocean depth (marine bathymetry)")
    twilight_angle: float = Field(
        6.0, ge=0.0, le=18.0, description="Solar depression of the twilight band (degrees)"
    )

    # Image settings
    image_size: ImageSize = "large"
    quality: int = Field(90, ge=0, le=100, description="JPEG quality requested from the API")

    # Schedule settings
    refresh_minutes: int = Field(
        60,
        ge=MIN_REFRESH_MINUTES,
        description="Auto refresh interval (minutes); the API allows 1 request/minute",
    )

    # Housekeeping
    cleanup_hours: float = Field(24.0, gt=0, description="Delete saved wallpapers older than this")
    cleanup_interval_minutes: int = Field(
        60, ge=1, description="How often old wallpapers are swept (minutes)"
    )

    # ---- validators ----
    @field_validator("api_token", mode="before")
    @classmethod
    def blank_token_is_none(cls, v: object) -> object:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    # ---- convenience properties ----
    @property
    def has_token(self) -> bool:
        """Whether an API token is configured."""
        return self.api_token is not None

    @property
    def refresh_interval(self) -> timedelta:
        """Auto refresh interval as a timedelta."""
        return timedelta(minutes=self.refresh_minutes)

    @property
    def cleanup_age(self) -> timedelta:
        """Maximum age of saved wallpapers as a timedelta."""
        return timedelta(hours=self.cleanup_hours)

    @property
    def masked_token(self) -> str:
        """Token prefix safe for log output."""
        if not self.api_token:
            return "<none>"
        return f"{self.api_token[:6]}..."

    @classmethod
    def load(cls, path: Path | None = None) -> UserSettings:
        """Load configuration from a YAML file.

        Args:
            path: Path to config file (optional, searches default locations if None)

        Returns:
            Validated UserSettings object

        Raises:
            FileNotFoundError: If no config file is found
            RuntimeError: If the config file cannot be parsed or is invalid
        """
        # Try to find config file
        if path is None:
            # Check environment variable first
            env_path = os.environ.get("LIVEEARTH_CONFIG")
            if env_path:
                path = Path(env_path)
                if not path.exists():
                    raise FileNotFoundError(f"Config file from LIVEEARTH_CONFIG not found: {path}")
            else:
                # Try default paths
                for default_path in cls.DEFAULT_CONFIG_PATHS:
                    if default_path.exists():
                        path = default_path
                        break
                else:
                    raise FileNotFoundError(
                        "No configuration file found. Create config.yaml or set LIVEEARTH_CONFIG."
                    )

        # Load and parse config
        import yaml  # local import to avoid hard dep for callers

        try:
            raw = _interpolate_env(path.read_text())
            data = yaml.safe_load(raw) or {}
        except Exception as exc:
            raise RuntimeError(f"Unable to read config YAML: {exc}") from exc

        try:
            return cls.model_validate(data)
        except ValidationError as err:
            raise RuntimeError(f"Invalid configuration:\n{err}") from err
