"""Wire models for the Earth compositor API."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Literal

from PIL import Image
from pydantic import BaseModel, ConfigDict, Field

from liveearth.settings.user import ImageSize, UserSettings

DATA_URI_PREFIX = "data:image/"


class CompositeRequest(BaseModel):
    """Body of ``POST /api/v1/composite``.

    ``at`` is serialized as ``datetime``; null lets the server use "now".
    Blur, output format and force-regenerate are fixed by the client.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    at: datetime | None = Field(None, alias="datetime")
    marine: bool = True
    twilight_angle: float = 6.0
    blur_radius: float = 0.0
    resize: ImageSize = "large"
    quality: int = 90
    output_format: Literal["jpeg"] = "jpeg"
    force: bool = False

    @classmethod
    def from_settings(cls, settings: UserSettings, at: datetime | None = None) -> CompositeRequest:
        """Build the request for one cycle from the user's settings."""
        return cls(
            at=at,
            marine=settings.marine,
            twilight_angle=settings.twilight_angle,
            resize=settings.image_size,
            quality=settings.quality,
        )

    def to_payload(self) -> dict[str, object]:
        """JSON-ready dict using the wire field names."""
        return self.model_dump(mode="json", by_alias=True)


class CompositeResponse(BaseModel):
    """Successful response body."""

    image_data: str = Field(..., description="Base64 JPEG, optionally as a data: URI")
    success: bool
    message: str = ""

    @property
    def base64_payload(self) -> str:
        """The base64 part of ``image_data`` with any data-URI prefix removed."""
        if self.image_data.startswith(DATA_URI_PREFIX):
            return self.image_data.split(",", 1)[1] if "," in self.image_data else ""
        return self.image_data


class APIErrorBody(BaseModel):
    """Structured error body returned with 4xx/5xx statuses."""

    error: str
    message: str
    retry_after: int | None = None


@dataclass
class CompositeImage:
    """A decoded composite and when it was fetched."""

    image: Image.Image
    fetched_at: datetime
    message: str = ""

    @property
    def size(self) -> tuple[int, int]:
        """Width and height in pixels."""
        return self.image.size
