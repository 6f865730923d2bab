"""Client for the Earth compositor API."""

from __future__ import annotations

import logging
import socket
from datetime import datetime
from typing import Any, Final, cast
from urllib.parse import urlparse

import requests
from PIL import Image
from pydantic import ValidationError

from liveearth.composite.connectivity import Connectivity, create_connectivity
from liveearth.composite.models import (
    APIErrorBody,
    CompositeImage,
    CompositeRequest,
    CompositeResponse,
)
from liveearth.constants import (
    COMPOSITE_ENDPOINT,
    REQUEST_TIMEOUT_SECONDS,
    RESOURCE_TIMEOUT_SECONDS,
)
from liveearth.errors import (
    CompositeAPIError,
    ErrorPayload,
    MalformedResponseError,
    NetworkError,
    NetworkErrorKind,
    NoConnectivityError,
    RefreshError,
)
from liveearth.settings.user import UserSettings
from liveearth.utils.time import TimeUtils
from liveearth.wallpaper.image import decode_base64, decode_image

logger = logging.getLogger(__name__)

# Connect gets whatever the overall budget leaves after the read timeout
DEFAULT_TIMEOUT: Final = (
    RESOURCE_TIMEOUT_SECONDS - REQUEST_TIMEOUT_SECONDS,
    REQUEST_TIMEOUT_SECONDS,
)

# Resolver messages that show up in requests/urllib3 error text
_DNS_MARKERS: Final = (
    "Failed to resolve",
    "Name or service not known",
    "nodename nor servname",
    "getaddrinfo failed",
    "Temporary failure in name resolution",
)


class CompositeAPI:
    """Earth compositor API client.

    Performs one authenticated ``POST /api/v1/composite`` per call and turns
    the response into a decoded image. There is no retry here: every failure
    is raised as a RefreshError subclass and the caller decides what's next.
    """

    def __init__(
        self,
        connectivity: Connectivity | None = None,
        timeout: tuple[float, float] = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the compositor client.

        Args:
            connectivity: Advisory network checks (default: socket based)
            timeout: ``(connect, read)`` timeouts in seconds
        """
        self.connectivity = connectivity or create_connectivity()
        self.timeout = timeout
        self.last_update_time: datetime | None = None

    def fetch(self, config: UserSettings, at: datetime | None = None) -> CompositeImage:
        """Generate and download a composite for the given settings.

        Args:
            config: Settings snapshot for this cycle
            at: Point in time to render (None means "now" on the server)

        Returns:
            Decoded composite with its fetch timestamp

        Raises:
            NoConnectivityError: When there is no usable network path
            NetworkError: On DNS, timeout or connection failures
            CompositeAPIError: RateLimitError, ApiError or HttpError for error statuses
            MalformedResponseError: When a 2xx body or its image cannot be decoded
        """
        if not config.api_token:
            raise RefreshError("Please configure your API token in settings first.")

        url = f"{config.base_url}{COMPOSITE_ENDPOINT}"
        if not self.connectivity.is_online(url):
            logger.warning("No network path available; skipping composite request")
            raise NoConnectivityError()

        host = urlparse(url).hostname or ""
        self.connectivity.check_endpoint(host)

        request = CompositeRequest.from_settings(config, at)
        headers = {
            "Authorization": f"Bearer {config.api_token}",
            "Content-Type": "application/json",
        }

        logger.info(
            "Requesting composite (size=%s, marine=%s, twilight=%.1f°, quality=%d)",
            request.resize,
            request.marine,
            request.twilight_angle,
            request.quality,
        )
        logger.debug("POST %s with token %s", url, config.masked_token)

        try:
            resp = requests.post(url, json=request.to_payload(), headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise self._network_error(exc, host) from exc

        if not 200 <= resp.status_code < 300:
            err = CompositeAPIError.from_response(self._error_body(resp), resp.status_code)
            logger.error("Compositor API error: %s", err)
            raise err

        image, message = self._decode_response(resp)
        self.last_update_time = TimeUtils.now_localized()
        return CompositeImage(image=image, fetched_at=self.last_update_time, message=message)

    # Private helper methods
    def _decode_response(self, resp: requests.Response) -> tuple[Image.Image, str]:
        """Parse the JSON body and decode its base64 image."""
        try:
            body = CompositeResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            logger.error("Could not parse composite response: %s", exc)
            raise MalformedResponseError(f"Failed to parse response: {exc}", exc) from exc

        if not body.success:
            logger.warning("Compositor reported success=false: %s", body.message)

        try:
            raw = decode_base64(body.base64_payload)
            image = decode_image(raw)
        except ValueError as exc:
            logger.error("Could not decode composite image: %s", exc)
            raise MalformedResponseError("Failed to decode image data", exc) from exc

        logger.info("Received %dx%d composite (%d bytes)", *image.size, len(raw))
        return image, body.message

    @staticmethod
    def _error_body(resp: requests.Response) -> ErrorPayload | None:
        """Parse a structured error body, or None if there isn't one."""
        try:
            return cast(ErrorPayload, APIErrorBody.model_validate(resp.json()).model_dump())
        except (ValueError, ValidationError):
            return None

    @staticmethod
    def _network_error(exc: requests.RequestException, host: str) -> NetworkError:
        """Classify a transport failure and pick its user-facing message."""
        kind: NetworkErrorKind
        if isinstance(exc, requests.Timeout):
            kind = "timeout"
            msg = "Request timed out. The server may be busy, please try again."
        elif isinstance(exc, requests.ConnectionError) and _is_dns_failure(exc):
            kind = "dns"
            msg = f"Cannot reach {host}. Please check your internet connection and try again."
        elif isinstance(exc, requests.ConnectionError):
            kind = "connection"
            msg = "Network connection failed. Please check your internet connection."
        else:
            kind = "other"
            msg = f"Connection error: {exc}"
        logger.warning("Compositor network error (%s): %s", kind, exc)
        return NetworkError(msg, exc, kind=kind)


def _is_dns_failure(exc: BaseException) -> bool:
    """Look through an exception chain for a resolver failure."""
    seen: set[int] = set()
    pending: list[Any] = [exc]
    while pending:
        current = pending.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, socket.gaierror):
            return True
        if isinstance(current, BaseException):
            if any(marker in str(current) for marker in _DNS_MARKERS):
                return True
            pending.extend(current.args)
            pending.append(current.__cause__)
            pending.append(current.__context__)
            pending.append(getattr(current, "reason", None))
    return False
