"""Exception classes for wallpaper refresh cycles.

This module defines a hierarchy of exception classes for handling the
error conditions of a refresh cycle: talking to the Earth compositor API,
decoding its payload, persisting the image and applying it to displays.
Every class carries a human-readable ``message`` suitable for the status
line; the original exception is kept in ``original_error`` for diagnostics.
"""

from __future__ import annotations

from typing import Dict, Literal, Optional

from typing_extensions import TypedDict

NetworkErrorKind = Literal["dns", "timeout", "connection", "other"]


class ErrorPayload(TypedDict, total=False):
    """Structured error body returned by the compositor API."""

    error: str
    message: str
    retry_after: Optional[int]


class RefreshError(Exception):
    """Base class for every failure that ends a refresh cycle."""

    def __init__(self, message: str, original_error: Optional[BaseException] = None) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message
            original_error: The underlying exception, if any
        """
        super().__init__(message)
        self.message: str = message
        self.original_error = original_error


class NoConnectivityError(RefreshError):
    """Raised when the connectivity precheck finds no usable network path."""

    def __init__(self, message: str = "No internet connection available") -> None:
        super().__init__(message)


class NetworkError(RefreshError):
    """Raised when a transport-level issue prevents API communication."""

    def __init__(
        self,
        message: str,
        original_error: Optional[BaseException] = None,
        kind: NetworkErrorKind = "other",
    ) -> None:
        """Initialize with network error details.

        Args:
            message: Description of the network error
            original_error: The original exception that was caught
            kind: Failure family, used only to pick the message
        """
        super().__init__(message, original_error)
        self.kind: NetworkErrorKind = kind


class MalformedResponseError(RefreshError):
    """Raised when a 2xx body cannot be parsed or its image cannot be decoded."""


class CompositeAPIError(RefreshError):
    """Error status returned by the Earth compositor API."""

    def __init__(
        self, code: int, message: str, response: Optional[ErrorPayload] = None
    ) -> None:
        """Initialize the exception.

        Args:
            code: HTTP status code
            message: Human-readable error message
            response: Optional parsed error body for debugging
        """
        super().__init__(message)
        self.code: int = code
        self.response: Optional[ErrorPayload] = response

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    @property
    def is_client_error(self) -> bool:
        """Check if this is a client-side error (4xx).

        Returns:
            True for 400-499 status codes
        """
        return 400 <= self.code < 500

    @property
    def is_server_error(self) -> bool:
        """Check if this is a server-side error (5xx).

        Returns:
            True for 500-599 status codes
        """
        return self.code >= 500

    @classmethod
    def from_response(
        cls, response: Optional[ErrorPayload], status_code: int
    ) -> CompositeAPIError:
        """Create an error from an error status and its (optional) body.

        Args:
            response: Structured error body ``{error, message, retry_after}``
                or None when the body was absent or unparseable
            status_code: HTTP status code

        Returns:
            Appropriate CompositeAPIError subclass
        """
        if status_code == 429:
            if response is None:
                return RateLimitError(status_code, "Rate limit exceeded")
            return RateLimitError(
                status_code,
                f"Rate limit exceeded: {response.get('message', '')}",
                response,
                retry_after=response.get("retry_after"),
            )
        if response is None:
            return HttpError(status_code, f"Server error: HTTP {status_code}")
        return ApiError(status_code, f"API error: {response.get('message', '')}", response)


class RateLimitError(CompositeAPIError):
    """Raised when the per-token rate limit is exceeded (HTTP 429)."""

    def __init__(
        self,
        code: int,
        message: str,
        response: Optional[ErrorPayload] = None,
        retry_after: Optional[int] = None,
    ) -> None:
        super().__init__(code, message, response)
        self.retry_after: Optional[int] = retry_after


class ApiError(CompositeAPIError):
    """Raised for error statuses that carry a structured error body."""

    pass


class HttpError(CompositeAPIError):
    """Raised for error statuses without a usable error body."""

    pass


class ImagePersistError(RefreshError):
    """Raised when the wallpaper image cannot be encoded or written."""

    def __init__(
        self,
        message: str = "Failed to save wallpaper image to temporary location",
        original_error: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message, original_error)


class DisplayEnumerationError(RefreshError):
    """Raised when the desktop backend cannot list the active displays."""

    def __init__(self, original_error: Optional[BaseException] = None) -> None:
        super().__init__(f"Failed to list screens: {original_error}", original_error)


class NoDisplaysFoundError(RefreshError):
    """Raised when no active display is available."""

    def __init__(self, message: str = "No screens found to set wallpaper") -> None:
        super().__init__(message)


class WallpaperApplyError(RefreshError):
    """Raised when at least one display rejected the new background.

    Displays that succeeded keep their new image. ``original_error`` is the
    first per-display failure; ``errors`` keeps all of them keyed by display id.
    """

    def __init__(self, errors: Dict[str, Exception]) -> None:
        """Initialize with the per-display failures.

        Args:
            errors: Mapping of display id to the exception it raised,
                in the order the displays were processed
        """
        first = next(iter(errors.values()), None)
        message = str(first) if first is not None else "Failed to set desktop wallpaper"
        super().__init__(message, first)
        self.errors: Dict[str, Exception] = dict(errors)

    @property
    def failed_displays(self) -> list[str]:
        """Ids of the displays that failed, in processing order."""
        return list(self.errors)
