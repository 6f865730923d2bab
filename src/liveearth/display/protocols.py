# src/liveearth/display/protocols.py
from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class DisplayInfo:
    """One active display as reported by the desktop backend."""

    id: str
    name: str = ""
    width: int | None = None
    height: int | None = None
    x: int = 0
    y: int = 0

    def __str__(self) -> str:
        return self.name or self.id


@runtime_checkable
class Desktop(Protocol):
    """Protocol defining the interface for desktop backends.

    This protocol abstracts the platform-specific details of enumerating
    displays and changing their background so the applicator can work with
    any desktop environment.

    ``set_background`` must only be called on the UI thread; backends are
    free to assume it.
    """

    def active_displays(self) -> list[DisplayInfo]:
        """Return the currently active displays.

        Returns:
            Displays in a stable order (empty if none are connected)
        """
        ...

    def set_background(self, display: DisplayInfo, image_path: Path) -> None:
        """Show ``image_path`` on ``display``, scaled to fill and cropped.

        Args:
            display: Target display
            image_path: Fully written image file

        Raises:
            Exception: Any backend failure for this display
        """
        ...


class MockDesktop:
    """Mock implementation of Desktop for testing."""

    def __init__(self, displays: list[DisplayInfo] | None = None):
        self.displays = (
            list(displays) if displays is not None else [DisplayInfo("display-1", "Display 1")]
        )
        self.background_calls: list[dict[str, object]] = []

    def active_displays(self) -> list[DisplayInfo]:
        """Return the configured displays."""
        return list(self.displays)

    def set_background(self, display: DisplayInfo, image_path: Path) -> None:
        """Record the call without touching the real desktop."""
        self.background_calls.append(
            {
                "display": display,
                "image_path": image_path,
                "thread": threading.current_thread().name,
                "file_exists": image_path.exists(),
            }
        )

    def updated_display_ids(self) -> list[str]:
        """Ids of displays that received a background, in call order."""
        return [call["display"].id for call in self.background_calls]  # type: ignore[attr-defined]

    def reset_call_history(self) -> None:
        """Reset the call history for testing."""
        self.background_calls = []


class ErrorSimulatingDesktop(MockDesktop):
    """Desktop mock that can simulate per-display failures."""

    def __init__(
        self,
        displays: list[DisplayInfo] | None = None,
        fail_on_displays: list[str] | None = None,
    ):
        """Initialize with optional displays that should fail.

        Args:
            displays: Displays to report
            fail_on_displays: Ids of displays whose set_background raises
        """
        super().__init__(displays)
        self.fail_on_displays = fail_on_displays or []

    def set_background(self, display: DisplayInfo, image_path: Path) -> None:
        """Either record the call or raise an exception based on configuration."""
        if display.id in self.fail_on_displays:
            raise RuntimeError(f"Simulated failure on {display.id}")
        super().set_background(display, image_path)


def create_mock_desktop(count: int = 1) -> MockDesktop:
    """Create a mock desktop with ``count`` displays."""
    return MockDesktop([DisplayInfo(f"display-{i}", f"Display {i}") for i in range(1, count + 1)])


def create_error_simulating_desktop(
    count: int = 1, fail_on_displays: list[str] | None = None
) -> ErrorSimulatingDesktop:
    """Create a desktop whose listed displays fail."""
    displays = [DisplayInfo(f"display-{i}", f"Display {i}") for i in range(1, count + 1)]
    return ErrorSimulatingDesktop(displays, fail_on_displays)


def assert_background_set(
    mock_desktop: MockDesktop,
    display_id: str,
    expected_image_path: Path | None = None,
) -> bool:
    """Assert that a display received a background.

    Args:
        mock_desktop: The mock desktop instance
        display_id: Display that should have been updated
        expected_image_path: The expected image path (None skips the check)

    Returns:
        True if the assertion passes, raises AssertionError otherwise
    """
    calls = [c for c in mock_desktop.background_calls if c["display"].id == display_id]  # type: ignore[attr-defined]
    assert calls, f"Background was not set on {display_id}"
    if expected_image_path is not None:
        assert calls[-1]["image_path"] == expected_image_path, (
            f"Expected {expected_image_path}, got {calls[-1]['image_path']}"
        )
    return True
