# src/liveearth/utils/time.py
"""Time and date handling utilities."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta


class TimeUtils:
    """Time-related utility functions.

    Centralized utilities for working with dates and times:
    - Current time retrieval with proper timezone handling
    - Epoch seconds for file naming
    - Human-readable countdowns
    """

    @staticmethod
    def now_localized() -> datetime:
        """Get current datetime with local timezone.

        Returns:
            Current datetime with local timezone
        """
        return datetime.now(UTC).astimezone()

    @staticmethod
    def datetime_to_epoch(dt: datetime) -> int:
        """Convert datetime to epoch seconds.

        Args:
            dt: Datetime object (assumes UTC timezone if not specified)

        Returns:
            Epoch seconds as integer
        """
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return int(dt.timestamp())

    @staticmethod
    def format_countdown(delta: timedelta) -> str:
        """Format the time remaining until an event.

        Args:
            delta: Remaining time (negative values count as zero)

        Returns:
            Formatted countdown (e.g., "1h 05m", "4m 30s")
        """
        seconds = max(int(delta.total_seconds()), 0)
        hours, remainder = divmod(seconds, 3600)
        minutes, secs = divmod(remainder, 60)
        if hours:
            return f"{hours}h {minutes:02d}m"
        return f"{minutes}m {secs:02d}s"
