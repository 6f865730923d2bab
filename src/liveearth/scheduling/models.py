"""Data models for scheduling."""

from __future__ import annotations

from enum import Enum


class ScheduleState(Enum):
    """Refresh scheduler states.

    RUNNING wins over SCHEDULED: a cycle can be in flight while the timer
    stays armed.
    """

    IDLE = "idle"  # no timer armed, nothing running
    SCHEDULED = "scheduled"  # timer armed, next fire time known
    RUNNING = "running"  # a fetch+apply cycle is in flight
