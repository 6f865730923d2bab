"""Scheduler package for the Live Earth Wallpaper application."""

from liveearth.scheduling.models import ScheduleState
from liveearth.scheduling.scheduler import Refresher, Scheduler
from liveearth.scheduling.timer import RepeatingTimer, TimerFactory, TimerHandle

__all__ = [
    "Refresher",
    "RepeatingTimer",
    "ScheduleState",
    "Scheduler",
    "TimerFactory",
    "TimerHandle",
]
