"""Common utility functions and helpers for the liveearth package."""

from liveearth.utils.file import ensure_directory_exists, write_file_durably
from liveearth.utils.time import TimeUtils

__all__ = [
    "TimeUtils",
    "ensure_directory_exists",
    "write_file_durably",
]
