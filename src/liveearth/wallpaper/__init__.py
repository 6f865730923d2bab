"""Wallpaper package - persisting, applying and cleaning up wallpaper files."""

from .applicator import WallpaperApplicator
from .image import decode_base64, decode_image, encode_jpeg
from .reaper import StaleFileReaper, reap, reap_in_background

__all__ = [
    "StaleFileReaper",
    "WallpaperApplicator",
    "decode_base64",
    "decode_image",
    "encode_jpeg",
    "reap",
    "reap_in_background",
]
