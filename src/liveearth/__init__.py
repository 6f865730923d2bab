"""Live Earth Wallpaper - keeps the desktop background on the current day/night Earth."""

__version__ = "0.1.0"
