from datetime import timedelta
from typing import Final

# Earth compositor API
DEFAULT_BASE_URL: Final = "https://daynight.sdmn.eu"
COMPOSITE_ENDPOINT: Final = "/api/v1/composite"

# Image generation is slow server-side
REQUEST_TIMEOUT_SECONDS: Final = 120
RESOURCE_TIMEOUT_SECONDS: Final = 180

# The API allows one request per minute per token
MIN_REFRESH_MINUTES: Final = 1

# Managed wallpaper files
WALLPAPER_DIR_NAME: Final = "LiveEarthWallpaper"
WALLPAPER_PREFIX: Final = "earth_wallpaper_"
WALLPAPER_SUFFIX: Final = ".jpg"
PERSIST_JPEG_QUALITY: Final = 90

# Age after which persisted wallpapers are deleted
STALE_FILE_AGE: Final = timedelta(hours=24)
