"""Allow ``python -m liveearth``."""

from liveearth.cli import app

if __name__ == "__main__":
    app()
