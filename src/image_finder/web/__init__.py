"""image-finder web interface."""

from .api import app

__all__ = ["app"]
