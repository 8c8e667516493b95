"""image-finder - search images by their AI generated sidecar metadata."""

__version__ = "0.1.0"
__author__ = "image-finder contributors"
__license__ = "MIT"

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    "__author__",
    "__license__",
]
