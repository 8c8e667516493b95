"""Image metadata search engine."""

from .criteria import FilterCriteria, GeoLocation, NumericRange
from .errors import (
    ExifExtractionError,
    ImageSearchError,
    InvalidCriteriaError,
    MetadataParseError,
    MissingInputError,
)
from .finder import ImageFinder, SearchContext, find_images
from .models import MediaItem

__all__ = [
    "FilterCriteria",
    "GeoLocation",
    "NumericRange",
    "ImageFinder",
    "SearchContext",
    "find_images",
    "MediaItem",
    "ImageSearchError",
    "MissingInputError",
    "MetadataParseError",
    "ExifExtractionError",
    "InvalidCriteriaError",
]
