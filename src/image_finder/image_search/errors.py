"""Exceptions raised by the image search engine."""


class ImageSearchError(Exception):
    """Base class for image search errors."""


class MissingInputError(ImageSearchError):
    """A directory or image file does not exist or cannot be read."""


class MetadataParseError(ImageSearchError):
    """A sidecar metadata blob could not be parsed."""

    def __init__(self, path: str, category: str, reason: str):
        self.path = path
        self.category = category
        self.reason = reason
        super().__init__(f"Invalid {category} metadata for {path}: {reason}")


class ExifExtractionError(ImageSearchError):
    """EXIF data could not be extracted from an image."""


class InvalidCriteriaError(ImageSearchError, ValueError):
    """Filter criteria failed validation."""
