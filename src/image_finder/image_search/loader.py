"""Loads per-image sidecar metadata into MediaItem records."""

import json
import logging
import sqlite3
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from . import config
from .base import SidecarStore
from .errors import ExifExtractionError, MetadataParseError, MissingInputError
from .exif import ExifExtractor, read_dimensions
from .models import Description, ExifData, MediaItem, Objects, People, Scenes

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MetadataLoader:
    """Builds a MediaItem from an image path with best-effort metadata.

    Every sidecar category is loaded on its own: a corrupt or missing blob
    yields that category's empty default and never affects the others.
    """

    def __init__(
        self,
        store: SidecarStore,
        extractor: Optional[ExifExtractor] = None,
        language: Optional[str] = None,
    ):
        self.store = store
        self.extractor = extractor or ExifExtractor()
        self.language = config.normalize_language(language)

    def load(self, image_path: str) -> MediaItem:
        """Load an image and its sidecar metadata.

        Raises:
            MissingInputError: If the image file itself cannot be accessed
        """
        path = Path(image_path)
        try:
            if not path.is_file():
                raise MissingInputError(f"Image file not found: {image_path}")
        except OSError as e:
            raise MissingInputError(f"Cannot access {image_path}: {e}") from e

        item = MediaItem(path=str(path))
        item.description = self._load_description(item.path)
        item.people = self._load_category(item.path, config.PEOPLE, People.from_dict, People)
        item.objects = self._load_category(item.path, config.OBJECTS, Objects.from_dict, Objects)
        item.scenes = self._load_category(item.path, config.SCENES, Scenes.from_dict, Scenes)
        item.exif = self._load_exif(item.path)

        if item.exif is not None:
            item.width, item.height = item.exif.width, item.exif.height
        if item.width is None or item.height is None:
            item.width, item.height = read_dimensions(item.path)
        return item

    def _read_json(self, image_path: str, category: str, language: Optional[str] = None) -> Optional[Any]:
        """Read and decode a sidecar; None when absent.

        Raises:
            MetadataParseError: If the sidecar cannot be read or decoded
        """
        try:
            payload = self.store.read(image_path, category, language)
        except (OSError, sqlite3.Error) as e:
            raise MetadataParseError(image_path, category, str(e)) from e
        if payload is None or not payload.strip():
            return None
        try:
            data = json.loads(payload)
        except json.JSONDecodeError as e:
            raise MetadataParseError(image_path, category, str(e)) from e
        if not isinstance(data, dict):
            raise MetadataParseError(image_path, category, f"expected an object, got {type(data).__name__}")
        return data

    def _parse(self, image_path: str, category: str, factory: Callable[[dict], T], language: Optional[str] = None) -> Optional[T]:
        data = self._read_json(image_path, category, language)
        if data is None:
            return None
        try:
            return factory(data)
        except (TypeError, ValueError, AttributeError, KeyError) as e:
            raise MetadataParseError(image_path, category, str(e)) from e

    def _load_category(self, image_path: str, category: str, factory: Callable[[dict], T], default: Callable[[], T]) -> T:
        try:
            result = self._parse(image_path, category, factory)
        except MetadataParseError as e:
            logger.debug(str(e))
            return default()
        return result if result is not None else default()

    def _load_description(self, image_path: str) -> Optional[Description]:
        languages = [None]
        if not config.is_default_language(self.language):
            languages.insert(0, self.language)

        for language in languages:
            try:
                description = self._parse(image_path, config.DESCRIPTION, Description.from_dict, language)
            except MetadataParseError as e:
                logger.debug(str(e))
                continue
            if description is not None:
                return description
        return None

    def _load_exif(self, image_path: str) -> Optional[ExifData]:
        try:
            cached = self._parse(image_path, config.EXIF, ExifData.from_dict)
        except MetadataParseError as e:
            logger.debug(str(e))
            cached = None
        if cached is not None:
            return cached

        try:
            exif = self.extractor.extract(image_path)
        except ExifExtractionError as e:
            logger.debug(str(e))
            return None

        try:
            self.store.write(image_path, config.EXIF, json.dumps(exif.to_dict()))
        except (OSError, sqlite3.Error) as e:
            logger.warning(f"Could not write EXIF cache for {image_path}: {e}")
        return exif
