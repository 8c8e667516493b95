"""Sidecar store using alternate-data-stream style names."""

import logging
from pathlib import Path
from typing import Optional

from .base import SidecarStore

logger = logging.getLogger(__name__)


class StreamSidecarStore(SidecarStore):
    """Store sidecars as ``<image path>:<sidecar name>``.

    On NTFS this addresses an alternate data stream of the image file, on
    other file systems it is a sibling file carrying that literal name.
    """

    def stream_path(self, image_path: str, category: str, language: Optional[str] = None) -> Path:
        return Path(f"{image_path}:{self.sidecar_name(category, language)}")

    def read(self, image_path: str, category: str, language: Optional[str] = None) -> Optional[str]:
        stream = self.stream_path(image_path, category, language)
        try:
            return stream.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def write(self, image_path: str, category: str, payload: str, language: Optional[str] = None) -> None:
        stream = self.stream_path(image_path, category, language)
        stream.write_text(payload, encoding="utf-8")
        logger.debug(f"Wrote sidecar {stream}")
