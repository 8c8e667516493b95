"""Base sidecar store interface for per-image metadata."""

from abc import ABC, abstractmethod
from typing import Optional

from .config import sidecar_name


class SidecarStore(ABC):
    """Abstract base class for sidecar metadata stores.

    A sidecar is a JSON blob keyed by ``(image path, category, language)``.
    Stores only move text around; parsing is left to the loader.
    """

    @abstractmethod
    def read(self, image_path: str, category: str, language: Optional[str] = None) -> Optional[str]:
        """Read a sidecar blob.

        Args:
            image_path: Absolute path of the image
            category: Metadata category (description, people, objects, scenes, EXIF)
            language: Optional language for language-specific sidecars

        Returns:
            The stored text, or None when the sidecar does not exist
        """
        pass

    @abstractmethod
    def write(self, image_path: str, category: str, payload: str, language: Optional[str] = None) -> None:
        """Write (or overwrite) a sidecar blob.

        Args:
            image_path: Absolute path of the image
            category: Metadata category
            payload: JSON text to store
            language: Optional language for language-specific sidecars
        """
        pass

    def sidecar_name(self, category: str, language: Optional[str] = None) -> str:
        """Get the sidecar name for a category and language."""
        return sidecar_name(category, language)
