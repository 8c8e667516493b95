"""Image directory scanner."""

import logging
from pathlib import Path
from typing import List, Iterator

logger = logging.getLogger(__name__)

# Supported image formats
SUPPORTED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp", ".tiff", ".tif"}


def is_supported_image(path) -> bool:
    """Check that a path has a supported image extension."""
    return Path(path).suffix.lower() in SUPPORTED_EXTENSIONS


class ImageScanner:
    """Scanner for image directories."""

    def __init__(self, recursive: bool = True):
        self.recursive = recursive
        self._stats = {"scanned": 0, "skipped": 0, "missing": 0}

    def scan_directory(self, directory: str) -> List[str]:
        """Scan a directory and return the image paths found."""
        paths = list(self.iter_directory(directory))
        logger.info(
            f"Scan of {directory} completed: {self._stats['scanned']} images, "
            f"{self._stats['skipped']} skipped"
        )
        return paths

    def iter_directory(self, directory: str) -> Iterator[str]:
        """Yield absolute image paths below a directory.

        A missing directory is logged and yields nothing.
        """
        directory_path = Path(directory).expanduser().resolve()
        if not directory_path.is_dir():
            logger.warning(f"Image directory not found, skipping: {directory}")
            self._stats["missing"] += 1
            return
        yield from self._scan_directory_iter(directory_path)

    def _scan_directory_iter(self, directory: Path) -> Iterator[str]:
        """Generator that yields image paths from a directory."""
        try:
            entries = sorted(directory.iterdir())
        except PermissionError:
            logger.warning(f"Permission denied: {directory}")
            return

        for entry in entries:
            if entry.is_dir():
                if self.recursive:
                    yield from self._scan_directory_iter(entry)
            elif entry.is_file() and is_supported_image(entry):
                self._stats["scanned"] += 1
                yield str(entry)
            else:
                self._stats["skipped"] += 1

    def get_stats(self) -> dict:
        """Get scanning statistics."""
        return self._stats.copy()


def scan_images(directory: str, recursive: bool = True) -> List[str]:
    """Convenience function to scan images in a directory."""
    scanner = ImageScanner(recursive=recursive)
    return scanner.scan_directory(directory)
