"""SQLite index of image sidecar metadata."""

import logging
import os
import sqlite3
from pathlib import Path
from typing import Iterator, Optional, Dict, Any

from .base import SidecarStore
from .config import CATEGORIES, DESCRIPTION

logger = logging.getLogger(__name__)


class SqliteSidecarStore(SidecarStore):
    """SQLite-based sidecar store, usable as a searchable image index."""

    def __init__(self, db_path: str = "image_index.db"):
        self.db_path = db_path
        self._init_db()

    def _init_db(self):
        """Initialize database tables."""
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS images (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    path TEXT UNIQUE NOT NULL,
                    filename TEXT NOT NULL,
                    directory TEXT NOT NULL,
                    indexed_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)

            # One row per sidecar name, e.g. "people.json" or "description.Dutch.json"
            cursor.execute("""
                CREATE TABLE IF NOT EXISTS sidecars (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    image_id INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    payload TEXT NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    FOREIGN KEY (image_id) REFERENCES images (id) ON DELETE CASCADE,
                    UNIQUE(image_id, name)
                )
            """)

            cursor.execute("CREATE INDEX IF NOT EXISTS idx_images_directory ON images(directory)")
            cursor.execute("CREATE INDEX IF NOT EXISTS idx_sidecars_image ON sidecars(image_id)")

            conn.commit()

    def add_image(self, image_path: str) -> int:
        """Register an image path in the index, return its ID."""
        path = str(Path(image_path).resolve())
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT id FROM images WHERE path = ?", (path,))
            existing = cursor.fetchone()
            if existing:
                return existing[0]

            cursor.execute(
                "INSERT INTO images (path, filename, directory) VALUES (?, ?, ?)",
                (path, Path(path).name, str(Path(path).parent)),
            )
            lastrowid = cursor.lastrowid
            if lastrowid is None:
                raise ValueError("Failed to get last insert ID")
            return lastrowid

    def read(self, image_path: str, category: str, language: Optional[str] = None) -> Optional[str]:
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT s.payload
                FROM sidecars s
                JOIN images i ON s.image_id = i.id
                WHERE i.path = ? AND s.name = ?
            """, (str(Path(image_path).resolve()), self.sidecar_name(category, language)))
            row = cursor.fetchone()
            return row[0] if row else None

    def write(self, image_path: str, category: str, payload: str, language: Optional[str] = None) -> None:
        image_id = self.add_image(image_path)
        with sqlite3.connect(self.db_path) as conn:
            conn.execute("""
                INSERT OR REPLACE INTO sidecars (image_id, name, payload, updated_at)
                VALUES (?, ?, ?, CURRENT_TIMESTAMP)
            """, (image_id, self.sidecar_name(category, language), payload))
            conn.commit()

    def import_sidecars(self, image_path: str, source: SidecarStore, languages=()) -> int:
        """Copy every sidecar of an image from another store into the index.

        Returns:
            Number of sidecars copied
        """
        self.add_image(image_path)
        copied = 0
        wanted = [(category, None) for category in CATEGORIES]
        wanted += [(DESCRIPTION, language) for language in languages]
        for category, language in wanted:
            payload = source.read(image_path, category, language)
            if payload is None:
                continue
            self.write(image_path, category, payload, language)
            copied += 1
        logger.debug(f"Indexed {copied} sidecars for {image_path}")
        return copied

    def iter_image_paths(self, directory: str, recursive: bool = True) -> Iterator[str]:
        """Yield indexed image paths below a directory."""
        directory = str(Path(directory).resolve())
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            if recursive:
                prefix = directory.rstrip(os.sep) + os.sep
                cursor.execute(
                    "SELECT path FROM images WHERE substr(path, 1, ?) = ? ORDER BY path",
                    (len(prefix), prefix),
                )
            else:
                cursor.execute(
                    "SELECT path FROM images WHERE directory = ? ORDER BY path", (directory,)
                )
            rows = cursor.fetchall()
        for row in rows:
            yield row[0]

    def get_stats(self) -> Dict[str, Any]:
        """Get index statistics."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()

            stats = {}
            cursor.execute("SELECT COUNT(*) FROM images")
            stats["total_images"] = cursor.fetchone()[0]

            cursor.execute("SELECT COUNT(*) FROM sidecars")
            stats["total_sidecars"] = cursor.fetchone()[0]

            cursor.execute("SELECT name, COUNT(*) FROM sidecars GROUP BY name ORDER BY name")
            stats["sidecars_by_name"] = {name: count for name, count in cursor.fetchall()}

            return stats
