"""Configuration for image-finder."""

import json
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional

from .image_search.config import DEFAULT_LANGUAGE, normalize_language

logger = logging.getLogger(__name__)

# Default configuration for end-users
DEFAULT_CONFIG_DIR = Path.home() / ".image-finder"
DEFAULT_INDEX_PATH = str(DEFAULT_CONFIG_DIR / "index.db")
DEFAULT_RECURSIVE = True
DEFAULT_USE_INDEX = False

# Environment overrides
ENV_CONFIG_PATH = "IMAGE_FINDER_CONFIG"
ENV_LANGUAGE = "IMAGE_FINDER_LANGUAGE"


def default_config_path() -> Path:
    """Get the configuration file path, honouring IMAGE_FINDER_CONFIG."""
    env_path = os.environ.get(ENV_CONFIG_PATH)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_DIR / "config.json"


def expand_directory(directory: str) -> str:
    """Expand ~ and environment variables and make a directory absolute."""
    return str(Path(os.path.expandvars(os.path.expanduser(directory))).resolve())


class FinderConfig:
    """Persistent preferences: image directories, language and index."""

    def __init__(
        self,
        image_directories: Optional[List[str]] = None,
        language: Optional[str] = None,
        index_path: Optional[str] = None,
        use_index: Optional[bool] = None,
        max_workers: Optional[int] = None,
        recursive: Optional[bool] = None,
    ):
        self.image_directories = [expand_directory(d) for d in image_directories or []]
        self.language = normalize_language(language or os.environ.get(ENV_LANGUAGE) or DEFAULT_LANGUAGE)
        # Expand ~ in index_path if present
        if index_path:
            index_path = os.path.expanduser(index_path)
        self.index_path = index_path or DEFAULT_INDEX_PATH
        self.use_index = DEFAULT_USE_INDEX if use_index is None else use_index
        self.max_workers = max_workers
        self.recursive = DEFAULT_RECURSIVE if recursive is None else recursive

    @classmethod
    def load_from_file(cls, config_path: Optional[Path] = None) -> "FinderConfig":
        """Load configuration from JSON file."""
        if config_path is None:
            config_path = default_config_path()

        if not config_path.exists():
            return cls()

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = json.load(f)

            return cls(
                image_directories=config_data.get("image_directories"),
                language=config_data.get("language"),
                index_path=config_data.get("index_path"),
                use_index=config_data.get("use_index"),
                max_workers=config_data.get("max_workers"),
                recursive=config_data.get("recursive"),
            )
        except (json.JSONDecodeError, IOError, AttributeError) as e:
            # If config file is invalid, log warning and use defaults
            logger.warning(f"Failed to load config file {config_path}: {e}")
            return cls()

    def save_to_file(self, config_path: Optional[Path] = None) -> None:
        """Save configuration to JSON file."""
        if config_path is None:
            config_path = default_config_path()

        # Ensure config directory exists
        config_path.parent.mkdir(parents=True, exist_ok=True)

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)
        except IOError as e:
            logger.error(f"Failed to save config file {config_path}: {e}")
            raise

    def add_image_directories(self, directories: Iterable[str]) -> List[str]:
        """Add directories not yet configured, keeping the existing ones.

        Paths are compared case-insensitively after expansion.

        Returns:
            The directories that were actually added
        """
        added = []
        for directory in directories:
            expanded = expand_directory(directory)
            if any(existing.lower() == expanded.lower() for existing in self.image_directories):
                logger.info(f"Directory already exists: {expanded}")
                continue
            self.image_directories.append(expanded)
            added.append(expanded)
            logger.info(f"Adding directory: {expanded}")
        return added

    def get_language(self, override: Optional[str] = None) -> str:
        """Get the metadata language: override, then configured, then default."""
        if override and override.strip():
            return normalize_language(override)
        return self.language or DEFAULT_LANGUAGE

    def set_language(self, language: str) -> None:
        self.language = normalize_language(language)

    def to_dict(self) -> dict:
        """Convert configuration to dictionary."""
        return {
            "image_directories": list(self.image_directories),
            "language": self.language,
            "index_path": self.index_path,
            "use_index": self.use_index,
            "max_workers": self.max_workers,
            "recursive": self.recursive,
        }


def get_default_config() -> FinderConfig:
    """Load configuration from the default location."""
    return FinderConfig.load_from_file()
