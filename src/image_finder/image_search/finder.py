"""Image search: candidate collection, parallel evaluation and deduplication."""

import dataclasses
import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple, Union

from .base import SidecarStore
from .config import DEFAULT_LANGUAGE
from .criteria import FilterCriteria
from .errors import MissingInputError
from .exif import ExifExtractor
from .loader import MetadataLoader
from .matcher import evaluate
from .metadata_store import SqliteSidecarStore
from .models import MediaItem
from .scanner import ImageScanner
from .sidecar_store import StreamSidecarStore

logger = logging.getLogger(__name__)

PathOrItem = Union[str, MediaItem]


@dataclass
class SearchContext:
    """Everything a search needs besides the filter criteria."""
    image_directories: List[str] = field(default_factory=list)
    paths: List[str] = field(default_factory=list)
    language: str = DEFAULT_LANGUAGE
    recursive: bool = True
    max_workers: Optional[int] = None
    use_index: bool = False

    @property
    def worker_count(self) -> int:
        return self.max_workers or os.cpu_count() or 4


def normalize_path(path: str) -> str:
    """Deduplication key for a path."""
    return os.path.normcase(str(Path(path).expanduser().resolve()))


class ImageFinder:
    """Finds images whose sidecar metadata matches a set of criteria.

    Items are loaded and evaluated on a bounded thread pool. The calling
    thread is the only one touching the seen-set and the result list.
    """

    def __init__(self, store: Optional[SidecarStore] = None, extractor: Optional[ExifExtractor] = None):
        self.store = store or StreamSidecarStore()
        self.extractor = extractor or ExifExtractor()
        self._cancelled = threading.Event()
        self._stats = {"candidates": 0, "matched": 0, "missing": 0, "errors": 0}

    def cancel(self) -> None:
        """Stop evaluating further items; already finished ones are kept."""
        self._cancelled.set()

    def get_stats(self) -> dict:
        return self._stats.copy()

    def find(
        self,
        criteria: FilterCriteria,
        context: Optional[SearchContext] = None,
        input_items: Optional[Iterable[PathOrItem]] = None,
        append: bool = False,
    ) -> List[MediaItem]:
        """Run a search.

        Args:
            criteria: Filter criteria, validated before anything is scanned
            context: Directories, explicit paths, language and worker settings
            input_items: Prior results or paths (piped input)
            append: Emit input_items verbatim first instead of re-evaluating them

        Returns:
            Matching items, each path at most once, in discovery order

        Raises:
            InvalidCriteriaError: If the criteria fail validation
        """
        context = context or SearchContext()
        criteria.validate()
        self._cancelled.clear()
        self._stats = {"candidates": 0, "matched": 0, "missing": 0, "errors": 0}

        criteria, any_paths = split_any_paths(criteria)

        results: List[MediaItem] = []
        piped: List[str] = []
        for entry in input_items or []:
            if append and isinstance(entry, MediaItem):
                results.append(entry)
            else:
                piped.append(entry.path if isinstance(entry, MediaItem) else str(entry))

        explicit = list(context.paths) + any_paths + piped
        candidates = list(self._iter_candidates(context, explicit))
        self._stats["candidates"] = len(candidates)
        logger.info(f"Evaluating {len(candidates)} candidate images")

        matched = self._evaluate_all(candidates, criteria, context)
        self._stats["matched"] = len(matched)
        results.extend(matched)
        return results

    def _iter_candidates(self, context: SearchContext, explicit: List[str]) -> Iterator[str]:
        """Yield each candidate path once, explicit paths first."""
        seen: Set[str] = set()
        for path in self._iter_sources(context, explicit):
            key = normalize_path(path)
            if key in seen:
                logger.debug(f"Skipping duplicate {path}")
                continue
            seen.add(key)
            yield str(Path(path).expanduser().resolve())

    def _iter_sources(self, context: SearchContext, explicit: List[str]) -> Iterator[str]:
        for path in explicit:
            if not Path(path).expanduser().is_file():
                logger.warning(f"Image file not found, skipping: {path}")
                self._stats["missing"] += 1
                continue
            yield path

        if context.use_index:
            if not isinstance(self.store, SqliteSidecarStore):
                raise ValueError("Index search requires a SqliteSidecarStore")
            for directory in context.image_directories:
                yield from self.store.iter_image_paths(directory, recursive=context.recursive)
            return

        scanner = ImageScanner(recursive=context.recursive)
        for directory in context.image_directories:
            yield from scanner.iter_directory(directory)
        self._stats["missing"] += scanner.get_stats()["missing"]

    def _evaluate_all(self, candidates: List[str], criteria: FilterCriteria, context: SearchContext) -> List[MediaItem]:
        loader = MetadataLoader(self.store, self.extractor, context.language)
        matched: Dict[int, MediaItem] = {}

        with ThreadPoolExecutor(max_workers=context.worker_count) as executor:
            futures = {
                executor.submit(self._process, loader, path, criteria): (index, path)
                for index, path in enumerate(candidates)
            }
            for future in as_completed(futures):
                index, path = futures[future]
                try:
                    item = future.result()
                except Exception as e:
                    logger.error(f"Failed to process {path}: {e}")
                    self._stats["errors"] += 1
                    continue
                if item is not None:
                    matched[index] = item

        return [matched[index] for index in sorted(matched)]

    def _process(self, loader: MetadataLoader, path: str, criteria: FilterCriteria) -> Optional[MediaItem]:
        if self._cancelled.is_set():
            return None
        try:
            item = loader.load(path)
        except MissingInputError as e:
            logger.warning(str(e))
            return None
        return item if evaluate(item, criteria) else None


def split_any_paths(criteria: FilterCriteria) -> Tuple[FilterCriteria, List[str]]:
    """Separate "any" terms naming existing files from search terms."""
    paths = [term for term in criteria.any if _is_file(term)]
    if not paths:
        return criteria, []
    terms = [term for term in criteria.any if term not in paths]
    return dataclasses.replace(criteria, any=terms), paths


def _is_file(term: str) -> bool:
    try:
        return Path(term).expanduser().is_file()
    except (OSError, ValueError):
        return False


def find_images(
    criteria: Optional[FilterCriteria] = None,
    image_directories: Optional[List[str]] = None,
    language: str = DEFAULT_LANGUAGE,
    store: Optional[SidecarStore] = None,
    **context_options,
) -> List[MediaItem]:
    """Convenience function to search image directories."""
    context = SearchContext(
        image_directories=list(image_directories or []),
        language=language,
        **context_options,
    )
    finder = ImageFinder(store=store)
    return finder.find(criteria or FilterCriteria(), context)
