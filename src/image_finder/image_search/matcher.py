"""Match evaluation: OR within a category, AND across categories."""

import logging
from typing import List, Optional

from .criteria import FilterCriteria, matches_any, wildcard_term
from .geo import exif_matches
from .models import MediaItem, Objects, People, Scenes, count_labels

logger = logging.getLogger(__name__)


def apply_confidence_filter(item: MediaItem, ratio: float) -> bool:
    """Drop detections below the ratio from the item, in place.

    Returns:
        True if the scene, a face or an object met the threshold
    """
    scene_kept = not item.scenes.is_unknown and item.scenes.confidence >= ratio
    if not scene_kept:
        item.scenes = Scenes()

    faces = [p for p in item.people.predictions if p.confidence >= ratio]
    item.people = People(count=len(faces), faces=[p.label for p in faces], predictions=faces)

    detections = [o for o in item.objects.objects if o.confidence >= ratio]
    item.objects = Objects(
        count=len(detections),
        objects=detections,
        object_counts=count_labels(detections),
    )
    return scene_kept or bool(faces) or bool(detections)


def keyword_match(item: MediaItem, patterns: List[str]) -> bool:
    return item.description is not None and matches_any(item.description.keywords, patterns)


def people_match(item: MediaItem, patterns: List[str]) -> bool:
    return matches_any(item.people.faces, patterns)


def object_match(item: MediaItem, patterns: List[str]) -> bool:
    return matches_any(item.objects.labels, patterns)


def scene_match(item: MediaItem, patterns: List[str]) -> bool:
    # An unclassified image never matches a scene filter, not even "*"
    if item.scenes.is_unknown:
        return False
    return matches_any([item.scenes.scene], patterns)


def description_field_match(value: Optional[str], patterns: List[str]) -> bool:
    return matches_any([value], patterns)


def description_search_match(item: MediaItem, patterns: List[str]) -> bool:
    description = item.description
    if description is None:
        return False
    # Phrases match anywhere in the text unless they carry their own wildcards
    wrapped = [wildcard_term(pattern) for pattern in patterns]
    return matches_any([description.short_description, description.long_description], wrapped)


def content_match(item: MediaItem, criteria: FilterCriteria) -> bool:
    """Content flags are OR'd together when several are set."""
    nudity = item.description is not None and item.description.has_nudity
    explicit = item.description is not None and item.description.has_explicit_content
    results = []
    if criteria.has_nudity:
        results.append(nudity)
    if criteria.no_nudity:
        results.append(not nudity)
    if criteria.has_explicit_content:
        results.append(explicit)
    if criteria.no_explicit_content:
        results.append(not explicit)
    return any(results)


def searchable_values(item: MediaItem) -> List[Optional[str]]:
    """All text fields covered by the aggregate "any" search."""
    values: List[Optional[str]] = [item.path, item.filename]
    description = item.description
    if description is not None:
        values += [
            description.short_description,
            description.long_description,
            description.picture_type,
            description.style_type,
            description.overall_mood,
        ]
        values += description.keywords
    values += item.people.faces
    values += item.objects.labels
    if not item.scenes.is_unknown:
        values.append(item.scenes.scene)
    exif = item.exif
    if exif is not None:
        values += [
            exif.camera.make,
            exif.camera.model,
            exif.software,
            exif.file_name,
            exif.format,
            exif.file_extension,
        ]
    return values


def any_match(item: MediaItem, criteria: FilterCriteria) -> bool:
    return matches_any(searchable_values(item), criteria.any_patterns)


def evaluate(item: MediaItem, criteria: FilterCriteria) -> bool:
    """Decide whether an item satisfies the criteria.

    Confidence filtering runs first and mutates the item, so the people,
    object and scene categories are matched against the surviving
    detections only. The confidence result itself only decides inclusion
    when it is the only active filter.
    """
    if not criteria.has_search_criteria:
        return True

    if criteria.has_confidence_filter:
        confidence_met = apply_confidence_filter(item, criteria.min_confidence_ratio)
        if criteria.confidence_only:
            return confidence_met

    description = item.description
    checks = (
        ("keywords", lambda: keyword_match(item, criteria.keywords)),
        ("people", lambda: people_match(item, criteria.people)),
        ("objects", lambda: object_match(item, criteria.objects)),
        ("scenes", lambda: scene_match(item, criteria.scenes)),
        ("description_search", lambda: description_search_match(item, criteria.description_search)),
        ("picture_type", lambda: description is not None
            and description_field_match(description.picture_type, criteria.picture_type)),
        ("style_type", lambda: description is not None
            and description_field_match(description.style_type, criteria.style_type)),
        ("overall_mood", lambda: description is not None
            and description_field_match(description.overall_mood, criteria.overall_mood)),
        ("any", lambda: any_match(item, criteria)),
    )
    for name, check in checks:
        if getattr(criteria, name) and not check():
            logger.debug(f"{item.path} excluded by {name} filter")
            return False

    if criteria.has_content_flags and not content_match(item, criteria):
        logger.debug(f"{item.path} excluded by content filter")
        return False

    if not exif_matches(item, criteria):
        logger.debug(f"{item.path} excluded by EXIF filter")
        return False

    return True
