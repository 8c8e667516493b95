"""Filter criteria for image searches."""

import math
import re
from dataclasses import dataclass, field, fields
from datetime import datetime
from functools import lru_cache
from typing import Any, Iterable, List, Optional, Pattern, Sequence, Union

from .errors import InvalidCriteriaError

DEFAULT_GEO_DISTANCE_METERS = 1000.0

WILDCARD_CHARS = ("*", "?")

Comparable = Union[int, float, datetime]

LIST_FIELDS = (
    "keywords",
    "people",
    "objects",
    "scenes",
    "picture_type",
    "style_type",
    "overall_mood",
    "description_search",
    "any",
    "meta_camera_make",
    "meta_camera_model",
)

EXIF_RANGE_FIELDS = (
    "meta_width",
    "meta_height",
    "meta_exposure_time",
    "meta_f_number",
    "meta_iso",
    "meta_focal_length",
    "meta_date_taken",
)

GPS_RANGE_FIELDS = (
    "meta_gps_latitude",
    "meta_gps_longitude",
    "meta_gps_altitude",
)

CONTENT_FLAGS = ("has_nudity", "no_nudity", "has_explicit_content", "no_explicit_content")


def wildcard_term(term: str) -> str:
    """Wrap a term as ``*term*`` unless it already contains a wildcard."""
    if any(ch in term for ch in WILDCARD_CHARS):
        return term
    return f"*{term}*"


@lru_cache(maxsize=1024)
def _compile_wildcard(pattern: str) -> Pattern[str]:
    # Only * and ? are special; brackets match literally
    parts = []
    for ch in pattern:
        if ch == "*":
            parts.append(".*")
        elif ch == "?":
            parts.append(".")
        else:
            parts.append(re.escape(ch))
    return re.compile("".join(parts), re.IGNORECASE | re.DOTALL)


def wildcard_match(value: Optional[str], pattern: str) -> bool:
    """Case-insensitive glob match supporting ``*`` and ``?``."""
    if value is None:
        return False
    return _compile_wildcard(pattern).fullmatch(str(value)) is not None


def matches_any(values: Iterable[Optional[str]], patterns: Iterable[str]) -> bool:
    """True if any pattern matches any value."""
    values = [v for v in values if v is not None]
    return any(wildcard_match(value, pattern) for pattern in patterns for value in values)


@dataclass(frozen=True)
class NumericRange:
    """Inclusive range; a single value is stored as ``minimum == maximum``."""
    minimum: Comparable
    maximum: Comparable

    @classmethod
    def from_values(cls, values: Union[Comparable, Sequence[Comparable]]) -> "NumericRange":
        """Build from one value (exact match) or two values (inclusive range).

        Raises:
            InvalidCriteriaError: For zero or more than two values, or min > max
        """
        if isinstance(values, NumericRange):
            return values
        if not isinstance(values, (list, tuple)):
            values = [values]
        if len(values) == 1:
            return cls(values[0], values[0])
        if len(values) == 2:
            minimum, maximum = values
            try:
                inverted = minimum > maximum
            except TypeError as e:
                raise InvalidCriteriaError(f"Incomparable range bounds: {values!r}") from e
            if inverted:
                raise InvalidCriteriaError(f"Range minimum {minimum} is greater than maximum {maximum}")
            return cls(minimum, maximum)
        raise InvalidCriteriaError(f"Expected one value or a [min, max] pair, got {len(values)} values")

    @property
    def is_exact(self) -> bool:
        return self.minimum == self.maximum

    def contains(self, value: Optional[Comparable]) -> bool:
        if value is None:
            return False
        try:
            if self.is_exact:
                if isinstance(value, float) or isinstance(self.minimum, float):
                    return math.isclose(float(value), float(self.minimum), rel_tol=1e-9, abs_tol=1e-12)
                return value == self.minimum
            return self.minimum <= value <= self.maximum
        except TypeError:
            return False


@dataclass(frozen=True)
class GeoLocation:
    latitude: float
    longitude: float


@dataclass
class FilterCriteria:
    """Search criteria: OR within a category, AND across categories."""
    keywords: List[str] = field(default_factory=list)
    people: List[str] = field(default_factory=list)
    objects: List[str] = field(default_factory=list)
    scenes: List[str] = field(default_factory=list)
    picture_type: List[str] = field(default_factory=list)
    style_type: List[str] = field(default_factory=list)
    overall_mood: List[str] = field(default_factory=list)
    description_search: List[str] = field(default_factory=list)
    any: List[str] = field(default_factory=list)
    has_nudity: bool = False
    no_nudity: bool = False
    has_explicit_content: bool = False
    no_explicit_content: bool = False
    meta_camera_make: List[str] = field(default_factory=list)
    meta_camera_model: List[str] = field(default_factory=list)
    meta_width: Optional[NumericRange] = None
    meta_height: Optional[NumericRange] = None
    meta_gps_latitude: Optional[NumericRange] = None
    meta_gps_longitude: Optional[NumericRange] = None
    meta_gps_altitude: Optional[NumericRange] = None
    meta_exposure_time: Optional[NumericRange] = None
    meta_f_number: Optional[NumericRange] = None
    meta_iso: Optional[NumericRange] = None
    meta_focal_length: Optional[NumericRange] = None
    meta_date_taken: Optional[NumericRange] = None
    geo_location: Optional[GeoLocation] = None
    geo_distance_in_meters: float = DEFAULT_GEO_DISTANCE_METERS
    min_confidence_ratio: Optional[float] = None

    def __post_init__(self):
        # Accept plain strings, sequences and tuples from callers
        for name in LIST_FIELDS:
            value = getattr(self, name)
            if value is None:
                value = []
            elif isinstance(value, str):
                value = [value]
            setattr(self, name, [str(v) for v in value if v is not None and str(v) != ""])
        for name in EXIF_RANGE_FIELDS + GPS_RANGE_FIELDS:
            value = getattr(self, name)
            if value is not None and not isinstance(value, NumericRange):
                setattr(self, name, NumericRange.from_values(value))
        if self.geo_location is not None and not isinstance(self.geo_location, GeoLocation):
            latitude, longitude = self.geo_location
            self.geo_location = GeoLocation(float(latitude), float(longitude))

    def validate(self) -> "FilterCriteria":
        """Check argument ranges.

        Raises:
            InvalidCriteriaError: If any value is out of range
        """
        if self.min_confidence_ratio is not None and not 0.0 <= self.min_confidence_ratio <= 1.0:
            raise InvalidCriteriaError(
                f"Confidence ratio must be between 0.0 and 1.0, got {self.min_confidence_ratio}"
            )
        if self.geo_distance_in_meters is None or self.geo_distance_in_meters <= 0:
            raise InvalidCriteriaError(
                f"Geo distance must be a positive number of meters, got {self.geo_distance_in_meters}"
            )
        if self.geo_location is not None:
            if not -90.0 <= self.geo_location.latitude <= 90.0:
                raise InvalidCriteriaError(f"Latitude out of range: {self.geo_location.latitude}")
            if not -180.0 <= self.geo_location.longitude <= 180.0:
                raise InvalidCriteriaError(f"Longitude out of range: {self.geo_location.longitude}")
        return self

    @property
    def any_patterns(self) -> List[str]:
        return [wildcard_term(term) for term in self.any]

    @property
    def has_content_flags(self) -> bool:
        return any(getattr(self, flag) for flag in CONTENT_FLAGS)

    @property
    def has_gps_criteria(self) -> bool:
        return self.geo_location is not None or any(
            getattr(self, name) is not None for name in GPS_RANGE_FIELDS
        )

    @property
    def has_exif_criteria(self) -> bool:
        return (
            self.has_gps_criteria
            or bool(self.meta_camera_make or self.meta_camera_model)
            or any(getattr(self, name) is not None for name in EXIF_RANGE_FIELDS)
        )

    @property
    def has_confidence_filter(self) -> bool:
        return self.min_confidence_ratio is not None

    @property
    def has_search_criteria(self) -> bool:
        """True when at least one filter is active."""
        return (
            bool(
                self.keywords
                or self.people
                or self.objects
                or self.scenes
                or self.description_search
                or self.picture_type
                or self.style_type
                or self.overall_mood
                or self.any
            )
            or self.has_content_flags
            or self.has_exif_criteria
            or self.has_confidence_filter
        )

    @property
    def confidence_only(self) -> bool:
        """True when the confidence ratio is the only active filter."""
        if not self.has_confidence_filter:
            return False
        others = {f.name: getattr(self, f.name) for f in fields(self)}
        others["min_confidence_ratio"] = None
        return not FilterCriteria(**others).has_search_criteria

    def to_dict(self) -> dict:
        result: dict = {}
        for f in fields(self):
            value: Any = getattr(self, f.name)
            if isinstance(value, NumericRange):
                bounds = [value.minimum] if value.is_exact else [value.minimum, value.maximum]
                value = [b.isoformat() if isinstance(b, datetime) else b for b in bounds]
            elif isinstance(value, GeoLocation):
                value = [value.latitude, value.longitude]
            result[f.name] = value
        return result
