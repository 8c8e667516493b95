"""EXIF range and GPS proximity filtering."""

import math
from typing import Optional

from .criteria import FilterCriteria, GeoLocation, matches_any
from .models import MediaItem

EARTH_RADIUS_METERS = 6371000.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two coordinates in meters."""
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def within_distance(
    origin: GeoLocation,
    latitude: Optional[float],
    longitude: Optional[float],
    max_meters: float,
) -> bool:
    if latitude is None or longitude is None:
        return False
    return haversine_distance(origin.latitude, origin.longitude, latitude, longitude) <= max_meters


def exif_matches(item: MediaItem, criteria: FilterCriteria) -> bool:
    """Apply EXIF and GPS criteria; True when none are set."""
    if not criteria.has_exif_criteria:
        return True

    # Dimensions can come from decoding the image when EXIF is missing
    if criteria.meta_width is not None and not criteria.meta_width.contains(item.width):
        return False
    if criteria.meta_height is not None and not criteria.meta_height.contains(item.height):
        return False

    exif = item.exif
    if exif is None:
        only_dimensions = not (
            criteria.has_gps_criteria
            or criteria.meta_camera_make
            or criteria.meta_camera_model
            or criteria.meta_exposure_time is not None
            or criteria.meta_f_number is not None
            or criteria.meta_iso is not None
            or criteria.meta_focal_length is not None
            or criteria.meta_date_taken is not None
        )
        return only_dimensions

    if criteria.meta_camera_make and not matches_any([exif.camera.make], criteria.meta_camera_make):
        return False
    if criteria.meta_camera_model and not matches_any([exif.camera.model], criteria.meta_camera_model):
        return False

    checks = (
        (criteria.meta_exposure_time, exif.exposure_time),
        (criteria.meta_f_number, exif.f_number),
        (criteria.meta_iso, exif.iso),
        (criteria.meta_focal_length, exif.focal_length),
        (criteria.meta_date_taken, exif.date_taken),
    )
    for value_range, value in checks:
        if value_range is not None and not value_range.contains(value):
            return False

    if criteria.has_gps_criteria:
        gps = exif.gps
        if gps is None:
            return False
        gps_checks = (
            (criteria.meta_gps_latitude, gps.latitude),
            (criteria.meta_gps_longitude, gps.longitude),
            (criteria.meta_gps_altitude, gps.altitude),
        )
        for value_range, value in gps_checks:
            if value_range is not None and not value_range.contains(value):
                return False
        if criteria.geo_location is not None and not within_distance(
            criteria.geo_location, gps.latitude, gps.longitude, criteria.geo_distance_in_meters
        ):
            return False

    return True
