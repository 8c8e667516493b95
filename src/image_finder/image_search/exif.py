"""EXIF extraction with Pillow."""

import logging
import math
from pathlib import Path
from typing import Any, Optional, Tuple

from PIL import Image

from .errors import ExifExtractionError
from .models import Camera, ExifData, GPS, parse_date_taken

logger = logging.getLogger(__name__)

EXIF_IFD = 0x8769
GPS_IFD = 0x8825

# Base IFD tags
TAG_MAKE = 271
TAG_MODEL = 272
TAG_DATETIME = 306
TAG_SOFTWARE = 305

# Exif IFD tags
TAG_EXPOSURE_TIME = 33434
TAG_F_NUMBER = 33437
TAG_ISO = 34855
TAG_DATETIME_ORIGINAL = 36867
TAG_FOCAL_LENGTH = 37386

# GPS IFD tags
GPS_LATITUDE_REF = 1
GPS_LATITUDE = 2
GPS_LONGITUDE_REF = 3
GPS_LONGITUDE = 4
GPS_ALTITUDE_REF = 5
GPS_ALTITUDE = 6


def _to_float(value: Any) -> Optional[float]:
    """Convert an EXIF rational (IFDRational or (num, den) tuple) to float."""
    if value is None:
        return None
    if isinstance(value, tuple) and len(value) == 2:
        if not value[1]:
            return None
        return value[0] / value[1]
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(result) else result


def _to_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="ignore")
    text = str(value).strip().rstrip("\x00").strip()
    return text or None


def _gps_to_degrees(value: Any, ref: Any) -> Optional[float]:
    """Convert degree/minute/second rationals to signed decimal degrees."""
    if not value:
        return None
    try:
        d, m, s = (_to_float(v) for v in value)
    except (TypeError, ValueError):
        return None
    if d is None or m is None or s is None:
        return None
    degrees = d + (m / 60.0) + (s / 3600.0)
    ref = _to_text(ref)
    if ref and ref.upper() in ("S", "W"):
        degrees = -degrees
    return degrees


def read_dimensions(image_path: str) -> Tuple[Optional[int], Optional[int]]:
    """Read pixel dimensions from the image header, (None, None) on failure."""
    try:
        with Image.open(image_path) as img:
            return img.size
    except (OSError, ValueError) as e:
        logger.debug(f"Could not decode dimensions of {image_path}: {e}")
        return None, None


class ExifExtractor:
    """Extracts camera, exposure and GPS metadata from image files."""

    def extract(self, image_path: str) -> ExifData:
        """Extract EXIF metadata from an image.

        Raises:
            ExifExtractionError: If the image cannot be opened or decoded
        """
        try:
            with Image.open(image_path) as img:
                width, height = img.size
                image_format = img.format
                exif = img.getexif()
                exif_ifd, gps_ifd = {}, {}
                if exif:
                    try:
                        exif_ifd = exif.get_ifd(EXIF_IFD) or {}
                        gps_ifd = exif.get_ifd(GPS_IFD) or {}
                    except (KeyError, ValueError, TypeError) as e:
                        logger.debug(f"Could not read EXIF sub-IFDs of {image_path}: {e}")
        except (OSError, ValueError) as e:
            raise ExifExtractionError(f"Cannot read EXIF from {image_path}: {e}") from e

        def lookup(tag: int) -> Any:
            # Older writers flatten Exif IFD tags into the base IFD
            value = exif_ifd.get(tag)
            return value if value is not None else exif.get(tag)

        iso = lookup(TAG_ISO)
        if isinstance(iso, tuple):
            iso = iso[0] if iso else None

        date_taken = None
        raw_date = _to_text(lookup(TAG_DATETIME_ORIGINAL)) or _to_text(exif.get(TAG_DATETIME))
        if raw_date:
            try:
                date_taken = parse_date_taken(raw_date)
            except ValueError:
                logger.debug(f"Unparseable EXIF date {raw_date!r} in {image_path}")

        path = Path(image_path)
        return ExifData(
            width=width,
            height=height,
            file_name=path.name,
            format=image_format,
            file_extension=path.suffix.lower(),
            camera=Camera(make=_to_text(exif.get(TAG_MAKE)), model=_to_text(exif.get(TAG_MODEL))),
            gps=self._extract_gps(gps_ifd),
            software=_to_text(exif.get(TAG_SOFTWARE)),
            exposure_time=_to_float(lookup(TAG_EXPOSURE_TIME)),
            f_number=_to_float(lookup(TAG_F_NUMBER)),
            iso=int(iso) if iso is not None else None,
            focal_length=_to_float(lookup(TAG_FOCAL_LENGTH)),
            date_taken=date_taken,
        )

    def _extract_gps(self, gps_ifd) -> Optional[GPS]:
        if not gps_ifd:
            return None
        latitude = _gps_to_degrees(gps_ifd.get(GPS_LATITUDE), gps_ifd.get(GPS_LATITUDE_REF))
        longitude = _gps_to_degrees(gps_ifd.get(GPS_LONGITUDE), gps_ifd.get(GPS_LONGITUDE_REF))
        altitude = _to_float(gps_ifd.get(GPS_ALTITUDE))
        if altitude is not None and gps_ifd.get(GPS_ALTITUDE_REF) in (1, b"\x01"):
            altitude = -altitude
        if latitude is None and longitude is None and altitude is None:
            return None
        return GPS(latitude=latitude, longitude=longitude, altitude=altitude)
