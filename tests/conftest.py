"""Shared fixtures for image-finder tests."""

import json
from pathlib import Path

import pytest
from PIL import Image

from image_finder.image_search.sidecar_store import StreamSidecarStore


@pytest.fixture
def store():
    return StreamSidecarStore()


@pytest.fixture
def make_image(tmp_path):
    """Create a real image file, optionally with base EXIF tags."""

    def _make(name="photo.jpg", size=(64, 48), exif=None, directory=None):
        folder = Path(directory) if directory else tmp_path
        folder.mkdir(parents=True, exist_ok=True)
        path = folder / name
        img = Image.new("RGB", size, color=(200, 120, 40))
        if exif:
            exif_data = Image.Exif()
            for tag, value in exif.items():
                exif_data[tag] = value
            img.save(path, exif=exif_data)
        else:
            img.save(path)
        return str(path)

    return _make


@pytest.fixture
def write_sidecars(store):
    """Write sidecar JSON for an image; raw strings are written verbatim."""

    def _write(path, language=None, **categories):
        names = {"exif": "EXIF"}
        for category, payload in categories.items():
            if payload is None:
                continue
            if not isinstance(payload, str):
                payload = json.dumps(payload)
            store.write(path, names.get(category, category), payload, language)

    return _write


def exif_cache(iso=None, f_number=None, make=None, model=None, gps=None, date_taken=None, width=64, height=48):
    """Build an EXIF.json payload in the extractor layout."""
    return {
        "Basic": {"Width": width, "Height": height, "FileName": None, "Format": "JPEG", "FileExtension": ".jpg"},
        "Camera": {"Make": make, "Model": model},
        "GPS": gps,
        "Other": {"Software": None},
        "ExposureTime": None,
        "FNumber": f_number,
        "ISO": iso,
        "FocalLength": None,
        "DateTaken": date_taken,
    }
