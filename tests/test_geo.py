"""Tests for EXIF range and GPS filtering."""

from datetime import datetime

import pytest

from image_finder.image_search.criteria import FilterCriteria
from image_finder.image_search.geo import exif_matches, haversine_distance
from image_finder.image_search.matcher import evaluate
from image_finder.image_search.models import Camera, Description, ExifData, GPS, MediaItem


def item_with_exif(**exif_kwargs) -> MediaItem:
    exif = ExifData(**exif_kwargs)
    return MediaItem(path="/photos/a.jpg", width=exif.width, height=exif.height, exif=exif)


class TestHaversine:

    def test_identical_points(self):
        assert haversine_distance(52.37, 4.89, 52.37, 4.89) == 0.0

    def test_amsterdam_to_paris(self):
        distance = haversine_distance(52.37, 4.90, 48.86, 2.35)
        assert 420_000 < distance < 440_000

    def test_one_degree_at_equator(self):
        assert haversine_distance(0, 0, 0, 1) == pytest.approx(111_195, rel=1e-3)


class TestGeoFilter:

    def test_same_point_matches_any_radius(self):
        item = item_with_exif(gps=GPS(latitude=52.37, longitude=4.89))
        criteria = FilterCriteria(geo_location=(52.37, 4.89), geo_distance_in_meters=1)
        assert evaluate(item, criteria)

    def test_far_point_fails_default_radius(self):
        item = item_with_exif(gps=GPS(latitude=0.0, longitude=9.0))
        assert not evaluate(item, FilterCriteria(geo_location=(0.0, 0.0)))

    def test_radius_is_inclusive_of_nearby_points(self):
        # About 556 meters north
        item = item_with_exif(gps=GPS(latitude=52.005, longitude=4.0))
        assert evaluate(item, FilterCriteria(geo_location=(52.0, 4.0)))
        assert not evaluate(item, FilterCriteria(geo_location=(52.0, 4.0), geo_distance_in_meters=500))

    @pytest.mark.parametrize(
        "criteria",
        [
            FilterCriteria(geo_location=(52.0, 4.0)),
            FilterCriteria(meta_gps_latitude=[-90, 90]),
            FilterCriteria(meta_gps_altitude=[0, 10000]),
        ],
    )
    def test_missing_gps_fails_gps_filters(self, criteria):
        item = MediaItem(
            path="/photos/a.jpg",
            description=Description(keywords=["beach"]),
            exif=ExifData(camera=Camera(make="Canon")),
        )
        criteria.keywords = ["beach"]
        assert not evaluate(item, criteria)

    def test_missing_exif_fails_gps_filters(self):
        assert not exif_matches(MediaItem(path="/a.jpg"), FilterCriteria(meta_gps_longitude=[0, 10]))

    def test_gps_ranges(self):
        item = item_with_exif(gps=GPS(latitude=52.1, longitude=4.3, altitude=-3.5))
        assert exif_matches(item, FilterCriteria(meta_gps_latitude=[52, 53], meta_gps_longitude=[4, 5]))
        assert exif_matches(item, FilterCriteria(meta_gps_altitude=[-10, 0]))
        assert not exif_matches(item, FilterCriteria(meta_gps_latitude=[50, 51]))


class TestExifRanges:

    @pytest.mark.parametrize(
        "iso,f_number,expected",
        [
            (100, 1.4, True),
            (800, 2.8, True),
            (400, 2.0, True),
            (1600, 2.0, False),
            (400, 4.0, False),
            (None, 2.0, False),
        ],
    )
    def test_iso_and_f_number_ranges(self, iso, f_number, expected):
        item = item_with_exif(iso=iso, f_number=f_number)
        criteria = FilterCriteria(meta_iso=[100, 800], meta_f_number=[1.4, 2.8])
        assert exif_matches(item, criteria) is expected

    def test_exact_value(self):
        item = item_with_exif(focal_length=50.0, exposure_time=1 / 125)
        assert exif_matches(item, FilterCriteria(meta_focal_length=[50]))
        assert exif_matches(item, FilterCriteria(meta_exposure_time=[0.008]))
        assert not exif_matches(item, FilterCriteria(meta_focal_length=[35]))

    def test_date_taken(self):
        item = item_with_exif(date_taken=datetime(2024, 7, 14, 18, 30))
        criteria = FilterCriteria(meta_date_taken=[datetime(2024, 7, 1), datetime(2024, 7, 31)])
        assert exif_matches(item, criteria)

    def test_camera_patterns(self):
        item = item_with_exif(camera=Camera(make="Canon", model="EOS R5"))
        assert exif_matches(item, FilterCriteria(meta_camera_make=["canon"]))
        assert exif_matches(item, FilterCriteria(meta_camera_model=["EOS*"]))
        assert not exif_matches(item, FilterCriteria(meta_camera_make=["Nikon"]))

    def test_missing_exif_fails_exif_filters(self):
        item = MediaItem(path="/a.jpg", width=64, height=48)
        assert not exif_matches(item, FilterCriteria(meta_camera_make=["*"]))
        assert not exif_matches(item, FilterCriteria(meta_iso=[100, 800]))

    def test_dimensions_fall_back_to_decoded_size(self):
        item = MediaItem(path="/a.jpg", width=64, height=48)
        assert exif_matches(item, FilterCriteria(meta_width=[64], meta_height=[40, 50]))
        assert not exif_matches(item, FilterCriteria(meta_width=[100, 200]))

    def test_no_exif_criteria_is_vacuous(self):
        assert exif_matches(MediaItem(path="/a.jpg"), FilterCriteria(keywords=["x"]))
