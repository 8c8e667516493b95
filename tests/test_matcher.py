"""Tests for category matching and confidence filtering."""

import pytest

from image_finder.image_search.criteria import FilterCriteria
from image_finder.image_search.matcher import apply_confidence_filter, evaluate, searchable_values
from image_finder.image_search.models import (
    Camera,
    Description,
    ExifData,
    MediaItem,
    Objects,
    People,
    Prediction,
    Scenes,
)


def make_item(**kwargs) -> MediaItem:
    kwargs.setdefault("path", "/photos/holiday/img001.jpg")
    return MediaItem(**kwargs)


@pytest.fixture
def beach_item():
    return make_item(
        description=Description(
            short_description="Sunset at the beach",
            long_description="A golden sunset over a quiet beach with a dog running.",
            keywords=["sunset", "beach", "dog"],
            picture_type="photograph",
            style_type="landscape",
            overall_mood="calm",
        ),
        people=People(count=1, faces=["Alice"], predictions=[Prediction("Alice", 0.8)]),
        objects=Objects(
            count=2,
            objects=[Prediction("dog", 0.95), Prediction("umbrella", 0.4)],
            object_counts={"dog": 1, "umbrella": 1},
        ),
        scenes=Scenes(success=True, scene="beach", confidence=0.7),
    )


class TestCategoryLogic:

    def test_no_criteria_includes_everything(self):
        assert evaluate(make_item(), FilterCriteria())

    def test_and_across_categories(self, beach_item):
        # Keywords match but People does not
        assert evaluate(beach_item, FilterCriteria(keywords=["sunset"]))
        assert not evaluate(beach_item, FilterCriteria(keywords=["sunset"], people=["Bob"]))
        assert evaluate(beach_item, FilterCriteria(keywords=["sunset"], people=["Alice"]))

    def test_or_within_category(self):
        item = make_item(description=Description(keywords=["dog"]))
        assert evaluate(item, FilterCriteria(keywords=["cat", "dog"]))

    def test_keywords_are_matched_as_supplied(self, beach_item):
        assert not evaluate(beach_item, FilterCriteria(keywords=["sun"]))
        assert evaluate(beach_item, FilterCriteria(keywords=["sun*"]))
        assert evaluate(beach_item, FilterCriteria(keywords=["SUNSET"]))

    def test_missing_description_fails_description_categories(self):
        item = make_item()
        assert not evaluate(item, FilterCriteria(keywords=["*"]))
        assert not evaluate(item, FilterCriteria(picture_type=["*"]))
        assert not evaluate(item, FilterCriteria(description_search=["*"]))

    def test_people_and_objects(self, beach_item):
        assert evaluate(beach_item, FilterCriteria(people=["ali*"]))
        assert evaluate(beach_item, FilterCriteria(objects=["umbrella"]))
        assert not evaluate(beach_item, FilterCriteria(objects=["car"]))

    def test_scene_match(self, beach_item):
        assert evaluate(beach_item, FilterCriteria(scenes=["beach"]))
        assert not evaluate(beach_item, FilterCriteria(scenes=["forest"]))

    @pytest.mark.parametrize("pattern", ["unknown", "*", "unk*"])
    def test_unknown_scene_never_matches(self, pattern):
        item = make_item(description=Description(keywords=["x"]), scenes=Scenes())
        assert not evaluate(item, FilterCriteria(scenes=[pattern]))

    def test_description_fields(self, beach_item):
        assert evaluate(beach_item, FilterCriteria(picture_type=["photo*"]))
        assert evaluate(beach_item, FilterCriteria(style_type=["landscape", "portrait"]))
        assert not evaluate(beach_item, FilterCriteria(overall_mood=["angry"]))

    def test_description_search_checks_short_and_long(self, beach_item):
        assert evaluate(beach_item, FilterCriteria(description_search=["*dog running*"]))
        assert evaluate(beach_item, FilterCriteria(description_search=["sunset at*"]))
        assert not evaluate(beach_item, FilterCriteria(description_search=["*mountain*"]))

    def test_description_search_matches_plain_phrases_anywhere(self, beach_item):
        assert evaluate(beach_item, FilterCriteria(description_search=["sunset"]))
        assert evaluate(beach_item, FilterCriteria(description_search=["quiet beach"]))
        assert not evaluate(beach_item, FilterCriteria(description_search=["mountain"]))

    def test_keywords_are_not_wrapped_like_description_search(self, beach_item):
        assert not evaluate(beach_item, FilterCriteria(keywords=["sun"]))
        assert evaluate(beach_item, FilterCriteria(description_search=["sun"]))


class TestContentFlags:

    def test_has_and_no_nudity(self):
        flagged = make_item(description=Description(has_nudity=True))
        clean = make_item(description=Description())
        assert evaluate(flagged, FilterCriteria(has_nudity=True))
        assert not evaluate(clean, FilterCriteria(has_nudity=True))
        assert evaluate(clean, FilterCriteria(no_nudity=True))
        assert not evaluate(flagged, FilterCriteria(no_nudity=True))

    def test_no_flags_pass_without_description(self):
        assert evaluate(make_item(), FilterCriteria(no_explicit_content=True))
        assert not evaluate(make_item(), FilterCriteria(has_explicit_content=True))

    def test_multiple_flags_are_ored(self):
        explicit = make_item(description=Description(has_explicit_content=True))
        assert evaluate(explicit, FilterCriteria(has_nudity=True, has_explicit_content=True))


class TestAnySearch:

    def test_any_wraps_terms(self, beach_item):
        assert evaluate(beach_item, FilterCriteria(any=["golden"]))
        assert evaluate(beach_item, FilterCriteria(any=["holiday"]))
        assert evaluate(beach_item, FilterCriteria(any=["umbrel"]))
        assert not evaluate(beach_item, FilterCriteria(any=["mountain"]))

    def test_any_covers_exif_fields(self):
        item = make_item(exif=ExifData(camera=Camera(make="Canon", model="EOS R5"), software="Lightroom"))
        assert evaluate(item, FilterCriteria(any=["eos"]))
        assert evaluate(item, FilterCriteria(any=["lightroom"]))

    def test_unknown_scene_is_not_searchable(self):
        assert "unknown" not in searchable_values(make_item())


class TestConfidenceFilter:

    def test_filter_mutates_objects(self):
        item = make_item(
            objects=Objects(
                count=2,
                objects=[Prediction("car", 0.9), Prediction("bike", 0.3)],
                object_counts={"car": 1, "bike": 1},
            )
        )
        assert evaluate(item, FilterCriteria(min_confidence_ratio=0.5))
        assert item.objects.labels == ["car"]
        assert item.objects.count == 1
        assert item.objects.object_counts == {"car": 1}

    def test_filter_mutates_people_and_scene(self, beach_item):
        assert apply_confidence_filter(beach_item, 0.9)
        assert beach_item.people.count == 0
        assert beach_item.people.faces == []
        assert beach_item.scenes.is_unknown
        assert beach_item.objects.labels == ["dog"]

    def test_confidence_only_drops_items_without_qualifying_entries(self, beach_item):
        assert not evaluate(beach_item, FilterCriteria(min_confidence_ratio=0.99))
        assert not evaluate(make_item(), FilterCriteria(min_confidence_ratio=0.1))

    def test_categories_see_filtered_detections(self, beach_item):
        assert not evaluate(beach_item, FilterCriteria(objects=["umbrella"], min_confidence_ratio=0.5))
        assert evaluate(beach_item, FilterCriteria(objects=["dog"], min_confidence_ratio=0.5))

    def test_item_kept_when_other_criteria_match(self, beach_item):
        # Nothing passes 0.99, but keywords still match and decide inclusion
        assert evaluate(beach_item, FilterCriteria(keywords=["beach"], min_confidence_ratio=0.99))
        assert beach_item.objects.count == 0
