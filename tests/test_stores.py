"""Tests for sidecar stores and the directory scanner."""

from pathlib import Path

from image_finder.image_search.metadata_store import SqliteSidecarStore
from image_finder.image_search.scanner import ImageScanner, is_supported_image, scan_images
from image_finder.image_search.sidecar_store import StreamSidecarStore


class TestStreamSidecarStore:

    def test_stream_naming(self, store):
        assert str(store.stream_path("/p/a.jpg", "people")) == "/p/a.jpg:people.json"
        assert str(store.stream_path("/p/a.jpg", "description", "nl")) == "/p/a.jpg:description.Dutch.json"
        assert str(store.stream_path("/p/a.jpg", "EXIF")) == "/p/a.jpg:EXIF.json"

    def test_read_write(self, store, make_image):
        path = make_image()
        assert store.read(path, "scenes") is None
        store.write(path, "scenes", '{"scene": "beach"}')
        assert store.read(path, "scenes") == '{"scene": "beach"}'


class TestSqliteSidecarStore:

    def test_read_write_and_overwrite(self, tmp_path):
        index = SqliteSidecarStore(str(tmp_path / "db" / "index.db"))
        image = str(tmp_path / "a.jpg")
        assert index.read(image, "people") is None

        index.write(image, "people", '{"count": 1}')
        index.write(image, "people", '{"count": 2}')
        assert index.read(image, "people") == '{"count": 2}'
        assert index.get_stats()["total_sidecars"] == 1

    def test_language_specific_descriptions(self, tmp_path):
        index = SqliteSidecarStore(str(tmp_path / "index.db"))
        image = str(tmp_path / "a.jpg")
        index.write(image, "description", '{"keywords": ["cat"]}')
        index.write(image, "description", '{"keywords": ["kat"]}', "Dutch")
        assert index.read(image, "description", "nl") == '{"keywords": ["kat"]}'
        assert index.get_stats()["sidecars_by_name"] == {"description.Dutch.json": 1, "description.json": 1}

    def test_import_sidecars(self, tmp_path, make_image, write_sidecars, store):
        path = make_image()
        write_sidecars(path, description={"keywords": ["cat"]}, people={"count": 0})
        write_sidecars(path, language="Dutch", description={"keywords": ["kat"]})

        index = SqliteSidecarStore(str(tmp_path / "index.db"))
        assert index.import_sidecars(path, store, languages=["Dutch"]) == 3
        assert index.read(path, "description", "Dutch") == '{"keywords": ["kat"]}'

    def test_iter_image_paths(self, tmp_path):
        index = SqliteSidecarStore(str(tmp_path / "index.db"))
        root = tmp_path / "photos"
        for relative in ("a.jpg", "sub/b.jpg", "../photos2/c.jpg"):
            index.add_image(str(root / relative))

        recursive = [Path(p).name for p in index.iter_image_paths(str(root))]
        flat = [Path(p).name for p in index.iter_image_paths(str(root), recursive=False)]
        assert recursive == ["a.jpg", "b.jpg"]
        assert flat == ["a.jpg"]

    def test_add_image_is_idempotent(self, tmp_path):
        index = SqliteSidecarStore(str(tmp_path / "index.db"))
        assert index.add_image(str(tmp_path / "a.jpg")) == index.add_image(str(tmp_path / "a.jpg"))
        assert index.get_stats()["total_images"] == 1


class TestScanner:

    def test_supported_extensions(self):
        assert is_supported_image("a.JPG")
        assert is_supported_image("a.webp")
        assert is_supported_image("a.tif")
        assert not is_supported_image("a.jpg:people.json")
        assert not is_supported_image("notes.txt")

    def test_scan_directory(self, tmp_path, make_image):
        make_image("b.png", directory=tmp_path / "root")
        make_image("a.jpg", directory=tmp_path / "root" / "nested")
        (tmp_path / "root" / "readme.md").write_text("hi")

        scanner = ImageScanner()
        paths = scanner.scan_directory(str(tmp_path / "root"))
        assert [Path(p).name for p in paths] == ["b.png", "a.jpg"]
        assert scanner.get_stats()["skipped"] == 1

        assert [Path(p).name for p in scan_images(str(tmp_path / "root"), recursive=False)] == ["b.png"]

    def test_missing_directory(self, tmp_path):
        scanner = ImageScanner()
        assert scanner.scan_directory(str(tmp_path / "missing")) == []
        assert scanner.get_stats()["missing"] == 1
