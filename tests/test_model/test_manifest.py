"""Tests for the placement manifest."""

from __future__ import annotations

import json
from pathlib import Path

from spritely.model import Manifest, Placement


def _placement(sheet: str = "sprite_0.png", x: int = 0) -> Placement:
    return Placement(sheet=sheet, url=f"img/{sheet}", x=x, y=0, width=16, height=16)


class TestManifestLookup:
    def test_hit(self, tmp_path):
        (tmp_path / "sprite_0.png").write_bytes(b"")
        manifest = Manifest()
        manifest.record(Path("/img/a.png"), "abc", _placement())
        assert manifest.lookup(Path("/img/a.png"), "abc", tmp_path) == _placement()

    def test_changed_fingerprint(self, tmp_path):
        (tmp_path / "sprite_0.png").write_bytes(b"")
        manifest = Manifest()
        manifest.record(Path("/img/a.png"), "abc", _placement())
        assert manifest.lookup(Path("/img/a.png"), "def", tmp_path) is None

    def test_missing_sheet_file(self, tmp_path):
        manifest = Manifest()
        manifest.record(Path("/img/a.png"), "abc", _placement())
        assert manifest.lookup(Path("/img/a.png"), "abc", tmp_path) is None

    def test_unknown_image(self, tmp_path):
        assert Manifest().lookup(Path("/img/a.png"), "abc", tmp_path) is None


class TestManifestIndex:
    def test_empty(self):
        assert Manifest().max_index("sprite_") == -1

    def test_highest_matching_prefix(self):
        manifest = Manifest()
        manifest.record(Path("/a.png"), "1", _placement("sprite_2.png"))
        manifest.record(Path("/b.png"), "2", _placement("sprite_10.png"))
        manifest.record(Path("/c.png"), "3", _placement("other_99.png"))
        assert manifest.max_index("sprite_") == 10


class TestManifestPersistence:
    def test_save_and_load(self, tmp_path):
        manifest = Manifest()
        manifest.record(Path("/img/a.png"), "abc", _placement(x=16))
        path = tmp_path / "nested" / "manifest.json"
        manifest.save(path)

        data = json.loads(path.read_text())
        assert data["timestamp"]
        assert data["images"]["/img/a.png"]["x"] == 16

        loaded = Manifest.load(path)
        assert loaded.timestamp == manifest.timestamp
        assert loaded.entries["/img/a.png"].placement == _placement(x=16)
        assert loaded.entries["/img/a.png"].fingerprint == "abc"

    def test_missing_file_is_empty(self, tmp_path):
        assert Manifest.load(tmp_path / "nope.json").entries == {}

    def test_corrupt_file_is_empty(self, tmp_path):
        path = tmp_path / "manifest.json"
        path.write_text("{not json")
        assert Manifest.load(path).entries == {}

    def test_non_object_file_is_empty(self, tmp_path):
        path = tmp_path / "manifest.json"
        path.write_text("[1, 2]")
        assert Manifest.load(path).entries == {}

    def test_broken_entries_are_dropped(self, tmp_path):
        path = tmp_path / "manifest.json"
        path.write_text(json.dumps({"images": {
            "/a.png": {"fingerprint": "f", "sheet": "s.png", "url": "s.png", "x": 0, "y": 0, "width": 1, "height": 1},
            "/b.png": {"fingerprint": "f", "sheet": "s.png"},
        }}))
        assert list(Manifest.load(path).entries) == ["/a.png"]
