"""
Tests for reading and writing annotation documents.
"""

import json

import pytest

from ocr_overlay.core.annotation import schema
from ocr_overlay.core.annotation.geometry import Box, PageCalibration
from ocr_overlay.core.annotation.schema import (
    DEMO_REGIONS,
    SchemaAdapter,
    companion_json_path,
    export_document,
    import_document,
    import_json,
)
from ocr_overlay.core.annotation.state import Region
from ocr_overlay.core.annotation.utils import Color

PALETTE = [Color(255, 0, 0), Color(0, 255, 0), Color(0, 0, 255)]


def assert_demo(parsed):
    assert parsed.is_demo
    assert [r.bounds for r in parsed.regions] == [
        Box(x, y, w, h) for x, y, w, h, _ in DEMO_REGIONS
    ]
    assert [r.id for r in parsed.regions] == [1, 2, 3]


class TestImport:
    """Tests for the accepted input shapes."""

    def test_current_schema(self, current_document):
        parsed = import_document(current_document, PALETTE)
        assert parsed.source == "current"
        assert (parsed.page_width, parsed.page_height) == (1000, 1400)
        assert [r.id for r in parsed.regions] == [1, 2]
        first = parsed.regions[0]
        assert first.is_quad
        assert first.text == "Invoice"
        assert first.confidence == 0.98
        assert first.vertices == ((120, 40), (480, 40), (480, 90), (120, 90))
        assert first.color == PALETTE[0]
        assert first.label == "Text 1"

    def test_legacy_pages_match_current(self, current_document, legacy_pages_document):
        current = import_document(current_document, PALETTE)
        legacy = import_document(legacy_pages_document, PALETTE)
        assert legacy.source == "legacy_pages"
        assert legacy.regions == current.regions
        assert (legacy.page_width, legacy.page_height) == (1000, 1400)

    def test_legacy_single_page(self, legacy_pages_document):
        parsed = import_document(legacy_pages_document[0], PALETTE)
        assert parsed.source == "legacy_page"
        assert parsed.page_height == 1400

    def test_correctly_spelled_height_accepted(self, ocr_results):
        page = {"page_width": 10, "page_height": 20, "results": ocr_results}
        assert import_document(page, PALETTE).page_height == 20

    def test_only_first_page_loaded(self, legacy_pages_document):
        second = {"page_width": 1, "page_heigth": 1, "results": []}
        parsed = import_document(legacy_pages_document + [second], PALETTE)
        assert len(parsed.regions) == 2

    def test_malformed_items_dropped(self):
        data = {
            "ocr_results": [
                {"text": "three", "vertices": [[0, 0], [1, 0], [1, 1]]},
                {"text": "strings", "vertices": [["a", 0], [1, 0], [1, 1], [0, 1]]},
                {"text": "ok", "vertices": [[0, 0], [1, 0], [1, 1], [0, 1]]},
                "not an item",
            ]
        }
        parsed = import_document(data, PALETTE)
        assert [(r.id, r.text) for r in parsed.regions] == [(1, "ok")]

    def test_missing_fields_default(self):
        data = {"ocr_results": [{"vertices": [[0, 0], [1, 0], [1, 1], [0, 1]]}]}
        region = import_document(data, PALETTE).regions[0]
        assert region.text == ""
        assert region.confidence is None
        assert not region.marked

    def test_marked_flag_read(self):
        data = {
            "ocr_results": [
                {"marked": True, "vertices": [[0, 0], [1, 0], [1, 1], [0, 1]]}
            ]
        }
        assert import_document(data, PALETTE).regions[0].marked

    @pytest.mark.parametrize("value", ["false", "true", 1, None])
    def test_marked_requires_json_boolean(self, value):
        data = {
            "ocr_results": [
                {"marked": value, "vertices": [[0, 0], [1, 0], [1, 1], [0, 1]]}
            ]
        }
        assert import_document(data, PALETTE).regions[0].marked is False

    def test_empty_palette(self, current_document):
        parsed = import_document(current_document, [])
        assert parsed.source == "current"
        assert {r.color for r in parsed.regions} == {schema.FALLBACK_COLOR}

    def test_palette_cycles(self):
        item = {"vertices": [[0, 0], [1, 0], [1, 1], [0, 1]]}
        parsed = import_document({"ocr_results": [item] * 4}, PALETTE)
        assert parsed.regions[3].color == PALETTE[0]


class TestDemoFallback:
    """Tests for input that falls back to the demo regions."""

    @pytest.mark.parametrize(
        "data", [None, 42, "text", [], [1, 2], {}, {"something": "else"}]
    )
    def test_unrecognized(self, data):
        assert_demo(import_document(data, PALETTE))

    def test_invalid_json(self):
        assert_demo(import_json("{not json", PALETTE))

    def test_demo_with_empty_palette(self):
        assert_demo(import_json("{not json", []))

    def test_matcher_failure(self, monkeypatch, current_document):
        def broken(data, palette):
            raise RuntimeError("boom")

        monkeypatch.setattr(schema, "SCHEMA_MATCHERS", (broken, schema.match_current))
        assert_demo(import_document(current_document, PALETTE))

    def test_demo_texts(self):
        parsed = SchemaAdapter(PALETTE).demo()
        assert parsed.regions[0].text == DEMO_REGIONS[0][4]
        assert all(r.confidence == 1.0 for r in parsed.regions)
        assert (parsed.page_width, parsed.page_height) == (None, None)


class TestExport:
    """Tests for writing the current schema."""

    def test_box_exported_clockwise(self):
        region = Region(id=1, box=Box(10, 20, 30, 40), text="t")
        document = export_document([region], PageCalibration())
        assert document["ocr_results"] == [
            {
                "text": "t",
                "confidence": 1.0,
                "marked": False,
                "vertices": [[10, 20], [40, 20], [40, 60], [10, 60]],
            }
        ]

    def test_round_trip_preserves_values(self, current_document):
        parsed = import_document(current_document, PALETTE)
        calibration = PageCalibration(parsed.page_width, parsed.page_height)
        document = export_document(parsed.regions, calibration)

        expected = json.loads(json.dumps(current_document))
        for item in expected["ocr_results"]:
            item["marked"] = False
        assert document == expected
        assert isinstance(document["ocr_results"][0]["vertices"][0][0], int)

    def test_unknown_confidence_is_null(self):
        region = Region(id=1, box=Box(0, 0, 1, 1), confidence=None)
        text = SchemaAdapter(PALETTE).export_json([region], PageCalibration())
        assert json.loads(text)["ocr_results"][0]["confidence"] is None

    def test_dimensions_fall_back_to_image(self):
        calibration = PageCalibration(image_pixel_width=640, image_pixel_height=480)
        document = export_document([], calibration)
        assert (document["image_width"], document["image_height"]) == (640, 480)

    def test_dimensions_default_zero(self):
        document = export_document([], PageCalibration())
        assert (document["image_width"], document["image_height"]) == (0, 0)

    def test_non_ascii_text_kept(self):
        region = Region(id=1, box=Box(0, 0, 1, 1), text="Größe")
        assert "Größe" in SchemaAdapter(PALETTE).export_json([region], PageCalibration())


class TestCompanionPath:
    """Tests for pairing images with annotation files."""

    def test_same_stem(self, tmp_path):
        image = tmp_path / "scan_01.png"
        image.touch()
        (tmp_path / "scan_01.json").write_text("{}")
        assert companion_json_path(image) == tmp_path / "scan_01.json"

    def test_case_insensitive(self, tmp_path):
        (tmp_path / "Scan_01.JSON").write_text("{}")
        assert companion_json_path(tmp_path / "scan_01.tif") == tmp_path / "Scan_01.JSON"

    def test_missing(self, tmp_path):
        (tmp_path / "other.json").write_text("{}")
        assert companion_json_path(tmp_path / "scan_01.png") is None
