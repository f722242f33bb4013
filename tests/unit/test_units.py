"""Unit tests for unit-of-measure normalization and worksheet categories."""

from __future__ import annotations

import pytest

from boqrecon.canonical.categories import category_for_sheet
from boqrecon.canonical.units import (
    UnitNormalizer,
    get_unit_normalizer,
    load_unit_synonyms,
)


class TestUnitNormalizer:
    """Synonym table lookups."""

    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("sqm", "m²"),
            ("sq.m", "m²"),
            ("SQM", "m²"),
            ("m2", "m²"),
            ("pcs", "nos"),
            ("number", "nos"),
            ("No.", "nos"),
            ("cum", "cum"),
            ("L.S", "LS"),
            ("Lump  Sum", "LS"),
            ("rm", "m"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert UnitNormalizer().normalize(raw)[0] == expected

    def test_recognised_flag(self):
        units = UnitNormalizer()
        assert units.normalize("sqm") == ("m²", True)
        assert units.normalize("bags") == ("bags", False)

    def test_blank_unit(self):
        units = UnitNormalizer()
        assert units.normalize(None) == ("", False)
        assert units.normalize("   ") == ("", False)

    def test_unrecognised_unit_passes_through_unchanged(self):
        assert UnitNormalizer().normalize(" Bags ") == ("Bags", False)

    def test_custom_synonyms_extend_table(self):
        units = UnitNormalizer({"SFT": "ft²"})

        assert units.normalize("sft") == ("ft²", True)
        assert units.normalize("sqm") == ("m²", True)
        assert units.is_standard("ft²")

    def test_is_standard(self):
        units = UnitNormalizer()
        assert units.is_standard("m²")
        assert units.is_standard("LS")
        assert not units.is_standard("bags")


class TestUnitSynonymsFile:
    """YAML synonym files."""

    def test_load_unit_synonyms(self, tmp_path):
        path = tmp_path / "units.yaml"
        path.write_text('synonyms:\n  sft: "ft²"\n  "sq.ft": "ft²"\n', encoding="utf-8")

        assert load_unit_synonyms(path) == {"sft": "ft²", "sq.ft": "ft²"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_unit_synonyms(tmp_path / "missing.yaml")

    def test_missing_synonyms_key(self, tmp_path):
        path = tmp_path / "units.yaml"
        path.write_text("units:\n  - sft\n", encoding="utf-8")

        with pytest.raises(ValueError, match="synonyms"):
            load_unit_synonyms(path)

    def test_default_normalizer_reads_configured_file(self, tmp_path, monkeypatch):
        path = tmp_path / "units.yaml"
        path.write_text("synonyms:\n  bags: bag\n", encoding="utf-8")
        monkeypatch.setenv("UNIT_SYNONYMS_PATH", str(path))

        assert get_unit_normalizer().normalize("Bags") == ("bag", True)


class TestCategories:
    """Worksheet name → category mapping."""

    def test_known_sheet(self):
        category = category_for_sheet("Doors")
        assert category.name == "Architectural Finishes - Doors"
        assert category.code == "ARC-DOR"

    def test_known_sheet_whitespace_and_case(self):
        assert category_for_sheet("  FLOOR &  Floor Finishes ").code == "ARC-FLR"

    def test_known_sheet_full_width_characters(self):
        assert category_for_sheet("\uff24\uff4f\uff4f\uff52\uff53").code == "ARC-DOR"

    def test_unknown_sheet_derives_code(self):
        category = category_for_sheet("Landscape Works")
        assert category.name == "Landscape Works"
        assert category.code == "LAN-WOR"

    def test_unnamed_sheet(self):
        category = category_for_sheet("  ")
        assert category.name == "Uncategorised"
        assert category.code == "BOQ"
