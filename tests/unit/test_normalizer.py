"""Unit tests for text and numeric cell normalization."""

from __future__ import annotations

import math
from decimal import Decimal

import pytest

from boqrecon.canonical.normalize import (
    clean_cell,
    normalize_text,
    parse_decimal,
    parse_dimensions,
)
from boqrecon.models import Dimensions


class TestNormalizeText:
    def test_collapses_whitespace_and_case(self):
        assert normalize_text("  Marble   FLOORING ") == "marble flooring"

    def test_empty(self):
        assert normalize_text(None) == ""
        assert normalize_text("") == ""


class TestCleanCell:
    """Raw spreadsheet cell rendering."""

    def test_blank_values(self):
        assert clean_cell(None) == ""
        assert clean_cell(math.nan) == ""

    def test_integral_float(self):
        # pandas reads line numbers as floats
        assert clean_cell(3.0) == "3"

    def test_fractional_float(self):
        assert clean_cell(2.5) == "2.5"

    def test_strips_text(self):
        assert clean_cell("  1.1 ") == "1.1"


class TestParseDecimal:
    """Numeric cell parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (155, Decimal("155")),
            (850.5, Decimal("850.5")),
            ("1,250.00", Decimal("1250.00")),
            ("AED 3,600", Decimal("3600")),
            ("€ 45.50", Decimal("45.50")),
            (Decimal("12.3"), Decimal("12.3")),
            (None, Decimal("0")),
            ("", Decimal("0")),
            (math.nan, Decimal("0")),
        ],
    )
    def test_parse(self, value, expected):
        assert parse_decimal(value) == expected

    @pytest.mark.parametrize("value", ["abc", "12 units", "N/A", "inf", math.inf, True])
    def test_rejects_non_numeric(self, value):
        with pytest.raises(ValueError):
            parse_decimal(value)

    def test_float_uses_shortest_repr(self):
        assert parse_decimal(0.1) == Decimal("0.1")


class TestParseDimensions:
    """``W x H [unit]`` parsing."""

    def test_millimetres(self):
        dims = parse_dimensions("Door 2100x2400 mm, hardwood")

        assert dims == Dimensions(width=Decimal("2100"), height=Decimal("2400"), unit="mm")
        assert dims.area_m2 == Decimal("5.04")

    def test_unit_defaults_to_mm(self):
        dims = parse_dimensions("Tiles 600 x 600")
        assert dims.unit == "mm"
        assert dims.area_m2 == Decimal("0.36")

    def test_multiplication_sign_and_metres(self):
        dims = parse_dimensions("Panel 1.2×2.4m")
        assert dims.unit == "m"
        assert dims.width_m == Decimal("1.2")
        assert dims.area_m2 == Decimal("2.88")

    def test_centimetres(self):
        dims = parse_dimensions("Mirror 90x120 cm")
        assert dims.width_m == Decimal("0.9")
        assert dims.height_m == Decimal("1.2")

    @pytest.mark.parametrize(
        "text,unit",
        [
            ("Screen 2x3 metres", "m"),
            ("Screen 2x3 Meters", "m"),
            ("Mirror 90 x 120 centimetres", "cm"),
            ("Door 2100x2400 millimeters", "mm"),
        ],
    )
    def test_unit_words(self, text, unit):
        assert parse_dimensions(text).unit == unit

    def test_unknown_unit_word_is_not_read_as_default(self):
        assert parse_dimensions("Screen 2x3mtrs") is None

    def test_no_dimensions(self):
        assert parse_dimensions("Marble flooring") is None
        assert parse_dimensions(None) is None

    def test_str(self):
        assert str(parse_dimensions("2100x2400 mm")) == "2100x2400 mm"
