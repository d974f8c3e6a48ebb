"""Tests for tyre size parsing and the comparison geometry."""

import pytest

from app.models.tyre import TyreSize
from app.utils.tire_math import (
    INVALID_FORMAT_MESSAGE,
    MM_PER_INCH,
    TyreSizeFormatError,
    calculate_overall_diameter,
    calculate_sidewall_height,
    compare_tyre_sizes,
    format_tyre_size,
    is_fitment_compatible,
    parse_tyre_size,
)

STOCK = TyreSize(width=185, aspect_ratio=65, rim_diameter=15)
WIDER = TyreSize(width=195, aspect_ratio=60, rim_diameter=15)

# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParseTyreSize:
    def test_spaced_format(self):
        assert parse_tyre_size("185/65 R15") == STOCK

    def test_no_spaces_parses_identically(self):
        assert parse_tyre_size("185/65R15") == parse_tyre_size("185/65 R15")

    def test_lowercase_r(self):
        assert parse_tyre_size("185/65 r15") == STOCK

    def test_multiple_spaces_around_r(self):
        assert parse_tyre_size("185/65   R   15") == STOCK

    def test_surrounding_whitespace_trimmed(self):
        assert parse_tyre_size("  185/65 R15\t") == STOCK

    def test_fields_are_ints(self):
        size = parse_tyre_size("205/55R16")
        assert isinstance(size.width, int)
        assert size.width == 205
        assert size.aspect_ratio == 55
        assert size.rim_diameter == 16

    def test_no_range_validation(self):
        assert parse_tyre_size("000/00R00") == TyreSize(width=0, aspect_ratio=0, rim_diameter=0)

    @pytest.mark.parametrize(
        "raw",
        [
            "invalid",
            "",
            "1850/65R15",  # 4-digit width
            "185/65R5",  # 1-digit rim
            "185/6R15",  # 1-digit aspect
            "185-65R15",  # wrong separator
            "185/65 15",  # missing R
            "185/65R15X",  # trailing characters
            "185/65ZR15",  # speed rating letter not accepted
            "P185/65R15",
        ],
    )
    def test_rejects_malformed(self, raw):
        with pytest.raises(TyreSizeFormatError) as exc_info:
            parse_tyre_size(raw)
        assert str(exc_info.value) == INVALID_FORMAT_MESSAGE
        assert exc_info.value.raw == raw

    def test_rejects_non_ascii_digits(self):
        with pytest.raises(TyreSizeFormatError):
            parse_tyre_size("١٨٥/٦٥R١٥")

    def test_tyre_size_is_immutable(self):
        with pytest.raises(Exception):
            STOCK.width = 200  # type: ignore[misc]


class TestFormatRoundTrip:
    @pytest.mark.parametrize(
        "width,aspect,rim",
        [(185, 65, 15), (225, 45, 18), (315, 35, 20), (105, 80, 12)],
    )
    def test_every_separator_variant_round_trips(self, width, aspect, rim):
        size = TyreSize(width=width, aspect_ratio=aspect, rim_diameter=rim)
        assert parse_tyre_size(format_tyre_size(size)) == size
        assert parse_tyre_size(format_tyre_size(size, spaced=False)) == size
        assert parse_tyre_size(format_tyre_size(size).lower()) == size
        assert parse_tyre_size(f"{width}/{aspect}  R  {rim}") == size

    def test_format_spaced(self):
        assert format_tyre_size(STOCK) == "185/65 R15"
        assert format_tyre_size(STOCK, spaced=False) == "185/65R15"


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------


class TestGeometry:
    def test_sidewall_height(self):
        assert calculate_sidewall_height(185, 65) == pytest.approx(120.25)

    def test_overall_diameter(self):
        # 2 × 120.25 + 15 × 25.4
        assert calculate_overall_diameter(STOCK) == pytest.approx(621.5)

    def test_rim_converted_from_inches(self):
        no_sidewall = TyreSize(width=185, aspect_ratio=0, rim_diameter=17)
        assert calculate_overall_diameter(no_sidewall) == pytest.approx(17 * MM_PER_INCH)


class TestCompareTyreSizes:
    def test_stock_to_wider_lower_profile(self):
        result = compare_tyre_sizes(STOCK, WIDER)

        assert result.old_diameter == pytest.approx(621.5)
        assert result.new_diameter == pytest.approx(615.0)
        assert result.diameter_change == pytest.approx(-6.5)
        assert result.diameter_change_percent == pytest.approx(-6.5 / 621.5 * 100)
        assert result.height_difference == pytest.approx(117.0 - 120.25)
        assert result.width_difference == 10
        assert result.fitment_compatible is True

    def test_speedometer_error_equals_diameter_change_percent(self):
        result = compare_tyre_sizes(STOCK, WIDER)
        assert result.speedometer_error == result.diameter_change_percent
        assert result.actual_speed_at_100 == pytest.approx(100 + result.diameter_change_percent)

    def test_identical_sizes(self):
        result = compare_tyre_sizes(STOCK, STOCK)

        assert result.diameter_change == 0
        assert result.diameter_change_percent == 0
        assert result.height_difference == 0
        assert result.width_difference == 0
        assert result.fitment_compatible is True

    def test_large_upsize_is_incompatible(self):
        result = compare_tyre_sizes(STOCK, parse_tyre_size("225/45 R18"))

        assert result.new_diameter == pytest.approx(659.7)
        assert result.diameter_change_percent == pytest.approx(38.2 / 621.5 * 100)
        assert result.diameter_change_percent > 3
        assert result.fitment_compatible is False

    def test_plus_two_within_tolerance(self):
        # 215/45 R17 is a classic plus-two for 185/65 R15: +3.8 mm, about +0.61%
        result = compare_tyre_sizes(STOCK, parse_tyre_size("215/45 R17"))

        assert result.new_diameter == pytest.approx(625.3)
        assert result.diameter_change_percent == pytest.approx(0.6114, abs=1e-4)
        assert result.fitment_compatible is True

    def test_downsize_is_incompatible(self):
        result = compare_tyre_sizes(STOCK, parse_tyre_size("175/55 R14"))
        assert result.diameter_change_percent < -3
        assert result.fitment_compatible is False

    def test_width_difference_is_int(self):
        result = compare_tyre_sizes(WIDER, STOCK)
        assert result.width_difference == -10
        assert isinstance(result.width_difference, int)

    def test_larger_rim_strictly_increases_diameter(self):
        previous = compare_tyre_sizes(STOCK, STOCK)
        for rim in range(16, 23):
            new = TyreSize(width=185, aspect_ratio=65, rim_diameter=rim)
            result = compare_tyre_sizes(STOCK, new)
            assert result.new_diameter > previous.new_diameter
            assert result.diameter_change_percent > previous.diameter_change_percent
            previous = result

    def test_change_is_antisymmetric_but_percent_is_not(self):
        forward = compare_tyre_sizes(STOCK, WIDER)
        backward = compare_tyre_sizes(WIDER, STOCK)

        assert forward.diameter_change == pytest.approx(-backward.diameter_change)
        # Percentages use the respective old diameter as denominator
        assert backward.diameter_change_percent == pytest.approx(6.5 / 615.0 * 100)
        assert backward.diameter_change_percent != pytest.approx(-forward.diameter_change_percent)

    def test_zero_old_diameter_is_unguarded(self):
        zero = parse_tyre_size("000/00R00")
        with pytest.raises(ZeroDivisionError):
            compare_tyre_sizes(zero, STOCK)

    def test_result_is_immutable(self):
        result = compare_tyre_sizes(STOCK, WIDER)
        with pytest.raises(Exception):
            result.fitment_compatible = False  # type: ignore[misc]


class TestFitmentTolerance:
    @pytest.mark.parametrize("percent", [0.0, 2.99, 3.0, -3.0])
    def test_within_three_percent(self, percent):
        assert is_fitment_compatible(percent) is True

    @pytest.mark.parametrize("percent", [3.01, -3.01, 10.0])
    def test_beyond_three_percent(self, percent):
        assert is_fitment_compatible(percent) is False
