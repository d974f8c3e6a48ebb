"""Tyre size calculator: parse two size strings and compare them.

Both sizes are parsed before any geometry runs; if either is malformed the
comparison is never attempted and a single fixed message is reported.
A current size with zero diameter is reported with its own message.
"""

from app.core.logging import log_calculation
from app.models.tyre import (
    CompareResponse,
    ComparisonDisplay,
    ComparisonResult,
    TyreSize,
)
from app.utils.tire_math import (
    FITMENT_TOLERANCE_PERCENT,
    ZERO_DIAMETER_MESSAGE,
    TyreSizeFormatError,
    compare_tyre_sizes,
    parse_tyre_size,
)


def parse_pair(old_raw: str, new_raw: str) -> tuple[TyreSize, TyreSize]:
    """Parse the current and new size strings.

    Raises:
        TyreSizeFormatError: If either string is malformed
    """
    try:
        old_size = parse_tyre_size(old_raw)
        new_size = parse_tyre_size(new_raw)
    except TyreSizeFormatError:
        log_calculation(old_raw, new_raw, "invalid_format")
        raise
    return old_size, new_size


def compare_sizes(old_raw: str, new_raw: str) -> CompareResponse:
    """Parse, compare and format two raw tyre size strings.

    A current size with zero overall diameter (only possible for all-zero
    input such as ``000/00R00``) raises TyreSizeFormatError carrying
    ZERO_DIAMETER_MESSAGE instead of dividing by zero.
    """
    old_size, new_size = parse_pair(old_raw, new_raw)
    try:
        result = compare_tyre_sizes(old_size, new_size)
    except ZeroDivisionError as e:
        log_calculation(old_raw, new_raw, "zero_diameter")
        raise TyreSizeFormatError(old_raw, ZERO_DIAMETER_MESSAGE) from e
    log_calculation(
        old_raw, new_raw, "compatible" if result.fitment_compatible else "incompatible"
    )

    return CompareResponse(
        old_size=old_size,
        new_size=new_size,
        result=result,
        display=format_comparison(result),
    )


def calculate(old_raw: str, new_raw: str) -> ComparisonResult:
    """Compare two raw tyre size strings."""
    return compare_sizes(old_raw, new_raw).result


def _signed(value: float, decimals: int) -> str:
    """Format with a leading '+' for values that stay positive once rounded."""
    rounded = round(value, decimals) + 0.0  # folds -0.0 into 0.0
    prefix = "+" if rounded > 0 else ""
    return f"{prefix}{rounded:.{decimals}f}"


def format_comparison(result: ComparisonResult) -> ComparisonDisplay:
    """Format a result for display.

    Diameters and height difference to 1 dp, percentages to 2 dp, width
    difference as a whole number.
    """
    tolerance = f"±{FITMENT_TOLERANCE_PERCENT:g}%"
    if result.fitment_compatible:
        fitment_message = f"Diameter change is within acceptable range ({tolerance})"
    else:
        fitment_message = f"Diameter change exceeds recommended range ({tolerance})"

    return ComparisonDisplay(
        old_diameter=f"{result.old_diameter:.1f} mm",
        new_diameter=f"{result.new_diameter:.1f} mm",
        diameter_change=(
            f"{_signed(result.diameter_change, 1)} mm "
            f"({_signed(result.diameter_change_percent, 2)}%)"
        ),
        speedometer_error=f"{_signed(result.speedometer_error, 2)}%",
        actual_speed_at_100=f"{result.actual_speed_at_100:.1f} km/h",
        width_difference=f"{_signed(result.width_difference, 0)} mm",
        height_difference=f"{_signed(result.height_difference, 1)} mm",
        fitment_message=fitment_message,
    )
