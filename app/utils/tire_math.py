"""Tyre size parsing and comparison using industry-standard formulas.

This module is the single source of truth for all tyre size math.

## Core Formulas

### Sidewall Height
    sidewall_mm = tyre_width_mm × (aspect_ratio / 100)

### Overall Diameter
    overall_diameter_mm = (2 × sidewall_mm) + (rim_diameter_inches × 25.4)

### Diameter Change
    change_pct = (new_diameter - old_diameter) / old_diameter × 100

    The percentage is always relative to the CURRENT (old) tyre, so comparing
    A→B and B→A gives the same change in mm with opposite sign, but not the
    same percentage.

### Speedometer Error
    speedometer_error_pct = change_pct

    A speedometer calibrated for the old tyre under-reads in direct proportion
    to a larger diameter: at an indicated 100 km/h the car actually travels
    100 + speedometer_error_pct km/h.

### Fitment Compatibility
    |change_pct| <= 3.0

    The ±3% band is the common tolerance for keeping speedometer, ABS and
    drivetrain calibration accurate.
"""

import re

from app.models.tyre import ComparisonResult, TyreSize

# =============================================================================
# CONSTANTS
# =============================================================================

MM_PER_INCH = 25.4

FITMENT_TOLERANCE_PERCENT = 3.0

INVALID_FORMAT_MESSAGE = "Invalid tyre size format. Use format: 185/65 R15"

ZERO_DIAMETER_MESSAGE = "Current tyre size has zero diameter"

# WIDTH/ASPECT R RIM, e.g. "185/65 R15", "185/65R15", "185/65 r 15"
TYRE_SIZE_PATTERN = re.compile(r"^(\d{3})/(\d{2})\s*R\s*(\d{2})$", re.IGNORECASE | re.ASCII)


class TyreSizeFormatError(ValueError):
    """Raised when a tyre size string does not match WIDTH/ASPECT R RIM."""

    def __init__(self, raw: str | None = None, message: str = INVALID_FORMAT_MESSAGE):
        super().__init__(message)
        self.raw = raw
        self.message = message


# =============================================================================
# PARSING
# =============================================================================

def parse_tyre_size(raw: str) -> TyreSize:
    """Parse a sidewall tyre size string.

    Only the shape is validated: three digits, slash, two digits, ``R`` (any
    case, optional surrounding whitespace), two digits. Values are not range
    checked, so ``000/00R00`` parses.

    Args:
        raw: Size string as typed by the user (e.g., "185/65 R15")

    Returns:
        Parsed TyreSize

    Raises:
        TyreSizeFormatError: If the string does not match the grammar

    Example:
        >>> parse_tyre_size(" 185/65r15 ")
        TyreSize(width=185, aspect_ratio=65, rim_diameter=15)
    """
    match = TYRE_SIZE_PATTERN.match(raw.strip())
    if not match:
        raise TyreSizeFormatError(raw)

    return TyreSize(
        width=int(match.group(1)),
        aspect_ratio=int(match.group(2)),
        rim_diameter=int(match.group(3)),
    )


def format_tyre_size(size: TyreSize, spaced: bool = True) -> str:
    """Render a TyreSize back to sidewall notation ("185/65 R15")."""
    separator = " R" if spaced else "R"
    return f"{size.width:03d}/{size.aspect_ratio:02d}{separator}{size.rim_diameter:02d}"


# =============================================================================
# GEOMETRY
# =============================================================================

def calculate_sidewall_height(tyre_width_mm: int, aspect_ratio: int) -> float:
    """Calculate tyre sidewall height in mm.

    Example:
        >>> calculate_sidewall_height(185, 65)
        120.25
    """
    return tyre_width_mm * aspect_ratio / 100


def calculate_overall_diameter(size: TyreSize) -> float:
    """Calculate total rolling diameter in mm.

    Example:
        >>> calculate_overall_diameter(TyreSize(width=185, aspect_ratio=65, rim_diameter=15))
        621.5  # (2 × 120.25) + (15 × 25.4)
    """
    sidewall_mm = calculate_sidewall_height(size.width, size.aspect_ratio)
    rim_diameter_mm = size.rim_diameter * MM_PER_INCH
    return (2 * sidewall_mm) + rim_diameter_mm


def is_fitment_compatible(diameter_change_percent: float) -> bool:
    return abs(diameter_change_percent) <= FITMENT_TOLERANCE_PERCENT


def compare_tyre_sizes(old: TyreSize, new: TyreSize) -> ComparisonResult:
    """Compare a replacement tyre size against the current one.

    No guard against a zero old diameter: any real tyre size has a positive
    diameter, and a ``000/00R00`` current size raises ZeroDivisionError.

    Args:
        old: Current tyre size
        new: Replacement tyre size

    Returns:
        ComparisonResult with diameters, deltas and the fitment verdict
    """
    old_diameter = calculate_overall_diameter(old)
    new_diameter = calculate_overall_diameter(new)
    diameter_change = new_diameter - old_diameter
    diameter_change_percent = diameter_change / old_diameter * 100

    old_sidewall = calculate_sidewall_height(old.width, old.aspect_ratio)
    new_sidewall = calculate_sidewall_height(new.width, new.aspect_ratio)

    return ComparisonResult(
        old_diameter=old_diameter,
        new_diameter=new_diameter,
        diameter_change=diameter_change,
        diameter_change_percent=diameter_change_percent,
        speedometer_error=diameter_change_percent,
        height_difference=new_sidewall - old_sidewall,
        width_difference=new.width - old.width,
        fitment_compatible=is_fitment_compatible(diameter_change_percent),
    )
