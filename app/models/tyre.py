from pydantic import BaseModel, ConfigDict, Field


class TyreSize(BaseModel):
    """A decoded tyre size, e.g. 185/65 R15."""

    model_config = ConfigDict(frozen=True)

    width: int  # section width, mm
    aspect_ratio: int  # sidewall height as % of width
    rim_diameter: int  # inches


class ComparisonResult(BaseModel):
    """Geometry of a new tyre size relative to the current one."""

    model_config = ConfigDict(frozen=True)

    old_diameter: float  # mm
    new_diameter: float  # mm
    diameter_change: float  # mm
    diameter_change_percent: float
    speedometer_error: float  # percent
    height_difference: float  # sidewall height delta, mm
    width_difference: int  # mm
    fitment_compatible: bool

    @property
    def actual_speed_at_100(self) -> float:
        """Actual speed (km/h) when the speedometer reads 100 km/h."""
        return 100 + self.speedometer_error


class ComparisonDisplay(BaseModel):
    """Result values formatted for display."""

    old_diameter: str  # "621.5 mm"
    new_diameter: str
    diameter_change: str  # "-6.5 mm (-1.05%)"
    speedometer_error: str  # "-1.05%"
    actual_speed_at_100: str  # "99.0 km/h"
    width_difference: str  # "+10 mm"
    height_difference: str  # "-3.3 mm"
    fitment_message: str


class CompareRequest(BaseModel):
    old_size: str = Field(..., max_length=32, description="Current tyre size, e.g. 185/65 R15")
    new_size: str = Field(..., max_length=32, description="New tyre size, e.g. 195/60 R15")


class CompareResponse(BaseModel):
    old_size: TyreSize
    new_size: TyreSize
    result: ComparisonResult
    display: ComparisonDisplay
