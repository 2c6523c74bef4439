"""
Material Pydantic Schemas

Input validation for spools happens here, before the store is touched:
prices and weights must be positive finite numbers, colors must be #RRGGBB.
"""
import re

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, TYPE_CHECKING
from datetime import date, datetime

if TYPE_CHECKING:
    from filaledger.models.preset import MaterialPreset

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"
_HEX_RE = re.compile(HEX_COLOR_PATTERN)


def check_gradient_colors(stops: Optional[List[str]]) -> Optional[List[str]]:
    if stops is None:
        return stops
    if len(stops) < 2:
        raise ValueError("a gradient needs at least two colors")
    for stop in stops:
        if not _HEX_RE.match(stop):
            raise ValueError(f"invalid hex color: {stop!r}")
    return [stop.upper() for stop in stops]


# ============================================================================
# Color
# ============================================================================

class ColorFields(BaseModel):
    """Solid color, legacy two-stop gradient, or multi-stop gradient"""
    color_hex: str = Field("#CCCCCC", pattern=HEX_COLOR_PATTERN)
    gradient_color_hex: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    gradient_colors: Optional[List[str]] = Field(None, description="Ordered stops, at least two")

    @field_validator("gradient_colors")
    @classmethod
    def validate_gradient_colors(cls, v):
        return check_gradient_colors(v)

    @field_validator("color_hex", "gradient_color_hex")
    @classmethod
    def upper_hex(cls, v):
        return v.upper() if v else v


# ============================================================================
# Material
# ============================================================================

class MaterialCreate(ColorFields):
    """New spool. remaining_weight is not accepted: it always starts full."""
    brand: str = Field(..., min_length=1, max_length=100)
    main_category: str = Field(..., min_length=1, max_length=100)
    sub_category: str = Field("", max_length=100)
    name: str = Field("", max_length=100, description="Color name")
    purchase_date: date = Field(default_factory=date.today)
    price: float = Field(..., gt=0, allow_inf_nan=False, description="Total paid for the spool")
    initial_weight: float = Field(1000.0, gt=0, allow_inf_nan=False, description="Grams")
    short_code: Optional[str] = Field(None, max_length=20)

    @field_validator("brand", "main_category", "sub_category", "name", mode="before")
    @classmethod
    def strip_labels(cls, v):
        return v.strip() if isinstance(v, str) else v

    @classmethod
    def from_preset(
        cls,
        preset: "MaterialPreset",
        *,
        price: float,
        initial_weight: float = 1000.0,
        purchase_date: Optional[date] = None,
        short_code: Optional[str] = None,
    ) -> "MaterialCreate":
        """Prefill a new spool from a catalog preset"""
        return cls(
            brand=preset.brand,
            main_category=preset.main_category,
            sub_category=preset.sub_category,
            name=preset.color_name,
            color_hex=preset.color_hex,
            gradient_color_hex=preset.gradient_color_hex,
            gradient_colors=preset.gradient_colors,
            price=price,
            initial_weight=initial_weight,
            purchase_date=purchase_date or date.today(),
            short_code=short_code,
        )


class MaterialFromPreset(BaseModel):
    """Purchase details for a spool prefilled from a preset"""
    price: float = Field(..., gt=0, allow_inf_nan=False)
    initial_weight: float = Field(1000.0, gt=0, allow_inf_nan=False)
    purchase_date: Optional[date] = None
    short_code: Optional[str] = Field(None, max_length=20)


class MaterialUpdate(BaseModel):
    """Explicit edit of an existing spool; only provided fields change"""
    brand: Optional[str] = Field(None, min_length=1, max_length=100)
    main_category: Optional[str] = Field(None, min_length=1, max_length=100)
    sub_category: Optional[str] = Field(None, max_length=100)
    name: Optional[str] = Field(None, max_length=100)
    purchase_date: Optional[date] = None
    price: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    initial_weight: Optional[float] = Field(None, gt=0, allow_inf_nan=False)
    remaining_weight: Optional[float] = Field(None, ge=0, allow_inf_nan=False)
    color_hex: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    gradient_color_hex: Optional[str] = Field(None, pattern=HEX_COLOR_PATTERN)
    gradient_colors: Optional[List[str]] = None
    short_code: Optional[str] = Field(None, max_length=20)

    @field_validator("brand", "main_category", "sub_category", "name", mode="before")
    @classmethod
    def strip_labels(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("gradient_colors")
    @classmethod
    def validate_gradient_colors(cls, v):
        return check_gradient_colors(v)

    @field_validator("color_hex", "gradient_color_hex")
    @classmethod
    def upper_hex(cls, v):
        return v.upper() if v else v


class MaterialResponse(BaseModel):
    """Spool with derived values"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    brand: str
    main_category: str
    sub_category: str
    name: str
    full_name: str
    purchase_date: date
    price: float
    initial_weight: float
    remaining_weight: float
    used_weight: float
    usage_percentage: float
    unit_price: float
    formatted_weight: str
    is_available: bool
    color_hex: str
    gradient_color_hex: Optional[str] = None
    gradient_colors: Optional[List[str]] = None
    color_stops: List[str]
    short_code: Optional[str] = None
    created_at: Optional[datetime] = None


class ConsumptionResponse(BaseModel):
    """What was asked for vs what the spool could give"""
    material_id: str
    requested: float
    applied: float
    clamped: bool
