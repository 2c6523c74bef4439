"""
Pydantic schemas for the preset catalog
"""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, field_validator

from filaledger.schemas.material import ColorFields


class PresetCreate(ColorFields):
    """Schema for adding a user preset"""
    brand: str = Field(..., min_length=1, max_length=100)
    main_category: str = Field(..., min_length=1, max_length=100)
    sub_category: str = Field("", max_length=100)
    color_name: str = Field(..., min_length=1, max_length=100)

    @field_validator("brand", "main_category", "sub_category", "color_name", mode="before")
    @classmethod
    def strip_labels(cls, v):
        return v.strip() if isinstance(v, str) else v


class PresetResponse(BaseModel):
    """Schema for preset data response"""
    id: str
    brand: str
    main_category: str
    sub_category: str
    color_name: str
    full_name: str
    color_hex: str
    gradient_color_hex: Optional[str] = None
    gradient_colors: Optional[List[str]] = None
    color_stops: List[str]
    is_builtin: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class PresetDeleteRequest(BaseModel):
    """Ids of the presets to remove; unknown ids are ignored"""
    ids: List[str] = Field(..., min_length=1)


class PresetDeleteResponse(BaseModel):
    deleted: int
