"""
Backup document schemas

A snapshot holds every collection of the store. Import replaces the current
contents wholesale, so the document must validate completely first.
"""
from typing import Optional, List
from datetime import date, datetime
from pydantic import BaseModel, Field, model_validator

from filaledger.schemas.material import ColorFields

SNAPSHOT_VERSION = 1


class MaterialSnapshot(ColorFields):
    id: str
    brand: str
    main_category: str
    sub_category: str = ""
    name: str = ""
    purchase_date: date
    price: float = Field(..., gt=0, allow_inf_nan=False)
    initial_weight: float = Field(..., gt=0, allow_inf_nan=False)
    remaining_weight: float = Field(..., ge=0, allow_inf_nan=False)
    short_code: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}

    @model_validator(mode="after")
    def check_weight_bounds(self):
        if self.remaining_weight > self.initial_weight:
            raise ValueError("remaining_weight cannot exceed initial_weight")
        return self


class PresetSnapshot(ColorFields):
    id: str
    brand: str
    main_category: str
    sub_category: str = ""
    color_name: str
    is_builtin: bool = False
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UsageSnapshot(BaseModel):
    material_id: str
    material_name: str
    weight_used: float = Field(..., ge=0, allow_inf_nan=False)

    model_config = {"from_attributes": True}


class PrintRecordSnapshot(BaseModel):
    id: str
    model_name: str
    maker_world_link: str = ""
    date: datetime
    is_multi_material: bool = False
    usages: List[UsageSnapshot] = []

    model_config = {"from_attributes": True}


class TaxonomyLabelSnapshot(BaseModel):
    kind: str
    name: str
    position: int = 0
    is_builtin: bool = False

    model_config = {"from_attributes": True}


class StoreSnapshot(BaseModel):
    """Full backup document"""
    version: int = SNAPSHOT_VERSION
    exported_at: datetime = Field(default_factory=datetime.utcnow)
    materials: List[MaterialSnapshot] = []
    presets: List[PresetSnapshot] = []
    print_records: List[PrintRecordSnapshot] = []
    taxonomy: List[TaxonomyLabelSnapshot] = []


class SnapshotImportResult(BaseModel):
    materials: int
    presets: int
    print_records: int
    taxonomy_labels: int
