"""
Pydantic schemas for print records

Request models validate weights before the ledger draws anything.
Response models carry the live cost, recomputed from current spool prices.
"""
from typing import Optional, List, Sequence, Tuple
from datetime import datetime
from pydantic import BaseModel, Field, field_validator


class UsageRequest(BaseModel):
    """One requested draw: grams from a spool"""
    material_id: str = Field(..., min_length=1)
    weight: float = Field(..., gt=0, allow_inf_nan=False, description="Requested grams")


class _RecordBase(BaseModel):
    model_name: str = Field(..., min_length=1, max_length=255)
    maker_world_link: str = Field("", max_length=500)

    @field_validator("model_name", "maker_world_link", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class SingleMaterialRecordCreate(_RecordBase):
    """Schema for logging a print that used one spool"""
    material_id: str = Field(..., min_length=1)
    weight: float = Field(..., gt=0, allow_inf_nan=False, description="Requested grams")


class MultiMaterialRecordCreate(_RecordBase):
    """Schema for logging a print that used several spools"""
    usages: List[UsageRequest] = Field(..., min_length=1)


class MaterialUsageResponse(BaseModel):
    """One draw of a record"""
    material_id: str
    material_name: str
    weight_used: float

    model_config = {"from_attributes": True}


class UsageCostResponse(MaterialUsageResponse):
    """A draw with its current cost; resolved is False when the spool is gone"""
    cost: float
    resolved: bool


class PrintRecordResponse(BaseModel):
    """Schema for print record list entries"""
    id: str
    model_name: str
    maker_world_link: str
    has_maker_world_link: bool
    date: datetime
    is_multi_material: bool
    total_weight: float
    usages: List[MaterialUsageResponse]
    cost: float = 0.0

    model_config = {"from_attributes": True}


class PrintRecordDetail(PrintRecordResponse):
    """Single record with per-usage cost breakdown"""
    breakdown: List[UsageCostResponse] = []


class RecordCreatedResponse(BaseModel):
    """
    Result of logging a print.

    record is None when no usage could be resolved; clamped lists the spools
    that had less filament left than requested.
    """
    record: Optional[PrintRecordResponse] = None
    clamped: List[str] = []
    skipped: List[str] = []


def build_record_response(record, cost: float) -> PrintRecordResponse:
    """Response for a record priced at the current spool prices"""
    return PrintRecordResponse.model_validate(record).model_copy(update={"cost": cost})


def creation_outcome(record, requests: Sequence[Tuple[str, float]]) -> Tuple[List[str], List[str]]:
    """
    Match requests against the usages that were logged.

    Usages keep request order and only requests for unknown spools are
    dropped, so a single pass pairs them up. Returns (clamped, skipped).
    """
    usages = list(record.usages) if record is not None else []
    clamped: List[str] = []
    skipped: List[str] = []
    index = 0
    for material_id, requested in requests:
        if index < len(usages) and usages[index].material_id == material_id:
            if usages[index].weight_used < requested:
                clamped.append(material_id)
            index += 1
        else:
            skipped.append(material_id)
    return clamped, skipped


def build_created_response(record, cost: float, requests: Sequence[Tuple[str, float]]) -> RecordCreatedResponse:
    clamped, skipped = creation_outcome(record, requests)
    return RecordCreatedResponse(
        record=build_record_response(record, cost) if record is not None else None,
        clamped=clamped,
        skipped=skipped,
    )
