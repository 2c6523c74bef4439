"""
Pydantic schemas for the dashboard and inventory summary
"""
from typing import Optional, List, Dict
from pydantic import BaseModel

from filaledger.schemas.print_record import PrintRecordResponse


class BrandSummary(BaseModel):
    brand: str
    count: int
    remaining_weight: float
    used_weight: float


class InventorySummary(BaseModel):
    """Totals over every spool, grams"""
    material_count: int
    available_count: int
    depleted_count: int
    total_initial_weight: float
    total_remaining_weight: float
    total_used_weight: float
    by_brand: List[BrandSummary]


class StatisticsResponse(BaseModel):
    """Dashboard numbers; costs use current spool prices"""
    record_count: int
    total_consumed_weight: float
    total_consumed_cost: float
    average_cost_per_gram: float
    observed_print_count: Optional[int] = None
    inventory: InventorySummary
    recent_records: List[PrintRecordResponse]


class TaxonomyResponse(BaseModel):
    """Every label set, each ending with the Custom sentinel"""
    brands: List[str]
    main_categories: List[str]
    sub_categories: List[str]
    custom: Dict[str, List[str]]


class TaxonomyLabelCreate(BaseModel):
    name: str
