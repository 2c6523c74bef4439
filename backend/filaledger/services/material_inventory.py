"""
Material Inventory

Owned spools and their depletable weight. This is the only place that
changes Material.remaining_weight, and every path keeps

    0 <= remaining_weight <= initial_weight

Over-consumption is never an error: the draw is clamped to what is left and
the caller sees both numbers in a ConsumptionResult.
"""
import math
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from filaledger.exceptions import ValidationError, MaterialNotFoundError
from filaledger.logging_config import get_logger, audit_log
from filaledger.models.material import Material
from filaledger.schemas.material import MaterialCreate, MaterialUpdate

logger = get_logger(__name__)

# Fields an edit may explicitly clear
_NULLABLE_FIELDS = frozenset({"gradient_color_hex", "gradient_colors", "short_code"})


@dataclass(frozen=True)
class ConsumptionResult:
    """Outcome of one draw from a spool"""
    material_id: str
    requested: float
    applied: float

    @property
    def clamped(self) -> bool:
        return self.applied < self.requested


def _require_positive(field: str, value) -> None:
    if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value) or value <= 0:
        raise ValidationError(f"{field} must be a positive number", details={"field": field, "value": value})


class MaterialInventory:
    """Spool lifecycle on one session"""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_material(self, material_id: str) -> Optional[Material]:
        return self.db.query(Material).filter(Material.id == material_id).first()

    def require_material(self, material_id: str) -> Material:
        material = self.get_material(material_id)
        if material is None:
            raise MaterialNotFoundError(material_id)
        return material

    def list_materials(self) -> List[Material]:
        return self.db.query(Material).order_by(Material.purchase_date.desc(), Material.created_at.desc()).all()

    def available_materials(self) -> List[Material]:
        """
        Spools with filament left, for the "which spool did this print use" picker.

        Opened spools come first, then newest purchase first.
        """
        materials = self.db.query(Material).filter(Material.remaining_weight > 0).all()
        return sorted(
            materials,
            key=lambda m: (not m.has_been_used, -m.purchase_date.toordinal()),
        )

    def depleted_materials(self) -> List[Material]:
        return self.db.query(Material).filter(
            Material.remaining_weight <= 0
        ).order_by(Material.purchase_date.desc()).all()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def add_material(self, data: MaterialCreate) -> Material:
        """New spool, full: remaining_weight starts at initial_weight"""
        _require_positive("price", data.price)
        _require_positive("initial_weight", data.initial_weight)

        material = Material(
            brand=data.brand,
            main_category=data.main_category,
            sub_category=data.sub_category,
            name=data.name,
            purchase_date=data.purchase_date,
            price=data.price,
            initial_weight=data.initial_weight,
            remaining_weight=data.initial_weight,
            color_hex=data.color_hex,
            gradient_color_hex=data.gradient_color_hex,
            gradient_colors=data.gradient_colors,
            short_code=data.short_code,
        )
        self.db.add(material)
        self.db.flush()

        audit_log("MATERIAL_ADDED", resource_type="material", resource_id=material.id,
                  details={"name": material.full_name, "price": material.price,
                           "initial_weight": material.initial_weight})
        return material

    def update_material(self, material_id: str, changes: MaterialUpdate) -> Material:
        """
        Explicit edit. Only the fields set on `changes` are applied.

        Raises:
            MaterialNotFoundError: unknown id
            ValidationError: the edit would leave remaining outside [0, initial]
        """
        material = self.require_material(material_id)
        update_data = {
            field: value
            for field, value in changes.model_dump(exclude_unset=True).items()
            if value is not None or field in _NULLABLE_FIELDS
        }

        for field in ("price", "initial_weight"):
            if field in update_data:
                _require_positive(field, update_data[field])

        initial = update_data.get("initial_weight", material.initial_weight)
        remaining = update_data.get("remaining_weight", material.remaining_weight)
        if remaining < 0 or remaining > initial:
            raise ValidationError(
                "remaining_weight must stay between 0 and initial_weight",
                details={"initial_weight": initial, "remaining_weight": remaining},
            )

        for field, value in update_data.items():
            setattr(material, field, value)
        self.db.flush()

        audit_log("MATERIAL_UPDATED", resource_type="material", resource_id=material.id,
                  details={"fields": sorted(update_data)})
        return material

    def delete_material(self, material_id: str) -> bool:
        """
        Remove a spool. Returns False when there was nothing to remove.

        Print records that drew from it keep their name snapshots.
        """
        material = self.get_material(material_id)
        if material is None:
            return False
        name = material.full_name
        self.db.delete(material)
        self.db.flush()
        audit_log("MATERIAL_DELETED", resource_type="material", resource_id=material_id, details={"name": name})
        return True

    def mark_as_depleted(self, material_id: str) -> Material:
        """Set remaining to 0; initial weight and price stay as they were"""
        material = self.require_material(material_id)
        previous = material.remaining_weight
        material.remaining_weight = 0.0
        self.db.flush()
        audit_log("MATERIAL_DEPLETED", resource_type="material", resource_id=material.id,
                  details={"discarded_weight": previous})
        return material

    def consume(self, material_id: str, requested: float) -> ConsumptionResult:
        """
        Draw up to `requested` grams from a spool.

        applied = min(requested, remaining). Never raises for over-consumption.

        Raises:
            ValidationError: requested is negative or not a finite number
            MaterialNotFoundError: unknown id
        """
        if (not isinstance(requested, (int, float)) or isinstance(requested, bool)
                or not math.isfinite(requested) or requested < 0):
            raise ValidationError("Requested weight must be a non-negative number",
                                  details={"material_id": material_id, "requested": requested})

        material = self.require_material(material_id)
        applied = min(float(requested), material.remaining_weight)
        material.remaining_weight = material.remaining_weight - applied
        self.db.flush()

        result = ConsumptionResult(material_id=material_id, requested=float(requested), applied=applied)
        if result.clamped:
            logger.warning(
                "Consumption clamped to remaining weight",
                extra={"material_id": material_id, "requested": result.requested, "applied": applied},
            )
        return result

    # ------------------------------------------------------------------
    # Totals
    # ------------------------------------------------------------------

    def total_initial_weight(self) -> float:
        return sum(m.initial_weight for m in self.db.query(Material).all())

    def total_remaining_weight(self) -> float:
        return sum(m.remaining_weight for m in self.db.query(Material).all())

    def total_used_weight(self) -> float:
        return sum(m.used_weight for m in self.db.query(Material).all())

    def summarize_by_brand(self) -> Dict[str, Dict[str, float]]:
        """{brand: {count, remaining_weight, used_weight}}, brands in alphabetical order"""
        summary: Dict[str, Dict[str, float]] = OrderedDict()
        for material in self.db.query(Material).order_by(Material.brand).all():
            entry = summary.setdefault(material.brand, {"count": 0, "remaining_weight": 0.0, "used_weight": 0.0})
            entry["count"] += 1
            entry["remaining_weight"] += material.remaining_weight
            entry["used_weight"] += material.used_weight
        return summary
