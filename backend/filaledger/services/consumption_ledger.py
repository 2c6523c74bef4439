"""
Consumption Ledger

Print records and the cost they incurred. Creating a record draws filament
through MaterialInventory.consume; deleting one gives nothing back.

Cost is never stored. It is recomputed from each spool's current unit price
(price / initial_weight), so editing a spool's price re-prices its history.
A usage whose spool was deleted costs 0.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from sqlalchemy import or_, func
from sqlalchemy.orm import Session

from filaledger.db.base import LIKE_ESCAPE, contains_pattern
from filaledger.exceptions import MaterialNotFoundError
from filaledger.logging_config import get_logger, audit_log
from filaledger.models.material import Material
from filaledger.models.print_record import PrintRecord, MaterialUsage
from filaledger.services.material_inventory import MaterialInventory

logger = get_logger(__name__)


@dataclass(frozen=True)
class UsageCost:
    material_id: str
    material_name: str
    weight_used: float
    cost: float
    resolved: bool


class ConsumptionLedger:
    """Print record bookkeeping on one session"""

    def __init__(self, db: Session, inventory: Optional[MaterialInventory] = None):
        self.db = db
        self.inventory = inventory or MaterialInventory(db)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_single_material_record(
        self,
        model_name: str,
        maker_world_link: str,
        material_id: str,
        weight_requested: float,
    ) -> Optional[PrintRecord]:
        """
        Draw from one spool and build the record (not yet added to the ledger).

        Returns None when the spool does not exist; nothing is consumed then.
        """
        try:
            material = self.inventory.require_material(material_id)
            result = self.inventory.consume(material_id, weight_requested)
        except MaterialNotFoundError:
            logger.info("Print record skipped, material not found", extra={"material_id": material_id})
            return None

        return PrintRecord(
            model_name=model_name,
            maker_world_link=maker_world_link or "",
            date=datetime.utcnow(),
            is_multi_material=False,
            usages=[MaterialUsage(
                position=0,
                material_id=material_id,
                material_name=material.full_name,
                weight_used=result.applied,
            )],
        )

    def create_multi_material_record(
        self,
        model_name: str,
        maker_world_link: str,
        usage_requests: Sequence[Tuple[str, float]],
    ) -> PrintRecord:
        """
        Draw from several spools, each request independently.

        Requests naming an unknown spool are skipped, so the record may hold
        fewer usages than were requested (possibly none).
        """
        usages: List[MaterialUsage] = []
        for material_id, weight_requested in usage_requests:
            try:
                material = self.inventory.require_material(material_id)
                result = self.inventory.consume(material_id, weight_requested)
            except MaterialNotFoundError:
                logger.info("Usage skipped, material not found", extra={"material_id": material_id})
                continue
            usages.append(MaterialUsage(
                position=len(usages),
                material_id=material_id,
                material_name=material.full_name,
                weight_used=result.applied,
            ))

        return PrintRecord(
            model_name=model_name,
            maker_world_link=maker_world_link or "",
            date=datetime.utcnow(),
            is_multi_material=True,
            usages=usages,
        )

    # ------------------------------------------------------------------
    # Ledger mutations
    # ------------------------------------------------------------------

    def add_print_record(self, record: PrintRecord) -> PrintRecord:
        self.db.add(record)
        self.db.flush()
        audit_log("PRINT_RECORD_ADDED", resource_type="print_record", resource_id=record.id,
                  details={"model_name": record.model_name, "total_weight": record.total_weight,
                           "materials": record.material_ids})
        return record

    def delete_print_record(self, record_id: str) -> bool:
        """Remove a record. Consumed filament is not returned to the spools."""
        record = self.get_record(record_id)
        if record is None:
            return False
        self.db.delete(record)
        self.db.flush()
        audit_log("PRINT_RECORD_DELETED", resource_type="print_record", resource_id=record_id)
        return True

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_record(self, record_id: str) -> Optional[PrintRecord]:
        return self.db.query(PrintRecord).filter(PrintRecord.id == record_id).first()

    def list_records(self, search: Optional[str] = None) -> List[PrintRecord]:
        """
        Records newest first.

        search matches model name, material name or link, case-insensitive.
        """
        query = self.db.query(PrintRecord)
        search = (search or "").strip()
        if search:
            pattern = contains_pattern(search)
            query = query.filter(or_(
                func.lower(PrintRecord.model_name).like(pattern, escape=LIKE_ESCAPE),
                func.lower(PrintRecord.maker_world_link).like(pattern, escape=LIKE_ESCAPE),
                PrintRecord.usages.any(func.lower(MaterialUsage.material_name).like(pattern, escape=LIKE_ESCAPE)),
            ))
        return query.order_by(PrintRecord.date.desc()).all()

    def recent_records(self, limit: int = 5) -> List[PrintRecord]:
        return self.db.query(PrintRecord).order_by(PrintRecord.date.desc()).limit(limit).all()

    # ------------------------------------------------------------------
    # Cost
    # ------------------------------------------------------------------

    def _unit_prices(self, material_ids: Iterable[str]) -> Dict[str, float]:
        """Current price per gram for the given spools that still exist"""
        id_set = set(material_ids)
        if not id_set:
            return {}
        materials = self.db.query(Material).filter(Material.id.in_(id_set)).all()
        return {m.id: m.unit_price for m in materials}

    def get_cost_breakdown(self, record: PrintRecord) -> List[UsageCost]:
        prices = self._unit_prices(record.material_ids)
        breakdown = []
        for usage in record.usages:
            unit_price = prices.get(usage.material_id)
            breakdown.append(UsageCost(
                material_id=usage.material_id,
                material_name=usage.material_name,
                weight_used=usage.weight_used,
                cost=unit_price * usage.weight_used if unit_price is not None else 0.0,
                resolved=unit_price is not None,
            ))
        return breakdown

    def get_cost_for_record(self, record: PrintRecord) -> float:
        return sum(item.cost for item in self.get_cost_breakdown(record))

    def total_consumed_weight(self) -> float:
        total = self.db.query(func.sum(MaterialUsage.weight_used)).scalar()
        return float(total or 0.0)

    def total_consumed_cost(self) -> float:
        usages = self.db.query(MaterialUsage.material_id, MaterialUsage.weight_used).all()
        prices = self._unit_prices(u.material_id for u in usages)
        return sum(prices.get(u.material_id, 0.0) * u.weight_used for u in usages)

    def average_cost_per_gram(self) -> float:
        weight = self.total_consumed_weight()
        if weight <= 0:
            return 0.0
        return self.total_consumed_cost() / weight

    def record_count(self) -> int:
        return self.db.query(PrintRecord).count()
