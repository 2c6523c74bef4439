"""
Store

The single mutation and query surface over the inventory, the preset
catalog, the taxonomy and the consumption ledger. One instance is created at
startup and injected into every consumer (see filaledger.api.deps.get_store).

Every public method is one transaction: a fresh session, commit on success,
rollback on any error. Calls are serialized by a re-entrant lock, so a
caller never observes a half-applied multi-material draw.
"""
import threading
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from sqlalchemy.orm import Session

from filaledger.exceptions import MaterialNotFoundError
from filaledger.logging_config import get_logger
from filaledger.models.material import Material
from filaledger.models.preset import MaterialPreset
from filaledger.models.print_record import PrintRecord
from filaledger.models.taxonomy import TaxonomyKind
from filaledger.schemas.material import MaterialCreate, MaterialUpdate
from filaledger.schemas.preset import PresetCreate
from filaledger.schemas.snapshot import StoreSnapshot, SnapshotImportResult
from filaledger.services import snapshot_service
from filaledger.services.consumption_ledger import ConsumptionLedger, UsageCost
from filaledger.services.material_inventory import MaterialInventory, ConsumptionResult
from filaledger.services.preset_catalog import PresetCatalog
from filaledger.services.taxonomy_registry import TaxonomyRegistry

logger = get_logger(__name__)


class Store:
    """Filament inventory and consumption ledger"""

    def __init__(self, session_factory: Callable[[], Session], recent_records_limit: int = 5):
        self._session_factory = session_factory
        self._lock = threading.RLock()
        self._observed_print_count: Optional[int] = None
        self.recent_records_limit = recent_records_limit

    @contextmanager
    def _unit_of_work(self) -> Iterator[Session]:
        with self._lock:
            db = self._session_factory()
            try:
                yield db
                db.commit()
            except Exception:
                db.rollback()
                raise
            finally:
                db.close()

    def initialize(self, seed_builtin: bool = True) -> bool:
        """
        Seed the built-in taxonomy and presets into an empty database.

        Returns True when seeding happened. A database that already holds
        labels is left alone, so user data is never reseeded over.
        """
        if not seed_builtin:
            return False
        with self._unit_of_work() as db:
            taxonomy = TaxonomyRegistry(db)
            if not taxonomy.is_empty():
                return False
            taxonomy.seed_builtin()
            PresetCatalog(db).seed_builtin()
        logger.info("Store initialized with built-in data")
        return True

    # ==================================================================
    # Taxonomy
    # ==================================================================

    def brands(self) -> List[str]:
        with self._unit_of_work() as db:
            return TaxonomyRegistry(db).brands()

    def main_categories(self) -> List[str]:
        with self._unit_of_work() as db:
            return TaxonomyRegistry(db).main_categories()

    def sub_categories(self) -> List[str]:
        with self._unit_of_work() as db:
            return TaxonomyRegistry(db).sub_categories()

    def custom_labels(self, kind: Union[TaxonomyKind, str]) -> List[str]:
        with self._unit_of_work() as db:
            return TaxonomyRegistry(db).custom_labels(kind)

    def taxonomy(self) -> Dict[str, Any]:
        """All three sets plus the user-added labels per kind"""
        with self._unit_of_work() as db:
            registry = TaxonomyRegistry(db)
            return {
                "brands": registry.brands(),
                "main_categories": registry.main_categories(),
                "sub_categories": registry.sub_categories(),
                "custom": {kind.value: registry.custom_labels(kind) for kind in TaxonomyKind},
            }

    def add_taxonomy_label(self, kind: Union[TaxonomyKind, str], name: str) -> bool:
        with self._unit_of_work() as db:
            return TaxonomyRegistry(db).add_label(kind, name)

    def add_custom_brand(self, name: str) -> bool:
        return self.add_taxonomy_label(TaxonomyKind.BRAND, name)

    def add_custom_main_category(self, name: str) -> bool:
        return self.add_taxonomy_label(TaxonomyKind.MAIN_CATEGORY, name)

    def add_custom_sub_category(self, name: str) -> bool:
        return self.add_taxonomy_label(TaxonomyKind.SUB_CATEGORY, name)

    @staticmethod
    def _register_labels(db: Session, brand: str, main_category: str, sub_category: str) -> None:
        """Labels typed in for a spool or preset become reusable taxonomy entries"""
        registry = TaxonomyRegistry(db)
        for kind, name in (
            (TaxonomyKind.BRAND, brand),
            (TaxonomyKind.MAIN_CATEGORY, main_category),
            (TaxonomyKind.SUB_CATEGORY, sub_category),
        ):
            if name and name.strip():
                registry.add_label(kind, name)

    # ==================================================================
    # Presets
    # ==================================================================

    def add_preset(self, data: PresetCreate) -> MaterialPreset:
        with self._unit_of_work() as db:
            self._register_labels(db, data.brand, data.main_category, data.sub_category)
            return PresetCatalog(db).add_preset(data)

    def delete_presets(self, ids: Sequence[str]) -> int:
        with self._unit_of_work() as db:
            return PresetCatalog(db).delete_presets(ids)

    def get_preset(self, preset_id: str) -> Optional[MaterialPreset]:
        with self._unit_of_work() as db:
            return PresetCatalog(db).get_preset(preset_id)

    def list_presets(self) -> List[MaterialPreset]:
        with self._unit_of_work() as db:
            return PresetCatalog(db).list_presets()

    def filter_presets(self, brand: str, main_category: str, sub_category: str) -> List[MaterialPreset]:
        with self._unit_of_work() as db:
            return PresetCatalog(db).filter_presets(brand, main_category, sub_category)

    def search_presets(self, text: str) -> List[MaterialPreset]:
        with self._unit_of_work() as db:
            return PresetCatalog(db).search_presets(text)

    def preset_brands(self) -> List[str]:
        with self._unit_of_work() as db:
            return PresetCatalog(db).preset_brands()

    # ==================================================================
    # Materials
    # ==================================================================

    def add_material(self, data: MaterialCreate) -> Material:
        with self._unit_of_work() as db:
            material = MaterialInventory(db).add_material(data)
            self._register_labels(db, material.brand, material.main_category, material.sub_category)
            return material

    def update_material(self, material_id: str, changes: MaterialUpdate) -> Material:
        with self._unit_of_work() as db:
            material = MaterialInventory(db).update_material(material_id, changes)
            self._register_labels(db, material.brand, material.main_category, material.sub_category)
            return material

    def delete_material(self, material_id: str) -> bool:
        with self._unit_of_work() as db:
            return MaterialInventory(db).delete_material(material_id)

    def mark_as_depleted(self, material_id: str) -> Optional[Material]:
        """Returns None when the spool does not exist"""
        with self._unit_of_work() as db:
            try:
                return MaterialInventory(db).mark_as_depleted(material_id)
            except MaterialNotFoundError:
                logger.info("Deplete ignored, material not found", extra={"material_id": material_id})
                return None

    def consume(self, material_id: str, requested: float) -> ConsumptionResult:
        with self._unit_of_work() as db:
            return MaterialInventory(db).consume(material_id, requested)

    def get_material(self, material_id: str) -> Optional[Material]:
        with self._unit_of_work() as db:
            return MaterialInventory(db).get_material(material_id)

    def list_materials(self) -> List[Material]:
        with self._unit_of_work() as db:
            return MaterialInventory(db).list_materials()

    def available_materials(self) -> List[Material]:
        with self._unit_of_work() as db:
            return MaterialInventory(db).available_materials()

    def depleted_materials(self) -> List[Material]:
        with self._unit_of_work() as db:
            return MaterialInventory(db).depleted_materials()

    def total_initial_weight(self) -> float:
        with self._unit_of_work() as db:
            return MaterialInventory(db).total_initial_weight()

    def total_remaining_weight(self) -> float:
        with self._unit_of_work() as db:
            return MaterialInventory(db).total_remaining_weight()

    def total_used_weight(self) -> float:
        with self._unit_of_work() as db:
            return MaterialInventory(db).total_used_weight()

    def summarize_by_brand(self) -> Dict[str, Dict[str, float]]:
        with self._unit_of_work() as db:
            return MaterialInventory(db).summarize_by_brand()

    def inventory_summary(self) -> Dict[str, Any]:
        with self._unit_of_work() as db:
            return self._inventory_summary(MaterialInventory(db))

    @staticmethod
    def _inventory_summary(inventory: MaterialInventory) -> Dict[str, Any]:
        materials = inventory.list_materials()
        available = sum(1 for m in materials if m.is_available)
        return {
            "material_count": len(materials),
            "available_count": available,
            "depleted_count": len(materials) - available,
            "total_initial_weight": sum(m.initial_weight for m in materials),
            "total_remaining_weight": sum(m.remaining_weight for m in materials),
            "total_used_weight": sum(m.used_weight for m in materials),
            "by_brand": [
                {"brand": brand, **values}
                for brand, values in inventory.summarize_by_brand().items()
            ],
        }

    # ==================================================================
    # Print records
    # ==================================================================

    def create_single_material_record(
        self, model_name: str, maker_world_link: str, material_id: str, weight_requested: float,
    ) -> Optional[PrintRecord]:
        """Consume and build the record; add it with add_print_record"""
        with self._unit_of_work() as db:
            return ConsumptionLedger(db).create_single_material_record(
                model_name, maker_world_link, material_id, weight_requested
            )

    def create_multi_material_record(
        self, model_name: str, maker_world_link: str, usage_requests: Sequence[Tuple[str, float]],
    ) -> PrintRecord:
        with self._unit_of_work() as db:
            return ConsumptionLedger(db).create_multi_material_record(model_name, maker_world_link, usage_requests)

    def add_print_record(self, record: PrintRecord) -> PrintRecord:
        with self._unit_of_work() as db:
            return ConsumptionLedger(db).add_print_record(record)

    def record_single_material_print(
        self, model_name: str, maker_world_link: str, material_id: str, weight_requested: float,
    ) -> Optional[PrintRecord]:
        """Consume and log in one transaction. None when the spool does not exist."""
        with self._unit_of_work() as db:
            ledger = ConsumptionLedger(db)
            record = ledger.create_single_material_record(model_name, maker_world_link, material_id, weight_requested)
            if record is None:
                return None
            return ledger.add_print_record(record)

    def record_multi_material_print(
        self, model_name: str, maker_world_link: str, usage_requests: Sequence[Tuple[str, float]],
    ) -> Optional[PrintRecord]:
        """
        Consume and log in one transaction.

        Returns None when no request resolved to an existing spool; an empty
        record is not logged.
        """
        with self._unit_of_work() as db:
            ledger = ConsumptionLedger(db)
            record = ledger.create_multi_material_record(model_name, maker_world_link, usage_requests)
            if not record.usages:
                logger.info("Multi-material print not logged, no usage resolved",
                            extra={"model_name": model_name})
                return None
            return ledger.add_print_record(record)

    def delete_print_record(self, record_id: str) -> bool:
        with self._unit_of_work() as db:
            return ConsumptionLedger(db).delete_print_record(record_id)

    def get_print_record(self, record_id: str) -> Optional[PrintRecord]:
        with self._unit_of_work() as db:
            return ConsumptionLedger(db).get_record(record_id)

    def list_print_records(self, search: Optional[str] = None) -> List[PrintRecord]:
        with self._unit_of_work() as db:
            return ConsumptionLedger(db).list_records(search)

    def recent_records(self, limit: Optional[int] = None) -> List[PrintRecord]:
        with self._unit_of_work() as db:
            return ConsumptionLedger(db).recent_records(limit or self.recent_records_limit)

    def get_cost_for_record(self, record: PrintRecord) -> float:
        with self._unit_of_work() as db:
            return ConsumptionLedger(db).get_cost_for_record(record)

    def get_cost_breakdown(self, record: PrintRecord) -> List[UsageCost]:
        with self._unit_of_work() as db:
            return ConsumptionLedger(db).get_cost_breakdown(record)

    def record_costs(self, records: Sequence[PrintRecord]) -> Dict[str, float]:
        """{record id: current cost} for a page of records"""
        with self._unit_of_work() as db:
            ledger = ConsumptionLedger(db)
            return {record.id: ledger.get_cost_for_record(record) for record in records}

    def total_consumed_weight(self) -> float:
        with self._unit_of_work() as db:
            return ConsumptionLedger(db).total_consumed_weight()

    def total_consumed_cost(self) -> float:
        with self._unit_of_work() as db:
            return ConsumptionLedger(db).total_consumed_cost()

    def average_cost_per_gram(self) -> float:
        with self._unit_of_work() as db:
            return ConsumptionLedger(db).average_cost_per_gram()

    # ==================================================================
    # Printer signal and statistics
    # ==================================================================

    def notify_print_count(self, count: int) -> None:
        """Print count observed by the printer-status poll; display only"""
        with self._lock:
            self._observed_print_count = count
        logger.debug("Observed print count updated", extra={"count": count})

    @property
    def observed_print_count(self) -> Optional[int]:
        return self._observed_print_count

    def statistics(self) -> Dict[str, Any]:
        """
        Dashboard numbers in one consistent read.

        recent_records holds PrintRecord objects; their costs are in
        recent_record_costs keyed by record id.
        """
        with self._unit_of_work() as db:
            inventory = MaterialInventory(db)
            ledger = ConsumptionLedger(db, inventory)
            recent = ledger.recent_records(self.recent_records_limit)
            return {
                "record_count": ledger.record_count(),
                "total_consumed_weight": ledger.total_consumed_weight(),
                "total_consumed_cost": ledger.total_consumed_cost(),
                "average_cost_per_gram": ledger.average_cost_per_gram(),
                "observed_print_count": self._observed_print_count,
                "inventory": self._inventory_summary(inventory),
                "recent_records": recent,
                "recent_record_costs": {r.id: ledger.get_cost_for_record(r) for r in recent},
            }

    # ==================================================================
    # Backup
    # ==================================================================

    def export_snapshot(self) -> StoreSnapshot:
        with self._unit_of_work() as db:
            return snapshot_service.export_snapshot(db)

    def import_snapshot(self, snapshot: StoreSnapshot) -> SnapshotImportResult:
        """Replace every collection with the snapshot contents"""
        with self._unit_of_work() as db:
            return snapshot_service.import_snapshot(db, snapshot)
