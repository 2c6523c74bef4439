"""
Snapshot Service

Lossless JSON backup of the whole store. Export reads every collection;
import deletes everything and rebuilds it from the document inside the
caller's transaction, so a failed import leaves the old data in place.
"""
from typing import List

from sqlalchemy.orm import Session

from filaledger.logging_config import get_logger, audit_log
from filaledger.models.material import Material
from filaledger.models.preset import MaterialPreset
from filaledger.models.print_record import PrintRecord, MaterialUsage
from filaledger.models.taxonomy import TaxonomyLabel
from filaledger.schemas.snapshot import (
    StoreSnapshot,
    SnapshotImportResult,
    MaterialSnapshot,
    PresetSnapshot,
    PrintRecordSnapshot,
    TaxonomyLabelSnapshot,
)

logger = get_logger(__name__)


def export_snapshot(db: Session) -> StoreSnapshot:
    materials = db.query(Material).order_by(Material.created_at, Material.id).all()
    presets = db.query(MaterialPreset).order_by(MaterialPreset.created_at, MaterialPreset.id).all()
    records = db.query(PrintRecord).order_by(PrintRecord.date, PrintRecord.id).all()
    labels = db.query(TaxonomyLabel).order_by(TaxonomyLabel.kind, TaxonomyLabel.position, TaxonomyLabel.name).all()

    snapshot = StoreSnapshot(
        materials=[MaterialSnapshot.model_validate(m) for m in materials],
        presets=[PresetSnapshot.model_validate(p) for p in presets],
        print_records=[PrintRecordSnapshot.model_validate(r) for r in records],
        taxonomy=[TaxonomyLabelSnapshot.model_validate(label) for label in labels],
    )
    logger.info(
        "Snapshot exported",
        extra={"materials": len(materials), "presets": len(presets), "print_records": len(records)},
    )
    return snapshot


def _clear_all(db: Session) -> None:
    # Usages first; bulk deletes bypass ORM cascades
    db.query(MaterialUsage).delete(synchronize_session=False)
    db.query(PrintRecord).delete(synchronize_session=False)
    db.query(Material).delete(synchronize_session=False)
    db.query(MaterialPreset).delete(synchronize_session=False)
    db.query(TaxonomyLabel).delete(synchronize_session=False)
    db.flush()


def import_snapshot(db: Session, snapshot: StoreSnapshot) -> SnapshotImportResult:
    """Replace every collection with the snapshot contents"""
    _clear_all(db)

    for m in snapshot.materials:
        db.add(Material(**m.model_dump(exclude_none=True)))

    for p in snapshot.presets:
        db.add(MaterialPreset(**p.model_dump(exclude_none=True)))

    for r in snapshot.print_records:
        usages: List[MaterialUsage] = [
            MaterialUsage(position=i, material_id=u.material_id, material_name=u.material_name,
                          weight_used=u.weight_used)
            for i, u in enumerate(r.usages)
        ]
        db.add(PrintRecord(
            id=r.id,
            model_name=r.model_name,
            maker_world_link=r.maker_world_link,
            date=r.date,
            is_multi_material=r.is_multi_material,
            usages=usages,
        ))

    for label in snapshot.taxonomy:
        db.add(TaxonomyLabel(**label.model_dump()))

    db.flush()

    result = SnapshotImportResult(
        materials=len(snapshot.materials),
        presets=len(snapshot.presets),
        print_records=len(snapshot.print_records),
        taxonomy_labels=len(snapshot.taxonomy),
    )
    audit_log("SNAPSHOT_IMPORTED", resource_type="snapshot", details=result.model_dump())
    return result
