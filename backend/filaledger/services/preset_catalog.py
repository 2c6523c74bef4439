"""
Preset Catalog

Named color templates per (brand, main category, sub category). Presets only
prefill new materials; nothing in the inventory references them.

Built-in presets ship in data/material_presets.json, grouped by vendor.
"""
import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import or_, func
from sqlalchemy.orm import Session

from filaledger.db.base import LIKE_ESCAPE, contains_pattern
from filaledger.logging_config import get_logger, audit_log
from filaledger.models.preset import MaterialPreset
from filaledger.schemas.preset import PresetCreate

logger = get_logger(__name__)

BUILTIN_PRESETS_PATH = Path(__file__).resolve().parent.parent / "data" / "material_presets.json"

# Vendor groups in the built-in document, in display order
BUILTIN_VENDOR_KEYS = ("bambuLab", "esun", "polymaker")


def load_builtin_presets(path: Path = BUILTIN_PRESETS_PATH) -> List[PresetCreate]:
    """
    Parse the bundled preset document.

    Entries use the camelCase keys of the document (mainCategory,
    colorHex, gradientColors...). A missing vendor group is skipped.
    """
    with open(path, "r", encoding="utf-8") as f:
        document: Dict[str, List[Dict[str, Any]]] = json.load(f)

    presets = []
    for vendor in BUILTIN_VENDOR_KEYS:
        for entry in document.get(vendor, []):
            presets.append(PresetCreate(
                brand=entry["brand"],
                main_category=entry["mainCategory"],
                sub_category=entry.get("subCategory", ""),
                color_name=entry["colorName"],
                color_hex=entry.get("colorHex", "#CCCCCC"),
                gradient_color_hex=entry.get("gradientColorHex"),
                gradient_colors=entry.get("gradientColors"),
            ))
    return presets


class PresetCatalog:
    """Preset queries and mutations on one session"""

    def __init__(self, db: Session):
        self.db = db

    def seed_builtin(self, presets: Optional[Iterable[PresetCreate]] = None) -> int:
        if presets is None:
            presets = load_builtin_presets()
        count = 0
        for data in presets:
            self.db.add(self._build(data, is_builtin=True))
            count += 1
        self.db.flush()
        logger.info("Seeded built-in presets", extra={"preset_count": count})
        return count

    @staticmethod
    def _build(data: PresetCreate, is_builtin: bool = False) -> MaterialPreset:
        return MaterialPreset(
            brand=data.brand,
            main_category=data.main_category,
            sub_category=data.sub_category,
            color_name=data.color_name,
            color_hex=data.color_hex,
            gradient_color_hex=data.gradient_color_hex,
            gradient_colors=data.gradient_colors,
            is_builtin=is_builtin,
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_preset(self, data: PresetCreate) -> MaterialPreset:
        """Append a preset. Duplicates are allowed."""
        preset = self._build(data)
        self.db.add(preset)
        self.db.flush()
        audit_log("PRESET_ADDED", resource_type="preset", resource_id=preset.id,
                  details={"name": preset.full_name})
        return preset

    def delete_presets(self, ids: Iterable[str]) -> int:
        """
        Remove user presets by id. Returns the number removed.

        Built-in presets and unknown ids are ignored.
        """
        id_set = set(ids)
        if not id_set:
            return 0
        presets = self.db.query(MaterialPreset).filter(
            MaterialPreset.id.in_(id_set),
            MaterialPreset.is_builtin == False,  # noqa: E712
        ).all()
        for preset in presets:
            self.db.delete(preset)
        self.db.flush()
        if presets:
            audit_log("PRESETS_DELETED", resource_type="preset",
                      details={"ids": sorted(p.id for p in presets)})
        return len(presets)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_preset(self, preset_id: str) -> Optional[MaterialPreset]:
        return self.db.query(MaterialPreset).filter(MaterialPreset.id == preset_id).first()

    def list_presets(self) -> List[MaterialPreset]:
        return self.db.query(MaterialPreset).order_by(
            MaterialPreset.brand, MaterialPreset.main_category,
            MaterialPreset.sub_category, MaterialPreset.created_at,
        ).all()

    def filter_presets(self, brand: str, main_category: str, sub_category: str) -> List[MaterialPreset]:
        """Exact match on the full taxonomy triple"""
        return self.db.query(MaterialPreset).filter(
            MaterialPreset.brand == brand,
            MaterialPreset.main_category == main_category,
            MaterialPreset.sub_category == sub_category,
        ).order_by(MaterialPreset.created_at).all()

    def search_presets(self, text: str) -> List[MaterialPreset]:
        """
        Case-insensitive substring search over brand, categories and color name.

        Blank text returns every preset.
        """
        text = (text or "").strip()
        if not text:
            return self.list_presets()
        pattern = contains_pattern(text)
        return self.db.query(MaterialPreset).filter(or_(
            func.lower(MaterialPreset.brand).like(pattern, escape=LIKE_ESCAPE),
            func.lower(MaterialPreset.main_category).like(pattern, escape=LIKE_ESCAPE),
            func.lower(MaterialPreset.sub_category).like(pattern, escape=LIKE_ESCAPE),
            func.lower(MaterialPreset.color_name).like(pattern, escape=LIKE_ESCAPE),
        )).order_by(MaterialPreset.brand, MaterialPreset.main_category).all()

    def preset_brands(self) -> List[str]:
        rows = self.db.query(MaterialPreset.brand).distinct().order_by(MaterialPreset.brand).all()
        return [row.brand for row in rows]
