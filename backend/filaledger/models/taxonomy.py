"""
TaxonomyLabel model

Brand / main category / sub category labels used to describe materials and
presets. Labels are plain values: materials store the string, not a reference,
so a label outlives every entity that used it.
"""
from enum import Enum
from typing import List

from sqlalchemy import Column, Integer, String, Boolean, DateTime, UniqueConstraint
from datetime import datetime

from filaledger.db.base import Base

# Sentinel shown at the end of every label list: "the user will type a value now"
CUSTOM_LABEL = "Custom"

# Sub category placeholder meaning "no sub category"; omitted from display names
NO_SUB_CATEGORY = "None"


class TaxonomyKind(str, Enum):
    """The three label sets"""
    BRAND = "brand"
    MAIN_CATEGORY = "main_category"
    SUB_CATEGORY = "sub_category"


BUILTIN_LABELS = {
    TaxonomyKind.BRAND: ["Bambu Lab", "eSUN", "Polymaker", "Prusa", "Creality", "Sunlu", "Overture"],
    TaxonomyKind.MAIN_CATEGORY: ["PLA", "PLA+", "PETG", "ABS", "TPU", "ASA", "PC", "Nylon", "PVA"],
    TaxonomyKind.SUB_CATEGORY: [NO_SUB_CATEGORY, "Matte", "Basic", "Silk", "Fluor", "Metal", "Wood", "CF"],
}


def compose_display_name(brand: str, main_category: str, sub_category: str, name: str) -> str:
    """
    Human-readable name such as "Bambu Lab PLA Matte Ivory White".

    Empty parts and the "None" sub category are skipped.
    """
    parts: List[str] = [brand]
    if main_category:
        parts.append(main_category)
    if sub_category and sub_category != NO_SUB_CATEGORY:
        parts.append(sub_category)
    if name:
        parts.append(name)
    return " ".join(parts)


class TaxonomyLabel(Base):
    """One label in one of the three taxonomy sets"""
    __tablename__ = "taxonomy_labels"

    __table_args__ = (
        UniqueConstraint("kind", "name", name="uq_taxonomy_kind_name"),
    )

    id = Column(Integer, primary_key=True, index=True)
    kind = Column(String(20), nullable=False, index=True)  # TaxonomyKind value
    name = Column(String(100), nullable=False)
    position = Column(Integer, nullable=False, default=0)  # Display order within the kind
    is_builtin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<TaxonomyLabel {self.kind}: {self.name}>"
