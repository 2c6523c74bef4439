"""
Print record models

A PrintRecord is one consumption event. Every record stores its draws as
ordered MaterialUsage rows: a single-material record has exactly one, a
multi-material record has one per spool.

MaterialUsage.material_id is a weak reference (no foreign key). The spool may
be deleted later; the usage keeps the name snapshot taken at creation so the
record stays readable.
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from filaledger.db.base import Base
from filaledger.models.material import new_id


class PrintRecord(Base):
    """Logged print and the filament it drew"""
    __tablename__ = "print_records"

    id = Column(String(36), primary_key=True, default=new_id)

    model_name = Column(String(255), nullable=False)
    maker_world_link = Column(String(500), nullable=False, default="")  # External model page, optional
    date = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    is_multi_material = Column(Boolean, default=False, nullable=False)

    usages = relationship(
        "MaterialUsage",
        back_populates="record",
        cascade="all, delete-orphan",
        order_by="MaterialUsage.position",
        lazy="selectin",
    )

    def __repr__(self):
        kind = "multi" if self.is_multi_material else "single"
        return f"<PrintRecord {self.id}: {self.model_name} ({kind}, {self.total_weight}g)>"

    @property
    def has_maker_world_link(self) -> bool:
        """True when the link points at a MakerWorld model page"""
        return bool(self.maker_world_link) and "makerworld.com" in self.maker_world_link

    @property
    def total_weight(self) -> float:
        return sum(u.weight_used for u in self.usages)

    # Single-material accessors
    @property
    def primary_usage(self) -> Optional["MaterialUsage"]:
        return self.usages[0] if self.usages else None

    @property
    def material_id(self) -> Optional[str]:
        usage = self.primary_usage
        return usage.material_id if usage else None

    @property
    def material_name(self) -> Optional[str]:
        usage = self.primary_usage
        return usage.material_name if usage else None

    @property
    def weight_used(self) -> float:
        return self.total_weight

    @property
    def material_ids(self) -> List[str]:
        return [u.material_id for u in self.usages]


class MaterialUsage(Base):
    """One (spool, grams) draw within a print record"""
    __tablename__ = "material_usages"

    id = Column(Integer, primary_key=True, index=True)
    record_id = Column(String(36), ForeignKey("print_records.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)  # Order within the record

    # Weak reference to materials.id, intentionally not a foreign key
    material_id = Column(String(36), nullable=False, index=True)
    material_name = Column(String(255), nullable=False)  # Snapshot of Material.full_name
    weight_used = Column(Float, nullable=False)  # Grams actually drawn (after clamping)

    record = relationship("PrintRecord", back_populates="usages")

    def __repr__(self):
        return f"<MaterialUsage {self.material_name}: {self.weight_used}g>"
