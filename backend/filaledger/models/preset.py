"""
MaterialPreset model

Named color template scoped to a (brand, main category, sub category)
triple. Used to prefill new materials; never linked to them.
"""
from datetime import datetime

from sqlalchemy import Column, String, Boolean, DateTime

from filaledger.db.base import Base
from filaledger.models.color import ColorMixin
from filaledger.models.material import new_id
from filaledger.models.taxonomy import compose_display_name


class MaterialPreset(ColorMixin, Base):
    """Known color for a filament line, e.g. Bambu Lab PLA Silk "Silk Blue" """
    __tablename__ = "material_presets"

    id = Column(String(36), primary_key=True, default=new_id)

    brand = Column(String(100), nullable=False, index=True)
    main_category = Column(String(100), nullable=False)
    sub_category = Column(String(100), nullable=False, default="")
    color_name = Column(String(100), nullable=False)

    # Shipped with the application (data/material_presets.json) vs user-added
    is_builtin = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<MaterialPreset {self.id}: {self.full_name}>"

    @property
    def full_name(self) -> str:
        return compose_display_name(self.brand, self.main_category, self.sub_category, self.color_name)
