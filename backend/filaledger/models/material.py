"""
Material model

One physical filament spool. Weight is a depletable counter:
remaining_weight starts at initial_weight and only goes down through
consumption or "mark as depleted" (explicit edits aside).

Invariant: 0 <= remaining_weight <= initial_weight
"""
import uuid
from datetime import datetime

from sqlalchemy import Column, String, Float, Date, DateTime

from filaledger.db.base import Base
from filaledger.models.color import ColorMixin
from filaledger.models.taxonomy import compose_display_name


def new_id() -> str:
    return str(uuid.uuid4())


class Material(ColorMixin, Base):
    """
    Filament spool in the inventory

    Answers: "How much of the Bambu PLA Matte white is left, and what does a gram cost?"
    """
    __tablename__ = "materials"

    id = Column(String(36), primary_key=True, default=new_id)

    # Taxonomy (plain labels, see TaxonomyLabel)
    brand = Column(String(100), nullable=False, index=True)  # "Bambu Lab"
    main_category = Column(String(100), nullable=False)  # "PLA"
    sub_category = Column(String(100), nullable=False, default="")  # "Matte"
    name = Column(String(100), nullable=False, default="")  # Color name, "Ivory White"

    # Purchase
    purchase_date = Column(Date, nullable=False)
    price = Column(Float, nullable=False)  # Total paid for the spool

    # Weight tracking (grams)
    initial_weight = Column(Float, nullable=False, default=1000.0)
    remaining_weight = Column(Float, nullable=False)

    # Optional label written on the spool, e.g. "A3"
    short_code = Column(String(20), nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Material {self.id}: {self.full_name} {self.remaining_weight}/{self.initial_weight}g>"

    @property
    def full_name(self) -> str:
        return compose_display_name(self.brand, self.main_category, self.sub_category, self.name)

    @property
    def used_weight(self) -> float:
        return self.initial_weight - self.remaining_weight

    @property
    def usage_percentage(self) -> float:
        if not self.initial_weight:
            return 0.0
        return (self.used_weight / self.initial_weight) * 100

    @property
    def unit_price(self) -> float:
        """Price per gram"""
        if not self.initial_weight or self.initial_weight <= 0:
            return 0.0
        return self.price / self.initial_weight

    @property
    def formatted_weight(self) -> str:
        if self.initial_weight >= 1000:
            return "1kg"
        return f"{int(self.initial_weight)}g"

    @property
    def is_available(self) -> bool:
        return self.remaining_weight > 0

    @property
    def has_been_used(self) -> bool:
        """Opened spool: something has already been drawn from it"""
        return self.used_weight > 0
