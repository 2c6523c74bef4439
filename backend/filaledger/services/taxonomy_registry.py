"""
Taxonomy Registry

Brand, main category and sub category label sets. Each set is the built-in
vocabulary followed by user-added labels, and always ends with the "Custom"
sentinel that tells a form "let the user type a value".

The sentinel is never stored; it is appended whenever a set is read.
"""
from typing import List, Union

from sqlalchemy import func
from sqlalchemy.orm import Session

from filaledger.exceptions import ValidationError
from filaledger.logging_config import get_logger, audit_log
from filaledger.models.taxonomy import TaxonomyLabel, TaxonomyKind, BUILTIN_LABELS, CUSTOM_LABEL

logger = get_logger(__name__)


def _coerce_kind(kind: Union[TaxonomyKind, str]) -> TaxonomyKind:
    try:
        return TaxonomyKind(kind)
    except ValueError:
        raise ValidationError(
            f"Unknown taxonomy kind: {kind}",
            details={"allowed": [k.value for k in TaxonomyKind]},
        )


class TaxonomyRegistry:
    """Label sets backed by the taxonomy_labels table"""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Seeding
    # ------------------------------------------------------------------

    def is_empty(self) -> bool:
        return self.db.query(TaxonomyLabel).first() is None

    def seed_builtin(self) -> int:
        """Insert the built-in vocabulary. Caller checks is_empty() first."""
        count = 0
        for kind, names in BUILTIN_LABELS.items():
            for position, name in enumerate(names):
                self.db.add(TaxonomyLabel(kind=kind.value, name=name, position=position, is_builtin=True))
                count += 1
        self.db.flush()
        logger.info("Seeded built-in taxonomy", extra={"label_count": count})
        return count

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def labels(self, kind: Union[TaxonomyKind, str]) -> List[str]:
        """Ordered labels of one set, sentinel last"""
        kind = _coerce_kind(kind)
        rows = (
            self.db.query(TaxonomyLabel.name)
            .filter(TaxonomyLabel.kind == kind.value)
            .order_by(TaxonomyLabel.position, TaxonomyLabel.id)
            .all()
        )
        return [row.name for row in rows] + [CUSTOM_LABEL]

    def brands(self) -> List[str]:
        return self.labels(TaxonomyKind.BRAND)

    def main_categories(self) -> List[str]:
        return self.labels(TaxonomyKind.MAIN_CATEGORY)

    def sub_categories(self) -> List[str]:
        return self.labels(TaxonomyKind.SUB_CATEGORY)

    def custom_labels(self, kind: Union[TaxonomyKind, str]) -> List[str]:
        """Labels the user added, in insertion order"""
        kind = _coerce_kind(kind)
        rows = (
            self.db.query(TaxonomyLabel.name)
            .filter(TaxonomyLabel.kind == kind.value, TaxonomyLabel.is_builtin == False)  # noqa: E712
            .order_by(TaxonomyLabel.position, TaxonomyLabel.id)
            .all()
        )
        return [row.name for row in rows]

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_label(self, kind: Union[TaxonomyKind, str], name: str) -> bool:
        """
        Add a custom label to a set.

        Returns True when a label was inserted. Adding a label that already
        exists, or the sentinel itself, changes nothing and returns False.

        Raises:
            ValidationError: name is empty after trimming
        """
        kind = _coerce_kind(kind)
        name = (name or "").strip()
        if not name:
            raise ValidationError("Label cannot be empty", details={"kind": kind.value})
        if name == CUSTOM_LABEL:
            return False

        exists = (
            self.db.query(TaxonomyLabel.id)
            .filter(TaxonomyLabel.kind == kind.value, TaxonomyLabel.name == name)
            .first()
        )
        if exists:
            return False

        next_position = (
            self.db.query(func.max(TaxonomyLabel.position))
            .filter(TaxonomyLabel.kind == kind.value)
            .scalar()
        )
        position = 0 if next_position is None else next_position + 1

        self.db.add(TaxonomyLabel(kind=kind.value, name=name, position=position, is_builtin=False))
        self.db.flush()

        audit_log("TAXONOMY_LABEL_ADDED", resource_type="taxonomy", details={"kind": kind.value, "name": name})
        return True

    def add_custom_brand(self, name: str) -> bool:
        return self.add_label(TaxonomyKind.BRAND, name)

    def add_custom_main_category(self, name: str) -> bool:
        return self.add_label(TaxonomyKind.MAIN_CATEGORY, name)

    def add_custom_sub_category(self, name: str) -> bool:
        return self.add_label(TaxonomyKind.SUB_CATEGORY, name)
