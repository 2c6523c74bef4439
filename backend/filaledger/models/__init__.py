"""
FilaLedger ORM models

- Material: a physical spool with depletable weight and a cost basis
- MaterialPreset: named color template for a brand/category triple
- PrintRecord / MaterialUsage: consumption ledger
- TaxonomyLabel: brand / main category / sub category label sets
"""
from filaledger.models.material import Material
from filaledger.models.preset import MaterialPreset
from filaledger.models.print_record import PrintRecord, MaterialUsage
from filaledger.models.taxonomy import TaxonomyLabel, TaxonomyKind

__all__ = [
    "Material",
    "MaterialPreset",
    "PrintRecord",
    "MaterialUsage",
    "TaxonomyLabel",
    "TaxonomyKind",
]
