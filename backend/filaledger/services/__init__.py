"""
Services

- TaxonomyRegistry, PresetCatalog, MaterialInventory, ConsumptionLedger:
  components working on one SQLAlchemy session
- Store: composes them, one transaction per call
- PrinterCloudClient / PrinterStatusAggregator: optional vendor cloud signal
"""
