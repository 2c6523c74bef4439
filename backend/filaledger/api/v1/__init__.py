"""
API v1 Router - FilaLedger
"""
from fastapi import APIRouter
from filaledger.api.v1.endpoints import (
    materials,
    presets,
    print_records,
    taxonomy,
    statistics,
    backup,
    printer_status,
)

router = APIRouter()

# Materials (spool inventory)
router.include_router(
    materials.router,
    prefix="/materials",
    tags=["materials"]
)

# Presets
router.include_router(
    presets.router,
    prefix="/presets",
    tags=["presets"]
)

# Taxonomy labels
router.include_router(
    taxonomy.router,
    prefix="/taxonomy",
    tags=["taxonomy"]
)

# Print records (consumption ledger)
router.include_router(
    print_records.router,
    prefix="/print-records",
    tags=["print-records"]
)

# Statistics
router.include_router(
    statistics.router,
    prefix="/statistics",
    tags=["statistics"]
)

# Backup / restore
router.include_router(
    backup.router,
    prefix="/backup",
    tags=["backup"]
)

# Printer cloud status
router.include_router(
    printer_status.router,
    prefix="/printer-status",
    tags=["printer-status"]
)
