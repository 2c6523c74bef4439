"""
Backup API Endpoints

Export the whole store as one JSON document, or replace it from one.
"""
from fastapi import APIRouter, Depends

from filaledger.api.deps import get_store
from filaledger.schemas.snapshot import StoreSnapshot, SnapshotImportResult
from filaledger.services.store import Store

router = APIRouter()


@router.get("", response_model=StoreSnapshot)
def export_backup(store: Store = Depends(get_store)):
    return store.export_snapshot()


@router.post("/restore", response_model=SnapshotImportResult)
def restore_backup(snapshot: StoreSnapshot, store: Store = Depends(get_store)):
    """Replace materials, presets, print records and labels with the document"""
    return store.import_snapshot(snapshot)
