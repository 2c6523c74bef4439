"""
Material API Endpoints

Spool inventory: add, edit, deplete, delete, and the inventory summary.
"""
from typing import List, Literal
from fastapi import APIRouter, Depends, Query, Response, status

from filaledger.api.deps import get_store
from filaledger.exceptions import NotFoundError, MaterialNotFoundError
from filaledger.schemas.material import MaterialCreate, MaterialFromPreset, MaterialUpdate, MaterialResponse
from filaledger.schemas.statistics import InventorySummary
from filaledger.services.store import Store

router = APIRouter()


@router.get("", response_model=List[MaterialResponse])
def list_materials(
    status_filter: Literal["all", "available", "depleted"] = Query("all", alias="status"),
    store: Store = Depends(get_store),
):
    """
    List spools.

    - all: newest purchase first
    - available: spools with filament left, opened ones first
    - depleted: empty spools
    """
    if status_filter == "available":
        return store.available_materials()
    if status_filter == "depleted":
        return store.depleted_materials()
    return store.list_materials()


@router.get("/summary", response_model=InventorySummary)
def get_inventory_summary(store: Store = Depends(get_store)):
    """Weight totals over all spools and per brand"""
    return store.inventory_summary()


@router.get("/{material_id}", response_model=MaterialResponse)
def get_material(material_id: str, store: Store = Depends(get_store)):
    material = store.get_material(material_id)
    if material is None:
        raise MaterialNotFoundError(material_id)
    return material


@router.post("", response_model=MaterialResponse, status_code=status.HTTP_201_CREATED)
def create_material(data: MaterialCreate, store: Store = Depends(get_store)):
    """Add a full spool; remaining weight starts at the initial weight"""
    return store.add_material(data)


@router.post("/from-preset/{preset_id}", response_model=MaterialResponse, status_code=status.HTTP_201_CREATED)
def create_material_from_preset(preset_id: str, data: MaterialFromPreset, store: Store = Depends(get_store)):
    """Add a spool whose taxonomy and color come from a preset"""
    preset = store.get_preset(preset_id)
    if preset is None:
        raise NotFoundError(f"Preset not found: {preset_id}", details={"preset_id": preset_id})
    material_data = MaterialCreate.from_preset(
        preset,
        price=data.price,
        initial_weight=data.initial_weight,
        purchase_date=data.purchase_date,
        short_code=data.short_code,
    )
    return store.add_material(material_data)


@router.patch("/{material_id}", response_model=MaterialResponse)
def update_material(material_id: str, changes: MaterialUpdate, store: Store = Depends(get_store)):
    return store.update_material(material_id, changes)


@router.post("/{material_id}/deplete", response_model=MaterialResponse)
def mark_material_depleted(material_id: str, store: Store = Depends(get_store)):
    """Set remaining weight to 0 without touching price or initial weight"""
    material = store.mark_as_depleted(material_id)
    if material is None:
        raise MaterialNotFoundError(material_id)
    return material


@router.delete("/{material_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_material(material_id: str, store: Store = Depends(get_store)):
    """Delete a spool. Print records that used it keep their name snapshot."""
    if not store.delete_material(material_id):
        raise MaterialNotFoundError(material_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
