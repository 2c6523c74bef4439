"""
Preset API Endpoints

Color templates used to prefill new spools.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, status

from filaledger.api.deps import get_store
from filaledger.exceptions import NotFoundError, ValidationError
from filaledger.schemas.preset import PresetCreate, PresetResponse, PresetDeleteRequest, PresetDeleteResponse
from filaledger.services.store import Store

router = APIRouter()


@router.get("", response_model=List[PresetResponse])
def list_presets(
    brand: Optional[str] = None,
    main_category: Optional[str] = None,
    sub_category: Optional[str] = None,
    q: Optional[str] = None,
    store: Store = Depends(get_store),
):
    """
    List presets.

    Either filter by the exact brand / main_category / sub_category triple
    (all three required), or search with q across brand, categories and
    color name. Without parameters every preset is returned.
    """
    triple = (brand, main_category, sub_category)
    if any(value is not None for value in triple):
        if any(value is None for value in triple):
            raise ValidationError(
                "brand, main_category and sub_category must be given together",
                details={"brand": brand, "main_category": main_category, "sub_category": sub_category},
            )
        return store.filter_presets(brand, main_category, sub_category)
    if q:
        return store.search_presets(q)
    return store.list_presets()


@router.get("/brands", response_model=List[str])
def list_preset_brands(store: Store = Depends(get_store)):
    """Distinct brands that have at least one preset"""
    return store.preset_brands()


@router.get("/{preset_id}", response_model=PresetResponse)
def get_preset(preset_id: str, store: Store = Depends(get_store)):
    preset = store.get_preset(preset_id)
    if preset is None:
        raise NotFoundError(f"Preset not found: {preset_id}", details={"preset_id": preset_id})
    return preset


@router.post("", response_model=PresetResponse, status_code=status.HTTP_201_CREATED)
def create_preset(data: PresetCreate, store: Store = Depends(get_store)):
    return store.add_preset(data)


@router.post("/delete", response_model=PresetDeleteResponse)
def delete_presets(request: PresetDeleteRequest, store: Store = Depends(get_store)):
    """Delete presets by id; unknown ids are ignored"""
    return PresetDeleteResponse(deleted=store.delete_presets(request.ids))
