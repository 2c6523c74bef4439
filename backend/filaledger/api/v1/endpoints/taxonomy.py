"""
Taxonomy API Endpoints

Brand / main category / sub category label sets. Labels can be added, not
removed.
"""
from fastapi import APIRouter, Depends

from filaledger.api.deps import get_store
from filaledger.models.taxonomy import TaxonomyKind
from filaledger.schemas.statistics import TaxonomyResponse, TaxonomyLabelCreate
from filaledger.services.store import Store

router = APIRouter()


@router.get("", response_model=TaxonomyResponse)
def get_taxonomy(store: Store = Depends(get_store)):
    """Every label set; each list ends with the "Custom" sentinel"""
    return store.taxonomy()


@router.post("/{kind}", response_model=TaxonomyResponse)
def add_taxonomy_label(kind: TaxonomyKind, data: TaxonomyLabelCreate, store: Store = Depends(get_store)):
    """Add a custom label. Existing labels and the sentinel are accepted and ignored."""
    store.add_taxonomy_label(kind, data.name)
    return store.taxonomy()
