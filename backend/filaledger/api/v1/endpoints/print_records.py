"""
Print Record API Endpoints

Logging a print draws filament from the spools immediately. Requests for
more than a spool holds are clamped, never rejected; the response lists the
spools that were clamped and the ones that could not be found.
"""
from dataclasses import asdict
from typing import List, Optional
from fastapi import APIRouter, Depends, Response, status

from filaledger.api.deps import get_store
from filaledger.exceptions import NotFoundError
from filaledger.schemas.print_record import (
    SingleMaterialRecordCreate,
    MultiMaterialRecordCreate,
    PrintRecordResponse,
    PrintRecordDetail,
    RecordCreatedResponse,
    UsageCostResponse,
    build_created_response,
    build_record_response,
)
from filaledger.services.store import Store

router = APIRouter()


def _not_found(record_id: str) -> NotFoundError:
    return NotFoundError(f"Print record not found: {record_id}", details={"record_id": record_id})


@router.get("", response_model=List[PrintRecordResponse])
def list_print_records(q: Optional[str] = None, store: Store = Depends(get_store)):
    """Records newest first; q searches model name, material name and link"""
    records = store.list_print_records(q)
    costs = store.record_costs(records)
    return [build_record_response(record, costs[record.id]) for record in records]


@router.get("/{record_id}", response_model=PrintRecordDetail)
def get_print_record(record_id: str, store: Store = Depends(get_store)):
    """Record with the current cost of each usage"""
    record = store.get_print_record(record_id)
    if record is None:
        raise _not_found(record_id)
    breakdown = store.get_cost_breakdown(record)
    return PrintRecordDetail.model_validate(record).model_copy(update={
        "cost": sum(item.cost for item in breakdown),
        "breakdown": [UsageCostResponse(**asdict(item)) for item in breakdown],
    })


@router.post("/single", response_model=RecordCreatedResponse, status_code=status.HTTP_201_CREATED)
def record_single_material_print(data: SingleMaterialRecordCreate, store: Store = Depends(get_store)):
    record = store.record_single_material_print(data.model_name, data.maker_world_link, data.material_id, data.weight)
    if record is None:
        raise NotFoundError(
            f"Material not found: {data.material_id}",
            error_code="MATERIAL_NOT_FOUND",
            details={"material_id": data.material_id},
        )
    return build_created_response(record, store.get_cost_for_record(record), [(data.material_id, data.weight)])


@router.post("/multi", response_model=RecordCreatedResponse, status_code=status.HTTP_201_CREATED)
def record_multi_material_print(data: MultiMaterialRecordCreate, store: Store = Depends(get_store)):
    """
    Log a multi-material print. Unknown spools are skipped; when none of
    them resolves nothing is logged and record is null.
    """
    requests = [(usage.material_id, usage.weight) for usage in data.usages]
    record = store.record_multi_material_print(data.model_name, data.maker_world_link, requests)
    cost = store.get_cost_for_record(record) if record is not None else 0.0
    return build_created_response(record, cost, requests)


@router.delete("/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_print_record(record_id: str, store: Store = Depends(get_store)):
    """Delete a record. Consumed filament is not returned to the spools."""
    if not store.delete_print_record(record_id):
        raise _not_found(record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
