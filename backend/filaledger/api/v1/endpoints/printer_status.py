"""
Printer Status API Endpoints

Read-only view of the vendor cloud task list. Disabled unless
PRINTER_CLOUD_ENABLED is set and an access token is configured.
"""
from typing import Optional
from fastapi import APIRouter, Depends, status

from filaledger.api.deps import get_printer_status, get_store
from filaledger.exceptions import FilaLedgerException, NotFoundError
from filaledger.schemas.print_record import RecordCreatedResponse, build_created_response
from filaledger.schemas.printer import PrinterStatusResponse, TaskRecordRequest
from filaledger.services.printer_status import PrinterStatusAggregator
from filaledger.services.store import Store

router = APIRouter()


def _require_enabled(aggregator: Optional[PrinterStatusAggregator]) -> PrinterStatusAggregator:
    if aggregator is None:
        raise FilaLedgerException(
            "Printer cloud integration is disabled",
            error_code="PRINTER_CLOUD_DISABLED",
            status_code=status.HTTP_409_CONFLICT,
        )
    return aggregator


@router.get("", response_model=PrinterStatusResponse)
def read_printer_status(
    aggregator: Optional[PrinterStatusAggregator] = Depends(get_printer_status),
    store: Store = Depends(get_store),
):
    """Last fetched tasks and the observed print count"""
    if aggregator is None:
        return PrinterStatusResponse(enabled=False, observed_print_count=store.observed_print_count)
    return PrinterStatusResponse(
        enabled=True,
        observed_print_count=store.observed_print_count,
        tasks=aggregator.tasks,
    )


@router.post("/refresh", response_model=PrinterStatusResponse)
def refresh_printer_status(
    aggregator: Optional[PrinterStatusAggregator] = Depends(get_printer_status),
    store: Store = Depends(get_store),
):
    """Fetch recent tasks from the cloud now"""
    aggregator = _require_enabled(aggregator)
    tasks = aggregator.refresh()
    return PrinterStatusResponse(enabled=True, observed_print_count=store.observed_print_count, tasks=tasks)


@router.post("/tasks/{task_id}/record", response_model=RecordCreatedResponse, status_code=status.HTTP_201_CREATED)
def record_printer_task(
    task_id: int,
    data: TaskRecordRequest,
    aggregator: Optional[PrinterStatusAggregator] = Depends(get_printer_status),
    store: Store = Depends(get_store),
):
    """Log an observed task as a print record drawing from the given spools"""
    aggregator = _require_enabled(aggregator)
    requests = aggregator.usage_requests(task_id, data.material_ids)
    record = aggregator.record_task(task_id, data.material_ids)
    if record is None:
        raise NotFoundError(
            "None of the given materials exist",
            error_code="MATERIAL_NOT_FOUND",
            details={"material_ids": data.material_ids},
        )
    return build_created_response(record, store.get_cost_for_record(record), requests)
