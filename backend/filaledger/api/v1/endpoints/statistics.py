"""
Statistics API Endpoints
"""
from fastapi import APIRouter, Depends

from filaledger.api.deps import get_store
from filaledger.schemas.print_record import build_record_response
from filaledger.schemas.statistics import StatisticsResponse
from filaledger.services.store import Store

router = APIRouter()


@router.get("", response_model=StatisticsResponse)
def get_statistics(store: Store = Depends(get_store)):
    """
    Dashboard numbers: consumed weight and cost, cost per gram, inventory
    totals, per-brand summary and the most recent records.
    """
    stats = store.statistics()
    costs = stats.pop("recent_record_costs")
    stats["recent_records"] = [
        build_record_response(record, costs[record.id]) for record in stats["recent_records"]
    ]
    return stats
