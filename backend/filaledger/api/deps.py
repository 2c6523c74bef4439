"""
FastAPI dependencies

The Store and the printer status aggregator are created once in the app
lifespan and kept on app.state.
"""
from typing import Optional

from fastapi import Request

from filaledger.exceptions import FilaLedgerException
from filaledger.services.printer_status import PrinterStatusAggregator
from filaledger.services.store import Store


def get_store(request: Request) -> Store:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise FilaLedgerException("Store is not initialized", error_code="STORE_UNAVAILABLE", status_code=503)
    return store


def get_printer_status(request: Request) -> Optional[PrinterStatusAggregator]:
    """None when the printer cloud integration is disabled"""
    return getattr(request.app.state, "printer_status", None)
