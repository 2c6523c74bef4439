"""
FilaLedger - Main FastAPI Application
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError

from filaledger.api.v1 import router as api_v1_router
from filaledger.core.settings import settings
from filaledger.exceptions import FilaLedgerException
from filaledger.logging_config import setup_logging, get_logger

# Setup structured logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info(
        "Starting FilaLedger API",
        extra={
            "version": settings.VERSION,
            "environment": settings.ENVIRONMENT,
            "debug": settings.DEBUG,
        }
    )
    # A store placed on app.state beforehand (tests, embedding) is kept
    if getattr(app.state, "store", None) is None:
        from filaledger.db.session import engine, init_db, SessionLocal
        from filaledger.services.store import Store

        init_db(engine)
        store = Store(SessionLocal, recent_records_limit=settings.RECENT_RECORDS_LIMIT)
        store.initialize(seed_builtin=settings.SEED_BUILTIN_DATA)
        app.state.store = store

    if settings.printer_cloud_configured and getattr(app.state, "printer_status", None) is None:
        from filaledger.services.printer_status import PrinterStatusAggregator

        app.state.printer_status = PrinterStatusAggregator(app.state.store)
        logger.info("Printer cloud integration enabled", extra={"api_url": settings.PRINTER_CLOUD_API_URL})
    yield
    # Shutdown
    logger.info("Shutting down FilaLedger API")


# Create FastAPI app
app = FastAPI(
    title="FilaLedger API",
    description="Filament spool inventory and print consumption ledger",
    version=settings.VERSION,
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===================
# Exception Handlers
# ===================


@app.exception_handler(FilaLedgerException)
async def filaledger_exception_handler(request: Request, exc: FilaLedgerException):
    """Handle all application exceptions."""
    logger.warning(
        f"FilaLedger Exception: {exc.error_code} - {exc.message}",
        extra={"error_code": exc.error_code, "details": exc.details, "path": request.url.path}
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle Pydantic validation errors with cleaner format."""
    errors = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error["loc"] if loc != "body")
        errors.append({
            "field": field,
            "message": error["msg"],
            "type": error["type"],
        })

    logger.warning(
        f"Validation error on {request.url.path}",
        extra={"errors": errors}
    )
    return JSONResponse(
        status_code=422,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": {"errors": errors},
        },
    )


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError):
    """Handle SQLAlchemy database errors."""
    # Full error goes to the log only
    logger.error(
        f"Database error on {request.url.path}: {str(exc)}",
        exc_info=True
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "DATABASE_ERROR",
            "message": "A database error occurred. Please try again.",
        },
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unexpected errors."""
    logger.error(
        f"Unexpected error on {request.url.path}: {str(exc)}",
        exc_info=True
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": "INTERNAL_ERROR",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


# Include API routes
app.include_router(api_v1_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "FilaLedger API",
        "version": settings.VERSION,
        "status": "online"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "filaledger.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )
