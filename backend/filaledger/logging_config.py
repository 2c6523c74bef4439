"""
FilaLedger - Structured Logging Configuration

JSON-formatted logging for the application plus a separate audit trail for
inventory and ledger mutations (spool added, spool depleted, print recorded, ...).

Usage:
    from filaledger.logging_config import get_logger, audit_log

    logger = get_logger(__name__)
    logger.info("Consumption clamped", extra={"material_id": "...", "applied_g": 40.0})

    audit_log("PRINT_RECORD_ADDED", resource_type="print_record", resource_id=record.id,
              details={"total_weight_g": 70.0})
"""
import json
import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from filaledger.core.settings import settings

# Attributes every LogRecord carries; anything else was passed through ``extra=``.
_RESERVED_ATTRS = frozenset({
    "name", "msg", "args", "created", "filename", "funcName",
    "levelname", "levelno", "lineno", "module", "msecs",
    "pathname", "process", "processName", "relativeCreated",
    "stack_info", "exc_info", "exc_text", "thread", "threadName",
    "taskName", "message",
})


def _extra_fields(record: logging.LogRecord) -> Dict[str, Any]:
    return {k: v for k, v in record.__dict__.items() if k not in _RESERVED_ATTRS}


class JSONFormatter(logging.Formatter):
    """
    Formats log records as JSON for log aggregation systems.

    Output format:
    {
        "timestamp": "2025-03-06T12:00:00.000000+00:00",
        "level": "WARNING",
        "logger": "filaledger.services.material_inventory",
        "message": "Consumption clamped to remaining weight",
        "material_id": "3f0c...",
        "requested_g": 50.0,
        "applied_g": 40.0
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Add location info for errors
        if record.levelno >= logging.ERROR:
            log_data["location"] = {
                "file": record.pathname,
                "line": record.lineno,
                "function": record.funcName,
            }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in _extra_fields(record).items():
            # Serialize non-JSON-serializable objects
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        return json.dumps(log_data)


class TextFormatter(logging.Formatter):
    """
    Formats log records as human-readable text for development.

    Output format:
    2025-03-06 12:00:00 [INFO] filaledger.services.store: Material added material_id=3f0c...
    """

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        base_msg = f"{timestamp} [{record.levelname}] {record.name}: {record.getMessage()}"

        extras = [f"{key}={value}" for key, value in _extra_fields(record).items()]
        if extras:
            base_msg += " " + " ".join(extras)

        if record.exc_info:
            base_msg += "\n" + self.formatException(record.exc_info)

        return base_msg


class AuditFormatter(logging.Formatter):
    """
    Formats audit records for the inventory/ledger trail.

    Output format (JSON):
    {
        "timestamp": "2025-03-06T12:00:00.000000+00:00",
        "event": "MATERIAL_DEPLETED",
        "resource_type": "material",
        "resource_id": "3f0c...",
        "details": {"previous_remaining_g": 120.0}
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event": getattr(record, "event", record.getMessage()),
            "resource_type": getattr(record, "resource_type", None),
            "resource_id": getattr(record, "resource_id", None),
            "details": getattr(record, "details", {}),
        }

        # Remove None values
        log_data = {k: v for k, v in log_data.items() if v is not None}

        return json.dumps(log_data, default=str)


def _build_formatter() -> logging.Formatter:
    if settings.LOG_FORMAT == "text":
        return TextFormatter()
    return JSONFormatter()


def setup_logging() -> None:
    """
    Configure application logging based on settings.

    Call this once at application startup.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    formatter = _build_formatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    # Remove existing handlers to avoid duplicates
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(log_level)
    root_logger.addHandler(console_handler)

    if settings.LOG_FILE:
        os.makedirs(os.path.dirname(settings.LOG_FILE) or ".", exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            settings.LOG_FILE,
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(log_level)
        root_logger.addHandler(file_handler)

    setup_audit_logging()

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def setup_audit_logging() -> None:
    """Configure separate audit logger for inventory and ledger events."""
    audit_logger = logging.getLogger("audit")
    audit_logger.setLevel(logging.INFO)
    audit_logger.handlers.clear()
    audit_logger.propagate = False  # Don't send to root logger

    if settings.AUDIT_LOG_FILE:
        os.makedirs(os.path.dirname(settings.AUDIT_LOG_FILE) or ".", exist_ok=True)
        audit_handler = logging.handlers.RotatingFileHandler(
            settings.AUDIT_LOG_FILE,
            maxBytes=50 * 1024 * 1024,  # 50 MB
            backupCount=10,
        )
        audit_handler.setFormatter(AuditFormatter())
        audit_handler.setLevel(logging.INFO)
        audit_logger.addHandler(audit_handler)

    # Also log audit events to console in development
    if settings.DEBUG:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(AuditFormatter())
        audit_logger.addHandler(console_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Module name (typically __name__)
    """
    return logging.getLogger(name)


def audit_log(
    event: str,
    *,
    resource_type: Optional[str] = None,
    resource_id: Optional[Any] = None,
    details: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Log a business event to the audit log.

    Events used by the store:
    MATERIAL_ADDED, MATERIAL_UPDATED, MATERIAL_DELETED, MATERIAL_DEPLETED,
    PRESET_ADDED, PRESETS_DELETED, TAXONOMY_LABEL_ADDED,
    PRINT_RECORD_ADDED, PRINT_RECORD_DELETED, SNAPSHOT_IMPORTED

    Args:
        event: Event name
        resource_type: Type of resource affected (e.g., "material", "print_record")
        resource_id: ID of the affected resource
        details: Additional event-specific data
    """
    audit_logger = logging.getLogger("audit")
    audit_logger.info(
        event,
        extra={
            "event": event,
            "resource_type": resource_type,
            "resource_id": resource_id,
            "details": details or {},
        },
    )
