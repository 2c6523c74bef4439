"""
FilaLedger exception hierarchy

Every error carries a machine-readable code and an HTTP status so the API
layer can render it without knowing the concrete type.
"""
from typing import Any, Dict, Optional


class FilaLedgerException(Exception):
    """Base class for all application errors"""

    error_code = "FILALEDGER_ERROR"
    status_code = 500

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(FilaLedgerException):
    """Input rejected before any mutation was attempted"""

    error_code = "VALIDATION_ERROR"
    status_code = 400


class NotFoundError(FilaLedgerException):
    """A referenced entity does not exist"""

    error_code = "NOT_FOUND"
    status_code = 404


class MaterialNotFoundError(NotFoundError):
    """Raised when a material (spool) id does not resolve"""

    error_code = "MATERIAL_NOT_FOUND"

    def __init__(self, material_id: str):
        super().__init__(
            f"Material not found: {material_id}",
            details={"material_id": material_id},
        )
        self.material_id = material_id


class PrinterCloudError(FilaLedgerException):
    """The vendor cloud could not be reached or answered with garbage"""

    error_code = "PRINTER_CLOUD_ERROR"
    status_code = 502
