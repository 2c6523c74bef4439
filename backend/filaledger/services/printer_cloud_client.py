"""
Printer vendor cloud client

Read-only access to the recent print task list of a Bambu Lab account.
Requires an access token obtained outside this application.
"""
from typing import Optional

import requests

from filaledger.core.settings import settings
from filaledger.exceptions import PrinterCloudError
from filaledger.logging_config import get_logger
from filaledger.schemas.printer import PrintTaskList

logger = get_logger(__name__)

TASKS_PATH = "/v1/user-service/my/tasks"


class PrinterCloudClient:
    """Thin requests wrapper around the task listing endpoint"""

    def __init__(
        self,
        access_token: Optional[str] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.access_token = access_token if access_token is not None else settings.PRINTER_CLOUD_ACCESS_TOKEN
        self.api_url = (api_url or settings.PRINTER_CLOUD_API_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.PRINTER_CLOUD_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def fetch_recent_tasks(self, limit: Optional[int] = None) -> PrintTaskList:
        """
        GET the most recent tasks.

        Raises:
            PrinterCloudError: no token, transport failure, non-200 answer
                or a body that does not parse
        """
        if not self.access_token:
            raise PrinterCloudError("Printer cloud access token is not configured")

        limit = limit or settings.PRINTER_CLOUD_TASK_LIMIT
        url = f"{self.api_url}{TASKS_PATH}"
        try:
            response = self.session.get(
                url,
                params={"limit": limit},
                headers={"Authorization": f"Bearer {self.access_token}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Printer cloud request failed", extra={"url": url, "error": str(e)})
            raise PrinterCloudError(f"Printer cloud unreachable: {e}")

        if response.status_code != 200:
            logger.warning("Printer cloud answered with an error",
                           extra={"url": url, "status_code": response.status_code})
            raise PrinterCloudError(
                f"Printer cloud returned HTTP {response.status_code}",
                details={"status_code": response.status_code},
            )

        try:
            tasks = PrintTaskList.model_validate(response.json())
        except ValueError as e:
            # json decode errors and pydantic validation errors are both ValueErrors
            raise PrinterCloudError(f"Unexpected printer cloud response: {e}")

        logger.info("Fetched printer tasks", extra={"total": tasks.total, "returned": len(tasks.hits)})
        return tasks
