"""
Printer Status Aggregator

Polls the vendor cloud for recent tasks and forwards the observed print
count to the store. Nothing here writes to the inventory directly: an
observed task becomes a print record only through the store's record calls.
"""
import threading
from typing import List, Optional, Sequence, Tuple

from filaledger.exceptions import NotFoundError, ValidationError
from filaledger.logging_config import get_logger
from filaledger.models.print_record import PrintRecord
from filaledger.schemas.printer import PrintTask
from filaledger.services.printer_cloud_client import PrinterCloudClient
from filaledger.services.store import Store

logger = get_logger(__name__)


def split_task_weights(task: PrintTask, slot_count: int) -> List[float]:
    """
    Grams per spool for a task, in AMS slot order.

    Uses the per-slot weights reported by the AMS when there is one per
    spool, otherwise splits the task weight evenly.
    """
    if slot_count <= 0:
        return []
    slots = task.ams_detail_mapping
    if len(slots) == slot_count:
        return [slot.weight for slot in slots]
    return [task.weight / slot_count] * slot_count


class PrinterStatusAggregator:
    """Holds the last fetched task list"""

    def __init__(self, store: Store, client: Optional[PrinterCloudClient] = None):
        self.store = store
        self.client = client or PrinterCloudClient()
        self._lock = threading.Lock()
        self._tasks: List[PrintTask] = []
        self._total: Optional[int] = None

    @property
    def tasks(self) -> List[PrintTask]:
        with self._lock:
            return list(self._tasks)

    @property
    def total(self) -> Optional[int]:
        return self._total

    def refresh(self, limit: Optional[int] = None) -> List[PrintTask]:
        """
        Fetch recent tasks and publish the print count.

        On PrinterCloudError the previous tasks are kept and the store is
        not notified.
        """
        task_list = self.client.fetch_recent_tasks(limit)
        with self._lock:
            self._tasks = list(task_list.hits)
            self._total = task_list.total
        self.store.notify_print_count(task_list.total)
        return list(task_list.hits)

    def get_task(self, task_id: int) -> Optional[PrintTask]:
        with self._lock:
            for task in self._tasks:
                if task.id == task_id:
                    return task
        return None

    def _require_task(self, task_id: int, material_ids: Sequence[str]) -> PrintTask:
        task = self.get_task(task_id)
        if task is None:
            raise NotFoundError(f"Print task not found: {task_id}", details={"task_id": task_id})
        if not material_ids:
            raise ValidationError("At least one material is required", details={"task_id": task_id})
        return task

    @staticmethod
    def _requests_for(task: PrintTask, material_ids: Sequence[str]) -> List[Tuple[str, float]]:
        if len(material_ids) == 1:
            return [(material_ids[0], task.weight)]
        return list(zip(material_ids, split_task_weights(task, len(material_ids))))

    def usage_requests(self, task_id: int, material_ids: Sequence[str]) -> List[Tuple[str, float]]:
        """
        (material id, grams) draws for logging a task against the given spools.

        Raises:
            NotFoundError: the task is not among the last fetched ones
            ValidationError: no spool given
        """
        return self._requests_for(self._require_task(task_id, material_ids), material_ids)

    def record_task(self, task_id: int, material_ids: Sequence[str]) -> Optional[PrintRecord]:
        """
        Log an observed task as a print record.

        One spool gives a single-material record, several spools a
        multi-material record. Raises like usage_requests.
        """
        task = self._require_task(task_id, material_ids)
        requests = self._requests_for(task, material_ids)
        if len(requests) == 1:
            material_id, weight = requests[0]
            record = self.store.record_single_material_print(task.title, "", material_id, weight)
        else:
            record = self.store.record_multi_material_print(task.title, "", requests)

        logger.info(
            "Printer task logged",
            extra={"task_id": task_id, "record_id": record.id if record else None},
        )
        return record
