"""In-memory store for background load records."""
from __future__ import annotations

import copy
from dataclasses import dataclass, field
from datetime import datetime
from threading import Lock
from typing import Any, Dict, Optional


@dataclass
class TaskRecord:
    """Internal representation of one background load."""

    id: str
    status: str
    created_at: datetime
    config_payload: Dict[str, Any]
    result: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def loading(self) -> bool:
        return self.status in {"queued", "running"}

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the task into a JSON-ready structure."""

        return {
            "id": self.id,
            "status": self.status,
            "created_at": self.created_at.isoformat(),
            "config": self.config_payload,
            "error": self.error,
            "metadata": self.metadata,
            "result": self.result,
        }


class TaskRepository:
    """Thread-safe, process-local storage for :class:`TaskRecord` objects.

    Nothing is written to disk. Only the ``max_finished`` most recently
    created finished, failed or cancelled records are kept; queued and
    running records are never evicted.
    """

    def __init__(self, max_finished: int = 50) -> None:
        self._records: Dict[str, TaskRecord] = {}
        self._lock = Lock()
        self.max_finished = max_finished

    def _evict_finished(self) -> None:
        # dicts keep insertion order, so the first done records are the oldest.
        done = [task_id for task_id, record in self._records.items() if not record.loading]
        for task_id in done[: max(len(done) - self.max_finished, 0)]:
            del self._records[task_id]

    def create_task(self, record: TaskRecord) -> None:
        with self._lock:
            self._records[record.id] = copy.deepcopy(record)
            self._evict_finished()

    def update_status(self, task_id: str, status: str) -> None:
        with self._lock:
            record = self._records.get(task_id)
            if record is not None:
                record.status = status

    def update_result(self, task_id: str, result: Dict[str, Any]) -> None:
        with self._lock:
            record = self._records.get(task_id)
            if record is not None:
                record.status = "finished"
                record.result = result
                record.error = None
                self._evict_finished()

    def update_error(self, task_id: str, message: str, status: str = "failed") -> None:
        with self._lock:
            record = self._records.get(task_id)
            if record is not None:
                record.status = status
                record.error = message
                self._evict_finished()

    def get(self, task_id: str) -> Optional[TaskRecord]:
        with self._lock:
            record = self._records.get(task_id)
            return copy.deepcopy(record) if record is not None else None
