"""Flask based web interface for the cruise price watch."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from threading import Event
from typing import Any, Callable, Dict, Optional
from uuid import uuid4

from flask import Flask, jsonify, redirect, render_template, request, url_for

from cruise_watch import WatchResult, create_config_from_env, create_config_from_form, run_watch_workflow
from cruise_watch.reporter import PRICE_NOTE
from cruise_watch.scraper import AggregationCancelled
from task_repository import TaskRecord, TaskRepository

LOGGER = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO)

app = Flask(__name__)


class TaskManager:
    def __init__(self, repository: TaskRepository) -> None:
        self.executor = ThreadPoolExecutor(max_workers=2)
        self.repository = repository
        self._cancel_events: Dict[str, Event] = {}

    def submit(
        self,
        config_data: Dict[str, Any],
        run_fn: Callable[[Event], WatchResult],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> TaskRecord:
        task_id = uuid4().hex
        record = TaskRecord(
            id=task_id,
            status="queued",
            created_at=datetime.now(timezone.utc),
            config_payload=config_data,
            metadata=metadata or {},
        )
        cancel_event = Event()
        self._cancel_events[task_id] = cancel_event

        def _runner() -> None:
            self.repository.update_status(task_id, "running")
            try:
                result = run_fn(cancel_event)
                self.repository.update_result(task_id, result.to_dict())
            except AggregationCancelled:
                LOGGER.info("Task %s cancelled", task_id)
                self.repository.update_error(task_id, "cancelled", status="cancelled")
            except Exception as exc:  # pragma: no cover - runtime safeguard
                LOGGER.exception("Task %s failed", task_id)
                self.repository.update_error(task_id, str(exc))
            finally:
                self._cancel_events.pop(task_id, None)

        self.repository.create_task(record)
        self.executor.submit(_runner)
        return record

    def cancel(self, task_id: str) -> bool:
        cancel_event = self._cancel_events.get(task_id)
        if cancel_event is None:
            return False
        cancel_event.set()
        return True

    def get(self, task_id: str) -> Optional[TaskRecord]:
        return self.repository.get(task_id)


task_repository = TaskRepository()
task_manager = TaskManager(task_repository)


def _start_load(form_data: Dict[str, Any]) -> TaskRecord:
    config = create_config_from_form(form_data) if form_data else create_config_from_env()

    def _run(cancel_event: Event) -> WatchResult:
        return run_watch_workflow(config, cancel_event)

    return task_manager.submit(config.to_dict(), _run)


@app.route("/")
def index():
    record = _start_load(request.args.to_dict())
    return redirect(url_for("status_page", task_id=record.id))


@app.route("/run", methods=["POST"])
def run_from_form():
    form_data = request.form.to_dict(flat=False)
    flat_data = {key: values if len(values) > 1 else values[0] for key, values in form_data.items()}
    record = _start_load(flat_data)
    return redirect(url_for("status_page", task_id=record.id))


@app.route("/status/<task_id>")
def status_page(task_id: str) -> str:
    task = task_manager.get(task_id)
    return render_template(
        "status.html",
        task_id=task_id,
        task=task.to_dict() if task else None,
        loading=bool(task and task.loading),
        price_note=PRICE_NOTE,
    )


@app.route("/status/<task_id>/cancel", methods=["POST"])
def cancel_from_form(task_id: str):
    if not task_manager.cancel(task_id):
        LOGGER.info("Cancel requested for task %s, which is not running", task_id)
    return redirect(url_for("status_page", task_id=task_id))


@app.route("/api/status/<task_id>")
def task_status(task_id: str):
    task = task_manager.get(task_id)
    if not task:
        return jsonify({"error": "unknown task"}), 404
    return jsonify(task.to_dict())


@app.route("/api/cancel/<task_id>", methods=["POST"])
def cancel_task(task_id: str):
    if not task_manager.cancel(task_id):
        return jsonify({"error": "task not running"}), 404
    return jsonify({"task_id": task_id, "status": "cancelling"})


if __name__ == "__main__":
    app.run(debug=True)
