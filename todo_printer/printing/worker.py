"""
Background print worker and job registry for Todo Printer.

This module owns:
- A thread-backed job queue (one worker, so prints never overlap)
- An in-memory job registry with basic lifecycle (queued -> running -> success/error)
- Public helpers to enqueue tickets and query job status

Transport I/O is blocking, so it runs here rather than on request threads.
Callers that need the outcome wait on the Future returned by enqueue_ticket().
It is Flask-agnostic so it can be used from both web routes and the CLI.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
import uuid
from concurrent.futures import Future
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from todo_printer.printing.session import PrinterSession

logger = logging.getLogger(__name__)

JOB_QUEUE: queue.Queue[Dict[str, Any]] = queue.Queue()
JOBS: Dict[str, Dict[str, Any]] = {}
JOBS_LOCK = threading.RLock()
JOBS_MAX = int(os.environ.get("TODOPRINTER_JOBS_MAX", "200"))

WORKER_THREAD: Optional[threading.Thread] = None
WORKER_STARTED = False


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _prune_jobs_if_needed() -> None:
    with JOBS_LOCK:
        while len(JOBS) > JOBS_MAX:
            oldest = min(JOBS.values(), key=lambda j: j.get("created_at", ""))
            JOBS.pop(oldest["id"], None)


def _create_job(kind: str, meta: Optional[Dict[str, Any]] = None) -> str:
    job_id = uuid.uuid4().hex
    now = _utc_now_iso()
    job = {
        "id": job_id,
        "type": kind,
        "status": "queued",
        "created_at": now,
        "updated_at": now,
    }
    if meta:
        job.update(meta)
    with JOBS_LOCK:
        JOBS[job_id] = job
        _prune_jobs_if_needed()
    return job_id


def _update_job(job_id: Optional[str], **updates: Any) -> None:
    if not job_id:
        return
    with JOBS_LOCK:
        job = JOBS.get(job_id)
        if not job:
            return
        job.update(updates)
        job["updated_at"] = _utc_now_iso()


def _run_job(job: Dict[str, Any]) -> None:
    job_id = job["job_id"]
    future: Future = job["future"]
    if not future.set_running_or_notify_cancel():
        _update_job(job_id, status="error", error="cancelled")
        return
    _update_job(job_id, status="running")
    session: PrinterSession = job["session"]
    try:
        ticket = session.print_ticket(**job["payload"])
    except Exception as e:
        logger.exception("Print job %s failed: %s", job_id, e, extra={"job_id": job_id})
        _update_job(job_id, status="error", error=f"{type(e).__name__}: {e}")
        future.set_exception(e)
        return
    _update_job(job_id, status="success")
    future.set_result(ticket)


def _print_worker() -> None:
    """
    Worker loop that processes queued jobs. Never raises; failures are
    recorded on the job and delivered through its Future.
    """
    while True:
        job = JOB_QUEUE.get()
        try:
            _run_job(job)
        finally:
            JOB_QUEUE.task_done()


def ensure_worker() -> None:
    """
    Ensure the background worker thread is started (idempotent).
    """
    global WORKER_THREAD, WORKER_STARTED
    with JOBS_LOCK:
        if WORKER_STARTED and WORKER_THREAD and WORKER_THREAD.is_alive():
            return
        t = threading.Thread(target=_print_worker, daemon=True, name="todo-printer-worker")
        t.start()
        WORKER_THREAD = t
        WORKER_STARTED = True
    logger.info("Background print worker started")


def enqueue_ticket(
    session: PrinterSession,
    title: str,
    assignee: Optional[str] = None,
    description: Optional[str] = None,
    origin: Optional[str] = None,
) -> Tuple[str, Future]:
    """
    Enqueue a ticket print. Returns (job_id, future); the future resolves to the
    printed Ticket or raises the session's error.
    """
    meta: Dict[str, Any] = {"title": (title or "").strip()}
    if origin:
        meta["origin"] = origin
    job_id = _create_job("ticket", meta=meta)
    future: Future = Future()
    JOB_QUEUE.put(
        {
            "job_id": job_id,
            "session": session,
            "future": future,
            "payload": {"title": title, "assignee": assignee, "description": description},
        }
    )
    logger.info("Enqueued ticket job id=%s queue_size=%d", job_id, JOB_QUEUE.qsize(), extra={"job_id": job_id})
    return job_id, future


def get_job(job_id: str) -> Optional[Dict[str, Any]]:
    """
    Retrieve a job by id.
    """
    with JOBS_LOCK:
        job = JOBS.get(job_id)
        return dict(job) if job else None


def list_jobs() -> List[Dict[str, Any]]:
    """
    Return a list of jobs sorted by created_at descending.
    """
    with JOBS_LOCK:
        items = [dict(v) for v in JOBS.values()]
    items.sort(key=lambda j: j.get("created_at", ""), reverse=True)
    return items


def worker_status() -> Dict[str, Any]:
    """
    Return basic worker/queue status.
    """
    alive = bool(WORKER_THREAD) and WORKER_THREAD.is_alive()  # type: ignore[union-attr]
    return {
        "worker_started": WORKER_STARTED,
        "worker_alive": alive,
        "queue_size": JOB_QUEUE.qsize(),
    }


__all__ = [
    "JOBS",
    "JOBS_MAX",
    "JOB_QUEUE",
    "enqueue_ticket",
    "ensure_worker",
    "get_job",
    "list_jobs",
    "worker_status",
]
