from todo_printer.core.errors import NotConnected
from todo_printer.printing import worker


def test_enqueue_ticket_prints_and_records_job(session, fake_transport):
    session.connect()
    worker.ensure_worker()
    job_id, future = worker.enqueue_ticket(session, "Water plants", origin="test")
    ticket = future.result(timeout=5)
    assert ticket.title == "Water plants"
    assert len(fake_transport.writes) == 1

    job = worker.get_job(job_id)
    assert job["status"] == "success"
    assert job["origin"] == "test"
    assert job["title"] == "Water plants"
    assert any(j["id"] == job_id for j in worker.list_jobs())


def test_failed_job_propagates_error(session):
    worker.ensure_worker()
    job_id, future = worker.enqueue_ticket(session, "Not connected")
    try:
        future.result(timeout=5)
    except NotConnected:
        pass
    else:
        raise AssertionError("expected NotConnected")
    job = worker.get_job(job_id)
    assert job["status"] == "error"
    assert job["error"].startswith("NotConnected")


def test_job_registry_is_pruned(monkeypatch):
    monkeypatch.setattr(worker, "JOBS", {})
    monkeypatch.setattr(worker, "JOBS_MAX", 3)
    ids = [worker._create_job("ticket") for _ in range(5)]
    assert len(worker.JOBS) == 3
    assert ids[-1] in worker.JOBS


def test_worker_status_shape():
    worker.ensure_worker()
    status = worker.worker_status()
    assert status["worker_started"] is True
    assert status["worker_alive"] is True
    assert "queue_size" in status
