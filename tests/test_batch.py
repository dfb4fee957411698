from datetime import date

from biopeak.db.models import BatchJobLog
from biopeak.services.batch_service import BatchService, run_in_windows


def test_windows_and_delays():
    seen, sleeps = [], []

    def worker(user_id):
        seen.append(user_id)

    outcome = run_in_windows([f"u{i}" for i in range(5)], worker, concurrency=2,
                             delay_seconds=1.5, sleep=sleeps.append)

    assert sorted(seen) == [f"u{i}" for i in range(5)]
    assert outcome.total == 5
    assert outcome.succeeded == 5
    # 3 个窗口之间 2 次间隔，最后一个窗口之后不等待
    assert sleeps == [1.5, 1.5]


def test_single_failure_does_not_abort_batch():
    def worker(user_id):
        if user_id == "bad":
            raise RuntimeError("boom")

    outcome = run_in_windows(["a", "bad", "c"], worker, concurrency=1, delay_seconds=0)

    assert outcome.succeeded == 2
    assert outcome.failed == 1
    assert outcome.errors == [{"user_id": "bad", "error": "boom"}]


def test_empty_batch():
    outcome = run_in_windows([], lambda uid: None, concurrency=3, delay_seconds=1, sleep=lambda s: None)
    assert outcome.total == 0
    assert outcome.failed == 0


def test_overtraining_batch_writes_log(session_factory, db_session, make_activity, user_id):
    make_activity("a1", days_ago=0)
    service = BatchService(sleep=lambda s: None)

    result = service.run_overtraining_batch(session_factory, batch_size=1, today=date(2025, 3, 14))

    assert result["status"] == "completed"
    assert result["successful_calculations"] == 1
    log = db_session.get(BatchJobLog, result["log_id"])
    assert log.job_name == "overtraining"
    assert log.status == "completed"
    assert log.total_users_processed == 1
    assert log.completed_at is not None


def test_failed_user_is_counted(session_factory, db_session, make_activity, monkeypatch):
    make_activity("a1", days_ago=0)

    def explode(*args, **kwargs):
        raise RuntimeError("db down")

    monkeypatch.setattr("biopeak.services.batch_service.overtraining_service.calculate_risk", explode)
    result = BatchService(sleep=lambda s: None).run_overtraining_batch(
        session_factory, batch_size=1, today=date(2025, 3, 14),
    )

    assert result["status"] == "completed"
    assert result["failed_calculations"] == 1
    assert result["errors"][0]["error"] == "db down"
