# tests/test_schedule.py
import logging

from weather_push.core.settings import Settings
from weather_push.services.dispatcher import DispatchResult
from weather_push.tasks import schedule


def test_build_trigger_uses_cron_and_timezone():
    trigger = schedule.build_trigger(Settings(dispatch_cron="30 7 * * *", dispatch_timezone="Europe/Madrid"))
    fields = {f.name: str(f) for f in trigger.fields}
    assert fields["hour"] == "7"
    assert fields["minute"] == "30"
    assert str(trigger.timezone) == "Europe/Madrid"


def test_start_scheduler_is_idempotent():
    cfg = Settings()
    try:
        first = schedule.start_scheduler(cfg)
        assert schedule.start_scheduler(cfg) is first
        job = first.get_job(schedule.JOB_ID)
        assert job is not None
        assert job.coalesce is True
        assert job.max_instances == 1
    finally:
        schedule.shutdown_scheduler()
    assert schedule._scheduler is None


def test_job_runs_dispatch(monkeypatch):
    seen = []

    def fake_dispatch(db):
        seen.append(db)
        return DispatchResult(ok=True)

    monkeypatch.setattr(schedule, "run_daily_dispatch", fake_dispatch)
    schedule._dispatch_job()
    assert len(seen) == 1


def test_job_never_raises(monkeypatch, caplog):
    def boom(db):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(schedule, "run_daily_dispatch", boom)
    with caplog.at_level(logging.ERROR, logger=schedule.__name__):
        schedule._dispatch_job()
    assert any("Daily dispatch crashed" in r.getMessage() for r in caplog.records)
