import asyncio
import os
import signal

import pytest
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from aocbot.app import build_scheduler, build_service, main, parse_args, run_daemon
from aocbot.config import load_settings


def _settings(tmp_path, **overrides):
    return load_settings(
        env_file=None,
        session="s3cr3t",
        leaderboard="4242",
        webhook="https://example.com/hook",
        db_path=tmp_path / "cache.sqlite3",
        **overrides,
    )


def test_parse_args() -> None:
    args = parse_args(["--year", "2022", "--leaderboard", "99", "-d"])
    assert args.year == "2022"
    assert args.leaderboard == "99"
    assert args.session is None
    assert args.daemon is True
    assert parse_args([]).daemon is False


def test_main_exits_on_missing_config(tmp_path, monkeypatch) -> None:
    for name in ("AOC_SESSION", "AOC_LEADERBOARD", "AOC_WEBHOOK"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    assert main(["--year", "2023"]) == 2


def test_build_service_wiring(tmp_path) -> None:
    settings = _settings(tmp_path, year="2021", min_fetch_interval_minutes=15)
    service = build_service(settings)
    assert service.context.year == "2021"
    assert service.context.leaderboard_id == "4242"
    assert service.context.timezone == "America/Chicago"
    assert service.session_token == "s3cr3t"
    assert service.webhook_url == "https://example.com/hook"
    assert service.min_fetch_interval_seconds == 15 * 60


def test_scheduler_registers_single_scan_job(tmp_path) -> None:
    settings = _settings(tmp_path, schedule_minute="*/10")
    scheduler = build_scheduler(settings, build_service(settings))

    jobs = scheduler.get_jobs()
    assert len(jobs) == 1
    job = jobs[0]
    assert job.id == "aocbot_scan"
    assert job.max_instances == 1
    assert job.coalesce is True
    assert isinstance(job.trigger, CronTrigger)


@pytest.mark.asyncio
async def test_daemon_returns_when_stopped(tmp_path) -> None:
    settings = _settings(tmp_path)
    service = build_service(settings)
    stop = asyncio.Event()
    asyncio.get_running_loop().call_later(0.1, stop.set)

    await asyncio.wait_for(run_daemon(settings, service, stop=stop), timeout=5)

    assert settings.db_path.exists()
    assert await service.repo.load_previous() is None
    assert asyncio.get_running_loop().remove_signal_handler(signal.SIGINT) is False


@pytest.mark.asyncio
async def test_daemon_shuts_down_on_sigterm(tmp_path) -> None:
    settings = _settings(tmp_path)
    service = build_service(settings)
    started = asyncio.Event()
    loop = asyncio.get_running_loop()

    def watch(message) -> None:
        if "Scheduled leaderboard scan" in message.record["message"]:
            loop.call_soon(started.set)

    sink_id = logger.add(watch, level="INFO")
    try:
        daemon = asyncio.create_task(run_daemon(settings, service))
        await asyncio.wait_for(started.wait(), timeout=5)
        os.kill(os.getpid(), signal.SIGTERM)
        await asyncio.wait_for(daemon, timeout=5)
    finally:
        logger.remove(sink_id)

    assert daemon.exception() is None
    assert loop.remove_signal_handler(signal.SIGTERM) is False
