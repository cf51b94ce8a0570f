from __future__ import annotations

import argparse
import asyncio
import signal
import sys

import aiohttp
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from aocbot.config import Settings, load_settings
from aocbot.errors import ConfigError
from aocbot.models import RenderContext
from aocbot.repository import CacheRepository
from aocbot.service import CycleResult, LeaderboardWatchService


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="aocbot",
        description="Post Advent of Code private leaderboard progress to a webhook.",
    )
    parser.add_argument("--year", help="the event year to scan (env AOC_YEAR)")
    parser.add_argument("--leaderboard", help="the leaderboard code to check (env AOC_LEADERBOARD)")
    parser.add_argument("--session", help="session cookie for the site (env AOC_SESSION)")
    parser.add_argument("--webhook", help="webhook to post updates to (env AOC_WEBHOOK)")
    parser.add_argument(
        "-d",
        "--daemon",
        action="store_true",
        help="keep running and scan on a schedule (every 15 minutes by default)",
    )
    return parser.parse_args(argv)


def configure_logging(settings: Settings) -> None:
    logger.remove()
    logger.add(sys.stderr, level=settings.log_level.upper())
    if settings.log_file is not None:
        logger.add(
            settings.log_file,
            level=settings.log_level.upper(),
            rotation="00:00",
            retention="7 days",
            encoding="utf-8",
        )


def build_service(settings: Settings) -> LeaderboardWatchService:
    context = RenderContext(
        year=settings.year,
        leaderboard_id=settings.leaderboard,
        base_url=settings.base_url,
        timezone=settings.timezone,
    )
    return LeaderboardWatchService(
        repository=CacheRepository(settings.db_path),
        context=context,
        session_token=settings.session,
        webhook_url=settings.webhook,
        min_fetch_interval_minutes=settings.min_fetch_interval_minutes,
        request_timeout_seconds=settings.request_timeout_seconds,
        user_agent=settings.user_agent,
    )


async def run_cycle(service: LeaderboardWatchService) -> CycleResult:
    async with aiohttp.ClientSession() as http:
        result = await service.run_once(http)
    logger.info(
        "Cycle {}: {} event(s), {} sent, {} failed",
        result.status,
        len(result.events),
        result.sent,
        result.failed,
    )
    return result


async def _scheduled_cycle(service: LeaderboardWatchService) -> None:
    try:
        await run_cycle(service)
    except Exception:
        logger.exception("Leaderboard cycle failed")


def build_scheduler(settings: Settings, service: LeaderboardWatchService) -> AsyncIOScheduler:
    # max_instances=1 keeps a slow cycle from overlapping the next one
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        _scheduled_cycle,
        trigger=CronTrigger(minute=settings.schedule_minute),
        args=[service],
        id="aocbot_scan",
        max_instances=1,
        coalesce=True,
        misfire_grace_time=120,
    )
    return scheduler


async def run_daemon(
    settings: Settings,
    service: LeaderboardWatchService,
    stop: asyncio.Event | None = None,
) -> None:
    await service.repo.init()
    scheduler = build_scheduler(settings, service)

    if stop is None:
        stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    signals = (signal.SIGINT, signal.SIGTERM)
    for sig in signals:
        loop.add_signal_handler(sig, stop.set)

    scheduler.start()
    logger.info("Scheduled leaderboard scan at minute {}", settings.schedule_minute)
    try:
        await stop.wait()
    finally:
        logger.info("Shutting down.")
        scheduler.shutdown(wait=False)
        for sig in signals:
            loop.remove_signal_handler(sig)


async def run_once(service: LeaderboardWatchService) -> CycleResult:
    await service.repo.init()
    return await run_cycle(service)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    try:
        settings = load_settings(
            year=args.year,
            leaderboard=args.leaderboard,
            session=args.session,
            webhook=args.webhook,
        )
    except ConfigError as exc:
        logger.error("{}", exc)
        return 2

    configure_logging(settings)
    logger.info("Started AOC leaderboard scanner.")
    service = build_service(settings)
    if args.daemon:
        asyncio.run(run_daemon(settings, service))
    else:
        asyncio.run(run_once(service))
    return 0
