from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass, field

import aiosqlite
from loguru import logger

from aocbot.collector import fetch_leaderboard
from aocbot.differ import diff_snapshots, summarize_events
from aocbot.errors import FetchError, NotifyError, ParseError
from aocbot.models import LeaderboardEvent, PartCompleted, RenderContext, Snapshot
from aocbot.notifier import send_notification
from aocbot.parser import parse_leaderboard
from aocbot.ranker import completion_rank
from aocbot.renderer import render_event
from aocbot.repository import CacheRepository

STATUS_SKIPPED = "skipped"
STATUS_FETCH_FAILED = "fetch_failed"
STATUS_PARSE_FAILED = "parse_failed"
STATUS_COMPLETED = "completed"


@dataclass(slots=True)
class CycleResult:
    status: str
    events: list[LeaderboardEvent] = field(default_factory=list)
    sent: int = 0
    failed: int = 0


class LeaderboardWatchService:
    def __init__(
        self,
        repository: CacheRepository,
        context: RenderContext,
        session_token: str,
        webhook_url: str,
        min_fetch_interval_minutes: int = 14,
        request_timeout_seconds: float = 30,
        user_agent: str | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.repo = repository
        self.context = context
        self.session_token = session_token
        self.webhook_url = webhook_url
        self.min_fetch_interval_seconds = min_fetch_interval_minutes * 60
        self.request_timeout_seconds = request_timeout_seconds
        self.user_agent = user_agent
        self.clock = clock

    async def run_once(self, http) -> CycleResult:
        logger.info("Scanning for new leaderboard data...")
        now = int(self.clock())

        cached = await self.repo.load_previous()
        if cached is not None and now - cached.last_read < self.min_fetch_interval_seconds:
            logger.info("Too soon since the last request; doing nothing")
            return CycleResult(STATUS_SKIPPED)

        try:
            body = await fetch_leaderboard(
                http,
                self.context.base_url,
                self.context.year,
                self.context.leaderboard_id,
                self.session_token,
                timeout=self.request_timeout_seconds,
                user_agent=self.user_agent,
            )
        except FetchError as exc:
            logger.warning("Error downloading leaderboard data: {}", exc)
            return CycleResult(STATUS_FETCH_FAILED)

        # Save before parsing so a corrupt cache entry is replaced next time.
        try:
            await self.repo.save_current(body, now)
        except (aiosqlite.Error, OSError) as exc:
            logger.warning("Failed to save cached data: {}", exc)

        try:
            current = parse_leaderboard(body)
        except ParseError as exc:
            logger.warning("Error building leaderboard from downloaded body: {}", exc)
            return CycleResult(STATUS_PARSE_FAILED)

        previous: Snapshot | None = None
        if cached is not None:
            try:
                previous = parse_leaderboard(cached.body)
            except ParseError as exc:
                logger.warning("Error building leaderboard from cached body: {}", exc)
                return CycleResult(STATUS_PARSE_FAILED)
        else:
            logger.info("No cached leaderboard; treating every member as new")

        events = diff_snapshots(previous, current)
        logger.info("Leaderboard {} diff: {}", self.context.leaderboard_id, summarize_events(events))

        result = CycleResult(STATUS_COMPLETED, events=events)
        for event in events:
            text = self._render(current, event)
            try:
                await send_notification(
                    http, self.webhook_url, text, timeout=self.request_timeout_seconds
                )
            except NotifyError as exc:
                result.failed += 1
                logger.warning(
                    "Error sending notification for {}: {}", event.member.display_name, exc
                )
                continue
            result.sent += 1
        return result

    def _render(self, snapshot: Snapshot, event: LeaderboardEvent) -> str:
        if isinstance(event, PartCompleted):
            rank = completion_rank(snapshot, event.member.id, event.day, event.part) + 1
            return render_event(event, self.context, rank=rank)
        return render_event(event, self.context)
