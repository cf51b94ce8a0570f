from __future__ import annotations

from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from aocbot.models import LeaderboardEvent, NewMember, PartCompleted, RenderContext

_ORDINALS = ("th", "st", "nd", "rd")


def ordinal_suffix(n: int) -> str:
    v = n % 100
    if 11 <= v <= 13:
        return "th"
    last = v % 10
    return _ORDINALS[last] if last < len(_ORDINALS) else "th"


def format_ordinal(n: int) -> str:
    return f"{n}{ordinal_suffix(n)}"


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def format_completion_time(epoch_seconds: int, timezone: str) -> str:
    """Render a timestamp as ``3:04:05pm`` in the given zone."""
    local = datetime.fromtimestamp(epoch_seconds, UTC).astimezone(ZoneInfo(timezone))
    hour = local.hour % 12 or 12
    meridiem = "am" if local.hour < 12 else "pm"
    return f"{hour}:{local:%M:%S}{meridiem}"


def leaderboard_url(context: RenderContext) -> str:
    base = context.base_url.rstrip("/")
    return f"{base}/{context.year}/leaderboard/private/view/{context.leaderboard_id}"


def _leaderboard_link(context: RenderContext) -> str:
    return f"[the leaderboard]({leaderboard_url(context)})"


def render_event(event: LeaderboardEvent, context: RenderContext, rank: int | None = None) -> str:
    """Format one event as a single notification line.

    ``rank`` is the 1-based place and is required for :class:`PartCompleted`.
    """
    if isinstance(event, NewMember):
        return (
            f":tada: A new challenger has appeared! Welcome, {event.member.display_name}, "
            f"to {_leaderboard_link(context)}! :tada:"
        )
    if isinstance(event, PartCompleted):
        if rank is None:
            raise ValueError("rank is required to render a completion")
        completed_at = format_completion_time(event.record.got_star_at, context.timezone)
        return (
            f":tada: {event.member.display_name} completed day {event.day} part {event.part} "
            f"{format_ordinal(rank)} on {_leaderboard_link(context)} at {completed_at}, "
            f"and now has {_plural(event.total_stars, 'star')} on the year. :tada:"
        )
    raise TypeError(f"unsupported event type: {type(event).__name__}")
