from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from aocbot.errors import ParseError
from aocbot.models import (
    DAYS_PER_EVENT,
    EMPTY_DAY,
    CompletionDay,
    CompletionRecord,
    Member,
    Snapshot,
)


class _RawPart(BaseModel):
    model_config = ConfigDict(extra="ignore")

    get_star_ts: int
    star_index: int = 0


class _RawMember(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str | None = None
    local_score: int = 0
    global_score: int = 0
    stars: int = 0
    last_star_ts: int = 0
    completion_day_level: dict[str, dict[str, _RawPart]] = Field(default_factory=dict)


class _RawLeaderboard(BaseModel):
    model_config = ConfigDict(extra="ignore")

    event: str
    owner_id: int
    members: dict[str, _RawMember]


def _day_number(key: str, member_id: int) -> int:
    if not (key.isascii() and key.isdigit()):
        raise ParseError(f"member {member_id}: day key {key!r} is not a number")
    day = int(key)
    if day < 1 or day > DAYS_PER_EVENT:
        raise ParseError(f"member {member_id}: day {day} outside 1..{DAYS_PER_EVENT}")
    return day


def _build_completion_days(raw: _RawMember) -> tuple[CompletionDay, ...]:
    days = [EMPTY_DAY] * DAYS_PER_EVENT
    seen: set[int] = set()
    for day_key, parts in raw.completion_day_level.items():
        day = _day_number(day_key, raw.id)
        if day in seen:
            raise ParseError(f"member {raw.id}: day {day} appears more than once")
        seen.add(day)
        part1: CompletionRecord | None = None
        part2: CompletionRecord | None = None
        for part_key, part in parts.items():
            record = CompletionRecord(got_star_at=part.get_star_ts, star_index=part.star_index)
            # Anything that is not part "1" can only be part "2".
            if part_key == "1":
                part1 = record
            else:
                part2 = record
        days[day - 1] = CompletionDay(part1=part1, part2=part2)
    return tuple(days)


def _build_member(raw: _RawMember) -> Member:
    return Member(
        id=raw.id,
        name=raw.name,
        local_score=raw.local_score,
        global_score=raw.global_score,
        stars=raw.stars,
        last_star_ts=raw.last_star_ts,
        completion_days=_build_completion_days(raw),
    )


def parse_leaderboard(raw_document: bytes | str) -> Snapshot:
    """Parse a private leaderboard JSON document into a :class:`Snapshot`.

    Members keep the order in which they appear in the document. Every member
    gets a full table of 25 days; days missing from the document stay empty.

    Raises :class:`ParseError` if the document is not JSON or lacks the
    ``event``/``owner_id``/``members`` structure. No partial snapshot is
    ever returned.
    """
    try:
        raw = _RawLeaderboard.model_validate_json(raw_document)
    except ValidationError as exc:
        raise ParseError(f"invalid leaderboard document: {exc.error_count()} error(s)") from exc

    members = tuple(_build_member(m) for m in raw.members.values())
    return Snapshot(event=raw.event, owner_id=raw.owner_id, members=members)
