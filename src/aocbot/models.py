from __future__ import annotations

from dataclasses import dataclass, field

DAYS_PER_EVENT = 25


@dataclass(slots=True, frozen=True)
class CompletionRecord:
    got_star_at: int
    star_index: int = 0


@dataclass(slots=True, frozen=True)
class CompletionDay:
    part1: CompletionRecord | None = None
    part2: CompletionRecord | None = None

    def part(self, part: int) -> CompletionRecord | None:
        if part == 1:
            return self.part1
        if part == 2:
            return self.part2
        raise ValueError(f"part must be 1 or 2, not {part}")


EMPTY_DAY = CompletionDay()


def empty_completion_days() -> tuple[CompletionDay, ...]:
    return tuple(EMPTY_DAY for _ in range(DAYS_PER_EVENT))


@dataclass(slots=True, frozen=True)
class Member:
    id: int
    name: str | None
    local_score: int = 0
    global_score: int = 0
    stars: int = 0
    last_star_ts: int = 0
    # index i holds day i + 1; always DAYS_PER_EVENT entries
    completion_days: tuple[CompletionDay, ...] = field(default_factory=empty_completion_days)

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return f"(anonymous user #{self.id})"

    def completion(self, day: int, part: int) -> CompletionRecord | None:
        if not 1 <= day <= DAYS_PER_EVENT:
            raise ValueError(f"day must be in 1..{DAYS_PER_EVENT}, not {day}")
        return self.completion_days[day - 1].part(part)


@dataclass(slots=True, frozen=True)
class Snapshot:
    event: str
    owner_id: int
    members: tuple[Member, ...] = ()

    def member(self, member_id: int) -> Member | None:
        for m in self.members:
            if m.id == member_id:
                return m
        return None


@dataclass(slots=True, frozen=True)
class NewMember:
    member: Member


@dataclass(slots=True, frozen=True)
class PartCompleted:
    member: Member
    day: int
    part: int
    record: CompletionRecord
    total_stars: int


LeaderboardEvent = NewMember | PartCompleted


@dataclass(slots=True, frozen=True)
class CachedDocument:
    last_read: int
    body: bytes


@dataclass(slots=True, frozen=True)
class RenderContext:
    year: str
    leaderboard_id: str
    base_url: str = "https://adventofcode.com"
    timezone: str = "America/Chicago"
