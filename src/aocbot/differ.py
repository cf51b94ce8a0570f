from __future__ import annotations

from aocbot.models import LeaderboardEvent, Member, NewMember, PartCompleted, Snapshot


def total_stars(member: Member, skip_part2_of_day: int | None = None) -> int:
    """Count the member's stars across all days.

    ``skip_part2_of_day`` (1-based) leaves out the part 2 star of that one day.
    """
    total = 0
    for idx, day in enumerate(member.completion_days, start=1):
        if day.part1 is not None:
            total += 1
        if day.part2 is not None and idx != skip_part2_of_day:
            total += 1
    return total


def _index_members(snapshot: Snapshot | None) -> dict[int, Member]:
    if snapshot is None:
        return {}
    return {m.id: m for m in snapshot.members}


def _member_events(previous: Member, current: Member) -> list[PartCompleted]:
    events: list[PartCompleted] = []
    for idx, (prev_day, curr_day) in enumerate(
        zip(previous.completion_days, current.completion_days), start=1
    ):
        part1_new = curr_day.part1 is not None and prev_day.part1 is None
        part2_new = curr_day.part2 is not None and prev_day.part2 is None

        if part1_new:
            # When both parts land in one cycle, the part 1 message must not
            # already announce the part 2 star total.
            skip = idx if part2_new else None
            events.append(
                PartCompleted(
                    member=current,
                    day=idx,
                    part=1,
                    record=curr_day.part1,
                    total_stars=total_stars(current, skip_part2_of_day=skip),
                )
            )
        if part2_new:
            events.append(
                PartCompleted(
                    member=current,
                    day=idx,
                    part=2,
                    record=curr_day.part2,
                    total_stars=total_stars(current),
                )
            )
    return events


def diff_snapshots(previous: Snapshot | None, current: Snapshot) -> list[LeaderboardEvent]:
    """Derive the notable events between two successive snapshots.

    Events follow the member order of ``current``; within a member they run
    by day, part 1 before part 2. A member missing from ``previous`` yields a
    single :class:`NewMember` and no completion events, so a first run
    (``previous`` is ``None``) only welcomes members.
    """
    known = _index_members(previous)
    events: list[LeaderboardEvent] = []
    for member in current.members:
        before = known.get(member.id)
        if before is None:
            events.append(NewMember(member=member))
            continue
        events.extend(_member_events(before, member))
    return events


def summarize_events(events: list[LeaderboardEvent]) -> str:
    """One-line summary of a diff, suitable for logging."""
    new_members = sum(1 for e in events if isinstance(e, NewMember))
    completions = len(events) - new_members
    parts: list[str] = []
    if new_members:
        parts.append(f"{new_members} new member{'s' if new_members != 1 else ''}")
    if completions:
        parts.append(f"{completions} completion{'s' if completions != 1 else ''}")
    return ", ".join(parts) if parts else "no changes"
