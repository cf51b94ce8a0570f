from __future__ import annotations

from aocbot.errors import IncompleteCompletionError
from aocbot.models import DAYS_PER_EVENT, Snapshot


def completion_rank(snapshot: Snapshot, member_id: int, day: int, part: int) -> int:
    """Return how many other members finished ``day``/``part`` strictly earlier.

    The result is zero-based; add 1 for the displayed place. Members sharing
    the exact same timestamp get the same value.
    """
    if not 1 <= day <= DAYS_PER_EVENT or part not in (1, 2):
        raise IncompleteCompletionError(f"no such puzzle: day {day} part {part}")
    subject = snapshot.member(member_id)
    if subject is None:
        raise IncompleteCompletionError(f"member {member_id} is not on the leaderboard")
    target = subject.completion(day, part)
    if target is None:
        raise IncompleteCompletionError(
            f"member {member_id} has not completed day {day} part {part}"
        )

    # Competition ranking: count of completions strictly earlier than the subject's
    num_ahead = 0
    for member in snapshot.members:
        if member.id == member_id:
            continue
        record = member.completion(day, part)
        if record is not None and record.got_star_at < target.got_star_at:
            num_ahead += 1
    return num_ahead
