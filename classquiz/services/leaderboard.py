from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List

from ..domain.model import Submission

LEADERBOARD_LIMIT = 100


@dataclass(frozen=True)
class RankedEntry:
    rank: int
    student_id: str
    student_name: str
    student_class: str
    score: int
    max_score: int
    percentage: float
    submitted_at: datetime

    @property
    def display_percentage(self) -> float:
        return round(self.percentage, 2)


def _sort_key(sub: Submission):
    # Higher percentage first, earlier submission wins ties, insertion order last
    return (-sub.percentage, sub.submitted_at, sub.id if sub.id is not None else 0)


def rank(submissions: Iterable[Submission], limit: int = LEADERBOARD_LIMIT) -> List[RankedEntry]:
    """Order submissions for display and number them 1..n by position."""
    ordered = sorted(submissions, key=_sort_key)[:limit]
    return [
        RankedEntry(
            rank=position,
            student_id=sub.student_id,
            student_name=sub.student_name,
            student_class=sub.student_class,
            score=sub.score,
            max_score=sub.max_score,
            percentage=sub.percentage,
            submitted_at=sub.submitted_at,
        )
        for position, sub in enumerate(ordered, start=1)
    ]
