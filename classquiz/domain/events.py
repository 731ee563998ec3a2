"""Domain events returned by write operations.

Services never publish anything themselves; they hand one of these values back
to the caller, and the notification dispatcher decides how (and whether) it
reaches connected viewers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class QuizCreated:
    quiz_id: str
    type = "quiz-created"

    @property
    def room(self) -> Optional[str]:
        # Broadcast to every connected viewer
        return None


@dataclass(frozen=True)
class LeaderboardChanged:
    quiz_id: str
    type = "leaderboard-update"

    @property
    def room(self) -> Optional[str]:
        return self.quiz_id


@dataclass(frozen=True)
class QuizLiveStatusChanged:
    quiz_id: str
    live: bool
    type = "quiz-status-changed"

    @property
    def room(self) -> Optional[str]:
        return self.quiz_id


DomainEvent = Union[QuizCreated, LeaderboardChanged, QuizLiveStatusChanged]
