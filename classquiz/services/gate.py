from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    QuizNotLiveError,
)
from ..domain.model import Profile, Quiz


class DenyReason(str, Enum):
    NOT_FOUND = "not_found"
    WRONG_CLASS = "wrong_class"
    NOT_LIVE = "not_live"
    ALREADY_SUBMITTED = "already_submitted"


_ERRORS = {
    DenyReason.NOT_FOUND: (NotFoundError, "Quiz not found"),
    DenyReason.WRONG_CLASS: (AuthorizationError, "Access denied. This quiz is not for your class"),
    DenyReason.NOT_LIVE: (QuizNotLiveError, "This quiz is not currently live"),
    DenyReason.ALREADY_SUBMITTED: (ConflictError, "You have already submitted this quiz"),
}


@dataclass(frozen=True)
class GateDecision:
    reason: Optional[DenyReason] = None

    @property
    def allowed(self) -> bool:
        return self.reason is None

    def raise_for_denial(self) -> None:
        if self.reason is None:
            return
        error_cls, message = _ERRORS[self.reason]
        raise error_cls(message)


ALLOWED = GateDecision()


def can_submit(quiz: Optional[Quiz], student: Profile, *, already_submitted: bool) -> GateDecision:
    """
    Decide whether ``student`` may submit answers for ``quiz`` right now.

    The class check runs before the live check so a student from another class
    is refused the same way whether or not the quiz is live. This is advisory:
    the submission store's unique constraint has the final word on duplicates.
    """
    if quiz is None:
        return GateDecision(DenyReason.NOT_FOUND)
    if student.class_label != quiz.class_label:
        return GateDecision(DenyReason.WRONG_CLASS)
    if not quiz.live:
        return GateDecision(DenyReason.NOT_LIVE)
    if already_submitted:
        return GateDecision(DenyReason.ALREADY_SUBMITTED)
    return ALLOWED
