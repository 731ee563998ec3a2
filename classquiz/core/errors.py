"""Error taxonomy shared by services, repositories and the HTTP layer.

Every error carries a stable machine-checkable ``kind`` and the HTTP status it
is rendered with. Messages are safe to show to callers; internal detail goes
to the log only.
"""

from __future__ import annotations


class ClassQuizError(Exception):
    kind = "error"
    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(ClassQuizError):
    kind = "validation_error"
    status_code = 400


class QuizNotLiveError(ClassQuizError):
    kind = "quiz_not_live"
    status_code = 400


class AuthenticationError(ClassQuizError):
    kind = "unauthenticated"
    status_code = 401


class AuthorizationError(ClassQuizError):
    kind = "forbidden"
    status_code = 403


class NotFoundError(ClassQuizError):
    kind = "not_found"
    status_code = 404


class ProfileNotFoundError(NotFoundError):
    kind = "profile_not_found"


class ConflictError(ClassQuizError):
    # Expected outcome of concurrent duplicate submissions, not a server fault
    kind = "already_submitted"
    status_code = 400


class DependencyUnavailable(ClassQuizError):
    kind = "dependency_unavailable"
    status_code = 503
