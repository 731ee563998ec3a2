import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from ..core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..domain.events import LeaderboardChanged, QuizCreated, QuizLiveStatusChanged
from ..domain.model import (
    Answer,
    Profile,
    Quiz,
    QuizFilters,
    Submission,
    check_quiz_invariants,
)
from ..repositories.quiz_repository import QuizRepository
from ..repositories.submission_repository import InsertResult, SubmissionRepository
from .gate import can_submit
from .leaderboard import LEADERBOARD_LIMIT, RankedEntry, rank
from .scoring import ScoreResult, score
from .typing import utcnow

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "title",
    "description",
    "subject",
    "class_label",
    "time_limit_minutes",
    "difficulty",
    "questions",
)


class QuizService:
    def __init__(
        self,
        quizzes: QuizRepository,
        submissions: SubmissionRepository,
        *,
        leaderboard_limit: int = LEADERBOARD_LIMIT,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.quizzes = quizzes
        self.submissions = submissions
        self.leaderboard_limit = leaderboard_limit
        self.clock = clock

    # --- helpers ---

    async def _require_quiz(self, quiz_id: str) -> Quiz:
        quiz = await self.quizzes.get(quiz_id)
        if quiz is None:
            raise NotFoundError("Quiz not found")
        return quiz

    async def _require_owned(self, owner: Profile, quiz_id: str, action: str) -> Quiz:
        quiz = await self._require_quiz(quiz_id)
        if quiz.owner_id != owner.user_id:
            raise AuthorizationError(f"Access denied. You can only {action} your own quizzes")
        return quiz

    # --- quizzes ---

    async def create_quiz(self, owner: Profile, quiz: Quiz) -> Tuple[Quiz, QuizCreated]:
        check_quiz_invariants(
            title=quiz.title,
            subject=quiz.subject,
            class_label=quiz.class_label,
            questions=quiz.questions,
            time_limit_minutes=quiz.time_limit_minutes,
        )
        draft = Quiz(
            id=None,
            title=quiz.title,
            description=quiz.description,
            subject=quiz.subject,
            class_label=quiz.class_label,
            time_limit_minutes=quiz.time_limit_minutes,
            difficulty=quiz.difficulty,
            questions=list(quiz.questions),
            live=quiz.live,
            owner_id=owner.user_id,
        )
        created = await self.quizzes.create(draft)
        logger.info("Quiz %s created by %s", created.id, owner.user_id)
        return created, QuizCreated(quiz_id=created.id)

    async def list_quizzes(self, viewer: Profile, filters: QuizFilters) -> List[Quiz]:
        if viewer.is_student:
            # students only ever see their own class, whatever they ask for
            if not viewer.class_label:
                return []
            filters = QuizFilters(
                subject=filters.subject,
                class_label=viewer.class_label,
                live=filters.live,
                owner_id=filters.owner_id,
            )
        return await self.quizzes.list(filters)

    async def get_quiz(self, viewer: Profile, quiz_id: str) -> Quiz:
        quiz = await self._require_quiz(quiz_id)
        if viewer.is_student and quiz.class_label != viewer.class_label:
            raise AuthorizationError("Access denied. This quiz is not for your class")
        return quiz

    async def update_quiz(self, owner: Profile, quiz_id: str, changes: Dict[str, Any]) -> Quiz:
        quiz = await self._require_owned(owner, quiz_id, "update")

        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        if not changes:
            raise ValidationError("Nothing to update")

        check_quiz_invariants(
            title=changes.get("title", quiz.title),
            subject=changes.get("subject", quiz.subject),
            class_label=changes.get("class_label", quiz.class_label),
            questions=changes.get("questions", quiz.questions),
            time_limit_minutes=changes.get("time_limit_minutes", quiz.time_limit_minutes),
        )
        updated = await self.quizzes.update(quiz_id, changes)
        if updated is None:
            raise NotFoundError("Quiz not found")
        logger.info("Quiz %s updated (%s)", quiz_id, ", ".join(sorted(changes)))
        return updated

    async def set_live(
        self, owner: Profile, quiz_id: str, live: Optional[bool] = None
    ) -> Tuple[Quiz, QuizLiveStatusChanged]:
        """Set the live flag, or flip it when ``live`` is None."""
        quiz = await self._require_owned(owner, quiz_id, "update")
        new_live = (not quiz.live) if live is None else live
        updated = await self.quizzes.update(quiz_id, {"live": new_live})
        if updated is None:
            raise NotFoundError("Quiz not found")
        logger.info("Quiz %s live=%s", quiz_id, new_live)
        return updated, QuizLiveStatusChanged(quiz_id=quiz_id, live=new_live)

    async def delete_quiz(self, owner: Profile, quiz_id: str) -> None:
        await self._require_owned(owner, quiz_id, "delete")
        await self.quizzes.delete(quiz_id)
        await self.submissions.delete_all_by_quiz(quiz_id)
        logger.info("Quiz %s deleted with its submissions", quiz_id)

    # --- submissions ---

    async def submit(
        self, student: Profile, quiz_id: str, answers: Sequence[Answer]
    ) -> Tuple[ScoreResult, Submission, LeaderboardChanged]:
        quiz = await self.quizzes.get(quiz_id)
        already = False
        if quiz is not None and quiz.live and quiz.class_label == student.class_label:
            already = await self.submissions.exists(quiz_id, student.user_id)
        can_submit(quiz, student, already_submitted=already).raise_for_denial()

        result = score(quiz, answers)
        submission = Submission(
            quiz_id=quiz_id,
            student_id=student.user_id,
            student_name=student.name,
            student_class=student.class_label or "",
            answers=list(answers),
            score=result.total_score,
            max_score=result.max_score,
            percentage=result.percentage,
            submitted_at=self.clock(),
        )

        # The gate above can race; the store's unique constraint decides.
        if await self.submissions.try_insert(submission) is InsertResult.REJECTED:
            raise ConflictError("You have already submitted this quiz")

        logger.info(
            "Submission stored: quiz=%s student=%s score=%s/%s",
            quiz_id,
            student.user_id,
            result.total_score,
            result.max_score,
        )
        return result, submission, LeaderboardChanged(quiz_id=quiz_id)

    async def leaderboard(self, quiz_id: str) -> List[RankedEntry]:
        await self._require_quiz(quiz_id)
        submissions = await self.submissions.top_by_quiz(quiz_id, self.leaderboard_limit)
        return rank(submissions, limit=self.leaderboard_limit)

    async def submissions_for(self, student: Profile) -> List[Submission]:
        return await self.submissions.find_by_student(student.user_id)
