import logging
from enum import Enum
from typing import List

from postgrest.exceptions import APIError
from supabase import AsyncClient

from ..domain.model import Answer, Submission
from ..services.typing import to_datetime, to_iso
from .base import is_unique_violation, run_read, run_write

logger = logging.getLogger(__name__)

TABLE = "submissions"


class InsertResult(str, Enum):
    INSERTED = "inserted"
    REJECTED = "rejected"


def submission_to_row(sub: Submission) -> dict:
    return {
        "quiz_id": sub.quiz_id,
        "student_id": sub.student_id,
        "student_name": sub.student_name,
        "student_class": sub.student_class,
        "answers": [
            {"question_index": a.question_index, "selected_option_index": a.selected_option_index}
            for a in sub.answers
        ],
        "score": sub.score,
        "max_score": sub.max_score,
        "percentage": sub.percentage,
        "submitted_at": to_iso(sub.submitted_at),
    }


def submission_from_row(row: dict) -> Submission:
    return Submission(
        id=row.get("id"),
        quiz_id=str(row["quiz_id"]),
        student_id=str(row["student_id"]),
        student_name=row.get("student_name") or "",
        student_class=row.get("student_class") or "",
        answers=[
            Answer(a["question_index"], a.get("selected_option_index"))
            for a in row.get("answers") or []
        ],
        score=int(row["score"]),
        max_score=int(row["max_score"]),
        percentage=float(row["percentage"]),
        submitted_at=to_datetime(row["submitted_at"]),
    )


class SubmissionRepository:
    """
    Scored submissions, at most one per (quiz_id, student_id).

    Uniqueness is enforced by the table's unique constraint, never by a
    read-then-write in this class: two concurrent inserts for the same pair
    produce exactly one row and one unique-violation error.
    """

    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    async def try_insert(self, submission: Submission) -> InsertResult:
        try:
            await run_write(self.client.table(TABLE).insert(submission_to_row(submission)), what="submission")
        except APIError as exc:
            if is_unique_violation(exc):
                logger.info(
                    "Duplicate submission rejected: quiz=%s student=%s",
                    submission.quiz_id,
                    submission.student_id,
                )
                return InsertResult.REJECTED
            raise
        return InsertResult.INSERTED

    async def exists(self, quiz_id: str, student_id: str) -> bool:
        res = await run_read(
            self.client.table(TABLE)
            .select("id")
            .eq("quiz_id", quiz_id)
            .eq("student_id", student_id)
            .limit(1),
            what="submission",
        )
        return bool(res.data)

    async def find_by_quiz(self, quiz_id: str) -> List[Submission]:
        res = await run_read(
            self.client.table(TABLE).select("*").eq("quiz_id", quiz_id),
            what="submissions",
        )
        return [submission_from_row(r) for r in res.data or []]

    async def top_by_quiz(self, quiz_id: str, limit: int) -> List[Submission]:
        """Best ``limit`` submissions in leaderboard order, sorted by the database."""
        res = await run_read(
            self.client.table(TABLE)
            .select("*")
            .eq("quiz_id", quiz_id)
            .order("percentage", desc=True)
            .order("submitted_at")
            .order("id")
            .limit(limit),
            what="submissions",
        )
        return [submission_from_row(r) for r in res.data or []]

    async def find_by_student(self, student_id: str) -> List[Submission]:
        res = await run_read(
            self.client.table(TABLE)
            .select("*")
            .eq("student_id", student_id)
            .order("submitted_at", desc=True),
            what="submissions",
        )
        return [submission_from_row(r) for r in res.data or []]

    async def delete_all_by_quiz(self, quiz_id: str) -> None:
        await run_write(self.client.table(TABLE).delete().eq("quiz_id", quiz_id), what="submissions")
