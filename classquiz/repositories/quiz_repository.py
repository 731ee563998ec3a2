from typing import Any, Dict, List, Optional

from supabase import AsyncClient

from ..domain.model import Difficulty, Option, Question, Quiz, QuizFilters
from ..services.typing import to_datetime, to_iso, utcnow
from .base import run_read, run_write

TABLE = "quizzes"

# Domain field -> column
_COLUMNS = {
    "title": "title",
    "description": "description",
    "subject": "subject",
    "class_label": "class_label",
    "time_limit_minutes": "time_limit_minutes",
    "difficulty": "difficulty",
    "questions": "questions",
    "live": "is_live",
}


def questions_to_rows(questions: List[Question]) -> List[dict]:
    return [
        {
            "question_text": q.question_text,
            "options": [{"text": o.text, "is_correct": o.is_correct} for o in q.options],
            "explanation": q.explanation,
            "points": q.points,
        }
        for q in questions
    ]


def questions_from_rows(rows: List[dict]) -> List[Question]:
    return [
        Question(
            question_text=r["question_text"],
            options=[Option(text=o["text"], is_correct=bool(o.get("is_correct"))) for o in r.get("options") or []],
            explanation=r.get("explanation") or "",
            points=int(r.get("points") or 1),
        )
        for r in rows or []
    ]


def quiz_from_row(row: dict) -> Quiz:
    return Quiz(
        id=str(row["id"]),
        title=row["title"],
        description=row.get("description") or "",
        subject=row["subject"],
        class_label=row["class_label"],
        time_limit_minutes=row.get("time_limit_minutes"),
        difficulty=Difficulty(row.get("difficulty") or Difficulty.MEDIUM.value),
        questions=questions_from_rows(row.get("questions")),
        live=bool(row.get("is_live")),
        owner_id=str(row["created_by"]),
        created_at=to_datetime(row.get("created_at")),
        updated_at=to_datetime(row.get("updated_at")),
    )


def _to_column_value(field: str, value: Any) -> Any:
    if field == "questions":
        return questions_to_rows(value)
    if field == "difficulty":
        return Difficulty(value).value
    return value


class QuizRepository:
    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    async def create(self, quiz: Quiz) -> Quiz:
        now = to_iso(utcnow())
        row = {
            "title": quiz.title,
            "description": quiz.description,
            "subject": quiz.subject,
            "class_label": quiz.class_label,
            "time_limit_minutes": quiz.time_limit_minutes,
            "difficulty": quiz.difficulty.value,
            "questions": questions_to_rows(quiz.questions),
            "is_live": quiz.live,
            "created_by": quiz.owner_id,
            "created_at": now,
            "updated_at": now,
        }
        # the id is generated by the store (gen_random_uuid)
        res = await run_write(self.client.table(TABLE).insert(row), what="quiz")
        if not res.data or not isinstance(res.data, list) or "id" not in res.data[0]:
            raise RuntimeError("Insert quizzes failed: no returned id")
        return quiz_from_row(res.data[0])

    async def get(self, quiz_id: str) -> Optional[Quiz]:
        res = await run_read(
            self.client.table(TABLE).select("*").eq("id", quiz_id).limit(1),
            what="quiz",
        )
        return quiz_from_row(res.data[0]) if res.data else None

    async def list(self, filters: QuizFilters) -> List[Quiz]:
        query = self.client.table(TABLE).select("*")
        if filters.subject:
            query = query.eq("subject", filters.subject)
        if filters.class_label:
            query = query.eq("class_label", filters.class_label)
        if filters.live is not None:
            query = query.eq("is_live", filters.live)
        if filters.owner_id:
            query = query.eq("created_by", filters.owner_id)
        res = await run_read(query.order("created_at", desc=True), what="quizzes")
        return [quiz_from_row(r) for r in res.data or []]

    async def update(self, quiz_id: str, changes: Dict[str, Any]) -> Optional[Quiz]:
        row = {_COLUMNS[k]: _to_column_value(k, v) for k, v in changes.items()}
        row["updated_at"] = to_iso(utcnow())
        res = await run_write(self.client.table(TABLE).update(row).eq("id", quiz_id), what="quiz")
        return quiz_from_row(res.data[0]) if res.data else None

    async def delete(self, quiz_id: str) -> None:
        await run_write(self.client.table(TABLE).delete().eq("id", quiz_id), what="quiz")
