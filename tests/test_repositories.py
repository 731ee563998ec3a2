import asyncio
from types import SimpleNamespace

import httpx
import pytest
from postgrest.exceptions import APIError

from classquiz.core.errors import DependencyUnavailable
from classquiz.domain.model import Answer, Submission
from classquiz.repositories.quiz_repository import QuizRepository
from classquiz.repositories.submission_repository import InsertResult, SubmissionRepository

from fakes import T0, make_quiz


class FakeQuery:
    """Records the PostgREST builder chain and replays scripted outcomes."""

    def __init__(self, outcomes):
        self.outcomes = outcomes
        self.calls = []

    def __getattr__(self, name):
        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self
        return method

    async def execute(self):
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return SimpleNamespace(data=outcome)


class FakeClient:
    def __init__(self, *outcomes):
        self.query = FakeQuery(list(outcomes))
        self.tables = []

    def table(self, name):
        self.tables.append(name)
        return self.query


SUBMISSION = Submission(
    quiz_id="quiz-1",
    student_id="s-1",
    student_name="Alice",
    student_class="7A",
    answers=[Answer(0, 1), Answer(1, None)],
    score=1,
    max_score=2,
    percentage=50.0,
    submitted_at=T0,
)

DUPLICATE = APIError({
    "code": "23505",
    "message": 'duplicate key value violates unique constraint "submissions_quiz_student_key"',
    "details": "Key (quiz_id, student_id) already exists.",
    "hint": None,
})


def test_insert_success():
    client = FakeClient([{"id": 1}])
    result = asyncio.run(SubmissionRepository(client).try_insert(SUBMISSION))
    assert result is InsertResult.INSERTED
    name, (row,), _ = client.query.calls[0]
    assert name == "insert"
    assert row["answers"] == [
        {"question_index": 0, "selected_option_index": 1},
        {"question_index": 1, "selected_option_index": None},
    ]
    assert row["submitted_at"] == T0.isoformat()


def test_unique_violation_becomes_rejected():
    client = FakeClient(DUPLICATE)
    result = asyncio.run(SubmissionRepository(client).try_insert(SUBMISSION))
    assert result is InsertResult.REJECTED


def test_other_store_errors_propagate():
    client = FakeClient(APIError({"code": "23503", "message": "foreign key violation"}))
    with pytest.raises(APIError):
        asyncio.run(SubmissionRepository(client).try_insert(SUBMISSION))


def test_writes_are_not_retried():
    client = FakeClient(httpx.ConnectError("down"), [{"id": 1}])
    with pytest.raises(DependencyUnavailable):
        asyncio.run(SubmissionRepository(client).try_insert(SUBMISSION))
    assert len(client.query.outcomes) == 1


def test_reads_retry_once_then_fail():
    row = {
        "id": 3,
        "quiz_id": "quiz-1",
        "student_id": "s-1",
        "student_name": "Alice",
        "student_class": "7A",
        "answers": [{"question_index": 0, "selected_option_index": 1}],
        "score": 1,
        "max_score": 2,
        "percentage": 50,
        "submitted_at": "2024-09-01T08:00:00+00:00",
    }
    client = FakeClient(httpx.ConnectError("blip"), [row])
    (found,) = asyncio.run(SubmissionRepository(client).find_by_quiz("quiz-1"))
    assert found.id == 3
    assert found.answers == [Answer(0, 1)]
    assert found.submitted_at == T0

    client = FakeClient(httpx.ConnectError("down"), httpx.ConnectError("still down"))
    with pytest.raises(DependencyUnavailable):
        asyncio.run(SubmissionRepository(client).exists("quiz-1", "s-1"))


def test_leaderboard_read_is_sorted_and_capped_by_the_database():
    client = FakeClient([])
    asyncio.run(SubmissionRepository(client).top_by_quiz("quiz-1", 100))
    assert client.query.calls == [
        ("select", ("*",), {}),
        ("eq", ("quiz_id", "quiz-1"), {}),
        ("order", ("percentage",), {"desc": True}),
        ("order", ("submitted_at",), {}),
        ("order", ("id",), {}),
        ("limit", (100,), {}),
    ]


def test_quiz_rows_round_trip_through_jsonb():
    quiz = make_quiz(quiz_id=None)
    client = FakeClient(None)

    async def create():
        captured = {}

        async def execute():
            name, (row,), _ = client.query.calls[0]
            captured.update(row)
            return SimpleNamespace(data=[{**row, "id": "0b6f0c4e-8d8c-4a43-9a1e-5f0f7e0b9c11"}])

        client.query.execute = execute
        stored = await QuizRepository(client).create(quiz)
        return captured, stored

    row, stored = asyncio.run(create())
    assert client.tables == ["quizzes"]
    assert row["class_label"] == "7A"
    assert row["questions"][0]["options"][1] == {"text": "opt1", "is_correct": True}
    assert stored.id == "0b6f0c4e-8d8c-4a43-9a1e-5f0f7e0b9c11"
    assert stored.questions == quiz.questions
    assert stored.questions[0].correct_index == 1


def test_quiz_update_maps_live_to_column():
    client = FakeClient([])
    asyncio.run(QuizRepository(client).update("quiz-1", {"live": True}))
    name, (row,), _ = client.query.calls[0]
    assert name == "update"
    assert row["is_live"] is True
    assert "updated_at" in row
