from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence

from ..core.errors import ValidationError


class Difficulty(str, Enum):
    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class Role(str, Enum):
    TEACHER = "teacher"
    STUDENT = "student"


@dataclass(frozen=True)
class Option:
    text: str
    is_correct: bool = False


@dataclass(frozen=True)
class Question:
    question_text: str
    options: List[Option]
    explanation: str = ""
    points: int = 1

    @property
    def correct_index(self) -> Optional[int]:
        """Position of the correct option, or None if the stored data has none."""
        for idx, opt in enumerate(self.options):
            if opt.is_correct:
                return idx
        return None


@dataclass(frozen=True)
class Quiz:
    id: Optional[str]
    title: str
    subject: str
    class_label: str
    questions: List[Question]
    owner_id: str
    description: str = ""
    time_limit_minutes: Optional[int] = None
    difficulty: Difficulty = Difficulty.MEDIUM
    live: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class Answer:
    question_index: int
    selected_option_index: Optional[int] = None


@dataclass(frozen=True)
class Submission:
    quiz_id: str
    student_id: str
    student_name: str
    student_class: str
    answers: List[Answer]
    score: int
    max_score: int
    percentage: float
    submitted_at: datetime
    # Store-assigned, increases with insertion order
    id: Optional[int] = None


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: Optional[str] = None


@dataclass(frozen=True)
class Profile:
    user_id: str
    name: str
    role: Role
    email: Optional[str] = None
    class_label: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def is_teacher(self) -> bool:
        return self.role is Role.TEACHER

    @property
    def is_student(self) -> bool:
        return self.role is Role.STUDENT


@dataclass(frozen=True)
class QuizFilters:
    subject: Optional[str] = None
    class_label: Optional[str] = None
    live: Optional[bool] = None
    owner_id: Optional[str] = None


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def check_questions(questions: Sequence[Question]) -> None:
    errors: list[str] = []
    if not questions:
        raise ValidationError("Quiz must have at least one question")
    for qi, q in enumerate(questions, start=1):
        if _blank(q.question_text):
            errors.append(f"Question {qi} must have text")
        if len(q.options) < 2:
            errors.append(f"Question {qi} must have at least two options")
        else:
            if sum(1 for opt in q.options if opt.is_correct) != 1:
                errors.append(f"Question {qi} must have exactly one correct answer")
            for oi, opt in enumerate(q.options, start=1):
                if _blank(opt.text):
                    errors.append(f"Question {qi}, Option {oi} must have text")
        if not isinstance(q.points, int) or isinstance(q.points, bool) or q.points < 1:
            errors.append(f"Question {qi} must be worth a positive number of points")
    if errors:
        raise ValidationError("; ".join(errors))


def check_quiz_invariants(
    *,
    title: Optional[str],
    subject: Optional[str],
    class_label: Optional[str],
    questions: Sequence[Question],
    time_limit_minutes: Optional[int] = None,
) -> None:
    """Raise ValidationError unless the quiz definition is complete and well formed."""
    missing = [
        name
        for name, value in (("title", title), ("subject", subject), ("class", class_label))
        if _blank(value)
    ]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}")
    if time_limit_minutes is not None and time_limit_minutes < 1:
        raise ValidationError("Time limit must be a positive number of minutes")
    check_questions(questions)
