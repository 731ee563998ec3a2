"""Scoring of a student's answer set against a quiz.

``score`` is a pure function: same quiz and answers in, same result out. It
never raises on bad answers; anything it cannot match to a valid option counts
as an incorrect answer.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..domain.model import Answer, Quiz


@dataclass(frozen=True)
class QuestionResult:
    question_index: int
    question_text: str
    user_answer: Optional[int]
    correct_answer: Optional[int]
    is_correct: bool
    explanation: str


@dataclass(frozen=True)
class ScoreResult:
    total_score: int
    max_score: int
    percentage: float
    results: List[QuestionResult]

    @property
    def display_percentage(self) -> float:
        return round(self.percentage, 2)


def _selected(answer: Optional[Answer]) -> Optional[int]:
    if answer is None:
        return None
    value = answer.selected_option_index
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _index_answers(answers: Iterable[Answer]) -> dict[int, Answer]:
    # First answer for a question index wins; later duplicates are ignored
    by_index: dict[int, Answer] = {}
    for answer in answers or ():
        idx = getattr(answer, "question_index", None)
        if isinstance(idx, int) and not isinstance(idx, bool) and idx not in by_index:
            by_index[idx] = answer
    return by_index


def score(quiz: Quiz, answers: Iterable[Answer]) -> ScoreResult:
    by_index = _index_answers(answers)
    total = 0
    maximum = 0
    results: List[QuestionResult] = []

    for q_index, question in enumerate(quiz.questions):
        maximum += question.points
        answer = by_index.get(q_index)
        selected = _selected(answer)
        correct = question.correct_index
        is_correct = selected is not None and correct is not None and selected == correct
        if is_correct:
            total += question.points

        results.append(
            QuestionResult(
                question_index=q_index,
                question_text=question.question_text,
                user_answer=selected,
                correct_answer=correct,
                is_correct=is_correct,
                explanation=question.explanation,
            )
        )

    percentage = 100 * total / maximum if maximum else 0.0
    return ScoreResult(total_score=total, max_score=maximum, percentage=percentage, results=results)
