from datetime import datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..domain.model import Answer, Difficulty, Option, Question, Quiz, Submission
from ..services.leaderboard import RankedEntry
from ..services.scoring import ScoreResult


class _In(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)


class OptionIn(_In):
    text: str
    isCorrect: bool = False


class QuestionIn(_In):
    questionText: str
    options: List[OptionIn]
    explanation: str = ""
    points: int = Field(1, ge=1)

    def to_domain(self) -> Question:
        return Question(
            question_text=self.questionText,
            options=[Option(text=o.text, is_correct=o.isCorrect) for o in self.options],
            explanation=self.explanation,
            points=self.points,
        )


class QuizCreateIn(_In):
    title: str = Field(..., min_length=1)
    description: str = ""
    subject: str = Field(..., min_length=1)
    classLabel: str = Field(..., min_length=1, validation_alias=AliasChoices("classLabel", "class"))
    timeLimitMinutes: Optional[int] = Field(None, ge=1)
    difficulty: Difficulty = Difficulty.MEDIUM
    questions: List[QuestionIn]
    isLive: bool = False

    def to_domain(self, owner_id: str) -> Quiz:
        return Quiz(
            id=None,
            title=self.title,
            description=self.description,
            subject=self.subject,
            class_label=self.classLabel,
            time_limit_minutes=self.timeLimitMinutes,
            difficulty=self.difficulty,
            questions=[q.to_domain() for q in self.questions],
            live=self.isLive,
            owner_id=owner_id,
        )


class QuizUpdateIn(_In):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    subject: Optional[str] = Field(None, min_length=1)
    classLabel: Optional[str] = Field(None, min_length=1, validation_alias=AliasChoices("classLabel", "class"))
    timeLimitMinutes: Optional[int] = Field(None, ge=1)
    difficulty: Optional[Difficulty] = None
    questions: Optional[List[QuestionIn]] = None

    def to_changes(self) -> dict:
        """Only the fields the client actually sent, keyed by domain field name."""
        names = {
            "title": "title",
            "description": "description",
            "subject": "subject",
            "classLabel": "class_label",
            "timeLimitMinutes": "time_limit_minutes",
            "difficulty": "difficulty",
        }
        changes = {}
        for field_name in self.model_fields_set:
            value = getattr(self, field_name)
            if field_name == "questions":
                if value is not None:
                    changes["questions"] = [q.to_domain() for q in value]
            elif field_name == "timeLimitMinutes":
                # explicit null clears the time limit
                changes["time_limit_minutes"] = value
            elif value is not None:
                changes[names[field_name]] = value
        return changes


class LiveToggleIn(BaseModel):
    isLive: Optional[bool] = None


class AnswerIn(BaseModel):
    # no coercion; scoring counts anything but an int as unanswered
    questionIndex: Any = None
    selectedOptionIndex: Any = None

    def to_domain(self) -> Answer:
        return Answer(question_index=self.questionIndex, selected_option_index=self.selectedOptionIndex)


class SubmitIn(BaseModel):
    answers: List[AnswerIn] = []

    def to_domain(self) -> List[Answer]:
        """Answers that name a question by integer index; the rest are dropped."""
        return [
            a.to_domain()
            for a in self.answers
            if isinstance(a.questionIndex, int) and not isinstance(a.questionIndex, bool)
        ]


# --- responses ---

class QuizSummaryOut(BaseModel):
    id: str
    title: str
    description: str
    subject: str
    classLabel: str
    timeLimitMinutes: Optional[int]
    difficulty: Difficulty
    isLive: bool
    createdBy: str
    createdAt: Optional[datetime]
    updatedAt: Optional[datetime]

    @classmethod
    def from_domain(cls, quiz: Quiz) -> "QuizSummaryOut":
        return cls(
            id=quiz.id,
            title=quiz.title,
            description=quiz.description,
            subject=quiz.subject,
            classLabel=quiz.class_label,
            timeLimitMinutes=quiz.time_limit_minutes,
            difficulty=quiz.difficulty,
            isLive=quiz.live,
            createdBy=quiz.owner_id,
            createdAt=quiz.created_at,
            updatedAt=quiz.updated_at,
        )


class OptionOut(BaseModel):
    text: str
    isCorrect: bool


class StudentOptionOut(BaseModel):
    text: str


class QuestionOut(BaseModel):
    index: int
    questionText: str
    options: List[OptionOut]
    explanation: str
    points: int


class StudentQuestionOut(BaseModel):
    index: int
    questionText: str
    options: List[StudentOptionOut]
    points: int


class QuizDetailOut(QuizSummaryOut):
    questions: List[QuestionOut | StudentQuestionOut]

    @classmethod
    def from_domain(cls, quiz: Quiz, *, reveal_answers: bool = True) -> "QuizDetailOut":
        if reveal_answers:
            questions = [
                QuestionOut(
                    index=i,
                    questionText=q.question_text,
                    options=[OptionOut(text=o.text, isCorrect=o.is_correct) for o in q.options],
                    explanation=q.explanation,
                    points=q.points,
                )
                for i, q in enumerate(quiz.questions)
            ]
        else:
            # explanations give the answer away too
            questions = [
                StudentQuestionOut(
                    index=i,
                    questionText=q.question_text,
                    options=[StudentOptionOut(text=o.text) for o in q.options],
                    points=q.points,
                )
                for i, q in enumerate(quiz.questions)
            ]
        summary = QuizSummaryOut.from_domain(quiz).model_dump()
        return cls(**summary, questions=questions)


class QuizEnvelope(BaseModel):
    message: Optional[str] = None
    quiz: QuizSummaryOut


class QuizDetailEnvelope(BaseModel):
    quiz: QuizDetailOut


class QuizListOut(BaseModel):
    quizzes: List[QuizSummaryOut]


class QuestionResultOut(BaseModel):
    questionIndex: int
    questionText: str
    userAnswer: Optional[int]
    correctAnswer: Optional[int]
    isCorrect: bool
    explanation: str


class SubmitOut(BaseModel):
    message: str
    score: int
    maxScore: int
    percentage: float
    results: List[QuestionResultOut]

    @classmethod
    def from_result(cls, result: ScoreResult) -> "SubmitOut":
        return cls(
            message="Quiz submitted successfully",
            score=result.total_score,
            maxScore=result.max_score,
            percentage=result.display_percentage,
            results=[
                QuestionResultOut(
                    questionIndex=r.question_index,
                    questionText=r.question_text,
                    userAnswer=r.user_answer,
                    correctAnswer=r.correct_answer,
                    isCorrect=r.is_correct,
                    explanation=r.explanation,
                )
                for r in result.results
            ],
        )


class LeaderboardEntryOut(BaseModel):
    rank: int
    studentName: str
    studentClass: str
    score: int
    maxScore: int
    percentage: float
    submittedAt: datetime

    @classmethod
    def from_domain(cls, entry: RankedEntry) -> "LeaderboardEntryOut":
        return cls(
            rank=entry.rank,
            studentName=entry.student_name,
            studentClass=entry.student_class,
            score=entry.score,
            maxScore=entry.max_score,
            percentage=entry.display_percentage,
            submittedAt=entry.submitted_at,
        )


class LeaderboardOut(BaseModel):
    leaderboard: List[LeaderboardEntryOut]


class SubmissionOut(BaseModel):
    quizId: str
    score: int
    maxScore: int
    percentage: float
    submittedAt: datetime

    @classmethod
    def from_domain(cls, sub: Submission) -> "SubmissionOut":
        return cls(
            quizId=sub.quiz_id,
            score=sub.score,
            maxScore=sub.max_score,
            percentage=round(sub.percentage, 2),
            submittedAt=sub.submitted_at,
        )


class SubmissionListOut(BaseModel):
    submissions: List[SubmissionOut]
