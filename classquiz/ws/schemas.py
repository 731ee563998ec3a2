from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter

from ..domain.events import DomainEvent, QuizLiveStatusChanged


# --- client -> server ---

class JoinQuiz(BaseModel):
    type: Literal["join-quiz"]
    quizId: str


class LeaveQuiz(BaseModel):
    type: Literal["leave-quiz"]
    quizId: str


class Ping(BaseModel):
    type: Literal["ping"]


ClientMessage = Annotated[Union[JoinQuiz, LeaveQuiz, Ping], Field(discriminator="type")]
client_message_adapter = TypeAdapter(ClientMessage)


# --- server -> client ---

class QuizEventMessage(BaseModel):
    type: Literal["quiz-created", "leaderboard-update", "quiz-status-changed"]
    quizId: str
    isLive: Optional[bool] = None


class RoutedEvent(BaseModel):
    """What travels over the Redis channel: target room plus the client message."""
    room: Optional[str] = None
    message: QuizEventMessage


def event_to_routed(event: DomainEvent) -> RoutedEvent:
    is_live = event.live if isinstance(event, QuizLiveStatusChanged) else None
    return RoutedEvent(
        room=event.room,
        message=QuizEventMessage(type=event.type, quizId=event.quiz_id, isLive=is_live),
    )
