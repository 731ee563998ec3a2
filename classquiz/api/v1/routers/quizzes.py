from typing import Annotated, Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Body, Query, status

from ....domain.model import QuizFilters
from ....schemas.quiz_schemas import (
    LeaderboardEntryOut,
    LeaderboardOut,
    LiveToggleIn,
    QuizCreateIn,
    QuizDetailEnvelope,
    QuizDetailOut,
    QuizEnvelope,
    QuizListOut,
    QuizSummaryOut,
    QuizUpdateIn,
    SubmissionListOut,
    SubmissionOut,
    SubmitIn,
    SubmitOut,
)
from ...deps import DispatcherDep, PrincipalDep, QuizServiceDep, StudentDep, TeacherDep

router = APIRouter(prefix="/quizzes", tags=["quizzes"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=QuizEnvelope)
async def create_quiz(
    payload: QuizCreateIn,
    teacher: TeacherDep,
    svc: QuizServiceDep,
    dispatcher: DispatcherDep,
    background: BackgroundTasks,
):
    quiz, event = await svc.create_quiz(teacher, payload.to_domain(teacher.user_id))
    background.add_task(dispatcher.dispatch, event)
    return QuizEnvelope(message="Quiz created successfully", quiz=QuizSummaryOut.from_domain(quiz))


@router.get("", response_model=QuizListOut)
async def list_quizzes(
    principal: PrincipalDep,
    svc: QuizServiceDep,
    subject: Optional[str] = None,
    class_label: Annotated[Optional[str], Query(alias="class")] = None,
    is_live: Annotated[Optional[bool], Query(alias="isLive")] = None,
    created_by: Annotated[Optional[str], Query(alias="createdBy")] = None,
):
    filters = QuizFilters(subject=subject, class_label=class_label, live=is_live, owner_id=created_by)
    quizzes = await svc.list_quizzes(principal, filters)
    return QuizListOut(quizzes=[QuizSummaryOut.from_domain(q) for q in quizzes])


@router.get("/submissions/me", response_model=SubmissionListOut)
async def my_submissions(student: StudentDep, svc: QuizServiceDep):
    submissions = await svc.submissions_for(student)
    return SubmissionListOut(submissions=[SubmissionOut.from_domain(s) for s in submissions])


@router.get("/{quiz_id}", response_model=QuizDetailEnvelope)
async def get_quiz(quiz_id: UUID, principal: PrincipalDep, svc: QuizServiceDep):
    quiz = await svc.get_quiz(principal, str(quiz_id))
    return QuizDetailEnvelope(quiz=QuizDetailOut.from_domain(quiz, reveal_answers=principal.is_teacher))


@router.put("/{quiz_id}", response_model=QuizEnvelope)
async def update_quiz(quiz_id: UUID, payload: QuizUpdateIn, teacher: TeacherDep, svc: QuizServiceDep):
    quiz = await svc.update_quiz(teacher, str(quiz_id), payload.to_changes())
    return QuizEnvelope(message="Quiz updated successfully", quiz=QuizSummaryOut.from_domain(quiz))


@router.patch("/{quiz_id}/live", response_model=QuizEnvelope)
async def toggle_live(
    quiz_id: UUID,
    teacher: TeacherDep,
    svc: QuizServiceDep,
    dispatcher: DispatcherDep,
    background: BackgroundTasks,
    payload: Annotated[Optional[LiveToggleIn], Body()] = None,
):
    live = payload.isLive if payload is not None else None
    quiz, event = await svc.set_live(teacher, str(quiz_id), live)
    background.add_task(dispatcher.dispatch, event)
    message = "Quiz set to live" if quiz.live else "Quiz set to inactive"
    return QuizEnvelope(message=message, quiz=QuizSummaryOut.from_domain(quiz))


@router.post("/{quiz_id}/submit", response_model=SubmitOut)
async def submit_quiz(
    quiz_id: UUID,
    payload: SubmitIn,
    student: StudentDep,
    svc: QuizServiceDep,
    dispatcher: DispatcherDep,
    background: BackgroundTasks,
):
    answers = payload.to_domain()
    result, _, event = await svc.submit(student, str(quiz_id), answers)
    background.add_task(dispatcher.dispatch, event)
    return SubmitOut.from_result(result)


@router.get("/{quiz_id}/leaderboard", response_model=LeaderboardOut)
async def get_leaderboard(quiz_id: UUID, principal: PrincipalDep, svc: QuizServiceDep):
    entries = await svc.leaderboard(str(quiz_id))
    return LeaderboardOut(leaderboard=[LeaderboardEntryOut.from_domain(e) for e in entries])


@router.delete("/{quiz_id}")
async def delete_quiz(quiz_id: UUID, teacher: TeacherDep, svc: QuizServiceDep):
    await svc.delete_quiz(teacher, str(quiz_id))
    return {"message": "Quiz deleted successfully"}
