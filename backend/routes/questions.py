from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload

from database import get_db
from exceptions import ValidationError
from models import Question, QASession, QuestionStatus
from ranking import PARTICIPANT_VISIBLE_STATUSES, rank_questions
from rate_limit import RateLimiter, SUBMIT_QUESTION
from schemas import QuestionCreate, QuestionList, QuestionResponse, QuestionSubmitted
from security import (
    check_accepting_questions,
    check_session_expiration,
    enforce_rate_limit,
    get_rate_limiter,
    get_session_by_code,
)
from validation import validate_question_input

from connection_manager import manager

router = APIRouter(prefix="/api/sessions/{session_code}/questions", tags=["questions"])

@router.get("/", response_model=QuestionList, response_model_exclude_none=True)
async def list_questions(
    session: QASession = Depends(get_session_by_code),
    db: AsyncSession = Depends(get_db)
):
    """Participant view: moderated questions only, in display order."""
    check_session_expiration(session)

    result = await db.execute(
        select(Question)
        .where(Question.session_id == session.id, Question.status.in_(PARTICIPANT_VISIBLE_STATUSES))
        .options(selectinload(Question.pulse_feedback))
    )
    questions = rank_questions(result.scalars().all())

    return QuestionList(
        questions=[QuestionResponse.from_question(q) for q in questions],
        total=len(questions),
    )

@router.post("/", response_model=QuestionSubmitted, response_model_exclude_none=True, status_code=status.HTTP_201_CREATED)
async def submit_question(
    question_in: QuestionCreate,
    response: Response,
    session: QASession = Depends(get_session_by_code),
    limiter: RateLimiter = Depends(get_rate_limiter),
    db: AsyncSession = Depends(get_db)
):
    validation = validate_question_input(
        question_in.content, question_in.participant_id, question_in.author_name
    )
    if not validation.is_valid:
        raise ValidationError([error.to_dict() for error in validation.errors])

    enforce_rate_limit(
        limiter,
        SUBMIT_QUESTION,
        question_in.participant_id,
        response,
        "Too many questions submitted. Please try again in {retry_after} seconds.",
    )

    check_session_expiration(session)
    check_accepting_questions(session)

    author_name = question_in.author_name.strip() if question_in.author_name else None
    new_question = Question(
        session_id=session.id,
        participant_id=question_in.participant_id,
        content=question_in.content.strip(),
        author_name=author_name or None,
        is_anonymous=question_in.is_anonymous,
        status=QuestionStatus.PENDING,
        vote_count=0,
    )
    
    db.add(new_question)
    await db.commit()

    # Content stays off the shared channel until the host approves it
    await manager.broadcast(
        "new_question",
        {"id": new_question.id, "status": new_question.status.value},
        session.code,
    )

    return QuestionSubmitted(
        question=QuestionResponse.from_question(new_question, with_pulse=False),
        message="Question submitted successfully",
    )
