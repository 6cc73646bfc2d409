from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
import logging

from database import get_db
from exceptions import ValidationError
from models import PulseCheckFeedback, PulseFeedback, Question, QuestionStatus, Vote
from pulse import aggregate_pulse_check
from rate_limit import PULSE_CHECK, VOTE, RateLimiter
from schemas import PulseCheckRequest, PulseCheckResponse, VoteRequest, VoteResponse
from security import check_session_expiration, enforce_rate_limit, get_rate_limiter
from validation import is_valid_participant_id

from connection_manager import manager

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/questions", tags=["votes"])

def require_participant_id(participant_id):
    if not is_valid_participant_id(participant_id):
        raise ValidationError(
            [{"field": "participant_id", "message": "Invalid participant ID format"}],
            message="Invalid participant ID format",
        )
    return participant_id

async def load_question(db: AsyncSession, question_id: str, *options) -> Question:
    result = await db.execute(
        select(Question)
        .where(Question.id == question_id)
        .options(selectinload(Question.session), *options)
    )
    question = result.scalars().first()
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")
    return question

async def _has_vote(db: AsyncSession, question_id: str, participant_id: str) -> bool:
    existing = await db.execute(
        select(Vote.id).where(Vote.question_id == question_id, Vote.participant_id == participant_id)
    )
    return existing.first() is not None

@router.post("/{question_id}/vote", response_model=VoteResponse, status_code=status.HTTP_201_CREATED)
async def upvote_question(
    question_id: str,
    vote_in: VoteRequest,
    response: Response,
    limiter: RateLimiter = Depends(get_rate_limiter),
    db: AsyncSession = Depends(get_db)
):
    participant_id = require_participant_id(vote_in.participant_id)
    enforce_rate_limit(
        limiter, VOTE, participant_id, response,
        "Too many votes. Please try again in {retry_after} seconds.",
    )

    question = await load_question(db, question_id)
    check_session_expiration(question.session)

    if await _has_vote(db, question_id, participant_id):
        raise HTTPException(status_code=409, detail="You have already voted on this question")

    db.add(Vote(question_id=question_id, participant_id=participant_id))
    # Increment in SQL so concurrent voters don't overwrite each other
    question.vote_count = Question.vote_count + 1
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="You have already voted on this question")
    await db.refresh(question, attribute_names=["vote_count"])

    await manager.broadcast(
        "question_update", {"id": question.id, "vote_count": question.vote_count}, question.session.code
    )
    return VoteResponse(question_id=question.id, vote_count=question.vote_count, voted=True)

@router.delete("/{question_id}/vote", response_model=VoteResponse)
async def remove_vote(
    question_id: str,
    vote_in: VoteRequest,
    response: Response,
    limiter: RateLimiter = Depends(get_rate_limiter),
    db: AsyncSession = Depends(get_db)
):
    participant_id = require_participant_id(vote_in.participant_id)
    enforce_rate_limit(
        limiter, VOTE, participant_id, response,
        "Too many vote operations. Please try again in {retry_after} seconds.",
    )

    question = await load_question(db, question_id)
    check_session_expiration(question.session)

    result = await db.execute(
        select(Vote).where(Vote.question_id == question_id, Vote.participant_id == participant_id)
    )
    vote = result.scalars().first()
    if not vote:
        raise HTTPException(status_code=404, detail="You have not voted on this question")

    await db.delete(vote)
    question.vote_count = Question.vote_count - 1
    await db.commit()
    await db.refresh(question, attribute_names=["vote_count"])

    await manager.broadcast(
        "question_update", {"id": question.id, "vote_count": question.vote_count}, question.session.code
    )
    return VoteResponse(question_id=question.id, vote_count=question.vote_count, voted=False)

@router.post("/{question_id}/pulse", response_model=PulseCheckResponse, status_code=status.HTTP_201_CREATED)
async def submit_pulse_check(
    question_id: str,
    pulse_in: PulseCheckRequest,
    response: Response,
    limiter: RateLimiter = Depends(get_rate_limiter),
    db: AsyncSession = Depends(get_db)
):
    participant_id = require_participant_id(pulse_in.participant_id)
    allowed = [feedback.value for feedback in PulseFeedback]
    if pulse_in.feedback not in allowed:
        raise ValidationError(
            [{"field": "feedback", "message": f"Feedback must be one of: {', '.join(allowed)}"}],
            message="Invalid feedback",
        )

    enforce_rate_limit(
        limiter, PULSE_CHECK, participant_id, response,
        "Too many pulse check submissions. Please try again in {retry_after} seconds.",
    )

    question = await load_question(db, question_id, selectinload(Question.pulse_feedback))
    check_session_expiration(question.session)
    if question.status != QuestionStatus.ANSWERED:
        raise HTTPException(
            status_code=400,
            detail=f"Pulse check is only available for answered questions. Question status: {question.status.value}",
        )

    if any(record.participant_id == participant_id for record in question.pulse_feedback):
        raise HTTPException(status_code=409, detail="You have already submitted feedback for this question")

    question.pulse_feedback.append(
        PulseCheckFeedback(participant_id=participant_id, feedback=PulseFeedback(pulse_in.feedback))
    )
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="You have already submitted feedback for this question")

    logger.info("Pulse check %s on question %s", pulse_in.feedback, question.id)
    await manager.broadcast(
        "question_update",
        {"id": question.id, "pulse_check_stats": aggregate_pulse_check(question.pulse_feedback)},
        question.session.code,
    )
    return PulseCheckResponse(question_id=question.id, feedback=pulse_in.feedback, success=True)
