from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
import logging

from database import get_db
from models import Question, QASession, QuestionStatus
from ranking import PARTICIPANT_VISIBLE_STATUSES, rank_questions
from schemas import DashboardResponse, QuestionResponse, QuestionStatusUpdate, SessionResponse
from security import verify_host_token
from connection_manager import manager

from utils import generate_qr_code_base64, get_join_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/organizer", tags=["organizer"])

@router.get("/{session_code}/{token}", response_model=DashboardResponse, response_model_exclude_none=True)
async def get_dashboard_data(
    session: QASession = Depends(verify_host_token),
    db: AsyncSession = Depends(get_db)
):
    """Host view: every question regardless of status, same order as participants see."""
    result = await db.execute(
        select(Question)
        .where(Question.session_id == session.id)
        .options(selectinload(Question.pulse_feedback))
    )
    questions = rank_questions(result.scalars().all())

    join_url = get_join_url(session.code)
    return DashboardResponse(
        session=SessionResponse.model_validate(session),
        questions=[QuestionResponse.from_question(q) for q in questions],
        total=len(questions),
        join_url=join_url,
        qr_code=generate_qr_code_base64(join_url),
    )

@router.patch("/{session_code}/{token}/questions/{question_id}", response_model=QuestionResponse, response_model_exclude_none=True)
async def update_question_status(
    question_id: str,
    update_in: QuestionStatusUpdate,
    session: QASession = Depends(verify_host_token),
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(
        select(Question)
        .where(Question.id == question_id, Question.session_id == session.id)
        .options(selectinload(Question.pulse_feedback))
    )
    question = result.scalars().first()
    
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")

    # Several questions may be being_answered at once; that is left to the host
    previous = question.status
    question.status = update_in.status
    await db.commit()
    logger.info("Question %s: %s -> %s", question.id, previous.value, question.status.value)

    payload = QuestionResponse.from_question(question)
    if question.status in PARTICIPANT_VISIBLE_STATUSES:
        await manager.broadcast(
            "question_update", payload.model_dump(mode="json", exclude_none=True), session.code
        )
    else:
        # Pending or dismissed: participants should drop it from their list
        await manager.broadcast("question_removed", {"id": question.id}, session.code)

    return payload
