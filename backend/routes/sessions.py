from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import timedelta

import config
from database import get_db
from exceptions import ValidationError
from models import QASession
from schemas import SessionCreate, SessionCreatedResponse, SessionResponse, SessionUpdate
from security import get_session_by_code, verify_host_token, check_session_expiration
from session_codes import create_with_unique_code, session_expiration
from store import SessionStore
from validation import validate_session_input
from utils import generate_organizer_token, get_utc_now, generate_qr_code_base64, get_join_url
from connection_manager import manager

router = APIRouter(prefix="/api/sessions", tags=["sessions"])

@router.post("/", response_model=SessionCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_session(session_in: SessionCreate, db: AsyncSession = Depends(get_db)):
    validation = validate_session_input(session_in.title, session_in.description)
    if not validation.is_valid:
        raise ValidationError(
            [{"field": name, "message": message} for name, message in validation.errors.items()]
        )

    store = SessionStore(db)
    organizer_token = generate_organizer_token()
    description = session_in.description.strip() if session_in.description else None
    expires_at = session_expiration(get_utc_now(), timedelta(hours=config.SESSION_DURATION_HOURS))

    async def persist(code: str) -> QASession:
        return await store.create_session(
            code=code,
            title=session_in.title.strip(),
            description=description or None,
            organizer_token=organizer_token,
            expires_at=expires_at,
        )

    # Pre-check and insert-time duplicates share one retry budget
    new_session = await create_with_unique_code(store.code_exists, persist)

    join_url = get_join_url(new_session.code)
    return SessionCreatedResponse(
        id=new_session.id,
        code=new_session.code,
        title=new_session.title,
        description=new_session.description,
        is_active=new_session.is_active,
        is_accepting_questions=new_session.is_accepting_questions,
        created_at=new_session.created_at,
        updated_at=new_session.updated_at,
        expires_at=new_session.expires_at,
        organizer_token=organizer_token,
        join_url=join_url,
        qr_code=generate_qr_code_base64(join_url),
    )

@router.get("/{session_code}", response_model=SessionResponse, response_model_exclude_none=True)
async def get_session(
    session: QASession = Depends(get_session_by_code)
):
    return check_session_expiration(session)

# --- Host controls ---

@router.patch("/{session_code}/{token}", response_model=SessionResponse, response_model_exclude_none=True)
async def update_session(
    update_in: SessionUpdate,
    session: QASession = Depends(verify_host_token),
    db: AsyncSession = Depends(get_db)
):
    check_session_expiration(session)

    changes = update_in.model_dump(exclude_none=True)
    if not changes:
        raise HTTPException(status_code=400, detail="No valid fields to update")

    for field, value in changes.items():
        setattr(session, field, value)
    await db.commit()

    await manager.broadcast("session_update", changes, session.code)
    return session

@router.delete("/{session_code}/{token}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session: QASession = Depends(verify_host_token),
    db: AsyncSession = Depends(get_db)
):
    code = session.code
    await SessionStore(db).delete_session(session)

    await manager.broadcast("session_deleted", {"code": code}, code)
