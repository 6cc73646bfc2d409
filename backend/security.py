from fastapi import Depends, HTTPException, status, Path, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import logging

from database import get_db
from exceptions import RateLimitExceeded
from models import QASession
from rate_limit import RATE_LIMITS, RateLimiter, rate_limit_headers
from validation import is_valid_session_code
import utils

logger = logging.getLogger(__name__)

async def _load_session(code: str, db: AsyncSession) -> QASession:
    code = code.upper()
    if not is_valid_session_code(code):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid session code format"
        )

    result = await db.execute(select(QASession).where(QASession.code == code))
    session = result.scalars().first()

    if not session:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found"
        )
    return session

async def get_session_by_code(
    session_code: str = Path(...),
    db: AsyncSession = Depends(get_db)
) -> QASession:
    """Dependency to fetch a session by its share code."""
    return await _load_session(session_code, db)

async def verify_host_token(
    session_code: str = Path(...),
    token: str = Path(..., min_length=10),
    db: AsyncSession = Depends(get_db)
) -> QASession:
    """Dependency to verify the caller holds the session's organizer token."""
    session = await _load_session(session_code, db)

    if session.organizer_token != token:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid organizer token"
        )
    
    return session

def check_session_expiration(session: QASession) -> QASession:
    """Raise 410 Gone once the session's expiry time has passed."""
    if session.expires_at < utils.get_utc_now():
        raise HTTPException(
             status_code=status.HTTP_410_GONE,
             detail="Session has expired"
        )
    return session

def check_accepting_questions(session: QASession) -> QASession:
    if not session.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This session is no longer active"
        )
    if not session.is_accepting_questions:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="This session is not currently accepting questions"
        )
    return session

def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter

def enforce_rate_limit(
    limiter: RateLimiter,
    action: str,
    identifier: str,
    response: Response,
    message: str,
):
    """Count the request against its window; raise RateLimitExceeded when over."""
    result = limiter.check(action, identifier, RATE_LIMITS[action])
    if not result.allowed:
        logger.warning(
            "Rate limit hit: action=%s identifier=%s count=%d limit=%d",
            action, identifier, result.current, result.limit,
        )
        raise RateLimitExceeded(result, message.format(retry_after=result.retry_after))
    response.headers.update(rate_limit_headers(result))
    return result
