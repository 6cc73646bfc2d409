"""Session persistence behind a small injectable interface.

Routes build a ``SessionStore`` around the request's ``AsyncSession``; tests
can pass any object with the same two coroutines.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from exceptions import DuplicateCodeRace
from models import PulseCheckFeedback, QASession, Question, Vote

logger = logging.getLogger(__name__)


class SessionStore:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def code_exists(self, code: str) -> bool:
        result = await self.db.execute(select(QASession.id).where(QASession.code == code))
        return result.first() is not None

    async def create_session(
        self,
        code: str,
        title: str,
        description: Optional[str],
        organizer_token: str,
        expires_at: datetime,
    ) -> QASession:
        """Insert a session row; a unique-code violation becomes DuplicateCodeRace."""
        session = QASession(
            code=code,
            title=title,
            description=description,
            organizer_token=organizer_token,
            expires_at=expires_at,
        )
        self.db.add(session)
        try:
            await self.db.commit()
        except IntegrityError as exc:
            await self.db.rollback()
            if "code" not in str(exc.orig).lower():
                raise
            raise DuplicateCodeRace(code) from exc
        await self.db.refresh(session)
        logger.info("Created session %s", code)
        return session

    async def delete_session(self, session: QASession) -> None:
        """Remove a session and everything hanging off it.

        Children are deleted explicitly so the result does not depend on the
        database enforcing ``ON DELETE CASCADE`` (SQLite does not by default).
        """
        question_ids = select(Question.id).where(Question.session_id == session.id)
        for stmt in (
            delete(PulseCheckFeedback).where(PulseCheckFeedback.question_id.in_(question_ids)),
            delete(Vote).where(Vote.question_id.in_(question_ids)),
            delete(Question).where(Question.session_id == session.id),
        ):
            await self.db.execute(stmt.execution_options(synchronize_session=False))
        await self.db.delete(session)
        await self.db.commit()
        logger.info("Deleted session %s", session.code)
