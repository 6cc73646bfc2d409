"""Session code allocation.

Codes are 6 characters from ``[A-Z0-9]``. They are shareable identifiers,
not secrets, so ordinary (non-cryptographic) randomness is enough. The
existence check is only a pre-filter: the unique index on
``qa_sessions.code`` has the final say, and a duplicate reported by the
store on insert counts as one more collision against the same attempt budget.
"""

from __future__ import annotations

import logging
import random
import string
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional, TypeVar

from exceptions import AllocationExhausted, DuplicateCodeRace

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 6
MAX_ATTEMPTS = 10
DEFAULT_SESSION_DURATION = timedelta(hours=24)

T = TypeVar("T")

ExistsCheck = Callable[[str], Awaitable[bool]]


def generate_session_code(rng: Optional[random.Random] = None) -> str:
    """Return one candidate code; does not check for collisions."""
    rng = rng or random
    return "".join(rng.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))


async def allocate_session_code(
    exists: ExistsCheck,
    max_attempts: int = MAX_ATTEMPTS,
    rng: Optional[random.Random] = None,
) -> str:
    """Return a code that ``exists`` reports as unused.

    Raises AllocationExhausted once ``max_attempts`` candidates have collided.
    """
    for attempt in range(1, max_attempts + 1):
        code = generate_session_code(rng)
        if not await exists(code):
            return code
        logger.debug("Session code collision on attempt %d", attempt)

    logger.error("Session code allocation exhausted after %d attempts", max_attempts)
    raise AllocationExhausted(max_attempts)


async def create_with_unique_code(
    exists: ExistsCheck,
    persist: Callable[[str], Awaitable[T]],
    max_attempts: int = MAX_ATTEMPTS,
    rng: Optional[random.Random] = None,
) -> T:
    """Allocate a code and persist with it, retrying on either kind of collision.

    ``persist`` must raise DuplicateCodeRace when storage rejects the code.
    Pre-check hits and insert-time races share the same attempt budget.
    """
    for attempt in range(1, max_attempts + 1):
        code = generate_session_code(rng)
        if await exists(code):
            logger.debug("Session code collision on attempt %d", attempt)
            continue
        try:
            return await persist(code)
        except DuplicateCodeRace:
            logger.warning("Session code %s was claimed concurrently, retrying", code)

    logger.error("Session code allocation exhausted after %d attempts", max_attempts)
    raise AllocationExhausted(max_attempts)


def session_expiration(now: datetime, duration: timedelta = DEFAULT_SESSION_DURATION) -> datetime:
    return now + duration
