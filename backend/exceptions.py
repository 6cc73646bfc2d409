"""Named failures raised by the Q&A core.

Route handlers translate these into JSON error responses (see ``main.py``).
"""

from typing import List, Optional


class AskPulseError(Exception):
    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AskPulseError):
    """Caller input failed one or more field checks. Never retried."""

    code = "VALIDATION_ERROR"
    status_code = 400

    def __init__(self, errors: List[dict], message: str = "Validation failed"):
        super().__init__(message)
        self.errors = errors


class RateLimitExceeded(AskPulseError):
    code = "RATE_LIMIT_EXCEEDED"
    status_code = 429

    def __init__(self, result, message: Optional[str] = None):
        super().__init__(
            message or f"Too many requests. Please try again in {result.retry_after} seconds."
        )
        self.result = result


class AllocationExhausted(AskPulseError):
    """Every candidate session code collided.

    This is an operational failure (storage trouble or extreme collision
    pressure), not a problem with the caller's input.
    """

    code = "ALLOCATION_EXHAUSTED"
    status_code = 503

    def __init__(self, attempts: int):
        super().__init__(
            f"Failed to generate unique session code after {attempts} attempts"
        )
        self.attempts = attempts


class DuplicateCodeRace(AskPulseError):
    """Storage rejected a session code another writer claimed first."""

    code = "DUPLICATE_CODE"
    status_code = 409

    def __init__(self, code: str):
        super().__init__(f"Session code {code} is already taken")
        self.session_code = code
