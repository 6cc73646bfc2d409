"""Field checks for session and question input.

Every rule runs on every call so the caller can show all problems at once.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500

QUESTION_MIN_LENGTH = 3
QUESTION_MAX_LENGTH = 500
AUTHOR_NAME_MAX_LENGTH = 100

_UUID_V4 = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)
_SESSION_CODE = re.compile(r"^[A-Z0-9]{6}$")


@dataclass
class FieldError:
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


@dataclass
class SessionValidationResult:
    is_valid: bool
    errors: Dict[str, str] = field(default_factory=dict)


@dataclass
class QuestionValidationResult:
    is_valid: bool
    errors: List[FieldError] = field(default_factory=list)


def is_valid_participant_id(value: Optional[str]) -> bool:
    return bool(value) and _UUID_V4.match(value) is not None


def is_valid_session_code(value: Optional[str]) -> bool:
    return bool(value) and _SESSION_CODE.match(value) is not None


def validate_session_input(title: Optional[str], description: Optional[str] = None) -> SessionValidationResult:
    errors: Dict[str, str] = {}

    stripped = (title or "").strip()
    if not stripped:
        errors["title"] = "Title is required"
    elif len(stripped) < TITLE_MIN_LENGTH:
        errors["title"] = f"Title must be at least {TITLE_MIN_LENGTH} characters long"
    elif len(stripped) > TITLE_MAX_LENGTH:
        errors["title"] = f"Title must be no more than {TITLE_MAX_LENGTH} characters long"

    # None means the field was not sent at all
    if description is not None and len(description.strip()) > DESCRIPTION_MAX_LENGTH:
        errors["description"] = f"Description must be no more than {DESCRIPTION_MAX_LENGTH} characters long"

    return SessionValidationResult(is_valid=not errors, errors=errors)


def validate_question_input(
    content: Optional[str],
    participant_id: Optional[str],
    author_name: Optional[str] = None,
) -> QuestionValidationResult:
    errors: List[FieldError] = []

    stripped = (content or "").strip()
    if not stripped:
        errors.append(FieldError("content", "Question content is required"))
    elif len(stripped) < QUESTION_MIN_LENGTH:
        errors.append(FieldError("content", f"Question must be at least {QUESTION_MIN_LENGTH} characters"))
    elif len(stripped) > QUESTION_MAX_LENGTH:
        errors.append(FieldError("content", f"Question cannot exceed {QUESTION_MAX_LENGTH} characters"))

    if not participant_id or not participant_id.strip():
        errors.append(FieldError("participant_id", "Participant ID is required"))
    elif not is_valid_participant_id(participant_id):
        errors.append(FieldError("participant_id", "Invalid participant ID format"))

    if author_name is not None and len(author_name.strip()) > AUTHOR_NAME_MAX_LENGTH:
        errors.append(FieldError("author_name", f"Author name cannot exceed {AUTHOR_NAME_MAX_LENGTH} characters"))

    return QuestionValidationResult(is_valid=not errors, errors=errors)
