from pydantic import BaseModel, ConfigDict, field_serializer
from datetime import datetime
from typing import Optional, List

from models import QuestionStatus
from pulse import pulse_stats_for


def _iso(dt: datetime) -> str:
    return dt.isoformat() + 'Z' if dt.tzinfo is None else dt.isoformat()


# Request bodies stay permissive so validation.py can report every field problem at once

class SessionCreate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None

class SessionUpdate(BaseModel):
    is_active: Optional[bool] = None
    is_accepting_questions: Optional[bool] = None

class SessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    title: str
    description: Optional[str] = None
    is_active: bool
    is_accepting_questions: bool
    created_at: datetime
    updated_at: datetime
    expires_at: datetime
    # organizer_token is only ever returned by the create endpoint

    @field_serializer('created_at', 'updated_at', 'expires_at')
    def serialize_dt(self, dt: datetime, _info):
        return _iso(dt)

class SessionCreatedResponse(SessionResponse):
    organizer_token: str
    join_url: str
    qr_code: str

class QuestionCreate(BaseModel):
    content: Optional[str] = None
    participant_id: Optional[str] = None
    author_name: Optional[str] = None
    is_anonymous: bool = True

class PulseCheckStats(BaseModel):
    helpful: int = 0
    neutral: int = 0
    not_helpful: int = 0

class QuestionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    session_id: str
    participant_id: Optional[str] = None
    author_name: Optional[str] = None
    content: str
    vote_count: int
    status: QuestionStatus
    is_anonymous: bool
    created_at: datetime
    updated_at: datetime
    # Present only for answered questions
    pulse_check_stats: Optional[PulseCheckStats] = None

    @field_serializer('created_at', 'updated_at')
    def serialize_dt(self, dt: datetime, _info):
        return _iso(dt)

    @classmethod
    def from_question(cls, question, with_pulse: bool = True) -> "QuestionResponse":
        response = cls.model_validate(question)
        if with_pulse:
            stats = pulse_stats_for(question)
            if stats is not None:
                response.pulse_check_stats = PulseCheckStats(**stats)
        return response

class QuestionSubmitted(BaseModel):
    question: QuestionResponse
    message: str

class QuestionList(BaseModel):
    questions: List[QuestionResponse]
    total: int

class QuestionStatusUpdate(BaseModel):
    status: QuestionStatus

class VoteRequest(BaseModel):
    participant_id: Optional[str] = None

class VoteResponse(BaseModel):
    question_id: str
    vote_count: int
    voted: bool

class PulseCheckRequest(BaseModel):
    participant_id: Optional[str] = None
    feedback: Optional[str] = None

class PulseCheckResponse(BaseModel):
    question_id: str
    feedback: str
    success: bool

class DashboardResponse(BaseModel):
    session: SessionResponse
    questions: List[QuestionResponse]
    total: int
    join_url: str
    qr_code: str
