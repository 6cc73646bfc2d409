import enum

from sqlalchemy import Column, String, Integer, DateTime, Boolean, ForeignKey, Text, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from database import Base
import utils


class QuestionStatus(str, enum.Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DISMISSED = "dismissed"
    BEING_ANSWERED = "being_answered"
    ANSWERED = "answered"


class PulseFeedback(str, enum.Enum):
    HELPFUL = "helpful"
    NEUTRAL = "neutral"
    NOT_HELPFUL = "not_helpful"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class QASession(Base):
    __tablename__ = "qa_sessions"

    id = Column(String, primary_key=True, default=utils.generate_uuid)
    code = Column(String(6), unique=True, index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    organizer_token = Column(String, nullable=False)
    created_at = Column(DateTime, default=utils.get_utc_now)
    updated_at = Column(DateTime, default=utils.get_utc_now, onupdate=utils.get_utc_now)
    expires_at = Column(DateTime, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_accepting_questions = Column(Boolean, default=True, nullable=False)

    questions = relationship("Question", back_populates="session", cascade="all, delete-orphan", passive_deletes=True)


class Question(Base):
    __tablename__ = "questions"

    id = Column(String, primary_key=True, default=utils.generate_uuid)
    session_id = Column(String, ForeignKey("qa_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    participant_id = Column(String, nullable=True)
    author_name = Column(String, nullable=True)
    content = Column(Text, nullable=False)
    vote_count = Column(Integer, default=0, nullable=False)
    status = Column(
        Enum(QuestionStatus, name="question_status", values_callable=_enum_values),
        default=QuestionStatus.PENDING,
        nullable=False,
    )
    is_anonymous = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=utils.get_utc_now)
    updated_at = Column(DateTime, default=utils.get_utc_now, onupdate=utils.get_utc_now)

    session = relationship("QASession", back_populates="questions")
    votes = relationship("Vote", back_populates="question", cascade="all, delete-orphan", passive_deletes=True)
    pulse_feedback = relationship("PulseCheckFeedback", back_populates="question", cascade="all, delete-orphan", passive_deletes=True)


class Vote(Base):
    __tablename__ = "votes"
    __table_args__ = (UniqueConstraint("question_id", "participant_id", name="uq_vote_question_participant"),)

    id = Column(String, primary_key=True, default=utils.generate_uuid)
    question_id = Column(String, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    participant_id = Column(String, nullable=False)  # client-generated UUID v4
    created_at = Column(DateTime, default=utils.get_utc_now)

    question = relationship("Question", back_populates="votes")


class PulseCheckFeedback(Base):
    __tablename__ = "pulse_check_feedback"
    __table_args__ = (UniqueConstraint("question_id", "participant_id", name="uq_pulse_question_participant"),)

    id = Column(String, primary_key=True, default=utils.generate_uuid)
    question_id = Column(String, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False)
    participant_id = Column(String, nullable=False)
    feedback = Column(Enum(PulseFeedback, name="pulse_feedback", values_callable=_enum_values), nullable=False)
    created_at = Column(DateTime, default=utils.get_utc_now)

    question = relationship("Question", back_populates="pulse_feedback")
