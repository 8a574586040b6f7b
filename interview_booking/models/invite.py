"""Interviewer invite model definitions."""

from sqlalchemy import Column, DateTime, Integer, String

from interview_booking.database import Base, utcnow


class InterviewerInvite(Base):
    """Single-use registration token sent to a prospective interviewer."""
    __tablename__ = "interviewer_invites"

    id = Column(Integer, primary_key=True)
    email = Column(String, nullable=False)
    token = Column(String, unique=True, index=True, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    used_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow, nullable=False)
