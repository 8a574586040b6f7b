"""Interviewer model definitions."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from interview_booking.database import Base, utcnow


class Interviewer(Base):
    """Represents a registered interviewer account."""
    __tablename__ = "interviewers"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    specialties = relationship(
        "InterviewType",
        secondary="interviewer_specialties",
        order_by="InterviewType.name",
        viewonly=True,
    )


class InterviewerSpecialty(Base):
    """Interview types an interviewer is allowed to offer slots for."""
    __tablename__ = "interviewer_specialties"

    interviewer_id = Column(Integer, ForeignKey("interviewers.id", ondelete="CASCADE"), primary_key=True)
    interview_type_id = Column(Integer, ForeignKey("interview_types.id", ondelete="CASCADE"), primary_key=True)
