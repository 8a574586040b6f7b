"""Availability slot model definitions."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer

from interview_booking.database import Base, utcnow


class AvailabilitySlot(Base):
    """Represents a window an interviewer has opened for booking."""
    __tablename__ = "availability_slots"

    id = Column(Integer, primary_key=True)
    interviewer_id = Column(Integer, ForeignKey("interviewers.id", ondelete="CASCADE"), nullable=False)
    interview_type_id = Column(Integer, ForeignKey("interview_types.id"), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    is_booked = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
