"""Booking model definitions."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from interview_booking.database import Base, utcnow


class Booking(Base):
    """A student's reservation of a slot. Cancelling sets cancelled_at."""
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True)
    slot_id = Column(Integer, ForeignKey("availability_slots.id", ondelete="CASCADE"), nullable=False)
    student_email = Column(String, nullable=False)
    student_name = Column(String, nullable=False)
    teams_meeting_url = Column(String)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    cancelled_at = Column(DateTime)
