"""Student email verification codes."""

from sqlalchemy import Column, DateTime, Integer, String

from interview_booking.database import Base, utcnow


class VerificationCode(Base):
    """A six digit code mailed to a student; usable once before expires_at."""
    __tablename__ = "verification_codes"

    id = Column(Integer, primary_key=True)
    email = Column(String, nullable=False)
    code = Column(String(6), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    verified_at = Column(DateTime)
    created_at = Column(DateTime, default=utcnow, nullable=False)
