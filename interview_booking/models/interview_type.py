"""Interview type catalog."""

from sqlalchemy import Column, Integer, String

from interview_booking.database import Base


class InterviewType(Base):
    __tablename__ = "interview_types"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    description = Column(String)
