import os
from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')
os.environ.setdefault('JWT_SECRET_KEY', 'interview-booking-test-secret-0123456789abcdef')

from interview_booking.auth import jwt_handler  # noqa: E402
from interview_booking.auth.passwords import hash_password  # noqa: E402
from interview_booking.database import Base, get_db, utcnow  # noqa: E402
from interview_booking.main import app  # noqa: E402
from interview_booking.models.availability import AvailabilitySlot  # noqa: E402
from interview_booking.models.booking import Booking  # noqa: E402
from interview_booking.models.interview_type import InterviewType  # noqa: E402
from interview_booking.models.interviewer import Interviewer, InterviewerSpecialty  # noqa: E402
from interview_booking.services.email import get_email_sender  # noqa: E402


class CapturingEmailSender:
    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    def send_verification_code(self, email: str, code: str) -> bool:
        self.sent.append((email, code))
        return True

    def last_code_for(self, email: str) -> str:
        return [code for sent_to, code in self.sent if sent_to == email][-1]


@pytest.fixture
def db_session():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    db = testing_session_local()
    try:
        for name, description in [
            ('Technical', 'Coding interview'),
            ('Behavioral', 'Situational questions'),
            ('Resume Review', 'Resume walkthrough'),
        ]:
            db.add(InterviewType(name=name, description=description))
        db.commit()
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def email_sender():
    return CapturingEmailSender()


@pytest.fixture
def client(db_session, email_sender):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_interviewer(db_session):
    def _make_interviewer(email='interviewer@dal.ca', name='Ada Lovelace', specialties=('Technical',), password='correct-horse'):
        interviewer = Interviewer(email=email, name=name, password_hash=hash_password(password))
        db_session.add(interviewer)
        db_session.flush()
        for interview_type in db_session.query(InterviewType).filter(InterviewType.name.in_(specialties)).all():
            db_session.add(InterviewerSpecialty(interviewer_id=interviewer.id, interview_type_id=interview_type.id))
        db_session.commit()
        db_session.refresh(interviewer)
        return interviewer

    return _make_interviewer


@pytest.fixture
def make_slot(db_session):
    def _make_slot(interviewer, start, duration_minutes=60, type_name='Technical', is_booked=False):
        interview_type = db_session.query(InterviewType).filter(InterviewType.name == type_name).one()
        slot = AvailabilitySlot(
            interviewer_id=interviewer.id,
            interview_type_id=interview_type.id,
            start_time=start,
            end_time=start + timedelta(minutes=duration_minutes),
            is_booked=is_booked,
        )
        db_session.add(slot)
        db_session.commit()
        db_session.refresh(slot)
        return slot

    return _make_slot


@pytest.fixture
def make_booking(db_session):
    def _make_booking(slot, student_email='student@dal.ca', student_name='Grace Hopper', cancelled=False):
        slot.is_booked = not cancelled
        booking = Booking(
            slot_id=slot.id,
            student_email=student_email,
            student_name=student_name,
            teams_meeting_url='https://teams.example.com/meet/1',
            cancelled_at=utcnow() if cancelled else None,
        )
        db_session.add(booking)
        db_session.commit()
        db_session.refresh(booking)
        return booking

    return _make_booking


@pytest.fixture
def interviewer_headers():
    def _interviewer_headers(interviewer) -> dict:
        return {'Authorization': f'Bearer {jwt_handler.create_interviewer_token(interviewer.id, interviewer.email)}'}

    return _interviewer_headers


@pytest.fixture
def student_headers():
    def _student_headers(email='student@dal.ca') -> dict:
        return {'Authorization': f'Bearer {jwt_handler.create_student_token(email)}'}

    return _student_headers
