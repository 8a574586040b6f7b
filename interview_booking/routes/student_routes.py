import logging
import secrets
from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from interview_booking.auth import jwt_handler
from interview_booking.auth.dependencies import TokenPrincipal, require_student
from interview_booking.core import config
from interview_booking.core.validation import UtcDatetime, is_institutional_email, normalize_optional_email
from interview_booking.database import get_db, utcnow
from interview_booking.models.availability import AvailabilitySlot
from interview_booking.models.booking import Booking
from interview_booking.models.interviewer import Interviewer
from interview_booking.models.verification_code import VerificationCode
from interview_booking.services.email import EmailSender, get_email_sender

router = APIRouter(tags=['student'])

logger = logging.getLogger(__name__)

CODE_MIN = 100000
CODE_MAX = 999999


class RequestCodeRequest(BaseModel):
    email: str | None = None

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return normalize_optional_email(value)


class VerifyCodeRequest(BaseModel):
    email: str | None = None
    code: str | None = None

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return normalize_optional_email(value)

    @field_validator('code', mode='before')
    @classmethod
    def normalize_code(cls, value):
        # Clients may send the code as a JSON number.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            return value.strip()
        return value


class MessageResponse(BaseModel):
    message: str


class StudentTokenResponse(BaseModel):
    message: str
    token: str


class ActiveBookingResponse(BaseModel):
    id: int
    student_name: str
    teams_meeting_url: str | None = None
    booked_at: UtcDatetime
    start_time: UtcDatetime
    end_time: UtcDatetime
    interviewer_name: str


class StudentProfileResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    active_booking: ActiveBookingResponse | None = Field(default=None, alias='activeBooking')
    can_book: bool = Field(alias='canBook')


def generate_code() -> str:
    return str(CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1))


@router.post('/request-code', response_model=MessageResponse)
def request_code(
    data: RequestCodeRequest,
    db: Session = Depends(get_db),
    email_sender: EmailSender = Depends(get_email_sender),
):
    if not data.email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Email is required')

    email = data.email
    if not is_institutional_email(email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'Must use a {config.ALLOWED_EMAIL_DOMAIN} email address',
        )

    code = generate_code()

    try:
        now = utcnow()
        # At most one usable code per email: retire every earlier unverified one.
        db.query(VerificationCode).filter(
            VerificationCode.email == email,
            VerificationCode.verified_at.is_(None),
            VerificationCode.expires_at > now,
        ).update({VerificationCode.expires_at: now}, synchronize_session=False)

        db.add(VerificationCode(
            email=email,
            code=code,
            expires_at=now + timedelta(minutes=config.VERIFICATION_CODE_EXPIRES_MINUTES),
        ))
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Request code failed')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Failed to send verification code',
        ) from exc

    try:
        delivered = email_sender.send_verification_code(email, code)
    except Exception as exc:
        logger.exception('Sending verification code to %s failed', email)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Failed to send verification code',
        ) from exc

    if not delivered:
        logger.warning('Email sender reported failure delivering code to %s', email)

    return MessageResponse(message='Verification code sent to your email')


@router.post('/verify-code', response_model=StudentTokenResponse)
def verify_code(data: VerifyCodeRequest, db: Session = Depends(get_db)):
    if not data.email or not data.code:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Email and code are required')

    email = data.email
    code = data.code

    try:
        now = utcnow()
        verification = db.query(VerificationCode).filter(
            VerificationCode.email == email,
            VerificationCode.code == code,
            VerificationCode.expires_at > now,
            VerificationCode.verified_at.is_(None),
        ).first()

        if verification is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Invalid or expired code')

        # Guarded on verified_at so a concurrent request cannot redeem the same code.
        marked = db.query(VerificationCode).filter(
            VerificationCode.id == verification.id,
            VerificationCode.verified_at.is_(None),
        ).update({VerificationCode.verified_at: now}, synchronize_session=False)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Verify code failed')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Failed to verify code',
        ) from exc

    if marked != 1:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Invalid or expired code')

    return StudentTokenResponse(message='Email verified', token=jwt_handler.create_student_token(email))


@router.get('/me', response_model=StudentProfileResponse)
def me(
    principal: TokenPrincipal = Depends(require_student),
    db: Session = Depends(get_db),
):
    try:
        row = db.query(
            Booking.id,
            Booking.student_name,
            Booking.teams_meeting_url,
            Booking.created_at.label('booked_at'),
            AvailabilitySlot.start_time,
            AvailabilitySlot.end_time,
            Interviewer.name.label('interviewer_name'),
        ).join(
            AvailabilitySlot, Booking.slot_id == AvailabilitySlot.id,
        ).join(
            Interviewer, AvailabilitySlot.interviewer_id == Interviewer.id,
        ).filter(
            Booking.student_email == principal.email,
            Booking.cancelled_at.is_(None),
            AvailabilitySlot.start_time > utcnow(),
        ).order_by(AvailabilitySlot.start_time.asc()).first()
    except SQLAlchemyError as exc:
        logger.exception('Get student profile failed')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Failed to get student info',
        ) from exc

    active_booking = ActiveBookingResponse(**row._asdict()) if row else None
    return StudentProfileResponse(
        email=principal.email,
        active_booking=active_booking,
        can_book=active_booking is None,
    )
