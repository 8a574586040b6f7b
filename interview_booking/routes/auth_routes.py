import logging
import uuid
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from interview_booking.auth import jwt_handler
from interview_booking.auth.dependencies import TokenPrincipal, require_interviewer
from interview_booking.auth.passwords import hash_password, verify_password
from interview_booking.core import config
from interview_booking.core.validation import UtcDatetime, is_institutional_email, normalize_optional_email
from interview_booking.database import get_db, utcnow
from interview_booking.models.interview_type import InterviewType
from interview_booking.models.interviewer import Interviewer, InterviewerSpecialty
from interview_booking.models.invite import InterviewerInvite

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)


class CreateInviteRequest(BaseModel):
    email: str | None = None

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return normalize_optional_email(value)


class RegisterRequest(BaseModel):
    token: str | None = None
    name: str | None = None
    password: str | None = None
    specialties: list[str] | None = None


class LoginRequest(BaseModel):
    email: str | None = None
    password: str | None = None

    @field_validator('email')
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        return normalize_optional_email(value)


class InviteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    invite_link: str = Field(alias='inviteLink')
    expires_at: UtcDatetime = Field(alias='expiresAt')


class TokenResponse(BaseModel):
    message: str
    token: str


class SpecialtyResponse(BaseModel):
    name: str
    description: str | None = None

    class Config:
        from_attributes = True


class InterviewerProfileResponse(BaseModel):
    id: int
    email: str
    name: str
    created_at: UtcDatetime
    specialties: list[SpecialtyResponse]

    class Config:
        from_attributes = True


def build_invite_link(token: str) -> str:
    return f'{config.FRONTEND_URL}/register?token={token}'


def find_live_invite(db: Session, email: str, now: datetime) -> InterviewerInvite | None:
    return db.query(InterviewerInvite).filter(
        InterviewerInvite.email == email,
        InterviewerInvite.used_at.is_(None),
        InterviewerInvite.expires_at > now,
    ).first()


# WARNING: this administrator route is not authenticated. Anyone who can reach
# the API can mint interviewer invites for addresses in the allowed domain.
# Put it behind an admin credential before exposing the service publicly.
@router.post('/invite', response_model=InviteResponse, status_code=status.HTTP_201_CREATED)
def create_invite(data: CreateInviteRequest, db: Session = Depends(get_db)):
    if not data.email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Email is required')

    email = data.email
    if not is_institutional_email(email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'Must use a {config.ALLOWED_EMAIL_DOMAIN} email address',
        )

    logger.warning('Unauthenticated invite request for %s', email)

    try:
        existing = db.query(Interviewer.id).filter(Interviewer.email == email).first()
        if existing:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Interviewer already registered')

        now = utcnow()
        if find_live_invite(db, email, now):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Invite already sent to this email')

        invite = InterviewerInvite(
            email=email,
            token=str(uuid.uuid4()),
            expires_at=now + timedelta(days=config.INVITE_EXPIRES_DAYS),
        )
        db.add(invite)
        db.commit()
        db.refresh(invite)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Create invite failed')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Failed to create invite',
        ) from exc

    logger.info('Created interviewer invite for %s', email)
    return InviteResponse(
        message='Invite created',
        invite_link=build_invite_link(invite.token),
        expires_at=invite.expires_at,
    )


@router.post('/register', response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    if not data.token or not data.name or not data.name.strip() or not data.password or data.specialties is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Token, name, password, and specialties are required',
        )

    if len(data.specialties) == 0:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='At least one specialty is required')

    if len(data.password) < config.MIN_PASSWORD_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'Password must be at least {config.MIN_PASSWORD_LENGTH} characters',
        )

    if len(data.password.encode('utf-8')) > config.MAX_PASSWORD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'Password must be at most {config.MAX_PASSWORD_BYTES} bytes',
        )

    requested = list(dict.fromkeys(data.specialties))

    # Everything below shares one transaction; any failure leaves no
    # interviewer, no specialty rows and an unused invite.
    try:
        invite = db.query(InterviewerInvite).filter(
            InterviewerInvite.token == data.token,
            InterviewerInvite.used_at.is_(None),
            InterviewerInvite.expires_at > utcnow(),
        ).with_for_update().first()

        if invite is None:
            db.rollback()
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Invalid or expired invite')

        interview_types = db.query(InterviewType).filter(InterviewType.name.in_(requested)).all()
        if len(interview_types) != len(requested):
            db.rollback()
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Invalid specialty provided')

        interviewer = Interviewer(
            email=invite.email,
            name=data.name.strip(),
            password_hash=hash_password(data.password),
        )
        db.add(interviewer)
        db.flush()

        for interview_type in interview_types:
            db.add(InterviewerSpecialty(interviewer_id=interviewer.id, interview_type_id=interview_type.id))

        invite.used_at = utcnow()
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Register failed')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Failed to register',
        ) from exc

    logger.info('Registered interviewer %s (id=%s)', interviewer.email, interviewer.id)
    return TokenResponse(
        message='Registration successful',
        token=jwt_handler.create_interviewer_token(interviewer.id, interviewer.email),
    )


@router.post('/login', response_model=TokenResponse)
def login(data: LoginRequest, db: Session = Depends(get_db)):
    if not data.email or not data.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Email and password are required')

    email = data.email

    try:
        interviewer = db.query(Interviewer).filter(Interviewer.email == email).first()
    except SQLAlchemyError as exc:
        logger.exception('Login failed')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Failed to login',
        ) from exc

    if interviewer is None or not verify_password(data.password, interviewer.password_hash):
        logger.info('Rejected login for %s', email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid email or password')

    return TokenResponse(
        message='Login successful',
        token=jwt_handler.create_interviewer_token(interviewer.id, interviewer.email),
    )


@router.get('/me', response_model=InterviewerProfileResponse)
def me(
    principal: TokenPrincipal = Depends(require_interviewer),
    db: Session = Depends(get_db),
):
    try:
        interviewer = db.query(Interviewer).filter(Interviewer.id == principal.id).first()
        if interviewer is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Interviewer not found')

        return InterviewerProfileResponse.model_validate(interviewer)
    except SQLAlchemyError as exc:
        logger.exception('Get interviewer profile failed')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Failed to get profile',
        ) from exc
