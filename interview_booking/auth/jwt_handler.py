from datetime import datetime, timedelta, timezone

import jwt

from interview_booking.core import config

STUDENT_ROLE = "student"
INTERVIEWER_ROLE = "interviewer"


def create_access_token(claims: dict, expires_minutes: int) -> str:
    issued_at = datetime.now(timezone.utc)
    payload = {**claims, "iat": issued_at, "exp": issued_at + timedelta(minutes=expires_minutes)}
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def create_student_token(email: str) -> str:
    return create_access_token(
        {"email": email, "type": STUDENT_ROLE},
        config.STUDENT_TOKEN_EXPIRES_MINUTES,
    )


def create_interviewer_token(interviewer_id: int, email: str) -> str:
    return create_access_token(
        {"id": interviewer_id, "email": email, "type": INTERVIEWER_ROLE},
        config.INTERVIEWER_TOKEN_EXPIRES_MINUTES,
    )


def decode_access_token(token: str) -> dict:
    return jwt.decode(
        token,
        config.JWT_SECRET_KEY,
        algorithms=[config.JWT_ALGORITHM],
        options={"require": ["exp"]},
    )
