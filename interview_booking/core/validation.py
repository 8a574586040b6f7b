from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator

from interview_booking.core import config


def normalize_email(value: str) -> str:
    return value.strip().lower()


def is_institutional_email(email: str) -> bool:
    return email.endswith(config.ALLOWED_EMAIL_DOMAIN)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp into naive UTC.

    Values without an offset are taken to already be UTC.
    """
    text = value.strip()
    if text.endswith(('Z', 'z')):
        text = text[:-1] + '+00:00'
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _mark_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


UtcDatetime = Annotated[datetime, AfterValidator(_mark_utc)]


def normalize_optional_email(value: str | None) -> str | None:
    if value is None:
        return None
    return normalize_email(value)
