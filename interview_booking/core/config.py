import os

from dotenv import load_dotenv


load_dotenv()


def _get_int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    return int(value)


def _get_list(value: str | None, default: list[str]) -> list[str]:
    if value is None:
        return default
    return [item.strip() for item in value.split(",") if item.strip()]

APP_ENV = os.getenv("APP_ENV", "development")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
PORT = _get_int(os.getenv("PORT"), 3001)

DATABASE_URL = os.getenv("DATABASE_URL")
DB_POOL_SIZE = _get_int(os.getenv("DB_POOL_SIZE"), 10)
DB_POOL_TIMEOUT_SECONDS = _get_int(os.getenv("DB_POOL_TIMEOUT_SECONDS"), 5)
DB_POOL_RECYCLE_SECONDS = _get_int(os.getenv("DB_POOL_RECYCLE_SECONDS"), 30)

JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
STUDENT_TOKEN_EXPIRES_MINUTES = 60
INTERVIEWER_TOKEN_EXPIRES_MINUTES = 7 * 24 * 60

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173").rstrip("/")
CORS_ORIGINS = _get_list(os.getenv("CORS_ORIGINS"), [FRONTEND_URL])

ALLOWED_EMAIL_DOMAIN = os.getenv("ALLOWED_EMAIL_DOMAIN", "@dal.ca").lower()

VERIFICATION_CODE_EXPIRES_MINUTES = 10
INVITE_EXPIRES_DAYS = 7
MIN_PASSWORD_LENGTH = 8
MAX_PASSWORD_BYTES = 72
BCRYPT_ROUNDS = 10

DEFAULT_INTERVIEW_TYPES = [
    ("Technical", "Coding and problem solving practice interview."),
    ("Behavioral", "Situational and behavioural questions."),
    ("Resume Review", "One-on-one walkthrough of your resume."),
]


def validate_runtime_config() -> None:
    missing = [
        name
        for name, value in (("DATABASE_URL", DATABASE_URL), ("JWT_SECRET_KEY", JWT_SECRET_KEY))
        if not value
    ]
    if missing:
        raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")
