from datetime import datetime, timezone
from threading import Lock

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker

from interview_booking.core import config


if not config.DATABASE_URL:
    raise RuntimeError("DATABASE_URL must be set.")


def build_engine(database_url: str):
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})

    return create_engine(
        database_url,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=0,
        pool_timeout=config.DB_POOL_TIMEOUT_SECONDS,
        pool_recycle=config.DB_POOL_RECYCLE_SECONDS,
        pool_pre_ping=True,
    )


engine = build_engine(config.DATABASE_URL)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()

_schema_lock = Lock()
_schema_checked = False

SCHEMA_INDEXES = [
    'CREATE INDEX IF NOT EXISTS idx_slots_interviewer_start ON availability_slots(interviewer_id, start_time)',
    'CREATE INDEX IF NOT EXISTS idx_slots_type_booked_start ON availability_slots(interview_type_id, is_booked, start_time)',
    'CREATE INDEX IF NOT EXISTS idx_verification_codes_email ON verification_codes(email)',
    'CREATE INDEX IF NOT EXISTS idx_invites_email ON interviewer_invites(email)',
    'CREATE INDEX IF NOT EXISTS idx_bookings_student_email ON bookings(student_email)',
]


def utcnow() -> datetime:
    """Current time as naive UTC, the form every stored timestamp uses."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def seed_interview_types(db) -> int:
    """Insert the default catalog when no interview types exist yet."""
    from interview_booking.models.interview_type import InterviewType

    if db.query(InterviewType.id).first() is not None:
        return 0

    for name, description in config.DEFAULT_INTERVIEW_TYPES:
        db.add(InterviewType(name=name, description=description))
    db.commit()
    return len(config.DEFAULT_INTERVIEW_TYPES)


def ensure_schema(bind=None) -> None:
    global _schema_checked

    if _schema_checked:
        return

    with _schema_lock:
        if _schema_checked:
            return

        bind = bind or engine
        inspector = inspect(bind)

        if 'availability_slots' not in inspector.get_table_names():
            return

        with bind.begin() as connection:
            for statement in SCHEMA_INDEXES:
                connection.execute(text(statement))

        db = SessionLocal(bind=bind)
        try:
            seed_interview_types(db)
        finally:
            db.close()

        _schema_checked = True
