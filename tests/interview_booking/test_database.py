from interview_booking.core import config
from interview_booking.database import seed_interview_types
from interview_booking.models.interview_type import InterviewType


def test_seed_interview_types_leaves_existing_catalog_alone(db_session) -> None:
    assert seed_interview_types(db_session) == 0
    assert db_session.query(InterviewType).count() == 3


def test_seed_interview_types_fills_empty_catalog(db_session) -> None:
    db_session.query(InterviewType).delete()
    db_session.commit()

    inserted = seed_interview_types(db_session)

    assert inserted == len(config.DEFAULT_INTERVIEW_TYPES)
    names = {interview_type.name for interview_type in db_session.query(InterviewType).all()}
    assert names == {name for name, _ in config.DEFAULT_INTERVIEW_TYPES}
