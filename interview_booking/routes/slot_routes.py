import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from interview_booking.auth.dependencies import TokenPrincipal, require_interviewer, require_student
from interview_booking.core.validation import UtcDatetime, parse_timestamp
from interview_booking.database import get_db, utcnow
from interview_booking.models.availability import AvailabilitySlot
from interview_booking.models.booking import Booking
from interview_booking.models.interview_type import InterviewType
from interview_booking.models.interviewer import Interviewer, InterviewerSpecialty

router = APIRouter(tags=['slots'])

logger = logging.getLogger(__name__)


class CreateSlotRequest(BaseModel):
    start_time: str | None = None
    end_time: str | None = None
    interview_type: str | None = None


class InterviewTypeResponse(BaseModel):
    id: int
    name: str
    description: str | None = None

    class Config:
        from_attributes = True


class InterviewTypeListResponse(BaseModel):
    types: list[InterviewTypeResponse]


class SlotBookingResponse(BaseModel):
    id: int
    student_name: str
    student_email: str


class SlotResponse(BaseModel):
    id: int
    start_time: UtcDatetime
    end_time: UtcDatetime
    is_booked: bool
    created_at: UtcDatetime
    interview_type: str
    booking: SlotBookingResponse | None = None


class SlotListResponse(BaseModel):
    slots: list[SlotResponse]


class CreateSlotResponse(BaseModel):
    message: str
    slot: SlotResponse


class AvailableSlotResponse(BaseModel):
    id: int
    start_time: UtcDatetime
    end_time: UtcDatetime
    interview_type: str
    interviewer_name: str


class AvailableSlotListResponse(BaseModel):
    slots: list[AvailableSlotResponse]


class MessageResponse(BaseModel):
    message: str


def validate_slot_window(start_time: str, end_time: str, now: datetime) -> tuple[datetime, datetime]:
    try:
        start = parse_timestamp(start_time)
        end = parse_timestamp(end_time)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Invalid date format') from exc

    if start >= end:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='End time must be after start time')

    if start <= now:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Cannot create slots in the past')

    return start, end


def find_specialty_type_id(db: Session, interviewer_id: int, interview_type: str) -> int | None:
    row = db.query(InterviewType.id).join(
        InterviewerSpecialty, InterviewerSpecialty.interview_type_id == InterviewType.id,
    ).filter(
        InterviewType.name == interview_type,
        InterviewerSpecialty.interviewer_id == interviewer_id,
    ).first()
    return row.id if row else None


def has_overlapping_slot(db: Session, interviewer_id: int, start: datetime, end: datetime) -> bool:
    # Check-then-insert: two concurrent requests can both pass this check.
    return db.query(AvailabilitySlot.id).filter(
        AvailabilitySlot.interviewer_id == interviewer_id,
        AvailabilitySlot.start_time < end,
        AvailabilitySlot.end_time > start,
    ).first() is not None


@router.get('/types', response_model=InterviewTypeListResponse)
def list_interview_types(db: Session = Depends(get_db)):
    try:
        interview_types = db.query(InterviewType).order_by(InterviewType.name.asc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Get interview types failed')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Failed to get interview types',
        ) from exc

    return InterviewTypeListResponse(
        types=[InterviewTypeResponse.model_validate(interview_type) for interview_type in interview_types]
    )


@router.get('/available', response_model=AvailableSlotListResponse, dependencies=[Depends(require_student)])
def list_available_slots(
    interview_type: str | None = Query(default=None, alias='type'),
    db: Session = Depends(get_db),
):
    if not interview_type or not interview_type.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Interview type is required (e.g., ?type=Technical)',
        )

    try:
        rows = db.query(
            AvailabilitySlot.id,
            AvailabilitySlot.start_time,
            AvailabilitySlot.end_time,
            InterviewType.name.label('interview_type'),
            Interviewer.name.label('interviewer_name'),
        ).join(
            InterviewType, AvailabilitySlot.interview_type_id == InterviewType.id,
        ).join(
            Interviewer, AvailabilitySlot.interviewer_id == Interviewer.id,
        ).filter(
            InterviewType.name == interview_type.strip(),
            AvailabilitySlot.is_booked.is_(False),
            AvailabilitySlot.start_time > utcnow(),
        ).order_by(AvailabilitySlot.start_time.asc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Get available slots failed')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Failed to get available slots',
        ) from exc

    return AvailableSlotListResponse(slots=[AvailableSlotResponse(**row._asdict()) for row in rows])


@router.get('', response_model=SlotListResponse)
def list_my_slots(
    principal: TokenPrincipal = Depends(require_interviewer),
    db: Session = Depends(get_db),
):
    try:
        rows = db.query(AvailabilitySlot, InterviewType.name, Booking).join(
            InterviewType, AvailabilitySlot.interview_type_id == InterviewType.id,
        ).outerjoin(
            Booking,
            (Booking.slot_id == AvailabilitySlot.id) & Booking.cancelled_at.is_(None),
        ).filter(
            AvailabilitySlot.interviewer_id == principal.id,
        ).order_by(AvailabilitySlot.start_time.asc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Get my slots failed')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Failed to get slots',
        ) from exc

    slots = []
    for slot, interview_type, booking in rows:
        slots.append(
            SlotResponse(
                id=slot.id,
                start_time=slot.start_time,
                end_time=slot.end_time,
                is_booked=slot.is_booked,
                created_at=slot.created_at,
                interview_type=interview_type,
                booking=SlotBookingResponse(
                    id=booking.id,
                    student_name=booking.student_name,
                    student_email=booking.student_email,
                ) if booking else None,
            )
        )

    return SlotListResponse(slots=slots)


@router.post('', response_model=CreateSlotResponse, status_code=status.HTTP_201_CREATED)
def create_slot(
    data: CreateSlotRequest,
    principal: TokenPrincipal = Depends(require_interviewer),
    db: Session = Depends(get_db),
):
    if not data.start_time or not data.end_time or not data.interview_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='start_time, end_time, and interview_type are required',
        )

    start, end = validate_slot_window(data.start_time, data.end_time, utcnow())

    try:
        interview_type_id = find_specialty_type_id(db, principal.id, data.interview_type)
        if interview_type_id is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail='You do not have this specialty or it does not exist',
            )

        if has_overlapping_slot(db, principal.id, start, end):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail='This time overlaps with an existing slot',
            )

        slot = AvailabilitySlot(
            interviewer_id=principal.id,
            interview_type_id=interview_type_id,
            start_time=start,
            end_time=end,
            is_booked=False,
        )
        db.add(slot)
        db.commit()
        db.refresh(slot)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Create slot failed')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Failed to create slot',
        ) from exc

    logger.info('Interviewer %s created slot %s (%s - %s)', principal.id, slot.id, start, end)
    return CreateSlotResponse(
        message='Slot created',
        slot=SlotResponse(
            id=slot.id,
            start_time=slot.start_time,
            end_time=slot.end_time,
            is_booked=slot.is_booked,
            created_at=slot.created_at,
            interview_type=data.interview_type,
        ),
    )


@router.delete('/{slot_id}', response_model=MessageResponse)
def delete_slot(
    slot_id: int,
    principal: TokenPrincipal = Depends(require_interviewer),
    db: Session = Depends(get_db),
):
    try:
        # Someone else's slot is reported exactly like a missing one.
        slot = db.query(AvailabilitySlot).filter(
            AvailabilitySlot.id == slot_id,
            AvailabilitySlot.interviewer_id == principal.id,
        ).first()

        if slot is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Slot not found')

        if slot.is_booked:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail='Cannot delete a booked slot. Ask the student to cancel first.',
            )

        db.delete(slot)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Delete slot failed')
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail='Failed to delete slot',
        ) from exc

    logger.info('Interviewer %s deleted slot %s', principal.id, slot_id)
    return MessageResponse(message='Slot deleted')
