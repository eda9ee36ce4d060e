# backend/app/routers/slots.py
"""
Slots API endpoints.

Public: GET /slots/day - Bookable slots for a date
Admin:  GET /slots - Stored slot records for a date
        POST /slots/block - Block a grid slot
        PUT /slots/{id}/unblock - Lift a block
"""

import logging
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.slots import (
    SlotBlockRequest,
    SlotsDayResponse,
    SlotRead,
    SlotUnblockRequest,
    TimeSlotRecordRead,
)
from ..services.audit import record_audit
from ..services.slots import (
    NotBlocked,
    SlotConflict,
    SlotNotFound,
    SlotNotOnGrid,
    TimeSlotStore,
    block_slot,
    calculate_available_slots,
    is_valid_booking_date,
    load_scheduling_config,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/slots", tags=["slots"])


@router.get("/day", response_model=SlotsDayResponse)
def get_slots_day(
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Get bookable time slots for a date."""
    config = load_scheduling_config(db)
    now = datetime.now()

    if not is_valid_booking_date(target_date, config, now.date()):
        raise HTTPException(status_code=400, detail="Invalid booking date")

    slots = calculate_available_slots(db, target_date, config, now)

    return SlotsDayResponse(
        date=target_date,
        slots=[SlotRead.model_validate(slot) for slot in slots],
        slot_duration=config.slot_duration,
        min_booking_hours_ahead=config.min_booking_hours_ahead,
    )


@router.get("/", response_model=list[TimeSlotRecordRead])
def list_time_slots(
    target_date: date = Query(..., alias="date"),
    db: Session = Depends(get_db),
):
    """Get stored (booked or blocked) slot records for a date (admin)."""
    return TimeSlotStore(db).find_by_date_range(target_date, target_date)


@router.post("/block", response_model=TimeSlotRecordRead)
def block_time_slot(
    data: SlotBlockRequest,
    db: Session = Depends(get_db),
):
    """Block a grid slot so customers cannot book it (admin)."""
    try:
        record = block_slot(
            db,
            data.date,
            data.start_time,
            staff=data.blocked_by,
            reason=data.reason,
            end_time=data.end_time,
        )
    except SlotNotOnGrid:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Time slot is not on the schedule grid",
        )
    except SlotConflict:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Time slot is already booked",
        )

    record_audit(
        db,
        "block_time_slot",
        actor_user_id=data.blocked_by,
        payload=TimeSlotRecordRead.model_validate(record).model_dump(mode="json"),
    )
    db.commit()
    db.refresh(record)
    return record


@router.put("/{id}/unblock", response_model=TimeSlotRecordRead)
def unblock_time_slot(
    id: int,
    data: SlotUnblockRequest | None = None,
    db: Session = Depends(get_db),
):
    """Lift an administrative block (admin)."""
    actor_id = data.user_id if data else None
    store = TimeSlotStore(db)

    previous = store.get(id)
    previous_state = (
        TimeSlotRecordRead.model_validate(previous).model_dump(mode="json")
        if previous else None
    )

    try:
        record = store.unblock(id)
    except SlotNotFound:
        db.rollback()
        raise HTTPException(status_code=404, detail="Time slot not found")
    except NotBlocked:
        db.rollback()
        raise HTTPException(status_code=400, detail="Time slot is not blocked")

    record_audit(
        db,
        "unblock_time_slot",
        actor_user_id=actor_id,
        payload={
            "previous_state": previous_state,
            "new_state": TimeSlotRecordRead.model_validate(record).model_dump(mode="json"),
        },
    )
    db.commit()
    db.refresh(record)
    return record
