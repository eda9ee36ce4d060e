# backend/app/routers/bookings.py
# PATCH = 405, DELETE = 405; cancellation goes through POST /{id}/cancel

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..database import get_db
from ..models.generated import Bookings as DBBookings
from ..schemas.bookings import (
    BookingCancel,
    BookingCreate,
    BookingRead,
)
from ..services.events import emit_event
from ..services.slots import (
    InvalidBookingDate,
    SlotConflict,
    TimeSlotStore,
    reserve_slot,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.get("/", response_model=list[BookingRead])
def list_bookings(
    client_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    query = db.query(DBBookings)
    if client_id is not None:
        query = query.filter(DBBookings.client_id == client_id)
    return query.order_by(DBBookings.date.desc(), DBBookings.start_time.desc()).all()


@router.get("/{id}", response_model=BookingRead)
def get_booking(id: int, db: Session = Depends(get_db)):
    obj = db.get(DBBookings, id)
    if not obj:
        raise HTTPException(status_code=404, detail="Not found")
    return obj


@router.post("/", response_model=BookingRead, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: BookingCreate,
    db: Session = Depends(get_db),
):
    """
    Create a pending booking and reserve its slot.

    Booking row and slot claim are committed together; a lost race
    rolls both back.
    """
    booking = DBBookings(
        client_id=data.client_id,
        date=data.date.isoformat(),
        start_time=data.start_time,
        end_time=data.start_time,  # replaced by the reserved slot's end
        status="pending",
        payment_status="pending",
        notes=data.notes,
    )
    db.add(booking)
    db.flush()

    try:
        slot = reserve_slot(
            db,
            data.date,
            data.start_time,
            claimant=data.client_id,
            booking_id=booking.id,
        )
    except InvalidBookingDate:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid booking date",
        )
    except SlotConflict:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Time slot is not available",
        )

    booking.end_time = slot.end_time
    db.commit()
    db.refresh(booking)

    logger.info(
        f"Booking created: booking_id={booking.id}, client_id={booking.client_id}, "
        f"time={booking.date} {booking.start_time}-{booking.end_time}"
    )

    emit_event("booking_created", {
        "booking_id": booking.id,
        "client_id": booking.client_id,
        "date": booking.date,
        "start_time": booking.start_time,
    })

    return booking


@router.post("/{id}/cancel", response_model=BookingRead)
def cancel_booking(
    id: int,
    data: BookingCancel | None = None,
    db: Session = Depends(get_db),
):
    """Cancel a booking and release its slot."""
    booking = db.get(DBBookings, id)
    if not booking:
        raise HTTPException(status_code=404, detail="Not found")

    if booking.status == "cancelled":
        raise HTTPException(status_code=400, detail="Booking is already cancelled")
    if booking.status == "completed":
        raise HTTPException(status_code=400, detail="Completed bookings cannot be cancelled")

    booking.status = "cancelled"
    booking.cancel_reason = data.reason if data else None
    booking.updated_at = func.current_timestamp()

    released = TimeSlotStore(db).release(booking.id)
    db.commit()
    db.refresh(booking)

    logger.info(f"Booking cancelled: booking_id={booking.id}, released_slots={released}")

    emit_event("booking_cancelled", {
        "booking_id": booking.id,
        "client_id": booking.client_id,
        "date": booking.date,
        "start_time": booking.start_time,
    })

    return booking


@router.patch("/{id}")
def patch_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )


@router.delete("/{id}")
def delete_not_allowed():
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method not allowed",
    )
