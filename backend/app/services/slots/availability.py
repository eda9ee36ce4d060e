# backend/app/services/slots/availability.py
"""
Availability resolver.

Composes generated candidate slots with the reservation store:
candidates whose start time is booked or blocked are removed.

Used by the public slots endpoint and by the booking flow, which checks
membership before claiming. Admin blocks are checked against the day's
full grid (no lead time, no Saturday cutoff).
"""

import logging
from datetime import date, datetime, time, timedelta

from sqlalchemy.orm import Session

from ...models.generated import TimeSlots
from .calculator import CandidateSlot, generate_day_slots, is_valid_booking_date
from .config import SchedulingConfig, load_scheduling_config
from .errors import InvalidBookingDate, SlotConflict, SlotNotOnGrid
from .store import TimeSlotStore

logger = logging.getLogger(__name__)


def calculate_available_slots(
    db: Session,
    target_date: date,
    config: SchedulingConfig | None = None,
    now: datetime | None = None,
) -> list[CandidateSlot]:
    """
    Bookable slots for a date, in chronological order.

    Config is read from the store when not given.
    """
    config = config or load_scheduling_config(db)
    now = now or datetime.now()

    # Step 1: candidates
    candidates = generate_day_slots(target_date, config, now)
    if not candidates:
        return []

    # Step 2: stored state for the same day
    records = TimeSlotStore(db).find_by_date_range(target_date, target_date)
    taken = _taken_start_times(records)

    # Step 3: drop taken candidates, order preserved
    return [slot for slot in candidates if slot.start_time not in taken]


def find_available_slot(
    db: Session,
    target_date: date,
    start_time: str,
    config: SchedulingConfig | None = None,
    now: datetime | None = None,
) -> CandidateSlot | None:
    """Return the available slot starting at start_time, or None."""
    for slot in calculate_available_slots(db, target_date, config, now):
        if slot.start_time == start_time:
            return slot
    return None


def reserve_slot(
    db: Session,
    target_date: date,
    start_time: str,
    claimant: int,
    booking_id: int,
    config: SchedulingConfig | None = None,
    now: datetime | None = None,
) -> TimeSlots:
    """
    Validate and claim a slot for a booking.

    The end time is taken from the generated slot, not from the caller.
    Does not commit.

    Raises:
        InvalidBookingDate: date is in the past or a disabled Sunday
        SlotConflict: slot is not offered, or was taken concurrently
    """
    config = config or load_scheduling_config(db)
    now = now or datetime.now()

    if not is_valid_booking_date(target_date, config, now.date()):
        raise InvalidBookingDate(target_date.isoformat())

    slot = find_available_slot(db, target_date, start_time, config, now)
    if slot is None:
        logger.info(f"Slot {target_date} {start_time} not offered for booking={booking_id}")
        raise SlotConflict(target_date.isoformat(), start_time, "not available")

    # The membership check above can race; the claim itself is the guard
    return TimeSlotStore(db).claim(
        target_date,
        slot.start_time,
        slot.end_time,
        claimant,
        booking_id,
    )


def find_grid_slot(
    target_date: date,
    start_time: str,
    config: SchedulingConfig,
) -> CandidateSlot | None:
    """Slot of the day's full grid starting at start_time, or None."""
    # Generated as seen from the previous day, so today-only rules do not apply
    day_before = datetime.combine(target_date - timedelta(days=1), time.min)
    for slot in generate_day_slots(target_date, config, day_before):
        if slot.start_time == start_time:
            return slot
    return None


def block_slot(
    db: Session,
    target_date: date,
    start_time: str,
    staff: int | None,
    reason: str | None = None,
    end_time: str | None = None,
    config: SchedulingConfig | None = None,
) -> TimeSlots:
    """
    Put an administrative hold on a grid slot.

    The end time comes from the grid; a given end_time must match it.
    Does not commit.

    Raises:
        SlotNotOnGrid: start (or end) does not match a generated slot
        SlotConflict: slot is already booked
    """
    config = config or load_scheduling_config(db)

    slot = find_grid_slot(target_date, start_time, config)
    if slot is None or (end_time is not None and end_time != slot.end_time):
        logger.info(f"Block rejected: {target_date} {start_time}-{end_time} is off grid")
        raise SlotNotOnGrid(target_date.isoformat(), start_time, end_time)

    return TimeSlotStore(db).block(
        target_date,
        slot.start_time,
        slot.end_time,
        staff=staff,
        reason=reason,
    )


# ── Helpers ──────────────────────────────────────────────────────────────


def _taken_start_times(records: list[TimeSlots]) -> set[str]:
    """Start times held by a booking or a block."""
    return {
        record.start_time
        for record in records
        if record.is_blocked or record.booked_by is not None
    }
