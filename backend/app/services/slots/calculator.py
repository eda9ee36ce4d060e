# backend/app/services/slots/calculator.py
"""
Candidate slot generation.

Pure computation: (date, config snapshot, now) → ordered list of slots.

Contains:
✓ business hours
✓ Sunday toggle
✓ same-day Saturday cutoff
✓ minimum lead time (today only, rounded up to the slot grid)

Does NOT contain:
✗ Bookings and blocks (applied by the availability resolver)
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from math import ceil

from .config import SchedulingConfig, minutes_to_time_str

SATURDAY = 5
SUNDAY = 6


@dataclass(frozen=True)
class CandidateSlot:
    start_time: str  # "HH:MM"
    end_time: str


def generate_day_slots(
    target_date: date,
    config: SchedulingConfig,
    now: datetime,
) -> list[CandidateSlot]:
    """
    Generate candidate slots for a date.

    Returns:
        Slots in ascending order. Empty list = nothing bookable that day.
    """
    weekday = target_date.weekday()  # 0 = Monday, 6 = Sunday
    is_today = target_date == now.date()

    # Step 1: Sunday toggle
    if weekday == SUNDAY and not config.sunday_bookings:
        return []

    # Step 2: Saturday cutoff (only meaningful for today)
    if weekday == SATURDAY and is_today and now.hour >= config.saturday_cutoff_hour:
        return []

    # Step 3: Business hours
    start_min = config.business_start_minutes
    end_min = config.business_end_minutes
    step = config.slot_duration

    # Step 4: Lead time for today
    if is_today:
        earliest_min = _earliest_start_minutes(target_date, config, now)
        if earliest_min is None:
            return []
        if earliest_min > start_min:
            start_min = earliest_min

    # Step 5: Emit slots; one that would end after closing is dropped
    slots: list[CandidateSlot] = []
    t = start_min
    while t + step <= end_min:
        slots.append(CandidateSlot(
            start_time=minutes_to_time_str(t),
            end_time=minutes_to_time_str(t + step),
        ))
        t += step

    return slots


def is_valid_booking_date(
    target_date: date,
    config: SchedulingConfig,
    today: date,
) -> bool:
    """Past dates and (unless enabled) Sundays cannot be booked."""
    if target_date < today:
        return False
    if target_date.weekday() == SUNDAY and not config.sunday_bookings:
        return False
    return True


# ── Helpers ──────────────────────────────────────────────────────────────


def _earliest_start_minutes(
    target_date: date,
    config: SchedulingConfig,
    now: datetime,
) -> int | None:
    """
    Earliest bookable start on target_date, in minutes since midnight.

    now + lead time (seconds rounded up to the next minute), minute
    rounded up to a multiple of slot_duration
    with overflow carried into the hour. None if that lands on a later day.
    """
    earliest = now + timedelta(hours=config.min_booking_hours_ahead)
    # Partial minute counts as the next one
    if earliest.second or earliest.microsecond:
        earliest = earliest.replace(second=0, microsecond=0) + timedelta(minutes=1)
    if earliest.date() > target_date:
        return None

    hour = earliest.hour
    minute = earliest.minute
    step = config.slot_duration

    if minute % step != 0:
        minute = ceil(minute / step) * step
        hour += minute // 60
        minute %= 60

    return hour * 60 + minute
