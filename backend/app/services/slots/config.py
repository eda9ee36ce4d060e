# backend/app/services/slots/config.py
"""
Scheduling configuration snapshot.

The generator never reads the config store itself: callers build a
SchedulingConfig (usually via load_scheduling_config) and pass it in.
"""

import re
from dataclasses import dataclass
from typing import Any

from sqlalchemy.orm import Session

from .errors import InvalidConfig


KEY_BUSINESS_HOURS = "scheduling.businessHours"
KEY_SATURDAY_CUTOFF_HOUR = "scheduling.saturdayCutoffHour"
KEY_MIN_BOOKING_HOURS_AHEAD = "scheduling.minBookingHoursAhead"
KEY_SLOT_DURATION = "scheduling.slotDuration"
KEY_SUNDAY_BOOKINGS = "scheduling.sundayBookings"

DEFAULT_BUSINESS_HOURS = {"start": "09:00", "end": "21:00"}
DEFAULT_SATURDAY_CUTOFF_HOUR = 18
DEFAULT_MIN_BOOKING_HOURS_AHEAD = 6
DEFAULT_SLOT_DURATION = 30  # minutes
DEFAULT_SUNDAY_BOOKINGS = False

SCHEDULING_DEFAULTS: dict[str, Any] = {
    KEY_BUSINESS_HOURS: DEFAULT_BUSINESS_HOURS,
    KEY_SATURDAY_CUTOFF_HOUR: DEFAULT_SATURDAY_CUTOFF_HOUR,
    KEY_MIN_BOOKING_HOURS_AHEAD: DEFAULT_MIN_BOOKING_HOURS_AHEAD,
    KEY_SLOT_DURATION: DEFAULT_SLOT_DURATION,
    KEY_SUNDAY_BOOKINGS: DEFAULT_SUNDAY_BOOKINGS,
}

_TIME_RE = re.compile(r"^(\d{2}):(\d{2})$")


def time_str_to_minutes(value: str) -> int:
    """Convert "HH:MM" to minutes since midnight."""
    hour, minute = value.split(":")
    return int(hour) * 60 + int(minute)


def minutes_to_time_str(total_minutes: int) -> str:
    """Convert minutes since midnight to "HH:MM"."""
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


@dataclass(frozen=True)
class SchedulingConfig:
    """
    Scheduling parameters for one availability computation.

    Attributes:
        business_start: Opening time "HH:MM"
        business_end: Closing time "HH:MM" (a slot may end exactly here)
        saturday_cutoff_hour: Hour after which same-day Saturday booking stops
        min_booking_hours_ahead: Lead time between now and a bookable slot
        slot_duration: Slot length in minutes
        sunday_bookings: Whether Sundays are bookable
    """
    business_start: str = DEFAULT_BUSINESS_HOURS["start"]
    business_end: str = DEFAULT_BUSINESS_HOURS["end"]
    saturday_cutoff_hour: int = DEFAULT_SATURDAY_CUTOFF_HOUR
    min_booking_hours_ahead: int = DEFAULT_MIN_BOOKING_HOURS_AHEAD
    slot_duration: int = DEFAULT_SLOT_DURATION
    sunday_bookings: bool = DEFAULT_SUNDAY_BOOKINGS

    def __post_init__(self):
        """Validate configuration."""
        _check_time(KEY_BUSINESS_HOURS, self.business_start, allow_midnight_end=False)
        _check_time(KEY_BUSINESS_HOURS, self.business_end, allow_midnight_end=True)
        if time_str_to_minutes(self.business_start) >= time_str_to_minutes(self.business_end):
            raise InvalidConfig(
                KEY_BUSINESS_HOURS,
                {"start": self.business_start, "end": self.business_end},
                "start must be before end",
            )
        _check_int(KEY_SATURDAY_CUTOFF_HOUR, self.saturday_cutoff_hour, 0, 24)
        _check_int(KEY_MIN_BOOKING_HOURS_AHEAD, self.min_booking_hours_ahead, 0, None)
        _check_int(KEY_SLOT_DURATION, self.slot_duration, 1, 24 * 60)
        if not isinstance(self.sunday_bookings, bool):
            raise InvalidConfig(KEY_SUNDAY_BOOKINGS, self.sunday_bookings, "expected a boolean")

    @property
    def business_start_minutes(self) -> int:
        return time_str_to_minutes(self.business_start)

    @property
    def business_end_minutes(self) -> int:
        return time_str_to_minutes(self.business_end)

    @classmethod
    def from_values(cls, values: dict[str, Any]) -> "SchedulingConfig":
        """
        Build a snapshot from raw config values keyed by config key.

        Absent keys fall back to the defaults; present but malformed
        values raise InvalidConfig.
        """
        hours = values.get(KEY_BUSINESS_HOURS, DEFAULT_BUSINESS_HOURS)
        if not isinstance(hours, dict) or "start" not in hours or "end" not in hours:
            raise InvalidConfig(KEY_BUSINESS_HOURS, hours, "expected {start, end}")

        return cls(
            business_start=hours["start"],
            business_end=hours["end"],
            saturday_cutoff_hour=_as_int(
                KEY_SATURDAY_CUTOFF_HOUR,
                values.get(KEY_SATURDAY_CUTOFF_HOUR, DEFAULT_SATURDAY_CUTOFF_HOUR),
            ),
            min_booking_hours_ahead=_as_int(
                KEY_MIN_BOOKING_HOURS_AHEAD,
                values.get(KEY_MIN_BOOKING_HOURS_AHEAD, DEFAULT_MIN_BOOKING_HOURS_AHEAD),
            ),
            slot_duration=_as_int(
                KEY_SLOT_DURATION,
                values.get(KEY_SLOT_DURATION, DEFAULT_SLOT_DURATION),
            ),
            sunday_bookings=values.get(KEY_SUNDAY_BOOKINGS, DEFAULT_SUNDAY_BOOKINGS),
        )


def load_scheduling_config(db: Session) -> SchedulingConfig:
    """
    Read the scheduling category from the config store and build a snapshot.

    Read fresh on every call, never cached.
    """
    from ..config_provider import ConfigProvider

    values = ConfigProvider(db).get_category("scheduling")
    return SchedulingConfig.from_values(values)


# ── Validation helpers ───────────────────────────────────────────────────


def _as_int(key: str, value: Any) -> int:
    # JSON numbers may arrive as 30.0
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfig(key, value, "expected an integer")
    return value


def _check_int(key: str, value: Any, low: int, high: int | None) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidConfig(key, value, "expected an integer")
    if value < low or (high is not None and value > high):
        upper = "" if high is None else f"..{high}"
        raise InvalidConfig(key, value, f"out of range {low}{upper}")


def _check_time(key: str, value: Any, allow_midnight_end: bool) -> None:
    match = _TIME_RE.match(value) if isinstance(value, str) else None
    if not match:
        raise InvalidConfig(key, value, "expected HH:MM")
    hour, minute = int(match.group(1)), int(match.group(2))
    if allow_midnight_end and (hour, minute) == (24, 0):
        return
    if hour > 23 or minute > 59:
        raise InvalidConfig(key, value, "expected HH:MM")
