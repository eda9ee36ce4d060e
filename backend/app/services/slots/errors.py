# backend/app/services/slots/errors.py
"""
Scheduling errors.

Raised by the store, the resolver and the config snapshot builder.
Routers translate them into HTTP responses.
"""


class SchedulingError(Exception):
    """Base class for scheduling core errors."""


class SlotConflict(SchedulingError):
    """Slot is already booked or blocked."""

    def __init__(self, date: str, start_time: str, reason: str = "unavailable"):
        self.date = date
        self.start_time = start_time
        self.reason = reason
        super().__init__(f"Time slot {date} {start_time} is {reason}")


class NotBlocked(SchedulingError):
    """Unblock requested for a record that is not blocked."""

    def __init__(self, record_id: int):
        self.record_id = record_id
        super().__init__(f"Time slot {record_id} is not blocked")


class SlotNotFound(SchedulingError):
    def __init__(self, record_id: int):
        self.record_id = record_id
        super().__init__(f"Time slot {record_id} not found")


class InvalidConfig(SchedulingError):
    """Scheduling configuration value is malformed."""

    def __init__(self, key: str, value, detail: str):
        self.key = key
        self.value = value
        self.detail = detail
        super().__init__(f"Invalid value for {key}: {value!r} ({detail})")


class InvalidBookingDate(SchedulingError):
    def __init__(self, date: str):
        self.date = date
        super().__init__(f"Invalid booking date: {date}")


class SlotNotOnGrid(SchedulingError):
    """Requested slot does not match the day's generated grid."""

    def __init__(self, date: str, start_time: str, end_time: str | None = None):
        self.date = date
        self.start_time = start_time
        self.end_time = end_time
        span = f"{start_time}-{end_time}" if end_time else start_time
        super().__init__(f"Time slot {date} {span} is not on the schedule grid")
