"""
Pydantic schemas for slots API.
"""

import re
from datetime import date
from typing import Optional
from pydantic import BaseModel, Field, field_validator

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _validate_time(v: str) -> str:
    if not _TIME_RE.match(v):
        raise ValueError("Time must be in HH:MM format")
    return v


class SlotRead(BaseModel):
    """One bookable slot."""
    start_time: str
    end_time: str

    model_config = {"from_attributes": True}


class SlotsDayResponse(BaseModel):
    """Available slots for a day."""
    date: date
    slots: list[SlotRead]

    # Config the slots were generated with
    slot_duration: int
    min_booking_hours_ahead: int

    model_config = {"from_attributes": True}


class TimeSlotRecordRead(BaseModel):
    """Stored slot state (admin view)."""
    id: int
    date: date
    start_time: str
    end_time: str
    is_blocked: bool
    blocked_by: Optional[int] = None
    block_reason: Optional[str] = None
    booked_by: Optional[int] = None
    booking_id: Optional[int] = None

    model_config = {"from_attributes": True}


class SlotBlockRequest(BaseModel):
    date: date
    start_time: str = Field(description="Time in HH:MM format")
    # Derived from the slot grid when omitted; must match it when given
    end_time: Optional[str] = Field(default=None, description="Time in HH:MM format, 24:00 allowed")
    blocked_by: Optional[int] = None
    reason: Optional[str] = None

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v: str) -> str:
        return _validate_time(v)

    @field_validator("end_time")
    @classmethod
    def validate_end_time(cls, v: Optional[str]) -> Optional[str]:
        if v is None or v == "24:00":
            return v
        return _validate_time(v)


class SlotUnblockRequest(BaseModel):
    user_id: Optional[int] = None
