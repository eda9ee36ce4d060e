# backend/app/schemas/bookings.py

import re
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class BookingCreate(BaseModel):
    client_id: int
    date: date
    start_time: str = Field(description="Time in HH:MM format")

    notes: Optional[str] = None

    @field_validator("start_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        """Validate time format."""
        if not re.match(r"^([01]\d|2[0-3]):[0-5]\d$", v):
            raise ValueError("Time must be in HH:MM format")
        return v

    model_config = {"from_attributes": True}


class BookingCancel(BaseModel):
    reason: Optional[str] = None


class BookingRead(BaseModel):
    id: int
    client_id: int

    date: date
    start_time: str
    end_time: str

    status: str
    payment_status: str
    notes: Optional[str] = None
    cancel_reason: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
