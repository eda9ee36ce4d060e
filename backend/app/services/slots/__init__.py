# backend/app/services/slots/__init__.py
"""
Time slot scheduling.

Generator: candidate slots from the config snapshot (pure)
Store: booked/blocked records, atomic claim-if-free
Resolver: candidates minus stored records
"""

from .config import SchedulingConfig, load_scheduling_config
from .calculator import CandidateSlot, generate_day_slots, is_valid_booking_date
from .store import TimeSlotStore
from .availability import (
    block_slot,
    calculate_available_slots,
    find_available_slot,
    find_grid_slot,
    reserve_slot,
)
from .errors import (
    InvalidBookingDate,
    InvalidConfig,
    NotBlocked,
    SchedulingError,
    SlotConflict,
    SlotNotFound,
    SlotNotOnGrid,
)

__all__ = [
    "SchedulingConfig",
    "load_scheduling_config",
    "CandidateSlot",
    "generate_day_slots",
    "is_valid_booking_date",
    "TimeSlotStore",
    "calculate_available_slots",
    "find_available_slot",
    "reserve_slot",
    "find_grid_slot",
    "block_slot",
    "SchedulingError",
    "SlotConflict",
    "NotBlocked",
    "SlotNotFound",
    "SlotNotOnGrid",
    "InvalidConfig",
    "InvalidBookingDate",
]
