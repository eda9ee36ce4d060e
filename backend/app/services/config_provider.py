# backend/app/services/config_provider.py
"""
Runtime configuration stored in the `configs` table.

Values are JSON-encoded. Scheduling values are validated before they are
written, so the slot generator only sees well-formed settings unless the
table was edited by hand.
"""

import json
import logging
from typing import Any, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models.generated import Configs as DBConfig
from .slots.config import SchedulingConfig
from .slots.errors import InvalidConfig

logger = logging.getLogger(__name__)


class ConfigNotFound(KeyError):
    def __init__(self, key: str):
        self.key = key
        super().__init__(key)


DEFAULT_CONFIGS: list[dict[str, Any]] = [
    # Pricing
    {
        "key": "pricing.oneTimeCleaning",
        "value": 100,
        "type": "number",
        "description": "Price for one-time cleaning service in Baht",
        "category": "pricing",
    },
    {
        "key": "pricing.weeklySubscription",
        "value": 300,
        "type": "number",
        "description": "Price for once a week subscription in Baht per month",
        "category": "pricing",
    },
    {
        "key": "pricing.premiumSubscription",
        "value": 500,
        "type": "number",
        "description": "Price for thrice a week subscription in Baht per month",
        "category": "pricing",
    },
    # Scheduling
    {
        "key": "scheduling.businessHours",
        "value": {"start": "09:00", "end": "21:00"},
        "type": "object",
        "description": "Business hours for cleaning services",
        "category": "scheduling",
    },
    {
        "key": "scheduling.saturdayCutoffHour",
        "value": 18,
        "type": "number",
        "description": "Hour after which same-day bookings are not allowed on Saturday (24-hour format)",
        "category": "scheduling",
    },
    {
        "key": "scheduling.minBookingHoursAhead",
        "value": 6,
        "type": "number",
        "description": "Minimum hours ahead required for a booking",
        "category": "scheduling",
    },
    {
        "key": "scheduling.slotDuration",
        "value": 30,
        "type": "number",
        "description": "Duration of each time slot in minutes",
        "category": "scheduling",
    },
    {
        "key": "scheduling.sundayBookings",
        "value": False,
        "type": "boolean",
        "description": "Whether bookings are allowed on Sundays",
        "category": "scheduling",
    },
    # Booking
    {
        "key": "booking.subscriptionRenewalReminderDays",
        "value": 5,
        "type": "number",
        "description": "Days before subscription end when renewal reminder is sent",
        "category": "booking",
    },
    # System
    {
        "key": "system.emailVerificationRequired",
        "value": True,
        "type": "boolean",
        "description": "Whether email verification is required for new accounts",
        "category": "system",
    },
    {
        "key": "system.otpExpiryMinutes",
        "value": 10,
        "type": "number",
        "description": "OTP expiry time in minutes",
        "category": "system",
    },
    {
        "key": "system.otpRateLimitMinutes",
        "value": 1,
        "type": "number",
        "description": "Rate limit for OTP requests in minutes",
        "category": "system",
    },
]


class ConfigProvider:
    """Key/value access to the configs table."""

    def __init__(self, db: Session):
        self.db = db

    def get_entry(self, key: str) -> Optional[DBConfig]:
        return self.db.query(DBConfig).filter(DBConfig.key == key).first()

    def list_entries(self, category: Optional[str] = None) -> list[DBConfig]:
        query = self.db.query(DBConfig)
        if category:
            return query.filter(DBConfig.category == category).order_by(DBConfig.key).all()
        return query.order_by(DBConfig.category, DBConfig.key).all()

    def get(self, key: str, default: Any = None) -> Any:
        """Decoded value for key, or default when the key is absent."""
        entry = self.get_entry(key)
        if entry is None:
            return default
        return _decode(entry)

    def get_category(self, category: str) -> dict[str, Any]:
        """All values in a category as {key: value}."""
        return {
            entry.key: _decode(entry)
            for entry in self.list_entries(category)
        }

    def update(self, key: str, value: Any, updated_by: Optional[int] = None) -> DBConfig:
        """
        Update an existing entry. Does not commit.

        Raises:
            ConfigNotFound: unknown key
            InvalidConfig: value would make the scheduling snapshot invalid
        """
        entry = self.get_entry(key)
        if entry is None:
            raise ConfigNotFound(key)

        if entry.category == "scheduling":
            # The row being replaced is not decoded, so a corrupt value can be repaired
            values = {
                other.key: _decode(other)
                for other in self.list_entries("scheduling")
                if other.key != key
            }
            values[key] = value
            SchedulingConfig.from_values(values)

        entry.value = json.dumps(value)
        entry.updated_at = func.current_timestamp()
        if updated_by is not None:
            entry.updated_by = updated_by

        self.db.flush()
        self.db.refresh(entry)

        logger.info(f"Config updated: {key}={entry.value} by user={updated_by}")
        return entry

    def init_defaults(self) -> int:
        """
        Insert default entries if the table is empty. Does not commit.

        Returns:
            Number of inserted entries.
        """
        if self.db.query(DBConfig).count() > 0:
            logger.info("Configurations already exist")
            return 0

        for item in DEFAULT_CONFIGS:
            self.db.add(DBConfig(
                key=item["key"],
                value=json.dumps(item["value"]),
                type=item["type"],
                description=item["description"],
                category=item["category"],
            ))
        self.db.flush()

        logger.info(f"{len(DEFAULT_CONFIGS)} default configurations created")
        return len(DEFAULT_CONFIGS)


def _decode(entry: DBConfig) -> Any:
    try:
        return json.loads(entry.value)
    except (json.JSONDecodeError, TypeError):
        raise InvalidConfig(entry.key, entry.value, "not valid JSON")
