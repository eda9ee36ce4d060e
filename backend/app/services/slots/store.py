# backend/app/services/slots/store.py
"""
Reservation store for time slots.

Table: time_slots, unique on (date, start_time).

Every write that can create a record is a single
INSERT ... ON CONFLICT (date, start_time) DO UPDATE ... WHERE <slot is free>
statement, so two concurrent claims cannot both succeed: the loser's
conditional update matches nothing and RETURNING yields no row.

Methods never commit; the caller owns the transaction.
"""

import logging
from datetime import date

from sqlalchemy import and_, delete, func, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from ...models.generated import TimeSlots
from .errors import NotBlocked, SlotConflict, SlotNotFound

logger = logging.getLogger(__name__)

_INSERT_BY_DIALECT = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class TimeSlotStore:
    """Storage wrapper for time_slots."""

    def __init__(self, db: Session):
        self.db = db

    def _insert(self):
        dialect = self.db.get_bind().dialect.name
        try:
            return _INSERT_BY_DIALECT[dialect]
        except KeyError:
            raise RuntimeError(f"Unsupported database dialect for slot upserts: {dialect}")

    # ── Read ─────────────────────────────────────────────────────────────

    def get(self, record_id: int) -> TimeSlots | None:
        return self.db.get(TimeSlots, record_id, populate_existing=True)

    def find_by_date_range(self, day_start: date, day_end: date) -> list[TimeSlots]:
        """All records dated within [day_start, day_end]."""
        return (
            self.db.query(TimeSlots)
            .filter(
                TimeSlots.date >= day_start.isoformat(),
                TimeSlots.date <= day_end.isoformat(),
            )
            .order_by(TimeSlots.date, TimeSlots.start_time)
            .all()
        )

    # ── Write ────────────────────────────────────────────────────────────

    def claim(
        self,
        target_date: date,
        start_time: str,
        end_time: str,
        claimant: int,
        booking_id: int,
    ) -> TimeSlots:
        """
        Mark the slot as booked.

        Raises:
            SlotConflict: slot already booked or blocked
        """
        insert = self._insert()
        stmt = insert(TimeSlots).values(
            date=target_date.isoformat(),
            start_time=start_time,
            end_time=end_time,
            is_blocked=0,
            booked_by=claimant,
            booking_id=booking_id,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["date", "start_time"],
            set_={
                "end_time": stmt.excluded.end_time,
                "booked_by": stmt.excluded.booked_by,
                "booking_id": stmt.excluded.booking_id,
                "updated_at": func.current_timestamp(),
            },
            where=and_(
                TimeSlots.booked_by.is_(None),
                TimeSlots.is_blocked == 0,
            ),
        ).returning(TimeSlots.id)

        row = self.db.execute(stmt).first()
        if row is None:
            logger.warning(
                f"Claim rejected: {target_date} {start_time} "
                f"(booking={booking_id}, claimant={claimant})"
            )
            raise SlotConflict(target_date.isoformat(), start_time, "already booked or blocked")

        logger.info(f"Slot claimed: {target_date} {start_time} by booking={booking_id}")
        return self.get(row.id)

    def block(
        self,
        target_date: date,
        start_time: str,
        end_time: str,
        staff: int | None,
        reason: str | None = None,
    ) -> TimeSlots:
        """
        Put an administrative hold on the slot.

        Re-blocking an already blocked slot updates its reason.

        Raises:
            SlotConflict: slot already booked
        """
        insert = self._insert()
        stmt = insert(TimeSlots).values(
            date=target_date.isoformat(),
            start_time=start_time,
            end_time=end_time,
            is_blocked=1,
            blocked_by=staff,
            block_reason=reason,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["date", "start_time"],
            set_={
                "end_time": stmt.excluded.end_time,
                "is_blocked": 1,
                "blocked_by": stmt.excluded.blocked_by,
                "block_reason": stmt.excluded.block_reason,
                "updated_at": func.current_timestamp(),
            },
            where=TimeSlots.booked_by.is_(None),
        ).returning(TimeSlots.id)

        row = self.db.execute(stmt).first()
        if row is None:
            logger.warning(f"Block rejected: {target_date} {start_time} is already booked")
            raise SlotConflict(target_date.isoformat(), start_time, "already booked")

        logger.info(f"Slot blocked: {target_date} {start_time} by staff={staff}")
        return self.get(row.id)

    def release(self, booking_id: int) -> int:
        """
        Clear the booking from its slot. No-op if nothing matches.

        Returns:
            Number of released records.
        """
        result = self.db.execute(
            update(TimeSlots)
            .where(TimeSlots.booking_id == booking_id)
            .values(
                booked_by=None,
                booking_id=None,
                updated_at=func.current_timestamp(),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount:
            logger.info(f"Slot released for booking={booking_id}")
        return result.rowcount

    def unblock(self, record_id: int) -> TimeSlots:
        """
        Lift an administrative hold.

        Raises:
            SlotNotFound: unknown record
            NotBlocked: record is not blocked
        """
        result = self.db.execute(
            update(TimeSlots)
            .where(TimeSlots.id == record_id, TimeSlots.is_blocked == 1)
            .values(
                is_blocked=0,
                blocked_by=None,
                block_reason=None,
                updated_at=func.current_timestamp(),
            )
            .execution_options(synchronize_session=False)
        )

        record = self.get(record_id)
        if record is None:
            raise SlotNotFound(record_id)
        if result.rowcount == 0:
            raise NotBlocked(record_id)

        logger.info(f"Slot unblocked: id={record_id} ({record.date} {record.start_time})")
        return record

    # ── Delete ───────────────────────────────────────────────────────────

    def purge_free(self, before: date | None = None) -> int:
        """
        Delete records that hold neither a booking nor a block.

        Args:
            before: Only purge records dated before this day, or None for all.

        Returns:
            Number of deleted records.
        """
        stmt = delete(TimeSlots).where(
            TimeSlots.booked_by.is_(None),
            TimeSlots.booking_id.is_(None),
            TimeSlots.is_blocked == 0,
        )
        if before is not None:
            stmt = stmt.where(TimeSlots.date < before.isoformat())

        result = self.db.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount
