"""
Free slot sweeper.

Periodically deletes time_slots records that hold neither a booking nor a
block and are dated before today. Such records are left behind by
cancellations and unblocks; they never affect availability.

Runs as an asyncio task in backend lifespan.
Uses synchronous DB (via asyncio.to_thread).
"""

import asyncio
import logging
from datetime import date

from ..config import settings
from ..database import SessionLocal
from .slots.store import TimeSlotStore

logger = logging.getLogger(__name__)


async def slot_sweeper_loop(interval: int | None = None) -> None:
    """Periodic loop purging stale free slot records."""
    interval = interval or settings.sweep_interval_seconds
    logger.info("slot_sweeper_loop started")

    try:
        while True:
            try:
                await asyncio.to_thread(sweep_free_slots)
            except asyncio.CancelledError:
                logger.info("slot_sweeper_loop cancelled")
                raise
            except Exception:
                logger.exception("slot_sweeper_loop error")

            await asyncio.sleep(interval)
    except asyncio.CancelledError:
        pass


def sweep_free_slots(today: date | None = None, session_factory=SessionLocal) -> int:
    """Delete free records dated before today (synchronous)."""
    today = today or date.today()

    db = session_factory()
    try:
        deleted = TimeSlotStore(db).purge_free(before=today)
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

    if deleted:
        logger.info(f"slot_sweeper purged {deleted} free records before {today}")
    return deleted
