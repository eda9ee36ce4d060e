"""Concurrent claims on the same slot: exactly one may win."""
import threading
from datetime import date

from app.models.generated import Bookings, TimeSlots
from app.services.slots import SlotConflict, TimeSlotStore

DAY = date(2024, 1, 15)
WORKERS = 8


def _create_bookings(session_factory, count):
    db = session_factory()
    try:
        bookings = [
            Bookings(
                client_id=client_id,
                date=DAY.isoformat(),
                start_time="14:00",
                end_time="14:30",
                status="pending",
                payment_status="pending",
            )
            for client_id in range(1, count + 1)
        ]
        db.add_all(bookings)
        db.commit()
        return [(b.client_id, b.id) for b in bookings]
    finally:
        db.close()


def test_only_one_concurrent_claim_succeeds(session_factory, db):
    claims = _create_bookings(session_factory, WORKERS)
    barrier = threading.Barrier(WORKERS)
    winners = []
    conflicts = []
    errors = []
    lock = threading.Lock()

    def worker(client_id, booking_id):
        session = session_factory()
        try:
            barrier.wait()
            try:
                TimeSlotStore(session).claim(DAY, "14:00", "14:30", client_id, booking_id)
                session.commit()
                with lock:
                    winners.append(booking_id)
            except SlotConflict:
                session.rollback()
                with lock:
                    conflicts.append(booking_id)
        except Exception as e:
            session.rollback()
            with lock:
                errors.append(e)
        finally:
            session.close()

    threads = [threading.Thread(target=worker, args=claim) for claim in claims]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(winners) == 1
    assert len(conflicts) == WORKERS - 1

    records = db.query(TimeSlots).filter(TimeSlots.start_time == "14:00").all()
    assert len(records) == 1
    assert records[0].booking_id == winners[0]
