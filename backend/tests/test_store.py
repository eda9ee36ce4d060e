"""Tests for the time slot reservation store."""
from datetime import date

import pytest
from sqlalchemy.exc import IntegrityError

from app.models.generated import TimeSlots
from app.services.slots import NotBlocked, SlotConflict, SlotNotFound, TimeSlotStore

DAY = date(2024, 1, 15)


class TestClaim:

    def test_claim_creates_record(self, db, make_booking):
        booking = make_booking()

        record = TimeSlotStore(db).claim(DAY, "09:00", "09:30", claimant=1, booking_id=booking.id)
        db.commit()

        assert record.date == "2024-01-15"
        assert record.start_time == "09:00"
        assert record.end_time == "09:30"
        assert record.booked_by == 1
        assert record.booking_id == booking.id
        assert record.is_blocked == 0

    def test_second_claim_conflicts(self, db, make_booking):
        first = make_booking(client_id=1)
        second = make_booking(client_id=2)
        store = TimeSlotStore(db)
        store.claim(DAY, "09:00", "09:30", claimant=1, booking_id=first.id)
        db.commit()

        with pytest.raises(SlotConflict) as exc:
            store.claim(DAY, "09:00", "09:30", claimant=2, booking_id=second.id)
        db.rollback()

        assert exc.value.start_time == "09:00"
        record = db.query(TimeSlots).one()
        assert record.booked_by == 1
        assert record.booking_id == first.id

    def test_claim_on_blocked_slot_conflicts(self, db, make_booking):
        booking = make_booking(client_id=5)
        store = TimeSlotStore(db)
        store.block(DAY, "09:00", "09:30", staff=99, reason="maintenance")
        db.commit()

        with pytest.raises(SlotConflict):
            store.claim(DAY, "09:00", "09:30", claimant=5, booking_id=booking.id)
        db.rollback()

        record = db.query(TimeSlots).one()
        assert record.is_blocked == 1
        assert record.booked_by is None

    def test_claim_reuses_released_record(self, db, make_booking):
        first = make_booking(client_id=1)
        second = make_booking(client_id=2)
        store = TimeSlotStore(db)
        store.claim(DAY, "10:00", "10:30", claimant=1, booking_id=first.id)
        store.release(first.id)
        db.commit()

        record = store.claim(DAY, "10:00", "10:30", claimant=2, booking_id=second.id)
        db.commit()

        assert db.query(TimeSlots).count() == 1
        assert record.booked_by == 2
        assert record.booking_id == second.id


class TestBlock:

    def test_block_free_slot(self, db):
        record = TimeSlotStore(db).block(DAY, "12:00", "12:30", staff=99, reason="lunch")
        db.commit()

        assert record.is_blocked == 1
        assert record.blocked_by == 99
        assert record.block_reason == "lunch"

    def test_block_booked_slot_conflicts(self, db, make_booking):
        booking = make_booking()
        store = TimeSlotStore(db)
        store.claim(DAY, "09:00", "09:30", claimant=1, booking_id=booking.id)
        db.commit()

        with pytest.raises(SlotConflict):
            store.block(DAY, "09:00", "09:30", staff=99)
        db.rollback()

        record = db.query(TimeSlots).one()
        assert record.is_blocked == 0
        assert record.booked_by == 1

    def test_reblock_updates_reason(self, db):
        store = TimeSlotStore(db)
        first = store.block(DAY, "12:00", "12:30", staff=99, reason="lunch")
        db.commit()

        second = store.block(DAY, "12:00", "12:30", staff=98, reason="cleaning")
        db.commit()

        assert second.id == first.id
        assert second.blocked_by == 98
        assert second.block_reason == "cleaning"
        assert db.query(TimeSlots).count() == 1

    def test_booked_and_blocked_rejected_by_database(self, db, make_booking):
        booking = make_booking()
        db.add(TimeSlots(
            date=DAY.isoformat(),
            start_time="09:00",
            end_time="09:30",
            is_blocked=1,
            booked_by=1,
            booking_id=booking.id,
        ))

        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()


class TestRelease:

    def test_release_frees_slot(self, db, make_booking):
        booking = make_booking()
        store = TimeSlotStore(db)
        record = store.claim(DAY, "09:00", "09:30", claimant=1, booking_id=booking.id)
        db.commit()

        assert store.release(booking.id) == 1
        db.commit()

        record = store.get(record.id)
        assert record.booked_by is None
        assert record.booking_id is None

    def test_release_is_idempotent(self, db, make_booking):
        booking = make_booking()
        store = TimeSlotStore(db)
        store.claim(DAY, "09:00", "09:30", claimant=1, booking_id=booking.id)
        store.release(booking.id)
        db.commit()

        assert store.release(booking.id) == 0

    def test_release_unknown_booking(self, db):
        assert TimeSlotStore(db).release(12345) == 0


class TestUnblock:

    def test_unblock(self, db):
        store = TimeSlotStore(db)
        record = store.block(DAY, "12:00", "12:30", staff=99, reason="lunch")
        db.commit()

        record = store.unblock(record.id)
        db.commit()

        assert record.is_blocked == 0
        assert record.blocked_by is None
        assert record.block_reason is None

    def test_unblock_not_blocked(self, db, make_booking):
        booking = make_booking()
        store = TimeSlotStore(db)
        record = store.claim(DAY, "09:00", "09:30", claimant=1, booking_id=booking.id)
        db.commit()

        with pytest.raises(NotBlocked):
            store.unblock(record.id)

    def test_unblock_unknown_record(self, db):
        with pytest.raises(SlotNotFound):
            TimeSlotStore(db).unblock(404)


class TestQueries:

    def test_find_by_date_range(self, db):
        store = TimeSlotStore(db)
        store.block(date(2024, 1, 14), "09:00", "09:30", staff=1)
        store.block(date(2024, 1, 15), "10:00", "10:30", staff=1)
        store.block(date(2024, 1, 15), "09:00", "09:30", staff=1)
        store.block(date(2024, 1, 17), "09:00", "09:30", staff=1)
        db.commit()

        records = store.find_by_date_range(date(2024, 1, 15), date(2024, 1, 16))

        assert [(r.date, r.start_time) for r in records] == [
            ("2024-01-15", "09:00"),
            ("2024-01-15", "10:00"),
        ]

    def test_purge_free_keeps_booked_and_blocked(self, db, make_booking):
        booking = make_booking()
        store = TimeSlotStore(db)
        store.claim(DAY, "09:00", "09:30", claimant=1, booking_id=booking.id)
        store.block(DAY, "10:00", "10:30", staff=1)
        freed = store.block(DAY, "11:00", "11:30", staff=1)
        store.unblock(freed.id)
        db.commit()

        assert store.purge_free() == 1
        db.commit()

        assert sorted(r.start_time for r in db.query(TimeSlots).all()) == ["09:00", "10:00"]

    def test_purge_free_before_date(self, db):
        store = TimeSlotStore(db)
        old = store.block(date(2024, 1, 10), "09:00", "09:30", staff=1)
        new = store.block(date(2024, 1, 20), "09:00", "09:30", staff=1)
        store.unblock(old.id)
        store.unblock(new.id)
        db.commit()

        assert store.purge_free(before=date(2024, 1, 15)) == 1
        db.commit()

        assert [r.date for r in db.query(TimeSlots).all()] == ["2024-01-20"]
