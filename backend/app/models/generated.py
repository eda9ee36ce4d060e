from sqlalchemy import CheckConstraint, Column, ForeignKey, Index, Integer, Text, UniqueConstraint, text

from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()
metadata = Base.metadata


class Configs(Base):
    __tablename__ = 'configs'

    key = Column(Text, nullable=False, unique=True)
    value = Column(Text, nullable=False)  # JSON-encoded
    type = Column(Text, nullable=False)
    description = Column(Text, nullable=False)
    category = Column(Text, nullable=False)
    id = Column(Integer, primary_key=True)
    updated_by = Column(Integer)
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))

    __table_args__ = (
        CheckConstraint(
            "type IN ('string', 'number', 'boolean', 'object', 'array')",
            name='ck_configs_type',
        ),
        CheckConstraint(
            "category IN ('pricing', 'scheduling', 'booking', 'system')",
            name='ck_configs_category',
        ),
        Index('ix_configs_category', 'category'),
    )


class Bookings(Base):
    __tablename__ = 'bookings'

    client_id = Column(Integer, nullable=False)
    date = Column(Text, nullable=False)  # YYYY-MM-DD
    start_time = Column(Text, nullable=False)  # HH:MM
    end_time = Column(Text, nullable=False)
    status = Column(Text, nullable=False, server_default=text("'pending'"))
    payment_status = Column(Text, nullable=False, server_default=text("'pending'"))
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    id = Column(Integer, primary_key=True)
    notes = Column(Text)
    cancel_reason = Column(Text)

    time_slot = relationship('TimeSlots', uselist=False, back_populates='booking')

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'completed', 'cancelled')",
            name='ck_bookings_status',
        ),
        CheckConstraint(
            "payment_status IN ('pending', 'completed', 'refunded')",
            name='ck_bookings_payment_status',
        ),
        Index('ix_bookings_client_id', 'client_id'),
    )


class TimeSlots(Base):
    __tablename__ = 'time_slots'

    date = Column(Text, nullable=False)  # YYYY-MM-DD
    start_time = Column(Text, nullable=False)  # HH:MM
    end_time = Column(Text, nullable=False)
    is_blocked = Column(Integer, nullable=False, server_default=text('0'))
    created_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    updated_at = Column(Text, nullable=False, server_default=text('CURRENT_TIMESTAMP'))
    id = Column(Integer, primary_key=True)
    blocked_by = Column(Integer)
    block_reason = Column(Text)
    booked_by = Column(Integer)
    booking_id = Column(ForeignKey('bookings.id', ondelete='SET NULL'))

    booking = relationship('Bookings', back_populates='time_slot')

    # One record per (date, start_time): the only guard against double booking
    __table_args__ = (
        UniqueConstraint('date', 'start_time', name='uq_time_slots_date_start'),
        CheckConstraint(
            'NOT (is_blocked = 1 AND booked_by IS NOT NULL)',
            name='ck_time_slots_blocked_or_booked',
        ),
        Index('ix_time_slots_booking_id', 'booking_id'),
    )


class AuditLog(Base):
    __tablename__ = 'audit_log'

    id = Column(Integer, primary_key=True)
    event_type = Column(Text, nullable=False)

    actor_user_id = Column(Integer)
    target_user_id = Column(Integer)

    payload = Column(Text)
    created_at = Column(
        Text,
        nullable=False,
        server_default=text('CURRENT_TIMESTAMP')
    )
