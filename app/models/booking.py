"""Booking model: one chair, one slot, one Friday, one patient."""

from datetime import date

from sqlalchemy import Date, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base, TimestampMixin

# Name of the constraint guarding the (date, slot, chair) triple. The
# repository matches on it to tell double-bookings apart from other
# integrity failures.
BOOKING_TRIPLE_CONSTRAINT = "uq_bookings_booking_date_slot_chair"


class Booking(Base, TimestampMixin):
    """A reservation of a chair for a time slot on a clinic day.

    Only ``patient_name`` and ``patient_email`` may change after creation;
    the (booking_date, slot_index, chair) triple is fixed for the lifetime
    of the row.
    """

    __tablename__ = "bookings"
    __table_args__ = (
        UniqueConstraint(
            "booking_date",
            "slot_index",
            "chair",
            name=BOOKING_TRIPLE_CONSTRAINT,
        ),
    )

    booking_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        index=True,
    )
    slot_index: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    # Start time as shown to patients, e.g. "15:55"
    time_slot: Mapped[str] = mapped_column(
        String(5),
        nullable=False,
    )
    chair: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    patient_name: Mapped[str] = mapped_column(
        String(150),
        nullable=False,
    )
    patient_email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    # Admin who entered the booking; null for self-service bookings
    created_by: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("admin_users.id", ondelete="SET NULL"),
        nullable=True,
    )

    @property
    def triple(self) -> tuple[date, int, str]:
        """The (date, slot, chair) key protected by the unique constraint."""
        return (self.booking_date, self.slot_index, self.chair)

    def __repr__(self) -> str:
        return f"<Booking {self.id} {self.booking_date} #{self.slot_index} {self.chair}>"
