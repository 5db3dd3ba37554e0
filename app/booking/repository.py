"""Booking storage contract and its SQLAlchemy implementation.

The store is the single source of truth and the only place where the
one-booking-per-triple rule is made authoritative: ``insert`` issues a
single INSERT against a table carrying a unique constraint on
(booking_date, slot_index, chair) and reports a lost race as
``ConflictError``.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Protocol, Sequence

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.booking.errors import ConflictError, StorageError
from app.models.booking import BOOKING_TRIPLE_CONSTRAINT, Booking

logger = logging.getLogger(__name__)

_TRIPLE_COLUMNS = ("booking_date", "slot_index", "chair")


@dataclass(frozen=True)
class BookingFilter:
    """Optional AND-ed selectors for listing bookings."""

    booking_date: date | None = None
    email: str | None = None
    booking_id: int | None = None


class BookingRepository(Protocol):
    """Storage operations the booking service depends on."""

    async def find_conflict(
        self, booking_date: date, slot_index: int, chair: str
    ) -> Booking | None: ...

    async def insert(self, booking: Booking) -> int: ...

    async def find(self, filters: BookingFilter) -> Sequence[Booking]: ...

    async def find_by_date(self, booking_date: date) -> Sequence[Booking]: ...

    async def find_by_email(self, email: str) -> Sequence[Booking]: ...

    async def find_by_id(self, booking_id: int) -> Booking | None: ...

    async def count_by_date(self, booking_date: date) -> int: ...

    async def update(self, booking_id: int, patient_name: str, patient_email: str) -> bool: ...

    async def delete_by_id(self, booking_id: int) -> int: ...

    async def delete_by_email(self, email: str) -> int: ...


def is_triple_violation(exc: IntegrityError) -> bool:
    """Check if an integrity error comes from the (date, slot, chair) constraint.

    PostgreSQL and MySQL name the constraint in the message; SQLite lists
    the offending columns instead.
    """
    message = str(exc.orig) if exc.orig is not None else str(exc)
    if BOOKING_TRIPLE_CONSTRAINT in message:
        return True
    return "UNIQUE constraint failed" in message and all(
        f"bookings.{column}" in message for column in _TRIPLE_COLUMNS
    )


class SQLAlchemyBookingRepository:
    """Booking repository backed by an async SQLAlchemy session.

    All statements are SQLAlchemy expressions, so caller values are always
    sent as bound parameters.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def find_conflict(
        self, booking_date: date, slot_index: int, chair: str
    ) -> Booking | None:
        """Return the booking already holding the triple, if any."""
        query = select(Booking).where(
            Booking.booking_date == booking_date,
            Booking.slot_index == slot_index,
            Booking.chair == chair,
        )
        rows = await self._all(query)
        return rows[0] if rows else None

    async def insert(self, booking: Booking) -> int:
        """Persist a new booking and return its generated id.

        Raises:
            ConflictError: If the triple was claimed by a concurrent insert
            StorageError: For any other database failure
        """
        self.session.add(booking)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            if is_triple_violation(e):
                booking_date, slot_index, chair = booking.triple
                logger.info(
                    f"Concurrent insert lost the race for {booking_date} "
                    f"slot={slot_index} chair={chair}"
                )
                raise ConflictError("This slot and chair are already booked") from e
            logger.exception("Integrity error inserting booking")
            raise StorageError("Could not save the booking") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Database error inserting booking")
            raise StorageError("Could not save the booking") from e

        await self.session.refresh(booking)
        return booking.id

    async def find(self, filters: BookingFilter) -> Sequence[Booking]:
        """List bookings matching all given selectors."""
        query = select(Booking)

        if filters.booking_date is not None:
            query = query.where(Booking.booking_date == filters.booking_date)
        if filters.email:
            query = query.where(func.lower(Booking.patient_email) == filters.email.lower())
        if filters.booking_id is not None:
            query = query.where(Booking.id == filters.booking_id)

        query = query.order_by(Booking.booking_date, Booking.slot_index, Booking.chair)

        return await self._all(query)

    async def find_by_date(self, booking_date: date) -> Sequence[Booking]:
        return await self.find(BookingFilter(booking_date=booking_date))

    async def find_by_email(self, email: str) -> Sequence[Booking]:
        return await self.find(BookingFilter(email=email))

    async def find_by_id(self, booking_id: int) -> Booking | None:
        try:
            result = await self.session.execute(
                select(Booking).where(Booking.id == booking_id)
            )
        except SQLAlchemyError as e:
            logger.exception("Database error loading booking")
            raise StorageError("Could not load the booking") from e
        return result.scalar_one_or_none()

    async def count_by_date(self, booking_date: date) -> int:
        """Number of occupied (slot, chair) pairs on a date."""
        try:
            result = await self.session.execute(
                select(func.count(Booking.id)).where(Booking.booking_date == booking_date)
            )
        except SQLAlchemyError as e:
            logger.exception("Database error counting bookings")
            raise StorageError("Could not load bookings") from e
        return result.scalar_one()

    async def update(self, booking_id: int, patient_name: str, patient_email: str) -> bool:
        """Change the patient details of a booking.

        Returns:
            True if a row was changed
        """
        booking = await self.find_by_id(booking_id)
        if booking is None:
            return False

        booking.patient_name = patient_name
        booking.patient_email = patient_email
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Database error updating booking")
            raise StorageError("Could not update the booking") from e

        await self.session.refresh(booking)
        return True

    async def delete_by_id(self, booking_id: int) -> int:
        """Remove one booking. Returns the number of rows removed (0 or 1)."""
        booking = await self.find_by_id(booking_id)
        if booking is None:
            return 0
        return await self._delete([booking])

    async def delete_by_email(self, email: str) -> int:
        """Remove every booking held by an email (case-insensitive)."""
        bookings = await self.find_by_email(email)
        if not bookings:
            return 0
        return await self._delete(bookings)

    async def _all(self, query) -> Sequence[Booking]:
        try:
            result = await self.session.execute(query)
        except SQLAlchemyError as e:
            logger.exception("Database error listing bookings")
            raise StorageError("Could not load bookings") from e
        return result.scalars().all()

    async def _delete(self, bookings: Sequence[Booking]) -> int:
        try:
            for booking in bookings:
                await self.session.delete(booking)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.exception("Database error deleting bookings")
            raise StorageError("Could not delete the booking") from e
        return len(bookings)
