"""Booking service: the only component allowed to change bookings.

Create requests go through presence checks, date parsing, the clinic-day
rule, slot/chair/email validation and a conflict pre-check before the
insert. The pre-check only gives a friendly early answer; the unique
constraint behind ``BookingRepository.insert`` is what actually prevents
double-booking when two requests race.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Sequence

from app.booking.actor import ActorContext
from app.booking.errors import (
    AuthorizationError,
    BusinessRuleError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from app.booking.policy import (
    is_allowed_email,
    is_bookable_date,
    is_designated_weekday,
    is_valid_chair,
    is_valid_slot_index,
    is_valid_time_slot,
)
from app.booking.repository import BookingFilter, BookingRepository
from app.booking.schedule import ScheduleConfig
from app.booking.slots import Slot, generate_slots, slot_at
from app.models.audit_event import AuditAction
from app.models.booking import Booking
from app.schemas.booking import BookingCreate
from app.services.audit import AuditRecorder
from app.utils.time import Clock

logger = logging.getLogger(__name__)

# Order in which missing fields are reported
REQUIRED_FIELDS = (
    "booking_date",
    "slot_index",
    "time_slot",
    "chair",
    "patient_name",
    "patient_email",
)


@dataclass
class AvailabilitySummary:
    """Capacity of a date, recomputed on every read."""

    booking_date: date
    is_bookable: bool
    total_capacity: int
    occupied: int
    available: int


@dataclass
class ChairStatus:
    chair: str
    booked: bool
    booking_id: int | None = None
    patient_name: str | None = None


@dataclass
class SlotAvailability:
    """Occupancy of every chair in one slot."""

    index: int
    start_time: str
    end_time: str
    chairs: list[ChairStatus] = field(default_factory=list)

    @property
    def available_chairs(self) -> int:
        return sum(1 for c in self.chairs if not c.booked)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def parse_booking_date(value: date | str) -> date:
    """Parse a strict ``YYYY-MM-DD`` calendar date.

    Raises:
        ValidationError: If the value is not a real calendar date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            parsed = datetime.strptime(text, "%Y-%m-%d").date()
        except ValueError:
            parsed = None
        if parsed is not None and parsed.isoformat() == text:
            return parsed
    raise ValidationError("Invalid date, expected YYYY-MM-DD", fields=["booking_date"])


def booking_snapshot(booking: Booking) -> dict[str, Any]:
    """JSON-safe view of a booking for the audit log."""
    return {
        "booking_date": booking.booking_date.isoformat(),
        "slot_index": booking.slot_index,
        "time_slot": booking.time_slot,
        "chair": booking.chair,
        "patient_name": booking.patient_name,
        "patient_email": booking.patient_email,
    }


class BookingService:
    """Validates and applies every booking change.

    Collaborators are passed in explicitly: a repository bound to the
    caller's session, the static schedule, a clock giving today's date in
    the clinic timezone and an optional audit recorder.
    """

    def __init__(
        self,
        repository: BookingRepository,
        config: ScheduleConfig,
        clock: Clock,
        audit: AuditRecorder | None = None,
    ) -> None:
        self.repository = repository
        self.config = config
        self.clock = clock
        self.audit = audit
        self.slots: list[Slot] = generate_slots(config)

    # --- Create ---

    async def create_booking(self, request: BookingCreate, actor: ActorContext) -> int:
        """Create a booking and return its id.

        Raises:
            ValidationError: Missing fields, malformed date, bad slot, chair or email
            BusinessRuleError: Not the clinic weekday, or a past date
            ConflictError: The slot and chair are already taken
        """
        missing = [name for name in REQUIRED_FIELDS if _is_blank(getattr(request, name))]
        if missing:
            raise ValidationError(f"Missing fields: {', '.join(missing)}", fields=missing)

        booking_date = parse_booking_date(request.booking_date)

        today = self.clock.today()
        if not is_bookable_date(booking_date, today, self.config):
            if not is_designated_weekday(booking_date, self.config):
                raise BusinessRuleError(
                    f"Bookings are only available on {self.config.weekday_name}s"
                )
            raise BusinessRuleError("Bookings cannot be made for past dates")

        slot_index = request.slot_index
        if not is_valid_slot_index(slot_index, self.config):
            raise ValidationError(
                f"Invalid slot index, expected 0 to {len(self.slots) - 1}",
                fields=["slot_index"],
            )
        slot = slot_at(self.config, slot_index)

        time_slot = request.time_slot.strip()
        if not is_valid_time_slot(slot_index, time_slot, self.config):
            raise ValidationError(
                f"Time slot {time_slot} does not match slot {slot_index} "
                f"({slot.label})",
                fields=["time_slot"],
            )

        chair = request.chair.strip()
        if not is_valid_chair(chair, self.config):
            raise ValidationError(
                f"Invalid chair, expected one of: {', '.join(self.config.chairs)}",
                fields=["chair"],
            )

        patient_email = request.patient_email.strip()
        if not is_allowed_email(patient_email, self.config):
            raise ValidationError(self._email_message(), fields=["patient_email"])

        existing = await self.repository.find_conflict(booking_date, slot_index, chair)
        if existing is not None:
            raise ConflictError("This slot and chair are already booked")

        booking = Booking(
            booking_date=booking_date,
            slot_index=slot_index,
            time_slot=slot.label,
            chair=chair,
            patient_name=request.patient_name.strip(),
            patient_email=patient_email,
            created_by=actor.actor_id if actor.is_privileged else None,
        )
        booking_id = await self.repository.insert(booking)

        logger.info(
            f"Booking {booking_id} created for {booking_date} slot={slot_index} chair={chair}",
            extra={"booking_id": booking_id, "action": "create"},
        )
        await self._audit(
            AuditAction.CREATE, booking_id, actor, new_values=booking_snapshot(booking)
        )
        return booking_id

    # --- Read ---

    async def list_bookings(
        self,
        booking_date: date | None = None,
        email: str | None = None,
        booking_id: int | None = None,
    ) -> Sequence[Booking]:
        """List bookings matching every given selector, in calendar order."""
        filters = BookingFilter(
            booking_date=booking_date,
            email=email.strip() if email else None,
            booking_id=booking_id,
        )
        return await self.repository.find(filters)

    async def get_booking(self, booking_id: int) -> Booking:
        """Get a single booking.

        Raises:
            NotFoundError: If no booking has this id
        """
        booking = await self.repository.find_by_id(booking_id)
        if booking is None:
            raise NotFoundError("Booking not found")
        return booking

    # --- Update ---

    async def update_booking(
        self,
        booking_id: int,
        patient_name: str | None,
        patient_email: str | None,
        actor: ActorContext,
    ) -> bool:
        """Change the patient name and email of a booking (admin only).

        Raises:
            AuthorizationError: If the caller is not an admin
            ValidationError: Blank name or email, or email not allowed
            NotFoundError: If no booking has this id
        """
        if not actor.is_privileged:
            raise AuthorizationError("Admin session required")

        missing = [
            name
            for name, value in (("patient_name", patient_name), ("patient_email", patient_email))
            if _is_blank(value)
        ]
        if missing:
            raise ValidationError(f"Missing fields: {', '.join(missing)}", fields=missing)

        patient_name = patient_name.strip()
        patient_email = patient_email.strip()
        if not is_allowed_email(patient_email, self.config):
            raise ValidationError(self._email_message(), fields=["patient_email"])

        existing = await self.repository.find_by_id(booking_id)
        if existing is None:
            raise NotFoundError("Booking not found")
        old_values = {
            "patient_name": existing.patient_name,
            "patient_email": existing.patient_email,
        }

        changed = await self.repository.update(booking_id, patient_name, patient_email)
        if not changed:
            # Deleted between the lookup and the update
            raise NotFoundError("Booking not found")

        logger.info(
            f"Booking {booking_id} updated",
            extra={"booking_id": booking_id, "action": "update", "actor_id": actor.actor_id},
        )
        await self._audit(
            AuditAction.UPDATE,
            booking_id,
            actor,
            old_values=old_values,
            new_values={"patient_name": patient_name, "patient_email": patient_email},
        )
        return True

    # --- Delete ---

    async def delete_booking(
        self,
        actor: ActorContext,
        booking_id: int | None = None,
        email: str | None = None,
    ) -> int:
        """Delete by id (admin) or every booking of an email (self-service).

        When both selectors are given the id wins.

        Returns:
            Number of bookings removed

        Raises:
            ValidationError: No selector, or an email that is not allowed
            AuthorizationError: Delete by id without an admin session
            NotFoundError: Nothing matched the selector
        """
        if booking_id is not None:
            return await self._delete_by_id(booking_id, actor)

        if not _is_blank(email):
            return await self._delete_by_email(email.strip(), actor)

        raise ValidationError("Provide a booking id or an email", fields=["id", "email"])

    async def _delete_by_id(self, booking_id: int, actor: ActorContext) -> int:
        if not actor.is_privileged:
            raise AuthorizationError("Admin session required")

        existing = await self.repository.find_by_id(booking_id)
        snapshot = booking_snapshot(existing) if existing is not None else None

        removed = await self.repository.delete_by_id(booking_id)
        if removed == 0:
            raise NotFoundError("Booking not found")

        logger.info(
            f"Booking {booking_id} deleted by admin",
            extra={"booking_id": booking_id, "action": "delete", "actor_id": actor.actor_id},
        )
        await self._audit(AuditAction.DELETE, booking_id, actor, old_values=snapshot)
        return removed

    async def _delete_by_email(self, email: str, actor: ActorContext) -> int:
        if not is_allowed_email(email, self.config):
            raise ValidationError(self._email_message(), fields=["email"])

        bookings = await self.repository.find_by_email(email)
        snapshots = [(b.id, booking_snapshot(b)) for b in bookings]

        removed = await self.repository.delete_by_email(email)
        if removed == 0:
            raise NotFoundError("No bookings found for this email")

        logger.info(f"Deleted {removed} booking(s) by patient email", extra={"action": "delete"})
        for removed_id, snapshot in snapshots:
            await self._audit(AuditAction.DELETE, removed_id, actor, old_values=snapshot)
        return removed

    # --- Availability ---

    @property
    def total_capacity(self) -> int:
        """Bookable (slot, chair) pairs per clinic day."""
        return len(self.slots) * len(self.config.chairs)

    async def get_availability(self, booking_date: date) -> AvailabilitySummary:
        """Capacity summary for a date.

        ``available = slots x chairs - bookings on that date``; nothing is
        stored, so the figure always reflects the current bookings.
        """
        occupied = await self.repository.count_by_date(booking_date)
        return AvailabilitySummary(
            booking_date=booking_date,
            is_bookable=is_bookable_date(booking_date, self.clock.today(), self.config),
            total_capacity=self.total_capacity,
            occupied=occupied,
            available=max(self.total_capacity - occupied, 0),
        )

    async def get_day_schedule(
        self, booking_date: date, actor: ActorContext
    ) -> list[SlotAvailability]:
        """Grid of every slot and chair for a date.

        Booking ids and patient names are only included for admins.
        """
        bookings = await self.repository.find_by_date(booking_date)
        taken = {(b.slot_index, b.chair): b for b in bookings}

        grid = []
        for slot in self.slots:
            row = SlotAvailability(
                index=slot.index,
                start_time=slot.label,
                end_time=slot.end_time.strftime("%H:%M"),
            )
            for chair in self.config.chairs:
                booking = taken.get((slot.index, chair))
                status = ChairStatus(chair=chair, booked=booking is not None)
                if booking is not None and actor.is_privileged:
                    status.booking_id = booking.id
                    status.patient_name = booking.patient_name
                row.chairs.append(status)
            grid.append(row)
        return grid

    # --- Helpers ---

    def _email_message(self) -> str:
        domains = " or ".join(f"@{d}" for d in sorted(self.config.allowed_email_domains))
        return f"Invalid email, it must end in {domains}"

    async def _audit(
        self,
        action: AuditAction,
        booking_id: int | None,
        actor: ActorContext,
        old_values: dict[str, Any] | None = None,
        new_values: dict[str, Any] | None = None,
    ) -> None:
        if self.audit is None:
            return
        await self.audit.record(
            action=action,
            entity_type="booking",
            entity_id=booking_id,
            actor=actor,
            old_values=old_values,
            new_values=new_values,
        )
