"""
Booking coordinator.

The only place where slots and appointments change together. A booking is
one transaction: the slot is claimed with a conditional UPDATE on its
availability flag (compare-and-swap), then the appointment row is inserted.
A request that loses the race sees a zero row count, or trips the unique
constraint on appointments.slot_id, and is reported as SlotUnavailableError.
"""
import logging
import secrets
import string
from functools import partial
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Tuple

from flask import current_app
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.appointment import Appointment
from models.slot import Slot
from services.appointments import AppointmentStore
from services.errors import ConflictError, NotFoundError, SlotUnavailableError, StoreError
from services.slots import SlotStore
from services.validation import BookingRequest

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits

Notifier = Callable[[Appointment], Tuple[bool, Optional[str]]]


def generate_confirmation_code(length: int = 6) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def _holds_slot(exc: IntegrityError) -> bool:
    """True when the violation is uq_appointment_slot_once rather than the code constraint."""
    message = str(exc.orig)
    return "uq_appointment_slot_once" in message or "appointments.slot_id" in message


def _default_notifier() -> Optional[Notifier]:
    if not current_app.config.get("NOTIFY_ON_BOOKING", True):
        return None
    from utils.emailer import send_booking_confirmation
    return send_booking_confirmation


def _default_audit(session):
    from utils.audit import log_event
    return partial(log_event, session=session)


class BookingCoordinator:
    def __init__(
        self,
        session,
        slots: SlotStore = None,
        appointments: AppointmentStore = None,
        notifier: Notifier = None,
        audit=None,
        code_length: int = None,
        code_attempts: int = None,
    ):
        self.session = session
        self.slots = slots or SlotStore(session)
        self.appointments = appointments or AppointmentStore(session)
        self.notifier = notifier if notifier is not None else _default_notifier()
        self.audit = audit if audit is not None else _default_audit(session)
        self.code_length = code_length or current_app.config.get("CONFIRMATION_CODE_LENGTH", 6)
        self.code_attempts = code_attempts or current_app.config.get("CONFIRMATION_CODE_MAX_ATTEMPTS", 5)

    # ---------- booking ----------

    def _claim_slot(self, scheduled_at: datetime, service: str) -> Optional[Slot]:
        candidates = (
            self.session.query(Slot.id)
            .filter(
                Slot.scheduled_at == scheduled_at,
                Slot.service == service,
                Slot.is_available.is_(True),
            )
            .order_by(Slot.created_at.asc())
            .all()
        )
        for (slot_id,) in candidates:
            result = self.session.execute(
                update(Slot)
                .where(Slot.id == slot_id, Slot.is_available.is_(True))
                .values(is_available=False)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 1:
                return self.session.get(Slot, slot_id, populate_existing=True)
            logger.info("Lost slot claim race slot_id=%s", slot_id)
        return None

    def _new_code(self) -> str:
        for _ in range(self.code_attempts):
            code = generate_confirmation_code(self.code_length)
            if not self.appointments.code_exists(code):
                return code
        raise ConflictError("Could not generate a unique confirmation code")

    def create_booking(self, req: BookingRequest) -> Appointment:
        try:
            slot = self._claim_slot(req.scheduled_at, req.service)
            if slot is None:
                self.session.rollback()
                raise SlotUnavailableError("Slot is no longer available")

            appointment = Appointment(
                slot_id=slot.id,
                client_name=req.client_name,
                client_email=req.client_email,
                client_phone=req.client_phone,
                client_company=req.client_company,
                notes=req.notes,
                status=req.status,
                confirmation_code=self._new_code(),
            )
            self.session.add(appointment)
            self.session.commit()
        except ConflictError:
            self.session.rollback()
            raise
        except IntegrityError as exc:
            self.session.rollback()
            if _holds_slot(exc):
                raise SlotUnavailableError("Slot is no longer available") from exc
            logger.warning("Confirmation code taken at commit: %s", exc.orig)
            raise ConflictError("Confirmation code already in use, please retry") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Booking failed at %s (%s)", req.scheduled_at, req.service)
            raise StoreError("Failed to create appointment") from exc

        logger.info("Booked slot_id=%s code=%s", appointment.slot_id, appointment.confirmation_code)
        self.notify(appointment)
        return appointment

    def notify(self, appointment: Appointment) -> Tuple[bool, Optional[str]]:
        """Send the confirmation. Never raises: booking does not depend on it."""
        if self.notifier is None:
            return False, "Notifications disabled"
        try:
            ok, error = self.notifier(appointment)
        except Exception as exc:  # notifier is an external collaborator
            ok, error = False, str(exc)
        if not ok:
            logger.warning("Confirmation not sent for appointment %s: %s", appointment.id, error)
        try:
            self.audit(
                "BOOKING_NOTIFY",
                entity="appointment",
                entity_id=appointment.id,
                metadata={"sent": ok, "error": error},
            )
        except SQLAlchemyError:
            self.session.rollback()
            logger.exception("Could not record notification outcome for %s", appointment.id)
        return ok, error

    # ---------- cancellation ----------

    def cancel_booking(self, appointment_id: str) -> bool:
        appointment = self.appointments.get(appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found")

        slot = appointment.slot
        slot_id = appointment.slot_id
        try:
            self.session.delete(appointment)
            if slot is not None:
                slot.is_available = True
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Cancel failed for appointment %s", appointment_id)
            raise StoreError("Failed to cancel appointment") from exc

        logger.info("Cancelled appointment %s, released slot_id=%s", appointment_id, slot_id)
        return True

    # ---------- admin ----------

    def block_slots(self, slot_ids: Iterable[str]) -> int:
        return self.slots.block(slot_ids)

    def create_week(self, start_date, pairs) -> List[Slot]:
        return self.slots.bulk_create_week(start_date, pairs)
