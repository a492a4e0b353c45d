import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import contains_eager

from models.appointment import Appointment
from models.slot import Slot
from services.errors import StoreError
from services.validation import UNSET, AppointmentUpdate
from utils.emailer import normalize_email

logger = logging.getLogger(__name__)


class AppointmentStore:
    """Appointment records, always read joined with the slot they hold."""

    def __init__(self, session):
        self.session = session

    def _query(self):
        return (
            self.session.query(Appointment)
            .join(Slot, Appointment.slot_id == Slot.id)
            .options(contains_eager(Appointment.slot))
        )

    def _ordered(self, q) -> List[Appointment]:
        return q.order_by(Slot.scheduled_at.asc()).all()

    def get(self, appointment_id: str) -> Optional[Appointment]:
        return self.session.get(Appointment, appointment_id)

    def list_all(self) -> List[Appointment]:
        return self._ordered(self._query())

    def list_by_email(self, email: str) -> List[Appointment]:
        return self._ordered(
            self._query().filter(func.lower(Appointment.client_email) == normalize_email(email))
        )

    def list_by_date_range(self, start: datetime, end: datetime) -> List[Appointment]:
        return self._ordered(
            self._query().filter(Slot.scheduled_at >= start, Slot.scheduled_at <= end)
        )

    def find_by_confirmation_code(self, code: str) -> Optional[Appointment]:
        code = (code or "").strip().upper()
        if not code:
            return None
        return self._query().filter(Appointment.confirmation_code == code).first()

    def code_exists(self, code: str) -> bool:
        return (
            self.session.query(Appointment.id)
            .filter(Appointment.confirmation_code == code)
            .first()
            is not None
        )

    def update(self, appointment_id: str, cmd: AppointmentUpdate) -> Optional[Appointment]:
        """Only status and notes change after creation."""
        appointment = self.get(appointment_id)
        if not appointment:
            return None
        if cmd.status is not UNSET:
            appointment.status = cmd.status
        if cmd.notes is not UNSET:
            appointment.notes = cmd.notes
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Appointment update failed id=%s", appointment_id)
            raise StoreError("Failed to update appointment") from exc
        return appointment
