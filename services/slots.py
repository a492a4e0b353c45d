import logging
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Tuple

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from models.appointment import Appointment
from models.slot import Slot
from services.errors import ConflictError, StoreError
from services.validation import UNSET, SlotUpdate
from utils.dates import day_bounds, get_zone, local_to_utc

logger = logging.getLogger(__name__)


class SlotStore:
    """Slots and their availability flag, over an injected SQLAlchemy session."""

    def __init__(self, session, enforce_unique: bool = None, zone=None):
        self.session = session
        self._enforce_unique = enforce_unique
        self._zone = zone

    @property
    def enforce_unique(self) -> bool:
        if self._enforce_unique is not None:
            return self._enforce_unique
        return bool(current_app.config.get("ENFORCE_UNIQUE_SLOTS", False))

    @property
    def zone(self):
        return self._zone or get_zone()

    def _query(self):
        return self.session.query(Slot)

    def _commit(self):
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Slot store commit failed")
            raise StoreError("Failed to save slots") from exc

    def get(self, slot_id: str) -> Optional[Slot]:
        return self.session.get(Slot, slot_id)

    def list_all(self) -> List[Slot]:
        return self._query().order_by(Slot.scheduled_at.asc()).all()

    def list_by_date(self, day: date) -> List[Slot]:
        start, end = day_bounds(day, self.zone)
        return (
            self._query()
            .filter(Slot.scheduled_at >= start, Slot.scheduled_at <= end)
            .order_by(Slot.scheduled_at.asc())
            .all()
        )

    def _exists(self, scheduled_at: datetime, service: str) -> bool:
        return (
            self._query()
            .filter(Slot.scheduled_at == scheduled_at, Slot.service == service)
            .first()
            is not None
        )

    def _new(self, scheduled_at: datetime, service: str) -> Slot:
        if self.enforce_unique and self._exists(scheduled_at, service):
            raise ConflictError("Slot already exists for that time and service")
        slot = Slot(scheduled_at=scheduled_at, service=service, is_available=True)
        self.session.add(slot)
        return slot

    def create(self, scheduled_at: datetime, service: str) -> Slot:
        slot = self._new(scheduled_at, service)
        self._commit()
        return slot

    def bulk_create_week(self, start_date: date, pairs: Iterable[Tuple[time, str]], days: int = None) -> List[Slot]:
        """
        One slot per (time-of-day, service) pair for each of `days` consecutive
        days from start_date. Times are local to the schedule timezone. The
        whole batch is committed together.
        """
        if days is None:
            days = current_app.config.get("BULK_WEEK_DAYS", 7)
        pairs = list(pairs)
        slots = []
        try:
            for offset in range(days):
                day = start_date + timedelta(days=offset)
                for at, service in pairs:
                    slots.append(self._new(local_to_utc(day, at, self.zone), service))
        except ConflictError:
            self.session.rollback()
            raise
        self._commit()
        return slots

    def set_availability(self, slot_id: str, available: bool) -> Optional[Slot]:
        slot = self.get(slot_id)
        if not slot:
            return None
        self._check_release(slot, available)
        slot.is_available = available
        self._commit()
        return slot

    def is_held(self, slot_id: str) -> bool:
        return (
            self.session.query(Appointment.id)
            .filter(Appointment.slot_id == slot_id)
            .first()
            is not None
        )

    def _check_release(self, slot: Slot, available: bool):
        if available and not slot.is_available and self.is_held(slot.id):
            raise ConflictError("Slot is held by an appointment; cancel it to release the slot")

    def update(self, slot_id: str, cmd: SlotUpdate) -> Optional[Slot]:
        slot = self.get(slot_id)
        if not slot:
            return None

        if cmd.available is not UNSET:
            self._check_release(slot, cmd.available)

        if cmd.scheduled_at is not UNSET:
            slot.scheduled_at = cmd.scheduled_at
        if cmd.service is not UNSET:
            slot.service = cmd.service
        if cmd.available is not UNSET:
            slot.is_available = cmd.available
        self._commit()
        return slot

    def delete(self, slot_id: str) -> bool:
        slot = self.get(slot_id)
        if not slot:
            return False
        if self.is_held(slot.id):
            raise ConflictError("Slot is held by an appointment")
        self.session.delete(slot)
        self._commit()
        return True

    def block(self, slot_ids: Iterable[str]) -> int:
        """Mark each existing slot unavailable. Unknown ids are skipped."""
        blocked = 0
        for slot_id in slot_ids:
            slot = self.get(slot_id)
            if slot is None:
                continue
            slot.is_available = False
            blocked += 1
        self._commit()
        return blocked
