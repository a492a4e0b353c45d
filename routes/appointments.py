from flask import Blueprint, current_app, request, jsonify
from sqlalchemy.exc import SQLAlchemyError

from models import db
from services import AppointmentStore, BookingCoordinator, NotFoundError, SlotUnavailableError
from services.validation import AppointmentUpdate, validate_booking_form
from utils.audit import log_event
from utils.dates import parse_timestamp

appointments_bp = Blueprint("appointments", __name__, url_prefix="/api/appointments")


def _store() -> AppointmentStore:
    return AppointmentStore(db.session)


def _record(action: str, **kwargs):
    """Audit after the change has committed; a failed write never changes the response."""
    try:
        log_event(action, **kwargs)
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception("Could not record %s", action)


def parse_range(args):
    """Optional start_date/end_date pair from query args, as naive UTC bounds."""
    start_str = args.get("start_date")
    end_str = args.get("end_date")
    if not start_str or not end_str:
        return None
    return parse_timestamp(start_str), parse_timestamp(end_str)


# ---------- ADMIN / CLIENTS: list appointments ----------
@appointments_bp.get("")
def list_appointments():
    email = (request.args.get("email") or "").strip()
    try:
        date_range = parse_range(request.args)
    except ValueError:
        return jsonify(error="Invalid date range. Use ISO timestamps", code="validation_error"), 400

    store = _store()
    if email:
        rows = store.list_by_email(email)
    elif date_range:
        rows = store.list_by_date_range(*date_range)
    else:
        rows = store.list_all()

    return jsonify([a.to_dict() for a in rows]), 200


# ---------- CLIENTS: book a slot (DOUBLE-BOOKING SAFE) ----------
@appointments_bp.post("")
def create_appointment():
    data = request.get_json(silent=True) or {}
    booking = validate_booking_form(data)

    try:
        appointment = BookingCoordinator(db.session).create_booking(booking)
    except SlotUnavailableError:
        _record(
            "BOOKING_FAIL_UNAVAILABLE",
            entity="slot",
            metadata={"scheduled_at": booking.scheduled_at.isoformat(), "service": booking.service},
        )
        raise

    _record(
        "BOOKING_CREATE",
        entity="appointment",
        entity_id=appointment.id,
        metadata={"slot_id": appointment.slot_id},
    )
    return jsonify(appointment.to_dict()), 201


@appointments_bp.get("/code/<code>")
def find_by_code(code: str):
    appointment = _store().find_by_confirmation_code(code)
    if not appointment:
        raise NotFoundError("Appointment not found")
    return jsonify(appointment.to_dict()), 200


# ---------- ADMIN: edit status/notes ----------
@appointments_bp.put("/<appointment_id>")
def update_appointment(appointment_id: str):
    data = request.get_json(silent=True) or {}
    cmd = AppointmentUpdate.from_payload(data)

    appointment = _store().update(appointment_id, cmd)
    if not appointment:
        raise NotFoundError("Appointment not found")

    _record("APPOINTMENT_UPDATE", entity="appointment", entity_id=appointment.id, metadata=data)
    return jsonify(appointment.to_dict()), 200


# ---------- ADMIN / CLIENTS: cancel (frees the slot) ----------
@appointments_bp.delete("/<appointment_id>")
def cancel_appointment(appointment_id: str):
    BookingCoordinator(db.session).cancel_booking(appointment_id)

    _record("BOOKING_CANCEL", entity="appointment", entity_id=appointment_id)
    return "", 204
