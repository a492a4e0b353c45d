from flask import Blueprint, request, jsonify

from models import db
from services import BookingCoordinator, NotFoundError, SlotStore
from services.validation import (
    SlotUpdate,
    validate_bulk_week,
    validate_slot_form,
    validate_slot_ids,
)
from utils.audit import log_event
from utils.dates import parse_day

slots_bp = Blueprint("slots", __name__, url_prefix="/api/slots")


def _store() -> SlotStore:
    return SlotStore(db.session)


# ---------- CLIENTS: view slots ----------
@slots_bp.get("")
def list_slots():
    slots = _store().list_all()
    return jsonify([s.to_dict() for s in slots]), 200


@slots_bp.get("/date/<date_str>")
def list_slots_by_date(date_str: str):
    try:
        day = parse_day(date_str)
    except ValueError:
        return jsonify(error="Invalid date. Use YYYY-MM-DD", code="validation_error"), 400

    slots = _store().list_by_date(day)
    return jsonify([s.to_dict() for s in slots]), 200


# ---------- ADMIN: manage slots ----------
@slots_bp.post("")
def create_slot():
    data = request.get_json(silent=True) or {}
    scheduled_at, service = validate_slot_form(data)

    slot = _store().create(scheduled_at, service)

    log_event("SLOT_CREATE", entity="slot", entity_id=slot.id, metadata={"service": service})
    return jsonify(slot.to_dict()), 201


@slots_bp.put("/<slot_id>")
def update_slot(slot_id: str):
    data = request.get_json(silent=True) or {}
    cmd = SlotUpdate.from_payload(data)

    slot = _store().update(slot_id, cmd)
    if not slot:
        raise NotFoundError("Slot not found")

    log_event("SLOT_UPDATE", entity="slot", entity_id=slot.id, metadata=data)
    return jsonify(slot.to_dict()), 200


@slots_bp.delete("/<slot_id>")
def delete_slot(slot_id: str):
    if not _store().delete(slot_id):
        raise NotFoundError("Slot not found")

    log_event("SLOT_DELETE", entity="slot", entity_id=slot_id)
    return "", 204


@slots_bp.post("/block")
def block_slots():
    data = request.get_json(silent=True) or {}
    slot_ids = validate_slot_ids(data)

    blocked = BookingCoordinator(db.session).block_slots(slot_ids)

    log_event("SLOT_BLOCK", entity="slot", metadata={"requested": len(slot_ids), "blocked": blocked})
    return jsonify(message=f"{blocked} slots blocked", blocked_count=blocked), 200


@slots_bp.post("/bulk-week")
def bulk_create_week():
    data = request.get_json(silent=True) or {}
    start_date, pairs = validate_bulk_week(data)

    slots = BookingCoordinator(db.session).create_week(start_date, pairs)

    log_event(
        "SLOT_BULK_WEEK",
        entity="slot",
        metadata={"start_date": start_date.isoformat(), "created": len(slots)},
    )
    return jsonify(
        message=f"{len(slots)} slots created",
        slots=[s.to_dict() for s in slots],
    ), 201
