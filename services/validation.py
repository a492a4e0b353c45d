"""
Input validation and update commands.

Everything here runs before any store access: a request either becomes a
fully-typed value or a ValidationError carrying every problem found.
"""
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import List, Optional, Tuple

from models.appointment import APPOINTMENT_STATUSES
from models.slot import SERVICE_KINDS
from services.errors import ValidationError
from utils.dates import parse_day, parse_timestamp

_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_TIME_OF_DAY = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")

NAME_MIN_LEN = 2


class _Unset:
    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False


UNSET = _Unset()


def is_valid_email(email: str) -> bool:
    return isinstance(email, str) and len(email) <= 255 and _EMAIL.match(email) is not None


def _optional_text(data: dict, key: str, errors: List[str], max_len: int = None) -> Optional[str]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        errors.append(f"{key} must be a string")
        return None
    value = value.strip()
    if max_len and len(value) > max_len:
        errors.append(f"{key} must be at most {max_len} characters")
    return value or None


def _timestamp(data: dict, key: str, errors: List[str]) -> Optional[datetime]:
    raw = data.get(key)
    if not raw:
        errors.append(f"{key} is required")
        return None
    try:
        return parse_timestamp(raw)
    except (TypeError, ValueError):
        errors.append(f"Invalid {key}. Use ISO e.g. 2024-06-10T08:00:00Z")
        return None


def _service(data: dict, key: str, errors: List[str]) -> Optional[str]:
    value = data.get(key)
    if not value:
        errors.append(f"{key} is required")
        return None
    if value not in SERVICE_KINDS:
        errors.append(f"{key} must be one of {', '.join(SERVICE_KINDS)}")
        return None
    return value


@dataclass
class BookingRequest:
    scheduled_at: datetime
    service: str
    client_name: str
    client_email: str
    client_phone: Optional[str] = None
    client_company: Optional[str] = None
    notes: Optional[str] = None
    status: str = "confirmado"


def validate_booking_form(data: dict) -> BookingRequest:
    if not isinstance(data, dict):
        raise ValidationError("Invalid data", details=["JSON object expected"])

    errors: List[str] = []
    scheduled_at = _timestamp(data, "scheduled_at", errors)
    service = _service(data, "service", errors)

    name = data.get("client_name")
    name = name.strip() if isinstance(name, str) else ""
    if len(name) < NAME_MIN_LEN:
        errors.append(f"client_name must have at least {NAME_MIN_LEN} characters")

    email = data.get("client_email")
    email = email.strip() if isinstance(email, str) else ""
    if not is_valid_email(email):
        errors.append("Invalid client_email")

    phone = _optional_text(data, "client_phone", errors, max_len=30)
    company = _optional_text(data, "client_company", errors, max_len=160)
    notes = _optional_text(data, "notes", errors)

    status = data.get("status") or "confirmado"
    if status not in APPOINTMENT_STATUSES:
        errors.append(f"status must be one of {', '.join(APPOINTMENT_STATUSES)}")

    if errors:
        raise ValidationError("Invalid data", details=errors)

    return BookingRequest(
        scheduled_at=scheduled_at,
        service=service,
        client_name=name,
        client_email=email,
        client_phone=phone,
        client_company=company,
        notes=notes,
        status=status,
    )


def validate_slot_form(data: dict) -> Tuple[datetime, str]:
    if not isinstance(data, dict):
        raise ValidationError("Invalid data", details=["JSON object expected"])
    errors: List[str] = []
    scheduled_at = _timestamp(data, "scheduled_at", errors)
    service = _service(data, "service", errors)
    if errors:
        raise ValidationError("Invalid data", details=errors)
    return scheduled_at, service


def validate_bulk_week(data: dict) -> Tuple[date, List[Tuple[time, str]]]:
    if not isinstance(data, dict):
        raise ValidationError("Invalid data", details=["JSON object expected"])

    errors: List[str] = []
    start_date = None
    try:
        start_date = parse_day(data.get("start_date"))
    except (TypeError, ValueError):
        errors.append("Invalid start_date. Use YYYY-MM-DD")

    pairs: List[Tuple[time, str]] = []
    time_slots = data.get("time_slots")
    if not isinstance(time_slots, list) or not time_slots:
        errors.append("time_slots must be a non-empty list")
        time_slots = []

    for i, item in enumerate(time_slots):
        if not isinstance(item, dict):
            errors.append(f"time_slots[{i}] must be an object")
            continue
        match = _TIME_OF_DAY.match(str(item.get("time") or ""))
        if not match:
            errors.append(f"time_slots[{i}].time must be HH:MM")
        service = item.get("service")
        if service not in SERVICE_KINDS:
            errors.append(f"time_slots[{i}].service must be one of {', '.join(SERVICE_KINDS)}")
        if match and service in SERVICE_KINDS:
            pairs.append((time(int(match.group(1)), int(match.group(2))), service))

    if errors:
        raise ValidationError("Invalid data", details=errors)
    return start_date, pairs


def validate_slot_ids(data: dict) -> List[str]:
    ids = data.get("slot_ids") if isinstance(data, dict) else None
    if not isinstance(ids, list) or not ids:
        raise ValidationError("slot_ids are required", details=["slot_ids must be a non-empty list"])
    return [str(i) for i in ids]


def _reject_unknown(data: dict, allowed) -> None:
    if not isinstance(data, dict):
        raise ValidationError("Invalid data", details=["JSON object expected"])
    unknown = sorted(set(data) - set(allowed))
    if unknown:
        raise ValidationError("Unknown fields", details=[f"Unknown field: {k}" for k in unknown])
    if not data:
        raise ValidationError("No updatable fields provided", details=[f"Allowed: {', '.join(allowed)}"])


@dataclass
class SlotUpdate:
    scheduled_at: Optional[datetime] = UNSET
    service: Optional[str] = UNSET
    available: Optional[bool] = UNSET

    FIELDS = ("scheduled_at", "service", "available")

    @classmethod
    def from_payload(cls, data: dict) -> "SlotUpdate":
        _reject_unknown(data, cls.FIELDS)
        errors: List[str] = []
        cmd = cls()
        if "scheduled_at" in data:
            cmd.scheduled_at = _timestamp(data, "scheduled_at", errors)
        if "service" in data:
            cmd.service = _service(data, "service", errors)
        if "available" in data:
            if not isinstance(data["available"], bool):
                errors.append("available must be a boolean")
            else:
                cmd.available = data["available"]
        if errors:
            raise ValidationError("Invalid data", details=errors)
        return cmd


@dataclass
class AppointmentUpdate:
    status: Optional[str] = UNSET
    notes: Optional[str] = UNSET

    FIELDS = ("status", "notes")

    @classmethod
    def from_payload(cls, data: dict) -> "AppointmentUpdate":
        _reject_unknown(data, cls.FIELDS)
        errors: List[str] = []
        cmd = cls()
        if "status" in data:
            if data["status"] not in APPOINTMENT_STATUSES:
                errors.append(f"status must be one of {', '.join(APPOINTMENT_STATUSES)}")
            else:
                cmd.status = data["status"]
        if "notes" in data:
            cmd.notes = _optional_text(data, "notes", errors)
        if errors:
            raise ValidationError("Invalid data", details=errors)
        return cmd
