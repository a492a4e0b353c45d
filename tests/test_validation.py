"""
Unit tests for input validation and update commands
"""
import pytest
from datetime import date, datetime, time

from services.errors import ValidationError
from services.validation import (
    UNSET,
    AppointmentUpdate,
    SlotUpdate,
    validate_booking_form,
    validate_bulk_week,
    validate_slot_form,
    validate_slot_ids,
)
from utils.dates import parse_day, parse_timestamp


def _form(**overrides):
    data = {
        "scheduled_at": "2024-06-10T08:00:00Z",
        "service": "Carregamento",
        "client_name": "Ana Silva",
        "client_email": "ana@x.com",
    }
    data.update(overrides)
    return data


@pytest.mark.unit
class TestBookingForm:
    """Tests for the booking form"""

    def test_valid_minimal(self):
        req = validate_booking_form(_form())
        assert req.scheduled_at == datetime(2024, 6, 10, 8, 0)
        assert req.status == "confirmado"
        assert req.client_phone is None

    def test_trims_and_blanks_to_none(self):
        req = validate_booking_form(_form(client_name="  Ana  ", client_company="   "))
        assert req.client_name == "Ana"
        assert req.client_company is None

    @pytest.mark.parametrize("name", ["", "A", " A ", None, 12])
    def test_short_name(self, name):
        with pytest.raises(ValidationError) as info:
            validate_booking_form(_form(client_name=name))
        assert any("client_name" in d for d in info.value.details)

    @pytest.mark.parametrize("email", ["", "ana", "ana@", "@x.com", "ana@x", "a b@x.com"])
    def test_bad_email(self, email):
        with pytest.raises(ValidationError):
            validate_booking_form(_form(client_email=email))

    def test_unknown_service(self):
        with pytest.raises(ValidationError):
            validate_booking_form(_form(service="Pesagem"))

    def test_missing_service(self):
        data = _form()
        del data["service"]
        with pytest.raises(ValidationError) as info:
            validate_booking_form(data)
        assert "service is required" in info.value.details

    def test_collects_every_error(self):
        with pytest.raises(ValidationError) as info:
            validate_booking_form({"client_name": "A"})
        assert len(info.value.details) == 4

    def test_bad_status(self):
        with pytest.raises(ValidationError):
            validate_booking_form(_form(status="feito"))


@pytest.mark.unit
class TestSlotForms:
    """Tests for slot creation, bulk and block input"""

    def test_slot_form(self):
        assert validate_slot_form({"scheduled_at": "2024-06-10T08:00:00", "service": "Descarregamento"}) == (
            datetime(2024, 6, 10, 8, 0), "Descarregamento"
        )

    def test_slot_form_offset_normalised(self):
        scheduled_at, _ = validate_slot_form({"scheduled_at": "2024-06-10T05:00:00-03:00", "service": "Carregamento"})
        assert scheduled_at == datetime(2024, 6, 10, 8, 0)

    def test_slot_form_missing(self):
        with pytest.raises(ValidationError) as info:
            validate_slot_form({})
        assert len(info.value.details) == 2

    def test_bulk_week(self):
        start, pairs = validate_bulk_week({
            "start_date": "2024-06-10",
            "time_slots": [{"time": "08:00", "service": "Carregamento"}, {"time": "7:30", "service": "Descarregamento"}],
        })
        assert start == date(2024, 6, 10)
        assert pairs == [(time(8, 0), "Carregamento"), (time(7, 30), "Descarregamento")]

    def test_bulk_week_rejects_bad_entries(self):
        with pytest.raises(ValidationError) as info:
            validate_bulk_week({
                "start_date": "10/06/2024",
                "time_slots": [{"time": "25:00", "service": "Carregamento"}, {"time": "08:00", "service": "X"}],
            })
        assert len(info.value.details) == 3

    def test_bulk_week_empty_list(self):
        with pytest.raises(ValidationError):
            validate_bulk_week({"start_date": "2024-06-10", "time_slots": []})

    def test_slot_ids(self):
        assert validate_slot_ids({"slot_ids": ["a", "b"]}) == ["a", "b"]
        with pytest.raises(ValidationError):
            validate_slot_ids({"slot_ids": []})
        with pytest.raises(ValidationError):
            validate_slot_ids({})


@pytest.mark.unit
class TestUpdateCommands:
    """Tests for explicit update commands"""

    def test_slot_update_partial(self):
        cmd = SlotUpdate.from_payload({"available": False})
        assert cmd.available is False
        assert cmd.scheduled_at is UNSET
        assert cmd.service is UNSET

    def test_slot_update_requires_bool(self):
        with pytest.raises(ValidationError):
            SlotUpdate.from_payload({"available": "no"})

    def test_empty_update_rejected(self):
        with pytest.raises(ValidationError):
            SlotUpdate.from_payload({})
        with pytest.raises(ValidationError):
            AppointmentUpdate.from_payload({})

    def test_appointment_update_only_status_and_notes(self):
        with pytest.raises(ValidationError) as info:
            AppointmentUpdate.from_payload({"status": "cancelado", "client_email": "x@y.com"})
        assert info.value.details == ["Unknown field: client_email"]

    def test_appointment_update_clears_notes(self):
        cmd = AppointmentUpdate.from_payload({"notes": None})
        assert cmd.notes is None
        assert cmd.status is UNSET

    def test_appointment_update_bad_status(self):
        with pytest.raises(ValidationError):
            AppointmentUpdate.from_payload({"status": "done"})


@pytest.mark.unit
class TestDateParsing:
    """Tests for timestamp and day parsing"""

    def test_parse_timestamp_z(self):
        assert parse_timestamp("2024-06-10T08:00:00Z") == datetime(2024, 6, 10, 8, 0)

    def test_parse_timestamp_millis(self):
        assert parse_timestamp("2024-06-10T23:59:59.999Z") == datetime(2024, 6, 10, 23, 59, 59, 999000)

    def test_parse_timestamp_invalid(self):
        with pytest.raises(ValueError):
            parse_timestamp("tomorrow")

    def test_parse_day_from_timestamp(self, app):
        assert parse_day("2024-06-10T08:00:00.000Z") == date(2024, 6, 10)
        assert parse_day("2024-06-10") == date(2024, 6, 10)
