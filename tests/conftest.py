"""
Test configuration and fixtures
"""
import pytest
from datetime import datetime

from app import create_app
from config import TestConfig
from models import db as _db
from models.slot import Slot
from services import AppointmentStore, BookingCoordinator, SlotStore
from services.validation import BookingRequest


class RecordingNotifier:
    """Stands in for the SMTP sender and remembers who would have been emailed."""

    def __init__(self, result=(True, None), error=None):
        self.result = result
        self.error = error
        self.sent = []

    def __call__(self, appointment):
        self.sent.append(appointment.confirmation_code)
        if self.error:
            raise self.error
        return self.result


@pytest.fixture(scope="function")
def app():
    """Create a fresh app and in-memory database for each test"""
    app = create_app(TestConfig)
    with app.app_context():
        _db.create_all()
        try:
            yield app
        finally:
            _db.session.remove()
            _db.drop_all()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def session(db):
    return db.session


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def slot_store(session):
    return SlotStore(session)


@pytest.fixture
def appointment_store(session):
    return AppointmentStore(session)


@pytest.fixture
def make_notifier():
    return RecordingNotifier


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def coordinator(session, notifier):
    return BookingCoordinator(session, notifier=notifier)


@pytest.fixture
def make_slot(session):
    """Create a slot directly in the database"""
    def _make(scheduled_at=datetime(2024, 6, 10, 8, 0), service="Carregamento", available=True):
        slot = Slot(scheduled_at=scheduled_at, service=service, is_available=available)
        session.add(slot)
        session.commit()
        return slot
    return _make


@pytest.fixture
def booking_request():
    def _make(scheduled_at=datetime(2024, 6, 10, 8, 0), service="Carregamento", **overrides):
        fields = {
            "client_name": "Ana Silva",
            "client_email": "ana@x.com",
        }
        fields.update(overrides)
        return BookingRequest(scheduled_at=scheduled_at, service=service, **fields)
    return _make
