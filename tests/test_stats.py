"""
Unit tests for statistics
"""
import pytest
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from services.stats import StatsAggregator, compute_stats

UTC = timezone.utc


def _appt(when, service="Carregamento"):
    return SimpleNamespace(scheduled_at=when, service=service)


def _slot(available):
    return SimpleNamespace(is_available=available)


@pytest.mark.unit
class TestComputeStats:
    """Pure computation over snapshots"""

    # Wednesday
    NOW = datetime(2024, 6, 12, 10, 0)

    def test_today_bounds(self):
        appointments = [
            _appt(datetime(2024, 6, 12, 0, 0)),
            _appt(datetime(2024, 6, 12, 23, 59, 59, 999000)),
            _appt(datetime(2024, 6, 13, 0, 0)),
            _appt(datetime(2024, 6, 11, 23, 59, 59)),
        ]
        stats = compute_stats(appointments, [], self.NOW, UTC)
        assert stats["today_appointments"] == 2

    def test_week_runs_sunday_to_saturday(self):
        appointments = [
            _appt(datetime(2024, 6, 9, 0, 0)),                  # Sunday start
            _appt(datetime(2024, 6, 15, 23, 59, 59, 999000)),   # Saturday end
            _appt(datetime(2024, 6, 8, 23, 59, 59)),            # previous Saturday
            _appt(datetime(2024, 6, 16, 0, 0)),                 # next Sunday
        ]
        stats = compute_stats(appointments, [], self.NOW, UTC)
        assert stats["week_appointments"] == 2

    def test_week_when_today_is_sunday(self):
        sunday = datetime(2024, 6, 9, 7, 0)
        appointments = [_appt(datetime(2024, 6, 9, 1, 0)), _appt(datetime(2024, 6, 8, 12, 0))]
        assert compute_stats(appointments, [], sunday, UTC)["week_appointments"] == 1

    def test_service_totals_ignore_dates(self):
        appointments = [
            _appt(datetime(2020, 1, 1), "Carregamento"),
            _appt(datetime(2030, 1, 1), "Carregamento"),
            _appt(datetime(2024, 6, 12), "Descarregamento"),
        ]
        stats = compute_stats(appointments, [], self.NOW, UTC)
        assert stats["total_carregamentos"] == 2
        assert stats["total_descarregamentos"] == 1
        assert stats["total_carregamentos"] + stats["total_descarregamentos"] == stats["total_appointments"]

    def test_slot_counts_add_up(self):
        slots = [_slot(True), _slot(False), _slot(True), _slot(False), _slot(False)]
        stats = compute_stats([], slots, self.NOW, UTC)
        assert stats["available_slots"] == 2
        assert stats["occupied_slots"] == 3
        assert stats["available_slots"] + stats["occupied_slots"] == stats["total_slots"] == 5

    def test_today_in_local_zone(self):
        # 01:00 UTC on the 13th is 22:00 on the 12th at UTC-3
        zone = timezone(timedelta(hours=-3))
        now = datetime(2024, 6, 12, 15, 0)
        stats = compute_stats([_appt(datetime(2024, 6, 13, 1, 0))], [], now, zone)
        assert stats["today_appointments"] == 1

    def test_empty(self):
        stats = compute_stats([], [], self.NOW, UTC)
        assert all(v == 0 for v in stats.values())


@pytest.mark.unit
class TestStatsAggregator:
    """Reading the stores"""

    def test_snapshot_reflects_bookings(self, session, coordinator, make_slot, booking_request):
        now = datetime(2024, 6, 10, 6, 0)
        make_slot(datetime(2024, 6, 10, 8, 0))
        make_slot(datetime(2024, 6, 10, 9, 0), service="Descarregamento")
        make_slot(datetime(2024, 6, 20, 9, 0))
        coordinator.create_booking(booking_request(datetime(2024, 6, 10, 8, 0)))
        coordinator.create_booking(booking_request(datetime(2024, 6, 10, 9, 0), service="Descarregamento"))

        stats = StatsAggregator(session, zone=UTC, clock=lambda: now).snapshot()

        assert stats == {
            "today_appointments": 2,
            "week_appointments": 2,
            "total_carregamentos": 1,
            "total_descarregamentos": 1,
            "available_slots": 1,
            "occupied_slots": 2,
            "total_slots": 3,
            "total_appointments": 2,
        }

    def test_snapshot_after_cancel(self, session, coordinator, make_slot, booking_request):
        make_slot()
        appointment = coordinator.create_booking(booking_request())
        coordinator.cancel_booking(appointment.id)

        stats = StatsAggregator(session, zone=UTC).snapshot()
        assert stats["available_slots"] == 1
        assert stats["occupied_slots"] == 0
        assert stats["total_appointments"] == 0
