from datetime import datetime
from typing import Iterable

from services.appointments import AppointmentStore
from services.slots import SlotStore
from utils.dates import day_bounds, get_zone, to_local, week_bounds


def compute_stats(appointments: Iterable, slots: Iterable, now: datetime, zone) -> dict:
    """Counts over a snapshot. `now` is naive UTC and is the only clock read."""
    appointments = list(appointments)
    slots = list(slots)

    day_start, day_end = day_bounds(to_local(now, zone).date(), zone)
    week_start, week_end = week_bounds(now, zone)

    times = [a.scheduled_at for a in appointments]
    available = sum(1 for s in slots if s.is_available)

    return {
        "today_appointments": sum(1 for t in times if day_start <= t <= day_end),
        "week_appointments": sum(1 for t in times if week_start <= t <= week_end),
        "total_carregamentos": sum(1 for a in appointments if a.service == "Carregamento"),
        "total_descarregamentos": sum(1 for a in appointments if a.service == "Descarregamento"),
        "available_slots": available,
        "occupied_slots": len(slots) - available,
        "total_slots": len(slots),
        "total_appointments": len(appointments),
    }


class StatsAggregator:
    def __init__(self, session, zone=None, clock=datetime.utcnow):
        self.slots = SlotStore(session)
        self.appointments = AppointmentStore(session)
        self._zone = zone
        self.clock = clock

    def snapshot(self) -> dict:
        return compute_stats(
            self.appointments.list_all(),
            self.slots.list_all(),
            now=self.clock(),
            zone=self._zone or get_zone(),
        )
