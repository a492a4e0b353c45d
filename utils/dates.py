from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from flask import current_app

_ONE_MS = timedelta(milliseconds=1)


def get_zone(name: str = None):
    if name is None:
        try:
            name = current_app.config.get("SCHEDULE_TIMEZONE", "UTC")
        except RuntimeError:
            name = "UTC"
    if not name or name.upper() in ("UTC", "Z"):
        return timezone.utc
    return ZoneInfo(name)


def to_utc_naive(dt: datetime) -> datetime:
    # Naive input is taken as UTC already
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def to_local(dt_utc: datetime, zone=None) -> datetime:
    zone = zone or get_zone()
    return dt_utc.replace(tzinfo=timezone.utc).astimezone(zone)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp into naive UTC. Raises ValueError."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError("timestamp required")
    value = value.strip()
    if value.endswith("Z") or value.endswith("z"):
        value = value[:-1] + "+00:00"
    return to_utc_naive(datetime.fromisoformat(value))


def parse_day(value: str, zone=None) -> date:
    """
    Accept "YYYY-MM-DD" or a full ISO timestamp. A timestamp is reduced to
    its calendar day in the schedule timezone.
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("date required")
    value = value.strip()
    if len(value) == 10:
        return date.fromisoformat(value)
    return to_local(parse_timestamp(value), zone).date()


def local_to_utc(day: date, at: time, zone=None) -> datetime:
    zone = zone or get_zone()
    return to_utc_naive(datetime.combine(day, at, tzinfo=zone))


def day_bounds(day: date, zone=None):
    """[00:00:00.000, 23:59:59.999] of a local calendar day, as naive UTC."""
    zone = zone or get_zone()
    start = local_to_utc(day, time.min, zone)
    end = local_to_utc(day + timedelta(days=1), time.min, zone) - _ONE_MS
    return start, end


def week_bounds(now: datetime, zone=None):
    """Sunday 00:00:00.000 through Saturday 23:59:59.999 of the week holding `now`."""
    zone = zone or get_zone()
    today = to_local(now, zone).date()
    # weekday(): Monday=0 .. Sunday=6
    sunday = today - timedelta(days=(today.weekday() + 1) % 7)
    start = local_to_utc(sunday, time.min, zone)
    end = local_to_utc(sunday + timedelta(days=7), time.min, zone) - _ONE_MS
    return start, end
