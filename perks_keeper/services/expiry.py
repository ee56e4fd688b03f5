"""Expiry date conversion between calendar days and stored instants."""
from datetime import date, datetime, time, timezone

from dateutil import tz

END_OF_DAY = time(23, 59, 59)


def _zone(tz_name: str):
    zone = tz.gettz(tz_name)
    if zone is None:
        raise ValueError(f"Unknown time zone: {tz_name}")
    return zone


def end_of_day(day: date, tz_name: str) -> datetime:
    """Return 23:59:59 local time on ``day`` in ``tz_name`` as naive UTC.

    Offers stay live through the whole selected day in the reference zone
    instead of expiring at UTC midnight.
    """
    local = datetime.combine(day, END_OF_DAY, tzinfo=_zone(tz_name))
    return local.astimezone(timezone.utc).replace(tzinfo=None)


def local_day(expire_at: datetime, tz_name: str) -> date:
    """Calendar day in ``tz_name`` that a stored naive-UTC expiry falls on."""
    return expire_at.replace(tzinfo=timezone.utc).astimezone(_zone(tz_name)).date()
