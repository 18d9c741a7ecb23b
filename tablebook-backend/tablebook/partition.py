"""Upcoming/past view of a user's reservations.

This is derived state: it is recomputed from the full list on every fetch
and never persisted.
"""
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time

from .utils.time import api_date, api_time, parse_iso, reservation_instant, to_utc, utc_now
from .validation import DATE_RE, TIME_RE, normalize_time

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Partition:
    upcoming: list = field(default_factory=list)
    past: list = field(default_factory=list)


def _field(reservation, name):
    if isinstance(reservation, Mapping):
        return reservation.get(name)
    return getattr(reservation, name, None)


def _as_text(value, kind, fmt):
    return fmt(value) if isinstance(value, kind) else value


def instant_of(reservation) -> datetime | None:
    """UTC instant of a reservation, or None when its date or time is unusable.

    Accepts the wire strings as well as the ``date``/``time`` objects of
    stored rows.
    """
    date_str = _as_text(_field(reservation, "date"), date, api_date)
    time_str = _as_text(_field(reservation, "time"), time, api_time)
    if not isinstance(date_str, str) or not isinstance(time_str, str):
        return None
    if not DATE_RE.fullmatch(date_str) or not TIME_RE.fullmatch(time_str):
        return None
    try:
        return reservation_instant(date_str, normalize_time(time_str))
    except ValueError:
        return None


def partition_reservations(reservations: Iterable, now: datetime | str | None = None) -> Partition:
    """Splits reservations into upcoming (soonest first) and past (most recent first).

    A reservation starting exactly at ``now`` counts as upcoming. ``now``
    defaults to the current time; naive datetimes are read as UTC. Entries
    whose date or time cannot be parsed are left out of both groups.
    """
    if now is None:
        now = utc_now()
    elif isinstance(now, str):
        now = parse_iso(now)
    now = to_utc(now)

    upcoming, past = [], []
    for reservation in reservations:
        instant = instant_of(reservation)
        if instant is None:
            logger.debug("Skipping reservation with unusable date/time: %r", reservation)
            continue
        (upcoming if instant >= now else past).append((instant, reservation))

    upcoming.sort(key=lambda pair: pair[0])
    past.sort(key=lambda pair: pair[0], reverse=True)
    return Partition(upcoming=[r for _, r in upcoming], past=[r for _, r in past])
