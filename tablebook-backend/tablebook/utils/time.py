from datetime import date, datetime, time, timezone

def parse_iso(s: str) -> datetime:
    """Parses an ISO 8601 string, handling 'Z' for UTC."""
    s = s.strip()
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return datetime.fromisoformat(s)

def to_utc(dt: datetime) -> datetime:
    """Converts a naive datetime to a timezone-aware UTC datetime."""
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

def reservation_instant(date_str: str, time_str: str) -> datetime:
    """Builds the UTC instant of a reservation from its YYYY-MM-DD date and HH:MM:SS time.

    The components are composed explicitly so the result never depends on the
    host's local timezone. Raises ValueError for anything that does not parse.
    """
    d = datetime.strptime(date_str, "%Y-%m-%d")
    t = datetime.strptime(time_str, "%H:%M:%S")
    return datetime(d.year, d.month, d.day, t.hour, t.minute, t.second, tzinfo=timezone.utc)

def db_date(date_str: str) -> date:
    return datetime.strptime(date_str, "%Y-%m-%d").date()

def db_time(time_str: str) -> time:
    return datetime.strptime(time_str, "%H:%M:%S").time()

def api_date(d: date) -> str:
    return d.strftime("%Y-%m-%d")

def api_time(t: time) -> str:
    return t.strftime("%H:%M:%S")
