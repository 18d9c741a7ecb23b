"""Reservation input validation.

The same rules run on the client before submitting (advisory) and on the
server before touching the store (authoritative), so this module must stay
free of Flask and database imports.
"""
import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticCustomError

from .errors import InvalidDateFormat, InvalidPartySize, InvalidTimeFormat, MissingFields

DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
TIME_RE = re.compile(r"([0-1][0-9]|2[0-3]):[0-5][0-9](:[0-5][0-9])?")
# Largest value a signed 32-bit INTEGER column holds.
MAX_INT = 2**31 - 1

_ERRORS_BY_TYPE = {
    "invalid_date_format": InvalidDateFormat,
    "invalid_time_format": InvalidTimeFormat,
    "invalid_party_size": InvalidPartySize,
}


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(**values) -> None:
    """Raises MissingFields naming every blank keyword argument."""
    missing = [name for name, value in values.items() if is_blank(value)]
    if missing:
        raise MissingFields(missing)


def normalize_time(value: str) -> str:
    """``HH:MM`` -> ``HH:MM:00``; ``HH:MM:SS`` is returned unchanged."""
    return f"{value}:00" if len(value) == 5 else value


class ReservationFields(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str
    time: str
    party_size: int

    @field_validator("date", mode="before")
    @classmethod
    def check_date(cls, v):
        if not isinstance(v, str) or not DATE_RE.fullmatch(v):
            raise PydanticCustomError("invalid_date_format", "Invalid date format. Use YYYY-MM-DD")
        try:
            datetime.strptime(v, "%Y-%m-%d")
        except ValueError:
            raise PydanticCustomError("invalid_date_format", "Date {value} is not on the calendar", {"value": v})
        return v

    @field_validator("time", mode="before")
    @classmethod
    def check_time(cls, v):
        if not isinstance(v, str) or not TIME_RE.fullmatch(v):
            raise PydanticCustomError("invalid_time_format", "Invalid time format. Use HH:MM or HH:MM:SS")
        return normalize_time(v)

    @field_validator("party_size", mode="before")
    @classmethod
    def check_party_size(cls, v):
        if isinstance(v, float) and v.is_integer():
            v = int(v)
        if isinstance(v, bool) or not isinstance(v, int) or not 1 <= v <= MAX_INT:
            raise PydanticCustomError("invalid_party_size", "People count must be a positive integer")
        return v


def validate_reservation(date, time, party_size) -> ReservationFields:
    """Checks and normalizes the user-editable fields of a reservation.

    Raises the specific :class:`~tablebook.errors.ValidationError` subclass
    for the first failing field (date, then time, then party size).
    """
    require_fields(date=date, time=time, party_size=party_size)
    try:
        return ReservationFields.model_validate({"date": date, "time": time, "party_size": party_size})
    except PydanticValidationError as e:
        first = e.errors()[0]
        raise _ERRORS_BY_TYPE[first["type"]](first["msg"]) from None
