import logging

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError

from .errors import MissingFields, StoreUnavailable
from .models import Restaurant
from .validation import MAX_INT, is_blank

logger = logging.getLogger(__name__)


def as_id(value) -> int | None:
    """Coerces a path/body identifier to int; None when it cannot be one.

    Fractional floats and values outside the INTEGER column range are
    rejected rather than truncated or passed to the driver.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    try:
        rid = int(value)
    except (TypeError, ValueError):
        return None
    return rid if -MAX_INT - 1 <= rid <= MAX_INT else None


def store_failure(session, what: str) -> StoreUnavailable:
    """Rolls back, logs the current exception and returns the error to raise."""
    session.rollback()
    logger.exception("Store failure while %s", what)
    return StoreUnavailable()


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def list_restaurants(session) -> list[Restaurant]:
    try:
        return list(session.scalars(select(Restaurant).order_by(Restaurant.restaurant_id)))
    except SQLAlchemyError as e:
        raise store_failure(session, "listing restaurants") from e


def get_restaurant(session, restaurant_id) -> Restaurant | None:
    rid = as_id(restaurant_id)
    if rid is None:
        return None
    try:
        return session.get(Restaurant, rid)
    except SQLAlchemyError as e:
        raise store_failure(session, f"looking up restaurant {rid}") from e


def search_restaurants(session, query: str | None) -> list[Restaurant]:
    """Case-insensitive substring match on name or location.

    ``%`` and ``_`` in the query match themselves, not any text.
    """
    if is_blank(query):
        raise MissingFields(["query"], "Missing 'query' parameter.")
    pattern = f"%{_escape_like(query.strip())}%"
    stmt = (
        select(Restaurant)
        .where(or_(
            Restaurant.name.ilike(pattern, escape="\\"),
            Restaurant.location.ilike(pattern, escape="\\"),
        ))
        .order_by(Restaurant.restaurant_id)
    )
    try:
        return list(session.scalars(stmt))
    except SQLAlchemyError as e:
        raise store_failure(session, "searching restaurants") from e
