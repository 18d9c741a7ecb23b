"""Reservation lifecycle: create, list, update and delete.

Each function receives the session it works with and ends it in a committed
or rolled-back state. Ownership is enforced in the statements themselves
(``WHERE reservation_id = ? AND user_id = ?``), and a missing reservation is
reported exactly like someone else's.

Duplicate bookings are guarded twice: a lookup before the insert gives the
usual error message, and the ``uq_reservation_user_slot`` constraint catches
concurrent identical requests that both pass the lookup.
"""
import logging

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from .directory import as_id, get_restaurant, store_failure
from .errors import DuplicateReservation, NotFoundOrUnauthorized, RestaurantNotFound
from .models import Reservation, Restaurant
from .utils.time import api_date, api_time, db_date, db_time
from .validation import require_fields, validate_reservation

logger = logging.getLogger(__name__)

SLOT_CONSTRAINT = "uq_reservation_user_slot"
_SQLITE_SLOT_MESSAGE = (
    "UNIQUE constraint failed: reservations.user_id, reservations.restaurant_id, "
    "reservations.date, reservations.time"
)


def serialize_reservation(reservation: Reservation, restaurant_name: str | None = None) -> dict:
    data = {
        "reservation_id": reservation.reservation_id,
        "restaurant_id": reservation.restaurant_id,
        "date": api_date(reservation.date),
        "time": api_time(reservation.time),
        "people_count": reservation.people_count,
    }
    if restaurant_name is not None:
        data["restaurant_name"] = restaurant_name
    return data


def _is_slot_conflict(exc: IntegrityError) -> bool:
    """True when the violated constraint is the per-user slot uniqueness."""
    orig = exc.orig
    name = getattr(getattr(orig, "diag", None), "constraint_name", None)
    if name:
        return name == SLOT_CONSTRAINT
    message = str(orig)
    # SQLite names the columns instead of the constraint.
    return SLOT_CONSTRAINT in message or message.startswith(_SQLITE_SLOT_MESSAGE)


def create_reservation(session, user_id: int, restaurant_id, date, time, party_size) -> Reservation:
    require_fields(restaurant_id=restaurant_id, date=date, time=time, people_count=party_size)
    fields = validate_reservation(date, time, party_size)

    restaurant = get_restaurant(session, restaurant_id)
    if restaurant is None:
        raise RestaurantNotFound()

    slot_date, slot_time = db_date(fields.date), db_time(fields.time)
    try:
        existing = session.scalar(
            select(Reservation.reservation_id).where(
                Reservation.user_id == user_id,
                Reservation.restaurant_id == restaurant.restaurant_id,
                Reservation.date == slot_date,
                Reservation.time == slot_time,
            )
        )
    except SQLAlchemyError as e:
        raise store_failure(session, "checking for duplicates") from e
    if existing is not None:
        raise DuplicateReservation()

    res = Reservation(
        user_id=user_id,
        restaurant_id=restaurant.restaurant_id,
        date=slot_date,
        time=slot_time,
        people_count=fields.party_size,
    )
    session.add(res)
    try:
        session.commit()
    except IntegrityError as e:
        if not _is_slot_conflict(e):
            raise store_failure(session, "creating a reservation") from e
        # Lost the race against an identical concurrent request.
        session.rollback()
        raise DuplicateReservation() from None
    except SQLAlchemyError as e:
        raise store_failure(session, "creating a reservation") from e

    logger.info(
        "User %s booked restaurant %s on %s at %s (reservation %s)",
        user_id, res.restaurant_id, fields.date, fields.time, res.reservation_id,
    )
    return res


def list_reservations(session, user_id: int) -> list[tuple[Reservation, str]]:
    """The user's reservations with their restaurant name, soonest slot first."""
    stmt = (
        select(Reservation, Restaurant.name)
        .join(Restaurant, Reservation.restaurant_id == Restaurant.restaurant_id)
        .where(Reservation.user_id == user_id)
        .order_by(Reservation.date.asc(), Reservation.time.asc(), Reservation.reservation_id.asc())
    )
    try:
        return [(reservation, name) for reservation, name in session.execute(stmt)]
    except SQLAlchemyError as e:
        raise store_failure(session, f"listing reservations for user {user_id}") from e


def update_reservation(session, reservation_id, user_id: int, date, time, party_size) -> Reservation:
    require_fields(reservation_id=reservation_id, date=date, time=time, people_count=party_size)
    fields = validate_reservation(date, time, party_size)

    rid = as_id(reservation_id)
    if rid is None:
        raise NotFoundOrUnauthorized()

    stmt = (
        update(Reservation)
        .where(Reservation.reservation_id == rid, Reservation.user_id == user_id)
        .values(date=db_date(fields.date), time=db_time(fields.time), people_count=fields.party_size)
        .execution_options(synchronize_session=False)
    )
    try:
        result = session.execute(stmt)
        if result.rowcount == 0:
            session.rollback()
            raise NotFoundOrUnauthorized()
        session.commit()
    except IntegrityError as e:
        if not _is_slot_conflict(e):
            raise store_failure(session, f"updating reservation {rid}") from e
        session.rollback()
        raise DuplicateReservation() from None
    except SQLAlchemyError as e:
        raise store_failure(session, f"updating reservation {rid}") from e

    res = session.get(Reservation, rid, populate_existing=True)
    logger.info("User %s updated reservation %s", user_id, rid)
    return res


def delete_reservation(session, reservation_id, user_id: int) -> None:
    rid = as_id(reservation_id)
    if rid is None:
        raise NotFoundOrUnauthorized()

    stmt = (
        delete(Reservation)
        .where(Reservation.reservation_id == rid, Reservation.user_id == user_id)
        .execution_options(synchronize_session=False)
    )
    try:
        result = session.execute(stmt)
        if result.rowcount == 0:
            session.rollback()
            raise NotFoundOrUnauthorized()
        session.commit()
    except SQLAlchemyError as e:
        raise store_failure(session, f"deleting reservation {rid}") from e

    logger.info("User %s cancelled reservation %s", user_id, rid)
