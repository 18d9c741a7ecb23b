from flask import Blueprint, jsonify, g
from ..auth import require_user
from ..errors import TablebookError
from ..extensions import db
from ..http import jerror, jfail, json_body
from ..reservations import (
    create_reservation,
    delete_reservation,
    list_reservations,
    serialize_reservation,
    update_reservation,
)

bp = Blueprint("reservations", __name__)

@bp.post("/reservations")
@require_user
def create():
    payload = json_body()
    if payload is None:
        return jerror(400, "INVALID_PAYLOAD", "Missing or invalid JSON payload.")

    try:
        res = create_reservation(
            db.session,
            g.user_id,
            restaurant_id=payload.get("restaurant_id"),
            date=payload.get("date"),
            time=payload.get("time"),
            party_size=payload.get("people_count"),
        )
    except TablebookError as e:
        return jfail(e)

    return jsonify(message="Reservation created successfully", **serialize_reservation(res)), 201

@bp.get("/user/reservations")
@require_user
def mine():
    """
    All reservations of the caller, decorated with the restaurant name.
    Ordered by date then time; upcoming/past grouping is left to the client.
    """
    try:
        rows = list_reservations(db.session, g.user_id)
    except TablebookError as e:
        return jfail(e)
    return jsonify([serialize_reservation(res, restaurant_name=name) for res, name in rows])

@bp.put("/reservations/update")
@require_user
def update():
    payload = json_body()
    if payload is None:
        return jerror(400, "INVALID_PAYLOAD", "Missing or invalid JSON payload.")

    try:
        res = update_reservation(
            db.session,
            payload.get("reservation_id"),
            g.user_id,
            date=payload.get("date"),
            time=payload.get("time"),
            party_size=payload.get("people_count"),
        )
    except TablebookError as e:
        return jfail(e)

    return jsonify(message="Reservation updated successfully", reservation=serialize_reservation(res))

@bp.delete("/reservations/<reservation_id>")
@require_user
def cancel(reservation_id):
    try:
        delete_reservation(db.session, reservation_id, g.user_id)
    except TablebookError as e:
        return jfail(e)
    return jsonify(message="Reservation deleted successfully")
