from flask import Blueprint, request, jsonify
from ..directory import get_restaurant, list_restaurants, search_restaurants
from ..errors import RestaurantNotFound, TablebookError
from ..extensions import db
from ..http import jfail

bp = Blueprint("restaurants", __name__)

@bp.get("")
def index():
    try:
        restaurants = list_restaurants(db.session)
    except TablebookError as e:
        return jfail(e)
    return jsonify([r.to_dict() for r in restaurants])

@bp.get("/search")
def search():
    """Name or location substring search. Query: ?query=..."""
    try:
        restaurants = search_restaurants(db.session, request.args.get("query"))
    except TablebookError as e:
        return jfail(e)
    return jsonify([r.to_dict() for r in restaurants])

@bp.get("/<restaurant_id>")
def show(restaurant_id):
    try:
        restaurant = get_restaurant(db.session, restaurant_id)
    except TablebookError as e:
        return jfail(e)
    if restaurant is None:
        return jfail(RestaurantNotFound())
    return jsonify(restaurant.to_dict())
