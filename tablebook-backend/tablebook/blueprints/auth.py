import logging

from flask import Blueprint, jsonify
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from ..auth import issue_token
from ..directory import store_failure
from ..errors import EmailTaken, InvalidCredentials, StoreUnavailable
from ..extensions import db
from ..http import jerror, jfail, json_body
from ..models import User
from ..schemas import LoginRequest, RegisterRequest

logger = logging.getLogger(__name__)

bp = Blueprint("auth", __name__)

def _find_user(email: str) -> User | None:
    try:
        return User.query.filter_by(email=email).one_or_none()
    except SQLAlchemyError as e:
        raise store_failure(db.session, "looking up a user") from e

@bp.post("/register")
def register():
    payload = json_body()
    if payload is None:
        return jerror(400, "INVALID_PAYLOAD", "Missing or invalid JSON payload.")

    try:
        data = RegisterRequest.model_validate(payload)
    except ValidationError as e:
        return jerror(400, "VALIDATION_ERROR", "Invalid input.", details=e.errors(include_url=False, include_context=False, include_input=False))

    email = data.email.lower()
    try:
        existing = _find_user(email)
    except StoreUnavailable as e:
        return jfail(e)
    if existing is not None:
        return jfail(EmailTaken())

    user = User(name=data.name, email=email, password_hash=generate_password_hash(data.password))
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return jfail(EmailTaken())
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Failed to register %s", email)
        return jfail(StoreUnavailable())

    logger.info("Registered user %s", user.user_id)
    return jsonify(message="User registered successfully", user_id=user.user_id), 201

@bp.post("/login")
def login():
    payload = json_body()
    if payload is None:
        return jerror(400, "INVALID_PAYLOAD", "Missing or invalid JSON payload.")

    try:
        data = LoginRequest.model_validate(payload)
    except ValidationError as e:
        return jerror(400, "VALIDATION_ERROR", "Invalid input.", details=e.errors(include_url=False, include_context=False, include_input=False))

    try:
        user = _find_user(data.email.lower())
    except StoreUnavailable as e:
        return jfail(e)
    if user is None or not check_password_hash(user.password_hash, data.password):
        return jfail(InvalidCredentials())

    return jsonify(token=issue_token(user.user_id), user_id=user.user_id, name=user.name)
