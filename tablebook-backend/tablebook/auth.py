import logging
import os
from datetime import timedelta
from functools import wraps

from flask import current_app, g, request
from jose import JWTError, jwt

from .errors import InvalidToken, Unauthenticated
from .http import jfail
from .utils.time import utc_now
from .validation import MAX_INT

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
DEV_JWT_SECRET = "dev-jwt-secret"

def _get_jwt_secret() -> str:

    secret = current_app.config.get("JWT_SECRET") or os.getenv("JWT_SECRET")
    if secret and secret.strip():
        return secret.strip()

    logger.warning("JWT_SECRET is not set; signing tokens with the insecure development secret")
    return DEV_JWT_SECRET

def issue_token(user_id: int) -> str:
    expires = utc_now() + timedelta(minutes=current_app.config["JWT_EXPIRES_MINUTES"])
    return jwt.encode({"user_id": user_id, "exp": expires}, _get_jwt_secret(), algorithm=ALGORITHM)

def current_user_id() -> int:
    """
    Reads the user id out of the Authorization bearer token.
    The id is trusted as-is; the user row is not re-checked per request.
    """
    auth_header = request.headers.get("Authorization", "").strip()
    if not auth_header.lower().startswith("bearer ") or not auth_header[7:].strip():
        raise Unauthenticated()

    token = auth_header[7:].strip()
    try:
        claims = jwt.decode(token, _get_jwt_secret(), algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning("Token verification failed: %s", e)
        raise InvalidToken() from e

    user_id = claims.get("user_id")
    if isinstance(user_id, bool) or not isinstance(user_id, int) or not 1 <= user_id <= MAX_INT:
        logger.warning("Token without a usable user_id claim")
        raise InvalidToken()
    return user_id

def require_user(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        try:
            g.user_id = current_user_id()
        except Unauthenticated as e:
            return jfail(e)
        return view(*args, **kwargs)
    return wrapped
