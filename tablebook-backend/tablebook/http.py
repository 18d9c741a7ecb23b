from flask import jsonify, request

from .errors import TablebookError

def jerror(status: int, code: str, message: str, details=None):
    payload = {"code": code, "error": message}
    if details:
        payload["details"] = details
    return jsonify(payload), status

def jfail(err: TablebookError):
    return jerror(err.status, err.code, err.message, details=err.details)

def json_body() -> dict | None:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else None
