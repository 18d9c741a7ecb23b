import logging
import uuid

from jose import jwt
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from tablebook.auth import ALGORITHM, DEV_JWT_SECRET, issue_token
from tablebook.extensions import db
from tablebook.models import Reservation
from tablebook.partition import partition_reservations


SCENARIO = {"restaurant_id": 1, "date": "2025-06-01", "time": "19:00", "people_count": 4}


def _unique_email(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:10]}@example.com"


def test_health_ok(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.get_json().get("status") == "ok"


def test_register_then_login_returns_usable_token(client):
    email = _unique_email("register")
    r = client.post("/api/auth/register", json={"name": "Tester", "email": email, "password": "secret-pw"})
    assert r.status_code == 201
    user_id = r.get_json()["user_id"]
    assert isinstance(user_id, int)

    r = client.post("/api/auth/login", json={"email": email.upper(), "password": "secret-pw"})
    assert r.status_code == 200
    body = r.get_json()
    assert body["user_id"] == user_id
    assert body["name"] == "Tester"

    r = client.get("/api/user/reservations", headers={"Authorization": f"Bearer {body['token']}"})
    assert r.status_code == 200
    assert r.get_json() == []


def test_register_duplicate_email_409(client):
    r = client.post("/api/auth/register", json={"name": "Again", "email": "seven@example.com", "password": "secret-pw"})
    assert r.status_code == 409
    assert r.get_json()["code"] == "EMAIL_TAKEN"


def test_register_invalid_email_400(client):
    r = client.post("/api/auth/register", json={"name": "X", "email": "not-an-email", "password": "secret-pw"})
    assert r.status_code == 400
    body = r.get_json()
    assert body["code"] == "VALIDATION_ERROR"
    assert "secret-pw" not in r.get_data(as_text=True)


def test_login_wrong_password_401(client):
    r = client.post("/api/auth/login", json={"email": "seven@example.com", "password": "nope"})
    assert r.status_code == 401
    assert r.get_json()["code"] == "INVALID_CREDENTIALS"


def test_reservations_require_bearer_token_401(client):
    r = client.post("/api/reservations", json=SCENARIO)
    assert r.status_code == 401
    assert r.get_json()["code"] == "UNAUTHENTICATED"


def test_garbage_token_403(client):
    r = client.get("/api/user/reservations", headers={"Authorization": "Bearer not.a.jwt"})
    assert r.status_code == 403
    assert r.get_json()["code"] == "INVALID_TOKEN"


def test_invalid_payload_400(client, auth_header):
    r = client.post("/api/reservations", data="not json", headers=auth_header(7), content_type="application/json")
    assert r.status_code == 400
    assert r.get_json()["code"] == "INVALID_PAYLOAD"


def test_missing_fields_400(client, auth_header):
    r = client.post("/api/reservations", json={"restaurant_id": 1, "date": "2025-06-01"}, headers=auth_header(7))
    assert r.status_code == 400
    body = r.get_json()
    assert body["code"] == "MISSING_FIELDS"
    assert body["details"] == ["time", "people_count"]


def test_unknown_restaurant_404(client, auth_header):
    r = client.post("/api/reservations", json={**SCENARIO, "restaurant_id": 404}, headers=auth_header(7))
    assert r.status_code == 404
    assert r.get_json()["code"] == "RESTAURANT_NOT_FOUND"


def test_end_to_end_booking_scenarios(app, client, auth_header):
    headers = auth_header(7)

    # 1: created, time stored with seconds
    r = client.post("/api/reservations", json=SCENARIO, headers=headers)
    assert r.status_code == 201
    body = r.get_json()
    assert body["message"]
    assert body["time"] == "19:00:00"
    reservation_id = body["reservation_id"]
    assert db.session.get(Reservation, reservation_id).time.strftime("%H:%M:%S") == "19:00:00"

    # 2: identical request is a duplicate
    r = client.post("/api/reservations", json=SCENARIO, headers=headers)
    assert r.status_code == 400
    assert r.get_json()["code"] == "DUPLICATE_RESERVATION"

    r = client.get("/api/user/reservations", headers=headers)
    assert r.status_code == 200
    listed = r.get_json()
    assert listed == [{
        "restaurant_name": "Trattoria Lucia",
        "restaurant_id": 1,
        "reservation_id": reservation_id,
        "date": "2025-06-01",
        "time": "19:00:00",
        "people_count": 4,
    }]

    # 3: before the slot it is upcoming
    view = partition_reservations(listed, "2025-05-01T00:00:00Z")
    assert len(view.upcoming) == 1 and len(view.past) == 0

    # 4: after the slot it is past
    view = partition_reservations(listed, "2025-07-01T00:00:00Z")
    assert len(view.upcoming) == 0 and len(view.past) == 1

    # 5: party size 0 is rejected and nothing changes
    r = client.put(
        "/api/reservations/update",
        json={"reservation_id": reservation_id, "date": "2025-06-01", "time": "19:00", "people_count": 0},
        headers=headers,
    )
    assert r.status_code == 400
    assert r.get_json()["code"] == "INVALID_PARTY_SIZE"
    assert client.get("/api/user/reservations", headers=headers).get_json() == listed


def test_update_and_cancel_by_owner(client, auth_header):
    headers = auth_header(7)
    rid = client.post("/api/reservations", json=SCENARIO, headers=headers).get_json()["reservation_id"]

    r = client.put(
        "/api/reservations/update",
        json={"reservation_id": rid, "date": "2025-06-02", "time": "20:30:00", "people_count": 2},
        headers=headers,
    )
    assert r.status_code == 200
    assert r.get_json()["reservation"] == {
        "reservation_id": rid,
        "restaurant_id": 1,
        "date": "2025-06-02",
        "time": "20:30:00",
        "people_count": 2,
    }

    r = client.delete(f"/api/reservations/{rid}", headers=headers)
    assert r.status_code == 200
    assert client.get("/api/user/reservations", headers=headers).get_json() == []


def test_other_user_gets_same_answer_as_for_missing_reservation(client, auth_header):
    rid = client.post("/api/reservations", json=SCENARIO, headers=auth_header(7)).get_json()["reservation_id"]
    intruder = auth_header(8)

    update = {"date": "2025-06-01", "time": "19:00", "people_count": 2}
    foreign = client.put("/api/reservations/update", json={**update, "reservation_id": rid}, headers=intruder)
    missing = client.put("/api/reservations/update", json={**update, "reservation_id": 99999}, headers=intruder)
    assert foreign.status_code == missing.status_code == 404
    assert foreign.get_json() == missing.get_json()

    foreign = client.delete(f"/api/reservations/{rid}", headers=intruder)
    missing = client.delete("/api/reservations/99999", headers=intruder)
    assert foreign.status_code == missing.status_code == 404
    assert foreign.get_json() == missing.get_json()

    assert len(client.get("/api/user/reservations", headers=auth_header(7)).get_json()) == 1


def test_list_restaurants(client):
    r = client.get("/api/restaurants")
    assert r.status_code == 200
    rows = r.get_json()
    assert [row["restaurant_id"] for row in rows] == [1, 2, 3]
    assert set(rows[0]) == {"restaurant_id", "name", "location", "description"}


def test_search_matches_name_or_location_case_insensitively(client):
    r = client.get("/api/restaurants/search", query_string={"query": "downtown"})
    assert r.status_code == 200
    assert [row["name"] for row in r.get_json()] == ["Trattoria Lucia", "Downtown Diner"]

    r = client.get("/api/restaurants/search", query_string={"query": "sakura"})
    assert [row["restaurant_id"] for row in r.get_json()] == [2]


def test_search_requires_query_400(client):
    r = client.get("/api/restaurants/search")
    assert r.status_code == 400
    assert r.get_json()["code"] == "MISSING_FIELDS"


def test_get_restaurant(client):
    assert client.get("/api/restaurants/2").get_json()["name"] == "Sakura House"
    r = client.get("/api/restaurants/999")
    assert r.status_code == 404
    assert r.get_json()["code"] == "RESTAURANT_NOT_FOUND"


def test_out_of_range_numbers_get_json_errors(client, auth_header):
    headers = auth_header(7)
    r = client.post("/api/reservations", json={**SCENARIO, "people_count": 10**20}, headers=headers)
    assert r.status_code == 400
    assert r.get_json()["code"] == "INVALID_PARTY_SIZE"

    r = client.delete(f"/api/reservations/{10**20}", headers=headers)
    assert r.status_code == 404
    assert r.get_json()["code"] == "NOT_FOUND_OR_UNAUTHORIZED"

    r = client.get("/api/user/reservations", headers=auth_header(10**20))
    assert r.status_code == 403
    assert r.get_json()["code"] == "INVALID_TOKEN"


def test_fractional_restaurant_id_is_not_found(client, auth_header):
    r = client.post("/api/reservations", json={**SCENARIO, "restaurant_id": 1.9}, headers=auth_header(7))
    assert r.status_code == 404
    assert r.get_json()["code"] == "RESTAURANT_NOT_FOUND"
    assert client.get("/api/user/reservations", headers=auth_header(7)).get_json() == []


def test_search_wildcards_match_literally(client):
    for query in ("%", "_", "Down%"):
        r = client.get("/api/restaurants/search", query_string={"query": query})
        assert r.status_code == 200
        assert r.get_json() == []


def test_login_during_store_outage_500(client, monkeypatch):
    def boom(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("could not connect to 10.0.0.5"))

    monkeypatch.setattr(Session, "execute", boom)
    r = client.post("/api/auth/login", json={"email": "seven@example.com", "password": "pw-seven"})
    assert r.status_code == 500
    body = r.get_json()
    assert body["code"] == "STORE_UNAVAILABLE"
    assert "10.0.0.5" not in body["error"]

    r = client.post("/api/auth/register", json={"name": "N", "email": _unique_email("outage"), "password": "secret-pw"})
    assert r.status_code == 500
    assert r.get_json()["code"] == "STORE_UNAVAILABLE"


def test_missing_jwt_secret_falls_back_with_a_warning(app, monkeypatch, caplog):
    monkeypatch.delitem(app.config, "JWT_SECRET")
    monkeypatch.delenv("JWT_SECRET", raising=False)
    with caplog.at_level(logging.WARNING, logger="tablebook.auth"):
        token = issue_token(7)
    assert "JWT_SECRET is not set" in caplog.text
    assert jwt.decode(token, DEV_JWT_SECRET, algorithms=[ALGORITHM])["user_id"] == 7
