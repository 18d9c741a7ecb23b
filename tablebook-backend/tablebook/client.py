"""HTTP client for the Tablebook API.

Mirrors what the mobile app does: validate forms locally before sending,
keep request timeouts short, and split the fetched reservations into
upcoming and past ones for display.

    client = TablebookClient("http://localhost:8000")
    client.login("demo@example.com", "demo-password")
    view = client.reservations_view()
"""
import logging

import requests

from .errors import ApiError, NetworkError
from .partition import Partition, partition_reservations
from .validation import require_fields, validate_reservation

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 5.0


class TablebookClient:
    def __init__(self, base_url: str, token: str | None = None, timeout: float = DEFAULT_TIMEOUT, session=None):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, auth: bool = False, **kwargs):
        headers = kwargs.pop("headers", {})
        if auth and self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        url = f"{self.base_url}/api{path}"
        try:
            r = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.warning("%s %s unreachable: %s", method, url, e)
            raise NetworkError(f"Could not reach {self.base_url}") from e

        try:
            body = r.json()
        except ValueError:
            body = None

        if r.status_code >= 400:
            if isinstance(body, dict):
                raise ApiError(r.status_code, body.get("code", "UNKNOWN"), body.get("error", r.reason or ""))
            raise ApiError(r.status_code, "UNKNOWN", r.reason or "Request failed")
        return body

    # accounts

    def register(self, name: str, email: str, password: str) -> dict:
        return self._request("POST", "/auth/register", json={"name": name, "email": email, "password": password})

    def login(self, email: str, password: str) -> dict:
        body = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = body["token"]
        return body

    # restaurants

    def list_restaurants(self) -> list[dict]:
        return self._request("GET", "/restaurants")

    def search_restaurants(self, query: str) -> list[dict]:
        if not query or not query.strip():
            return self.list_restaurants()
        return self._request("GET", "/restaurants/search", params={"query": query})

    def get_restaurant(self, restaurant_id: int) -> dict:
        return self._request("GET", f"/restaurants/{restaurant_id}")

    # reservations

    def create_reservation(self, restaurant_id: int, date: str, time: str, people_count) -> dict:
        require_fields(restaurant_id=restaurant_id)
        fields = validate_reservation(date, time, people_count)
        return self._request("POST", "/reservations", auth=True, json={
            "restaurant_id": restaurant_id,
            "date": fields.date,
            "time": fields.time,
            "people_count": fields.party_size,
        })

    def list_reservations(self) -> list[dict]:
        body = self._request("GET", "/user/reservations", auth=True)
        return body if isinstance(body, list) else []

    def reservations_view(self, now=None) -> Partition:
        return partition_reservations(self.list_reservations(), now)

    def update_reservation(self, reservation_id: int, date: str, time: str, people_count) -> dict:
        require_fields(reservation_id=reservation_id)
        fields = validate_reservation(date, time, people_count)
        return self._request("PUT", "/reservations/update", auth=True, json={
            "reservation_id": reservation_id,
            "date": fields.date,
            "time": fields.time,
            "people_count": fields.party_size,
        })

    def cancel_reservation(self, reservation_id: int) -> dict:
        return self._request("DELETE", f"/reservations/{reservation_id}", auth=True)
