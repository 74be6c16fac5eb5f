import logging
from dataclasses import dataclass

import requests

from app.core.errors import StoreError

logger = logging.getLogger(__name__)

RESERVED_STATUSES = ("confirmed", "blocked")


@dataclass
class StoreConfig:
    url: str                # https://<project>.supabase.co
    service_key: str        # sent as apikey + bearer token
    table: str = "bookings"
    timeout: int = 15


class BookingStore:
    """Thin PostgREST client for the bookings table. No caching, no transactions."""

    def __init__(self, cfg: StoreConfig):
        self.cfg = cfg

    def _headers(self, extra: dict | None = None) -> dict:
        headers = {
            "apikey": self.cfg.service_key,
            "Authorization": f"Bearer {self.cfg.service_key}",
        }
        if extra:
            headers.update(extra)
        return headers

    def request(self, method: str, params: dict | None = None, payload=None, headers: dict | None = None):
        if not self.cfg.url:
            raise StoreError("Data store is not configured")
        url = f"{self.cfg.url.rstrip('/')}/rest/v1/{self.cfg.table}"
        kwargs = {"params": params or {}, "headers": self._headers(headers), "timeout": self.cfg.timeout}
        if payload is not None:
            kwargs["json"] = payload
        r = requests.request(method.upper(), url, **kwargs)
        if r.status_code >= 300:
            logger.error("Data store %s %s -> %s: %s", method.upper(), self.cfg.table, r.status_code, r.text)
            raise StoreError(f"Data store {r.status_code}", status_code=r.status_code, detail=r.text)
        if not r.text:
            return None
        return r.json()

    def find_overlap(self, checkin: str, checkout: str) -> bool:
        """True if a reserved booking [a, b) satisfies a < checkout and b > checkin."""
        rows = self.request("GET", params={
            "select": "id,checkin,checkout,status",
            "status": f"in.({','.join(RESERVED_STATUSES)})",
            "checkin": f"lt.{checkout}",
            "checkout": f"gt.{checkin}",
            "limit": "1",
        })
        return bool(rows)

    def insert_booking(self, row: dict) -> dict:
        rows = self.request("POST", payload=[row], headers={
            "Content-Type": "application/json",
            "Prefer": "return=representation",
        })
        return (rows or [{}])[0]

    def update_booking(self, booking_id, patch: dict) -> None:
        self.request("PATCH", params={"id": f"eq.{booking_id}"}, payload=patch, headers={
            "Content-Type": "application/json",
        })

    def _first(self, params: dict) -> dict | None:
        rows = self.request("GET", params={"select": "*", **params, "limit": "1"})
        return rows[0] if rows else None

    def get_booking(self, booking_id) -> dict | None:
        return self._first({"id": f"eq.{booking_id}"})

    def get_booking_by_order_id(self, order_id: str) -> dict | None:
        return self._first({"payhere_order_id": f"eq.{order_id}"})

    def list_bookings(self, status: str | None = None) -> list[dict]:
        params = {"select": "*", "order": "id.desc"}
        if status:
            params["status"] = f"eq.{status}"
        return self.request("GET", params=params) or []
