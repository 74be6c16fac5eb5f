"""Shared fixtures for the booking API tests.

- No network: `requests.request` / `requests.post` are replaced by FakeUpstream,
  an in-memory emulation of the PostgREST bookings table and the Telegram
  sendMessage endpoint.
- HTTP tests go through the local ASGI app with httpx.AsyncClient.
- AnyIO drives async tests (@pytest.mark.anyio).
"""
import json as jsonlib
from typing import AsyncGenerator

import httpx
import pytest
import requests
from httpx import ASGITransport

from app.core.config import Settings
from app.main import create_app

SUPABASE_URL = "https://store.test"
ADMIN_TOKEN = "admin-secret"
MERCHANT_ID = "M1"
MERCHANT_SECRET = "S1"


class FakeResponse:
    def __init__(self, status_code: int = 200, payload=None, text: str | None = None):
        self.status_code = status_code
        if text is None:
            text = "" if payload is None else jsonlib.dumps(payload)
        self.text = text

    def json(self):
        return jsonlib.loads(self.text)


def _matches(row: dict, column: str, expr: str) -> bool:
    op, _, operand = expr.partition(".")
    value = row.get(column)
    if op == "eq":
        return value is not None and str(value) == operand
    if op == "lt":
        return value is not None and str(value) < operand
    if op == "gt":
        return value is not None and str(value) > operand
    if op == "in":
        options = operand.strip("()").split(",")
        return value is not None and str(value) in options
    raise AssertionError(f"unsupported filter {column}={expr}")


class FakeUpstream:
    """Minimal PostgREST table + Telegram Bot API."""

    def __init__(self):
        self.rows: list[dict] = []
        self.next_id = 1
        self.calls: list[tuple[str, dict]] = []
        self.telegram: list[dict] = []
        self.failing_chats: set[str] = set()
        self.store_failure: tuple[int, str] | None = None

    def seed(self, **fields) -> dict:
        row = {
            "id": self.next_id,
            "name": "Seeded Guest",
            "email": "seed@example.com",
            "phone": None,
            "guests": None,
            "message": None,
            "status": "inquiry",
            "source": "website",
            "preferred_contact": None,
            "payment_method": "pay_later",
            "payment_status": "unpaid",
            "amount_lkr": 5000,
            "payhere_order_id": None,
            "payhere_payment_id": None,
        }
        row.update(fields)
        self.next_id = max(self.next_id, int(row["id"])) + 1
        self.rows.append(row)
        return row

    def get(self, booking_id) -> dict | None:
        return next((r for r in self.rows if r["id"] == booking_id), None)

    @property
    def writes(self) -> list[tuple[str, dict]]:
        return [c for c in self.calls if c[0] in ("POST", "PATCH")]

    def _select(self, params: dict) -> list[dict]:
        rows = [r for r in self.rows
                if all(_matches(r, k, v) for k, v in params.items() if k not in ("select", "order", "limit"))]
        if params.get("order") == "id.desc":
            rows = sorted(rows, key=lambda r: r["id"], reverse=True)
        if "limit" in params:
            rows = rows[: int(params["limit"])]
        select = params.get("select", "*")
        if select != "*":
            cols = select.split(",")
            rows = [{c: r.get(c) for c in cols} for r in rows]
        return [dict(r) for r in rows]

    def request(self, method, url, params=None, json=None, headers=None, timeout=None, **kwargs):
        assert url.startswith(SUPABASE_URL + "/rest/v1/bookings"), url
        assert headers["apikey"] and headers["Authorization"].startswith("Bearer ")
        params = dict(params or {})
        self.calls.append((method, {"params": params, "json": json, "headers": headers}))
        if self.store_failure:
            status, text = self.store_failure
            return FakeResponse(status, text=text)
        if method == "GET":
            return FakeResponse(200, self._select(params))
        if method == "POST":
            created = [self.seed(**{**row, "id": self.next_id}) for row in json]
            if "return=representation" in headers.get("Prefer", ""):
                return FakeResponse(201, created)
            return FakeResponse(201, text="")
        if method == "PATCH":
            for row in self.rows:
                if all(_matches(row, k, v) for k, v in params.items()):
                    row.update(json)
            return FakeResponse(204, text="")
        raise AssertionError(f"unexpected method {method}")

    def post(self, url, json=None, timeout=None, **kwargs):
        assert "api.telegram.org/bot" in url and url.endswith("/sendMessage"), url
        self.telegram.append(dict(json))
        if str(json["chat_id"]) in self.failing_chats:
            raise requests.ConnectionError("telegram unreachable")
        return FakeResponse(200, {"ok": True})


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def upstream(monkeypatch) -> FakeUpstream:
    fake = FakeUpstream()
    monkeypatch.setattr(requests, "request", fake.request)
    monkeypatch.setattr(requests, "post", fake.post)
    return fake


def make_settings(**overrides) -> Settings:
    values = dict(
        SUPABASE_URL=SUPABASE_URL,
        SUPABASE_SERVICE_KEY="service-key",
        TELEGRAM_BOT_TOKEN="bot-token",
        TELEGRAM_CHAT_IDS="111, 222",
        ADMIN_TOKEN=ADMIN_TOKEN,
        DEFAULT_DEPOSIT_LKR=5000,
        PAYHERE_MERCHANT_ID=MERCHANT_ID,
        PAYHERE_MERCHANT_SECRET=MERCHANT_SECRET,
        PAYHERE_NOTIFY_URL="",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
async def async_client(settings, upstream) -> AsyncGenerator[httpx.AsyncClient, None]:
    app = create_app(settings)
    async with httpx.AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


@pytest.fixture
def admin_headers() -> dict:
    return {"X-Admin-Token": ADMIN_TOKEN}


@pytest.fixture(scope="session")
def settings_factory():
    return make_settings


@pytest.fixture(scope="session")
def upstream_factory():
    return FakeUpstream
