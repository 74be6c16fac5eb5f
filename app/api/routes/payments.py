from urllib.parse import parse_qsl

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from starlette.concurrency import run_in_threadpool

from app.api.deps import get_notifier, get_payhere_config, get_store
from app.schemas.payments import PayHereNotification
from app.services import payhere
from app.services.notify_service import TelegramNotifier
from app.services.payment_service import (
    InvalidBookingAmount,
    PayHereConfig,
    PaymentNotConfigured,
    apply_notification,
    prepare_checkout,
    wants_online_payment,
)
from app.services.store_client import BookingStore

router = APIRouter(tags=["payments"])


def _page(message: str, status_code: int) -> HTMLResponse:
    return HTMLResponse(payhere.render_message_page(message), status_code=status_code)


@router.get("/pay", response_class=HTMLResponse)
def pay(request: Request, booking_id: str | None = None,
        store: BookingStore = Depends(get_store),
        cfg: PayHereConfig = Depends(get_payhere_config)):
    if not booking_id:
        return _page("Missing booking_id", 400)
    booking_id = booking_id.strip()
    # str.isdigit() also accepts non-ASCII digits that int() rejects
    if not (booking_id.isascii() and booking_id.isdigit()):
        return _page("Booking not found.", 404)

    booking = store.get_booking(int(booking_id))
    if not booking:
        return _page("Booking not found.", 404)

    if not wants_online_payment(booking):
        return _page("This booking is set to Pay Later. No online payment required.", 200)

    notify_url = str(request.base_url).rstrip("/") + "/payhere/notify"
    try:
        form = prepare_checkout(store, cfg, booking, notify_url)
    except (PaymentNotConfigured, InvalidBookingAmount) as e:
        return _page(str(e), 500)
    return HTMLResponse(payhere.render_checkout_page(form, booking["id"]))


@router.post("/payhere/notify", response_class=PlainTextResponse)
async def payhere_notify(request: Request,
                         store: BookingStore = Depends(get_store),
                         notifier: TelegramNotifier = Depends(get_notifier),
                         cfg: PayHereConfig = Depends(get_payhere_config)):
    body = (await request.body()).decode("utf-8", errors="replace")
    form: dict[str, str] = {}
    for key, value in parse_qsl(body, keep_blank_values=True):
        form.setdefault(key, value)  # first occurrence wins on repeated keys
    note = PayHereNotification.from_form(form)
    if not cfg.configured:
        return PlainTextResponse("not configured", status_code=500)
    # Store and Telegram calls are blocking; keep them off the event loop.
    await run_in_threadpool(apply_notification, store, notifier, cfg, note)
    return PlainTextResponse("ok")
