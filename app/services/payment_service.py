import logging
from dataclasses import dataclass

from app.schemas.booking import PaymentMethod, PaymentStatus
from app.schemas.payments import PayHereNotification
from app.services import payhere
from app.services.notify_service import (
    TelegramNotifier,
    format_payment_failed_message,
    format_payment_paid_message,
    format_signature_failed_message,
)
from app.services.store_client import BookingStore

logger = logging.getLogger(__name__)


@dataclass
class PayHereConfig:
    merchant_id: str
    merchant_secret: str
    currency: str = "LKR"
    checkout_url: str = "https://www.payhere.lk/pay/checkout"
    return_url: str = "https://example.com/thank-you"
    cancel_url: str = "https://example.com/cancelled"
    notify_url: str = ""
    order_prefix: str = "MZV"
    items: str = "Reservation Deposit"
    address: str = ""
    city: str = ""
    country: str = ""
    default_amount: float = 5000

    @property
    def configured(self) -> bool:
        return bool(self.merchant_id and self.merchant_secret)


class PaymentNotConfigured(RuntimeError):
    pass


class InvalidBookingAmount(RuntimeError):
    pass


def wants_online_payment(booking: dict) -> bool:
    return str(booking.get("payment_method") or PaymentMethod.pay_later.value) == PaymentMethod.pay_online.value


def prepare_checkout(store: BookingStore, cfg: PayHereConfig, booking: dict, notify_url: str) -> payhere.CheckoutForm:
    """Build the hashed checkout form and attach the order id to the booking before it is rendered."""
    if not cfg.configured:
        raise PaymentNotConfigured("PayHere is not configured yet. Please contact the villa.")

    raw_amount = booking.get("amount_lkr") or cfg.default_amount
    try:
        amount = payhere.format_amount(raw_amount)
    except ValueError:
        logger.error("Booking %s has an unusable amount_lkr %r", booking["id"], raw_amount)
        raise InvalidBookingAmount("This booking has an invalid amount. Please contact the villa.")
    order_id = payhere.order_id_for(cfg.order_prefix, booking["id"])
    digest = payhere.checkout_hash(cfg.merchant_id, cfg.merchant_secret, order_id, amount, cfg.currency)

    store.update_booking(booking["id"], {"payhere_order_id": order_id})
    logger.info("Checkout prepared for booking %s as order %s", booking["id"], order_id)

    first_name, last_name = payhere.split_name(booking.get("name"))
    return payhere.CheckoutForm(
        action=cfg.checkout_url,
        merchant_id=cfg.merchant_id,
        return_url=cfg.return_url,
        cancel_url=cfg.cancel_url,
        notify_url=cfg.notify_url or notify_url,
        order_id=order_id,
        items=cfg.items,
        currency=cfg.currency,
        amount=amount,
        first_name=first_name,
        last_name=last_name,
        email=booking.get("email") or "",
        phone=booking.get("phone") or "",
        address=cfg.address,
        city=cfg.city,
        country=cfg.country,
        hash=digest,
    )


def apply_notification(store: BookingStore, notifier: TelegramNotifier, cfg: PayHereConfig,
                       note: PayHereNotification) -> str:
    """Apply a PayHere notify callback. Returns the outcome; the caller always answers 200.

    Outcomes: "unknown_order", "signature_failed", "paid", "failed".
    """
    if not cfg.configured:
        raise PaymentNotConfigured("not configured")

    booking = store.get_booking_by_order_id(note.order_id) if note.order_id else None
    if not booking:
        logger.info("PayHere notify for unknown order %r ignored", note.order_id)
        return "unknown_order"

    valid = payhere.verify_notify_signature(
        note.md5sig,
        merchant_id=cfg.merchant_id,
        merchant_secret=cfg.merchant_secret,
        order_id=note.order_id,
        payment_id=note.payment_id,
        amount=note.payhere_amount,
        currency=note.payhere_currency,
        status_code=note.status_code,
    )

    if not valid:
        logger.warning("PayHere signature mismatch for order %s (booking %s)", note.order_id, booking["id"])
        outcome, status = "signature_failed", PaymentStatus.failed
        message = format_signature_failed_message(booking, note.order_id)
    elif note.status_code == payhere.STATUS_SUCCESS:
        outcome, status = "paid", PaymentStatus.paid
        message = format_payment_paid_message(booking, note.order_id)
    else:
        outcome, status = "failed", PaymentStatus.failed
        message = format_payment_failed_message(booking, note.order_id, note.status_code)

    store.update_booking(booking["id"], {"payment_status": status.value, "payhere_payment_id": note.payment_id})
    logger.info("Booking %s payment_status=%s (order %s)", booking["id"], status.value, note.order_id)
    notifier.notify_admins(message)
    return outcome
