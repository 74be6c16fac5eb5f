import logging
from datetime import date, datetime

from app.schemas.booking import BookingStatus, InquiryIn, PaymentMethod, PaymentStatus
from app.services.notify_service import TelegramNotifier, format_inquiry_message
from app.services.store_client import BookingStore

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


class InvalidRange(ValueError):
    pass


class DatesUnavailable(ValueError):
    pass


def _parse_date(value: str) -> date:
    try:
        parsed = datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        raise InvalidRange("Dates must be YYYY-MM-DD.")
    # strptime also accepts unpadded fields such as 2025-6-1
    if parsed.isoformat() != value:
        raise InvalidRange("Dates must be YYYY-MM-DD.")
    return parsed


def validate_range(checkin: str | None, checkout: str | None, *, bad_order: str = "Invalid date range.") -> None:
    """Raise InvalidRange unless both dates are YYYY-MM-DD and checkout > checkin."""
    if not checkin or not checkout:
        raise InvalidRange("Missing dates.")
    if _parse_date(checkout) <= _parse_date(checkin):
        raise InvalidRange(bad_order)


def check_availability(store: BookingStore, checkin: str | None, checkout: str | None) -> bool:
    validate_range(checkin, checkout)
    return not store.find_overlap(checkin, checkout)


def build_booking_row(body: InquiryIn, deposit_lkr: float) -> dict:
    return {
        "name": body.name,
        "email": body.email,
        "phone": body.phone or None,
        "guests": body.guests_or_none(),
        "checkin": body.checkin,
        "checkout": body.checkout,
        "message": body.message or None,
        "status": BookingStatus.inquiry.value,
        "source": body.source or "website",
        "preferred_contact": body.preferred_contact or None,
        "payment_method": (body.payment_method or PaymentMethod.pay_later).value,
        "payment_status": PaymentStatus.unpaid.value,
        "amount_lkr": int(deposit_lkr) if float(deposit_lkr).is_integer() else deposit_lkr,
    }


def create_inquiry(store: BookingStore, notifier: TelegramNotifier, body: InquiryIn,
                   deposit_lkr: float, villa_name: str = "MIK ZID Villa") -> dict:
    """Validate, re-check overlap, insert, notify. Returns the inserted row.

    The overlap check and the insert are separate store calls, so two
    concurrent inquiries for the same dates can both succeed.
    """
    if body.missing_required():
        raise ValueError("Missing required fields.")
    validate_range(body.checkin, body.checkout, bad_order="Check-out must be after check-in.")

    if store.find_overlap(body.checkin, body.checkout):
        raise DatesUnavailable("These dates are already booked.")

    booking = store.insert_booking(build_booking_row(body, deposit_lkr))
    logger.info("Inquiry saved: booking %s (%s -> %s)", booking.get("id"), body.checkin, body.checkout)

    notifier.notify_admins(format_inquiry_message(booking, villa_name))
    return booking
