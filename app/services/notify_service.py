import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import requests

logger = logging.getLogger(__name__)

_TELEGRAM_API = "https://api.telegram.org/bot{token}/{method}"


@dataclass
class TelegramConfig:
    bot_token: str
    chat_ids: list[str] = field(default_factory=list)
    timeout: int = 10


class TelegramNotifier:
    """Best-effort operator notifications: one sendMessage per chat, sent concurrently.

    A failure for one chat is logged and discarded; it never affects the other
    chats or the caller. There is no retry.
    """

    def __init__(self, cfg: TelegramConfig):
        self.cfg = cfg

    @property
    def enabled(self) -> bool:
        return bool(self.cfg.bot_token and self.cfg.chat_ids)

    def send_message(self, chat_id: str, text: str) -> None:
        url = _TELEGRAM_API.format(token=self.cfg.bot_token, method="sendMessage")
        r = requests.post(url, json={"chat_id": chat_id, "text": text}, timeout=self.cfg.timeout)
        if r.status_code >= 300:
            raise RuntimeError(f"Telegram sendMessage {r.status_code}: {r.text}")

    def _send_quietly(self, chat_id: str, text: str) -> bool:
        try:
            self.send_message(chat_id, text)
            return True
        except Exception as e:
            logger.warning("Telegram notification to chat %s dropped: %s", chat_id, e)
            return False

    def notify_admins(self, text: str) -> dict[str, bool]:
        """Send `text` to every configured chat; returns per-chat delivery outcome."""
        if not self.enabled:
            return {}
        chat_ids = self.cfg.chat_ids
        with ThreadPoolExecutor(max_workers=len(chat_ids)) as pool:
            outcomes = list(pool.map(lambda c: self._send_quietly(c, text), chat_ids))
        return dict(zip(chat_ids, outcomes))


def format_inquiry_message(booking: dict | None, villa_name: str = "MIK ZID Villa") -> str:
    if not booking:
        return "📩 New inquiry received (details unavailable)"
    b = booking
    contact = b.get("email") or ""
    if b.get("phone"):
        contact += f", {b['phone']}"
    guests = b.get("guests")
    amount = b.get("amount_lkr")
    lines = [
        f"📩 New Inquiry — {villa_name}",
        f"Booking ID: {b.get('id')}",
        f"Dates: {b.get('checkin')} → {b.get('checkout')}",
        f"Guest: {b.get('name')} ({contact})",
        f"Guests: {guests if guests is not None else '-'}",
        f"Payment: {b.get('payment_method') or 'pay_later'} | Status: {b.get('payment_status') or 'unpaid'}"
        f" | Amount: LKR {amount if amount is not None else '-'}",
        f"Message: {b['message']}" if b.get("message") else "",
    ]
    return "\n".join(line for line in lines if line)


def format_payment_paid_message(booking: dict, order_id: str) -> str:
    return (
        f"✅ Payment received! Booking {booking.get('id')} "
        f"({booking.get('checkin')}→{booking.get('checkout')}) Order {order_id}"
    )


def format_payment_failed_message(booking: dict, order_id: str, status_code: str) -> str:
    return f"⚠️ Payment not completed. Booking {booking.get('id')} Order {order_id} status_code={status_code}"


def format_signature_failed_message(booking: dict, order_id: str) -> str:
    return f"❌ PayHere signature failed for {order_id} (booking {booking.get('id')})."


def format_admin_update_message(booking_id, patch: dict) -> str:
    changes = ", ".join(f"{k}={v}" for k, v in patch.items())
    return f"🛠️ Admin updated booking {booking_id}: {changes}"
