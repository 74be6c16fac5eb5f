import hmac

from fastapi import Depends, HTTPException, Request

from app.core.config import Settings
from app.services.notify_service import TelegramConfig, TelegramNotifier
from app.services.payment_service import PayHereConfig
from app.services.store_client import BookingStore, StoreConfig


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(settings: Settings = Depends(get_settings)) -> BookingStore:
    return BookingStore(StoreConfig(
        url=settings.SUPABASE_URL,
        service_key=settings.SUPABASE_SERVICE_KEY,
        table=settings.BOOKINGS_TABLE,
        timeout=settings.SUPABASE_TIMEOUT,
    ))


def get_notifier(settings: Settings = Depends(get_settings)) -> TelegramNotifier:
    return TelegramNotifier(TelegramConfig(
        bot_token=settings.TELEGRAM_BOT_TOKEN,
        chat_ids=settings.telegram_chat_ids,
        timeout=settings.TELEGRAM_TIMEOUT,
    ))


def get_payhere_config(settings: Settings = Depends(get_settings)) -> PayHereConfig:
    return PayHereConfig(
        merchant_id=settings.PAYHERE_MERCHANT_ID,
        merchant_secret=settings.PAYHERE_MERCHANT_SECRET,
        currency=settings.PAYHERE_CURRENCY,
        checkout_url=settings.PAYHERE_CHECKOUT_URL,
        return_url=settings.PAYHERE_RETURN_URL,
        cancel_url=settings.PAYHERE_CANCEL_URL,
        notify_url=settings.PAYHERE_NOTIFY_URL,
        order_prefix=settings.PAYHERE_ORDER_PREFIX,
        items=settings.PAYHERE_ITEMS,
        address=settings.PAYHERE_ADDRESS,
        city=settings.PAYHERE_CITY,
        country=settings.PAYHERE_COUNTRY,
        default_amount=settings.DEFAULT_DEPOSIT_LKR,
    )


def admin_token_ok(request: Request) -> bool:
    expected = request.app.state.settings.ADMIN_TOKEN
    supplied = request.headers.get("X-Admin-Token") or ""
    if not expected or not supplied:
        return False
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def require_admin(request: Request) -> None:
    if not admin_token_ok(request):
        raise HTTPException(status_code=401, detail="Unauthorized")
