import math

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator

DEFAULT_DEPOSIT_LKR = 5000


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_NAME: str = "Villa Booking API"
    LOG_LEVEL: str = "INFO"

    # Supabase / PostgREST data store
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_KEY: str = ""
    SUPABASE_TIMEOUT: int = 15
    BOOKINGS_TABLE: str = "bookings"

    # Telegram operator notifications
    TELEGRAM_BOT_TOKEN: str = ""
    TELEGRAM_CHAT_IDS: str = ""  # comma-separated, e.g. 12345,-100987
    TELEGRAM_TIMEOUT: int = 10

    ADMIN_TOKEN: str = ""

    DEFAULT_DEPOSIT_LKR: float = DEFAULT_DEPOSIT_LKR

    @field_validator("DEFAULT_DEPOSIT_LKR", mode="before")
    @classmethod
    def deposit_or_default(cls, v):
        """Blank, unparsable or non-finite env values fall back to the built-in deposit."""
        try:
            value = float(v)
        except (TypeError, ValueError):
            return DEFAULT_DEPOSIT_LKR
        return value if math.isfinite(value) else DEFAULT_DEPOSIT_LKR

    # PayHere checkout
    PAYHERE_MERCHANT_ID: str = ""
    PAYHERE_MERCHANT_SECRET: str = ""
    PAYHERE_CURRENCY: str = "LKR"
    PAYHERE_CHECKOUT_URL: str = "https://www.payhere.lk/pay/checkout"
    PAYHERE_RETURN_URL: str = "https://example.com/thank-you"
    PAYHERE_CANCEL_URL: str = "https://example.com/cancelled"
    PAYHERE_NOTIFY_URL: str = ""  # empty -> <request origin>/payhere/notify
    PAYHERE_ORDER_PREFIX: str = "MZV"
    PAYHERE_ITEMS: str = "MIK ZID Villa Reservation Deposit"
    PAYHERE_ADDRESS: str = "Piliyandala"
    PAYHERE_CITY: str = "Colombo"
    PAYHERE_COUNTRY: str = "Sri Lanka"

    VILLA_NAME: str = "MIK ZID Villa"

    @property
    def telegram_chat_ids(self) -> list[str]:
        return [c.strip() for c in self.TELEGRAM_CHAT_IDS.split(",") if c.strip()]
