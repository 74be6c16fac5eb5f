import math
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class BookingStatus(str, Enum):
    inquiry = "inquiry"
    confirmed = "confirmed"
    blocked = "blocked"
    cancelled = "cancelled"


class PaymentStatus(str, Enum):
    unpaid = "unpaid"
    paid = "paid"
    failed = "failed"


class PaymentMethod(str, Enum):
    pay_later = "pay_later"
    pay_online = "pay_online"


class InquiryIn(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    # Required fields are optional at parse time; presence is checked once in the service.
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    guests: Any = None
    checkin: Optional[str] = None
    checkout: Optional[str] = None
    message: Optional[str] = None
    source: Optional[str] = None
    preferred_contact: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None

    @field_validator("payment_method", mode="before")
    @classmethod
    def blank_method_is_default(cls, v):
        return v or None

    def missing_required(self) -> bool:
        return not (self.name and self.email and self.checkin and self.checkout)

    def guests_or_none(self) -> int | float | None:
        """Only finite numbers survive; strings, bools and NaN become null."""
        g = self.guests
        if isinstance(g, bool) or not isinstance(g, (int, float)):
            return None
        return g if math.isfinite(g) else None


class BookingPatch(BaseModel):
    """Admin patch; anything besides the two whitelisted fields is dropped."""
    model_config = ConfigDict(extra="ignore")

    status: Optional[BookingStatus] = None
    payment_status: Optional[PaymentStatus] = None

    @field_validator("status", "payment_status", mode="before")
    @classmethod
    def blank_is_unset(cls, v):
        return v or None

    def changes(self) -> dict:
        return {k: v.value for k, v in (("status", self.status), ("payment_status", self.payment_status)) if v}
