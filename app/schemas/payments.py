from pydantic import BaseModel, Field


class PayHereNotification(BaseModel):
    """Form-encoded body PayHere posts to notify_url. Absent fields become ""."""
    merchant_id: str = Field(default="")
    order_id: str = Field(default="")
    payment_id: str = Field(default="")
    payhere_amount: str = Field(default="")
    payhere_currency: str = Field(default="")
    status_code: str = Field(default="")
    md5sig: str = Field(default="")

    @classmethod
    def from_form(cls, form) -> "PayHereNotification":
        return cls(**{name: str(form.get(name) or "") for name in cls.model_fields})
