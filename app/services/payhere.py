"""PayHere checkout helpers: hash/signature scheme, amount formatting, redirect page.

Both digests follow PayHere's documented two-stage construction::

    upper(md5(upper(<fields> + upper(md5(merchant_secret)))))

The concatenation is upper-cased before the outer digest, so the order of the
case transformations matters.
"""
import hashlib
import hmac
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from html import escape

STATUS_SUCCESS = "2"


def md5_upper(text: str) -> str:
    return hashlib.md5(str(text).encode("utf-8")).hexdigest().upper()


def checkout_hash(merchant_id: str, merchant_secret: str, order_id: str, amount: str, currency: str) -> str:
    raw = f"{merchant_id}{order_id}{amount}{currency}{md5_upper(merchant_secret)}".upper()
    return md5_upper(raw)


def notify_signature(merchant_id: str, merchant_secret: str, order_id: str, payment_id: str,
                     amount: str, currency: str, status_code: str) -> str:
    raw = f"{merchant_id}{order_id}{payment_id}{amount}{currency}{status_code}{md5_upper(merchant_secret)}".upper()
    return md5_upper(raw)


def verify_notify_signature(md5sig: str, *, merchant_id: str, merchant_secret: str, order_id: str,
                            payment_id: str, amount: str, currency: str, status_code: str) -> bool:
    expected = notify_signature(merchant_id, merchant_secret, order_id, payment_id, amount, currency, status_code)
    return hmac.compare_digest(expected.encode("ascii"), (md5sig or "").upper().encode("utf-8"))


def format_amount(value) -> str:
    """Two-decimal amount string exactly as sent in the form and hashed ("5000" -> "5000.00")."""
    try:
        d = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"invalid amount: {value!r}")
    if not d.is_finite():
        raise ValueError(f"invalid amount: {value!r}")
    return str(d.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def order_id_for(prefix: str, booking_id) -> str:
    return f"{prefix}-{booking_id}"


def split_name(full_name: str | None) -> tuple[str, str]:
    parts = str(full_name or "").split()
    first = parts[0] if parts else "Guest"
    last = " ".join(parts[1:]) or " "
    return first, last


@dataclass
class CheckoutForm:
    action: str
    merchant_id: str
    return_url: str
    cancel_url: str
    notify_url: str
    order_id: str
    items: str
    currency: str
    amount: str
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    city: str
    country: str
    hash: str

    def fields(self) -> list[tuple[str, str]]:
        names = (
            "merchant_id", "return_url", "cancel_url", "notify_url", "order_id", "items",
            "currency", "amount", "first_name", "last_name", "email", "phone",
            "address", "city", "country", "hash",
        )
        return [(n, getattr(self, n)) for n in names]


_PAGE_HEAD = """<!doctype html><html><head><meta charset="utf-8"><meta name="viewport" content="width=device-width,initial-scale=1">
<title>{title}</title>
<style>body{{font-family:system-ui,Segoe UI,Roboto,Arial;background:#0f1c2e;color:#fff;margin:0;min-height:100vh;display:grid;place-items:center;padding:24px;}}
.card{{max-width:520px;width:100%;background:rgba(255,255,255,.06);border:1px solid rgba(255,255,255,.12);border-radius:14px;padding:18px;}}
.muted{{opacity:.75}}</style></head><body>"""


def render_checkout_page(form: CheckoutForm, booking_id) -> str:
    e = lambda v: escape(str(v if v is not None else ""), quote=True)
    inputs = "\n".join(
        f'<input type="hidden" name="{e(name)}" value="{e(value)}">' for name, value in form.fields()
    )
    return (
        _PAGE_HEAD.format(title="Redirecting…")
        + f"""
<div class="card"><h2 style="margin:0 0 8px 0;">Redirecting to PayHere…</h2>
<div class="muted">Booking ID: {e(booking_id)}<br>Amount: {e(form.currency)} {e(form.amount)}</div>
<form id="payhere" method="post" action="{e(form.action)}">
{inputs}
<noscript><button type="submit">Continue to PayHere</button></noscript>
</form></div><script>document.getElementById('payhere').submit();</script></body></html>"""
    )


def render_message_page(message: str, title: str = "Booking") -> str:
    return _PAGE_HEAD.format(title=escape(title)) + f'\n<div class="card"><p>{escape(message)}</p></div></body></html>'
