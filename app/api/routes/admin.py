import logging

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_notifier, get_store, require_admin
from app.core.errors import StoreError, UpstreamHTTPException
from app.schemas.booking import BookingPatch
from app.services.notify_service import TelegramNotifier, format_admin_update_message
from app.services.store_client import BookingStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/admin/bookings")
def list_bookings(status: str | None = None, store: BookingStore = Depends(get_store)):
    rows = store.list_bookings(status or None)
    return {"ok": True, "rows": rows}


@router.patch("/admin/bookings/{booking_id:int}")
def update_booking(booking_id: int, body: BookingPatch | None = None,
                   store: BookingStore = Depends(get_store),
                   notifier: TelegramNotifier = Depends(get_notifier)):
    patch = body.changes() if body else {}
    if not patch:
        raise HTTPException(status_code=400, detail="Nothing to update.")
    try:
        store.update_booking(booking_id, patch)
    except StoreError as e:
        raise UpstreamHTTPException(500, "Update failed.", e.detail)
    logger.info("Admin updated booking %s: %s", booking_id, patch)
    notifier.notify_admins(format_admin_update_message(booking_id, patch))
    return {"ok": True}
