from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from app.api.deps import get_notifier, get_settings, get_store
from app.core.config import Settings
from app.core.errors import StoreError, UpstreamHTTPException
from app.schemas.booking import InquiryIn
from app.services.booking_service import (
    DatesUnavailable,
    InvalidRange,
    check_availability,
    create_inquiry,
)
from app.services.notify_service import TelegramNotifier
from app.services.store_client import BookingStore

router = APIRouter(tags=["public"])


@router.get("/availability")
def availability(checkin: str | None = None, checkout: str | None = None,
                 store: BookingStore = Depends(get_store)):
    try:
        available = check_availability(store, checkin, checkout)
    except InvalidRange as e:
        return JSONResponse({"available": False, "reason": str(e)}, status_code=400)
    if not available:
        return {"available": False, "reason": "These dates are already booked."}
    return {"available": True}


@router.post("/inquiry")
def submit_inquiry(body: InquiryIn,
                   store: BookingStore = Depends(get_store),
                   notifier: TelegramNotifier = Depends(get_notifier),
                   settings: Settings = Depends(get_settings)):
    try:
        booking = create_inquiry(store, notifier, body, settings.DEFAULT_DEPOSIT_LKR, settings.VILLA_NAME)
    except DatesUnavailable as e:
        raise HTTPException(status_code=409, detail=str(e))
    except StoreError as e:
        raise UpstreamHTTPException(500, "Could not save inquiry.", e.detail)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"ok": True, "booking_id": booking.get("id")}
