from fastapi import APIRouter
from app.api.routes.public import router as public_router
from app.api.routes.payments import router as payments_router
from app.api.routes.admin import router as admin_router

api_router = APIRouter()
api_router.include_router(public_router)
api_router.include_router(payments_router)
api_router.include_router(admin_router)
