from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from app.core.config import Settings
from app.core.errors import register_exception_handlers
from app.core.log_config import setup_logging
from app.api.api import api_router
from app.api.deps import admin_token_ok

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,POST,PATCH,OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, X-Admin-Token",
}


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(title=settings.APP_NAME)
    app.state.settings = settings

    @app.middleware("http")
    async def cors_and_admin_guard(request: Request, call_next):
        # Preflight never reaches the routers.
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=CORS_HEADERS)
        if request.url.path.startswith("/admin/") and not admin_token_ok(request):
            response = JSONResponse({"error": "Unauthorized"}, status_code=401)
        else:
            response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

    register_exception_handlers(app)
    app.include_router(api_router)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
