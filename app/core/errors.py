import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """Non-2xx answer (or missing configuration) from the bookings data store."""

    def __init__(self, message: str, status_code: int | None = None, detail: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail or message


class UpstreamHTTPException(StarletteHTTPException):
    """HTTPException that also surfaces the raw upstream error text to the caller."""

    def __init__(self, status_code: int, message: str, upstream: str = ""):
        super().__init__(status_code=status_code, detail=message)
        self.upstream = upstream


def error_body(message: str, detail=None) -> dict:
    body = {"ok": False, "error": message}
    if detail:
        body["detail"] = detail
    return body


async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Wrong method on a known path is reported like an unknown path.
    if exc.status_code in (404, 405):
        return JSONResponse(error_body("Not found."), status_code=404)
    if exc.status_code == 401:
        return JSONResponse({"error": "Unauthorized"}, status_code=401, headers=exc.headers)
    return JSONResponse(
        error_body(str(exc.detail), getattr(exc, "upstream", "")),
        status_code=exc.status_code,
        headers=getattr(exc, "headers", None),
    )


async def _validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(e.get("type") in ("json_invalid", "model_type", "model_attributes_type") for e in errors):
        return JSONResponse(error_body("Invalid JSON."), status_code=400)
    detail = [{"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in errors]
    return JSONResponse(error_body("Invalid request.", detail), status_code=400)


async def _store_error_handler(request: Request, exc: StoreError):
    logger.error("Data store failure on %s %s: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(error_body("Upstream data store error.", exc.detail), status_code=500)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(StoreError, _store_error_handler)
