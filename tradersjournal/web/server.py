"""
FastAPI Web Server for Trader's Journal.

Wires the route modules together and maps every failure onto the JSON
error shape ``{"error": ..., "message"?: ..., "details"?: ...}``.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tradersjournal import __version__
from tradersjournal.config import settings
from tradersjournal.errors import AppError
from tradersjournal.logging_utils import install_log_safety
from tradersjournal.web.routes import (
    admin_router,
    analysis_router,
    auth_router,
    captcha_router,
    messages_router,
    stats_router,
    system_router,
    trades_router,
)

logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Forex trading journal API",
    version=__version__,
)


@app.on_event("startup")
async def startup():
    install_log_safety()


# ==================== ERROR HANDLERS ====================


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.error} ({exc.message})")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.error}")
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    error = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return JSONResponse({"error": error}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        {"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        status_code=400,
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse({"error": "Internal server error"}, status_code=500)


# ==================== ROUTES ====================

app.include_router(system_router)
app.include_router(auth_router)
app.include_router(trades_router)
app.include_router(analysis_router)
app.include_router(stats_router)
app.include_router(messages_router)
app.include_router(admin_router)
app.include_router(captcha_router)


# ==================== RUN SERVER ====================

def run_server(host: str = "127.0.0.1", port: int = 8000):
    """Run the web server."""
    import uvicorn
    print(f"\n🚀 {settings.app_name} API")
    print(f"   Listening on http://{host}:{port}\n")
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run_server()
