"""FastAPI application entry point."""
import logging
import time
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from .auth import router as auth_router
from .config import get_settings
from .database import create_schema
from .exceptions import AuthenticationError, InternalError, SupplyLinkError, ValidationError
from .logging_setup import setup_logging
from .routers.admin import router as admin_router
from .routers.history import router as history_router
from .routers.materials import router as materials_router
from .routers.products import catalog_router, router as products_router
from .routers.system import router as system_router

settings = get_settings()
setup_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(title="SupplyLink Marketplace Backend", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(auth_router)
app.include_router(materials_router)
app.include_router(products_router)
app.include_router(catalog_router)
app.include_router(history_router)
app.include_router(admin_router)
app.include_router(system_router)
app.mount(
    settings.media_url,
    StaticFiles(directory=Path(settings.media_dir), check_dir=False),
    name="media",
)


@app.on_event("startup")
async def on_startup() -> None:
    """Ensure database tables exist."""

    await create_schema()


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(
        "%s %s -> %s (%.1f ms)",
        request.method, request.url.path, response.status_code, elapsed_ms,
    )
    return response


def _error_response(exc: SupplyLinkError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(SupplyLinkError)
async def handle_domain_error(request: Request, exc: SupplyLinkError) -> JSONResponse:
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def handle_request_validation(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", ""),
        }
        for error in exc.errors()
    ]
    return _error_response(
        ValidationError("All required fields must be provided", details={"errors": errors})
    )


@app.exception_handler(SQLAlchemyError)
async def handle_store_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Store failure on %s %s", request.method, request.url.path)
    return _error_response(InternalError())


@app.exception_handler(Exception)
async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=InternalError().to_dict(),
    )
