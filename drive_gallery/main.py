"""Application entrypoint for the Google Drive image gallery."""

import logging
from pathlib import Path

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException

from drive_gallery.core.config import Settings, get_settings
from drive_gallery.core.credentials import CredentialStore
from drive_gallery.core.errors import DriveAPIError, GalleryError, GoogleUnavailableError
from drive_gallery.core.logging import configure_logging
from drive_gallery.core.oauth_google import ConsentFlow, GoogleAuthorizer, run_installed_app_flow
from drive_gallery.services.drive import DriveClient
from drive_gallery.web import router as web_router

logger = logging.getLogger(__name__)

AUTHENTICATION_REQUIRED = "Authentication Required"
DRIVE_UNAVAILABLE = "Google Drive request failed"


def create_app(
    settings: Settings | None = None,
    *,
    consent_flow: ConsentFlow | None = None,
    drive_transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance."""
    settings = settings or get_settings()
    configure_logging(settings)

    application = FastAPI(title="Google Drive Gallery", version=settings.version)

    store = CredentialStore(settings)
    application.state.settings = settings
    application.state.authorizer = GoogleAuthorizer(
        settings,
        store,
        consent_flow=consent_flow or run_installed_app_flow,
    )
    application.state.drive_client = DriveClient(settings, transport=drive_transport)

    _configure_exception_handlers(application)

    static_dir = Path(__file__).resolve().parent / "web" / "static"
    application.mount("/static", StaticFiles(directory=str(static_dir)), name="static")

    application.include_router(web_router)

    return application


def _configure_exception_handlers(application: FastAPI) -> None:
    application.add_exception_handler(GalleryError, _gallery_exception_handler)
    application.add_exception_handler(HTTPException, _http_exception_handler)
    application.add_exception_handler(Exception, _unhandled_exception_handler)


async def _gallery_exception_handler(request: Request, exc: Exception) -> PlainTextResponse:
    assert isinstance(exc, GalleryError)
    if isinstance(exc, GoogleUnavailableError) or (
        isinstance(exc, DriveAPIError) and not exc.is_auth_failure
    ):
        return PlainTextResponse(DRIVE_UNAVAILABLE, status_code=502)
    logger.info(
        "Request not authorized",
        extra={"path": request.url.path, "reason": type(exc).__name__},
    )
    return PlainTextResponse(AUTHENTICATION_REQUIRED, status_code=401)


async def _http_exception_handler(_: Request, exc: Exception) -> PlainTextResponse:
    assert isinstance(exc, HTTPException)
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return PlainTextResponse(detail, status_code=exc.status_code, headers=exc.headers)


async def _unhandled_exception_handler(_: Request, exc: Exception) -> PlainTextResponse:
    logger.exception("Unhandled application error")
    return PlainTextResponse("Internal server error", status_code=500)


app = create_app()
