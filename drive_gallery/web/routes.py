"""Server-rendered views for the Drive gallery."""
from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from drive_gallery.core.config import Settings
from drive_gallery.core.errors import GalleryError
from drive_gallery.core.oauth_google import GoogleAuthorizer
from drive_gallery.schemas import ImagePage
from drive_gallery.services.drive import DriveClient

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))

router = APIRouter()


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_authorizer(request: Request) -> GoogleAuthorizer:
    return request.app.state.authorizer


def get_drive_client(request: Request) -> DriveClient:
    return request.app.state.drive_client


@router.get("/health", tags=["health"])
async def health_check(settings: Settings = Depends(get_app_settings)) -> dict[str, dict[str, str]]:
    """Report the service health information."""
    return {"data": {"status": "ok", "version": settings.version}}


@router.get("/", response_class=HTMLResponse, name="web_index")
async def index_page(
    request: Request,
    authorizer: GoogleAuthorizer = Depends(get_authorizer),
) -> HTMLResponse:
    """Render the landing page; never starts a consent flow."""

    try:
        await authorizer.authorize(interactive=False)
    except GalleryError:
        is_authorized = False
    else:
        is_authorized = True

    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "title": "Welcome to My Google Drive Gallery",
            "is_authorized": is_authorized,
            "url": "/files" if is_authorized else "/auth",
        },
    )


@router.get("/auth", name="web_auth")
async def auth(authorizer: GoogleAuthorizer = Depends(get_authorizer)) -> RedirectResponse:
    """Authorize (interactively if needed) and continue to the gallery."""

    await authorizer.authorize()
    return RedirectResponse("/files", status_code=status.HTTP_302_FOUND)


@router.post("/logout", name="web_logout")
async def logout(authorizer: GoogleAuthorizer = Depends(get_authorizer)) -> RedirectResponse:
    """Forget the saved credential record."""

    await authorizer.store.clear()
    return RedirectResponse("/", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/files", response_class=HTMLResponse, name="web_files")
async def all_files_page(
    request: Request,
    page_token: str | None = Query(None),
    authorizer: GoogleAuthorizer = Depends(get_authorizer),
    drive: DriveClient = Depends(get_drive_client),
) -> HTMLResponse:
    """Render every image in the drive, one page at a time."""

    session = await authorizer.authorize()
    page = await drive.list_files(session, page_token=page_token)
    return _render_files(request, page, folder_id=None)


@router.get("/files/{folder_id}", response_class=HTMLResponse, name="web_folder_files")
async def folder_files_page(
    request: Request,
    folder_id: str,
    page_token: str | None = Query(None),
    authorizer: GoogleAuthorizer = Depends(get_authorizer),
    drive: DriveClient = Depends(get_drive_client),
) -> HTMLResponse:
    """Render the images stored directly inside a folder."""

    session = await authorizer.authorize()
    page = await drive.list_files(session, folder_id, page_token=page_token)
    return _render_files(request, page, folder_id=folder_id)


@router.get("/folders", response_class=HTMLResponse, name="web_folders")
async def folders_page(
    request: Request,
    authorizer: GoogleAuthorizer = Depends(get_authorizer),
    drive: DriveClient = Depends(get_drive_client),
) -> HTMLResponse:
    """Render the folder picker."""

    session = await authorizer.authorize()
    folders = await drive.list_folders(session)
    return templates.TemplateResponse(request, "folders.html", {"folders": folders})


def _render_files(request: Request, page: ImagePage, *, folder_id: str | None) -> HTMLResponse:
    next_url = None
    if page.next_page_token:
        next_url = str(request.url.include_query_params(page_token=page.next_page_token))
    return templates.TemplateResponse(
        request,
        "files.html",
        {
            "page": page,
            "folder_id": folder_id,
            "next_url": next_url,
        },
    )
