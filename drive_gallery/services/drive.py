"""Read-only Google Drive queries used by the gallery pages."""
from __future__ import annotations

import logging
from typing import Any

import httpx

from drive_gallery.core.config import Settings
from drive_gallery.core.errors import DriveAPIError
from drive_gallery.core.session import AuthorizedSession
from drive_gallery.schemas import FileEntry, FolderEntry, ImagePage

DRIVE_FILES_URL = "https://www.googleapis.com/drive/v3/files"
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"

FOLDER_QUERY = f"mimeType = '{FOLDER_MIME_TYPE}' and trashed = false"
IMAGE_QUERY = "mimeType contains 'image/' and trashed = false"
FOLDER_FIELDS = "nextPageToken, files(id, name)"
FILE_FIELDS = "nextPageToken, files(id, name, mimeType, thumbnailLink, webViewLink)"

logger = logging.getLogger(__name__)


def quote_query_value(value: str) -> str:
    """Escape a value for use inside a single-quoted Drive query literal."""

    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def build_files_query(folder_id: str | None = None) -> str:
    """Return the image query, scoped to ``folder_id`` when one is given."""

    if folder_id is None:
        return IMAGE_QUERY
    return f"{IMAGE_QUERY} and {quote_query_value(folder_id)} in parents"


class DriveClient:
    """Thin facade over the Drive v3 ``files.list`` endpoint.

    Each call issues exactly one request; there is no retry and no
    pagination loop.
    """

    def __init__(self, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings
        self._transport = transport

    async def list_folders(self, session: AuthorizedSession) -> list[FolderEntry]:
        """List up to ``folder_page_size`` folders."""

        data = await self._list(
            session,
            {
                "q": FOLDER_QUERY,
                "pageSize": self.settings.folder_page_size,
                "fields": FOLDER_FIELDS,
            },
        )
        return [FolderEntry.model_validate(item) for item in data.get("files", [])]

    async def list_files(
        self,
        session: AuthorizedSession,
        folder_id: str | None = None,
        *,
        page_token: str | None = None,
    ) -> ImagePage:
        """List one page of images, optionally only those inside ``folder_id``."""

        params: dict[str, Any] = {
            "q": build_files_query(folder_id),
            "fields": FILE_FIELDS,
        }
        if page_token:
            params["pageToken"] = page_token

        data = await self._list(session, params)
        return ImagePage(
            files=[FileEntry.model_validate(item) for item in data.get("files", [])],
            next_page_token=data.get("nextPageToken"),
        )

    async def _list(self, session: AuthorizedSession, params: dict[str, Any]) -> dict[str, Any]:
        async with httpx.AsyncClient(
            timeout=self.settings.request_timeout,
            transport=self._transport,
        ) as client:
            access_token = await session.ensure_access_token(client)
            headers = {"Authorization": f"Bearer {access_token}"}
            try:
                response = await client.get(DRIVE_FILES_URL, params=params, headers=headers)
            except httpx.HTTPError as exc:
                logger.error("Google Drive request failed", exc_info=exc)
                raise DriveAPIError("Failed to communicate with Google Drive") from exc

        if response.status_code >= 400:
            logger.error(
                "Google Drive API error",
                extra={"status_code": response.status_code, "body": response.text},
            )
            raise DriveAPIError(
                "Google Drive API error",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as exc:
            logger.error(
                "Google Drive returned a non-JSON body",
                extra={"status_code": response.status_code, "body": response.text[:200]},
            )
            raise DriveAPIError(
                "Unexpected Google Drive response", status_code=response.status_code
            ) from exc
        if not isinstance(data, dict):
            raise DriveAPIError("Unexpected Google Drive response", status_code=response.status_code)
        return data
