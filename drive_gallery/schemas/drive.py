"""Pydantic schemas for Google Drive listing results."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class DriveItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str


class FolderEntry(DriveItem):
    pass


class FileEntry(DriveItem):
    mime_type: str = Field(default="image/*", alias="mimeType")
    thumbnail_link: str | None = Field(default=None, alias="thumbnailLink")
    web_view_link: str | None = Field(default=None, alias="webViewLink")


class ImagePage(BaseModel):
    """One page of image files plus the token for the following page."""

    files: list[FileEntry] = Field(default_factory=list)
    next_page_token: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.files
