"""Pydantic schemas for the Drive gallery."""

from .credentials import ClientSecrets, CredentialRecord
from .drive import FileEntry, FolderEntry, ImagePage

__all__ = [
    "ClientSecrets",
    "CredentialRecord",
    "FileEntry",
    "FolderEntry",
    "ImagePage",
]
