"""Error types shared by the authorization and Drive layers."""
from __future__ import annotations


class GalleryError(Exception):
    """Base error for the Drive gallery."""


class NotAuthorizedError(GalleryError):
    """Raised when no usable Google credential is available."""


class TokenRefreshError(NotAuthorizedError):
    """Raised when the token endpoint rejects a refresh request."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ClientSecretsError(GalleryError):
    """Raised when the application registration file is missing or malformed."""


class ConsentFlowError(GalleryError):
    """Raised when the interactive consent flow fails or is denied."""


class CredentialStoreError(GalleryError):
    """Raised when the token file cannot be written."""


class DriveAPIError(GalleryError):
    """Raised when the Google Drive API returns an error response."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @property
    def is_auth_failure(self) -> bool:
        return self.status_code in (401, 403)


class GoogleUnavailableError(GalleryError):
    """Raised when a Google endpoint cannot be reached or answers with garbage."""

    def __init__(self, message: str, *, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
