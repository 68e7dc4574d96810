"""Per-request authorized session wrapping a Google access token."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import httpx

from drive_gallery.core.errors import GoogleUnavailableError, NotAuthorizedError, TokenRefreshError
from drive_gallery.schemas import CredentialRecord

TOKEN_URL = "https://oauth2.googleapis.com/token"
TOKEN_EXPIRY_GRACE = timedelta(seconds=60)

logger = logging.getLogger(__name__)


@dataclass
class AuthorizedSession:
    """Access token plus the refresh capability needed to renew it.

    Sessions are built per request, either from the saved credential record
    (no access token yet, refreshed on first use) or from a completed consent
    flow. They are never cached or shared between requests.
    """

    client_id: str
    client_secret: str = field(repr=False)
    refresh_token: str | None = field(default=None, repr=False)
    access_token: str | None = field(default=None, repr=False)
    expiry: datetime | None = None
    token_uri: str = TOKEN_URL

    @classmethod
    def from_record(cls, record: CredentialRecord) -> AuthorizedSession:
        return cls(
            client_id=record.client_id,
            client_secret=record.client_secret,
            refresh_token=record.refresh_token,
        )

    def has_valid_access_token(self, now: datetime | None = None) -> bool:
        if not self.access_token:
            return False
        if self.expiry is None:
            return True
        now = now or datetime.now(timezone.utc)
        return self.expiry - now > TOKEN_EXPIRY_GRACE

    async def ensure_access_token(self, client: httpx.AsyncClient) -> str:
        """Return a usable access token, refreshing it when necessary."""

        if self.has_valid_access_token():
            assert self.access_token is not None
            return self.access_token
        if not self.refresh_token:
            raise NotAuthorizedError("Session has no access token and cannot be refreshed")
        await self.refresh(client)
        assert self.access_token is not None
        return self.access_token

    async def refresh(self, client: httpx.AsyncClient) -> None:
        payload = {
            "refresh_token": self.refresh_token or "",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "grant_type": "refresh_token",
        }
        try:
            response = await client.post(self.token_uri, data=payload)
        except httpx.HTTPError as exc:
            logger.error("Failed to communicate with Google OAuth token endpoint", exc_info=exc)
            raise GoogleUnavailableError("Unable to reach Google OAuth endpoint") from exc

        if response.status_code >= 500:
            logger.error(
                "Google OAuth token endpoint unavailable",
                extra={"status_code": response.status_code, "body": response.text},
            )
            raise GoogleUnavailableError(
                "Google OAuth token endpoint unavailable",
                status_code=response.status_code,
                body=response.text,
            )

        # 4xx means the refresh token itself was rejected (invalid_grant and friends)
        if response.status_code >= 400:
            logger.error(
                "Google OAuth token refresh failed",
                extra={"status_code": response.status_code, "body": response.text},
            )
            raise TokenRefreshError(
                "Google OAuth token refresh failed",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            token_data = response.json()
        except ValueError as exc:
            raise GoogleUnavailableError(
                "Unexpected Google OAuth token response",
                status_code=response.status_code,
            ) from exc
        access_token = token_data.get("access_token") if isinstance(token_data, dict) else None
        if not access_token:
            raise GoogleUnavailableError(
                "Google token response missing access_token",
                status_code=response.status_code,
            )

        expires_in = int(token_data.get("expires_in", 3600))
        self.access_token = access_token
        self.expiry = datetime.now(timezone.utc) + timedelta(seconds=expires_in)
        if token_data.get("refresh_token"):
            self.refresh_token = token_data["refresh_token"]
