"""File-backed storage for the Google credential record."""
from __future__ import annotations

import json
import logging

import anyio

from drive_gallery.core.config import Settings
from drive_gallery.core.errors import ClientSecretsError, CredentialStoreError
from drive_gallery.core.session import AuthorizedSession
from drive_gallery.schemas import ClientSecrets, CredentialRecord

logger = logging.getLogger(__name__)


class CredentialStore:
    """Read and write ``token.json`` next to the application registration.

    The token file is the only mutable state of the application. A missing
    or unreadable file means "not authenticated"; it is never an error.
    Writes replace the whole file and are not locked.
    """

    def __init__(self, settings: Settings):
        self.token_path = anyio.Path(settings.token_path)
        self.credentials_path = anyio.Path(settings.credentials_path)

    async def load(self) -> CredentialRecord | None:
        """Return the saved credential record, or ``None`` when there is none."""

        try:
            content = await self.token_path.read_text(encoding="utf-8")
            return CredentialRecord.model_validate_json(content)
        except (OSError, ValueError) as exc:
            logger.debug(
                "No usable saved Google credentials",
                extra={"path": str(self.token_path), "reason": type(exc).__name__},
            )
            return None

    async def load_client_secrets(self) -> ClientSecrets:
        """Parse the application registration file."""

        try:
            content = await self.credentials_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ClientSecretsError(
                f"Unable to read client secrets from {self.credentials_path}"
            ) from exc

        try:
            data = json.loads(content)
            if not isinstance(data, dict):
                raise ValueError("Client secrets must be a JSON object")
            return ClientSecrets.from_registration(data)
        except ValueError as exc:
            raise ClientSecretsError(
                f"Client secrets file {self.credentials_path} is malformed"
            ) from exc

    async def save(self, session: AuthorizedSession) -> CredentialRecord:
        """Merge the session's refresh token with the client secrets and persist it."""

        if not session.refresh_token:
            raise CredentialStoreError("Session has no refresh token to persist")

        secrets = await self.load_client_secrets()
        record = CredentialRecord(
            client_id=secrets.client_id,
            client_secret=secrets.client_secret,
            refresh_token=session.refresh_token,
        )
        try:
            await self.token_path.parent.mkdir(parents=True, exist_ok=True)
            await self.token_path.write_text(record.model_dump_json(), encoding="utf-8")
        except OSError as exc:
            raise CredentialStoreError(f"Unable to write {self.token_path}") from exc

        logger.info("Saved Google credentials", extra={"path": str(self.token_path)})
        return record

    async def clear(self) -> bool:
        """Delete the token file; return whether one existed."""

        try:
            await self.token_path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise CredentialStoreError(f"Unable to remove {self.token_path}") from exc
        logger.info("Removed saved Google credentials", extra={"path": str(self.token_path)})
        return True
