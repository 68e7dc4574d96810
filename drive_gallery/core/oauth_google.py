"""Google OAuth authorization backed by the local credential store."""
from __future__ import annotations

import logging
from datetime import timezone
from typing import Awaitable, Callable

import anyio
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from drive_gallery.core.config import Settings
from drive_gallery.core.credentials import CredentialStore
from drive_gallery.core.errors import ConsentFlowError, NotAuthorizedError
from drive_gallery.core.session import AuthorizedSession
from drive_gallery.schemas import ClientSecrets

ConsentFlow = Callable[[ClientSecrets, Settings], Awaitable[AuthorizedSession]]

logger = logging.getLogger(__name__)


async def run_installed_app_flow(secrets: ClientSecrets, settings: Settings) -> AuthorizedSession:
    """Run the browser based consent flow on a loopback server.

    The flow blocks until the user answers, so it runs in a worker thread.
    """

    def _run() -> Credentials:
        flow = InstalledAppFlow.from_client_config(secrets.config, scopes=settings.google_scopes)
        return flow.run_local_server(
            host=settings.consent_host,
            port=settings.consent_port,
            open_browser=settings.consent_open_browser,
            timeout_seconds=settings.consent_timeout,
        )

    try:
        credentials = await anyio.to_thread.run_sync(_run)
    # oauthlib, google-auth and the loopback server each raise their own errors
    except Exception as exc:  # noqa: BLE001
        logger.error("Google consent flow failed", exc_info=exc)
        raise ConsentFlowError("Google consent flow failed") from exc

    expiry = credentials.expiry
    return AuthorizedSession(
        client_id=credentials.client_id or secrets.client_id,
        client_secret=credentials.client_secret or secrets.client_secret,
        refresh_token=credentials.refresh_token,
        access_token=credentials.token,
        expiry=expiry.replace(tzinfo=timezone.utc) if expiry is not None else None,
    )


class GoogleAuthorizer:
    """Produce an authorized session from saved credentials or a consent flow.

    Every call re-reads the credential store; nothing is remembered between
    requests. Concurrent first-time calls may each start a consent flow.
    """

    def __init__(
        self,
        settings: Settings,
        store: CredentialStore,
        *,
        consent_flow: ConsentFlow = run_installed_app_flow,
    ):
        self.settings = settings
        self.store = store
        self._consent_flow = consent_flow

    async def authorize(self, *, interactive: bool = True) -> AuthorizedSession:
        """Return an authorized session.

        Raises ``NotAuthorizedError`` when nothing is saved and ``interactive``
        is false, ``ClientSecretsError`` when the registration file is unusable
        and ``ConsentFlowError`` when the user does not grant access.
        """

        record = await self.store.load()
        if record is not None:
            return AuthorizedSession.from_record(record)

        if not interactive:
            raise NotAuthorizedError("No saved Google credentials")

        secrets = await self.store.load_client_secrets()
        logger.info(
            "Starting interactive Google consent flow",
            extra={"scopes": self.settings.google_scopes},
        )
        session = await self._consent_flow(secrets, self.settings)

        if session.refresh_token:
            await self.store.save(session)
        else:
            logger.warning("Google consent flow returned no refresh token; credentials not saved")
        return session
