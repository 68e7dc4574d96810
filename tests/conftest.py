from __future__ import annotations

import json
import sys
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import httpx  # noqa: E402
import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from drive_gallery.core.config import Settings  # noqa: E402
from drive_gallery.core.credentials import CredentialStore  # noqa: E402
from drive_gallery.core.errors import ConsentFlowError  # noqa: E402
from drive_gallery.core.session import AuthorizedSession  # noqa: E402
from drive_gallery.schemas import ClientSecrets  # noqa: E402

CLIENT_ID = "client-id.apps.googleusercontent.com"
CLIENT_SECRET = "client-secret"


class FakeConsentFlow:
    """Stand-in for the browser consent flow that records its calls."""

    def __init__(self, refresh_token: str | None = "refresh-from-consent", error: bool = False):
        self.refresh_token = refresh_token
        self.error = error
        self.calls: list[ClientSecrets] = []

    async def __call__(self, secrets: ClientSecrets, settings: Settings) -> AuthorizedSession:
        self.calls.append(secrets)
        if self.error:
            raise ConsentFlowError("access_denied")
        return AuthorizedSession(
            client_id=secrets.client_id,
            client_secret=secrets.client_secret,
            refresh_token=self.refresh_token,
            access_token="access-from-consent",
        )


class FakeGoogle:
    """httpx handler answering the token endpoint and Drive ``files.list``."""

    def __init__(
        self,
        *,
        files: list[dict[str, Any]] | None = None,
        folders: list[dict[str, Any]] | None = None,
        next_page_token: str | None = None,
        drive_status: int = 200,
        token_status: int = 200,
        drive_body: str | None = None,
        token_body: str | None = None,
    ):
        self.files = files or []
        self.folders = folders or []
        self.next_page_token = next_page_token
        self.drive_status = drive_status
        self.token_status = token_status
        self.drive_body = drive_body
        self.token_body = token_body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "oauth2.googleapis.com":
            if self.token_body is not None:
                return httpx.Response(self.token_status, text=self.token_body)
            if self.token_status >= 400:
                return httpx.Response(self.token_status, json={"error": "invalid_grant"})
            return httpx.Response(200, json={"access_token": "access-refreshed", "expires_in": 3600})

        if self.drive_body is not None:
            return httpx.Response(self.drive_status, text=self.drive_body)
        if self.drive_status >= 400:
            return httpx.Response(self.drive_status, json={"error": {"code": self.drive_status}})

        query = request.url.params.get("q", "")
        items = self.folders if "vnd.google-apps.folder" in query else self.files
        payload: dict[str, Any] = {"files": items}
        if self.next_page_token:
            payload["nextPageToken"] = self.next_page_token
        return httpx.Response(200, json=payload)

    @property
    def token_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == "oauth2.googleapis.com"]

    @property
    def drive_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == "www.googleapis.com"]


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        app_env="test",
        credentials_path=tmp_path / "credentials.json",
        token_path=tmp_path / "token.json",
    )


@pytest.fixture()
def store(settings: Settings) -> CredentialStore:
    return CredentialStore(settings)


@pytest.fixture()
def client_secrets_file(settings: Settings) -> Path:
    registration = {
        "installed": {
            "client_id": CLIENT_ID,
            "client_secret": CLIENT_SECRET,
            "auth_uri": "https://accounts.google.com/o/oauth2/auth",
            "token_uri": "https://oauth2.googleapis.com/token",
            "redirect_uris": ["http://localhost"],
        }
    }
    settings.credentials_path.write_text(json.dumps(registration), encoding="utf-8")
    return settings.credentials_path


@pytest.fixture()
def saved_token(settings: Settings, client_secrets_file: Path) -> Path:
    record = {
        "type": "authorized_user",
        "client_id": CLIENT_ID,
        "client_secret": CLIENT_SECRET,
        "refresh_token": "saved-refresh-token",
    }
    settings.token_path.write_text(json.dumps(record), encoding="utf-8")
    return settings.token_path


@pytest.fixture()
def consent_flow() -> FakeConsentFlow:
    return FakeConsentFlow()


@pytest.fixture()
def fake_google() -> FakeGoogle:
    return FakeGoogle()


@pytest.fixture()
async def client(
    settings: Settings,
    consent_flow: FakeConsentFlow,
    fake_google: FakeGoogle,
) -> AsyncIterator[AsyncClient]:
    from drive_gallery.main import create_app

    application = create_app(
        settings,
        consent_flow=consent_flow,
        drive_transport=httpx.MockTransport(fake_google),
    )
    transport = ASGITransport(app=application)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    return "asyncio"
