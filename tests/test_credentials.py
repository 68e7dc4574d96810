from __future__ import annotations

import json

import pytest

from drive_gallery.core.credentials import CredentialStore
from drive_gallery.core.errors import ClientSecretsError, CredentialStoreError
from drive_gallery.core.session import AuthorizedSession

from conftest import CLIENT_ID, CLIENT_SECRET


@pytest.mark.anyio("asyncio")
async def test_load_returns_none_without_token_file(store):
    assert await store.load() is None


@pytest.mark.anyio("asyncio")
@pytest.mark.parametrize(
    "content",
    [
        "not json at all",
        json.dumps({"type": "service_account", "client_id": "a", "client_secret": "b", "refresh_token": "c"}),
        json.dumps({"type": "authorized_user", "client_id": "a"}),
        json.dumps(["authorized_user"]),
    ],
)
async def test_load_treats_unparseable_token_as_absent(settings, store, content):
    settings.token_path.write_text(content, encoding="utf-8")

    assert await store.load() is None


@pytest.mark.anyio("asyncio")
async def test_save_then_load_roundtrip(settings, store, client_secrets_file):
    session = AuthorizedSession(client_id="ignored", client_secret="ignored", refresh_token="refresh-1")

    saved = await store.save(session)
    loaded = await store.load()

    assert loaded is not None
    assert loaded == saved
    assert loaded.type == "authorized_user"
    assert loaded.refresh_token == "refresh-1"
    assert loaded.client_id == CLIENT_ID
    assert loaded.client_secret == CLIENT_SECRET

    on_disk = json.loads(settings.token_path.read_text(encoding="utf-8"))
    assert on_disk == {
        "type": "authorized_user",
        "client_id": CLIENT_ID,
        "client_secret": CLIENT_SECRET,
        "refresh_token": "refresh-1",
    }


@pytest.mark.anyio("asyncio")
async def test_save_overwrites_previous_record(store, saved_token):
    await store.save(AuthorizedSession(client_id="x", client_secret="y", refresh_token="refresh-2"))

    loaded = await store.load()
    assert loaded is not None
    assert loaded.refresh_token == "refresh-2"


@pytest.mark.anyio("asyncio")
async def test_save_reads_web_registration(settings, store):
    settings.credentials_path.write_text(
        json.dumps({"web": {"client_id": "web-id", "client_secret": "web-secret"}}),
        encoding="utf-8",
    )

    record = await store.save(AuthorizedSession(client_id="x", client_secret="y", refresh_token="r"))

    assert record.client_id == "web-id"
    assert record.client_secret == "web-secret"


@pytest.mark.anyio("asyncio")
async def test_save_fails_without_client_secrets(settings, store):
    with pytest.raises(ClientSecretsError):
        await store.save(AuthorizedSession(client_id="x", client_secret="y", refresh_token="r"))

    assert not settings.token_path.exists()


@pytest.mark.anyio("asyncio")
@pytest.mark.parametrize(
    "content",
    [
        "{broken",
        json.dumps({"other": {}}),
        json.dumps({"installed": {"client_id": "only-id"}}),
    ],
)
async def test_save_fails_with_malformed_client_secrets(settings, store, content):
    settings.credentials_path.write_text(content, encoding="utf-8")

    with pytest.raises(ClientSecretsError):
        await store.save(AuthorizedSession(client_id="x", client_secret="y", refresh_token="r"))


@pytest.mark.anyio("asyncio")
async def test_save_requires_refresh_token(store, client_secrets_file):
    with pytest.raises(CredentialStoreError):
        await store.save(AuthorizedSession(client_id="x", client_secret="y", access_token="a"))


@pytest.mark.anyio("asyncio")
async def test_save_creates_missing_parent_directory(tmp_path, settings, client_secrets_file):
    nested = settings.model_copy(update={"token_path": tmp_path / "state" / "token.json"})
    store = CredentialStore(nested)

    await store.save(AuthorizedSession(client_id="x", client_secret="y", refresh_token="r"))

    assert (tmp_path / "state" / "token.json").exists()


@pytest.mark.anyio("asyncio")
async def test_clear_removes_token_file(settings, store, saved_token):
    assert await store.clear() is True
    assert not settings.token_path.exists()
    assert await store.clear() is False
