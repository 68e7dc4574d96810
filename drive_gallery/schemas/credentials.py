"""Pydantic schemas for locally stored Google credentials."""
from __future__ import annotations

from typing import Any, Literal, Mapping

from pydantic import BaseModel, Field

REGISTRATION_KINDS = ("installed", "web")


class CredentialRecord(BaseModel):
    """Contents of the token file written after a successful consent flow."""

    type: Literal["authorized_user"] = "authorized_user"
    client_id: str = Field(min_length=1)
    client_secret: str = Field(min_length=1)
    refresh_token: str = Field(min_length=1)


class ClientSecrets(BaseModel):
    """Client id and secret from the application registration file."""

    kind: Literal["installed", "web"]
    client_id: str = Field(min_length=1)
    client_secret: str = Field(min_length=1)
    config: dict[str, Any] = Field(default_factory=dict, repr=False)

    @classmethod
    def from_registration(cls, data: Mapping[str, Any]) -> ClientSecrets:
        """Pick the ``installed`` (or, failing that, ``web``) block of a registration."""

        for kind in REGISTRATION_KINDS:
            block = data.get(kind)
            if isinstance(block, Mapping):
                return cls(
                    kind=kind,
                    client_id=block.get("client_id", ""),
                    client_secret=block.get("client_secret", ""),
                    config={kind: dict(block)},
                )
        raise ValueError("Client secrets must contain an 'installed' or 'web' section")
