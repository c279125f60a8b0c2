"""Application and token entities."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AppCredentials(BaseModel):
    """Identifier and secret of a registered application."""

    model_config = ConfigDict(frozen=True)

    app_id: str = Field(min_length=1)
    app_secret: str = Field(min_length=1, repr=False)


class AccessToken(BaseModel):
    """Access token returned by a successful code exchange.

    ``str(token)`` yields the raw token value so it can be dropped
    straight into URLs and headers.
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(min_length=1, repr=False)
    expires_at: datetime | None = None
    machine_id: str | None = None

    def __str__(self) -> str:
        return self.value

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check whether the token has passed its expiry time.

        Tokens without an expiry never expire.
        """
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        return now >= self.expires_at

    @classmethod
    def from_response(
        cls, data: dict[str, Any], now: datetime | None = None
    ) -> AccessToken:
        """Build a token from a token endpoint payload.

        Accepts both ``expires_in`` and the legacy ``expires`` field, each a
        number of seconds from now.

        Raises:
            KeyError: If the payload has no access_token
        """
        expires_at = None
        lifetime = data.get("expires_in", data.get("expires"))
        if lifetime is not None:
            now = now or datetime.now(timezone.utc)
            expires_at = now + timedelta(seconds=int(lifetime))

        return cls(
            value=data["access_token"],
            expires_at=expires_at,
            machine_id=data.get("machine_id"),
        )
