"""Authorization request and callback models for the redirect login flow."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from urllib.parse import parse_qs, urlsplit

from graphlogin.primitives.urls import build_query

# Parameters the provider appends to the redirect URL on the way back.
CALLBACK_PARAMS = (
    "state",
    "code",
    "error",
    "error_reason",
    "error_description",
    "error_code",
)


@dataclass(frozen=True)
class AuthorizationRequest:
    """Parameters of a single outbound login dialog request."""

    dialog_base_url: str
    api_version: str
    client_id: str
    redirect_url: str
    state: str
    sdk: str
    scope: Sequence[str] = field(default_factory=tuple)
    rerequest: bool = False

    def to_params(self) -> dict[str, str]:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_url,
            "state": self.state,
            "sdk": self.sdk,
            "scope": ",".join(self.scope),
        }

        # Required to prompt again for permissions the user declined before
        if self.rerequest:
            params["auth_type"] = "rerequest"

        return params

    def build_authorization_url(self, separator: str = "&") -> str:
        """Build the complete login dialog URL."""
        query = build_query(self.to_params(), separator)
        return f"{self.dialog_base_url}/{self.api_version}/dialog/oauth?{query}"


@dataclass(frozen=True)
class CallbackParameters:
    """Query parameters of the redirect back from the login dialog."""

    code: str | None = None
    state: str | None = None
    error: str | None = None
    error_reason: str | None = None
    error_description: str | None = None
    error_code: str | None = None

    @classmethod
    def from_query(cls, query: Mapping[str, object]) -> CallbackParameters:
        """Read callback fields from a query mapping.

        Multi-valued entries (as produced by ``parse_qs``) use their first
        value. Empty strings are treated as absent.
        """

        def get_single_param(key: str) -> str | None:
            value = query.get(key)
            if isinstance(value, (list, tuple)):
                value = value[0] if value else None
            return str(value) if value else None

        return cls(**{name: get_single_param(name) for name in CALLBACK_PARAMS})

    @classmethod
    def from_url(cls, url: str) -> CallbackParameters:
        return cls.from_query(parse_qs(urlsplit(url).query))

    def is_success(self) -> bool:
        return self.error is None and self.code is not None

    def is_error(self) -> bool:
        return self.error is not None
