"""Configuration for the redirect login flow."""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field, field_validator

SDK_VERSION = "0.1.0"
DEFAULT_GRAPH_VERSION = "v2.0"
DEFAULT_SESSION_PREFIX = "FBRLH_"

_GRAPH_VERSION_PATTERN = re.compile(r"^v\d+\.\d+$")


class LoginConfig(BaseModel):
    """Endpoints and defaults shared by the login helper and token client."""

    model_config = ConfigDict(frozen=True)

    dialog_base_url: str = "https://www.facebook.com"
    graph_base_url: str = "https://graph.facebook.com"
    default_graph_version: str = DEFAULT_GRAPH_VERSION
    session_prefix: str = DEFAULT_SESSION_PREFIX
    check_session_status: bool = True
    timeout: float = Field(default=30.0, gt=0)

    @field_validator("default_graph_version")
    @classmethod
    def validate_graph_version(cls, v: str) -> str:
        """Graph versions look like v2.0, v19.0."""
        if not _GRAPH_VERSION_PATTERN.match(v):
            raise ValueError(f"Invalid Graph API version: {v}")
        return v

    @field_validator("dialog_base_url", "graph_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith("https://"):
            raise ValueError(f"URL must use HTTPS: {v}")
        return v.rstrip("/")

    @property
    def sdk_tag(self) -> str:
        return f"python-sdk-{SDK_VERSION}"
