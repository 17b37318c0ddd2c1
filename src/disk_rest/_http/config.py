"""HTTP configuration for cloud disk API clients."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

DEFAULT_API_BASE_URL = "https://cloud-api.yandex.net"
DEFAULT_TIMEOUT = 30.0
USER_AGENT = "Cloud API Python Client/1.0"


def get_api_base_url() -> str:
    """Resolve the API base URL, honouring the DISK_API_URL override."""
    return os.getenv("DISK_API_URL") or DEFAULT_API_BASE_URL


@dataclass
class HTTPConfig:
    """Configuration for HTTP requests to the cloud disk API."""

    base_url: str = field(default_factory=get_api_base_url)
    timeout: float = DEFAULT_TIMEOUT
    token: str | None = None
    default_headers: dict[str, str] = field(default_factory=dict)

    def get_headers(self) -> dict[str, str]:
        """Build metadata request headers; authorization is added by the client hook."""
        headers = {
            "accept": "application/json",
            **self.default_headers,
        }
        return headers

    def url(self, path: str) -> str:
        return self.base_url.rstrip("/") + "/" + path.lstrip("/")


def require_token(token: str | None) -> str:
    """Resolve token from argument or environment, raising if not found."""
    env_token = os.getenv("DISK_TOKEN")
    resolved = token or env_token
    if not resolved:
        raise RuntimeError("Missing cloud disk OAuth token. Pass token=... or set DISK_TOKEN.")
    return resolved


__all__ = [
    "HTTPConfig",
    "DEFAULT_API_BASE_URL",
    "DEFAULT_TIMEOUT",
    "USER_AGENT",
    "get_api_base_url",
    "require_token",
]
