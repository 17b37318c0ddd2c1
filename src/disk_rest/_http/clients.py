"""Client factory functions for creating pre-configured httpx clients."""

from __future__ import annotations

from collections.abc import Callable, Sequence

import httpx

from .config import DEFAULT_TIMEOUT, USER_AGENT, require_token


def _normalize_base_url(base_url: str) -> str:
    """Ensure base_url ends with a trailing slash for consistent URL joining."""
    return base_url.rstrip("/") + "/"


def _create_disk_auth_hook(
    token: str,
) -> Callable[[httpx.Request], httpx.Request]:
    """Create a request hook that adds cloud disk API auth headers.

    Uses setdefault so user-provided headers take precedence.
    """

    def hook(request: httpx.Request) -> httpx.Request:
        request.headers.setdefault("authorization", f"OAuth {token}")
        return request

    return hook


def _prepend_request_hooks(
    client: httpx.Client | httpx.AsyncClient,
    hooks: Sequence[Callable[[httpx.Request], httpx.Request]],
) -> None:
    """Prepend request hooks to an existing client's event hooks.

    Prepending ensures our default hooks run first, allowing user-configured
    hooks to override or intercept the defaults.
    """
    existing_hooks = list(client.event_hooks.get("request", []))
    client.event_hooks["request"] = list(hooks) + existing_hooks


def _async_hook(
    hook: Callable[[httpx.Request], httpx.Request],
) -> Callable[[httpx.Request], object]:
    async def wrapper(request: httpx.Request) -> None:
        hook(request)

    return wrapper


def create_disk_client(
    token: str | None = None,
    timeout: float | None = None,
    base_url: str | None = None,
    *,
    client: httpx.Client | None = None,
) -> httpx.Client:
    """Create or configure a sync httpx client for the cloud disk API.

    Args:
        token: OAuth token. Falls back to DISK_TOKEN env var if not provided.
        timeout: Request timeout in seconds. Defaults to DEFAULT_TIMEOUT.
            Ignored if client is provided.
        base_url: Base URL for API requests. Ignored if client is provided.
        client: Optional existing client to configure. If provided, auth hooks
            are prepended to existing hooks, allowing user hooks to override.

    Returns:
        An httpx.Client with auth event hook configured.

    Raises:
        RuntimeError: If no token is provided and DISK_TOKEN is not set.
    """
    resolved_token = require_token(token)
    auth_hook = _create_disk_auth_hook(resolved_token)

    if client is not None:
        _prepend_request_hooks(client, [auth_hook])
        return client

    effective_timeout = timeout if timeout is not None else DEFAULT_TIMEOUT
    kwargs: dict = {
        "timeout": httpx.Timeout(effective_timeout),
        "follow_redirects": True,
        "headers": {"user-agent": USER_AGENT},
        "event_hooks": {"request": [auth_hook]},
    }
    if base_url is not None:
        kwargs["base_url"] = _normalize_base_url(base_url)
    return httpx.Client(**kwargs)


def create_disk_async_client(
    token: str | None = None,
    timeout: float | None = None,
    base_url: str | None = None,
    *,
    client: httpx.AsyncClient | None = None,
) -> httpx.AsyncClient:
    """Create or configure an async httpx client for the cloud disk API.

    Args:
        token: OAuth token. Falls back to DISK_TOKEN env var if not provided.
        timeout: Request timeout in seconds. Defaults to DEFAULT_TIMEOUT.
            Ignored if client is provided.
        base_url: Base URL for API requests. Ignored if client is provided.
        client: Optional existing client to configure. If provided, auth hooks
            are prepended to existing hooks, allowing user hooks to override.

    Returns:
        An httpx.AsyncClient with auth event hook configured.

    Raises:
        RuntimeError: If no token is provided and DISK_TOKEN is not set.
    """
    resolved_token = require_token(token)
    auth_hook = _async_hook(_create_disk_auth_hook(resolved_token))

    if client is not None:
        _prepend_request_hooks(client, [auth_hook])
        return client

    effective_timeout = timeout if timeout is not None else DEFAULT_TIMEOUT
    kwargs: dict = {
        "timeout": httpx.Timeout(effective_timeout),
        "follow_redirects": True,
        "headers": {"user-agent": USER_AGENT},
        "event_hooks": {"request": [auth_hook]},
    }
    if base_url is not None:
        kwargs["base_url"] = _normalize_base_url(base_url)
    return httpx.AsyncClient(**kwargs)


__all__ = [
    "create_disk_client",
    "create_disk_async_client",
]
