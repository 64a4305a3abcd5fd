"""Stateless request construction for the BNDES API."""

import ssl
from typing import Any

import httpx

from bndespay.client.models import ClientConfig
from bndespay.common.errors import ConfigError


SESSION_COOKIE = "CTRL"


def tls_context(config: ClientConfig) -> ssl.SSLContext:
    """Mutual-TLS context presenting the supplier certificate and key."""

    context = ssl.create_default_context()
    if not config.verify_tls:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    try:
        context.load_cert_chain(certfile=config.cert_path, keyfile=config.key_path)
    except OSError as exc:
        raise ConfigError(f"cannot load client certificate/key: {exc}") from exc
    return context


def open_client(config: ClientConfig, transport: httpx.BaseTransport | None = None) -> httpx.Client:
    """Create the per-call HTTP client; callers own it in a `with` block."""

    # Only the connect phase is bounded; BNDES calls may take long to answer.
    timeout = httpx.Timeout(None, connect=config.connect_timeout)
    if transport is not None:
        return httpx.Client(base_url=config.url, transport=transport, timeout=timeout)
    return httpx.Client(base_url=config.url, verify=tls_context(config), timeout=timeout)


def build_request(
    client: httpx.Client,
    method: str,
    path: str,
    *,
    token: int | None,
    attach_token: bool = True,
    payload: dict[str, Any] | None = None,
    params: dict[str, Any] | None = None,
) -> httpx.Request:
    """Build one request against `{base_url}{path}`.

    Every call except login carries the session token as the `CTRL` cookie.
    """

    headers = {"Content-Type": "application/json"}
    if attach_token:
        headers["Cookie"] = f"{SESSION_COOKIE}={token if token is not None else ''}"
    return client.build_request(method, path, headers=headers, json=payload, params=params)
