# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""URL helpers for client hosts and authorization servers."""

from __future__ import annotations

from urllib.parse import urljoin, urlparse

from ..errors import ConfigError

_ALLOWED_SCHEMES = {"http", "https"}


def validate_host(host: str | None, *, what: str = "host") -> str:
    """
    Return `host` stripped of surrounding whitespace if it is an absolute http(s) URL.

    Raises ConfigError for empty values, missing schemes (`example.com`) and hosts
    without a network location (`http://`).
    """
    raw = str(host or "").strip()
    if not raw:
        raise ConfigError(f"{what} must not be empty")
    parsed = urlparse(raw)
    if parsed.scheme.lower() not in _ALLOWED_SCHEMES:
        raise ConfigError(f"{what} must be an absolute http(s) URL, got {raw!r}")
    if not parsed.netloc or not parsed.hostname:
        raise ConfigError(f"{what} is missing a network location: {raw!r}")
    try:
        parsed.port
    except ValueError as exc:
        raise ConfigError(f"{what} has an invalid port: {raw!r}") from exc
    return raw


def build_token_url(site: str, token_url: str) -> str:
    """
    Resolve the token endpoint against the authorization server.

    Absolute `token_url` values win; relative ones are joined onto `site`:
      https://auth.example/, /oauth/token -> https://auth.example/oauth/token
    """
    if urlparse(token_url).scheme:
        return token_url
    return urljoin(site, token_url)


__all__ = ["build_token_url", "validate_host"]
