# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
OAuth2 client-credentials support.

`OAuth2Params` holds the token that the request stage injects into outgoing
requests. A token is obtained with `fetch_from`, which performs the
client-credentials grant (RFC 6749 section 4.4) against an authorization server
described by `ClientOptions`.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qsl

import httpx

from .config import load_http_settings
from .errors import AuthError, ConfigError, ErrorCategory, categorize_exception
from .http.headers import media_type
from .http.url import build_token_url, validate_host

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TYPE = "bearer"
DEFAULT_TOKEN_URL = "/oauth/token"
AUTH_SCHEMES = ("basic_auth", "request_body")


@dataclass
class ClientOptions:
    """Where and how to request a token."""

    site: str
    token_url: str = DEFAULT_TOKEN_URL
    verify: bool = True
    timeout: float | None = None
    auth_scheme: str = "basic_auth"
    scope: str | None = None
    transport: httpx.BaseTransport | None = None

    def __post_init__(self) -> None:
        self.site = validate_host(self.site, what="OAuth2 site")
        if not self.token_url:
            self.token_url = DEFAULT_TOKEN_URL
        if self.auth_scheme not in AUTH_SCHEMES:
            raise ConfigError(f"unsupported OAuth2 auth_scheme {self.auth_scheme!r}; expected one of {AUTH_SCHEMES}")

    @property
    def token_endpoint(self) -> str:
        return build_token_url(self.site, self.token_url)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> ClientOptions:
        """
        Build options from a plain mapping.

        Accepts `site`, `token_url`, `auth_scheme`, `scope`, `timeout`, `transport` and
        either a top-level `verify` or an `ssl` mapping such as `{"verify": False}`.
        """
        known = {"site", "token_url", "verify", "ssl", "timeout", "auth_scheme", "scope", "transport"}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"unknown OAuth2 client options: {', '.join(unknown)}")
        if not data.get("site"):
            raise ConfigError("OAuth2 client options require 'site'")

        verify = data.get("verify", True)
        ssl = data.get("ssl")
        if isinstance(ssl, Mapping) and "verify" in ssl:
            verify = ssl["verify"]

        return cls(
            site=str(data["site"]),
            token_url=str(data.get("token_url") or DEFAULT_TOKEN_URL),
            verify=bool(verify),
            timeout=data.get("timeout"),
            auth_scheme=str(data.get("auth_scheme") or "basic_auth"),
            scope=data.get("scope"),
            transport=data.get("transport"),
        )


class OAuth2Params:
    """
    OAuth2 credentials consulted when a handler chain is assembled.

    `token` stays None until `fetch_from` succeeds; `token_type` defaults to `bearer`
    and can be changed before or after fetching.
    """

    def __init__(self, token_type: str = DEFAULT_TOKEN_TYPE):
        self._token: str | None = None
        self._token_type = DEFAULT_TOKEN_TYPE
        self.token_type = token_type

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def token_type(self) -> str:
        return self._token_type

    @token_type.setter
    def token_type(self, value: str) -> None:
        if not isinstance(value, str) or not value.strip():
            raise ConfigError("token_type must be a non-empty string")
        self._token_type = value.strip()

    def fetch_from(self, id: str, secret: str, options: ClientOptions | Mapping[str, Any]) -> str:  # noqa: A002
        """
        Fetch a token with the client-credentials grant and store it as `token`.

        The token is also returned, so a configure callable can use it without
        reading `token` back.

        Raises AuthError if the server cannot be reached, answers with a non-2xx status,
        or returns no `access_token`. The stored token is left untouched on failure.
        """
        opts = options if isinstance(options, ClientOptions) else ClientOptions.from_mapping(options)
        token = _request_token(id, secret, opts)
        self._token = token
        logger.debug("Fetched OAuth2 %s token from %s", self._token_type, opts.token_endpoint)
        return token

    def __repr__(self) -> str:
        state = "authorized" if self._token else "uninitialized"
        return f"OAuth2Params(token_type={self._token_type!r}, state={state})"


def _request_token(client_id: str, client_secret: str, opts: ClientOptions) -> str:
    endpoint = opts.token_endpoint
    form = {"grant_type": "client_credentials"}
    if opts.scope:
        form["scope"] = opts.scope
    auth: tuple[str, str] | None = None
    if opts.auth_scheme == "basic_auth":
        auth = (client_id, client_secret)
    else:
        form["client_id"] = client_id
        form["client_secret"] = client_secret

    timeout = opts.timeout if opts.timeout is not None else load_http_settings().timeout
    try:
        with httpx.Client(verify=opts.verify, timeout=timeout, transport=opts.transport) as client:
            response = client.post(endpoint, data=form, auth=auth, headers={"Accept": "application/json"})
            response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise AuthError(
            f"Token request to {endpoint} failed with status {exc.response.status_code}",
            category=ErrorCategory.HTTP_STATUS,
            status_code=exc.response.status_code,
        ) from exc
    except httpx.HTTPError as exc:
        raise AuthError(f"Token request to {endpoint} failed: {exc}", category=categorize_exception(exc)) from exc

    payload = _parse_token_response(response)
    token = payload.get("access_token")
    if not isinstance(token, str) or not token:
        raise AuthError(
            f"Token response from {endpoint} did not include an access_token",
            category=ErrorCategory.INVALID_RESPONSE,
            status_code=response.status_code,
        )
    return token


def _parse_token_response(response: httpx.Response) -> Mapping[str, Any]:
    if media_type(response.headers) == "application/x-www-form-urlencoded":
        return dict(parse_qsl(response.text))
    try:
        payload = response.json()
    except ValueError as exc:
        raise AuthError(
            f"Token response from {response.request.url} is not valid JSON",
            category=ErrorCategory.INVALID_RESPONSE,
            status_code=response.status_code,
        ) from exc
    if not isinstance(payload, Mapping):
        raise AuthError(
            f"Token response from {response.request.url} is not a JSON object",
            category=ErrorCategory.INVALID_RESPONSE,
            status_code=response.status_code,
        )
    return payload


__all__ = ["DEFAULT_TOKEN_TYPE", "DEFAULT_TOKEN_URL", "ClientOptions", "OAuth2Params"]
