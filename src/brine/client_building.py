# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Build clients for API tests with the standard handler chain."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

import httpx

from .config import HttpSettings, load_http_settings
from .handlers import HandlerChain, Stage
from .http.connection import Connection
from .http.url import validate_host
from .oauth2 import OAuth2Params

logger = logging.getLogger(__name__)


class _FromSettings:
    def __repr__(self) -> str:
        return "<from settings>"


FROM_SETTINGS = _FromSettings()


class ClientFactory:
    """
    Produces host-bound clients whose requests pass through a fresh HandlerChain.

    The chain is assembled on every `client_for_host` call from the OAuth2 params and
    logging preference current at that moment; clients built earlier keep the state
    they were built with.
    """

    def __init__(
        self,
        settings: HttpSettings | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
        before: Iterable[Stage] = (),
        after: Iterable[Stage] = (),
    ):
        self.settings = settings or load_http_settings()
        self.transport = transport
        self.before = tuple(before)
        self.after = tuple(after)
        self.oauth2: OAuth2Params | None = None
        self.logging: str | None = self.resolve_logging()

    def use_oauth2_token(self, configure: Callable[[OAuth2Params], object]) -> OAuth2Params:
        """
        Configure OAuth2 params and attach them to subsequently built clients.

        `configure` receives a fresh OAuth2Params and normally calls `fetch_from` on it.
        The params are attached only if `configure` returns without raising.
        """
        params = OAuth2Params()
        configure(params)
        self.oauth2 = params
        return params

    def resolve_logging(self, logging: str | None | _FromSettings = FROM_SETTINGS) -> str | None:
        """An explicit value wins (None included); otherwise fall back to `settings.log_http`."""
        value = self.settings.log_http if logging is FROM_SETTINGS else logging
        if value is None or not str(value).strip():
            return None
        return str(value)

    def connection_handlers(self) -> HandlerChain:
        """Return the chain that the next client would be built with, using the remembered logging preference."""
        return HandlerChain.build(
            self.oauth2,
            self.logging,
            transport=self.transport,
            before=self.before,
            after=self.after,
        )

    def client_for_host(self, host: str, logging: str | None | _FromSettings = FROM_SETTINGS) -> Connection:
        """
        Return a client which sends requests to `host`.

        Raises ConfigError if `host` is empty or not an absolute http(s) URL.
        """
        host = validate_host(host)
        self.logging = self.resolve_logging(logging)
        chain = self.connection_handlers()
        logger.debug("Building client for %s with %r", host, chain)
        return chain.connect(host, self.settings)


__all__ = ["FROM_SETTINGS", "ClientFactory"]
