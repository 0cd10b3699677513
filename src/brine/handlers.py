# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Pipeline stages applied to a ConnectionBuilder.

A HandlerChain always contains three built-in stages, applied in this order:

1. RequestStage   - JSON request encoding plus the OAuth2 Authorization header
2. ResponseStage  - optional traffic logging plus JSON response decoding
3. TransportStage - the httpx transport that actually sends requests

Stages capture everything they need when they are constructed, so a chain built
before a token refresh keeps the old token and a chain built afterwards sees the
new one. Extra stages can be placed before or after the built-ins.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import httpx

from .config import HttpSettings, load_http_settings
from .log import enable_http_logging
from .http.connection import Connection, ConnectionBuilder, default_transport
from .http.middleware import (
    JSON_CONTENT_TYPE,
    JsonRequestEncoder,
    JsonResponseDecoder,
    OAuth2Header,
    ResponseLogger,
)
from .oauth2 import DEFAULT_TOKEN_TYPE, OAuth2Params

DEBUG_LOGGING = "DEBUG"


@runtime_checkable
class Stage(Protocol):
    """One step of connection assembly."""

    def apply(self, builder: ConnectionBuilder) -> None: ...


def logs_bodies(logging: str | None) -> bool:
    """Return True when `logging` asks for request/response bodies (`debug` in any case)."""
    return bool(logging) and logging.casefold() == DEBUG_LOGGING.casefold()


@dataclass(frozen=True)
class RequestStage:
    token: str | None = None
    token_type: str = DEFAULT_TOKEN_TYPE

    @classmethod
    def from_oauth2(cls, oauth2: OAuth2Params | None) -> RequestStage:
        if oauth2 is None:
            return cls()
        return cls(token=oauth2.token, token_type=oauth2.token_type)

    def apply(self, builder: ConnectionBuilder) -> None:
        builder.request(JsonRequestEncoder())
        if self.token:
            builder.request(OAuth2Header(self.token, token_type=self.token_type))

    def __repr__(self) -> str:
        return f"RequestStage(authorized={self.token is not None}, token_type={self.token_type!r})"


@dataclass(frozen=True)
class ResponseStage:
    logging: str | None = None

    def apply(self, builder: ConnectionBuilder) -> None:
        if self.logging:
            enable_http_logging()
            builder.response(ResponseLogger(bodies=logs_bodies(self.logging)))
        builder.response(JsonResponseDecoder(content_type=JSON_CONTENT_TYPE))


@dataclass(frozen=True)
class TransportStage:
    transport: httpx.BaseTransport | None = None

    def apply(self, builder: ConnectionBuilder) -> None:
        builder.adapter(self.transport or default_transport(builder.settings))


class HandlerChain:
    """Ordered, immutable sequence of stages: `before`, the three built-ins, then `after`."""

    def __init__(
        self,
        request: RequestStage,
        response: ResponseStage,
        transport: TransportStage,
        *,
        before: Iterable[Stage] = (),
        after: Iterable[Stage] = (),
    ):
        self._builtin: tuple[Stage, Stage, Stage] = (request, response, transport)
        self._before = tuple(before)
        self._after = tuple(after)

    @classmethod
    def build(
        cls,
        oauth2: OAuth2Params | None = None,
        logging: str | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
        before: Iterable[Stage] = (),
        after: Iterable[Stage] = (),
    ) -> HandlerChain:
        """Assemble a chain from the credential and logging state as it is right now."""
        return cls(
            RequestStage.from_oauth2(oauth2),
            ResponseStage(logging=logging or None),
            TransportStage(transport=transport),
            before=before,
            after=after,
        )

    @property
    def builtin(self) -> tuple[Stage, Stage, Stage]:
        return self._builtin

    @property
    def stages(self) -> tuple[Stage, ...]:
        return self._before + self._builtin + self._after

    def apply(self, builder: ConnectionBuilder) -> ConnectionBuilder:
        for stage in self.stages:
            stage.apply(builder)
        return builder

    def connect(self, host: str, settings: HttpSettings | None = None) -> Connection:
        """Apply every stage to a new builder for `host` and return the resulting Connection."""
        builder = ConnectionBuilder(host, settings or load_http_settings())
        return self.apply(builder).build()

    def __iter__(self) -> Iterator[Stage]:
        return iter(self.stages)

    def __len__(self) -> int:
        return len(self.stages)

    def __repr__(self) -> str:
        return f"HandlerChain({', '.join(repr(stage) for stage in self.stages)})"


__all__ = [
    "HandlerChain",
    "RequestStage",
    "ResponseStage",
    "Stage",
    "TransportStage",
    "logs_bodies",
]
