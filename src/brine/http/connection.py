# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Connection builder and the httpx-backed client it produces."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlparse

import httpx

from ..config import HttpSettings, load_http_settings
from ..errors import ConfigError
from .middleware import Middleware
from .models import HttpRequest, HttpResponse
from .url import validate_host

logger = logging.getLogger(__name__)


def default_transport(settings: HttpSettings) -> httpx.BaseTransport:
    """Return the default httpx transport for `settings`."""
    return httpx.HTTPTransport(verify=settings.verify_ssl)


class ConnectionBuilder:
    """
    Collects handlers and a transport for one host, then builds a Connection.

    Handlers form an onion around the transport: request hooks run in registration
    order, response hooks in reverse, so the handler registered last sits closest to
    the transport. `request()` and `response()` both append to that single list and
    differ only in intent. The transport is held apart from the handlers and always
    runs innermost, however late it is selected.
    """

    def __init__(self, host: str, settings: HttpSettings | None = None):
        self.host = validate_host(host)
        self.settings = settings or load_http_settings()
        self.handlers: list[Middleware] = []
        self.transport: httpx.BaseTransport | None = None

    def request(self, handler: Middleware) -> ConnectionBuilder:
        return self.use(handler)

    def response(self, handler: Middleware) -> ConnectionBuilder:
        return self.use(handler)

    def use(self, handler: Middleware) -> ConnectionBuilder:
        self.handlers.append(handler)
        return self

    def adapter(self, transport: httpx.BaseTransport) -> ConnectionBuilder:
        if self.transport is not None:
            raise ConfigError("a transport was already selected for this connection")
        self.transport = transport
        return self

    def build(self) -> Connection:
        if self.transport is None:
            raise ConfigError("no transport selected; the transport stage must run before build()")
        return Connection(self.host, list(self.handlers), self.transport, self.settings)


class Connection:
    """Client bound to one host; every request passes through the configured handlers."""

    def __init__(
        self,
        host: str,
        handlers: list[Middleware],
        transport: httpx.BaseTransport,
        settings: HttpSettings | None = None,
    ):
        self.host = host
        self.handlers = tuple(handlers)
        self.settings = settings or load_http_settings()
        self._client = httpx.Client(
            transport=transport,
            timeout=self.settings.timeout,
            headers={"User-Agent": self.settings.user_agent},
        )

    def url_for(self, path: str = "") -> str:
        if urlparse(path).scheme:
            return path
        if not path:
            return self.host
        return f"{self.host.rstrip('/')}/{path.lstrip('/')}"

    def request(
        self,
        method: str,
        path: str = "",
        *,
        body: Any = None,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        request = HttpRequest(
            url=self.url_for(path),
            method=method.upper(),
            headers=dict(headers or {}),
            params=dict(params or {}),
            body=body,
            timeout=timeout,
        )
        for handler in self.handlers:
            handler.on_request(request)

        response = self._send(request)

        for handler in reversed(self.handlers):
            handler.on_response(request, response)
        return response

    def _send(self, request: HttpRequest) -> HttpResponse:
        content = bytes(request.body) if isinstance(request.body, bytearray) else request.body
        if content is not None and not isinstance(content, (str, bytes)):
            raise ConfigError(f"request body must be str or bytes after handlers ran, got {type(content).__name__}")
        try:
            resp = self._client.request(
                request.method,
                request.url,
                headers=request.headers,
                params=request.params or None,
                content=content,
                timeout=request.timeout if request.timeout is not None else self.settings.timeout,
            )
        except httpx.HTTPError as exc:
            logger.debug("%s %s failed: %s", request.method, request.url, exc)
            return HttpResponse(
                ok=False,
                url=request.url,
                error_message=str(exc),
                error_type=type(exc).__name__,
            )
        return HttpResponse(
            ok=True,
            status_code=resp.status_code,
            headers=dict(resp.headers),
            text=resp.text,
            content=resp.content,
            url=str(resp.url),
        )

    def get(self, path: str = "", **kwargs: Any) -> HttpResponse:
        return self.request("GET", path, **kwargs)

    def head(self, path: str = "", **kwargs: Any) -> HttpResponse:
        return self.request("HEAD", path, **kwargs)

    def options(self, path: str = "", **kwargs: Any) -> HttpResponse:
        return self.request("OPTIONS", path, **kwargs)

    def post(self, path: str = "", **kwargs: Any) -> HttpResponse:
        return self.request("POST", path, **kwargs)

    def put(self, path: str = "", **kwargs: Any) -> HttpResponse:
        return self.request("PUT", path, **kwargs)

    def patch(self, path: str = "", **kwargs: Any) -> HttpResponse:
        return self.request("PATCH", path, **kwargs)

    def delete(self, path: str = "", **kwargs: Any) -> HttpResponse:
        return self.request("DELETE", path, **kwargs)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> Connection:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()

    def __repr__(self) -> str:
        return f"Connection(host={self.host!r}, handlers={[type(h).__name__ for h in self.handlers]})"
