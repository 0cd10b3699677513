# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request/response handlers registered on a ConnectionBuilder."""

from __future__ import annotations

import json
import logging
import re

from ..errors import ConfigError, DecodeError
from ..log import HTTP_LOGGER_NAME
from .headers import has_header, header_value, media_type, redact_headers
from .models import HttpRequest, HttpResponse

JSON_MEDIA_TYPE = "application/json"
JSON_CONTENT_TYPE = re.compile(r"\bjson$")


class Middleware:
    """
    A single handler in the connection pipeline.

    `on_request` sees the outgoing request before the transport, `on_response` sees the
    response on the way back. Both default to no-ops so handlers override only the side
    they care about.
    """

    def on_request(self, request: HttpRequest) -> None:
        return None

    def on_response(self, request: HttpRequest, response: HttpResponse) -> None:
        return None


class JsonRequestEncoder(Middleware):
    """
    Serialize structured request bodies as JSON.

    Request media types are matched case-insensitively. A structured body sent with
    a non-JSON Content-Type raises ConfigError; encode it yourself and pass a string.
    """

    def on_request(self, request: HttpRequest) -> None:
        if request.body is None or isinstance(request.body, (str, bytes, bytearray)):
            return
        content_type = media_type(request.headers)
        if content_type and not JSON_CONTENT_TYPE.search(content_type.lower()):
            raise ConfigError(f"cannot send structured body as {content_type}")
        request.body = json.dumps(request.body)
        if not content_type:
            request.headers["Content-Type"] = JSON_MEDIA_TYPE


class OAuth2Header(Middleware):
    """Attach `Authorization: <Type> <token>` unless the request already carries one."""

    def __init__(self, token: str, token_type: str = "bearer"):
        self.token = token
        self.token_type = token_type

    @property
    def header_value(self) -> str:
        scheme = "Bearer" if self.token_type.lower() == "bearer" else self.token_type
        return f"{scheme} {self.token}"

    def on_request(self, request: HttpRequest) -> None:
        if has_header(request.headers, "Authorization"):
            return
        request.headers["Authorization"] = self.header_value

    def __repr__(self) -> str:
        return f"OAuth2Header(token_type={self.token_type!r})"


class ResponseLogger(Middleware):
    """Log each exchange to the `brine.http` logger; bodies only when asked to."""

    def __init__(self, logger: logging.Logger | None = None, *, bodies: bool = False):
        self.logger = logger or logging.getLogger(HTTP_LOGGER_NAME)
        self.bodies = bodies

    def on_request(self, request: HttpRequest) -> None:
        self.logger.info("request: %s %s", request.method.upper(), request.url)
        self.logger.info("request headers: %s", redact_headers(request.headers))
        if self.bodies and request.body is not None:
            self.logger.info("request body: %s", _loggable(request.body))

    def on_response(self, request: HttpRequest, response: HttpResponse) -> None:
        if response.status_code is None:
            self.logger.info("response: error %s: %s", response.error_type, response.error_message)
            return
        self.logger.info("response: status %s", response.status_code)
        self.logger.info("response headers: %s", redact_headers(response.headers))
        if self.bodies:
            self.logger.info("response body: %s", response.text)


class JsonResponseDecoder(Middleware):
    """
    Decode response bodies whose media type matches `content_type`.

    The match runs against the media type without parameters, so
    `application/json; charset=utf-8` and `application/ld+json` decode while
    `text/html` passes through untouched.
    """

    def __init__(self, content_type: re.Pattern[str] = JSON_CONTENT_TYPE):
        self.content_type = content_type

    def applies_to(self, response: HttpResponse) -> bool:
        return bool(self.content_type.search(media_type(response.headers)))

    def on_response(self, request: HttpRequest, response: HttpResponse) -> None:
        if response.status_code is None or not self.applies_to(response):
            return
        if not response.text.strip():
            response.data = None
            return
        try:
            response.data = json.loads(response.text)
        except ValueError as exc:
            content_type = header_value(response.headers, "Content-Type")
            raise DecodeError(f"{request.method.upper()} {request.url}: invalid JSON body for {content_type}: {exc}") from exc


def _loggable(body: object) -> str:
    if isinstance(body, (bytes, bytearray)):
        return bytes(body).decode("utf-8", errors="replace")
    return str(body)


__all__ = [
    "JSON_CONTENT_TYPE",
    "JSON_MEDIA_TYPE",
    "JsonRequestEncoder",
    "JsonResponseDecoder",
    "Middleware",
    "OAuth2Header",
    "ResponseLogger",
]
