# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP connection exports."""

from .connection import Connection, ConnectionBuilder, default_transport
from .headers import has_header, header_value, media_type, redact_headers
from .middleware import (
    JSON_CONTENT_TYPE,
    JsonRequestEncoder,
    JsonResponseDecoder,
    Middleware,
    OAuth2Header,
    ResponseLogger,
)
from .models import Headers, HttpRequest, HttpResponse
from .url import build_token_url, validate_host

__all__ = [
    "JSON_CONTENT_TYPE",
    "Connection",
    "ConnectionBuilder",
    "Headers",
    "HttpRequest",
    "HttpResponse",
    "JsonRequestEncoder",
    "JsonResponseDecoder",
    "Middleware",
    "OAuth2Header",
    "ResponseLogger",
    "build_token_url",
    "default_transport",
    "has_header",
    "header_value",
    "media_type",
    "redact_headers",
    "validate_host",
]
