# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy and exception helpers."""

from __future__ import annotations

import socket
import ssl as ssl_module
from enum import Enum

import httpx


class ErrorCategory(str, Enum):
    TIMEOUT = "TIMEOUT"
    SSL_ERROR = "SSL_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    DNS_ERROR = "DNS_ERROR"
    HTTP_STATUS = "HTTP_STATUS"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    NONE = "NONE"


class BrineError(Exception):
    """Base class for errors raised by brine."""


class ConfigError(BrineError, ValueError):
    """Invalid or missing client configuration."""


class AuthError(BrineError):
    """OAuth2 token exchange failed."""

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory = ErrorCategory.UNKNOWN_ERROR,
        status_code: int | None = None,
    ):
        super().__init__(message)
        self.category = category
        self.status_code = status_code

    @property
    def reason(self) -> str:
        return error_category_to_reason(self.category)


class DecodeError(BrineError):
    """A response declared as JSON could not be decoded."""


def categorize_exception(exc: Exception) -> ErrorCategory:
    """
    Map Python/httpx exceptions to ErrorCategory.
    """
    if isinstance(exc, httpx.TimeoutException):
        return ErrorCategory.TIMEOUT

    if isinstance(exc, httpx.HTTPStatusError):
        return ErrorCategory.HTTP_STATUS

    # httpx wraps the underlying socket/ssl failure; inspect the cause first.
    cause = exc.__cause__ or exc.__context__
    if isinstance(cause, Exception) and not isinstance(cause, httpx.HTTPError):
        category = categorize_exception(cause)
        if category is not ErrorCategory.UNKNOWN_ERROR:
            return category

    if isinstance(exc, (ssl_module.SSLError, ssl_module.CertificateError)):
        return ErrorCategory.SSL_ERROR

    if isinstance(exc, (socket.gaierror, socket.herror)):
        return ErrorCategory.DNS_ERROR

    if isinstance(exc, (httpx.ConnectError, httpx.RemoteProtocolError, httpx.NetworkError, httpx.ProxyError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, (ConnectionError, ConnectionRefusedError, ConnectionResetError)):
        return ErrorCategory.CONNECTION_ERROR

    if isinstance(exc, ValueError):
        return ErrorCategory.INVALID_RESPONSE

    return ErrorCategory.UNKNOWN_ERROR


def error_category_to_reason(category: ErrorCategory | None) -> str:
    """User-facing reason string."""
    mapping = {
        ErrorCategory.TIMEOUT: "Authorization server timed out",
        ErrorCategory.SSL_ERROR: "TLS/certificate issue",
        ErrorCategory.CONNECTION_ERROR: "Authorization server unreachable",
        ErrorCategory.DNS_ERROR: "DNS resolution failure",
        ErrorCategory.HTTP_STATUS: "Authorization server rejected the request",
        ErrorCategory.INVALID_RESPONSE: "Malformed token response",
        ErrorCategory.UNKNOWN_ERROR: "Token exchange failed",
        ErrorCategory.NONE: "",
        None: "",
    }
    return mapping.get(category, "Token exchange failed")


__all__ = [
    "AuthError",
    "BrineError",
    "ConfigError",
    "DecodeError",
    "ErrorCategory",
    "categorize_exception",
    "error_category_to_reason",
]
