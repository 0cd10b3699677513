# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Header normalization utilities.

HTTP header field names are case-insensitive (RFC 9110). Requests and responses carry
headers as plain dicts, so handlers look them up through these helpers instead of
indexing directly.
"""

from __future__ import annotations

from collections.abc import Mapping

SENSITIVE_HEADERS = frozenset({"authorization", "proxy-authorization", "cookie", "set-cookie"})


def header_value(headers: Mapping[object, object] | None, name: str, default: str = "") -> str:
    """
    Return a header value using case-insensitive key matching.

    Fast-paths common key casings before falling back to a full scan.
    """
    if not headers or not name:
        return default

    lower = str(name).lower()
    for key in (name, lower, lower.title()):
        if key in headers:
            value = headers.get(key)
            return default if value is None else str(value).strip()

    for key, value in headers.items():
        if key is None:
            continue
        if str(key).lower() == lower:
            return default if value is None else str(value).strip()

    return default


def has_header(headers: Mapping[object, object] | None, name: str) -> bool:
    if not headers:
        return False
    lower = name.lower()
    return any(key is not None and str(key).lower() == lower for key in headers)


def media_type(headers: Mapping[object, object] | None) -> str:
    """Return the Content-Type media type without parameters (`application/json; charset=utf-8` -> `application/json`)."""
    return header_value(headers, "Content-Type").split(";", 1)[0].strip()


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Copy headers with credential-bearing values masked for logging."""
    return {key: ("[REDACTED]" if key.lower() in SENSITIVE_HEADERS else value) for key, value in headers.items()}


__all__ = ["has_header", "header_value", "media_type", "redact_headers"]
