# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models passed through the handler pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

Headers = dict[str, str]


@dataclass
class HttpRequest:
    """Outgoing request as seen by request handlers before it reaches the transport."""

    url: str
    method: str = "GET"
    headers: Headers = field(default_factory=dict)
    params: dict[str, Any] = field(default_factory=dict)
    body: Any = None
    timeout: float | None = None


@dataclass
class HttpResponse:
    """Normalized HTTP response; `data` holds the decoded body when a decoder applied."""

    ok: bool
    status_code: int | None = None
    headers: Headers = field(default_factory=dict)
    text: str = ""
    content: bytes = b""
    url: str | None = None
    data: Any = None
    error_message: str | None = None
    error_type: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status_code is not None and 200 <= self.status_code < 300

    @property
    def body(self) -> Any:
        """Decoded body when available, raw text otherwise."""
        return self.data if self.data is not None else self.text
