# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging

import httpx
import pytest


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler=None):
        self.requests: list[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            if handler is None:
                return httpx.Response(200, json={"ok": True})
            return handler(request)

        super().__init__(record)


class TokenServer(RecordingTransport):
    """Authorization server stub handing out tokens from `tokens` in order."""

    def __init__(self, tokens=("token-1",), status_code=200):
        self._tokens = list(tokens)
        self.issued = 0

        def issue(request: httpx.Request) -> httpx.Response:  # noqa: ARG001
            token = self._tokens[min(self.issued, len(self._tokens) - 1)]
            self.issued += 1
            return httpx.Response(status_code, json={"access_token": token, "token_type": "bearer", "expires_in": 3600})

        super().__init__(issue)


@pytest.fixture
def api_transport():
    return RecordingTransport()


@pytest.fixture
def token_server():
    return TokenServer(tokens=("token-1", "token-2"))


@pytest.fixture(autouse=True)
def _restore_http_logger_level():
    """Building a client with logging raises `brine.http` to INFO; undo that between tests."""
    logger = logging.getLogger("brine.http")
    level = logger.level
    yield
    logger.setLevel(level)


@pytest.fixture
def quiet_http_logger():
    """`brine.http` with no level of its own under a WARNING root, as in a fresh process."""
    root = logging.getLogger()
    root_level = root.level
    logger = logging.getLogger("brine.http")
    root.setLevel(logging.WARNING)
    logger.setLevel(logging.NOTSET)
    yield logger
    root.setLevel(root_level)
