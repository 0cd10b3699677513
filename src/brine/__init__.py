# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
brine package entrypoint.

This package builds HTTP clients for API tests: a fixed handler chain encodes JSON
requests, injects OAuth2 client-credentials tokens, logs traffic on request and
decodes JSON responses before handing off to an httpx transport.
"""

from .client_building import FROM_SETTINGS, ClientFactory
from .config import HttpSettings, load_http_settings
from .errors import AuthError, BrineError, ConfigError, DecodeError, ErrorCategory
from .handlers import HandlerChain, RequestStage, ResponseStage, Stage, TransportStage
from .http import Connection, ConnectionBuilder, HttpRequest, HttpResponse, Middleware
from .log import setup_logging
from .oauth2 import ClientOptions, OAuth2Params
from .version import __version__

__all__ = [
    "AuthError",
    "BrineError",
    "ClientFactory",
    "ClientOptions",
    "ConfigError",
    "Connection",
    "ConnectionBuilder",
    "DecodeError",
    "ErrorCategory",
    "FROM_SETTINGS",
    "HandlerChain",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "Middleware",
    "OAuth2Params",
    "RequestStage",
    "ResponseStage",
    "Stage",
    "TransportStage",
    "load_http_settings",
    "setup_logging",
    "__version__",
]
