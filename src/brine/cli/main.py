# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""brine CLI: send one request through a fully assembled client."""

from __future__ import annotations

import argparse
import json
import sys
from collections.abc import Callable
from typing import Any

from ..client_building import FROM_SETTINGS, ClientFactory
from ..config import HttpSettings, load_http_settings
from ..errors import AuthError, BrineError, ConfigError
from ..http.models import HttpResponse
from ..log import setup_logging
from ..oauth2 import ClientOptions, OAuth2Params

CLI_TEXT_TRUNCATION_BYTES = 4096
EXIT_OK = 0
EXIT_HTTP_FAILURE = 1
EXIT_ERROR = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send a request through a brine client (JSON, OAuth2, logging)")
    parser.add_argument("host", help="Base URL the client is bound to, e.g. https://api.example.com")
    parser.add_argument("path", nargs="?", default="", help="Request path relative to the host")
    parser.add_argument("-X", "--method", default="GET", help="HTTP method (default: GET)")
    parser.add_argument("-d", "--data", help="JSON request body")
    parser.add_argument(
        "-H",
        "--header",
        action="append",
        default=[],
        metavar="NAME: VALUE",
        help="Extra request header (repeatable)",
    )
    parser.add_argument("--log-http", default=None, help="Traffic logging level; DEBUG also logs bodies (default: $BRINE_LOG_HTTP)")
    parser.add_argument("--log-level", default=None, help="Root logging level (default: $BRINE_LOG_LEVEL or WARNING)")
    parser.add_argument(
        "--ignore-ssl-errors",
        action="store_true",
        help="Skip TLS verification (useful for lab/self-signed targets)",
    )
    parser.add_argument("--json", action="store_true", help="Output the full response as JSON")

    oauth2 = parser.add_argument_group("OAuth2 client credentials")
    oauth2.add_argument("--oauth2-site", help="Authorization server base URL")
    oauth2.add_argument("--token-url", default=None, help="Token endpoint path or URL (default: /oauth/token)")
    oauth2.add_argument("--client-id", help="OAuth2 client id")
    oauth2.add_argument("--client-secret", help="OAuth2 client secret")
    oauth2.add_argument("--token-type", default=None, help="Token type used in the Authorization header (default: bearer)")
    return parser


def _parse_headers(values: list[str]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise ConfigError(f"invalid header {raw!r}; expected 'Name: value'")
        headers[name.strip()] = value.strip()
    return headers


def _parse_body(data: str | None) -> Any:
    if data is None:
        return None
    try:
        return json.loads(data)
    except ValueError as exc:
        raise ConfigError(f"--data is not valid JSON: {exc}") from exc


def _configure_oauth2(args: argparse.Namespace, settings: HttpSettings) -> Callable[[OAuth2Params], None] | None:
    if not args.oauth2_site:
        return None
    if not args.client_id or not args.client_secret:
        raise ConfigError("--oauth2-site requires --client-id and --client-secret")
    options = ClientOptions(
        site=args.oauth2_site,
        token_url=args.token_url or "",
        verify=settings.verify_ssl,
    )

    def configure(params: OAuth2Params) -> None:
        if args.token_type:
            params.token_type = args.token_type
        params.fetch_from(args.client_id, args.client_secret, options)

    return configure


def _truncate_text_bytes(text: str, max_bytes: int) -> str:
    raw = text.encode("utf-8")
    if len(raw) <= max_bytes:
        return text
    suffix = "...[truncated]"
    keep = max_bytes - len(suffix.encode("utf-8"))
    if keep <= 0:
        return suffix
    return raw[:keep].decode("utf-8", errors="ignore") + suffix


def _response_payload(response: HttpResponse) -> dict[str, Any]:
    return {
        "ok": response.ok,
        "status_code": response.status_code,
        "url": response.url,
        "headers": response.headers,
        "body": response.data if response.data is not None else _truncate_text_bytes(response.text, CLI_TEXT_TRUNCATION_BYTES),
        "error_message": response.error_message,
        "error_type": response.error_type,
    }


def _print_json(response: HttpResponse) -> None:
    json.dump(_response_payload(response), sys.stdout, indent=2, sort_keys=True)
    sys.stdout.write("\n")


def _pretty_print(response: HttpResponse) -> None:
    if response.status_code is None:
        print(f"[brine] Request failed: {response.error_type}: {response.error_message}")
        return
    print(f"[brine] {response.status_code} {response.url}")
    if response.data is not None:
        print(json.dumps(response.data, indent=2, sort_keys=True))
    elif response.text:
        print(_truncate_text_bytes(response.text, CLI_TEXT_TRUNCATION_BYTES))


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    settings = load_http_settings()
    if args.ignore_ssl_errors:
        settings.verify_ssl = False

    factory = ClientFactory(settings)
    logging_pref = args.log_http if args.log_http is not None else FROM_SETTINGS
    try:
        configure = _configure_oauth2(args, settings)
        if configure is not None:
            factory.use_oauth2_token(configure)
        headers = _parse_headers(args.header)
        body = _parse_body(args.data)
        with factory.client_for_host(args.host, logging=logging_pref) as client:
            response = client.request(args.method, args.path, body=body, headers=headers)
    except AuthError as exc:
        print(f"brine: {exc.reason}: {exc}", file=sys.stderr)
        return EXIT_ERROR
    except BrineError as exc:
        print(f"brine: {exc}", file=sys.stderr)
        return EXIT_ERROR

    if args.json:
        _print_json(response)
    else:
        _pretty_print(response)

    return EXIT_OK if response.is_success else EXIT_HTTP_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
