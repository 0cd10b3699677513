# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging

import httpx
import pytest
from conftest import TokenServer

from brine.config import HttpSettings
from brine.handlers import (
    HandlerChain,
    RequestStage,
    ResponseStage,
    Stage,
    TransportStage,
    logs_bodies,
)
from brine.http.connection import ConnectionBuilder
from brine.http.middleware import (
    JsonRequestEncoder,
    JsonResponseDecoder,
    Middleware,
    OAuth2Header,
    ResponseLogger,
)
from brine.oauth2 import ClientOptions, OAuth2Params


def _authorized(token="token-1", token_type="bearer"):
    params = OAuth2Params()
    params.token_type = token_type
    params.fetch_from("id", "secret", ClientOptions(site="https://auth.example", transport=TokenServer(tokens=(token,))))
    return params


def _builder():
    return ConnectionBuilder("http://api.example", HttpSettings())


class MarkerStage:
    def __init__(self, name, seen):
        self.name = name
        self.seen = seen

    def apply(self, builder):
        self.seen.append(self.name)


class TracingStage:
    """Wraps a stage to record the order in which stages are applied."""

    def __init__(self, inner, seen):
        self.inner = inner
        self.seen = seen

    def apply(self, builder):
        self.seen.append(type(self.inner).__name__)
        self.inner.apply(builder)


def test_chain_has_three_builtin_stages_in_order():
    for oauth2, logging in [(None, None), (_authorized(), "DEBUG"), (OAuth2Params(), "info")]:
        chain = HandlerChain.build(oauth2, logging)
        assert len(chain) == 3
        assert [type(stage) for stage in chain] == [RequestStage, ResponseStage, TransportStage]
        assert all(isinstance(stage, Stage) for stage in chain)


def test_chain_applies_stages_in_order():
    seen = []
    chain = HandlerChain(
        TracingStage(RequestStage(), seen),
        TracingStage(ResponseStage(), seen),
        TracingStage(TransportStage(httpx.MockTransport(lambda request: httpx.Response(200))), seen),
    )
    builder = chain.apply(_builder())
    assert seen == ["RequestStage", "ResponseStage", "TransportStage"]
    assert builder.transport is not None


def test_before_and_after_stages_surround_builtins():
    seen = []
    chain = HandlerChain.build(before=[MarkerStage("before", seen)], after=[MarkerStage("after", seen)])

    assert len(chain) == 5
    assert [type(stage) for stage in chain.builtin] == [RequestStage, ResponseStage, TransportStage]
    assert chain.stages[0].name == "before"
    assert chain.stages[-1].name == "after"

    chain.apply(_builder())
    assert seen == ["before", "after"]


def test_after_stage_handlers_sit_inside_builtins():
    class Tag(Middleware):
        def on_request(self, request):
            request.headers["X-Body-Seen"] = str(request.body)

    class TagStage:
        def apply(self, builder):
            builder.request(Tag())

    transport = httpx.MockTransport(lambda request: httpx.Response(200, json={}))
    chain = HandlerChain.build(transport=transport, after=[TagStage()])
    builder = chain.apply(_builder())

    assert [type(h) for h in builder.handlers] == [JsonRequestEncoder, JsonResponseDecoder, Tag]
    assert builder.transport is transport


def test_no_credentials_means_no_authorization_handler():
    for oauth2 in (None, OAuth2Params()):
        builder = HandlerChain.build(oauth2).apply(_builder())
        assert not any(isinstance(h, OAuth2Header) for h in builder.handlers)


def test_token_adds_exactly_one_authorization_header():
    sent = []

    def reply(request):
        sent.append(request)
        return httpx.Response(200, json={"ok": True})

    chain = HandlerChain.build(_authorized("abc", token_type="bearer"), transport=httpx.MockTransport(reply))
    with chain.connect("http://api.example", HttpSettings()) as client:
        response = client.get("/me")

    assert response.data == {"ok": True}
    assert sent[0].headers.get_list("authorization") == ["Bearer abc"]


def test_request_stage_uses_configured_token_type():
    builder = HandlerChain.build(_authorized("abc", token_type="MAC")).apply(_builder())
    header = next(h for h in builder.handlers if isinstance(h, OAuth2Header))
    assert header.header_value == "MAC abc"


def test_stage_captures_token_at_build_time():
    params = OAuth2Params()
    server = TokenServer(tokens=("old", "new"))
    options = ClientOptions(site="https://auth.example", transport=server)
    params.fetch_from("id", "secret", options)

    before_refresh = HandlerChain.build(params)
    params.fetch_from("id", "secret", options)
    after_refresh = HandlerChain.build(params)

    assert before_refresh.builtin[0].token == "old"
    assert after_refresh.builtin[0].token == "new"


@pytest.mark.parametrize("logging", ["debug", "DEBUG", "DeBuG"])
def test_debug_logging_enables_bodies(logging):
    assert logs_bodies(logging) is True
    builder = HandlerChain.build(logging=logging).apply(_builder())
    loggers = [h for h in builder.handlers if isinstance(h, ResponseLogger)]
    assert len(loggers) == 1
    assert loggers[0].bodies is True


@pytest.mark.parametrize("logging", ["info", "WARN", "debugging", " debug ", "debug\n"])
def test_other_logging_levels_log_metadata_only(logging):
    assert logs_bodies(logging) is False
    builder = HandlerChain.build(logging=logging).apply(_builder())
    loggers = [h for h in builder.handlers if isinstance(h, ResponseLogger)]
    assert len(loggers) == 1
    assert loggers[0].bodies is False


@pytest.mark.parametrize("logging", [None, ""])
def test_absent_logging_disables_logger(logging):
    builder = HandlerChain.build(logging=logging).apply(_builder())
    assert not any(isinstance(h, ResponseLogger) for h in builder.handlers)
    assert isinstance(builder.handlers[-1], JsonResponseDecoder)


def test_response_stage_registers_logger_before_decoder():
    builder = _builder()
    ResponseStage(logging="info").apply(builder)
    assert [type(h) for h in builder.handlers] == [ResponseLogger, JsonResponseDecoder]


def test_transport_stage_defaults_to_httpx_transport():
    builder = _builder()
    TransportStage().apply(builder)
    assert isinstance(builder.transport, httpx.HTTPTransport)


def test_response_stage_with_logging_enables_traffic_logger(quiet_http_logger):
    ResponseStage(logging="info").apply(_builder())
    assert quiet_http_logger.getEffectiveLevel() == logging.INFO


def test_response_stage_without_logging_leaves_traffic_logger_alone(quiet_http_logger):
    ResponseStage().apply(_builder())
    assert quiet_http_logger.getEffectiveLevel() == logging.WARNING
