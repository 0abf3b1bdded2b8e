"""Shared test fixtures and stubs."""

from __future__ import annotations

import httpx
import openai
import pytest
from langchain_core.messages import AIMessage

from escalator.get_help import GetHelpTool
from escalator.server import McpServer
from escalator.upstream import UpstreamClient

_REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def rate_limit_error() -> openai.RateLimitError:
    return openai.RateLimitError(
        "Rate limit reached", response=httpx.Response(429, request=_REQUEST), body=None
    )


def auth_error() -> openai.AuthenticationError:
    return openai.AuthenticationError(
        "Incorrect API key provided", response=httpx.Response(401, request=_REQUEST), body=None
    )


class StubChatModel:
    """Plays back a script of replies; exceptions in the script are raised."""

    def __init__(self, *script, clock=None, latency=0.0):
        self.script = list(script)
        self.calls = []
        self.timeouts = []
        self.clock = clock
        self.latency = latency

    def invoke(self, messages, timeout=None):
        self.calls.append(messages)
        self.timeouts.append(timeout)
        if self.clock is not None:
            self.clock.now += self.latency
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, BaseException):
            raise item
        return AIMessage(content=item)


class FakeClock:
    """Monotonic clock that only moves when the stubbed sleep is called."""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def context_file(tmp_path):
    path = tmp_path / "README.md"
    path.write_text("# Test Project\nA tiny project used in tests.\n", encoding="utf-8")
    return path


def make_tool(chat_model, clock, summary_path) -> GetHelpTool:
    upstream = UpstreamClient(chat_model, sleep=clock.sleep, clock=clock)
    return GetHelpTool(upstream, summary_path=summary_path)


@pytest.fixture()
def make_server(clock, context_file):
    def _make(*script) -> McpServer:
        server = McpServer("escalator", "1.0.0")
        server.register(make_tool(StubChatModel(*script), clock, context_file))
        return server

    return _make
