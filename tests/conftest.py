"""Test configuration and fixtures."""

import json
from collections import Counter
from typing import Any, Callable

import httpx
import pytest

from roadledger_gateway.config import Settings
from roadledger_gateway.core.circuit_breaker import CircuitBreakerConfig, HealthTracker

OPENAI_HOST = "api.openai.com"
ANTHROPIC_HOST = "api.anthropic.com"


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def openai_response(data: Any, status_code: int = 200) -> httpx.Response:
    content = data if isinstance(data, str) else json.dumps(data)
    return httpx.Response(status_code, json={"choices": [{"message": {"content": content}}]})


def anthropic_response(text: str, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json={"content": [{"type": "text", "text": text}]})


class FakeProviders:
    """Routes provider requests to per-host handlers and records calls."""

    def __init__(self) -> None:
        self.calls: Counter[str] = Counter()
        self.requests: list[httpx.Request] = []
        self.handlers: dict[str, Callable[[httpx.Request], httpx.Response]] = {
            OPENAI_HOST: lambda request: openai_response({"vendor": "Pilot"}),
            ANTHROPIC_HOST: lambda request: anthropic_response('{"vendor": "Love\'s"}'),
        }

    def on(self, host: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handlers[host] = handler

    def reply(self, host: str, response: httpx.Response) -> None:
        self.handlers[host] = lambda request: response

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.calls[request.url.host] += 1
        self.requests.append(request)
        return self.handlers[request.url.host](request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self._handle)

    @property
    def total_calls(self) -> int:
        return sum(self.calls.values())


@pytest.fixture
def clock() -> FakeClock:
    """Fake clock for circuit timing."""
    return FakeClock()


@pytest.fixture
def tracker(clock: FakeClock) -> HealthTracker:
    """Health tracker with default thresholds and a fake clock."""
    return HealthTracker(CircuitBreakerConfig(failure_threshold=3, reset_window=300), clock=clock)


@pytest.fixture
def fake_providers() -> FakeProviders:
    """Mock provider endpoints."""
    return FakeProviders()


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Build settings isolated from the environment and .env files."""

    def _make(**overrides: Any) -> Settings:
        values = {"openai_api_key": "sk-test", "anthropic_api_key": "ak-test"}
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make
