"""Pytest configuration helpers for the test suite."""

from __future__ import annotations

import json
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

import httpx
import pytest


@dataclass
class IsolatedEnv:
    """Paths used by a test that runs the CLI against a private store."""

    config_path: Path
    logs_dir: Path


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> IsolatedEnv:
    """Clear ``BEGET_*`` variables and point the store and logs at ``tmp_path``."""
    for name in list(os.environ):
        if name.startswith("BEGET_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.delenv("XDG_CONFIG_HOME", raising=False)
    monkeypatch.delenv("XDG_STATE_HOME", raising=False)

    config_path = tmp_path / "config" / "config.json"
    logs_dir = tmp_path / "logs"
    monkeypatch.setenv("BEGET_CONFIG", str(config_path))
    monkeypatch.setenv("BEGET_LOGS_DIR", str(logs_dir))
    return IsolatedEnv(config_path=config_path, logs_dir=logs_dir)


class RecordingTransport(httpx.MockTransport):
    """Mock transport that remembers every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)

    @property
    def last_input(self) -> object:
        """Return the decoded ``input_data`` of the most recent request."""
        raw = self.requests[-1].url.params.get("input_data")
        return None if raw is None else json.loads(raw)


def envelope(result: object) -> dict[str, object]:
    """Return a fully successful API response body."""
    return {"status": "success", "answer": {"status": "success", "result": result}}


@pytest.fixture
def api() -> Callable[..., RecordingTransport]:
    """Return a factory for transports that answer every call with one body."""

    def _factory(body: object = None, *, status_code: int = 200) -> RecordingTransport:
        payload = envelope(None) if body is None else body

        def _handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, json=payload)

        return RecordingTransport(_handler)

    return _factory


@pytest.fixture
def forbidden_transport() -> RecordingTransport:
    """Transport that fails the test if any request reaches it."""

    def _handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected network call to {request.url}")

    return RecordingTransport(_handler)
