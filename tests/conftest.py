from __future__ import annotations

from typing import Callable

import httpx
import pytest
from pydantic import BaseModel

from adapters.http_service import HttpService
from core.config import ClientSettings

BASE_URL = "https://api.test"


class UserDto(BaseModel):
    id: int
    name: str


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    for key in (
        "INCO_BASE_URL",
        "INCO_USER_AGENT",
        "INCO_TIMEOUT_SECONDS",
        "INCO_IGNORE_CERTIFICATE_VALIDATION",
        "INCO_FOLLOW_REDIRECTS",
        "INCO_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def settings() -> ClientSettings:
    return ClientSettings(_env_file=None, base_url=BASE_URL)


@pytest.fixture
def make_service(settings):
    """Build an `HttpService` whose transport is a `RecordingTransport`."""

    def _make(handler, **kwargs) -> tuple[HttpService, RecordingTransport]:
        transport = RecordingTransport(handler)
        service = HttpService(BASE_URL, settings=kwargs.pop("settings", settings), transport=transport, **kwargs)
        return service, transport

    return _make


def reply(status_code: int, body: str = "", reason: str | None = None) -> Callable[[httpx.Request], httpx.Response]:
    """Handler returning a fixed status/body, optionally with a custom reason phrase."""

    extensions = {"reason_phrase": reason.encode("ascii")} if reason is not None else {}

    def _handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(status_code, text=body, extensions=extensions)

    return _handler
