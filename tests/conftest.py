"""Shared fixtures: an in-process fake WebDriver server behind httpx.MockTransport."""

from __future__ import annotations

import json
from typing import Any, Callable, Union

import httpx
import pytest

from remotewd import Remote, Transport

URL_PREFIX = "http://wd.test/wd/hub"
SESSION_ID = "abc123"

Handler = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]


def ok(value: Any = None, **extra: Any) -> httpx.Response:
    """A successful reply carrying *value*."""
    return httpx.Response(200, json={"value": value, **extra})


class FakeServer:
    """Routes (method, path) pairs to canned replies and records every request."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.routes: dict[tuple[str, str], list[Handler]] = {}

    def on(self, method: str, path: str, *replies: Handler) -> None:
        """Queue replies for *path* (relative to the URL prefix); the last one repeats."""
        self.routes[(method, "/wd/hub" + path)] = list(replies)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self.routes.get((request.method, request.url.path))
        if not queue:
            return httpx.Response(
                404,
                json={"value": {"error": "unknown command", "message": request.url.path}},
            )
        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        return reply(request) if callable(reply) else reply

    def calls(self) -> list[tuple[str, str, Any]]:
        """(method, path-under-prefix, decoded JSON body or None) per request."""
        out = []
        for r in self.requests:
            body = json.loads(r.content) if r.content else None
            out.append((r.method, r.url.path[len("/wd/hub"):], body))
        return out

    def reset(self) -> None:
        self.requests.clear()


@pytest.fixture
def server() -> FakeServer:
    return FakeServer()


@pytest.fixture
def transport(server: FakeServer) -> Transport:
    return Transport(client=httpx.Client(transport=httpx.MockTransport(server)))


def _connect(server: FakeServer, transport: Transport, reply: httpx.Response) -> Remote:
    server.on("POST", "/session", reply)
    wd = Remote({"browserName": "firefox"}, URL_PREFIX, transport)
    wd.new_session()
    server.reset()
    return wd


@pytest.fixture
def legacy_wd(server: FakeServer, transport: Transport) -> Remote:
    return _connect(
        server, transport,
        httpx.Response(200, json={"sessionId": SESSION_ID, "status": 0, "value": {"browserName": "firefox"}}),
    )


@pytest.fixture
def w3c_wd(server: FakeServer, transport: Transport) -> Remote:
    return _connect(
        server, transport,
        ok({"sessionId": SESSION_ID, "capabilities": {"browserName": "firefox"}}),
    )


@pytest.fixture(params=["legacy", "w3c"])
def any_wd(request, server: FakeServer, transport: Transport) -> Remote:
    fixture = "legacy_wd" if request.param == "legacy" else "w3c_wd"
    return request.getfixturevalue(fixture)
