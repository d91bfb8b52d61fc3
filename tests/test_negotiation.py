"""Tests for session negotiation and dialect inference."""

import httpx
import pytest

import remotewd.transport
from conftest import URL_PREFIX, ok
from remotewd import (
    Capabilities,
    Dialect,
    ProtocolError,
    Remote,
    RemoteError,
    SessionNegotiationError,
    TransportError,
    new_remote,
)
from remotewd.negotiation import negotiate, payload_shapes

CAPS = {"browserName": "chrome", "goog:chromeOptions": {"args": ["--headless"]}}


def _legacy_status(code: int, message: str = "rejected") -> httpx.Response:
    return httpx.Response(500, json={"status": code, "value": {"message": message}})


class TestPayloadShapes:
    def test_three_shapes_in_priority_order(self) -> None:
        shapes = payload_shapes(CAPS)
        assert shapes[0] == {
            "capabilities": {"alwaysMatch": CAPS, "desiredCapabilities": CAPS},
            "desiredCapabilities": CAPS,
        }
        assert shapes[1] == {"capabilities": {"desiredCapabilities": CAPS}}
        assert shapes[2] == {"desiredCapabilities": CAPS}


class TestDialectInference:
    def test_top_level_session_id_is_legacy(self, server, transport) -> None:
        server.on("POST", "/session", httpx.Response(
            200, json={"sessionId": "s-1", "status": 0, "value": {"browserName": "chrome", "platform": "LINUX"}},
        ))
        session = negotiate(transport, URL_PREFIX, CAPS)
        assert session.id == "s-1"
        assert session.dialect is Dialect.LEGACY
        assert session.returned["platform"] == "LINUX"
        assert len(server.requests) == 1

    def test_nested_session_id_is_w3c(self, server, transport) -> None:
        server.on("POST", "/session", ok({
            "sessionId": "s-2",
            "capabilities": {"browserName": "firefox", "acceptInsecureCerts": False},
            "pageLoadStrategy": "normal",
            "proxy": {},
            "timeouts": {"implicit": 0, "page load": 300000, "script": 30000},
        }))
        session = negotiate(transport, URL_PREFIX, {"browserName": "firefox"})
        assert session.id == "s-2"
        assert session.dialect is Dialect.W3C
        assert session.returned["browserName"] == "firefox"

    def test_capitalised_nested_session_id(self, server, transport) -> None:
        server.on("POST", "/session", ok({"sessionID": "s-3"}))
        session = negotiate(transport, URL_PREFIX, {})
        assert (session.id, session.dialect) == ("s-3", Dialect.W3C)

    def test_reply_without_session_id_fails(self, server, transport) -> None:
        server.on("POST", "/session", ok(None))
        with pytest.raises(SessionNegotiationError, match="no session ID"):
            negotiate(transport, URL_PREFIX, {})

    def test_non_string_session_id_is_a_protocol_error(self, server, transport) -> None:
        server.on("POST", "/session", httpx.Response(200, json={"sessionId": 42, "status": 0}))
        with pytest.raises(ProtocolError):
            negotiate(transport, URL_PREFIX, {})


class TestFallback:
    def test_server_accepting_only_third_shape_is_legacy(self, server, transport) -> None:
        server.on(
            "POST", "/session",
            _legacy_status(13, "capabilities key not understood"),
            _legacy_status(13, "capabilities key not understood"),
            httpx.Response(200, json={"sessionId": "old-1", "status": 0, "value": {}}),
        )
        session = negotiate(transport, URL_PREFIX, CAPS)

        assert session.dialect is Dialect.LEGACY
        assert session.id == "old-1"
        bodies = [body for _, _, body in server.calls()]
        assert bodies == payload_shapes(CAPS)

    def test_last_attempt_error_is_surfaced(self, server, transport) -> None:
        server.on("POST", "/session", _legacy_status(33, "session not created"))
        with pytest.raises(RemoteError, match="unknown error - 33: session not created") as info:
            negotiate(transport, URL_PREFIX, CAPS)
        assert info.value.code == 33
        assert len(server.requests) == 3

    def test_w3c_error_is_not_retried(self, server, transport) -> None:
        server.on("POST", "/session", httpx.Response(
            500, json={"value": {"error": "session not created", "message": "no firefox binary"}},
        ))
        with pytest.raises(RemoteError, match="session not created: no firefox binary"):
            negotiate(transport, URL_PREFIX, CAPS)
        assert len(server.requests) == 1

    def test_non_json_reply_is_not_retried(self, server, transport) -> None:
        server.on("POST", "/session", httpx.Response(502, text="Bad Gateway"))
        with pytest.raises(TransportError):
            negotiate(transport, URL_PREFIX, CAPS)
        assert len(server.requests) == 1


class TestCapabilitiesOnTheWire:
    def test_caller_keys_survive_every_attempt(self, server, transport) -> None:
        server.on(
            "POST", "/session",
            _legacy_status(13), _legacy_status(13),
            httpx.Response(200, json={"sessionId": "x", "status": 0}),
        )
        caps = {
            "browserName": "firefox",
            "moz:firefoxOptions": {"prefs": {"a": 1}},
            "proxy": {"proxyType": "manual", "httpProxy": "proxy.test:3128"},
            "custom": None,
        }
        negotiate(transport, URL_PREFIX, caps)
        for _, _, body in server.calls():
            sent = body.get("desiredCapabilities") or body["capabilities"]["desiredCapabilities"]
            assert sent == caps

    def test_capabilities_model_is_accepted(self, server, transport) -> None:
        server.on("POST", "/session", ok({"sessionId": "y"}))
        caps = Capabilities(browserName="safari", acceptInsecureCerts=True)
        negotiate(transport, URL_PREFIX, caps)
        _, _, body = server.calls()[0]
        assert body["desiredCapabilities"] == {"browserName": "safari", "acceptInsecureCerts": True}

    @pytest.mark.parametrize(
        "caps",
        [
            {"version": 52},
            {"browserName": "chrome", "acceptInsecureCerts": "true"},
            {"timeouts": {"page load": 1000}},
            {"timeouts": {"implicit": 1.5}},
            {"browser_name": "firefox"},
            {"proxy": {"proxyType": "manual", "socksVersion": "5"}},
        ],
        ids=["int-version", "string-bool", "legacy-timeout-name", "float-timeout", "snake-case-key", "string-socks-version"],
    )
    def test_mapping_reaches_the_wire_unchanged(self, server, transport, caps) -> None:
        server.on("POST", "/session", httpx.Response(200, json={"sessionId": "v", "status": 0}))
        session = negotiate(transport, URL_PREFIX, caps)
        _, _, body = server.calls()[0]
        assert body["desiredCapabilities"] == caps
        assert body["capabilities"]["alwaysMatch"] == caps
        assert session.capabilities == caps

    def test_remote_sends_mapping_unchanged(self, server, transport) -> None:
        caps = {"version": 52, "timeouts": {"page load": 1000}}
        server.on("POST", "/session", httpx.Response(200, json={"sessionId": "v", "status": 0}))
        Remote(caps, URL_PREFIX, transport).new_session()
        assert server.calls()[0][2]["desiredCapabilities"] == caps

    def test_trailing_slash_on_prefix(self, server, transport) -> None:
        server.on("POST", "/session", ok({"sessionId": "z"}))
        session = negotiate(transport, URL_PREFIX + "/", {})
        assert session.id == "z"
        assert session.url_prefix == URL_PREFIX
        assert server.requests[0].url.path == "/wd/hub/session"


class TestRemoteSession:
    def test_dialect_is_fixed_for_the_session(self, server, transport) -> None:
        server.on("POST", "/session", ok({"sessionId": "w"}))
        wd = Remote({}, URL_PREFIX, transport)
        assert wd.dialect is None
        wd.new_session()
        assert wd.dialect is Dialect.W3C
        assert wd.commands.dialect is Dialect.W3C

    def test_context_manager_negotiates_and_quits(self, server, transport) -> None:
        server.on("POST", "/session", ok({"sessionId": "ctx"}))
        server.on("DELETE", "/session/ctx", ok(None))
        with Remote({}, URL_PREFIX, transport) as wd:
            assert wd.session_id == "ctx"
        assert wd.session_id == ""
        assert [(m, p) for m, p, _ in server.calls()] == [("POST", "/session"), ("DELETE", "/session/ctx")]


class TestTransportOwnership:
    @pytest.fixture
    def built_clients(self, server, monkeypatch) -> list:
        """Make transports built from settings talk to the fake server."""
        real_client = httpx.Client
        built = []

        def client(**kwargs):
            built.append(real_client(transport=httpx.MockTransport(server), **kwargs))
            return built[-1]

        monkeypatch.setattr(remotewd.transport.httpx, "Client", client)
        return built

    def test_context_exit_closes_transport_it_built(self, server, built_clients) -> None:
        server.on("POST", "/session", ok({"sessionId": "own"}))
        server.on("DELETE", "/session/own", ok(None))
        with Remote({}, URL_PREFIX) as wd:
            assert wd.session_id == "own"
        assert len(built_clients) == 1
        assert built_clients[0].is_closed

    def test_release_closes_transport_built_by_new_remote(self, server, built_clients) -> None:
        server.on("POST", "/session", ok({"sessionId": "nr"}))
        wd = new_remote({}, URL_PREFIX)
        assert not built_clients[0].is_closed
        wd.release()
        assert built_clients[0].is_closed

    def test_failed_negotiation_closes_transport_it_built(self, server, built_clients) -> None:
        server.on("POST", "/session", httpx.Response(
            500, json={"value": {"error": "session not created", "message": "no"}},
        ))
        with pytest.raises(RemoteError):
            with Remote({}, URL_PREFIX):
                pass
        assert built_clients[0].is_closed

    def test_shared_transport_is_left_open(self, server, transport) -> None:
        server.on("POST", "/session", ok({"sessionId": "shared"}))
        server.on("DELETE", "/session/shared", ok(None))
        with Remote({}, URL_PREFIX, transport):
            pass
        assert not transport._client.is_closed
