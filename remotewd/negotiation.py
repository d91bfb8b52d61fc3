"""
remotewd/negotiation.py
-----------------------
remotewd – Session negotiation

Remote ends disagree on where the requested capabilities go in the
new-session payload. `negotiate()` probes a fixed sequence of shapes against
`POST /session`:

    1. capabilities.alwaysMatch + capabilities.desiredCapabilities + desiredCapabilities
    2. capabilities.desiredCapabilities
    3. desiredCapabilities

A reply carrying a legacy non-zero status moves on to the next shape (the
last shape's error is raised). Any other failure is raised immediately.

The reply also tells us the dialect: a top-level session id means the JSON
Wire Protocol, a session id nested in `value` means W3C.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from pydantic import ValidationError

from .capabilities import Capabilities, NewSessionValue, capabilities_payload
from .dialects import Dialect
from .envelope import decode, get_ci
from .errors import ProtocolError, RemoteError, SessionNegotiationError
from .transport import Transport

logger = logging.getLogger("remotewd.negotiation")


@dataclass
class Session:
    id:           str
    dialect:      Dialect
    capabilities: dict[str, Any]                              # as requested
    returned:     dict[str, Any] = field(default_factory=dict)  # as reported by the server
    url_prefix:   str = ""


def payload_shapes(caps: dict[str, Any]) -> list[dict[str, Any]]:
    """The new-session payloads, in the order they are tried."""
    return [
        {
            "capabilities": {
                "alwaysMatch":         caps,
                "desiredCapabilities": caps,
            },
            "desiredCapabilities": caps,
        },
        {"capabilities": {"desiredCapabilities": caps}},
        {"desiredCapabilities": caps},
    ]


def negotiate(
    transport: Transport,
    url_prefix: str,
    capabilities: Union[Capabilities, Mapping, None] = None,
) -> Session:
    """Create a session and work out which dialect the remote end speaks."""
    caps = capabilities_payload(capabilities)
    shapes = payload_shapes(caps)
    url_prefix = url_prefix.rstrip("/")
    url = f"{url_prefix}/session"

    for attempt, params in enumerate(shapes, start=1):
        last = attempt == len(shapes)
        logger.debug("[WD] New session attempt %d/%d: %s", attempt, len(shapes), sorted(params))

        body = json.dumps(params).encode("utf-8")
        try:
            raw = decode(transport.send("POST", url, body))
        except RemoteError as exc:
            if exc.code is None or last:
                raise
            logger.debug("[WD] Attempt %d rejected (%s), trying next shape", attempt, exc)
            continue

        # decode() has already checked that this is a JSON object.
        reply = json.loads(raw)
        session = _session_from_reply(reply, caps, url_prefix)
        logger.info(
            "[WD] Session %s created (%s dialect, attempt %d)",
            session.id, session.dialect.value, attempt,
        )
        return session

    raise SessionNegotiationError("no capability payload shape produced a session")


def _session_from_reply(reply: dict, caps: dict[str, Any], url_prefix: str) -> Session:
    session_id = get_ci(reply, "sessionId")
    value = reply.get("value")

    if session_id is not None:
        if not isinstance(session_id, str) or not session_id:
            raise ProtocolError(f"invalid session ID returned: {session_id!r}")
        returned = value if isinstance(value, dict) else {}
        return Session(session_id, Dialect.LEGACY, caps, dict(returned), url_prefix)

    if isinstance(value, dict) and value:
        try:
            parsed = NewSessionValue.model_validate(value)
        except ValidationError as exc:
            raise ProtocolError(f"error decoding new-session value: {exc}") from exc
        if not parsed.session_id:
            raise ProtocolError("empty session ID returned")
        returned = dict(parsed.capabilities or {})
        return Session(parsed.session_id, Dialect.W3C, caps, returned, url_prefix)

    raise SessionNegotiationError(f"no session ID in new-session reply: {_brief(reply)}")


def _brief(reply: dict, limit: int = 200) -> str:
    text = json.dumps(reply)
    return text if len(text) <= limit else text[:limit] + "..."

