"""
remotewd/envelope.py
--------------------
remotewd – Reply envelope decoding

Remote ends report failures in three different envelope shapes:

    {"status": 7, "value": {"message": "..."}}                 legacy numeric status
    {"error": "no such element", "message": "...", ...}        top-level error object
    {"value": {"error": "no such element", "message": "..."}}  W3C, nested in value

`decode()` checks them in that fixed priority (top-level error, nested error,
numeric status) and raises the first that applies. A clean reply is returned
as raw bytes; callers re-parse `value` in whatever shape they expect.
"""

from __future__ import annotations

import json
from typing import Any

from .errors import ContentTypeError, ProtocolError, RemoteError, short_message
from .transport import JSON_TYPE, Reply

SUCCESS = 0


def media_type(content_type: str) -> str:
    """Return the bare media type of a Content-Type header value."""
    return content_type.split(";", 1)[0].strip().lower()


def decode(reply: Reply) -> bytes:
    """Normalise *reply* into its raw payload, raising on any reported error."""
    full_ctype = reply.headers.get("Content-Type", "")
    ctype = media_type(full_ctype)
    if not ctype:
        raise ContentTypeError(
            f"got content type header {full_ctype!r}, expected {JSON_TYPE!r}", full_ctype
        )
    if ctype != JSON_TYPE:
        raise ContentTypeError(f"got content type {ctype!r}, expected {JSON_TYPE!r}", ctype)

    try:
        envelope = json.loads(reply.content)
        if not isinstance(envelope, dict):
            raise ValueError(f"reply is a JSON {type(envelope).__name__}, not an object")
    except ValueError as exc:
        if reply.status_code != 200:
            raise ProtocolError(f"bad server reply status: {reply.status}") from exc
        raise ProtocolError(f"malformed server reply: {exc}") from exc

    err = envelope.get("error")
    if isinstance(err, str) and err:
        raise _remote_error(envelope)

    value = envelope.get("value")
    if isinstance(value, dict):
        nested = value.get("error")
        if isinstance(nested, str) and nested:
            raise _remote_error(value)

    status = envelope.get("status")
    if isinstance(status, int) and not isinstance(status, bool) and status != SUCCESS:
        long_msg = get_ci(value, "message") if isinstance(value, dict) else None
        if not isinstance(long_msg, str):
            long_msg = ""
        raise RemoteError(short_message(status), long_msg, code=status)

    return reply.content


def parse_value(raw: bytes) -> Any:
    """Return the `value` field of an already decoded reply."""
    try:
        envelope = json.loads(raw)
    except ValueError as exc:
        raise ProtocolError(f"malformed server reply: {exc}") from exc
    if not isinstance(envelope, dict):
        raise ProtocolError("server reply is not a JSON object")
    return envelope.get("value")


def get_ci(mapping: dict, key: str) -> Any:
    """Case-insensitive lookup, preferring an exact match."""
    if key in mapping:
        return mapping[key]
    lowered = key.lower()
    for k, v in mapping.items():
        if isinstance(k, str) and k.lower() == lowered:
            return v
    return None


def _remote_error(obj: dict) -> RemoteError:
    return RemoteError(
        error=str(obj.get("error", "")),
        message=_text(obj.get("message")),
        stacktrace=_text(obj.get("stacktrace")),
    )


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else json.dumps(value)
