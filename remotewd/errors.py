"""
remotewd/errors.py
------------------
remotewd – Error taxonomy

Every failure raised by the client derives from `WebDriverError`, so callers
can catch the whole family at once or pick the layer they care about:

    TransportError            connection failure, redirect limit, bad media type
    ProtocolError             malformed envelope or missing reply fields
    RemoteError               failure reported by the remote end
    SessionNegotiationError   no usable reply to session creation
    ForeignElementError       element used outside the session that produced it
    NoSessionError            command issued without an active session
"""

from __future__ import annotations

from typing import Optional

# Legacy JSON Wire Protocol status codes. Closed table: codes missing here
# degrade to "unknown error - N".
REMOTE_ERRORS: dict[int, str] = {
    6:  "invalid session ID",
    7:  "no such element",
    8:  "no such frame",
    9:  "unknown command",
    10: "stale element reference",
    11: "element not visible",
    12: "invalid element state",
    13: "unknown error",
    15: "element is not selectable",
    17: "javascript error",
    19: "xpath lookup error",
    21: "timeout",
    23: "no such window",
    24: "invalid cookie domain",
    25: "unable to set cookie",
    26: "unexpected alert open",
    27: "no alert open",
    28: "script timeout",
    29: "invalid element coordinates",
    32: "invalid selector",
}


def short_message(status: int) -> str:
    """Map a legacy numeric status to its short message."""
    return REMOTE_ERRORS.get(status, f"unknown error - {status}")


class WebDriverError(Exception):
    """Base exception for all remotewd errors."""


class TransportError(WebDriverError):
    """Raised when the HTTP round trip itself fails."""


class RedirectLimitError(TransportError):
    """Raised when a request is redirected more times than allowed."""

    def __init__(self, redirects: int):
        super().__init__(f"too many redirects ({redirects})")
        self.redirects = redirects


class ContentTypeError(TransportError):
    """Raised when the remote end replies with something other than JSON."""

    def __init__(self, message: str, content_type: str = ""):
        super().__init__(message)
        self.content_type = content_type


class ProtocolError(WebDriverError):
    """Raised when a reply cannot be decoded into the expected shape."""


class RemoteError(WebDriverError):
    """
    A command failure reported by the remote end.

    `error` is the short classification ("no such element"), `message` the
    descriptive text. `code` is set only when the failure arrived as a legacy
    numeric status.
    """

    def __init__(
        self,
        error: str,
        message: str = "",
        stacktrace: str = "",
        code: Optional[int] = None,
    ):
        self.error      = error
        self.message    = message
        self.stacktrace = stacktrace
        self.code       = code
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.message:
            return f"{self.error}: {self.message}"
        return self.error


class SessionNegotiationError(WebDriverError):
    """Raised when no capability payload shape yields a usable session."""


class ForeignElementError(WebDriverError, ValueError):
    """Raised when an element reference is used outside its own session."""


class NoSessionError(WebDriverError):
    """Raised when a session command is issued before (or after) a session."""
