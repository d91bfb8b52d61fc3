"""
remotewd/transport.py
---------------------
remotewd – HTTP transport

Thin blocking wrapper around an `httpx.Client` that speaks JSON to a remote
WebDriver end.

Behaviour
---------
- Every request carries `Accept: application/json`, including each hop of a
  redirect chain (the header is set again on the follow-up request).
- At most MAX_REDIRECTS redirects are followed; one more raises
  RedirectLimitError.
- httpx failures are re-raised as TransportError. Nothing is retried.
- With `debug=True` the request and response bytes are mirrored to the
  `remotewd.transport` logger (JSON pretty-printed). The bytes handed back
  to the caller are untouched.

A Transport holds no per-session state and may be shared by any number of
`Remote` handles.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

import httpx

from .errors import RedirectLimitError, TransportError

logger = logging.getLogger("remotewd.transport")

JSON_TYPE     = "application/json"
MAX_REDIRECTS = 10
DEFAULT_TIMEOUT = 60.0


@dataclass
class Reply:
    """Raw result of a single HTTP round trip."""

    status_code: int
    reason:      str
    headers:     httpx.Headers
    content:     bytes

    @property
    def status(self) -> str:
        return f"{self.status_code} {self.reason}".strip()


class Transport:
    """
    Parameters
    ----------
    client        : httpx.Client | None — injected client (not closed by us)
    timeout       : float               — request deadline in seconds
    max_redirects : int                 — redirects followed before failing
    debug         : bool                — mirror wire traffic to the logger
    """

    def __init__(
        self,
        client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_redirects: int = MAX_REDIRECTS,
        debug: bool = False,
    ):
        self._owns_client  = client is None
        self._client       = client or httpx.Client(timeout=timeout)
        self.max_redirects = max_redirects
        self.debug         = debug

    @classmethod
    def from_settings(cls, settings=None) -> "Transport":
        """Build a transport configured from `config.settings`."""
        if settings is None:
            from config.settings import get_settings
            settings = get_settings()
        return cls(
            timeout=settings.webdriver_http_timeout,
            debug=settings.webdriver_debug,
        )

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, *_) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    # ------------------------------------------------------------------
    # Send
    # ------------------------------------------------------------------

    def send(self, method: str, url: str, body: Optional[bytes] = None) -> Reply:
        """Perform one request, following redirects, and return the raw reply."""
        if self.debug:
            logger.debug("-> %s %s\n%s", method, filtered_url(url), _pretty(body))

        headers = {"Accept": JSON_TYPE}
        if body:
            headers["Content-Type"] = f"{JSON_TYPE};charset=utf-8"

        try:
            request  = self._client.build_request(method, url, content=body, headers=headers)
            response = self._client.send(request, follow_redirects=False)
            redirects = 0
            while response.has_redirect_location:
                redirects += 1
                if redirects > self.max_redirects:
                    raise RedirectLimitError(redirects)
                request = response.next_request
                request.headers["Accept"] = JSON_TYPE
                logger.debug(
                    "[WD] %s redirected to %s", response.status_code, filtered_url(str(request.url))
                )
                response = self._client.send(request, follow_redirects=False)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise TransportError(f"{method} {filtered_url(url)}: {exc}") from exc

        reply = Reply(
            status_code=response.status_code,
            reason=response.reason_phrase,
            headers=response.headers,
            content=response.content,
        )
        if self.debug:
            logger.debug(
                "<- %s [%s]\n%s",
                reply.status,
                reply.headers.get("Content-Type", ""),
                _pretty(reply.content),
            )
        return reply


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def filtered_url(url: str) -> str:
    """Return *url* with any password in the userinfo part masked."""
    parts = urlsplit(url)
    if parts.password is None:
        return url
    netloc = parts.netloc.replace(f":{parts.password}@", ":__password__@", 1)
    return urlunsplit(parts._replace(netloc=netloc))


def _pretty(data: Optional[bytes]) -> str:
    """Pretty-print JSON for the debug log; fall back to the raw text."""
    if not data:
        return ""
    try:
        return json.dumps(json.loads(data), indent=4)
    except ValueError:
        return data.decode("utf-8", errors="replace")
