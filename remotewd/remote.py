"""
remotewd/remote.py
------------------
remotewd – Remote WebDriver client

`Remote` is a handle to one session on a Selenium / WebDriver server. It
negotiates the session, remembers which protocol dialect the server speaks,
and exposes the WebDriver command set in dialect-neutral form.

Lifecycle
---------
1. wd = Remote({"browserName": "firefox"}, "http://127.0.0.1:4444/wd/hub")
2. wd.new_session()               # three-shape capability probe
3. wd.get("https://example.com"); wd.find_element(By.ID, "q") ...
4. wd.quit()                      # DELETE /session/<id>
5. wd.release()                   # close a transport the handle built itself

or, with explicit cleanup on exit:

    with Remote(caps, url_prefix) as wd:
        wd.get("https://example.com")

The server is never told to end the session implicitly: a handle that is
garbage collected without quit() leaves the session running.

A handle is not thread-safe. Separate handles may share one Transport.
"""

from __future__ import annotations

import base64
import binascii
import logging
from collections.abc import Mapping
from datetime import timedelta
from typing import Any, Optional, Union

from pydantic import ValidationError

from .capabilities import Capabilities, Status, capabilities_payload
from .dialects import (
    IMPLICIT_TIMEOUT,
    PAGE_LOAD_TIMEOUT,
    SCRIPT_TIMEOUT,
    CommandSet,
    Dialect,
    command_set_for,
)
from .element import WebElement, encode_body
from .envelope import decode, parse_value
from .errors import NoSessionError, ProtocolError
from .negotiation import Session, negotiate
from .transport import Transport
from .types import LEFT_BUTTON, Cookie, LogMessage

logger = logging.getLogger("remotewd.remote")

Timeout = Union[float, int, timedelta]


def _to_ms(timeout: Timeout) -> int:
    """Convert seconds (or a timedelta) to whole milliseconds."""
    if isinstance(timeout, timedelta):
        timeout = timeout.total_seconds()
    if timeout < 0:
        raise ValueError(f"timeout must not be negative: {timeout!r}")
    return int(timeout * 1000)


class Remote:
    """
    Parameters
    ----------
    capabilities : Capabilities | Mapping | None — desired capabilities (sent as given)
    url_prefix   : str                           — server endpoint (settings default)
    transport    : Transport | None              — shared transport (settings default, owned)
    """

    def __init__(
        self,
        capabilities: Union[Capabilities, Mapping, None] = None,
        url_prefix: str = "",
        transport: Optional[Transport] = None,
    ):
        self._owns_transport = transport is None
        if not url_prefix or transport is None:
            from config.settings import get_settings
            settings = get_settings()
            url_prefix = url_prefix or settings.url_prefix
            transport = transport or Transport.from_settings(settings)

        self.url_prefix   = url_prefix.rstrip("/")
        self.capabilities = capabilities_payload(capabilities)
        self.transport    = transport
        self.session: Optional[Session] = None
        self._commands: Optional[CommandSet] = None

    def __repr__(self) -> str:
        return f"<Remote {self.url_prefix} session={self.session_id!r} dialect={self.dialect}>"

    # ------------------------------------------------------------------
    # Context manager
    # ------------------------------------------------------------------

    def __enter__(self) -> "Remote":
        if not self.session_id:
            try:
                self.new_session()
            except BaseException:
                self.release()
                raise
        return self

    def __exit__(self, *_) -> None:
        try:
            self.quit()
        finally:
            self.release()

    def release(self) -> None:
        """Release the transport if this handle created it. The session is left alone."""
        if self._owns_transport:
            self.transport.close()

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    @property
    def session_id(self) -> str:
        return self.session.id if self.session else ""

    @property
    def dialect(self) -> Optional[Dialect]:
        return self.session.dialect if self.session else None

    @property
    def commands(self) -> CommandSet:
        if self._commands is None:
            raise NoSessionError("no session: call new_session() first")
        return self._commands

    def new_session(self) -> str:
        """Negotiate a new session and return its id."""
        self.session   = negotiate(self.transport, self.url_prefix, self.capabilities)
        self._commands = command_set_for(self.session.dialect)
        return self.session.id

    def switch_session(self, session_id: str) -> None:
        """Point this handle at another session of the same server and dialect."""
        if self.session is None:
            raise NoSessionError("no session to switch from: call new_session() first")
        self.session.id = session_id

    def quit(self) -> None:
        """End the session on the server. A no-op without a session."""
        if not self.session_id:
            return
        self._execute("DELETE", self._session_url())
        logger.info("[WD] Session %s ended.", self.session_id)
        self.session.id = ""

    def status(self) -> Status:
        value = parse_value(self._execute("GET", f"{self.url_prefix}/status"))
        if not isinstance(value, dict):
            raise ProtocolError(f"invalid status returned: {value!r}")
        try:
            return Status.model_validate(value)
        except ValidationError as exc:
            raise ProtocolError(f"invalid status returned: {exc}") from exc

    def get_capabilities(self) -> dict[str, Any]:
        """Capabilities of the running session as reported by the server."""
        value = parse_value(self._execute("GET", self._session_url()))
        if not isinstance(value, dict):
            raise ProtocolError(f"invalid capabilities returned: {value!r}")
        return value

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    def _session_url(self, suffix: str = "") -> str:
        if not self.session_id:
            raise NoSessionError("no active session")
        return f"{self.url_prefix}/session/{self.session_id}{suffix}"

    def _execute(self, method: str, url: str, params: Any = None) -> bytes:
        body = None if params is None else encode_body(params, self.session_id or None)
        return decode(self.transport.send(method, url, body))

    def _void(self, suffix: str, params: Any = None) -> None:
        self._execute("POST", self._session_url(suffix), {} if params is None else params)

    def _value(self, method: str, suffix: str, params: Any = None) -> Any:
        return parse_value(self._execute(method, self._session_url(suffix), params))

    def _string(self, suffix: str) -> str:
        value = self._value("GET", suffix)
        if value is None:
            raise ProtocolError("nil return value")
        if not isinstance(value, str):
            raise ProtocolError(f"expected a string, got {value!r}")
        return value

    def _strings(self, suffix: str) -> list[str]:
        value = self._value("GET", suffix)
        if value is None:
            return []
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ProtocolError(f"expected a list of strings, got {value!r}")
        return value

    def _bool(self, suffix: str) -> bool:
        value = self._value("GET", suffix)
        if not isinstance(value, bool):
            raise ProtocolError(f"expected a boolean, got {value!r}")
        return value

    # ------------------------------------------------------------------
    # Timeouts
    # ------------------------------------------------------------------

    def set_async_script_timeout(self, timeout: Timeout) -> None:
        self.commands.set_timeouts(self, {SCRIPT_TIMEOUT: _to_ms(timeout)})

    def set_implicit_wait_timeout(self, timeout: Timeout) -> None:
        self.commands.set_timeouts(self, {IMPLICIT_TIMEOUT: _to_ms(timeout)})

    def set_page_load_timeout(self, timeout: Timeout) -> None:
        self.commands.set_timeouts(self, {PAGE_LOAD_TIMEOUT: _to_ms(timeout)})

    def set_timeouts(
        self,
        script: Optional[Timeout] = None,
        implicit: Optional[Timeout] = None,
        page_load: Optional[Timeout] = None,
    ) -> None:
        """Set several timeouts at once; unset ones are left alone."""
        timeouts = {
            kind: _to_ms(value)
            for kind, value in (
                (SCRIPT_TIMEOUT, script),
                (IMPLICIT_TIMEOUT, implicit),
                (PAGE_LOAD_TIMEOUT, page_load),
            )
            if value is not None
        }
        self.commands.set_timeouts(self, timeouts)

    # ------------------------------------------------------------------
    # Input method engines
    # ------------------------------------------------------------------

    def available_engines(self) -> list[str]:
        return self._strings("/ime/available_engines")

    def active_engine(self) -> str:
        return self._string("/ime/active_engine")

    def is_engine_activated(self) -> bool:
        return self._bool("/ime/activated")

    def deactivate_engine(self) -> None:
        self._void("/ime/deactivate")

    def activate_engine(self, engine: str) -> None:
        self._void("/ime/activate", {"engine": engine})

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def get(self, url: str) -> None:
        logger.debug("[WD] Navigating to %s", url)
        self._void("/url", {"url": url})

    def current_url(self) -> str:
        return self._string("/url")

    def forward(self) -> None:
        self._void("/forward")

    def back(self) -> None:
        self._void("/back")

    def refresh(self) -> None:
        self._void("/refresh")

    def title(self) -> str:
        return self._string("/title")

    def page_source(self) -> str:
        return self._string("/source")

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------

    def _find(self, by: str, value: str, path: str) -> bytes:
        by, value = self.commands.locator(by, value)
        return self._execute("POST", self._session_url(path), {"using": by, "value": value})

    def decode_element(self, raw: bytes) -> WebElement:
        """Build a WebElement from a reply whose value is one element."""
        ref = self.commands.element_id(parse_value(raw))
        return WebElement(self, ref)

    def decode_elements(self, raw: bytes) -> list[WebElement]:
        """Build WebElements from a reply whose value is a list of elements."""
        value = parse_value(raw)
        if value is None:
            return []
        if not isinstance(value, list):
            raise ProtocolError(f"expected a list of elements, got {value!r}")
        return [WebElement(self, self.commands.element_id(item)) for item in value]

    def find_element(self, by: str, value: str) -> WebElement:
        return self.decode_element(self._find(by, value, "/element"))

    def find_elements(self, by: str, value: str) -> list[WebElement]:
        return self.decode_elements(self._find(by, value, "/elements"))

    def active_element(self) -> WebElement:
        return self.decode_element(self._execute("GET", self._session_url("/element/active")))

    # ------------------------------------------------------------------
    # Windows & frames
    # ------------------------------------------------------------------

    def current_window_handle(self) -> str:
        return self._string(self.commands.window_handle_path)

    def window_handles(self) -> list[str]:
        return self._strings(self.commands.window_handles_path)

    def switch_window(self, name: str) -> None:
        self._void("/window", self.commands.switch_window_params(name))

    def close(self) -> None:
        """Close the current window."""
        self._execute("DELETE", self._session_url("/window"))

    def close_window(self, name: str = "") -> None:
        """Close the window called *name* (the current one when empty)."""
        if name:
            self.switch_window(name)
        self.close()

    def maximize_window(self, name: str = "") -> None:
        self.commands.maximize_window(self, name)

    def resize_window(self, name: str, width: int, height: int) -> None:
        self.commands.resize_window(self, name, width, height)

    def switch_frame(self, frame: Union[WebElement, int, str, None]) -> None:
        """
        Switch to a frame given as an element, an index, or a name/id.
        None or "" selects the top-level browsing context.
        """
        if frame is None or frame == "":
            frame_id = None
        elif isinstance(frame, (WebElement, int)) and not isinstance(frame, bool):
            frame_id = frame
        elif isinstance(frame, str):
            frame_id = self.commands.frame_by_name(self, frame)
        else:
            raise TypeError(f"invalid frame type {type(frame).__name__}")
        self._void("/frame", {"id": frame_id})

    # ------------------------------------------------------------------
    # Cookies
    # ------------------------------------------------------------------

    def get_cookie(self, name: str) -> Cookie:
        value = self._value("GET", f"/cookie/{name}")
        # geckodriver answers with a one-element list instead of an object.
        if isinstance(value, dict):
            return Cookie.from_json(value)
        if isinstance(value, list):
            if not value:
                raise ProtocolError("no cookies returned")
            if isinstance(value[0], dict):
                return Cookie.from_json(value[0])
        raise ProtocolError(f"invalid cookie returned: {value!r}")

    def get_cookies(self) -> list[Cookie]:
        value = self._value("GET", "/cookie")
        if value is None:
            return []
        if not isinstance(value, list) or not all(isinstance(c, dict) for c in value):
            raise ProtocolError(f"invalid cookies returned: {value!r}")
        return [Cookie.from_json(c) for c in value]

    def add_cookie(self, cookie: Cookie) -> None:
        self._void("/cookie", {"cookie": cookie.to_json()})

    def delete_all_cookies(self) -> None:
        self._execute("DELETE", self._session_url("/cookie"))

    def delete_cookie(self, name: str) -> None:
        self._execute("DELETE", self._session_url(f"/cookie/{name}"))

    # ------------------------------------------------------------------
    # Mouse & keyboard
    # ------------------------------------------------------------------

    def click(self, button: int = LEFT_BUTTON) -> None:
        self._void("/click", {"button": button})

    def double_click(self) -> None:
        self._void("/doubleclick")

    def button_down(self) -> None:
        self._void("/buttondown")

    def button_up(self) -> None:
        self._void("/buttonup")

    def send_modifier(self, modifier: str, is_down: bool) -> None:
        self.commands.send_modifier(self, modifier, is_down)

    def key_down(self, keys: str) -> None:
        self.commands.key_down(self, keys)

    def key_up(self, keys: str) -> None:
        self.commands.key_up(self, keys)

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    def dismiss_alert(self) -> None:
        self._void(self.commands.dismiss_alert_path)

    def accept_alert(self) -> None:
        self._void(self.commands.accept_alert_path)

    def alert_text(self) -> str:
        return self._string(self.commands.alert_text_path)

    def set_alert_text(self, text: str) -> None:
        self._void(self.commands.alert_text_path, {"text": text})

    # ------------------------------------------------------------------
    # Scripts
    # ------------------------------------------------------------------

    def _exec_script_raw(self, script: str, args: Optional[list], path: str) -> bytes:
        params = {"script": script, "args": list(args or [])}
        return self._execute("POST", self._session_url(path), params)

    def execute_script(self, script: str, args: Optional[list] = None) -> Any:
        return parse_value(self.execute_script_raw(script, args))

    def execute_script_async(self, script: str, args: Optional[list] = None) -> Any:
        return parse_value(self.execute_script_async_raw(script, args))

    def execute_script_raw(self, script: str, args: Optional[list] = None) -> bytes:
        return self._exec_script_raw(script, args, self.commands.execute_sync_path)

    def execute_script_async_raw(self, script: str, args: Optional[list] = None) -> bytes:
        return self._exec_script_raw(script, args, self.commands.execute_async_path)

    # ------------------------------------------------------------------
    # Screenshot & logs
    # ------------------------------------------------------------------

    def screenshot(self, path: str = "") -> bytes:
        """Return a PNG screenshot of the current window, optionally saved to *path*."""
        data = self._string("/screenshot")
        try:
            png = base64.b64decode(data)
        except binascii.Error as exc:
            raise ProtocolError(f"screenshot is not valid base64: {exc}") from exc
        if path:
            with open(path, "wb") as f:
                f.write(png)
        return png

    def log(self, log_type: str) -> list[LogMessage]:
        value = self._value("POST", "/log", {"type": log_type})
        if value is None:
            return []
        if not isinstance(value, list) or not all(isinstance(m, dict) for m in value):
            raise ProtocolError(f"invalid log entries returned: {value!r}")
        return [LogMessage.from_json(m) for m in value]


def new_remote(
    capabilities: Union[Capabilities, Mapping, None] = None,
    url_prefix: str = "",
    transport: Optional[Transport] = None,
) -> Remote:
    """
    Create a Remote and negotiate its session in one step.

    The caller ends it with quit() and then release(), or uses it as a
    context manager.
    """
    wd = Remote(capabilities, url_prefix, transport)
    try:
        wd.new_session()
    except BaseException:
        wd.release()
        raise
    return wd
