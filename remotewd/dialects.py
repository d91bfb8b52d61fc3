"""
remotewd/dialects.py
--------------------
remotewd – Protocol dialect command sets

A remote end speaks one of two dialects of the WebDriver protocol:

    legacy   the JSON Wire Protocol (Selenium 2, ChromeDriver before W3C mode)
    w3c      the W3C WebDriver standard (geckodriver, modern ChromeDriver)

Wherever the two differ in URL, payload or reply shape, the difference lives
in one of the CommandSet strategies below. The negotiator picks one when the
session is created and the `Remote` handle keeps it for the session's
lifetime; call sites never branch on the dialect themselves.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Any

from .errors import ProtocolError, WebDriverError
from .types import By, Point, Rect, Size

if TYPE_CHECKING:
    from .element import WebElement
    from .remote import Remote

logger = logging.getLogger("remotewd.dialects")

# Key under which W3C remote ends wrap an element reference.
WEB_ELEMENT_IDENTIFIER = "element-6066-11e4-a52e-4f735466cecf"
# Key used by the JSON Wire Protocol for the same purpose.
LEGACY_ELEMENT_KEY = "ELEMENT"

# Timeout kinds accepted by CommandSet.set_timeouts (W3C field names).
SCRIPT_TIMEOUT    = "script"
IMPLICIT_TIMEOUT  = "implicit"
PAGE_LOAD_TIMEOUT = "pageLoad"


class Dialect(str, Enum):
    LEGACY = "legacy"
    W3C    = "w3c"


# ---------------------------------------------------------------------------
# CommandSet — abstract base
# ---------------------------------------------------------------------------

class CommandSet(ABC):
    """Dialect-specific encodings of the WebDriver command set."""

    dialect: Dialect
    element_key: str  # reply key wrapping an element reference

    window_handle_path:  str
    window_handles_path: str
    execute_sync_path:   str
    execute_async_path:  str
    accept_alert_path:   str
    dismiss_alert_path:  str
    alert_text_path:     str

    # ------------------------------------------------------------------
    # Timeouts
    # ------------------------------------------------------------------

    @abstractmethod
    def set_timeouts(self, wd: "Remote", timeouts: dict[str, int]) -> None:
        """Apply timeouts given in milliseconds, keyed by timeout kind."""

    # ------------------------------------------------------------------
    # Elements
    # ------------------------------------------------------------------

    def locator(self, by: str, value: str) -> tuple[str, str]:
        """Translate a locator into one the remote end understands."""
        return by, value

    def element_id(self, obj: Any) -> str:
        """Extract the element reference from one decoded reply object."""
        ref = obj.get(self.element_key) if isinstance(obj, dict) else None
        if not isinstance(ref, str) or not ref:
            raise ProtocolError(f"invalid element returned: {obj!r}")
        return ref

    @abstractmethod
    def keys_payload(self, keys: str) -> dict:
        """Payload for typing *keys* into an element."""

    @abstractmethod
    def location(self, wd: "Remote", elem: "WebElement", in_view: bool = False) -> Point: ...

    @abstractmethod
    def size(self, wd: "Remote", elem: "WebElement") -> Size: ...

    # ------------------------------------------------------------------
    # Windows & frames
    # ------------------------------------------------------------------

    @abstractmethod
    def switch_window_params(self, name: str) -> dict: ...

    @abstractmethod
    def maximize_window(self, wd: "Remote", name: str) -> None: ...

    @abstractmethod
    def resize_window(self, wd: "Remote", name: str, width: int, height: int) -> None: ...

    @abstractmethod
    def frame_by_name(self, wd: "Remote", name: str) -> Any:
        """Value of the `id` parameter that selects the frame called *name*."""

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------

    @abstractmethod
    def key_down(self, wd: "Remote", keys: str) -> None: ...

    @abstractmethod
    def key_up(self, wd: "Remote", keys: str) -> None: ...

    @abstractmethod
    def send_modifier(self, wd: "Remote", modifier: str, is_down: bool) -> None: ...


# ---------------------------------------------------------------------------
# JSON Wire Protocol
# ---------------------------------------------------------------------------

class LegacyCommands(CommandSet):
    dialect = Dialect.LEGACY
    element_key = LEGACY_ELEMENT_KEY

    window_handle_path  = "/window_handle"
    window_handles_path = "/window_handles"
    execute_sync_path   = "/execute"
    execute_async_path  = "/execute_async"
    accept_alert_path   = "/accept_alert"
    dismiss_alert_path  = "/dismiss_alert"
    alert_text_path     = "/alert_text"

    _timeout_requests = {
        SCRIPT_TIMEOUT:    ("/timeouts/async_script", {}),
        IMPLICIT_TIMEOUT:  ("/timeouts/implicit_wait", {}),
        PAGE_LOAD_TIMEOUT: ("/timeouts", {"type": "page load"}),
    }

    def set_timeouts(self, wd, timeouts):
        for kind, ms in timeouts.items():
            path, extra = self._timeout_requests[kind]
            wd._void(path, {"ms": ms, **extra})

    def keys_payload(self, keys):
        return {"value": list(keys)}

    def location(self, wd, elem, in_view=False):
        suffix = "/location_in_view" if in_view else "/location"
        value = wd._value("GET", f"/element/{elem.id}{suffix}")
        if not isinstance(value, dict):
            raise ProtocolError(f"invalid location returned: {value!r}")
        return Point(int(value.get("x", 0)), int(value.get("y", 0)))

    def size(self, wd, elem):
        value = wd._value("GET", f"/element/{elem.id}/size")
        if not isinstance(value, dict):
            raise ProtocolError(f"invalid size returned: {value!r}")
        return Size(int(value.get("width", 0)), int(value.get("height", 0)))

    def switch_window_params(self, name):
        return {"name": name}

    def _window_target(self, wd, name: str) -> str:
        return name or wd.current_window_handle()

    def maximize_window(self, wd, name):
        wd._void(f"/window/{self._window_target(wd, name)}/maximize")

    def resize_window(self, wd, name, width, height):
        wd._void(
            f"/window/{self._window_target(wd, name)}/size",
            {"width": width, "height": height},
        )

    def frame_by_name(self, wd, name):
        return name

    def key_down(self, wd, keys):
        wd._void("/keys", self.keys_payload(keys))

    def key_up(self, wd, keys):
        # /keys toggles modifier state, so releasing is the same request.
        self.key_down(wd, keys)

    def send_modifier(self, wd, modifier, is_down):
        wd._void("/modifier", {"value": modifier, "isdown": is_down})


# ---------------------------------------------------------------------------
# W3C WebDriver
# ---------------------------------------------------------------------------

class W3CCommands(CommandSet):
    dialect = Dialect.W3C
    element_key = WEB_ELEMENT_IDENTIFIER

    window_handle_path  = "/window"
    window_handles_path = "/window/handles"
    execute_sync_path   = "/execute/sync"
    execute_async_path  = "/execute/async"
    accept_alert_path   = "/alert/accept"
    dismiss_alert_path  = "/alert/dismiss"
    alert_text_path     = "/alert/text"

    def set_timeouts(self, wd, timeouts):
        if timeouts:
            wd._void("/timeouts", dict(timeouts))

    def locator(self, by, value):
        # W3C dropped the id and name strategies; emulate them with CSS.
        if by == By.ID:
            return By.CSS_SELECTOR, f"#{value}"
        if by == By.NAME:
            return By.CSS_SELECTOR, f"input[name={json.dumps(value, ensure_ascii=False)}]"
        return by, value

    def keys_payload(self, keys):
        return {"text": keys}

    def rect(self, wd, elem) -> Rect:
        value = wd._value("GET", f"/element/{elem.id}/rect")
        if not isinstance(value, dict):
            raise ProtocolError(f"invalid rect returned: {value!r}")
        return Rect.from_json(value)

    def location(self, wd, elem, in_view=False):
        return self.rect(wd, elem).location()

    def size(self, wd, elem):
        return self.rect(wd, elem).size()

    def switch_window_params(self, name):
        return {"handle": name}

    def maximize_window(self, wd, name):
        self._modify_window(wd, name, "maximize", {})

    def resize_window(self, wd, name, width, height):
        self._modify_window(wd, name, "rect", {"width": width, "height": height})

    def _modify_window(self, wd: "Remote", name: str, command: str, params: dict) -> None:
        """
        W3C only lets the current window be resized or maximized. A named
        window is handled by switching to it, modifying it, and switching back.
        A failed modify still switches back before the error propagates.
        """
        start = ""
        switched = False
        if name:
            start = wd.current_window_handle()
            if name != start:
                wd.switch_window(name)
                switched = True

        try:
            wd._void(f"/window/{command}", params)
        except WebDriverError:
            if switched:
                self._restore_window(wd, start)
            raise

        if switched:
            wd.switch_window(start)

    @staticmethod
    def _restore_window(wd: "Remote", handle: str) -> None:
        try:
            wd.switch_window(handle)
        except WebDriverError as exc:
            logger.warning("[WD] Could not switch back to window %s: %s", handle, exc)

    def frame_by_name(self, wd, name):
        return wd.find_element(By.ID, name)

    def _key_action(self, wd: "Remote", action: str, keys: str) -> None:
        wd._void("/actions", {
            "actions": [{
                "type":    "key",
                "id":      "default keyboard",
                "actions": [{"type": action, "value": key} for key in keys],
            }],
        })

    def key_down(self, wd, keys):
        self._key_action(wd, "keyDown", keys)

    def key_up(self, wd, keys):
        self._key_action(wd, "keyUp", keys)

    def send_modifier(self, wd, modifier, is_down):
        self._key_action(wd, "keyDown" if is_down else "keyUp", modifier)


_COMMAND_SETS: dict[Dialect, CommandSet] = {
    Dialect.LEGACY: LegacyCommands(),
    Dialect.W3C:    W3CCommands(),
}


def command_set_for(dialect: Dialect) -> CommandSet:
    return _COMMAND_SETS[Dialect(dialect)]
