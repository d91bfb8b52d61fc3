"""
remotewd/element.py
-------------------
remotewd – Remote element references

A WebElement is an opaque handle to a DOM node, created only by decoding a
server reply and valid only in the session that produced it. On the way back
to the wire it is written with both the legacy and the W3C key, so the same
object serialises correctly whichever dialect the session speaks.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Optional

from .dialects import LEGACY_ELEMENT_KEY, WEB_ELEMENT_IDENTIFIER
from .errors import ForeignElementError
from .types import Point, Size

if TYPE_CHECKING:
    from .remote import Remote


class WebElement:
    """Handle to a remote DOM element."""

    def __init__(self, parent: "Remote", element_id: str):
        self._parent    = parent
        self.id         = element_id
        self.session_id = parent.session_id

    def __repr__(self) -> str:
        return f"<WebElement {self.id!r} session={self.session_id!r}>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WebElement):
            return NotImplemented
        return (self.session_id, self.id) == (other.session_id, other.id)

    def __hash__(self) -> int:
        return hash((self.session_id, self.id))

    def to_json(self) -> dict[str, str]:
        return {
            LEGACY_ELEMENT_KEY:     self.id,
            WEB_ELEMENT_IDENTIFIER: self.id,
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _remote(self) -> "Remote":
        """Return the owning handle, refusing to cross session boundaries."""
        current = self._parent.session_id
        if current != self.session_id:
            raise ForeignElementError(
                f"element {self.id!r} belongs to session {self.session_id!r}, "
                f"not {current!r}"
            )
        return self._parent

    def _path(self, suffix: str = "") -> str:
        return f"/element/{self.id}{suffix}"

    # ------------------------------------------------------------------
    # Interaction
    # ------------------------------------------------------------------

    def click(self) -> None:
        self._remote()._void(self._path("/click"))

    def send_keys(self, keys: str) -> None:
        wd = self._remote()
        wd._void(self._path("/value"), wd.commands.keys_payload(keys))

    def submit(self) -> None:
        self._remote()._void(self._path("/submit"))

    def clear(self) -> None:
        self._remote()._void(self._path("/clear"))

    def move_to(self, x_offset: int, y_offset: int) -> None:
        """Move the mouse to an offset from this element's top-left corner."""
        self._remote()._void("/moveto", {
            "element": self.id,
            "xoffset": x_offset,
            "yoffset": y_offset,
        })

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def find_element(self, by: str, value: str) -> "WebElement":
        wd = self._remote()
        return wd.decode_element(wd._find(by, value, self._path("/element")))

    def find_elements(self, by: str, value: str) -> list["WebElement"]:
        wd = self._remote()
        return wd.decode_elements(wd._find(by, value, self._path("/elements")))

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    def tag_name(self) -> str:
        return self._remote()._string(self._path("/name"))

    def text(self) -> str:
        return self._remote()._string(self._path("/text"))

    def get_attribute(self, name: str) -> str:
        return self._remote()._string(self._path(f"/attribute/{name}"))

    def css_property(self, name: str) -> str:
        return self._remote()._string(self._path(f"/css/{name}"))

    def is_selected(self) -> bool:
        return self._remote()._bool(self._path("/selected"))

    def is_enabled(self) -> bool:
        return self._remote()._bool(self._path("/enabled"))

    def is_displayed(self) -> bool:
        return self._remote()._bool(self._path("/displayed"))

    def location(self) -> Point:
        wd = self._remote()
        return wd.commands.location(wd, self)

    def location_in_view(self) -> Point:
        wd = self._remote()
        return wd.commands.location(wd, self, in_view=True)

    def size(self) -> Size:
        wd = self._remote()
        return wd.commands.size(wd, self)


# ---------------------------------------------------------------------------
# Request encoding
# ---------------------------------------------------------------------------

class WireEncoder(json.JSONEncoder):
    """JSON encoder for request bodies that understands WebElement."""

    def __init__(self, *args, **kwargs):
        self.session_id: Optional[str] = kwargs.pop("session_id", None)
        super().__init__(*args, **kwargs)

    def default(self, obj: Any) -> Any:
        if isinstance(obj, WebElement):
            if obj.session_id != self.session_id:
                raise ForeignElementError(
                    f"element {obj.id!r} belongs to session {obj.session_id!r}, "
                    f"not {self.session_id!r}"
                )
            return obj.to_json()
        return super().default(obj)


def encode_body(params: Any, session_id: Optional[str]) -> bytes:
    return json.dumps(params, cls=WireEncoder, session_id=session_id).encode("utf-8")
