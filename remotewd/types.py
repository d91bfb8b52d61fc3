"""
remotewd/types.py
-----------------
remotewd – Plain value types shared by both protocol dialects.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


# ---------------------------------------------------------------------------
# Locator strategies & log types
# ---------------------------------------------------------------------------

class By:
    ID                = "id"
    XPATH             = "xpath"
    LINK_TEXT         = "link text"
    PARTIAL_LINK_TEXT = "partial link text"
    NAME              = "name"
    TAG_NAME          = "tag name"
    CLASS_NAME        = "class name"
    CSS_SELECTOR      = "css selector"


class LogType:
    SERVER      = "server"
    BROWSER     = "browser"
    CLIENT      = "client"
    DRIVER      = "driver"
    PERFORMANCE = "performance"
    PROFILER    = "profiler"


# Mouse buttons for Remote.click()
LEFT_BUTTON   = 0
MIDDLE_BUTTON = 1
RIGHT_BUTTON  = 2


# ---------------------------------------------------------------------------
# Cookies
# ---------------------------------------------------------------------------

def normalize_expiry(raw: Any) -> Optional[int]:
    """
    Servers send expiry as an int or a float (ChromeDriver). Both map to a
    whole number of seconds; absent or non-positive values mean no expiry.
    """
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    if raw <= 0:
        return None
    return int(raw)


@dataclass
class Cookie:
    name:   str
    value:  str
    path:   str = ""
    domain: str = ""
    secure: bool = False
    expiry: Optional[int] = None    # seconds since the epoch

    @classmethod
    def from_json(cls, data: dict) -> "Cookie":
        return cls(
            name=str(data.get("name") or ""),
            value=str(data.get("value") or ""),
            path=str(data.get("path") or ""),
            domain=str(data.get("domain") or ""),
            secure=bool(data.get("secure", False)),
            expiry=normalize_expiry(data.get("expiry")),
        )

    def to_json(self) -> dict:
        out: dict[str, Any] = {"name": self.name, "value": self.value}
        if self.path:
            out["path"] = self.path
        if self.domain:
            out["domain"] = self.domain
        out["secure"] = self.secure
        if self.expiry:
            out["expiry"] = self.expiry
        return out


# ---------------------------------------------------------------------------
# Geometry
# ---------------------------------------------------------------------------

@dataclass
class Point:
    x: int
    y: int


@dataclass
class Size:
    width:  int
    height: int


@dataclass
class Rect:
    x:      float
    y:      float
    width:  float
    height: float

    @classmethod
    def from_json(cls, data: dict) -> "Rect":
        return cls(
            x=float(data.get("x", 0)),
            y=float(data.get("y", 0)),
            width=float(data.get("width", 0)),
            height=float(data.get("height", 0)),
        )

    def location(self) -> Point:
        return Point(int(self.x), int(self.y))

    def size(self) -> Size:
        return Size(int(self.width), int(self.height))


# ---------------------------------------------------------------------------
# Logs
# ---------------------------------------------------------------------------

@dataclass
class LogMessage:
    timestamp: int
    level:     str
    message:   str

    @classmethod
    def from_json(cls, data: dict) -> "LogMessage":
        return cls(
            timestamp=int(data.get("timestamp") or 0),
            level=str(data.get("level") or ""),
            message=str(data.get("message") or ""),
        )
