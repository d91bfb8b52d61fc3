"""
remotewd/__init__.py
--------------------
remotewd – Remote WebDriver client

Drives a browser through a Selenium / WebDriver server over HTTP+JSON. The
same client speaks the legacy JSON Wire Protocol and the W3C WebDriver
standard: the dialect is detected when the session is created and every
later command is encoded to match.

Public API
----------
    from remotewd import Remote, By, Keys, Cookie, Transport

Quick-start
-----------
    from remotewd import Remote, By

    with Remote({"browserName": "firefox"}, "http://127.0.0.1:4444/wd/hub") as wd:
        wd.get("https://example.com")
        heading = wd.find_element(By.TAG_NAME, "h1")
        print(wd.dialect, heading.text())

Sharing a transport
-------------------
    from remotewd import Remote, Transport

    transport = Transport(timeout=30, debug=True)   # read-only once built
    a = Remote(caps, url_prefix, transport)
    b = Remote(caps, url_prefix, transport)         # independent sessions

Configuration
-------------
Defaults come from `config.settings` (environment or `.env`):
WEBDRIVER_URL_PREFIX, WEBDRIVER_HTTP_TIMEOUT, WEBDRIVER_DEBUG.
"""

from .capabilities import Capabilities, Proxy, Status, Timeouts
from .dialects     import Dialect, WEB_ELEMENT_IDENTIFIER
from .element      import WebElement
from .errors       import (
    ContentTypeError,
    ForeignElementError,
    NoSessionError,
    ProtocolError,
    RedirectLimitError,
    RemoteError,
    SessionNegotiationError,
    TransportError,
    WebDriverError,
)
from .keys         import Keys
from .remote       import Remote, new_remote
from .transport    import MAX_REDIRECTS, Transport
from .types        import By, Cookie, LogMessage, LogType, Point, Rect, Size

__all__ = [
    "By",
    "Capabilities",
    "ContentTypeError",
    "Cookie",
    "Dialect",
    "ForeignElementError",
    "Keys",
    "LogMessage",
    "LogType",
    "MAX_REDIRECTS",
    "NoSessionError",
    "Point",
    "ProtocolError",
    "Proxy",
    "Rect",
    "RedirectLimitError",
    "Remote",
    "RemoteError",
    "SessionNegotiationError",
    "Size",
    "Status",
    "Timeouts",
    "Transport",
    "TransportError",
    "WEB_ELEMENT_IDENTIFIER",
    "WebDriverError",
    "WebElement",
    "new_remote",
]
