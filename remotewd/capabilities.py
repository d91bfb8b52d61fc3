"""
remotewd/capabilities.py
------------------------
remotewd – Capability and status models

Capabilities have no fixed schema: every driver adds vendor keys such as
"moz:firefoxOptions" or "goog:chromeOptions". A plain mapping from the caller
is sent exactly as given, keys and values untouched. The `Capabilities`
model is an optional typed builder for the common fields; whatever it was
built with is serialised under the wire names, with extras kept as-is.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class _OpenModel(BaseModel):
    model_config = ConfigDict(extra="allow")

    def to_wire(self) -> dict[str, Any]:
        """Serialise with wire names, keeping only what was actually set."""
        return self.model_dump(by_alias=True, exclude_unset=True)


class Proxy(_OpenModel):
    proxy_type:           Optional[str] = Field(default=None, alias="proxyType")
    proxy_autoconfig_url: Optional[str] = Field(default=None, alias="proxyAutoconfigUrl")
    ftp_proxy:            Optional[str] = Field(default=None, alias="ftpProxy")
    http_proxy:           Optional[str] = Field(default=None, alias="httpProxy")
    ssl_proxy:            Optional[str] = Field(default=None, alias="sslProxy")
    socks_proxy:          Optional[str] = Field(default=None, alias="socksProxy")
    socks_version:        Optional[int] = Field(default=None, alias="socksVersion")
    socks_username:       Optional[str] = Field(default=None, alias="socksUsername")
    socks_password:       Optional[str] = Field(default=None, alias="socksPassword")
    no_proxy:             Optional[Union[list[str], str]] = Field(default=None, alias="noProxy")


class Timeouts(_OpenModel):
    """Session timeouts in milliseconds."""

    implicit:  Optional[int] = None
    page_load: Optional[int] = Field(
        default=None,
        alias="pageLoad",
        validation_alias=AliasChoices("pageLoad", "page load", "page_load"),
    )
    script:    Optional[int] = None


class Capabilities(_OpenModel):
    """
    Typed builder for requested capabilities.

    Fields are set by their wire names; unknown keys are kept as extras:

        caps = Capabilities(browserName="firefox", **{"moz:firefoxOptions": {...}})
        caps.to_wire()  # {"browserName": "firefox", "moz:firefoxOptions": {...}}
    """

    browser_name:           Optional[str]  = Field(default=None, alias="browserName")
    browser_version:        Optional[str]  = Field(default=None, alias="browserVersion")
    version:                Optional[str]  = None
    platform_name:          Optional[str]  = Field(default=None, alias="platformName")
    platform:               Optional[str]  = None
    accept_insecure_certs:  Optional[bool] = Field(default=None, alias="acceptInsecureCerts")
    page_load_strategy:     Optional[str]  = Field(default=None, alias="pageLoadStrategy")
    proxy:                  Optional[Proxy]    = None
    timeouts:               Optional[Timeouts] = None


def capabilities_payload(value: Union[Capabilities, Mapping, None]) -> dict[str, Any]:
    """
    The capabilities object to send for *value*.

    Mappings are copied verbatim, with no validation or renaming, so every
    key and value the caller set reaches the remote end unchanged.
    """
    if value is None:
        return {}
    if isinstance(value, Capabilities):
        return value.to_wire()
    if isinstance(value, Mapping):
        return dict(value)
    raise TypeError(f"capabilities must be a mapping, got {type(value).__name__}")


class NewSessionValue(_OpenModel):
    """The `value` object of a W3C new-session reply."""

    session_id:         str = Field(
        alias="sessionId", validation_alias=AliasChoices("sessionId", "sessionID", "SessionID")
    )
    capabilities:       Optional[dict[str, Any]] = None
    page_load_strategy: Optional[str]      = Field(default=None, alias="pageLoadStrategy")
    proxy:              Optional[Proxy]    = None
    timeouts:           Optional[Timeouts] = None


class Status(_OpenModel):
    """Readiness and version information from `GET /status`."""

    ready:   Optional[bool] = None
    message: Optional[str]  = None
    build:   Optional[dict[str, Any]] = None
    os:      Optional[dict[str, Any]] = None
    java:    Optional[dict[str, Any]] = None
