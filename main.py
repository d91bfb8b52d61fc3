"""Smoke-check entry point: talk to a WebDriver server and report what it speaks."""

import logging
import sys

from config.settings import get_settings
from remotewd import Remote, Transport, WebDriverError

settings = get_settings()

LOG_FORMATS = {
    "text": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    "json": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
}

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format=LOG_FORMATS[settings.log_format],
)

# Silence noisy libraries
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)


def main() -> int:
    """Print server status, open a session, report its dialect, and quit."""
    url_prefix = sys.argv[1] if len(sys.argv) > 1 else settings.url_prefix

    with Transport.from_settings(settings) as transport:
        wd = Remote({"browserName": settings.webdriver_browser_name}, url_prefix, transport)
        try:
            status = wd.status()
            print(f"Server at {url_prefix}: ready={status.ready} {status.message or ''}".rstrip())
            with wd:
                print(f"Session {wd.session_id} speaks the {wd.dialect.value} dialect.")
        except WebDriverError as exc:
            print(f"WebDriver error: {exc}", file=sys.stderr)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
