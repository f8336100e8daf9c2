"""Open URLs in the user's browser."""

import webbrowser

import structlog

from flickrate.errors import BrowserLaunchError
from flickrate.observability.redact import redact_url


logger = structlog.get_logger()


def open_in_browser(url: str) -> None:
    """Open a URL in the default browser.

    Args:
        url: URL to open.

    Raises:
        BrowserLaunchError: If no browser accepted the URL.
    """
    log = logger.bind(component="browser", url=redact_url(url))
    try:
        opened = webbrowser.open(url)
    except webbrowser.Error as e:
        log.warning("browser_launch_failed", error=str(e))
        msg = f"Could not launch a browser: {e}"
        raise BrowserLaunchError(msg) from e

    if not opened:
        log.warning("browser_launch_failed", error="no runnable browser")
        msg = "No runnable browser found"
        raise BrowserLaunchError(msg)

    log.debug("browser_launched")
