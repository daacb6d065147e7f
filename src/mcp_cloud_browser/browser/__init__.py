"""Remote browser access: the Browserbase provider and in-page scripts."""

from .provider import (
    BrowserbaseProvider,
    BrowserbaseRemoteConnection,
    RemoteBrowser,
    SeleniumPage,
)
from .scripts import EVALUATE_WITH_CONSOLE_CAPTURE, BODY_INNER_TEXT

__all__ = [
    "BrowserbaseProvider",
    "BrowserbaseRemoteConnection",
    "RemoteBrowser",
    "SeleniumPage",
    "EVALUATE_WITH_CONSOLE_CAPTURE",
    "BODY_INNER_TEXT",
]
