"""
Global constants and configuration defaults.
No dependencies - safe to import from anywhere.
"""

import os

# ============================================================================
# Session Lifecycle
# ============================================================================

DEFAULT_SESSION_ID = os.getenv("MCP_DEFAULT_SESSION_ID", "default")
"""Session used by browser tools that do not name one."""

SESSION_IDLE_TIMEOUT_SECS = int(os.getenv("MCP_SESSION_IDLE_SECS", "900"))
"""Close sessions that have not been used for this many seconds. 0 disables reaping."""

SESSION_REAPER_INTERVAL_SECS = int(os.getenv("MCP_SESSION_REAPER_INTERVAL_SECS", "60"))
"""How often the idle reaper wakes up."""


# ============================================================================
# Screenshot Configuration
# ============================================================================

DEFAULT_VIEWPORT_WIDTH = 800
DEFAULT_VIEWPORT_HEIGHT = 600


# ============================================================================
# Resource URIs
# ============================================================================

CONSOLE_LOG_URI = "console://logs"
SCREENSHOT_URI_PREFIX = "screenshot://"


# ============================================================================
# Remote APIs
# ============================================================================

PROVIDER_HTTP_TIMEOUT_SECS = float(os.getenv("MCP_PROVIDER_HTTP_TIMEOUT_SECS", "30"))
"""Timeout for Browserbase and Notion HTTP calls."""

NOTION_API_BASE = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"


__all__ = [
    "DEFAULT_SESSION_ID",
    "SESSION_IDLE_TIMEOUT_SECS",
    "SESSION_REAPER_INTERVAL_SECS",
    "DEFAULT_VIEWPORT_WIDTH",
    "DEFAULT_VIEWPORT_HEIGHT",
    "CONSOLE_LOG_URI",
    "SCREENSHOT_URI_PREFIX",
    "PROVIDER_HTTP_TIMEOUT_SECS",
    "NOTION_API_BASE",
    "NOTION_VERSION",
]
