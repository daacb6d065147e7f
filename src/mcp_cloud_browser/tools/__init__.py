# mcp_cloud_browser/tools/__init__.py
"""
MCP tool implementations.

Each handler takes ``(ctx, args)`` where ``args`` is the validated argument
model from ``tools.models``, and returns a ToolResult. Browser handlers are
wrapped in ``ensure_session`` so the session named by ``args.sessionId`` is
resolved (and created on first use) before they run.
"""

from . import browser, notion, models

__all__ = [
    "browser",
    "notion",
    "models",
]
