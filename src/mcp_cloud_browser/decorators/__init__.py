# mcp_cloud_browser/decorators/__init__.py
#
# Re-exports decorators from their respective modules.

from .ensure import ensure_session
from .envelope import tool_envelope

__all__ = [
    "ensure_session",
    "tool_envelope",
]
