"""
MCP server for remote browser automation and Notion.

Browser sessions live on Browserbase and are addressed by caller-chosen ids.
Any browser tool naming an unknown id opens a new session for it; sessions are
closed explicitly, when idle for too long, or when the client disconnects.

Console output from every session is collected into ``console://logs`` and
screenshots are kept as ``screenshot://<name>`` resources. New console lines
and new screenshots are pushed to the client as notifications.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
