"""
Out-of-band notifications to the connected MCP client.

The emitter is fire-and-forget: every send is scheduled as a background task
on the running loop, delivery failures are logged and dropped, and nothing is
ever reported back to the tool call that triggered the event.

The low-level server only exposes the client session while a request is being
handled, so the server binds the session it sees on each inbound request.
Events emitted before the first request are dropped.
"""

import asyncio
import logging
from typing import Any, Optional, Set

logger = logging.getLogger(__name__)

CONSOLE_LOGGER_NAME = "console"

# MCP logging levels in increasing severity.
_LEVEL_ORDER = ["debug", "info", "notice", "warning", "error", "critical", "alert", "emergency"]

_BROWSER_LEVEL_MAP = {
    "debug": "debug",
    "trace": "debug",
    "verbose": "debug",
    "log": "info",
    "info": "info",
    "warn": "warning",
    "warning": "warning",
    "error": "error",
    "assert": "error",
    "severe": "error",
}


def map_console_level(level: str) -> str:
    """Map a browser console level to an MCP logging level."""
    return _BROWSER_LEVEL_MAP.get((level or "").lower(), "info")


class NotificationEmitter:
    def __init__(self):
        self._session: Any = None
        self._min_level: str = "debug"
        self._pending: Set[asyncio.Task] = set()
        self.dropped = 0

    def bind(self, session: Any) -> None:
        """Remember the client session to deliver notifications to."""
        self._session = session

    @property
    def is_bound(self) -> bool:
        return self._session is not None

    def set_level(self, level: str) -> None:
        """Apply a client ``logging/setLevel`` request."""
        if level in _LEVEL_ORDER:
            self._min_level = level

    def _enabled(self, level: str) -> bool:
        return _LEVEL_ORDER.index(level) >= _LEVEL_ORDER.index(self._min_level)

    def console_message(self, line: str, level: str = "log") -> Optional[asyncio.Task]:
        """Push one formatted console line as an MCP log message."""
        mcp_level = map_console_level(level)
        if not self._enabled(mcp_level):
            return None
        return self._schedule(
            "console_message",
            lambda session: session.send_log_message(
                level=mcp_level,
                data=line,
                logger=CONSOLE_LOGGER_NAME,
            ),
        )

    def resources_changed(self) -> Optional[asyncio.Task]:
        """Tell the client the resource list has changed."""
        return self._schedule(
            "resources_changed",
            lambda session: session.send_resource_list_changed(),
        )

    def _schedule(self, kind: str, send) -> Optional[asyncio.Task]:
        session = self._session
        if session is None:
            self.dropped += 1
            return None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.dropped += 1
            logger.debug(f"No running loop; dropping {kind} notification")
            return None

        async def _deliver():
            try:
                await send(session)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.debug(f"Notification delivery failed (non-critical): {kind}: {e}")

        task = loop.create_task(_deliver())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for every scheduled delivery to settle."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


__all__ = [
    "NotificationEmitter",
    "map_console_level",
    "CONSOLE_LOGGER_NAME",
]
