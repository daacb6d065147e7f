"""
Session registry: caller-chosen session ids mapped to live remote browsers.

Sessions are created lazily. ``resolve()`` is an atomic get-or-create: it is
guarded by a per-id lock, so two tool calls racing on the same new id share
one remote browser instead of each opening their own. ``create()`` always
provisions a fresh browser and closes the one it replaces, so an id never
maps to more than one live connection.

Every session gets a console subscription at creation time. Console events
are appended to the resource catalog and pushed to the client through the
notification emitter.

Idle sessions are closed by a background reaper once they have not been
used for ``idle_timeout`` seconds. A session with a tool call in flight
(see ``in_use()``) is never reaped, and idleness is re-checked under the
session's lock right before it is closed.
"""

import asyncio
import contextlib
import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .constants import SESSION_IDLE_TIMEOUT_SECS, SESSION_REAPER_INTERVAL_SECS
from .errors import ProviderConnectionError
from .locking import KeyedLock
from .notifications import NotificationEmitter
from .resources import ResourceCatalog

logger = logging.getLogger(__name__)


@dataclass
class Session:
    session_id: str
    browser: Any
    created_at: float
    last_used: float
    active: int = 0

    @property
    def page(self):
        return self.browser.page

    def touch(self) -> None:
        self.last_used = time.time()

    def summary(self) -> dict:
        return {
            "id": self.session_id,
            "created_at": self.created_at,
            "last_used": self.last_used,
        }


class SessionRegistry:
    """
    Owns every live session.

    Args:
        provider: Object whose ``connect()`` coroutine returns a connected
            browser exposing ``page`` and ``close()``.
        catalog: Receives console lines.
        emitter: Pushes console lines to the client.
        idle_timeout: Seconds of inactivity before the reaper closes a
            session. 0 disables reaping.
        reaper_interval: Seconds between reaper sweeps.
    """

    def __init__(
        self,
        provider,
        catalog: ResourceCatalog,
        emitter: NotificationEmitter,
        idle_timeout: float = SESSION_IDLE_TIMEOUT_SECS,
        reaper_interval: float = SESSION_REAPER_INTERVAL_SECS,
    ):
        self._provider = provider
        self._catalog = catalog
        self._emitter = emitter
        self._sessions: Dict[str, Session] = {}
        self._locks = KeyedLock()
        self.idle_timeout = idle_timeout
        self.reaper_interval = reaper_interval
        self._reaper_task: Optional[asyncio.Task] = None

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def list(self) -> List[dict]:
        return [s.summary() for s in self._sessions.values()]

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def resolve(self, session_id: str) -> Session:
        """
        Return the live session for ``session_id``, creating it on first use.

        Raises:
            ProviderConnectionError: if a new session had to be created and the
                remote endpoint could not be reached or authenticated.
        """
        session = self._sessions.get(session_id)
        if session is not None:
            session.touch()
            return session

        async with self._locks.hold(session_id):
            # Another caller may have created it while we waited.
            session = self._sessions.get(session_id)
            if session is None:
                session = await self._provision(session_id)
            session.touch()
            return session

    async def create(self, session_id: str) -> Session:
        """Provision a fresh session, closing any session already using ``session_id``."""
        async with self._locks.hold(session_id):
            previous = self._sessions.pop(session_id, None)
            if previous is not None:
                logger.info(f"Replacing session {session_id}")
                await self._close_browser(previous)
            return await self._provision(session_id)

    @contextlib.asynccontextmanager
    async def in_use(self, session: Session):
        """Mark ``session`` busy for the duration of a tool call so the reaper skips it."""
        session.active += 1
        try:
            yield session
        finally:
            session.active -= 1
            session.touch()

    async def _provision(self, session_id: str) -> Session:
        try:
            browser = await self._provider.connect()
        except ProviderConnectionError:
            raise
        except Exception as e:
            raise ProviderConnectionError(f"Could not connect to the remote browser: {e}") from e

        def _on_console(level: str, text: str) -> None:
            line = self._catalog.append_console(session_id, level, text)
            self._emitter.console_message(line, level)

        try:
            await browser.page.on_console(_on_console)
        except Exception as e:
            logger.warning(f"Console capture unavailable for session {session_id}: {e}")

        now = time.time()
        session = Session(session_id=session_id, browser=browser, created_at=now, last_used=now)
        self._sessions[session_id] = session
        logger.info(f"Created session {session_id}")
        return session

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def _close_browser(self, session: Session) -> None:
        try:
            await session.browser.close()
        except Exception as e:
            logger.warning(f"Error closing session {session.session_id}: {e}")

    async def close(self, session_id: str) -> bool:
        """Close and forget a session. Returns False if the id was not live."""
        async with self._locks.hold(session_id):
            session = self._sessions.pop(session_id, None)
            if session is None:
                return False
            await self._close_browser(session)
            logger.info(f"Closed session {session_id}")
            return True

    async def close_all(self) -> None:
        for session_id in list(self._sessions):
            await self.close(session_id)

    def _is_idle(self, session: Session, now: Optional[float]) -> bool:
        if session.active:
            return False
        now = time.time() if now is None else now
        return now - session.last_used > self.idle_timeout

    async def _close_if_idle(self, session_id: str, now: Optional[float]) -> bool:
        async with self._locks.hold(session_id):
            session = self._sessions.get(session_id)
            # A tool call may have picked the session up since the sweep started.
            if session is None or not self._is_idle(session, now):
                return False
            del self._sessions[session_id]
            await self._close_browser(session)
            return True

    async def reap_idle(self, now: Optional[float] = None) -> List[str]:
        """
        Close every session idle for longer than ``idle_timeout``.

        Returns:
            The ids that were actually closed.
        """
        if not self.idle_timeout:
            return []
        candidates = [sid for sid, s in self._sessions.items() if self._is_idle(s, now)]
        closed = []
        for sid in candidates:
            if await self._close_if_idle(sid, now):
                logger.info(f"Auto-closed idle session {sid}")
                closed.append(sid)
        return closed

    def start_reaper(self) -> Optional[asyncio.Task]:
        if not self.idle_timeout or self._reaper_task is not None:
            return self._reaper_task

        async def _reaper_loop():
            while True:
                await asyncio.sleep(self.reaper_interval)
                try:
                    await self.reap_idle()
                except Exception as e:
                    logger.error(f"Error in session reaper: {e}")

        self._reaper_task = asyncio.get_running_loop().create_task(_reaper_loop())
        return self._reaper_task

    async def stop_reaper(self) -> None:
        task, self._reaper_task = self._reaper_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass


__all__ = [
    "Session",
    "SessionRegistry",
]
