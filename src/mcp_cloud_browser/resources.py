"""
In-memory catalog of artifacts produced while driving browser sessions.

Two stores back the catalog:

    console log   append-only list of formatted console lines, one per browser
                  console event, in capture order.
    screenshots   name -> base64 PNG, last write wins, insertion ordered.

Descriptors are computed from the stores on every call to ``list()`` so a
listing can never be stale.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional
from urllib.parse import quote, unquote

from .constants import CONSOLE_LOG_URI, SCREENSHOT_URI_PREFIX
from .errors import ResourceNotFoundError


@dataclass(frozen=True)
class ResourceDescriptor:
    uri: str
    mime_type: str
    name: str


@dataclass(frozen=True)
class ResourceContent:
    """Content of a single resource. Exactly one of ``text``/``blob`` is set."""

    uri: str
    mime_type: str
    text: Optional[str] = None
    blob: Optional[str] = None


def format_console_line(session_id: str, level: str, text: str) -> str:
    return f"[Session {session_id}][{level}] {text}"


def screenshot_uri(name: str) -> str:
    # Names are caller-supplied; percent-encode so the URI stays valid.
    return f"{SCREENSHOT_URI_PREFIX}{quote(name, safe='')}"


class ResourceCatalog:
    def __init__(self):
        self._console_logs: List[str] = []
        self._screenshots: Dict[str, str] = {}

    # ------------------------------------------------------------------
    # Writers
    # ------------------------------------------------------------------

    def append_console(self, session_id: str, level: str, text: str) -> str:
        """Append one console event and return the formatted line."""
        line = format_console_line(session_id, level, text)
        self._console_logs.append(line)
        return line

    def put_screenshot(self, name: str, data: str) -> None:
        """Store a base64 PNG under ``name``, replacing any earlier capture."""
        self._screenshots[name] = data

    # ------------------------------------------------------------------
    # Readers
    # ------------------------------------------------------------------

    def list(self) -> List[ResourceDescriptor]:
        descriptors = [
            ResourceDescriptor(uri=CONSOLE_LOG_URI, mime_type="text/plain", name="Browser console logs"),
        ]
        for name in self._screenshots:
            descriptors.append(
                ResourceDescriptor(
                    uri=screenshot_uri(name),
                    mime_type="image/png",
                    name=f"Screenshot: {name}",
                )
            )
        return descriptors

    def read(self, uri: str) -> ResourceContent:
        """
        Read a resource by URI.

        Raises:
            ResourceNotFoundError: if the URI is neither the console log nor a
                stored screenshot.
        """
        if uri == CONSOLE_LOG_URI:
            return ResourceContent(uri=uri, mime_type="text/plain", text="\n".join(self._console_logs))

        if uri.startswith(SCREENSHOT_URI_PREFIX):
            name = unquote(uri[len(SCREENSHOT_URI_PREFIX):])
            data = self._screenshots.get(name)
            if data is not None:
                return ResourceContent(uri=uri, mime_type="image/png", blob=data)

        raise ResourceNotFoundError(uri)

    def log_lines(self) -> List[str]:
        return list(self._console_logs)

    def screenshot_names(self) -> List[str]:
        return list(self._screenshots)

    def get_screenshot(self, name: str) -> Optional[str]:
        return self._screenshots.get(name)

    def clear(self) -> None:
        self._console_logs.clear()
        self._screenshots.clear()


__all__ = [
    "ResourceDescriptor",
    "ResourceContent",
    "ResourceCatalog",
    "format_console_line",
    "screenshot_uri",
]
