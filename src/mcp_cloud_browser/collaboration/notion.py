"""
Notion client - the collaboration provider behind the notion_* tools.

API Reference: https://developers.notion.com/reference
"""

import re
import logging
from typing import Any, Dict, List, Optional

import httpx

from ..constants import NOTION_API_BASE, NOTION_VERSION, PROVIDER_HTTP_TIMEOUT_SECS
from ..errors import CollaborationError, InvalidPageUrlError

logger = logging.getLogger(__name__)

PAGE_ID_PAT = re.compile(
    r"[a-zA-Z0-9]{8}-?[a-zA-Z0-9]{4}-?[a-zA-Z0-9]{4}-?[a-zA-Z0-9]{4}-?[a-zA-Z0-9]{12}"
)


def extract_page_id(url: str) -> str:
    """
    Pull the 32-character page id out of a Notion URL, without dashes.

    Raises:
        InvalidPageUrlError: if the URL contains no id.
    """
    match = PAGE_ID_PAT.search(url or "")
    if not match:
        raise InvalidPageUrlError("Could not extract page ID from Notion URL")
    return match.group(0).replace("-", "")


def paragraph_block(text: str) -> dict:
    return {
        "object": "block",
        "type": "paragraph",
        "paragraph": {
            "rich_text": [{"type": "text", "text": {"content": text}}],
        },
    }


def _sanitize_error_message(error: Exception) -> str:
    """Sanitize error messages to prevent token leaks."""
    error_str = str(error)
    if "Authorization" in error_str or "Bearer" in error_str:
        return "Network error occurred"
    return f"Network error: {error_str}"


class NotionClient:
    """Async wrapper around the handful of Notion v1 endpoints the tools use."""

    def __init__(self, token: str, http_client: Optional[httpx.AsyncClient] = None, base_url: str = NOTION_API_BASE):
        self._token = token
        self._base_url = base_url.rstrip("/")
        self._http = http_client or httpx.AsyncClient(timeout=PROVIDER_HTTP_TIMEOUT_SECS)

    @property
    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "Notion-Version": NOTION_VERSION,
            "Content-Type": "application/json",
        }

    def _handle_response(self, response: httpx.Response) -> Dict[str, Any]:
        """Return the decoded body or raise CollaborationError for error statuses."""
        status = response.status_code
        if status == 401:
            raise CollaborationError("Invalid or expired Notion token", status)
        if status == 403:
            raise CollaborationError("Forbidden - check integration permissions", status)
        if status == 404:
            raise CollaborationError("Resource not found", status)
        if status == 429:
            raise CollaborationError("Rate limit exceeded", status)
        if status >= 400:
            try:
                detail = response.json().get("message", response.text)
            except ValueError:
                detail = response.text
            raise CollaborationError(f"Notion API error (HTTP {status}): {detail}", status)

        try:
            return response.json()
        except ValueError:
            return {}

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        try:
            response = await self._http.request(
                method,
                f"{self._base_url}{path}",
                headers=self._headers,
                **kwargs,
            )
        except httpx.HTTPError as e:
            raise CollaborationError(_sanitize_error_message(e)) from e
        return self._handle_response(response)

    async def list_block_children(self, block_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/blocks/{block_id}/children")

    async def append_children(self, block_id: str, children: List[dict]) -> Dict[str, Any]:
        return await self._request("PATCH", f"/blocks/{block_id}/children", json={"children": children})

    async def append_paragraph(self, block_id: str, text: str) -> Dict[str, Any]:
        return await self.append_children(block_id, [paragraph_block(text)])

    async def list_comments(self, block_id: str) -> Dict[str, Any]:
        return await self._request("GET", "/comments", params={"block_id": block_id})

    async def create_comment(self, page_id: str, text: str) -> Dict[str, Any]:
        payload = {
            "parent": {"page_id": page_id},
            "rich_text": [{"text": {"content": text}}],
        }
        return await self._request("POST", "/comments", json=payload)

    async def create_database_page(
        self,
        database_id: str,
        properties: Dict[str, Any],
        content: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create a row in a database, optionally with a single paragraph of body content."""
        payload: Dict[str, Any] = {
            "parent": {"database_id": database_id},
            "properties": properties,
        }
        if content:
            payload["children"] = [paragraph_block(content)]
        return await self._request("POST", "/pages", json=payload)

    async def aclose(self) -> None:
        await self._http.aclose()


__all__ = [
    "NotionClient",
    "extract_page_id",
    "paragraph_block",
    "PAGE_ID_PAT",
]
