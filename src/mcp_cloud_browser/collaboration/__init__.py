"""Collaboration provider (Notion) used by the notion_* tools."""

from .notion import NotionClient, extract_page_id, paragraph_block

__all__ = [
    "NotionClient",
    "extract_page_id",
    "paragraph_block",
]
