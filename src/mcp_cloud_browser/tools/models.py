"""Argument models for every tool. Their JSON schemas are what list_tools advertises."""

from typing import Any, Dict, List, Optional

import pydantic

from ..constants import DEFAULT_SESSION_ID, DEFAULT_VIEWPORT_HEIGHT, DEFAULT_VIEWPORT_WIDTH


class ToolArgs(pydantic.BaseModel):
    """Unknown fields are ignored so older clients that send extra keys keep working."""

    model_config = pydantic.ConfigDict(extra="ignore")

    @classmethod
    def input_schema(cls) -> dict:
        schema = cls.model_json_schema()
        schema.pop("title", None)
        schema.setdefault("properties", {})
        schema.setdefault("required", [])
        return schema


class SessionArgs(ToolArgs):
    sessionId: str = pydantic.Field(
        default=DEFAULT_SESSION_ID,
        description="Browser session to act on. Created on first use.",
    )


class NoArgs(ToolArgs):
    pass


class NavigateArgs(SessionArgs):
    url: str


class ScreenshotArgs(SessionArgs):
    name: str = pydantic.Field(description="Name for the screenshot")
    selector: Optional[str] = pydantic.Field(default=None, description="CSS selector for element to screenshot")
    width: int = pydantic.Field(default=DEFAULT_VIEWPORT_WIDTH, gt=0, description="Width in pixels (default: 800)")
    height: int = pydantic.Field(default=DEFAULT_VIEWPORT_HEIGHT, gt=0, description="Height in pixels (default: 600)")


class ClickArgs(SessionArgs):
    selector: str = pydantic.Field(description="CSS selector for element to click")


class FillArgs(SessionArgs):
    selector: str = pydantic.Field(description="CSS selector for input field")
    value: str = pydantic.Field(description="Value to fill")


class EvaluateArgs(SessionArgs):
    script: str = pydantic.Field(description="JavaScript code to execute")


class SelectorArgs(SessionArgs):
    selector: Optional[str] = pydantic.Field(
        default=None,
        description="Optional CSS selector to limit extraction to specific elements (default: whole page)",
    )


class ParallelTarget(pydantic.BaseModel):
    url: str
    id: str


class ParallelSessionsArgs(ToolArgs):
    sessions: List[ParallelTarget]


class ReadPageArgs(ToolArgs):
    pageUrl: Optional[str] = pydantic.Field(default=None, description="URL of the page to read")


class PageContentArgs(ToolArgs):
    pageId: str = pydantic.Field(description="ID of the page")
    content: str = pydantic.Field(description="Content to write")


class PageIdArgs(ToolArgs):
    pageId: str = pydantic.Field(description="ID of the page to read comments from")


class CommentArgs(ToolArgs):
    pageId: str = pydantic.Field(description="ID of the page to comment on")
    comment: str = pydantic.Field(description="Comment text")


class DatabaseEntryArgs(ToolArgs):
    databaseId: Optional[str] = pydantic.Field(
        default=None,
        description="ID of the database (optional - will use default if not provided)",
    )
    title: str = pydantic.Field(description="Title of the entry")
    tags: Optional[List[str]] = pydantic.Field(default=None, description="Array of tags to add to the entry")
    properties: Optional[Dict[str, Any]] = pydantic.Field(
        default=None,
        description="Additional properties for the database entry (optional)",
    )
    content: Optional[str] = pydantic.Field(default=None, description="Content for the page (optional)")


__all__ = [
    "ToolArgs",
    "SessionArgs",
    "NoArgs",
    "NavigateArgs",
    "ScreenshotArgs",
    "ClickArgs",
    "FillArgs",
    "EvaluateArgs",
    "SelectorArgs",
    "ParallelTarget",
    "ParallelSessionsArgs",
    "ReadPageArgs",
    "PageContentArgs",
    "PageIdArgs",
    "CommentArgs",
    "DatabaseEntryArgs",
]
