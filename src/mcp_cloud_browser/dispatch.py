"""
Tool dispatch engine.

A closed table maps each tool name to its argument model and handler.
Arguments are validated against the model before the handler runs, and every
outcome - unknown tool, invalid arguments, handler failure - comes back as a
ToolResult. Nothing raised by a tool escapes ``dispatch()``.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type

import pydantic
from mcp import types

from .errors import UnknownToolError
from .results import ToolResult
from .tools import browser, notion
from .tools.models import (
    ToolArgs,
    SessionArgs,
    NoArgs,
    NavigateArgs,
    ScreenshotArgs,
    ClickArgs,
    FillArgs,
    EvaluateArgs,
    SelectorArgs,
    ParallelSessionsArgs,
    ReadPageArgs,
    PageContentArgs,
    PageIdArgs,
    CommentArgs,
    DatabaseEntryArgs,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    args_model: Type[ToolArgs]
    handler: Callable

    def to_mcp(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=self.args_model.input_schema(),
        )


TOOL_SPECS = (
    ToolSpec(
        "puppeteer_create_session",
        "Create a new cloud browser session using Browserbase. Replaces any session with the same id.",
        SessionArgs,
        browser.create_session,
    ),
    ToolSpec(
        "puppeteer_close_session",
        "Close a cloud browser session and release its remote browser",
        SessionArgs,
        browser.close_session,
    ),
    ToolSpec(
        "puppeteer_list_sessions",
        "List open cloud browser sessions",
        NoArgs,
        browser.list_sessions,
    ),
    ToolSpec("puppeteer_navigate", "Navigate to a URL", NavigateArgs, browser.navigate),
    ToolSpec(
        "puppeteer_screenshot",
        "Take a screenshot of the current page or a specific element",
        ScreenshotArgs,
        browser.screenshot,
    ),
    ToolSpec("puppeteer_click", "Click an element on the page", ClickArgs, browser.click),
    ToolSpec("puppeteer_fill", "Fill out an input field", FillArgs, browser.fill),
    ToolSpec("puppeteer_evaluate", "Execute JavaScript in the browser console", EvaluateArgs, browser.evaluate),
    ToolSpec(
        "puppeteer_get_content",
        "Extract all content from the current page",
        SelectorArgs,
        browser.get_content,
    ),
    ToolSpec(
        "puppeteer_get_json",
        "Extract JSON embedded in the current page (text, script tags, meta tags and JSON-LD)",
        SelectorArgs,
        browser.get_json,
    ),
    ToolSpec(
        "puppeteer_parallel_sessions",
        "Create multiple browser sessions and navigate to different URLs",
        ParallelSessionsArgs,
        browser.parallel_sessions,
    ),
    ToolSpec("notion_read_page", "Read content from a Notion page", ReadPageArgs, notion.read_page),
    ToolSpec("notion_update_page", "Update content in a Notion page", PageContentArgs, notion.update_page),
    ToolSpec("notion_append_content", "Append content to a Notion page", PageContentArgs, notion.append_content),
    ToolSpec("notion_read_comments", "Read comments from a Notion page", PageIdArgs, notion.read_comments),
    ToolSpec("notion_add_comment", "Add a comment to a Notion page", CommentArgs, notion.add_comment),
    ToolSpec(
        "notion_add_to_database",
        "Add a new entry to a Notion database",
        DatabaseEntryArgs,
        notion.add_to_database,
    ),
)

TOOLS: Dict[str, ToolSpec] = {spec.name: spec for spec in TOOL_SPECS}


def _summarize_validation_error(err: pydantic.ValidationError) -> str:
    parts = []
    for e in err.errors():
        loc = ".".join(str(p) for p in e.get("loc", ())) or "arguments"
        parts.append(f"{loc}: {e.get('msg')}")
    return "; ".join(parts)


class ToolDispatcher:
    def __init__(self, ctx, tools: Optional[Dict[str, ToolSpec]] = None):
        self._ctx = ctx
        self._tools = TOOLS if tools is None else tools

    def list_tools(self) -> List[types.Tool]:
        return [spec.to_mcp() for spec in self._tools.values()]

    async def dispatch(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> ToolResult:
        spec = self._tools.get(name)
        if spec is None:
            return ToolResult.fail(str(UnknownToolError(name)))

        try:
            args = spec.args_model.model_validate(arguments or {})
        except pydantic.ValidationError as e:
            return ToolResult.fail(f"Invalid arguments for {name}: {_summarize_validation_error(e)}")

        try:
            return await spec.handler(self._ctx, args)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            # Handlers are enveloped; this only catches bugs in the envelope path itself.
            logger.error(f"Tool {name} raised past its envelope: {e}", exc_info=True)
            return ToolResult.fail(f"{name} failed: {e}")


__all__ = [
    "ToolSpec",
    "TOOL_SPECS",
    "TOOLS",
    "ToolDispatcher",
]
