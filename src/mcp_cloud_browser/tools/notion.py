"""Notion tool implementations. None of these touch a browser session."""

import json

from ..collaboration.notion import extract_page_id
from ..decorators import tool_envelope
from ..results import ToolResult


@tool_envelope(failure="Failed to read page")
async def read_page(ctx, args):
    page_id = extract_page_id(args.pageUrl or ctx.config["notion_page_url"])
    content = await ctx.notion.list_block_children(page_id)
    return ToolResult.ok(json.dumps(content, indent=2, ensure_ascii=False))


@tool_envelope(failure="Failed to update page")
async def update_page(ctx, args):
    await ctx.notion.append_paragraph(args.pageId, args.content)
    return ToolResult.ok("Page updated successfully")


@tool_envelope(failure="Failed to append content")
async def append_content(ctx, args):
    await ctx.notion.append_paragraph(args.pageId, args.content)
    return ToolResult.ok("Content appended successfully")


@tool_envelope(failure="Failed to read comments")
async def read_comments(ctx, args):
    comments = await ctx.notion.list_comments(args.pageId)
    return ToolResult.ok(json.dumps(comments, indent=2, ensure_ascii=False))


@tool_envelope(failure="Failed to add comment")
async def add_comment(ctx, args):
    await ctx.notion.create_comment(args.pageId, args.comment)
    return ToolResult.ok("Comment added successfully")


def build_entry_properties(title: str, tags=None, extra=None) -> dict:
    """
    Map a title and tag list onto the ``Name`` and ``Tags`` database
    properties. ``extra`` is merged last and may override either.
    """
    properties = {
        "Name": {"title": [{"text": {"content": title}}]},
    }
    if tags:
        properties["Tags"] = {"multi_select": [{"name": tag} for tag in tags]}
    if extra:
        properties.update(extra)
    return properties


@tool_envelope(failure="Failed to create database entry")
async def add_to_database(ctx, args):
    response = await ctx.notion.create_database_page(
        args.databaseId or ctx.config["notion_database_id"],
        build_entry_properties(args.title, args.tags, args.properties),
        content=args.content,
    )
    entry_id = str(response.get("id", "")).replace("-", "")
    return ToolResult.ok(f"Created database entry: https://notion.so/{entry_id}")


__all__ = [
    "read_page",
    "update_page",
    "append_content",
    "read_comments",
    "add_comment",
    "add_to_database",
    "build_entry_properties",
]
