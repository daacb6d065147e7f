"""Browser tool implementations. Each handler receives the server context and its validated arguments."""

import json
import asyncio
import logging

from ..actions.extraction import extract_structured_data, extract_text_content
from ..browser.scripts import EVALUATE_WITH_CONSOLE_CAPTURE
from ..decorators import ensure_session, tool_envelope
from ..results import ToolResult, image_content

logger = logging.getLogger(__name__)


def _dumps(value) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False, default=str)


# ----------------------------------------------------------------------------
# Session lifecycle
# ----------------------------------------------------------------------------

@tool_envelope(failure="Failed to create browser session")
async def create_session(ctx, args):
    await ctx.registry.create(args.sessionId)
    return ToolResult.ok("Created new browser session")


@tool_envelope(failure="Failed to close browser session {sessionId}")
async def close_session(ctx, args):
    if not await ctx.registry.close(args.sessionId):
        return ToolResult.fail(f"No browser session named {args.sessionId}")
    return ToolResult.ok(f"Closed browser session {args.sessionId}")


@tool_envelope(failure="Failed to list browser sessions")
async def list_sessions(ctx, args):
    return ToolResult.ok(_dumps(ctx.registry.list()))


# ----------------------------------------------------------------------------
# Page actions
# ----------------------------------------------------------------------------

@tool_envelope(failure="Failed to navigate to {url}")
@ensure_session
async def navigate(ctx, args, session):
    await session.page.goto(args.url)
    return ToolResult.ok(f"Navigated to {args.url}")


@tool_envelope(failure="Failed to take screenshot '{name}'")
@ensure_session
async def screenshot(ctx, args, session):
    """
    Resize the viewport, capture the page or one element, and store the PNG
    as ``screenshot://<name>``. A selector with no match is reported as a
    failure and leaves the catalog untouched.
    """
    await session.page.set_viewport(args.width, args.height)
    data = await session.page.screenshot(args.selector)

    if not data:
        return ToolResult.fail(
            f"Element not found: {args.selector}" if args.selector else "Screenshot failed"
        )

    ctx.catalog.put_screenshot(args.name, data)
    ctx.emitter.resources_changed()

    return ToolResult.ok(
        f"Screenshot '{args.name}' taken at {args.width}x{args.height}",
        image_content(data),
    )


@tool_envelope(failure="Failed to click {selector}")
@ensure_session
async def click(ctx, args, session):
    await session.page.click(args.selector)
    return ToolResult.ok(f"Clicked: {args.selector}")


@tool_envelope(failure="Failed to fill {selector}")
@ensure_session
async def fill(ctx, args, session):
    await session.page.wait_for_selector(args.selector)
    await session.page.type(args.selector, args.value)
    return ToolResult.ok(f"Filled {args.selector} with: {args.value}")


@tool_envelope(failure="Script execution failed")
@ensure_session
async def evaluate(ctx, args, session):
    # Runs caller-supplied code unrestricted in the page's context.
    payload = await session.page.evaluate(EVALUATE_WITH_CONSOLE_CAPTURE, args.script) or {}
    logs = payload.get("logs") or []
    return ToolResult.ok(
        f"Execution result:\n{_dumps(payload.get('result'))}\n\nConsole output:\n" + "\n".join(logs)
    )


@tool_envelope(failure="Failed to extract content")
@ensure_session
async def get_content(ctx, args, session):
    html = await session.page.content()
    return ToolResult.ok(f"Extracted content:\n{_dumps(extract_text_content(html, args.selector))}")


@tool_envelope(failure="Failed to extract JSON")
@ensure_session
async def get_json(ctx, args, session):
    html = await session.page.content()
    return ToolResult.ok(f"Found JSON content:\n{_dumps(extract_structured_data(html, args.selector))}")


# ----------------------------------------------------------------------------
# Bulk navigation
# ----------------------------------------------------------------------------

async def _visit(ctx, target) -> dict:
    logger.info(f"Creating session for {target.id}: {target.url}")
    try:
        session = await ctx.registry.create(target.id)
        async with ctx.registry.in_use(session):
            await session.page.goto(target.url)
            content = await session.page.inner_text()
    except asyncio.CancelledError:
        raise
    except Exception as e:
        logger.info(f"Parallel session {target.id} failed: {e}")
        return {"id": target.id, "url": target.url, "error": str(e)}
    return {"id": target.id, "url": target.url, "content": content}


@tool_envelope(failure="Failed to execute parallel sessions")
async def parallel_sessions(ctx, args):
    """
    Open one fresh session per target and visit them all concurrently.

    Every target settles independently; a failing target yields an ``error``
    entry and never cancels the others. Results keep the input order.
    """
    logger.info(f"Starting parallel sessions for {len(args.sessions)} sessions")
    results = await asyncio.gather(*(_visit(ctx, target) for target in args.sessions))
    return ToolResult.ok(f"Parallel sessions results:\n{_dumps(list(results))}")


__all__ = [
    "create_session",
    "close_session",
    "list_sessions",
    "navigate",
    "screenshot",
    "click",
    "fill",
    "evaluate",
    "get_content",
    "get_json",
    "parallel_sessions",
]
