# mcp_cloud_browser/decorators/envelope.py

import os
import asyncio
import inspect
import logging
import functools
import traceback
from typing import Any, Callable, Optional

from ..results import ToolResult

logger = logging.getLogger(__name__)

__all__ = [
    "tool_envelope",
]


def _args_mapping(args: Any) -> dict:
    if hasattr(args, "model_dump"):
        return args.model_dump()
    if isinstance(args, dict):
        return args
    return {}


def _failure_text(failure: Optional[str], err: Exception, args: Any, include_tb: bool) -> str:
    message = str(err) or err.__class__.__name__
    if failure:
        try:
            prefix = failure.format(**_args_mapping(args))
        except (KeyError, IndexError, ValueError):
            prefix = failure
        message = f"{prefix}: {message}"
    if include_tb:
        message = f"{message}\n\n{traceback.format_exc()}"
    return message


def tool_envelope(_func=None, *, failure: Optional[str] = None):
    """
    Decorator for tool handlers ``handler(ctx, args, ...)``:
      - Works with both async and sync callables.
      - On success: passes a ToolResult through; plain strings become a success result.
      - On error: returns a failure ToolResult with ``"<failure>: <message>"``.
        ``failure`` may reference argument fields, e.g. ``"Failed to click {selector}"``.
    Environment:
      - Set MCP_TOOL_ERRORS_TRACEBACK=1 to append the traceback to failure text.
    """
    include_tb = os.getenv("MCP_TOOL_ERRORS_TRACEBACK", "0") not in ("0", "false", "False")

    def _normalize(value: Any) -> ToolResult:
        if isinstance(value, ToolResult):
            return value
        return ToolResult.ok("" if value is None else str(value))

    def _args_of(args, kwargs):
        if len(args) > 1:
            return args[1]
        return kwargs.get("args")

    def decorator(func: Callable):
        if inspect.iscoroutinefunction(func):
            @functools.wraps(func)
            async def wrapper(*args, **kwargs):
                try:
                    result = await func(*args, **kwargs)
                except asyncio.CancelledError:
                    # Preserve cooperative cancellation semantics
                    raise
                except Exception as e:
                    logger.debug(f"{func.__name__} failed: {e}")
                    return ToolResult.fail(_failure_text(failure, e, _args_of(args, kwargs), include_tb))
                return _normalize(result)
            return wrapper
        else:
            @functools.wraps(func)
            def wrapper(*args, **kwargs):
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    logger.debug(f"{func.__name__} failed: {e}")
                    return ToolResult.fail(_failure_text(failure, e, _args_of(args, kwargs), include_tb))
                return _normalize(result)
            return wrapper

    return decorator if _func is None else decorator(_func)
