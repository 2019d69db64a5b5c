# =============================================================================
# core/results.py  —  Turning failures into error-flagged ToolResults
# =============================================================================
#
# Every core operation ends the same way when an SDK call blows up:
#   1. pull a human-readable message out of the exception
#   2. log it
#   3. return ToolResult.error("# Error <Context>\n\n<detail>")
#
# reports_errors() is that boundary, written once.  Decorated operations never
# raise; each failure is isolated to its own invocation and nothing is retried.
# =============================================================================

import functools
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional

from core.models import ToolResult

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Unknown error"


def error_message(exc: BaseException) -> str:
    """Best human-readable message for an exception, never empty."""
    return str(exc) or getattr(exc, "message", None) or GENERIC_ERROR


def error_result(heading: str, detail: str) -> ToolResult:
    return ToolResult.error(f"# Error {heading}\n\n{detail}")


def reports_errors(
    heading: str, context: Optional[str] = None
) -> Callable[[Callable[..., Awaitable[ToolResult]]], Callable[..., Awaitable[ToolResult]]]:
    """Catch anything an async operation raises and return it as an error result.

    Args:
        heading: Appended to "# Error " in the report (e.g. "Deleting Instance").
        context: Optional format string filled from the operation's bound
            arguments, e.g. "Failed to delete instance {name}".  When given,
            the detail reads "<context>: <message>".
    """

    def decorator(fn: Callable[..., Awaitable[ToolResult]]) -> Callable[..., Awaitable[ToolResult]]:
        signature = inspect.signature(fn)

        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> ToolResult:
            try:
                return await fn(*args, **kwargs)
            except Exception as e:
                message = error_message(e)
                detail = message
                if context:
                    bound = signature.bind_partial(*args, **kwargs)
                    bound.apply_defaults()
                    detail = f"{context.format(**bound.arguments)}: {message}"
                logger.error("Error %s: %s", heading.lower(), detail)
                return error_result(heading, detail)

        return wrapper

    return decorator
