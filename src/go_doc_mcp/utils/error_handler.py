"""
Decorator-based error handling for MCP entry points.

This module provides consistent error handling across all MCP tools and resources.
Supports both synchronous and asynchronous functions.
"""

import asyncio
import functools
import logging
from typing import Any, Callable, Dict, Union

from ..errors import DocLookupError

logger = logging.getLogger(__name__)


def _format_error(error_message: str, return_type: str) -> Union[str, Dict[str, Any]]:
    if return_type == "dict":
        return {"error": f"Operation failed: {error_message}"}
    else:  # return_type == 'str' (default)
        return f"Error: {error_message}"


def _log_failure(func: Callable, error: Exception) -> None:
    # Lookup failures are expected answers; anything else is a bug worth a traceback
    if isinstance(error, (DocLookupError, ValueError)):
        logger.info(f"{func.__name__} failed: {error}")
    else:
        logger.exception(f"{func.__name__} raised an unexpected error")


def handle_mcp_errors(return_type: str = "str") -> Callable:
    """
    Decorator to handle exceptions in MCP entry points consistently.

    This decorator catches all exceptions and formats them according to the expected
    return type, providing consistent error responses across all MCP entry points.

    Args:
        return_type: The expected return type format
            - 'str': Returns error as string format "Error: {message}"
            - 'dict': Returns error as dict format {"error": "Operation failed: {message}"}

    Returns:
        Decorator function that wraps MCP entry points with error handling

    Example:
        @mcp.tool()
        @handle_mcp_errors(return_type='dict')
        def get_documentation(file_path: str, offset: int, ctx: Context) -> Dict[str, str]:
            return DocumentationService(ctx).get_documentation(file_path, offset)
    """

    def decorator(func: Callable) -> Callable:
        if asyncio.iscoroutinefunction(func):

            @functools.wraps(func)
            async def async_wrapper(*args, **kwargs) -> Union[str, Dict[str, Any]]:
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    _log_failure(func, e)
                    return _format_error(str(e), return_type)

            return async_wrapper
        else:

            @functools.wraps(func)
            def sync_wrapper(*args, **kwargs) -> Union[str, Dict[str, Any]]:
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    _log_failure(func, e)
                    return _format_error(str(e), return_type)

            return sync_wrapper

    return decorator


def handle_mcp_resource_errors(func: Callable) -> Callable:
    """
    Specialized error handler for MCP resources that always return strings.

    Example:
        @mcp.resource("config://go-doc")
        @handle_mcp_resource_errors
        def get_config() -> str:
            ...
    """
    return handle_mcp_errors(return_type="str")(func)


def handle_mcp_tool_errors(return_type: str = "str") -> Callable:
    """
    Specialized error handler for MCP tools with flexible return types.

    Args:
        return_type: The expected return type ('str' or 'dict')

    Returns:
        Decorator function for MCP tools
    """
    return handle_mcp_errors(return_type=return_type)
