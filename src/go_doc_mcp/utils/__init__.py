"""
Utility modules for the Go documentation MCP server.

This package contains shared utilities used across services:
- error_handler: Decorator-based error handling for MCP entry points
- context_helper: Context access utilities and helpers
- validation: Common validation logic
- logging_config: Root logger setup
"""

from .context_helper import ContextHelper
from .error_handler import handle_mcp_errors, handle_mcp_resource_errors, handle_mcp_tool_errors
from .logging_config import setup_logging
from .validation import ValidationHelper

__all__ = [
    "handle_mcp_errors",
    "handle_mcp_resource_errors",
    "handle_mcp_tool_errors",
    "ContextHelper",
    "ValidationHelper",
    "setup_logging",
]
