"""
Context access utilities and helpers.

This module provides convenient access to the lifespan data the MCP server
keeps for documentation lookups.
"""

from typing import Optional

from mcp.server.fastmcp import Context

from ..settings import ToolchainSettings


class ContextHelper:
    """
    Helper class for convenient access to MCP Context data.

    Wraps the MCP Context object and exposes the toolchain settings and the
    shared builtin catalog held by the server's lifespan context.
    """

    def __init__(self, ctx: Context):
        self.ctx = ctx

    @property
    def settings(self) -> Optional[ToolchainSettings]:
        """
        Get the toolchain settings from the context.

        Returns:
            The ToolchainSettings instance, or None if not available
        """
        try:
            return self.ctx.request_context.lifespan_context.settings
        except AttributeError:
            return None

    @property
    def catalog(self):
        """
        Get the shared builtin catalog from the context.

        Returns:
            The BuiltinCatalog instance, or None if it has not been built
        """
        try:
            return getattr(self.ctx.request_context.lifespan_context, 'catalog', None)
        except AttributeError:
            return None

    @property
    def query_count(self) -> int:
        try:
            return self.ctx.request_context.lifespan_context.query_count
        except AttributeError:
            return 0

    def record_query(self) -> None:
        """Count a served lookup in the lifespan context."""
        try:
            self.ctx.request_context.lifespan_context.query_count += 1
        except AttributeError:
            pass  # Context not available or doesn't support this operation
