"""
Base service class providing common functionality for all services.

This module defines the base service pattern that domain services inherit from,
ensuring consistent validation and context access across the service layer.
"""

from abc import ABC

from mcp.server.fastmcp import Context

from ..settings import ToolchainSettings
from ..utils import ContextHelper, ValidationHelper


class BaseService(ABC):
    """
    Base class for all MCP services.

    This class provides common functionality that all services need:
    - Context management through ContextHelper
    - Request validation that raises ValueError with a readable message
    """

    def __init__(self, ctx: Context):
        """
        Initialize the base service.

        Args:
            ctx: The MCP Context object containing request and lifespan context
        """
        self.ctx = ctx
        self.helper = ContextHelper(ctx)

    @property
    def settings(self) -> ToolchainSettings:
        """Settings from the lifespan context, else resolved from the environment."""
        settings = self.helper.settings
        if settings is None:
            settings = ToolchainSettings.from_env()
        return settings

    def _require_valid_file_path(self, file_path: str) -> None:
        """
        Ensure the file path names a Go source file.

        Raises:
            ValueError: If the path is not valid
        """
        error = ValidationHelper.validate_go_file_path(file_path)
        if error:
            raise ValueError(error)

    def _require_valid_offset(self, offset) -> None:
        error = ValidationHelper.validate_offset(offset)
        if error:
            raise ValueError(error)

    def _require_valid_line_length(self, line_length) -> None:
        error = ValidationHelper.validate_line_length(line_length)
        if error:
            raise ValueError(error)
