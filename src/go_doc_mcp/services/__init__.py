"""
Service layer for the Go documentation MCP server.

Services hold the request handling logic; the MCP decorators in server.py
stay thin and delegate here.
"""

from .base_service import BaseService
from .documentation_service import DocumentationService

__all__ = [
    'BaseService',
    'DocumentationService',
]
