"""
Go Documentation MCP Server

This MCP server lets LLMs and editors ask what the identifier at a byte offset
in a Go source file denotes, returning its declaration and documentation.

MCP decorators stay thin and delegate to the service layer.
"""

import json
import logging
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Dict, Optional

from mcp.server.fastmcp import Context, FastMCP

from .constants import CONFIG_RESOURCE, DEFAULT_LINE_LENGTH, SERVER_NAME
from .engine import BuiltinCatalog, load_builtin_catalog
from .errors import LoadError
from .services import DocumentationService
from .settings import ToolchainSettings
from .utils import handle_mcp_resource_errors, handle_mcp_tool_errors, setup_logging

logger = logging.getLogger(__name__)


@dataclass
class GoDocContext:
    """Context for the Go documentation MCP server."""

    settings: ToolchainSettings
    catalog: Optional[BuiltinCatalog] = None
    query_count: int = 0


@asynccontextmanager
async def godoc_lifespan(_server: FastMCP) -> AsyncIterator[GoDocContext]:
    """Resolve the Go environment once and build the shared builtin catalog."""
    settings = ToolchainSettings.from_env()
    logger.info(f"GOROOT={settings.goroot or '(unset)'} GOPATH={os.pathsep.join(settings.gopath)}")

    catalog = None
    try:
        catalog = load_builtin_catalog(settings)
    except LoadError as e:
        # Lookups retry the load and report the failure per request
        logger.error(f"Builtin catalog unavailable: {e}")

    context = GoDocContext(settings=settings, catalog=catalog)
    try:
        yield context
    finally:
        logger.info(f"Shutting down after {context.query_count} lookups")


mcp = FastMCP(SERVER_NAME, lifespan=godoc_lifespan)

# ----- RESOURCES -----


@mcp.resource(CONFIG_RESOURCE)
@handle_mcp_resource_errors
def get_config() -> str:
    """Get the Go environment the server resolves packages against."""
    ctx = mcp.get_context()
    return json.dumps(DocumentationService(ctx).get_config(), indent=2)


# ----- TOOLS -----


@mcp.tool()
@handle_mcp_tool_errors(return_type="dict")
def get_documentation(
    file_path: str,
    offset: int,
    ctx: Context,
    show_unexported: bool = False,
    modified_files: Optional[Dict[str, str]] = None,
) -> Dict[str, str]:
    """
    Get documentation for the Go identifier at a byte offset.

    Returns a record with name, import, pkg, decl, doc and pos. Identifiers
    inside import specs document the imported package; builtins such as
    append or error document the builtin package.

    Args:
        file_path: Absolute path of the Go source file
        offset: Byte offset of the identifier (not a character index)
        show_unexported: Keep unexported struct fields and interface methods in decl
        modified_files: Unsaved editor buffers keyed by file path
    """
    return DocumentationService(ctx).get_documentation(
        file_path, offset, show_unexported, modified_files
    )


@mcp.tool()
@handle_mcp_tool_errors(return_type="str")
def get_documentation_text(
    file_path: str,
    offset: int,
    ctx: Context,
    show_unexported: bool = False,
    modified_files: Optional[Dict[str, str]] = None,
    line_length: int = DEFAULT_LINE_LENGTH,
) -> str:
    """Get the plain text documentation for the Go identifier at a byte offset."""
    return DocumentationService(ctx).get_documentation_text(
        file_path, offset, show_unexported, modified_files, line_length
    )


def main():
    """Main function to run the MCP server."""
    # Support both stdio (local) and HTTP/SSE modes via environment variable
    transport_mode = os.getenv("MCP_TRANSPORT", "stdio")

    if transport_mode == "http":
        setup_logging(logging.INFO)
        # nosec B104: Binding to 0.0.0.0 is required for containerized deployments
        host = os.getenv("HOST", "0.0.0.0")  # nosec B104
        port = int(os.getenv("PORT", 8080))

        # FastMCP reads host/port from mcp.settings
        mcp.settings.host = host
        mcp.settings.port = port

        logger.info(f"Starting MCP server in HTTP/SSE mode on {host}:{port}")
        mcp.run(transport="sse")
    else:
        # stdout carries the protocol in stdio mode
        setup_logging(logging.INFO, stdout=False)
        mcp.run()


if __name__ == "__main__":
    main()
