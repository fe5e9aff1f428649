"""Error handling decorators for MCP entry points."""
import asyncio

from go_doc_mcp.errors import NoDocumentationFoundError
from go_doc_mcp.utils import handle_mcp_errors, handle_mcp_resource_errors, handle_mcp_tool_errors


def test_tool_errors_as_dict():
    @handle_mcp_tool_errors(return_type='dict')
    def lookup():
        raise NoDocumentationFoundError("Answer")

    assert lookup() == {"error": "Operation failed: No documentation found for Answer"}


def test_resource_errors_as_string():
    @handle_mcp_resource_errors
    def config():
        raise ValueError("bad config")

    assert config() == "Error: bad config"


def test_unexpected_errors_default_to_string():
    @handle_mcp_errors()
    def lookup():
        raise RuntimeError("boom")

    assert lookup() == "Error: boom"


def test_async_functions_are_wrapped():
    @handle_mcp_tool_errors(return_type='dict')
    async def lookup():
        raise NoDocumentationFoundError()

    assert asyncio.run(lookup()) == {"error": "Operation failed: no documentation found"}


def test_successful_results_pass_through():
    @handle_mcp_tool_errors(return_type='dict')
    def lookup():
        return {"name": "Answer"}

    assert lookup() == {"name": "Answer"}
