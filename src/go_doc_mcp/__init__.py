"""Go Documentation MCP Server.

Looks up the declaration and documentation of the Go identifier at a byte
offset, for editors (command line tool) and LLM clients (MCP server).
"""

__version__ = "0.1.0"

from .engine import document_at
from .errors import (
    DocLookupError, InvalidPositionError, LoadError, NoDocumentationFoundError,
    OutOfRangeError, UnresolvedIdentifierError,
)
from .models import DocumentationRecord, Position

__all__ = [
    "__version__",
    "document_at",
    "DocumentationRecord",
    "Position",
    "DocLookupError",
    "InvalidPositionError",
    "LoadError",
    "NoDocumentationFoundError",
    "OutOfRangeError",
    "UnresolvedIdentifierError",
]
