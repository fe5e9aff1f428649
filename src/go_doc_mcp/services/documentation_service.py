"""
Documentation service for position based lookups.

Validates requests, turns editor overlays into the loader's form and runs
the engine with the settings and builtin catalog from the lifespan context.
"""

import logging
import os
from typing import Any, Dict, Optional

from ..constants import DEFAULT_LINE_LENGTH
from ..engine import document_at, load_builtin_catalog
from ..models import DocumentationRecord
from ..toolchain.archive import normalize_path
from .base_service import BaseService

logger = logging.getLogger(__name__)


class DocumentationService(BaseService):
    """Answers get_documentation requests from the MCP tools."""

    def get_documentation(self, file_path: str, offset: int, show_unexported: bool = False,
                          modified_files: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """
        Return the documentation record for the identifier at ``offset``.

        Args:
            file_path: Go source file containing the position
            offset: Byte offset into the file
            show_unexported: Keep unexported struct fields and interface methods
            modified_files: Unsaved contents keyed by file path

        Returns:
            The record's JSON form

        Raises:
            ValueError: If the request is malformed
            DocLookupError: If the lookup itself fails
        """
        return self._lookup(file_path, offset, show_unexported, modified_files).to_dict()

    def get_documentation_text(self, file_path: str, offset: int, show_unexported: bool = False,
                               modified_files: Optional[Dict[str, str]] = None,
                               line_length: int = DEFAULT_LINE_LENGTH) -> str:
        """Return the plain text rendering of the record, wrapped at ``line_length``."""
        self._require_valid_line_length(line_length)
        record = self._lookup(file_path, offset, show_unexported, modified_files)
        return record.to_text(line_length)

    def get_config(self) -> Dict[str, Any]:
        """Return the active toolchain settings and the number of lookups served."""
        config = self.settings.to_dict()
        config["queries_served"] = self.helper.query_count
        return config

    def _lookup(self, file_path: str, offset: int, show_unexported: bool,
                modified_files: Optional[Dict[str, str]]) -> DocumentationRecord:
        self._require_valid_file_path(file_path)
        self._require_valid_offset(offset)

        settings = self.settings
        catalog = self.helper.catalog
        if catalog is None:
            catalog = load_builtin_catalog(settings)

        path = os.path.abspath(file_path)
        logger.info(f"Looking up documentation at {path}:#{offset}")
        record = document_at(
            path,
            offset,
            show_unexported=show_unexported,
            overlay=_overlay_from(modified_files),
            settings=settings,
            catalog=catalog,
        )
        self.helper.record_query()
        return record


def _overlay_from(modified_files: Optional[Dict[str, str]]) -> Optional[Dict[str, bytes]]:
    if not modified_files:
        return None
    overlay = {}
    for name, content in modified_files.items():
        data = content.encode('utf-8') if isinstance(content, str) else content
        overlay[normalize_path(name)] = data
    return overlay
