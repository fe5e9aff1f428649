"""
Common validation logic for documentation requests.

This module provides shared validation functions used by the CLI and the
services so both surfaces reject bad input the same way.
"""

import os
from typing import Optional

from ..constants import GO_EXTENSION


class ValidationHelper:
    """
    Helper class containing common validation logic.

    This class provides static methods for common validation operations
    that are used across multiple services.
    """

    @staticmethod
    def validate_go_file_path(file_path: str) -> Optional[str]:
        """
        Validate the path of the file a lookup is made in.

        Args:
            file_path: The file path to validate

        Returns:
            Error message if validation fails, None if valid
        """
        if not file_path:
            return "File path cannot be empty"

        if not file_path.endswith(GO_EXTENSION):
            return f"Not a Go source file: {file_path}"

        try:
            os.path.abspath(os.path.normpath(file_path))
        except (OSError, ValueError) as e:
            return f"Invalid path format: {str(e)}"

        return None

    @staticmethod
    def validate_offset(offset) -> Optional[str]:
        """
        Validate a byte offset.

        Returns:
            Error message if validation fails, None if valid
        """
        if isinstance(offset, bool) or not isinstance(offset, int):
            return f"Offset must be an integer, got {offset!r}"
        if offset < 0:
            return f"Offset must not be negative, got {offset}"
        return None

    @staticmethod
    def validate_line_length(line_length) -> Optional[str]:
        if isinstance(line_length, bool) or not isinstance(line_length, int) or line_length <= 0:
            return f"Line length must be a positive integer, got {line_length!r}"
        return None
