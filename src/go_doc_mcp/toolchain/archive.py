"""
Overlay archives of modified files.

Editors send unsaved buffers as an archive: the file name, a newline, the
decimal size in bytes, another newline and then the contents, repeated for
every modified file.
"""

import io
import os
from typing import BinaryIO, Dict, Union

from ..errors import LoadError

MODIFIED_USAGE = """
The archive format for the -modified flag consists of the file name, followed
by a newline, the decimal file size, another newline, and the contents of the file.

This allows editors to supply unsaved buffer contents.
"""


def parse_overlay_archive(source: Union[bytes, str, BinaryIO]) -> Dict[str, bytes]:
    """
    Parse an overlay archive into a mapping of absolute path to contents.

    Args:
        source: Archive bytes, text, or a binary stream

    Returns:
        Dictionary of normalised absolute file paths to file contents

    Raises:
        LoadError: If the archive is truncated or a size is not a number
    """
    if isinstance(source, str):
        source = source.encode('utf-8')
    stream = io.BytesIO(source) if isinstance(source, bytes) else source

    overlay: Dict[str, bytes] = {}
    while True:
        name_line = stream.readline()
        if not name_line:
            break
        filename = name_line.rstrip(b'\n').decode('utf-8')
        if not filename:
            continue
        size_line = stream.readline()
        if not size_line:
            raise LoadError(f"invalid archive: missing size for {filename}")
        try:
            size = int(size_line.strip())
        except ValueError as e:
            raise LoadError(f"invalid archive: bad size for {filename}: {size_line!r}") from e
        if size < 0:
            raise LoadError(f"invalid archive: negative size for {filename}")
        content = stream.read(size)
        if len(content) != size:
            raise LoadError(
                f"invalid archive: expected {size} bytes for {filename}, got {len(content)}"
            )
        overlay[normalize_path(filename)] = content
    return overlay


def normalize_path(path: str) -> str:
    return os.path.normcase(os.path.abspath(path))
