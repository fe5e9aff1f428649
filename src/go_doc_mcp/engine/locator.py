"""
Position locator.

Maps a (file, byte offset) position to the chain of syntax nodes covering it,
innermost first.
"""

import logging
from typing import Optional

from ..errors import OutOfRangeError
from ..models import EnclosingChain, Position
from ..toolchain.loader import Program
from ..toolchain.parser import SourceFile

logger = logging.getLogger(__name__)


class PositionLocator:
    """Finds enclosing node chains in the files of a loaded Program."""

    def __init__(self, program: Program):
        self.program = program

    def locate(self, position: Position) -> EnclosingChain:
        """
        Return the chain of nodes enclosing ``position``.

        The queried package is searched first, then every imported package
        that has been loaded. An empty chain means no loaded file owns the
        position, which is how predeclared identifiers are recognised.

        Raises:
            OutOfRangeError: If the offset lies outside the owning file
        """
        if not position.is_valid:
            return EnclosingChain()
        source = self.program.find_file(position.path)
        if source is None:
            logger.debug(f"No loaded file contains {position.path}")
            return EnclosingChain()
        return chain_at(source, position.offset)


def chain_at(source: SourceFile, offset: int) -> EnclosingChain:
    """Descend from the file root to the deepest node covering ``offset``."""
    if offset < 0 or offset > source.size:
        raise OutOfRangeError(source.path, offset, source.size)

    nodes = [source.root]
    current = source.root
    while True:
        child = _child_at(current, offset)
        if child is None:
            break
        nodes.append(child)
        current = child
    nodes.reverse()
    return EnclosingChain(file=source, nodes=nodes)


def _child_at(node, offset: int) -> Optional[object]:
    after = None
    for child in node.children:
        if child.start_byte <= offset < child.end_byte:
            return child
        # A cursor right after the last byte of a token still selects it
        if child.start_byte < offset == child.end_byte:
            after = child
    return after
