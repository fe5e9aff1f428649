"""
Data models for the documentation lookup engine.

This module defines the structures shared by the toolchain adapter and the
engine: query positions, resolved symbols, enclosing node chains and the
documentation record returned to callers.
"""

import textwrap
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

from .constants import DEFAULT_LINE_LENGTH, PRE_INDENT, TEXT_INDENT, UNDOCUMENTED


@dataclass(frozen=True)
class Position:
    """A byte offset inside a file. ``path=None`` marks an invalid position."""
    path: Optional[str]
    offset: int = 0

    @property
    def is_valid(self) -> bool:
        return self.path is not None


class SymbolKind(Enum):
    """Kinds of entities an identifier can denote."""
    FUNCTION = "func"
    VARIABLE = "var"
    CONSTANT = "const"
    TYPE_NAME = "type"
    STRUCT_FIELD = "field"
    INTERFACE_METHOD = "method"
    PACKAGE = "package"
    BUILTIN = "builtin"


@dataclass
class Symbol:
    """
    The entity denoted by an identifier.

    Only the identity fields take part in equality; the syntax back-references
    are what the engine uses to find declarations and render them.
    """
    name: str
    kind: SymbolKind
    package_path: str = ""
    package_name: str = ""
    position: Optional[Position] = None
    owner: Optional[str] = None
    embedded: bool = False
    imported_path: str = ""

    # Syntax back-references (tree_sitter nodes and their SourceFile)
    file: Any = field(default=None, compare=False, repr=False)
    decl: Any = field(default=None, compare=False, repr=False)
    type_node: Any = field(default=None, compare=False, repr=False)
    value_node: Any = field(default=None, compare=False, repr=False)
    value_index: int = field(default=0, compare=False, repr=False)
    iota: int = field(default=0, compare=False, repr=False)
    pointer_receiver: bool = field(default=False, compare=False, repr=False)
    range_node: Any = field(default=None, compare=False, repr=False)
    multi_value: bool = field(default=False, compare=False, repr=False)
    variadic: bool = field(default=False, compare=False, repr=False)

    @property
    def is_exported(self) -> bool:
        return is_exported(self.name)

    @property
    def has_position(self) -> bool:
        return self.position is not None and self.position.is_valid


@dataclass
class EnclosingChain:
    """Syntax nodes covering a position, innermost first."""
    file: Any = None
    nodes: List[Any] = field(default_factory=list)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    def __bool__(self) -> bool:
        return bool(self.nodes)


@dataclass
class DocumentationRecord:
    """Documentation for a single Go entity; the engine's only output."""
    name: str
    decl: str
    import_path: str = ""
    pkg: str = ""
    doc: str = ""
    pos: str = ""

    def to_dict(self) -> Dict[str, str]:
        """Return the JSON form, keyed the way editor integrations expect."""
        return {
            "name": self.name,
            "import": self.import_path,
            "pkg": self.pkg,
            "decl": self.decl,
            "doc": self.doc,
            "pos": self.pos,
        }

    def to_text(self, line_length: int = DEFAULT_LINE_LENGTH) -> str:
        """Render the plain-text form printed by the command line tool."""
        parts = []
        if self.import_path:
            parts.append(f'import "{self.import_path}"\n\n')
        parts.append(f"{self.decl}\n\n")
        parts.append(format_doc_text(self.doc or UNDOCUMENTED, line_length))
        return "".join(parts)


def is_exported(name: str) -> bool:
    """Report whether a Go identifier starts with an upper case letter."""
    return bool(name) and name[0].isupper()


def format_doc_text(text: str, line_length: int = DEFAULT_LINE_LENGTH,
                    indent: str = TEXT_INDENT, pre_indent: str = PRE_INDENT) -> str:
    """
    Wrap documentation text for terminal output.

    Paragraphs are separated by blank lines and re-wrapped at ``line_length``
    code points. Indented lines form preformatted blocks that are emitted
    verbatim (after removing their common indentation) behind ``pre_indent``.
    """
    blocks = []
    paragraph: List[str] = []
    preformatted: List[str] = []

    def flush_paragraph():
        if paragraph:
            wrapped = textwrap.fill(
                " ".join(paragraph),
                width=max(line_length, 1),
                initial_indent=indent,
                subsequent_indent=indent,
                break_long_words=False,
                break_on_hyphens=False,
            )
            blocks.append(wrapped + "\n")
            paragraph.clear()

    def flush_preformatted():
        if preformatted:
            # Trailing blank lines belong to the gap, not the block
            while preformatted and not preformatted[-1].strip():
                preformatted.pop()
            body = textwrap.dedent("\n".join(preformatted))
            lines = [pre_indent + line if line.strip() else "" for line in body.split("\n")]
            blocks.append("\n".join(lines) + "\n")
            preformatted.clear()

    for line in text.split("\n"):
        if not line.strip():
            if preformatted:
                preformatted.append("")
            else:
                flush_paragraph()
            continue
        if line[0] in " \t":
            flush_paragraph()
            preformatted.append(line)
        else:
            flush_preformatted()
            paragraph.append(line.strip())
    flush_paragraph()
    flush_preformatted()

    return "\n".join(blocks)
