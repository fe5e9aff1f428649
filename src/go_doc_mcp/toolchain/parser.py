"""
Go parsing using tree-sitter.

This module wraps the tree-sitter Go grammar and exposes parsed files with
byte-accurate positions, Go-style comment groups and a few node helpers
shared by the checker and the engine.
"""

import bisect
import logging
import re
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

import tree_sitter
from tree_sitter_go import language

logger = logging.getLogger(__name__)

# Node types that carry a name the checker can bind
IDENTIFIER_TYPES = frozenset([
    'identifier', 'type_identifier', 'field_identifier', 'package_identifier',
])

# Predeclared names that the grammar turns into dedicated tokens
PREDECLARED_TOKEN_TYPES = frozenset(['iota', 'nil', 'true', 'false'])

NAME_TYPES = IDENTIFIER_TYPES | PREDECLARED_TOKEN_TYPES

GEN_DECL_TYPES = frozenset(['const_declaration', 'var_declaration', 'type_declaration'])
FUNC_DECL_TYPES = frozenset(['function_declaration', 'method_declaration'])
SPEC_TYPES = frozenset(['const_spec', 'var_spec', 'type_spec', 'type_alias'])
METHOD_ELEM_TYPES = frozenset(['method_elem', 'method_spec'])
SPEC_LIST_TYPES = frozenset(['var_spec_list', 'const_spec_list', 'type_spec_list'])

_DIRECTIVE = re.compile(r'^[a-z0-9]+:[a-z0-9]')


@dataclass
class CommentGroup:
    """A run of adjacent comments with no tokens or blank lines between them."""
    comments: List[str] = field(default_factory=list)
    start_byte: int = 0
    end_byte: int = 0
    start_line: int = 0
    end_line: int = 0
    trailing: bool = False

    def text(self) -> str:
        """
        Return the comment text the way Go's ``CommentGroup.Text`` does.

        Comment markers, the first space of line comments and tool directives
        are removed; trailing spaces are trimmed, runs of blank lines collapse
        to one and the result is newline-terminated unless empty.
        """
        lines: List[str] = []
        for raw in self.comments:
            if raw.startswith('//'):
                body = raw[2:]
                if _is_directive(body):
                    continue
                if body.startswith(' '):
                    body = body[1:]
            elif raw.startswith('/*'):
                body = raw[2:-2] if raw.endswith('*/') else raw[2:]
            else:
                body = raw
            lines.extend(line.rstrip() for line in body.split('\n'))

        while lines and not lines[0]:
            lines.pop(0)
        collapsed: List[str] = []
        for line in lines:
            if not line and collapsed and not collapsed[-1]:
                continue
            collapsed.append(line)
        while collapsed and not collapsed[-1]:
            collapsed.pop()
        if not collapsed:
            return ""
        return "\n".join(collapsed) + "\n"


def _is_directive(body: str) -> bool:
    if body.startswith(('line ', 'extern ', 'export ')):
        return True
    return bool(_DIRECTIVE.match(body))


class SourceFile:
    """A parsed Go file with its content, tree and comment groups."""

    def __init__(self, path: str, content: bytes, tree: tree_sitter.Tree):
        self.path = path
        self.content = content
        self.tree = tree
        self.package = None
        self.line_starts = [0]
        for i, byte in enumerate(content):
            if byte == 0x0A:
                self.line_starts.append(i + 1)
        self._comment_groups: Optional[List[CommentGroup]] = None

    def __repr__(self) -> str:
        return f"SourceFile({self.path!r})"

    @property
    def root(self) -> tree_sitter.Node:
        return self.tree.root_node

    @property
    def size(self) -> int:
        return len(self.content)

    @property
    def has_errors(self) -> bool:
        return self.root.has_error

    def text(self, node: Optional[tree_sitter.Node]) -> str:
        if node is None:
            return ""
        return self.slice(node.start_byte, node.end_byte)

    def slice(self, start: int, end: int) -> str:
        return self.content[start:end].decode('utf-8', errors='replace')

    def line_of(self, offset: int) -> int:
        """Zero-based line containing ``offset``."""
        return bisect.bisect_right(self.line_starts, offset) - 1

    def position_string(self, offset: int) -> str:
        """Human readable ``file:line:column`` (1-based, byte columns)."""
        line = self.line_of(offset)
        column = offset - self.line_starts[line] + 1
        return f"{self.path}:{line + 1}:{column}"

    @property
    def package_name(self) -> str:
        for child in self.root.named_children:
            if child.type == 'package_clause':
                for sub in child.named_children:
                    if sub.type in ('package_identifier', 'identifier'):
                        return self.text(sub)
        return ""

    @property
    def package_clause(self) -> Optional[tree_sitter.Node]:
        for child in self.root.named_children:
            if child.type == 'package_clause':
                return child
        return None

    def import_specs(self) -> List[tree_sitter.Node]:
        """Return all import_spec nodes of the file in source order."""
        specs = []
        for child in self.root.named_children:
            if child.type != 'import_declaration':
                continue
            for node in walk(child):
                if node.type == 'import_spec':
                    specs.append(node)
        return specs

    # ----- comments -----

    @property
    def comment_groups(self) -> List[CommentGroup]:
        if self._comment_groups is None:
            self._comment_groups = self._group_comments()
        return self._comment_groups

    def _starts_line(self, offset: int) -> bool:
        line_start = self.line_starts[self.line_of(offset)]
        return not self.content[line_start:offset].strip()

    def _group_comments(self) -> List[CommentGroup]:
        comments = sorted(
            (node for node in walk(self.root) if node.type == 'comment'),
            key=lambda n: n.start_byte,
        )
        groups: List[CommentGroup] = []
        current: Optional[CommentGroup] = None
        for node in comments:
            own_line = self._starts_line(node.start_byte)
            start_new = current is None
            if current is not None:
                gap = self.content[current.end_byte:node.start_byte]
                newlines = gap.count(b'\n')
                if gap.strip() or newlines > 1:
                    start_new = True
                elif current.trailing and newlines >= 1:
                    start_new = True
                elif not own_line and newlines >= 1:
                    start_new = True
            if start_new:
                current = CommentGroup(
                    start_byte=node.start_byte,
                    start_line=self.line_of(node.start_byte),
                    trailing=not own_line,
                )
                groups.append(current)
            current.comments.append(self.text(node))
            current.end_byte = node.end_byte
            current.end_line = self.line_of(max(node.end_byte - 1, node.start_byte))
        return groups

    def lead_comment(self, node: tree_sitter.Node) -> Optional[CommentGroup]:
        """Comment group ending on the line directly above ``node``."""
        if not self._starts_line(node.start_byte):
            return None
        node_line = self.line_of(node.start_byte)
        ends = [g.end_byte for g in self.comment_groups]
        index = bisect.bisect_right(ends, node.start_byte) - 1
        if index < 0:
            return None
        group = self.comment_groups[index]
        if group.trailing or group.end_line != node_line - 1:
            return None
        if self.content[group.end_byte:node.start_byte].strip():
            return None
        return group

    def line_comment(self, node: tree_sitter.Node) -> Optional[CommentGroup]:
        """Comment group starting on the same line right after ``node``."""
        starts = [g.start_byte for g in self.comment_groups]
        index = bisect.bisect_left(starts, node.end_byte)
        if index >= len(self.comment_groups):
            return None
        group = self.comment_groups[index]
        if not group.trailing:
            return None
        gap = self.content[node.end_byte:group.start_byte]
        if b'\n' in gap or gap.strip(b' \t;,'):
            return None
        return group


class GoParser:
    """Go parser using tree-sitter."""

    def __init__(self):
        self.go_language = tree_sitter.Language(language())

    def parse(self, path: str, content: bytes) -> SourceFile:
        """Parse Go source into a SourceFile; syntax errors are recovered, not raised."""
        parser = tree_sitter.Parser(self.go_language)
        tree = parser.parse(content)
        source = SourceFile(path, content, tree)
        if source.has_errors:
            logger.warning(f"Syntax errors in {path}; continuing with recovered tree")
        return source


_default_parser: Optional[GoParser] = None


def get_parser() -> GoParser:
    """Return the shared GoParser instance."""
    global _default_parser
    if _default_parser is None:
        _default_parser = GoParser()
    return _default_parser


# ----- node helpers -----

def walk(node: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
    """Yield ``node`` and all of its descendants in pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def spec_nodes(decl: tree_sitter.Node) -> List[tree_sitter.Node]:
    """Specs of a const/var/type declaration, looking through grouping lists."""
    specs = []
    for child in decl.named_children:
        if child.type in SPEC_TYPES:
            specs.append(child)
        elif child.type in SPEC_LIST_TYPES:
            specs.extend(c for c in child.named_children if c.type in SPEC_TYPES)
    return specs


def name_nodes(node: tree_sitter.Node) -> List[tree_sitter.Node]:
    return list(node.children_by_field_name('name'))


def string_value(source: SourceFile, node: tree_sitter.Node) -> str:
    """Unquote an import path literal."""
    text = source.text(node)
    if len(text) >= 2 and text[0] in '"`' and text[-1] == text[0]:
        return text[1:-1]
    return text
