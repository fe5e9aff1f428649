"""
Declaration renderer.

Produces the declaration text shown for a symbol: function signatures without
bodies, a single spec out of a grouped declaration and struct or interface
types with unexported members elided. Anything it cannot render falls back to
the symbol's own string form.
"""

import logging
from typing import List, Optional, Tuple

from ..constants import UNEXPORTED_FIELDS_COMMENT, UNEXPORTED_METHODS_COMMENT, VENDOR_SEGMENT
from ..models import Symbol, SymbolKind, is_exported
from ..toolchain.checker import Checker
from ..toolchain.parser import FUNC_DECL_TYPES, METHOD_ELEM_TYPES, SourceFile
from ..toolchain.types import LITERAL_TYPES, TypeRef, signature_string, type_string
from .extractor import DefinitionSite

logger = logging.getLogger(__name__)


def strip_vendor(import_path: str) -> str:
    """Drop everything up to and including the last ``/vendor/`` segment."""
    index = import_path.rfind(VENDOR_SEGMENT)
    if index == -1:
        return import_path
    return import_path[index + len(VENDOR_SEGMENT):]


def _outdent(text: str, indent: str) -> str:
    if not indent:
        return text
    return '\n'.join(line[len(indent):] if line.startswith(indent) else line for line in text.split('\n'))


def _spec_indent(source: SourceFile, node) -> str:
    """Whitespace before ``node`` on its first line, or "" when other text precedes it."""
    line_start = source.line_starts[source.line_of(node.start_byte)]
    prefix = source.slice(line_start, node.start_byte)
    return '' if prefix.strip() else prefix


def _spec_text(source: SourceFile, node) -> str:
    # Specs inside a parenthesized group carry the group's indent on later lines
    head, sep, rest = source.text(node).partition('\n')
    return head + sep + _outdent(rest, _spec_indent(source, node))


class DeclarationRenderer:
    """Renders declarations; ``show_unexported`` keeps unexported members."""

    def __init__(self, checker: Optional[Checker] = None, show_unexported: bool = False):
        self.checker = checker
        self.show_unexported = show_unexported

    def render(self, site: DefinitionSite, symbol: Symbol) -> str:
        text = self._render_site(site, symbol) if site.found else None
        if not text:
            logger.debug(f"Rendering {symbol.name} from its symbol string")
            text = self.symbol_string(symbol)
        return text

    def _render_site(self, site: DefinitionSite, symbol: Symbol) -> Optional[str]:
        source = site.file
        decl = site.decl
        kind = decl.type
        if kind in FUNC_DECL_TYPES:
            body = decl.child_by_field_name('body')
            end = body.start_byte if body is not None else decl.end_byte
            return source.slice(decl.start_byte, end).rstrip()
        if site.spec is None:
            # Fields and interface methods use the symbol form
            return None
        if kind == 'type_declaration':
            return 'type ' + self._render_type_spec(source, site.spec)
        if kind == 'const_declaration':
            return 'const ' + _spec_text(source, site.spec)
        if kind == 'var_declaration':
            if self._type_of(symbol) is not None:
                return None
            return 'var ' + _spec_text(source, site.spec)
        return None

    # ----- struct and interface trimming -----

    def _render_type_spec(self, source: SourceFile, spec) -> str:
        type_node = spec.child_by_field_name('type')
        if self.show_unexported or type_node is None or \
                type_node.type not in ('struct_type', 'interface_type'):
            return _spec_text(source, spec)
        is_interface = type_node.type == 'interface_type'
        kept, trimmed = self._exported_members(source, type_node, is_interface)
        if not trimmed:
            return _spec_text(source, spec)

        keyword = 'interface' if is_interface else 'struct'
        placeholder = UNEXPORTED_METHODS_COMMENT if is_interface else UNEXPORTED_FIELDS_COMMENT
        indent = _spec_indent(source, spec)
        lines = [self._member_text(source, member, indent) for member in kept]
        lines.append('\t' + placeholder)
        header = source.slice(spec.start_byte, type_node.start_byte)
        return header + keyword + ' {\n' + '\n'.join(lines) + '\n}'

    def _exported_members(self, source: SourceFile, type_node, is_interface: bool) -> Tuple[List, bool]:
        if is_interface:
            members = [c for c in type_node.named_children if c.type != 'comment']
        else:
            members = []
            for child in type_node.named_children:
                if child.type == 'field_declaration_list':
                    members = [c for c in child.named_children if c.type == 'field_declaration']
        kept = []
        trimmed = False
        for member in members:
            names = self._member_names(source, member, is_interface)
            if names is None:
                kept.append(member)
                continue
            # A single unexported name hides the whole field
            if all(is_exported(name) for name in names):
                kept.append(member)
            else:
                trimmed = True
        return kept, trimmed

    @staticmethod
    def _member_names(source: SourceFile, member, is_interface: bool) -> Optional[List[str]]:
        """Names deciding a member's visibility, or None when it is always shown."""
        if member.type in METHOD_ELEM_TYPES:
            return [source.text(member.child_by_field_name('name'))]
        if member.type == 'field_declaration':
            names = [source.text(n) for n in member.children_by_field_name('name')]
            if names:
                return names
            type_node = member.child_by_field_name('type')
        else:
            # Embedded interface element
            types = [c for c in member.named_children if c.type != 'comment']
            if len(types) != 1:
                return None
            type_node = types[0]
        if type_node is None:
            return None
        if type_node.type == 'generic_type':
            type_node = type_node.child_by_field_name('type')
        if type_node.type == 'qualified_type':
            return [source.text(type_node.child_by_field_name('name'))]
        if type_node.type in ('type_identifier', 'identifier'):
            name = source.text(type_node)
            if is_interface and name == 'error':
                return None
            return [name]
        return None

    @staticmethod
    def _member_text(source: SourceFile, member, indent: str = '') -> str:
        lead = source.lead_comment(member)
        trailing = source.line_comment(member)
        start = lead.start_byte if lead is not None else member.start_byte
        end = trailing.end_byte if trailing is not None else member.end_byte
        line_start = source.line_starts[source.line_of(start)]
        prefix = source.slice(line_start, start)
        if prefix.strip():
            head, sep, rest = source.slice(start, end).partition('\n')
            return '\t' + head + sep + _outdent(rest, indent)
        return _outdent(source.slice(line_start, end), indent)

    # ----- symbol strings -----

    def _type_of(self, symbol: Symbol) -> Optional[str]:
        if self.checker is None:
            return None
        rendered = type_string(self.checker.type_of_symbol(symbol))
        return rendered or None

    def symbol_string(self, symbol: Symbol) -> str:
        """The canonical one-line form of a symbol."""
        kind = symbol.kind
        name = symbol.name
        if kind is SymbolKind.VARIABLE:
            rendered = self._type_of(symbol)
            return f"var {name} {rendered}" if rendered else f"var {name}"
        if kind is SymbolKind.STRUCT_FIELD:
            rendered = self._type_of(symbol)
            return f"field {name} {rendered}" if rendered else f"field {name}"
        if kind is SymbolKind.CONSTANT:
            return self._constant_string(symbol)
        if kind is SymbolKind.TYPE_NAME:
            if symbol.type_node is None or symbol.file is None:
                return f"type {name}"
            return f"type {name} {type_string(TypeRef(node=symbol.type_node, file=symbol.file))}"
        if kind in (SymbolKind.FUNCTION, SymbolKind.INTERFACE_METHOD):
            return self._func_string(symbol)
        if kind is SymbolKind.PACKAGE:
            return f'package {name} ("{strip_vendor(symbol.imported_path)}")'
        return f"builtin {name}"

    def _constant_string(self, symbol: Symbol) -> str:
        if symbol.type_node is not None and symbol.file is not None:
            return f"const {symbol.name} {symbol.file.text(symbol.type_node)}"
        value = symbol.value_node
        if value is not None and value.type in LITERAL_TYPES:
            return f"const {symbol.name} untyped {LITERAL_TYPES[value.type]}"
        rendered = self._type_of(symbol)
        if rendered:
            return f"const {symbol.name} {rendered}"
        return f"const {symbol.name}"

    @staticmethod
    def _func_string(symbol: Symbol) -> str:
        decl = symbol.decl
        signature = "()"
        if decl is not None and symbol.file is not None:
            signature = signature_string(
                symbol.file, decl.child_by_field_name('parameters'), decl.child_by_field_name('result'))
        if symbol.owner:
            receiver = ('*' if symbol.pointer_receiver else '') + symbol.owner
            return f"func ({receiver}).{symbol.name}{signature}"
        return f"func {symbol.name}{signature}"
