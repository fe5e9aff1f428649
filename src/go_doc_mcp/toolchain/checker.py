"""
Name binding for Go syntax trees.

The checker maps identifier nodes to the Symbols they denote. It indexes every
defining occurrence of a file once (package members, methods, struct fields,
interface methods, locals and parameters) and resolves uses through the
lexical scopes of the tree, the file's imports, the package scope and the
universe. Expression types are inferred just far enough to follow selectors
through fields, methods and embedded types.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

from ..models import Position, Symbol, SymbolKind
from .loader import Package, Program
from .parser import (
    FUNC_DECL_TYPES, IDENTIFIER_TYPES, METHOD_ELEM_TYPES, PREDECLARED_TOKEN_TYPES,
    SourceFile, name_nodes, spec_nodes, string_value, walk,
)
from .types import (
    LITERAL_TYPES, TypeRef, basic_type, element_of, key_of, parameters, result_types,
)

logger = logging.getLogger(__name__)

_MAX_DEPTH = 24

UNIVERSE_TYPES = frozenset([
    'any', 'bool', 'byte', 'comparable', 'complex64', 'complex128', 'error',
    'float32', 'float64', 'int', 'int8', 'int16', 'int32', 'int64', 'rune',
    'string', 'uint', 'uint8', 'uint16', 'uint32', 'uint64', 'uintptr',
])
UNIVERSE_FUNCS = frozenset([
    'append', 'cap', 'clear', 'close', 'complex', 'copy', 'delete', 'imag',
    'len', 'make', 'max', 'min', 'new', 'panic', 'print', 'println', 'real',
    'recover',
])
UNIVERSE_CONSTS = frozenset(['true', 'false', 'iota'])

_SCOPE_STATEMENTS = ('block', 'statement_list', 'expression_case', 'type_case',
                     'default_case', 'communication_case')
_TYPE_NAME_NODES = ('type_identifier', 'identifier', 'qualified_type', 'generic_type',
                    'selector_expression')
_COMPARISON_OPERATORS = frozenset(['==', '!=', '<', '<=', '>', '>=', '&&', '||'])


@dataclass
class PackageScope:
    """Package level members and the methods declared for each named type."""
    members: Dict[str, Symbol] = field(default_factory=dict)
    methods: Dict[str, Dict[str, Symbol]] = field(default_factory=dict)


@dataclass
class ImportEntry:
    spec: object
    path: str
    alias: str = ""


def node_key(source: SourceFile, node) -> Tuple[str, int, int]:
    return (source.path, node.start_byte, node.end_byte)


def _expressions(node) -> List:
    if node is None:
        return []
    if node.type == 'expression_list':
        return [child for child in node.named_children if child.type != 'comment']
    return [node]


def _has_token(node, token: str) -> bool:
    return any(child.type == token for child in node.children)


class Checker:
    """Best-effort type checker for a loaded Program."""

    def __init__(self, program: Program):
        self.program = program
        self._defs: Dict[Tuple[str, int, int], Symbol] = {}
        self._scopes: Dict[int, PackageScope] = {}
        self._imports: Dict[str, List[ImportEntry]] = {}
        self._import_symbols: Dict[Tuple[str, int, int], Symbol] = {}
        self._universe: Dict[str, Symbol] = {}
        self._case_symbols: Dict[Tuple[str, int, int], Symbol] = {}

    # ----- public API -----

    def object_of(self, source: SourceFile, node) -> Optional[Symbol]:
        """Return the Symbol an identifier defines or refers to, or None."""
        if source.package is None:
            return None
        self._ensure_package(source.package)
        symbol = self._defs.get(node_key(source, node))
        if symbol is not None:
            return symbol
        return self._resolve_use(source, node)

    def package_scope(self, package: Package) -> PackageScope:
        self._ensure_package(package)
        return self._scopes[id(package)]

    def imported_package(self, symbol: Symbol) -> Optional[Package]:
        """Load the package a PACKAGE symbol refers to."""
        if symbol.kind is not SymbolKind.PACKAGE or symbol.decl is None or symbol.file is None:
            return None
        path = string_value(symbol.file, symbol.decl.child_by_field_name('path'))
        return self.program.import_package(path, symbol.file.package)

    def embedded_type_symbol(self, field_symbol: Symbol) -> Optional[Symbol]:
        """The type an embedded field names."""
        if field_symbol.type_node is None or field_symbol.file is None:
            return None
        return self._named_type(TypeRef(node=field_symbol.type_node, file=field_symbol.file))

    def methods_of(self, type_symbol: Symbol) -> Dict[str, Symbol]:
        if type_symbol.file is None or type_symbol.file.package is None:
            return {}
        return self.package_scope(type_symbol.file.package).methods.get(type_symbol.name, {})

    # ----- indexing -----

    def _ensure_package(self, package: Package):
        if id(package) in self._scopes:
            return
        scope = PackageScope()
        self._scopes[id(package)] = scope
        for source in package.files:
            self._index_file(source, package, scope)
        logger.debug(f"Indexed {package}: {len(scope.members)} members")

    def _symbol(self, source: SourceFile, package: Package, name_node, kind: SymbolKind, **kwargs) -> Symbol:
        symbol = Symbol(
            name=source.text(name_node),
            kind=kind,
            package_path=package.import_path,
            package_name=package.name,
            position=Position(source.path, name_node.start_byte),
            file=source,
            **kwargs,
        )
        self._defs[node_key(source, name_node)] = symbol
        return symbol

    def _index_file(self, source: SourceFile, package: Package, scope: PackageScope):
        for node in walk(source.root):
            kind = node.type
            top_level = node.parent is not None and node.parent.type == 'source_file'
            if kind == 'function_declaration':
                name = node.child_by_field_name('name')
                if name is not None:
                    symbol = self._symbol(source, package, name, SymbolKind.FUNCTION, decl=node)
                    if top_level and symbol.name not in ('init', '_'):
                        scope.members[symbol.name] = symbol
                self._declare_signature(source, package, node)
            elif kind == 'method_declaration':
                self._declare_method(source, package, node, scope)
            elif kind == 'func_literal':
                self._declare_signature(source, package, node)
            elif kind in ('const_declaration', 'var_declaration', 'type_declaration'):
                members = scope.members if top_level else None
                if kind == 'const_declaration':
                    self._declare_consts(source, package, node, members)
                elif kind == 'var_declaration':
                    self._declare_vars(source, package, node, members)
                else:
                    self._declare_types(source, package, node, members)
            elif kind == 'short_var_declaration':
                self._declare_assignment(source, package, node, node.child_by_field_name('left'),
                                         node.child_by_field_name('right'))
            elif kind == 'range_clause' and _has_token(node, ':='):
                right = node.child_by_field_name('right')
                for index, name in enumerate(_expressions(node.child_by_field_name('left'))):
                    if name.type == 'identifier' and source.text(name) != '_':
                        self._symbol(source, package, name, SymbolKind.VARIABLE, decl=node,
                                     range_node=right, value_index=index)
            elif kind == 'receive_statement' and _has_token(node, ':='):
                self._declare_assignment(source, package, node, node.child_by_field_name('left'),
                                         node.child_by_field_name('right'))
            elif kind == 'type_switch_statement':
                for name in _expressions(node.child_by_field_name('alias')):
                    if name.type == 'identifier':
                        self._symbol(source, package, name, SymbolKind.VARIABLE, decl=node)
            elif kind == 'field_declaration':
                self._declare_field(source, package, node)
            elif kind in METHOD_ELEM_TYPES:
                name = node.child_by_field_name('name')
                if name is not None:
                    self._symbol(source, package, name, SymbolKind.INTERFACE_METHOD, decl=node,
                                 owner=self._owner_name(source, node))
                self._declare_signature(source, package, node)
            elif kind == 'function_type':
                self._declare_signature(source, package, node)

    def _declare_signature(self, source, package, node):
        for field_name in ('receiver', 'parameters', 'result'):
            params = node.child_by_field_name(field_name)
            if params is None or params.type != 'parameter_list':
                continue
            for decl in params.named_children:
                if decl.type not in ('parameter_declaration', 'variadic_parameter_declaration'):
                    continue
                for name in decl.children_by_field_name('name'):
                    if source.text(name) == '_':
                        continue
                    self._symbol(source, package, name, SymbolKind.VARIABLE, decl=decl,
                                 type_node=decl.child_by_field_name('type'),
                                 variadic=decl.type == 'variadic_parameter_declaration')
        type_params = node.child_by_field_name('type_parameters')
        if type_params is not None:
            for decl in type_params.named_children:
                for name in decl.children_by_field_name('name'):
                    self._symbol(source, package, name, SymbolKind.TYPE_NAME, decl=decl,
                                 type_node=decl.child_by_field_name('type'))

    def _declare_method(self, source, package, node, scope):
        receiver_type, pointer = self._receiver_type(node)
        owner = source.text(receiver_type) if receiver_type is not None else ""
        name = node.child_by_field_name('name')
        if name is not None:
            symbol = self._symbol(source, package, name, SymbolKind.FUNCTION, decl=node,
                                  owner=owner, pointer_receiver=pointer)
            if owner:
                scope.methods.setdefault(owner, {})[symbol.name] = symbol
        self._declare_signature(source, package, node)

    @staticmethod
    def _receiver_type(node):
        receiver = node.child_by_field_name('receiver')
        if receiver is None:
            return None, False
        for decl in receiver.named_children:
            if decl.type != 'parameter_declaration':
                continue
            type_node = decl.child_by_field_name('type')
            pointer = False
            while type_node is not None and type_node.type in ('pointer_type', 'parenthesized_type'):
                pointer = pointer or type_node.type == 'pointer_type'
                type_node = type_node.named_children[-1] if type_node.named_children else None
            if type_node is not None and type_node.type == 'generic_type':
                type_node = type_node.child_by_field_name('type')
            return type_node, pointer
        return None, False

    def _declare_consts(self, source, package, decl, members):
        values: List = []
        type_node = None
        for iota, spec in enumerate(spec_nodes(decl)):
            value_list = spec.child_by_field_name('value')
            if value_list is not None:
                # An explicit value list resets the repeated expressions
                values = _expressions(value_list)
                type_node = spec.child_by_field_name('type')
            for index, name in enumerate(name_nodes(spec)):
                symbol = self._symbol(
                    source, package, name, SymbolKind.CONSTANT, decl=decl, type_node=type_node,
                    value_node=values[index] if index < len(values) else None,
                    value_index=index, iota=iota,
                )
                if members is not None and symbol.name != '_':
                    members[symbol.name] = symbol

    def _declare_vars(self, source, package, decl, members):
        for spec in spec_nodes(decl):
            values = _expressions(spec.child_by_field_name('value'))
            names = name_nodes(spec)
            multi = len(values) == 1 and len(names) > 1
            for index, name in enumerate(names):
                value = values[0] if multi else (values[index] if index < len(values) else None)
                symbol = self._symbol(
                    source, package, name, SymbolKind.VARIABLE, decl=decl,
                    type_node=spec.child_by_field_name('type'), value_node=value,
                    value_index=index, multi_value=multi,
                )
                if members is not None and symbol.name != '_':
                    members[symbol.name] = symbol

    def _declare_types(self, source, package, decl, members):
        for spec in spec_nodes(decl):
            name = spec.child_by_field_name('name')
            if name is None:
                continue
            symbol = self._symbol(source, package, name, SymbolKind.TYPE_NAME, decl=decl,
                                  type_node=spec.child_by_field_name('type'))
            if members is not None:
                members[symbol.name] = symbol

    def _declare_assignment(self, source, package, node, left, right):
        values = _expressions(right)
        names = _expressions(left)
        multi = len(values) == 1 and len(names) > 1
        for index, name in enumerate(names):
            if name.type != 'identifier' or source.text(name) == '_':
                continue
            value = values[0] if multi else (values[index] if index < len(values) else None)
            self._symbol(source, package, name, SymbolKind.VARIABLE, decl=node,
                         value_node=value, value_index=index, multi_value=multi)

    def _declare_field(self, source, package, node):
        owner = self._owner_name(source, node)
        type_node = node.child_by_field_name('type')
        names = name_nodes(node)
        for name in names:
            self._symbol(source, package, name, SymbolKind.STRUCT_FIELD, decl=node,
                         type_node=type_node, owner=owner)
        if not names and type_node is not None:
            name = self._embedded_name(type_node)
            if name is not None:
                self._symbol(source, package, name, SymbolKind.STRUCT_FIELD, decl=node,
                             type_node=type_node, owner=owner, embedded=True)

    @staticmethod
    def _embedded_name(type_node):
        if type_node.type == 'generic_type':
            type_node = type_node.child_by_field_name('type')
        if type_node is not None and type_node.type == 'qualified_type':
            return type_node.child_by_field_name('name')
        return type_node

    @staticmethod
    def _owner_name(source, node) -> str:
        current = node.parent
        while current is not None:
            if current.type in ('struct_type', 'interface_type'):
                spec = current.parent
                if spec is not None and spec.type in ('type_spec', 'type_alias'):
                    return source.text(spec.child_by_field_name('name'))
                return ""
            current = current.parent
        return ""

    # ----- uses -----

    def _resolve_use(self, source: SourceFile, node) -> Optional[Symbol]:
        kind = node.type
        parent = node.parent
        if kind in PREDECLARED_TOKEN_TYPES:
            return self._universe_symbol(kind)
        if kind not in IDENTIFIER_TYPES:
            return None
        name = source.text(node)
        if parent is not None:
            if parent.type == 'selector_expression' and _same(parent.child_by_field_name('field'), node):
                return self._resolve_selector(source, parent)
            if parent.type == 'qualified_type' and _same(parent.child_by_field_name('name'), node):
                package = self._package_named(source, parent.child_by_field_name('package'))
                return self.package_scope(package).members.get(name) if package else None
            if kind == 'package_identifier' and parent.type == 'import_spec':
                return self._import_symbol(source, name)
        if kind == 'field_identifier' or self._is_composite_key(node):
            member = self._resolve_composite_key(source, node)
            if member is not None or kind == 'field_identifier':
                return member
        return self._lookup(source, node, name)

    def _lookup(self, source: SourceFile, node, name: str) -> Optional[Symbol]:
        symbol = self._lookup_lexical(source, node, name)
        if symbol is not None:
            return symbol
        symbol = self._import_symbol(source, name)
        if symbol is not None:
            return symbol
        symbol = self.package_scope(source.package).members.get(name)
        if symbol is not None:
            return symbol
        for entry in self._file_imports(source):
            if entry.alias == '.':
                package = self.program.import_package(entry.path, source.package)
                if package is not None:
                    member = self.package_scope(package).members.get(name)
                    if member is not None:
                        return member
        symbol = self._universe_symbol(name)
        if symbol is not None:
            return symbol
        # Packages whose name differs from the last element of their path
        return self._import_symbol(source, name, exhaustive=True)

    def _universe_symbol(self, name: str) -> Optional[Symbol]:
        if name in self._universe:
            return self._universe[name]
        if name in UNIVERSE_FUNCS:
            kind = SymbolKind.BUILTIN
        elif name in UNIVERSE_TYPES:
            kind = SymbolKind.TYPE_NAME
        elif name in UNIVERSE_CONSTS:
            kind = SymbolKind.CONSTANT
        elif name == 'nil':
            kind = SymbolKind.VARIABLE
        else:
            return None
        symbol = Symbol(name=name, kind=kind)
        self._universe[name] = symbol
        return symbol

    def _lookup_lexical(self, source: SourceFile, node, name: str) -> Optional[Symbol]:
        offset = node.start_byte
        child = node
        current = node.parent
        while current is not None and current.type != 'source_file':
            for name_node in self._scope_names(current, child, offset):
                if source.text(name_node) == name:
                    symbol = self._defs.get(node_key(source, name_node))
                    if symbol is not None:
                        if current.type == 'type_switch_statement' and child.type == 'type_case' \
                                and _same(symbol.decl, current):
                            return self._case_binding(source, child, symbol)
                        return symbol
            child = current
            current = current.parent
        return None

    def _case_binding(self, source: SourceFile, case, symbol: Symbol) -> Symbol:
        """The type switch variable inside a clause that names a single type."""
        types = case.children_by_field_name('type')
        if len(types) != 1 or source.text(types[0]) == 'nil':
            return symbol
        key = node_key(source, case)
        if key not in self._case_symbols:
            self._case_symbols[key] = replace(symbol, type_node=types[0])
        return self._case_symbols[key]

    def _scope_names(self, scope, child, offset: int) -> List:
        """Names declared by ``scope`` that are visible at ``offset``."""
        names: List = []
        kind = scope.type
        if kind in _SCOPE_STATEMENTS:
            if kind == 'communication_case':
                names.extend(self._declared_names(scope.child_by_field_name('communication'), offset))
            for statement in scope.named_children:
                if statement.start_byte >= offset:
                    break
                names.extend(self._declared_names(statement, offset))
        elif kind in ('if_statement', 'expression_switch_statement', 'type_switch_statement'):
            names.extend(self._declared_names(scope.child_by_field_name('initializer'), offset))
            if kind == 'type_switch_statement':
                value = scope.child_by_field_name('value')
                if value is not None and value.end_byte <= offset:
                    names.extend(n for n in _expressions(scope.child_by_field_name('alias'))
                                 if n.type == 'identifier')
        elif kind == 'for_statement':
            for clause in scope.named_children:
                if clause.type == 'for_clause':
                    names.extend(self._declared_names(clause.child_by_field_name('initializer'), offset))
                elif clause.type == 'range_clause':
                    names.extend(self._declared_names(clause, offset))
        elif kind in FUNC_DECL_TYPES or kind == 'func_literal':
            for field_name in ('receiver', 'parameters', 'result'):
                params = scope.child_by_field_name(field_name)
                if params is not None and params.type == 'parameter_list':
                    for decl in params.named_children:
                        names.extend(decl.children_by_field_name('name'))
            type_params = scope.child_by_field_name('type_parameters')
            if type_params is not None:
                for decl in type_params.named_children:
                    names.extend(decl.children_by_field_name('name'))
        return names

    def _declared_names(self, statement, offset: int) -> List:
        if statement is None:
            return []
        kind = statement.type
        if kind == 'type_declaration':
            return [spec.child_by_field_name('name') for spec in spec_nodes(statement)
                    if spec.child_by_field_name('name') is not None]
        if statement.end_byte > offset:
            return []
        if kind in ('var_declaration', 'const_declaration'):
            return [name for spec in spec_nodes(statement) for name in name_nodes(spec)]
        if kind == 'short_var_declaration':
            return [n for n in _expressions(statement.child_by_field_name('left')) if n.type == 'identifier']
        if kind in ('range_clause', 'receive_statement') and _has_token(statement, ':='):
            return [n for n in _expressions(statement.child_by_field_name('left')) if n.type == 'identifier']
        if kind == 'labeled_statement':
            inner = [c for c in statement.named_children if c.type != 'label_name']
            return self._declared_names(inner[0], offset) if inner else []
        return []

    # ----- imports -----

    def _file_imports(self, source: SourceFile) -> List[ImportEntry]:
        if source.path not in self._imports:
            entries = []
            for spec in source.import_specs():
                path_node = spec.child_by_field_name('path')
                if path_node is None:
                    continue
                alias_node = spec.child_by_field_name('name')
                entries.append(ImportEntry(
                    spec=spec,
                    path=string_value(source, path_node),
                    alias=source.text(alias_node) if alias_node is not None else "",
                ))
            self._imports[source.path] = entries
        return self._imports[source.path]

    def _import_symbol(self, source: SourceFile, name: str, exhaustive: bool = False) -> Optional[Symbol]:
        if name in ('_', '.'):
            return None
        entries = self._file_imports(source)
        candidates = [e for e in entries if e.alias == name]
        unaliased = [e for e in entries if not e.alias]
        candidates.extend(e for e in unaliased if _guess_package_name(e.path) == name)
        if exhaustive:
            candidates.extend(e for e in unaliased if _guess_package_name(e.path) != name)
        for entry in candidates:
            package = self.program.import_package(entry.path, source.package)
            local = entry.alias or (package.name if package else _guess_package_name(entry.path))
            if local != name:
                continue
            key = node_key(source, entry.spec)
            if key not in self._import_symbols:
                alias_node = entry.spec.child_by_field_name('name')
                anchor = alias_node if alias_node is not None else entry.spec.child_by_field_name('path')
                self._import_symbols[key] = Symbol(
                    name=name,
                    kind=SymbolKind.PACKAGE,
                    package_path=source.package.import_path,
                    package_name=source.package.name,
                    position=Position(source.path, anchor.start_byte),
                    imported_path=package.import_path if package else entry.path,
                    file=source,
                    decl=entry.spec,
                )
            return self._import_symbols[key]
        return None

    def _package_named(self, source: SourceFile, node) -> Optional[Package]:
        if node is None:
            return None
        symbol = self.object_of(source, node)
        if symbol is None or symbol.kind is not SymbolKind.PACKAGE:
            return None
        return self.imported_package(symbol)

    # ----- selectors and members -----

    def _resolve_selector(self, source: SourceFile, selector) -> Optional[Symbol]:
        operand = selector.child_by_field_name('operand')
        name = source.text(selector.child_by_field_name('field'))
        if operand is None:
            return None
        if operand.type == 'identifier':
            target = self.object_of(source, operand)
            if target is not None and target.kind is SymbolKind.PACKAGE:
                package = self.imported_package(target)
                return self.package_scope(package).members.get(name) if package else None
            if target is not None and target.kind is SymbolKind.TYPE_NAME:
                return self.lookup_member(TypeRef(node=operand, file=source), name)
        operand_type = self.type_of(source, operand)
        if operand_type is None:
            return None
        return self.lookup_member(operand_type, name)

    def lookup_member(self, ref: TypeRef, name: str, depth: int = 0) -> Optional[Symbol]:
        """Find a field or method ``name`` on ``ref``, following embedded types."""
        if ref is None or depth > _MAX_DEPTH:
            return None
        while ref.pointer or (ref.node is not None and ref.node.type == 'pointer_type'):
            ref = ref.deref()
        named = self._named_type(ref)
        underlying = ref
        if named is not None:
            if named.file is None:
                # Predeclared types: only error has a method
                if named.name == 'error' and name == 'Error':
                    return Symbol(name='Error', kind=SymbolKind.INTERFACE_METHOD, owner='error')
                return None
            method = self.methods_of(named).get(name)
            if method is not None:
                return method
            if named.type_node is None:
                return None
            underlying = TypeRef(node=named.type_node, file=named.file)
            if underlying.node.type in _TYPE_NAME_NODES or underlying.node.type == 'pointer_type':
                return self.lookup_member(underlying, name, depth + 1)
        node = underlying.node
        if node is None:
            return None
        if node.type == 'parenthesized_type' and node.named_children:
            return self.lookup_member(TypeRef(node=node.named_children[0], file=underlying.file), name, depth + 1)
        if node.type == 'struct_type':
            return self._struct_member(underlying.file, node, name, depth)
        if node.type == 'interface_type':
            return self._interface_member(underlying.file, node, name, depth)
        return None

    def _struct_member(self, source, struct_node, name, depth) -> Optional[Symbol]:
        embedded = []
        for body in struct_node.named_children:
            if body.type != 'field_declaration_list':
                continue
            for decl in body.named_children:
                if decl.type != 'field_declaration':
                    continue
                names = name_nodes(decl)
                for name_node in names:
                    if source.text(name_node) == name:
                        return self._defs.get(node_key(source, name_node))
                type_node = decl.child_by_field_name('type')
                if not names and type_node is not None:
                    name_node = self._embedded_name(type_node)
                    if name_node is not None and source.text(name_node) == name:
                        return self._defs.get(node_key(source, name_node))
                    embedded.append(type_node)
        for type_node in embedded:
            member = self.lookup_member(TypeRef(node=type_node, file=source), name, depth + 1)
            if member is not None:
                return member
        return None

    def _interface_member(self, source, interface_node, name, depth) -> Optional[Symbol]:
        embedded = []
        for child in interface_node.named_children:
            if child.type in METHOD_ELEM_TYPES:
                name_node = child.child_by_field_name('name')
                if name_node is not None and source.text(name_node) == name:
                    return self._defs.get(node_key(source, name_node))
            elif child.type in ('type_elem', 'constraint_elem', 'interface_type_name'):
                embedded.extend(c for c in child.named_children if c.type in _TYPE_NAME_NODES)
        for type_node in embedded:
            member = self.lookup_member(TypeRef(node=type_node, file=source), name, depth + 1)
            if member is not None:
                return member
        return None

    def _named_type(self, ref: TypeRef) -> Optional[Symbol]:
        """The TYPE_NAME symbol a type expression names, if it names one."""
        node = ref.node
        if node is None:
            return self._universe_symbol(ref.basic) if ref.basic else None
        if node.type == 'generic_type':
            node = node.child_by_field_name('type')
        if node is None:
            return None
        if node.type == 'qualified_type':
            package = self._package_named(ref.file, node.child_by_field_name('package'))
            target = node.child_by_field_name('name')
            if package is None or target is None:
                return None
            symbol = self.package_scope(package).members.get(ref.file.text(target))
        elif node.type == 'selector_expression':
            symbol = self.object_of(ref.file, node.child_by_field_name('field'))
        elif node.type in ('type_identifier', 'identifier'):
            symbol = self._resolve_use(ref.file, node) if ref.file.package else None
        else:
            return None
        if symbol is not None and symbol.kind is SymbolKind.TYPE_NAME:
            return symbol
        return None

    def _is_composite_key(self, node) -> bool:
        parent = node.parent
        if parent is not None and parent.type == 'literal_element':
            parent = parent.parent
        if parent is None or parent.type != 'keyed_element':
            return False
        key = parent.named_children[0] if parent.named_children else None
        return key is not None and (_same(key, node) or _same(key, node.parent))

    def _resolve_composite_key(self, source, node) -> Optional[Symbol]:
        if not self._is_composite_key(node):
            return None
        element = node.parent if node.parent.type == 'keyed_element' else node.parent.parent
        literal_value = element.parent
        literal_type = self._literal_type(source, literal_value)
        if literal_type is None:
            return None
        return self.lookup_member(literal_type, source.text(node))

    def _literal_type(self, source, literal_value, depth: int = 0) -> Optional[TypeRef]:
        if literal_value is None or depth > _MAX_DEPTH:
            return None
        parent = literal_value.parent
        if parent is None:
            return None
        if parent.type == 'composite_literal':
            type_node = parent.child_by_field_name('type')
            return TypeRef(node=type_node, file=source) if type_node is not None else None
        # Elided element type inside an outer literal
        if parent.type == 'literal_element':
            element = parent.parent
            if element is not None and element.type == 'keyed_element':
                outer_value = element.parent
                outer = self._literal_type(source, outer_value, depth + 1)
                return element_of(self.underlying(outer)) if outer else None
            outer = self._literal_type(source, element, depth + 1)
            return element_of(self.underlying(outer)) if outer else None
        return None

    # ----- types -----

    def underlying(self, ref: Optional[TypeRef], depth: int = 0) -> Optional[TypeRef]:
        """Follow named types to the type expression they are defined with."""
        while ref is not None and depth < _MAX_DEPTH and not ref.pointer and not ref.variadic:
            node = ref.node
            if node is None:
                return ref
            if node.type == 'parenthesized_type' and node.named_children:
                ref = TypeRef(node=node.named_children[0], file=ref.file)
            elif node.type in _TYPE_NAME_NODES:
                named = self._named_type(ref)
                if named is None:
                    return ref
                if named.type_node is None or named.file is None:
                    return basic_type(named.name)
                ref = TypeRef(node=named.type_node, file=named.file)
            else:
                return ref
            depth += 1
        return ref

    def type_of_symbol(self, symbol: Symbol, depth: int = 0) -> Optional[TypeRef]:
        """Declared or inferred type of a variable, constant or field."""
        if depth > _MAX_DEPTH or symbol is None:
            return None
        source = symbol.file
        if symbol.kind is SymbolKind.FUNCTION and symbol.decl is not None:
            return TypeRef(node=symbol.decl, file=source)
        if symbol.kind not in (SymbolKind.VARIABLE, SymbolKind.CONSTANT, SymbolKind.STRUCT_FIELD):
            return None
        if symbol.type_node is not None:
            return TypeRef(node=symbol.type_node, file=source, variadic=symbol.variadic)
        if symbol.range_node is not None:
            ranged = self.underlying(self.type_of(source, symbol.range_node, depth + 1))
            if ranged is None:
                return None
            if symbol.value_index == 0:
                return key_of(ranged)
            if ranged.basic == 'string':
                return basic_type('rune')
            return element_of(ranged)
        if symbol.value_node is None:
            if symbol.kind is SymbolKind.CONSTANT and symbol.file is None:
                return basic_type('int' if symbol.name == 'iota' else 'bool')
            return None
        if symbol.multi_value:
            return self._multi_value_type(source, symbol.value_node, symbol.value_index, depth)
        return self.type_of(source, symbol.value_node, depth + 1)

    def _multi_value_type(self, source, value, index, depth) -> Optional[TypeRef]:
        kind = value.type
        if kind == 'call_expression':
            results = self._call_results(source, value, depth)
            return results[index] if index < len(results) else None
        if index == 1 and kind in ('index_expression', 'type_assertion_expression', 'unary_expression'):
            return basic_type('bool')
        return self.type_of(source, value, depth + 1)

    def _call_results(self, source, call, depth) -> List[TypeRef]:
        function = call.child_by_field_name('function')
        if function is None:
            return []
        target = function.child_by_field_name('field') if function.type == 'selector_expression' else function
        symbol = self.object_of(source, target) if target is not None else None
        if symbol is not None and symbol.kind is SymbolKind.FUNCTION and symbol.decl is not None:
            return result_types(symbol.file, symbol.decl.child_by_field_name('result'))
        if symbol is not None and symbol.kind is SymbolKind.INTERFACE_METHOD and symbol.decl is not None:
            return result_types(symbol.file, symbol.decl.child_by_field_name('result'))
        function_type = self.underlying(self.type_of(source, function, depth + 1))
        if function_type is not None and function_type.node is not None and \
                function_type.node.type in ('function_type', 'func_literal'):
            return result_types(function_type.file, function_type.node.child_by_field_name('result'))
        return []

    def type_of(self, source: SourceFile, expr, depth: int = 0) -> Optional[TypeRef]:
        """Infer the type of an expression node."""
        if expr is None or depth > _MAX_DEPTH:
            return None
        kind = expr.type
        if kind in LITERAL_TYPES:
            return basic_type(LITERAL_TYPES[kind])
        if kind == 'iota':
            return basic_type('int')
        if kind == 'identifier':
            symbol = self.object_of(source, expr)
            return self.type_of_symbol(symbol, depth + 1) if symbol else None
        if kind == 'selector_expression':
            symbol = self.object_of(source, expr.child_by_field_name('field'))
            return self.type_of_symbol(symbol, depth + 1) if symbol else None
        if kind == 'composite_literal':
            type_node = expr.child_by_field_name('type')
            return TypeRef(node=type_node, file=source) if type_node is not None else None
        if kind == 'func_literal':
            return TypeRef(node=expr, file=source)
        if kind == 'parenthesized_expression':
            inner = expr.named_children
            return self.type_of(source, inner[0], depth + 1) if inner else None
        if kind in ('type_assertion_expression', 'type_conversion_expression'):
            type_node = expr.child_by_field_name('type')
            return TypeRef(node=type_node, file=source) if type_node is not None else None
        if kind == 'unary_expression':
            operator = source.text(expr.child_by_field_name('operator'))
            operand = self.type_of(source, expr.child_by_field_name('operand'), depth + 1)
            if operator == '!':
                return basic_type('bool')
            if operand is None:
                return None
            if operator == '&':
                return operand.pointer_to()
            if operator == '*':
                return operand.deref()
            if operator == '<-':
                underlying = self.underlying(operand)
                return element_of(underlying) if underlying else None
            return operand
        if kind == 'binary_expression':
            operator = source.text(expr.child_by_field_name('operator'))
            if operator in _COMPARISON_OPERATORS:
                return basic_type('bool')
            left = self.type_of(source, expr.child_by_field_name('left'), depth + 1)
            right = self.type_of(source, expr.child_by_field_name('right'), depth + 1)
            if left is not None and left.basic and right is not None and not right.basic:
                return right
            return left or right
        if kind == 'index_expression':
            operand = self.underlying(self.type_of(source, expr.child_by_field_name('operand'), depth + 1))
            return element_of(operand) if operand else None
        if kind == 'slice_expression':
            return self.type_of(source, expr.child_by_field_name('operand'), depth + 1)
        if kind == 'call_expression':
            return self._call_type(source, expr, depth)
        return None

    def _call_type(self, source, call, depth) -> Optional[TypeRef]:
        function = call.child_by_field_name('function')
        if function is None:
            return None
        arguments = call.child_by_field_name('arguments')
        args = [a for a in arguments.named_children if a.type != 'comment'] if arguments else []
        if function.type in ('identifier', 'selector_expression'):
            target = function if function.type == 'identifier' else function.child_by_field_name('field')
            symbol = self.object_of(source, target)
            if symbol is not None and symbol.kind is SymbolKind.TYPE_NAME:
                return TypeRef(node=function, file=source)
            if symbol is not None and symbol.kind is SymbolKind.BUILTIN:
                return self._builtin_call_type(source, symbol.name, args, depth)
        elif function.type in ('parenthesized_expression', 'slice_type', 'array_type', 'map_type',
                               'pointer_type', 'channel_type', 'function_type', 'qualified_type'):
            if function.type != 'parenthesized_expression':
                return TypeRef(node=function, file=source)
        results = self._call_results(source, call, depth)
        return results[0] if results else None

    def _builtin_call_type(self, source, name, args, depth) -> Optional[TypeRef]:
        if name == 'new' and args:
            return TypeRef(node=args[0], file=source).pointer_to()
        if name == 'make' and args:
            return TypeRef(node=args[0], file=source)
        if name in ('append', 'min', 'max') and args:
            return self.type_of(source, args[0], depth + 1)
        if name in ('len', 'cap', 'copy'):
            return basic_type('int')
        if name in ('real', 'imag'):
            return basic_type('float64')
        if name == 'complex':
            return basic_type('complex128')
        return None


def _same(a, b) -> bool:
    if a is None or b is None:
        return False
    return a.start_byte == b.start_byte and a.end_byte == b.end_byte and a.type == b.type


def _guess_package_name(import_path: str) -> str:
    """Best guess of a package's name from its import path."""
    parts = [p for p in import_path.split('/') if p]
    if not parts:
        return ""
    last = parts[-1]
    if len(parts) > 1 and last.startswith('v') and last[1:].isdigit():
        last = parts[-2]
    last = last.split('.')[0]
    if last.startswith('go-'):
        last = last[3:]
    return last.replace('-', '_')
