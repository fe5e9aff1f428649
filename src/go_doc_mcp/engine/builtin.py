"""
Builtin fallback catalog.

Documentation for predeclared identifiers comes from the ``builtin``
pseudo-package source. The catalog is organised the way go/doc organises a
package: package level funcs, consts and vars, plus types sorted by name that
own their factory functions and the values declared with their type.
"""

import functools
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..constants import BUILTIN_FILE
from ..errors import LoadError
from ..settings import ToolchainSettings
from ..toolchain.parser import GoParser, SourceFile, get_parser, name_nodes, spec_nodes

logger = logging.getLogger(__name__)

BUNDLED_BUILTIN = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
                               'resources', BUILTIN_FILE)

# Fraction of a value declaration's specs that must share a type for the
# declaration to be listed under that type
_VALUE_THRESHOLD = 0.75


@dataclass
class BuiltinFunc:
    name: str
    doc: str
    decl: str


@dataclass
class BuiltinValue:
    """One const or var declaration; its doc covers every name it declares."""
    names: List[str]
    doc: str
    decls: Dict[str, str] = field(default_factory=dict)


@dataclass
class BuiltinType:
    name: str
    doc: str
    decl: str
    funcs: List[BuiltinFunc] = field(default_factory=list)
    consts: List[BuiltinValue] = field(default_factory=list)
    vars: List[BuiltinValue] = field(default_factory=list)


class BuiltinCatalog:
    """Read-only index of predeclared identifiers."""

    def __init__(self, funcs: List[BuiltinFunc], consts: List[BuiltinValue],
                 vars: List[BuiltinValue], types: List[BuiltinType]):
        self.funcs = funcs
        self.consts = consts
        self.vars = vars
        self.types = sorted(types, key=lambda t: t.name)

    def lookup(self, name: str) -> Tuple[str, str]:
        """
        Find documentation for a predeclared identifier.

        Funcs are searched first, then consts, then vars (each including the
        members folded in from every type) and finally type names.

        Returns:
            Tuple of (doc, decl); both empty when nothing matches
        """
        funcs = list(self.funcs)
        consts = list(self.consts)
        variables = list(self.vars)
        for builtin_type in self.types:
            funcs.extend(builtin_type.funcs)
            consts.extend(builtin_type.consts)
            variables.extend(builtin_type.vars)

        for func in funcs:
            if func.name == name:
                return func.doc, func.decl
        for value in consts + variables:
            if name in value.names:
                return value.doc, value.decls.get(name, "")
        for builtin_type in self.types:
            if builtin_type.name == name:
                return builtin_type.doc, builtin_type.decl
        return "", ""

    @classmethod
    def from_source(cls, path: str, content: bytes, parser: Optional[GoParser] = None) -> "BuiltinCatalog":
        source = (parser or get_parser()).parse(path, content)
        return _CatalogReader(source).read()


class _CatalogReader:
    def __init__(self, source: SourceFile):
        self.source = source
        self.types: Dict[str, BuiltinType] = {}
        self.funcs: List[BuiltinFunc] = []
        self.consts: List[BuiltinValue] = []
        self.vars: List[BuiltinValue] = []

    def _doc(self, node) -> str:
        group = self.source.lead_comment(node)
        return group.text() if group else ""

    def read(self) -> BuiltinCatalog:
        declarations = self.source.root.named_children
        # Types first so funcs and values can be associated with them
        for decl in declarations:
            if decl.type == 'type_declaration':
                self._read_types(decl)
        for decl in declarations:
            if decl.type == 'function_declaration':
                self._read_func(decl)
            elif decl.type in ('const_declaration', 'var_declaration'):
                self._read_values(decl)
        return BuiltinCatalog(self.funcs, self.consts, self.vars, list(self.types.values()))

    def _read_types(self, decl):
        specs = spec_nodes(decl)
        for spec in specs:
            name = spec.child_by_field_name('name')
            if name is None:
                continue
            doc = self._doc(spec)
            if not doc and len(specs) == 1:
                doc = self._doc(decl)
            text = self.source.text(decl) if len(specs) == 1 else 'type ' + self.source.text(spec)
            self.types[self.source.text(name)] = BuiltinType(self.source.text(name), doc, text)

    def _read_func(self, decl):
        name = self.source.text(decl.child_by_field_name('name'))
        body = decl.child_by_field_name('body')
        end = body.start_byte if body is not None else decl.end_byte
        func = BuiltinFunc(name, self._doc(decl), self.source.slice(decl.start_byte, end).rstrip())
        owner = self._factory_type(decl)
        if owner is not None:
            owner.funcs.append(func)
        else:
            self.funcs.append(func)

    def _factory_type(self, decl) -> Optional[BuiltinType]:
        result = decl.child_by_field_name('result')
        if result is None:
            return None
        result_types = []
        if result.type == 'parameter_list':
            for param in result.named_children:
                type_node = param.child_by_field_name('type')
                if type_node is not None:
                    result_types.append(type_node)
        else:
            result_types.append(result)

        type_params = set()
        params = decl.child_by_field_name('type_parameters')
        if params is not None:
            for param in params.named_children:
                type_params.update(self.source.text(n) for n in param.children_by_field_name('name'))

        owner = None
        matches = 0
        for type_node in result_types:
            if type_node.type in ('slice_type', 'array_type'):
                type_node = type_node.child_by_field_name('element')
            name = self._base_type_name(type_node)
            if not name or name in type_params or name not in self.types:
                continue
            owner = self.types[name]
            matches += 1
            if matches > 1:
                break
        return owner if matches == 1 else None

    def _base_type_name(self, type_node) -> str:
        if type_node is None:
            return ""
        if type_node.type == 'pointer_type':
            inner = type_node.named_children
            return self._base_type_name(inner[-1]) if inner else ""
        if type_node.type == 'type_identifier':
            return self.source.text(type_node)
        return ""

    def _read_values(self, decl):
        keyword = 'const' if decl.type == 'const_declaration' else 'var'
        specs = spec_nodes(decl)
        value = BuiltinValue(names=[], doc=self._doc(decl))

        dominant = ""
        frequency = 0
        previous = ""
        for spec in specs:
            names = [self.source.text(n) for n in name_nodes(spec)]
            value.names.extend(names)
            for name in names:
                value.decls[name] = f"{keyword} {_collapse_spaces(self.source.text(spec))}"

            type_node = spec.child_by_field_name('type')
            type_name = ""
            if type_node is not None:
                type_name = self._base_type_name(type_node)
            elif keyword == 'const' and spec.child_by_field_name('value') is None:
                type_name = previous
            if type_name:
                if dominant and dominant != type_name:
                    dominant = ""
                    break
                dominant = type_name
                frequency += 1
            previous = type_name

        if not value.names:
            return
        target = self.consts if keyword == 'const' else self.vars
        if dominant in self.types and frequency >= int(len(specs) * _VALUE_THRESHOLD):
            owner = self.types[dominant]
            target = owner.consts if keyword == 'const' else owner.vars
        target.append(value)


def _collapse_spaces(text: str) -> str:
    """Drop the column alignment of a one-line spec."""
    if '\n' in text:
        return text
    return ' '.join(text.split())


def builtin_source_path(settings: Optional[ToolchainSettings] = None) -> str:
    """Pick the builtin.go to read: explicit setting, GOROOT, then the bundled copy."""
    if settings is not None:
        if settings.builtin_source:
            return settings.builtin_source
        if settings.goroot:
            candidate = os.path.join(settings.goroot, 'src', 'builtin', BUILTIN_FILE)
            if os.path.isfile(candidate):
                return candidate
    return BUNDLED_BUILTIN


@functools.lru_cache(maxsize=None)
def _catalog_for(path: str) -> BuiltinCatalog:
    try:
        with open(path, 'rb') as f:
            content = f.read()
    except OSError as e:
        raise LoadError(f"cannot read builtin package source {path}: {e}") from e
    catalog = BuiltinCatalog.from_source(path, content)
    logger.debug(f"Built builtin catalog from {path}: {len(catalog.funcs)} funcs, {len(catalog.types)} types")
    return catalog


def load_builtin_catalog(settings: Optional[ToolchainSettings] = None) -> BuiltinCatalog:
    """Return the process-wide catalog for the configured builtin source."""
    return _catalog_for(builtin_source_path(settings))
