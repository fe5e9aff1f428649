"""
Documentation extractor.

Walks the enclosing chain of a symbol's defining occurrence once, recording
the declaration to render and the documentation under the precedence rules
for each kind of declaration.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..constants import CONSTANT_VALUE_PREFIX
from ..models import EnclosingChain, Symbol, SymbolKind
from ..toolchain.constant import ConstantEvaluator
from ..toolchain.parser import (
    FUNC_DECL_TYPES, GEN_DECL_TYPES, METHOD_ELEM_TYPES, SPEC_TYPES, SourceFile,
)

logger = logging.getLogger(__name__)


@dataclass
class DefinitionSite:
    """What the extractor found for a symbol's defining occurrence."""
    file: Optional[SourceFile] = None
    decl: Any = None
    spec: Any = None
    doc: str = ""

    @property
    def found(self) -> bool:
        return self.decl is not None


class DocumentationExtractor:
    def __init__(self, evaluator: Optional[ConstantEvaluator] = None):
        self.evaluator = evaluator

    def scan(self, chain: EnclosingChain, symbol: Symbol) -> DefinitionSite:
        """
        Find the declaration node and documentation for ``symbol``.

        Function declarations use their doc comment only. Fields and interface
        methods use their doc comment, else their line comment. Specs use
        their doc comment, else their line comment, else the doc comment of
        the enclosing declaration.
        """
        source = chain.file
        site = DefinitionSite(file=source)
        offset = symbol.position.offset if symbol.has_position else -1

        spec = None
        for node in chain:
            kind = node.type
            if kind in ('parameter_declaration', 'variadic_parameter_declaration'):
                # Parameters carry no documentation of their own
                break
            if kind in FUNC_DECL_TYPES:
                name = node.child_by_field_name('name')
                if name is None or name.start_byte != offset:
                    # The symbol is declared inside the function, not by it
                    break
                site.decl = node
                site.doc = _text(source.lead_comment(node))
                break
            if kind == 'field_declaration' or kind in METHOD_ELEM_TYPES:
                site.decl = node
                site.doc = _text(source.lead_comment(node)) or _text(source.line_comment(node))
                break
            if kind in SPEC_TYPES:
                spec = node
                continue
            if kind in GEN_DECL_TYPES:
                if spec is None:
                    break
                site.decl = node
                site.spec = spec
                site.doc = (_text(source.lead_comment(spec))
                            or _text(source.line_comment(spec))
                            or _text(source.lead_comment(node)))
                break

        if symbol.kind is SymbolKind.CONSTANT and self.evaluator is not None and site.found:
            value = self.evaluator.exact_string(symbol)
            if value is not None:
                site.doc += f"\n{CONSTANT_VALUE_PREFIX}{value}"
        return site


def _text(group) -> str:
    return group.text() if group is not None else ""
