"""
Symbol resolver.

Turns an identifier node into the Symbol it denotes, applying the special
cases documentation needs: embedded fields resolve to their type and package
names resolve to the imported package.
"""

import logging

from ..errors import UnresolvedIdentifierError
from ..models import Symbol, SymbolKind
from ..toolchain.checker import Checker
from ..toolchain.parser import SourceFile

logger = logging.getLogger(__name__)


class SymbolResolver:
    def __init__(self, checker: Checker):
        self.checker = checker

    def resolve(self, source: SourceFile, node) -> Symbol:
        """
        Resolve ``node`` to its defining entity.

        Raises:
            UnresolvedIdentifierError: If the identifier has no binding
        """
        symbol = self.checker.object_of(source, node)
        if symbol is None:
            raise UnresolvedIdentifierError(source.text(node))

        if symbol.kind is SymbolKind.STRUCT_FIELD and symbol.embedded:
            type_symbol = self.checker.embedded_type_symbol(symbol)
            if type_symbol is not None:
                logger.debug(f"Embedded field {symbol.name} resolves to type {type_symbol.name}")
                return type_symbol

        if symbol.kind is SymbolKind.PACKAGE and symbol.name != symbol.imported_path.rsplit('/', 1)[-1]:
            logger.debug(f"Package name {symbol.name} refers to {symbol.imported_path}")
        return symbol


def needs_builtin_fallback(symbol: Symbol) -> bool:
    """Predeclared identifiers have no defining position."""
    return not symbol.has_position
