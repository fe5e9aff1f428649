"""
Query orchestration: position in, one DocumentationRecord out.
"""

import logging
from typing import Dict, Optional

from ..constants import BUILTIN_IMPORT_PATH
from ..errors import NoDocumentationFoundError, UnresolvedIdentifierError
from ..models import DocumentationRecord, EnclosingChain, Position, Symbol, SymbolKind
from ..settings import ToolchainSettings
from ..toolchain.checker import Checker
from ..toolchain.constant import ConstantEvaluator
from ..toolchain.loader import PackageLoader, Program
from ..toolchain.parser import NAME_TYPES, SourceFile, string_value
from .builtin import BuiltinCatalog, load_builtin_catalog
from .extractor import DocumentationExtractor
from .locator import PositionLocator
from .package_doc import PackageDocumenter
from .renderer import DeclarationRenderer, strip_vendor
from .resolver import SymbolResolver, needs_builtin_fallback

logger = logging.getLogger(__name__)


class DocumentationQuery:
    """Answers documentation lookups against one loaded Program."""

    def __init__(self, program: Program, show_unexported: bool = False,
                 catalog: Optional[BuiltinCatalog] = None):
        self.program = program
        self.checker = Checker(program)
        self.locator = PositionLocator(program)
        self.resolver = SymbolResolver(self.checker)
        self.extractor = DocumentationExtractor(ConstantEvaluator(self.checker))
        self.renderer = DeclarationRenderer(self.checker, show_unexported)
        self.packages = PackageDocumenter(program)
        self._catalog = catalog

    @property
    def catalog(self) -> BuiltinCatalog:
        if self._catalog is None:
            self._catalog = load_builtin_catalog(self.program.settings)
        return self._catalog

    def document_position(self, position: Position) -> DocumentationRecord:
        """
        Document whatever the innermost identifier or import spec at ``position`` denotes.

        Raises:
            OutOfRangeError: If the offset is outside the file
            UnresolvedIdentifierError: If only unbound identifiers were found
            NoDocumentationFoundError: If nothing at the position has documentation
        """
        chain = self.locator.locate(position)
        return self.document_chain(chain)

    def document_chain(self, chain: EnclosingChain) -> DocumentationRecord:
        source = chain.file
        unresolved = None
        for node in chain:
            if node.type == 'import_spec':
                path = string_value(source, node.child_by_field_name('path'))
                return self.packages.document(path, source.package)
            if node.type not in NAME_TYPES:
                continue
            try:
                symbol = self.resolver.resolve(source, node)
            except UnresolvedIdentifierError as e:
                # Keep looking outward for something with a binding
                logger.debug(f"Skipping unbound identifier: {e}")
                unresolved = unresolved or e
                continue
            return self.document_symbol(symbol)
        if unresolved is not None:
            raise unresolved
        raise NoDocumentationFoundError()

    def document_symbol(self, symbol: Symbol) -> DocumentationRecord:
        if symbol.kind is SymbolKind.PACKAGE:
            package = self.checker.imported_package(symbol)
            if package is None:
                return self.packages.document(symbol.imported_path, symbol.file.package if symbol.file else None)
            return self.packages.document_package(package)

        chain = EnclosingChain() if needs_builtin_fallback(symbol) else self.locator.locate(symbol.position)
        if not chain:
            return self._builtin_record(symbol)

        site = self.extractor.scan(chain, symbol)
        return DocumentationRecord(
            name=symbol.name,
            decl=self.renderer.render(site, symbol),
            import_path=strip_vendor(symbol.package_path),
            pkg=symbol.package_name,
            doc=site.doc,
            pos=self._position_string(chain.file, symbol),
        )

    def _builtin_record(self, symbol: Symbol) -> DocumentationRecord:
        doc, decl = self.catalog.lookup(symbol.name)
        if not doc:
            raise NoDocumentationFoundError(symbol.name)
        return DocumentationRecord(
            name=symbol.name,
            decl=decl or self.renderer.symbol_string(symbol),
            import_path=BUILTIN_IMPORT_PATH,
            pkg=BUILTIN_IMPORT_PATH,
            doc=doc,
            pos="",
        )

    @staticmethod
    def _position_string(source: SourceFile, symbol: Symbol) -> str:
        if source is None or not symbol.has_position:
            return ""
        return source.position_string(symbol.position.offset)


def document_at(path: str, offset: int, show_unexported: bool = False,
                overlay: Optional[Dict[str, bytes]] = None,
                settings: Optional[ToolchainSettings] = None,
                catalog: Optional[BuiltinCatalog] = None) -> DocumentationRecord:
    """
    Return documentation for the symbol at ``offset`` in ``path``.

    Args:
        path: Go source file containing the query position
        offset: Byte offset into the file
        show_unexported: Keep unexported struct fields and interface methods
        overlay: Modified file contents keyed by path
        settings: Go environment; resolved from the process environment if omitted
        catalog: Builtin catalog to use instead of the cached one

    Raises:
        DocLookupError: Any of its subclasses when the lookup fails
    """
    loader = PackageLoader(settings=settings, overlay=overlay)
    program = loader.load_program(path)
    query = DocumentationQuery(program, show_unexported=show_unexported, catalog=catalog)
    return query.document_position(Position(program.query_file.path, offset))
