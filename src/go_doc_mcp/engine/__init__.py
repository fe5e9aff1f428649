"""
Documentation lookup engine.

Position locator, symbol resolver, builtin catalog, documentation extractor
and declaration renderer, tied together by document_at.
"""

from .builtin import BuiltinCatalog, load_builtin_catalog
from .extractor import DefinitionSite, DocumentationExtractor
from .locator import PositionLocator, chain_at
from .package_doc import PackageDocumenter
from .query import DocumentationQuery, document_at
from .renderer import DeclarationRenderer, strip_vendor
from .resolver import SymbolResolver, needs_builtin_fallback

__all__ = [
    "BuiltinCatalog",
    "load_builtin_catalog",
    "DefinitionSite",
    "DocumentationExtractor",
    "PositionLocator",
    "chain_at",
    "PackageDocumenter",
    "DocumentationQuery",
    "document_at",
    "DeclarationRenderer",
    "strip_vendor",
    "SymbolResolver",
    "needs_builtin_fallback",
]
