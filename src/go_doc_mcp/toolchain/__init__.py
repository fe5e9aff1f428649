"""
Go toolchain adapter.

This package turns Go sources into something the documentation engine can
query:
- parser: tree-sitter parsing, comment groups and node helpers
- build: GOOS/GOARCH file name rules and //go:build constraints
- archive: overlay archives of modified editor buffers
- loader: package loading and import path resolution
- checker: identifier binding and expression types
- types: canonical type and signature strings
- constant: exact constant evaluation
"""

from .archive import MODIFIED_USAGE, parse_overlay_archive
from .build import BuildContext
from .checker import Checker
from .constant import ConstantEvaluator, exact_string
from .loader import Package, PackageLoader, Program, load_program
from .parser import CommentGroup, GoParser, SourceFile, get_parser
from .types import TypeRef, type_string

__all__ = [
    "MODIFIED_USAGE",
    "parse_overlay_archive",
    "BuildContext",
    "Checker",
    "ConstantEvaluator",
    "exact_string",
    "Package",
    "PackageLoader",
    "Program",
    "load_program",
    "CommentGroup",
    "GoParser",
    "SourceFile",
    "get_parser",
    "TypeRef",
    "type_string",
]
