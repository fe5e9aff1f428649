"""
Package documentation for import specs and package names.
"""

import logging
import os
from typing import Optional

from ..errors import LoadError, NoDocumentationFoundError
from ..models import DocumentationRecord
from ..toolchain.loader import Package, Program
from .renderer import strip_vendor

logger = logging.getLogger(__name__)


class PackageDocumenter:
    def __init__(self, program: Program):
        self.program = program

    def document(self, import_path: str, from_package: Optional[Package] = None) -> DocumentationRecord:
        """
        Build the record for the package imported as ``import_path``.

        Raises:
            LoadError: If the import cannot be resolved
            NoDocumentationFoundError: If the package has no files
        """
        package = self.program.import_package(import_path, from_package or self.program.main)
        if package is None:
            raise LoadError(f"package {import_path} not in import map of package {self._main_path()}")
        return self.document_package(package)

    def document_package(self, package: Package) -> DocumentationRecord:
        if not package.files:
            raise NoDocumentationFoundError(package.name)
        return DocumentationRecord(
            name=package.name,
            decl=f"package {package.name}",
            import_path=strip_vendor(package.import_path),
            pkg=package.name,
            doc=package_comment(package),
        )

    def _main_path(self) -> str:
        return self.program.main.import_path if self.program.main else ""


def package_comment(package: Package) -> str:
    """Package comments of all files, in file name order, joined by a newline."""
    texts = []
    for source in sorted(package.files, key=lambda f: os.path.basename(f.path)):
        clause = source.package_clause
        if clause is None:
            continue
        group = source.lead_comment(clause)
        if group is not None and group.text():
            texts.append(group.text())
    return "\n".join(texts)
