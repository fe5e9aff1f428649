"""
Package loading for Go sources.

The loader reads the package that contains a queried file and lazily loads
imported packages on demand. Import paths are resolved the way the go command
does: vendor directories first, then GOROOT, the main module (and its
``replace`` directives), the module cache and finally every GOPATH entry.
"""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..constants import GO_EXTENSION, GO_MOD_FILE, TEST_SUFFIX, UNKNOWN_PACKAGE_PATH
from ..errors import LoadError
from ..settings import ToolchainSettings
from .archive import normalize_path
from .build import BuildContext
from .parser import GoParser, SourceFile, get_parser

logger = logging.getLogger(__name__)

_MODULE_LINE = re.compile(r'^\s*module\s+(\S+)')
_REQUIRE_LINE = re.compile(r'^\s*(?:require\s+)?([^\s()]+)\s+(v[^\s/]+)')
_REPLACE_LINE = re.compile(r'^\s*(?:replace\s+)?([^\s()]+)(?:\s+v\S+)?\s+=>\s+(\S+)(?:\s+(v\S+))?')


@dataclass
class GoModule:
    """The parts of a go.mod file the loader needs."""
    path: str
    root: str
    requires: Dict[str, str] = field(default_factory=dict)
    replaces: Dict[str, Tuple[str, str]] = field(default_factory=dict)


def parse_go_mod(root: str, text: str) -> Optional[GoModule]:
    """Parse module path, requirements and replacements from go.mod text."""
    module: Optional[GoModule] = None
    block = None
    for raw in text.splitlines():
        line = raw.split('//', 1)[0].rstrip()
        if not line.strip():
            continue
        stripped = line.strip()
        if block:
            if stripped == ')':
                block = None
                continue
        else:
            match = _MODULE_LINE.match(line)
            if match:
                module = GoModule(path=match.group(1).strip('"'), root=root)
                continue
            if stripped in ('require (', 'replace (', 'exclude (', 'retract ('):
                block = stripped.split()[0]
                continue
            if stripped.startswith('require '):
                block_kind = 'require'
            elif stripped.startswith('replace '):
                block_kind = 'replace'
            else:
                continue
            line = stripped
        block_kind = block or block_kind
        if module is None:
            continue
        if block_kind == 'require':
            match = _REQUIRE_LINE.match(line)
            if match:
                module.requires[match.group(1)] = match.group(2)
        elif block_kind == 'replace':
            match = _REPLACE_LINE.match(line)
            if match:
                module.replaces[match.group(1)] = (match.group(2), match.group(3) or "")
    return module


def escape_module_path(path: str) -> str:
    """Escape upper case letters the way the module cache stores them."""
    return ''.join(f'!{c.lower()}' if c.isupper() else c for c in path)


class Package:
    """A loaded Go package: its files, name and import path."""

    def __init__(self, name: str, import_path: str, directory: str, files: List[SourceFile]):
        self.name = name
        self.import_path = import_path
        self.dir = directory
        self.files = files
        for source in files:
            source.package = self

    def __repr__(self) -> str:
        return f"Package({self.import_path!r}, files={len(self.files)})"

    def file(self, path: str) -> Optional[SourceFile]:
        key = normalize_path(path)
        for source in self.files:
            if normalize_path(source.path) == key:
                return source
        return None


class Program:
    """
    The packages loaded for one query.

    The package that contains the queried file is loaded eagerly; imports are
    loaded the first time the checker or the locator needs them.
    """

    def __init__(self, loader: "PackageLoader"):
        self.loader = loader
        self.main: Optional[Package] = None
        self.query_file: Optional[SourceFile] = None
        self.packages: Dict[str, Package] = {}
        self._imports: Dict[Tuple[str, str], Optional[Package]] = {}

    @property
    def settings(self) -> ToolchainSettings:
        return self.loader.settings

    def all_packages(self) -> List[Package]:
        """Loaded packages, the queried package first, then in load order."""
        ordered = [self.main] if self.main else []
        ordered.extend(p for p in self.packages.values() if p is not self.main)
        return ordered

    def find_file(self, path: str) -> Optional[SourceFile]:
        for package in self.all_packages():
            source = package.file(path)
            if source is not None:
                return source
        return None

    def import_package(self, import_path: str, from_package: Optional[Package] = None) -> Optional[Package]:
        """Resolve and load an imported package relative to the importing package."""
        from_dir = from_package.dir if from_package else (self.main.dir if self.main else os.getcwd())
        key = (from_dir, import_path)
        if key not in self._imports:
            self._imports[key] = self.loader.load_import(self, import_path, from_dir)
        return self._imports[key]


class PackageLoader:
    """Loads Go packages from disk (and an optional overlay) into a Program."""

    def __init__(self, settings: Optional[ToolchainSettings] = None,
                 overlay: Optional[Dict[str, bytes]] = None,
                 parser: Optional[GoParser] = None):
        self.settings = settings or ToolchainSettings.from_env()
        self.overlay = {normalize_path(k): v for k, v in (overlay or {}).items()}
        self.parser = parser or get_parser()
        self.build_context = BuildContext(self.settings)
        self._modules: Dict[str, Optional[GoModule]] = {}

    # ----- reading -----

    def read(self, path: str) -> bytes:
        key = normalize_path(path)
        if key in self.overlay:
            return self.overlay[key]
        with open(path, 'rb') as f:
            return f.read()

    def _list_go_files(self, directory: str) -> List[str]:
        names = set()
        try:
            names.update(
                entry for entry in os.listdir(directory)
                if entry.endswith(GO_EXTENSION) and os.path.isfile(os.path.join(directory, entry))
            )
        except OSError as e:
            logger.debug(f"Cannot list {directory}: {e}")
        norm_dir = normalize_path(directory)
        for path in self.overlay:
            if os.path.dirname(path) == norm_dir and path.endswith(GO_EXTENSION):
                names.add(os.path.basename(path))
        return sorted(names)

    def _has_go_files(self, directory: str) -> bool:
        return os.path.isdir(directory) and bool(self._list_go_files(directory))

    # ----- loading -----

    def load_program(self, path: str) -> Program:
        """
        Load the package containing ``path``.

        Raises:
            LoadError: If the file cannot be read or is not a Go file
        """
        path = os.path.abspath(path)
        if not path.endswith(GO_EXTENSION):
            raise LoadError(f"cannot load package containing {path}: not a Go source file")
        try:
            content = self.read(path)
        except OSError as e:
            raise LoadError(f"cannot load package containing {path}: {e}") from e

        query = self.parser.parse(path, content)
        package_name = query.package_name
        if not package_name:
            raise LoadError(f"no package containing file {path}")

        directory = os.path.dirname(path)
        include_tests = self.settings.include_tests or path.endswith(TEST_SUFFIX)
        files = [query]
        for name in self._list_go_files(directory):
            candidate = os.path.join(directory, name)
            if normalize_path(candidate) == normalize_path(path):
                continue
            if not self.build_context.matches_name(name, include_tests):
                continue
            source = self._parse_candidate(candidate)
            if source is None or source.package_name != package_name:
                continue
            files.append(source)
        files.sort(key=lambda f: os.path.basename(f.path))

        program = Program(self)
        package = Package(package_name, self.import_path_for_dir(directory), directory, files)
        program.main = package
        program.query_file = query
        program.packages[normalize_path(directory)] = package
        logger.debug(f"Loaded {package} for {path}")
        return program

    def _parse_candidate(self, path: str) -> Optional[SourceFile]:
        try:
            content = self.read(path)
        except OSError as e:
            logger.debug(f"Skipping unreadable file {path}: {e}")
            return None
        if not self.build_context.matches_content(content):
            logger.debug(f"Skipping {path}: build constraints not satisfied")
            return None
        return self.parser.parse(path, content)

    def load_dir(self, program: Program, directory: str, import_path: str) -> Optional[Package]:
        """Load the (non-test) package in ``directory``."""
        key = normalize_path(directory)
        if key in program.packages:
            return program.packages[key]

        files: List[SourceFile] = []
        for name in self._list_go_files(directory):
            if not self.build_context.matches_name(name, include_tests=False):
                continue
            source = self._parse_candidate(os.path.join(directory, name))
            if source is not None and source.package_name:
                files.append(source)
        if not files:
            logger.debug(f"No buildable Go files in {directory}")
            return None

        # Documentation-only files sometimes declare a different package name
        names = [f.package_name for f in files if f.package_name != 'documentation']
        package_name = names[0] if names else files[0].package_name
        files = [f for f in files if f.package_name in (package_name, 'documentation')]

        package = Package(package_name, import_path, directory, files)
        program.packages[key] = package
        logger.debug(f"Loaded import {import_path} from {directory}")
        return package

    def load_import(self, program: Program, import_path: str, from_dir: str) -> Optional[Package]:
        resolved = self.resolve_import(import_path, from_dir)
        if resolved is None:
            logger.debug(f"Could not resolve import {import_path!r} from {from_dir}")
            return None
        directory, full_path = resolved
        return self.load_dir(program, directory, full_path)

    # ----- import path resolution -----

    def _gopath_src_roots(self) -> List[str]:
        return [os.path.join(p, 'src') for p in self.settings.gopath if p]

    def _goroot_src(self) -> str:
        return os.path.join(self.settings.goroot, 'src') if self.settings.goroot else ""

    def find_module(self, directory: str) -> Optional[GoModule]:
        """Find the go.mod governing ``directory``, if any."""
        directory = os.path.abspath(directory)
        if directory in self._modules:
            return self._modules[directory]
        module = None
        current = directory
        while True:
            candidate = os.path.join(current, GO_MOD_FILE)
            if os.path.isfile(candidate) or normalize_path(candidate) in self.overlay:
                try:
                    text = self.read(candidate).decode('utf-8', errors='replace')
                    module = parse_go_mod(current, text)
                except OSError as e:
                    logger.debug(f"Cannot read {candidate}: {e}")
                break
            parent = os.path.dirname(current)
            if parent == current:
                break
            current = parent
        self._modules[directory] = module
        return module

    def import_path_for_dir(self, directory: str) -> str:
        """Compute the import path a directory is known by."""
        directory = os.path.abspath(directory)
        goroot_src = self._goroot_src()
        if goroot_src and _is_within(directory, goroot_src):
            return _relative_slash(directory, goroot_src)
        for root in self._gopath_src_roots():
            if _is_within(directory, root):
                return _relative_slash(directory, root)
        module = self.find_module(directory)
        if module is not None:
            rel = _relative_slash(directory, module.root)
            return module.path if rel in ('', '.') else f"{module.path}/{rel}"
        return UNKNOWN_PACKAGE_PATH

    def resolve_import(self, import_path: str, from_dir: str) -> Optional[Tuple[str, str]]:
        """
        Resolve an import path to a directory.

        Args:
            import_path: The path as written in the import spec
            from_dir: Directory of the importing package

        Returns:
            Tuple of (directory, full import path) or None if not found
        """
        if import_path == 'C':
            return None
        if import_path.startswith(('./', '../')):
            directory = os.path.normpath(os.path.join(from_dir, import_path))
            if self._has_go_files(directory):
                return directory, self.import_path_for_dir(directory)
            return None

        vendored = self._resolve_vendor(import_path, from_dir)
        if vendored:
            return vendored

        goroot_src = self._goroot_src()
        if goroot_src:
            directory = os.path.join(goroot_src, *import_path.split('/'))
            if self._has_go_files(directory):
                return directory, import_path

        module = self.find_module(from_dir)
        if module is not None:
            resolved = self._resolve_in_module(module, import_path)
            if resolved:
                return resolved

        for root in self._gopath_src_roots():
            directory = os.path.join(root, *import_path.split('/'))
            if self._has_go_files(directory):
                return directory, import_path
        return None

    def _resolve_vendor(self, import_path: str, from_dir: str) -> Optional[Tuple[str, str]]:
        stop_at = [r for r in [self._goroot_src(), *self._gopath_src_roots()] if r]
        current = os.path.abspath(from_dir)
        while True:
            candidate = os.path.join(current, 'vendor', *import_path.split('/'))
            if self._has_go_files(candidate):
                return candidate, self.import_path_for_dir(candidate)
            if any(normalize_path(current) == normalize_path(root) for root in stop_at):
                return None
            parent = os.path.dirname(current)
            if parent == current:
                return None
            current = parent

    def _resolve_in_module(self, module: GoModule, import_path: str) -> Optional[Tuple[str, str]]:
        if import_path == module.path or import_path.startswith(module.path + '/'):
            rest = import_path[len(module.path):].lstrip('/')
            directory = os.path.join(module.root, *rest.split('/')) if rest else module.root
            if self._has_go_files(directory):
                return directory, import_path

        for prefix in sorted(module.replaces, key=len, reverse=True):
            if import_path != prefix and not import_path.startswith(prefix + '/'):
                continue
            target, version = module.replaces[prefix]
            rest = import_path[len(prefix):].lstrip('/')
            if target.startswith(('./', '../', '/')):
                base = os.path.normpath(os.path.join(module.root, target))
            elif version and self.settings.gomodcache:
                base = os.path.join(self.settings.gomodcache, f"{escape_module_path(target)}@{version}")
            else:
                continue
            directory = os.path.join(base, *rest.split('/')) if rest else base
            if self._has_go_files(directory):
                return directory, import_path

        if self.settings.gomodcache:
            for prefix in sorted(module.requires, key=len, reverse=True):
                if import_path != prefix and not import_path.startswith(prefix + '/'):
                    continue
                version = module.requires[prefix]
                base = os.path.join(self.settings.gomodcache, f"{escape_module_path(prefix)}@{version}")
                rest = import_path[len(prefix):].lstrip('/')
                directory = os.path.join(base, *rest.split('/')) if rest else base
                if self._has_go_files(directory):
                    return directory, import_path
        return None


def load_program(path: str, overlay: Optional[Dict[str, bytes]] = None,
                 settings: Optional[ToolchainSettings] = None) -> Program:
    """Load the package containing ``path`` (convenience wrapper)."""
    return PackageLoader(settings=settings, overlay=overlay).load_program(path)


def _is_within(path: str, root: str) -> bool:
    path = normalize_path(path)
    root = normalize_path(root)
    return path == root or path.startswith(root.rstrip(os.sep) + os.sep)


def _relative_slash(path: str, root: str) -> str:
    rel = os.path.relpath(path, root)
    return '' if rel == '.' else rel.replace(os.sep, '/')
