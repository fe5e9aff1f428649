"""
Build constraint matching for Go source files.

Decides whether a file takes part in a build for the configured GOOS, GOARCH
and build tags: file name suffixes (``_linux.go``, ``_amd64.go``), test files
and ``//go:build`` expressions.
"""

import logging
import re
from typing import List, Optional, Set

from ..constants import GO_EXTENSION, KNOWN_ARCH, KNOWN_OS, TEST_SUFFIX, UNIX_OS
from ..settings import ToolchainSettings

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r'\s*(\|\||&&|!|\(|\)|[A-Za-z0-9_.]+)')


class BuildContext:
    """The set of satisfied build tags for one GOOS/GOARCH pair."""

    def __init__(self, settings: ToolchainSettings):
        self.goos = settings.goos
        self.goarch = settings.goarch
        self.tags: Set[str] = {settings.goos, settings.goarch, 'gc'}
        self.tags.update(settings.build_tags)
        if settings.goos in UNIX_OS:
            self.tags.add('unix')
        # illumos and android imply their parent systems
        if settings.goos == 'android':
            self.tags.add('linux')
        if settings.goos == 'illumos':
            self.tags.add('solaris')
        if settings.goos == 'ios':
            self.tags.add('darwin')

    def has_tag(self, tag: str) -> bool:
        # Release tags are assumed to be satisfied by the current toolchain
        if tag.startswith('go1.'):
            return True
        return tag in self.tags

    def matches_name(self, filename: str, include_tests: bool = False) -> bool:
        """Apply Go's file name rules: hidden files, test files and platform suffixes."""
        if not filename.endswith(GO_EXTENSION):
            return False
        if filename.startswith(('_', '.')):
            return False
        if filename.endswith(TEST_SUFFIX) and not include_tests:
            return False

        stem = filename[:-len(GO_EXTENSION)]
        if stem.endswith('_test'):
            stem = stem[:-len('_test')]
        parts = stem.split('_')
        if len(parts) < 2:
            return True
        last = parts[-1]
        if last in KNOWN_ARCH:
            if not self.has_tag(last):
                return False
            if len(parts) >= 3 and parts[-2] in KNOWN_OS:
                return self.has_tag(parts[-2])
            return True
        if last in KNOWN_OS:
            return self.has_tag(last)
        return True

    def matches_content(self, content: bytes) -> bool:
        """Evaluate the file's ``//go:build`` line, if it has one."""
        expression = find_build_expression(content)
        if expression is None:
            return True
        try:
            return evaluate_build_expression(expression, self.has_tag)
        except ValueError as e:
            logger.debug(f"Ignoring malformed build constraint {expression!r}: {e}")
            return False


def find_build_expression(content: bytes) -> Optional[str]:
    """Return the ``//go:build`` expression from a file header, or None."""
    text = content.decode('utf-8', errors='replace')
    in_block = False
    for line in text.splitlines():
        stripped = line.strip()
        if in_block:
            if '*/' in stripped:
                in_block = False
            continue
        if not stripped:
            continue
        if stripped.startswith('//go:build'):
            return stripped[len('//go:build'):].strip()
        if stripped.startswith('//'):
            continue
        if stripped.startswith('/*'):
            in_block = '*/' not in stripped
            continue
        # First non-comment line ends the header
        return None
    return None


def _tokenize(expression: str) -> List[str]:
    tokens = []
    position = 0
    expression = expression.rstrip()
    while position < len(expression):
        match = _TOKEN.match(expression, position)
        if not match:
            raise ValueError(f"unexpected character at {position}")
        tokens.append(match.group(1))
        position = match.end()
    return tokens


def evaluate_build_expression(expression: str, has_tag) -> bool:
    """Evaluate a ``//go:build`` boolean expression against a tag predicate."""
    tokens = _tokenize(expression)
    position = 0

    def peek() -> Optional[str]:
        return tokens[position] if position < len(tokens) else None

    def advance() -> str:
        nonlocal position
        if position >= len(tokens):
            raise ValueError("unexpected end of expression")
        token = tokens[position]
        position += 1
        return token

    def parse_or() -> bool:
        value = parse_and()
        while peek() == '||':
            advance()
            rhs = parse_and()
            value = value or rhs
        return value

    def parse_and() -> bool:
        value = parse_not()
        while peek() == '&&':
            advance()
            rhs = parse_not()
            value = value and rhs
        return value

    def parse_not() -> bool:
        token = advance()
        if token == '!':
            return not parse_not()
        if token == '(':
            value = parse_or()
            if advance() != ')':
                raise ValueError("missing )")
            return value
        if token in ('&&', '||', ')'):
            raise ValueError(f"unexpected {token}")
        return has_tag(token)

    result = parse_or()
    if position != len(tokens):
        raise ValueError(f"unexpected {tokens[position]}")
    return result

