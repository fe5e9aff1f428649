"""
Exception hierarchy for documentation lookups.

Every failure of a query surfaces as one of these exceptions. Declaration
rendering never raises: it degrades to the symbol's default text instead.
"""


class DocLookupError(Exception):
    """Base class for all query-level failures."""


class LoadError(DocLookupError):
    """The file or one of its packages could not be loaded."""


class InvalidPositionError(DocLookupError):
    """A ``file.go:#offset`` position argument is malformed."""


class OutOfRangeError(DocLookupError):
    """The offset does not fall inside the queried file."""

    def __init__(self, path: str, offset: int, size: int):
        self.path = path
        self.offset = offset
        self.size = size
        super().__init__(f"cursor {offset} is beyond end of file {path} ({size})")


class UnresolvedIdentifierError(DocLookupError):
    """The identifier at the position has no binding."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"no object found for identifier {name}")


class NoDocumentationFoundError(DocLookupError):
    """A symbol was resolved but nothing produced documentation for it."""

    def __init__(self, name: str = ""):
        self.name = name
        if name:
            super().__init__(f"No documentation found for {name}")
        else:
            super().__init__("no documentation found")
