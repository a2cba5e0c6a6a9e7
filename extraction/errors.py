"""
Error types raised by the extraction engine.

Every error is terminal for the ``build_element`` call that raised it.
Whether a run aborts or skips the offending declaration is decided by the
caller (see ``extraction.extractor``).
"""


class ExtractionError(Exception):
    """Base class for all extraction failures."""


class PackageLoadError(ExtractionError):
    """Raised when Go sources cannot be assembled into a single package."""


class NotFoundError(ExtractionError, LookupError):
    """Raised when a declaration is absent or is not a struct/interface."""

    def __init__(self, name: str, reason: str = "not found"):
        self.name = name
        super().__init__(f"Type '{name}': {reason}")


class UnresolvedTypeError(ExtractionError):
    """Raised when an identifier cannot be found in the package scope.

    Indicates a dangling reference in the loaded package, which is an
    upstream data defect rather than something extraction can recover from.
    """

    def __init__(self, identifier: str, reason: str = "not declared in scope"):
        self.identifier = identifier
        super().__init__(f"Unresolved type '{identifier}': {reason}")


class MalformedTagError(ExtractionError, ValueError):
    """Raised when a struct tag does not match the key:\"value\" grammar."""

    def __init__(self, fragment: str, tag: str = ""):
        self.fragment = fragment
        self.tag = tag
        super().__init__(f"Malformed struct tag near {fragment!r}")
