"""Exception hierarchy for gopenapi.

Every failure during a generation run is fatal: the run stops before the
document is written. Catch ``GopenapiError`` to handle all of them.
"""


class GopenapiError(Exception):
    """Base exception for all gopenapi errors."""


class TraversalError(GopenapiError):
    """Raised when the source tree cannot be enumerated."""

    def __init__(self, root: str, cause: Exception):
        super().__init__(f"failed to read files under {root}: {cause}")
        self.root = root
        self.cause = cause


class SourceParseError(GopenapiError):
    """Raised when a source file cannot be read into declarations."""

    def __init__(self, path: str, reason: str, line: int | None = None):
        location = f"{path}:{line}" if line is not None else path
        super().__init__(f"failed to interpret file {location}: {reason}")
        self.path = path
        self.reason = reason
        self.line = line


class DirectiveDecodeError(GopenapiError):
    """Raised when the YAML body of a directive does not decode."""

    def __init__(self, comment: str, cause: Exception | str):
        super().__init__(f"failed to decode comment:\n{comment}\nError: {cause}")
        self.comment = comment
        self.cause = cause


class LiteralDecodeError(GopenapiError):
    """Raised when a parameter directive is not bound to a single string literal."""

    def __init__(self, name: str, literal: str | None, reason: str):
        shown = literal if literal is not None else "<none>"
        super().__init__(f"failed to decode literal {shown} of {name}: {reason}")
        self.name = name
        self.literal = literal
        self.reason = reason
