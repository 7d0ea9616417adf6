"""
Exceptions raised by genoref.

Every error derives from GenorefError and also from the builtin a caller
would catch without knowing about this package (OSError, ValueError,
KeyError, LookupError).
"""

from pathlib import Path
from typing import Union


class GenorefError(Exception):
    """Base class for all genoref errors."""


class FastaIOError(GenorefError, OSError):
    """A sequence file or index file could not be opened, read or written."""

    def __init__(self, path: Union[str, Path], message: str):
        self.path = str(path)
        super().__init__(f"{message}: {self.path}")


class IndexFormatError(GenorefError, ValueError):
    """
    A line of a .fai index file is not five well-typed fields.

    Attributes:
        path: Index file being read
        line_number: 1-based number of the offending line
        content: The offending line, without its terminator
    """

    def __init__(self, path: Union[str, Path], line_number: int, content: str, reason: str = ""):
        self.path = str(path)
        self.line_number = line_number
        self.content = content
        message = f"malformed fasta index file {self.path} @ line {line_number}"
        if reason:
            message += f" ({reason})"
        super().__init__(f"{message}: {content!r}")


class SequenceNotFoundError(GenorefError, KeyError):
    """The requested sequence name is not in the index."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f"sequence not found in fasta index: {self.name!r}"


class InvalidRangeError(GenorefError, ValueError):
    """A subsequence was requested with a negative start or a length below 1."""


class AmbiguousNameError(GenorefError, LookupError):
    """A name prefix matches more than one sequence in the index."""

    def __init__(self, prefix: str, matches):
        self.prefix = prefix
        self.matches = list(matches)
        super().__init__(
            f"{prefix!r} is not unique in fasta index, matches: {', '.join(self.matches)}"
        )
