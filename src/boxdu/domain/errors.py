from __future__ import annotations

"""
Domain Exceptions.

Fatal conditions of a conversion run. Recoverable anomalies (structural
conflicts in the tree) are logged and never raised.
"""

from typing import Optional


class BoxduError(Exception):
    """Base class for all fatal boxdu errors."""


class ListingFormatError(BoxduError):
    """
    The listing violates its input contract.

    Attributes:
        line_no: 1-based line number of the offending line, if known.
    """

    def __init__(self, message: str, line_no: Optional[int] = None) -> None:
        self.line_no = line_no
        if line_no is not None:
            message = f"line {line_no}: {message}"
        super().__init__(message)


class CollaboratorError(BoxduError):
    """An external process (query tool or visualizer) could not run or failed."""
