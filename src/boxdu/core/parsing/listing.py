from __future__ import annotations

"""
Query Tool Listing Parser.

Validates the fixed banner printed by the query tool and turns each
following line into an Entry. The banner is a hard contract: any mismatch
aborts the run. Individual malformed entry lines are only logged.
"""

import logging
import re
from typing import Iterable, Iterator, List, Optional

from boxdu.domain.errors import ListingFormatError
from boxdu.domain.run_models import BuildStats
from boxdu.domain.tree_models import Entry

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PREAMBLE
# -----------------------------------------------------------------------------

PREAMBLE_PATTERNS: List[re.Pattern] = [
    re.compile(r"^NOTICE:"),
    re.compile(r"^Login complete\."),
    re.compile(r"^$"),
    re.compile(r'^Type "help" for a list of commands\.'),
    re.compile(r"^$"),
]

# Fields are separated by single spaces; the path keeps any further spaces.
ENTRY_PATTERN: re.Pattern = re.compile(r"^(\S+) (\S+) (\S+) (.*)$")

_PREAMBLE_LABELS = [
    "notice line",
    "login-complete line",
    "blank line",
    "help hint line",
    "blank line",
]

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_preamble(lines: Iterator[str]) -> int:
    """
    Consume and check the banner lines of the query tool output.

    Args:
        lines: Line iterator positioned at the start of the listing.

    Returns:
        int: Number of lines consumed.

    Raises:
        ListingFormatError: If a line is missing or does not match.
    """
    for index, (pattern, label) in enumerate(zip(PREAMBLE_PATTERNS, _PREAMBLE_LABELS)):
        line_no = index + 1
        line = next(lines, None)
        if line is None:
            raise ListingFormatError(f"unexpected end of input, expected {label}", line_no)
        text = line.rstrip("\n")
        if not pattern.match(text):
            raise ListingFormatError(f"expected {label}, got {text!r}", line_no)
    return len(PREAMBLE_PATTERNS)


def parse_entry_line(line: str, line_no: Optional[int] = None) -> Entry:
    """
    Split one listing line into its id, flags, size and path fields.

    The path is the verbatim remainder of the line after the third single
    space. It may contain spaces, including leading ones, and carriage returns.

    Args:
        line: Raw line, with or without its trailing newline.
        line_no: Line number used in error messages.

    Returns:
        Entry: The parsed entry.

    Raises:
        ListingFormatError: If the line does not have four valid fields.
    """
    text = line.rstrip("\n")
    match = ENTRY_PATTERN.match(text)
    if match is None:
        raise ListingFormatError(f"expected '<id> <flags> <size> <path>', got {text!r}", line_no)

    raw_id, flags, raw_size, raw_path = match.groups()
    try:
        object_id = int(raw_id, 16)
        size_units = int(raw_size, 10)
    except ValueError:
        raise ListingFormatError(f"invalid id or size field in {text!r}", line_no) from None
    if size_units < 0:
        raise ListingFormatError(f"negative size in {text!r}", line_no)

    path = tuple(segment for segment in raw_path.split("/") if segment)
    return Entry(id=object_id, flags=flags, size_units=size_units, path=path)


def iter_entries(lines: Iterable[str], stats: Optional[BuildStats] = None) -> Iterator[Entry]:
    """
    Validate the banner, then return an iterator over the well-formed entries.

    The banner is checked eagerly, before this function returns, so a bad
    listing fails before the caller starts consuming entries. Blank lines
    are ignored. Malformed lines are logged and skipped; they are counted in
    ``stats.malformed`` when a stats object is given.

    Args:
        lines: Raw lines of the query tool output.
        stats: Optional BuildStats receiving the malformed-line count.

    Returns:
        Iterator[Entry]: Parsed entries in input order.

    Raises:
        ListingFormatError: If the banner does not match.
    """
    it = iter(lines)
    consumed = validate_preamble(it)
    return _entries_after_preamble(it, consumed, stats)

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _entries_after_preamble(
        it: Iterator[str],
        line_no: int,
        stats: Optional[BuildStats],
) -> Iterator[Entry]:
    for line in it:
        line_no += 1
        if not line.strip():
            continue
        try:
            yield parse_entry_line(line, line_no)
        except ListingFormatError as e:
            logger.warning(f"Skipping malformed entry: {e}")
            if stats is not None:
                stats.malformed += 1
