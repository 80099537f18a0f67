from __future__ import annotations

"""
Domain Constants and Static Data Structures.

Centralizes the fixed values of the listing format and of the ncdu export
format: bucket names, flag characters, size unit and program metadata.
"""

from typing import Tuple

PROGNAME = "boxdu"
PROGVER = "0.1"

# Root directory name shown by the visualizer
ROOT_NAME = "boxbackup"

# The listing reports sizes in blocks of this many bytes
BLOCK_SIZE = 4096

# -----------------------------------------------------------------------------
# BUCKETS
# -----------------------------------------------------------------------------
BUCKET_CURRENT = "current"
BUCKET_DELETED = "deleted"
BUCKET_UNCLEAR = "unclear"
BUCKET_OLD = "old"

# Serialization order of the bucket subtrees
BUCKETS: Tuple[str, ...] = (
    BUCKET_CURRENT,
    BUCKET_DELETED,
    BUCKET_UNCLEAR,
    BUCKET_OLD,
)

# -----------------------------------------------------------------------------
# LISTING FLAGS
# -----------------------------------------------------------------------------
FLAG_DELETED = "X"
FLAG_ATTRIBUTES = "a"
FLAG_OLD = "o"
FLAG_REMOVE_ASAP = "R"

# -----------------------------------------------------------------------------
# EXTERNAL COLLABORATORS
# -----------------------------------------------------------------------------
DEFAULT_QUERY_COMMAND = "bbackupquery"
DEFAULT_QUERY_ARGUMENTS: Tuple[str, ...] = ("list -rdos /", "quit")
DEFAULT_VISUALIZER_COMMAND = "ncdu"

DEFAULT_FLUSH_THRESHOLD = 64 * 1024
