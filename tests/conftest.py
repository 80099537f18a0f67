from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared listing fixtures in the query tool's output format.
"""

import os
import sys
from typing import Callable, List

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
PREAMBLE: List[str] = [
    "NOTICE:  Box Backup Query Tool v0.11, (c) Ben Summers and contributors 2003-2010\n",
    "Login complete.\n",
    "\n",
    'Type "help" for a list of commands.\n',
    "\n",
]

SAMPLE_ENTRIES: List[str] = [
    "1 f 10 dir1/file1\n",
    "2 fo 5 dir1/file1\n",
    "3 fX 1 dir2/file2\n",
]

SAMPLE_DOCUMENT = (
    '[1,0,{"progname":"boxdu","progver":"0.1"},\n'
    '[{"name":"boxbackup"},\n'
    '[{"name":"current"},\n'
    '[{"name":"dir1"},\n'
    '{"name":"file1","dsize":40960}]],\n'
    '[{"name":"deleted"},\n'
    '[{"name":"dir2"},\n'
    '{"name":"file2","dsize":4096}]],\n'
    '[{"name":"unclear"}],\n'
    '[{"name":"old"},\n'
    '[{"name":"dir1"},\n'
    '{"name":"file1","dsize":20480}]]]]\n'
)


@pytest.fixture
def preamble() -> List[str]:
    """The five banner lines printed by the query tool."""
    return list(PREAMBLE)


@pytest.fixture
def make_listing() -> Callable[[List[str]], List[str]]:
    """
    Return a factory prepending the query tool banner to entry lines.

    Returns:
        Callable: entries -> full listing lines.
    """
    def _make(entries: List[str]) -> List[str]:
        return PREAMBLE + list(entries)
    return _make


@pytest.fixture
def sample_listing(make_listing) -> List[str]:
    """The three-entry listing used by the end-to-end example."""
    return make_listing(SAMPLE_ENTRIES)


@pytest.fixture
def sample_document() -> str:
    """Exact export document produced from ``sample_listing``."""
    return SAMPLE_DOCUMENT


@pytest.fixture
def listing_file(tmp_path, sample_listing):
    """Write ``sample_listing`` to disk and return its path."""
    path = tmp_path / "listing.txt"
    path.write_text("".join(sample_listing), encoding="utf-8")
    return path
