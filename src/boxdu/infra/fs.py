from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Opening listing sources, creating temporary documents for the visualizer,
and writing explicit output files so that a failed run never leaves a
truncated target behind.
"""

import io
import os
import sys
import tempfile
from contextlib import contextmanager
from typing import Iterator, Optional, TextIO

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

UNIX_APP_DIR_NAME = ".boxdu"
STDIN_MARKER = "-"

# Backup listings may contain names that are not valid UTF-8; they are
# carried through byte for byte.
ENCODING = "utf-8"
ENCODING_ERRORS = "surrogateescape"
# Only "\n" ends a listing line; a "\r" may be part of a name.
LISTING_NEWLINE = "\n"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the directory holding the persistent configuration.

    Returns:
        str: Absolute path to ``~/.boxdu``. Not created here.
    """
    return os.path.abspath(os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME))

# -----------------------------------------------------------------------------
# INPUT
# -----------------------------------------------------------------------------

@contextmanager
def open_listing(path: str) -> Iterator[TextIO]:
    """
    Open a saved listing, or standard input for ``-``.

    Args:
        path: File path or the stdin marker.

    Yields:
        TextIO: Line-iterable text stream.

    Raises:
        OSError: If the file cannot be opened.
    """
    if path == STDIN_MARKER:
        buffer = getattr(sys.stdin, "buffer", None)
        if buffer is None:
            yield sys.stdin
            return
        stream = io.TextIOWrapper(
            buffer, encoding=ENCODING, errors=ENCODING_ERRORS, newline=LISTING_NEWLINE
        )
        try:
            yield stream
        finally:
            stream.detach()
        return

    with open(
            path, "r", encoding=ENCODING, errors=ENCODING_ERRORS, newline=LISTING_NEWLINE
    ) as f:
        yield f

# -----------------------------------------------------------------------------
# OUTPUT
# -----------------------------------------------------------------------------

@contextmanager
def atomic_output(path: str) -> Iterator[TextIO]:
    """
    Write a file through a sibling temporary file.

    The target is replaced only when the block completes without error;
    on failure the temporary file is removed and the target is untouched.

    Args:
        path: Final destination.

    Yields:
        TextIO: Writable text stream.
    """
    directory = os.path.dirname(os.path.abspath(path))
    fd, tmp_path = tempfile.mkstemp(
        prefix=f".{os.path.basename(path)}.", suffix=".tmp", dir=directory
    )
    try:
        with os.fdopen(fd, "w", encoding=ENCODING, errors=ENCODING_ERRORS) as f:
            yield f
        os.replace(tmp_path, path)
    except BaseException:
        remove_quietly(tmp_path)
        raise


@contextmanager
def temporary_document(suffix: str = ".json") -> Iterator[str]:
    """
    Provide a temporary file path that is removed when the block exits.

    Yields:
        str: Path of an empty temporary file.
    """
    fd, tmp_path = tempfile.mkstemp(prefix="boxdu-", suffix=suffix)
    os.close(fd)
    try:
        yield tmp_path
    finally:
        remove_quietly(tmp_path)


def open_document(path: str) -> TextIO:
    return open(path, "w", encoding=ENCODING, errors=ENCODING_ERRORS)


def remove_quietly(path: Optional[str]) -> None:
    """Delete a file, ignoring a file that is already gone."""
    if not path:
        return
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
