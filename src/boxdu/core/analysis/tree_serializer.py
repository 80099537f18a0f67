from __future__ import annotations

"""
ncdu Export Serializer.

Streams a Forest as an ncdu JSON export document. The traversal keeps its
own stack of frames instead of recursing, so listing depth is bounded by
heap size only, and output is flushed in chunks to keep memory flat.

Serialization consumes the forest: every child is removed from its parent
as it is written.
"""

import logging
from typing import Iterator, List, TextIO, Tuple

from boxdu.domain.constants import DEFAULT_FLUSH_THRESHOLD, PROGNAME, PROGVER, ROOT_NAME
from boxdu.domain.run_models import SerializeStats
from boxdu.domain.tree_models import Forest, Tree

logger = logging.getLogger(__name__)

# Frame: the directory being emitted and a cursor over its remaining names
_Frame = Tuple[Tree, Iterator[str]]

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def serialize_forest(
        forest: Forest,
        out: TextIO,
        flush_threshold: int = DEFAULT_FLUSH_THRESHOLD,
) -> SerializeStats:
    """
    Write the forest as an ncdu export document and drain it.

    Document shape::

        [1,0,{"progname":"boxdu","progver":"0.1"},
        [{"name":"boxbackup"},
        [{"name":"current"}, ...],
        [{"name":"deleted"}, ...],
        [{"name":"unclear"}, ...],
        [{"name":"old"}, ...]]]

    Args:
        forest: The built forest. Empty after this call.
        out: Text stream receiving the document.
        flush_threshold: Buffered characters that trigger a write to ``out``.

    Returns:
        SerializeStats: Emitted directory, file and byte totals.
    """
    writer = _BufferedWriter(out, flush_threshold)
    writer.write(f'[1,0,{{"progname":"{PROGNAME}","progver":"{PROGVER}"}},\n')
    stats = _drain_tree(ROOT_NAME, forest.as_root()[ROOT_NAME], writer)
    writer.write("]\n")
    writer.flush()

    logger.debug(
        f"Serialized {stats.directories} directories, {stats.files} files, {stats.bytes} bytes"
    )
    return stats


def escape_name(name: str) -> str:
    """
    Escape backslashes and double quotes for a JSON string literal.

    Control characters are left untouched.
    """
    return name.replace("\\", "\\\\").replace('"', '\\"')

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

class _BufferedWriter:
    """Collects output chunks and hands them to the stream in batches."""

    def __init__(self, out: TextIO, threshold: int) -> None:
        self._out = out
        self._threshold = max(1, threshold)
        self._chunks: List[str] = []
        self._size = 0

    def write(self, text: str) -> None:
        self._chunks.append(text)
        self._size += len(text)
        if self._size >= self._threshold:
            self.flush()

    def flush(self) -> None:
        if self._chunks:
            self._out.write("".join(self._chunks))
            self._chunks = []
            self._size = 0


def _drain_tree(name: str, tree: Tree, writer: _BufferedWriter) -> SerializeStats:
    """
    Emit ``tree`` as a directory array named ``name``, depth-first.

    Each step looks at the top frame and takes its next child: a leaf is
    written in place, a directory gets its header written and its own frame
    pushed, and an exhausted frame closes its array and is popped.
    """
    stats = SerializeStats(directories=1)
    writer.write(f'[{{"name":"{escape_name(name)}"}}')
    stack: List[_Frame] = [(tree, iter(list(tree)))]

    while stack:
        node, names = stack[-1]
        child_name = next(names, None)

        if child_name is None:
            stack.pop()
            writer.write("]")
            continue

        child = node.pop(child_name)
        if isinstance(child, dict):
            stats.directories += 1
            writer.write(f',\n[{{"name":"{escape_name(child_name)}"}}')
            stack.append((child, iter(list(child))))
        else:
            stats.files += 1
            stats.bytes += child
            writer.write(f',\n{{"name":"{escape_name(child_name)}","dsize":{child}}}')

    return stats
