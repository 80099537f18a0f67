from __future__ import annotations

"""
Backup Forest Builder.

Builds one directory tree per bucket from the flat listing. The query tool
lists entries grouped by directory, so consecutive entries usually share
their parent path; a single cached (parent path, node) slot per bucket
spares the walk from the root for those entries.
"""

import logging
from typing import Dict, Iterable, Optional, Sequence, Tuple

from boxdu.core.parsing.flags import classify_flags, has_removal_flag
from boxdu.domain.constants import BLOCK_SIZE, BUCKET_CURRENT, BUCKETS
from boxdu.domain.run_models import BuildStats
from boxdu.domain.tree_models import Entry, Forest, Tree

logger = logging.getLogger(__name__)


class ForestBuilder:
    """
    Incremental builder for the four bucket trees.

    Args:
        use_cache: Reuse the last resolved parent directory per bucket.
            Disabling it changes performance only, never the result.
    """

    def __init__(self, use_cache: bool = True) -> None:
        self.use_cache = use_cache
        self.forest = Forest()
        self.stats = BuildStats()
        self._cache: Dict[str, Optional[Tuple[str, Tree]]] = {b: None for b in BUCKETS}

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def add_entry(self, entry: Entry) -> bool:
        """
        Classify an entry and insert it into its bucket tree.

        Args:
            entry: Parsed listing entry.

        Returns:
            bool: True if the entry added bytes to a leaf.
        """
        self.stats.entries += 1
        if has_removal_flag(entry.flags):
            self.stats.removal_flagged += 1
            logger.debug(f"Entry {entry.id:x} is marked for removal: {'/'.join(entry.path)}")

        if entry.size_units == 0:
            self.stats.skipped_empty += 1
            return False

        inserted = self.insert(classify_flags(entry.flags), entry.path, entry.size_units)
        if inserted:
            self.stats.inserted += 1
        else:
            self.stats.conflicts += 1
        return inserted

    def insert(self, bucket: str, path: Sequence[str], size_units: int) -> bool:
        """
        Add ``size_units`` blocks to the leaf at ``path`` in ``bucket``.

        Zero sizes leave the tree untouched. Structural conflicts are logged
        and only discard this insertion.

        Args:
            bucket: Target bucket name.
            path: Path segments; the last one names the leaf.
            size_units: Size in storage blocks.

        Returns:
            bool: True if a leaf was created or incremented.
        """
        if size_units == 0:
            return False
        if not path:
            logger.warning(f"Ignoring entry with empty path in '{bucket}'")
            return False

        parent = self._resolve_parent(bucket, path)
        if parent is None:
            return False

        name = path[-1]
        current = parent.get(name)
        if current is None:
            current = 0
        elif isinstance(current, dict):
            logger.warning(f"Path conflicts with a directory in '{bucket}': {'/'.join(path)}")
            return False
        elif bucket == BUCKET_CURRENT:
            logger.warning(f"Duplicate current entry: {'/'.join(path)}")
            return False

        parent[name] = current + size_units * BLOCK_SIZE
        return True

    def build(self) -> Forest:
        return self.forest

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS
    # -------------------------------------------------------------------------

    def _resolve_parent(self, bucket: str, path: Sequence[str]) -> Optional[Tree]:
        """Find or create the directory holding the last path segment."""
        prefix = "/".join(path[:-1])

        cached = self._cache[bucket]
        if self.use_cache and cached is not None and cached[0] == prefix:
            return cached[1]

        node = self.forest[bucket]
        for segment in path[:-1]:
            child = node.get(segment)
            if child is None:
                child = {}
                node[segment] = child
            elif not isinstance(child, dict):
                logger.warning(
                    f"Path conflicts with a file in '{bucket}': {'/'.join(path)} (at '{segment}')"
                )
                return None
            node = child

        if self.use_cache:
            self._cache[bucket] = (prefix, node)
        return node


def build_forest(entries: Iterable[Entry], use_cache: bool = True) -> Tuple[Forest, BuildStats]:
    """
    Build the forest from an iterable of entries.

    Returns:
        Tuple[Forest, BuildStats]: The populated forest and its counters.
    """
    builder = ForestBuilder(use_cache=use_cache)
    for entry in entries:
        builder.add_entry(entry)
    return builder.build(), builder.stats
