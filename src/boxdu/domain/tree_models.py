from __future__ import annotations

"""
Backup Tree Data Models.

Provides the recursive type definitions used to build the per-bucket
directory trees, plus the parsed listing entry and the forest that wraps
the four bucket trees for serialization.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple, Union

from boxdu.domain.constants import BUCKETS, ROOT_NAME

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

# A directory maps segment names to subdirectories or to leaf sizes in bytes
Tree = Dict[str, Union["Tree", int]]


@dataclass(frozen=True)
class Entry:
    """
    One parsed listing line.

    Attributes:
        id: Object identifier on the store.
        flags: Raw flag characters.
        size_units: Size in storage blocks.
        path: Path segments, never empty strings.
    """
    id: int
    flags: str
    size_units: int
    path: Tuple[str, ...]


@dataclass
class Forest:
    """
    The four bucket trees, keyed by bucket name.

    Serialization drains the trees in place, so a forest can only be
    serialized once.
    """
    trees: Dict[str, Tree] = field(default_factory=lambda: {b: {} for b in BUCKETS})

    def __getitem__(self, bucket: str) -> Tree:
        return self.trees[bucket]

    def as_root(self) -> Tree:
        """Wrap the bucket trees under the synthetic root, in bucket order."""
        buckets: Tree = {}
        for bucket in BUCKETS:
            buckets[bucket] = self.trees[bucket]
        return {ROOT_NAME: buckets}

    def is_empty(self) -> bool:
        return not any(self.trees[b] for b in BUCKETS)
