from __future__ import annotations

"""
Conversion Run Data Models.

Defines the statistics and result structures exchanged between the
conversion engine and the interface layer, and the per-run phase timer.
"""

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional

# -----------------------------------------------------------------------------
# STATISTICS
# -----------------------------------------------------------------------------

@dataclass
class BuildStats:
    """
    Counters collected while building the forest.

    Attributes:
        entries: Entry lines seen after the preamble.
        inserted: Entries that added bytes to a leaf.
        skipped_empty: Zero-size entries (directories and empty files).
        conflicts: Entries discarded because of a structural conflict.
        malformed: Lines after the preamble that could not be parsed.
        removal_flagged: Entries carrying the remove-asap flag.
    """
    entries: int = 0
    inserted: int = 0
    skipped_empty: int = 0
    conflicts: int = 0
    malformed: int = 0
    removal_flagged: int = 0


@dataclass
class SerializeStats:
    directories: int = 0
    files: int = 0
    bytes: int = 0


@dataclass(frozen=True)
class ConversionResult:
    """
    Outcome of one listing-to-document conversion.

    Attributes:
        build: Forest construction counters.
        serialize: Document emission counters.
        timings: Elapsed seconds per phase; empty unless timing was enabled.
        output_path: Explicit destination, or None when the visualizer was used.
        visualizer_status: Exit status of the visualizer, if it was launched.
    """
    build: BuildStats
    serialize: SerializeStats
    timings: Dict[str, float] = field(default_factory=dict)
    output_path: Optional[str] = None
    visualizer_status: Optional[int] = None

# -----------------------------------------------------------------------------
# TIMING
# -----------------------------------------------------------------------------

class PhaseTimer:
    """
    Accumulates elapsed wall time per named phase.

    A disabled timer records nothing, so callers can time unconditionally.
    """

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self.elapsed: Dict[str, float] = {}

    @contextmanager
    def phase(self, name: str) -> Iterator[None]:
        if not self.enabled:
            yield
            return
        start = time.perf_counter()
        try:
            yield
        finally:
            self.elapsed[name] = self.elapsed.get(name, 0.0) + time.perf_counter() - start

    def report(self) -> Dict[str, float]:
        return dict(self.elapsed)
