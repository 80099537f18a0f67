from __future__ import annotations

"""
Core conversion pipeline.

This module coordinates a complete run:
1. Opens the listing source (saved file, stdin, or the query tool).
2. Validates the banner and builds the forest from the whole listing.
3. Serializes the forest to the explicit output file, or to a temporary
   document that is opened in the visualizer and removed afterwards.

The two phases never overlap: the destination is only opened once the
listing has been read completely.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, Optional, TextIO, Tuple

from tqdm import tqdm

from boxdu.core.analysis.tree_builder import ForestBuilder
from boxdu.core.analysis.tree_serializer import serialize_forest
from boxdu.core.parsing.listing import iter_entries
from boxdu.domain.constants import DEFAULT_FLUSH_THRESHOLD
from boxdu.domain.run_models import BuildStats, ConversionResult, PhaseTimer, SerializeStats
from boxdu.domain.tree_models import Forest
from boxdu.infra.external import query_listing, run_visualizer
from boxdu.infra.fs import atomic_output, open_document, open_listing, temporary_document

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PHASES
# -----------------------------------------------------------------------------

def build_from_listing(
        lines: Iterable[str],
        *,
        use_cache: bool = True,
        show_progress: bool = False,
) -> Tuple[Forest, BuildStats]:
    """
    Read a complete listing into a forest.

    Args:
        lines: Raw query tool output, banner included.
        use_cache: Enable the per-bucket parent directory cache.
        show_progress: Render a progress bar on stderr.

    Returns:
        Tuple[Forest, BuildStats]: The built forest and its counters.

    Raises:
        ListingFormatError: If the banner is invalid. Raised before any
            entry is processed.
    """
    builder = ForestBuilder(use_cache=use_cache)
    entries = iter_entries(lines, builder.stats)

    with tqdm(
        entries,
        desc="Reading listing",
        unit=" entries",
        disable=not show_progress,
        leave=False,
    ) as bar:
        for entry in bar:
            builder.add_entry(entry)

    stats = builder.stats
    logger.debug(
        f"Listing read: {stats.entries} entries, {stats.inserted} inserted, "
        f"{stats.skipped_empty} empty, {stats.conflicts} conflicts, {stats.malformed} malformed"
    )
    if stats.removal_flagged:
        logger.info(f"{stats.removal_flagged} entries are marked for removal by the store")
    return builder.build(), stats


def convert_listing(
        lines: Iterable[str],
        out: TextIO,
        *,
        use_cache: bool = True,
        show_progress: bool = False,
        timer: Optional[PhaseTimer] = None,
        flush_threshold: int = DEFAULT_FLUSH_THRESHOLD,
) -> ConversionResult:
    """
    Convert a listing stream into an export document on ``out``.

    Args:
        lines: Raw query tool output, banner included.
        out: Destination text stream.
        use_cache: Enable the per-bucket parent directory cache.
        show_progress: Render a progress bar on stderr.
        timer: Phase timer; a disabled one is used when omitted.
        flush_threshold: Serializer buffer size in characters.

    Returns:
        ConversionResult: Build and serialization counters.
    """
    timer = timer or PhaseTimer(enabled=False)

    with timer.phase("build"):
        forest, build_stats = build_from_listing(
            lines, use_cache=use_cache, show_progress=show_progress
        )
    with timer.phase("serialize"):
        serialize_stats = serialize_forest(forest, out, flush_threshold=flush_threshold)

    return ConversionResult(build=build_stats, serialize=serialize_stats, timings=timer.report())

# -----------------------------------------------------------------------------
# FULL RUN
# -----------------------------------------------------------------------------

def run_pipeline(config: Dict[str, Any], timer: Optional[PhaseTimer] = None) -> ConversionResult:
    """
    Execute a full run from a validated configuration.

    Args:
        config: Normalized configuration (see ``validate_config``).
        timer: Phase timer; a disabled one is used when omitted.

    Returns:
        ConversionResult: Counters, timings and destination details.

    Raises:
        ListingFormatError: Invalid listing banner.
        CollaboratorError: Query tool or visualizer failure.
        OSError: Input or output file cannot be opened.
    """
    timer = timer or PhaseTimer(enabled=False)

    with timer.phase("build"), _open_source(config) as lines:
        forest, build_stats = build_from_listing(
            lines,
            use_cache=config["use_cache"],
            show_progress=config["show_progress"],
        )

    output_path = config.get("output_path")
    if output_path:
        with timer.phase("serialize"), atomic_output(output_path) as out:
            serialize_stats = _write(forest, out, config)
        logger.info(f"Export written to {output_path}")
        return ConversionResult(
            build=build_stats,
            serialize=serialize_stats,
            timings=timer.report(),
            output_path=output_path,
        )

    with temporary_document() as document_path:
        with timer.phase("serialize"), open_document(document_path) as out:
            serialize_stats = _write(forest, out, config)
        status = run_visualizer(config["visualizer_command"], document_path)

    if status != 0:
        logger.warning(f"Visualizer exited with status {status}")

    return ConversionResult(
        build=build_stats,
        serialize=serialize_stats,
        timings=timer.report(),
        visualizer_status=status,
    )

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

@contextmanager
def _open_source(config: Dict[str, Any]) -> Iterator[Iterable[str]]:
    """Yield the listing lines from a file, stdin or the query tool."""
    input_path = config.get("input_path")
    if input_path:
        logger.debug(f"Reading listing from {input_path}")
        with open_listing(input_path) as stream:
            yield stream
        return

    with query_listing(config["query_command"], config["query_arguments"]) as stream:
        yield stream


def _write(forest: Forest, out: TextIO, config: Dict[str, Any]) -> SerializeStats:
    return serialize_forest(forest, out, flush_threshold=config["flush_threshold"])
