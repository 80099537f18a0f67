from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, configuration merge
(defaults, persisted file and flags), pipeline execution, and mapping of
failures onto exit codes.
"""

import argparse
import sys
from typing import Any, Dict, List, Optional

from boxdu.core.pipeline.engine import run_pipeline
from boxdu.core.pipeline.validator import validate_config
from boxdu.domain.config import get_default_config, load_config
from boxdu.domain.errors import BoxduError
from boxdu.domain.run_models import ConversionResult, PhaseTimer
from boxdu.infra.logging import LoggingConfig, configure_logging, get_logger, shutdown_logging
from boxdu.interface.cli import args as cli_args

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 for success, 1 for any fatal error).
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    logging_conf = LoggingConfig(
        level=cli_args.resolve_log_level(args),
        console=True,
        log_file=args.log_file,
    )
    configure_logging(logging_conf, force=True)

    try:
        return _run(args)
    finally:
        shutdown_logging()


def _run(args: argparse.Namespace) -> int:
    base_conf = get_default_config() if args.use_defaults else load_config()
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))

    clean_conf, warnings = validate_config(raw_conf, strict=False)
    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    timer = PhaseTimer(enabled=clean_conf["timing"])
    try:
        result = run_pipeline(clean_conf, timer=timer)
    except KeyboardInterrupt:
        logger.warning("Interrupted.")
        return 130
    except BoxduError as e:
        logger.error(str(e))
        return 1
    except OSError as e:
        logger.error(f"I/O failure: {e}")
        return 1

    _log_summary(result)
    return 0

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge non-None override values into the base configuration.

    Only keys already known to the base configuration are merged.
    """
    out = dict(base)
    for k, v in overrides.items():
        if k in out and v is not None:
            out[k] = v
    return out

# -----------------------------------------------------------------------------
# REPORTING
# -----------------------------------------------------------------------------

def _log_summary(result: ConversionResult) -> None:
    build = result.build
    logger.info(
        f"Processed {build.entries} entries: {build.inserted} files, "
        f"{result.serialize.directories} directories, {result.serialize.bytes:,} bytes"
    )
    if build.conflicts or build.malformed:
        logger.warning(
            f"Skipped {build.conflicts} conflicting and {build.malformed} malformed entries"
        )
    for phase, seconds in result.timings.items():
        logger.info(f"Timing: {phase} took {seconds:.3f}s")


if __name__ == "__main__":
    sys.exit(main())
