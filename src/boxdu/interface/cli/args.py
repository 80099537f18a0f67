from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema and translates the parsed
namespace into configuration overrides.
"""

import argparse
import sys
from typing import Any, Dict, NoReturn

from boxdu.domain.constants import PROGNAME, PROGVER

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

class _Parser(argparse.ArgumentParser):
    """ArgumentParser reporting usage errors with exit status 1."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the boxdu CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = _Parser(
        prog=PROGNAME,
        description=(
            "Convert a Box Backup store listing into an ncdu export, split into "
            "current, deleted, unclear and old files."
        ),
    )

    # --- Input / Output ---
    p.add_argument(
        "input_path",
        nargs="?",
        default=None,
        metavar="INPUT",
        help="Saved listing to read ('-' for stdin). Omit to run the query tool.",
    )
    p.add_argument(
        "-o", "--output",
        dest="output_path",
        default=None,
        metavar="FILE",
        help="Write the export to FILE instead of opening it in the visualizer.",
    )

    # --- Diagnostics ---
    p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Report the time spent in each phase.",
    )
    p.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Hide the progress bar and informational messages.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        metavar="FILE",
        help="Also write diagnostics to a rotating log file.",
    )

    # --- Collaborators and tuning ---
    p.add_argument(
        "--query-command",
        dest="query_command",
        default=None,
        metavar="CMD",
        help="Query tool executable (default: bbackupquery).",
    )
    p.add_argument(
        "--visualizer",
        dest="visualizer_command",
        default=None,
        metavar="CMD",
        help="Visualizer executable, called as 'CMD -f FILE' (default: ncdu).",
    )
    p.add_argument(
        "--no-cache",
        action="store_true",
        help="Disable the parent directory cache (slower, same output).",
    )
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the persisted configuration file.",
    )
    p.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {PROGVER}",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset. ``None`` values mean
                        "keep the configured value".
    """
    overrides: Dict[str, Any] = {
        "input_path": args.input_path,
        "output_path": args.output_path,
        "query_command": args.query_command,
        "visualizer_command": args.visualizer_command,
    }

    if args.no_cache:
        overrides["use_cache"] = False
    if args.quiet:
        overrides["show_progress"] = False
    if args.debug:
        overrides["timing"] = True

    return overrides


def resolve_log_level(args: argparse.Namespace) -> str:
    """Verbose wins over quiet; warnings stay visible in every mode."""
    if args.verbose:
        return "DEBUG"
    if args.quiet:
        return "WARNING"
    return "INFO"
