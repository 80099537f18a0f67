from __future__ import annotations

"""
External Collaborator Processes.

Launches the backup query tool that produces the listing and the
visualizer that browses the produced document. Neither protocol is
reimplemented here; both tools are treated as opaque commands.
"""

import io
import logging
import subprocess
from contextlib import contextmanager
from typing import Iterator, List, Sequence, TextIO

from boxdu.domain.errors import CollaboratorError
from boxdu.infra.fs import ENCODING, ENCODING_ERRORS, LISTING_NEWLINE

logger = logging.getLogger(__name__)


@contextmanager
def query_listing(command: str, arguments: Sequence[str]) -> Iterator[TextIO]:
    """
    Run the query tool and stream its standard output.

    Args:
        command: Query tool executable.
        arguments: Commands passed to the tool, ending with ``quit``.

    Yields:
        TextIO: The tool's stdout as text.

    Raises:
        CollaboratorError: If the tool cannot start or exits non-zero.
    """
    cmd: List[str] = [command, *arguments]
    logger.info(f"Running listing source: {' '.join(cmd)}")
    try:
        proc = subprocess.Popen(cmd, stdout=subprocess.PIPE)
    except OSError as e:
        raise CollaboratorError(f"Cannot launch '{command}': {e}") from e

    stream = io.TextIOWrapper(
        proc.stdout, encoding=ENCODING, errors=ENCODING_ERRORS, newline=LISTING_NEWLINE
    )
    try:
        yield stream
    except BaseException:
        proc.kill()
        proc.wait()
        raise
    finally:
        stream.close()

    returncode = proc.wait()
    if returncode != 0:
        raise CollaboratorError(f"'{command}' exited with status {returncode}")


def run_visualizer(command: str, document_path: str) -> int:
    """
    Open the document in the visualizer and wait for it to exit.

    Args:
        command: Visualizer executable.
        document_path: Path of the export document.

    Returns:
        int: Visualizer exit status.

    Raises:
        CollaboratorError: If the visualizer cannot start.
    """
    cmd = [command, "-f", document_path]
    logger.debug(f"Launching visualizer: {' '.join(cmd)}")
    try:
        return subprocess.call(cmd)
    except OSError as e:
        raise CollaboratorError(f"Cannot launch '{command}': {e}") from e
