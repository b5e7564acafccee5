"""Failure reporting for per-file conversion errors."""

from __future__ import annotations

import sys
import threading
from typing import TextIO

from media_converter.converter.core import WorkUnit


def format_failure(unit: WorkUnit, error: BaseException) -> str:
    """Return the one-line diagnostic for a failed unit."""
    return f"<{unit.source}>: {error}"


class StderrFailureReporter:
    """Write one ``<path>: error`` line per failed unit.

    Lines from concurrent workers are serialized so they never interleave.

    Parameters
    ----------
    stream : TextIO | None, default=None
        Destination stream; ``sys.stderr`` at report time when omitted.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream
        self._lock = threading.Lock()

    def report(self, unit: WorkUnit, error: BaseException) -> None:
        stream = self._stream or sys.stderr
        with self._lock:
            print(format_failure(unit, error), file=stream, flush=True)
