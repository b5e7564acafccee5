"""Shared conversion core: work units and the freshness check."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from media_converter.types import StrPath

logger = logging.getLogger(__name__)

WORKER_COUNT = 32


@dataclass(frozen=True)
class WorkUnit:
    """One source-to-destination conversion task.

    Parameters
    ----------
    source : str
        Path of the file to convert.
    destination : str
        Rendered output path.
    """

    source: str
    destination: str


def is_fresh(source: StrPath, destination: StrPath) -> bool:
    """Return whether ``destination`` is up to date with ``source``.

    A destination whose modification time is equal to or later than the
    source's is fresh. A missing destination is never fresh.

    Raises
    ------
    OSError
        If either path cannot be stat'ed for any reason other than the
        destination not existing.
    """
    source_mtime = os.stat(source).st_mtime_ns
    try:
        destination_mtime = os.stat(destination).st_mtime_ns
    except FileNotFoundError:
        return False
    return destination_mtime >= source_mtime


def remove_partial_output(unit: WorkUnit) -> None:
    """Best-effort removal of a destination left behind by a failed conversion."""
    try:
        os.remove(unit.destination)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("could not remove partial output %s: %s", unit.destination, exc)
