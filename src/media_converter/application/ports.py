"""Application ports for clean architecture boundaries."""

from __future__ import annotations

from typing import Protocol

from media_converter.converter.core import WorkUnit
from media_converter.infrastructure.processes import CancelToken


class UnitConverter(Protocol):
    """Convert one work unit, honouring the cancellation token."""

    def __call__(self, token: CancelToken, unit: WorkUnit) -> None:
        """Raise on failure."""


class FailureReporter(Protocol):
    """Receive per-unit conversion failures."""

    def report(self, unit: WorkUnit, error: BaseException) -> None:
        """Record one failure."""
