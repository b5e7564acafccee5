"""Application-layer result objects."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BatchResult:
    """Outcome of one directory conversion run."""

    queued: int
    failed: int
    interrupted: bool = False

    @property
    def succeeded(self) -> int:
        return self.queued - self.failed
