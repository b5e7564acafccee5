"""Fixed-size pool of worker threads draining the work queue."""

from __future__ import annotations

import logging
import threading

from media_converter.application.ports import FailureReporter, UnitConverter
from media_converter.converter.core import WORKER_COUNT, WorkUnit
from media_converter.converter.workqueue import CompletionCounter, WorkQueue
from media_converter.infrastructure.processes import CancelToken

logger = logging.getLogger(__name__)


class WorkerPool:
    """Run ``convert`` for every unit received from ``queue``.

    Each worker takes one unit at a time, reports a failure through
    ``reporter`` without stopping, and marks the unit done on ``counter``
    whatever the outcome. Workers return once the queue is closed and
    drained.

    Parameters
    ----------
    queue : WorkQueue[WorkUnit]
        Shared queue filled by the walk.
    counter : CompletionCounter
        Completion barrier; one ``done()`` per received unit.
    convert : UnitConverter
        Conversion strategy.
    reporter : FailureReporter
        Receives every per-unit failure.
    token : CancelToken
        Token handed to each conversion.
    size : int, default=WORKER_COUNT
        Number of worker threads.
    """

    def __init__(
        self,
        queue: WorkQueue[WorkUnit],
        counter: CompletionCounter,
        convert: UnitConverter,
        reporter: FailureReporter,
        token: CancelToken,
        size: int = WORKER_COUNT,
    ) -> None:
        if size <= 0:
            raise ValueError("pool size must be positive")
        self._queue = queue
        self._counter = counter
        self._convert = convert
        self._reporter = reporter
        self._token = token
        self._size = size
        self._threads: list[threading.Thread] = []
        self._failed = 0
        self._lock = threading.Lock()

    @property
    def failed(self) -> int:
        """Number of units that failed so far."""
        with self._lock:
            return self._failed

    def start(self) -> None:
        """Start the worker threads."""
        for index in range(self._size):
            thread = threading.Thread(
                target=self._work,
                name=f"convert-worker-{index}",
                daemon=True,
            )
            thread.start()
            self._threads.append(thread)

    def join(self, timeout: float | None = None) -> None:
        """Wait for every worker to exit."""
        for thread in self._threads:
            thread.join(timeout)

    def _work(self) -> None:
        for unit in self._queue:
            try:
                self._convert(self._token, unit)
            except Exception as exc:
                with self._lock:
                    self._failed += 1
                logger.debug("conversion of %s failed", unit.source, exc_info=True)
                self._reporter.report(unit, exc)
            finally:
                self._counter.done()
