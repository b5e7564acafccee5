"""Bounded work queue and completion counter shared by the worker pool."""

from __future__ import annotations

import threading
from collections import deque
from collections.abc import Iterator
from typing import Generic, TypeVar

from media_converter.errors import QueueClosedError

T = TypeVar("T")


class WorkQueue(Generic[T]):
    """Bounded FIFO queue with an explicit close contract.

    The producer calls :meth:`close` once it has nothing more to send.
    Consumers keep receiving the items already queued; once the queue is
    closed *and* empty, :meth:`get` raises :class:`QueueClosedError` instead
    of blocking, and iteration stops.

    Parameters
    ----------
    maxsize : int
        Capacity; :meth:`put` blocks while the queue holds this many items.
    """

    def __init__(self, maxsize: int) -> None:
        if maxsize <= 0:
            raise ValueError("maxsize must be positive")
        self.maxsize = maxsize
        self._items: deque[T] = deque()
        self._closed = False
        self._mutex = threading.Lock()
        self._not_empty = threading.Condition(self._mutex)
        self._not_full = threading.Condition(self._mutex)

    @property
    def closed(self) -> bool:
        return self._closed

    def __len__(self) -> int:
        with self._mutex:
            return len(self._items)

    def put(self, item: T) -> None:
        """Append ``item``, blocking while the queue is full.

        Raises
        ------
        QueueClosedError
            If the queue is closed before or while waiting for room.
        """
        with self._not_full:
            while not self._closed and len(self._items) >= self.maxsize:
                self._not_full.wait()
            if self._closed:
                raise QueueClosedError("put on closed queue")
            self._items.append(item)
            self._not_empty.notify()

    def get(self) -> T:
        """Remove and return the oldest item, blocking while the queue is empty.

        Raises
        ------
        QueueClosedError
            If the queue is closed and drained.
        """
        with self._not_empty:
            while not self._items:
                if self._closed:
                    raise QueueClosedError("queue closed and drained")
                self._not_empty.wait()
            item = self._items.popleft()
            self._not_full.notify()
            return item

    def close(self) -> None:
        """Close the producer side and wake every blocked caller."""
        with self._mutex:
            self._closed = True
            self._not_empty.notify_all()
            self._not_full.notify_all()

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                yield self.get()
            except QueueClosedError:
                return


class CompletionCounter:
    """Countdown latch tracking units of work still pending.

    :meth:`add` registers units before they are dispatched, :meth:`done`
    marks one finished and :meth:`wait` blocks until the count is zero.
    """

    def __init__(self) -> None:
        self._count = 0
        self._cond = threading.Condition()

    @property
    def pending(self) -> int:
        with self._cond:
            return self._count

    def add(self, delta: int = 1) -> None:
        with self._cond:
            count = self._count + delta
            if count < 0:
                raise ValueError("negative completion counter")
            self._count = count
            if count == 0:
                self._cond.notify_all()

    def done(self) -> None:
        self.add(-1)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the count reaches zero.

        Returns
        -------
        bool
            ``False`` if ``timeout`` elapsed first.
        """
        with self._cond:
            return self._cond.wait_for(lambda: self._count == 0, timeout)
