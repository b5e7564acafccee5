"""Directory walk that discovers convertible files and feeds the work queue."""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable, Iterator

from media_converter.converter.core import WorkUnit, is_fresh
from media_converter.converter.workqueue import CompletionCounter, WorkQueue
from media_converter.errors import WalkError
from media_converter.infrastructure.processes import CancelToken
from media_converter.template import PathTemplate
from media_converter.types import StrPath

logger = logging.getLogger(__name__)


def _reraise(exc: OSError) -> None:
    raise exc


def iter_files(root: StrPath, *, recurse: bool = True) -> Iterator[str]:
    """Yield every non-directory entry below ``root`` in sorted order.

    With ``recurse`` disabled only the entries directly inside ``root`` are
    yielded.

    Raises
    ------
    OSError
        If a directory cannot be listed.
    """
    for dirpath, dirnames, filenames in os.walk(root, onerror=_reraise):
        if recurse:
            dirnames.sort()
        else:
            dirnames.clear()
        for filename in sorted(filenames):
            yield os.path.join(dirpath, filename)


def discover(
    root: StrPath,
    *,
    can_handle: Callable[[str], bool],
    template: PathTemplate,
    recurse: bool = True,
    token: CancelToken | None = None,
) -> Iterator[WorkUnit]:
    """Yield a work unit for every supported file whose output is stale.

    Parameters
    ----------
    root : str | os.PathLike
        Directory to scan.
    can_handle : Callable[[str], bool]
        Type predicate applied to each file path.
    template : PathTemplate
        Template rendering the destination of each file.
    recurse : bool, default=True
        Descend into subdirectories.
    token : CancelToken | None, default=None
        Discovery stops quietly once this token is cancelled.

    Raises
    ------
    WalkError
        On any filesystem error other than a missing destination.
    """
    try:
        for path in iter_files(root, recurse=recurse):
            if token is not None and token.cancelled:
                logger.debug("walk of %s stopped by cancellation", root)
                return
            if not can_handle(path):
                continue
            destination = template.render(path)
            if is_fresh(path, destination):
                logger.debug("%s is up to date", destination)
                continue
            yield WorkUnit(source=path, destination=destination)
    except OSError as exc:
        raise WalkError(str(exc)) from exc


def enqueue(
    unit: WorkUnit,
    queue: WorkQueue[WorkUnit],
    counter: CompletionCounter,
) -> None:
    """Register ``unit`` as pending and enqueue it, blocking while the queue is full."""
    counter.add(1)
    try:
        queue.put(unit)
    except BaseException:
        counter.done()
        raise


class WalkDriver(threading.Thread):
    """Thread running the walk and closing the queue when it ends.

    An exception raised by the walk is kept in :attr:`error` for the
    waiting thread to re-raise.
    """

    def __init__(
        self,
        units: Iterator[WorkUnit],
        queue: WorkQueue[WorkUnit],
        counter: CompletionCounter,
    ) -> None:
        super().__init__(name="walk-driver", daemon=True)
        self._units = units
        self._queue = queue
        self._counter = counter
        self.queued = 0
        self.error: BaseException | None = None

    def run(self) -> None:
        try:
            for unit in self._units:
                enqueue(unit, self._queue, self._counter)
                self.queued += 1
        except BaseException as exc:
            self.error = exc
        finally:
            self._queue.close()
