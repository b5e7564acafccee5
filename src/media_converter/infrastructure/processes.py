"""Cancellable launching of external converter processes."""

from __future__ import annotations

import contextlib
import logging
import shutil
import subprocess
import threading
from collections.abc import Iterable, Sequence
from typing import IO, Any, TypeAlias

from media_converter.errors import CancelledError, ProcessError, ToolNotFoundError

logger = logging.getLogger(__name__)

Argv: TypeAlias = Sequence[str]
StreamSpec: TypeAlias = int | IO[Any] | None


def _terminate(process: subprocess.Popen[bytes]) -> None:
    if process.poll() is None:
        with contextlib.suppress(ProcessLookupError):
            process.terminate()


class CancelToken:
    """Cancellation handle shared by every operation of a run.

    Processes started through :meth:`spawn` are tracked until they are
    waited on. :meth:`cancel` sends each tracked process a termination
    request, cancels all child tokens and makes every later :meth:`spawn`
    fail with :class:`CancelledError`.

    Parameters
    ----------
    parent : CancelToken | None, default=None
        Token whose cancellation also cancels this one.
    """

    def __init__(self, parent: CancelToken | None = None) -> None:
        self._lock = threading.Lock()
        self._event = threading.Event()
        self._processes: set[subprocess.Popen[bytes]] = set()
        self._children: set[CancelToken] = set()
        self._parent = parent
        if parent is not None:
            parent._adopt(self)

    @property
    def cancelled(self) -> bool:
        """Whether :meth:`cancel` was called on this token or an ancestor."""
        return self._event.is_set()

    def cancel(self) -> None:
        """Cancel the token, its children and every tracked process."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            processes = list(self._processes)
            children = list(self._children)
        for process in processes:
            _terminate(process)
        for child in children:
            child.cancel()

    def wait_cancelled(self, timeout: float | None = None) -> bool:
        """Block until the token is cancelled or ``timeout`` elapses."""
        return self._event.wait(timeout)

    def raise_if_cancelled(self) -> None:
        """Raise :class:`CancelledError` if the token is cancelled."""
        if self._event.is_set():
            raise CancelledError()

    def child(self) -> CancelToken:
        """Return a token cancelled together with this one."""
        return CancelToken(parent=self)

    def close(self) -> None:
        """Cancel this token and detach it from its parent."""
        self.cancel()
        if self._parent is not None:
            self._parent._release(self)

    def __enter__(self) -> CancelToken:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _adopt(self, child: CancelToken) -> None:
        with self._lock:
            if not self._event.is_set():
                self._children.add(child)
                return
        child.cancel()

    def _release(self, child: CancelToken) -> None:
        with self._lock:
            self._children.discard(child)

    def spawn(
        self,
        argv: Argv,
        *,
        stdin: StreamSpec = None,
        stdout: StreamSpec = None,
        stderr: StreamSpec = None,
    ) -> subprocess.Popen[bytes]:
        """Start ``argv`` under this token.

        Standard streams default to the ones inherited from this process.

        Raises
        ------
        CancelledError
            If the token is already cancelled.
        OSError
            If the process cannot be started.
        """
        self.raise_if_cancelled()
        logger.debug("starting %s", " ".join(argv))
        process = subprocess.Popen(list(argv), stdin=stdin, stdout=stdout, stderr=stderr)
        with self._lock:
            if not self._event.is_set():
                self._processes.add(process)
                return process
        # Cancelled while the process was being launched.
        _terminate(process)
        process.wait()
        raise CancelledError(f"{argv[0]}: cancelled before start")

    def wait(self, process: subprocess.Popen[bytes]) -> None:
        """Wait for a process started by :meth:`spawn` and check its status.

        Raises
        ------
        CancelledError
            If the process failed after the token was cancelled.
        ProcessError
            If the process exited with a non-zero status.
        """
        try:
            returncode = process.wait()
        finally:
            with self._lock:
                self._processes.discard(process)
        if returncode == 0:
            return
        argv = [str(arg) for arg in process.args]  # type: ignore[union-attr]
        if self._event.is_set():
            raise CancelledError(f"{argv[0]}: terminated by cancellation")
        raise ProcessError(argv, returncode)

    def run(self, argv: Argv, *, capture: bool = False) -> bytes:
        """Run ``argv`` to completion.

        Parameters
        ----------
        argv : Sequence[str]
            Command line.
        capture : bool, default=False
            Capture standard output and return it.

        Returns
        -------
        bytes
            Captured standard output (empty unless ``capture`` is set).
        """
        process = self.spawn(argv, stdout=subprocess.PIPE if capture else None)
        try:
            output, _ = process.communicate()
        finally:
            self.wait(process)
        return output or b""


def require_tools(tools: Iterable[str]) -> None:
    """Check that every tool is on ``PATH``.

    Raises
    ------
    ToolNotFoundError
        For the first missing tool.
    """
    for tool in tools:
        if shutil.which(tool) is None:
            raise ToolNotFoundError(tool)


def which_tools(tools: Iterable[str]) -> dict[str, str | None]:
    """Return the resolved location of each tool (``None`` when missing)."""
    return {tool: shutil.which(tool) for tool in tools}
