"""Translate SIGINT/SIGTERM into cooperative cancellation."""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Callable, Iterable
from types import FrameType
from typing import TypeAlias

from media_converter.infrastructure.processes import CancelToken

logger = logging.getLogger(__name__)

DEFAULT_SIGNALS = (signal.SIGINT, signal.SIGTERM)

SignalHandler: TypeAlias = Callable[[int, FrameType | None], object] | int | signal.Handlers | None


class SignalCancellation:
    """Cancel ``token`` on the first interrupt or termination signal.

    After the first signal the previous handlers are restored, so a second
    signal reaches whatever handled it before. Handlers can only be installed from
    the main thread; elsewhere :meth:`install` is a no-op.

    Parameters
    ----------
    token : CancelToken
        Token cancelled when a signal arrives.
    signals : Iterable[signal.Signals], optional
        Signals to listen for.
    """

    def __init__(
        self,
        token: CancelToken,
        signals: Iterable[signal.Signals] = DEFAULT_SIGNALS,
    ) -> None:
        self.token = token
        self.signals = tuple(signals)
        self.received: signal.Signals | None = None
        self._previous: dict[signal.Signals, SignalHandler] = {}
        self._lock = threading.RLock()

    @property
    def installed(self) -> bool:
        return bool(self._previous)

    def install(self) -> None:
        """Install the handlers, remembering the ones they replace."""
        if threading.current_thread() is not threading.main_thread():
            logger.debug("not on the main thread; signal cancellation disabled")
            return
        with self._lock:
            for signum in self.signals:
                self._previous[signum] = signal.getsignal(signum)
                signal.signal(signum, self._handle)

    def uninstall(self) -> None:
        """Restore the handlers replaced by :meth:`install`."""
        with self._lock:
            previous, self._previous = self._previous, {}
        for signum, handler in previous.items():
            signal.signal(signum, signal.SIG_DFL if handler is None else handler)

    def _handle(self, signum: int, frame: FrameType | None) -> None:
        del frame
        self.uninstall()
        self.received = signal.Signals(signum)
        logger.warning("received %s, cancelling conversions", self.received.name)
        self.token.cancel()

    def __enter__(self) -> SignalCancellation:
        self.install()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.uninstall()
