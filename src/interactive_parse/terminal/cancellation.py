"""Out-of-band undo requests.

A background source (another thread, a signal handler) may ask for an undo
while a prompt is blocking. Requests are only queued here; the traversal
observes them before its next prompt and never interrupts one in flight.
"""

from __future__ import annotations

import queue
import signal
import threading
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import FrameType

DEFAULT_REASON: Final[str] = "undo"


class CancellationSource:
    """Thread-safe FIFO of pending undo requests."""

    def __init__(self) -> None:
        self._queue: queue.SimpleQueue[str] = queue.SimpleQueue()

    def request(self, reason: str = DEFAULT_REASON) -> None:
        self._queue.put(reason)

    def poll(self) -> str | None:
        """Pop one pending request, or return ``None`` when there is none."""

        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def drain(self) -> int:
        """Discard every pending request and return how many there were."""

        drained = 0
        while self.poll() is not None:
            drained += 1
        return drained

    def install_signal_handler(self, signum: int | None = None) -> Callable[[], None]:
        """Queue an undo request whenever ``signum`` arrives.

        Defaults to ``SIGQUIT`` (Ctrl-\\) where available. Returns a callable
        that restores the previous handler. Must run on the main thread.
        """

        if threading.current_thread() is not threading.main_thread():
            raise RuntimeError("signal handlers can only be installed from the main thread")
        resolved = int(signum) if signum is not None else _default_signal()

        def _handler(_signum: int, _frame: FrameType | None) -> None:
            self.request(f"signal:{resolved}")

        previous = signal.signal(resolved, _handler)

        def restore() -> None:
            signal.signal(resolved, previous)

        return restore


def _default_signal() -> int:
    quit_signal = getattr(signal, "SIGQUIT", None)
    if quit_signal is None:
        raise RuntimeError("no default undo signal on this platform; pass signum explicitly")
    return int(quit_signal)


__all__ = ["CancellationSource"]
