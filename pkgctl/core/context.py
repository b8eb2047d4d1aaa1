"""
Run context — the cancellation signal shared by a whole run.

One ``CancelContext`` is created per CLI invocation and handed to the
shell adapter. SIGINT/SIGTERM set it; the adapter polls it while a
child is running and terminates the child when it fires. Once set it
stays set: the remaining targets are never attempted.
"""

from __future__ import annotations

import signal
import threading
from collections.abc import Callable, Iterable


class CancelContext:
    """A one-shot, thread-safe cancellation flag."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._reason = ""

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        if not self._event.is_set():
            self._reason = reason
            self._event.set()

    def wait(self, timeout: float | None = None) -> bool:
        """Block until cancelled or ``timeout`` elapses. Returns ``cancelled``."""
        return self._event.wait(timeout)


def install_signal_handlers(
    ctx: CancelContext,
    signals: Iterable[signal.Signals] = (signal.SIGINT, signal.SIGTERM),
) -> Callable[[], None]:
    """Cancel ``ctx`` on the given signals.

    Returns a function that restores the previous handlers.
    """
    previous: dict[signal.Signals, object] = {}

    def _handler(signum: int, _frame: object) -> None:
        ctx.cancel(f"received {signal.Signals(signum).name}")

    for sig in signals:
        previous[sig] = signal.signal(sig, _handler)

    def restore() -> None:
        for sig, handler in previous.items():
            signal.signal(sig, handler)  # type: ignore[arg-type]

    return restore
