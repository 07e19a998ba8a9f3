"""Debounced terminal-resize watching.

``ResizeWatcher`` subscribes to resize notifications while output is an
interactive terminal and collapses bursts of events into a single callback
fired after a quiet period. Signal subscription and timer scheduling are
injected so tests can drive both deterministically.
"""

from __future__ import annotations

import logging
import signal
import sys
import threading
from collections.abc import Callable
from typing import Protocol

LOGGER = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.1

IDLE = "idle"
WATCHING = "watching"

Unsubscribe = Callable[[], None]
Subscribe = Callable[[Callable[[], None]], Unsubscribe | None]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


class ThreadingScheduler:
    """Run delayed callbacks on daemon ``threading.Timer`` threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


def subscribe_sigwinch(handler: Callable[[], None]) -> Unsubscribe | None:
    """Install ``handler`` for ``SIGWINCH`` and return an unsubscribe callback.

    Returns ``None`` when the platform has no ``SIGWINCH`` or the handler
    cannot be installed from the current thread.
    """
    sigwinch = getattr(signal, "SIGWINCH", None)
    if sigwinch is None:
        return None

    def on_signal(_signum, _frame) -> None:
        handler()

    try:
        previous = signal.signal(sigwinch, on_signal)
    except ValueError:
        LOGGER.debug("cannot install SIGWINCH handler outside the main thread")
        return None

    def unsubscribe() -> None:
        try:
            signal.signal(sigwinch, previous if previous is not None else signal.SIG_DFL)
        except ValueError:
            LOGGER.debug("cannot restore SIGWINCH handler outside the main thread")

    return unsubscribe


def stdout_is_interactive() -> bool:
    try:
        return sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


class ResizeWatcher:
    """Two-state (idle/watching) debounced resize subscription."""

    def __init__(
        self,
        on_resize: Callable[[], None],
        *,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        subscribe: Subscribe = subscribe_sigwinch,
        scheduler: Scheduler | None = None,
        is_interactive: Callable[[], bool] = stdout_is_interactive,
    ) -> None:
        self._on_resize = on_resize
        self._debounce_seconds = max(0.0, debounce_seconds)
        self._subscribe = subscribe
        self._scheduler = scheduler if scheduler is not None else ThreadingScheduler()
        self._is_interactive = is_interactive
        self._lock = threading.RLock()
        self._unsubscribe: Unsubscribe | None = None
        self._pending: TimerHandle | None = None
        self._generation = 0
        self.state = IDLE

    @property
    def watching(self) -> bool:
        return self.state == WATCHING

    def start(self) -> bool:
        """Begin watching; return whether the watcher is now active.

        Non-interactive output stays idle and never redraws.
        """
        with self._lock:
            if self.state == WATCHING:
                return True
            if not self._is_interactive():
                return False
            unsubscribe = self._subscribe(self.notify)
            if unsubscribe is None:
                return False
            self._unsubscribe = unsubscribe
            self.state = WATCHING
            return True

    def stop(self) -> None:
        """Unsubscribe and cancel any pending redraw."""
        with self._lock:
            if self.state != WATCHING:
                return
            self.state = IDLE
            unsubscribe = self._unsubscribe
            self._unsubscribe = None
            self._cancel_pending()
        if unsubscribe is not None:
            unsubscribe()

    def notify(self) -> None:
        """Record one resize event, re-arming the debounce timer."""
        with self._lock:
            if self.state != WATCHING:
                return
            self._cancel_pending()
            self._generation += 1
            generation = self._generation
            self._pending = self._scheduler.call_later(
                self._debounce_seconds,
                lambda: self._fire(generation),
            )

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _fire(self, generation: int) -> None:
        with self._lock:
            # A cancelled timer thread may already be running; only the latest fires.
            if self.state != WATCHING or generation != self._generation:
                return
            self._pending = None
        self._on_resize()


__all__ = [
    "DEFAULT_DEBOUNCE_SECONDS",
    "IDLE",
    "WATCHING",
    "TimerHandle",
    "Scheduler",
    "ThreadingScheduler",
    "ResizeWatcher",
    "subscribe_sigwinch",
    "stdout_is_interactive",
]
