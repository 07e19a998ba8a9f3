"""Terminal control helpers for interactive sessions.

Owns the raw-input lifecycle used by the file browser and the cursor
sequences used to erase a previously printed block in place.
"""

from __future__ import annotations

import contextlib
import logging
import os
import signal
import termios
import tty

LOGGER = logging.getLogger(__name__)

# Signals that end a session abruptly; their handlers are swapped for the
# session and restored afterwards.
_SESSION_SIGNALS = tuple(
    sig for sig in (getattr(signal, "SIGTERM", None), getattr(signal, "SIGHUP", None)) if sig is not None
)


class SessionInterrupted(Exception):
    """Raised inside an exclusive input session when a terminating signal arrives."""

    def __init__(self, signum: int) -> None:
        super().__init__(f"input session interrupted by signal {signum}")
        self.signum = signum


def erase_lines_sequence(count: int) -> str:
    """Return escape codes that move up ``count`` rows and clear everything below."""
    if count <= 0:
        return ""
    return f"\x1b[{count}A\r\x1b[0J"


def fd_is_tty(fd: int) -> bool:
    try:
        return os.isatty(fd)
    except OSError:
        return False


class TerminalController:
    """Raw-mode lifecycle for one input/output descriptor pair."""

    def __init__(self, stdin_fd: int, stdout_fd: int) -> None:
        """Capture tty state and bind stdin/stdout file descriptors."""
        self.stdin_fd = stdin_fd
        self.stdout_fd = stdout_fd
        self._saved_tty_state = termios.tcgetattr(stdin_fd) if fd_is_tty(stdin_fd) else None
        self._raw_enabled = False

    @property
    def interactive(self) -> bool:
        return self._saved_tty_state is not None

    def enable_raw_input(self) -> None:
        """Deliver keystrokes immediately with echo and signal keys disabled."""
        if self._saved_tty_state is None or self._raw_enabled:
            return
        tty.setraw(self.stdin_fd, termios.TCSAFLUSH)
        # Keep output post-processing so "\n" still returns the carriage.
        attrs = termios.tcgetattr(self.stdin_fd)
        attrs[1] |= termios.OPOST
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, attrs)
        os.write(self.stdout_fd, b"\x1b[?25l")
        self._raw_enabled = True

    def disable_raw_input(self) -> None:
        """Restore the tty attributes captured at construction and show the cursor."""
        if self._saved_tty_state is None or not self._raw_enabled:
            return
        self._raw_enabled = False
        os.write(self.stdout_fd, b"\x1b[?25h")
        termios.tcsetattr(self.stdin_fd, termios.TCSAFLUSH, self._saved_tty_state)

    @contextlib.contextmanager
    def exclusive_input(self):
        """Own the input descriptor for the duration of the block.

        Terminating signals raise :class:`SessionInterrupted` so the ``finally``
        clause still restores tty attributes and the previous handlers.
        """
        previous_handlers: dict[int, object] = {}

        def interrupt(signum, _frame) -> None:
            raise SessionInterrupted(signum)

        for sig in _SESSION_SIGNALS:
            try:
                previous_handlers[sig] = signal.signal(sig, interrupt)
            except ValueError:
                LOGGER.debug("cannot install handler for signal %s outside the main thread", sig)
        try:
            self.enable_raw_input()
            yield self
        finally:
            self.disable_raw_input()
            for sig, handler in previous_handlers.items():
                signal.signal(sig, handler if handler is not None else signal.SIG_DFL)


__all__ = [
    "SessionInterrupted",
    "TerminalController",
    "erase_lines_sequence",
    "fd_is_tty",
]
