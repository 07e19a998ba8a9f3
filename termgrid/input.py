"""Low-level terminal input decoding.

Reads raw bytes from a descriptor and translates them into normalized key
tokens (``UP``, ``ENTER``, ``CTRL_C``, printable characters, ...).
"""

from __future__ import annotations

import os
import select
from typing import Protocol

ESC_SEQUENCE_TIMEOUT_MS = 25

_CONTROL_KEYS = {
    b"\x03": "CTRL_C",
    b"\x04": "CTRL_D",
    b"\t": "TAB",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
    b"\r": "ENTER",
    b"\n": "ENTER",
}

_ARROW_KEYS = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
}


class KeySource(Protocol):
    def read_key(self) -> str: ...


class KeyReader:
    """Decode keystrokes from ``fd``; bytes read ahead stay with this reader."""

    def __init__(self, fd: int, timeout_ms: int | None = None) -> None:
        self.fd = fd
        self.timeout_ms = timeout_ms
        self._pending: list[bytes] = []

    def _read_ready_byte(self, timeout_ms: int) -> bytes | None:
        ready, _, _ = select.select([self.fd], [], [], max(0.0, timeout_ms / 1000.0))
        if not ready:
            return None
        ch = os.read(self.fd, 1)
        if not ch:
            return None
        return ch

    def _read_utf8_tail(self, lead: bytes) -> str:
        first = lead[0]
        if first >= 0xF0:
            needed = 3
        elif first >= 0xE0:
            needed = 2
        elif first >= 0xC0:
            needed = 1
        else:
            needed = 0
        data = lead
        for _ in range(needed):
            nxt = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if nxt is None:
                break
            data += nxt
        return data.decode("utf-8", errors="replace")

    def read_key(self) -> str:
        """Return the next key token, or ``""`` on timeout or end of input."""
        if self._pending:
            ch = self._pending.pop(0)
        else:
            if self.timeout_ms is not None:
                ready, _, _ = select.select([self.fd], [], [], max(0.0, self.timeout_ms / 1000.0))
                if not ready:
                    return ""
            ch = os.read(self.fd, 1)
            if not ch:
                return ""

        if ch in _CONTROL_KEYS:
            return _CONTROL_KEYS[ch]
        if ch == b" ":
            return "SPACE"
        if ch != b"\x1b":
            return self._read_utf8_tail(ch)

        seq = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
        if seq is None:
            return "ESC"
        if seq not in {b"[", b"O"}:
            # Lone ESC followed by an ordinary key: keep the key for next read.
            self._pending.append(seq)
            return "ESC"
        code = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
        if code is None:
            return "ESC"
        if code in _ARROW_KEYS:
            return _ARROW_KEYS[code]
        if code == b"3":
            tail = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if tail == b"~":
                return "DELETE"
            return "UNKNOWN"
        # Drain the rest of an unrecognized CSI sequence up to its final byte.
        while b"0" <= code <= b"?":
            code = self._read_ready_byte(ESC_SEQUENCE_TIMEOUT_MS)
            if code is None:
                break
        return "UNKNOWN"


__all__ = [
    "ESC_SEQUENCE_TIMEOUT_MS",
    "KeySource",
    "KeyReader",
]
