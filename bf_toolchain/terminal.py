"""
Byte-stream terminal used by the execution engine for ',' and '.'.

Terminal wraps a pair of binary streams (stdin/stdout by default) and
moves exactly one byte per call, counting bytes in each direction.
BufferedTerminal is the same terminal over in-memory streams: the bytes
given at construction are what ',' reads, and everything '.' writes is
available from output for inspection.

Output is flushed after every byte so an interactive program's prompt is
visible before it blocks on input.
"""

import io
import sys
from typing import BinaryIO, Optional

__all__ = ['Terminal', 'BufferedTerminal']


class Terminal:
    """Single-byte reader/writer over binary streams."""

    def __init__(self, rx: Optional[BinaryIO] = None, tx: Optional[BinaryIO] = None):
        self._rx = rx if rx is not None else sys.stdin.buffer
        self._tx = tx if tx is not None else sys.stdout.buffer
        self.bytes_in = 0
        self.bytes_out = 0

    def read_byte(self) -> Optional[int]:
        """Block for one input byte. Returns None at end of stream."""
        data = self._rx.read(1)
        if not data:
            return None
        self.bytes_in += 1
        return data[0]

    def write_byte(self, value: int):
        self._tx.write(bytes([value & 0xFF]))
        self._tx.flush()
        self.bytes_out += 1


class BufferedTerminal(Terminal):
    """In-memory terminal for tests and programmatic runs.

    Usage:
        term = BufferedTerminal(b"A")
        engine = ExecutionEngine(terminal=term)
        engine.run(b",.")
        term.output  # b"A"
    """

    def __init__(self, rx_data: bytes = b""):
        super().__init__(rx=io.BytesIO(bytes(rx_data)), tx=io.BytesIO())

    @property
    def output(self) -> bytes:
        """All bytes written so far."""
        return self._tx.getvalue()
