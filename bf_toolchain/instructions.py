"""
Instruction table for the Brainfuck toolchain.

Shared by the execution engine and the ROM encoder. Every source byte is
either one of the eight instructions below or a no-op (comment text,
whitespace, anything else) that both stages skip.

    ┌──────┬─────────────┬───────┐
    │ Byte │ Instruction │ Octal │
    ├──────┼─────────────┼───────┤
    │  >   │ MOVE_RIGHT  │   0   │
    │  <   │ MOVE_LEFT   │   1   │
    │  +   │ INCREMENT   │   2   │
    │  -   │ DECREMENT   │   3   │
    │  .   │ OUTPUT      │   4   │
    │  ,   │ INPUT       │   5   │
    │  [   │ LOOP_START  │   6   │
    │  ]   │ LOOP_END    │   7   │
    └──────┴─────────────┴───────┘

The octal column is the 3-bit opcode the logisim CPU decodes from ROM.
"""

from __future__ import annotations
import enum
from typing import Dict, Iterable, Iterator, Optional, Union

__all__ = ['Instruction', 'classify', 'is_instruction', 'count_instructions', 'as_program',
           'iter_instructions']


class Instruction(enum.Enum):
    MOVE_RIGHT = ord('>')
    MOVE_LEFT = ord('<')
    INCREMENT = ord('+')
    DECREMENT = ord('-')
    OUTPUT = ord('.')
    INPUT = ord(',')
    LOOP_START = ord('[')
    LOOP_END = ord(']')

    @property
    def symbol(self) -> str:
        return chr(self.value)

    @property
    def octal(self) -> int:
        """3-bit hardware opcode."""
        return _OCTAL_CODES[self]

    @property
    def is_loop(self) -> bool:
        return self in (Instruction.LOOP_START, Instruction.LOOP_END)


_OCTAL_CODES: Dict[Instruction, int] = {
    instr: code for code, instr in enumerate(Instruction)
}

_BY_BYTE: Dict[int, Instruction] = {instr.value: instr for instr in Instruction}


ByteLike = Union[int, str, bytes]


def _to_int(b: ByteLike) -> int:
    if isinstance(b, int):
        return b
    if len(b) != 1:
        raise ValueError(f"Expected a single byte, got {b!r}")
    return ord(b) if isinstance(b, str) else b[0]


def classify(b: ByteLike) -> Optional[Instruction]:
    """Map a source byte to its Instruction, or None for a no-op byte."""
    return _BY_BYTE.get(_to_int(b))


def is_instruction(b: ByteLike) -> bool:
    return classify(b) is not None


def as_program(source: Union[str, bytes, bytearray, Iterable[int]]) -> bytes:
    """Normalize source text to the immutable byte buffer both stages consume."""
    if isinstance(source, str):
        return source.encode('utf-8')
    return bytes(source)


def iter_instructions(program: Iterable[int]) -> Iterator[Instruction]:
    """Yield the instructions of a program, dropping no-op bytes."""
    for b in as_program(program):
        instr = _BY_BYTE.get(b)
        if instr is not None:
            yield instr


def count_instructions(program: Iterable[int]) -> int:
    return sum(1 for _ in iter_instructions(program))
