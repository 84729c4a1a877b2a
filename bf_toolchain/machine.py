"""
Brainfuck Machine State — tape, call stack and registers.

Register model:
  cell_pointer     — 32-bit tape pointer (controlled by '>' and '<')
  program_counter  — index into the program buffer
  fast_forward     — set while skipping the body of a loop entered on zero
  ff_depth         — call stack depth recorded when fast forwarding started

Storage:
  memory      — TAPE_SIZE cells, each masked to the configured cell width
  call_stack  — STACK_SIZE return addresses, one per open '['

Moving the pointer never faults: like the hardware register it wraps
modulo 2**32. The tape is only bounds-checked when a cell is actually read
or written, so '<>' at cell 0 is harmless but '<+' at cell 0 raises
BoundsExceeded.
"""

from typing import Dict, List

__all__ = [
    'TAPE_SIZE', 'STACK_SIZE', 'POINTER_MASK', 'CELL_WIDTHS', 'cell_mask',
    'MachineFault', 'BoundsExceeded', 'UnmatchedBracket',
    'Tape', 'CallStack', 'MachineState',
]

TAPE_SIZE = 0x10000
STACK_SIZE = 0x100
POINTER_MASK = 0xFFFFFFFF

CELL_WIDTHS: Dict[int, dict] = {
    8: {
        "mask": 0xFF,
        "flag": "-8b",
        "description": "8-bit cells (logisim CPU default)",
    },
    16: {
        "mask": 0xFFFF,
        "flag": "-16b",
        "description": "16-bit cells",
    },
    32: {
        "mask": 0xFFFFFFFF,
        "flag": "-32b",
        "description": "32-bit cells",
    },
}


def cell_mask(width: int) -> int:
    """Return the value mask for a supported cell width in bits."""
    if width not in CELL_WIDTHS:
        supported = ", ".join(str(w) for w in CELL_WIDTHS)
        raise ValueError(f"Unsupported cell width {width} (supported: {supported})")
    return CELL_WIDTHS[width]["mask"]


# ──────────────────────────────────────────────
# Faults
# ──────────────────────────────────────────────

class MachineFault(Exception):
    """Raised when the program drives the machine into an undefined state."""
    def __init__(self, message: str, pc: int = None):
        self.pc = pc
        super().__init__(f"pc={pc}: {message}" if pc is not None else message)


class BoundsExceeded(MachineFault):
    """Tape index or call stack depth outside its capacity."""


class UnmatchedBracket(MachineFault):
    """']' executed with no open '[' on the call stack."""


# ──────────────────────────────────────────────
# Storage
# ──────────────────────────────────────────────

class Tape:
    """Fixed-capacity memory tape of unsigned cells."""

    def __init__(self, size: int = TAPE_SIZE, mask: int = 0xFF):
        self.size = size
        self.mask = mask
        self._cells: List[int] = [0] * size

    def _check(self, index: int):
        if not 0 <= index < self.size:
            raise BoundsExceeded(
                f"Cell index {index} outside tape (0..{self.size - 1})")

    def read(self, index: int) -> int:
        self._check(index)
        return self._cells[index]

    def write(self, index: int, value: int):
        self._check(index)
        self._cells[index] = value & self.mask

    def dump(self, start: int = 0, length: int = 16) -> List[int]:
        """Return a slice of the tape for inspection (clipped to capacity)."""
        start = max(0, start)
        return self._cells[start:min(self.size, start + length)]

    def __len__(self) -> int:
        return self.size


class CallStack:
    """Bounded stack of loop return addresses.

    depth counts the open loops. A push at full capacity raises
    BoundsExceeded; pop/peek on an empty stack raise UnmatchedBracket.
    """

    def __init__(self, capacity: int = STACK_SIZE):
        self.capacity = capacity
        self._items: List[int] = []

    @property
    def depth(self) -> int:
        return len(self._items)

    def push(self, address: int):
        if len(self._items) >= self.capacity:
            raise BoundsExceeded(
                f"Call stack overflow (more than {self.capacity} nested loops)")
        self._items.append(address)

    def pop(self) -> int:
        if not self._items:
            raise UnmatchedBracket("']' without matching '['")
        return self._items.pop()

    def peek(self) -> int:
        if not self._items:
            raise UnmatchedBracket("']' without matching '['")
        return self._items[-1]

    def __len__(self) -> int:
        return len(self._items)


# ──────────────────────────────────────────────
# Machine State
# ──────────────────────────────────────────────

class MachineState:
    """Complete state of one run, owned by a single ExecutionEngine."""

    __slots__ = ('cell_pointer', 'program_counter', 'memory', 'call_stack',
                 'fast_forward', 'ff_depth', 'cell_mask')

    def __init__(self, mask: int = 0xFF, tape_size: int = TAPE_SIZE,
                 stack_size: int = STACK_SIZE):
        self.cell_pointer: int = 0
        self.program_counter: int = 0
        self.memory = Tape(tape_size, mask)
        self.call_stack = CallStack(stack_size)
        self.fast_forward: bool = False
        self.ff_depth: int = 0
        self.cell_mask: int = mask

    @property
    def current_cell(self) -> int:
        return self.memory.read(self.cell_pointer)

    @current_cell.setter
    def current_cell(self, value: int):
        self.memory.write(self.cell_pointer, value)

    def move(self, delta: int):
        """Move the tape pointer, wrapping like a 32-bit register."""
        self.cell_pointer = (self.cell_pointer + delta) & POINTER_MASK

    def snapshot(self) -> dict:
        return {
            "pc": self.program_counter,
            "ptr": self.cell_pointer,
            "depth": self.call_stack.depth,
            "ff": self.fast_forward,
            "ff_depth": self.ff_depth,
        }

    def display(self) -> str:
        """One-line register dump for traces."""
        if 0 <= self.cell_pointer < self.memory.size:
            cell = f"{self.memory.read(self.cell_pointer):d}"
        else:
            cell = "--"
        ff = f"FF@{self.ff_depth}" if self.fast_forward else "--"
        return (f"PC={self.program_counter:05d} PTR={self.cell_pointer:05d} "
                f"CELL={cell} SP={self.call_stack.depth:03d} {ff}")
