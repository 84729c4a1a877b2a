"""
Brainfuck Toolchain for the logisim-evolution Brainfuck CPU
===========================================================
Runs Brainfuck programs directly, or translates them into a ROM image for
the 3-bit-instruction Brainfuck CPU built in logisim-evolution.

Architecture:
                                      ┌──────────────────┐    ┌──────────────┐
                                 ┌───>│ ExecutionEngine  │───>│ stdout bytes │
    ┌──────────┐    ┌─────────┐  │    │ (tape + stack)   │    └──────────────┘
    │ .bf file │───>│ Loader  │──┤    └──────────────────┘
    │ or stdin │    │ (bytes) │  │    ┌──────────────────┐    ┌──────────────┐
    └──────────┘    └─────────┘  └───>│ ROM encoder      │───>│ ROM text     │
                                      │ (octal words)    │    └──────────────┘
                                      └──────────────────┘

    - instructions.py: byte -> Instruction table shared by both back ends
    - machine.py:      tape, bounded call stack, MachineState, faults
    - terminal.py:     one-byte-at-a-time I/O (real streams or in-memory)
    - engine.py:       step/run interpreter with loop fast forwarding
    - rom.py:          "v3.0 hex words plain" ROM encoder
    - loader.py:       file / stdin reader
"""

__version__ = "1.0.0"

from typing import Optional

from .instructions import Instruction, as_program, classify, count_instructions
from .machine import (
    MachineState, MachineFault, BoundsExceeded, UnmatchedBracket,
    CallStack, Tape, CELL_WIDTHS, TAPE_SIZE, STACK_SIZE,
)
from .terminal import Terminal, BufferedTerminal
from .engine import ExecutionEngine, SimSettings, StopReason, initialize, simulate
from .rom import RomImage, RomFormatError, ROM_HEADER, build_rom, decode_tokens, encode
from .loader import LoaderError, load_program


def generate_rom(path: Optional[str] = None) -> RomImage:
    """Load a program (file path, or stdin when None) and encode its ROM image.

    Full pipeline: Loader -> ROM encoder.
    """
    return build_rom(load_program(path))


def run_file(path: Optional[str] = None, engine: Optional[ExecutionEngine] = None,
             max_steps: Optional[int] = None) -> StopReason:
    """Load a program and execute it.

    Full pipeline: Loader -> ExecutionEngine.

    Args:
        path: Program file, or None to read the program from stdin.
        engine: Configured engine (settings, terminal, trace). Default is an
            8-bit engine on stdin/stdout.
        max_steps: Optional step budget; None runs until the program ends.

    Raises:
        LoaderError: the program could not be read.
        MachineFault: the program faulted; engine.state holds the state.
    """
    program = load_program(path)
    if engine is None:
        engine = ExecutionEngine()
    return engine.run(program, max_steps=max_steps)
