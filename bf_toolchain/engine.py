"""
Brainfuck Execution Engine — step/run interpreter over a MachineState.

Execution model (one step per program byte):
  1. If not fast forwarding, execute the data/IO instruction
     ('>' '<' '+' '-' '.' ','). No-op bytes do nothing.
  2. Execute loop bookkeeping ('[' and ']') regardless of fast forwarding.
  3. Advance PC by one unless ']' jumped back to the loop start.

Loops without a bracket-matching pass:
  '[' always pushes PC+1 onto the call stack. When the current cell is zero
  the engine enters fast forwarding and remembers the stack depth. While
  fast forwarding only '[' and ']' run, so nested brackets keep pushing and
  popping normally; the ']' seen at the remembered depth is the match and
  ends fast forwarding. The cell is still zero there, so that ']' pops and
  execution resumes after the loop.

  ']' on a non-zero cell jumps to the address on top of the stack without
  popping it; on zero it pops and falls through.

Termination reasons:
  - DONE:     PC reached the end of the program
  - TIMEOUT:  max_steps exhausted (only when a budget is given)

Faults (tape index outside the tape, call stack overflow, ']' with no open
loop) raise MachineFault subclasses carrying the faulting PC.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from collections import deque
from typing import Optional

from .instructions import Instruction, as_program, classify
from .machine import (
    MachineFault, MachineState, STACK_SIZE, TAPE_SIZE, cell_mask as mask_for_width,
)
from .terminal import BufferedTerminal, Terminal

__all__ = ['SimSettings', 'StopReason', 'ExecutionEngine', 'initialize', 'simulate']

logger = logging.getLogger(__name__)

TAB = 0x09
SPACE = 0x20

# Trace lines kept in memory (oldest dropped first)
TRACE_LIMIT = 10_000


@dataclass
class SimSettings:
    """Settings for one simulation run."""
    cell_width: int = 8
    tab_to_space: bool = True  # logisim terminal prints tabs as spaces
    tape_size: int = TAPE_SIZE
    stack_size: int = STACK_SIZE

    def __post_init__(self):
        mask_for_width(self.cell_width)  # raises ValueError on unsupported widths

    @property
    def cell_mask(self) -> int:
        return mask_for_width(self.cell_width)


class StopReason(Enum):
    DONE = 'DONE'
    TIMEOUT = 'TIMEOUT'


def initialize(settings: Optional[SimSettings] = None) -> MachineState:
    """Return a zeroed machine: empty stack, PC and pointer at 0.

    Takes the whole SimSettings rather than a bare cell mask, since the tape
    and call stack capacities are configured there too; the mask comes from
    settings.cell_mask.
    """
    settings = settings or SimSettings()
    return MachineState(settings.cell_mask, settings.tape_size, settings.stack_size)


class ExecutionEngine:
    """Interpreter for one program run.

    With trace=True every step is logged at DEBUG level and the most recent
    trace_limit lines are kept in trace_output.

    Usage:
        engine = ExecutionEngine(SimSettings(cell_width=16))
        engine.run(program)            # stdin/stdout terminal
        engine.state.current_cell      # inspect after the run
    """

    def __init__(self, settings: Optional[SimSettings] = None,
                 terminal: Optional[Terminal] = None, trace: bool = False,
                 trace_limit: int = TRACE_LIMIT):
        self.settings = settings or SimSettings()
        self.terminal = terminal if terminal is not None else Terminal()
        self.trace = trace
        self.trace_output: deque = deque(maxlen=trace_limit)
        self.reset()

    def reset(self):
        self.state = initialize(self.settings)
        self.program = b""
        self.steps = 0
        self.skipped = 0
        self.trace_output.clear()

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self, instruction_byte: int):
        """Execute one program byte against the current state."""
        state = self.state
        pc = state.program_counter
        instr = classify(instruction_byte)

        if self.trace:
            symbol = instr.symbol if instr is not None else '~'
            line = f"{pc:05d}: {symbol} {state.display()}"
            self.trace_output.append(line)
            logger.debug(line)

        try:
            advance = self._execute(state, instr)
        except MachineFault as e:
            if e.pc is not None:
                raise
            raise type(e)(str(e), pc=pc) from None

        if advance:
            state.program_counter += 1
        self.steps += 1

    def _execute(self, state: MachineState, instr: Optional[Instruction]) -> bool:
        """Run one instruction. Returns False when PC was already set."""
        if state.fast_forward:
            if instr is not None and not instr.is_loop:
                self.skipped += 1
        elif instr is Instruction.MOVE_RIGHT:
            state.move(1)
        elif instr is Instruction.MOVE_LEFT:
            state.move(-1)
        elif instr is Instruction.INCREMENT:
            state.current_cell = state.current_cell + 1
        elif instr is Instruction.DECREMENT:
            state.current_cell = state.current_cell - 1
        elif instr is Instruction.OUTPUT:
            self._output(state.current_cell)
        elif instr is Instruction.INPUT:
            value = self.terminal.read_byte()
            if value is not None:
                state.current_cell = value
            # end of input leaves the cell unchanged

        if instr is Instruction.LOOP_START:
            state.call_stack.push(state.program_counter + 1)
            if state.current_cell == 0 and not state.fast_forward:
                state.fast_forward = True
                state.ff_depth = state.call_stack.depth
        elif instr is Instruction.LOOP_END:
            if state.fast_forward and state.call_stack.depth == state.ff_depth:
                state.fast_forward = False
                state.ff_depth = 0
            if state.current_cell == 0:
                state.call_stack.pop()
            else:
                state.program_counter = state.call_stack.peek()
                return False
        return True

    def _output(self, value: int):
        if value == TAB and self.settings.tab_to_space:
            value = SPACE
        self.terminal.write_byte(value)

    def load(self, program):
        """Reset the machine and load a program buffer."""
        self.reset()
        self.program = as_program(program)

    def run(self, program=None, max_steps: Optional[int] = None) -> StopReason:
        """Run until PC reaches the end of the program.

        Args:
            program: Program buffer; when omitted, continue the loaded one.
            max_steps: Optional step budget. None runs indefinitely.
        """
        if program is not None:
            self.load(program)
        code = self.program
        state = self.state
        logger.debug(f"Running {len(code)}-byte program (cell width {self.settings.cell_width})")

        while state.program_counter < len(code):
            if max_steps is not None and self.steps >= max_steps:
                logger.info(f"Step budget of {max_steps} exhausted at pc={state.program_counter}")
                return StopReason.TIMEOUT
            self.step(code[state.program_counter])

        logger.debug(f"Program finished after {self.steps} steps ({self.skipped} skipped)")
        return StopReason.DONE


def simulate(program, stdin: bytes = b"", settings: Optional[SimSettings] = None,
             max_steps: Optional[int] = None) -> bytes:
    """Run a program with in-memory I/O and return everything it printed."""
    term = BufferedTerminal(stdin)
    engine = ExecutionEngine(settings, terminal=term)
    engine.run(program, max_steps=max_steps)
    return term.output
