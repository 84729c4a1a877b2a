"""
Machine State and Instruction Table Tests.

Covers the bounded tape and call stack, pointer wrap-around, cell masks
and the byte -> instruction classification shared by both back ends.
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from bf_toolchain.instructions import (
    Instruction, as_program, classify, count_instructions, is_instruction,
)
from bf_toolchain.machine import (
    BoundsExceeded, CallStack, MachineFault, MachineState, Tape, UnmatchedBracket,
    cell_mask,
)


class TestInstructionTable:
    def test_octal_codes(self):
        expected = {'>': 0, '<': 1, '+': 2, '-': 3, '.': 4, ',': 5, '[': 6, ']': 7}
        for symbol, code in expected.items():
            assert classify(symbol).octal == code

    def test_classify_accepts_ints_and_bytes(self):
        assert classify(ord('+')) is Instruction.INCREMENT
        assert classify(b'[') is Instruction.LOOP_START
        assert classify('x') is None

    def test_classify_rejects_multichar(self):
        with pytest.raises(ValueError):
            classify("++")

    def test_loop_flags(self):
        assert Instruction.LOOP_START.is_loop
        assert Instruction.LOOP_END.is_loop
        assert not Instruction.OUTPUT.is_loop

    def test_counting(self):
        assert count_instructions(b"a+b-c[d]e") == 4
        assert not is_instruction(' ')
        assert as_program("+") == b"+"


class TestCellMask:
    def test_supported_widths(self):
        assert cell_mask(8) == 0xFF
        assert cell_mask(16) == 0xFFFF
        assert cell_mask(32) == 0xFFFFFFFF

    def test_unsupported_width(self):
        with pytest.raises(ValueError):
            cell_mask(64)


class TestTape:
    def test_write_masks_value(self):
        tape = Tape(8, mask=0xFF)
        tape.write(3, 0x1FF)
        assert tape.read(3) == 0xFF
        tape.write(3, -1)
        assert tape.read(3) == 0xFF

    @pytest.mark.parametrize("index", [-1, 8, 0xFFFFFFFF])
    def test_out_of_bounds(self, index):
        tape = Tape(8)
        with pytest.raises(BoundsExceeded):
            tape.read(index)
        with pytest.raises(BoundsExceeded):
            tape.write(index, 1)

    def test_dump_clipped(self):
        tape = Tape(4)
        tape.write(3, 7)
        assert tape.dump(2, 10) == [0, 7]


class TestCallStack:
    def test_push_pop_peek(self):
        stack = CallStack(4)
        stack.push(1)
        stack.push(5)
        assert stack.depth == 2
        assert stack.peek() == 5
        assert stack.depth == 2
        assert stack.pop() == 5
        assert stack.pop() == 1
        assert len(stack) == 0

    def test_overflow(self):
        stack = CallStack(2)
        stack.push(1)
        stack.push(2)
        with pytest.raises(BoundsExceeded):
            stack.push(3)

    def test_empty_pop_and_peek(self):
        stack = CallStack()
        with pytest.raises(UnmatchedBracket):
            stack.pop()
        with pytest.raises(UnmatchedBracket):
            stack.peek()

    def test_faults_share_base_class(self):
        assert issubclass(BoundsExceeded, MachineFault)
        assert issubclass(UnmatchedBracket, MachineFault)
        assert str(MachineFault("boom", pc=7)) == "pc=7: boom"


class TestMachineState:
    def test_pointer_wraps_like_32bit_register(self):
        state = MachineState()
        state.move(-1)
        assert state.cell_pointer == 0xFFFFFFFF
        state.move(1)
        assert state.cell_pointer == 0

    def test_current_cell_bounds_checked(self):
        state = MachineState()
        state.move(-1)
        with pytest.raises(BoundsExceeded):
            _ = state.current_cell

    def test_display_out_of_tape(self):
        state = MachineState()
        state.move(-1)
        assert "CELL=--" in state.display()

    def test_snapshot(self):
        state = MachineState(mask=0xFFFF)
        state.current_cell = 0x12345
        assert state.current_cell == 0x2345
        assert state.snapshot() == {
            "pc": 0, "ptr": 0, "depth": 0, "ff": False, "ff_depth": 0,
        }
