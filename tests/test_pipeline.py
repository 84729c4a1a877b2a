"""
Pipeline helper tests: generate_rom (Loader -> ROM encoder) and
run_file (Loader -> ExecutionEngine).
"""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import io
import pytest
from bf_toolchain import (
    BufferedTerminal, ExecutionEngine, LoaderError, ROM_HEADER, SimSettings, StopReason,
    UnmatchedBracket, encode, generate_rom, run_file,
)


@pytest.fixture
def bf_file(tmp_path):
    def _write(source: bytes) -> str:
        path = tmp_path / "prog.bf"
        path.write_bytes(source)
        return str(path)
    return _write


# ─── Loader -> ROM encoder ─────────────────────

class TestGenerateRom:
    def test_from_file(self, bf_file):
        rom = generate_rom(bf_file(b"+++ add three [-] clear"))
        assert rom.text.startswith(ROM_HEADER + "\n")
        assert rom.text == encode(b"+++[-]")
        assert rom.instruction_count == 6
        assert rom.token_count == 14

    def test_from_stdin(self, monkeypatch):
        monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(b"><")))
        assert generate_rom().text == encode(b"><")

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoaderError):
            generate_rom(str(tmp_path / "missing.bf"))


# ─── Loader -> ExecutionEngine ─────────────────────

class TestRunFile:
    def test_runs_with_given_engine(self, bf_file):
        term = BufferedTerminal(b"")
        engine = ExecutionEngine(terminal=term)
        assert run_file(bf_file(b"+" * 65 + b"."), engine) is StopReason.DONE
        assert term.output == b"A"
        assert engine.steps == 66

    def test_engine_settings_apply(self, bf_file):
        engine = ExecutionEngine(SimSettings(cell_width=16), terminal=BufferedTerminal())
        run_file(bf_file(b"+" * 256), engine)
        assert engine.state.current_cell == 256

    def test_step_budget(self, bf_file):
        engine = ExecutionEngine(terminal=BufferedTerminal())
        assert run_file(bf_file(b"+[]"), engine, max_steps=20) is StopReason.TIMEOUT

    def test_fault_propagates(self, bf_file):
        engine = ExecutionEngine(terminal=BufferedTerminal())
        with pytest.raises(UnmatchedBracket):
            run_file(bf_file(b"+]"), engine)
        assert engine.state.program_counter == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoaderError):
            run_file(str(tmp_path / "missing.bf"), ExecutionEngine(terminal=BufferedTerminal()))
