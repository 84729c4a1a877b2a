"""
ROM Encoder — Brainfuck program to logisim-evolution ROM image.

Output format ("v3.0 hex words plain"), for the program "+++":

    v3.0 hex words plain
    0 1 2 2 2 6 3 7 2 6 7

The first line is the fixed logisim header. Each following token is one
3-bit instruction word written as a single octal digit. Tokens are separated
by a space and every 16th token by a newline. The image always ends with
a newline.

The emitted instruction stream is wrapped with synthetic instructions:

    PROLOGUE  "><"       the CPU may misbehave on its very first cycles,
                         so it starts with a harmless move right/left pair
    program              every instruction byte; no-op bytes are dropped
    EPILOGUE  "[-]+[]"   clear the cell, set it to 1 and spin forever,
                         which halts the hardware CPU

Token count = instructions in program + len(PROLOGUE) + len(EPILOGUE).
"""

from dataclasses import dataclass
from typing import Iterator, List

from .instructions import Instruction, as_program, count_instructions, iter_instructions

__all__ = [
    'ROM_HEADER', 'PROLOGUE', 'EPILOGUE', 'WORDS_PER_LINE',
    'RomFormatError', 'RomImage', 'rom_instructions', 'rom_token_count',
    'encode', 'build_rom', 'decode_tokens', 'to_listing',
]

ROM_HEADER = "v3.0 hex words plain"
PROLOGUE = b"><"
EPILOGUE = b"[-]+[]"
WORDS_PER_LINE = 16


class RomFormatError(Exception):
    """Raised when parsing text that is not a valid ROM image."""
    def __init__(self, message: str, line_num: int = 0):
        self.line_num = line_num
        super().__init__(f"Line {line_num}: {message}" if line_num else message)


@dataclass(frozen=True)
class RomImage:
    text: str
    token_count: int
    instruction_count: int

    @property
    def synthetic_count(self) -> int:
        return self.token_count - self.instruction_count


def rom_instructions(program) -> Iterator[Instruction]:
    """Yield every instruction word of the ROM, prologue and epilogue included."""
    yield from iter_instructions(PROLOGUE)
    yield from iter_instructions(program)
    yield from iter_instructions(EPILOGUE)


def rom_token_count(program) -> int:
    return count_instructions(program) + len(PROLOGUE) + len(EPILOGUE)


def encode(program) -> str:
    """Translate a program buffer into ROM image text."""
    parts = [ROM_HEADER, "\n"]
    for count, instr in enumerate(rom_instructions(program), 1):
        sep = "\n" if count % WORDS_PER_LINE == 0 else " "
        parts.append(f"{instr.octal}{sep}")
    text = "".join(parts)
    if not text.endswith("\n"):
        text += "\n"
    return text


def build_rom(program) -> RomImage:
    """Encode a program and return the image with its token counts."""
    program = as_program(program)
    return RomImage(
        text=encode(program),
        token_count=rom_token_count(program),
        instruction_count=count_instructions(program),
    )


def decode_tokens(text: str) -> List[int]:
    """Parse ROM image text back into its list of octal words."""
    lines = text.splitlines()
    if not lines or lines[0] != ROM_HEADER:
        raise RomFormatError(f"Expected header {ROM_HEADER!r}", 1)

    words = []
    for line_num, line in enumerate(lines[1:], 2):
        for token in line.split():
            if len(token) != 1 or token not in "01234567":
                raise RomFormatError(f"Invalid ROM word {token!r}", line_num)
            words.append(int(token, 8))
    return words


def to_listing(program) -> str:
    """Human-readable listing: ROM address, octal word, source symbol, section."""
    program = as_program(program)
    n_pro = len(PROLOGUE)
    n_prog = count_instructions(program)

    lines = ["ADDR  WORD  INSTR", "----  ----  -----"]
    for addr, instr in enumerate(rom_instructions(program)):
        if addr < n_pro:
            note = "  ; prologue"
        elif addr >= n_pro + n_prog:
            note = "  ; epilogue"
        else:
            note = ""
        lines.append(f"{addr:04X}  {instr.octal:>4}  {instr.symbol}{note}")
    return "\n".join(lines) + "\n"
