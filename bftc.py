#!/usr/bin/env python3
"""
bftc — Brainfuck toolchain CLI for the logisim-evolution Brainfuck CPU

Usage:
    python bftc.py bin [file] [--listing]
    python bftc.py sim [file] [-8b | -16b | -32b] [--raw-tabs]
                              [--max-steps N] [--trace]

If the file is omitted, the program is read from stdin.

Examples:
    python bftc.py bin hello.bf > hello.rom       # load into the logisim ROM
    python bftc.py sim hello.bf                   # run with 8-bit cells
    python bftc.py sim primes.bf -16b
    echo "+[,.]" | python bftc.py sim             # program from stdin
"""

import argparse
import logging
import sys

from bf_toolchain import __version__, generate_rom, run_file
from bf_toolchain.engine import ExecutionEngine, SimSettings, StopReason
from bf_toolchain.loader import LoaderError, load_program
from bf_toolchain.machine import CELL_WIDTHS, MachineFault
from bf_toolchain.rom import to_listing
from bf_toolchain.terminal import Terminal

logger = logging.getLogger("bftc")


class _CellWidthAction(argparse.Action):
    """-8b/-16b/-32b flag. Any second width flag is an error, even a repeat."""

    def __init__(self, option_strings, dest, const=None, **kwargs):
        super().__init__(option_strings, dest, nargs=0, const=const, **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        if getattr(namespace, self.dest, None) is not None:
            parser.error(f'Cannot specify multiple cell widths: error on "{option_string}"')
        setattr(namespace, self.dest, self.const)


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--verbose", "-v", action="store_true",
                        help="Print diagnostics to stderr")

    parser = argparse.ArgumentParser(
        prog="bftc",
        description="Brainfuck simulator and logisim-evolution ROM generator",
        epilog="If the file is omitted, stdin is used.",
    )
    parser.add_argument("--version", action="version",
                        version=f"bftc {__version__}")
    sub = parser.add_subparsers(dest="command", metavar="{bin,sim}")

    p_bin = sub.add_parser("bin", parents=[common],
                           help="Make logisim-evolution ROM")
    p_bin.add_argument("file", nargs="?", default=None,
                       help="Brainfuck source file (default: stdin)")
    p_bin.add_argument("--listing", action="store_true",
                       help="Print an annotated word listing instead of the ROM")

    p_sim = sub.add_parser("sim", parents=[common],
                           help="Simulate Brainfuck program")
    p_sim.add_argument("file", nargs="?", default=None,
                       help="Brainfuck source file (default: stdin)")
    for width, profile in CELL_WIDTHS.items():
        p_sim.add_argument(profile["flag"], dest="cell_width", action=_CellWidthAction,
                           const=width, default=None,
                           help=profile["description"])
    p_sim.add_argument("--raw-tabs", action="store_true",
                       help="Output tab characters as-is instead of as spaces")
    p_sim.add_argument("--max-steps", type=int, default=None, metavar="N",
                       help="Stop after N steps (default: run until the program ends)")
    p_sim.add_argument("--trace", action="store_true",
                       help="Log every executed step to stderr")
    return parser


def cmd_bin(args) -> int:
    try:
        if args.listing:
            sys.stdout.write(to_listing(load_program(args.file)))
            return 0
        rom = generate_rom(args.file)
    except LoaderError as e:
        print(f"Error opening file: {e}", file=sys.stderr)
        return 1

    logger.info(f"ROM: {rom.token_count} words "
                f"({rom.instruction_count} program + {rom.synthetic_count} synthetic)")
    sys.stdout.write(rom.text)
    sys.stdout.flush()
    return 0


def cmd_sim(args) -> int:
    settings = SimSettings(cell_width=args.cell_width or 8,
                           tab_to_space=not args.raw_tabs)
    engine = ExecutionEngine(settings, terminal=Terminal(), trace=args.trace)
    logger.info(f"Simulating with {settings.cell_width}-bit cells")

    try:
        reason = run_file(args.file, engine, max_steps=args.max_steps)
    except LoaderError as e:
        print(f"Error opening file: {e}", file=sys.stderr)
        return 1
    except MachineFault as e:
        print(f"Machine fault: {e}", file=sys.stderr)
        logger.debug(engine.state.display())
        return 1

    if reason is StopReason.TIMEOUT:
        print(f"Stopped after {engine.steps} steps (pc={engine.state.program_counter})",
              file=sys.stderr)
        return 1
    logger.info(f"Done: {engine.steps} steps, {engine.skipped} skipped, "
                f"{engine.terminal.bytes_in} bytes in, {engine.terminal.bytes_out} bytes out")
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    verbose = getattr(args, "verbose", False) or getattr(args, "trace", False)
    logging.basicConfig(stream=sys.stderr,
                        format="[%(name)s] %(levelname)s: %(message)s")
    logging.getLogger().setLevel(logging.DEBUG if verbose else logging.WARNING)

    if args.command == "bin":
        return cmd_bin(args)
    if args.command == "sim":
        return cmd_sim(args)

    parser.print_help(sys.stderr)
    return 2


if __name__ == "__main__":
    sys.exit(main())
