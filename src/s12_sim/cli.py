"""S12 simulator command line interface.

Usage:
    s12-sim program.mem
    s12-sim program.mem -o results/run1 -c 500
    s12-sim program.mem --trace --verbose

Writes ``<base>_memOut`` (project memory format) and ``<base>_trace``
(one mnemonic per line), then prints the cycle count, PC and ACC.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .cpu import S12CPU
from .errors import InvalidOpcodeError

EXIT_LOAD_FAILED = 3
EXIT_INVALID_OPCODE = 4


def default_base_name(mem_file: str) -> str:
    """Derive the output base name from the input file name.

    The last extension is dropped; a name whose only dot is the first
    character keeps it (".mem" stays ".mem").
    """
    name = Path(mem_file).name
    dot = name.rfind(".")
    return name[:dot] if dot > 0 else name


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="s12-sim",
        description="S12: 12-bit accumulator machine simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Run until HALT, writing prog_memOut and prog_trace
    s12-sim prog.mem

    # Stop after 100 instructions, outputs named run1_memOut / run1_trace
    s12-sim prog.mem -o run1 -c 100

    # Print the full execution trace
    s12-sim prog.mem --trace
        """
    )

    parser.add_argument(
        "mem_file",
        help="Memory image to load (binary project format or compact hex)"
    )
    parser.add_argument(
        "--output", "-o",
        dest="base_name",
        help="Output file base name. Default: input name without extension"
    )
    parser.add_argument(
        "--cycles", "-c",
        type=int,
        default=S12CPU.DEFAULT_MAX_CYCLES,
        help="Maximum instructions to execute. Default: until HALT"
    )
    parser.add_argument(
        "--trace", "-t",
        action="store_true",
        help="Print full execution trace"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )

    base_name = args.base_name or default_base_name(args.mem_file)
    mem_out = f"{base_name}_memOut"
    trace_out = f"{base_name}_trace"

    cpu = S12CPU(max_cycles=args.cycles)
    if not cpu.load_image(args.mem_file):
        print(f"Failed to read/parse memory file: {args.mem_file}", file=sys.stderr)
        return EXIT_LOAD_FAILED

    exit_code = 0
    try:
        executed = cpu.run()
    except InvalidOpcodeError as e:
        print(f"Execution error: {e}", file=sys.stderr)
        executed = cpu.get_cycle_count()
        exit_code = EXIT_INVALID_OPCODE

    # Outputs are written even after a failed run
    if not cpu.export_memory(mem_out):
        print(f"Warning: failed to write memory output file: {mem_out}", file=sys.stderr)
    if not cpu.export_trace(trace_out):
        print(f"Warning: failed to write trace file: {trace_out}", file=sys.stderr)

    if args.trace:
        cpu.print_trace()

    pc_hex, acc_hex = cpu.register_summary()
    print(f"Cycles Executed: {executed}")
    print(f"PC: {pc_hex}")
    print(f"ACC: {acc_hex}")

    return exit_code


if __name__ == "__main__":
    sys.exit(main())
