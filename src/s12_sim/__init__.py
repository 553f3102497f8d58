"""S12 Simulator: 12-bit accumulator machine emulator.

This package emulates the S12 processor: 256 words of 12-bit memory,
an 8-bit program counter, a 12-bit accumulator and twelve instructions.

Pipeline:
    IMAGE FILE -> LOADER -> STATE -> FETCH -> DECODE -> REGISTRY -> STATE
                                                                  |
                                     MEMORY FILE + TRACE FILE <- EXPORTER

Modules:
    state: MachineState dataclass and bit-width helpers
    errors: LoadError, ExportError, InvalidOpcodeError
    decode: Opcode/operand decode and trace records
    registry: Verified execution primitives and the step() transition
    loader: Tolerant two-format memory image parser
    exporter: Memory image, trace and register summary rendering
    cpu: Main S12CPU orchestrator
    cli: Command line driver
"""

__version__ = "0.1.0"
__author__ = "S12 Project"

from .state import MachineState
from .errors import S12Error, LoadError, ExportError, InvalidOpcodeError
from .registry import InstructionRegistry, step
from .cpu import S12CPU

__all__ = [
    "MachineState",
    "S12Error",
    "LoadError",
    "ExportError",
    "InvalidOpcodeError",
    "InstructionRegistry",
    "step",
    "S12CPU",
]
