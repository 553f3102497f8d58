"""MachineState: Immutable state representation for the S12 simulator.

This module defines the core state structure for the emulator,
following functional programming principles for auditability and tracing.

State Components:
    - Memory: 256 words of 12 bits (code and data share the address space)
    - PC: 8-bit program counter (address of the next instruction)
    - ACC: 12-bit accumulator
    - Halted: Execution termination flag
    - Cycle count: Total executed instructions

All state mutations return new state objects, preserving immutability
so that several simulations can run side by side without sharing data.
"""

from dataclasses import dataclass, field
from typing import Mapping, Optional, Tuple


MEM_SIZE = 256
WORD_MASK = 0xFFF
ADDR_MASK = 0xFF
SIGN_BIT = 0x800


def mask12(value: int) -> int:
    """Mask a value to a 12-bit word."""
    return value & WORD_MASK


def mask8(value: int) -> int:
    """Mask a value to an 8-bit address."""
    return value & ADDR_MASK


def is_negative12(value: int) -> bool:
    """Two's-complement sign test on a 12-bit word."""
    return (value & SIGN_BIT) != 0


def bin8(value: int) -> str:
    return format(mask8(value), "08b")


def bin12(value: int) -> str:
    return format(mask12(value), "012b")


def hex2(value: int) -> str:
    return format(mask8(value), "02X")


def _blank_memory() -> Tuple[int, ...]:
    return (0,) * MEM_SIZE


@dataclass(frozen=True)
class MachineState:
    """Immutable S12 machine state.

    Attributes:
        memory: Tuple of 256 words, each in [0, 4095]
        pc: Program counter in [0, 255]
        acc: Accumulator in [0, 4095]
        halted: Whether the machine has executed HALT
        cycle_count: Number of instructions executed
    """
    memory: Tuple[int, ...] = field(default_factory=_blank_memory)
    pc: int = 0
    acc: int = 0
    halted: bool = False
    cycle_count: int = 0

    def snapshot(self) -> dict:
        """Create a register snapshot for tracing.

        Returns:
            Dictionary with pc, acc, halted and cycle_count
        """
        return {
            "pc": self.pc,
            "acc": self.acc,
            "halted": self.halted,
            "cycle_count": self.cycle_count,
            # memory excluded, the trace only needs registers
        }

    def validate(self) -> bool:
        """Validate state integrity.

        Checks:
            - Memory holds exactly 256 words, each within 12 bits
            - PC within 8 bits, ACC within 12 bits
            - Cycle count is non-negative

        Returns:
            True if state is valid, False otherwise
        """
        if len(self.memory) != MEM_SIZE:
            return False
        for word in self.memory:
            if not isinstance(word, int) or word < 0 or word > WORD_MASK:
                return False

        if not 0 <= self.pc <= ADDR_MASK:
            return False
        if not 0 <= self.acc <= WORD_MASK:
            return False

        if self.cycle_count < 0:
            return False

        return True

    def read(self, addr: int) -> int:
        """Read the word at an address (masked to 8 bits)."""
        return self.memory[mask8(addr)]

    def write(self, addr: int, value: int) -> "MachineState":
        """Create new state with one memory word replaced.

        Args:
            addr: Target address (masked to 8 bits)
            value: New word (masked to 12 bits)

        Returns:
            New MachineState with updated memory
        """
        memory = list(self.memory)
        memory[mask8(addr)] = mask12(value)
        return MachineState(
            memory=tuple(memory),
            pc=self.pc,
            acc=self.acc,
            halted=self.halted,
            cycle_count=self.cycle_count
        )

    def set_acc(self, value: int) -> "MachineState":
        """Create new state with ACC set (masked to 12 bits)."""
        return MachineState(
            memory=self.memory,  # Shared reference (immutable)
            pc=self.pc,
            acc=mask12(value),
            halted=self.halted,
            cycle_count=self.cycle_count
        )

    def set_pc(self, new_pc: int) -> "MachineState":
        """Create new state with PC set (masked to 8 bits)."""
        return MachineState(
            memory=self.memory,
            pc=mask8(new_pc),
            acc=self.acc,
            halted=self.halted,
            cycle_count=self.cycle_count
        )

    def set_halted(self, halted: bool = True) -> "MachineState":
        """Create new state with halted flag set."""
        return MachineState(
            memory=self.memory,
            pc=self.pc,
            acc=self.acc,
            halted=halted,
            cycle_count=self.cycle_count
        )

    def increment_cycle(self) -> "MachineState":
        """Create new state with cycle count incremented."""
        return MachineState(
            memory=self.memory,
            pc=self.pc,
            acc=self.acc,
            halted=self.halted,
            cycle_count=self.cycle_count + 1
        )

    def __str__(self) -> str:
        """Human-readable state representation."""
        return (f"[Cycle {self.cycle_count}] PC=0x{self.pc:02X} ACC=0x{self.acc:03X}"
                f" {'HALTED' if self.halted else ''}")


def create_initial_state(
    words: Optional[Mapping[int, int]] = None,
    pc: int = 0,
    acc: int = 0
) -> MachineState:
    """Create an initial machine state from a sparse memory mapping.

    Args:
        words: Mapping of address to word; unlisted addresses are 0
        pc: Initial program counter
        acc: Initial accumulator

    Returns:
        Fresh MachineState with all values masked to their widths
    """
    memory = [0] * MEM_SIZE
    for addr, value in (words or {}).items():
        memory[mask8(addr)] = mask12(value)
    return MachineState(memory=tuple(memory), pc=mask8(pc), acc=mask12(acc))
