"""S12CPU: Main orchestrator for the S12 simulator.

This module implements the driver-facing API around the pure engine:
    LOADER -> STATE -> step() -> STATE ... -> EXPORTER

The CPU owns the current MachineState and the accumulated trace; the
engine itself (registry.step) never holds state between calls.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from . import exporter
from .decode import HALT_OPCODE, TraceRecord
from .errors import ExportError, LoadError
from .loader import load_image, parse_image
from .registry import step
from .state import MachineState, bin12

logger = logging.getLogger(__name__)

HALT_PREFIX = format(HALT_OPCODE, "04b")


class S12CPU:
    """S12 accumulator machine emulator.

    Attributes:
        state: Current machine state (None until an image is loaded)
        trace: List of executed-instruction records, in order
        max_cycles: Default step cap for run() (None means unlimited)
    """

    DEFAULT_MAX_CYCLES: Optional[int] = None

    def __init__(self, max_cycles: Optional[int] = DEFAULT_MAX_CYCLES):
        """Initialize the CPU.

        Args:
            max_cycles: Default step cap for run()
        """
        self.state: Optional[MachineState] = None
        self.trace: List[TraceRecord] = []
        self.max_cycles = max_cycles

    def _require_state(self) -> MachineState:
        if self.state is None:
            raise RuntimeError("No memory image loaded")
        return self.state

    def load_image(self, path: Union[str, Path]) -> bool:
        """Load a memory image file.

        Args:
            path: Path to the memory image

        Returns:
            True on success; False if the file could not be read, in which
            case no state is left loaded
        """
        self.trace = []
        try:
            self.state = load_image(path)
        except LoadError as e:
            logger.warning("%s", e)
            self.state = None
            return False
        return True

    def load_image_text(self, text: str) -> None:
        """Load a memory image from text already in memory.

        Args:
            text: Memory image in either supported encoding
        """
        self.state = parse_image(text)
        self.trace = []

    def step(self) -> str:
        """Execute a single instruction cycle.

        Returns:
            The executed word as a 12-character binary string;
            "000000000000" on every call after HALT

        Raises:
            RuntimeError: If no image is loaded
            InvalidOpcodeError: If the word at PC has an undefined opcode
        """
        result = step(self._require_state())
        self.state = result.state
        if result.record is not None:
            self.trace.append(result.record)
        return bin12(result.word)

    def run(self, max_cycles: Optional[int] = None) -> int:
        """Run until HALT or the step cap.

        Args:
            max_cycles: Override the instance cap (None uses the default)

        Returns:
            Number of step() calls made

        Raises:
            InvalidOpcodeError: If an undefined opcode is fetched
        """
        self._require_state()
        limit = max_cycles if max_cycles is not None else self.max_cycles

        executed = 0
        while limit is None or executed < limit:
            bits = self.step()
            executed += 1
            if bits.startswith(HALT_PREFIX):
                break

        if not self.is_halted():
            logger.info("Stopped at cycle cap (%d) without HALT", executed)
        return executed

    def register_summary(self) -> Tuple[str, str]:
        """Get (PC, ACC) formatted as ("0x%02X", "0x%03X")."""
        return exporter.register_summary(self._require_state())

    def export_memory(self, path: Union[str, Path]) -> bool:
        """Write the memory image file.

        Returns:
            True on success, False if the file could not be written
        """
        try:
            exporter.export_memory(self._require_state(), path)
        except ExportError as e:
            logger.warning("%s", e)
            return False
        return True

    def export_trace(self, path: Union[str, Path]) -> bool:
        """Write the mnemonic trace file.

        Returns:
            True on success, False if the file could not be written
        """
        try:
            exporter.export_trace(self.trace, path)
        except ExportError as e:
            logger.warning("%s", e)
            return False
        return True

    def get_pc(self) -> int:
        return self._require_state().pc

    def get_acc(self) -> int:
        return self._require_state().acc

    def get_memory(self) -> Tuple[int, ...]:
        return self._require_state().memory

    def get_cycle_count(self) -> int:
        """Get number of executed instructions.

        Returns:
            Cycle count (0 when nothing is loaded)
        """
        if self.state is None:
            return 0
        return self.state.cycle_count

    def is_halted(self) -> bool:
        """Check if the machine has executed HALT.

        Returns:
            True if halted
        """
        if self.state is None:
            return False
        return self.state.halted

    def print_trace(self) -> None:
        """Print execution trace in human-readable format."""
        print("=" * 70)
        print("S12 EXECUTION TRACE")
        print("=" * 70)

        for entry in self.trace:
            print(f"\n[Cycle {entry.cycle}] PC=0x{entry.pc:02X} "
                  f"word={bin12(entry.decoded.word)}  {entry.asm()}")

            pre, post = entry.pre_state, entry.post_state
            if pre["acc"] != post["acc"]:
                print(f"  ACC: 0x{pre['acc']:03X} → 0x{post['acc']:03X}")
            if post["pc"] != (pre["pc"] + 1) & 0xFF:
                print(f"  PC: 0x{pre['pc']:02X} → 0x{post['pc']:02X}")

        print("\n" + "=" * 70)
        print("FINAL STATE")
        print("=" * 70)
        if self.state:
            pc_hex, acc_hex = self.register_summary()
            print(f"  PC: {pc_hex}")
            print(f"  ACC: {acc_hex}")
            print(f"  Cycles: {self.get_cycle_count()}")
            print(f"  Halted: {self.is_halted()}")

    def get_summary(self) -> Dict:
        """Get execution summary.

        Returns:
            Dictionary with execution statistics and final registers
        """
        pc_hex, acc_hex = self.register_summary() if self.state else ("n/a", "n/a")
        return {
            "cycles": self.get_cycle_count(),
            "halted": self.is_halted(),
            "pc": pc_hex,
            "acc": acc_hex,
            "trace_length": len(self.trace),
        }
