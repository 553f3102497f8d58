"""State and trace export for the S12 simulator.

Output formats:
    Memory file: ``<8b PC> <12b ACC>`` header, then 256 lines of
        ``AA WWWWWWWWWWWW`` (hex address, binary word) for 00..FF.
    Trace file: one executed instruction per line, ``LOAD A0`` or ``HALT``.
    Register summary: ("0x%02X" PC, "0x%03X" ACC), in that order.

Formatting depends only on (PC, ACC, memory), so exporting a loaded
export reproduces it byte for byte.
"""

import logging
from pathlib import Path
from typing import Iterable, Tuple, Union

from .decode import TraceRecord
from .errors import ExportError
from .state import MachineState, bin8, bin12, hex2

logger = logging.getLogger(__name__)


def format_memory_state(state: MachineState) -> str:
    """Render the 256 memory lines without the register header."""
    return "".join(f"{hex2(addr)} {bin12(word)}\n" for addr, word in enumerate(state.memory))


def format_memory(state: MachineState) -> str:
    """Render the full 257-line memory image."""
    header = f"{bin8(state.pc)} {bin12(state.acc)}\n"
    return header + format_memory_state(state)


def format_trace(records: Iterable[TraceRecord]) -> str:
    return "".join(f"{record.asm()}\n" for record in records)


def register_summary(state: MachineState) -> Tuple[str, str]:
    """Format (PC, ACC) as ("0x%02X", "0x%03X")."""
    return f"0x{state.pc & 0xFF:02X}", f"0x{state.acc & 0xFFF:03X}"


def _write(path: Union[str, Path], text: str) -> None:
    try:
        Path(path).write_text(text)
    except OSError as e:
        logger.error("Failed to write %s: %s", path, e)
        raise ExportError(path, str(e)) from e
    logger.info("Wrote %s", path)


def export_memory(state: MachineState, path: Union[str, Path]) -> None:
    """Write the memory image file.

    Raises:
        ExportError: If the file cannot be written
    """
    _write(path, format_memory(state))


def export_trace(records: Iterable[TraceRecord], path: Union[str, Path]) -> None:
    """Write the mnemonic trace file.

    Raises:
        ExportError: If the file cannot be written
    """
    _write(path, format_trace(records))
