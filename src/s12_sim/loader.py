"""Memory image loader for the S12 simulator.

Accepts two textual encodings in the same file:

    Project binary format:          Compact hex format:
        <8b PC> <12b ACC>               00 4A0
        00 <12b word>                   01 BFF
        ...                             ...
        FF <12b word>

Comments (after ``;`` or ``//``), blank lines and a literal ``...`` line
are ignored. Lines that do not fit either format are skipped rather than
rejected, so annotated benchmark files load unchanged.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from .errors import LoadError
from .state import MachineState, create_initial_state

logger = logging.getLogger(__name__)

PLACEHOLDER = "..."

_HEADER_PC = re.compile(r"[01]{8}")
_BINARY_WORD = re.compile(r"[01]{12}")
_HEX_ADDR = re.compile(r"[0-9a-fA-F]{2}")
_HEX_WORD = re.compile(r"[0-9a-fA-F]{1,3}")

# ASCII whitespace only; Unicode separators stay inside tokens
WHITESPACE = " \t\n\x0b\x0c\r"
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_TOKEN_SEP = re.compile(r"[ \t\n\x0b\x0c\r]+")


def strip_comment(line: str) -> str:
    """Remove ``;`` and ``//`` comments and surrounding whitespace."""
    line = line.split(";", 1)[0]
    line = line.split("//", 1)[0]
    return line.strip(WHITESPACE)


def parse_header(tokens) -> Optional[Tuple[int, int]]:
    """Parse a ``PC ACC`` header line.

    Returns:
        (pc, acc) or None if the tokens are not a binary header
    """
    pc_tok, acc_tok = tokens
    if _HEADER_PC.fullmatch(pc_tok) and _BINARY_WORD.fullmatch(acc_tok):
        return int(pc_tok, 2), int(acc_tok, 2)
    return None


def parse_memory_line(tokens) -> Optional[Tuple[int, int]]:
    """Parse an ``AA VALUE`` memory line.

    The value is binary only when it is exactly twelve ``0``/``1``
    characters; anything else of one to three hex digits is hex, so
    ``"010"`` means 0x010.

    Returns:
        (address, word) or None if the tokens are not a memory line
    """
    addr_tok, value_tok = tokens
    if not _HEX_ADDR.fullmatch(addr_tok):
        return None
    if _BINARY_WORD.fullmatch(value_tok):
        value = int(value_tok, 2)
    elif _HEX_WORD.fullmatch(value_tok):
        value = int(value_tok, 16)
    else:
        return None
    return int(addr_tok, 16) & 0xFF, value & 0xFFF


def parse_image(text: str) -> MachineState:
    """Parse memory image text into an initial machine state.

    Args:
        text: Full contents of a memory image file

    Returns:
        MachineState with memory, PC and ACC from the image (PC and ACC
        are 0 when no header is present)
    """
    words: Dict[int, int] = {}
    pc = acc = 0
    saw_header = False
    seen_first = False

    for lineno, raw in enumerate(_LINE_BREAK.split(text), start=1):
        line = strip_comment(raw)
        if not line or line == PLACEHOLDER:
            continue

        tokens = _TOKEN_SEP.split(line)
        if len(tokens) != 2:
            logger.debug("Skipping line %d: expected 2 tokens, got %d", lineno, len(tokens))
            continue

        # The header must come before any line that was actually used;
        # skipped lines such as an "Addr Value" caption do not count
        if not seen_first:
            header = parse_header(tokens)
            if header is not None:
                pc, acc = header
                saw_header = True
                seen_first = True
                continue

        entry = parse_memory_line(tokens)
        if entry is None:
            logger.debug("Skipping line %d: unrecognized format %r", lineno, line)
            continue

        addr, value = entry
        words[addr] = value  # later lines win
        seen_first = True

    logger.info("Parsed memory image: header=%s, %d words set", saw_header, len(words))
    return create_initial_state(words, pc=pc, acc=acc)


def load_image(path: Union[str, Path]) -> MachineState:
    """Load a memory image file.

    Args:
        path: Path to the memory image

    Returns:
        Initial MachineState

    Raises:
        LoadError: If the file cannot be opened, read or decoded as text
    """
    try:
        text = Path(path).read_text()
    except (OSError, UnicodeDecodeError) as e:
        logger.error("Failed to read memory image %s: %s", path, e)
        raise LoadError(path, str(e)) from e

    logger.info("Loading memory image: %s", path)
    return parse_image(text)
