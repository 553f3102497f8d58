"""Instruction decode for the S12 simulator.

A 12-bit word splits into a 4-bit opcode (bits 11-8) and an 8-bit operand
(bits 7-0). Code and data share memory, so any word can be decoded; words
whose opcode is outside the table decode as invalid and are rejected by the
registry when executed.

Architecture:
    memory[PC] -> decode() -> DecodeResult(opcode, operand, mnemonic) -> Registry
"""

from dataclasses import dataclass
from typing import Dict, Optional

from .state import hex2, mask8, mask12


# Opcode -> mnemonic for the twelve defined instructions
MNEMONICS: Dict[int, str] = {
    0x0: "HALT",
    0x1: "ADD",
    0x2: "JZ",
    0x3: "JN",
    0x4: "LOAD",
    0x5: "STORE",
    0x6: "LOADI",
    0x7: "STOREI",
    0x8: "AND",
    0x9: "OR",
    0xA: "JMP",
    0xB: "SUB",
}

OPCODES: Dict[str, int] = {name: op for op, name in MNEMONICS.items()}

HALT_OPCODE = 0x0


@dataclass(frozen=True)
class DecodeResult:
    """Result of decoding one word.

    Attributes:
        word: Raw 12-bit word
        opcode: Bits 11-8
        operand: Bits 7-0 (an address)
        mnemonic: Assembly name, or None for an undefined opcode
    """
    word: int
    opcode: int
    operand: int
    mnemonic: Optional[str]

    @property
    def valid(self) -> bool:
        return self.mnemonic is not None

    def asm(self) -> str:
        """Render as assembly, e.g. "LOAD A0" or "HALT"."""
        name = self.mnemonic or "UNK"
        if self.opcode == HALT_OPCODE:
            return name
        return f"{name} {hex2(self.operand)}"


def decode(word: int) -> DecodeResult:
    """Split a word into opcode and operand.

    Args:
        word: Raw memory word (masked to 12 bits)

    Returns:
        DecodeResult; ``valid`` is False for undefined opcodes
    """
    word = mask12(word)
    opcode = (word >> 8) & 0xF
    operand = word & 0xFF
    return DecodeResult(word, opcode, operand, MNEMONICS.get(opcode))


def encode(mnemonic: str, operand: int = 0) -> int:
    """Assemble a mnemonic and operand into a word.

    Args:
        mnemonic: Instruction name (case insensitive)
        operand: Address operand

    Returns:
        12-bit instruction word

    Raises:
        KeyError: If the mnemonic is unknown
    """
    name = mnemonic.upper()
    if name not in OPCODES:
        raise KeyError(f"Unknown mnemonic: {mnemonic}")
    return (OPCODES[name] << 8) | mask8(operand)


@dataclass
class TraceRecord:
    """Single entry in the execution trace.

    Attributes:
        cycle: Cycle number (0-indexed)
        pc: Address the instruction was fetched from
        decoded: Decoded instruction
        pre_state: Register snapshot before execution
        post_state: Register snapshot after execution
    """
    cycle: int
    pc: int
    decoded: DecodeResult
    pre_state: dict
    post_state: dict

    @property
    def mnemonic(self) -> Optional[str]:
        return self.decoded.mnemonic

    @property
    def operand(self) -> int:
        return self.decoded.operand

    def asm(self) -> str:
        return self.decoded.asm()
