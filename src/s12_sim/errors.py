"""Exception types raised by the S12 simulator.

Load and export failures are separate types so a driver can tell a failed
run apart from a run whose output files could not be written.
"""


class S12Error(Exception):
    """Base class for all simulator errors."""


class LoadError(S12Error):
    """Memory image file could not be opened or read."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot load memory image {self.path}: {reason}")


class ExportError(S12Error):
    """Output file could not be written."""

    def __init__(self, path, reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot write {self.path}: {reason}")


class InvalidOpcodeError(S12Error):
    """Fetched word carries an opcode outside the instruction set.

    Attributes:
        opcode: 4-bit opcode field
        pc: Address the word was fetched from
        word: Raw 12-bit word
    """

    def __init__(self, opcode: int, pc: int, word: int):
        self.opcode = opcode
        self.pc = pc
        self.word = word
        super().__init__(
            f"Unknown opcode 0x{opcode:X} at PC=0x{pc:02X} (word=0x{word:03X})"
        )
