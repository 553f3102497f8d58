"""InstructionRegistry: Execution primitives for the S12 simulator.

This module implements the registry pattern for S12 operations,
where each opcode maps to a frozen primitive that transforms
state in a predictable, auditable way.

Registry (opcode -> primitive):
    0x0 HALT:   Stop execution
    0x1 ADD:    ACC = ACC + M[addr]
    0x2 JZ:     Jump if ACC is zero
    0x3 JN:     Jump if ACC sign bit is set
    0x4 LOAD:   ACC = M[addr]
    0x5 STORE:  M[addr] = ACC
    0x6 LOADI:  ACC = M[M[addr]]
    0x7 STOREI: M[M[addr]] = ACC
    0x8 AND:    ACC = ACC & M[addr]
    0x9 OR:     ACC = ACC | M[addr]
    0xA JMP:    Unconditional jump
    0xB SUB:    ACC = ACC - M[addr]

Each primitive is a pure function: (MachineState, operand) -> MachineState
All state mutations are immutable, returning new state objects.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .decode import MNEMONICS, TraceRecord, decode
from .errors import InvalidOpcodeError
from .state import MachineState, is_negative12

logger = logging.getLogger(__name__)

Primitive = Callable[[MachineState, int], MachineState]

# Raw bits returned for steps taken after HALT
HALTED_SENTINEL = 0


@dataclass(frozen=True)
class StepResult:
    """Outcome of one call to step().

    Attributes:
        state: State after the step
        word: Word fetched at the pre-update PC (HALTED_SENTINEL once halted)
        record: Trace record, or None when the machine was already halted
    """
    state: MachineState
    word: int
    record: Optional[TraceRecord]


class InstructionRegistry:
    """Registry of S12 execution primitives keyed by opcode.

    The registry is frozen after initialization to ensure
    no runtime modifications can occur.

    Attributes:
        _primitives: Dictionary mapping opcodes to handler functions
        _frozen: Whether the registry is locked against modifications
    """

    def __init__(self):
        """Initialize registry with all primitives."""
        self._primitives: Dict[int, Primitive] = {}
        self._frozen = False
        self._register_all_primitives()
        self.freeze()

    def _register_all_primitives(self) -> None:
        """Register all S12 operation primitives."""
        # Special
        self.register(0x0, self._op_halt)

        # Arithmetic and logic
        self.register(0x1, self._op_add)
        self.register(0x8, self._op_and)
        self.register(0x9, self._op_or)
        self.register(0xB, self._op_sub)

        # Control flow
        self.register(0x2, self._op_jz)
        self.register(0x3, self._op_jn)
        self.register(0xA, self._op_jmp)

        # Data movement
        self.register(0x4, self._op_load)
        self.register(0x5, self._op_store)
        self.register(0x6, self._op_loadi)
        self.register(0x7, self._op_storei)

    def register(self, opcode: int, handler: Primitive) -> None:
        """Register a primitive operation.

        Args:
            opcode: 4-bit opcode
            handler: Function that takes (state, operand) and returns new state

        Raises:
            RuntimeError: If registry is frozen
            ValueError: If opcode already registered or has no mnemonic
        """
        if self._frozen:
            raise RuntimeError("Cannot register primitives: registry is frozen")
        if opcode in self._primitives:
            raise ValueError(f"Primitive already registered: 0x{opcode:X}")
        if opcode not in MNEMONICS:
            raise ValueError(f"No mnemonic for opcode 0x{opcode:X}")
        self._primitives[opcode] = handler

    def freeze(self) -> None:
        """Freeze the registry to prevent further modifications."""
        self._frozen = True

    def is_frozen(self) -> bool:
        """Check if registry is frozen."""
        return self._frozen

    def get_valid_opcodes(self) -> set:
        """Get set of all registered opcodes."""
        return set(self._primitives.keys())

    def execute(self, state: MachineState, opcode: int, operand: int) -> MachineState:
        """Execute a registered primitive.

        Args:
            state: Current machine state
            opcode: 4-bit opcode
            operand: 8-bit address operand

        Returns:
            New machine state after execution

        Raises:
            InvalidOpcodeError: If opcode not in registry
        """
        if opcode not in self._primitives:
            raise InvalidOpcodeError(opcode, state.pc, state.read(state.pc))

        handler = self._primitives[opcode]
        new_state = handler(state, operand)

        # Always increment cycle count after execution
        return new_state.increment_cycle()

    # =========================================================================
    # Data Movement Primitives
    # =========================================================================

    def _op_load(self, state: MachineState, addr: int) -> MachineState:
        """LOAD addr - ACC = M[addr]."""
        return state.set_acc(state.read(addr)).set_pc(state.pc + 1)

    def _op_store(self, state: MachineState, addr: int) -> MachineState:
        """STORE addr - M[addr] = ACC."""
        return state.write(addr, state.acc).set_pc(state.pc + 1)

    def _op_loadi(self, state: MachineState, addr: int) -> MachineState:
        """LOADI addr - ACC = M[M[addr]].

        The pointer word is masked to 8 bits before the second read.
        """
        pointer = state.read(addr)
        return state.set_acc(state.read(pointer)).set_pc(state.pc + 1)

    def _op_storei(self, state: MachineState, addr: int) -> MachineState:
        """STOREI addr - M[M[addr]] = ACC."""
        pointer = state.read(addr)
        return state.write(pointer, state.acc).set_pc(state.pc + 1)

    # =========================================================================
    # Arithmetic and Logic Primitives
    # =========================================================================

    def _op_add(self, state: MachineState, addr: int) -> MachineState:
        """ADD addr - ACC = ACC + M[addr], wrapping at 12 bits."""
        result = state.acc + state.read(addr)
        return state.set_acc(result).set_pc(state.pc + 1)

    def _op_sub(self, state: MachineState, addr: int) -> MachineState:
        """SUB addr - ACC = ACC - M[addr], two's-complement wraparound."""
        result = state.acc - state.read(addr)
        return state.set_acc(result).set_pc(state.pc + 1)

    def _op_and(self, state: MachineState, addr: int) -> MachineState:
        return state.set_acc(state.acc & state.read(addr)).set_pc(state.pc + 1)

    def _op_or(self, state: MachineState, addr: int) -> MachineState:
        return state.set_acc(state.acc | state.read(addr)).set_pc(state.pc + 1)

    # =========================================================================
    # Control Flow Primitives
    # =========================================================================

    def _op_jmp(self, state: MachineState, addr: int) -> MachineState:
        """JMP addr - Unconditional jump to address."""
        return state.set_pc(addr)

    def _op_jz(self, state: MachineState, addr: int) -> MachineState:
        """JZ addr - Jump if ACC is zero.

        Returns:
            New state with PC set to target if ACC == 0, else PC+1
        """
        if state.acc == 0:
            return state.set_pc(addr)
        else:
            return state.set_pc(state.pc + 1)

    def _op_jn(self, state: MachineState, addr: int) -> MachineState:
        """JN addr - Jump if ACC is negative (bit 11 set).

        Returns:
            New state with PC set to target if negative, else PC+1
        """
        if is_negative12(state.acc):
            return state.set_pc(addr)
        else:
            return state.set_pc(state.pc + 1)

    # =========================================================================
    # Special Primitives
    # =========================================================================

    def _op_halt(self, state: MachineState, addr: int) -> MachineState:
        """HALT - Stop execution.

        PC still advances past the HALT word.
        """
        return state.set_pc(state.pc + 1).set_halted(True)


# Singleton registry instance
_registry: Optional[InstructionRegistry] = None


def get_registry() -> InstructionRegistry:
    """Get the singleton instruction registry instance.

    Returns:
        The frozen InstructionRegistry instance
    """
    global _registry
    if _registry is None:
        _registry = InstructionRegistry()
    return _registry


def step(state: MachineState) -> StepResult:
    """Run one fetch-decode-execute cycle.

    Performs: FETCH -> DECODE -> EXECUTE

    Once the machine is halted every call returns the unchanged state,
    HALTED_SENTINEL and no trace record.

    Args:
        state: Current machine state

    Returns:
        StepResult with the new state, the fetched word and its trace record

    Raises:
        InvalidOpcodeError: If the fetched opcode is undefined; nothing is
            executed and no trace record is produced
    """
    if state.halted:
        return StepResult(state, HALTED_SENTINEL, None)

    # FETCH
    pc = state.pc
    decoded = decode(state.read(pc))

    # DECODE
    if not decoded.valid:
        logger.error("Unknown opcode 0x%X at PC=0x%02X (word=0x%03X)",
                     decoded.opcode, pc, decoded.word)
        raise InvalidOpcodeError(decoded.opcode, pc, decoded.word)

    # EXECUTE
    new_state = get_registry().execute(state, decoded.opcode, decoded.operand)
    if new_state.halted:
        logger.info("HALT at PC=0x%02X after %d cycles", pc, new_state.cycle_count)

    record = TraceRecord(
        cycle=state.cycle_count,
        pc=pc,
        decoded=decoded,
        pre_state=state.snapshot(),
        post_state=new_state.snapshot()
    )
    return StepResult(new_state, decoded.word, record)
