"""Integration tests running whole programs through S12CPU."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from s12_sim import S12CPU, InvalidOpcodeError

PROGRAMS = Path(__file__).parent.parent / "programs"

ADD_HALT = """
00000000 000000000000
00 000100000010   ; ADD 02
01 000000000000   ; HALT
02 000000000101   ; data: 5
"""


class TestAddHaltProgram:
    """ADD then HALT from PC=0."""

    @pytest.fixture
    def cpu(self, tmp_path):
        path = tmp_path / "add_halt.mem"
        path.write_text(ADD_HALT)
        cpu = S12CPU()
        assert cpu.load_image(path) is True
        return cpu

    def test_final_registers(self, cpu):
        """Two steps leave ACC=5 and PC=2."""
        assert cpu.run() == 2
        assert cpu.get_acc() == 5
        assert cpu.get_pc() == 2
        assert cpu.register_summary() == ("0x02", "0x005")

    def test_step_bits(self, cpu):
        """step() returns the executed word in binary."""
        assert cpu.step() == "000100000010"
        assert cpu.step() == "000000000000"
        assert cpu.is_halted() is True

    def test_trace_file(self, cpu, tmp_path):
        """Trace file holds ADD 02 then HALT."""
        cpu.run()
        out = tmp_path / "add_halt_trace"
        assert cpu.export_trace(out) is True
        assert out.read_text().splitlines() == ["ADD 02", "HALT"]

    def test_memory_file(self, cpu, tmp_path):
        """Memory file header reflects the final registers."""
        cpu.run()
        out = tmp_path / "add_halt_memOut"
        assert cpu.export_memory(out) is True
        lines = out.read_text().splitlines()
        assert len(lines) == 257
        assert lines[0] == "00000010 000000000101"
        assert lines[3] == "02 000000000101"

    def test_steps_after_halt(self, cpu):
        """Extra steps return the sentinel and change nothing."""
        cpu.run()
        memory = cpu.get_memory()
        for _ in range(3):
            assert cpu.step() == "000000000000"
        assert cpu.get_pc() == 2
        assert cpu.get_acc() == 5
        assert cpu.get_memory() == memory
        assert len(cpu.trace) == 2
        assert cpu.get_cycle_count() == 2


class TestCountdownProgram:
    """countdown.mem sums 5..1 by looping."""

    @pytest.fixture
    def cpu(self):
        cpu = S12CPU()
        assert cpu.load_image(PROGRAMS / "countdown.mem") is True
        return cpu

    def test_result(self, cpu):
        """Total is 15, counter ends at 0."""
        cpu.run()
        memory = cpu.get_memory()
        assert memory[0x20] == 15
        assert memory[0x21] == 0
        assert cpu.is_halted() is True
        assert cpu.get_pc() == 0x09

    def test_cycles(self, cpu):
        """5 iterations of 7 instructions, 4 back jumps and HALT."""
        assert cpu.run() == 40
        assert cpu.get_cycle_count() == 40

    def test_cycle_cap(self, cpu):
        """A cap stops the run before HALT."""
        assert cpu.run(max_cycles=10) == 10
        assert cpu.is_halted() is False
        assert len(cpu.trace) == 10
        assert cpu.trace[7].asm() == "JMP 00"

    def test_instance_cap(self):
        """max_cycles on the constructor is the default cap."""
        cpu = S12CPU(max_cycles=3)
        cpu.load_image(PROGRAMS / "countdown.mem")
        assert cpu.run() == 3


class TestSumProgram:
    """sum.mem adds two numbers in compact hex format."""

    def test_sum(self):
        """M[12] = 5 + 7."""
        cpu = S12CPU()
        assert cpu.load_image(PROGRAMS / "sum.mem") is True
        cpu.run()
        assert cpu.get_memory()[0x12] == 12
        assert cpu.register_summary() == ("0x04", "0x00C")


class TestPointerProgram:
    """Indirect addressing copies through a pointer table."""

    def test_copy_through_pointers(self):
        """LOADI/STOREI copy M[M[10]] into M[M[11]]."""
        cpu = S12CPU()
        cpu.load_image_text("""
            00 610  ; LOADI 10
            01 711  ; STOREI 11
            02 000  ; HALT
            10 020  ; source pointer
            11 030  ; destination pointer
            20 ABC
        """)
        cpu.run()
        assert cpu.get_memory()[0x30] == 0xABC
        assert cpu.get_acc() == 0xABC


class TestNegativeBranch:
    """JN follows the sign bit after a subtraction."""

    def test_sub_below_zero(self):
        """3 - 4 is negative, so JN is taken."""
        cpu = S12CPU()
        cpu.load_image_text("""
            00 410  ; LOAD 10
            01 B11  ; SUB 11
            02 305  ; JN 05
            03 000  ; HALT
            05 512  ; STORE 12
            06 000  ; HALT
            10 003
            11 004
        """)
        cpu.run()
        assert cpu.get_memory()[0x12] == 0xFFF
        assert [r.asm() for r in cpu.trace] == ["LOAD 10", "SUB 11", "JN 05", "STORE 12", "HALT"]


class TestInvalidOpcode:
    """Unknown opcodes stop the run."""

    def test_run_raises(self):
        """Opcode 0xF after a STORE raises and keeps prior effects only."""
        cpu = S12CPU()
        cpu.load_image_text("""
            00 510  ; STORE 10
            01 F00  ; invalid
            02 511  ; STORE 11 (never reached)
        """)
        cpu.state = cpu.state.set_acc(0x777)
        with pytest.raises(InvalidOpcodeError) as excinfo:
            cpu.run()
        assert excinfo.value.pc == 0x01
        assert excinfo.value.word == 0xF00
        assert cpu.get_pc() == 0x01
        assert cpu.get_memory()[0x10] == 0x777
        assert cpu.get_memory()[0x11] == 0
        assert [r.asm() for r in cpu.trace] == ["STORE 10"]


class TestDriverErrors:
    """Load and export failures are reported as booleans."""

    def test_load_failure(self, tmp_path):
        """Unreadable file returns False and leaves nothing loaded."""
        cpu = S12CPU()
        cpu.load_image_text("00 000")
        assert cpu.load_image(tmp_path / "missing.mem") is False
        assert cpu.state is None
        with pytest.raises(RuntimeError):
            cpu.step()

    def test_export_failure_keeps_state(self, tmp_path):
        """Failed export returns False and the run result survives."""
        cpu = S12CPU()
        cpu.load_image_text("00 000")
        cpu.run()
        bad = tmp_path / "missing_dir" / "out"
        assert cpu.export_memory(bad) is False
        assert cpu.export_trace(bad) is False
        assert cpu.is_halted() is True
        assert cpu.register_summary() == ("0x01", "0x000")

    def test_summary(self):
        """get_summary reports cycles and registers."""
        cpu = S12CPU()
        cpu.load_image_text("00 000")
        cpu.run()
        summary = cpu.get_summary()
        assert summary["cycles"] == 1
        assert summary["halted"] is True
        assert summary["pc"] == "0x01"
        assert summary["acc"] == "0x000"
        assert summary["trace_length"] == 1

    def test_independent_instances(self):
        """Two CPUs never share state."""
        first, second = S12CPU(), S12CPU()
        first.load_image_text("00 411\n01 000\n11 00A")
        second.load_image_text("00 411\n01 000\n11 00B")
        first.run()
        second.run()
        assert first.get_acc() == 0x00A
        assert second.get_acc() == 0x00B
