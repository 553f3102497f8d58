"""Tests for the memory image loader."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import pytest
from s12_sim.errors import LoadError
from s12_sim.loader import load_image, parse_image, strip_comment


class TestStripComment:
    """Test comment removal."""

    def test_semicolon(self):
        assert strip_comment("00 4A0 ; LOAD A0") == "00 4A0"

    def test_double_slash(self):
        assert strip_comment("00 4A0 // LOAD A0") == "00 4A0"

    def test_whole_line(self):
        assert strip_comment("; just a comment") == ""


class TestHeader:
    """Test PC/ACC header handling."""

    def test_header_sets_registers(self):
        """Binary header sets PC and ACC."""
        state = parse_image("00000101 000000001111\n00 000000000000\n")
        assert state.pc == 5
        assert state.acc == 0xF

    def test_no_header_defaults(self):
        """Without a header PC and ACC are 0."""
        state = parse_image("00 4A0\n")
        assert state.pc == 0
        assert state.acc == 0
        assert state.memory[0] == 0x4A0

    def test_header_not_stored_as_memory(self):
        """The header line never writes memory."""
        state = parse_image("11111111 111111111111\n")
        assert state.pc == 0xFF
        assert all(word == 0 for word in state.memory)

    def test_header_only_on_first_valid_line(self):
        """A header-shaped line after memory lines is skipped."""
        state = parse_image("00 001\n00000101 000000001111\n")
        assert state.pc == 0
        assert state.acc == 0
        assert state.memory[0] == 0x001

    def test_header_after_skipped_caption(self):
        """An unparsable two-token caption before the header does not hide it."""
        state = parse_image("Addr Value\n00000101 000000001111\n00 4A0\n")
        assert (state.pc, state.acc) == (5, 15)
        assert state.memory[0] == 0x4A0
        assert sum(state.memory) == 0x4A0

    def test_header_after_comments_and_blanks(self):
        """Comments, blanks and skipped short lines come before the first valid line."""
        text = "; title\n\n// note\n...\n00000010 000000000011\n"
        state = parse_image(text)
        assert state.pc == 2
        assert state.acc == 3


class TestMemoryLines:
    """Test memory line decoding."""

    def test_hex_and_binary_equal(self):
        """'4A0' and '010010100000' decode to the same word."""
        hex_state = parse_image("00 4A0\n")
        bin_state = parse_image("00 010010100000\n")
        assert hex_state.memory[0] == bin_state.memory[0] == 0x4A0

    def test_short_binary_looking_token_is_hex(self):
        """'010' is three hex digits, not binary."""
        state = parse_image("00 010\n")
        assert state.memory[0] == 0x010

    def test_short_hex_values(self):
        """One and two hex digit values are accepted."""
        state = parse_image("00 5\n01 FF\n")
        assert state.memory[0] == 0x005
        assert state.memory[1] == 0x0FF

    def test_lowercase_hex(self):
        """Hex digits are case insensitive."""
        state = parse_image("ff abc\n")
        assert state.memory[0xFF] == 0xABC

    def test_later_lines_win(self):
        """A repeated address keeps the last value."""
        state = parse_image("10 111\n10 222\n")
        assert state.memory[0x10] == 0x222

    def test_unset_addresses_are_zero(self):
        """Addresses not listed stay 0."""
        state = parse_image("10 111\n")
        assert sum(state.memory) == 0x111

    def test_everything_in_range(self):
        """Loaded state satisfies the invariants."""
        state = parse_image("00000000 000000000000\n00 FFF\nFF 111111111111\n")
        assert state.validate() is True


class TestTolerantParsing:
    """Test that malformed lines are skipped, not rejected."""

    @pytest.mark.parametrize("line", [
        "00",                   # one token
        "00 4A0 extra",         # three tokens
        "000 4A0",              # three-digit address
        "G0 4A0",               # non-hex address
        "00 4A0F",              # four hex digits
        "00 01010",             # five binary digits
        "00 0101010101010",     # thirteen binary digits
        "00 XYZ",               # non-hex value
    ])
    def test_malformed_line_skipped(self, line):
        """Malformed lines leave memory untouched."""
        state = parse_image(f"{line}\n01 123\n")
        assert state.memory[0] == 0
        assert state.memory[1] == 0x123

    def test_unicode_space_is_not_a_separator(self):
        """Only ASCII whitespace splits tokens; NBSP and U+2028 do not."""
        state = parse_image("00\xa04A0\n01 002\u202802 003\n03 004\n")
        assert state.memory[0] == 0
        assert state.memory[1] == 0
        assert state.memory[2] == 0
        assert state.memory[3] == 0x004

    def test_ascii_whitespace_separators(self):
        """Tabs, form feeds and CRLF line ends are whitespace."""
        state = parse_image("00\t4A0\r\n01\x0c123\x0b\r\n")
        assert state.memory[0] == 0x4A0
        assert state.memory[1] == 0x123

    def test_placeholder_line(self):
        """A literal '...' line is ignored."""
        state = parse_image("00 001\n...\nFF 002\n")
        assert state.memory[0] == 1
        assert state.memory[0xFF] == 2

    def test_empty_text(self):
        """Empty input gives a blank machine."""
        state = parse_image("")
        assert state.pc == 0
        assert sum(state.memory) == 0


class TestLoadImage:
    """Test file loading."""

    def test_load_file(self, tmp_path):
        """load_image reads and parses a file."""
        path = tmp_path / "prog.mem"
        path.write_text("00000001 000000000010\n01 000\n")
        state = load_image(path)
        assert state.pc == 1
        assert state.acc == 2

    def test_missing_file(self, tmp_path):
        """Missing file raises LoadError."""
        with pytest.raises(LoadError) as excinfo:
            load_image(tmp_path / "missing.mem")
        assert "missing.mem" in excinfo.value.path

    def test_directory(self, tmp_path):
        """A directory cannot be loaded."""
        with pytest.raises(LoadError):
            load_image(tmp_path)

    def test_example_programs_load(self):
        """Bundled example images parse."""
        programs = Path(__file__).parent.parent / "programs"
        countdown = load_image(programs / "countdown.mem")
        assert countdown.memory[0x21] == 5
        assert countdown.memory[0x08] == 0x000
        total = load_image(programs / "sum.mem")
        assert total.memory[0x11] == 7
