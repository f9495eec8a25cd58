"""
Assembler Unit Tests
====================

This module contains tests for the configuration assembler.

Test Categories
---------------
1. Header: force directives
2. Conditions: ifselect, ifset, ifkeyboard and their persistence
3. Blocks: layer, remap and macro block encoding
4. Macros: modifier matching and step encoding
5. Errors: every category, with file and line
6. Limits: 63/64 macro steps, 255/256 block bytes
7. Files: include resolution, several sources, output writing
"""

import os

import pytest

from sctools.assembler import Assembler, assemble, assemble_string
from sctools.config import AssemblerConfig
from sctools.errors import (
    AssemblerError,
    BlockTooLargeError,
    ErrorCategory,
    IncludeError,
    InvalidArgumentsError,
    InvalidCommandError,
    MacroTooLongError,
    OutputWriteError,
    SourceFileError,
)


HEADER = b"SC\x01\x01\x00\x00"


def blocks_of(source: str) -> bytes:
    """Assemble source and return everything after the header."""
    image = assemble_string(source)
    assert image[:4] == HEADER[:4]
    return image[6:]


def macro_record(source: str) -> bytes:
    """Return the first macro record of a single unconditioned macro block."""
    data = blocks_of(source)
    assert data[1] == 0x02
    return data[3:]


# =============================================================================
# Header Tests
# =============================================================================

class TestHeader:
    """Tests for the file header and force flags."""

    def test_empty_input(self):
        assert assemble_string("") == HEADER

    def test_comments_and_blank_lines(self):
        assert assemble_string("# settings\n\n   \n# end\n") == HEADER

    def test_force_scanset(self):
        assert assemble_string("force set2\n")[4] == 0x02
        assert assemble_string("force set2ext\n")[4] == 0x04

    def test_force_protocol(self):
        assert assemble_string("force xt\n")[4] == 0x10
        assert assemble_string("force at\n")[4] == 0x20

    def test_force_both(self):
        assert assemble_string("force set2\nforce at\n")[4] == 0x22

    def test_force_last_wins(self):
        assert assemble_string("force set1\nforce set3\n")[4] == 0x03

    def test_force_any_clears_scanset(self):
        assert assemble_string("force at\nforce set3\nforce any\n")[4] == 0x20

    def test_force_none_clears_all(self):
        assert assemble_string("force at\nforce set3\nforce none\n")[4] == 0x00

    def test_force_unknown(self):
        with pytest.raises(InvalidArgumentsError):
            assemble_string("force set4\n")

    def test_force_missing_argument(self):
        with pytest.raises(InvalidArgumentsError):
            assemble_string("force\n")


# =============================================================================
# Block Tests
# =============================================================================

class TestLayerBlock:
    """Tests for layer definition blocks."""

    def test_layer_definitions(self):
        data = blocks_of("layerblock\n\tFN1 1\n\tFN1 FN2 3\nendblock\n")
        assert data == bytes([0x07, 0x00, 0x02, 0x01, 0x01, 0x03, 0x03])

    def test_fn_combo_bits(self):
        data = blocks_of("layerblock\nFN8 FN3 255\nendblock\n")
        assert data[3:] == bytes([0x84, 0xFF])

    def test_empty_block(self):
        assert blocks_of("layerblock\nendblock\n") == bytes([0x03, 0x00, 0x00])

    def test_missing_fn_key(self):
        with pytest.raises(InvalidArgumentsError):
            assemble_string("layerblock\n1\nendblock\n")

    def test_layer_zero_rejected(self):
        with pytest.raises(InvalidArgumentsError):
            assemble_string("layerblock\nFN1 0\nendblock\n")

    def test_missing_layer(self):
        with pytest.raises(InvalidArgumentsError):
            assemble_string("layerblock\nFN1\nendblock\n")

    def test_trailing_argument(self):
        with pytest.raises(InvalidArgumentsError):
            assemble_string("layerblock\nFN1 1 2\nendblock\n")


class TestRemapBlock:
    """Tests for remap blocks."""

    def test_scanset_remap(self):
        """Remap in layer 2 restricted to scan sets 1 and 2."""
        data = blocks_of("ifset set1 set2\nremapblock\nlayer 2\nCAPSLOCK ESC\nendblock\n")
        assert data == bytes([0x07, 0x41, 0x03, 0x02, 0x01, 0x39, 0x29])

    def test_default_layer(self):
        data = blocks_of("remapblock\nCAPS_LOCK LCTRL\nendblock\n")
        assert data == bytes([0x06, 0x01, 0x00, 0x01, 0x39, 0xE0])

    def test_empty_block(self):
        assert blocks_of("remapblock\nendblock\n") == bytes([0x04, 0x01, 0x00, 0x00])

    def test_layer_persists(self):
        data = blocks_of("layer 4\nremapblock\nendblock\nremapblock\nendblock\n")
        assert data == bytes([0x04, 0x01, 0x04, 0x00] * 2)

    def test_layer_range(self):
        assert blocks_of("remapblock\nlayer 255\nendblock\n")[2] == 255
        with pytest.raises(InvalidArgumentsError):
            assemble_string("remapblock\nlayer 256\nendblock\n")
        with pytest.raises(InvalidArgumentsError):
            assemble_string("remapblock\nlayer -1\nendblock\n")

    def test_unknown_key(self):
        with pytest.raises(InvalidArgumentsError) as exc:
            assemble_string("remapblock\nCAPSLOK ESC\nendblock\n")
        assert "CAPSLOK" in str(exc.value)

    def test_missing_target(self):
        with pytest.raises(InvalidArgumentsError):
            assemble_string("remapblock\nCAPS_LOCK\nendblock\n")

    def test_extra_key(self):
        with pytest.raises(InvalidArgumentsError):
            assemble_string("remapblock\nA B C\nendblock\n")

    def test_quoted_key(self):
        data = blocks_of('remapblock\n"A" "B"\nendblock\n')
        assert data[4:] == bytes([0x04, 0x05])


# =============================================================================
# Condition Tests
# =============================================================================

class TestConditions:
    """Tests for block condition directives."""

    def test_select(self):
        assert blocks_of("ifselect 3\nlayerblock\nendblock\n")[1] == 0x18

    def test_select_any(self):
        assert blocks_of("ifselect 3\nifselect any\nlayerblock\nendblock\n")[1] == 0x00

    @pytest.mark.parametrize("value", ["0", "8", "x"])
    def test_select_out_of_range(self, value):
        with pytest.raises(InvalidArgumentsError):
            assemble_string(f"ifselect {value}\n")

    def test_scanset_bits(self):
        assert blocks_of("ifset set3\nlayerblock\nendblock\n")[:3] == bytes([0x04, 0x40, 0x04])
        assert blocks_of("ifset set2ext\nlayerblock\nendblock\n")[2] == 0x08

    def test_scanset_any_resets(self):
        assert blocks_of("ifset set1\nifset any\nlayerblock\nendblock\n")[1] == 0x00

    def test_scanset_any_then_set(self):
        assert blocks_of("ifset set1 any set3\nlayerblock\nendblock\n")[2] == 0x04

    def test_scanset_unknown(self):
        with pytest.raises(InvalidArgumentsError):
            assemble_string("ifset set9\n")

    def test_keyboard_id(self):
        data = blocks_of("ifkeyboard 1234\nlayerblock\nendblock\n")
        assert data == bytes([0x05, 0x80, 0x34, 0x12, 0x00])

    def test_keyboard_id_prefix(self):
        assert blocks_of("ifkeyboard 0xAB\nlayerblock\nendblock\n")[2:4] == b"\xab\x00"

    @pytest.mark.parametrize("value", ["0", "FFFF", "10000", "zz", "1_0", "+ff", "-1", "0x", "0x+1"])
    def test_keyboard_id_invalid(self, value):
        with pytest.raises(InvalidArgumentsError):
            assemble_string(f"ifkeyboard {value}\n")

    def test_all_conditions(self):
        data = blocks_of("ifselect 3\nifset set2\nifkeyboard 1234\nlayerblock\nFN1 1\nendblock\n")
        assert data == bytes([0x08, 0xD8, 0x02, 0x34, 0x12, 0x01, 0x01, 0x01])

    def test_conditions_persist_across_blocks(self):
        """A later block inherits the conditions set for an earlier one."""
        data = blocks_of("ifselect 2\nlayerblock\nendblock\nremapblock\nendblock\n")
        assert data == bytes([0x03, 0x10, 0x00, 0x04, 0x11, 0x00, 0x00])

    def test_conditions_captured_at_endblock(self):
        data = blocks_of("layerblock\nifselect 1\nendblock\n")
        assert data[1] == 0x08


# =============================================================================
# Macro Tests
# =============================================================================

class TestMacros:
    """Tests for macro definitions."""

    def test_press_and_release(self):
        """One press step, one release step, restore on release."""
        data = blocks_of(
            "macroblock\nmacro A LCTRL\n\tPRESS B\nonbreak\n\tBREAK B\nendmacro\nendblock\n"
        )
        assert data == bytes([
            0x0C, 0x02, 0x01,
            0x04, 0x01, 0x01, 0x01, 0x81,
            0x01, 0x05,
            0x03, 0x05,
        ])

    def test_no_onbreak_restores(self):
        record = macro_record("macroblock\nmacro A\nPRESS B\nendmacro\nendblock\n")
        assert record[3:5] == bytes([0x01, 0x80])

    def test_norestoremeta(self):
        record = macro_record(
            "macroblock\nmacro A\nPRESS B\nonbreak norestoremeta\nBREAK B\nendmacro\nendblock\n"
        )
        assert record[3:5] == bytes([0x01, 0x01])

    def test_empty_macro(self):
        data = blocks_of("macroblock\nmacro F1\nendmacro\nendblock\n")
        assert data == bytes([0x08, 0x02, 0x01, 0x3A, 0x00, 0x00, 0x00, 0x80])

    def test_several_macros(self):
        data = blocks_of(
            "macroblock\nmacro A\nNOP\nendmacro\nmacro B\nNOP\nendmacro\nendblock\n"
        )
        assert data[2] == 2
        assert data[0] == len(data) == 3 + 2 * 7

    def test_empty_block(self):
        assert blocks_of("macroblock\nendblock\n") == bytes([0x03, 0x02, 0x00])

    @pytest.mark.parametrize("modifiers, desired, matched", [
        ("", 0x00, 0x00),
        ("LCTRL", 0x01, 0x01),
        ("RALT", 0x40, 0x40),
        ("CTRL", 0x11, 0x01),
        ("-LSHIFT", 0x00, 0x02),
        ("-SHIFT", 0x00, 0x22),
        ("CTRL -SHIFT", 0x11, 0x23),
        ("CTRL -RCTRL", 0x01, 0x11),
        ("LGUI RSHIFT", 0x28, 0x28),
    ])
    def test_modifier_match(self, modifiers, desired, matched):
        record = macro_record(f"macroblock\nmacro A {modifiers}\nendmacro\nendblock\n")
        assert record[1] == desired
        assert record[2] == matched

    def test_unknown_modifier(self):
        with pytest.raises(InvalidArgumentsError):
            assemble_string("macroblock\nmacro A HYPER\n")

    def test_unknown_trigger(self):
        with pytest.raises(InvalidArgumentsError):
            assemble_string("macroblock\nmacro NOKEY\n")

    @pytest.mark.parametrize("step, encoded", [
        ("NOP", (0x00, 0x00)),
        ("PRESS SPACE", (0x01, 0x2C)),
        ("MAKE LSHIFT", (0x02, 0xE1)),
        ("BREAK LSHIFT", (0x03, 0xE1)),
        ("ASSIGN_META", (0x04, 0x00)),
        ("ASSIGN_META CTRL SHIFT", (0x04, 0x33)),
        ("SET_META LALT", (0x05, 0x04)),
        ("CLEAR_META RGUI", (0x06, 0x80)),
        ("TOGGLE_META GUI", (0x07, 0x88)),
        ("POP_META", (0x08, 0x00)),
        ("POP_ALL_META", (0x09, 0x00)),
        ("DELAY 100", (0x0A, 100)),
        ("DELAY 0", (0x0A, 0)),
        ("CLEAR_ALL", (0x0B, 0x00)),
        ("BOOT", (0x0C, 0x00)),
        ("PUSH_META SET_META LSHIFT", (0x85, 0x02)),
        ("PUSH_META PRESS A", (0x81, 0x04)),
    ])
    def test_step_encoding(self, step, encoded):
        record = macro_record(f"macroblock\nmacro A\n\t{step}\nendmacro\nendblock\n")
        assert record[5:7] == bytes(encoded)

    @pytest.mark.parametrize("step", [
        "JUMP A",
        "PRESS",
        "PRESS NOKEY",
        "DELAY",
        "DELAY 256",
        "NOP A",
        "SET_META HYPER",
        "PUSH_META",
        "PUSH_META PUSH_META NOP",
    ])
    def test_bad_step(self, step):
        with pytest.raises(InvalidArgumentsError):
            assemble_string(f"macroblock\nmacro A\n{step}\nendmacro\nendblock\n")

    def test_step_outside_macro(self):
        with pytest.raises(InvalidCommandError):
            assemble_string("macroblock\nPRESS A\nendblock\n")


# =============================================================================
# Block Structure Errors
# =============================================================================

class TestStructureErrors:
    """Tests for directives used in the wrong place."""

    def test_unknown_directive_outside_block(self):
        with pytest.raises(InvalidCommandError) as exc:
            assemble_string("bogus\n")
        assert exc.value.category == ErrorCategory.INVALID_COMMAND

    def test_body_line_outside_block(self):
        with pytest.raises(InvalidCommandError):
            assemble_string("CAPS_LOCK ESC\n")

    @pytest.mark.parametrize("opener", ["layerblock", "remapblock", "macroblock"])
    def test_nested_block(self, opener):
        with pytest.raises(InvalidCommandError):
            assemble_string(f"remapblock\n{opener}\n")

    def test_endblock_without_block(self):
        with pytest.raises(InvalidCommandError):
            assemble_string("endblock\n")

    def test_macro_outside_macroblock(self):
        with pytest.raises(InvalidCommandError):
            assemble_string("remapblock\nmacro A\n")
        with pytest.raises(InvalidCommandError):
            assemble_string("macro A\n")

    def test_macro_inside_macro(self):
        with pytest.raises(InvalidCommandError):
            assemble_string("macroblock\nmacro A\nmacro B\n")

    def test_endmacro_without_macro(self):
        with pytest.raises(InvalidCommandError):
            assemble_string("macroblock\nendmacro\n")

    def test_onbreak_without_macro(self):
        with pytest.raises(InvalidCommandError):
            assemble_string("macroblock\nonbreak\n")

    def test_onbreak_twice(self):
        with pytest.raises(InvalidCommandError):
            assemble_string("macroblock\nmacro A\nonbreak\nonbreak\n")

    def test_onbreak_bad_option(self):
        with pytest.raises(InvalidCommandError):
            assemble_string("macroblock\nmacro A\nonbreak restore\n")

    def test_endblock_inside_macro(self):
        with pytest.raises(InvalidCommandError):
            assemble_string("macroblock\nmacro A\nendblock\n")

    def test_unterminated_block(self):
        with pytest.raises(InvalidCommandError) as exc:
            assemble_string("layerblock\nFN1 1\n")
        assert exc.value.location.line == 2

    def test_unterminated_macro(self):
        with pytest.raises(InvalidCommandError):
            assemble_string("macroblock\nmacro A\nNOP\n")


# =============================================================================
# Error Reporting Tests
# =============================================================================

class TestErrorReporting:
    """Tests for error locations and categories."""

    def test_line_number(self):
        with pytest.raises(InvalidArgumentsError) as exc:
            assemble_string("# comment\n\nlayerblock\nFN9 1\nendblock\n", "layout.sc")
        error = exc.value
        assert error.location.filename == "layout.sc"
        assert error.location.line == 4
        assert error.source_line == "FN9 1"

    def test_message_format(self):
        with pytest.raises(AssemblerError) as exc:
            assemble_string("ifselect 9\n", "layout.sc")
        text = str(exc.value)
        assert text.startswith("layout.sc:1: error: invalid arguments:")
        assert "ifselect 9" in text

    @pytest.mark.parametrize("source, category", [
        ("bogus\n", ErrorCategory.INVALID_COMMAND),
        ("ifselect 9\n", ErrorCategory.INVALID_ARGUMENTS),
        ("include missing.sc\n", ErrorCategory.FILE_NOT_FOUND),
        ("macroblock\nmacro A\n" + "NOP\n" * 64 + "endmacro\n", ErrorCategory.MACRO_TOO_LONG),
        ("layerblock\n" + "FN1 1\n" * 127 + "endblock\n", ErrorCategory.BLOCK_TOO_LARGE),
    ])
    def test_categories(self, source, category):
        with pytest.raises(AssemblerError) as exc:
            assemble_string(source)
        assert exc.value.category == category
        assert category.message in str(exc.value)

    def test_category_messages(self):
        assert ErrorCategory.FILE_NOT_FOUND.message == "file not found"
        assert ErrorCategory.INVALID_COMMAND.message == "invalid command"
        assert ErrorCategory.INVALID_ARGUMENTS.message == "invalid arguments"
        assert ErrorCategory.BLOCK_TOO_LARGE.message == "block too large"
        assert ErrorCategory.MACRO_TOO_LONG.message == "macro too long"
        assert ErrorCategory.FILE_WRITE.message == "unable to open file for writing"

    @pytest.mark.parametrize("source, line", [
        ("ifselect ²\n", 1),
        ("layer ²\n", 1),
        ("layerblock\nFN² 1\nendblock\n", 2),
        ("layerblock\nFN1 ٣\nendblock\n", 2),
        ("macroblock\nmacro A\nDELAY ²\nendmacro\nendblock\n", 3),
    ])
    def test_non_ascii_digits(self, source, line):
        """Digits outside 0-9 are malformed arguments, located like any other."""
        with pytest.raises(InvalidArgumentsError) as exc:
            assemble_string(source, "layout.sc")
        assert exc.value.location.filename == "layout.sc"
        assert exc.value.location.line == line

    def test_first_error_aborts(self):
        with pytest.raises(AssemblerError) as exc:
            assemble_string("bogus\nifselect 9\n")
        assert exc.value.location.line == 1


# =============================================================================
# Size Limit Tests
# =============================================================================

class TestLimits:
    """Tests for macro step and block size limits."""

    def test_63_press_steps(self):
        record = macro_record("macroblock\nmacro A\n" + "NOP\n" * 63 + "endmacro\nendblock\n")
        assert record[3] == 63

    def test_64_press_steps(self):
        with pytest.raises(MacroTooLongError) as exc:
            assemble_string("macroblock\nmacro A\n" + "NOP\n" * 64 + "endmacro\nendblock\n")
        assert exc.value.location.line == 67

    def test_63_release_steps(self):
        record = macro_record(
            "macroblock\nmacro A\nonbreak\n" + "NOP\n" * 63 + "endmacro\nendblock\n"
        )
        assert record[4] == 0x80 | 63

    def test_64_release_steps(self):
        with pytest.raises(MacroTooLongError):
            assemble_string("macroblock\nmacro A\nonbreak\n" + "NOP\n" * 64 + "endmacro\n")

    def test_block_of_255_bytes(self):
        data = blocks_of("layerblock\n" + "FN1 1\n" * 126 + "endblock\n")
        assert data[0] == 255
        assert len(data) == 255
        assert data[2] == 126

    def test_block_of_256_bytes(self):
        with pytest.raises(BlockTooLargeError) as exc:
            assemble_string("ifset set1\nlayerblock\n" + "FN1 1\n" * 126 + "endblock\n")
        assert exc.value.location.line == 129

    def test_macro_block_too_large(self):
        macro = "macro A\n" + "NOP\n" * 63 + "endmacro\n"
        with pytest.raises(BlockTooLargeError):
            assemble_string("macroblock\n" + macro * 2 + "endblock\n")

    def test_error_leaves_no_state(self):
        """A failed run does not leak into the next one."""
        asm = Assembler()
        with pytest.raises(BlockTooLargeError):
            asm.assemble_string("layerblock\n" + "FN1 1\n" * 127 + "endblock\n")
        assert asm.assemble_string("layerblock\nendblock\n") == HEADER + bytes([3, 0, 0])


# =============================================================================
# Assembler Class Tests
# =============================================================================

SAMPLE = """\
force set2
ifset set2
layerblock
    FN1 1
endblock
ifset any
remapblock
layer 1
    CAPS_LOCK LCTRL
endblock
macroblock
macro A CTRL
    PRESS B
endmacro
endblock
"""


class TestAssemblerClass:
    """Tests for the Assembler interface."""

    def test_idempotent(self):
        assert assemble_string(SAMPLE) == assemble_string(SAMPLE)

    def test_reuse_instance(self):
        asm = Assembler()
        first = asm.assemble_string(SAMPLE)
        second = asm.assemble_string(SAMPLE)
        assert first == second

    def test_block_count(self):
        asm = Assembler()
        asm.assemble_string(SAMPLE)
        assert asm.block_count() == 3

    def test_get_image(self):
        asm = Assembler()
        image = asm.assemble_string(SAMPLE)
        assert asm.get_image() == image

    def test_get_image_before_assembly(self):
        with pytest.raises(RuntimeError):
            Assembler().get_image()

    def test_failed_run_clears_image(self):
        asm = Assembler()
        asm.assemble_string(SAMPLE)
        with pytest.raises(AssemblerError):
            asm.assemble_string("bogus\n")
        with pytest.raises(RuntimeError):
            asm.get_image()

    def test_conditions_reset_between_runs(self):
        asm = Assembler()
        asm.assemble_string("ifselect 5\n")
        assert asm.assemble_string("layerblock\nendblock\n")[7] == 0x00


# =============================================================================
# File Tests
# =============================================================================

class TestFiles:
    """Tests for source files, includes and output."""

    def test_assemble_file(self, tmp_path):
        source = tmp_path / "layout.sc"
        source.write_text(SAMPLE)
        assert Assembler().assemble_file(source) == assemble_string(SAMPLE)

    def test_missing_source(self, tmp_path):
        with pytest.raises(SourceFileError) as exc:
            Assembler().assemble_file(tmp_path / "missing.sc")
        assert exc.value.category == ErrorCategory.FILE_NOT_FOUND

    def test_error_location_names_file(self, tmp_path):
        source = tmp_path / "layout.sc"
        source.write_text("layerblock\nendblock\nbogus\n")
        with pytest.raises(InvalidCommandError) as exc:
            Assembler().assemble_file(source)
        assert exc.value.location.filename == str(source)
        assert exc.value.location.line == 3

    def test_assemble_writes_output(self, tmp_path):
        source = tmp_path / "layout.sc"
        source.write_text(SAMPLE)
        output = tmp_path / "layout.bin"
        image = assemble([source], output)
        assert output.read_bytes() == image == assemble_string(SAMPLE)

    def test_error_writes_nothing(self, tmp_path):
        source = tmp_path / "layout.sc"
        source.write_text("layerblock\nendblock\nbogus\n")
        output = tmp_path / "layout.bin"
        with pytest.raises(InvalidCommandError):
            assemble([source], output)
        assert not output.exists()

    def test_unwritable_output(self, tmp_path):
        source = tmp_path / "layout.sc"
        source.write_text(SAMPLE)
        with pytest.raises(OutputWriteError) as exc:
            assemble([source], tmp_path / "missing" / "layout.bin")
        assert exc.value.category == ErrorCategory.FILE_WRITE

    def test_several_sources_are_one_document(self, tmp_path):
        """State from one source carries into the next."""
        first = tmp_path / "first.sc"
        first.write_text("ifselect 2\nremapblock\n")
        second = tmp_path / "second.sc"
        second.write_text("A B\nendblock\n")
        image = Assembler().assemble_files([first, second])
        assert image[6:] == bytes([0x06, 0x11, 0x00, 0x01, 0x04, 0x05])

    def test_include(self, tmp_path):
        (tmp_path / "common.sc").write_text("remapblock\nCAPS_LOCK LCTRL\nendblock\n")
        main = tmp_path / "main.sc"
        main.write_text("include common.sc\n")
        image = Assembler().assemble_file(main)
        assert image[6:] == bytes([0x06, 0x01, 0x00, 0x01, 0x39, 0xE0])

    def test_include_quoted_name(self, tmp_path):
        (tmp_path / "my common.sc").write_text("layerblock\nendblock\n")
        main = tmp_path / "main.sc"
        main.write_text('include "my common.sc"\n')
        assert Assembler().assemble_file(main)[6:] == bytes([3, 0, 0])

    def test_include_shares_state(self, tmp_path):
        (tmp_path / "conditions.sc").write_text("ifselect 1\n")
        main = tmp_path / "main.sc"
        main.write_text("include conditions.sc\nlayerblock\nendblock\n")
        assert Assembler().assemble_file(main)[7] == 0x08

    def test_include_relative_to_including_file(self, tmp_path):
        sub = tmp_path / "sub"
        sub.mkdir()
        (sub / "inner.sc").write_text("layerblock\nendblock\n")
        (sub / "outer.sc").write_text("include inner.sc\n")
        main = tmp_path / "main.sc"
        main.write_text("include sub/outer.sc\n")
        assert Assembler().assemble_file(main)[6:] == bytes([3, 0, 0])

    def test_include_path(self, tmp_path):
        lib = tmp_path / "lib"
        lib.mkdir()
        (lib / "common.sc").write_text("layerblock\nendblock\n")
        config = AssemblerConfig(include_paths=[lib])
        image = Assembler(config).assemble_string("include common.sc\n")
        assert image[6:] == bytes([3, 0, 0])

    def test_include_missing(self, tmp_path):
        main = tmp_path / "main.sc"
        main.write_text("\ninclude missing.sc\n")
        with pytest.raises(IncludeError) as exc:
            Assembler().assemble_file(main)
        assert exc.value.category == ErrorCategory.FILE_NOT_FOUND
        assert exc.value.location.line == 2

    def test_include_cycle(self, tmp_path):
        (tmp_path / "a.sc").write_text("include b.sc\n")
        (tmp_path / "b.sc").write_text("include a.sc\n")
        with pytest.raises(IncludeError) as exc:
            Assembler().assemble_file(tmp_path / "a.sc")
        assert "circular" in str(exc.value)

    def test_error_in_included_file(self, tmp_path):
        common = tmp_path / "common.sc"
        common.write_text("remapblock\nCAPSLOK ESC\nendblock\n")
        main = tmp_path / "main.sc"
        main.write_text("# header\ninclude common.sc\n")
        with pytest.raises(InvalidArgumentsError) as exc:
            Assembler().assemble_file(main)
        assert exc.value.location.filename.endswith("common.sc")
        assert exc.value.location.line == 2


# =============================================================================
# Configuration Tests
# =============================================================================

class TestConfig:
    """Tests for AssemblerConfig."""

    def test_defaults(self):
        config = AssemblerConfig()
        assert config.include_paths == []
        assert not config.verbose

    def test_from_env(self, tmp_path):
        first = tmp_path / "a"
        second = tmp_path / "b"
        environ = {"SCAS_INCLUDE_PATH": f"{first}{os.pathsep}{second}"}
        config = AssemblerConfig.from_env(include_paths=[tmp_path], environ=environ)
        assert config.include_paths == [tmp_path, first, second]

    def test_from_env_empty(self):
        config = AssemblerConfig.from_env(environ={})
        assert config.include_paths == []

    def test_no_duplicates(self, tmp_path):
        config = AssemblerConfig()
        config.add_include_path(tmp_path)
        config.add_include_path(str(tmp_path))
        assert config.include_paths == [tmp_path]


# =============================================================================
# Document Model Tests
# =============================================================================

class TestDocument:
    """Tests for the working lists."""

    def test_add_and_clear(self):
        from sctools.assembler.model import Document, LayerDef, MacroStep, Remap

        doc = Document()
        doc.add_layerdef(LayerDef(0x01, 1))
        doc.add_remap(Remap(0x39, 0x29))
        doc.add_step(MacroStep(1, 0x05), release=False)
        doc.add_step(MacroStep(3, 0x05), release=True)

        assert len(doc.layerdefs) == 1
        assert doc.press_steps[0].value == 0x05
        assert doc.release_steps[0].command == 3

        doc.clear()
        assert doc.layerdefs == [] and doc.remaps == []
        assert doc.press_steps == [] and doc.release_steps == []

    def test_clear_is_idempotent(self):
        from sctools.assembler.model import Document

        doc = Document()
        doc.clear_steps()
        doc.clear_steps()
        doc.clear()
        assert doc == Document()

    def test_command_byte(self):
        from sctools.assembler.model import MacroStep

        assert MacroStep(5, 0x02, push_meta=True).command_byte == 0x85
        assert MacroStep(8).command_byte == 0x08
