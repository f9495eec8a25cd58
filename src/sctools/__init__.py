"""
sctools - Settings Tools for Soarer's Keyboard Converter
========================================================

This package converts keyboard-converter settings between the editable
configuration language and the compact binary format the converter
stores.

The converter sits between a legacy keyboard (XT, AT or terminal) and a
USB host. Its settings remap keys per layer, define FN-key layer
combinations and attach keystroke macros to key+modifier matches, all
optionally restricted to a scan set, keyboard id or select value.

Main Components
---------------
- **assembler**: Configuration compiler (scas)
    Converts configuration text (.sc) to a binary settings file (.bin)

- **disassembler**: Settings decoder (scdis)
    Converts a binary settings file back to configuration text

- **tokens**: Key, modifier and macro command name tables

- **records**: Binary format constants and bit-field helpers

Quick Start
-----------
Compile a configuration:
    >>> from sctools import Assembler
    >>> asm = Assembler()
    >>> image = asm.assemble_file("layout.sc")
    >>> asm.write_image("layout.bin")

Decode a settings file:
    >>> from sctools import disassemble
    >>> result = disassemble(open("layout.bin", "rb").read())
    >>> print(result.text)

Or use the command-line tools:
    $ scas layout.sc layout.bin
    $ scdis layout.bin layout.sc

Version History
---------------
1.10 - Binary format version 1.1, side-specific macro modifier matching
"""

__version__ = "1.10"

# =============================================================================
# Public API Exports
# =============================================================================

from sctools.assembler import Assembler, assemble, assemble_string
from sctools.config import AssemblerConfig
from sctools.disassembler import ConfigDisassembler, DisassemblyResult, disassemble
from sctools.errors import (
    SCError,
    SourceLocation,
    ErrorCategory,
    AssemblerError,
    SourceFileError,
    IncludeError,
    InvalidCommandError,
    InvalidArgumentsError,
    BlockTooLargeError,
    MacroTooLongError,
    OutputWriteError,
    DisassemblerError,
    ConfigFormatError,
)

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    "AssemblerConfig",
    "assemble",
    "assemble_string",
    # Disassembler
    "ConfigDisassembler",
    "DisassemblyResult",
    "disassemble",
    # Exception hierarchy
    "SCError",
    "SourceLocation",
    "ErrorCategory",
    "AssemblerError",
    "SourceFileError",
    "IncludeError",
    "InvalidCommandError",
    "InvalidArgumentsError",
    "BlockTooLargeError",
    "MacroTooLongError",
    "OutputWriteError",
    "DisassemblerError",
    "ConfigFormatError",
]
