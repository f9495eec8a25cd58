"""
sctools Disassembler Module
===========================

Decodes binary settings files back into configuration text.

Usage:
    from sctools.disassembler import disassemble

    result = disassemble(data)
    print(result.text)
"""

from .config import (
    ConfigDisassembler,
    DisassemblyResult,
    disassemble,
    match_modifier_names,
)

__all__ = [
    "ConfigDisassembler",
    "DisassemblyResult",
    "disassemble",
    "match_modifier_names",
]
