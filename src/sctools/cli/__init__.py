"""
sctools Command-Line Interface
==============================

This package provides the command-line tools:

- **scas**: configuration assembler (text -> binary)
- **scdis**: settings disassembler (binary -> text)

Each tool is implemented as a Click-based CLI application.
"""

__all__ = ["scas", "scdis"]
