"""
Configuration Assembler
=======================

Compiles the line-oriented configuration language into the binary
settings format.

Main Components
---------------
- **Assembler**: Runs a compilation and writes the settings file
- **LineScanner**: Splits a line into tokens
- **commands**: Directive handlers and the two-level line dispatch
- **codegen**: Block encoding and size checks

Assembly Process
----------------
1. Each line has its comment stripped and is tokenized.
2. The first token selects a directive handler, or, inside a block, the
   body handler for that block kind.
3. ``endblock`` encodes the block and appends it to the output sequence.
4. At end of input the file header and all blocks are concatenated.

The first error aborts the run; nothing is written.

Example Usage
-------------
>>> from sctools.assembler import assemble_string
>>> image = assemble_string('''
... layerblock
...     FN1 1
...     FN1 FN2 3
... endblock
... ''')
>>> image[:6]
b'SC\\x01\\x01\\x00\\x00'
"""

from sctools.assembler.assembler import Assembler, assemble, assemble_string
from sctools.assembler.context import CompilerContext
from sctools.assembler.lexer import LineScanner, strip_comment, tokenize

__all__ = [
    "Assembler",
    "assemble",
    "assemble_string",
    "CompilerContext",
    "LineScanner",
    "strip_comment",
    "tokenize",
]
