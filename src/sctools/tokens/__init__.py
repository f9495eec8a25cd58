"""
sctools Token Tables
====================

Static name <-> value tables shared by the assembler (which encodes names)
and the disassembler (which decodes values), so both directions spell
every key, modifier and macro command the same way.

Modules:
    keys: key codes, modifier masks, FN layer keys
    macros: macro step commands and their argument classes

Usage:
    from sctools.tokens import key_code_for, key_name_for

    key_code_for("CAPS_LOCK")    # 0x39
    key_name_for(0x39)           # "CAPS_LOCK"
"""

from sctools.tokens.keys import (
    INVALID_NAME,
    KEY_TABLE,
    MODIFIER_TABLE,
    GENERIC_MODIFIER_NAMES,
    SIDED_MODIFIER_NAMES,
    key_code_for,
    key_name_for,
    modifier_for,
    modifier_names,
    is_side_specific,
    function_key_number,
)
from sctools.tokens.macros import (
    MacroCommand,
    ArgumentClass,
    PUSH_META_BIT,
    MACRO_COMMAND_TABLE,
    macro_command_for,
    macro_command_name,
    argument_class,
)

__all__ = [
    # Keys and modifiers
    "INVALID_NAME",
    "KEY_TABLE",
    "MODIFIER_TABLE",
    "GENERIC_MODIFIER_NAMES",
    "SIDED_MODIFIER_NAMES",
    "key_code_for",
    "key_name_for",
    "modifier_for",
    "modifier_names",
    "is_side_specific",
    "function_key_number",
    # Macro commands
    "MacroCommand",
    "ArgumentClass",
    "PUSH_META_BIT",
    "MACRO_COMMAND_TABLE",
    "macro_command_for",
    "macro_command_name",
    "argument_class",
]
