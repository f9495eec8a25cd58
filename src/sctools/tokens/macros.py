"""
Macro Command Table
===================

Mnemonics for the commands that make up a macro's press and release
phases. Each macro step is two bytes on the wire:

    [command | PUSH_META][value]

PUSH_META (0x80) can be or'ed with any command; the device saves the
current modifier state before executing the command so that a later
POP_META can restore it. The meaning of the value byte depends on the
command's argument class.

| Command      | Code | Argument |
|--------------|------|----------|
| NOP          | 0    | none     |
| PRESS        | 1    | key      |
| MAKE         | 2    | key      |
| BREAK        | 3    | key      |
| ASSIGN_META  | 4    | modifier |
| SET_META     | 5    | modifier |
| CLEAR_META   | 6    | modifier |
| TOGGLE_META  | 7    | modifier |
| POP_META     | 8    | none     |
| POP_ALL_META | 9    | none     |
| DELAY        | 10   | delay ms |
| CLEAR_ALL    | 11   | none     |
| BOOT         | 12   | none     |
"""

from enum import Enum, IntEnum, auto
from typing import Optional

from sctools.tokens.keys import INVALID_NAME


class MacroCommand(IntEnum):
    """Macro step command codes."""
    NOP = 0
    PRESS = 1
    MAKE = 2
    BREAK = 3
    ASSIGN_META = 4
    SET_META = 5
    CLEAR_META = 6
    TOGGLE_META = 7
    POP_META = 8
    POP_ALL_META = 9
    DELAY_MS = 10
    CLEAR_ALL = 11
    BOOT = 12
    PUSH_META = 0x80


#: Or'ed into a command byte; not a command of its own.
PUSH_META_BIT = int(MacroCommand.PUSH_META)


class ArgumentClass(Enum):
    """How a macro step's value byte is interpreted."""
    NONE = auto()
    KEY = auto()
    MODIFIER = auto()
    DELAY = auto()

    def __str__(self) -> str:
        return self.name.lower()


MACRO_COMMAND_TABLE: tuple[tuple[str, MacroCommand], ...] = (
    ("NOP", MacroCommand.NOP),
    ("PRESS", MacroCommand.PRESS),
    ("MAKE", MacroCommand.MAKE),
    ("BREAK", MacroCommand.BREAK),
    ("ASSIGN_META", MacroCommand.ASSIGN_META),
    ("SET_META", MacroCommand.SET_META),
    ("CLEAR_META", MacroCommand.CLEAR_META),
    ("TOGGLE_META", MacroCommand.TOGGLE_META),
    ("POP_META", MacroCommand.POP_META),
    ("POP_ALL_META", MacroCommand.POP_ALL_META),
    ("DELAY", MacroCommand.DELAY_MS),
    ("CLEAR_ALL", MacroCommand.CLEAR_ALL),
    ("BOOT", MacroCommand.BOOT),
    ("PUSH_META", MacroCommand.PUSH_META),
)

_ARGUMENT_CLASSES = {
    MacroCommand.NOP: ArgumentClass.NONE,
    MacroCommand.PRESS: ArgumentClass.KEY,
    MacroCommand.MAKE: ArgumentClass.KEY,
    MacroCommand.BREAK: ArgumentClass.KEY,
    MacroCommand.ASSIGN_META: ArgumentClass.MODIFIER,
    MacroCommand.SET_META: ArgumentClass.MODIFIER,
    MacroCommand.CLEAR_META: ArgumentClass.MODIFIER,
    MacroCommand.TOGGLE_META: ArgumentClass.MODIFIER,
    MacroCommand.POP_META: ArgumentClass.NONE,
    MacroCommand.POP_ALL_META: ArgumentClass.NONE,
    MacroCommand.DELAY_MS: ArgumentClass.DELAY,
    MacroCommand.CLEAR_ALL: ArgumentClass.NONE,
    MacroCommand.BOOT: ArgumentClass.NONE,
}


def macro_command_for(name: Optional[str]) -> Optional[MacroCommand]:
    """Look up a macro command by mnemonic (case-sensitive)."""
    if not name:
        return None
    for token, command in MACRO_COMMAND_TABLE:
        if token == name:
            return command
    return None


def macro_command_name(code: int) -> str:
    """Return the mnemonic for a command code, or INVALID_NAME."""
    for token, command in MACRO_COMMAND_TABLE:
        if command == code:
            return token
    return INVALID_NAME


def argument_class(code: int) -> Optional[ArgumentClass]:
    """
    Return the argument class of a command code.

    The PUSH_META bit is ignored. Returns None for codes that are not
    commands.
    """
    code &= ~PUSH_META_BIT
    for command, arg_class in _ARGUMENT_CLASSES.items():
        if command == code:
            return arg_class
    return None
