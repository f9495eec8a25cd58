"""
sctools Error Hierarchy
=======================

This module defines the exception hierarchy for the whole toolkit. All
exceptions inherit from SCError, allowing callers to catch every
toolkit-related error with a single except clause.

Exception Hierarchy
-------------------
SCError (base)
├── AssemblerError (text -> binary)
│   ├── SourceFileError - source file missing or unreadable
│   ├── IncludeError - include target missing or include cycle
│   ├── InvalidCommandError - directive not valid here
│   ├── InvalidArgumentsError - malformed or out-of-range argument
│   ├── BlockTooLargeError - block does not fit its length byte
│   ├── MacroTooLongError - macro phase has more than 63 steps
│   └── OutputWriteError - binary output cannot be written
└── DisassemblerError (binary -> text)
    └── ConfigFormatError - header or block structure is unusable

Every assembler error carries an ErrorCategory. The categories mirror the
numeric error classes the command-line assembler has always reported, so
scripts can keep matching on the category message.

Error messages follow this format:
    filename:line: error: description
    source_line_text
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class SCError(Exception):
    """
    Base exception for all sctools errors.

        try:
            assemble(["layout.sc"], "layout.bin")
        except SCError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A line in a configuration source file.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
    """
    filename: str
    line: int

    def __str__(self) -> str:
        return f"{self.filename}:{self.line}"


class ErrorCategory(IntEnum):
    """Assembler error classes, numbered as the command-line assembler reports them."""
    UNKNOWN = 0
    FILE_NOT_FOUND = 1
    INVALID_COMMAND = 2
    INVALID_ARGUMENTS = 3
    BLOCK_TOO_LARGE = 4
    MACRO_TOO_LONG = 5
    FILE_WRITE = 6

    @property
    def message(self) -> str:
        return _CATEGORY_MESSAGES[self]


_CATEGORY_MESSAGES = {
    ErrorCategory.UNKNOWN: "unknown error",
    ErrorCategory.FILE_NOT_FOUND: "file not found",
    ErrorCategory.INVALID_COMMAND: "invalid command",
    ErrorCategory.INVALID_ARGUMENTS: "invalid arguments",
    ErrorCategory.BLOCK_TOO_LARGE: "block too large",
    ErrorCategory.MACRO_TOO_LONG: "macro too long",
    ErrorCategory.FILE_WRITE: "unable to open file for writing",
}


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(SCError):
    """
    Base exception for all assembler errors.

    Attributes:
        message: The error description
        category: ErrorCategory classifying the failure
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The source text at the error location (optional)
    """

    category = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def with_location(
        self, location: SourceLocation, source_line: Optional[str] = None
    ) -> "AssemblerError":
        """
        Attach a source location to an error raised below the line level.

        Command handlers raise errors without knowing which file or line
        they are processing; the line loop fills that in on the way out.
        An error that already has a location (from an included file) keeps
        it.
        """
        if self.location is None:
            self.location = location
            self.source_line = source_line
            self.args = (self._format_message(),)
        return self

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            layout.sc:12: error: invalid arguments: unknown key 'CAPSLOK'
                CAPSLOK ESC
            hint: key names are case-sensitive
        """
        text = f"{self.category.message}: {self.message}"
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {text}")
        else:
            parts.append(f"error: {text}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)

    def __str__(self) -> str:
        return self._format_message()


class SourceFileError(AssemblerError):
    """Source file not found or unreadable."""

    category = ErrorCategory.FILE_NOT_FOUND

    def __init__(self, filename: str, reason: str = "not found"):
        self.filename = filename
        self.reason = reason
        super().__init__(f"cannot read '{filename}': {reason}")


class IncludeError(AssemblerError):
    """
    Error including a file.

    Raised when:
    - Include file not found in the including file's directory or any
      configured include path
    - Circular include detected
    """

    category = ErrorCategory.FILE_NOT_FOUND

    def __init__(
        self,
        filename: str,
        reason: str,
        location: Optional[SourceLocation] = None,
        search_paths: Optional[list[str]] = None,
    ):
        self.included_filename = filename
        self.reason = reason
        self.search_paths = search_paths or []

        hint = None
        if self.search_paths:
            hint = f"searched in: {', '.join(self.search_paths)}"

        super().__init__(
            f"cannot include '{filename}': {reason}",
            location=location,
            hint=hint,
        )


class InvalidCommandError(AssemblerError):
    """
    Directive is unknown or not valid in the current state.

    Examples:
        - unknown directive name with no block open
        - 'remapblock' while another block is open
        - 'onbreak' or 'endmacro' with no macro open
    """

    category = ErrorCategory.INVALID_COMMAND


class InvalidArgumentsError(AssemblerError):
    """
    Directive or block line has malformed arguments.

    Examples:
        - unknown key, modifier or macro command name
        - numeric argument out of range (ifselect 9, layer 300)
        - missing argument
    """

    category = ErrorCategory.INVALID_ARGUMENTS


class BlockTooLargeError(AssemblerError):
    """
    A block does not fit the binary format.

    The length byte limits a block to 255 bytes including itself, and the
    entry counts are stored in a single byte.
    """

    category = ErrorCategory.BLOCK_TOO_LARGE


class MacroTooLongError(AssemblerError):
    """A macro press or release phase exceeds the 6-bit step count (63)."""

    category = ErrorCategory.MACRO_TOO_LONG


class OutputWriteError(AssemblerError):
    """The binary settings file cannot be written."""

    category = ErrorCategory.FILE_WRITE

    def __init__(self, filename: str, reason: str):
        self.filename = filename
        self.reason = reason
        super().__init__(f"'{filename}': {reason}")


# =============================================================================
# Disassembler Exceptions
# =============================================================================

class DisassemblerError(SCError):
    """Base exception for disassembler errors."""
    pass


class ConfigFormatError(DisassemblerError):
    """
    Binary settings data cannot be walked.

    Raised when:
    - Data is shorter than the 6-byte header
    - Signature is not "SC"
    - A block length byte is zero or runs past the end of the data
    """

    def __init__(self, message: str, offset: Optional[int] = None):
        self.offset = offset
        if offset is not None:
            message = f"{message} (offset {offset})"
        super().__init__(message)
