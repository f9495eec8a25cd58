"""
Settings File Disassembler
==========================

Turns a binary settings file back into configuration text that the
assembler accepts. This is the inverse of the assembler's code
generation; re-assembling the output reproduces the input bytes.

Output is written line by line to a text sink as decoding proceeds, so a
problem in one block is reported as a ``# ERROR:`` comment at the point
where it was found, with everything decoded before it intact.

Failure Handling
----------------
- A buffer shorter than the 6-byte header or with a wrong signature
  raises ConfigFormatError before anything is written. A major version
  other than 1 or a non-zero reserved byte is reported, and decoding goes
  on.
- A block length of zero, or a block that runs past the end of the data,
  stops the walk: the next block boundary cannot be trusted.
- Anything wrong inside a block (size mismatch, unknown block kind,
  unknown macro command or key code) is reported and decoding resumes at
  the next block, whose position the length byte still gives.

Every reported problem marks the result as failed.

Usage:
    result = disassemble(Path("layout.bin").read_bytes())
    print(result.text)
    if not result.ok:
        print(f"{len(result.errors)} errors")

    # Stream into an open file instead
    with open("layout.sc", "w") as f:
        ConfigDisassembler(f).disassemble(data)
"""

from dataclasses import dataclass, field
from typing import Optional, TextIO
import io
import logging

from ..errors import ConfigFormatError
from ..records import (
    HEADER_SIZE,
    MACRO_RECORD_HEADER_SIZE,
    PAIR_SIZE,
    VERSION_MAJOR,
    BlockKind,
    FileHeader,
    Protocol,
    ScanSet,
    condition_size,
    flags_has_keyboard_id,
    flags_has_scanset,
    flags_kind,
    flags_select,
    macro_record_size,
    restores_meta,
    scanset_names,
    step_count,
)
from ..tokens import (
    GENERIC_MODIFIER_NAMES,
    INVALID_NAME,
    PUSH_META_BIT,
    SIDED_MODIFIER_NAMES,
    ArgumentClass,
    argument_class,
    key_name_for,
    macro_command_name,
    modifier_names,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Result
# =============================================================================

@dataclass
class DisassemblyResult:
    """
    Outcome of disassembling one settings file.

    Attributes:
        text: The configuration text (empty when written to a caller's sink)
        ok: True if no problem was reported
        errors: Reported problems, in output order
    """
    text: str
    ok: bool
    errors: list[str] = field(default_factory=list)


# =============================================================================
# Modifier Decoding
# =============================================================================

def match_modifier_names(desired: int, matched: int) -> list[str]:
    """
    Spell a macro's desired/matched masks as ``macro`` line modifiers.

    A right-hand bit that is desired but not matched means the modifier
    was written side-agnostic, so both its bits print as the generic
    name, followed by ``-L...`` if the left hand was then excluded. Every
    other matched bit prints as a left/right name, prefixed with ``-``
    when the modifier must not be held.
    """
    names = []
    unhanded = desired & ~matched & 0xF0
    for i, generic in enumerate(GENERIC_MODIFIER_NAMES):
        mask = (1 << (i + 4)) | (1 << i)
        if unhanded & mask:
            names.append(generic)
            if matched & ~desired & (1 << i):
                names.append(f"-{SIDED_MODIFIER_NAMES[i]}")
            desired &= ~mask
            matched &= ~mask

    for bit, sided in enumerate(SIDED_MODIFIER_NAMES):
        mask = 1 << bit
        if matched & mask:
            names.append(sided if desired & mask else f"-{sided}")
    return names


# =============================================================================
# Disassembler
# =============================================================================

class ConfigDisassembler:
    """
    Streaming decoder for binary settings files.

    Attributes:
        out: Text sink receiving the configuration lines
        errors: Problems reported during the last disassemble() call
    """

    def __init__(self, out: TextIO):
        self.out = out
        self.errors: list[str] = []

    def _emit(self, line: str) -> None:
        self.out.write(line + "\n")

    def _error(self, message: str) -> None:
        self.errors.append(message)
        self._emit(f"# ERROR: {message}")
        logger.debug(f"Decode error: {message}")

    def _key(self, code: int) -> str:
        name = key_name_for(code)
        if name == INVALID_NAME:
            self._error(f"unknown key code 0x{code:02X}")
        return name

    # =========================================================================
    # File Level
    # =========================================================================

    def disassemble(self, data: bytes) -> bool:
        """
        Decode a complete settings file.

        Returns:
            True if no problem was reported

        Raises:
            ConfigFormatError: If the header is missing or not a settings file
        """
        self.errors = []
        try:
            header = FileHeader.from_bytes(data)
        except ValueError:
            raise ConfigFormatError(
                f"data too short for a settings file header ({len(data)} bytes)"
            )
        if not header.is_valid():
            raise ConfigFormatError(f"bad signature {header.signature!r}", offset=0)

        self._emit(f"# length: {len(data)}")
        self._emit(f"# signature: {chr(data[0])} {chr(data[1])}")
        self._emit(f"# version: {header.major} {header.minor}")
        if header.major != VERSION_MAJOR:
            self._error(f"unsupported version {header.major}.{header.minor}")
        if header.reserved:
            self._error(f"reserved header byte is 0x{header.reserved:02X}, expected 0")
        self._header_force(header)

        offset = HEADER_SIZE
        while offset < len(data):
            length = data[offset]
            if length == 0:
                self._error(f"block length is zero at offset {offset}")
                break
            if offset + length > len(data):
                self._error(
                    f"block at offset {offset} needs {length} bytes, "
                    f"only {len(data) - offset} left"
                )
                break
            logger.debug(f"Block at offset {offset}, {length} bytes")
            self._block(data[offset:offset + length])
            offset += length

        return not self.errors

    def _header_force(self, header: FileHeader) -> None:
        force = header.force
        if force.scanset:
            if force.scanset in {s.value for s in ScanSet}:
                self._emit(f"force {ScanSet(force.scanset).token}")
            else:
                self._error(f"invalid forced scan set {force.scanset}")
        if force.protocol:
            if force.protocol in {p.value for p in Protocol}:
                self._emit(f"force {Protocol(force.protocol).token}")
            else:
                self._error(f"invalid forced protocol {force.protocol}")

    # =========================================================================
    # Block Level
    # =========================================================================

    def _block(self, block: bytes) -> None:
        self._emit(f"# block length: {len(block)}")
        if len(block) < 2 or len(block) < 2 + condition_size(block[1]):
            self._error("block truncated")
            self._emit("endblock")
            return

        flags = block[1]
        pos = 2
        if flags_has_scanset(flags):
            scanset = block[pos]
            if scanset & ~0x0F:
                self._error(f"invalid scan set bits 0x{scanset:02X}")
            self._emit(f"ifset {' '.join(scanset_names(scanset)) or 'any'}")
            pos += 1
        else:
            self._emit("ifset any")

        if flags_has_keyboard_id(flags):
            keyboard_id = block[pos] | (block[pos + 1] << 8)
            self._emit(f"ifkeyboard {keyboard_id:04X}")
            pos += 2
        else:
            self._emit("ifkeyboard any")

        select = flags_select(flags)
        self._emit(f"ifselect {select}" if select else "ifselect any")

        body = block[pos:]
        kind = flags_kind(flags)
        if kind == BlockKind.LAYERDEF:
            self._layerblock(body)
        elif kind == BlockKind.REMAP:
            self._remapblock(body)
        elif kind == BlockKind.MACRO:
            self._macroblock(body)
        else:
            self._error(f"invalid block type {kind}")
        self._emit("endblock")

    def _layerblock(self, body: bytes) -> None:
        self._emit("layerblock")
        if len(body) < 1 or len(body) != 1 + PAIR_SIZE * body[0]:
            self._error("block size mismatch")
            return

        self._emit(f"# count: {body[0]}")
        for i in range(1, len(body), PAIR_SIZE):
            fn_combo, layer = body[i], body[i + 1]
            if not fn_combo:
                self._error("layer definition without FN keys")
            keys = [f"FN{bit + 1}" for bit in range(8) if fn_combo & (1 << bit)]
            self._emit("\t" + " ".join(keys + [str(layer)]))

    def _remapblock(self, body: bytes) -> None:
        self._emit("remapblock")
        if len(body) < 2 or len(body) != 2 + PAIR_SIZE * body[1]:
            self._error("block size mismatch")
            return

        self._emit(f"# count: {body[1]}")
        self._emit(f"layer {body[0]}")
        for i in range(2, len(body), PAIR_SIZE):
            self._emit(f"\t{self._key(body[i])} {self._key(body[i + 1])}")

    def _macroblock(self, body: bytes) -> None:
        self._emit("macroblock")
        if len(body) < 1:
            self._error("block size mismatch")
            return

        count = body[0]
        self._emit(f"# macro count: {count}")
        pos = 1
        for index in range(count):
            size = self._macro(body[pos:])
            if size is None:
                self._error(f"cannot decode macro #{index}")
                return
            pos += size

        if pos != len(body):
            self._error(f"block size mismatch: {len(body) - pos} bytes after last macro")

    # =========================================================================
    # Macro Level
    # =========================================================================

    def _macro(self, data: bytes) -> Optional[int]:
        """Decode one macro record; return its size, or None if unusable."""
        if len(data) < MACRO_RECORD_HEADER_SIZE:
            self._error("macro truncated")
            self._emit("endmacro")
            return None

        key, desired, matched, press, release = data[:MACRO_RECORD_HEADER_SIZE]
        parts = ["macro", self._key(key)] + match_modifier_names(desired, matched)
        self._emit(f"{' '.join(parts)} # {desired:02X} {matched:02X}")

        size = macro_record_size(press, release)
        if len(data) < size:
            self._error("macro size mismatch")
            self._emit("endmacro")
            return None

        pos = MACRO_RECORD_HEADER_SIZE
        for _ in range(step_count(press)):
            self._step(data[pos], data[pos + 1])
            pos += 2

        # An empty release phase with the restore bit clear still needs the
        # onbreak line to assemble to the same flags byte.
        if step_count(release) or not restores_meta(release):
            self._emit("onbreak" if restores_meta(release) else "onbreak norestoremeta")
        for _ in range(step_count(release)):
            self._step(data[pos], data[pos + 1])
            pos += 2

        self._emit("endmacro")
        return size

    def _step(self, command: int, value: int) -> None:
        arg_class = argument_class(command)
        if arg_class is None:
            self._error(f"unknown macro command 0x{command:02X}")
            return

        parts = []
        if command & PUSH_META_BIT:
            parts.append("PUSH_META")
        parts.append(macro_command_name(command & ~PUSH_META_BIT))

        if arg_class == ArgumentClass.KEY:
            parts.append(self._key(value))
        elif arg_class == ArgumentClass.MODIFIER:
            parts.extend(modifier_names(value))
        elif arg_class == ArgumentClass.DELAY:
            parts.append(str(value))
        self._emit("\t" + " ".join(parts))


# =============================================================================
# Convenience Functions
# =============================================================================

def disassemble(data: bytes, out: Optional[TextIO] = None) -> DisassemblyResult:
    """
    Disassemble a settings file image.

    Args:
        data: The binary settings file
        out: Text sink to stream into; output is collected and returned
            in result.text when omitted

    Returns:
        DisassemblyResult

    Raises:
        ConfigFormatError: If the data is not a settings file
    """
    buffer = io.StringIO() if out is None else None
    disasm = ConfigDisassembler(out if out is not None else buffer)
    ok = disasm.disassemble(data)
    text = buffer.getvalue() if buffer is not None else ""
    return DisassemblyResult(text=text, ok=ok, errors=list(disasm.errors))
