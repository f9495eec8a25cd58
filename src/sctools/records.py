"""
Settings File Record Definitions
================================

This module defines the wire-level structures of the binary settings file
and the bit-field accessors used to build and read them. The assembler
and disassembler both go through these helpers, never through inline
shifts, so the two directions cannot drift apart.

File Structure Overview
-----------------------
    offset 0: 'S' 'C'         signature
    offset 2: major, minor    version (1, 1)
    offset 4: force flags     bits 0-3 scan-set override, bits 4-7 protocol
    offset 5: reserved (0)
    offset 6..: blocks

Block Format
------------
    byte 0:   total length L, including this byte (1..255)
    byte 1:   flags
                bit 7    has keyboard id
                bit 6    has scanset
                bits 3-5 select (0 = any, 1-7)
                bits 0-2 block kind (0 layerdef, 1 remap, 2 macro)
    byte 2:   scanset bitmask            (present iff bit 6)
    next 2:   keyboard id, little-endian (present iff bit 7)
    body:     kind-specific

    layerdef: [count][count x (fn_combo, layer)]
    remap:    [layer][count][count x (from_key, to_key)]
    macro:    [macro_count][macro_count x macro record]

Macro Record
------------
    [key][desired_meta][matched_meta][press_flags][release_flags]
    [press_count x (command, value)][release_count x (command, value)]

    press_flags:   bits 0-5 press step count
    release_flags: bits 0-5 release step count, bit 7 restore modifiers
"""

from dataclasses import dataclass
from enum import IntEnum
import struct


# =============================================================================
# File Header
# =============================================================================

SIGNATURE = b"SC"
VERSION_MAJOR = 1
VERSION_MINOR = 1
HEADER_SIZE = 6

#: Largest value of a block's length byte.
MAX_BLOCK_LENGTH = 0xFF

#: Largest entry count stored in a single count byte.
MAX_ENTRY_COUNT = 0xFF

#: Largest step count in a macro phase (6-bit field).
MAX_MACRO_STEPS = 0x3F

MACRO_RECORD_HEADER_SIZE = 5
MACRO_STEP_SIZE = 2
PAIR_SIZE = 2

_STEP_COUNT_MASK = 0x3F
_RESTORE_META_BIT = 0x80


class BlockKind(IntEnum):
    """
    Block variant tags (flags bits 0-2).

    NONE is assembler state only; it is never written to a file.
    """
    LAYERDEF = 0
    REMAP = 1
    MACRO = 2
    NONE = 0xFF

    @property
    def directive(self) -> str:
        """The directive that opens a block of this kind."""
        return {
            BlockKind.LAYERDEF: "layerblock",
            BlockKind.REMAP: "remapblock",
            BlockKind.MACRO: "macroblock",
        }.get(self, "")


class ScanSet(IntEnum):
    """Scan code sets, numbered as stored in the force flags nibble."""
    SET1 = 1
    SET2 = 2
    SET3 = 3
    SET2EXT = 4

    @property
    def token(self) -> str:
        return self.name.lower()

    @property
    def mask(self) -> int:
        """Bit for this set in an ifset bitmask."""
        return 1 << (self - 1)


class Protocol(IntEnum):
    """Keyboard bus protocols, numbered as stored in the force flags nibble."""
    XT = 1
    AT = 2

    @property
    def token(self) -> str:
        return self.name.lower()


def scanset_for(token: str) -> ScanSet | None:
    for scanset in ScanSet:
        if scanset.token == token:
            return scanset
    return None


def protocol_for(token: str) -> Protocol | None:
    for protocol in Protocol:
        if protocol.token == token:
            return protocol
    return None


def scanset_names(mask: int) -> list[str]:
    """Spell an ifset bitmask as set names, lowest bit first."""
    return [s.token for s in ScanSet if mask & s.mask]


# =============================================================================
# Force Flags
# =============================================================================

@dataclass(frozen=True)
class ForceFlags:
    """
    Global scan-set and protocol override (header byte 4).

    Attributes:
        scanset: Forced scan set number, 0 for no override
        protocol: Forced protocol number, 0 for no override
    """
    scanset: int = 0
    protocol: int = 0

    def to_byte(self) -> int:
        return ((self.protocol & 0x0F) << 4) | (self.scanset & 0x0F)

    @classmethod
    def from_byte(cls, value: int) -> "ForceFlags":
        return cls(scanset=value & 0x0F, protocol=(value >> 4) & 0x0F)

    def with_scanset(self, scanset: int) -> "ForceFlags":
        return ForceFlags(scanset=scanset, protocol=self.protocol)

    def with_protocol(self, protocol: int) -> "ForceFlags":
        return ForceFlags(scanset=self.scanset, protocol=protocol)


@dataclass(frozen=True)
class FileHeader:
    """The 6-byte header at the start of every settings file."""
    signature: bytes = SIGNATURE
    major: int = VERSION_MAJOR
    minor: int = VERSION_MINOR
    force: ForceFlags = ForceFlags()
    reserved: int = 0

    def to_bytes(self) -> bytes:
        return self.signature + bytes(
            [self.major, self.minor, self.force.to_byte(), self.reserved]
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "FileHeader":
        if len(data) < HEADER_SIZE:
            raise ValueError(f"Header too short: {len(data)} bytes")
        return cls(
            signature=bytes(data[0:2]),
            major=data[2],
            minor=data[3],
            force=ForceFlags.from_byte(data[4]),
            reserved=data[5],
        )

    def is_valid(self) -> bool:
        return self.signature == SIGNATURE


# =============================================================================
# Block Conditions and Flags
# =============================================================================

@dataclass(frozen=True)
class Conditions:
    """
    The condition scope a block applies to.

    Attributes:
        select: ifselect value, 0 = any, 1-7
        scanset: ifset bitmask, 0 = any
        keyboard_id: ifkeyboard value, 0 = any
    """
    select: int = 0
    scanset: int = 0
    keyboard_id: int = 0

    @property
    def size(self) -> int:
        """Bytes the optional condition fields take after the flags byte."""
        return condition_size(block_flags(BlockKind.LAYERDEF, self))

    def to_bytes(self) -> bytes:
        """Encode the optional scanset and keyboard id fields."""
        data = bytearray()
        if self.scanset:
            data.append(self.scanset & 0xFF)
        if self.keyboard_id:
            data += struct.pack("<H", self.keyboard_id)
        return bytes(data)


_HAS_KEYBOARD_ID = 0x80
_HAS_SCANSET = 0x40
_SELECT_MASK = 0x38
_SELECT_SHIFT = 3
_KIND_MASK = 0x07


def block_flags(kind: BlockKind, conditions: Conditions) -> int:
    """Build a block flags byte."""
    flags = (int(kind) & _KIND_MASK) | ((conditions.select << _SELECT_SHIFT) & _SELECT_MASK)
    if conditions.scanset:
        flags |= _HAS_SCANSET
    if conditions.keyboard_id:
        flags |= _HAS_KEYBOARD_ID
    return flags


def flags_kind(flags: int) -> int:
    """Block kind field of a flags byte (may be an unknown value)."""
    return flags & _KIND_MASK


def flags_select(flags: int) -> int:
    return (flags & _SELECT_MASK) >> _SELECT_SHIFT


def flags_has_scanset(flags: int) -> bool:
    return bool(flags & _HAS_SCANSET)


def flags_has_keyboard_id(flags: int) -> bool:
    return bool(flags & _HAS_KEYBOARD_ID)


def condition_size(flags: int) -> int:
    """Bytes of optional condition fields implied by a flags byte."""
    return (1 if flags_has_scanset(flags) else 0) + (
        2 if flags_has_keyboard_id(flags) else 0
    )


# =============================================================================
# Macro Step Count Flags
# =============================================================================

def press_flags(count: int) -> int:
    """Build a macro press_flags byte."""
    if not 0 <= count <= MAX_MACRO_STEPS:
        raise ValueError(f"Press step count out of range: {count}")
    return count


def release_flags(count: int, restore_meta: bool) -> int:
    """Build a macro release_flags byte."""
    if not 0 <= count <= MAX_MACRO_STEPS:
        raise ValueError(f"Release step count out of range: {count}")
    return count | (_RESTORE_META_BIT if restore_meta else 0)


def step_count(flags: int) -> int:
    """Step count of a press_flags or release_flags byte."""
    return flags & _STEP_COUNT_MASK


def restores_meta(flags: int) -> bool:
    """Restore-modifiers bit of a release_flags byte."""
    return bool(flags & _RESTORE_META_BIT)


def macro_record_size(press: int, release: int) -> int:
    """Total bytes of a macro record given its two flags bytes."""
    return MACRO_RECORD_HEADER_SIZE + MACRO_STEP_SIZE * (
        step_count(press) + step_count(release)
    )
