"""
Settings Code Generator
=======================

Serialises finished blocks to the binary settings format and assembles
the complete file image.

Size Checks
-----------
All limits are enforced here, before anything reaches the device:

- A block's length byte counts every byte of the block including
  itself, so a block may be at most 255 bytes. Appending a 256th byte
  raises BlockTooLargeError.
- Layer definition, remap and macro counts are single bytes.
- Macro phases are checked when the macro is finalised (see commands).

The length byte is written as a placeholder and back-patched once the
real length is known.
"""

import logging

from sctools.assembler.model import Block, Macro
from sctools.errors import BlockTooLargeError
from sctools.records import (
    MAX_BLOCK_LENGTH,
    MAX_ENTRY_COUNT,
    BlockKind,
    FileHeader,
    ForceFlags,
    block_flags,
    press_flags,
    release_flags,
)

logger = logging.getLogger(__name__)


class BlockWriter:
    """
    Byte buffer for one block that refuses to outgrow the length byte.

    Attributes:
        data: Bytes written so far, starting with the length placeholder
    """

    def __init__(self, kind: BlockKind):
        self.kind = kind
        self.data = bytearray([0])

    def append(self, value: int) -> None:
        if len(self.data) >= MAX_BLOCK_LENGTH:
            raise BlockTooLargeError(
                f"{self.kind.directive} needs more than {MAX_BLOCK_LENGTH} bytes",
                hint="split the entries over several blocks",
            )
        self.data.append(value & 0xFF)

    def extend(self, values: bytes | list[int]) -> None:
        for value in values:
            self.append(value)

    def finish(self) -> bytes:
        """Back-patch the length byte and return the block."""
        length = len(self.data)
        if not 0 < length <= MAX_BLOCK_LENGTH:
            raise BlockTooLargeError(f"invalid block length {length}")
        self.data[0] = length
        return bytes(self.data)


def _check_count(kind: BlockKind, what: str, count: int) -> None:
    if count > MAX_ENTRY_COUNT:
        raise BlockTooLargeError(
            f"{kind.directive} has {count} {what}, at most {MAX_ENTRY_COUNT} fit"
        )


def encode_macro(writer: BlockWriter, macro: Macro) -> None:
    """Append one macro record."""
    writer.append(macro.key)
    writer.append(macro.desired_meta)
    writer.append(macro.matched_meta)
    writer.append(press_flags(len(macro.press)))
    writer.append(release_flags(len(macro.release), macro.restore_meta))
    for step in macro.press + macro.release:
        writer.append(step.command_byte)
        writer.append(step.value)


def encode_block(block: Block) -> bytes:
    """
    Encode a block: header, conditions, kind-specific body.

    Raises:
        BlockTooLargeError: If the block does not fit 255 bytes or a count
            does not fit its byte
    """
    writer = BlockWriter(block.kind)
    writer.append(block_flags(block.kind, block.conditions))
    writer.extend(block.conditions.to_bytes())

    if block.kind == BlockKind.LAYERDEF:
        _check_count(block.kind, "layer definitions", len(block.layerdefs))
        writer.append(len(block.layerdefs))
        for entry in block.layerdefs:
            writer.append(entry.fn_combo)
            writer.append(entry.layer)

    elif block.kind == BlockKind.REMAP:
        _check_count(block.kind, "remaps", len(block.remaps))
        writer.append(block.layer)
        writer.append(len(block.remaps))
        for entry in block.remaps:
            writer.append(entry.from_key)
            writer.append(entry.to_key)

    elif block.kind == BlockKind.MACRO:
        _check_count(block.kind, "macros", len(block.macros))
        writer.append(len(block.macros))
        for macro in block.macros:
            encode_macro(writer, macro)

    else:
        raise ValueError(f"Cannot encode block kind {block.kind!r}")

    data = writer.finish()
    logger.debug(
        f"Encoded {block.kind.directive}: {block.entry_count} entries, {len(data)} bytes"
    )
    return data


def build_image(force: ForceFlags, blocks: list[bytes]) -> bytes:
    """Concatenate the file header and the encoded blocks."""
    image = bytearray(FileHeader(force=force).to_bytes())
    for block in blocks:
        image += block
    return bytes(image)
