"""
Compiler Context
================

The state one assembler run threads through every command handler.

Condition settings (ifselect, ifset, ifkeyboard), the force flags and the
remap layer persist across blocks and across included files until a
directive changes them; a later block silently inherits whatever the
previous directives set. Configuration files rely on this, so it is kept.

The open block kind, the open macro and the working lists are reset each
time their owner is finalised.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Optional

from sctools.assembler.model import Document
from sctools.config import AssemblerConfig
from sctools.records import BlockKind, Conditions, ForceFlags


class MacroPhase(IntEnum):
    """Which step list macro step lines append to."""
    PRESS = 0
    RELEASE = 1


@dataclass
class MacroBuilder:
    """
    A macro whose ``macro`` line has been seen but not its ``endmacro``.

    Attributes:
        key: Trigger key code
        desired_meta: Modifier bits that must be held
        matched_meta: Modifier bits compared at all
        phase: Current step list
        restore_meta: Cleared by ``onbreak norestoremeta``
    """
    key: int
    desired_meta: int
    matched_meta: int
    phase: MacroPhase = MacroPhase.PRESS
    restore_meta: bool = True


@dataclass
class CompilerContext:
    """
    Mutable compilation state for one assembler run.

    Attributes:
        config: Include paths and verbosity
        force: Header force flags
        select: Current ifselect value (0 = any)
        scanset: Current ifset bitmask (0 = any)
        keyboard_id: Current ifkeyboard value (0 = any)
        layer: Current remap block layer
        block_kind: Kind of the open block, NONE between blocks
        macro: Open macro definition, if any
        document: Working lists for the open block and macro
        blocks: Encoded blocks in output order
        include_stack: Files currently being processed, outermost first
    """
    config: AssemblerConfig = field(default_factory=AssemblerConfig)
    force: ForceFlags = field(default_factory=ForceFlags)
    select: int = 0
    scanset: int = 0
    keyboard_id: int = 0
    layer: int = 0
    block_kind: BlockKind = BlockKind.NONE
    macro: Optional[MacroBuilder] = None
    document: Document = field(default_factory=Document)
    blocks: list[bytes] = field(default_factory=list)
    include_stack: list[Path] = field(default_factory=list)

    @property
    def conditions(self) -> Conditions:
        return Conditions(
            select=self.select,
            scanset=self.scanset,
            keyboard_id=self.keyboard_id,
        )

    @property
    def current_file(self) -> Optional[Path]:
        return self.include_stack[-1] if self.include_stack else None

    def in_block(self) -> bool:
        return self.block_kind != BlockKind.NONE

    def close_block(self) -> None:
        self.block_kind = BlockKind.NONE

    def release(self) -> None:
        """Drop every working list and finished block."""
        self.document.clear()
        self.blocks.clear()
        self.macro = None
        self.block_kind = BlockKind.NONE
        self.include_stack.clear()
