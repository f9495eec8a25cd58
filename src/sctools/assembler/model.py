"""
Document Model
==============

In-memory representation of a parsed configuration: the entries that
make up layer-definition, remap and macro blocks, and the working lists
that collect them while a block is open.

The model carries no encoding logic; codegen turns it into bytes.
"""

from dataclasses import dataclass, field

from sctools.records import BlockKind, Conditions


@dataclass(frozen=True)
class LayerDef:
    """
    One layer definition: holding the FN keys in fn_combo selects layer.

    Attributes:
        fn_combo: Bitmask of FN keys, bit 0 = FN1 .. bit 7 = FN8
        layer: Layer id 1-255
    """
    fn_combo: int
    layer: int


@dataclass(frozen=True)
class Remap:
    """One key remap within a layer."""
    from_key: int
    to_key: int


@dataclass(frozen=True)
class MacroStep:
    """
    One macro step.

    Attributes:
        command: MacroCommand code without the PUSH_META bit
        value: Argument byte (key code, modifier mask, delay or 0)
        push_meta: Save modifier state before executing the command
    """
    command: int
    value: int = 0
    push_meta: bool = False

    @property
    def command_byte(self) -> int:
        return (self.command & 0x7F) | (0x80 if self.push_meta else 0)


@dataclass
class Macro:
    """
    A finished macro definition.

    Attributes:
        key: Trigger key code
        desired_meta: Modifier bits that must be held
        matched_meta: Modifier bits that are compared at all
        press: Steps run when the trigger is pressed
        release: Steps run when the trigger is released
        restore_meta: Restore modifier state after the release phase
    """
    key: int
    desired_meta: int
    matched_meta: int
    press: list[MacroStep] = field(default_factory=list)
    release: list[MacroStep] = field(default_factory=list)
    restore_meta: bool = True


@dataclass
class Block:
    """
    A finished block, before encoding.

    Attributes:
        kind: Block variant
        conditions: Condition scope captured when the block was closed
        layer: Remap block layer id (unused by other kinds)
        layerdefs: Layer definition entries (LAYERDEF)
        remaps: Remap entries (REMAP)
        macros: Macros (MACRO)
    """
    kind: BlockKind
    conditions: Conditions
    layer: int = 0
    layerdefs: list[LayerDef] = field(default_factory=list)
    remaps: list[Remap] = field(default_factory=list)
    macros: list[Macro] = field(default_factory=list)

    @property
    def entry_count(self) -> int:
        if self.kind == BlockKind.LAYERDEF:
            return len(self.layerdefs)
        if self.kind == BlockKind.REMAP:
            return len(self.remaps)
        return len(self.macros)


@dataclass
class Document:
    """
    Working lists for the block and macro currently being defined.

    Each list is cleared as soon as its owner is finalised, so no list
    ever spans two blocks. Clearing an empty list is harmless.
    """
    layerdefs: list[LayerDef] = field(default_factory=list)
    remaps: list[Remap] = field(default_factory=list)
    press_steps: list[MacroStep] = field(default_factory=list)
    release_steps: list[MacroStep] = field(default_factory=list)
    macros: list[Macro] = field(default_factory=list)

    def add_layerdef(self, entry: LayerDef) -> None:
        self.layerdefs.append(entry)

    def add_remap(self, entry: Remap) -> None:
        self.remaps.append(entry)

    def add_step(self, step: MacroStep, release: bool) -> None:
        if release:
            self.release_steps.append(step)
        else:
            self.press_steps.append(step)

    def add_macro(self, macro: Macro) -> None:
        self.macros.append(macro)

    def clear_layerdefs(self) -> None:
        self.layerdefs.clear()

    def clear_remaps(self) -> None:
        self.remaps.clear()

    def clear_steps(self) -> None:
        self.press_steps.clear()
        self.release_steps.clear()

    def clear_macros(self) -> None:
        self.macros.clear()

    def clear(self) -> None:
        self.clear_layerdefs()
        self.clear_remaps()
        self.clear_steps()
        self.clear_macros()
