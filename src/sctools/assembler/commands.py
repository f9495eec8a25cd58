"""
Directive Handlers
==================

Line-level processing for configuration text. Each line is dispatched in
two steps:

1. The first token is looked up in DIRECTIVES. On a match the token is
   consumed and the handler parses the rest of the line.
2. Otherwise the line is a block body line. The handler is chosen from
   BODY_HANDLERS by the kind of the open block, and it sees the whole
   line including the first token. With no block open the line is an
   invalid command.

This lets block bodies go without a per-line keyword:

    remapblock
    layer 1
        CAPS_LOCK LCTRL      # remap line
    endblock

Handlers take the CompilerContext and a LineScanner positioned after the
directive name, and raise AssemblerError subclasses on failure. Source
locations are attached by process_file.

Directives
----------
| Directive   | Arguments                        |
|-------------|----------------------------------|
| force       | set name, xt, at, any or none    |
| include     | path                             |
| ifselect    | any or 1-7                       |
| ifset       | any or set names                 |
| ifkeyboard  | any or hex id                    |
| layerblock  |                                  |
| remapblock  |                                  |
| macroblock  |                                  |
| layer       | 0-255                            |
| macro       | key [[-]modifier ...]            |
| onbreak     | [norestoremeta]                  |
| endmacro    |                                  |
| endblock    |                                  |
"""

from pathlib import Path
from typing import Callable, Iterable, Optional
import logging
import string

from sctools.assembler.codegen import encode_block
from sctools.assembler.context import CompilerContext, MacroBuilder, MacroPhase
from sctools.assembler.lexer import LineScanner, strip_comment
from sctools.assembler.model import Block, LayerDef, Macro, MacroStep, Remap
from sctools.errors import (
    AssemblerError,
    IncludeError,
    InvalidArgumentsError,
    InvalidCommandError,
    MacroTooLongError,
    SourceFileError,
    SourceLocation,
)
from sctools.records import (
    MAX_MACRO_STEPS,
    BlockKind,
    ForceFlags,
    protocol_for,
    scanset_for,
)
from sctools.tokens import (
    PUSH_META_BIT,
    ArgumentClass,
    MacroCommand,
    argument_class,
    function_key_number,
    is_side_specific,
    key_code_for,
    macro_command_for,
    modifier_for,
)

logger = logging.getLogger(__name__)

Handler = Callable[[CompilerContext, LineScanner], None]

ANY = "any"
NONE = "none"
NO_RESTORE_META = "norestoremeta"


# =============================================================================
# Argument Parsing Helpers
# =============================================================================

def _require(args: LineScanner, what: str) -> str:
    token = args.next()
    if not token:
        raise InvalidArgumentsError(f"missing {what}")
    return token


def _expect_end(args: LineScanner) -> None:
    if not args.at_end():
        raise InvalidArgumentsError(f"unexpected argument '{args.peek()}'")


def parse_int(token: str, minval: int, maxval: int, what: str) -> int:
    """Parse a decimal argument in [minval, maxval]."""
    if not (token.isascii() and token.isdecimal()):
        raise InvalidArgumentsError(f"{what} must be a number, got '{token}'")
    value = int(token)
    if not minval <= value <= maxval:
        raise InvalidArgumentsError(
            f"{what} {value} out of range ({minval}-{maxval})"
        )
    return value


def parse_keyboard_id(token: str) -> int:
    """
    Parse a hexadecimal keyboard id.

    0 is reserved for "any" and 0xFFFF is not a valid id. An optional
    0x prefix is allowed; signs and digit separators are not.
    """
    digits = token[2:] if token[:2] in ("0x", "0X") else token
    if not digits or any(c not in string.hexdigits for c in digits):
        raise InvalidArgumentsError(f"keyboard id must be hexadecimal, got '{token}'")
    value = int(digits, 16)
    if not 0 < value < 0xFFFF:
        raise InvalidArgumentsError(f"keyboard id {token} out of range (0001-FFFE)")
    return value


def parse_key(token: Optional[str]) -> int:
    if not token:
        raise InvalidArgumentsError("missing key name")
    code = key_code_for(token)
    if code is None:
        raise InvalidArgumentsError(
            f"unknown key '{token}'", hint="key names are case-sensitive"
        )
    return code


def parse_modifier(token: str) -> int:
    mask = modifier_for(token)
    if mask is None:
        raise InvalidArgumentsError(f"unknown modifier '{token}'")
    return mask


def parse_meta_match(tokens: list[str]) -> tuple[int, int]:
    """
    Parse the modifier list of a ``macro`` line.

    Returns (desired_meta, matched_meta). A bare side-agnostic name such
    as CTRL requires either hand: both desired bits are set but only the
    left bit is matched. A bare side-specific name requires that hand. A
    ``-`` prefix requires the modifier not to be held, on exactly the
    hands it names.
    """
    desired = 0
    matched = 0
    for token in tokens:
        inverted = token.startswith("-")
        mask = parse_modifier(token[1:] if inverted else token)
        if inverted:
            desired &= ~mask
            matched |= mask
        else:
            desired |= mask
            matched |= mask if is_side_specific(mask) else (mask & 0x0F)
    return desired & 0xFF, matched & 0xFF


def parse_macro_step(args: LineScanner) -> MacroStep:
    """Parse ``[PUSH_META] COMMAND [argument]``."""
    name = _require(args, "macro command")
    command = macro_command_for(name)
    if command is None:
        raise InvalidArgumentsError(f"unknown macro command '{name}'")

    push_meta = False
    if command == MacroCommand.PUSH_META:
        push_meta = True
        name = _require(args, "command after PUSH_META")
        command = macro_command_for(name)
        if command is None or command == MacroCommand.PUSH_META:
            raise InvalidArgumentsError(f"invalid command after PUSH_META: '{name}'")

    arg_class = argument_class(command)
    if arg_class == ArgumentClass.KEY:
        value = parse_key(args.next())
    elif arg_class == ArgumentClass.MODIFIER:
        value = 0
        for token in args:
            value |= parse_modifier(token)
    elif arg_class == ArgumentClass.DELAY:
        value = parse_int(_require(args, "delay"), 0, 255, "delay")
    else:
        value = 0
    _expect_end(args)

    return MacroStep(command=int(command) & ~PUSH_META_BIT, value=value, push_meta=push_meta)


# =============================================================================
# Directive Handlers
# =============================================================================

def cmd_force(ctx: CompilerContext, args: LineScanner) -> None:
    token = _require(args, "scan set or protocol")
    scanset = scanset_for(token)
    protocol = protocol_for(token)
    if scanset is not None:
        ctx.force = ctx.force.with_scanset(int(scanset))
    elif protocol is not None:
        ctx.force = ctx.force.with_protocol(int(protocol))
    elif token == ANY:
        ctx.force = ctx.force.with_scanset(0)
    elif token == NONE:
        ctx.force = ForceFlags()
    else:
        raise InvalidArgumentsError(f"unknown scan set or protocol '{token}'")
    _expect_end(args)


def cmd_include(ctx: CompilerContext, args: LineScanner) -> None:
    name = _require(args, "include path")
    _expect_end(args)
    process_file(ctx, resolve_include(ctx, name))


def cmd_select(ctx: CompilerContext, args: LineScanner) -> None:
    token = _require(args, "select value")
    ctx.select = 0 if token == ANY else parse_int(token, 1, 7, "select")
    _expect_end(args)


def cmd_scanset(ctx: CompilerContext, args: LineScanner) -> None:
    tokens = args.remaining()
    if not tokens:
        raise InvalidArgumentsError("missing scan set")
    value = 0
    for token in tokens:
        if token == ANY:
            value = 0
            continue
        scanset = scanset_for(token)
        if scanset is None:
            raise InvalidArgumentsError(f"unknown scan set '{token}'")
        value |= scanset.mask
    ctx.scanset = value


def cmd_keyboard_id(ctx: CompilerContext, args: LineScanner) -> None:
    token = _require(args, "keyboard id")
    ctx.keyboard_id = 0 if token == ANY else parse_keyboard_id(token)
    _expect_end(args)


def cmd_layer(ctx: CompilerContext, args: LineScanner) -> None:
    ctx.layer = parse_int(_require(args, "layer"), 0, 255, "layer")
    _expect_end(args)


def _open_block(ctx: CompilerContext, kind: BlockKind) -> None:
    if ctx.in_block():
        raise InvalidCommandError(
            f"'{kind.directive}' inside an open {ctx.block_kind.directive}",
            hint="close the previous block with 'endblock'",
        )
    ctx.block_kind = kind


def cmd_layerblock(ctx: CompilerContext, args: LineScanner) -> None:
    _open_block(ctx, BlockKind.LAYERDEF)


def cmd_remapblock(ctx: CompilerContext, args: LineScanner) -> None:
    _open_block(ctx, BlockKind.REMAP)


def cmd_macroblock(ctx: CompilerContext, args: LineScanner) -> None:
    _open_block(ctx, BlockKind.MACRO)


def cmd_macro(ctx: CompilerContext, args: LineScanner) -> None:
    if ctx.block_kind != BlockKind.MACRO:
        raise InvalidCommandError("'macro' outside a macroblock")
    if ctx.macro is not None:
        raise InvalidCommandError(
            "'macro' inside an open macro definition", hint="missing 'endmacro'"
        )
    key = parse_key(args.next())
    desired, matched = parse_meta_match(args.remaining())
    ctx.macro = MacroBuilder(key=key, desired_meta=desired, matched_meta=matched)


def cmd_onbreak(ctx: CompilerContext, args: LineScanner) -> None:
    if ctx.macro is None or ctx.macro.phase != MacroPhase.PRESS:
        raise InvalidCommandError("'onbreak' without an open macro press phase")
    token = args.next()
    if token is None:
        restore = True
    elif token == NO_RESTORE_META:
        restore = False
    else:
        raise InvalidCommandError(f"unknown onbreak option '{token}'")
    _expect_end(args)
    ctx.macro.phase = MacroPhase.RELEASE
    ctx.macro.restore_meta = restore


def cmd_endmacro(ctx: CompilerContext, args: LineScanner) -> None:
    if ctx.macro is None:
        raise InvalidCommandError("'endmacro' without an open macro")

    doc = ctx.document
    for phase, steps in (("press", doc.press_steps), ("release", doc.release_steps)):
        if len(steps) > MAX_MACRO_STEPS:
            raise MacroTooLongError(
                f"{phase} phase has {len(steps)} steps, at most {MAX_MACRO_STEPS} allowed"
            )

    builder = ctx.macro
    macro = Macro(
        key=builder.key,
        desired_meta=builder.desired_meta,
        matched_meta=builder.matched_meta,
        press=list(doc.press_steps),
        release=list(doc.release_steps),
        restore_meta=builder.restore_meta,
    )
    doc.clear_steps()
    doc.add_macro(macro)
    ctx.macro = None
    logger.debug(
        f"Macro 0x{macro.key:02X}: {len(macro.press)} press, {len(macro.release)} release steps"
    )


def cmd_endblock(ctx: CompilerContext, args: LineScanner) -> None:
    if not ctx.in_block():
        raise InvalidCommandError("'endblock' without an open block")
    if ctx.macro is not None:
        raise InvalidCommandError(
            "'endblock' inside an open macro definition", hint="missing 'endmacro'"
        )

    doc = ctx.document
    block = Block(kind=ctx.block_kind, conditions=ctx.conditions)
    if block.kind == BlockKind.LAYERDEF:
        block.layerdefs = list(doc.layerdefs)
    elif block.kind == BlockKind.REMAP:
        block.layer = ctx.layer
        block.remaps = list(doc.remaps)
    else:
        block.macros = list(doc.macros)

    try:
        ctx.blocks.append(encode_block(block))
    finally:
        doc.clear_layerdefs()
        doc.clear_remaps()
        doc.clear_macros()
        ctx.close_block()


# =============================================================================
# Block Body Handlers
# =============================================================================

def body_layerdef(ctx: CompilerContext, args: LineScanner) -> None:
    """``FNn [FNn ...] layer``"""
    fn_combo = 0
    while True:
        token = args.peek()
        number = function_key_number(token) if token else None
        if number is None:
            break
        fn_combo |= 1 << (number - 1)
        args.advance()
    if not fn_combo:
        raise InvalidArgumentsError("layer definition needs at least one FN1-FN8 key")

    layer = parse_int(_require(args, "layer"), 1, 255, "layer")
    _expect_end(args)
    ctx.document.add_layerdef(LayerDef(fn_combo=fn_combo, layer=layer))


def body_remap(ctx: CompilerContext, args: LineScanner) -> None:
    """``from_key to_key``"""
    from_key = parse_key(args.next())
    to_key = parse_key(args.next())
    _expect_end(args)
    ctx.document.add_remap(Remap(from_key=from_key, to_key=to_key))


def body_macro_step(ctx: CompilerContext, args: LineScanner) -> None:
    """``[PUSH_META] COMMAND [argument]``"""
    if ctx.macro is None:
        raise InvalidCommandError(
            f"'{args.peek()}' outside a macro definition",
            hint="macro steps belong between 'macro' and 'endmacro'",
        )
    step = parse_macro_step(args)
    ctx.document.add_step(step, release=ctx.macro.phase == MacroPhase.RELEASE)


# =============================================================================
# Dispatch Tables
# =============================================================================

DIRECTIVES: dict[str, Handler] = {
    "force": cmd_force,
    "include": cmd_include,
    "ifselect": cmd_select,
    "ifset": cmd_scanset,
    "ifkeyboard": cmd_keyboard_id,
    "remapblock": cmd_remapblock,
    "layerblock": cmd_layerblock,
    "macroblock": cmd_macroblock,
    "layer": cmd_layer,
    "macro": cmd_macro,
    "onbreak": cmd_onbreak,
    "endmacro": cmd_endmacro,
    "endblock": cmd_endblock,
}

BODY_HANDLERS: dict[BlockKind, Handler] = {
    BlockKind.LAYERDEF: body_layerdef,
    BlockKind.REMAP: body_remap,
    BlockKind.MACRO: body_macro_step,
}


def find_handler(ctx: CompilerContext, name: str) -> tuple[Handler, bool]:
    """
    Choose the handler for a line starting with name.

    Returns (handler, is_directive). Directive handlers expect the name to
    be consumed; body handlers parse it themselves.
    """
    handler = DIRECTIVES.get(name)
    if handler is not None:
        return handler, True
    handler = BODY_HANDLERS.get(ctx.block_kind)
    if handler is not None:
        return handler, False
    raise InvalidCommandError(f"unknown directive '{name}'")


# =============================================================================
# Line and File Processing
# =============================================================================

def process_line(ctx: CompilerContext, line: str) -> None:
    """Process one line of configuration text."""
    args = LineScanner(strip_comment(line))
    name = args.peek()
    if name is None:
        return
    handler, is_directive = find_handler(ctx, name)
    if is_directive:
        args.advance()
    handler(ctx, args)


def resolve_include(ctx: CompilerContext, name: str) -> Path:
    """
    Find an include target.

    Relative names are tried next to the including file, then in each
    configured include path, then relative to the working directory.
    """
    path = Path(name)
    if path.is_absolute():
        candidates = [path]
    else:
        candidates = []
        if ctx.current_file is not None:
            candidates.append(ctx.current_file.parent / path)
        candidates.extend(directory / path for directory in ctx.config.include_paths)
        candidates.append(path)

    for candidate in candidates:
        if candidate.is_file():
            return candidate

    raise IncludeError(
        name,
        "file not found",
        search_paths=[str(c.parent) for c in candidates],
    )


def process_source(ctx: CompilerContext, lines: Iterable[str], filename: str) -> int:
    """
    Process configuration lines and return how many were read.

    Errors raised by a line get filename and the 1-indexed line number
    attached; errors from an included file keep the included file's
    location.
    """
    line_number = 0
    for line_number, line in enumerate(lines, start=1):
        try:
            process_line(ctx, line)
        except AssemblerError as e:
            location = SourceLocation(filename, line_number)
            raise e.with_location(location, line.rstrip("\r\n"))
    return line_number


def process_file(ctx: CompilerContext, path: str | Path) -> int:
    """
    Process a configuration file line by line.

    Returns:
        Number of lines read

    Raises:
        SourceFileError: If the file cannot be opened
        IncludeError: If the file is already being processed
        AssemblerError: On the first invalid line
    """
    path = Path(path)
    resolved = path.resolve()
    if any(entry.resolve() == resolved for entry in ctx.include_stack):
        raise IncludeError(str(path), "circular include")

    try:
        source = open(path, "r", encoding="utf-8")
    except FileNotFoundError:
        raise SourceFileError(str(path))
    except OSError as e:
        raise SourceFileError(str(path), e.strerror or str(e))

    logger.debug(f"Processing {path}")
    ctx.include_stack.append(path)
    try:
        with source:
            return process_source(ctx, source, str(path))
    finally:
        ctx.include_stack.pop()
