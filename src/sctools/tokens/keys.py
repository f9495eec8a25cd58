"""
Key Code and Modifier Tables
============================

Name <-> value tables for the key codes and modifier ("meta") keys used by
the converter's settings format.

Key Codes
---------
Codes 0x00-0xA4 are the usages of the USB HID Keyboard/Keypad page (0x07).
The converter reuses the unassigned ranges above that for its own
functions: system and media keys, the FN1-FN8 layer keys, the SELECT_*
keys that switch the active ``ifselect`` setting, and the eight modifier
keys at 0xE0-0xE7 exactly as in HID.

The first name listed for a code is its canonical spelling, the one the
disassembler prints. Later entries for the same code are input aliases.

Modifier Masks
--------------
A modifier mask is one byte:

    bit:   7     6     5      4      3     2     1      0
         RGUI  RALT RSHIFT RCTRL   LGUI  LALT LSHIFT LCTRL

The side-agnostic names (CTRL, SHIFT, ALT, GUI) set both the left and the
right bit of the same modifier.

Reference
---------
- USB HID Usage Tables, section 10 (Keyboard/Keypad Page)
"""

from typing import Optional


#: Returned by key_name_for() for codes that have no name.
INVALID_NAME = "INVALID"


def _letters() -> list[tuple[str, int]]:
    return [(chr(ord("A") + i), 0x04 + i) for i in range(26)]


def _digits() -> list[tuple[str, int]]:
    # HID orders the number row 1..9 then 0
    return [(str((i + 1) % 10), 0x1E + i) for i in range(10)]


def _numbered(prefix: str, first: int, start: int, count: int) -> list[tuple[str, int]]:
    return [(f"{prefix}{start + i}", first + i) for i in range(count)]


# =============================================================================
# Key Code Table
# =============================================================================

KEY_TABLE: tuple[tuple[str, int], ...] = tuple(
    [
        ("UNASSIGNED", 0x00),
        ("OVERRUN_ERROR", 0x01),
        ("POST_FAIL", 0x02),
        ("ERROR_UNDEFINED", 0x03),
    ]
    + _letters()
    + _digits()
    + [
        ("ENTER", 0x28),
        ("ESC", 0x29),
        ("BACKSPACE", 0x2A),
        ("TAB", 0x2B),
        ("SPACE", 0x2C),
        ("MINUS", 0x2D),
        ("EQUAL", 0x2E),
        ("LEFT_BRACE", 0x2F),
        ("RIGHT_BRACE", 0x30),
        ("BACKSLASH", 0x31),
        ("EUROPE_1", 0x32),
        ("SEMICOLON", 0x33),
        ("QUOTE", 0x34),
        ("BACK_QUOTE", 0x35),
        ("COMMA", 0x36),
        ("PERIOD", 0x37),
        ("SLASH", 0x38),
        ("CAPS_LOCK", 0x39),
    ]
    + _numbered("F", 0x3A, 1, 12)
    + [
        ("PRINTSCREEN", 0x46),
        ("SCROLL_LOCK", 0x47),
        ("PAUSE", 0x48),
        ("INSERT", 0x49),
        ("HOME", 0x4A),
        ("PAGE_UP", 0x4B),
        ("DELETE", 0x4C),
        ("END", 0x4D),
        ("PAGE_DOWN", 0x4E),
        ("RIGHT", 0x4F),
        ("LEFT", 0x50),
        ("DOWN", 0x51),
        ("UP", 0x52),
        ("NUM_LOCK", 0x53),
        ("PAD_SLASH", 0x54),
        ("PAD_ASTERIX", 0x55),
        ("PAD_MINUS", 0x56),
        ("PAD_PLUS", 0x57),
        ("PAD_ENTER", 0x58),
    ]
    + _numbered("PAD_", 0x59, 1, 9)
    + [
        ("PAD_0", 0x62),
        ("PAD_PERIOD", 0x63),
        ("EUROPE_2", 0x64),
        ("APP", 0x65),
        ("POWER", 0x66),
        ("PAD_EQUALS", 0x67),
    ]
    + _numbered("F", 0x68, 13, 12)
    + [
        ("EXECUTE", 0x74),
        ("HELP", 0x75),
        ("MENU", 0x76),
        ("SELECT", 0x77),
        ("STOP", 0x78),
        ("AGAIN", 0x79),
        ("UNDO", 0x7A),
        ("CUT", 0x7B),
        ("COPY", 0x7C),
        ("PASTE", 0x7D),
        ("FIND", 0x7E),
        ("MUTE", 0x7F),
        ("VOLUME_UP", 0x80),
        ("VOLUME_DOWN", 0x81),
        ("LOCKING_CAPS_LOCK", 0x82),
        ("LOCKING_NUM_LOCK", 0x83),
        ("LOCKING_SCROLL_LOCK", 0x84),
        ("PAD_COMMA", 0x85),
        ("PAD_EQUALS_AS400", 0x86),
    ]
    + _numbered("INTERNATIONAL", 0x87, 1, 9)
    + _numbered("LANG", 0x90, 1, 9)
    + [
        ("ALT_ERASE", 0x99),
        ("SYSREQ", 0x9A),
        ("CANCEL", 0x9B),
        ("CLEAR", 0x9C),
        ("PRIOR", 0x9D),
        ("RETURN", 0x9E),
        ("SEPARATOR", 0x9F),
        ("OUT", 0xA0),
        ("OPER", 0xA1),
        ("CLEAR_AGAIN", 0xA2),
        ("CRSEL_PROPS", 0xA3),
        ("EXSEL", 0xA4),
        # System control
        ("SYSTEM_POWER", 0xA5),
        ("SYSTEM_SLEEP", 0xA6),
        ("SYSTEM_WAKE", 0xA7),
        # Consumer (media) keys
        ("MEDIA_NEXT_TRACK", 0xA8),
        ("MEDIA_PREV_TRACK", 0xA9),
        ("MEDIA_STOP", 0xAA),
        ("MEDIA_PLAY_PAUSE", 0xAB),
        ("MEDIA_MUTE", 0xAC),
        ("MEDIA_BASS_BOOST", 0xAD),
        ("MEDIA_LOUDNESS", 0xAE),
        ("MEDIA_VOLUME_UP", 0xAF),
        ("MEDIA_VOLUME_DOWN", 0xB0),
        ("MEDIA_BASS_UP", 0xB1),
        ("MEDIA_BASS_DOWN", 0xB2),
        ("MEDIA_TREBLE_UP", 0xB3),
        ("MEDIA_TREBLE_DOWN", 0xB4),
        ("MEDIA_MEDIA_SELECT", 0xB5),
        ("MEDIA_MAIL", 0xB6),
        ("MEDIA_CALCULATOR", 0xB7),
        ("MEDIA_MY_COMPUTER", 0xB8),
        ("MEDIA_WWW_SEARCH", 0xB9),
        ("MEDIA_WWW_HOME", 0xBA),
        ("MEDIA_WWW_BACK", 0xBB),
        ("MEDIA_WWW_FORWARD", 0xBC),
        ("MEDIA_WWW_STOP", 0xBD),
        ("MEDIA_WWW_REFRESH", 0xBE),
        ("MEDIA_WWW_FAVORITES", 0xBF),
        ("MEDIA_EJECT", 0xC0),
        ("MEDIA_SCREENSAVER", 0xC1),
        ("MEDIA_BROWSER", 0xC2),
        # Modifier keys, same codes as HID
        ("LCTRL", 0xE0),
        ("LSHIFT", 0xE1),
        ("LALT", 0xE2),
        ("LGUI", 0xE3),
        ("RCTRL", 0xE4),
        ("RSHIFT", 0xE5),
        ("RALT", 0xE6),
        ("RGUI", 0xE7),
    ]
    + _numbered("SELECT_", 0xE8, 0, 8)
    + [("SELECT_TOGGLE", 0xF0)]
    + _numbered("FN", 0xF1, 1, 8)
    + [
        # Input aliases
        ("CAPSLOCK", 0x39),
        ("ESCAPE", 0x29),
        ("NUMLOCK", 0x53),
        ("SCROLLLOCK", 0x47),
        ("PRINT_SCREEN", 0x46),
        ("PGUP", 0x4B),
        ("PGDN", 0x4E),
        ("EQUALS", 0x2E),
        ("BACKQUOTE", 0x35),
        ("NON_US_HASH", 0x32),
        ("NON_US_BACKSLASH", 0x64),
    ]
)


# =============================================================================
# Modifier Table
# =============================================================================

MODIFIER_TABLE: tuple[tuple[str, int], ...] = (
    ("LCTRL", 0x01),
    ("LSHIFT", 0x02),
    ("LALT", 0x04),
    ("LGUI", 0x08),
    ("RCTRL", 0x10),
    ("RSHIFT", 0x20),
    ("RALT", 0x40),
    ("RGUI", 0x80),
    ("CTRL", 0x11),
    ("SHIFT", 0x22),
    ("ALT", 0x44),
    ("GUI", 0x88),
)

#: Side-agnostic names, indexed by modifier number (0=CTRL .. 3=GUI).
GENERIC_MODIFIER_NAMES = ("CTRL", "SHIFT", "ALT", "GUI")

#: Side-specific names, indexed by bit number.
SIDED_MODIFIER_NAMES = (
    "LCTRL", "LSHIFT", "LALT", "LGUI",
    "RCTRL", "RSHIFT", "RALT", "RGUI",
)


# =============================================================================
# Lookup Functions
# =============================================================================

def key_code_for(name: Optional[str]) -> Optional[int]:
    """
    Look up a key code by name.

    Lookups are case-sensitive. Returns None (never 0, which is the
    legitimate UNASSIGNED code) when the name is unknown.
    """
    if not name:
        return None
    for token, code in KEY_TABLE:
        if token == name:
            return code
    return None


def key_name_for(code: int) -> str:
    """Return the canonical name of a key code, or INVALID_NAME."""
    for token, value in KEY_TABLE:
        if value == code:
            return token
    return INVALID_NAME


def modifier_for(name: Optional[str]) -> Optional[int]:
    """Look up a modifier mask by name (case-sensitive)."""
    if not name:
        return None
    for token, mask in MODIFIER_TABLE:
        if token == name:
            return mask
    return None


def is_side_specific(mask: int) -> bool:
    """
    Check whether a modifier mask names only one hand per modifier.

    LCTRL (0x01) and LCTRL|RSHIFT (0x21) are side-specific; CTRL (0x11)
    is not, because both its left and right bits are set.
    """
    return not (mask & (mask >> 4) & 0x0F)


def modifier_names(mask: int) -> list[str]:
    """
    Spell a modifier mask as names.

    Modifiers with both hands set print as the side-agnostic name, the
    rest as left/right names in bit order.
    """
    names = []
    for i, generic in enumerate(GENERIC_MODIFIER_NAMES):
        both = (1 << i) | (1 << (i + 4))
        if mask & both == both:
            names.append(generic)
            mask &= ~both
    for bit, sided in enumerate(SIDED_MODIFIER_NAMES):
        if mask & (1 << bit):
            names.append(sided)
    return names


def function_key_number(name: str) -> Optional[int]:
    """
    Parse a layer-combination token such as ``FN3``.

    Returns the function key number 1-8, or None if the token is not a
    function key.
    """
    if len(name) <= 2 or not name.startswith("FN"):
        return None
    digits = name[2:]
    if not (digits.isascii() and digits.isdecimal()):
        return None
    number = int(digits)
    if not 1 <= number <= 8:
        return None
    return number
