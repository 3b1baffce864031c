"""Decoding raw terminal input into key identifiers.

Key identifiers are strings such as ``"a"``, ``"ctrl+r"``, ``"alt+pageUp"``
or ``"ctrl+alt+n"``. Modifiers always appear in the order ctrl, shift, alt.

Handled encodings: xterm style CSI/SS3 sequences with an optional modifier
parameter, ESC prefixed meta keys, raw control characters, and 8-bit meta
bytes (a control character with the high bit set, which the terminal layer
delivers as a surrogate escaped code point).
"""

from __future__ import annotations

import re

KeyId = str

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

MODIFIERS: dict[str, int] = {
    "shift": 1,
    "alt": 2,
    "ctrl": 4,
}

MODIFIER_ORDER = ("ctrl", "shift", "alt")

# Final byte of ``ESC [ 1 ; <mod> X`` / ``ESC O X`` sequences.
CSI_LETTER_KEYS: dict[str, str] = {
    "A": "up",
    "B": "down",
    "C": "right",
    "D": "left",
    "H": "home",
    "F": "end",
    "E": "clear",
    "P": "f1",
    "Q": "f2",
    "R": "f3",
    "S": "f4",
}

# Number of ``ESC [ <n> ; <mod> ~`` sequences.
CSI_TILDE_KEYS: dict[int, str] = {
    1: "home",
    2: "insert",
    3: "delete",
    4: "end",
    5: "pageUp",
    6: "pageDown",
    7: "home",
    8: "end",
    11: "f1",
    12: "f2",
    13: "f3",
    14: "f4",
    15: "f5",
    17: "f6",
    18: "f7",
    19: "f8",
    20: "f9",
    21: "f10",
    23: "f11",
    24: "f12",
}

# Linux console function keys.
LINUX_CONSOLE_KEYS: dict[str, str] = {
    "\x1b[[A": "f1",
    "\x1b[[B": "f2",
    "\x1b[[C": "f3",
    "\x1b[[D": "f4",
    "\x1b[[E": "f5",
}

KEY_ALIASES: dict[str, str] = {
    "esc": "escape",
    "return": "enter",
    "del": "delete",
    "ins": "insert",
    "pgup": "pageUp",
    "pgdn": "pageDown",
    "pageup": "pageUp",
    "pagedown": "pageDown",
}

# Canonical spelling of every named key, by lower case name.
_NAMED_KEYS: dict[str, str] = {
    name.lower(): name
    for name in (
        *CSI_LETTER_KEYS.values(),
        *CSI_TILDE_KEYS.values(),
        "escape",
        "enter",
        "tab",
        "backspace",
        "space",
    )
}

_CSI_RE = re.compile(r"\x1b\[(\d*)(?:;(\d+))?([A-Za-z~])$")
_SS3_RE = re.compile(r"\x1bO(\d?)([A-Z])$")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _prefix(bits: int) -> str:
    return "".join(f"{name}+" for name in MODIFIER_ORDER if bits & MODIFIERS[name])


def _modifier_bits(param: str | None) -> int:
    """xterm encodes modifiers as ``1 + bits``."""
    if not param:
        return 0
    return max(0, int(param) - 1) & 7


def _control_key(ch: str) -> str | None:
    """Key name of a C0 control character (without the ctrl modifier)."""
    code = ord(ch)
    if code == 0:
        return "space"
    if 1 <= code <= 26:
        return chr(code + ord("a") - 1)
    return {28: "\\", 29: "]", 30: "^", 31: "_"}.get(code)


def _parse_escape(data: str) -> KeyId | None:
    if data in LINUX_CONSOLE_KEYS:
        return LINUX_CONSOLE_KEYS[data]
    if data == "\x1b[Z":
        return "shift+tab"

    match = _CSI_RE.match(data)
    if match:
        number, modifier, final = match.groups()
        bits = _modifier_bits(modifier)
        if final == "~":
            key = CSI_TILDE_KEYS.get(int(number)) if number else None
        else:
            key = CSI_LETTER_KEYS.get(final)
        return _prefix(bits) + key if key else None

    match = _SS3_RE.match(data)
    if match:
        modifier, final = match.groups()
        key = CSI_LETTER_KEYS.get(final)
        return _prefix(_modifier_bits(modifier)) + key if key else None

    return None


def _add_alt(key_id: KeyId) -> KeyId:
    parsed = split_key_id(key_id)
    if parsed is None:
        return key_id
    bits, key = parsed
    return _prefix(bits | MODIFIERS["alt"]) + key


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def split_key_id(key_id: str) -> tuple[int, str] | None:
    """Split ``"ctrl+shift+a"`` into ``(modifier_bits, "a")``."""
    if not key_id:
        return None
    parts = key_id.split("+")
    # "ctrl++" binds the plus key.
    if key_id.endswith("++"):
        parts = parts[:-2] + ["+"]
    bits = 0
    for part in parts[:-1]:
        bit = MODIFIERS.get(part.lower())
        if bit is None:
            return None
        bits |= bit
    key = parts[-1]
    if not key:
        return None
    if len(key) > 1:
        lowered = key.lower()
        key = KEY_ALIASES.get(lowered) or _NAMED_KEYS.get(lowered, key)
    return bits, key


def normalize_key_id(key_id: str) -> KeyId | None:
    """Canonical spelling of *key_id*, or ``None`` if it is malformed."""
    parsed = split_key_id(key_id)
    if parsed is None:
        return None
    bits, key = parsed
    if len(key) == 1:
        if key.isupper():
            bits |= MODIFIERS["shift"]
        key = key.lower()
    return _prefix(bits) + key


def parse_key(data: str) -> KeyId | None:
    """Return the key identifier for one raw input sequence, or ``None``."""
    if not data:
        return None

    if data == "\x1b":
        return "escape"
    if data in ("\r", "\n"):
        return "enter"
    if data == "\t":
        return "tab"
    if data in ("\x7f", "\x08"):
        return "backspace"
    if data == " ":
        return "space"

    if data.startswith("\x1b[") or data.startswith("\x1bO"):
        return _parse_escape(data)

    if data.startswith("\x1b\x1b") and len(data) > 2:
        inner = parse_key(data[1:])
        return _add_alt(inner) if inner else None

    if len(data) == 2 and data[0] == "\x1b":
        inner = parse_key(data[1])
        return _add_alt(inner) if inner else None

    if len(data) != 1:
        return None

    code = ord(data)
    # 8-bit meta: the terminal layer maps undecodable bytes to U+DC80..U+DCFF.
    if 0xDC80 <= code <= 0xDC9F:
        key = _control_key(chr(code - 0xDC80))
        return "ctrl+alt+" + key if key else None
    if 0x80 <= code <= 0x9F:
        key = _control_key(chr(code - 0x80))
        return "ctrl+alt+" + key if key else None

    key = _control_key(data)
    if key is not None:
        return "ctrl+" + key

    if data.isprintable():
        if data.isalpha() and data.isupper():
            return "shift+" + data.lower()
        return data
    return None


def matches_key(data: str, key_id: str) -> bool:
    """Check whether raw input *data* is the key named by *key_id*."""
    parsed = parse_key(data)
    if parsed is None:
        return False
    return parsed == normalize_key_id(key_id)


def printable_text(data: str) -> str | None:
    """Return *data* when it is text to insert rather than a key command."""
    if not data or data.startswith("\x1b"):
        return None
    for ch in data:
        code = ord(ch)
        if code < 0x20 or code == 0x7F or 0x80 <= code <= 0x9F or 0xD800 <= code <= 0xDFFF:
            return None
    if not data.isprintable():
        return None
    return data


def describe_input(data: str) -> str:
    """Hex dump of the raw bytes behind *data*, for surfacing unknown keys."""
    try:
        raw = data.encode("utf-8", errors="surrogateescape")
    except UnicodeEncodeError:
        raw = data.encode("utf-8", errors="backslashreplace")
    return raw.hex()
