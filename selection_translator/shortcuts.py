"""
Shortcut strings such as "Ctrl+Shift+T".

A shortcut is any number of modifiers followed by exactly one key, joined
with '+'. Matching is case-insensitive; `str(spec)` gives the canonical
form, which parses back to an equal spec.
"""

import string
import sys
from dataclasses import dataclass
from enum import Enum

from selection_translator.errors import ParseError


class Modifier(Enum):
    CTRL = "Ctrl"
    SHIFT = "Shift"
    ALT = "Alt"
    SUPER = "Super"


# Canonical order used when a spec is written back out
MODIFIER_ORDER = (Modifier.CTRL, Modifier.SHIFT, Modifier.ALT, Modifier.SUPER)

MODIFIER_ALIASES = {
    "ctrl": Modifier.CTRL,
    "control": Modifier.CTRL,
    "shift": Modifier.SHIFT,
    "alt": Modifier.ALT,
    "option": Modifier.ALT,
    "super": Modifier.SUPER,
    "win": Modifier.SUPER,
    "meta": Modifier.SUPER,
    "cmd": Modifier.SUPER,
    "command": Modifier.SUPER,
}

# Per-backend names: pynput hotkey token, evdev key codes
MODIFIER_KEYS = {
    Modifier.CTRL: ("<ctrl>", ("KEY_LEFTCTRL", "KEY_RIGHTCTRL")),
    Modifier.SHIFT: ("<shift>", ("KEY_LEFTSHIFT", "KEY_RIGHTSHIFT")),
    Modifier.ALT: ("<alt>", ("KEY_LEFTALT", "KEY_RIGHTALT")),
    Modifier.SUPER: ("<cmd>", ("KEY_LEFTMETA", "KEY_RIGHTMETA")),
}


def _build_key_table():
    table = {}
    for ch in string.ascii_uppercase + string.digits:
        table[ch] = (ch.lower(), f"KEY_{ch}")
    for n in range(1, 13):
        table[f"F{n}"] = (f"<f{n}>", f"KEY_F{n}")
    table.update({
        "Space": ("<space>", "KEY_SPACE"),
        "Enter": ("<enter>", "KEY_ENTER"),
        "Backspace": ("<backspace>", "KEY_BACKSPACE"),
        "Tab": ("<tab>", "KEY_TAB"),
        "Escape": ("<esc>", "KEY_ESC"),
        "Delete": ("<delete>", "KEY_DELETE"),
        "Insert": ("<insert>", "KEY_INSERT"),
        "Home": ("<home>", "KEY_HOME"),
        "End": ("<end>", "KEY_END"),
        "PageUp": ("<page_up>", "KEY_PAGEUP"),
        "PageDown": ("<page_down>", "KEY_PAGEDOWN"),
        "ArrowUp": ("<up>", "KEY_UP"),
        "ArrowDown": ("<down>", "KEY_DOWN"),
        "ArrowLeft": ("<left>", "KEY_LEFT"),
        "ArrowRight": ("<right>", "KEY_RIGHT"),
    })
    return table


KEY_TABLE = _build_key_table()

KEY_ALIASES = {name.lower(): name for name in KEY_TABLE}
KEY_ALIASES.update({
    "return": "Enter",
    "esc": "Escape",
    "del": "Delete",
    "ins": "Insert",
    "pgup": "PageUp",
    "pgdn": "PageDown",
    "up": "ArrowUp",
    "down": "ArrowDown",
    "left": "ArrowLeft",
    "right": "ArrowRight",
})

MAC_GLYPHS = {
    Modifier.SUPER: "⌘",
    Modifier.CTRL: "⌃",
    Modifier.ALT: "⌥",
    Modifier.SHIFT: "⇧",
}


@dataclass(frozen=True)
class ShortcutSpec:
    modifiers: frozenset
    key: str

    @property
    def ordered_modifiers(self):
        return [m for m in MODIFIER_ORDER if m in self.modifiers]

    def __str__(self):
        return "+".join([m.value for m in self.ordered_modifiers] + [self.key])


def parse_shortcut(text):
    """
    Parses "MOD+MOD+KEY". Raises ParseError naming the first token that is
    not a known modifier (before the last '+') or key (after it).
    """
    if text is None or not text.strip():
        raise ParseError("", "Shortcut is empty")

    *modifier_tokens, key_token = [t.strip() for t in text.split("+")]

    modifiers = set()
    for token in modifier_tokens:
        modifier = MODIFIER_ALIASES.get(token.lower())
        if modifier is None:
            raise ParseError(token, f"Unknown modifier '{token}'")
        modifiers.add(modifier)

    key = KEY_ALIASES.get(key_token.lower())
    if key is None:
        raise ParseError(key_token, f"Unknown key '{key_token}'")

    return ShortcutSpec(frozenset(modifiers), key)


def default_shortcut():
    return "Super+Alt+L" if sys.platform == "darwin" else "Ctrl+Alt+L"


def format_shortcut(spec, mac=None):
    """Display form: glyphs on macOS, 'Ctrl + Alt + L' elsewhere."""
    if mac is None:
        mac = sys.platform == "darwin"
    if mac:
        return "".join([MAC_GLYPHS[m] for m in spec.ordered_modifiers] + [spec.key])
    parts = ["Win" if m is Modifier.SUPER else m.value for m in spec.ordered_modifiers]
    return " + ".join(parts + [spec.key])
