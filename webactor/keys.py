"""Key sequence parsing for press_key."""

from __future__ import annotations

import re

_NAMED_KEY = re.compile(r"^[A-Z][A-Za-z0-9]+$")

MODIFIERS = ("Control", "Shift", "Alt", "Meta")

_ALIASES = {
    "Command": "Meta",
    "Cmd": "Meta",
    "Ctrl": "Control",
    "Option": "Alt",
}


def normalize_key(key: str) -> str:
    return _ALIASES.get(key, key)


def split_keys(keys: str | list[str]) -> tuple[list[str], list[str]]:
    """Split a key sequence into held modifiers and pressed keys.

    Leading modifier names are held while the rest is pressed. Named keys
    (``Enter``, ``ArrowDown``, ``F5``) are pressed as they are; any other
    string longer than one character is pressed character by character.
    A sequence made only of modifiers presses its last modifier.
    """
    sequence = [keys] if isinstance(keys, str) else list(keys)
    modifiers: list[str] = []
    pressed: list[str] = []
    for raw in sequence:
        key = normalize_key(raw)
        if not pressed and key in MODIFIERS:
            modifiers.append(key)
        elif len(key) > 1 and not _NAMED_KEY.match(key):
            pressed.extend(key)
        else:
            pressed.append(key)
    if not pressed and modifiers:
        pressed.append(modifiers.pop())
    return modifiers, pressed
