"""XPath building blocks for semantic lookups."""

from __future__ import annotations

from webactor.models import ElementKind

_BUTTON_TYPES = "@type='submit' or @type='button' or @type='reset' or @type='image'"

ROLE_PREDICATES: dict[ElementKind, str] = {
    ElementKind.CLICKABLE: (
        "self::a or self::button or @role='button' or @role='link'"
        f" or (self::input and ({_BUTTON_TYPES}))"
    ),
    ElementKind.CHECKABLE: (
        "(self::input and (@type='checkbox' or @type='radio'))"
        " or @role='checkbox' or @role='radio'"
    ),
    ElementKind.FIELD: (
        f"(self::input and not({_BUTTON_TYPES} or @type='hidden'))"
        " or self::textarea or self::select"
    ),
}


def literal(text: str) -> str:
    """Quote ``text`` as an XPath 1.0 string literal."""
    if "'" not in text:
        return f"'{text}'"
    if '"' not in text:
        return f'"{text}"'
    parts = text.split("'")
    return "concat(" + ", \"'\", ".join(f"'{p}'" for p in parts) + ")"


def with_role(kind: ElementKind, condition: str) -> str:
    """Elements of ``kind`` that also satisfy ``condition``."""
    return f".//*[{ROLE_PREDICATES[kind]}][{condition}]"


def attribute_equals(name: str, value: str) -> str:
    return f".//*[@{name}={literal(value)}]"


def containing_text(text: str) -> str:
    """Elements owning a text node that contains ``text``."""
    return f".//*[text()[contains(normalize-space(.), {literal(text)})]]"
