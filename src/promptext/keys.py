"""Key ordering and key quoting.

Keys often come from file paths (``internal/config.go``), so they are quoted more
eagerly than values.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from promptext.scalars import KEYWORDS, SPECIAL_CHARS, looks_numeric, quote_string

if TYPE_CHECKING:
    from collections.abc import Iterable

KEY_SPECIAL_CHARS = (*SPECIAL_CHARS, "/", ".", "-", "#", "&", "*", "?", ">", "<", "=", "!", "%", "@", "\n", "\r")

KEY_KEYWORDS = KEYWORDS | {"yes", "no"}


def needs_key_quoting(key: str) -> bool:
    """Decide whether an object key must be quoted.

    Args:
        key (str): the key to check

    Returns:
        bool: True if the key would be ambiguous or hostile to bare-key syntax
    """
    if not key:
        return True
    if any(ch in key for ch in KEY_SPECIAL_CHARS):
        return True
    if key.strip() != key:
        return True
    if key in KEY_KEYWORDS:
        return True
    return looks_numeric(key)


def render_key(key: str) -> str:
    """Render an object key, quoting it when needed."""
    return quote_string(key) if needs_key_quoting(key) else key


def sort_keys(keys: Iterable[str]) -> list[str]:
    """Return keys in lexicographic (code point) order."""
    return sorted(keys)
