"""Rendering of primitive values.

Any scalar emitted bare is guaranteed not to read back as ``true``, ``false``,
``null``, a number, or a structural delimiter; everything else is double-quoted.
"""

from __future__ import annotations

from promptext.values import Bool, Null, Number, Scalar, String

KEYWORDS = frozenset({"true", "false", "null"})

SPECIAL_CHARS = (":", ",", '"', "\\", "\t", "|", "[", "]", "{", "}")

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

# floats at or beyond this magnitude keep their exponent form
_MAX_PLAIN_INTEGRAL = 1e16


def looks_numeric(s: str) -> bool:
    """Check whether a string would parse as a floating-point number.

    Hex floats such as ``0x1p3`` count too; ``float.fromhex`` would also accept
    bare hex digits, so it is only tried behind an explicit ``0x`` prefix.
    """
    try:
        float(s)
    except ValueError:
        pass
    else:
        return True
    if s.strip().lstrip("+-")[:2].lower() != "0x":
        return False
    try:
        float.fromhex(s)
    except ValueError:
        return False
    return True


def needs_quoting(s: str) -> bool:
    """Decide whether a single-line string must be quoted to stay unambiguous.

    Args:
        s (str): the string to check

    Returns:
        bool: True if the string is empty, a keyword, numeric, holds a structural
            character, starts like a list item, or has surrounding whitespace
    """
    if not s:
        return True
    if s in KEYWORDS:
        return True
    if looks_numeric(s):
        return True
    if any(ch in s for ch in SPECIAL_CHARS):
        return True
    if s.startswith("- "):
        return True
    return s.strip() != s


def quote_string(s: str) -> str:
    """Wrap a string in double quotes, backslash-escaping quotes, backslashes and control characters."""
    return '"' + "".join(_ESCAPES.get(ch, ch) for ch in s) + '"'


def format_number(n: int | float) -> str:
    """Render a number in its shortest canonical form.

    Integers print as plain digits. Integral floats drop the ``.0`` suffix,
    ``-0.0`` becomes ``0``, and other floats use the shortest repr that
    round-trips.
    """
    if isinstance(n, int):
        return str(n)
    if n == 0:
        return "0"
    if n.is_integer() and abs(n) < _MAX_PLAIN_INTEGRAL:
        return str(int(n))
    return repr(n)


def render_inline_string(s: str) -> str:
    """Render a string on a single line, quoting it when needed.

    Line breaks cannot appear bare inside a row or an inline array, so they force
    the quoted form with escapes.
    """
    if "\n" in s or "\r" in s or needs_quoting(s):
        return quote_string(s)
    return s


def render_scalar(value: Scalar) -> str:
    """Render a primitive value on a single line.

    Args:
        value (Scalar): the primitive to render

    Returns:
        str: the textual form, e.g. ``null``, ``true``, ``42``, ``"42"`` or ``Alice``
    """
    if isinstance(value, Null):
        return "null"
    if isinstance(value, Bool):
        return "true" if value.value else "false"
    if isinstance(value, Number):
        return format_number(value.value)
    if isinstance(value, String):
        return render_inline_string(value.value)
    msg = f"not a scalar: {type(value).__name__}"
    raise TypeError(msg)


def is_block(value: Scalar) -> bool:
    """Check whether a keyed scalar must be emitted as a ``|`` block."""
    return isinstance(value, String) and "\n" in value.value


def block_lines(s: str, indent: str) -> list[str]:
    """Split a multi-line string into the content lines of a block scalar.

    Empty lines stay empty instead of carrying indentation, so the line count
    of the output matches the input exactly.

    Args:
        s (str): the string to split on ``\\n``
        indent (str): the prefix for each non-empty line

    Returns:
        list[str]: one output line per input line
    """
    return [indent + line if line else "" for line in s.split("\n")]
