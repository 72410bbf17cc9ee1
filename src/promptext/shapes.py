from __future__ import annotations

from enum import StrEnum, auto
from typing import TYPE_CHECKING

from promptext.keys import sort_keys
from promptext.values import Object, is_scalar

if TYPE_CHECKING:
    from collections.abc import Sequence

    from promptext.values import Value


class ArrayShape(StrEnum):
    """Representation chosen for an array.

    EMPTY arrays print only their header, PRIMITIVE arrays inline their items on
    one line, TABULAR arrays factor a shared column header out of uniform rows,
    and LIST is the lossless fallback that can hold anything.
    """

    EMPTY = auto()
    PRIMITIVE = auto()
    TABULAR = auto()
    LIST = auto()


def tabular_columns(items: Sequence[Value]) -> list[str] | None:
    """Return the sorted column names if ``items`` can be rendered as a table.

    Every item must be an object, all objects must have exactly the same key
    set, every value must be a primitive, and there must be at least one column.

    Args:
        items (Sequence[Value]): the array items

    Returns:
        list[str] | None: the column names in lexicographic order, or None when
            the items are not uniform
    """
    if not items or not isinstance(items[0], Object):
        return None
    keys = set(items[0].entries)
    if not keys:
        return None
    for item in items:
        if not isinstance(item, Object) or set(item.entries) != keys:
            return None
        if not all(is_scalar(v) for v in item.entries.values()):
            return None
    return sort_keys(keys)


def classify(items: Sequence[Value]) -> ArrayShape:
    """Decide which representation an array uses.

    Args:
        items (Sequence[Value]): the array items

    Returns:
        ArrayShape: EMPTY, PRIMITIVE, TABULAR or LIST
    """
    if not items:
        return ArrayShape.EMPTY
    if all(is_scalar(item) for item in items):
        return ArrayShape.PRIMITIVE
    if tabular_columns(items) is not None:
        return ArrayShape.TABULAR
    return ArrayShape.LIST
