"""Value model accepted by the encoder.

A value tree is built fresh for every encode call. Each node is exactly one of
``Null``, ``Bool``, ``Number``, ``String``, ``Array`` or ``Object``; the encoder
dispatches on these classes instead of inspecting arbitrary Python objects.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

from promptext.config import DEFAULT_MAX_DEPTH
from promptext.exceptions import DepthExceededError, UnsupportedTypeError


@dataclass(frozen=True)
class Null:
    """The absent value, rendered as ``null``."""


@dataclass(frozen=True)
class Bool:
    value: bool


@dataclass(frozen=True)
class Number:
    """An integer or finite float; the two render differently."""

    value: int | float

    def __post_init__(self) -> None:
        if isinstance(self.value, bool) or not isinstance(self.value, (int, float)):
            raise UnsupportedTypeError(type_name=type(self.value).__name__, reason="not a number")
        if isinstance(self.value, float) and not math.isfinite(self.value):
            raise UnsupportedTypeError(type_name="float", reason=f"non-finite number {self.value!r}")


@dataclass(frozen=True)
class String:
    value: str


@dataclass(frozen=True)
class Array:
    """Ordered sequence of values."""

    items: tuple[Value, ...] = ()


@dataclass(frozen=True)
class Object:
    """Mapping of unique string keys to values. Insertion order is not significant."""

    entries: dict[str, Value] = field(default_factory=dict)

    def sorted_items(self) -> list[tuple[str, Value]]:
        """Return the entries in lexicographic key order."""
        return sorted(self.entries.items(), key=lambda kv: kv[0])


Scalar = Null | Bool | Number | String
Value = Null | Bool | Number | String | Array | Object

SCALAR_TYPES = (Null, Bool, Number, String)
VALUE_TYPES = (Null, Bool, Number, String, Array, Object)


def is_scalar(value: Value) -> bool:
    """Check whether a value is a primitive (Null, Bool, Number or String)."""
    return isinstance(value, SCALAR_TYPES)


def to_value(obj: Any, *, max_depth: int | None = DEFAULT_MAX_DEPTH) -> Value:  # noqa: ANN401
    """Convert native Python data into a value tree.

    Supported inputs are ``None``, ``bool``, ``int``, ``float``, ``str``, mappings
    with string keys, lists and tuples, pydantic models and existing values.

    Args:
        obj (Any): the data to convert
        max_depth (int | None): maximum number of nested arrays/objects; None disables the check

    Raises:
        UnsupportedTypeError: if any part of ``obj`` has no counterpart in the value model
        DepthExceededError: if ``obj`` nests deeper than ``max_depth``

    Returns:
        Value: the converted value tree
    """
    return _convert(obj, "$", 0, max_depth)


def _convert(obj: Any, path: str, depth: int, max_depth: int | None) -> Value:  # noqa: ANN401, C901, PLR0911
    if isinstance(obj, VALUE_TYPES):
        return obj
    if obj is None:
        return Null()
    if isinstance(obj, bool):
        return Bool(obj)
    if isinstance(obj, (int, float)):
        try:
            return Number(obj)
        except UnsupportedTypeError as exc:
            raise UnsupportedTypeError(type_name=exc.type_name, path=path, reason=exc.reason) from exc
    if isinstance(obj, str):
        return String(obj)
    if isinstance(obj, BaseModel):
        return _convert(obj.model_dump(mode="json"), path, depth, max_depth)

    if isinstance(obj, (Mapping, list, tuple)):
        if max_depth is not None and depth >= max_depth:
            raise DepthExceededError(max_depth=max_depth, path=path)
        if isinstance(obj, Mapping):
            entries: dict[str, Value] = {}
            for key, val in obj.items():
                if not isinstance(key, str):
                    raise UnsupportedTypeError(
                        type_name=type(key).__name__,
                        path=path,
                        reason="object keys must be strings",
                    )
                entries[key] = _convert(val, f"{path}.{key}", depth + 1, max_depth)
            return Object(entries)
        return Array(tuple(_convert(item, f"{path}[{i}]", depth + 1, max_depth) for i, item in enumerate(obj)))

    raise UnsupportedTypeError(type_name=type(obj).__name__, path=path)
