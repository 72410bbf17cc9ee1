"""Structural encoder for the compact PTX/TOON notation.

The encoder walks a value tree depth-first and appends output lines to a list
local to one call; the text is only assembled once the walk succeeds, so a
failed encode never yields partial output. Indentation is an explicit
argument, which keeps the encoder reentrant and lets sub-trees be encoded in
isolation.

Example:
    >>> print(encode({"tags": ["go", "cli", "tool"], "count": 2}))
    count: 2
    tags[3]: go,cli,tool
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from promptext.config import DEFAULT_MAX_DEPTH, INDENT_UNIT
from promptext.exceptions import DepthExceededError, InvalidRootError
from promptext.keys import render_key
from promptext.scalars import block_lines, is_block, render_scalar
from promptext.shapes import ArrayShape, classify, tabular_columns
from promptext.values import Array, Object, is_scalar, to_value

if TYPE_CHECKING:
    from promptext.values import Scalar, Value


@dataclass(frozen=True)
class Encoder:
    """Encode value trees to text.

    Attributes:
        max_depth: maximum number of nested arrays/objects, or None for no limit.
        block_scalars: render multi-line keyed strings as ``|`` blocks; when False
            every string stays on one line, quoted and escaped.
    """

    max_depth: int | None = DEFAULT_MAX_DEPTH
    block_scalars: bool = True

    def encode(self, root: Value | Any) -> str:  # noqa: ANN401
        """Encode a document whose root is an object.

        Args:
            root (Value | Any): an ``Object`` value, or native data convertible with ``to_value``

        Raises:
            InvalidRootError: if the root is not an object
            UnsupportedTypeError: if native data cannot be converted
            DepthExceededError: if the tree nests deeper than ``max_depth``

        Returns:
            str: the encoded document, without a trailing newline
        """
        value = to_value(root, max_depth=self.max_depth)
        if not isinstance(value, Object):
            raise InvalidRootError(type_name=type(value).__name__)
        lines: list[str] = []
        self.encode_value(value, None, 0, lines)
        return "\n".join(lines).rstrip("\n")

    def encode_value(  # noqa: PLR0913
        self,
        value: Value,
        key: str | None,
        depth: int,
        lines: list[str],
        *,
        nesting: int = 0,
        path: str = "$",
    ) -> None:
        """Append the lines encoding ``value`` to ``lines``.

        Args:
            value (Value): the node to encode
            key (str | None): the entry key, or None for the document root and list items
            depth (int): indentation level of the node's first line
            lines (list[str]): output buffer
            nesting (int): number of enclosing arrays/objects, checked against ``max_depth``
            path (str): location of the node, used in error messages
        """
        if isinstance(value, Array):
            self._check_depth(nesting, path)
            self._encode_array(value, key, depth, lines, nesting=nesting, path=path)
        elif isinstance(value, Object):
            self._check_depth(nesting, path)
            self._encode_object(value, key, depth, lines, nesting=nesting, path=path)
        else:
            self._encode_scalar(value, key, depth, lines)

    def _check_depth(self, nesting: int, path: str) -> None:
        if self.max_depth is not None and nesting >= self.max_depth:
            raise DepthExceededError(max_depth=self.max_depth, path=path)

    @staticmethod
    def _prefix(key: str | None, depth: int) -> str:
        pad = INDENT_UNIT * depth
        return pad if key is None else pad + render_key(key)

    def _encode_scalar(self, value: Scalar, key: str | None, depth: int, lines: list[str]) -> None:
        prefix = self._prefix(key, depth)
        sep = "" if key is None else ": "
        if self.block_scalars and is_block(value):
            lines.append(f"{prefix}{sep}|")
            lines.extend(block_lines(value.value, INDENT_UNIT * (depth + 1)))
            return
        lines.append(f"{prefix}{sep}{render_scalar(value)}")

    def _encode_object(  # noqa: PLR0913
        self,
        value: Object,
        key: str | None,
        depth: int,
        lines: list[str],
        *,
        nesting: int,
        path: str,
    ) -> None:
        inner = depth
        if key is not None:
            lines.append(f"{self._prefix(key, depth)}:")
            inner = depth + 1
        for k, v in value.sorted_items():
            self.encode_value(v, k, inner, lines, nesting=nesting + 1, path=f"{path}.{k}")

    def _encode_array(  # noqa: PLR0913
        self,
        value: Array,
        key: str | None,
        depth: int,
        lines: list[str],
        *,
        nesting: int,
        path: str,
    ) -> None:
        items = value.items
        prefix = self._prefix(key, depth)
        shape = classify(items)

        if shape is ArrayShape.EMPTY:
            lines.append(f"{prefix}[0]:")
            return

        if shape is ArrayShape.PRIMITIVE:
            inline = ",".join(render_scalar(item) for item in items)
            lines.append(f"{prefix}[{len(items)}]: {inline}")
            return

        row_pad = INDENT_UNIT * (depth + 1)
        if shape is ArrayShape.TABULAR:
            columns = tabular_columns(items) or []
            header = ",".join(render_key(col) for col in columns)
            lines.append(f"{prefix}[{len(items)}]{{{header}}}:")
            for item in items:
                row = ",".join(render_scalar(item.entries[col]) for col in columns)
                lines.append(f"{row_pad}{row}")
            return

        lines.append(f"{prefix}[{len(items)}]:")
        for i, item in enumerate(items):
            if is_scalar(item):
                lines.append(f"{row_pad}- {render_scalar(item)}")
                continue
            lines.append(f"{row_pad}-")
            self.encode_value(item, None, depth + 2, lines, nesting=nesting + 1, path=f"{path}[{i}]")


def encode(
    root: Value | Any,  # noqa: ANN401
    *,
    max_depth: int | None = DEFAULT_MAX_DEPTH,
    block_scalars: bool = True,
) -> str:
    """Encode a document to text.

    Args:
        root (Value | Any): an ``Object`` value, or native data such as a dict
        max_depth (int | None): maximum nesting of arrays/objects; None disables the guard
        block_scalars (bool): False keeps every string on a single quoted line

    Returns:
        str: the encoded document
    """
    return Encoder(max_depth=max_depth, block_scalars=block_scalars).encode(root)
