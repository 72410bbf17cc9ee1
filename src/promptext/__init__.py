"""Export source trees as compact, token-efficient documents for LLM prompts."""

from promptext.encoder import Encoder, encode
from promptext.exceptions import DepthExceededError, EncodeError, InvalidRootError, UnsupportedTypeError
from promptext.values import Array, Bool, Null, Number, Object, String, Value, to_value

__version__ = "0.4.0"

__all__ = [
    "Array",
    "Bool",
    "DepthExceededError",
    "EncodeError",
    "Encoder",
    "InvalidRootError",
    "Null",
    "Number",
    "Object",
    "String",
    "UnsupportedTypeError",
    "Value",
    "__version__",
    "encode",
    "to_value",
]
