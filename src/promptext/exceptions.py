from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class PromptextError(Exception):
    """Base exception for errors in the promptext package."""


@dataclass(frozen=True)
class EncodeError(PromptextError):
    """Raised when a value cannot be encoded. Base of all encoder failures."""


@dataclass(frozen=True)
class UnsupportedTypeError(EncodeError):
    """Raised when native data has no counterpart in the value model."""

    type_name: str
    path: str = "$"
    reason: str = ""

    def __str__(self) -> str:
        msg = f"Unsupported type {self.type_name!r} at {self.path}"
        if self.reason:
            msg += f": {self.reason}"
        return msg


@dataclass(frozen=True)
class DepthExceededError(EncodeError):
    """Raised when nesting goes deeper than the configured maximum depth."""

    max_depth: int
    path: str = "$"

    def __str__(self) -> str:
        return f"Maximum nesting depth of {self.max_depth} exceeded at {self.path}"


@dataclass(frozen=True)
class InvalidRootError(EncodeError):
    """Raised when the document root is not an object."""

    type_name: str

    def __str__(self) -> str:
        return f"Document root must be an object, got {self.type_name}"


@dataclass(frozen=True)
class ConfigError(PromptextError):
    """Raised when the project configuration file cannot be loaded."""

    path: Path
    message: str = "Invalid configuration file."

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


@dataclass(frozen=True)
class UnsupportedFormatError(PromptextError):
    """Raised when an output format name is not registered."""

    name: str
    supported: tuple[str, ...] = ()

    def __str__(self) -> str:
        return f"Unsupported format: {self.name} (supported: {', '.join(self.supported)})"
