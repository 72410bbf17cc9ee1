from __future__ import annotations

from enum import StrEnum

PTX_SCHEMA = "ptx/v2.0"

CONFIG_FILE_NAME = ".promptext.yml"

# Each Array or Object level counts as one.
DEFAULT_MAX_DEPTH = 100

DEFAULT_MAX_BYTES = 500_000

INDENT_UNIT = "  "


class OutputFormat(StrEnum):
    """Output formats the exporter can produce."""

    PTX = "ptx"
    TOON_STRICT = "toon-strict"
    MARKDOWN = "markdown"
    XML = "xml"
    JSONL = "jsonl"


FORMAT_ALIASES: dict[str, OutputFormat] = {
    "ptx": OutputFormat.PTX,
    "toon": OutputFormat.PTX,
    "toon-strict": OutputFormat.TOON_STRICT,
    "toon-v1.3": OutputFormat.TOON_STRICT,
    "markdown": OutputFormat.MARKDOWN,
    "md": OutputFormat.MARKDOWN,
    "xml": OutputFormat.XML,
    "jsonl": OutputFormat.JSONL,
}

# Markdown fence languages for extensions whose name is not already the
# language tag; anything missing falls back to the bare extension.
FENCE_LANGUAGES: dict[str, str] = {
    ".cc": "cpp",
    ".cfg": "ini",
    ".conf": "ini",
    ".h": "c",
    ".hpp": "cpp",
    ".js": "javascript",
    ".jsx": "javascript",
    ".kt": "kotlin",
    ".md": "markdown",
    ".mjs": "javascript",
    ".py": "python",
    ".rb": "ruby",
    ".rs": "rust",
    ".sh": "bash",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".txt": "text",
    ".yml": "yaml",
}

# Directory and file names never exported, at any depth.
SKIPPED_NAMES = frozenset(
    {
        ".DS_Store",
        ".git",
        ".hg",
        ".idea",
        ".mypy_cache",
        ".pytest_cache",
        ".ruff_cache",
        ".svn",
        ".terraform",
        ".tox",
        ".venv",
        ".vscode",
        "__pycache__",
        "build",
        "dist",
        "node_modules",
        "target",
        "vendor",
        "venv",
    },
)

CONFIG_FILE_NAMES = {
    CONFIG_FILE_NAME,
    ".editorconfig",
    ".gitignore",
    ".pre-commit-config.yaml",
    "Cargo.toml",
    "Dockerfile",
    "Makefile",
    "go.mod",
    "package.json",
    "pyproject.toml",
    "requirements.txt",
    "setup.cfg",
    "tsconfig.json",
}

CONFIG_EXTENSIONS = {".cfg", ".conf", ".ini", ".toml", ".yaml", ".yml"}

ENTRY_POINT_STEMS = {"main", "app", "index", "cli", "__main__"}

CORE_DIRS = ("internal", "pkg", "lib", "src")

DOC_EXTENSIONS = {".md", ".rst"}


def resolve_format(name: str) -> OutputFormat | None:
    """Resolve a format name or alias, case-insensitively.

    Args:
        name (str): The user-supplied format name (e.g. "toon", "md").

    Returns:
        OutputFormat | None: The canonical format, or None if unknown.
    """
    return FORMAT_ALIASES.get(name.strip().lower())
