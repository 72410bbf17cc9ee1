from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum, auto
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, computed_field

from promptext.config import (
    CONFIG_EXTENSIONS,
    CONFIG_FILE_NAMES,
    CORE_DIRS,
    DOC_EXTENSIONS,
    ENTRY_POINT_STEMS,
)

if TYPE_CHECKING:
    from collections.abc import Sequence


class NodeType(StrEnum):
    FILE = auto()
    DIR = auto()


class DirectoryNode(BaseModel):
    """A node of the exported directory tree."""

    name: str = Field(..., description="File or directory name")
    type: NodeType = Field(..., description="'file' or 'dir'")
    children: list[DirectoryNode] = Field(default_factory=list)


class GitInfo(BaseModel):
    """Repository state supplied by the caller."""

    model_config = ConfigDict(frozen=True)

    branch: str = ""
    commit_hash: str = ""
    commit_message: str = ""


class Metadata(BaseModel):
    """Language, version and dependencies detected from the project's manifest."""

    model_config = ConfigDict(frozen=True)

    language: str = Field(..., description="Primary language, e.g. 'Python'")
    version: str = Field(default="", description="Language or toolchain version constraint")
    dependencies: list[str] = Field(default_factory=list)


class FileInfo(BaseModel):
    """A text file included in the export.

    Attributes:
        path: Path relative to the repository root, with POSIX separators.
        content: The decoded file contents.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="File path relative to repository root")
    content: str = Field(..., description="File contents")

    @computed_field
    @property
    def line_count(self) -> int:
        """Number of lines, counted as newlines plus one."""
        return self.content.count("\n") + 1

    @computed_field
    @property
    def extension(self) -> str:
        """File extension without the leading dot, or empty if there is none."""
        return PurePosixPath(self.path).suffix.removeprefix(".")


class FileStatistics(BaseModel):
    total_files: int = Field(default=0, ge=0)
    total_lines: int = Field(default=0, ge=0)
    package_count: int = Field(default=0, ge=0)
    files_by_type: dict[str, int] = Field(default_factory=dict)


class ProjectAnalysis(BaseModel):
    """Files grouped by role; each mapping goes from path to a short description."""

    entry_points: dict[str, str] = Field(default_factory=dict)
    config_files: dict[str, str] = Field(default_factory=dict)
    core_files: dict[str, str] = Field(default_factory=dict)
    test_files: dict[str, str] = Field(default_factory=dict)
    documentation: dict[str, str] = Field(default_factory=dict)

    def is_empty(self) -> bool:
        return not any(
            (self.entry_points, self.config_files, self.core_files, self.test_files, self.documentation),
        )


class FilterConfig(BaseModel):
    includes: list[str] = Field(default_factory=list)
    excludes: list[str] = Field(default_factory=list)


class ProjectOutput(BaseModel):
    """Everything known about the exported project. Every part is optional."""

    directory_tree: DirectoryNode | None = None
    git_info: GitInfo | None = None
    metadata: Metadata | None = None
    files: list[FileInfo] = Field(default_factory=list)
    file_stats: FileStatistics | None = None
    analysis: ProjectAnalysis | None = None
    filter_config: FilterConfig | None = None


@dataclass
class _PathNode:
    dirs: dict[str, _PathNode] = field(default_factory=dict)
    files: set[str] = field(default_factory=set)


def build_directory_tree(root_name: str, rel_paths: Sequence[str]) -> DirectoryNode:
    """Build a directory tree from relative file paths.

    Within each directory, subdirectories come first, then files, each sorted
    case-insensitively.

    Args:
        root_name (str): the name of the root directory node
        rel_paths (Sequence[str]): file paths relative to the root, using POSIX separators

    Returns:
        DirectoryNode: the root directory node
    """
    rels = sorted(
        {p.strip("/").replace("\\", "/") for p in rel_paths if p.strip()},
        key=str.lower,
    )
    tree = _PathNode()
    for rp in rels:
        *dirs, file_name = rp.split("/")
        cur = tree
        for part in dirs:
            cur = cur.dirs.setdefault(part, _PathNode())
        cur.files.add(file_name)

    def walk(name: str, node: _PathNode) -> DirectoryNode:
        children = [walk(d, node.dirs[d]) for d in sorted(node.dirs, key=str.lower)]
        children.extend(DirectoryNode(name=f, type=NodeType.FILE) for f in sorted(node.files, key=str.lower))
        return DirectoryNode(name=name, type=NodeType.DIR, children=children)

    return walk(root_name, tree)


def compute_statistics(files: Sequence[FileInfo]) -> FileStatistics:
    """Summarize file count, line count, package (directory) count and extension histogram.

    Args:
        files (Sequence[FileInfo]): the exported files

    Returns:
        FileStatistics: aggregated statistics
    """
    by_type: Counter[str] = Counter(f.extension or "txt" for f in files)
    packages = {str(PurePosixPath(f.path).parent) for f in files}
    return FileStatistics(
        total_files=len(files),
        total_lines=sum(f.line_count for f in files),
        package_count=len(packages),
        files_by_type=dict(by_type),
    )


def _is_test_path(rel: str) -> bool:
    p = PurePosixPath(rel)
    if any(part in {"tests", "test"} for part in p.parts[:-1]):
        return True
    return p.name.startswith("test_") or p.stem.endswith("_test")


def _describe_doc(name: str) -> str:
    upper = name.upper()
    if upper.startswith("README"):
        return "Project documentation"
    if upper.startswith("LICENSE"):
        return "License information"
    return "Documentation"


def analyze_files(rel_paths: Sequence[str]) -> ProjectAnalysis:  # noqa: C901
    """Group files by role using path heuristics.

    A file lands in the first matching category: tests, documentation,
    configuration, entry points, then core implementation.

    Args:
        rel_paths (Sequence[str]): file paths relative to the repository root

    Returns:
        ProjectAnalysis: the categorized files
    """
    analysis = ProjectAnalysis()
    for rel in sorted(rel_paths):
        p = PurePosixPath(rel)
        name = p.name
        upper = name.upper()
        if _is_test_path(rel):
            analysis.test_files[rel] = "Test file"
        elif upper.startswith(("README", "LICENSE")) or p.suffix.lower() in DOC_EXTENSIONS:
            analysis.documentation[rel] = _describe_doc(name)
        elif name in CONFIG_FILE_NAMES or p.suffix.lower() in CONFIG_EXTENSIONS:
            analysis.config_files[rel] = "Configuration file"
        elif p.stem in ENTRY_POINT_STEMS and p.suffix:
            analysis.entry_points[rel] = "Entry point"
        elif any(part in CORE_DIRS for part in p.parts[:-1]):
            analysis.core_files[rel] = "Core implementation"
    return analysis
