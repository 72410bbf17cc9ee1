from __future__ import annotations

import io
import json
import xml.etree.ElementTree as ET
from typing import TYPE_CHECKING, Any

from promptext.config import (
    DEFAULT_MAX_DEPTH,
    FENCE_LANGUAGES,
    FORMAT_ALIASES,
    PTX_SCHEMA,
    OutputFormat,
    resolve_format,
)
from promptext.encoder import encode
from promptext.exceptions import UnsupportedFormatError
from promptext.project import NodeType

if TYPE_CHECKING:
    from collections.abc import Callable

    from promptext.project import DirectoryNode, FileInfo, ProjectAnalysis, ProjectOutput

    FormatterFn = Callable[..., str]

FORMATTERS: dict[OutputFormat, FormatterFn] = {}


def register_formatter(fmt: OutputFormat) -> Callable[[FormatterFn], FormatterFn]:
    """Decorator to register a formatter function for an output format.

    Args:
        fmt (OutputFormat): The format the decorated function produces.

    Returns:
        Callable[[FormatterFn], FormatterFn]: A decorator that records the function
        in the FORMATTERS mapping and returns it unchanged.
    """

    def decorator(func: FormatterFn) -> FormatterFn:
        FORMATTERS[fmt] = func
        return func

    return decorator


def get_formatter(name: str | OutputFormat) -> FormatterFn:
    """Look up a formatter by format name or alias.

    Args:
        name (str | OutputFormat): e.g. "ptx", "toon", "toon-strict", "md"

    Raises:
        UnsupportedFormatError: if the name is not a known format.

    Returns:
        FormatterFn: the formatter function
    """
    fmt = resolve_format(str(name))
    if fmt is None or fmt not in FORMATTERS:
        raise UnsupportedFormatError(name=str(name), supported=tuple(FORMAT_ALIASES))
    return FORMATTERS[fmt]


def tree_to_directory_map(node: DirectoryNode) -> dict[str, list[str]]:
    """Flatten a directory tree into ``{directory path: [file names]}``.

    The root directory is keyed as ``"."``; directories without files are omitted.
    """
    structure: dict[str, list[str]] = {}

    def walk(cur: DirectoryNode, path: str) -> None:
        files = [c.name for c in cur.children if c.type == NodeType.FILE]
        if files:
            structure[path or "."] = files
        for child in cur.children:
            if child.type == NodeType.DIR:
                walk(child, f"{path}/{child.name}" if path else child.name)

    walk(node, "")
    return structure


def _sorted_files(files: list[FileInfo]) -> list[FileInfo]:
    return sorted(files, key=lambda f: f.path)


def _metadata_section(project: ProjectOutput) -> dict[str, Any] | None:
    if project.metadata is None:
        return None
    metadata: dict[str, Any] = {"language": project.metadata.language}
    if project.metadata.version:
        metadata["version"] = project.metadata.version
    if project.metadata.dependencies:
        metadata["dependencies"] = list(project.metadata.dependencies)
    if project.file_stats is not None:
        metadata["total_files"] = project.file_stats.total_files
        metadata["total_lines"] = project.file_stats.total_lines
    return metadata


def _git_section(project: ProjectOutput) -> dict[str, Any] | None:
    if project.git_info is None:
        return None
    git: dict[str, Any] = {
        "branch": project.git_info.branch,
        "commit": project.git_info.commit_hash,
    }
    if project.git_info.commit_message:
        git["message"] = project.git_info.commit_message
    return git


def _stats_section(project: ProjectOutput) -> dict[str, Any] | None:
    stats = project.file_stats
    if stats is None:
        return None
    section: dict[str, Any] = {
        "totalFiles": stats.total_files,
        "totalLines": stats.total_lines,
        "packages": stats.package_count,
    }
    if stats.files_by_type:
        section["fileTypes"] = [
            {"type": ext, "count": count} for ext, count in sorted(stats.files_by_type.items())
        ]
    return section


def _filters_section(project: ProjectOutput) -> dict[str, Any] | None:
    if project.filter_config is None:
        return None
    filters: dict[str, Any] = {}
    if project.filter_config.includes:
        filters["includes"] = list(project.filter_config.includes)
    if project.filter_config.excludes:
        filters["excludes"] = list(project.filter_config.excludes)
    return filters or None


def _analysis_categories(analysis: ProjectAnalysis) -> list[tuple[str, dict[str, str]]]:
    return [
        ("entryPoints", analysis.entry_points),
        ("configFiles", analysis.config_files),
        ("coreFiles", analysis.core_files),
        ("testFiles", analysis.test_files),
        ("documentation", analysis.documentation),
    ]


def _common_sections(project: ProjectOutput) -> dict[str, Any]:
    data: dict[str, Any] = {}
    if (metadata := _metadata_section(project)) is not None:
        data["metadata"] = metadata
    if (git := _git_section(project)) is not None:
        data["git"] = git
    if (stats := _stats_section(project)) is not None:
        data["stats"] = stats
    if project.directory_tree is not None and (structure := tree_to_directory_map(project.directory_tree)):
        data["structure"] = structure
    return data


def build_ptx_document(project: ProjectOutput) -> dict[str, Any]:
    """Build the PTX document: metadata, manifest and code keyed by file path.

    Args:
        project (ProjectOutput): the project to describe

    Returns:
        dict[str, Any]: native data ready for ``encode``
    """
    data: dict[str, Any] = {"promptext": {"schema": PTX_SCHEMA}}
    data.update(_common_sections(project))

    if (filters := _filters_section(project)) is not None:
        data["filters"] = filters

    if project.analysis is not None and not project.analysis.is_empty():
        data["analysis"] = {
            name: [{"path": path, "desc": desc} for path, desc in sorted(entries.items())]
            for name, entries in _analysis_categories(project.analysis)
            if entries
        }

    if project.files:
        files = _sorted_files(project.files)
        data["files"] = [{"path": f.path, "lines": f.line_count} for f in files]
        data["code"] = {f.path: f.content for f in files}

    return data


def build_strict_document(project: ProjectOutput) -> dict[str, Any]:
    """Build the strict TOON document, which keeps code as escaped single-line strings.

    Args:
        project (ProjectOutput): the project to describe

    Returns:
        dict[str, Any]: native data ready for ``encode``
    """
    data = _common_sections(project)
    if project.files:
        files = _sorted_files(project.files)
        data["files"] = [{"path": f.path, "ext": f.extension or "txt", "lines": f.line_count} for f in files]
        data["code"] = [{"path": f.path, "content": f.content} for f in files]
    return data


@register_formatter(OutputFormat.PTX)
def format_ptx(project: ProjectOutput, *, max_depth: int | None = DEFAULT_MAX_DEPTH) -> str:
    """Render a project as PTX, with file contents as block scalars."""
    return encode(build_ptx_document(project), max_depth=max_depth)


@register_formatter(OutputFormat.TOON_STRICT)
def format_toon_strict(project: ProjectOutput, *, max_depth: int | None = DEFAULT_MAX_DEPTH) -> str:
    """Render a project as strict TOON: every string on one line, code in a ``{content,path}`` table."""
    return encode(build_strict_document(project), max_depth=max_depth, block_scalars=False)


def build_tree_lines(node: DirectoryNode) -> list[str]:
    """Build a visual tree representation of a directory node.

    Args:
        node (DirectoryNode): the root of the tree

    Returns:
        list[str]: lines suitable for printing, starting with the root name
    """
    lines: list[str] = [node.name]

    def walk(cur: DirectoryNode, prefix: str) -> None:
        for idx, child in enumerate(cur.children):
            last = idx == len(cur.children) - 1
            branch = "└── " if last else "├── "
            is_dir = child.type == NodeType.DIR
            lines.append(prefix + branch + child.name + ("/" if is_dir else ""))
            if is_dir:
                walk(child, prefix + ("    " if last else "│   "))

    walk(node, "")
    return lines


@register_formatter(OutputFormat.MARKDOWN)
def format_markdown(project: ProjectOutput, *, max_depth: int | None = None) -> str:  # noqa: ARG001
    """Render a project as a markdown document.

    The document holds a metadata header, the project tree and one fenced
    block per file, using the file extension as the fence language.

    Args:
        project (ProjectOutput): the project to describe
        max_depth (int | None): accepted for signature compatibility; unused

    Returns:
        str: the markdown text, ending with a single newline
    """
    out = io.StringIO()
    if project.metadata is not None:
        out.write(f"Language: {project.metadata.language}\n")
        if project.metadata.version:
            out.write(f"Version: {project.metadata.version}\n")
        if project.metadata.dependencies:
            out.write("Dependencies:\n")
            for dep in project.metadata.dependencies:
                out.write(f"  - {dep}\n")
        out.write("\n")

    if project.directory_tree is not None:
        out.write("Project Structure:\n")
        out.write("```text\n")
        out.write("\n".join(build_tree_lines(project.directory_tree)))
        out.write("\n```\n")

    if project.files:
        out.write("\n## Source Files\n")
        for f in project.files:
            lang = FENCE_LANGUAGES.get(f".{f.extension.lower()}", f.extension or "text")
            out.write(f"\n### {f.path} ({f.line_count} lines)\n")
            out.write(f"```{lang}\n{f.content}\n```\n")

    return out.getvalue().rstrip() + "\n"


def _sub(parent: ET.Element, tag: str, text: object = None, **attrs: object) -> ET.Element:
    el = ET.SubElement(parent, tag, {k: str(v) for k, v in attrs.items()})
    if text is not None:
        el.text = str(text)
    return el


def _xml_tree_node(parent: ET.Element, node: DirectoryNode) -> None:
    el = _sub(parent, "node", name=node.name, type=node.type.value)
    for child in node.children:
        _xml_tree_node(el, child)


def build_xml_tree(project: ProjectOutput) -> ET.Element:
    """Build the ``<project>`` element holding every known section of the project.

    Sections appear in a fixed order: metadata, fileStats, directoryTree,
    gitInfo, analysis and files. Absent or empty parts are left out.

    Args:
        project (ProjectOutput): the project to describe

    Returns:
        ET.Element: the root element, not yet indented
    """
    root = ET.Element("project")
    if (meta := project.metadata) is not None:
        el = _sub(root, "metadata")
        _sub(el, "language", meta.language)
        if meta.version:
            _sub(el, "version", meta.version)
        if meta.dependencies:
            deps = _sub(el, "dependencies")
            for dep in meta.dependencies:
                _sub(deps, "dependency", dep)

    if (stats := project.file_stats) is not None:
        el = _sub(root, "fileStats")
        _sub(el, "totalFiles", stats.total_files)
        _sub(el, "totalLines", stats.total_lines)
        _sub(el, "packageCount", stats.package_count)
        if stats.files_by_type:
            types = _sub(el, "fileTypes")
            for ext, count in sorted(stats.files_by_type.items()):
                _sub(types, "type", count, ext=ext)

    if project.directory_tree is not None and project.directory_tree.children:
        el = _sub(root, "directoryTree", name=project.directory_tree.name)
        for child in project.directory_tree.children:
            _xml_tree_node(el, child)

    if (git := project.git_info) is not None:
        el = _sub(root, "gitInfo")
        _sub(el, "branch", git.branch)
        _sub(el, "commitHash", git.commit_hash)
        if git.commit_message:
            _sub(el, "commitMessage", git.commit_message)

    if project.analysis is not None and not project.analysis.is_empty():
        el = _sub(root, "analysis")
        for name, entries in _analysis_categories(project.analysis):
            if not entries:
                continue
            category = _sub(el, name)
            for path, desc in sorted(entries.items()):
                _sub(category, "file", desc, path=path)

    if project.files:
        el = _sub(root, "files")
        for f in _sorted_files(project.files):
            _sub(_sub(el, "file", path=f.path, lines=f.line_count), "content", f.content)
    return root


@register_formatter(OutputFormat.XML)
def format_xml(project: ProjectOutput, *, max_depth: int | None = None) -> str:  # noqa: ARG001
    """Render a project as an indented XML document; file contents are escaped, not wrapped in CDATA."""
    root = build_xml_tree(project)
    ET.indent(root, space="  ")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(root, encoding="unicode") + "\n"


def build_jsonl_records(project: ProjectOutput) -> list[dict[str, Any]]:
    """List the JSON Lines records for a project, each tagged with a ``type``.

    The ``metadata`` record always comes first, followed by ``git`` and
    ``filters`` when known, then one ``file`` record per file sorted by path.
    """
    records: list[dict[str, Any]] = [{"type": "metadata", **(_metadata_section(project) or {})}]
    if (git := _git_section(project)) is not None:
        records.append({"type": "git", **git})
    if (filters := _filters_section(project)) is not None:
        records.append({"type": "filters", **filters})
    records.extend(
        {"type": "file", "path": f.path, "lines": f.line_count, "content": f.content}
        for f in _sorted_files(project.files)
    )
    return records


@register_formatter(OutputFormat.JSONL)
def format_jsonl(project: ProjectOutput, *, max_depth: int | None = None) -> str:  # noqa: ARG001
    """Render a project as JSON Lines, one record per line."""
    buf = io.StringIO()
    for item in build_jsonl_records(project):
        buf.write(json.dumps(item, ensure_ascii=False) + "\n")
    return buf.getvalue()
