"""Detect the project's language, version and dependencies from its manifest files."""

from __future__ import annotations

import json
import re
from typing import TYPE_CHECKING, Any

import tomlkit
from packaging.requirements import InvalidRequirement, Requirement
from tomlkit.exceptions import TOMLKitError

from promptext.logging import logger
from promptext.project import Metadata

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

_GO_DIRECTIVE = re.compile(r"^go\s+(?P<version>\S+)\s*$", re.MULTILINE)
_GO_REQUIRE_BLOCK = re.compile(r"^require\s*\((?P<body>.*?)^\)", re.MULTILINE | re.DOTALL)
_GO_REQUIRE_LINE = re.compile(r"^require[ \t]+(?P<mod>[^\s(]+)[ \t]+(?P<version>\S+)", re.MULTILINE)


def _read_toml(path: Path) -> dict[str, Any]:
    return _require_table(tomlkit.parse(path.read_text(encoding="utf-8")).unwrap(), path)


def _require_table(data: object, path: Path) -> dict[str, Any]:
    if not isinstance(data, dict):
        msg = f"{path.name}: top-level value must be an object, got {type(data).__name__}"
        raise ValueError(msg)  # noqa: TRY004
    return data


def _table(data: dict[str, Any], key: str) -> dict[str, Any]:
    """Return ``data[key]`` if it is a mapping, else an empty dict."""
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _text(value: object) -> str:
    return value if isinstance(value, str) else ""


def parse_requirement_line(line: str, *, source: str) -> str | None:
    """Normalize one requirement line to ``name[extras]specifier``.

    Args:
        line (str): the raw requirement
        source (str): file name used in warnings

    Returns:
        str | None: the normalized requirement, or None if the line is not a valid PEP 508 requirement
    """
    try:
        req = Requirement(line)
    except InvalidRequirement:
        logger.warning("Ignoring invalid requirement in %s: %s", source, line)
        return None
    extras = f"[{','.join(sorted(req.extras))}]" if req.extras else ""
    return f"{req.name}{extras}{req.specifier}"


def read_requirements(path: Path) -> list[str]:
    """Read dependency names from a requirements file, skipping comments and pip options."""
    out: list[str] = []
    for raw in path.read_text(encoding="utf-8").splitlines():
        line = raw.split(" #", 1)[0].strip()
        if not line or line.startswith(("#", "-")):
            continue
        if (req := parse_requirement_line(line, source=path.name)) is not None:
            out.append(req)
    return out


def from_pyproject(path: Path) -> Metadata:
    doc = _read_toml(path)
    project = _table(doc, "project")
    poetry_deps = dict(_table(_table(_table(doc, "tool"), "poetry"), "dependencies"))

    version = _text(project.get("requires-python")) or _text(poetry_deps.pop("python", ""))
    poetry_deps.pop("python", None)

    deps: list[str] = []
    raw_deps = project.get("dependencies")
    for raw in raw_deps if isinstance(raw_deps, list) else []:
        if isinstance(raw, str) and (req := parse_requirement_line(raw, source=path.name)) is not None:
            deps.append(req)
    for name, spec in poetry_deps.items():
        deps.append(f"{name} {spec}" if isinstance(spec, str) and spec != "*" else name)

    if not deps and (requirements := path.with_name("requirements.txt")).is_file():
        deps = read_requirements(requirements)
    return Metadata(language="Python", version=version.lstrip("^~"), dependencies=deps)


def from_requirements(path: Path) -> Metadata:
    return Metadata(language="Python", dependencies=read_requirements(path))


def from_go_mod(path: Path) -> Metadata:
    text = path.read_text(encoding="utf-8")
    version = m.group("version") if (m := _GO_DIRECTIVE.search(text)) else ""
    deps: list[str] = []
    for block in _GO_REQUIRE_BLOCK.finditer(text):
        for raw in block.group("body").splitlines():
            line = raw.split("//", 1)[0].strip()
            if line:
                deps.append(" ".join(line.split()[:2]))
    deps.extend(f"{m.group('mod')} {m.group('version')}" for m in _GO_REQUIRE_LINE.finditer(text))
    return Metadata(language="Go", version=version, dependencies=deps)


def from_package_json(path: Path) -> Metadata:
    data = _require_table(json.loads(path.read_text(encoding="utf-8")), path)
    node = _text(_table(data, "engines").get("node"))
    deps = [f"{name}@{spec}" for name, spec in sorted(_table(data, "dependencies").items())]
    deps.extend(f"{name}@{spec} (dev)" for name, spec in sorted(_table(data, "devDependencies").items()))
    return Metadata(
        language="JavaScript/Node.js",
        version=f"requires Node {node}" if node else "",
        dependencies=deps,
    )


def from_cargo_toml(path: Path) -> Metadata:
    doc = _read_toml(path)
    package = _table(doc, "package")
    deps: list[str] = []
    for name, spec in _table(doc, "dependencies").items():
        if isinstance(spec, dict):
            spec = spec.get("version", "")  # noqa: PLW2901
        deps.append(f"{name} {spec}".strip())
    return Metadata(
        language="Rust",
        version=str(package.get("rust-version", "") or package.get("edition", "")),
        dependencies=deps,
    )


# Checked in order; the first manifest present wins.
MANIFEST_READERS: dict[str, Callable[[Path], Metadata]] = {
    "pyproject.toml": from_pyproject,
    "go.mod": from_go_mod,
    "package.json": from_package_json,
    "requirements.txt": from_requirements,
    "Cargo.toml": from_cargo_toml,
}


def detect_metadata(repo: Path) -> Metadata | None:
    """Detect project metadata from the first recognized manifest file.

    Args:
        repo (Path): the repository root

    Returns:
        Metadata | None: the detected metadata, or None if no manifest is present
            or the manifest cannot be parsed
    """
    for name, reader in MANIFEST_READERS.items():
        path = repo / name
        if not path.is_file():
            continue
        try:
            metadata = reader(path)
        except (OSError, ValueError, TypeError, AttributeError, TOMLKitError) as e:
            logger.warning("Failed to parse %s: %s", path, e)
            return None
        logger.debug("Detected %s project from %s", metadata.language, name)
        return metadata
    return None
