"""Collect, filter and read the files of a project tree."""

from __future__ import annotations

import codecs
import fnmatch
import os
from pathlib import Path
from typing import TYPE_CHECKING

from promptext.config import SKIPPED_NAMES
from promptext.logging import logger
from promptext.project import FileInfo

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

SNIFF_BYTES = 8192


def to_rel_path(path: Path, root: Path) -> str:
    """Return ``path`` relative to ``root`` with forward slashes.

    Paths outside ``root`` are returned unchanged.
    """
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)


def looks_like_text(path: Path, sniff_bytes: int = SNIFF_BYTES) -> bool:
    """Guess whether a file holds UTF-8 text from its first bytes.

    Args:
        path (Path): the file to inspect
        sniff_bytes (int): how many leading bytes to read

    Returns:
        bool: False for directories, unreadable files, NUL bytes or invalid UTF-8
    """
    if not path.is_file():
        return False
    try:
        with path.open("rb") as fh:
            head = fh.read(sniff_bytes)
    except OSError:
        return False
    if b"\x00" in head:
        return False
    # final=False tolerates a multi-byte sequence cut at the sniff boundary
    decoder = codecs.getincrementaldecoder("utf-8")()
    try:
        decoder.decode(head, final=len(head) < sniff_bytes)
    except UnicodeDecodeError:
        return False
    return True


def collect_files(repo: Path) -> list[Path]:
    """List the regular files under ``repo``, skipping ``SKIPPED_NAMES`` at any depth.

    Args:
        repo (Path): the directory to walk

    Returns:
        list[Path]: resolved file paths in walk order
    """
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(repo):
        dirnames[:] = sorted(d for d in dirnames if d not in SKIPPED_NAMES)
        base = Path(dirpath)
        for name in sorted(filenames):
            candidate = base / name
            if name not in SKIPPED_NAMES and candidate.is_file():
                found.append(candidate.resolve())
    return found


def clean_globs(globs: Iterable[str]) -> list[str]:
    """Drop blank patterns and turn backslashes into forward slashes."""
    return [g.strip().replace("\\", "/") for g in globs if g and g.strip()]


def clean_extensions(extensions: Iterable[str]) -> set[str]:
    """Lower-case extensions and make sure each starts with a dot (``py`` -> ``.py``)."""
    out: set[str] = set()
    for ext in extensions:
        e = ext.strip().lower()
        if e:
            out.add(e if e.startswith(".") else f".{e}")
    return out


def matches_glob(rel: str, globs: Sequence[str]) -> bool:
    """Match a relative path, or any of its parent directories, against glob patterns."""
    parts = rel.split("/")
    candidates = [rel, *("/".join(parts[:i]) for i in range(1, len(parts)))]
    return any(fnmatch.fnmatch(c, g) for g in globs for c in candidates)


def select_files(
    files: Sequence[Path],
    repo: Path,
    *,
    extensions: Sequence[str] = (),
    includes: Sequence[str] = (),
    excludes: Sequence[str] = (),
) -> list[Path]:
    """Keep the files that pass the extension, include and exclude filters.

    Args:
        files (Sequence[Path]): candidate file paths
        repo (Path): the root the globs are relative to
        extensions (Sequence[str]): allowed extensions; empty allows all
        includes (Sequence[str]): if given, a file must match one of these globs
        excludes (Sequence[str]): a file matching one of these globs is dropped

    Returns:
        list[Path]: the kept files, without duplicates, sorted case-insensitively by relative path
    """
    allowed = clean_extensions(extensions)
    inc = clean_globs(includes)
    exc = clean_globs(excludes)

    kept: dict[str, Path] = {}
    for f in files:
        if not f.is_file():
            continue
        rel = to_rel_path(f, repo)
        if allowed and f.suffix.lower() not in allowed:
            continue
        if inc and not matches_glob(rel, inc):
            continue
        if exc and matches_glob(rel, exc):
            continue
        kept[rel] = f
    return [kept[rel] for rel in sorted(kept, key=str.lower)]


def load_files(files: Sequence[Path], repo: Path, *, max_bytes: int) -> list[FileInfo]:
    """Read text files into FileInfo records.

    Oversized, binary and undecodable files are skipped and logged.

    Args:
        files (Sequence[Path]): file paths to read
        repo (Path): the root used for each record's relative path
        max_bytes (int): files larger than this are skipped

    Returns:
        list[FileInfo]: records sorted case-insensitively by path
    """
    infos: list[FileInfo] = []
    for f in files:
        rel = to_rel_path(f, repo)
        try:
            size = f.stat().st_size
            if size > max_bytes:
                logger.warning("Skipping %s: %d bytes exceeds limit of %d", rel, size, max_bytes)
                continue
            if not looks_like_text(f):
                logger.debug("Skipping binary file %s", rel)
                continue
            content = f.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Skipping %s: %s", rel, e)
            continue
        infos.append(FileInfo(path=rel, content=content))
    return sorted(infos, key=lambda i: i.path.lower())
