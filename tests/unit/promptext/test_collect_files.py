from __future__ import annotations

from pathlib import Path

import pytest

from promptext.file_manipulation import (
    clean_extensions,
    clean_globs,
    collect_files,
    load_files,
    looks_like_text,
    matches_glob,
    select_files,
    to_rel_path,
)


def write(path: Path, content: str | bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.unit
def test_clean_globs_strips_and_normalizes() -> None:
    globs = ["  src/**/*.py ", "\\tests\\*.py", "", "   "]

    assert clean_globs(globs) == ["src/**/*.py", "/tests/*.py"]


@pytest.mark.unit
def test_clean_extensions_adds_dot_and_lowercases() -> None:
    assert clean_extensions(["py", ".GO", " ", " .md "]) == {".py", ".go", ".md"}


@pytest.mark.unit
@pytest.mark.parametrize(
    ("rel", "globs", "expected"),
    [
        ("vendor/lib/a.go", ["vendor"], True),
        ("src/a_test.go", ["*_test.go"], True),
        ("tests/unit/test_a.py", ["tests/**"], True),
        ("src/a.go", ["docs", "*.md"], False),
        ("a.go", [], False),
    ],
)
def test_matches_glob(rel: str, globs: list[str], expected: bool) -> None:
    assert matches_glob(rel, globs) is expected


@pytest.mark.unit
def test_to_rel_path_uses_posix_separators(tmp_path: Path) -> None:
    assert to_rel_path(tmp_path / "src" / "a.py", tmp_path) == "src/a.py"
    assert to_rel_path(Path("/elsewhere/a.py"), tmp_path) == "/elsewhere/a.py"


@pytest.mark.unit
def test_collect_files_skips_default_names(tmp_path: Path) -> None:
    keep = write(tmp_path / "src" / "a.py", "print('a')\n")
    other = write(tmp_path / "b.txt", "b\n")
    write(tmp_path / "node_modules" / "x" / "index.js", "module.exports = 1\n")
    write(tmp_path / ".git" / "config", "[core]\n")
    write(tmp_path / "src" / "__pycache__" / "a.cpython-312.pyc", b"\x00\x01")
    write(tmp_path / "src" / ".DS_Store", b"\x00")

    assert collect_files(tmp_path) == [other.resolve(), keep.resolve()]


@pytest.mark.unit
def test_select_files_respects_extensions_includes_excludes(tmp_path: Path) -> None:
    main = write(tmp_path / "src" / "main.py", "print('ok')\n")
    util = write(tmp_path / "src" / "Util.py", "x = 1\n")
    test = write(tmp_path / "tests" / "test_main.py", "def test_ok(): ...\n")
    readme = write(tmp_path / "README.md", "# demo\n")
    files = [readme, test, util, main, main, tmp_path / "missing.py"]

    assert select_files(files, tmp_path, extensions=["py"]) == [main, util, test]
    assert select_files(files, tmp_path, includes=["src"]) == [main, util]
    assert select_files(files, tmp_path, excludes=["tests/**", "*.md"]) == [main, util]
    assert select_files(files, tmp_path) == [readme, main, util, test]


@pytest.mark.unit
def test_looks_like_text(tmp_path: Path) -> None:
    assert looks_like_text(write(tmp_path / "a.txt", "héllo\n"))
    assert looks_like_text(write(tmp_path / "empty.txt", ""))
    assert not looks_like_text(write(tmp_path / "b.bin", b"abc\x00def"))
    assert not looks_like_text(write(tmp_path / "c.bin", b"\xff\xfe\xfa"))
    assert not looks_like_text(tmp_path)
    assert not looks_like_text(tmp_path / "missing.txt")


@pytest.mark.unit
def test_looks_like_text_tolerates_character_cut_at_sniff_boundary(tmp_path: Path) -> None:
    path = write(tmp_path / "accents.txt", "é" * 10)

    assert looks_like_text(path, sniff_bytes=5)
    assert not looks_like_text(write(tmp_path / "truncated.txt", "é".encode()[:1]), sniff_bytes=5)


@pytest.mark.unit
def test_load_files_skips_binary_and_oversized_files(tmp_path: Path) -> None:
    small = write(tmp_path / "src" / "small.py", "x = 1\ny = 2")
    big = write(tmp_path / "big.txt", "y" * 100)
    binary = write(tmp_path / "logo.png", b"\x89PNG\x00\x00")

    infos = load_files([big, binary, small], tmp_path, max_bytes=50)

    assert [i.path for i in infos] == ["src/small.py"]
    assert infos[0].content == "x = 1\ny = 2"
    assert infos[0].line_count == 2


@pytest.mark.unit
def test_load_files_sorts_by_relative_path(tmp_path: Path) -> None:
    b = write(tmp_path / "b.py", "b")
    a = write(tmp_path / "A.py", "a")
    c = write(tmp_path / "sub" / "c.py", "c")

    infos = load_files([c, b, a], tmp_path, max_bytes=1000)

    assert [i.path for i in infos] == ["A.py", "b.py", "sub/c.py"]
