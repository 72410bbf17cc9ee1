from __future__ import annotations

import pytest

from promptext.project import (
    DirectoryNode,
    FileInfo,
    NodeType,
    ProjectAnalysis,
    analyze_files,
    build_directory_tree,
    compute_statistics,
)


def names(node: DirectoryNode) -> list[str]:
    return [c.name for c in node.children]


@pytest.mark.unit
def test_build_directory_tree_lists_dirs_before_files() -> None:
    tree = build_directory_tree("repo", ["src/b.py", "src/A.py", "README.md", "src/sub/x.py"])

    assert tree.name == "repo"
    assert tree.type is NodeType.DIR
    assert names(tree) == ["src", "README.md"]
    src = tree.children[0]
    assert names(src) == ["sub", "A.py", "b.py"]
    assert src.children[0].type is NodeType.DIR
    assert names(src.children[0]) == ["x.py"]


@pytest.mark.unit
def test_build_directory_tree_normalizes_separators_and_duplicates() -> None:
    tree = build_directory_tree("repo", ["src\\a.py", "src/a.py", "  "])

    assert names(tree) == ["src"]
    assert names(tree.children[0]) == ["a.py"]


@pytest.mark.unit
def test_build_directory_tree_accepts_dunder_directory_names() -> None:
    tree = build_directory_tree("repo", ["__files__/x.py", "main.py", "__files__/sub/y.py"])

    assert names(tree) == ["__files__", "main.py"]
    bucket = tree.children[0]
    assert bucket.type is NodeType.DIR
    assert names(bucket) == ["sub", "x.py"]
    assert names(bucket.children[0]) == ["y.py"]


@pytest.mark.unit
@pytest.mark.parametrize(
    ("content", "expected"),
    [("", 1), ("one line", 1), ("a\nb", 2), ("a\nb\n", 3)],
)
def test_file_info_line_count(content: str, expected: int) -> None:
    assert FileInfo(path="f.txt", content=content).line_count == expected


@pytest.mark.unit
def test_file_info_extension() -> None:
    assert FileInfo(path="src/app.PY", content="").extension == "PY"
    assert FileInfo(path="Makefile", content="").extension == ""
    assert FileInfo(path="a/archive.tar.gz", content="").extension == "gz"


@pytest.mark.unit
def test_compute_statistics() -> None:
    files = [
        FileInfo(path="main.py", content="a\nb"),
        FileInfo(path="src/util.py", content="x"),
        FileInfo(path="src/LICENSE", content="text\n"),
    ]

    stats = compute_statistics(files)

    assert stats.total_files == 3
    assert stats.total_lines == 2 + 1 + 2
    assert stats.package_count == 2
    assert stats.files_by_type == {"py": 2, "txt": 1}


@pytest.mark.unit
def test_compute_statistics_empty() -> None:
    stats = compute_statistics([])

    assert stats.total_files == 0
    assert stats.total_lines == 0
    assert stats.package_count == 0
    assert stats.files_by_type == {}


@pytest.mark.unit
def test_analyze_files_groups_by_first_matching_role() -> None:
    analysis = analyze_files(
        [
            "main.go",
            "internal/config/config.go",
            "tests/test_app.py",
            "pkg/x_test.go",
            "README.md",
            "docs/guide.md",
            "go.mod",
            "config.yaml",
            "LICENSE",
            "scripts/tool.sh",
        ],
    )

    assert analysis.entry_points == {"main.go": "Entry point"}
    assert analysis.core_files == {"internal/config/config.go": "Core implementation"}
    assert analysis.test_files == {"pkg/x_test.go": "Test file", "tests/test_app.py": "Test file"}
    assert analysis.documentation == {
        "LICENSE": "License information",
        "README.md": "Project documentation",
        "docs/guide.md": "Documentation",
    }
    assert analysis.config_files == {"config.yaml": "Configuration file", "go.mod": "Configuration file"}


@pytest.mark.unit
def test_project_analysis_is_empty() -> None:
    assert ProjectAnalysis().is_empty()
    assert analyze_files(["scripts/tool.sh"]).is_empty()
    assert not analyze_files(["main.py"]).is_empty()
