from pathlib import Path

import pytest

from promptext import cli

FILES = {
    "main.go": "package main\n\nfunc main() {}\n",
    "internal/config.go": "package internal\n",
    "go.mod": "module example.com/demo\n\ngo 1.22\n\nrequire github.com/spf13/cobra v1.8.0\n",
}


def make_go_repo(root: Path) -> Path:
    for rel, content in FILES.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def test_end_to_end_ptx_export(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    repo = make_go_repo(tmp_path)

    exit_code = cli.main(["--repo", str(repo)])

    assert exit_code == 0
    expected = [
        "analysis:",
        "  configFiles[1]{desc,path}:",
        "    Configuration file,go.mod",
        "  coreFiles[1]{desc,path}:",
        "    Core implementation,internal/config.go",
        "  entryPoints[1]{desc,path}:",
        "    Entry point,main.go",
        "code:",
        '  "go.mod": |',
        "    module example.com/demo",
        "",
        "    go 1.22",
        "",
        "    require github.com/spf13/cobra v1.8.0",
        "",
        '  "internal/config.go": |',
        "    package internal",
        "",
        '  "main.go": |',
        "    package main",
        "",
        "    func main() {}",
        "",
        "files[3]{lines,path}:",
        "  6,go.mod",
        "  2,internal/config.go",
        "  4,main.go",
        "metadata:",
        "  dependencies[1]: github.com/spf13/cobra v1.8.0",
        "  language: Go",
        "  total_files: 3",
        "  total_lines: 12",
        '  version: "1.22"',
        "promptext:",
        "  schema: ptx/v2.0",
        "stats:",
        "  fileTypes[2]{count,type}:",
        "    2,go",
        "    1,mod",
        "  packages: 2",
        "  totalFiles: 3",
        "  totalLines: 12",
        "structure:",
        '  "."[2]: go.mod,main.go',
        "  internal[1]: config.go",
    ]
    assert capsys.readouterr().out == "\n".join(expected) + "\n"


def test_end_to_end_strict_export_is_line_oriented(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    repo = make_go_repo(tmp_path)

    exit_code = cli.main(["--repo", str(repo), "--format", "toon-v1.3", "--extension", "go"])

    assert exit_code == 0
    lines = capsys.readouterr().out.splitlines()
    assert lines[:3] == [
        "code[2]{content,path}:",
        '  "package internal\\n",internal/config.go',
        '  "package main\\n\\nfunc main() {}\\n",main.go',
    ]
    assert "files[2]{ext,lines,path}:" in lines
    assert all(line.strip() for line in lines)


def test_end_to_end_markdown_export(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    repo = make_go_repo(tmp_path)

    exit_code = cli.main(["--repo", str(repo), "-f", "md", "--no-metadata"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert out.startswith(f"Project Structure:\n```text\n{repo.name}\n├── internal/\n│   └── config.go\n")
    assert "### go.mod (6 lines)\n```mod\n" in out
    assert "### main.go (4 lines)\n```go\npackage main\n" in out
