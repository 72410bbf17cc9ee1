from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from promptext.config import DEFAULT_MAX_BYTES, DEFAULT_MAX_DEPTH
from promptext.exceptions import ConfigError
from promptext.settings import (
    FileConfig,
    Settings,
    env_default_format,
    env_default_max_depth,
    load_env_defaults,
    load_file_config,
)

if TYPE_CHECKING:
    from pytest_mock import MockerFixture


@pytest.mark.unit
def test_settings_defaults() -> None:
    settings = Settings()

    assert settings.repo.resolve() == Path.cwd().resolve()
    assert not settings.format
    assert settings.extensions == []
    assert settings.max_bytes == DEFAULT_MAX_BYTES
    assert settings.max_depth == DEFAULT_MAX_DEPTH
    assert settings.no_metadata is False


@pytest.mark.unit
def test_file_config_merge_prefers_flags() -> None:
    file_config = FileConfig(extensions=[".go"], excludes=["vendor/"], verbose=True, format="markdown")
    settings = Settings(extensions=[".py"], exclude_glob=["tests/**"], format="toon-strict")

    merged = file_config.merge_with(settings)

    assert merged.extensions == [".py"]
    assert merged.exclude_glob == ["vendor/", "tests/**"]
    assert merged.verbose is True
    assert merged.format == "toon-strict"
    assert settings.exclude_glob == ["tests/**"]


@pytest.mark.unit
def test_file_config_merge_falls_back_to_file_then_default() -> None:
    assert FileConfig(extensions=[".go"], format="md").merge_with(Settings()).extensions == [".go"]
    assert FileConfig(format="md").merge_with(Settings()).format == "md"
    assert FileConfig().merge_with(Settings()).format == "ptx"
    assert FileConfig().merge_with(Settings(verbose=True)).verbose is True


@pytest.mark.unit
def test_load_file_config_absent_returns_defaults(tmp_path: Path) -> None:
    assert load_file_config(tmp_path) == FileConfig()


@pytest.mark.unit
def test_load_file_config_reads_yaml(tmp_path: Path) -> None:
    (tmp_path / ".promptext.yml").write_text(
        "extensions:\n  - .go\n  - .md\nexcludes:\n  - vendor/\nverbose: true\nformat: markdown\nunknown: 1\n",
        encoding="utf-8",
    )

    assert load_file_config(tmp_path) == FileConfig(
        extensions=[".go", ".md"],
        excludes=["vendor/"],
        verbose=True,
        format="markdown",
    )


@pytest.mark.unit
def test_load_file_config_empty_file(tmp_path: Path) -> None:
    (tmp_path / ".promptext.yml").write_text("", encoding="utf-8")

    assert load_file_config(tmp_path) == FileConfig()


@pytest.mark.unit
@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("extensions: [.go\n", "while parsing"),
        ("- .go\n- .md\n", "top-level value must be a mapping"),
        ("verbose: [1, 2]\n", "verbose"),
    ],
)
def test_load_file_config_rejects_invalid_files(tmp_path: Path, content: str, message: str) -> None:
    path = tmp_path / ".promptext.yml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError) as exc_info:
        load_file_config(tmp_path)

    assert exc_info.value.path == path
    assert message in str(exc_info.value)


@pytest.mark.unit
def test_env_defaults(mocker: MockerFixture) -> None:
    mocker.patch.dict(os.environ, {"PROMPTEXT_FORMAT": "md", "PROMPTEXT_MAX_DEPTH": "25"})

    assert env_default_format() == "md"
    assert env_default_max_depth() == 25


@pytest.mark.unit
def test_env_default_max_depth_ignores_garbage(mocker: MockerFixture) -> None:
    mocker.patch.dict(os.environ, {"PROMPTEXT_MAX_DEPTH": "deep"})

    assert env_default_max_depth() == DEFAULT_MAX_DEPTH


@pytest.mark.unit
def test_load_env_defaults_does_not_override_environment(tmp_path: Path, mocker: MockerFixture) -> None:
    env_file = tmp_path / ".env"
    env_file.write_text("PROMPTEXT_FORMAT=md\nPROMPTEXT_MAX_DEPTH=7\n", encoding="utf-8")
    mocker.patch.dict(os.environ, {"PROMPTEXT_FORMAT": "toon-strict"})
    os.environ.pop("PROMPTEXT_MAX_DEPTH", None)

    load_env_defaults(str(env_file))

    assert os.environ["PROMPTEXT_FORMAT"] == "toon-strict"
    assert os.environ["PROMPTEXT_MAX_DEPTH"] == "7"
