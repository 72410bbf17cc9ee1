from __future__ import annotations

import os
from pathlib import Path

import yaml
from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from promptext.config import CONFIG_FILE_NAME, DEFAULT_MAX_BYTES, DEFAULT_MAX_DEPTH, OutputFormat
from promptext.exceptions import ConfigError
from promptext.logging import logger

ENV_FILE = find_dotenv(usecwd=True)


def load_env_defaults(env_file: str = ENV_FILE) -> None:
    """Load ``PROMPTEXT_*`` defaults from the nearest ``.env`` file without overriding the environment."""
    if env_file:
        load_dotenv(env_file, override=False)


def env_default_format() -> str:
    return os.environ.get("PROMPTEXT_FORMAT", "")


def env_default_max_depth() -> int:
    raw = os.environ.get("PROMPTEXT_MAX_DEPTH", "")
    return int(raw) if raw.strip().isdigit() else DEFAULT_MAX_DEPTH


class Settings(BaseModel):
    """Configuration settings for one export run."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    repo: Path = Field(default_factory=Path.cwd, description="Repository root.")
    format: str = Field(default="", description="Output format (ptx, toon-strict, markdown, xml, jsonl).")
    extensions: list[str] = Field(default_factory=list, description="Only include these extensions.")
    include_glob: list[str] = Field(default_factory=list, description="Include glob.")
    exclude_glob: list[str] = Field(default_factory=list, description="Exclude glob.")
    max_bytes: int = Field(default=DEFAULT_MAX_BYTES, ge=0, description="Skip files larger than this.")
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=1, description="Maximum encoder nesting depth.")
    no_metadata: bool = Field(default=False, description="Do not scrape manifest files.")
    info: bool = Field(default=False, description="Print the project summary without file contents.")
    dry_run: bool = Field(default=False, description="List the selected files without reading them.")
    verbose: bool = Field(default=False, description="Enable debug logging.")
    log_file: str = Field(default="", description="Log file path.")


class FileConfig(BaseModel):
    """Project-level defaults read from ``.promptext.yml``."""

    model_config = ConfigDict(extra="ignore")

    extensions: list[str] = Field(default_factory=list)
    excludes: list[str] = Field(default_factory=list)
    verbose: bool = False
    format: str = ""

    def merge_with(self, settings: Settings) -> Settings:
        """Merge file defaults into command-line settings.

        Flags win: flag extensions replace file extensions, flag excludes are
        appended to file excludes, verbose is on if either source enables it,
        and the format falls back from flag to file to ``ptx``.

        Args:
            settings (Settings): settings parsed from the command line

        Returns:
            Settings: a new settings object with the merged values
        """
        return settings.model_copy(
            update={
                "extensions": list(settings.extensions or self.extensions),
                "exclude_glob": [*self.excludes, *settings.exclude_glob],
                "verbose": settings.verbose or self.verbose,
                "format": settings.format or self.format or OutputFormat.PTX.value,
            },
        )


def load_file_config(repo: Path) -> FileConfig:
    """Load ``.promptext.yml`` from the repository root.

    Args:
        repo (Path): the repository root

    Raises:
        ConfigError: if the file exists but is not valid YAML or has the wrong shape

    Returns:
        FileConfig: the parsed configuration, or defaults if the file is absent
    """
    path = repo / CONFIG_FILE_NAME
    if not path.is_file():
        return FileConfig()
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(path=path, message=str(e)) from e
    if not isinstance(data, dict):
        raise ConfigError(path=path, message="top-level value must be a mapping")
    try:
        config = FileConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(path=path, message=str(e)) from e
    logger.debug("Loaded project config from %s", path)
    return config
