"""promptext: export a source tree as one compact document for an LLM prompt.

Overview
--------
The exporter walks a project directory, reads its text files, scrapes the
manifest (pyproject.toml, go.mod, package.json, ...) and renders everything as a
single document written to stdout:

1) **PTX (`--format ptx`, default)**: compact TOON-style notation with an
   explicit manifest, file contents kept verbatim as ``|`` block scalars.
2) **Strict TOON (`--format toon-strict`)**: the same data with file contents
   as escaped single-line strings in a ``{content,path}`` table.
3) **Markdown (`--format markdown`)**: a tree plus fenced code blocks.
4) **XML (`--format xml`)**: the same sections as indented elements.
5) **JSONL (`--format jsonl`)**: one JSON record per line, for pipelines.

`--info` keeps the summary sections and drops file contents; `--dry-run` only
lists the files that would be exported, without reading them.

Defaults can be set per project in ``.promptext.yml`` (extensions, excludes,
verbose, format) and per environment in ``.env`` (``PROMPTEXT_FORMAT``,
``PROMPTEXT_MAX_DEPTH``). Command-line flags take precedence.

Usage
-----
    promptext --repo . --extension .py,.toml > context.ptx
    promptext --format md --exclude "tests/**" --log-file export.log
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from promptext import __version__
from promptext.config import DEFAULT_MAX_BYTES
from promptext.exceptions import PromptextError
from promptext.file_manipulation import collect_files, load_files, select_files, to_rel_path
from promptext.formatters import get_formatter
from promptext.logging import logger, setup_logging
from promptext.metadata import detect_metadata
from promptext.project import (
    FilterConfig,
    ProjectOutput,
    analyze_files,
    build_directory_tree,
    compute_statistics,
)
from promptext.settings import Settings, env_default_format, env_default_max_depth, load_env_defaults, load_file_config

if TYPE_CHECKING:
    from collections.abc import Sequence


def split_csv(values: Sequence[str]) -> list[str]:
    """Flatten repeated, comma-separated flag values into one list."""
    return [part.strip() for v in values for part in v.split(",") if part.strip()]


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    p = argparse.ArgumentParser(
        prog="promptext",
        description="Export a source tree as a compact document for LLM prompts.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--repo", type=str, default=".", help="Repository root.")
    p.add_argument(
        "--format",
        "-f",
        type=str,
        default=env_default_format(),
        help="Output format: ptx (default), toon-strict, markdown, xml, jsonl. Aliases: toon, toon-v1.3, md.",
    )
    p.add_argument(
        "--extension",
        "-e",
        dest="extensions",
        action="append",
        default=[],
        help="Comma list of extensions to include (e.g. .py,.go). Replaces the config file list.",
    )
    p.add_argument(
        "--include",
        dest="include_glob",
        action="append",
        default=[],
        help="Include glob (repeatable, comma list allowed).",
    )
    p.add_argument(
        "--exclude",
        "-x",
        dest="exclude_glob",
        action="append",
        default=[],
        help="Exclude glob (repeatable, comma list allowed). Added to the config file excludes.",
    )
    p.add_argument(
        "--max-bytes",
        type=int,
        default=DEFAULT_MAX_BYTES,
        help="Skip files larger than this many bytes.",
    )
    p.add_argument(
        "--max-depth",
        type=int,
        default=env_default_max_depth(),
        help="Maximum nesting depth accepted by the encoder.",
    )
    p.add_argument("--no-metadata", action="store_true", help="Do not scrape manifest files.")
    p.add_argument("--info", "-i", action="store_true", help="Print the project summary without file contents.")
    p.add_argument("--dry-run", action="store_true", help="List the files that would be exported without reading them.")
    p.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    p.add_argument("--log-file", type=str, default="", help="Log file path.")
    args = p.parse_args(argv)
    args.extensions = split_csv(args.extensions)
    args.include_glob = split_csv(args.include_glob)
    args.exclude_glob = split_csv(args.exclude_glob)
    try:
        settings = Settings(**vars(args))
    except ValidationError as e:
        p.error(str(e))
    return settings


def select_project_files(repo: Path, settings: Settings) -> list[Path]:
    """Walk ``repo`` and keep the files matching the extension and glob filters."""
    return select_files(
        collect_files(repo),
        repo,
        extensions=settings.extensions,
        includes=settings.include_glob,
        excludes=settings.exclude_glob,
    )


def build_project(repo: Path, settings: Settings) -> ProjectOutput:
    """Collect files and metadata under ``repo`` into a ProjectOutput.

    Args:
        repo (Path): the resolved repository root
        settings (Settings): merged settings

    Returns:
        ProjectOutput: the project description handed to the formatter
    """
    infos = load_files(select_project_files(repo, settings), repo, max_bytes=settings.max_bytes)
    rels = [i.path for i in infos]
    logger.info("Collected %d files from %s", len(infos), to_rel_path(repo, Path.cwd()))

    return ProjectOutput(
        directory_tree=build_directory_tree(repo.name, rels),
        metadata=None if settings.no_metadata else detect_metadata(repo),
        files=infos,
        file_stats=compute_statistics(infos),
        analysis=analyze_files(rels),
        filter_config=FilterConfig(
            includes=[*settings.extensions, *settings.include_glob],
            excludes=settings.exclude_glob,
        ),
    )


def render_dry_run(repo: Path, settings: Settings) -> str:
    """List the relative paths that would be exported, one per line, without reading any file."""
    rels = [to_rel_path(p, repo) for p in select_project_files(repo, settings)]
    logger.info("Dry run: %d files would be exported", len(rels))
    return "\n".join(rels)


def main(argv: Sequence[str] | None = None) -> int:
    load_env_defaults()
    settings = parse_args(argv)
    repo = Path(settings.repo).resolve()
    if not repo.is_dir():
        logger.error("Repository root is not a directory: %s", repo)
        return 1

    try:
        settings = load_file_config(repo).merge_with(settings)
        if settings.log_file or settings.verbose:
            setup_logging(settings.log_file or None, verbose=settings.verbose, force=True)
        formatter = get_formatter(settings.format)
        if settings.dry_run:
            output = render_dry_run(repo, settings)
        else:
            project = build_project(repo, settings)
            if settings.info:
                project = project.model_copy(update={"files": []})
            output = formatter(project, max_depth=settings.max_depth)
    except PromptextError as e:
        logger.error("Export failed: %s", e)  # noqa: TRY400
        return 1

    if output:
        sys.stdout.write(output.rstrip("\n") + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
