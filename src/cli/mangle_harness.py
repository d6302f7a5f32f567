# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Run the TypeScript mangler as a copy-and-transform flow."""

import argparse
import logging
import os
import shutil
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

import pathspec
from mangler import MangleError, MangleOptions, Mangler, RenderedFile, TsConfig, TsConfigError
from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CopySummary:
    """Represent copy phase counters."""

    files_copied: int
    sources_copied: int
    dirs_created: int
    paths_skipped_by_gitignore: int
    paths_skipped_git_dir: int
    elapsed_ms: int


@dataclass(frozen=True)
class TransformSummary:
    """Represent transform phase counters."""

    files_rendered: int
    files_edited: int
    source_maps_written: int
    classes: int
    exported_declarations: int
    renames_queued: int
    saved_chars: int
    elapsed_ms: int


class ValidationError(RuntimeError):
    """Represent user input validation failure."""


class TransformError(RuntimeError):
    """Represent transform phase failure."""


class IgnoreMatcher:
    """Match project paths against the .gitignore files above them.

    Each .gitignore is compiled relative to its own directory. Deeper files
    are consulted last, so their verdict (including negations) wins.
    """

    def __init__(self, specs: dict[str, pathspec.GitIgnoreSpec]) -> None:
        """Initialize matcher.

        Args:
            specs: Directory relative to the project root ("" for the root)
                to the patterns of the .gitignore in that directory.
        """
        self._specs = sorted(
            specs.items(), key=lambda item: (item[0].count("/") + bool(item[0]), item[0])
        )

    @classmethod
    def from_project_root(cls, input_root: Path) -> "IgnoreMatcher":
        """Compile every .gitignore below the project root.

        Args:
            input_root: Project root.

        Returns:
            Configured ignore matcher.

        Raises:
            OSError: If .gitignore files cannot be read.
            UnicodeDecodeError: If .gitignore files contain invalid UTF-8.
        """
        specs: dict[str, pathspec.GitIgnoreSpec] = {}
        for ignore_path in input_root.rglob(".gitignore"):
            if ".git" in ignore_path.relative_to(input_root).parts:
                continue
            base = ignore_path.parent.relative_to(input_root).as_posix()
            lines = ignore_path.read_text(encoding="utf-8").splitlines()
            specs["" if base == "." else base] = pathspec.GitIgnoreSpec.from_lines(lines)
        logger.debug("Loaded ignore files (count=%s)", len(specs))
        return cls(specs)

    def matches(self, relative_path: str, is_dir: bool) -> bool:
        """Check whether a path should be left out of the copy.

        Args:
            relative_path: Project-relative POSIX path.
            is_dir: Whether the path is a directory.

        Returns:
            True when the last .gitignore with an opinion excludes the path.
        """
        normalized = relative_path.replace(os.sep, "/").strip("/")
        if not normalized:
            return False
        ignored = False
        for base, spec in self._specs:
            if base and not normalized.startswith(f"{base}/"):
                continue
            local = normalized[len(base) + 1 :] if base else normalized
            verdict = spec.check_file(f"{local}/" if is_dir else local).include
            if verdict is not None:
                ignored = verdict
        return ignored


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(prog="ts-mangle")
    parser.add_argument("--project", required=True, help="Path of the tsconfig.json file.")
    parser.add_argument("--output", required=True, help="Output folder path.")
    parser.add_argument(
        "--strict-public",
        nargs="*",
        default=None,
        metavar="NAME",
        help="Fail unless every protected field made public is listed here.",
    )
    parser.add_argument(
        "--skip-file",
        action="append",
        default=[],
        metavar="STEM",
        help="File stem whose exported names keep their names (repeatable).",
    )
    parser.add_argument("--map-root", default=None, help="Source map root URL.")
    parser.add_argument(
        "--workers", type=int, default=2, help="Concurrent rename queries."
    )
    return parser


def run(argv: list[str], stdout: TextIO, stderr: TextIO) -> int:
    """Run mangle command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning("Argument parsing failed (argv=%s)", argv)
        return 2

    console = Console(file=stdout, force_terminal=False, color_system="truecolor")
    _emit_marker(console=console, phase="validation", state="start")
    try:
        project_file, output_path = _validate_paths(
            project_path=Path(args.project), output_path=Path(args.output)
        )
        options = MangleOptions(
            skipped_files=tuple(args.skip_file),
            strict_public=frozenset(args.strict_public)
            if args.strict_public is not None
            else None,
            max_workers=args.workers,
            map_root=args.map_root,
        )
        config = TsConfig.load(project_file)
    except (ValidationError, ValueError, TsConfigError) as exc:
        logger.warning("Validation failed (error=%s)", exc)
        stderr.write(f"{exc}\n")
        return 2
    _emit_marker(console=console, phase="validation", state="done")

    input_path = config.project_dir
    try:
        matcher = IgnoreMatcher.from_project_root(input_root=input_path)
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Failed to read .gitignore files (error=%s)", exc)
        stderr.write(f"Failed to read .gitignore files: {exc}\n")
        return 2

    _emit_marker(console=console, phase="copy", state="start")
    try:
        copy_summary = _copy_project(
            input_root=input_path, output_root=output_path, matcher=matcher
        )
    except OSError as exc:
        logger.warning("Copy failed (error=%s)", exc)
        stderr.write(f"Copy failed: {exc}\n")
        return 2
    _emit_marker(console=console, phase="copy", state="done")
    _emit_summary(
        console=console,
        summary={
            "files_copied": copy_summary.files_copied,
            "sources_copied": copy_summary.sources_copied,
            "dirs_created": copy_summary.dirs_created,
            "paths_skipped_by_gitignore": copy_summary.paths_skipped_by_gitignore,
            "paths_skipped_git_dir": copy_summary.paths_skipped_git_dir,
            "elapsed_ms": copy_summary.elapsed_ms,
        },
    )

    _emit_marker(console=console, phase="mangle", state="start")
    try:
        transform_summary = _mangle_project(
            config=config, options=options, output_root=output_path
        )
    except TransformError as exc:
        logger.warning("Mangle failed (error=%s)", exc)
        stderr.write(f"Mangle failed: {exc}\n")
        return 2
    _emit_marker(console=console, phase="mangle", state="done")
    _emit_summary(
        console=console,
        summary={
            "files_rendered": transform_summary.files_rendered,
            "files_edited": transform_summary.files_edited,
            "source_maps_written": transform_summary.source_maps_written,
            "classes": transform_summary.classes,
            "exported_declarations": transform_summary.exported_declarations,
            "renames_queued": transform_summary.renames_queued,
            "saved_chars": transform_summary.saved_chars,
            "elapsed_ms": transform_summary.elapsed_ms,
        },
    )
    console.print("status=success")
    return 0


def _emit_marker(console: Console, phase: str, state: str) -> None:
    console.print(f"{phase}:{state}")


def _emit_summary(console: Console, summary: dict[str, int]) -> None:
    fields = " ".join(f"{key}={value}" for key, value in summary.items())
    console.print(fields)


def _validate_paths(project_path: Path, output_path: Path) -> tuple[Path, Path]:
    """Validate required project file and output path constraints.

    Args:
        project_path: ``tsconfig.json`` path from user args.
        output_path: Output path from user args.

    Returns:
        Normalized absolute project file and output paths.

    Raises:
        ValidationError: If path constraints are not met.
    """
    project_abs = project_path.resolve()
    output_abs = output_path.resolve()

    if not project_abs.exists():
        raise ValidationError(f"Project file does not exist: {project_abs}")
    if not project_abs.is_file():
        raise ValidationError(f"Project path must be a file: {project_abs}")
    input_abs = project_abs.parent
    if output_abs.exists() and not output_abs.is_dir():
        raise ValidationError(f"Output path must be a directory: {output_abs}")
    if output_abs.exists() and any(output_abs.iterdir()):
        raise ValidationError(f"Output path must be empty: {output_abs}")
    if input_abs == output_abs:
        raise ValidationError("Input and output paths must not overlap")
    if input_abs in output_abs.parents or output_abs in input_abs.parents:
        raise ValidationError("Input and output paths must not overlap")
    return project_abs, output_abs


def _copy_project(
    input_root: Path, output_root: Path, matcher: IgnoreMatcher
) -> CopySummary:
    """Mirror the project directory into the output directory.

    Ignored directories and ``.git`` are pruned before the walk descends
    into them. Symlinks are recreated as links, never followed.

    Args:
        input_root: Project directory holding ``tsconfig.json``.
        output_root: Empty output directory.
        matcher: Ignore matcher for the project.

    Returns:
        Copy summary counters.
    """
    started = time.monotonic()
    output_root.mkdir(parents=True, exist_ok=True)
    files_copied = 0
    sources_copied = 0
    dirs_created = 0
    skipped_by_gitignore = 0
    skipped_git_dir = 0

    for current, dir_names, file_names in os.walk(input_root):
        current_path = Path(current)
        relative_dir = current_path.relative_to(input_root)
        descend: list[str] = []
        for name in sorted(dir_names):
            relative = (relative_dir / name).as_posix()
            if name == ".git":
                skipped_git_dir += 1
                continue
            if matcher.matches(relative_path=relative, is_dir=True):
                skipped_by_gitignore += 1
                continue
            if (current_path / name).is_symlink():
                _copy_link(current_path / name, output_root / relative)
                files_copied += 1
                continue
            (output_root / relative).mkdir(exist_ok=True)
            dirs_created += 1
            descend.append(name)
        dir_names[:] = descend

        for name in sorted(file_names):
            relative = (relative_dir / name).as_posix()
            if matcher.matches(relative_path=relative, is_dir=False):
                skipped_by_gitignore += 1
                continue
            if (current_path / name).is_symlink():
                _copy_link(current_path / name, output_root / relative)
            else:
                shutil.copy2(current_path / name, output_root / relative)
            files_copied += 1
            if name.endswith((".ts", ".tsx")):
                sources_copied += 1

    elapsed_ms = int(round((time.monotonic() - started) * 1000))
    logger.debug(
        "Project copied (files=%s sources=%s ignored=%s)",
        files_copied,
        sources_copied,
        skipped_by_gitignore,
    )
    return CopySummary(
        files_copied=files_copied,
        sources_copied=sources_copied,
        dirs_created=dirs_created,
        paths_skipped_by_gitignore=skipped_by_gitignore,
        paths_skipped_git_dir=skipped_git_dir,
        elapsed_ms=elapsed_ms,
    )


def _copy_link(source: Path, destination: Path) -> None:
    if destination.is_symlink() or destination.exists():
        destination.unlink()
    destination.symlink_to(os.readlink(source))


def _mangle_project(
    config: TsConfig, options: MangleOptions, output_root: Path
) -> TransformSummary:
    """Mangle the original project and write results into the copy.

    Args:
        config: Loaded project settings.
        options: Engine settings.
        output_root: Output project root mirroring the project directory.

    Returns:
        Transform summary counters.

    Raises:
        TransformError: If reading, mangling, or writing fails.
    """
    started = time.monotonic()
    try:
        mangler = Mangler.from_tsconfig(config, options)
        contents = mangler.compute_new_file_contents()
    except (OSError, UnicodeDecodeError, MangleError) as exc:
        logger.warning("Mangling failed (project=%s error=%s)", config.path, exc)
        raise TransformError(str(exc)) from exc

    source_maps = 0
    for file_name, rendered in contents.items():
        destination = output_root / Path(file_name).relative_to(config.project_dir)
        try:
            _write_rendered(destination, rendered)
        except OSError as exc:
            logger.warning("Failed writing file (path=%s error=%s)", destination, exc)
            raise TransformError(str(exc)) from exc
        if rendered.source_map is not None:
            source_maps += 1

    elapsed_ms = int(round((time.monotonic() - started) * 1000))
    summary = mangler.summary
    return TransformSummary(
        files_rendered=len(contents),
        files_edited=summary.files_edited,
        source_maps_written=source_maps,
        classes=summary.classes,
        exported_declarations=summary.exported_declarations,
        renames_queued=summary.renames_queued,
        saved_chars=summary.saved_chars,
        elapsed_ms=elapsed_ms,
    )


def _write_rendered(destination: Path, rendered: RenderedFile) -> None:
    destination.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = destination.with_suffix(f"{destination.suffix}.tmp")
    tmp_path.write_text(rendered.text, encoding="utf-8")
    tmp_path.replace(destination)
    if rendered.source_map is not None:
        map_path = destination.with_name(f"{destination.name}.map")
        map_path.write_text(rendered.source_map, encoding="utf-8")


def main() -> None:
    """Run mangle CLI."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
