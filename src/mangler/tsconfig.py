# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Load ``tsconfig.json`` projects and discover their source files."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

import pathspec

logger = logging.getLogger(__name__)

_DEFAULT_INCLUDE: tuple[str, ...] = ("**/*",)
_DEFAULT_EXCLUDE: tuple[str, ...] = ("node_modules", "bower_components", "jspm_packages")
_SOURCE_SUFFIXES: tuple[str, ...] = (".ts", ".tsx")


class TsConfigError(RuntimeError):
    """Represent an unreadable or malformed project file."""


@dataclass(frozen=True)
class TsConfig:
    """Represent the project settings used by the mangler.

    Attributes:
        path: Absolute path of the ``tsconfig.json`` file.
        compiler_options: Raw ``compilerOptions`` mapping.
        files: Explicitly listed files, relative to the project directory.
        include: Include patterns, relative to the project directory.
        exclude: Exclude patterns, relative to the project directory.
    """

    path: Path
    compiler_options: dict[str, object] = field(default_factory=dict)
    files: tuple[str, ...] = ()
    include: tuple[str, ...] = _DEFAULT_INCLUDE
    exclude: tuple[str, ...] = _DEFAULT_EXCLUDE

    @property
    def project_dir(self) -> Path:
        """Return the directory holding the project file."""
        return self.path.parent

    @property
    def map_root(self) -> str | None:
        """Return ``compilerOptions.mapRoot`` when configured."""
        return _optional_str(self.compiler_options.get("mapRoot"))

    @property
    def source_root(self) -> str | None:
        """Return ``compilerOptions.sourceRoot`` when configured."""
        return _optional_str(self.compiler_options.get("sourceRoot"))

    @property
    def base_url(self) -> Path | None:
        """Return the absolute ``compilerOptions.baseUrl`` when configured."""
        value = _optional_str(self.compiler_options.get("baseUrl"))
        if value is None:
            return None
        return (self.project_dir / value).resolve()

    @property
    def out_dir(self) -> str | None:
        """Return ``compilerOptions.outDir`` when configured."""
        return _optional_str(self.compiler_options.get("outDir"))

    @classmethod
    def load(cls, path: Path) -> "TsConfig":
        """Read a project file written in JSON with comments.

        Args:
            path: Path of the ``tsconfig.json`` file.

        Returns:
            Parsed project settings.

        Raises:
            TsConfigError: If the file cannot be read or parsed.
        """
        resolved = path.resolve()
        try:
            raw = resolved.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise TsConfigError(f"Cannot read project file {resolved}: {exc}") from exc
        try:
            document = json.loads(strip_json_comments(raw))
        except json.JSONDecodeError as exc:
            raise TsConfigError(f"Malformed project file {resolved}: {exc}") from exc
        if not isinstance(document, dict):
            raise TsConfigError(f"Project file must hold an object: {resolved}")

        compiler_options = document.get("compilerOptions") or {}
        if not isinstance(compiler_options, dict):
            raise TsConfigError(f"compilerOptions must be an object: {resolved}")
        exclude = _string_tuple(document, "exclude", resolved)
        if exclude is None:
            exclude = _DEFAULT_EXCLUDE
            out_dir = _optional_str(compiler_options.get("outDir"))
            if out_dir is not None:
                exclude = exclude + (out_dir,)
        return cls(
            path=resolved,
            compiler_options=compiler_options,
            files=_string_tuple(document, "files", resolved) or (),
            include=_string_tuple(document, "include", resolved) or _DEFAULT_INCLUDE,
            exclude=exclude,
        )

    def discover_files(self) -> list[Path]:
        """Return the project source files in sorted order.

        Returns:
            Absolute paths of explicit ``files`` plus every ``.ts``/``.tsx``
            file matched by ``include`` and not matched by ``exclude``.
        """
        include_spec = pathspec.PathSpec.from_lines(
            "gitwildmatch", [_anchor(pattern) for pattern in self.include]
        )
        exclude_spec = pathspec.PathSpec.from_lines(
            "gitwildmatch", [_anchor(pattern) for pattern in self.exclude]
        )
        discovered: set[Path] = set()
        for name in self.files:
            candidate = (self.project_dir / name).resolve()
            if candidate.is_file():
                discovered.add(candidate)
            else:
                logger.warning("Listed project file not found (path=%s)", candidate)

        for candidate in self.project_dir.rglob("*"):
            if not candidate.is_file() or not candidate.name.endswith(_SOURCE_SUFFIXES):
                continue
            relative = candidate.relative_to(self.project_dir).as_posix()
            if not include_spec.match_file(relative):
                continue
            if exclude_spec.match_file(relative):
                continue
            discovered.add(candidate.resolve())
        return sorted(discovered)


def strip_json_comments(text: str) -> str:
    """Remove comments and trailing commas from JSON-with-comments text.

    Args:
        text: Raw file content.

    Returns:
        Plain JSON text.
    """
    result: list[str] = []
    index = 0
    length = len(text)
    in_string = False
    while index < length:
        char = text[index]
        if in_string:
            result.append(char)
            if char == "\\" and index + 1 < length:
                result.append(text[index + 1])
                index += 2
                continue
            if char == '"':
                in_string = False
            index += 1
            continue
        if char == '"':
            in_string = True
            result.append(char)
            index += 1
            continue
        if text.startswith("//", index):
            newline = text.find("\n", index)
            index = length if newline == -1 else newline
            continue
        if text.startswith("/*", index):
            close = text.find("*/", index + 2)
            index = length if close == -1 else close + 2
            continue
        if char == ",":
            lookahead = index + 1
            while lookahead < length and text[lookahead] in " \t\r\n":
                lookahead += 1
            if lookahead < length and text[lookahead] in "}]":
                index += 1
                continue
        result.append(char)
        index += 1
    return "".join(result)


def _anchor(pattern: str) -> str:
    normalized = pattern.replace("\\", "/")
    if normalized.startswith("./"):
        normalized = normalized[2:]
    if normalized.startswith(("/", "**")):
        return normalized
    return f"/{normalized}"


def _optional_str(value: object) -> str | None:
    return value if isinstance(value, str) and value else None


def _string_tuple(
    document: dict[str, object], key: str, path: Path
) -> tuple[str, ...] | None:
    value = document.get(key)
    if value is None:
        return None
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise TsConfigError(f"{key} must be a list of strings: {path}")
    return tuple(value)
