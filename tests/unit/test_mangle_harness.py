# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for the mangle CLI harness."""

import io
import json
import re
from pathlib import Path

from cli.mangle_harness import IgnoreMatcher, run


def _write_file(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _strip_ansi(text: str) -> str:
    return re.sub(r"\x1b\[[0-9;]*m", "", text)


def _write_project(root: Path) -> None:
    _write_file(root / ".gitignore", "dist/\n*.log\n")
    _write_file(root / "tsconfig.json", '{\n  // sources\n  "include": ["src"],\n}\n')
    _write_file(
        root / "src" / "counter.ts",
        "export class Counter {\n"
        "  private current = 0;\n"
        "  increment(): number {\n"
        "    return ++this.current;\n"
        "  }\n"
        "}\n",
    )
    _write_file(
        root / "src" / "main.ts",
        "import { Counter } from './counter';\n"
        "export const counterInstance = new Counter();\n",
    )
    _write_file(root / "README.md", "# demo\n")
    _write_file(root / "dist" / "bundle.js", "ignored\n")
    _write_file(root / "debug.log", "ignored\n")


def test_ph8_mgl_001_cli_requires_project_and_output_arguments() -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run([], stdout=stdout, stderr=stderr)

    assert exit_code == 2


def test_ph8_mgl_002_cli_fails_when_project_file_is_missing(tmp_path: Path) -> None:
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["--project", str(tmp_path / "missing.json"), "--output", str(tmp_path / "out")],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 2
    assert "Project file does not exist" in stderr.getvalue()


def test_ph8_mgl_003_cli_fails_when_output_is_non_empty(tmp_path: Path) -> None:
    input_path = tmp_path / "input"
    _write_project(input_path)
    output_path = tmp_path / "out"
    _write_file(output_path / "existing.txt", "x\n")
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["--project", str(input_path / "tsconfig.json"), "--output", str(output_path)],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 2
    assert "Output path must be empty" in stderr.getvalue()


def test_ph8_mgl_004_cli_fails_when_output_is_inside_project(tmp_path: Path) -> None:
    _write_project(tmp_path)
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        ["--project", str(tmp_path / "tsconfig.json"), "--output", str(tmp_path / "out")],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 2
    assert "must not overlap" in stderr.getvalue()


def test_ph8_mgl_005_cli_rejects_invalid_worker_count(tmp_path: Path) -> None:
    input_path = tmp_path / "input"
    _write_project(input_path)
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        [
            "--project",
            str(input_path / "tsconfig.json"),
            "--output",
            str(tmp_path / "out"),
            "--workers",
            "0",
        ],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 2
    assert "max_workers must be > 0" in stderr.getvalue()


def test_ph8_mgl_006_cli_copies_project_and_writes_mangled_sources(tmp_path: Path) -> None:
    input_path = tmp_path / "input"
    output_path = tmp_path / "out"
    _write_project(input_path)
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        [
            "--project",
            str(input_path / "tsconfig.json"),
            "--output",
            str(output_path),
            "--skip-file",
            "main",
            "--map-root",
            "https://maps.example/",
        ],
        stdout=stdout,
        stderr=stderr,
    )

    output = _strip_ansi(stdout.getvalue())
    assert exit_code == 0, stderr.getvalue()
    assert "validation:start" in output
    assert "copy:done" in output
    assert "mangle:done" in output
    assert "status=success" in output
    assert "classes=1" in output
    assert "sources_copied=2" in output
    assert (output_path / "README.md").exists()
    assert not (output_path / "dist").exists()
    assert not (output_path / "debug.log").exists()

    counter = (output_path / "src" / "counter.ts").read_text(encoding="utf-8")
    main = (output_path / "src" / "main.ts").read_text(encoding="utf-8")
    assert "current" not in counter
    assert "export class $a" in counter
    assert "import { $a } from './counter';" in main
    assert "counterInstance" in main
    source_map = json.loads(
        (output_path / "src" / "counter.ts.map").read_text(encoding="utf-8")
    )
    assert source_map["sourceRoot"] == "https://maps.example/"
    assert source_map["sources"] == ["src/counter.ts"]
    assert (input_path / "src" / "counter.ts").read_text(encoding="utf-8").count("current") == 2


def test_ph8_mgl_007_cli_reports_strict_leakage_failure(tmp_path: Path) -> None:
    input_path = tmp_path / "input"
    _write_file(input_path / "tsconfig.json", "{}")
    _write_file(
        input_path / "base.ts",
        "export class Base {\n  protected secret = 1;\n}\n"
        "export class Child extends Base {\n  public secret = 2;\n}\n",
    )
    stdout = io.StringIO()
    stderr = io.StringIO()

    exit_code = run(
        [
            "--project",
            str(input_path / "tsconfig.json"),
            "--output",
            str(tmp_path / "out"),
            "--strict-public",
        ],
        stdout=stdout,
        stderr=stderr,
    )

    assert exit_code == 2
    assert "Protected fields have been made PUBLIC" in stderr.getvalue()


def test_ph8_mgl_008_nested_gitignore_overrides_parent(tmp_path: Path) -> None:
    _write_file(tmp_path / ".gitignore", "*.log\n!keep.log\nbuild/\n")
    _write_file(tmp_path / "src" / ".gitignore", "generated.ts\n!debug.log\n")
    _write_file(tmp_path / ".git" / ".gitignore", "*\n")

    matcher = IgnoreMatcher.from_project_root(tmp_path)

    assert matcher.matches("debug.log", is_dir=False)
    assert not matcher.matches("keep.log", is_dir=False)
    assert not matcher.matches("src/debug.log", is_dir=False)
    assert matcher.matches("src/trace.log", is_dir=False)
    assert matcher.matches("src/generated.ts", is_dir=False)
    assert not matcher.matches("generated.ts", is_dir=False)
    assert matcher.matches("build", is_dir=True)
    assert not matcher.matches("build", is_dir=False)
    assert not matcher.matches("src/main.ts", is_dir=False)
