# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Apply rename edits to file text and emit source maps."""

import logging
import posixpath
from dataclasses import dataclass

from mangler.errors import OverlappingEditError
from mangler.model import Edit, RenderedFile
from mangler.source import LineIndex, utf16_length
from mangler.sourcemap import SourceMapGenerator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _PendingMapping:
    original_line: int
    original_column: int
    generated_column: int
    name: str | None = None


@dataclass(frozen=True)
class ApplyResult:
    """Represent one rendered file and its size reduction.

    Attributes:
        rendered: Final text and optional source map.
        saved_chars: Characters removed by the applied edits.
        applied_edits: Number of edits applied after de-duplication.
    """

    rendered: RenderedFile
    saved_chars: int
    applied_edits: int


def apply_edits(
    file_name: str,
    text: str,
    edits: list[Edit],
    relative_file_name: str,
    source_root: str | None = None,
) -> ApplyResult:
    """Apply every edit of one file and build its source map.

    Edits are applied from the end of the file towards its start, so the
    offsets of edits not yet applied stay valid. Identical edits at one
    offset collapse into one.

    Args:
        file_name: File receiving the edits.
        text: Original file text.
        edits: Edits targeting the file.
        relative_file_name: Source path recorded in the source map.
        source_root: Source map root.

    Returns:
        Rendered file, saved characters, and applied edit count.

    Raises:
        OverlappingEditError: If two edits disagree at one offset or overlap.
    """
    if not edits:
        return ApplyResult(rendered=RenderedFile(text=text), saved_chars=0, applied_edits=0)

    ordered = sorted(edits, key=lambda item: item.offset, reverse=True)
    characters = list(text)
    lines = LineIndex(text)
    mappings_by_line: dict[int, list[_PendingMapping]] = {}
    saved_chars = 0
    applied = 0
    last_edit: Edit | None = None

    for edit in ordered:
        if last_edit is not None and last_edit.offset == edit.offset:
            if last_edit.length != edit.length or last_edit.new_text != edit.new_text:
                logger.error(
                    "Overlapping edit (file=%s offset=%s edits=%s)",
                    file_name,
                    edit.offset,
                    len(edits),
                )
                raise OverlappingEditError(file_name, last_edit, edit)
            continue
        if last_edit is not None and edit.offset + edit.length > last_edit.offset:
            logger.error(
                "Overlapping edit span (file=%s offset=%s next_offset=%s)",
                file_name,
                edit.offset,
                last_edit.offset,
            )
            raise OverlappingEditError(file_name, last_edit, edit)
        last_edit = edit

        end = edit.offset + edit.length
        mangled_name = "".join(characters[edit.offset : end])
        characters[edit.offset : end] = [edit.new_text]
        saved_chars += len(mangled_name) - len(edit.new_text)
        applied += 1

        line, column = lines.line_and_utf16_column(edit.offset)
        mappings = mappings_by_line.setdefault(line, [])
        mappings[0:0] = [
            _PendingMapping(
                original_line=line + 1,
                original_column=column,
                generated_column=column,
                name=mangled_name,
            ),
            _PendingMapping(
                original_line=line + 1,
                original_column=column + utf16_length(mangled_name),
                generated_column=column + utf16_length(edit.new_text),
            ),
        ]

    generator = SourceMapGenerator(
        file=posixpath.basename(file_name), source_root=source_root
    )
    generator.set_source_content(relative_file_name, text)
    for mappings in mappings_by_line.values():
        line_delta = 0
        for mapping in mappings:
            generator.add_mapping(
                generated=(mapping.original_line, mapping.generated_column - line_delta),
                original=(mapping.original_line, mapping.original_column),
                source=relative_file_name,
                name=mapping.name,
            )
            line_delta += mapping.original_column - mapping.generated_column

    return ApplyResult(
        rendered=RenderedFile(text="".join(characters), source_map=generator.to_json()),
        saved_chars=saved_chars,
        applied_edits=applied,
    )
