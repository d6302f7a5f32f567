# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Domain models shared by the mangling phases."""

from dataclasses import dataclass
from typing import Literal

FieldVisibility = Literal["public", "protected", "private"]

DeclarationKind = Literal["class", "function", "const"]


@dataclass
class Field:
    """Represent one class member considered for mangling.

    Attributes:
        name: Member name without quotes or brackets.
        visibility: Declared visibility; promoted to ``public`` by the leakage pass.
        offset: Character offset of the member name token.
        line: One-based line of the member name token.
    """

    name: str
    visibility: FieldVisibility
    offset: int
    line: int = 0

    @property
    def should_mangle(self) -> bool:
        """Return whether the field is scheduled for renaming."""
        return self.visibility in ("private", "protected")


@dataclass(frozen=True)
class Definition:
    """Represent a declaration site answered by the semantic service.

    Attributes:
        file_name: File holding the declaration.
        offset: Character offset of the declared name.
    """

    file_name: str
    offset: int


@dataclass(frozen=True)
class RenameLocation:
    """Represent one source span that changes when a symbol is renamed.

    Attributes:
        file_name: File holding the span.
        offset: Character offset where the span starts.
        length: Span length in characters.
        prefix_text: Literal text emitted before the new name.
        suffix_text: Literal text emitted after the new name.
    """

    file_name: str
    offset: int
    length: int
    prefix_text: str = ""
    suffix_text: str = ""


@dataclass(frozen=True)
class Edit:
    """Represent one splice applied to a file.

    Attributes:
        file_name: File receiving the edit.
        offset: Character offset where the replaced span starts.
        length: Replaced span length in characters.
        new_text: Replacement text.
    """

    file_name: str
    offset: int
    length: int
    new_text: str


@dataclass(frozen=True)
class RenderedFile:
    """Represent final file content after mangling.

    Attributes:
        text: Rewritten (or untouched) file text.
        source_map: Serialized source map; ``None`` when no edit was applied.
    """

    text: str
    source_map: str | None = None


@dataclass(frozen=True)
class LeakageViolation:
    """Represent an ancestor protected field forced public by a descendant.

    Attributes:
        field_name: Shared member name.
        descendant_site: ``file:line`` of the public descendant member.
        ancestor_site: ``'name' from file:line`` of the promoted ancestor member.
    """

    field_name: str
    descendant_site: str
    ancestor_site: str


@dataclass
class MangleSummary:
    """Represent counters collected over one mangling run."""

    classes: int = 0
    exported_declarations: int = 0
    renames_queued: int = 0
    files_edited: int = 0
    saved_chars: int = 0
