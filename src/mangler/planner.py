# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Plan short replacement names for class fields and exported symbols."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from mangler.classes import ClassHierarchy, ClassRecord
from mangler.model import DeclarationKind, Definition
from mangler.service import SemanticService
from mangler.short_ident import ShortIdent

logger = logging.getLogger(__name__)


def fill_in_replacements(hierarchy: ClassHierarchy, index: int) -> None:
    """Assign short names to the mangled fields of a class and its ancestors.

    Ancestors are filled first. A class that already has replacements is
    left untouched, so calling this for every class fills each exactly once.

    Args:
        hierarchy: Linked class records after the leakage pass.
        index: Index of the class to fill.
    """
    chain: list[int] = []
    current: int | None = index
    while current is not None and hierarchy.records[current].replacements is None:
        chain.append(current)
        current = hierarchy.records[current].parent
    for pending in reversed(chain):
        _fill_one(hierarchy, pending)


def _fill_one(hierarchy: ClassHierarchy, index: int) -> None:
    record = hierarchy.records[index]
    record.replacements = {}

    def is_taken_in_family(name: str) -> bool:
        if record.is_name_taken(name):
            return True
        for ancestor in hierarchy.ancestors(index):
            if ancestor.is_name_taken(name):
                return True
        for descendant in hierarchy.descendants(index):
            if descendant.is_name_taken(name):
                return True
        return False

    ident_pool = ShortIdent("", is_taken_in_family)
    for name, info in record.fields.items():
        if info.should_mangle:
            record.replacements[name] = ident_pool.next()


def fill_all_replacements(hierarchy: ClassHierarchy) -> None:
    """Fill replacements for every class in the hierarchy."""
    for index in range(len(hierarchy)):
        fill_in_replacements(hierarchy, index)
    logger.info("Done creating class replacements (classes=%s)", len(hierarchy))


def lookup_short_name(
    hierarchy: ClassHierarchy, record: ClassRecord, name: str
) -> str | None:
    """Return the short name used for ``name`` when renaming it in ``record``.

    Overriding members share the replacement of the topmost protected
    ancestor field of the same name.

    Args:
        hierarchy: Linked class records with replacements filled.
        record: Class declaring the field.
        name: Field name.

    Returns:
        Replacement name, or ``None`` when the field is not mangled.
    """
    value = record.replacements.get(name) if record.replacements else None
    parent = hierarchy.parent_of(record)
    while parent is not None:
        inherited = parent.fields.get(name)
        if (
            parent.replacements
            and name in parent.replacements
            and inherited is not None
            and inherited.visibility == "protected"
        ):
            value = parent.replacements[name]
        parent = hierarchy.parent_of(parent)
    return value


@dataclass
class ExportedSymbol:
    """Represent an exported top-level class, function, or const.

    Attributes:
        file_name: File declaring the symbol.
        name: Declared name.
        kind: Declaration kind.
        offset: Offset of the declared name.
        replacement_name: Short name allocated for the symbol.
        opted_out: Whether the declaration carries the opt-out marker.
        ambient: Whether the declaration is a ``declare`` declaration.
    """

    file_name: str
    name: str
    kind: DeclarationKind
    offset: int
    replacement_name: str
    opted_out: bool = False
    ambient: bool = False

    @property
    def key(self) -> tuple[str, int]:
        """Return the declaration identity."""
        return self.file_name, self.offset

    def should_mangle(self, new_name: str | None = None) -> bool:
        """Check whether renaming the symbol is worthwhile and allowed.

        Args:
            new_name: Candidate name; defaults to the allocated replacement.

        Returns:
            True when the candidate is strictly shorter and not opted out.
        """
        candidate = self.replacement_name if new_name is None else new_name
        if len(candidate) >= len(self.name):
            return False
        return not self.opted_out

    def locations(self, service: SemanticService) -> list[Definition]:
        """Return every definition site that is renamed together.

        A const whose name also declares other entities (such as a type of the
        same name) is renamed at every such site.

        Args:
            service: Semantic service answering alias queries.

        Returns:
            Definition sites to query for rename locations.
        """
        own = Definition(file_name=self.file_name, offset=self.offset)
        if self.kind != "const":
            return [own]
        aliases = service.find_alias_definitions(self.file_name, self.offset)
        if len(aliases) > 1:
            return aliases
        return [own]


def is_skipped_file(file_name: str, skipped_files: Iterable[str]) -> bool:
    """Check whether exported names of a file must keep their names.

    Args:
        file_name: File declaring exported symbols.
        skipped_files: File stems excluded from exported-name mangling.

    Returns:
        True for declaration files and excluded stems.
    """
    if file_name.endswith(".d.ts"):
        return True
    anchored = f"/{file_name}"
    return any(
        anchored.endswith(f"/{stem}.ts") or anchored.endswith(f"/{stem}.tsx")
        for stem in skipped_files
    )
