# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Class declarations, their fields, and the single-inheritance hierarchy."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from tree_sitter import Node

from mangler.errors import DuplicateDeclarationError, HierarchyCycleError, MangleError
from mangler.model import Field, FieldVisibility
from mangler.service import SemanticService
from mangler.source import SourceFile
from mangler.syntax import (
    MEMBER_NODE_TYPES,
    PARAMETER_NODE_TYPES,
    accessibility,
    class_anchor,
    extends_value,
    has_token,
    is_ambient,
)

logger = logging.getLogger(__name__)


@dataclass
class ClassRecord:
    """Represent one class declaration or class expression.

    Attributes:
        file_name: File holding the class.
        name: Class name, the variable name for a class expression assigned
            to a variable, or ``<anonymous>``.
        anchor_offset: Offset of the variable name for a class expression
            assigned to a variable, else of the class name, else of the class
            keyword.
        fields: Member name to field, in declaration order.
        file_identifiers: Identifiers present anywhere in ``file_name``.
        extends_offset: Offset of the name referenced by ``extends``, if any.
        ambient: Whether the class is a ``declare`` declaration.
        replacements: Field name to short name, filled by the planner.
        parent: Index of the parent class record.
        children: Indexes of the direct subclass records.
    """

    file_name: str
    name: str
    anchor_offset: int
    fields: dict[str, Field]
    file_identifiers: frozenset[str] = frozenset()
    extends_offset: int | None = None
    ambient: bool = False
    replacements: dict[str, str] | None = None
    parent: int | None = None
    children: list[int] = field(default_factory=list)

    @property
    def key(self) -> tuple[str, int]:
        """Return the declaration identity."""
        return self.file_name, self.anchor_offset

    @classmethod
    def from_node(
        cls, source: SourceFile, node: Node, file_identifiers: frozenset[str]
    ) -> "ClassRecord":
        """Build a class record from a class syntax node.

        Args:
            source: File holding the class.
            node: Class declaration or class expression node.
            file_identifiers: Identifiers present anywhere in the file.

        Returns:
            Class record with extracted fields.
        """
        name_node = node.child_by_field_name("name")
        anchor = class_anchor(node)
        if name_node is None and anchor != node:
            name_node = anchor
        return cls(
            file_name=source.file_name,
            name=source.node_text(name_node) if name_node is not None else "<anonymous>",
            anchor_offset=source.node_offset(anchor),
            fields=extract_fields(source, node),
            file_identifiers=file_identifiers,
            extends_offset=_extends_offset(source, node),
            ambient=is_ambient(node),
        )

    def is_name_taken(self, name: str) -> bool:
        """Check whether ``name`` is unavailable as a replacement in this class.

        A name is taken by a field that keeps its name, by a replacement
        already handed out, or by any identifier present in the class's file.

        Args:
            name: Candidate short name.

        Returns:
            True when the candidate collides.
        """
        existing = self.fields.get(name)
        if existing is not None and not existing.should_mangle:
            return True
        if self.replacements and name in self.replacements.values():
            return True
        return name in self.file_identifiers


class ClassHierarchy:
    """Index-based store of class records and their parent/child links."""

    def __init__(self) -> None:
        self.records: list[ClassRecord] = []
        self._index_by_key: dict[tuple[str, int], int] = {}

    def __len__(self) -> int:
        return len(self.records)

    def add(self, record: ClassRecord) -> int:
        """Register a class record.

        Args:
            record: Record to store.

        Returns:
            Index of the stored record.

        Raises:
            DuplicateDeclarationError: If another class has the same anchor.
        """
        if record.key in self._index_by_key:
            error = DuplicateDeclarationError(
                record.file_name, record.anchor_offset, record.name
            )
            logger.error("%s", error)
            raise error
        index = len(self.records)
        self.records.append(record)
        self._index_by_key[record.key] = index
        return index

    def index_of(self, file_name: str, offset: int) -> int | None:
        """Return the index of the class anchored at ``file_name``/``offset``."""
        return self._index_by_key.get((file_name, offset))

    def link(self, parent: int, child: int) -> None:
        """Make ``parent`` the superclass of ``child``.

        Args:
            parent: Index of the superclass record.
            child: Index of the subclass record.

        Raises:
            HierarchyCycleError: If the link would make a class its own ancestor.
            MangleError: If ``child`` already has a parent.
        """
        child_record = self.records[child]
        if child_record.parent is not None:
            raise MangleError(
                f"Class already has a parent (file={child_record.file_name} "
                f"offset={child_record.anchor_offset} name={child_record.name})"
            )
        if parent == child or any(
            ancestor is child_record for ancestor in self.ancestors(parent)
        ):
            error = HierarchyCycleError(
                child_record.file_name, child_record.anchor_offset, child_record.name
            )
            logger.error("%s", error)
            raise error
        child_record.parent = parent
        self.records[parent].children.append(child)

    def parent_of(self, record: ClassRecord) -> ClassRecord | None:
        """Return the parent record of ``record``."""
        if record.parent is None:
            return None
        return self.records[record.parent]

    def ancestors(self, index: int) -> Iterator[ClassRecord]:
        """Yield every ancestor of a record, nearest first."""
        parent = self.records[index].parent
        while parent is not None:
            record = self.records[parent]
            yield record
            parent = record.parent

    def descendants(self, index: int) -> Iterator[ClassRecord]:
        """Yield every descendant of a record using an explicit stack."""
        stack = list(self.records[index].children)
        while stack:
            record = self.records[stack.pop()]
            yield record
            stack.extend(record.children)


def link_parents(hierarchy: ClassHierarchy, service: SemanticService) -> int:
    """Connect every class to its superclass when it resolves unambiguously.

    Supertypes that resolve to nothing, to several declarations, or to a
    class outside the tracked program are left unlinked.

    Args:
        hierarchy: Class records to connect.
        service: Semantic service answering definition queries.

    Returns:
        Number of links established.
    """
    linked = 0
    for index, record in enumerate(hierarchy.records):
        if record.extends_offset is None:
            continue
        definitions = service.definitions_at(record.file_name, record.extends_offset)
        if len(definitions) != 1:
            logger.debug(
                "Supertype not linked (file=%s class=%s definitions=%s)",
                record.file_name,
                record.name,
                len(definitions),
            )
            continue
        definition = definitions[0]
        parent = hierarchy.index_of(definition.file_name, definition.offset)
        if parent is None:
            continue
        hierarchy.link(parent=parent, child=index)
        linked += 1
    return linked


def extract_fields(source: SourceFile, class_node: Node) -> dict[str, Field]:
    """Collect candidate fields of a class node.

    Methods, properties, accessors, and constructor parameters carrying an
    accessibility or ``readonly`` modifier become fields. Members whose name
    is computed from anything but a string literal are skipped entirely.

    Args:
        source: File holding the class.
        class_node: Class declaration or class expression node.

    Returns:
        Member name to field; a later duplicate replaces an earlier one.
    """
    fields: dict[str, Field] = {}
    body = class_node.child_by_field_name("body")
    if body is None:
        return fields
    for member in body.named_children:
        if member.type not in MEMBER_NODE_TYPES:
            continue
        name_node = member.child_by_field_name("name")
        if name_node is None:
            continue
        if name_node.type == "property_identifier" and source.node_text(name_node) == "constructor":
            if member.type == "method_definition":
                _add_parameter_properties(source, member, fields)
            continue
        _add_field(source, member, name_node, fields)
    return fields


def _add_parameter_properties(
    source: SourceFile, constructor: Node, fields: dict[str, Field]
) -> None:
    parameters = constructor.child_by_field_name("parameters")
    if parameters is None:
        return
    for parameter in parameters.named_children:
        if parameter.type not in PARAMETER_NODE_TYPES:
            continue
        if accessibility(parameter) is None and not has_token(parameter, "readonly"):
            continue
        pattern = parameter.child_by_field_name("pattern")
        if pattern is None or pattern.type != "identifier":
            continue
        _add_field(source, parameter, pattern, fields)


def _add_field(
    source: SourceFile, member: Node, name_node: Node, fields: dict[str, Field]
) -> None:
    resolved = _member_name(source, name_node)
    if resolved is None:
        return
    name, offset = resolved
    line, _ = source.line_and_character(offset)
    fields[name] = Field(
        name=name,
        visibility=_visibility(member),
        offset=offset,
        line=line + 1,
    )


def _member_name(source: SourceFile, name_node: Node) -> tuple[str, int] | None:
    """Resolve a member name and the offset of its renamable text.

    Args:
        source: File holding the member.
        name_node: Name node of the member.

    Returns:
        Name and offset, or ``None`` for unsupported names.
    """
    if name_node.type in ("property_identifier", "private_property_identifier", "identifier"):
        return source.node_text(name_node), source.node_offset(name_node)
    if name_node.type == "computed_property_name":
        expression = name_node.named_children[0] if name_node.named_children else None
        if expression is None or expression.type != "string":
            # unsupported: [Symbol.iterator] or [prefix + 'field']
            return None
        name_node = expression
    if name_node.type == "string":
        text = source.node_text(name_node)[1:-1]
        if not text:
            return None
        return text, source.char_offset(name_node.start_byte + 1)
    return None


def _visibility(member: Node) -> FieldVisibility:
    modifier = accessibility(member)
    if modifier == "private":
        return "private"
    if modifier == "protected":
        return "protected"
    return "public"


def _extends_offset(source: SourceFile, class_node: Node) -> int | None:
    value = extends_value(class_node)
    if value is None:
        return None
    if value.type == "identifier":
        return source.node_offset(value)
    if value.type == "member_expression":
        name = value.child_by_field_name("property")
        if name is not None:
            return source.node_offset(name)
    return None
