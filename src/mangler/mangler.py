# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Orchestrate the mangling phases over one program."""

import logging
import posixpath
from pathlib import Path

from tree_sitter import Node

from mangler.classes import ClassHierarchy, ClassRecord, link_parents
from mangler.config import MangleOptions
from mangler.edits import apply_edits
from mangler.errors import DuplicateDeclarationError
from mangler.leakage import is_public_in_ancestors, promote_leaked_fields
from mangler.model import DeclarationKind, MangleSummary, RenderedFile
from mangler.planner import (
    ExportedSymbol,
    fill_all_replacements,
    is_skipped_file,
    lookup_short_name,
)
from mangler.resolver import RenameResolver
from mangler.service import SemanticService
from mangler.short_ident import FileIdentAllocator
from mangler.source import SourceFile
from mangler.syntax import VARIABLE_NODE_TYPES, is_ambient, is_class_node, walk
from mangler.tsconfig import TsConfig
from mangler.typescript import TypeScriptProject

logger = logging.getLogger(__name__)

_EXPORTED_CLASS_TYPES: frozenset[str] = frozenset(
    {"class_declaration", "abstract_class_declaration"}
)


class Mangler:
    """Rename private/protected class members and exported top-level names.

    The run collects declarations, links class hierarchies, promotes leaked
    protected fields, plans short names, resolves rename locations through
    the semantic service, and finally splices the edits into each file.
    """

    def __init__(
        self,
        service: SemanticService,
        project_dir: Path,
        options: MangleOptions | None = None,
        compiler_map_root: str | None = None,
        compiler_source_root: str | None = None,
    ) -> None:
        """Initialize mangler state.

        Args:
            service: Semantic service over the parsed program.
            project_dir: Directory that source map paths are relative to.
            options: Engine settings; defaults apply when omitted.
            compiler_map_root: ``compilerOptions.mapRoot`` of the project.
            compiler_source_root: ``compilerOptions.sourceRoot`` of the project.
        """
        self._service = service
        self._project_dir = project_dir.resolve()
        self._options = options or MangleOptions()
        self._compiler_map_root = compiler_map_root
        self._compiler_source_root = compiler_source_root
        self.hierarchy = ClassHierarchy()
        self.exported: dict[tuple[str, int], ExportedSymbol] = {}
        self.summary = MangleSummary()

    @classmethod
    def from_tsconfig(
        cls, config: TsConfig, options: MangleOptions | None = None
    ) -> "Mangler":
        """Build a mangler backed by the static TypeScript service.

        Args:
            config: Loaded project settings.
            options: Engine settings.

        Returns:
            Mangler over every discovered project file.
        """
        return cls(
            service=TypeScriptProject.from_tsconfig(config),
            project_dir=config.project_dir,
            options=options,
            compiler_map_root=config.map_root,
            compiler_source_root=config.source_root,
        )

    @property
    def source_map_root(self) -> str:
        """Return the root URL recorded in every emitted source map."""
        if self._options.map_root is not None:
            return self._options.map_root
        if self._compiler_map_root is not None:
            return self._compiler_map_root
        if self._compiler_source_root is not None:
            return (self._project_dir / self._compiler_source_root).resolve().as_uri()
        return self._project_dir.as_uri()

    def compute_new_file_contents(self) -> dict[str, RenderedFile]:
        """Run every phase and return the final content of each program file.

        Declaration files are analysed but never rendered.

        Returns:
            File name to rendered text and optional source map.

        Raises:
            DuplicateDeclarationError: If two declarations share an identity.
            HierarchyCycleError: If class links form a cycle.
            VisibilityLeakError: If strict mode rejects a leaked field.
            OverlappingEditError: If rename edits conflict.
        """
        sources = self._service.program_files()
        self._collect(sources)
        logger.info(
            "Done collecting (classes=%s exported=%s)",
            len(self.hierarchy),
            len(self.exported),
        )

        linked = link_parents(self.hierarchy, self._service)
        logger.info("Done linking classes (links=%s)", linked)
        promote_leaked_fields(self.hierarchy, self._options.strict_public)
        fill_all_replacements(self.hierarchy)

        resolver = RenameResolver(self._service, max_workers=self._options.max_workers)
        self._queue_field_renames(resolver)
        self._queue_export_renames(resolver)
        self.summary.renames_queued = resolver.pending
        logger.info("Starting prepare rename edits (queries=%s)", resolver.pending)
        edits_by_file = resolver.resolve()

        result: dict[str, RenderedFile] = {}
        source_root = self.source_map_root
        for source in sources:
            if source.is_declaration_file:
                continue
            edits = edits_by_file.get(source.file_name, [])
            relative = posixpath.relpath(source.file_name, self._project_dir.as_posix())
            applied = apply_edits(
                source.file_name,
                source.text,
                edits,
                relative_file_name=relative,
                source_root=source_root,
            )
            if applied.applied_edits:
                self.summary.files_edited += 1
            self.summary.saved_chars += applied.saved_chars
            result[source.file_name] = applied.rendered
        logger.info(
            "Done (saved_kb=%s files_edited=%s)",
            self.summary.saved_chars / 1000,
            self.summary.files_edited,
        )
        return result

    def _collect(self, sources: list[SourceFile]) -> None:
        allocator = FileIdentAllocator(self._service.identifiers_in_file)
        for source in sources:
            if source.is_declaration_file:
                continue
            identifiers = self._service.identifiers_in_file(source.file_name)
            for node in walk(source.root):
                if is_class_node(node):
                    self.hierarchy.add(ClassRecord.from_node(source, node, identifiers))
            previous: Node | None = None
            for statement in source.root.named_children:
                if statement.type == "comment":
                    continue
                if statement.type != "export_statement":
                    previous = statement
                    continue
                leading = source.text[
                    source.char_offset(previous.end_byte) if previous is not None else 0 :
                    source.char_offset(statement.end_byte)
                ]
                opted_out = self._options.opt_out_marker in leading
                for kind, name_node, ambient in _exported_names(statement):
                    self._add_exported(
                        ExportedSymbol(
                            file_name=source.file_name,
                            name=source.node_text(name_node),
                            kind=kind,
                            offset=source.node_offset(name_node),
                            replacement_name=allocator.next(source.file_name),
                            opted_out=opted_out,
                            ambient=ambient,
                        )
                    )
                previous = statement
        self.summary.classes = len(self.hierarchy)
        self.summary.exported_declarations = len(self.exported)

    def _add_exported(self, symbol: ExportedSymbol) -> None:
        if symbol.key in self.exported:
            error = DuplicateDeclarationError(symbol.file_name, symbol.offset, symbol.name)
            logger.error("%s", error)
            raise error
        self.exported[symbol.key] = symbol

    def _queue_field_renames(self, resolver: RenameResolver) -> None:
        for record in self.hierarchy.records:
            if record.ambient:
                continue
            for name, info in record.fields.items():
                if not info.should_mangle:
                    continue
                # an ancestor may have been promoted after this class was planned
                if is_public_in_ancestors(self.hierarchy, record, name):
                    continue
                new_name = lookup_short_name(self.hierarchy, record, name)
                if new_name is None:
                    continue
                resolver.queue(record.file_name, info.offset, new_name)

    def _queue_export_renames(self, resolver: RenameResolver) -> None:
        for symbol in self.exported.values():
            if is_skipped_file(symbol.file_name, self._options.skipped_files):
                continue
            if symbol.ambient or not symbol.should_mangle():
                continue
            for location in symbol.locations(self._service):
                resolver.queue(location.file_name, location.offset, symbol.replacement_name)


def _exported_names(statement: Node) -> list[tuple[DeclarationKind, Node, bool]]:
    """Return the exported classes, functions, and variables of one export statement.

    Function overload signatures have no body and are skipped.

    Args:
        statement: Top-level ``export_statement`` node.

    Returns:
        Declaration kind, name node, and ambient flag per exported name.
    """
    declaration = statement.child_by_field_name("declaration")
    if declaration is None:
        return []
    ambient = is_ambient(declaration)
    if declaration.type == "ambient_declaration":
        inner = next(
            (
                child
                for child in declaration.named_children
                if child.type in _EXPORTED_CLASS_TYPES | VARIABLE_NODE_TYPES
            ),
            None,
        )
        if inner is None:
            return []
        declaration = inner
    names: list[tuple[DeclarationKind, Node, bool]] = []
    if declaration.type in _EXPORTED_CLASS_TYPES:
        name = declaration.child_by_field_name("name")
        if name is not None:
            names.append(("class", name, ambient))
    elif declaration.type == "function_declaration":
        name = declaration.child_by_field_name("name")
        if name is not None and declaration.child_by_field_name("body") is not None:
            names.append(("function", name, ambient))
    elif declaration.type in VARIABLE_NODE_TYPES:
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            if name is not None and name.type == "identifier":
                names.append(("const", name, ambient))
    return names
