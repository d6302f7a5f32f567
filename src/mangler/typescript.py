# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Static TypeScript semantic service built on tree-sitter."""

import logging
import posixpath
from collections.abc import Iterable
from dataclasses import dataclass, field

import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser

from mangler.model import Definition, RenameLocation
from mangler.scopes import annotated_type, is_shadowed
from mangler.source import SourceFile
from mangler.syntax import (
    MEMBER_NODE_TYPES,
    PARAMETER_NODE_TYPES,
    VARIABLE_NODE_TYPES,
    accessibility,
    class_anchor,
    enclosing,
    extends_value,
    has_token,
    is_class_node,
    walk,
)
from mangler.tsconfig import TsConfig

logger = logging.getLogger(__name__)

_TYPESCRIPT = Language(tstypescript.language_typescript())
_TSX = Language(tstypescript.language_tsx())

_REFERENCE_TYPES: frozenset[str] = frozenset(
    {"identifier", "type_identifier", "shorthand_property_identifier"}
)

_IDENTIFIER_TYPES: frozenset[str] = _REFERENCE_TYPES | frozenset(
    {
        "property_identifier",
        "private_property_identifier",
        "shorthand_property_identifier_pattern",
    }
)

_NAMED_DECLARATION_TYPES: frozenset[str] = frozenset(
    {
        "class_declaration",
        "abstract_class_declaration",
        "function_declaration",
        "generator_function_declaration",
        "function_signature",
        "interface_declaration",
        "type_alias_declaration",
        "enum_declaration",
        "internal_module",
        "module",
    }
)

_RESOLVE_SUFFIXES: tuple[str, ...] = (
    ".ts",
    ".tsx",
    ".d.ts",
    "/index.ts",
    "/index.tsx",
    "/index.d.ts",
)

_THIS_BARRIER_TYPES: frozenset[str] = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_expression",
        "function",
        "generator_function",
    }
)

_BUILTIN_NAMESPACES: frozenset[str] = frozenset(
    {
        "Array",
        "Date",
        "JSON",
        "Math",
        "Number",
        "Object",
        "Promise",
        "Reflect",
        "String",
        "Symbol",
        "console",
    }
)


def parse_source(file_name: str, text: str) -> SourceFile:
    """Parse TypeScript text into a source file handle.

    Args:
        file_name: POSIX path of the file; ``.tsx`` selects the TSX grammar.
        text: File content.

    Returns:
        Parsed source file.
    """
    language = _TSX if file_name.endswith(".tsx") else _TYPESCRIPT
    tree = Parser(language).parse(text.encode("utf-8"))
    return SourceFile(
        file_name=file_name,
        text=text,
        tree=tree,
        is_declaration_file=file_name.endswith(".d.ts"),
    )


@dataclass(frozen=True)
class _Import:
    local: str
    imported: str
    module: str | None
    name_node: Node
    aliased: bool


@dataclass(frozen=True)
class _ReExport:
    imported: str | None
    exported: str | None
    module: str | None
    name_node: Node | None
    aliased: bool


@dataclass
class _ModuleIndex:
    source: SourceFile
    top_level: dict[str, list[Node]] = field(default_factory=dict)
    declaration_exports: dict[str, str] = field(default_factory=dict)
    clause_exports: dict[str, str] = field(default_factory=dict)
    imports: dict[str, _Import] = field(default_factory=dict)
    reexports: list[_ReExport] = field(default_factory=list)
    references: dict[str, list[Node]] = field(default_factory=dict)
    member_accesses: dict[str, list[Node]] = field(default_factory=dict)
    nested_types: dict[str, list[Node]] = field(default_factory=dict)
    string_subscripts: dict[str, list[Node]] = field(default_factory=dict)
    pattern_keys: dict[str, list[Node]] = field(default_factory=dict)
    identifiers: frozenset[str] = frozenset()

    @property
    def file_name(self) -> str:
        return self.source.file_name


@dataclass
class _ClassInfo:
    module: _ModuleIndex
    node: Node
    name: str | None
    parent: tuple[str, int] | None = None
    children: list[tuple[str, int]] = field(default_factory=list)
    unresolved_extends: bool = False


class TypeScriptProject:
    """Answer semantic queries over a set of parsed TypeScript files.

    Resolution is syntax directed: module imports and re-exports are
    followed, lexical shadowing is respected, and member accesses are
    matched through ``this``, ``super``, class names and annotated
    parameters. A member query answers with no locations when some access
    to the name cannot be attributed, or when the class family meets a
    supertype outside the index. Every index is built up front, so queries
    only read shared state and may run concurrently.
    """

    def __init__(self, sources: Iterable[SourceFile], base_url: str | None = None) -> None:
        """Index every file of the program.

        Args:
            sources: Parsed program files.
            base_url: Absolute POSIX directory used for bare module specifiers.
        """
        self._base_url = base_url
        self._modules: dict[str, _ModuleIndex] = {}
        for source in sorted(sources, key=lambda item: item.file_name):
            self._modules[source.file_name] = _ModuleIndex(source=source)
        for module in self._modules.values():
            self._index_module(module)
        self._classes: dict[tuple[str, int], _ClassInfo] = {}
        self._index_classes()
        logger.info(
            "Indexed TypeScript program (files=%s classes=%s)",
            len(self._modules),
            len(self._classes),
        )

    @classmethod
    def from_sources(
        cls, texts: dict[str, str], base_url: str | None = None
    ) -> "TypeScriptProject":
        """Build a project from in-memory file contents keyed by POSIX path."""
        return cls(
            [parse_source(name, text) for name, text in texts.items()],
            base_url=base_url,
        )

    @classmethod
    def from_tsconfig(cls, config: TsConfig) -> "TypeScriptProject":
        """Build a project from the files discovered by a ``tsconfig.json``.

        Args:
            config: Loaded project settings.

        Returns:
            Indexed project.

        Raises:
            OSError: If a discovered file cannot be read.
            UnicodeDecodeError: If a discovered file is not valid UTF-8.
        """
        sources: list[SourceFile] = []
        for path in config.discover_files():
            text = path.read_text(encoding="utf-8")
            sources.append(parse_source(path.as_posix(), text))
        base_url = config.base_url
        return cls(sources, base_url=base_url.as_posix() if base_url else None)

    # --- SemanticService

    def program_files(self) -> list[SourceFile]:
        """Return every parsed file, sorted by name."""
        return [module.source for module in self._modules.values()]

    def identifiers_in_file(self, file_name: str) -> frozenset[str]:
        """Return every identifier text present in ``file_name``."""
        module = self._modules.get(file_name)
        return module.identifiers if module is not None else frozenset()

    def definitions_at(self, file_name: str, offset: int) -> list[Definition]:
        """Return the top-level declarations referenced at ``offset``.

        Args:
            file_name: File holding the reference.
            offset: Offset of an identifier, or of the name in ``ns.Name``.

        Returns:
            Declaration sites; empty when unresolved, several when merged.
        """
        module = self._modules.get(file_name)
        if module is None:
            return []
        node = module.source.node_at(offset)
        if node is None:
            return []
        if node.type in ("identifier", "type_identifier"):
            return self._resolve_local(module, module.source.node_text(node))
        if node.type == "property_identifier" and node.parent is not None:
            owner = node.parent
            if owner.type == "member_expression":
                namespace = owner.child_by_field_name("object")
                if namespace is not None and namespace.type == "identifier":
                    imported = module.imports.get(module.source.node_text(namespace))
                    if imported is not None and imported.imported == "*":
                        return self._resolve_export(
                            imported.module, module.source.node_text(node), set()
                        )
        return []

    def find_alias_definitions(self, file_name: str, offset: int) -> list[Definition]:
        """Return every top-level declaration sharing the name declared at ``offset``."""
        module = self._modules.get(file_name)
        if module is None:
            return []
        node = module.source.node_at(offset)
        if node is None:
            return []
        return self._definitions(module, module.top_level.get(module.source.node_text(node), []))

    def find_rename_locations(self, file_name: str, offset: int) -> list[RenameLocation]:
        """Return every span that changes with the symbol declared at ``offset``.

        Args:
            file_name: File holding the declaration.
            offset: Offset of the declared name.

        Returns:
            Rename locations, de-duplicated and sorted by file and offset.
        """
        module = self._modules.get(file_name)
        if module is None:
            return []
        node = module.source.node_at(offset)
        if node is None:
            logger.warning("No symbol at rename position (file=%s offset=%s)", file_name, offset)
            return []
        member = _member_context(module.source, node)
        if member is not None:
            class_node, name = member
            locations = self._member_locations(module, class_node, name)
        else:
            locations = self._binding_locations(module, module.source.node_text(node))
        unique = {(item.file_name, item.offset): item for item in locations}
        return [unique[key] for key in sorted(unique)]

    # --- indexing

    def _index_module(self, module: _ModuleIndex) -> None:
        source = module.source
        for statement in source.root.named_children:
            self._index_statement(module, statement)

        identifiers: set[str] = set()
        for node in walk(source.root):
            if node.type in _IDENTIFIER_TYPES:
                text = source.node_text(node)
                identifiers.add(text)
                if node.type in _REFERENCE_TYPES:
                    module.references.setdefault(text, []).append(node)
                elif node.type == "shorthand_property_identifier_pattern":
                    module.pattern_keys.setdefault(text, []).append(node)
            elif node.type == "member_expression":
                prop = node.child_by_field_name("property")
                if prop is not None:
                    module.member_accesses.setdefault(source.node_text(prop), []).append(node)
            elif node.type == "nested_type_identifier":
                name = node.child_by_field_name("name")
                if name is not None:
                    module.nested_types.setdefault(source.node_text(name), []).append(node)
            elif node.type == "subscript_expression":
                index = node.child_by_field_name("index")
                if index is not None and index.type == "string":
                    content = source.node_text(index)[1:-1]
                    module.string_subscripts.setdefault(content, []).append(node)
            elif node.type == "pair_pattern":
                key = node.child_by_field_name("key")
                if key is not None and key.type in ("property_identifier", "string"):
                    module.pattern_keys.setdefault(_member_text(source, key), []).append(node)
        module.identifiers = frozenset(identifiers)

    def _index_statement(self, module: _ModuleIndex, statement: Node) -> None:
        source = module.source
        if statement.type == "import_statement":
            self._index_import(module, statement)
            return
        if statement.type == "export_statement":
            declaration = statement.child_by_field_name("declaration")
            if declaration is not None:
                is_default = has_token(statement, "default")
                for name_node in _declared_names(declaration):
                    name = source.node_text(name_node)
                    module.top_level.setdefault(name, []).append(name_node)
                    if is_default:
                        module.clause_exports["default"] = name
                    else:
                        module.declaration_exports[name] = name
                return
            value = statement.child_by_field_name("value")
            if value is not None and value.type == "identifier":
                module.clause_exports["default"] = source.node_text(value)
                return
            self._index_export_clause(module, statement)
            return
        for name_node in _declared_names(statement):
            module.top_level.setdefault(source.node_text(name_node), []).append(name_node)

    def _index_import(self, module: _ModuleIndex, statement: Node) -> None:
        source = module.source
        target = self._resolve_module(module.file_name, statement.child_by_field_name("source"))
        clause = next(
            (child for child in statement.named_children if child.type == "import_clause"),
            None,
        )
        if clause is None:
            return
        for child in clause.named_children:
            if child.type == "identifier":
                local = source.node_text(child)
                module.imports[local] = _Import(local, "default", target, child, True)
            elif child.type == "namespace_import":
                alias = next((n for n in child.named_children if n.type == "identifier"), None)
                if alias is not None:
                    local = source.node_text(alias)
                    module.imports[local] = _Import(local, "*", target, alias, True)
            elif child.type == "named_imports":
                for specifier in child.named_children:
                    if specifier.type != "import_specifier":
                        continue
                    name = specifier.child_by_field_name("name")
                    alias = specifier.child_by_field_name("alias")
                    if name is None or name.type != "identifier":
                        continue
                    local_node = alias if alias is not None else name
                    local = source.node_text(local_node)
                    module.imports[local] = _Import(
                        local, source.node_text(name), target, name, alias is not None
                    )

    def _index_export_clause(self, module: _ModuleIndex, statement: Node) -> None:
        source = module.source
        source_node = statement.child_by_field_name("source")
        target = self._resolve_module(module.file_name, source_node)
        clause = next(
            (child for child in statement.named_children if child.type == "export_clause"),
            None,
        )
        if clause is None:
            if source_node is not None and has_token(statement, "*"):
                has_namespace = any(
                    child.type == "namespace_export" for child in statement.named_children
                )
                if not has_namespace:
                    module.reexports.append(_ReExport(None, None, target, None, False))
            return
        for specifier in clause.named_children:
            if specifier.type != "export_specifier":
                continue
            name = specifier.child_by_field_name("name")
            alias = specifier.child_by_field_name("alias")
            if name is None or name.type != "identifier":
                continue
            exported = source.node_text(alias if alias is not None else name)
            if source_node is not None:
                module.reexports.append(
                    _ReExport(source.node_text(name), exported, target, name, alias is not None)
                )
            else:
                module.clause_exports[exported] = source.node_text(name)

    def _index_classes(self) -> None:
        for module in self._modules.values():
            for node in walk(module.source.root):
                if not is_class_node(node):
                    continue
                name_node = node.child_by_field_name("name")
                anchor = class_anchor(node)
                if name_node is None and anchor != node:
                    name_node = anchor
                key = (module.file_name, module.source.node_offset(anchor))
                name = module.source.node_text(name_node) if name_node is not None else None
                self._classes[key] = _ClassInfo(module=module, node=node, name=name)
        for key, info in self._classes.items():
            value = extends_value(info.node)
            if value is None:
                continue
            info.unresolved_extends = True
            if value.type == "member_expression":
                value = value.child_by_field_name("property")
            if value is None or value.type not in ("identifier", "property_identifier"):
                continue
            definitions = self.definitions_at(
                info.module.file_name, info.module.source.node_offset(value)
            )
            if len(definitions) != 1:
                continue
            parent_key = (definitions[0].file_name, definitions[0].offset)
            if parent_key not in self._classes:
                continue
            ancestor: tuple[str, int] | None = parent_key
            while ancestor is not None and ancestor != key:
                ancestor = self._classes[ancestor].parent
            if ancestor == key:
                continue
            info.parent = parent_key
            info.unresolved_extends = False
            self._classes[parent_key].children.append(key)

    # --- module resolution

    def _resolve_module(self, importer: str, specifier: Node | None) -> str | None:
        if specifier is None or specifier.type != "string":
            return None
        module = self._modules[importer]
        text = module.source.node_text(specifier)[1:-1]
        if text.startswith("."):
            base = posixpath.normpath(posixpath.join(posixpath.dirname(importer), text))
        elif self._base_url is not None:
            base = posixpath.normpath(posixpath.join(self._base_url, text))
        else:
            return None
        candidates = [base + suffix for suffix in _RESOLVE_SUFFIXES]
        if base.endswith(".js"):
            stem = base[: -len(".js")]
            candidates = [stem + ".ts", stem + ".tsx", stem + ".d.ts"] + candidates
        if base.endswith((".ts", ".tsx")):
            candidates.insert(0, base)
        for candidate in candidates:
            if candidate in self._modules:
                return candidate
        return None

    def _resolve_local(self, module: _ModuleIndex, name: str) -> list[Definition]:
        if name in module.top_level:
            return self._definitions(module, module.top_level[name])
        imported = module.imports.get(name)
        if imported is None or imported.imported == "*":
            return []
        return self._resolve_export(imported.module, imported.imported, set())

    def _resolve_export(
        self, file_name: str | None, name: str, visited: set[tuple[str, str]]
    ) -> list[Definition]:
        if file_name is None or (file_name, name) in visited:
            return []
        visited.add((file_name, name))
        module = self._modules.get(file_name)
        if module is None:
            return []
        local = module.declaration_exports.get(name)
        if local is None:
            for reexport in module.reexports:
                if reexport.imported is None:
                    continue
                if reexport.exported == name:
                    return self._resolve_export(reexport.module, reexport.imported, visited)
            local = module.clause_exports.get(name)
        if local is not None:
            return self._resolve_local(module, local)
        found: list[Definition] = []
        for reexport in module.reexports:
            if reexport.imported is None:
                found.extend(self._resolve_export(reexport.module, name, visited))
        return found

    def _definitions(self, module: _ModuleIndex, nodes: list[Node]) -> list[Definition]:
        return [
            Definition(file_name=module.file_name, offset=module.source.node_offset(node))
            for node in nodes
        ]

    # --- class members

    def _member_locations(
        self, module: _ModuleIndex, class_node: Node, name: str
    ) -> list[RenameLocation]:
        key = _class_key(module, class_node)
        owner_key = key
        current = self._classes[key].parent if key in self._classes else None
        while current is not None:
            info = self._classes[current]
            if _declared_members(info.module.source, info.node, name):
                if info.module.source.is_declaration_file:
                    logger.debug("Member inherited from a declaration file (name=%s)", name)
                    return []
                owner_key = current
            current = info.parent

        family = [owner_key]
        stack = list(self._classes[owner_key].children) if owner_key in self._classes else []
        while stack:
            child = stack.pop()
            family.append(child)
            stack.extend(self._classes[child].children)
        family_infos = [self._classes[item] for item in family if item in self._classes]
        if not family_infos:
            family_infos = [_ClassInfo(module=module, node=class_node, name=None)]
        family_keys = {_class_key(info.module, info.node) for info in family_infos}

        owner = family_infos[0]
        if not _is_private_member(owner.module.source, owner.node, name):
            root = owner
            while root.parent is not None:
                root = self._classes[root.parent]
            if root.unresolved_extends:
                logger.debug("Member may override an unresolved supertype (name=%s)", name)
                return []
            blocker = self._unresolved_subclass_using(name)
            if blocker is not None:
                logger.debug(
                    "Member used below an unresolved supertype (name=%s file=%s)",
                    name,
                    blocker.module.file_name,
                )
                return []

        locations: list[RenameLocation] = []
        for info in family_infos:
            source = info.module.source
            for name_node in _declared_members(source, info.node, name):
                locations.append(_name_location(source, name_node))
        for scanned in self._modules_seeing(family_infos, family_keys):
            found = self._access_locations(scanned, name, family_infos, family_keys)
            if found is None:
                logger.debug(
                    "Member access not attributable (name=%s file=%s)", name, scanned.file_name
                )
                return []
            locations.extend(found)
        return locations

    def _unresolved_subclass_using(self, name: str) -> _ClassInfo | None:
        """Return a class that reads ``name`` from a supertype this index cannot see."""
        for info in self._classes.values():
            chain = [info]
            while chain[-1].parent is not None:
                chain.append(self._classes[chain[-1].parent])
            if not chain[-1].unresolved_extends:
                continue
            if any(_declared_members(item.module.source, item.node, name) for item in chain):
                continue
            body = info.node.child_by_field_name("body")
            if body is None:
                continue
            module = info.module
            accesses = module.member_accesses.get(name, []) + module.string_subscripts.get(name, [])
            for access in accesses:
                target = access.child_by_field_name("object")
                if target is None or target.type not in ("this", "super"):
                    continue
                if _within(access, body) and _this_binder(target) == info.node:
                    return info
        return None

    def _modules_seeing(
        self, family_infos: list[_ClassInfo], family_keys: set[tuple[str, int]]
    ) -> list[_ModuleIndex]:
        """Return the modules declaring a family class or importing one."""
        seen = {info.module.file_name: info.module for info in family_infos}
        family_files = set(seen)
        for module in self._modules.values():
            if module.file_name in seen or module.source.is_declaration_file:
                continue
            for imported in module.imports.values():
                if imported.imported == "*":
                    importing = imported.module in family_files
                else:
                    importing = any(
                        (item.file_name, item.offset) in family_keys
                        for item in self._resolve_export(imported.module, imported.imported, set())
                    )
                if importing:
                    seen[module.file_name] = module
                    break
        return list(seen.values())

    def _access_locations(
        self,
        module: _ModuleIndex,
        name: str,
        family_infos: list[_ClassInfo],
        family_keys: set[tuple[str, int]],
    ) -> list[RenameLocation] | None:
        """Return the accesses of ``name`` in ``module`` made on family instances.

        Returns:
            Locations to rename, or ``None`` when some access or destructuring
            of ``name`` has a receiver that cannot be attributed either way.
        """
        source = module.source
        if name in module.pattern_keys:
            return None
        family_nodes = [info.node for info in family_infos]
        family_names = {info.name for info in family_infos if info.name is not None}
        locations: list[RenameLocation] = []
        for access in module.member_accesses.get(name, []) + module.string_subscripts.get(name, []):
            verdict = self._receiver_verdict(
                module,
                access.child_by_field_name("object"),
                family_nodes,
                family_names,
                family_keys,
            )
            if verdict is None:
                return None
            if not verdict:
                continue
            if access.type == "subscript_expression":
                renamed = access.child_by_field_name("index")
            else:
                renamed = access.child_by_field_name("property")
            if renamed is not None:
                locations.append(_name_location(source, renamed))
        return locations

    def _receiver_verdict(
        self,
        module: _ModuleIndex,
        target: Node | None,
        family_nodes: list[Node],
        family_names: set[str],
        family_keys: set[tuple[str, int]],
    ) -> bool | None:
        """Tell whether a member access receiver is an instance of the family.

        Returns:
            True for the family, False for a receiver known to be something
            else, ``None`` when it cannot be told.
        """
        if target is None:
            return None
        source = module.source
        if target.type in ("this", "super"):
            binder = _this_binder(target)
            if binder is None or binder.type == "method_definition":
                return False
            if is_class_node(binder):
                return any(binder == node for node in family_nodes)
            return None
        if target.type == "new_expression":
            constructor = target.child_by_field_name("constructor")
            if constructor is not None and constructor.type == "identifier":
                named = self._names_family(
                    module, source.node_text(constructor), family_names, family_keys
                )
                if named:
                    return True
            return None
        if target.type != "identifier":
            return None
        text = source.node_text(target)
        annotated = annotated_type(target, text)
        if annotated is not None:
            return self._names_family(module, annotated, family_names, family_keys) is True
        if is_shadowed(target, text):
            return None
        imported = module.imports.get(text)
        if imported is not None and imported.imported == "*":
            return False
        named = self._names_family(module, text, family_names, family_keys)
        if named is not None:
            return named
        if text in _BUILTIN_NAMESPACES:
            return False
        return None

    def _names_family(
        self,
        module: _ModuleIndex,
        name: str,
        family_names: set[str],
        family_keys: set[tuple[str, int]],
    ) -> bool | None:
        """Tell whether a module-scope name denotes a family class.

        Returns:
            True or False when the name resolves, else whether it matches a
            family class name; ``None`` for an unknown value binding.
        """
        definitions = self._resolve_local(module, name)
        if not definitions:
            return True if name in family_names else None
        if any((item.file_name, item.offset) in family_keys for item in definitions):
            return True
        if all(self._is_type_like(item) for item in definitions):
            return False
        return None

    def _is_type_like(self, definition: Definition) -> bool:
        declared = self._modules[definition.file_name].source.node_at(definition.offset)
        parent = declared.parent if declared is not None else None
        return parent is not None and parent.type in _NAMED_DECLARATION_TYPES

    # --- top-level bindings

    def _binding_locations(self, module: _ModuleIndex, name: str) -> list[RenameLocation]:
        locations = self._file_references(module, name)
        visited: set[tuple[str, str]] = set()
        for exported, local in module.declaration_exports.items():
            if local == name:
                locations.extend(self._importer_locations(module.file_name, exported, visited))
        return locations

    def _file_references(self, module: _ModuleIndex, name: str) -> list[RenameLocation]:
        source = module.source
        locations: list[RenameLocation] = []
        for node in module.references.get(name, []):
            parent = node.parent
            if parent is None or _is_foreign_name(node, parent):
                continue
            if is_shadowed(node, name):
                continue
            location = _name_location(source, node)
            if node.type == "shorthand_property_identifier":
                location = _with_text(location, prefix_text=f"{name}: ")
            elif parent.type == "export_specifier" and parent.child_by_field_name("alias") is None:
                location = _with_text(location, suffix_text=f" as {name}")
            locations.append(location)
        return locations

    def _importer_locations(
        self, target: str, exported: str, visited: set[tuple[str, str]]
    ) -> list[RenameLocation]:
        if (target, exported) in visited:
            return []
        visited.add((target, exported))
        locations: list[RenameLocation] = []
        for module in self._modules.values():
            if module.source.is_declaration_file:
                continue
            source = module.source
            for imported in module.imports.values():
                if imported.module != target:
                    continue
                if imported.imported == exported:
                    locations.append(_name_location(source, imported.name_node))
                    if not imported.aliased:
                        locations.extend(self._file_references(module, imported.local))
                elif imported.imported == "*":
                    locations.extend(
                        _namespace_locations(module, imported.local, exported)
                    )
            for reexport in module.reexports:
                if reexport.module != target:
                    continue
                if reexport.imported is None:
                    if exported not in module.declaration_exports:
                        locations.extend(
                            self._importer_locations(module.file_name, exported, visited)
                        )
                elif reexport.imported == exported and reexport.name_node is not None:
                    locations.append(_name_location(source, reexport.name_node))
                    if not reexport.aliased:
                        locations.extend(
                            self._importer_locations(module.file_name, exported, visited)
                        )
        return locations


def _declared_names(declaration: Node) -> list[Node]:
    """Return the top-level names introduced by a declaration statement."""
    if declaration.type == "ambient_declaration":
        names: list[Node] = []
        for child in declaration.named_children:
            names.extend(_declared_names(child))
        return names
    if declaration.type in _NAMED_DECLARATION_TYPES:
        name = declaration.child_by_field_name("name")
        if name is not None and name.type in ("identifier", "type_identifier"):
            return [name]
        return []
    if declaration.type in VARIABLE_NODE_TYPES:
        found: list[Node] = []
        for declarator in declaration.named_children:
            if declarator.type != "variable_declarator":
                continue
            name = declarator.child_by_field_name("name")
            if name is not None and name.type == "identifier":
                found.append(name)
        return found
    return []


def _member_context(source: SourceFile, node: Node) -> tuple[Node, str] | None:
    """Return the class and member name when ``node`` names a class member."""
    current = node
    if current.type == "string_fragment" and current.parent is not None:
        current = current.parent
    name_node = current
    if current.type == "string" and current.parent is not None:
        if current.parent.type == "computed_property_name":
            current = current.parent
    parent = current.parent
    if parent is None:
        return None
    if parent.type in MEMBER_NODE_TYPES and parent.child_by_field_name("name") == current:
        class_node = enclosing(parent, frozenset({"class_declaration", "abstract_class_declaration", "class"}))
        if class_node is None:
            return None
        return class_node, _member_text(source, name_node)
    if (
        current.type == "identifier"
        and parent.type in PARAMETER_NODE_TYPES
        and parent.child_by_field_name("pattern") == current
        and (accessibility(parent) is not None or has_token(parent, "readonly"))
    ):
        class_node = enclosing(parent, frozenset({"class_declaration", "abstract_class_declaration", "class"}))
        if class_node is None:
            return None
        return class_node, source.node_text(current)
    return None


def _member_text(source: SourceFile, name_node: Node) -> str:
    text = source.node_text(name_node)
    if name_node.type == "string":
        return text[1:-1]
    return text


def _declared_members(source: SourceFile, class_node: Node, name: str) -> list[Node]:
    """Return the name nodes of every member of ``class_node`` called ``name``."""
    body = class_node.child_by_field_name("body")
    if body is None:
        return []
    found: list[Node] = []
    for member in body.named_children:
        if member.type not in MEMBER_NODE_TYPES:
            continue
        name_node = member.child_by_field_name("name")
        if name_node is None:
            continue
        if name_node.type == "property_identifier" and source.node_text(name_node) == "constructor":
            parameters = member.child_by_field_name("parameters")
            for parameter in parameters.named_children if parameters is not None else []:
                if parameter.type not in PARAMETER_NODE_TYPES:
                    continue
                if accessibility(parameter) is None and not has_token(parameter, "readonly"):
                    continue
                pattern = parameter.child_by_field_name("pattern")
                if pattern is not None and source.node_text(pattern) == name:
                    found.append(pattern)
            continue
        if name_node.type == "computed_property_name":
            inner = name_node.named_children[0] if name_node.named_children else None
            if inner is None or inner.type != "string":
                continue
            name_node = inner
        if _member_text(source, name_node) == name:
            found.append(name_node)
    return found


def _is_private_member(source: SourceFile, class_node: Node, name: str) -> bool:
    """Check whether every declaration of ``name`` in ``class_node`` is private."""
    declared = _declared_members(source, class_node, name)
    if not declared:
        return False
    for name_node in declared:
        if name_node.type == "private_property_identifier":
            continue
        member = name_node.parent
        while member is not None and member.type in ("string", "computed_property_name"):
            member = member.parent
        if member is None or accessibility(member) != "private":
            return False
    return True


def _this_binder(node: Node) -> Node | None:
    """Return the node that binds ``this`` at ``node``.

    That is the enclosing class, an object literal method, or a non-arrow
    function; ``None`` at module level.
    """
    current = node.parent
    while current is not None:
        if current.type in _THIS_BARRIER_TYPES or is_class_node(current):
            return current
        if (
            current.type == "method_definition"
            and current.parent is not None
            and current.parent.type == "object"
        ):
            return current
        current = current.parent
    return None


def _namespace_locations(module: _ModuleIndex, namespace: str, name: str) -> list[RenameLocation]:
    source = module.source
    locations: list[RenameLocation] = []
    for access in module.member_accesses.get(name, []):
        target = access.child_by_field_name("object")
        prop = access.child_by_field_name("property")
        if target is None or prop is None or target.type != "identifier":
            continue
        if source.node_text(target) == namespace and not is_shadowed(target, namespace):
            locations.append(_name_location(source, prop))
    for nested in module.nested_types.get(name, []):
        qualifier = nested.child_by_field_name("module")
        type_name = nested.child_by_field_name("name")
        if qualifier is None or type_name is None:
            continue
        if source.node_text(qualifier) == namespace:
            locations.append(_name_location(source, type_name))
    return locations


def _is_foreign_name(node: Node, parent: Node) -> bool:
    """Check whether an indexed identifier is not a reference to a local binding."""
    if parent.type in ("import_specifier", "namespace_import", "import_clause"):
        return True
    if parent.type == "export_specifier":
        if parent.child_by_field_name("alias") == node:
            return True
        statement = parent.parent.parent if parent.parent is not None else None
        return statement is not None and statement.child_by_field_name("source") is not None
    if parent.type == "nested_type_identifier":
        return parent.child_by_field_name("name") == node
    if parent.type == "nested_identifier":
        return parent.named_children[0] != node
    return False


def _name_location(source: SourceFile, node: Node) -> RenameLocation:
    start, end = node.start_byte, node.end_byte
    if node.type == "string":
        start, end = start + 1, end - 1
    offset = source.char_offset(start)
    return RenameLocation(
        file_name=source.file_name,
        offset=offset,
        length=source.char_offset(end) - offset,
    )


def _with_text(location: RenameLocation, prefix_text: str = "", suffix_text: str = "") -> RenameLocation:
    return RenameLocation(
        file_name=location.file_name,
        offset=location.offset,
        length=location.length,
        prefix_text=prefix_text,
        suffix_text=suffix_text,
    )


def _within(node: Node, container: Node) -> bool:
    return container.start_byte <= node.start_byte and node.end_byte <= container.end_byte


def _class_key(module: _ModuleIndex, class_node: Node) -> tuple[str, int]:
    return module.file_name, module.source.node_offset(class_anchor(class_node))

