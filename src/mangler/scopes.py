# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Lexical scope queries over TypeScript syntax trees."""

from tree_sitter import Node

from mangler.syntax import FUNCTION_NODE_TYPES, PARAMETER_NODE_TYPES, VARIABLE_NODE_TYPES

_BLOCK_DECLARATION_TYPES: frozenset[str] = frozenset(
    {
        "class_declaration",
        "abstract_class_declaration",
        "function_declaration",
        "generator_function_declaration",
        "enum_declaration",
    }
)


def pattern_names(node: Node) -> list[Node]:
    """Return the binding identifiers introduced by a declaration pattern.

    Default values and property keys inside destructuring patterns are
    skipped; only the bound names are returned.

    Args:
        node: Identifier or destructuring pattern.

    Returns:
        Identifier-like nodes bound by the pattern.
    """
    if node.type in ("identifier", "shorthand_property_identifier_pattern"):
        return [node]
    names: list[Node] = []
    for index, child in enumerate(node.children):
        if not child.is_named:
            continue
        field_name = node.field_name_for_child(index)
        if field_name in ("key", "right", "type"):
            continue
        names.extend(pattern_names(child))
    return names


def declared_in_block(block: Node) -> set[str]:
    """Return names declared directly inside a statement block."""
    names: set[str] = set()
    for statement in block.named_children:
        names.update(_statement_names(statement))
    return names


def _statement_names(statement: Node) -> set[str]:
    names: set[str] = set()
    if statement.type in VARIABLE_NODE_TYPES:
        for declarator in statement.named_children:
            if declarator.type != "variable_declarator":
                continue
            pattern = declarator.child_by_field_name("name")
            if pattern is not None:
                names.update(_texts(pattern_names(pattern)))
    elif statement.type in _BLOCK_DECLARATION_TYPES:
        name = statement.child_by_field_name("name")
        if name is not None and name.text is not None:
            names.add(name.text.decode("utf-8"))
    return names


def parameter_names(function: Node) -> set[str]:
    """Return names bound by the parameters of a function-like node."""
    names: set[str] = set()
    single = function.child_by_field_name("parameter")
    if single is not None:
        names.update(_texts(pattern_names(single)))
    parameters = function.child_by_field_name("parameters")
    if parameters is None:
        return names
    for parameter in parameters.named_children:
        if parameter.type in PARAMETER_NODE_TYPES:
            pattern = parameter.child_by_field_name("pattern")
            if pattern is not None and pattern.type != "this":
                names.update(_texts(pattern_names(pattern)))
        elif parameter.type in ("identifier", "rest_pattern", "assignment_pattern"):
            names.update(_texts(pattern_names(parameter)))
    return names


def is_shadowed(node: Node, name: str) -> bool:
    """Check whether ``name`` at ``node`` binds to something below module scope.

    Args:
        node: Identifier reference.
        name: Referenced name.

    Returns:
        True when a nested scope declares ``name`` between ``node`` and the
        module scope.
    """
    child = node
    current = node.parent
    while current is not None and current.type != "program":
        if _scope_declares(current, child, name):
            return True
        child = current
        current = current.parent
    return False


def _scope_declares(scope: Node, child: Node, name: str) -> bool:
    if scope.type == "statement_block":
        return name in declared_in_block(scope)
    if scope.type in FUNCTION_NODE_TYPES:
        own_name = scope.child_by_field_name("name")
        if own_name is not None and own_name == child:
            return False
        if name in parameter_names(scope):
            return True
        if scope.type in ("function_expression", "function", "generator_function"):
            return own_name is not None and own_name.text == name.encode("utf-8")
        return False
    if scope.type in ("for_statement", "for_in_statement"):
        for field_name in ("initializer", "left"):
            declaration = scope.child_by_field_name(field_name)
            if declaration is None:
                continue
            if declaration.type in VARIABLE_NODE_TYPES and name in _statement_names(declaration):
                return True
            if field_name == "left" and scope.child_by_field_name("kind") is not None:
                if name in _texts(pattern_names(declaration)):
                    return True
        return False
    if scope.type == "catch_clause":
        parameter = scope.child_by_field_name("parameter")
        return parameter is not None and name in _texts(pattern_names(parameter))
    if scope.type == "class" and scope.is_named:
        own_name = scope.child_by_field_name("name")
        return own_name is not None and own_name != child and own_name.text == name.encode("utf-8")
    return False


def annotated_type(node: Node, name: str) -> str | None:
    """Return the type name annotated on the nearest declaration of ``name``.

    Parameters of enclosing functions and variables of enclosing blocks
    are searched from the innermost scope outwards.

    Args:
        node: Identifier reference.
        name: Referenced name.

    Returns:
        Simple type name, or ``None`` when unannotated or undeclared.
    """
    current = node.parent
    while current is not None and current.type != "program":
        if current.type in FUNCTION_NODE_TYPES:
            parameters = current.child_by_field_name("parameters")
            for parameter in parameters.named_children if parameters is not None else []:
                if parameter.type not in PARAMETER_NODE_TYPES:
                    continue
                pattern = parameter.child_by_field_name("pattern")
                if pattern is not None and pattern.text == name.encode("utf-8"):
                    return _type_name(parameter.child_by_field_name("type"))
        if current.type == "statement_block":
            for statement in current.named_children:
                if statement.type not in VARIABLE_NODE_TYPES:
                    continue
                for declarator in statement.named_children:
                    declared = declarator.child_by_field_name("name")
                    if declared is not None and declared.text == name.encode("utf-8"):
                        return _type_name(declarator.child_by_field_name("type"))
        current = current.parent
    return None


def _type_name(annotation: Node | None) -> str | None:
    if annotation is None:
        return None
    target = annotation.named_children[0] if annotation.named_children else None
    if target is not None and target.type == "generic_type":
        target = target.child_by_field_name("name")
    if target is None or target.type != "type_identifier" or target.text is None:
        return None
    return target.text.decode("utf-8")


def _texts(nodes: list[Node]) -> set[str]:
    return {node.text.decode("utf-8") for node in nodes if node.text is not None}
