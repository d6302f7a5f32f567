# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Tree-sitter helpers for TypeScript syntax trees."""

from collections.abc import Iterator

from tree_sitter import Node

CLASS_NODE_TYPES: frozenset[str] = frozenset(
    {"class_declaration", "abstract_class_declaration", "class"}
)

FUNCTION_NODE_TYPES: frozenset[str] = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_expression",
        "function",
        "generator_function",
        "arrow_function",
        "method_definition",
    }
)

VARIABLE_NODE_TYPES: frozenset[str] = frozenset(
    {"lexical_declaration", "variable_declaration"}
)

MEMBER_NODE_TYPES: frozenset[str] = frozenset(
    {
        "method_definition",
        "method_signature",
        "abstract_method_signature",
        "public_field_definition",
    }
)

PARAMETER_NODE_TYPES: frozenset[str] = frozenset(
    {"required_parameter", "optional_parameter"}
)


def is_class_node(node: Node) -> bool:
    """Check whether ``node`` declares a class or a class expression.

    The ``class`` keyword token shares its type with class expressions, so
    only named nodes qualify.

    Args:
        node: Syntax node.

    Returns:
        True when ``node`` is a class.
    """
    return node.is_named and node.type in CLASS_NODE_TYPES


def walk(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all named descendants in source order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.named_children))


def has_token(node: Node, token: str) -> bool:
    """Check whether ``node`` has a direct child token of the given type.

    Args:
        node: Syntax node.
        token: Token type such as ``readonly`` or ``static``.

    Returns:
        True when the token is present.
    """
    return any(child.type == token for child in node.children)


def accessibility(node: Node) -> str | None:
    """Return the accessibility modifier keyword of a member or parameter."""
    for child in node.children:
        if child.type == "accessibility_modifier":
            return child.text.decode("utf-8") if child.text is not None else None
    return None


def child_of_type(node: Node, node_type: str) -> Node | None:
    """Return the first direct child of the given type."""
    for child in node.children:
        if child.type == node_type:
            return child
    return None


def enclosing(node: Node, node_types: frozenset[str]) -> Node | None:
    """Return the nearest strict ancestor whose type is in ``node_types``."""
    current = node.parent
    while current is not None:
        if current.is_named and current.type in node_types:
            return current
        current = current.parent
    return None


def is_ambient(node: Node) -> bool:
    """Check whether ``node`` sits inside a ``declare`` declaration."""
    current: Node | None = node
    while current is not None:
        if current.type == "ambient_declaration":
            return True
        current = current.parent
    return False


def extends_value(class_node: Node) -> Node | None:
    """Return the expression after ``extends`` in a class heritage clause."""
    heritage = child_of_type(class_node, "class_heritage")
    if heritage is None:
        return None
    extends_clause = child_of_type(heritage, "extends_clause")
    if extends_clause is None:
        return None
    return extends_clause.child_by_field_name("value")


def class_anchor(class_node: Node) -> Node:
    """Return the node whose position identifies a class.

    A class expression assigned straight to a variable is identified by the
    variable name, so references to the variable resolve to the class.
    Otherwise the class name is used, or the class node when unnamed.

    Args:
        class_node: Class declaration or class expression node.

    Returns:
        Anchor node.
    """
    parent = class_node.parent
    if (
        parent is not None
        and parent.type == "variable_declarator"
        and parent.child_by_field_name("value") == class_node
    ):
        variable = parent.child_by_field_name("name")
        if variable is not None and variable.type == "identifier":
            return variable
    name_node = class_node.child_by_field_name("name")
    return name_node if name_node is not None else class_node
