# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Parsed source file handle shared by the engine and the semantic service."""

import bisect
from dataclasses import dataclass, field

from tree_sitter import Node, Tree


def utf16_length(text: str) -> int:
    """Return the length of ``text`` in UTF-16 code units."""
    return len(text) + sum(1 for char in text if ord(char) > 0xFFFF)


class LineIndex:
    """Map character offsets to zero-based line and column positions."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._line_starts = [0]
        for index, char in enumerate(text):
            if char == "\n":
                self._line_starts.append(index + 1)

    def line_and_character(self, char_offset: int) -> tuple[int, int]:
        """Return the zero-based line and column of a character offset.

        Args:
            char_offset: Offset into the indexed text.

        Returns:
            Tuple of line index and column index.
        """
        line = bisect.bisect_right(self._line_starts, char_offset) - 1
        return line, char_offset - self._line_starts[line]

    def line_and_utf16_column(self, char_offset: int) -> tuple[int, int]:
        """Return the zero-based line and UTF-16 column of a character offset.

        Source map consumers count columns in UTF-16 code units, so characters
        outside the Basic Multilingual Plane take two columns.
        """
        line, _ = self.line_and_character(char_offset)
        return line, utf16_length(self._text[self._line_starts[line] : char_offset])


@dataclass
class SourceFile:
    """Represent one parsed program file.

    Attributes:
        file_name: Absolute POSIX path of the file.
        text: Full file text.
        tree: Syntax tree parsed from ``text``.
        is_declaration_file: Whether the file is a ``.d.ts`` declaration file.
    """

    file_name: str
    text: str
    tree: Tree
    is_declaration_file: bool = False
    _data: bytes = field(init=False, repr=False)
    _char_byte_starts: list[int] | None = field(init=False, repr=False)
    _lines: LineIndex = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._data = self.text.encode("utf-8")
        if len(self._data) == len(self.text):
            self._char_byte_starts = None
        else:
            starts: list[int] = []
            position = 0
            for char in self.text:
                starts.append(position)
                position += len(char.encode("utf-8"))
            self._char_byte_starts = starts
        self._lines = LineIndex(self.text)

    @property
    def root(self) -> Node:
        """Return the root syntax node."""
        return self.tree.root_node

    def char_offset(self, byte_offset: int) -> int:
        """Convert a UTF-8 byte offset to a character offset.

        Args:
            byte_offset: Offset into the encoded text.

        Returns:
            Offset into ``text``.
        """
        if self._char_byte_starts is None:
            return byte_offset
        return bisect.bisect_left(self._char_byte_starts, byte_offset)

    def byte_offset(self, char_offset: int) -> int:
        """Convert a character offset to a UTF-8 byte offset.

        Args:
            char_offset: Offset into ``text``.

        Returns:
            Offset into the encoded text.
        """
        if self._char_byte_starts is None:
            return char_offset
        if char_offset >= len(self._char_byte_starts):
            return len(self._data)
        return self._char_byte_starts[char_offset]

    def node_offset(self, node: Node) -> int:
        """Return the character offset where ``node`` starts."""
        return self.char_offset(node.start_byte)

    def node_text(self, node: Node) -> str:
        """Return the source text covered by ``node``."""
        return self._data[node.start_byte : node.end_byte].decode("utf-8")

    def line_and_character(self, char_offset: int) -> tuple[int, int]:
        """Return the zero-based line and column of a character offset.

        Args:
            char_offset: Offset into ``text``.

        Returns:
            Tuple of line index and column index.
        """
        return self._lines.line_and_character(char_offset)

    def node_at(self, char_offset: int) -> Node | None:
        """Return the smallest named node starting at ``char_offset``.

        Args:
            char_offset: Offset into ``text``.

        Returns:
            Matching node, or ``None`` when nothing starts at the offset.
        """
        start = self.byte_offset(char_offset)
        node: Node | None = self.root
        while node is not None:
            child = next(
                (item for item in node.named_children if item.start_byte <= start < item.end_byte),
                None,
            )
            if child is None:
                break
            node = child
        while node is not None and node.start_byte != start:
            node = node.parent
        return node
