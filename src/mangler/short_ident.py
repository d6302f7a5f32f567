# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Generate deterministic short identifiers for mangled names."""

from collections.abc import Callable

NameTaken = Callable[[str], bool]

RESERVED_WORDS: frozenset[str] = frozenset(
    {
        "await",
        "break",
        "case",
        "catch",
        "class",
        "const",
        "continue",
        "debugger",
        "default",
        "delete",
        "do",
        "else",
        "export",
        "extends",
        "false",
        "finally",
        "for",
        "function",
        "if",
        "import",
        "in",
        "instanceof",
        "let",
        "new",
        "null",
        "return",
        "static",
        "super",
        "switch",
        "this",
        "throw",
        "true",
        "try",
        "typeof",
        "var",
        "void",
        "while",
        "with",
        "yield",
    }
)

ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ1234567890$_"


def _never_taken(name: str) -> bool:
    return False


class ShortIdent:
    """Allocate the shortest free identifiers from a monotonically growing counter.

    Every allocator owns its counter, so two allocators fed the same requests
    in the same order produce the same names.
    """

    def __init__(self, prefix: str = "", is_name_taken: NameTaken = _never_taken) -> None:
        """Initialize allocator state.

        Args:
            prefix: Text prepended to every candidate.
            is_name_taken: Scope check shared by every allocation.
        """
        self.prefix = prefix
        self._is_name_taken = is_name_taken
        self._value = 0

    def next(self, local_is_name_taken: NameTaken | None = None) -> str:
        """Return the next free identifier.

        Args:
            local_is_name_taken: Extra check applied to this allocation only.

        Returns:
            First candidate accepted by every check.
        """
        while True:
            candidate = self.prefix + convert(self._value)
            self._value += 1
            if self._rejects(candidate):
                continue
            if local_is_name_taken is not None and local_is_name_taken(candidate):
                continue
            return candidate

    def _rejects(self, candidate: str) -> bool:
        if candidate in RESERVED_WORDS:
            return True
        if candidate[0] == "_" or candidate[0].isdigit():
            return True
        return self._is_name_taken(candidate)


def convert(value: int) -> str:
    """Encode a counter value over the identifier alphabet.

    Digits are emitted least-significant first, so ``0`` is ``a`` and
    ``64`` is ``ab``.

    Args:
        value: Zero-based counter value.

    Returns:
        Encoded name body.
    """
    base = len(ALPHABET)
    chars: list[str] = []
    while True:
        chars.append(ALPHABET[value % base])
        value //= base
        if value <= 0:
            break
    return "".join(chars)


class FileIdentAllocator:
    """Allocate ``$``-prefixed names for exported symbols, checked per file."""

    def __init__(self, identifiers_in_file: Callable[[str], frozenset[str]]) -> None:
        """Initialize allocator state.

        Args:
            identifiers_in_file: Lookup of identifiers already present in a file.
        """
        self._identifiers_in_file = identifiers_in_file
        self._idents = ShortIdent("$")

    def next(self, file_name: str) -> str:
        """Return the next name that is free within ``file_name``.

        Args:
            file_name: File declaring the exported symbol.

        Returns:
            Replacement name.
        """
        taken = self._identifiers_in_file(file_name)
        return self._idents.next(lambda name: name in taken)
