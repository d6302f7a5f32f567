# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Error taxonomy for mangling runs."""

from mangler.model import Edit, LeakageViolation


class MangleError(RuntimeError):
    """Represent a fatal mangling failure that aborts the whole run."""


class DuplicateDeclarationError(MangleError):
    """Represent two declarations anchored at the same file and offset."""

    def __init__(self, file_name: str, offset: int, name: str) -> None:
        """Initialize error context.

        Args:
            file_name: File holding the duplicated anchor.
            offset: Character offset of the duplicated anchor.
            name: Declared name at the anchor.
        """
        super().__init__(
            f"Duplicate declaration (file={file_name} offset={offset} name={name})"
        )
        self.file_name = file_name
        self.offset = offset
        self.name = name


class HierarchyCycleError(MangleError):
    """Represent a class that would become its own ancestor."""

    def __init__(self, file_name: str, offset: int, name: str) -> None:
        super().__init__(
            f"Class hierarchy cycle (file={file_name} offset={offset} name={name})"
        )
        self.file_name = file_name
        self.offset = offset
        self.name = name


class VisibilityLeakError(MangleError):
    """Represent protected fields forced public outside the allow-list."""

    def __init__(self, violations: list[LeakageViolation]) -> None:
        """Initialize error context.

        Args:
            violations: Every violation recorded during the leakage pass.
        """
        super().__init__(
            "Protected fields have been made PUBLIC. This hurts minification and "
            "is therefore not allowed. Review the WARN messages further above "
            f"(violations={len(violations)})"
        )
        self.violations = violations


class OverlappingEditError(MangleError):
    """Represent two disagreeing edits at the same file offset."""

    def __init__(self, file_name: str, first: Edit, second: Edit) -> None:
        """Initialize error context.

        Args:
            file_name: File receiving the edits.
            first: Edit already accepted at the offset.
            second: Conflicting edit at the same offset.
        """
        super().__init__(
            f"Overlapping edit (file={file_name} offset={first.offset} "
            f"first={first.new_text!r}/{first.length} "
            f"second={second.new_text!r}/{second.length})"
        )
        self.file_name = file_name
        self.first = first
        self.second = second
