# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Semantic analysis contract consumed by the mangling engine."""

from typing import Protocol

from mangler.model import Definition, RenameLocation
from mangler.source import SourceFile


class SemanticService(Protocol):
    """Language-service contract that any embedding host implements.

    Every query is a pure function of the already-parsed program, so
    implementations may be called from several worker threads at once.
    """

    def program_files(self) -> list[SourceFile]:
        """Return every parsed program file, declaration files included."""

    def definitions_at(self, file_name: str, offset: int) -> list[Definition]:
        """Return declarations referenced at ``offset``; several means ambiguous."""

    def find_rename_locations(
        self, file_name: str, offset: int
    ) -> list[RenameLocation]:
        """Return every span that changes with the symbol declared at ``offset``."""

    def find_alias_definitions(self, file_name: str, offset: int) -> list[Definition]:
        """Return every declaration that shares the symbol declared at ``offset``."""

    def identifiers_in_file(self, file_name: str) -> frozenset[str]:
        """Return every identifier text present in ``file_name``."""
