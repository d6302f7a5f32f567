# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Public import surface for the TypeScript mangler."""

from mangler.config import MangleOptions
from mangler.errors import (
    DuplicateDeclarationError,
    HierarchyCycleError,
    MangleError,
    OverlappingEditError,
    VisibilityLeakError,
)
from mangler.mangler import Mangler
from mangler.model import MangleSummary, RenderedFile
from mangler.service import SemanticService
from mangler.tsconfig import TsConfig, TsConfigError
from mangler.typescript import TypeScriptProject, parse_source

__all__ = [
    "DuplicateDeclarationError",
    "HierarchyCycleError",
    "MangleError",
    "MangleOptions",
    "MangleSummary",
    "Mangler",
    "OverlappingEditError",
    "RenderedFile",
    "SemanticService",
    "TsConfig",
    "TsConfigError",
    "TypeScriptProject",
    "VisibilityLeakError",
    "parse_source",
]
