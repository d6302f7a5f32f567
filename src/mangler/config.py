# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Engine settings for a mangling run."""

from dataclasses import dataclass

DEFAULT_OPT_OUT_MARKER = "@skipMangle"


@dataclass(frozen=True)
class MangleOptions:
    """Represent settings that shape one mangling run.

    Attributes:
        skipped_files: File stems whose exported names are never mangled, such
            as entry points, generated files, and modules passed around as values.
        strict_public: Field names allowed to leak from protected to public;
            ``None`` tolerates every leak.
        max_workers: Maximum number of concurrent rename queries.
        map_root: Explicit source map root; derived from the project when unset.
        opt_out_marker: Text that excludes an exported declaration from mangling.
    """

    skipped_files: tuple[str, ...] = ()
    strict_public: frozenset[str] | None = None
    max_workers: int = 2
    map_root: str | None = None
    opt_out_marker: str = DEFAULT_OPT_OUT_MARKER

    def __post_init__(self) -> None:
        if self.max_workers <= 0:
            raise ValueError("max_workers must be > 0")
        if not self.opt_out_marker:
            raise ValueError("opt_out_marker must not be empty")
