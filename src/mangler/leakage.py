# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Detect protected fields that a subclass re-declares as public."""

import logging
from collections.abc import Collection

from mangler.classes import ClassHierarchy, ClassRecord
from mangler.errors import VisibilityLeakError
from mangler.model import LeakageViolation

logger = logging.getLogger(__name__)


def make_implicit_public_actually_public(
    hierarchy: ClassHierarchy, index: int
) -> list[LeakageViolation]:
    """Promote ancestor protected fields that one class exposes publicly.

    A subclass may widen an inherited protected member to public. The
    ancestor member is promoted too, so neither of them gets renamed.

    Args:
        hierarchy: Linked class records.
        index: Index of the class whose public fields are checked.

    Returns:
        One violation per promoted ancestor field.
    """
    record = hierarchy.records[index]
    violations: list[LeakageViolation] = []
    for name, info in record.fields.items():
        if info.visibility != "public":
            continue
        for ancestor in hierarchy.ancestors(index):
            inherited = ancestor.fields.get(name)
            if inherited is None or inherited.visibility != "protected":
                continue
            violations.append(
                LeakageViolation(
                    field_name=name,
                    descendant_site=f"{record.file_name}:{info.line}",
                    ancestor_site=f"'{name}' from {ancestor.file_name}:{inherited.line}",
                )
            )
            inherited.visibility = "public"
    return violations


def promote_leaked_fields(
    hierarchy: ClassHierarchy, strict_public: Collection[str] | None = None
) -> list[LeakageViolation]:
    """Run the leakage pass over every class and enforce the allow-list.

    Args:
        hierarchy: Linked class records.
        strict_public: Field names allowed to leak; ``None`` tolerates every leak.

    Returns:
        Every recorded violation.

    Raises:
        VisibilityLeakError: If a leaked field is missing from ``strict_public``.
    """
    violations: list[LeakageViolation] = []
    fails = False
    for index in range(len(hierarchy)):
        for violation in make_implicit_public_actually_public(hierarchy, index):
            violations.append(violation)
            if strict_public is not None and violation.field_name not in strict_public:
                fails = True

    by_ancestor: dict[str, list[str]] = {}
    for violation in violations:
        by_ancestor.setdefault(violation.ancestor_site, []).append(
            violation.descendant_site
        )
    for ancestor_site, descendant_sites in by_ancestor.items():
        logger.warning(
            "%s became PUBLIC because of: %s",
            ancestor_site,
            " , ".join(descendant_sites),
        )

    if fails:
        error = VisibilityLeakError(violations)
        logger.error("%s", error)
        raise error
    return violations


def is_public_in_ancestors(
    hierarchy: ClassHierarchy, record: ClassRecord, name: str
) -> bool:
    """Check whether any ancestor of ``record`` exposes ``name`` publicly.

    Args:
        hierarchy: Linked class records.
        record: Class owning the field.
        name: Field name.

    Returns:
        True when an ancestor field of that name is public.
    """
    parent = hierarchy.parent_of(record)
    while parent is not None:
        inherited = parent.fields.get(name)
        if inherited is not None and inherited.visibility == "public":
            return True
        parent = hierarchy.parent_of(parent)
    return False
