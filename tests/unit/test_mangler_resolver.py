# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for concurrent rename resolution."""

import threading

import pytest

from mangler.model import Edit, RenameLocation
from mangler.resolver import RenameResolver


class _FakeService:
    def __init__(self, answers: dict[tuple[str, int], list[RenameLocation]]) -> None:
        self._answers = answers
        self.calls: list[tuple[str, int]] = []
        self._lock = threading.Lock()

    def find_rename_locations(self, file_name: str, offset: int) -> list[RenameLocation]:
        with self._lock:
            self.calls.append((file_name, offset))
        if offset < 0:
            raise RuntimeError("service crashed")
        return self._answers.get((file_name, offset), [])


def test_ph7_mgl_401_resolver_groups_edits_per_file_in_query_order() -> None:
    service = _FakeService(
        {
            ("/p/a.ts", 10): [
                RenameLocation("/p/a.ts", 10, 5),
                RenameLocation("/p/b.ts", 30, 5),
            ],
            ("/p/b.ts", 4): [
                RenameLocation("/p/b.ts", 4, 7, prefix_text="counter: "),
                RenameLocation("/p/b.ts", 50, 7, suffix_text=" as counter"),
            ],
        }
    )
    resolver = RenameResolver(service, max_workers=2)
    resolver.queue("/p/a.ts", 10, "a")
    resolver.queue("/p/b.ts", 4, "$b")

    assert resolver.pending == 2
    edits = resolver.resolve()

    assert resolver.pending == 0
    assert sorted(service.calls) == [("/p/a.ts", 10), ("/p/b.ts", 4)]
    assert edits == {
        "/p/a.ts": [Edit("/p/a.ts", 10, 5, "a")],
        "/p/b.ts": [
            Edit("/p/b.ts", 30, 5, "a"),
            Edit("/p/b.ts", 4, 7, "counter: $b"),
            Edit("/p/b.ts", 50, 7, "$b as counter"),
        ],
    }


def test_ph7_mgl_402_resolver_rejects_non_positive_worker_count() -> None:
    with pytest.raises(ValueError):
        RenameResolver(_FakeService({}), max_workers=0)


def test_ph7_mgl_403_resolver_propagates_service_failures() -> None:
    resolver = RenameResolver(_FakeService({}), max_workers=1)
    resolver.queue("/p/a.ts", -1, "a")

    with pytest.raises(RuntimeError, match="service crashed"):
        resolver.resolve()


def test_ph7_mgl_404_resolver_without_queries_returns_no_edits() -> None:
    resolver = RenameResolver(_FakeService({}))

    assert resolver.resolve() == {}
