# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for short identifier allocation."""

from mangler.short_ident import RESERVED_WORDS, FileIdentAllocator, ShortIdent, convert


def test_ph7_mgl_001_convert_emits_least_significant_digit_first() -> None:
    assert convert(0) == "a"
    assert convert(25) == "z"
    assert convert(26) == "A"
    assert convert(63) == "_"
    assert convert(64) == "ab"
    assert convert(65) == "bb"


def test_ph7_mgl_002_allocator_skips_digit_and_underscore_prefixes() -> None:
    pool = ShortIdent()

    names = [pool.next() for _ in range(54)]

    assert names[:26] == [chr(code) for code in range(ord("a"), ord("z") + 1)]
    assert names[26:52] == [chr(code) for code in range(ord("A"), ord("Z") + 1)]
    assert names[52] == "$"
    assert names[53] == "ab"


def test_ph7_mgl_003_allocator_never_yields_reserved_words_or_duplicates() -> None:
    pool = ShortIdent()

    names = [pool.next() for _ in range(5000)]

    assert len(set(names)) == len(names)
    assert not RESERVED_WORDS.intersection(names)
    assert "do" not in names
    assert "in" not in names


def test_ph7_mgl_004_allocator_applies_shared_and_local_checks() -> None:
    pool = ShortIdent("", lambda name: name in {"a", "b"})

    first = pool.next()
    second = pool.next(lambda name: name == "d")
    third = pool.next()

    assert first == "c"
    assert second == "e"
    assert third == "f"


def test_ph7_mgl_005_allocators_are_deterministic() -> None:
    left = ShortIdent()
    right = ShortIdent()

    assert [left.next() for _ in range(200)] == [right.next() for _ in range(200)]


def test_ph7_mgl_006_file_allocator_prefixes_and_checks_per_file() -> None:
    identifiers = {"/p/one.ts": frozenset({"$a", "value"}), "/p/two.ts": frozenset()}
    allocator = FileIdentAllocator(lambda file_name: identifiers[file_name])

    first = allocator.next("/p/one.ts")
    second = allocator.next("/p/two.ts")
    third = allocator.next("/p/one.ts")

    assert first == "$b"
    assert second == "$c"
    assert third == "$d"
