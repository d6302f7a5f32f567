# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Unit tests for source map encoding."""

import pytest

from mangler.sourcemap import SourceMapGenerator, decode_mappings, decode_vlq_segment, encode_vlq


def test_ph7_mgl_601_vlq_encoding_matches_known_values() -> None:
    assert encode_vlq(0) == "A"
    assert encode_vlq(1) == "C"
    assert encode_vlq(-1) == "D"
    assert encode_vlq(15) == "e"
    assert encode_vlq(16) == "gB"
    assert decode_vlq_segment("AAgBD") == [0, 0, 16, -1]


def test_ph7_mgl_602_vlq_decoding_rejects_bad_input() -> None:
    with pytest.raises(ValueError):
        decode_vlq_segment("A!")
    with pytest.raises(ValueError):
        decode_vlq_segment("g")


def test_ph7_mgl_603_generator_serializes_lines_and_names() -> None:
    generator = SourceMapGenerator(file="a.ts")
    generator.add_mapping(generated=(2, 4), original=(2, 4), source="a.ts", name="value")
    generator.add_mapping(generated=(2, 5), original=(2, 8), source="a.ts")

    document = generator.to_dict()

    assert document["mappings"] == ";IACIA,CAAI"
    assert document["names"] == ["value"]
    assert "sourceRoot" not in document
    assert "sourcesContent" not in document
    decoded = decode_mappings(document)
    assert [(item.generated_line, item.generated_column, item.name) for item in decoded] == [
        (2, 4, "value"),
        (2, 5, None),
    ]
