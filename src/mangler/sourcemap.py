# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Source map (revision 3) generation and mapping decoding."""

import json
from dataclasses import dataclass

_BASE64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_BASE64_INDEX = {char: index for index, char in enumerate(_BASE64)}
_VLQ_SHIFT = 5
_VLQ_CONTINUATION = 1 << _VLQ_SHIFT
_VLQ_MASK = _VLQ_CONTINUATION - 1


@dataclass(frozen=True)
class Mapping:
    """Represent one generated-to-original position correspondence.

    Attributes:
        generated_line: One-based line in the generated text.
        generated_column: Zero-based column in the generated text.
        source: Source path the original position refers to.
        original_line: One-based line in the original text.
        original_column: Zero-based column in the original text.
        name: Original symbol name, if any.
    """

    generated_line: int
    generated_column: int
    source: str
    original_line: int
    original_column: int
    name: str | None = None


def encode_vlq(value: int) -> str:
    """Encode a signed integer as a base64 VLQ string."""
    vlq = ((-value) << 1) | 1 if value < 0 else value << 1
    chars: list[str] = []
    while True:
        digit = vlq & _VLQ_MASK
        vlq >>= _VLQ_SHIFT
        if vlq:
            digit |= _VLQ_CONTINUATION
        chars.append(_BASE64[digit])
        if not vlq:
            return "".join(chars)


def decode_vlq_segment(segment: str) -> list[int]:
    """Decode one comma-separated mappings segment into signed integers.

    Args:
        segment: Base64 VLQ text.

    Returns:
        Decoded field values.

    Raises:
        ValueError: If the segment holds an invalid or truncated digit.
    """
    values: list[int] = []
    shift = 0
    accumulated = 0
    for char in segment:
        if char not in _BASE64_INDEX:
            raise ValueError(f"Invalid base64 VLQ digit: {char!r}")
        digit = _BASE64_INDEX[char]
        accumulated += (digit & _VLQ_MASK) << shift
        if digit & _VLQ_CONTINUATION:
            shift += _VLQ_SHIFT
            continue
        negative = accumulated & 1
        accumulated >>= 1
        values.append(-accumulated if negative else accumulated)
        shift = 0
        accumulated = 0
    if shift:
        raise ValueError(f"Truncated base64 VLQ segment: {segment!r}")
    return values


class SourceMapGenerator:
    """Collect mappings and serialize them as a source map document."""

    def __init__(self, file: str, source_root: str | None = None) -> None:
        """Initialize generator state.

        Args:
            file: Name of the generated file.
            source_root: Root prepended to every source path by consumers.
        """
        self._file = file
        self._source_root = source_root
        self._mappings: list[Mapping] = []
        self._sources: list[str] = []
        self._names: list[str] = []
        self._contents: dict[str, str] = {}

    def add_mapping(
        self,
        generated: tuple[int, int],
        original: tuple[int, int],
        source: str,
        name: str | None = None,
    ) -> None:
        """Record one correspondence.

        Args:
            generated: One-based line and zero-based column in generated text.
            original: One-based line and zero-based column in original text.
            source: Source path of the original text.
            name: Original symbol name at this position.
        """
        if source not in self._sources:
            self._sources.append(source)
        if name is not None and name not in self._names:
            self._names.append(name)
        self._mappings.append(
            Mapping(
                generated_line=generated[0],
                generated_column=generated[1],
                source=source,
                original_line=original[0],
                original_column=original[1],
                name=name,
            )
        )

    def set_source_content(self, source: str, content: str) -> None:
        """Embed the original text of ``source`` in the map."""
        if source not in self._sources:
            self._sources.append(source)
        self._contents[source] = content

    def to_dict(self) -> dict[str, object]:
        """Return the source map as a JSON-compatible dictionary."""
        document: dict[str, object] = {
            "version": 3,
            "sources": list(self._sources),
            "names": list(self._names),
            "mappings": self._serialize_mappings(),
            "file": self._file,
        }
        if self._source_root is not None:
            document["sourceRoot"] = self._source_root
        if self._contents:
            document["sourcesContent"] = [
                self._contents.get(source) for source in self._sources
            ]
        return document

    def to_json(self) -> str:
        """Return the serialized source map."""
        return json.dumps(self.to_dict())

    def _serialize_mappings(self) -> str:
        ordered = sorted(
            self._mappings,
            key=lambda item: (item.generated_line, item.generated_column),
        )
        source_index = {source: index for index, source in enumerate(self._sources)}
        name_index = {name: index for index, name in enumerate(self._names)}
        lines: list[str] = []
        segments: list[str] = []
        current_line = 1
        previous_column = 0
        previous_source = 0
        previous_original_line = 0
        previous_original_column = 0
        previous_name = 0
        for mapping in ordered:
            while current_line < mapping.generated_line:
                lines.append(",".join(segments))
                segments = []
                current_line += 1
                previous_column = 0
            fields = [
                mapping.generated_column - previous_column,
                source_index[mapping.source] - previous_source,
                mapping.original_line - 1 - previous_original_line,
                mapping.original_column - previous_original_column,
            ]
            previous_column = mapping.generated_column
            previous_source = source_index[mapping.source]
            previous_original_line = mapping.original_line - 1
            previous_original_column = mapping.original_column
            if mapping.name is not None:
                fields.append(name_index[mapping.name] - previous_name)
                previous_name = name_index[mapping.name]
            segments.append("".join(encode_vlq(value) for value in fields))
        lines.append(",".join(segments))
        return ";".join(lines)


def decode_mappings(document: dict) -> list[Mapping]:
    """Decode the ``mappings`` field of a source map document.

    Args:
        document: Parsed source map.

    Returns:
        Mappings in generated order.
    """
    sources = list(document.get("sources", []))
    names = list(document.get("names", []))
    mappings_text = str(document.get("mappings", ""))
    decoded: list[Mapping] = []
    source = 0
    original_line = 0
    original_column = 0
    name = 0
    for line_index, line in enumerate(mappings_text.split(";")):
        column = 0
        for segment in line.split(","):
            if not segment:
                continue
            values = decode_vlq_segment(segment)
            column += values[0]
            if len(values) < 4:
                continue
            source += values[1]
            original_line += values[2]
            original_column += values[3]
            symbol: str | None = None
            if len(values) >= 5:
                name += values[4]
                symbol = names[name]
            decoded.append(
                Mapping(
                    generated_line=line_index + 1,
                    generated_column=column,
                    source=sources[source],
                    original_line=original_line + 1,
                    original_column=original_column,
                    name=symbol,
                )
            )
    return decoded
