"""TOON decoder implementation."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from typing import Any, NamedTuple

from .errors import ToonDecodeError
from .folding import assign_path
from .lines import parse_lines, rebase, split_text
from .options import Options, resolve_options
from .primitives import parse_primitive
from .string_utils import (
    find_closing_quote,
    find_unquoted_colon,
    split_by_delimiter,
    unescape_string,
)
from .types import DELIMITERS, ArrayHeaderInfo, JsonValue, LineRecord

logger = logging.getLogger(__name__)

# Field list inside braces; quoted field names may contain "}"
_FIELDS = r'(?:[^}"]|"(?:[^"\\]|\\.)*")*'

# Pattern for array header: [N<delim?>]{fields}:rest
ARRAY_HEADER_PATTERN = re.compile(
    r"^\[(?P<length>\d+)(?P<suffix>[^\]]*)\]"
    r"(?:\{(?P<fields>" + _FIELDS + r")\})?"
    r":(?P<rest>.*)$"
)

# Anything starting like a bracket header; must then parse as one
_BRACKET_START = re.compile(r"^\[\d+[^\]]*\]")

# Header suffix carried by a key: key[N<delim?>]{fields}
_KEY_HEADER_SUFFIX = re.compile(r"^\[\d+[^\]]*\](?:\{" + _FIELDS + r"\})?$")


class _KeyLine(NamedTuple):
    """An object entry line split into its parts."""

    key: str
    quoted: bool
    header: str
    """Array header suffix attached to the key, empty if none."""
    rest: str
    """Text after the colon, stripped."""


def decode(text: str, options: Options | Mapping[str, Any] | None = None) -> JsonValue:
    """
    Decode TOON text to a Python value.

    Args:
        text: The TOON-formatted string.
        options: Decoding options, as an Options snapshot or a mapping.

    Returns:
        The decoded Python value. Empty input gives {} when ``spec_strict``
        is set and None otherwise. Malformed input gives None when
        ``throw_on_decode_error`` is off.

    Raises:
        ToonDecodeError: For malformed input, unless suppressed by options.
    """
    if not isinstance(text, str):
        raise TypeError(f"decode() expects str, not {type(text).__name__}")
    return decode_lines(split_text(text), options)


def decode_lines(
    lines: Iterable[str], options: Options | Mapping[str, Any] | None = None
) -> JsonValue:
    """
    Decode TOON from pre-split lines.

    Args:
        lines: Iterable of line strings.
        options: Decoding options.

    Returns:
        The decoded Python value.
    """
    opts = resolve_options(options)
    try:
        records = parse_lines(lines, opts.indent)
        if not records:
            return {} if opts.spec_strict else None
        return _decode_records(records, opts)
    except ToonDecodeError as exc:
        if opts.throw_on_decode_error:
            raise
        logger.debug("Returning None for invalid TOON input: %s", exc)
        return None


def _decode_records(records: Sequence[LineRecord], options: Options) -> JsonValue:
    """Decode a complete document whose root line sits at depth 0."""
    parser = _Parser(records, options)
    value = parser.parse_value(0)

    leftover = parser.peek()
    if leftover is not None:
        raise ToonDecodeError(
            f"Unexpected content after document: {leftover.content!r}", leftover.line_number
        )
    return value


class _Parser:
    """Recursive-descent parser over the records of one document.

    Every instance owns its cursor; nested fragments get their own parser.
    """

    def __init__(self, records: Sequence[LineRecord], options: Options):
        self.records = records
        self.options = options
        self.pos = 0

    def peek(self) -> LineRecord | None:
        """Look at current line without advancing."""
        if self.pos < len(self.records):
            return self.records[self.pos]
        return None

    def parse_value(self, depth: int) -> JsonValue:
        """Parse the value starting at the cursor, which must sit at ``depth``."""
        record = self.peek()
        if record is None:
            raise ToonDecodeError("Unexpected end of input")

        if record.depth != depth:
            raise ToonDecodeError(
                f"Indentation mismatch: expected depth {depth}, got {record.depth}",
                record.line_number,
            )

        header = _parse_array_header(record, self.options.delimiter)
        if header is not None:
            self.pos += 1
            return self._parse_array(header, depth, record)

        if _split_key_line(record) is not None:
            return self._parse_object(depth)

        self.pos += 1
        return self._parse_scalar(record.content, record.line_number)

    def _parse_array(self, header: ArrayHeaderInfo, depth: int, record: LineRecord) -> list:
        """Parse the body that belongs to an already consumed header line."""
        if header.tabular:
            if header.inline:
                raise ToonDecodeError(
                    "Tabular array header cannot carry inline values", record.line_number
                )
            return self._parse_tabular_rows(header, depth, record)

        if header.inline:
            return self._parse_inline_values(header, record)

        return self._parse_list_items(header, depth, record)

    def _parse_inline_values(self, header: ArrayHeaderInfo, record: LineRecord) -> list:
        """Decode inline primitive array values."""
        tokens = split_by_delimiter(header.inline, header.delimiter)
        result = [self._parse_scalar(token, record.line_number) for token in tokens]

        if len(result) != header.length:
            raise ToonDecodeError(
                f"Inline array length mismatch: expected {header.length}, got {len(result)}",
                record.line_number,
            )
        return result

    def _parse_tabular_rows(
        self, header: ArrayHeaderInfo, depth: int, record: LineRecord
    ) -> list[dict]:
        """Decode tabular array rows."""
        fields = header.fields
        if not fields:
            raise ToonDecodeError(
                "Tabular array header must declare at least one field", record.line_number
            )

        result = []
        row_depth = depth + 1

        while len(result) < header.length:
            line = self.peek()
            if line is None or line.depth < row_depth:
                break
            if line.depth > row_depth:
                raise ToonDecodeError("Unexpected indentation inside tabular rows", line.line_number)

            values = split_by_delimiter(line.content, header.delimiter)
            if len(values) != len(fields):
                raise ToonDecodeError(
                    f"Expected {len(fields)} values, got {len(values)}", line.line_number
                )

            row = {}
            for field, value in zip(fields, values):
                row[field] = self._parse_scalar(value, line.line_number)
            result.append(row)
            self.pos += 1

        if len(result) != header.length:
            raise ToonDecodeError(
                f"Tabular array length mismatch: expected {header.length}, got {len(result)}",
                record.line_number,
            )
        return result

    def _parse_list_items(self, header: ArrayHeaderInfo, depth: int, record: LineRecord) -> list:
        """Decode list items (lines starting with "- ")."""
        result = []
        item_depth = depth + 1

        while len(result) < header.length:
            line = self.peek()
            if line is None or line.depth < item_depth:
                break
            if line.depth > item_depth:
                raise ToonDecodeError("Unexpected indentation inside list items", line.line_number)

            content = line.content
            if content == "-":
                first = ""
            elif content.startswith("- "):
                first = content[2:].strip()
            else:
                break

            self.pos += 1
            nested = self._take_deeper(item_depth)

            if nested:
                # Lines below the marker were written two levels under the header
                fragment = rebase(first, nested, item_depth + 1, line.line_number)
                result.append(_decode_records(fragment, self.options))
            else:
                result.append(self._parse_inline_value(first, line.line_number))

        if len(result) != header.length:
            raise ToonDecodeError(
                f"Array length mismatch: expected {header.length}, got {len(result)}",
                record.line_number,
            )
        return result

    def _take_deeper(self, depth: int) -> list[LineRecord]:
        """Consume every following line deeper than ``depth``."""
        start = self.pos
        while self.pos < len(self.records) and self.records[self.pos].depth > depth:
            self.pos += 1
        return list(self.records[start : self.pos])

    def _parse_object(self, depth: int) -> dict:
        """Decode an object at the given depth."""
        result: dict[str, JsonValue] = {}

        while True:
            line = self.peek()
            if line is None or line.depth < depth:
                break
            if line.depth > depth:
                raise ToonDecodeError("Unexpected indentation inside object", line.line_number)

            entry = _split_key_line(line)
            if entry is None:
                break
            self.pos += 1

            if entry.header:
                header = _parse_array_header(
                    replace(line, content=f"{entry.header}:{entry.rest}"), self.options.delimiter
                )
                value = self._parse_array(header, depth, line)
            elif entry.rest:
                value = self._parse_inline_value(entry.rest, line.line_number)
            else:
                next_line = self.peek()
                if next_line is None or next_line.depth <= depth:
                    value = None
                else:
                    value = self.parse_value(next_line.depth)

            assign_path(result, entry.key, value, self.options.expand_paths, entry.quoted)

        return result

    def _parse_inline_value(self, text: str, line_number: int) -> JsonValue:
        """Decode a single-line value: a scalar, or a one-line header/object."""
        text = text.strip()
        if not text:
            return None

        record = LineRecord(content=text, indent=0, depth=0, line_number=line_number)
        is_header = _parse_array_header(record, self.options.delimiter) is not None
        if is_header or _split_key_line(record) is not None:
            return _decode_records([record], self.options)

        return self._parse_scalar(text, line_number)

    def _parse_scalar(self, token: str, line_number: int) -> JsonValue:
        try:
            return parse_primitive(token, self.options.numbers_as_strings)
        except ToonDecodeError as exc:
            if exc.line_number is not None:
                raise
            raise ToonDecodeError(str(exc), line_number) from exc


def _parse_array_header(
    record: LineRecord, default_delimiter: str = ","
) -> ArrayHeaderInfo | None:
    """
    Parse a line as an array header.

    Returns:
        The header info, or None when the line is not an array header.

    Raises:
        ToonDecodeError: When the line starts like a header but is malformed.
    """
    content = record.content
    match = ARRAY_HEADER_PATTERN.match(content)
    if not match:
        if _BRACKET_START.match(content):
            raise ToonDecodeError(f"Invalid array header syntax: {content}", record.line_number)
        return None

    suffix = match.group("suffix")
    delimiter = suffix if suffix in DELIMITERS else default_delimiter

    fields_str = match.group("fields")
    fields = []
    if fields_str is not None and fields_str.strip():
        fields = [
            _parse_field(f, record.line_number) for f in split_by_delimiter(fields_str, delimiter)
        ]

    return ArrayHeaderInfo(
        length=int(match.group("length")),
        delimiter=delimiter,
        fields=fields,
        tabular=fields_str is not None,
        inline=match.group("rest").strip(),
    )


def _parse_field(token: str, line_number: int) -> str:
    """Parse a tabular field name, handling quoted names."""
    token = token.strip()
    if token.startswith('"'):
        end = find_closing_quote(token, 0)
        if end != len(token) - 1:
            raise ToonDecodeError(f"Malformed field name: {token}", line_number)
        return _unescape(token[1:end], line_number)
    return token


def _split_key_line(record: LineRecord) -> _KeyLine | None:
    """
    Split an object entry line into key, header suffix and value text.

    A key line is a quoted or bare key, optionally followed by an array
    header, then an unquoted colon. Bare keys contain no whitespace.

    Returns:
        The split line, or None when the line is not an object entry.
    """
    content = record.content
    colon = find_unquoted_colon(content)
    if colon <= 0:
        return None

    raw_key = content[:colon]
    rest = content[colon + 1 :].strip()

    if raw_key.startswith('"'):
        end = find_closing_quote(raw_key, 0)
        if end == -1:
            return None
        header = raw_key[end + 1 :]
        if header and not _KEY_HEADER_SUFFIX.match(header):
            return None
        key = _unescape(raw_key[1:end], record.line_number)
        return _KeyLine(key=key, quoted=True, header=header, rest=rest)

    bracket = raw_key.find("[")
    if bracket == -1:
        key, header = raw_key, ""
    else:
        key, header = raw_key[:bracket], raw_key[bracket:]
        if not _KEY_HEADER_SUFFIX.match(header):
            if not key or any(c.isspace() for c in key):
                return None
            raise ToonDecodeError(f"Invalid array header syntax: {raw_key}", record.line_number)

    if not key or any(c.isspace() for c in key):
        return None
    return _KeyLine(key=key, quoted=False, header=header, rest=rest)


def _unescape(value: str, line_number: int) -> str:
    try:
        return unescape_string(value)
    except ToonDecodeError as exc:
        raise ToonDecodeError(str(exc), line_number) from exc
