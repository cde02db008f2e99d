"""Line model: splits TOON text into indentation-aware records."""

import re
from collections.abc import Iterable, Sequence

from .errors import ToonDecodeError
from .types import LineRecord

_NEWLINES = re.compile(r"\r\n|\r")


def split_text(text: str) -> list[str]:
    """Split text into lines, accepting LF, CRLF and CR line endings."""
    return _NEWLINES.sub("\n", text).split("\n")


def parse_lines(lines: Iterable[str], indent_size: int) -> list[LineRecord]:
    """
    Parse raw lines into LineRecord objects.

    Blank lines are dropped and trailing whitespace is stripped. Leading
    spaces must be a multiple of ``indent_size``.

    Args:
        lines: Raw lines without line terminators.
        indent_size: Spaces per indentation level.

    Returns:
        One record per non-blank line.

    Raises:
        ToonDecodeError: On tabs in indentation or a width that is not a
            multiple of ``indent_size``.
    """
    records = []
    for number, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n").rstrip(" \t")
        if not line.strip():
            continue

        content = line.lstrip(" ")
        indent = len(line) - len(content)

        if content.startswith("\t"):
            raise ToonDecodeError("Tab in indentation (use spaces)", number)

        if indent % indent_size != 0:
            raise ToonDecodeError(
                f"Indentation {indent} is not a multiple of {indent_size}", number
            )

        records.append(
            LineRecord(
                content=content,
                indent=indent,
                depth=indent // indent_size,
                line_number=number,
            )
        )
    return records


def rebase(
    first: str, records: Sequence[LineRecord], base_depth: int, first_line_number: int
) -> list[LineRecord]:
    """
    Build a standalone fragment from a first line and the lines below it.

    ``first`` becomes the fragment's root line at depth 0 and every record is
    shifted so that ``base_depth`` maps to depth 0. Line numbers are kept so
    errors still point into the original input.

    Args:
        first: Content of the fragment's first line (may be empty).
        records: Following records, all deeper than ``base_depth - 1``.
        base_depth: Depth in the original input that becomes depth 0.
        first_line_number: Original line number of ``first``.

    Returns:
        The re-based records.
    """
    fragment = []
    if first:
        fragment.append(
            LineRecord(content=first, indent=0, depth=0, line_number=first_line_number)
        )
    for record in records:
        depth = max(record.depth - base_depth, 0)
        fragment.append(
            LineRecord(
                content=record.content,
                indent=record.indent,
                depth=depth,
                line_number=record.line_number,
            )
        )
    return fragment


def render_lines(records: Iterable[LineRecord], indent_size: int) -> str:
    """
    Render records back to TOON text.

    Args:
        records: Records to render.
        indent_size: Spaces per indentation level.

    Returns:
        The text, one line per record, without a trailing newline.
    """
    return "\n".join(" " * (record.depth * indent_size) + record.content for record in records)
