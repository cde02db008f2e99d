"""String utilities for TOON encoding/decoding."""

import re
from typing import TYPE_CHECKING

from .errors import ToonDecodeError

if TYPE_CHECKING:
    from .types import Delimiter

# TOON only allows these 5 escape sequences
ESCAPE_MAP = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

UNESCAPE_MAP = {
    "\\": "\\",
    '"': '"',
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

# Reserved literals that can't be unquoted strings
RESERVED_LITERALS = frozenset({"true", "false", "null"})

# Structural characters that require quoting
STRUCTURAL_CHARS = frozenset(":[]{}")

# Pattern for valid identifier segments (used in key folding/path expansion)
IDENTIFIER_SEGMENT_PATTERN = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

# Numeric tokens the decoder turns into int/float
NUMBER_PATTERN = re.compile(r"^-?(?:0|[1-9]\d*)(?:\.\d+)?(?:[eE][+-]?\d+)?$")

# Anything a reader could mistake for a number; such strings are always quoted
NUMBER_LIKE_PATTERN = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")

# Start of an array header: [N...]: or [N...]{...}:
ARRAY_HEADER_START_PATTERN = re.compile(r"^\[\d+[^\]]*\](?:\{[^}]*\})?:")


def escape_string(value: str) -> str:
    """
    Escape a string for use in TOON quoted strings.

    Only the 5 valid TOON escape sequences are produced:
    - \\\\ (backslash)
    - \\" (double quote)
    - \\n (newline)
    - \\r (carriage return)
    - \\t (tab)

    Args:
        value: The string to escape.

    Returns:
        The escaped string (without surrounding quotes).
    """
    return "".join(ESCAPE_MAP.get(char, char) for char in value)


def unescape_string(value: str) -> str:
    """
    Unescape a TOON string that was inside quotes.

    Args:
        value: The string content (without surrounding quotes).

    Returns:
        The unescaped string.

    Raises:
        ToonDecodeError: If an invalid escape sequence is found or backslash at end.
    """
    result = []
    i = 0
    while i < len(value):
        char = value[i]
        if char == "\\":
            if i + 1 >= len(value):
                raise ToonDecodeError("Backslash at end of string")
            next_char = value[i + 1]
            if next_char not in UNESCAPE_MAP:
                raise ToonDecodeError(f"Invalid escape sequence: \\{next_char}")
            result.append(UNESCAPE_MAP[next_char])
            i += 2
        else:
            result.append(char)
            i += 1
    return "".join(result)


def is_safe_unquoted(value: str, delimiter: "Delimiter" = ",") -> bool:
    """
    Check if a string can be safely represented without quotes.

    A string can be unquoted if:
    - Non-empty
    - No whitespace anywhere
    - Not exactly a boolean/null literal
    - Doesn't look like a number
    - No structural chars (: [ ] { }) and no active delimiter
    - No quotes, backslashes or control chars
    - Doesn't look like an array header
    - Isn't a list marker ("-" or starting with "- ")

    Args:
        value: The string to check.
        delimiter: The active delimiter character.

    Returns:
        True if the string can be unquoted.
    """
    if not value:
        return False

    if value in RESERVED_LITERALS:
        return False

    if looks_like_number(value):
        return False

    for char in value:
        if char.isspace() or _is_control(char):
            return False
        if char in STRUCTURAL_CHARS or char == delimiter:
            return False
        if char == '"' or char == "\\":
            return False

    if ARRAY_HEADER_START_PATTERN.match(value):
        return False

    if value == "-" or value.startswith("- "):
        return False

    return True


def _is_control(char: str) -> bool:
    return char < " " or char == "\x7f"


def looks_like_number(value: str) -> bool:
    """Check if a string could be read as a number literal."""
    return bool(NUMBER_LIKE_PATTERN.match(value))


def is_numeric_token(token: str) -> bool:
    """Check if a bare token decodes to a number."""
    return bool(NUMBER_PATTERN.match(token))


def is_valid_identifier_segment(segment: str) -> bool:
    """
    Check if a string is a valid identifier segment for folding/expansion.

    Valid segments start with a letter or underscore and contain only
    letters, digits and underscores.
    """
    return bool(IDENTIFIER_SEGMENT_PATTERN.match(segment))


def is_valid_dotted_path(key: str) -> bool:
    """
    Check if a key is a valid dotted path for folding/expansion.

    Args:
        key: The key to check (may contain dots).

    Returns:
        True if the key has a dot and all segments are valid identifiers.
    """
    if not key or "." not in key:
        return False
    return all(is_valid_identifier_segment(seg) for seg in key.split("."))


def find_closing_quote(s: str, start: int) -> int:
    """
    Find the closing quote in a string.

    Args:
        s: The string to search.
        start: The position of the opening quote.

    Returns:
        Index of the closing quote, or -1 if not found.
    """
    i = start + 1
    while i < len(s):
        char = s[i]
        if char == "\\":
            # Skip escape sequence
            i += 2
            continue
        if char == '"':
            return i
        i += 1
    return -1


def find_unquoted_colon(line: str) -> int:
    """
    Find the position of the first unquoted colon in a line.

    Args:
        line: The line to search.

    Returns:
        Index of the colon, or -1 if not found.
    """
    in_quotes = False
    i = 0
    while i < len(line):
        char = line[i]
        if char == "\\" and in_quotes and i + 1 < len(line):
            i += 2
            continue
        if char == '"':
            in_quotes = not in_quotes
        elif char == ":" and not in_quotes:
            return i
        i += 1
    return -1


def split_by_delimiter(value: str, delimiter: "Delimiter") -> list[str]:
    """
    Split a string by delimiter, respecting quoted sections.

    Args:
        value: The string to split.
        delimiter: The delimiter character.

    Returns:
        List of values (still containing quotes if originally quoted).
    """
    result = []
    current = []
    in_quotes = False
    i = 0

    while i < len(value):
        char = value[i]
        if char == "\\" and in_quotes and i + 1 < len(value):
            # Keep escape sequence intact
            current.append(char)
            current.append(value[i + 1])
            i += 2
            continue
        if char == '"':
            in_quotes = not in_quotes
            current.append(char)
        elif char == delimiter and not in_quotes:
            result.append(_strip_cell("".join(current), delimiter))
            current = []
        else:
            current.append(char)
        i += 1

    result.append(_strip_cell("".join(current), delimiter))
    return result


def _strip_cell(cell: str, delimiter: "Delimiter") -> str:
    # Tabs are never padding when they are the delimiter
    if delimiter == "\t":
        return cell.strip(" ")
    return cell.strip()
