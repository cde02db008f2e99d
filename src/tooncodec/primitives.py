"""Primitive value encoding and parsing for TOON."""

import math
from typing import TYPE_CHECKING

from .errors import ToonDecodeError, ToonEncodeError
from .string_utils import (
    escape_string,
    find_closing_quote,
    is_numeric_token,
    is_safe_unquoted,
    unescape_string,
)

if TYPE_CHECKING:
    from .types import Delimiter, JsonPrimitive, JsonValue

# Bare tokens standing for empty structures
EMPTY_LIST_TOKEN = "[]"
EMPTY_OBJECT_TOKEN = "{}"


def encode_primitive(value: "JsonPrimitive", delimiter: "Delimiter" = ",") -> str:
    """
    Encode a primitive value to TOON format.

    Args:
        value: The primitive value (str, int, float, bool, or None).
        delimiter: The active delimiter for quoting checks.

    Returns:
        The encoded string representation.

    Raises:
        ToonEncodeError: If the value is not a primitive.
    """
    if value is None:
        return "null"

    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, (int, float)):
        return _encode_number(value)

    if isinstance(value, str):
        return encode_string_literal(value, delimiter)

    raise ToonEncodeError(f"Cannot encode value of type {type(value).__name__}")


def _encode_number(value: int | float) -> str:
    """Encode a number to TOON format."""
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return "null"
        # Normalize -0 to 0
        if value == 0.0:
            return "0"
        # repr gives the shortest round-tripping form
        s = repr(value)
        if s.endswith(".0"):
            return s[:-2]
        return s

    try:
        return str(int(value))
    except ValueError as exc:
        raise ToonEncodeError(f"Integer too large to encode: {exc}") from exc


def encode_string_literal(value: str, delimiter: "Delimiter" = ",") -> str:
    """
    Encode a string value, with or without quotes.

    Args:
        value: The string to encode.
        delimiter: The active delimiter for quoting checks.

    Returns:
        The encoded string (quoted if necessary).
    """
    if is_safe_unquoted(value, delimiter):
        return value
    return quote(value)


def quote(value: str) -> str:
    """Wrap a string in quotes, escaping its content."""
    return f'"{escape_string(value)}"'


def encode_key(key: str, delimiter: "Delimiter" = ",") -> str:
    """
    Encode an object key or tabular field name.

    Keys follow the same bareness rule as string values.

    Args:
        key: The key string.
        delimiter: The active delimiter (relevant for tabular fields).

    Returns:
        The encoded key (quoted if necessary).
    """
    if is_safe_unquoted(key, ",") and is_safe_unquoted(key, delimiter):
        return key
    return quote(key)


def parse_primitive(token: str, numbers_as_strings: bool = False) -> "JsonValue":
    """
    Parse a primitive token to a Python value.

    Handles: null, true, false, numbers, quoted strings, unquoted strings,
    and the empty-structure tokens ``[]`` and ``{}``.

    Args:
        token: The token string (trimmed).
        numbers_as_strings: Return numeric tokens unchanged instead of
            converting them.

    Returns:
        The parsed Python value.

    Raises:
        ToonDecodeError: For malformed quoted strings.
    """
    if not token:
        return ""

    if token.startswith('"'):
        return parse_string_literal(token)

    if token == "null":
        return None
    if token == "true":
        return True
    if token == "false":
        return False

    if token == EMPTY_LIST_TOKEN:
        return []
    if token == EMPTY_OBJECT_TOKEN:
        return {}

    if is_numeric_token(token):
        if numbers_as_strings:
            return token
        return _parse_number(token)

    # Unquoted string
    return token


def parse_string_literal(token: str) -> str:
    """
    Parse a quoted string literal.

    Args:
        token: The token starting with '"'.

    Returns:
        The unescaped string content.

    Raises:
        ToonDecodeError: If the string is unterminated or has trailing text.
    """
    end = find_closing_quote(token, 0)
    if end == -1:
        raise ToonDecodeError(f"Unterminated string: {token}")
    if end != len(token) - 1:
        raise ToonDecodeError(f"Unexpected characters after string: {token}")
    return unescape_string(token[1:end])


def _parse_number(token: str) -> int | float:
    if "." not in token and "e" not in token.lower():
        try:
            return int(token)
        except ValueError as exc:
            # Digit-count limit of int(); numbers_as_strings keeps such tokens
            raise ToonDecodeError(f"Integer too large to decode: {len(token)} digits") from exc

    value = float(token)
    # Normalize -0 to 0
    if value == 0.0:
        return 0
    return value


def format_bracket(length: int, delimiter: "Delimiter" = ",") -> str:
    """Format the bracket portion of an array header."""
    if delimiter == ",":
        return f"[{length}]"
    return f"[{length}{delimiter}]"


def format_array_header(
    length: int,
    key: str | None = None,
    fields: list[str] | None = None,
    delimiter: "Delimiter" = ",",
) -> str:
    """
    Format an array header line.

    Args:
        length: The array length.
        key: Optional pre-encoded key (None for root arrays or list items).
        fields: Optional field names for tabular format.
        delimiter: The delimiter (included in bracket if not comma).

    Returns:
        The formatted header string.
    """
    bracket = format_bracket(length, delimiter)

    fields_part = ""
    if fields:
        fields_part = "{" + delimiter.join(encode_key(f, delimiter) for f in fields) + "}"

    return f"{key or ''}{bracket}{fields_part}:"
