"""TOON encoder implementation."""

from collections.abc import Generator, Mapping
from datetime import date, datetime, time
from typing import Any

from .errors import ToonEncodeError
from .folding import fold_key
from .options import Options, resolve_options
from .primitives import (
    EMPTY_OBJECT_TOKEN,
    encode_key,
    encode_primitive,
    format_array_header,
    format_bracket,
)
from .types import JsonValue, Shape


def encode(value: Any, options: Options | Mapping[str, Any] | None = None) -> str:
    """
    Encode a Python value to TOON format.

    Args:
        value: The value to encode (dict, list, or primitive).
        options: Encoding options, as an Options snapshot or a mapping.

    Returns:
        The TOON-formatted string.

    Raises:
        ToonEncodeError: If the value holds something TOON cannot represent.
    """
    opts = resolve_options(options)
    text = "\n".join(encode_lines(value, opts))
    if opts.newline_final:
        text += "\n"
    return text


def encode_lines(
    value: Any, options: Options | Mapping[str, Any] | None = None
) -> Generator[str, None, None]:
    """
    Encode a Python value to TOON format, yielding lines.

    Args:
        value: The value to encode.
        options: Encoding options.

    Yields:
        Lines of TOON output, without line terminators.
    """
    opts = resolve_options(options)
    yield from _encode_value(_normalize_value(value), opts)


def classify(value: JsonValue, options: Options) -> Shape:
    """
    Decide how a normalized value is rendered.

    Args:
        value: A normalized JSON value.
        options: Encoding options (``min_rows_tabular`` matters here).

    Returns:
        The value's Shape.
    """
    if isinstance(value, dict):
        return Shape.OBJECT if value else Shape.EMPTY_OBJECT

    if isinstance(value, list):
        if not value:
            return Shape.EMPTY_LIST
        if all(_is_primitive(v) for v in value):
            return Shape.PRIMITIVE_ARRAY
        if len(value) >= options.min_rows_tabular and _is_tabular_array(value):
            return Shape.TABULAR_ARRAY
        return Shape.MIXED_ARRAY

    return Shape.SCALAR


def _encode_value(value: JsonValue, opts: Options) -> Generator[str, None, None]:
    """
    Encode any value as a fragment.

    A fragment's first line carries no indentation; following lines are
    indented relative to it. Callers indent the whole fragment as needed.
    """
    shape = classify(value, opts)

    if shape is Shape.SCALAR:
        yield encode_primitive(value, opts.delimiter)
    elif shape is Shape.EMPTY_OBJECT:
        yield EMPTY_OBJECT_TOKEN
    elif shape is Shape.OBJECT:
        yield from _encode_object(value, opts)
    else:
        yield from _encode_array(value, shape, opts)


def _encode_object(obj: dict, opts: Options) -> Generator[str, None, None]:
    """Encode an object's key-value pairs."""
    child_indent = _indent(opts, 1)

    for key, value in obj.items():
        folded_key, folded_value = fold_key(key, value, opts, sibling_keys=obj.keys())
        # Folded paths are made of safe identifiers and stay bare
        encoded_key = folded_key if folded_key != key else encode_key(key)

        shape = classify(folded_value, opts)
        if shape is Shape.SCALAR:
            yield f"{encoded_key}: {encode_primitive(folded_value, opts.delimiter)}"
        elif shape is Shape.EMPTY_OBJECT:
            yield f"{encoded_key}: {EMPTY_OBJECT_TOKEN}"
        elif shape is Shape.OBJECT:
            yield f"{encoded_key}:"
            for line in _encode_object(folded_value, opts):
                yield child_indent + line
        else:
            yield from _encode_array(folded_value, shape, opts, key=encoded_key)


def _encode_array(
    arr: list, shape: Shape, opts: Options, key: str | None = None
) -> Generator[str, None, None]:
    """
    Encode an array with the format chosen by classify.

    Args:
        arr: The array.
        shape: Its Shape.
        opts: Encoding options.
        key: Pre-encoded key to put in front of the header, if any.
    """
    prefix = key or ""
    delimiter = opts.delimiter

    if shape is Shape.EMPTY_LIST:
        yield f"{prefix}{format_bracket(0, delimiter)}:"
    elif shape is Shape.PRIMITIVE_ARRAY:
        values = [encode_primitive(v, delimiter) for v in arr]
        yield f"{prefix}{format_bracket(len(arr), delimiter)}: " + delimiter.join(values)
    elif shape is Shape.TABULAR_ARRAY:
        yield from _encode_tabular(arr, opts, prefix)
    elif shape is Shape.MIXED_ARRAY:
        yield f"{prefix}[{len(arr)}]:"
        for item in arr:
            yield from _encode_list_item(item, opts)
    else:
        raise ToonEncodeError(f"Cannot encode {shape.value} as an array")


def _encode_tabular(rows: list, opts: Options, prefix: str) -> Generator[str, None, None]:
    """Encode a uniform array of objects as a header plus one row per item."""
    if not rows:
        raise ToonEncodeError("Cannot encode an empty tabular array")

    delimiter = opts.delimiter
    fields = list(rows[0].keys())
    child_indent = _indent(opts, 1)

    yield format_array_header(len(rows), key=prefix, fields=fields, delimiter=delimiter)

    for row in rows:
        values = []
        for field in fields:
            if field not in row:
                raise ToonEncodeError(f"Tabular row is missing expected key: {field}")
            cell = row[field]
            if not _is_primitive(cell):
                raise ToonEncodeError("Tabular arrays must contain only scalar values")
            values.append(encode_primitive(cell, delimiter))
        yield child_indent + delimiter.join(values)


def _encode_list_item(item: JsonValue, opts: Options) -> Generator[str, None, None]:
    """Encode a mixed-array element: first line after "- ", the rest two levels in."""
    item_indent = _indent(opts, 1)
    rest_indent = _indent(opts, 2)

    lines = _encode_value(item, opts)
    yield f"{item_indent}- {next(lines)}"
    for line in lines:
        yield rest_indent + line


def _indent(opts: Options, levels: int) -> str:
    return " " * (opts.indent * levels)


def _is_tabular_array(arr: list) -> bool:
    """Check if array can use tabular format."""
    first = arr[0]
    if not isinstance(first, dict) or not first:
        return False

    first_keys = list(first.keys())
    for item in arr:
        # Same keys in the same order
        if not isinstance(item, dict) or list(item.keys()) != first_keys:
            return False
        if not all(_is_primitive(v) for v in item.values()):
            return False

    return True


def _is_primitive(value: JsonValue) -> bool:
    """Check if value is a primitive (not dict or list)."""
    return not isinstance(value, (dict, list))


def _normalize_value(value: Any) -> JsonValue:
    """
    Normalize a value to the JSON data model.

    Converts:
    - Tuples to lists
    - Sets to lists, sorted by string representation
    - Dates, datetimes and times to ISO strings

    Args:
        value: The value to normalize.

    Returns:
        A JSON-compatible value.

    Raises:
        ToonEncodeError: For unsupported types or non-string object keys.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value

    if isinstance(value, Mapping):
        result = {}
        for k, v in value.items():
            if not isinstance(k, str):
                raise ToonEncodeError(f"Object keys must be strings, got {type(k).__name__}")
            result[k] = _normalize_value(v)
        return result

    if isinstance(value, (list, tuple)):
        return [_normalize_value(v) for v in value]

    if isinstance(value, (set, frozenset)):
        return [_normalize_value(v) for v in sorted(value, key=str)]

    if isinstance(value, (datetime, date, time)):
        return value.isoformat()

    raise ToonEncodeError(f"Unsupported data type for TOON encoding: {type(value).__name__}")
