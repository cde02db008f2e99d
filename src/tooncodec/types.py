"""Type definitions for the TOON encoder/decoder."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

# JSON type aliases
JsonPrimitive = str | int | float | bool | None
JsonArray = list["JsonValue"]
JsonObject = dict[str, "JsonValue"]
JsonValue = JsonPrimitive | JsonArray | JsonObject

# Delimiter options
Delimiter = Literal[",", "\t", "|"]

DELIMITERS: tuple[str, ...] = (",", "\t", "|")

KeyFolding = Literal["off", "safe"]


class Shape(Enum):
    """Rendering shape of a single value, decided once per node."""

    SCALAR = "scalar"
    EMPTY_LIST = "empty_list"
    EMPTY_OBJECT = "empty_object"
    PRIMITIVE_ARRAY = "primitive_array"
    TABULAR_ARRAY = "tabular_array"
    MIXED_ARRAY = "mixed_array"
    OBJECT = "object"


@dataclass(frozen=True)
class LineRecord:
    """A non-blank input line with its indentation resolved."""

    content: str
    """Content after stripping indentation and trailing whitespace."""

    indent: int
    """Number of leading spaces."""

    depth: int
    """Indentation level (indent / indent_size)."""

    line_number: int
    """1-based line number in the original input."""


@dataclass
class ArrayHeaderInfo:
    """Parsed array header information."""

    length: int
    """Declared array length."""

    delimiter: Delimiter = ","
    """Delimiter for this array's values."""

    fields: list[str] = field(default_factory=list)
    """Field names for tabular format (empty for non-tabular)."""

    tabular: bool = False
    """Whether the header carried a ``{fields}`` segment."""

    inline: str = ""
    """Text following the header colon, stripped."""
