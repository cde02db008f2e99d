"""Key folding (encode) and path expansion (decode).

Folding collapses chains of single-key objects into one dotted key::

    {"a": {"b": {"c": 1}}}  ->  a.b.c: 1

Expansion is the inverse and rebuilds the nested objects from safe dotted
keys. Both are opt-in through :class:`~tooncodec.options.Options`.
"""

from collections.abc import Collection
from typing import TYPE_CHECKING

from .string_utils import is_valid_dotted_path, is_valid_identifier_segment

if TYPE_CHECKING:
    from .options import Options
    from .types import JsonObject, JsonValue


def fold_key(
    key: str,
    value: "JsonValue",
    options: "Options",
    sibling_keys: Collection[str] = (),
) -> tuple[str, "JsonValue"]:
    """
    Fold a chain of single-key objects into a dotted key.

    Folding continues while the value is an object with exactly one key that
    is a safe identifier, the ``flatten_depth`` limit has not been reached and
    the dotted path does not fall under a ``folding_exclude`` prefix. Arrays
    are never folded into.

    Args:
        key: The entry's key.
        value: The entry's value.
        options: Codec options.
        sibling_keys: Keys of the enclosing object; a folded path that would
            collide with one of them is not produced.

    Returns:
        The (possibly dotted) key and the remaining value. The input pair is
        returned unchanged when nothing was folded.
    """
    if options.key_folding != "safe":
        return key, value

    if not is_valid_identifier_segment(key) or _is_excluded(key, options):
        return key, value

    path = [key]
    current = value
    max_depth = options.flatten_depth

    while isinstance(current, dict) and len(current) == 1:
        if 0 <= max_depth <= len(path) - 1:
            break

        next_key, next_value = next(iter(current.items()))
        if not is_valid_identifier_segment(next_key):
            break

        candidate = ".".join(path) + "." + next_key
        if candidate in sibling_keys or _is_excluded(candidate, options):
            break

        path.append(next_key)
        current = next_value

    if len(path) == 1:
        return key, value
    return ".".join(path), current


def _is_excluded(path: str, options: "Options") -> bool:
    return any(prefix and path.startswith(prefix) for prefix in options.folding_exclude)


def assign_path(
    target: "JsonObject",
    key: str,
    value: "JsonValue",
    expand: bool = False,
    quoted: bool = False,
) -> None:
    """
    Assign ``value`` under ``key``, expanding dotted paths when enabled.

    A key is expanded only when ``expand`` is set, it was not quoted in the
    source, and every dot-separated segment is a safe identifier. Otherwise it
    is assigned literally. Missing intermediate objects are created; an
    intermediate holding a non-object value is replaced.

    Args:
        target: The object being built.
        key: The decoded key.
        value: The decoded value.
        expand: Whether path expansion is enabled.
        quoted: Whether the key was quoted in the source text.
    """
    if not expand or quoted or not is_valid_dotted_path(key):
        _set_value(target, key, value, merge=expand)
        return

    segments = key.split(".")
    node = target
    for segment in segments[:-1]:
        child = node.get(segment)
        if not isinstance(child, dict):
            child = {}
            node[segment] = child
        node = child

    _set_value(node, segments[-1], value, merge=True)


def _set_value(target: "JsonObject", key: str, value: "JsonValue", merge: bool) -> None:
    existing = target.get(key)
    if merge and isinstance(existing, dict) and isinstance(value, dict):
        target[key] = _merge_values(existing, value)
    else:
        target[key] = value


def _merge_values(existing: "JsonValue", new: "JsonValue") -> "JsonValue":
    """Merge two values during path expansion."""
    if isinstance(existing, dict) and isinstance(new, dict):
        result = dict(existing)
        for key, val in new.items():
            if key in result:
                result[key] = _merge_values(result[key], val)
            else:
                result[key] = val
        return result
    # Non-dict values: new wins
    return new
