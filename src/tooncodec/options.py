"""Codec configuration.

A single immutable :class:`Options` snapshot drives both directions. Build one
per call, either directly or from a plain mapping (for example a section of an
application config file)::

    opts = Options.from_mapping({"delimiter": "|", "key_folding": "safe"})
"""

import logging
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields, replace
from typing import Any

from .types import DELIMITERS, Delimiter, KeyFolding

logger = logging.getLogger(__name__)

# Applied before explicit overrides whenever spec_strict is enabled.
STRICT_BASELINE: Mapping[str, Any] = {
    "newline_final": False,
    "key_folding": "off",
    "flatten_depth": -1,
    "expand_paths": False,
}

_KEY_FOLDING_ALIASES = {"off": "off", "none": "off", "safe": "safe"}


@dataclass(frozen=True)
class Options:
    """Options for TOON encoding and decoding."""

    indent: int = 2
    """Number of spaces per indentation level."""

    delimiter: Delimiter = ","
    """Delimiter for inline arrays and tabular rows."""

    min_rows_tabular: int = 1
    """Minimum number of uniform rows before tabular form is used."""

    newline_final: bool = False
    """Append a trailing newline to encoder output."""

    key_folding: KeyFolding = "off"
    """Whether to fold single-key object chains into dotted paths."""

    flatten_depth: int = -1
    """Maximum number of folded segments below the root key. -1 means unlimited."""

    folding_exclude: tuple[str, ...] = ()
    """Key prefixes that are never folded."""

    expand_paths: bool = False
    """Expand dotted keys into nested objects on decode."""

    throw_on_decode_error: bool = True
    """Raise on malformed input; when False, decode returns None instead."""

    numbers_as_strings: bool = False
    """Keep numeric tokens as their raw strings on decode."""

    spec_strict: bool = True
    """Empty input decodes to {} instead of None; see also STRICT_BASELINE."""

    def __post_init__(self):
        if isinstance(self.indent, bool) or not isinstance(self.indent, int) or self.indent < 1:
            raise ValueError(f"indent must be a positive integer, got {self.indent!r}")

        if self.delimiter not in DELIMITERS:
            logger.debug("Unsupported delimiter %r, falling back to ','", self.delimiter)
            object.__setattr__(self, "delimiter", ",")

        folding = _KEY_FOLDING_ALIASES.get(str(self.key_folding).lower())
        if folding is None:
            raise ValueError(f"key_folding must be 'off' or 'safe', got {self.key_folding!r}")
        object.__setattr__(self, "key_folding", folding)

        if isinstance(self.folding_exclude, str):
            object.__setattr__(self, "folding_exclude", (self.folding_exclude,))
        else:
            object.__setattr__(self, "folding_exclude", tuple(self.folding_exclude))

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "Options":
        """
        Build options from a configuration mapping.

        Defaults are applied first, then STRICT_BASELINE when ``spec_strict``
        is enabled (the default), then the explicit entries of ``config``.

        Args:
            config: Option names mapped to values.

        Returns:
            A new Options snapshot.

        Raises:
            ValueError: For unknown option names or invalid values.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(config) - known)
        if unknown:
            raise ValueError(f"Unknown option(s): {', '.join(unknown)}")

        merged: dict[str, Any] = {}
        if config.get("spec_strict", cls.spec_strict):
            merged.update(STRICT_BASELINE)
        merged.update(config)
        return cls(**merged)

    def replace(self, **changes: Any) -> "Options":
        """Return a copy with the given fields changed."""
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Return the options as a plain dict."""
        data = asdict(self)
        data["folding_exclude"] = list(self.folding_exclude)
        return data


DEFAULT_OPTIONS = Options()


def resolve_options(options: "Options | Mapping[str, Any] | None") -> Options:
    """
    Normalize the ``options`` argument accepted by encode/decode.

    Args:
        options: None for defaults, an Options snapshot, or a mapping.

    Returns:
        An Options snapshot.
    """
    if options is None:
        return DEFAULT_OPTIONS
    if isinstance(options, Options):
        return options
    if isinstance(options, Mapping):
        return Options.from_mapping(options)
    raise TypeError(f"options must be Options, a mapping or None, not {type(options).__name__}")
