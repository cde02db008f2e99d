"""
tooncodec - TOON (Token-Oriented Object Notation) encoder and decoder

A compact, indentation-based notation for the JSON data model that spends
fewer tokens than JSON when fed to a language model.

Usage:
    import tooncodec

    # Encode Python data to TOON
    data = {"id": 42, "tags": ["x", "y"]}
    encoded = tooncodec.encode(data)   # "id: 42\\ntags[2]: x,y"

    # Decode TOON to Python data
    decoded = tooncodec.decode(encoded)

    # With options
    from tooncodec import Options

    encoded = tooncodec.encode(data, Options(delimiter="|", key_folding="safe"))
    decoded = tooncodec.decode(text, {"expand_paths": True})
"""

__version__ = "0.1.0"

from .decode import decode, decode_lines
from .encode import classify, encode, encode_lines
from .errors import ToonDecodeError, ToonEncodeError, ToonError
from .options import DEFAULT_OPTIONS, STRICT_BASELINE, Options, resolve_options
from .types import Delimiter, JsonValue, Shape

__all__ = [
    # Version
    "__version__",
    # Main API
    "encode",
    "encode_lines",
    "decode",
    "decode_lines",
    "classify",
    # Options
    "Options",
    "DEFAULT_OPTIONS",
    "STRICT_BASELINE",
    "resolve_options",
    # Errors
    "ToonError",
    "ToonEncodeError",
    "ToonDecodeError",
    # Types
    "Delimiter",
    "JsonValue",
    "Shape",
]
