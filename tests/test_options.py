"""Tests for codec options."""

import logging
import sys
from pathlib import Path

import pytest

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tooncodec import DEFAULT_OPTIONS, STRICT_BASELINE, Options, decode, encode, resolve_options


class TestDefaults:
    def test_values(self):
        opts = Options()
        assert opts.indent == 2
        assert opts.delimiter == ","
        assert opts.min_rows_tabular == 1
        assert opts.newline_final is False
        assert opts.key_folding == "off"
        assert opts.flatten_depth == -1
        assert opts.folding_exclude == ()
        assert opts.expand_paths is False
        assert opts.throw_on_decode_error is True
        assert opts.numbers_as_strings is False
        assert opts.spec_strict is True

    def test_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_OPTIONS.indent = 4


class TestValidation:
    """Test option normalization and validation."""

    @pytest.mark.parametrize("indent", [0, -2, True, "2"])
    def test_bad_indent(self, indent):
        with pytest.raises(ValueError, match="indent"):
            Options(indent=indent)

    def test_bad_delimiter_falls_back(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="tooncodec.options"):
            opts = Options(delimiter=";")
        assert opts.delimiter == ","
        assert "falling back" in caplog.text

    def test_key_folding_aliases(self):
        assert Options(key_folding="none").key_folding == "off"
        assert Options(key_folding="SAFE").key_folding == "safe"

    def test_bad_key_folding(self):
        with pytest.raises(ValueError, match="key_folding"):
            Options(key_folding="aggressive")

    def test_folding_exclude_normalized(self):
        assert Options(folding_exclude="meta").folding_exclude == ("meta",)
        assert Options(folding_exclude=["a", "b"]).folding_exclude == ("a", "b")


class TestFromMapping:
    """Test building options from configuration mappings."""

    def test_overrides(self):
        opts = Options.from_mapping({"delimiter": "|", "indent": 4})
        assert opts.delimiter == "|"
        assert opts.indent == 4

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown option"):
            Options.from_mapping({"delimeter": "|"})

    def test_strict_baseline_applied(self):
        opts = Options.from_mapping({})
        for name, value in STRICT_BASELINE.items():
            assert getattr(opts, name) == value

    def test_explicit_values_beat_baseline(self):
        opts = Options.from_mapping({"key_folding": "safe", "expand_paths": True})
        assert opts.key_folding == "safe"
        assert opts.expand_paths is True

    def test_non_strict(self):
        opts = Options.from_mapping({"spec_strict": False, "newline_final": True})
        assert opts.spec_strict is False
        assert opts.newline_final is True

    def test_to_dict(self):
        data = Options(folding_exclude=("x",)).to_dict()
        assert data["folding_exclude"] == ["x"]
        assert Options.from_mapping(data) == Options(folding_exclude=("x",))


class TestReplace:
    def test_replace(self):
        opts = DEFAULT_OPTIONS.replace(indent=4)
        assert opts.indent == 4
        assert DEFAULT_OPTIONS.indent == 2

    def test_replace_validates(self):
        with pytest.raises(ValueError):
            DEFAULT_OPTIONS.replace(indent=0)


class TestResolveOptions:
    """Test the options argument of encode/decode."""

    def test_none(self):
        assert resolve_options(None) is DEFAULT_OPTIONS

    def test_instance(self):
        opts = Options(indent=4)
        assert resolve_options(opts) is opts

    def test_mapping(self):
        assert resolve_options({"indent": 4}).indent == 4

    def test_bad_type(self):
        with pytest.raises(TypeError):
            resolve_options("indent=4")

    def test_mapping_in_encode_and_decode(self):
        assert encode({"a": [1, 2]}, {"delimiter": "|"}) == "a[2|]: 1|2"
        assert decode("a.b: 1", {"expand_paths": True}) == {"a": {"b": 1}}
