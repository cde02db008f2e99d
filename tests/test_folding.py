"""Tests for key folding and path expansion."""

import sys
from pathlib import Path

# Add src to path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tooncodec import Options
from tooncodec.folding import assign_path, fold_key

SAFE = Options(key_folding="safe")


class TestFoldKey:
    """Test folding of single-key chains."""

    def test_off_by_default(self):
        value = {"b": {"c": 1}}
        assert fold_key("a", value, Options()) == ("a", value)

    def test_full_chain(self):
        assert fold_key("a", {"b": {"c": 1}}, SAFE) == ("a.b.c", 1)

    def test_stops_at_multi_key_object(self):
        assert fold_key("a", {"b": {"c": 1, "d": 2}}, SAFE) == ("a.b", {"c": 1, "d": 2})

    def test_stops_at_array(self):
        assert fold_key("a", {"b": [1, {"c": 1}]}, SAFE) == ("a.b", [1, {"c": 1}])

    def test_scalar_value_not_folded(self):
        assert fold_key("a", 1, SAFE) == ("a", 1)

    def test_empty_object_not_folded(self):
        assert fold_key("a", {}, SAFE) == ("a", {})

    def test_unsafe_root_key(self):
        value = {"b": 1}
        assert fold_key("my key", value, SAFE) == ("my key", value)
        assert fold_key("a.b", value, SAFE) == ("a.b", value)

    def test_unsafe_inner_key(self):
        assert fold_key("a", {"b": {"c d": 1}}, SAFE) == ("a.b", {"c d": 1})

    def test_flatten_depth(self):
        value = {"b": {"c": {"d": 1}}}
        assert fold_key("a", value, SAFE.replace(flatten_depth=0)) == ("a", value)
        assert fold_key("a", value, SAFE.replace(flatten_depth=2)) == ("a.b.c", {"d": 1})

    def test_sibling_collision(self):
        folded = fold_key("a", {"b": 1}, SAFE, sibling_keys={"a", "a.b"})
        assert folded == ("a", {"b": 1})

    def test_exclude_root(self):
        opts = SAFE.replace(folding_exclude=("meta",))
        assert fold_key("metadata", {"x": 1}, opts) == ("metadata", {"x": 1})
        assert fold_key("other", {"x": 1}, opts) == ("other.x", 1)

    def test_exclude_path(self):
        opts = SAFE.replace(folding_exclude=("a.b.c",))
        assert fold_key("a", {"b": {"c": {"d": 1}}}, opts) == ("a.b", {"c": {"d": 1}})


class TestAssignPath:
    """Test dotted key assignment."""

    def test_literal_without_expand(self):
        target = {}
        assign_path(target, "a.b", 1)
        assert target == {"a.b": 1}

    def test_expand(self):
        target = {}
        assign_path(target, "a.b.c", 1, expand=True)
        assert target == {"a": {"b": {"c": 1}}}

    def test_quoted_key_literal(self):
        target = {}
        assign_path(target, "a.b", 1, expand=True, quoted=True)
        assert target == {"a.b": 1}

    def test_merges_objects(self):
        target = {"a": {"x": 1}}
        assign_path(target, "a", {"y": 2}, expand=True)
        assert target == {"a": {"x": 1, "y": 2}}

    def test_deep_merge(self):
        target = {"a": {"b": {"x": 1}}}
        assign_path(target, "a.b", {"y": 2}, expand=True)
        assert target == {"a": {"b": {"x": 1, "y": 2}}}

    def test_replaces_scalar_intermediate(self):
        target = {"a": 1}
        assign_path(target, "a.b", 2, expand=True)
        assert target == {"a": {"b": 2}}

    def test_last_wins_for_scalars(self):
        target = {}
        assign_path(target, "a.b", 1, expand=True)
        assign_path(target, "a.b", 2, expand=True)
        assert target == {"a": {"b": 2}}

    def test_no_merge_without_expand(self):
        target = {"a": {"x": 1}}
        assign_path(target, "a", {"y": 2})
        assert target == {"a": {"y": 2}}
