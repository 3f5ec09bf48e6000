"""
Unit tests for metric tags and multidimensional names.
"""

import itertools

import pytest

from metricore.errors import ArgumentError
from metricore.tagging import MetricTags


class TestMetricTags:
    """Test tag construction, canonical naming and equality."""

    def test_single_tag(self):
        tags = MetricTags("host", "server1")

        assert tags.keys == ("host",)
        assert tags.values == ("server1",)
        assert tags.as_metric_name("requests") == "requests|host:server1"

    def test_name_is_sorted_by_key(self):
        tags = MetricTags(["region", "host"], ["eu", "server1"])
        assert tags.as_metric_name("requests") == "requests|host:server1,region:eu"

    def test_name_ignores_key_order(self):
        pairs = [("a", "1"), ("b", "2"), ("c", "3")]
        names = set()
        for permutation in itertools.permutations(pairs):
            keys, values = zip(*permutation)
            names.add(MetricTags(list(keys), list(values)).as_metric_name("m"))

        assert names == {"m|a:1,b:2,c:3"}

    def test_empty_tags_give_base_name(self):
        assert MetricTags().as_metric_name("requests") == "requests"
        assert MetricTags.EMPTY.as_metric_name("requests") == "requests"
        assert len(MetricTags.EMPTY) == 0
        assert not MetricTags.EMPTY

    def test_equality_and_hash(self):
        first = MetricTags(["a", "b"], ["1", "2"])
        second = MetricTags(["b", "a"], ["2", "1"])

        assert first == second
        assert hash(first) == hash(second)
        assert first != MetricTags(["a", "b"], ["1", "3"])

    def test_iteration_follows_insertion_order(self):
        tags = MetricTags(["z", "a"], ["26", "1"])
        assert list(tags) == [("z", "26"), ("a", "1")]

    def test_from_mapping(self):
        tags = MetricTags.from_mapping({"env": "prod", "app": "api"})

        assert tags.to_dict() == {"env": "prod", "app": "api"}
        assert tags.get("env") == "prod"
        assert tags.get("missing", "n/a") == "n/a"
        assert "app" in tags
        assert tags.count == 2

    def test_from_empty_mapping(self):
        assert MetricTags.from_mapping({}) is MetricTags.EMPTY
        assert MetricTags.from_mapping(None) is MetricTags.EMPTY

    def test_none_value_becomes_empty_string(self):
        tags = MetricTags("key", [None])
        assert tags.as_metric_name("m") == "m|key:"

    def test_from_metric_name(self):
        base, tags = MetricTags.from_metric_name("requests|host:server1,region:eu")

        assert base == "requests"
        assert tags == MetricTags(["host", "region"], ["server1", "eu"])

    def test_from_untagged_metric_name(self):
        base, tags = MetricTags.from_metric_name("requests")

        assert base == "requests"
        assert tags is MetricTags.EMPTY

    def test_concat_overrides_earlier_values(self):
        merged = MetricTags.concat(
            MetricTags.from_mapping({"env": "dev", "app": "api"}),
            None,
            MetricTags("env", "prod"),
        )

        assert merged.to_dict() == {"env": "prod", "app": "api"}

    def test_mismatched_lengths(self):
        with pytest.raises(ArgumentError):
            MetricTags(["a", "b"], ["1"])

    def test_duplicate_keys(self):
        with pytest.raises(ArgumentError):
            MetricTags(["a", "a"], ["1", "2"])

    @pytest.mark.parametrize("key", ["", "   ", None])
    def test_empty_key(self, key):
        with pytest.raises(ArgumentError):
            MetricTags([key], ["value"])

    @pytest.mark.parametrize("delimiter", ["|", ",", ":"])
    def test_delimiter_in_key(self, delimiter):
        with pytest.raises(ArgumentError):
            MetricTags([f"a{delimiter}b"], ["1"])

    @pytest.mark.parametrize("delimiter", ["|", ",", ":"])
    def test_delimiter_in_value(self, delimiter):
        with pytest.raises(ArgumentError):
            MetricTags(["a"], [f"1{delimiter}2"])

    def test_embedded_pair_cannot_mimic_two_tags(self):
        with pytest.raises(ArgumentError):
            MetricTags(["a"], ["1,b:2"])

        assert MetricTags(["a", "b"], ["1", "2"]).as_metric_name("m") == "m|a:1,b:2"

    def test_from_metric_name_with_extra_separator(self):
        base, tags = MetricTags.from_metric_name("requests|host:a:b")

        assert base == "requests|host:a:b"
        assert tags is MetricTags.EMPTY
