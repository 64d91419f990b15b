"""
Tests for channelfinder.query.resolver

The resolver is driven with a fake statement runner so the intersection
and short-circuit logic can be checked without a database.
"""
from unittest.mock import MagicMock

from channelfinder.query.criteria import classify
from channelfinder.query.resolver import (
    PROPERTY_STAGE, TAG_PATTERN_STAGE, IdResolver, Resolution,
)


def fake_runner(*id_sets):
    """A run() callable returning the given id sets in order."""
    calls = []
    results = iter(id_sets)

    def run(stage, stmt):
        calls.append(stage)
        result = MagicMock()
        result.scalars.return_value.all.return_value = list(next(results))
        return result

    return run, calls


class TestResolve:
    """IdResolver.resolve()"""

    def test_no_id_criteria_is_unrestricted(self):
        run, calls = fake_runner()
        resolution = IdResolver(run).resolve(classify({"~name": ["a*"]}))
        assert resolution.ids is None
        assert not resolution.is_empty
        assert calls == []

    def test_property_ids(self):
        run, calls = fake_runner({1, 2, 3})
        resolution = IdResolver(run).resolve(classify({"color": ["red"]}))
        assert resolution.ids == frozenset({1, 2, 3})
        assert calls == [PROPERTY_STAGE]

    def test_tag_patterns_intersect_with_properties(self):
        run, calls = fake_runner({1, 2, 3}, {2, 3, 4}, {3, 5})
        resolution = IdResolver(run).resolve(
            classify({"color": ["red"], "~tag": ["g*", "h*"]})
        )
        assert resolution.ids == frozenset({3})
        assert calls == [PROPERTY_STAGE, TAG_PATTERN_STAGE, TAG_PATTERN_STAGE]

    def test_first_tag_pattern_seeds_result(self):
        run, _ = fake_runner({4, 5}, {5, 6})
        resolution = IdResolver(run).resolve(classify({"~tag": ["g*", "h*"]}))
        assert resolution.ids == frozenset({5})

    def test_intersection_order_does_not_matter(self):
        run1, _ = fake_runner({1, 2}, {2, 3}, {2, 4})
        run2, _ = fake_runner({2, 4}, {2, 3}, {1, 2})
        c = classify({"~tag": ["a*", "b*", "c*"]})
        assert IdResolver(run1).resolve(c).ids == IdResolver(run2).resolve(c).ids == {2}

    def test_empty_property_match_short_circuits(self):
        run, calls = fake_runner(set())
        resolution = IdResolver(run).resolve(classify({"color": ["x"], "~tag": ["g*"]}))
        assert resolution.is_empty
        assert resolution.empty_stage == PROPERTY_STAGE
        assert calls == [PROPERTY_STAGE]

    def test_empty_intersection_skips_remaining_patterns(self):
        run, calls = fake_runner({1}, {2}, {1})
        resolution = IdResolver(run).resolve(
            classify({"color": ["red"], "~tag": ["g*", "h*"]})
        )
        assert resolution.is_empty
        assert resolution.empty_stage == f"{TAG_PATTERN_STAGE} 'g*'"
        assert calls == [PROPERTY_STAGE, TAG_PATTERN_STAGE]


class TestResolution:

    def test_unrestricted(self):
        r = Resolution.unrestricted()
        assert r.ids is None and not r.is_empty

    def test_empty(self):
        r = Resolution.empty("stage")
        assert r.is_empty
        assert r.ids == frozenset()
