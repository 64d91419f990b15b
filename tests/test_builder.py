"""
Tests for channelfinder.query.builder

Statements are compiled without a database; tests check that values are
bound as parameters and that the expected clauses are present.
"""
import pytest
from sqlalchemy.dialects import mysql, postgresql, sqlite

from channelfinder.query.builder import (
    channel_select, exact_tag_clause, property_clause,
    property_match_select, tag_pattern_select,
)
from channelfinder.query.criteria import classify


def compiled(stmt, dialect=None):
    return stmt.compile(dialect=dialect or sqlite.dialect())


class TestPropertyMatchSelect:
    """Grouped property/exact-tag sub-query."""

    def test_values_are_bound_parameters(self):
        c = compiled(property_match_select(
            classify({"color": ["red", "blue"], "size": ["10"]})
        ))
        params = list(c.params.values())
        for value in ("color", "red", "blue", "size", "10"):
            assert value in params
        assert "red" not in str(c)
        assert "blue" not in str(c)

    def test_having_counts_properties_and_tags_apart(self):
        c = compiled(property_match_select(
            classify({"color": ["red"], "size": ["10"], "~tag": ["urgent"]})
        ))
        sql = str(c)
        assert "GROUP BY properties.channel_id" in sql
        assert sql.count("count(DISTINCT CASE WHEN") == 2
        params = list(c.params.values())
        assert 2 in params
        assert 1 in params

    def test_tag_sharing_a_property_name_is_a_separate_requirement(self):
        criteria = classify({"urgent": ["x"], "~tag": ["urgent"]})
        assert criteria.required_property_count == 1
        assert criteria.required_tag_count == 1
        params = list(compiled(property_match_select(criteria)).params.values())
        assert params.count(1) == 2

    def test_value_globs_are_translated(self):
        c = compiled(property_match_select(classify({"discount": ["50%", "1*"]})))
        params = list(c.params.values())
        assert "50\\%" in params
        assert "1%" in params

    def test_like_uses_backslash_escape(self):
        sql = str(compiled(property_match_select(classify({"color": ["r*"]}))))
        assert "LIKE" in sql
        assert "ESCAPE '\\'" in sql

    def test_exact_tags_are_not_translated(self):
        c = compiled(property_match_select(classify({"~tag": ["My_Tag"]})))
        assert "My_Tag" in c.params.values()
        assert "My\\_Tag" not in c.params.values()
        assert "IS NULL" in str(c)

    def test_requires_criteria(self):
        with pytest.raises(ValueError):
            property_match_select(classify({"~name": ["a"]}))


class TestClauses:
    """Individual clause builders."""

    def test_property_clause_ors_values(self):
        sql = str(compiled(property_clause("color", ["red", "blue"])))
        assert sql.count("LIKE") == 2
        assert " OR " in sql
        assert "lower(properties.name) = lower(" in sql

    def test_exact_tag_clause_folds_both_sides_in_sql(self):
        c = compiled(exact_tag_clause("Urgent"))
        assert "lower(properties.name) = lower(" in str(c)
        assert "properties.value IS NULL" in str(c)
        assert list(c.params.values()) == ["Urgent"]


class TestTagPatternSelect:
    """Per-pattern tag sub-query."""

    def test_pattern_is_translated_and_folded_in_sql(self):
        c = compiled(tag_pattern_select("GRP-*"))
        assert list(c.params.values()) == ["GRP-%"]
        sql = str(c)
        assert "lower(properties.name) LIKE lower(" in sql
        assert "properties.value IS NULL" in sql
        assert "GROUP BY properties.channel_id" in sql


class TestChannelSelect:
    """Outer channel query."""

    def test_unrestricted(self):
        sql = str(compiled(channel_select()))
        assert "LEFT OUTER JOIN properties" in sql
        assert "WHERE" not in sql
        assert "ORDER BY" in sql

    def test_ids_are_bound_sorted(self):
        c = compiled(channel_select(ids={3, 1, 2}))
        assert [1, 2, 3] in c.params.values()

    def test_name_patterns_are_ored(self):
        c = compiled(channel_select(["ab*", "xy?"]))
        params = list(c.params.values())
        assert params == ["ab%", "xy_"]
        assert " OR " in str(c)

    def test_ids_and_names_combined(self):
        sql = str(compiled(channel_select(["a*"], ids=[5])))
        assert " IN " in sql
        assert "LIKE" in sql
        assert " AND " in sql

    def test_result_columns(self):
        stmt = channel_select()
        assert [c.name for c in stmt.selected_columns] == [
            "channel", "channel_owner", "property", "value", "property_owner",
        ]

    def test_same_input_same_statement(self):
        first = compiled(channel_select(["a*"], ids={9, 4, 7}))
        second = compiled(channel_select(["a*"], ids={7, 9, 4}))
        assert str(first) == str(second)
        assert first.params == second.params


class TestDialects:
    """Statements compile for every supported backend."""

    @pytest.mark.parametrize("dialect", [sqlite.dialect(), postgresql.dialect(), mysql.dialect()])
    def test_compiles(self, dialect):
        criteria = classify({"color": ["r*"], "~tag": ["urgent"]})
        for stmt in (
            property_match_select(criteria),
            tag_pattern_select("grp-*"),
            channel_select(["a*"], ids=[1, 2]),
        ):
            assert "ESCAPE" in str(compiled(stmt, dialect))
