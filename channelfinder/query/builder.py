"""
SQL statement construction for channel searches.

Every statement is a SQLAlchemy Core ``Select``: bound values live in the
compiled statement's parameters, never in the SQL text, and the same
statement renders for SQLite, PostgreSQL or MySQL. Clauses are collected
first and then combined with ``or_``/``and_``.
"""

from typing import Collection, Optional, Sequence

from sqlalchemy import Select, and_, case, distinct, func, or_, select
from sqlalchemy.sql.elements import ColumnElement

from channelfinder.models import Channel, Property
from .criteria import Criteria
from .glob import LIKE_ESCAPE, glob_to_like


def _like(column, glob: str) -> ColumnElement:
    return column.like(glob_to_like(glob), escape=LIKE_ESCAPE)


def _name_is(name: str) -> ColumnElement:
    # both sides are folded by the database so they fold alike
    return func.lower(Property.name) == func.lower(name)


def property_clause(key: str, patterns: Sequence[str]) -> ColumnElement:
    """Property ``key`` with a value matching any of ``patterns``."""
    return and_(
        _name_is(key),
        or_(*[_like(Property.value, p) for p in patterns]),
    )


def exact_tag_clause(tag: str) -> ColumnElement:
    """Tag named exactly ``tag`` (case-insensitive)."""
    return and_(
        _name_is(tag),
        Property.value.is_(None),
    )


def _distinct_names(condition: ColumnElement) -> ColumnElement:
    """count(DISTINCT lower(name)) over the rows satisfying ``condition``."""
    return func.count(distinct(case((condition, func.lower(Property.name)))))


def property_match_select(criteria: Criteria) -> Select:
    """
    Ids of channels matching every property key and exact tag.

    Each row matching one of the OR-ed clauses counts towards its channel.
    A channel qualifies only when it matched as many distinct property keys
    and as many distinct tags as the request requires, which turns the
    per-row OR into an AND across keys. Keys and tags are counted apart, so
    a property and a tag sharing a name are two requirements.
    """
    clauses = [
        property_clause(key, patterns)
        for key, patterns in criteria.property_matches.items()
    ]
    clauses.extend(exact_tag_clause(tag) for tag in sorted(criteria.exact_tags))

    if not clauses:
        raise ValueError("property match needs at least one property or exact tag")

    return (
        select(Property.channel_id)
        .where(or_(*clauses))
        .group_by(Property.channel_id)
        .having(
            _distinct_names(Property.value.is_not(None)) == criteria.required_property_count,
            _distinct_names(Property.value.is_(None)) == criteria.required_tag_count,
        )
    )


def tag_pattern_select(pattern: str) -> Select:
    """Ids of channels with at least one tag matching ``pattern``."""
    return (
        select(Property.channel_id)
        .where(
            func.lower(Property.name).like(func.lower(glob_to_like(pattern)), escape=LIKE_ESCAPE),
            Property.value.is_(None),
        )
        .group_by(Property.channel_id)
    )


def channel_select(
    name_patterns: Sequence[str] = (),
    ids: Optional[Collection[int]] = None,
) -> Select:
    """
    Channels with all their properties, one row per channel/property pair.

    Args:
        name_patterns: Channel name globs; a channel must match at least one
        ids: Channel ids to restrict to, or None for no id restriction

    Rows are ordered by channel name, then property name. Channels without
    properties appear once with NULL property columns.
    """
    stmt = (
        select(
            Channel.name.label("channel"),
            Channel.owner.label("channel_owner"),
            Property.name.label("property"),
            Property.value.label("value"),
            Property.owner.label("property_owner"),
        )
        .select_from(Channel)
        .outerjoin(Property, Channel.id == Property.channel_id)
    )

    if ids is not None:
        stmt = stmt.where(Channel.id.in_(sorted(ids)))

    if name_patterns:
        stmt = stmt.where(or_(*[_like(Channel.name, p) for p in name_patterns]))

    return stmt.order_by(Channel.name, Property.name)
