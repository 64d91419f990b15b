"""
Channel search query compiler.

Turns a multi-valued search request into SQL over the channel catalog and
returns matching channels with their properties.

Request keys:

- ``~name``: channel name globs, any may match
- ``~tag``: tag names; globs (``*``, ``?``) are matched independently
- anything else: a property name mapped to value globs, any may match

Example usage:

    from channelfinder.db import Database
    from channelfinder.query import ChannelQuery, find_channels

    db = Database('channelfinder.db')

    with db.connect() as conn:
        result = find_channels(conn, {
            '~name': ['SR:C01-*'],
            '~tag': ['archived', 'grp-*'],
            'color': ['red', 'blue'],
        })

    for channel in result.channels():
        print(channel.name, channel.property_map(), channel.tag_names())

    # Name-only and tag-only searches
    q = ChannelQuery.channel_match(['ab*', 'xy?'])
    q = ChannelQuery.tag_match('urgent')
"""

# Pattern translation
from .glob import (
    LIKE_ESCAPE,
    TokenKind,
    GlobToken,
    scan_glob,
    glob_to_like,
    has_wildcards,
)

# Criteria
from .criteria import (
    NAME_KEY,
    TAG_KEY,
    Criteria,
    classify,
    name_criteria,
    tag_criteria,
)

# Statements
from .builder import (
    property_clause,
    exact_tag_clause,
    property_match_select,
    tag_pattern_select,
    channel_select,
)

# Resolution
from .resolver import (
    PROPERTY_STAGE,
    TAG_PATTERN_STAGE,
    IdResolver,
    Resolution,
)

# Results
from .results import (
    ChannelRow,
    ChannelView,
    FindResult,
    EmptyResult,
    RowsResult,
    group_channels,
)

# Executor
from .executor import (
    CHANNEL_STAGE,
    QueryExecutionError,
    ChannelQuery,
    find_channels,
)

__all__ = [
    # Pattern translation
    'LIKE_ESCAPE',
    'TokenKind',
    'GlobToken',
    'scan_glob',
    'glob_to_like',
    'has_wildcards',

    # Criteria
    'NAME_KEY',
    'TAG_KEY',
    'Criteria',
    'classify',
    'name_criteria',
    'tag_criteria',

    # Statements
    'property_clause',
    'exact_tag_clause',
    'property_match_select',
    'tag_pattern_select',
    'channel_select',

    # Resolution
    'PROPERTY_STAGE',
    'TAG_PATTERN_STAGE',
    'IdResolver',
    'Resolution',

    # Results
    'ChannelRow',
    'ChannelView',
    'FindResult',
    'EmptyResult',
    'RowsResult',
    'group_channels',

    # Executor
    'CHANNEL_STAGE',
    'QueryExecutionError',
    'ChannelQuery',
    'find_channels',
]
