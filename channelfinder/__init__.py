"""
channelfinder - directory search for channels, properties and tags

Compiles multi-criteria glob searches (channel names, tags, property values)
into SQL over a SQLAlchemy-backed catalog.

Design Principles:
- One stateless compile-and-run per search, on a caller-owned connection
- Set intersection across independent sub-queries instead of one wide join
- Deterministic output ordered by channel name, then property name
- Support for SQLite, PostgreSQL, MySQL via connection strings

Example Usage:
    >>> from channelfinder import Database
    >>> db = Database("channels.db")
    >>> channel = db.add_channel("SR:C01-BI:BPM1", owner="ops", properties={"cell": "01"}, tags=["archived"])
    >>> result = db.find({"~tag": ["archived"], "cell": ["0?"]})
    >>> [c.name for c in result.channels()]
    ['SR:C01-BI:BPM1']
"""

__version__ = "0.3.0"
__author__ = "channelfinder Contributors"

# Core database API
from channelfinder.db import Database, get_db

# Configuration
from channelfinder.config import FinderConfig, get_config, init_config

# Models
from channelfinder.models import Channel, Property

# Search
from channelfinder.query import (
    ChannelQuery,
    EmptyResult,
    RowsResult,
    QueryExecutionError,
    find_channels,
    glob_to_like,
)

__all__ = [
    # Database
    "Database",
    "get_db",
    # Config
    "FinderConfig",
    "get_config",
    "init_config",
    # Models
    "Channel",
    "Property",
    # Search
    "ChannelQuery",
    "EmptyResult",
    "RowsResult",
    "QueryExecutionError",
    "find_channels",
    "glob_to_like",
]
