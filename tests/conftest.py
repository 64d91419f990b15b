import os
import tempfile

import pytest
from sqlalchemy import event

from channelfinder.db import Database


SAMPLE_CHANNELS = [
    {
        "name": "b",
        "owner": "bob",
        "properties": {"color": "blue", "size": "10"},
        "tags": ["urgent"],
    },
    {
        "name": "a",
        "owner": "alice",
        "properties": {"size": "10", "color": "red"},
        "tags": ["urgent", "grp-1"],
    },
    {
        "name": "c",
        "owner": "carol",
        "properties": {"color": "green", "size": "10"},
        "tags": ["grp-2"],
    },
    {
        "name": "xyz",
        "owner": "dave",
        "properties": {"color": "red"},
        "tags": [],
    },
    {
        "name": "abc",
        "owner": "erin",
        "properties": {},
        "tags": [],
    },
    {
        "name": "ab_1",
        "owner": "frank",
        "properties": {"discount": "50%"},
        "tags": ["my_tag"],
    },
    {
        "name": "abx1",
        "owner": "frank",
        "properties": {"discount": "50 off"},
        "tags": [],
    },
]


@pytest.fixture
def sample_channels():
    """Channel definitions used to populate the test catalog."""
    return SAMPLE_CHANNELS


@pytest.fixture
def empty_db():
    """A fresh catalog database in a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db = Database(path=os.path.join(tmpdir, "test.db"))
        yield db
        db.engine.dispose()


@pytest.fixture
def db(empty_db, sample_channels):
    """A catalog populated with the sample channels."""
    for ch in sample_channels:
        empty_db.add_channel(ch["name"], owner=ch["owner"],
                             properties=ch["properties"], tags=ch["tags"])
    return empty_db


@pytest.fixture
def statements(db):
    """
    SELECT statements sent to the database, in order.

    Only statements issued after the fixture is set up are recorded.
    """
    executed = []

    def record(conn, cursor, statement, parameters, context, executemany):
        if statement.lstrip().upper().startswith("SELECT"):
            executed.append(statement)

    event.listen(db.engine, "before_cursor_execute", record)
    yield executed
    event.remove(db.engine, "before_cursor_execute", record)
