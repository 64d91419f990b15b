"""
Tests for channelfinder/models.py
"""
from sqlalchemy import select

from channelfinder.models import Channel, Property


class TestProperty:
    """Test Property tag detection."""

    def test_is_tag_on_instance(self):
        assert Property(name="urgent", value=None, owner="o").is_tag
        assert not Property(name="color", value="red", owner="o").is_tag

    def test_empty_string_value_is_not_a_tag(self):
        assert not Property(name="note", value="", owner="o").is_tag

    def test_is_tag_in_queries(self, db):
        with db.session() as session:
            names = session.execute(
                select(Property.name).where(Property.is_tag).order_by(Property.name)
            ).scalars().all()
        assert names == ["grp-1", "grp-2", "my_tag", "urgent", "urgent"]


class TestChannel:
    """Test Channel helpers."""

    def test_tags_property(self):
        channel = Channel(name="x", owner="o")
        channel.properties.append(Property(name="color", value="red", owner="o"))
        channel.properties.append(Property(name="t", value=None, owner="o"))
        assert [t.name for t in channel.tags] == ["t"]

    def test_repr(self):
        assert "name='x'" in repr(Channel(name="x", owner="o"))
