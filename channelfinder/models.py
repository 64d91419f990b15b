"""
SQLAlchemy models for the channel directory catalog.

The catalog has two tables: channels and their properties. A tag is stored
as a property row whose value is NULL and whose property name is the tag name.
"""
from typing import Optional, List
from sqlalchemy import (
    Integer, String, ForeignKey, Index, UniqueConstraint
)
from sqlalchemy.orm import (
    DeclarativeBase, relationship, Mapped, mapped_column
)
from sqlalchemy.ext.hybrid import hybrid_property


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass


class Channel(Base):
    """
    A named entry in the directory.

    Attributes:
        id: Primary key
        name: Unique channel name
        owner: Owner of the channel entry
        properties: Property and tag rows attached to this channel
    """
    __tablename__ = 'channels'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False, unique=True, index=True)
    owner: Mapped[str] = mapped_column(String(128), nullable=False)

    properties: Mapped[List["Property"]] = relationship(
        "Property",
        back_populates="channel",
        cascade="all, delete-orphan",
        order_by="Property.name",
        lazy="selectin"
    )

    @property
    def tags(self) -> List["Property"]:
        """Tag rows (properties with no value)."""
        return [p for p in self.properties if p.is_tag]

    def __repr__(self) -> str:
        return f"<Channel(id={self.id}, name='{self.name}', owner='{self.owner}')>"


class Property(Base):
    """
    A key/value property, or a tag when ``value`` is NULL.

    At most one row per (channel, property name).
    """
    __tablename__ = 'properties'

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    channel_id: Mapped[int] = mapped_column(
        Integer, ForeignKey('channels.id', ondelete='CASCADE'), nullable=False
    )
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    value: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)
    owner: Mapped[str] = mapped_column(String(128), nullable=False)

    channel: Mapped["Channel"] = relationship("Channel", back_populates="properties")

    __table_args__ = (
        UniqueConstraint('channel_id', 'name', name='uq_properties_channel_name'),
        Index('ix_properties_name', 'name'),
        Index('ix_properties_channel_id', 'channel_id'),
    )

    @hybrid_property
    def is_tag(self) -> bool:
        """Whether this row represents a tag."""
        return self.value is None

    @is_tag.expression
    def is_tag(cls):
        return cls.value.is_(None)

    def __repr__(self) -> str:
        return f"<Property(channel_id={self.channel_id}, name='{self.name}', value={self.value!r})>"
