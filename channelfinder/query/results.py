"""
Result types for channel searches.

A search either short-circuits because no channel can match, or runs the
final query and returns its rows. The two outcomes are distinct types:

- EmptyResult: a resolver stage proved that nothing can match
- RowsResult: rows from the channel query, possibly zero of them

Rows arrive ordered by channel name then property name, so
``group_channels`` can rebuild per-channel views in a single pass.
"""

import builtins
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class ChannelRow:
    """One (channel, property) pair from the channel query."""
    channel: str
    channel_owner: str
    property: Optional[str] = None
    value: Optional[str] = None
    property_owner: Optional[str] = None

    # the "property" field shadows the builtin in this class body
    @builtins.property
    def is_tag(self) -> bool:
        return self.property is not None and self.value is None

    @classmethod
    def from_row(cls, row: Any) -> "ChannelRow":
        """Build from a result row with the channel query's labels."""
        m = row._mapping
        return cls(
            channel=m["channel"],
            channel_owner=m["channel_owner"],
            property=m["property"],
            value=m["value"],
            property_owner=m["property_owner"],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'channel': self.channel,
            'channel_owner': self.channel_owner,
            'property': self.property,
            'value': self.value,
            'property_owner': self.property_owner,
        }


@dataclass
class ChannelView:
    """A channel with its properties and tags, rebuilt from rows."""
    name: str
    owner: str
    properties: List[Tuple[str, str, str]] = field(default_factory=list)
    tags: List[Tuple[str, str]] = field(default_factory=list)

    def property_map(self) -> Dict[str, str]:
        return {name: value for name, value, _ in self.properties}

    def tag_names(self) -> List[str]:
        return [name for name, _ in self.tags]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'owner': self.owner,
            'properties': [
                {'name': n, 'value': v, 'owner': o} for n, v, o in self.properties
            ],
            'tags': [{'name': n, 'owner': o} for n, o in self.tags],
        }


def group_channels(rows: Iterable[ChannelRow]) -> List[ChannelView]:
    """
    Collapse ordered rows into one view per channel.

    Relies on rows for a channel being contiguous.
    """
    channels: List[ChannelView] = []
    current: Optional[ChannelView] = None

    for row in rows:
        if current is None or current.name != row.channel:
            current = ChannelView(name=row.channel, owner=row.channel_owner)
            channels.append(current)
        if row.property is None:
            continue
        if row.is_tag:
            current.tags.append((row.property, row.property_owner))
        else:
            current.properties.append((row.property, row.value, row.property_owner))

    return channels


# =============================================================================
# Result Containers
# =============================================================================

class FindResult(ABC):
    """Base class for search outcomes."""

    rows: List[ChannelRow]

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[ChannelRow]:
        return iter(self.rows)

    def __bool__(self) -> bool:
        return len(self.rows) > 0

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def channels(self) -> List[ChannelView]:
        """Rows grouped per channel."""
        return group_channels(self.rows)

    def channel_names(self) -> List[str]:
        """Distinct channel names, in result order."""
        return [c.name for c in self.channels()]

    @abstractmethod
    def to_dict(self) -> Dict[str, Any]:
        """Serializable form of the result."""
        pass


@dataclass
class EmptyResult(FindResult):
    """
    No channel can match.

    ``stage`` names the resolver step that proved it.
    """
    stage: str = ""
    rows: List[ChannelRow] = field(default_factory=list, init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {'matched': False, 'stage': self.stage, 'count': 0, 'rows': []}


@dataclass
class RowsResult(FindResult):
    """Rows returned by the channel query."""
    rows: List[ChannelRow] = field(default_factory=list)

    @classmethod
    def from_result(cls, result: Iterable[Any]) -> "RowsResult":
        return cls(rows=[ChannelRow.from_row(r) for r in result])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'matched': True,
            'count': len(self.rows),
            'rows': [r.to_dict() for r in self.rows],
        }
