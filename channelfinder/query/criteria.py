"""
Classification of search requests into match criteria.

A request maps criterion keys to lists of glob patterns. Keys are
case-insensitive. Two keys are reserved:

- ``~name``: channel name patterns (any of them may match)
- ``~tag``: tag names; values containing wildcards become tag patterns,
  the others exact tags

Every other key is a property name whose values are value patterns.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Set, Tuple, Union

from .glob import has_wildcards

NAME_KEY = "~name"
TAG_KEY = "~tag"

RequestValues = Union[str, Iterable[str]]
MatchRequest = Union[Mapping[str, RequestValues], Iterable[Tuple[str, str]]]


@dataclass
class Criteria:
    """
    Classified search criteria.

    Property matches are conjunctive across keys and disjunctive across the
    values of one key. Exact tags are required like property keys; each tag
    pattern must match independently. Name matches are disjunctive.
    """
    name_matches: List[str] = field(default_factory=list)
    exact_tags: Set[str] = field(default_factory=set)
    tag_patterns: List[str] = field(default_factory=list)
    property_matches: Dict[str, List[str]] = field(default_factory=dict)

    def add_names(self, values: Iterable[str]) -> None:
        self.name_matches.extend(values)

    def add_tags(self, values: Iterable[str]) -> None:
        for value in values:
            if has_wildcards(value):
                self.tag_patterns.append(value)
            else:
                self.exact_tags.add(value)

    def add_property(self, key: str, values: Iterable[str]) -> None:
        values = list(values)
        if values:
            self.property_matches.setdefault(key.lower(), []).extend(values)

    @property
    def has_property_criteria(self) -> bool:
        """Whether the grouped property/exact-tag sub-query is needed."""
        return bool(self.property_matches or self.exact_tags)

    @property
    def has_id_criteria(self) -> bool:
        """Whether any criterion restricts the set of channel ids."""
        return self.has_property_criteria or bool(self.tag_patterns)

    @property
    def required_property_count(self) -> int:
        """Number of distinct property keys a channel must match."""
        return len(self.property_matches)

    @property
    def required_tag_count(self) -> int:
        """Number of distinct exact tags a channel must carry."""
        return len({tag.lower() for tag in self.exact_tags})

    @property
    def required_key_count(self) -> int:
        """
        Number of property rows a channel must contribute.

        A property key and an exact tag with the same name are separate
        requirements.
        """
        return self.required_property_count + self.required_tag_count

    @property
    def is_empty(self) -> bool:
        return not (self.name_matches or self.has_id_criteria)

    def to_dict(self) -> Dict[str, object]:
        return {
            'name_matches': list(self.name_matches),
            'exact_tags': sorted(self.exact_tags),
            'tag_patterns': list(self.tag_patterns),
            'property_matches': {k: list(v) for k, v in self.property_matches.items()},
        }


def _as_values(values: RequestValues) -> List[str]:
    if isinstance(values, str):
        return [values]
    return list(values)


def _iter_entries(request: MatchRequest) -> Iterable[Tuple[str, List[str]]]:
    if isinstance(request, Mapping):
        for key, values in request.items():
            yield key, _as_values(values)
    else:
        for key, value in request:
            yield key, [value]


def classify(request: MatchRequest) -> Criteria:
    """
    Sort a raw request into name, tag and property criteria.

    Accepts a mapping of key to value list (or single value), or an iterable
    of ``(key, value)`` pairs such as a parsed query string. Keys are
    lower-cased; values keep their case.

    >>> c = classify({"~tag": ["urgent", "grp-*"], "Color": ["red"]})
    >>> sorted(c.exact_tags), c.tag_patterns, c.property_matches
    (['urgent'], ['grp-*'], {'color': ['red']})
    """
    criteria = Criteria()

    for key, values in _iter_entries(request or {}):
        key = key.lower()
        if key == NAME_KEY:
            criteria.add_names(values)
        elif key == TAG_KEY:
            criteria.add_tags(values)
        else:
            criteria.add_property(key, values)

    return criteria


def name_criteria(names: RequestValues) -> Criteria:
    """Criteria matching channels by name only."""
    criteria = Criteria()
    criteria.add_names(_as_values(names))
    return criteria


def tag_criteria(tags: RequestValues) -> Criteria:
    """Criteria matching channels by tags only."""
    criteria = Criteria()
    criteria.add_tags(_as_values(tags))
    return criteria
