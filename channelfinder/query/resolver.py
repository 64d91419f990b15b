"""
Resolution of property and tag criteria to channel ids.

The resolver runs at most one grouped property/exact-tag sub-query and one
sub-query per tag pattern, intersecting their id sets. Any empty set ends
resolution early: no channel can satisfy all criteria.
"""

import logging
from dataclasses import dataclass
from typing import Any, FrozenSet, Optional

from .builder import property_match_select, tag_pattern_select
from .criteria import Criteria

logger = logging.getLogger(__name__)

PROPERTY_STAGE = "property match"
TAG_PATTERN_STAGE = "tag pattern match"


@dataclass(frozen=True)
class Resolution:
    """
    Outcome of id resolution.

    ``ids`` is None when there were no id criteria (no restriction). When
    ``empty_stage`` is set, that stage proved no channel can match.
    """
    ids: Optional[FrozenSet[int]] = None
    empty_stage: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return self.empty_stage is not None

    @classmethod
    def unrestricted(cls) -> "Resolution":
        return cls()

    @classmethod
    def empty(cls, stage: str) -> "Resolution":
        return cls(ids=frozenset(), empty_stage=stage)


class IdResolver:
    """
    Resolves criteria to the set of matching channel ids.

    Statements go through ``run``, which the executor wraps with its error
    handling. ``run`` takes (stage, statement) and returns the result.
    """

    def __init__(self, run):
        self._run = run

    def _ids(self, stage: str, stmt: Any) -> FrozenSet[int]:
        return frozenset(self._run(stage, stmt).scalars().all())

    def resolve(self, criteria: Criteria) -> Resolution:
        if not criteria.has_id_criteria:
            return Resolution.unrestricted()

        result: Optional[FrozenSet[int]] = None

        if criteria.has_property_criteria:
            result = self._ids(PROPERTY_STAGE, property_match_select(criteria))
            logger.debug("%s: %d channel(s)", PROPERTY_STAGE, len(result))
            if not result:
                return Resolution.empty(PROPERTY_STAGE)

        for pattern in criteria.tag_patterns:
            ids = self._ids(TAG_PATTERN_STAGE, tag_pattern_select(pattern))
            logger.debug("%s %r: %d channel(s)", TAG_PATTERN_STAGE, pattern, len(ids))
            result = ids if result is None else result & ids
            if not result:
                return Resolution.empty(f"{TAG_PATTERN_STAGE} {pattern!r}")

        return Resolution(ids=result)
