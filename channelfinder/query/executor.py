"""
Channel search execution.

Runs a classified search against a caller-supplied connection:

1. Property and exact-tag criteria are resolved with one grouped sub-query
2. Each tag pattern is resolved with its own sub-query and intersected
3. The channel query joins the surviving channels to their properties

The executor never opens, commits or closes the connection. Any failing
statement aborts the whole search with QueryExecutionError.
"""

import logging
from typing import Any, Collection, List, Optional

from sqlalchemy import Select
from sqlalchemy.exc import SQLAlchemyError

from .builder import channel_select, property_match_select, tag_pattern_select
from .criteria import (
    Criteria, MatchRequest, RequestValues,
    classify, name_criteria, tag_criteria,
)
from .resolver import IdResolver
from .results import EmptyResult, FindResult, RowsResult

logger = logging.getLogger(__name__)

CHANNEL_STAGE = "channel query"


class QueryExecutionError(Exception):
    """
    A search statement could not be prepared or executed.

    Surfaces as an internal service error. The underlying database error is
    chained as ``__cause__`` and kept on ``cause``.
    """
    status = 500

    def __init__(self, message: str, stage: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.stage = stage
        self.cause = cause


class ChannelQuery:
    """
    A compiled channel search.

    Build with one of the constructors, then ``execute`` on a connection.
    Instances hold only the classified criteria and can be executed any
    number of times.
    """

    def __init__(self, criteria: Criteria):
        self.criteria = criteria

    @classmethod
    def multi_match(cls, request: MatchRequest) -> "ChannelQuery":
        """Mixed name, tag and property search."""
        return cls(classify(request))

    @classmethod
    def channel_match(cls, names: RequestValues) -> "ChannelQuery":
        """Search by channel name globs."""
        return cls(name_criteria(names))

    @classmethod
    def tag_match(cls, tags: RequestValues) -> "ChannelQuery":
        """Search by tag names or tag globs."""
        return cls(tag_criteria(tags))

    def statements(self, ids: Optional[Collection[int]] = None) -> List[Select]:
        """
        The statements this search would run, without executing them.

        The channel query is built with ``ids`` as its id restriction.
        """
        stmts: List[Select] = []
        if self.criteria.has_property_criteria:
            stmts.append(property_match_select(self.criteria))
        stmts.extend(tag_pattern_select(p) for p in self.criteria.tag_patterns)
        stmts.append(channel_select(self.criteria.name_matches, ids))
        return stmts

    def execute(self, connection: Any) -> FindResult:
        """
        Run the search.

        Args:
            connection: An open SQLAlchemy Connection or Session

        Returns:
            EmptyResult if a resolver stage ruled out every channel,
            otherwise RowsResult ordered by channel then property name

        Raises:
            QueryExecutionError: if any statement fails
        """
        logger.debug("channel search criteria: %s", self.criteria.to_dict())

        def run(stage: str, stmt: Select):
            try:
                return connection.execute(stmt)
            except SQLAlchemyError as e:
                logger.error("SQL error in %s: %s", stage, e)
                raise QueryExecutionError(
                    f"SQL exception while running {stage}", stage, e
                ) from e

        resolution = IdResolver(run).resolve(self.criteria)
        if resolution.is_empty:
            logger.debug("no channels can match (%s)", resolution.empty_stage)
            return EmptyResult(stage=resolution.empty_stage)

        stmt = channel_select(self.criteria.name_matches, resolution.ids)
        result = RowsResult.from_result(run(CHANNEL_STAGE, stmt))
        logger.debug("%s: %d row(s)", CHANNEL_STAGE, len(result))
        return result


def find_channels(connection: Any, request: MatchRequest) -> FindResult:
    """Classify ``request`` and run it on ``connection``."""
    return ChannelQuery.multi_match(request).execute(connection)
