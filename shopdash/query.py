"""
Composable list queries.

A `ListQuery` collects independent predicates over one table; each optional
filter contributes at most one predicate and all of them are ANDed together.
Multi-column search is an OR group that joins the outer conjunction as a
single predicate. Values always travel as bound parameters.

Ordering is descending on one temporal column with no tie-break, so rows
sharing a timestamp come back in store-defined order.
"""

from typing import Any, List, Optional

from sqlalchemy import and_, or_, select
from sqlalchemy.sql import ColumnElement, Select

from shopdash.validation import Page


def contains_any(term: Optional[str], *columns) -> Optional[ColumnElement]:
    """Substring match of `term` against any of `columns`, or None for no term."""
    if not term:
        return None
    matches = [column.contains(term, autoescape=True) for column in columns]
    return matches[0] if len(matches) == 1 else or_(*matches)


def in_range(column, low: Any = None, high: Any = None) -> List[ColumnElement]:
    """Inclusive bounds; each side is optional on its own."""
    predicates = []
    if low is not None:
        predicates.append(column >= low)
    if high is not None:
        predicates.append(column <= high)
    return predicates


class ListQuery:
    def __init__(self, model, order_column):
        self.model = model
        self.order_column = order_column
        self.predicates: List[ColumnElement] = []

    def where(self, *predicates: Optional[ColumnElement]) -> "ListQuery":
        self.predicates.extend(p for p in predicates if p is not None)
        return self

    def equals(self, column, value: Any) -> "ListQuery":
        if value is None:
            return self
        return self.where(column == value)

    def search(self, term: Optional[str], *columns) -> "ListQuery":
        return self.where(contains_any(term, *columns))

    def between(self, column, low: Any = None, high: Any = None) -> "ListQuery":
        return self.where(*in_range(column, low, high))

    def statement(self, page: Page) -> Select:
        stmt = select(self.model)
        if self.predicates:
            stmt = stmt.where(and_(*self.predicates))
        return (
            stmt.order_by(self.order_column.desc())
            .limit(page.limit)
            .offset(page.offset)
        )

    async def all(self, session, page: Page) -> list:
        result = await session.execute(self.statement(page))
        return list(result.scalars().all())
