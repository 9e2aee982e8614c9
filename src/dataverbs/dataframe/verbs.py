"""The verbs as plain functions.

Every function takes a dataframe as its first argument and
returns a new dataframe, so that the output of one verb is
directly valid input for the next one. This is the same
contract of the :class:`dataverbs.dataframe.Dataframe` methods,
offered in functional form for use with :meth:`Dataframe.pipe`
or for composing pipelines out of plain functions:

>>> from dataverbs.dataframe import Dataframe
>>> df = Dataframe({"continent": ["Africa", "Asia", "Africa"]})
>>> count(arrange(df, ["continent"]), ["continent"]).to_pydict()
{'continent': ['Africa', 'Asia'], 'n': [2, 1]}
"""

from typing import Any, Mapping

from ..compute.aggregate import Aggregation
from ..compute.expressions import AggregateExpression, Expression
from .dataframe import Dataframe, GroupedDataframe

__all__ = (
    "select",
    "filter",
    "group_by",
    "ungroup",
    "summarize",
    "mutate",
    "arrange",
    "count",
    "head",
    "slice",
)


def select(df: Dataframe, columns: list[str | tuple[str, str]]) -> Dataframe:
    """Keep, rename or exclude columns, see :meth:`Dataframe.select`."""
    return df.select(columns)


def filter(df: Dataframe, *predicates: Expression) -> Dataframe:
    """Keep the rows matching all the predicates, see :meth:`Dataframe.filter`."""
    return df.filter(*predicates)


def group_by(df: Dataframe, keys: list[str]) -> GroupedDataframe:
    """Group the rows by ``keys``, see :meth:`Dataframe.group_by`."""
    return df.group_by(keys)


def ungroup(df: Dataframe) -> Dataframe:
    """Remove the grouping."""
    return df.ungroup()


def summarize(
    df: Dataframe,
    aggregations: Mapping[str, Aggregation | AggregateExpression] | None = None,
    **named_aggregations: Aggregation | AggregateExpression,
) -> Dataframe:
    """One row of aggregations per group, see :meth:`Dataframe.summarize`."""
    return df.summarize(aggregations, **named_aggregations)


def mutate(
    df: Dataframe,
    expressions: Mapping[str, Expression | Any] | None = None,
    **named_expressions: Expression | Any,
) -> Dataframe:
    """Add or replace computed columns, see :meth:`Dataframe.mutate`."""
    return df.mutate(expressions, **named_expressions)


def arrange(df: Dataframe, keys: list[str | tuple[str, str]]) -> Dataframe:
    """Sort the rows, see :meth:`Dataframe.arrange`."""
    return df.arrange(keys)


def count(
    df: Dataframe, keys: list[str] | None = None, name: str = "n", sort: bool = False
) -> Dataframe:
    """Count the rows for each combination of ``keys``, see :meth:`Dataframe.count`."""
    return df.count(keys, name=name, sort=sort)


def head(df: Dataframe, n: int | None = None) -> Dataframe:
    """The first ``n`` rows."""
    return df.head(n)


def slice(df: Dataframe, offset: int, length: int) -> Dataframe:
    """``length`` rows starting at row ``offset``."""
    return df.slice(offset, length)
