"""Shortcuts for the aggregation functions.

Each function returns an :class:`dataverbs.compute.AggregateExpression`,
which can be used both as an aggregation in ``summarize``
and as part of an expression in ``mutate`` or ``filter``::

    from dataverbs.dataframe import functions as F

    gapminder.group_by(["continent"]).summarize(
        mean_gdp=F.mean("gdpPercap"), sd_gdp=F.sd("gdpPercap"), countries=F.n()
    )
    gapminder.group_by(["country"]).mutate(
        gdp_vs_mean=col("gdpPercap") / F.mean("gdpPercap")
    )

See :mod:`dataverbs.compute.aggregate` for how each aggregation
deals with missing values.
"""

from typing import Any, Callable

import pyarrow as pa

from ..compute.aggregate import (
    CountAggregation,
    CountDistinctAggregation,
    MaxAggregation,
    MeanAggregation,
    MinAggregation,
    ReduceAggregation,
    StdDevAggregation,
    SumAggregation,
    VarianceAggregation,
)
from ..compute.expressions import AggregateExpression, agg


def n() -> AggregateExpression:
    """The number of rows."""
    return agg(CountAggregation())


def count(column: str) -> AggregateExpression:
    """The number of values of ``column`` that are not missing."""
    return agg(CountAggregation(column))


def n_distinct(column: str) -> AggregateExpression:
    """The number of distinct values of ``column``."""
    return agg(CountDistinctAggregation(column))


def sum(column: str) -> AggregateExpression:
    return agg(SumAggregation(column))


def mean(column: str) -> AggregateExpression:
    return agg(MeanAggregation(column))


def sd(column: str) -> AggregateExpression:
    """Sample standard deviation."""
    return agg(StdDevAggregation(column))


def var(column: str) -> AggregateExpression:
    """Sample variance."""
    return agg(VarianceAggregation(column))


def min(column: str) -> AggregateExpression:
    return agg(MinAggregation(column))


def max(column: str) -> AggregateExpression:
    return agg(MaxAggregation(column))


def reduce(
    column: str, func: Callable[[pa.Array], Any], type: pa.DataType | None = None
) -> AggregateExpression:
    """Aggregate ``column`` with a custom function."""
    return agg(ReduceAggregation(column, func, type=type))
