"""Reducing groups of rows to summary values.

Summaries like the mean life expectancy of each continent
are computed by :class:`AggregateNode`: the rows are split
in groups by the values of the key columns, and each
:class:`Aggregation` reduces the rows of a group to one value.

Given::

    continent, country, gdpPercap
    Africa, Algeria, 100
    Africa, Egypt, 300
    Asia, China, 200

grouping by continent and averaging ``gdpPercap`` gives::

    continent, mean_gdp
    Africa, 200
    Asia, 200

Groups are always emitted in the order their key
is first seen in the data.

Missing values
--------------

Each aggregation has an explicit policy for missing (null) values:

* ``sum``, ``mean``, ``stddev``, ``variance``, ``min``, ``max``
  skip missing values.
* The sum of no values is ``0``, the mean, min and max of
  no values are missing.
* ``stddev`` and ``variance`` are sample statistics (``ddof=1``)
  and are missing when there are less than two values.
* ``count`` without a column counts rows, with a column
  counts the values that are not missing.
"""

import abc
import logging
from typing import Any, Callable

import pyarrow as pa
import pyarrow.compute as pc

from ..errors import InvalidSpecification, TypeMismatch, UnknownColumn
from .base import QueryPlanNode, concat_batches
from .grouping import GroupIndex

__all__ = (
    "AggregateNode",
    "Aggregation",
    "SumAggregation",
    "MinAggregation",
    "MaxAggregation",
    "MeanAggregation",
    "StdDevAggregation",
    "VarianceAggregation",
    "CountAggregation",
    "CountDistinctAggregation",
    "ReduceAggregation",
)

logger = logging.getLogger(__name__)


class AggregateNode(QueryPlanNode):
    """Compute aggregations for each group of rows.

    >>> import pyarrow as pa
    >>> from dataverbs.compute import MeanAggregation, PyArrowTableDataSource
    >>> data = pa.record_batch({
    ...    'continent': pa.array(['Africa', 'Africa', 'Asia']),
    ...    'gdpPercap': pa.array([100, 300, 200]),
    ... })
    >>> aggregate = AggregateNode(["continent"], {"mean_gdp": MeanAggregation("gdpPercap")},
    ...                           PyArrowTableDataSource(data))
    >>> next(aggregate.batches()).to_pydict()
    {'continent': ['Africa', 'Asia'], 'mean_gdp': [200.0, 200.0]}
    """

    def __init__(
        self,
        keys: list[str],
        aggregations: dict[str, "Aggregation"],
        child: QueryPlanNode,
    ) -> None:
        """
        :param keys: The columns to group by, ``[]`` aggregates all rows together.
        :param aggregations: Output column name to aggregation, in output order.
        :param child: The node providing the rows.
        """
        for name in aggregations:
            if name in keys:
                raise InvalidSpecification(
                    f"Aggregation {name!r} would overwrite a grouping column"
                )
        for name, aggregation in aggregations.items():
            if not isinstance(aggregation, Aggregation):
                raise InvalidSpecification(
                    f"{name!r} is not an aggregation: {aggregation!r}"
                )
        self.keys = keys
        self.aggregations = aggregations
        self.child = child

    def __str__(self) -> str:
        return f"AggregateNode(keys={self.keys}, aggregations={self.aggregations}, {self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Group the data of the child node and compute the aggregations.

        All the data of the child node is collected
        as groups might span across multiple batches,
        then the rows are partitioned by :class:`GroupIndex`
        and each aggregation is computed on each group.

        A single batch with one row for each group is emitted.
        """
        batch = concat_batches(list(self.child.batches()))
        for aggregation in self.aggregations.values():
            aggregation.validate(batch.schema)

        groups = GroupIndex(batch, self.keys)
        logger.debug(
            "Aggregating %d rows in %d groups by %s", batch.num_rows, len(groups), self.keys
        )

        # results = {aggr_name: [group1_value, group2_value, ...]}
        results: dict[str, list[pa.Scalar]] = {name: [] for name in self.aggregations}
        for group in groups.groups():
            for name, aggregation in self.aggregations.items():
                results[name].append(aggregation.aggregate(group))

        # The result has the keys first, followed by the aggregations
        # in the order they were provided.
        result_columns: dict[str, pa.Array] = {}
        if self.keys:
            keys_batch = groups.keys_batch()
            result_columns.update(zip(keys_batch.schema.names, keys_batch.columns))
        for name, aggregation in self.aggregations.items():
            values = results[name]
            if not values:
                datatype = aggregation.result_type(batch)
            elif all(v.type == values[0].type for v in values):
                datatype = values[0].type
            else:
                # Custom reductions might return different types for each group,
                # let pyarrow find a common type.
                datatype = None
            result_columns[name] = pa.array([v.as_py() for v in values], type=datatype)
        yield pa.record_batch(result_columns)


class Aggregation(abc.ABC):
    """Reduction of the values of a column to a single :class:`pyarrow.Scalar`.

    Subclasses implement :meth:`_aggregate` on the column data,
    validation and error reporting are shared.
    """

    #: The aggregation only makes sense on numbers.
    numeric = False

    def __init__(self, column: str) -> None:
        """
        :param column: The column to aggregate.
        """
        self.column = column

    def __str__(self) -> str:
        return f"{self.__class__.__name__}({self.column})"

    __repr__ = __str__

    def validate(self, schema: pa.Schema) -> None:
        """Check that the aggregation can be computed on data with ``schema``."""
        if self.column is None:
            return
        if schema.get_field_index(self.column) == -1:
            raise UnknownColumn(self.column, schema.names)
        datatype = schema.field(self.column).type
        if self.numeric and not _is_numeric(datatype):
            raise TypeMismatch(
                f"{self} requires a numeric column, {self.column!r} is {datatype}"
            )

    def aggregate(self, batch: pa.RecordBatch) -> pa.Scalar:
        """Compute the aggregation on the rows of the batch."""
        self.validate(batch.schema)
        try:
            return self._aggregate(batch.column(self.column))
        except (pa.ArrowNotImplementedError, pa.ArrowTypeError) as e:
            raise TypeMismatch(f"Unable to compute {self}: {e}") from e

    def result_type(self, batch: pa.RecordBatch) -> pa.DataType:
        """The type of the values produced by the aggregation."""
        return self.aggregate(batch.slice(0, 0)).type

    @abc.abstractmethod
    def _aggregate(self, data: pa.Array) -> pa.Scalar: ...


class SumAggregation(Aggregation):
    """Total of the values."""

    numeric = True

    def _aggregate(self, data: pa.Array) -> pa.Scalar:
        return pc.sum(data, min_count=0)


class MinAggregation(Aggregation):
    """Smallest value."""

    def _aggregate(self, data: pa.Array) -> pa.Scalar:
        return pc.min(data)


class MaxAggregation(Aggregation):
    """Largest value."""

    def _aggregate(self, data: pa.Array) -> pa.Scalar:
        return pc.max(data)


class MeanAggregation(Aggregation):
    """Arithmetic mean of the values.

    Integer columns are averaged as floating point numbers.
    """

    numeric = True

    def _aggregate(self, data: pa.Array) -> pa.Scalar:
        return pc.mean(data)


class StdDevAggregation(Aggregation):
    """Sample standard deviation of the values."""

    numeric = True

    def _aggregate(self, data: pa.Array) -> pa.Scalar:
        return pc.stddev(data, ddof=1)


class VarianceAggregation(Aggregation):
    """Sample variance of the values."""

    numeric = True

    def _aggregate(self, data: pa.Array) -> pa.Scalar:
        return pc.variance(data, ddof=1)


class CountAggregation(Aggregation):
    """Count the rows, or the values that are not missing in a column.

    When no column is provided all rows are counted,
    which is the ``n()`` of the data analysis tutorials.
    """

    def __init__(self, column: str | None = None) -> None:
        """
        :param column: The column whose values have to be counted,
                       ``None`` to count rows.
        """
        self.column = column

    def __str__(self) -> str:
        return f"CountAggregation({self.column or ''})"

    __repr__ = __str__

    def aggregate(self, batch: pa.RecordBatch) -> pa.Scalar:
        """Count the rows of the batch or the values of the column."""
        if self.column is None:
            return pa.scalar(batch.num_rows, type=pa.int64())
        return super().aggregate(batch)

    def _aggregate(self, data: pa.Array) -> pa.Scalar:
        return pc.count(data, mode="only_valid")


class CountDistinctAggregation(Aggregation):
    """Count the distinct values that are not missing in a column."""

    def _aggregate(self, data: pa.Array) -> pa.Scalar:
        return pc.count_distinct(data, mode="only_valid")


class ReduceAggregation(Aggregation):
    """Reduce a column with a custom function.

    The function receives the :class:`pyarrow.Array` of values
    of the group (missing values included) and must return
    a single value, either a Python object or a :class:`pyarrow.Scalar`.

    >>> import pyarrow as pa
    >>> data = pa.record_batch({"v": [3, 1, 2]})
    >>> ReduceAggregation("v", lambda values: values[0]).aggregate(data)
    <pyarrow.Int64Scalar: 3>
    """

    def __init__(
        self,
        column: str,
        func: Callable[[pa.Array], Any],
        type: pa.DataType | None = None,
    ) -> None:
        """
        :param column: The column to aggregate.
        :param func: The function reducing the values to a single value.
        :param type: The type of the result, inferred from the
                     returned values when not provided.
        """
        self.column = column
        self.func = func
        self.type = type

    def __str__(self) -> str:
        return f"ReduceAggregation({self.column}, {getattr(self.func, '__name__', self.func)})"

    __repr__ = __str__

    def _aggregate(self, data: pa.Array) -> pa.Scalar:
        value = self.func(data)
        if isinstance(value, pa.Scalar):
            if self.type is not None and value.type != self.type:
                value = value.cast(self.type)
            return value
        return pa.scalar(value, type=self.type)

    def result_type(self, batch: pa.RecordBatch) -> pa.DataType:
        """The declared type, custom functions are not invoked on empty data."""
        return self.type or pa.null()


def _is_numeric(datatype: pa.DataType) -> bool:
    return (
        pa.types.is_integer(datatype)
        or pa.types.is_floating(datatype)
        or pa.types.is_decimal(datatype)
    )

