"""The Dataframe objects themselves.

Two kinds of dataframes exist:

* :class:`Dataframe`, a plain table of rows.
* :class:`GroupedDataframe`, a table whose rows are
  partitioned in groups by the values of some key columns.

Grouping is an explicit property of the value, each verb documents
in its signature if it preserves it, drops it, or introduces it.
"""

import logging
from typing import Any, Callable, Iterable, Mapping, Self

import pyarrow as pa

from ..compute import (
    AggregateNode,
    CSVDataSource,
    CountAggregation,
    FilterNode,
    GroupIndex,
    MutateNode,
    PaginateNode,
    ParquetDataSource,
    PyArrowTableDataSource,
    SelectNode,
    SortNode,
    col,
)
from ..compute.aggregate import Aggregation
from ..compute.base import QueryPlanNode
from ..compute.expressions import AggregateExpression, Expression
from ..compute.sorting import parse_sort_keys
from ..config import options
from ..errors import InvalidSpecification, TypeMismatch, UnknownColumn
from ..utils.tabulate import tabulate

logger = logging.getLogger(__name__)


class Dataframe:
    """Data structure that handles data in rows and columns.

    The Dataframe object allows to represent in-memory data
    and perform transformations over it.

    Dataframes are immutable: every transformation returns
    a new Dataframe and never modifies the one it was invoked on.
    Transformations are eager, each one is fully executed
    by the compute engine before returning, so any error is
    raised by the transformation that caused it.

    Transformations can be chained, as each one
    returns a Dataframe that accepts further transformations:

    >>> from dataverbs.dataframe import Dataframe, col
    >>> from dataverbs.compute import MeanAggregation
    >>> df = Dataframe({
    ...     "continent": ["Africa", "Africa", "Asia"],
    ...     "gdpPercap": [100, 300, 200],
    ... })
    >>> (df.filter(col("gdpPercap") > 150)
    ...    .group_by(["continent"])
    ...    .summarize({"mean_gdp": MeanAggregation("gdpPercap")})
    ...    .to_pydict())
    {'continent': ['Africa', 'Asia'], 'mean_gdp': [300.0, 200.0]}
    """

    def __init__(
        self, data: pa.Table | pa.RecordBatch | QueryPlanNode | Mapping[str, Iterable]
    ) -> None:
        """
        :param data: The data of the dataframe. Can be a `pyarrow.Table`,
                     a `pyarrow.RecordBatch`, a mapping of column names to values,
                     or a compute engine node emitting the data, which
                     will be executed immediately.
        """
        if isinstance(data, QueryPlanNode):
            data = pa.Table.from_batches(list(data.batches()))
        elif isinstance(data, pa.RecordBatch):
            data = pa.Table.from_batches([data])
        elif isinstance(data, Mapping):
            data = pa.table(dict(data))

        if not isinstance(data, pa.Table):
            raise InvalidSpecification(
                "Invalid input, expected a QueryPlanNode, a PyArrow Table or a mapping of columns"
            )
        self.table = data

    @classmethod
    def from_pylist(cls, rows: list[Mapping[str, Any]]) -> "Dataframe":
        """Create a Dataframe from a list of rows.

        :param rows: The rows, each one a mapping of column names to values.
                     All rows are expected to have the same columns.
        """
        return Dataframe(pa.Table.from_pylist(rows))

    @classmethod
    def read_csv(cls, filename: str, block_size: int | None = None) -> "Dataframe":
        """Open a CSV file and create a Dataframe out of its data.

        :param filename: The path to a local CSV file.
        :param block_size: The size of the blocks read at once.
        """
        return Dataframe(CSVDataSource(filename, block_size=block_size))

    @classmethod
    def read_parquet(cls, filename: str) -> "Dataframe":
        """Open a Parquet file and create a Dataframe out of its data.

        :param filename: The path to a local Parquet file.
        """
        return Dataframe(ParquetDataSource(filename))

    @property
    def group_keys(self) -> tuple[str, ...]:
        """The columns the rows are grouped by, empty when not grouped."""
        return ()

    @property
    def is_grouped(self) -> bool:
        return bool(self.group_keys)

    @property
    def num_rows(self) -> int:
        return self.table.num_rows

    @property
    def column_names(self) -> list[str]:
        return self.table.column_names

    @property
    def schema(self) -> pa.Schema:
        return self.table.schema

    def __len__(self) -> int:
        return self.table.num_rows

    def to_arrow(self) -> pa.Table:
        """The data of the dataframe as a pyarrow.Table"""
        return self.table

    def to_pydict(self) -> dict[str, list]:
        """The data of the dataframe as a dictionary of columns."""
        return self.table.to_pydict()

    def to_pylist(self) -> list[dict[str, Any]]:
        """The data of the dataframe as a list of rows."""
        return self.table.to_pylist()

    def _source(self) -> QueryPlanNode:
        return PyArrowTableDataSource(self.table)

    def _execute(self, node: QueryPlanNode) -> pa.Table:
        table = pa.Table.from_batches(list(node.batches()))
        logger.debug(
            "Executed %s: %d rows, columns %s", node, table.num_rows, table.column_names
        )
        return table

    def _with_table(self, table: pa.Table) -> Self:
        """A new dataframe with the same grouping of this one."""
        return self.__class__(table)

    def select(self, columns: list[str | tuple[str, str]]) -> Self:
        """Keep, rename or exclude columns.

        Each column can be specified as:

        * ``"name"`` to keep the column.
        * ``("new_name", "name")`` to keep the column with a new name.
        * ``"-name"`` to exclude the column, all other columns are kept.

        Inclusions and exclusions can't be mixed.

        >>> df = Dataframe({"a": [1], "b": [2], "c": [3]})
        >>> df.select(["c", ("A", "a")]).to_pydict()
        {'c': [3], 'A': [1]}
        >>> df.select(["-b"]).column_names
        ['a', 'c']

        :param columns: The columns to select, in the order they should appear.
        """
        return self._with_table(self._execute(SelectNode(columns, self._source())))

    def filter(self, *predicates: Expression) -> Self:
        """Keep only the rows for which all the predicates are true.

        Rows where a predicate is false or missing are discarded,
        the order of the rows is preserved.

        >>> df = Dataframe({"year": [2002, 2007, None]})
        >>> df.filter(col("year") == 2007).to_pydict()
        {'year': [2007]}

        :param predicates: Expressions resulting in a boolean for each row,
                           for example ``col("year") == 2007``.
        """
        predicate = self._combine_predicates(predicates)
        return self._with_table(self._execute(FilterNode(predicate, self._source())))

    def _combine_predicates(self, predicates: tuple[Expression, ...]) -> Expression:
        if not predicates:
            raise InvalidSpecification("At least one predicate is required to filter")
        for predicate in predicates:
            if not isinstance(predicate, Expression):
                raise InvalidSpecification(
                    f"Filter predicates must be expressions, got {predicate!r}"
                )
        combined = predicates[0]
        for predicate in predicates[1:]:
            combined = combined & predicate
        return combined

    def group_by(self, keys: list[str]) -> "GroupedDataframe":
        """Group the rows by the values of one or more columns.

        The data is unchanged, but subsequent ``summarize``,
        ``mutate`` and ``filter`` operations will work on each
        group separately. Grouping an already grouped dataframe
        replaces the previous grouping.

        :param keys: The columns to group by.
        """
        return GroupedDataframe(self.table, keys)

    def ungroup(self) -> "Dataframe":
        """Remove the grouping, if any."""
        return Dataframe(self.table)

    def summarize(
        self,
        aggregations: Mapping[str, Aggregation | AggregateExpression] | None = None,
        **named_aggregations: Aggregation | AggregateExpression,
    ) -> "Dataframe":
        """Reduce each group to a single row of aggregated values.

        The result has one row for each group, in the order
        the groups are first met, with the grouping columns
        followed by one column for each aggregation.
        When the dataframe is not grouped, the result has exactly one row.
        At least one aggregation must be provided.
        The result is not grouped.

        >>> from dataverbs.compute import SumAggregation
        >>> df = Dataframe({"k": ["b", "a", "b"], "v": [1, 2, 3]})
        >>> df.group_by(["k"]).summarize(total=SumAggregation("v")).to_pydict()
        {'k': ['b', 'a'], 'total': [4, 2]}

        :param aggregations: The aggregations in the form ``{"new_col_name": Aggregation}``.
        :param named_aggregations: Aggregations can also be provided as keyword arguments.
        """
        aggregations = _merge_named(aggregations, named_aggregations)
        if not aggregations:
            raise InvalidSpecification("summarize requires at least one aggregation")
        aggregations = {
            name: aggr.aggregation if isinstance(aggr, AggregateExpression) else aggr
            for name, aggr in aggregations.items()
        }
        node = AggregateNode(list(self.group_keys), aggregations, self._source())
        return Dataframe(self._execute(node))

    def mutate(
        self,
        expressions: Mapping[str, Expression | Any] | None = None,
        **named_expressions: Expression | Any,
    ) -> Self:
        """Add new columns, or replace existing ones, computed from expressions.

        Expressions are evaluated in order and can refer to the columns
        created by the previous ones. Expressions can include aggregations
        (see :func:`dataverbs.compute.agg`), which are computed for each group
        when the dataframe is grouped and over all rows otherwise.
        The number and order of rows never changes, grouping is preserved.

        >>> from dataverbs.compute import agg, SumAggregation
        >>> df = Dataframe({"pop": [1, 3]})
        >>> df.mutate(share=col("pop") / agg(SumAggregation("pop"))).to_pydict()
        {'pop': [1, 3], 'share': [0.25, 0.75]}

        :param expressions: The columns to compute in the form ``{"name": Expression}``.
        :param named_expressions: Expressions can also be provided as keyword arguments.
        """
        expressions = _merge_named(expressions, named_expressions)
        node = MutateNode(expressions, self._source(), keys=list(self.group_keys))
        return self._with_table(self._execute(node))

    def arrange(self, keys: list[str | tuple[str, str]]) -> "Dataframe":
        """Sort the rows by one or more columns.

        Each key can be a column name, sorted in ascending order,
        or a ``(column, "ascending" | "descending")`` tuple.
        The first key is the primary one and the following
        ones break ties. The sort is stable and missing values go last.

        Sorting works on all the rows regardless of groups,
        so the result is not grouped.

        >>> df = Dataframe({"gdpPercap": [100, 300, 200]})
        >>> df.arrange([("gdpPercap", "descending")]).to_pydict()
        {'gdpPercap': [300, 200, 100]}

        :param keys: The sort keys in priority order.
        """
        names, descending = parse_sort_keys(keys)
        if self.is_grouped:
            logger.info("Sorting drops the grouping by %s", list(self.group_keys))
        return Dataframe(self._execute(SortNode(names, descending, self._source())))

    def count(
        self, keys: list[str] | None = None, name: str = "n", sort: bool = False
    ) -> "Dataframe":
        """Count the rows for each distinct combination of values of ``keys``.

        Equivalent to grouping by ``keys`` and summarizing with the count
        of rows. Any previous grouping is ignored. Without keys,
        all the rows are counted in a single row.

        >>> df = Dataframe({"continent": ["Africa", "Africa", "Asia"]})
        >>> df.count(["continent"]).to_pydict()
        {'continent': ['Africa', 'Asia'], 'n': [2, 1]}

        :param keys: The columns whose values have to be counted.
        :param name: The name of the column holding the counts.
        :param sort: Sort the result by descending count.
        """
        keys = _validate_keys(keys or [], self.schema, allow_empty=True)
        if name in keys:
            raise InvalidSpecification(f"Count column {name!r} is also a counted column")

        node: QueryPlanNode = AggregateNode(
            keys, {name: CountAggregation()}, self._source()
        )
        if sort:
            node = SortNode([name], [True], node)
        return Dataframe(self._execute(node))

    def head(self, n: int | None = None) -> Self:
        """The first ``n`` rows, defaults to the ``head_rows`` option."""
        return self.slice(0, options.head_rows if n is None else n)

    def slice(self, offset: int, length: int) -> Self:
        """``length`` rows starting at row ``offset``."""
        return self._with_table(
            self._execute(PaginateNode(offset, length, self._source()))
        )

    def pipe(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        """Call ``func(self, *args, **kwargs)``.

        Allows to keep chaining when a transformation is
        provided by a function instead of a method:

        >>> from dataverbs.dataframe import verbs
        >>> Dataframe({"a": [2, 1]}).pipe(verbs.arrange, ["a"]).to_pydict()
        {'a': [1, 2]}
        """
        return func(self, *args, **kwargs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Dataframe):
            return NotImplemented
        return self.group_keys == other.group_keys and self.table.equals(other.table)

    __hash__ = None  # type: ignore[assignment]

    def __str__(self) -> str:
        return tabulate(self.table)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(rows={self.num_rows}, columns={self.column_names})"


class GroupedDataframe(Dataframe):
    """A Dataframe whose rows are partitioned in groups.

    Groups are identified by the distinct combinations of values
    of the key columns, and are always processed in the order
    they are first seen in the data.

    >>> df = Dataframe({"continent": ["Asia", "Africa", "Asia"], "pop": [3, 2, 1]})
    >>> grouped = df.group_by(["continent"])
    >>> grouped.group_keys
    ('continent',)
    >>> grouped.num_groups
    2
    """

    def __init__(
        self,
        data: pa.Table | pa.RecordBatch | QueryPlanNode | Mapping[str, Iterable],
        keys: list[str],
    ) -> None:
        """
        :param data: The data of the dataframe, as accepted by :class:`Dataframe`.
        :param keys: The columns to group by.
        """
        super().__init__(data)
        self.keys = tuple(_validate_keys(keys, self.schema, allow_empty=False))
        logger.debug("Grouped %d rows by %s", self.num_rows, list(self.keys))

    @property
    def group_keys(self) -> tuple[str, ...]:
        return self.keys

    @property
    def num_groups(self) -> int:
        """The number of distinct groups in the data."""
        return len(GroupIndex(_as_record_batch(self.table), list(self.keys)))

    def _with_table(self, table: pa.Table) -> Self:
        return self.__class__(table, list(self.keys))

    def select(self, columns: list[str | tuple[str, str]]) -> Self:
        """Keep, rename or exclude columns, preserving the grouping.

        The grouping columns are always kept, when they are
        not part of the selection they are added in front of it.
        When they are renamed, the grouping follows the new name.

        :param columns: The columns to select, see :meth:`Dataframe.select`.
        """
        selection = SelectNode(columns, self._source()).resolve(self.schema)

        keys, missing = [], []
        for key in self.keys:
            renamed = [new for new, old in selection if old == key]
            if renamed:
                keys.append(renamed[0])
            else:
                keys.append(key)
                missing.append(key)
        if missing:
            logger.info("Adding missing grouping columns %s to the selection", missing)
            selection = [(key, key) for key in missing] + selection

        table = self._execute(SelectNode(selection, self._source()))
        return self.__class__(table, keys)

    def filter(self, *predicates: Expression) -> Self:
        """Keep only the rows for which all the predicates are true.

        Predicates are evaluated separately on each group, so
        aggregations in the predicates are computed per group,
        for example to keep the rows above the mean of their group.

        :param predicates: Expressions resulting in a boolean for each row.
        """
        predicate = self._combine_predicates(predicates)

        # Evaluate the predicate per group into a temporary column,
        # then filter on that column and discard it.
        mask_name = "__filter_mask__"
        while mask_name in self.column_names:
            mask_name = f"_{mask_name}_"
        masked = self._execute(
            MutateNode({mask_name: predicate}, self._source(), keys=list(self.keys))
        )
        mask_type = masked.schema.field(mask_name).type
        if not pa.types.is_boolean(mask_type):
            raise TypeMismatch(
                f"Filter predicate {predicate} must be boolean, got {mask_type}"
            )
        node = SelectNode(
            [f"-{mask_name}"],
            FilterNode(col(mask_name), PyArrowTableDataSource(masked)),
        )
        return self._with_table(self._execute(node))

    def __str__(self) -> str:
        return f"# Groups: {', '.join(self.keys)} [{self.num_groups}]\n{tabulate(self.table)}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(rows={self.num_rows}, "
            f"columns={self.column_names}, keys={list(self.keys)})"
        )


def _validate_keys(keys: list[str], schema: pa.Schema, allow_empty: bool) -> list[str]:
    """Check that grouping keys are a list of distinct existing columns."""
    if isinstance(keys, str) or not isinstance(keys, (list, tuple)):
        raise InvalidSpecification(f"Keys must be provided as a list, got {keys!r}")
    if not keys and not allow_empty:
        raise InvalidSpecification("At least one grouping column is required")
    for key in keys:
        if not isinstance(key, str):
            raise InvalidSpecification(f"Invalid column name: {key!r}")
        if schema.get_field_index(key) == -1:
            raise UnknownColumn(key, schema.names)
    if len(set(keys)) != len(keys):
        raise InvalidSpecification(f"Duplicate grouping columns: {keys}")
    return list(keys)


def _merge_named(
    mapping: Mapping[str, Any] | None, named: dict[str, Any]
) -> dict[str, Any]:
    """Merge arguments provided as a mapping and as keyword arguments."""
    merged = dict(mapping or {})
    duplicates = sorted(set(merged) & set(named))
    if duplicates:
        raise InvalidSpecification(f"Columns provided more than once: {duplicates}")
    merged.update(named)
    return merged


def _as_record_batch(table: pa.Table) -> pa.RecordBatch:
    return next(PyArrowTableDataSource(table).batches())
