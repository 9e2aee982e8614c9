"""Query plan nodes that implement selection and computation of columns.

A common request in queries is to select specific columns
and project new columns based on expressions.
An example is the ``SELECT`` clause in SQL queries,
or the ``select`` and ``mutate`` verbs of dataframe libraries.

This module implements both capabilities:

* :class:`SelectNode` keeps, renames or drops existing columns.
* :class:`MutateNode` computes new columns from expressions,
  optionally evaluating them separately for each group of rows.
"""

import logging
from typing import Any

import pyarrow as pa
import pyarrow.compute as pc

from ..errors import InvalidSpecification, UnknownColumn
from .base import QueryPlanNode, concat_batches
from .expressions import Expression, apply_expression_if_needed, broadcast
from .grouping import GroupIndex

logger = logging.getLogger(__name__)

#: Prefix marking a column that has to be excluded from a selection.
EXCLUDE_PREFIX = "-"

ColumnSpec = str | tuple[str, str]


class SelectNode(QueryPlanNode):
    """Select, rename or exclude columns.

    The selection expects a list of column specifications,
    each one can be:

    * ``"name"`` to keep the column ``name``.
    * ``("new", "old")`` to keep the column ``old`` renaming it to ``new``.
    * ``"-name"`` to exclude the column ``name`` and keep all the others.

    Inclusions and exclusions can't be mixed in the same selection.

    >>> import pyarrow as pa
    >>> from dataverbs.compute import PyArrowTableDataSource
    >>> data = pa.record_batch({"a": [1, 2], "b": [3, 4], "c": [5, 6]})
    >>> next(SelectNode(["c", ("first", "a")], PyArrowTableDataSource(data)).batches()).to_pydict()
    {'c': [5, 6], 'first': [1, 2]}
    >>> next(SelectNode(["-b"], PyArrowTableDataSource(data)).batches()).to_pydict()
    {'a': [1, 2], 'c': [5, 6]}
    """

    def __init__(self, columns: list[ColumnSpec], child: QueryPlanNode) -> None:
        """
        :param columns: The list of column specifications.
        :param child: The node emitting the data to select from.
        """
        self.columns = list(columns)
        self.child = child
        self.exclude, self.specs = self.parse_specs(self.columns)

    @staticmethod
    def parse_specs(columns: list[ColumnSpec]) -> tuple[bool, list[tuple[str, str]]]:
        """Normalize column specifications to ``(new_name, existing_name)`` pairs.

        Returns if the specifications are exclusions and the pairs.
        For exclusions both names are the name of the excluded column.
        """
        if isinstance(columns, (str, tuple)):
            raise InvalidSpecification(
                f"Columns must be provided as a list, got {columns!r}"
            )

        exclusions, inclusions = [], []
        for column in columns:
            if isinstance(column, str):
                if column.startswith(EXCLUDE_PREFIX) and len(column) > 1:
                    name = column[len(EXCLUDE_PREFIX) :]
                    exclusions.append((name, name))
                else:
                    inclusions.append((column, column))
            elif (
                isinstance(column, tuple)
                and len(column) == 2
                and all(isinstance(n, str) for n in column)
            ):
                inclusions.append(column)
            else:
                raise InvalidSpecification(f"Invalid column specification: {column!r}")

        if exclusions and inclusions:
            raise InvalidSpecification(
                "Columns to keep and columns to exclude can't be mixed "
                f"in the same selection: {columns!r}"
            )

        output_names = [new for new, _ in inclusions]
        duplicates = sorted({n for n in output_names if output_names.count(n) > 1})
        if duplicates:
            raise InvalidSpecification(
                f"Selection would produce duplicate columns: {duplicates}"
            )
        return bool(exclusions), exclusions or inclusions

    def resolve(self, schema: pa.Schema) -> list[tuple[str, str]]:
        """The ``(new_name, existing_name)`` columns the selection produces.

        :param schema: The schema of the data being selected.
        """
        for _, name in self.specs:
            if schema.get_field_index(name) == -1:
                raise UnknownColumn(name, schema.names)

        if self.exclude:
            excluded = {name for _, name in self.specs}
            return [(name, name) for name in schema.names if name not in excluded]
        return list(self.specs)

    def __str__(self) -> str:
        return f"SelectNode(columns={self.columns}, child={self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Apply the selection to the child node.

        For each recordbatch yielded by the child node,
        pick the requested columns in the requested order
        giving them their new names.
        """
        for batch in self.child.batches():
            selection = self.resolve(batch.schema)
            if not selection:
                yield batch.select([])
                continue
            yield pa.RecordBatch.from_arrays(
                [batch.column(old) for _, old in selection],
                names=[new for new, _ in selection],
            )


class MutateNode(QueryPlanNode):
    """Compute new columns, or replace existing ones, from expressions.

    The expressions are evaluated in the order they are provided,
    so each expression can refer to the columns computed by
    the previous ones. Columns with a new name are appended,
    columns with an existing name are replaced in place.

    When grouping keys are provided, the expressions are
    evaluated separately on the rows of each group, so that
    aggregations embedded in the expressions are computed per group.
    The rows are emitted in the same order they were received.

    >>> import pyarrow as pa
    >>> import pyarrow.compute as pc
    >>> from dataverbs.compute import col, FunctionCallExpression, PyArrowTableDataSource
    >>> data = pa.record_batch({"a": [1, 2, 3], "b": [4, 5, 6]})
    >>> next(MutateNode({"ab_sum": FunctionCallExpression(pc.add, col("a"), col("b"))},
    ...                 PyArrowTableDataSource(data)).batches()).to_pydict()
    {'a': [1, 2, 3], 'b': [4, 5, 6], 'ab_sum': [5, 7, 9]}
    """

    def __init__(
        self,
        expressions: dict[str, Expression | Any],
        child: QueryPlanNode,
        keys: list[str] | None = None,
    ) -> None:
        """
        :param expressions: The dict {name: Expression} of columns to compute.
        :param child: The node emitting the data to be mutated.
        :param keys: The grouping columns, if the data is grouped.
        """
        self.expressions = dict(expressions)
        self.keys = list(keys or [])
        self.child = child

        overwritten_keys = [name for name in self.expressions if name in self.keys]
        if overwritten_keys:
            raise InvalidSpecification(
                f"Can't replace the grouping columns {overwritten_keys}"
            )

    def __str__(self) -> str:
        return f"MutateNode(expressions={self.expressions}, keys={self.keys}, child={self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Apply the expressions to the data of the child node.

        When there is no grouping each batch is mutated on its own,
        as there is no dependency between them. Aggregations are
        computed over all rows, so in that case too all batches
        have to be combined first.

        For grouped data the batch is split by group,
        each group is mutated and then the rows are put back
        in their original order.
        """
        batch = concat_batches(list(self.child.batches()))
        if not self.keys:
            yield self.mutate(batch)
            return

        groups = GroupIndex(batch, self.keys)
        if not len(groups):
            yield self.mutate(batch)
            return

        logger.debug("Mutating %d rows in %d groups", batch.num_rows, len(groups))
        mutated = concat_batches(
            [self.mutate(group) for group in groups.groups()],
            promote_options="permissive",
        )
        yield mutated.take(pc.sort_indices(groups.rows_order()))

    def mutate(self, batch: pa.RecordBatch) -> pa.RecordBatch:
        """Sequentially compute all the expressions on a batch."""
        for name, expr in self.expressions.items():
            value = broadcast(apply_expression_if_needed(batch, expr), batch.num_rows)
            index = batch.schema.get_field_index(name)
            if index == -1:
                batch = batch.append_column(name, value)
            else:
                batch = batch.set_column(index, name, value)
        return batch
