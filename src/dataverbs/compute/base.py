"""The building blocks of the compute engine.

Work is described as a query plan: a tree of :class:`QueryPlanNode`
objects where each node pulls :class:`pyarrow.RecordBatch` data from
its child, transforms it and passes it on. What a node computes on
the data, like the condition of a filter or the value of a new
column, is described by :class:`Expression` objects.
"""

import abc
from typing import Any, Iterator

import pyarrow as pa
import pyarrow.compute as pc

from ..errors import UnknownColumn


class QueryPlanNode(abc.ABC):
    """A step of a query plan.

    Nodes are chained by giving each one the node it reads
    from as its child, the data source being the innermost.
    Selecting the countries of Africa from a CSV file
    would be represented as::

        CSVDataSource("gapminder.csv") -> FilterNode(continent == "Africa")

    and executed by iterating over the batches of the ``FilterNode``,
    which in turn iterates over the batches of the data source.

    Subclasses implement :meth:`batches` to perform their work.
    A node that only logs what goes through it could be::

        class LogBatchesNode(QueryPlanNode):
            def __init__(self, child):
                self.child = child

            def batches(self):
                for batch in self.child.batches():
                    logger.info("%d rows", batch.num_rows)
                    yield batch

            def __str__(self):
                return f"LogBatchesNode({self.child})"
    """

    RecordBatchesGenerator = Iterator[pa.RecordBatch]

    @abc.abstractmethod
    def batches(self) -> RecordBatchesGenerator:
        """Execute the node, yielding its output data.

        Nodes that can work one batch at a time yield a result
        for each batch of their child. Nodes that need all
        the rows, like sorting or grouping, consume the whole
        child first.
        """
        ...

    @abc.abstractmethod
    def __str__(self) -> str:
        """Description of the node and of its children."""
        ...


def true_divide(dividend: Any, divisor: Any) -> pa.Array | pa.Scalar:
    """Divide like Python's ``/`` does, integers produce floating point numbers.

    :func:`pyarrow.compute.divide` performs an integer division
    when both arguments are integers.

    >>> true_divide(pa.array([1, 3]), 4).to_pylist()
    [0.25, 0.75]
    """
    if not isinstance(dividend, (pa.Array, pa.ChunkedArray, pa.Scalar)):
        dividend = pa.scalar(dividend)
    if pa.types.is_integer(dividend.type):
        dividend = dividend.cast(pa.float64())
    return pc.divide(dividend, divisor)


class Expression(abc.ABC):
    """A computation over the columns of a batch.

    Applying an expression to a batch produces either one value
    per row, as a :class:`pyarrow.Array`, or a single
    :class:`pyarrow.Scalar` (literals, aggregations) that
    the consumer repeats for every row when it needs a column.

    Expressions support Python operators, so that
    ``col("a") + col("b") > 3`` builds the same
    expression tree as nesting :class:`FunctionCallExpression`
    objects by hand.
    """

    @abc.abstractmethod
    def apply(self, batch: pa.RecordBatch) -> pa.Array | pa.Scalar:
        """Compute the expression on the rows of ``batch``.

        An expression doubling the population could be::

            class DoubleExpression(Expression):
                def __init__(self, column):
                    self.column = column

                def apply(self, batch):
                    return pyarrow.compute.multiply(batch.column(self.column), 2)
        """
        ...

    @abc.abstractmethod
    def __str__(self) -> str:
        """Readable form of the expression, used in plan descriptions."""
        ...

    def __repr__(self) -> str:
        return str(self)

    def _call(self, func: Any, *args: Any) -> "Expression":
        # Imported here as expressions depends on this module.
        from .expressions import FunctionCallExpression

        return FunctionCallExpression(func, self, *args)

    def _rcall(self, func: Any, other: Any) -> "Expression":
        from .expressions import FunctionCallExpression

        return FunctionCallExpression(func, other, self)

    def __add__(self, other: Any) -> "Expression":
        return self._call(pc.add, other)

    def __radd__(self, other: Any) -> "Expression":
        return self._rcall(pc.add, other)

    def __sub__(self, other: Any) -> "Expression":
        return self._call(pc.subtract, other)

    def __rsub__(self, other: Any) -> "Expression":
        return self._rcall(pc.subtract, other)

    def __mul__(self, other: Any) -> "Expression":
        return self._call(pc.multiply, other)

    def __rmul__(self, other: Any) -> "Expression":
        return self._rcall(pc.multiply, other)

    def __truediv__(self, other: Any) -> "Expression":
        return self._call(true_divide, other)

    def __rtruediv__(self, other: Any) -> "Expression":
        return self._rcall(true_divide, other)

    def __neg__(self) -> "Expression":
        return self._call(pc.negate)

    def __eq__(self, other: Any) -> "Expression":  # type: ignore[override]
        return self._call(pc.equal, other)

    def __ne__(self, other: Any) -> "Expression":  # type: ignore[override]
        return self._call(pc.not_equal, other)

    def __lt__(self, other: Any) -> "Expression":
        return self._call(pc.less, other)

    def __le__(self, other: Any) -> "Expression":
        return self._call(pc.less_equal, other)

    def __gt__(self, other: Any) -> "Expression":
        return self._call(pc.greater, other)

    def __ge__(self, other: Any) -> "Expression":
        return self._call(pc.greater_equal, other)

    # Kleene logic, so that ``null & false`` is ``false``
    # and ``null | true`` is ``true``.
    def __and__(self, other: Any) -> "Expression":
        return self._call(pc.and_kleene, other)

    def __rand__(self, other: Any) -> "Expression":
        return self._rcall(pc.and_kleene, other)

    def __or__(self, other: Any) -> "Expression":
        return self._call(pc.or_kleene, other)

    def __ror__(self, other: Any) -> "Expression":
        return self._rcall(pc.or_kleene, other)

    def __invert__(self) -> "Expression":
        return self._call(pc.invert)

    def is_null(self) -> "Expression":
        """Expression that is ``true`` where the value is missing."""
        return self._call(pc.is_null)

    def is_in(self, values: list[Any]) -> "Expression":
        """Expression that is ``true`` where the value is one of ``values``."""
        return self._call(pc.is_in, pa.array(values))

    __hash__ = object.__hash__


class ColumnRef(Expression):
    """The values of a column, looked up by name.

    Referencing a column that the batch doesn't have raises
    :class:`dataverbs.errors.UnknownColumn`.
    """

    def __init__(self, name: str) -> None:
        """
        :param name: Name of the column.
        """
        self.name = name

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        if batch.schema.get_field_index(self.name) == -1:
            raise UnknownColumn(self.name, batch.schema.names)
        return batch.column(self.name)

    def __str__(self) -> str:
        return f"ColumnRef({self.name})"


class Literal(Expression):
    """A constant value.

    Applying a literal returns the same :class:`pyarrow.Scalar`
    whatever the batch is, compute functions will broadcast
    it against the other arguments.
    """

    def __init__(self, value: Any) -> None:
        """
        :param value: The constant, a Python value or a pyarrow Scalar.
        """
        self.value = value if isinstance(value, pa.Scalar) else pa.scalar(value)

    def apply(self, batch: pa.RecordBatch) -> pa.Scalar:
        """Return the constant value."""
        return self.value

    def __str__(self) -> str:
        return f"Literal({self.value!r})"


col = ColumnRef
lit = Literal


def concat_batches(
    batches: list[pa.RecordBatch], promote_options: str = "none"
) -> pa.RecordBatch:
    """Combine multiple batches in a single one.

    Nodes that need to see all the data at once,
    like aggregations, use this to merge the batches
    emitted by their child.

    :param batches: The batches to combine, at least one.
    :param promote_options: How to reconcile different schemas,
                            see :func:`pyarrow.concat_tables`.
    """
    if len(batches) == 1:
        return batches[0]
    table = pa.concat_tables(
        [pa.table(batch) for batch in batches], promote_options=promote_options
    )
    return pa.record_batch(
        [column.combine_chunks() for column in table.columns], schema=table.schema
    )
