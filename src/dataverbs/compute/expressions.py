"""Expressions beyond plain columns and constants.

Verbs describe what to compute on the rows with expressions:
``filter`` needs a predicate like ``pop > 1000000``,
``mutate`` needs the value of the new column like
``gdpPercap * pop`` or ``pop / sum(pop)``.

This module provides the expressions that call compute functions
and those that embed aggregations, together with the helpers
the nodes use to evaluate them.
"""

from typing import TYPE_CHECKING, Any, Callable

import pyarrow as pa

from .. import utils
from ..errors import InvalidSpecification, TypeMismatch
from .base import ColumnRef, Expression, Literal, col, lit

if TYPE_CHECKING:
    from .aggregate import Aggregation

__all__ = (
    "Expression",
    "ColumnRef",
    "Literal",
    "col",
    "lit",
    "FunctionCallExpression",
    "AggregateExpression",
    "agg",
    "apply_expression_if_needed",
    "broadcast",
)


def apply_expression_if_needed(batch: pa.RecordBatch, o: Expression | Any) -> Any:
    """Evaluate ``o`` on ``batch`` if it is an expression.

    Anything else, like a Python constant or an array,
    is returned unchanged, so that function arguments can
    freely mix expressions and already computed values.
    """
    if isinstance(o, Expression):
        o = o.apply(batch)
    return o


def broadcast(value: Any, length: int) -> pa.Array:
    """Make sure that the result of an expression is a column of ``length`` rows.

    Expressions like literals or aggregations compute a single
    value, when they have to become a column of a batch the
    value is repeated for every row.

    >>> broadcast(pa.scalar(3), 2).to_pylist()
    [3, 3]
    >>> broadcast(pa.array([1, 2]), 2).to_pylist()
    [1, 2]
    """
    if isinstance(value, pa.ChunkedArray):
        value = value.combine_chunks()
    if isinstance(value, pa.Array):
        if len(value) != length:
            raise InvalidSpecification(
                f"Expression produced {len(value)} values, expected {length}"
            )
        return value
    if not isinstance(value, pa.Scalar):
        value = pa.scalar(value)
    return pa.repeat(value, length)


class FunctionCallExpression(Expression):
    """Call a function, usually from :mod:`pyarrow.compute`, on evaluated arguments.

    Arguments can be expressions, which are evaluated on the batch
    first, or plain values passed to the function as they are.
    The total population of each row could be computed as::

        FunctionCallExpression(pyarrow.compute.multiply, ColumnRef("gdpPercap"), ColumnRef("pop"))

    which is what ``col("gdpPercap") * col("pop")`` builds.

    Arrow errors signaling that the function doesn't support
    the types of its arguments are raised as
    :class:`dataverbs.errors.TypeMismatch`.
    """

    def __init__(self, func: Callable, *args: Expression | Any) -> None:
        """
        :param func: The function to call.
        :param *args: Its positional arguments.
        """
        self.func = func
        self.args = args

    def __str__(self) -> str:
        func_name = utils.inspect.get_qualname(self.func)
        return f"{func_name}({','.join(map(str, self.args))})"

    def apply(self, batch: pa.RecordBatch) -> pa.Array:
        args = tuple(apply_expression_if_needed(batch, arg) for arg in self.args)
        try:
            return self.func(*args)
        except (pa.ArrowNotImplementedError, pa.ArrowTypeError) as e:
            raise TypeMismatch(f"Unable to compute {self}: {e}") from e


class AggregateExpression(Expression):
    """Embed an aggregation into an expression.

    Applying the expression computes the aggregation
    over the whole batch it receives, and returns the
    result as a scalar that will be broadcast to every row.

    This is what allows to compute things like the
    share of each row over the total::

        col("pop") / agg(SumAggregation("pop"))

    When a grouped dataframe is mutated, expressions are applied
    to each group separately, so the aggregation is computed
    per group.
    """

    def __init__(self, aggregation: "Aggregation") -> None:
        """
        :param aggregation: The aggregation to compute.
        """
        self.aggregation = aggregation

    def apply(self, batch: pa.RecordBatch) -> pa.Scalar:
        """Compute the aggregation over all the rows of the batch."""
        return self.aggregation.aggregate(batch)

    def __str__(self) -> str:
        return f"agg({self.aggregation})"


agg = AggregateExpression
