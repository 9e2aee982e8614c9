"""Row filtering.

Keeping only the rows that satisfy a condition is what
``filter`` does on a dataframe, the node in this module
evaluates the condition and discards the other rows.
"""

import pyarrow as pa

from ..errors import TypeMismatch
from .base import QueryPlanNode
from .expressions import Expression, broadcast


class FilterNode(QueryPlanNode):
    """Keep the rows for which a predicate is ``true``.

    The predicate is an expression that produces a boolean for
    every row. A missing (``null``) result, for example
    because the compared value is missing, discards the row
    the same way ``false`` does. The surviving rows keep
    their relative order.

    >>> import pyarrow as pa
    >>> import pyarrow.compute as pc
    >>> from dataverbs.compute import col, lit, FunctionCallExpression, PyArrowTableDataSource
    >>> data = pa.record_batch({"values": [1, 2, None, 4, 5]})
    >>> predicate = FunctionCallExpression(pc.greater, col("values"), lit(3))
    >>> predicate.apply(data).to_pylist()
    [False, False, None, True, True]
    >>> next(FilterNode(predicate, PyArrowTableDataSource(data)).batches()).to_pydict()
    {'values': [4, 5]}
    """

    def __init__(self, expression: Expression, child: QueryPlanNode) -> None:
        """
        :param expression: The predicate, must produce booleans.
        :param child: The node providing the rows.
        """
        self.expression = expression
        self.child = child

    def __str__(self) -> str:
        return f"FilterNode(filter={self.expression}, child={self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Filter each batch of the child independently."""
        for batch in self.child.batches():
            mask = broadcast(self.expression.apply(batch), batch.num_rows)
            if not pa.types.is_boolean(mask.type):
                raise TypeMismatch(
                    f"Filter predicate {self.expression} must be boolean, got {mask.type}"
                )
            yield batch.filter(mask, null_selection_behavior="drop")
