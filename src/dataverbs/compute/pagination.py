"""Taking a window of rows out of a query plan.

Used by ``head`` and ``slice`` on dataframes, the node
in this module skips rows up to an offset and stops
reading its child once enough rows were collected.
"""

from ..errors import InvalidSpecification
from .base import QueryPlanNode


class PaginateNode(QueryPlanNode):
    """Emit ``length`` rows starting at row ``offset``.

    With ``offset=1`` and ``length=2`` over five rows,
    rows 1 and 2 are emitted, row 0 is skipped and
    rows 3 and 4 are never read.

    >>> import pyarrow as pa
    >>> from dataverbs.compute import PyArrowTableDataSource
    >>> data = pa.record_batch({"values": [1, 2, 3, 4, 5]})
    >>> next(PaginateNode(1, 2, PyArrowTableDataSource(data)).batches()).to_pydict()
    {'values': [2, 3]}
    """

    def __init__(self, offset: int, length: int, child: QueryPlanNode) -> None:
        """
        :param offset: Index of the first row to emit, rows are counted from 0.
        :param length: Maximum number of rows to emit.
        :param child: The node providing the rows.
        """
        if offset < 0 or length < 0:
            raise InvalidSpecification(
                f"Offset and length must not be negative, got {offset} and {length}"
            )
        self.offset = offset
        self.length = length
        self.end = offset + length
        self.child = child

    def __str__(self) -> str:
        return f"PaginateNode({self.offset}:{self.end}, {self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Slice the rows of the page out of the child batches.

        The child is closed as soon as the page is complete,
        so the batches after it are never produced.
        At least one batch, possibly empty, is always emitted
        so that consumers always know the schema of the data.
        """
        consumed_rows = 0  # rows seen in the batches before the current one
        emitted = False

        batches_generator = self.child.batches()
        for batch in batches_generator:
            # Position of the page within the current batch.
            start_in_batch = min(batch.num_rows, max(0, self.offset - consumed_rows))
            end_in_batch = min(batch.num_rows, self.end - consumed_rows)
            consumed_rows += batch.num_rows

            if end_in_batch > start_in_batch or not emitted:
                yield batch.slice(start_in_batch, max(0, end_in_batch - start_in_batch))
                emitted = True

            if consumed_rows >= self.end:
                batches_generator.close()
                break
