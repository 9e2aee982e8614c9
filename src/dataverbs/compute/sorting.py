"""Ordering of rows.

``arrange`` reorders the rows of a dataframe by the values of
some columns, the :class:`SortNode` implements it on top of
:meth:`pyarrow.RecordBatch.sort_by`.
"""

import pyarrow as pa

from ..errors import InvalidSpecification, TypeMismatch, UnknownColumn
from .base import QueryPlanNode, concat_batches

ASCENDING = "ascending"
DESCENDING = "descending"


class SortNode(QueryPlanNode):
    """Reorder all the rows of the child by one or more keys.

    ``keys[0]`` decides the order, each following key is
    only consulted for rows that compare equal on the keys
    before it. ``descending`` holds one flag per key.

    Rows that compare equal on every key keep the order
    they had in the input, and missing values always go last
    whatever the direction.

    >>> import pyarrow as pa
    >>> from dataverbs.compute import PyArrowTableDataSource
    >>> data = pa.record_batch({"values": [1, 2, 3, 4, 5]})
    >>> # Largest first
    >>> sort = SortNode(["values"], [True], PyArrowTableDataSource(data))
    >>> next(sort.batches()).to_pydict()
    {'values': [5, 4, 3, 2, 1]}
    """

    def __init__(
        self, keys: list[str], descending: list[bool], child: QueryPlanNode
    ) -> None:
        """
        :param keys: Names of the columns to order by, most significant first.
        :param descending: For each key, ``True`` to put the largest values first.
        :param child: The node providing the rows.
        """
        if len(keys) != len(descending):
            raise InvalidSpecification("Keys and descending must have the same length")

        self.sorting = list(
            zip(keys, (DESCENDING if desc else ASCENDING for desc in descending))
        )
        self.child = child

    def __str__(self) -> str:
        return f"SortNode(sorting={self.sorting}, {self.child})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Emit a single batch with every row of the child in order.

        The rows of all the child batches have to be gathered
        before anything can be emitted.
        """
        batch = concat_batches(list(self.child.batches()))
        for key, _ in self.sorting:
            if batch.schema.get_field_index(key) == -1:
                raise UnknownColumn(key, batch.schema.names)

        if not self.sorting:
            yield batch
            return

        try:
            yield batch.sort_by(self.sorting, null_placement="at_end")
        except (pa.ArrowNotImplementedError, pa.ArrowTypeError) as e:
            raise TypeMismatch(f"Unable to sort by {self.sorting}: {e}") from e


def parse_sort_keys(keys: list[str | tuple[str, str]]) -> tuple[list[str], list[bool]]:
    """Split sort key specifications in column names and descending flags.

    Each key can be a column name, sorted ascending,
    or a ``(column, direction)`` tuple where direction
    is ``"ascending"`` or ``"descending"``.

    >>> parse_sort_keys(["year", ("pop", "descending")])
    (['year', 'pop'], [False, True])
    """
    if isinstance(keys, (str, tuple)):
        raise InvalidSpecification(f"Sort keys must be provided as a list, got {keys!r}")

    names, descending = [], []
    for key in keys:
        if isinstance(key, str):
            names.append(key)
            descending.append(False)
        elif isinstance(key, tuple) and len(key) == 2 and isinstance(key[0], str):
            name, direction = key
            if direction not in (ASCENDING, DESCENDING):
                raise InvalidSpecification(
                    f"Invalid sort direction {direction!r} for {name!r}, "
                    f"expected {ASCENDING!r} or {DESCENDING!r}"
                )
            names.append(name)
            descending.append(direction == DESCENDING)
        else:
            raise InvalidSpecification(f"Invalid sort key: {key!r}")
    return names, descending
