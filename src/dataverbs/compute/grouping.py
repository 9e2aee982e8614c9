"""Partitioning of rows into groups.

Aggregations and grouped mutations need to know which rows
share the same values for the grouping keys.

The :class:`GroupIndex` computes, for every row of a batch,
the identifier of the group it belongs to. Groups are numbered
in the order their key is first seen in the data, so that
the results of grouped operations are deterministic and follow
the order of the input.

For example, given the following data::

    continent, country
    Africa, Algeria
    Asia, China
    Africa, Egypt

grouping by ``continent`` would lead to::

    group_ids = [0, 1, 0]
    first_rows = [0, 1]   # Africa first seen at row 0, Asia at row 1
"""

import pyarrow as pa
import pyarrow.compute as pc

from ..errors import UnknownColumn


class GroupIndex:
    """Assign each row of a batch to the group of its key values.

    >>> data = pa.record_batch({"k": ["b", "a", "b", None]})
    >>> groups = GroupIndex(data, ["k"])
    >>> groups.group_ids.to_pylist()
    [0, 1, 0, 2]
    >>> groups.keys_batch().to_pydict()
    {'k': ['b', 'a', None]}
    """

    def __init__(self, batch: pa.RecordBatch, keys: list[str]) -> None:
        """
        :param batch: The data to partition.
        :param keys: The columns whose values identify the groups.
                     When empty all rows belong to a single group.
        """
        for key in keys:
            if batch.schema.get_field_index(key) == -1:
                raise UnknownColumn(key, batch.schema.names)

        self.batch = batch
        self.keys = list(keys)

        if not self.keys:
            # Everything is one group, even when there are no rows.
            self.num_groups = 1
            self.group_ids = pa.array([0] * batch.num_rows, type=pa.int32())
            self.first_rows: list[int] = [0] if batch.num_rows else []
        elif len(self.keys) == 1:
            self._single_key_groups()
        else:
            self._multi_key_groups()

    def _single_key_groups(self) -> None:
        """Find the groups of a single key.

        This is an optimized path where we can rely on dictionary encoding
        to find the unique values of the key column, dictionary encoding
        preserves the order in which values are first met.
        Nulls are encoded too, so that missing keys form their own group.
        """
        key_column = pc.dictionary_encode(
            self.batch.column(self.keys[0]), null_encoding="encode"
        )
        self.group_ids = key_column.indices
        self.num_groups = len(key_column.dictionary)
        self.first_rows = self._find_first_rows(self.group_ids.to_pylist())

    def _multi_key_groups(self) -> None:
        """Find the groups of multiple keys.

        Dictionary encoding is currently not supported for StructArray,
        so we can't encode all keys at once. Each key is encoded
        on its own, then a hash table assigns a group to every
        combination of dictionary indices we meet. Comparing the
        indices instead of the values makes keys equal exactly
        when they would be equal for a single key grouping.
        """
        key_indices = [
            pc.dictionary_encode(
                self.batch.column(k), null_encoding="encode"
            ).indices.to_pylist()
            for k in self.keys
        ]
        seen: dict[tuple[int, ...], int] = {}
        ids = []
        for row_key in zip(*key_indices):
            ids.append(seen.setdefault(row_key, len(seen)))
        self.group_ids = pa.array(ids, type=pa.int32())
        self.num_groups = len(seen)
        self.first_rows = self._find_first_rows(ids)

    def _find_first_rows(self, ids: list[int]) -> list[int]:
        first_rows: dict[int, int] = {}
        for row_index, group_id in enumerate(ids):
            first_rows.setdefault(group_id, row_index)
        return [first_rows[group_id] for group_id in range(len(first_rows))]

    def __len__(self) -> int:
        return self.num_groups

    def keys_batch(self) -> pa.RecordBatch:
        """One row per group with the values of its keys."""
        return self.batch.select(self.keys).take(
            pa.array(self.first_rows, type=pa.int64())
        )

    def groups(self) -> list[pa.RecordBatch]:
        """Split the batch in one batch for each group, in group order."""
        if not self.keys:
            return [self.batch]
        return [
            self.batch.filter(pc.equal(self.group_ids, group_id))
            for group_id in range(self.num_groups)
        ]

    def rows_order(self) -> pa.Array:
        """Indices of the rows in the order they appear in :meth:`groups`.

        Concatenating the groups reorders the rows,
        to get them back in their original order take the
        concatenated rows by ``pc.sort_indices(rows_order())``.
        """
        if not self.keys:
            return pa.array(range(self.batch.num_rows), type=pa.int64())
        return pc.sort_indices(self.group_ids)
