"""Leaf nodes of a query plan, where the data comes from.

A data source reads rows from somewhere (a file, an in-memory table)
and hands them to the rest of the plan as :class:`pyarrow.RecordBatch`
objects. Dataframes are built on top of them by
:meth:`dataverbs.dataframe.Dataframe.read_csv` and friends.

Sources emit at least one batch even when they hold no rows,
so the nodes that follow always receive the schema of the data.
"""

import logging

import pyarrow as pa
import pyarrow.csv
import pyarrow.parquet

from ..config import options
from .base import QueryPlanNode, concat_batches

logger = logging.getLogger(__name__)

#: Rows read at once from Parquet files.
PARQUET_BATCH_SIZE = 65536


class CSVDataSource(QueryPlanNode):
    """Read a local CSV file.

    Column types are inferred by :mod:`pyarrow.csv`,
    the file is read incrementally one block at a time.
    """

    def __init__(self, filename: str, block_size: int | None = None) -> None:
        """
        :param filename: Path of the CSV file.
        :param block_size: Bytes read per batch, the ``csv_block_size``
                           option when not provided.
        """
        self.filename = filename
        self.block_size = block_size or options.csv_block_size

    def __str__(self) -> str:
        return f"CSVDataSource({self.filename}, block_size={self.block_size})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Yield the blocks of the file as they are parsed."""
        logger.debug("Reading CSV file %s", self.filename)
        read_options = pa.csv.ReadOptions(block_size=self.block_size)
        with pa.csv.open_csv(self.filename, read_options=read_options) as reader:
            emitted = False
            for batch in reader:
                emitted = True
                yield batch
            if not emitted:
                yield _empty_batch(reader.schema)


class ParquetDataSource(QueryPlanNode):
    """Read a local Parquet file, one group of rows at a time."""

    def __init__(self, filename: str, batch_size: int | None = None) -> None:
        """
        :param filename: Path of the Parquet file.
        :param batch_size: Maximum rows per emitted batch.
        """
        self.filename = filename
        self.batch_size = batch_size or PARQUET_BATCH_SIZE

    def __str__(self) -> str:
        return f"ParquetDataSource({self.filename}, batch_size={self.batch_size})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        """Yield the rows of the file in batches of ``batch_size``."""
        logger.debug("Reading Parquet file %s", self.filename)
        with pa.parquet.ParquetFile(self.filename) as parquet_file:
            emitted = False
            for batch in parquet_file.iter_batches(batch_size=self.batch_size):
                emitted = True
                yield batch
            if not emitted:
                yield _empty_batch(parquet_file.schema_arrow)


class PyArrowTableDataSource(QueryPlanNode):
    """Use data already in memory as the input of a plan.

    Accepts both :class:`pyarrow.Table` and :class:`pyarrow.RecordBatch`.
    A table is emitted as one single batch, whatever the number of
    chunks it is made of, as the nodes of a dataframe plan work
    on all the rows at once anyway.
    """

    def __init__(self, table: pa.Table | pa.RecordBatch) -> None:
        """
        :param table: The in-memory data.
        """
        self.table = table

    def __str__(self) -> str:
        return f"PyArrowTableDataSource(columns={self.table.column_names}, rows={self.table.num_rows})"

    def batches(self) -> QueryPlanNode.RecordBatchesGenerator:
        if isinstance(self.table, pa.RecordBatch):
            yield self.table
            return

        chunks = self.table.to_batches()
        yield concat_batches(chunks) if chunks else _empty_batch(self.table.schema)


def _empty_batch(schema: pa.Schema) -> pa.RecordBatch:
    return pa.record_batch(
        [pa.array([], type=field.type) for field in schema], schema=schema
    )
