"""The dataverbs Compute Engine

The compute engine defines the in-memory
format for query plans and the plan nodes
supported. Each verb of the dataframe API
is executed by one of these nodes.

The compute engine is tightly bound to Apache Arrow,
thus the engine will expect to always deal with
:class:`pyarrow.RecordBatch` and emit a new RecordBatch
as the result of the node execution.

This allows to easily build compute pipelines like::

    (RecordBatch)-->Node1--(RecordBatch)-->Node2--(RecordBatch)-->...

The query plan nodes themselves are in charge of their execution,
this keeps the behavior near to the node and thus makes easy to
know how a Node is actually executed without having to look around too much.

Building a query plan requires to combine the nodes that we want
to be executed starting with a ``DataSource`` node as the
leaf node of a query:

>>> import pyarrow as pa
>>> data = pa.table({
...    "animals": pa.array(["Flamingo", "Horse", "Brittle stars", "Centipede"]),
...    "n_legs": pa.array([2, 4, 5, 100])
... })
>>>
>>> from dataverbs.compute import col, PyArrowTableDataSource, FilterNode
>>> # keep the animals with at least 5 legs
>>> query = FilterNode(col("n_legs") >= 5, child=PyArrowTableDataSource(data))
>>> for batch in query.batches():
...     print(batch.to_pydict())
{'animals': ['Brittle stars', 'Centipede'], 'n_legs': [5, 100]}
"""

from .aggregate import (
    AggregateNode,
    Aggregation,
    CountAggregation,
    CountDistinctAggregation,
    MaxAggregation,
    MeanAggregation,
    MinAggregation,
    ReduceAggregation,
    StdDevAggregation,
    SumAggregation,
    VarianceAggregation,
)
from .base import ColumnRef, Expression, Literal, QueryPlanNode, col, lit
from .datasources import CSVDataSource, ParquetDataSource, PyArrowTableDataSource
from .expressions import AggregateExpression, FunctionCallExpression, agg
from .filtering import FilterNode
from .grouping import GroupIndex
from .pagination import PaginateNode
from .selection import MutateNode, SelectNode
from .sorting import SortNode

__all__ = (
    "QueryPlanNode",
    "Expression",
    "CSVDataSource",
    "ParquetDataSource",
    "PyArrowTableDataSource",
    "FilterNode",
    "FunctionCallExpression",
    "AggregateExpression",
    "agg",
    "col",
    "lit",
    "ColumnRef",
    "Literal",
    "GroupIndex",
    "PaginateNode",
    "SortNode",
    "SelectNode",
    "MutateNode",
    "AggregateNode",
    "Aggregation",
    "CountAggregation",
    "CountDistinctAggregation",
    "MaxAggregation",
    "MeanAggregation",
    "MinAggregation",
    "ReduceAggregation",
    "StdDevAggregation",
    "SumAggregation",
    "VarianceAggregation",
)
