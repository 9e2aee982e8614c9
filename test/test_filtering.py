import pyarrow as pa
import pyarrow.compute as pc
import pytest

from dataverbs.compute import (
    FilterNode,
    FunctionCallExpression,
    MeanAggregation,
    PyArrowTableDataSource,
    agg,
    col,
    lit,
)
from dataverbs.compute.base import QueryPlanNode
from dataverbs.errors import TypeMismatch, UnknownColumn


class MockQueryPlanNode(QueryPlanNode):
    def __init__(self, batches):
        self._batches = batches

    def batches(self):
        yield from self._batches

    def __str__(self):
        return "MockQueryPlanNode"


@pytest.fixture
def data():
    return pa.record_batch(
        {"country": ["Italy", "France", "Chad", "Peru"], "pop": [59, 68, None, 34]}
    )


def test_filter_node(data):
    node = FilterNode(col("pop") > 50, PyArrowTableDataSource(data))
    assert next(node.batches()).to_pydict() == {
        "country": ["Italy", "France"],
        "pop": [59, 68],
    }


def test_filter_node_str(data):
    node = FilterNode(
        FunctionCallExpression(pc.equal, col("country"), lit("Peru")),
        MockQueryPlanNode([data]),
    )
    assert (
        str(node)
        == "FilterNode(filter=pyarrow.compute.equal(ColumnRef(country),Literal(<pyarrow.StringScalar: 'Peru'>)), child=MockQueryPlanNode)"
    )


def test_filter_drops_missing_predicate(data):
    node = FilterNode(col("pop") < 100, PyArrowTableDataSource(data))
    assert next(node.batches()).column("country").to_pylist() == [
        "Italy",
        "France",
        "Peru",
    ]


def test_filter_by_missing_values(data):
    node = FilterNode(col("pop").is_null(), PyArrowTableDataSource(data))
    assert next(node.batches()).column("country").to_pylist() == ["Chad"]


def test_filter_preserves_order_across_batches(data):
    node = FilterNode(
        col("pop") > 40, MockQueryPlanNode([data.slice(0, 2), data.slice(2)])
    )
    rows = [row for batch in node.batches() for row in batch.to_pylist()]
    assert [row["country"] for row in rows] == ["Italy", "France"]


def test_filter_with_literal_predicate(data):
    assert next(FilterNode(lit(True), PyArrowTableDataSource(data)).batches()).num_rows == 4
    assert next(FilterNode(lit(False), PyArrowTableDataSource(data)).batches()).num_rows == 0


def test_filter_with_aggregation(data):
    node = FilterNode(
        col("pop") > agg(MeanAggregation("pop")), PyArrowTableDataSource(data)
    )
    assert next(node.batches()).column("country").to_pylist() == ["Italy", "France"]


def test_filter_keeps_schema_when_nothing_matches(data):
    result = next(FilterNode(col("pop") > 1000, PyArrowTableDataSource(data)).batches())
    assert result.num_rows == 0
    assert result.schema == data.schema


def test_filter_requires_boolean_predicate(data):
    with pytest.raises(TypeMismatch):
        next(FilterNode(col("pop") + 1, PyArrowTableDataSource(data)).batches())


def test_filter_unknown_column(data):
    with pytest.raises(UnknownColumn):
        next(FilterNode(col("gdp") > 1, PyArrowTableDataSource(data)).batches())


def test_filter_incompatible_comparison(data):
    with pytest.raises(TypeMismatch):
        next(FilterNode(col("country") > 1, PyArrowTableDataSource(data)).batches())
