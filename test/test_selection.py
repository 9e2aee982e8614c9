import pyarrow as pa
import pyarrow.compute as pc
import pytest

from dataverbs.compute import (
    FunctionCallExpression,
    MeanAggregation,
    PyArrowTableDataSource,
    SumAggregation,
    agg,
    col,
    lit,
)
from dataverbs.compute.selection import MutateNode, SelectNode
from dataverbs.errors import InvalidSpecification, UnknownColumn


@pytest.fixture
def mock_data():
    """Create a mock PyArrow Table for testing."""
    data = {"a": [1, 2, 3], "b": [4, 5, 6], "c": [7, 8, 9]}
    return pa.table(data)


def test_select_init_and_str(mock_data):
    select_node = SelectNode(["a", ("bee", "b")], PyArrowTableDataSource(mock_data))
    assert (
        str(select_node)
        == "SelectNode(columns=['a', ('bee', 'b')], child=PyArrowTableDataSource(columns=['a', 'b', 'c'], rows=3))"
    )


def test_select_columns(mock_data):
    """Test selecting specific columns."""
    batches = list(SelectNode(["c", "a"], PyArrowTableDataSource(mock_data)).batches())
    assert len(batches) == 1
    batch = batches[0]
    assert batch.column_names == ["c", "a"]
    assert batch.column(0).to_pylist() == [7, 8, 9]
    assert batch.column(1).to_pylist() == [1, 2, 3]


def test_select_and_rename(mock_data):
    batch = next(
        SelectNode([("first", "a"), "b"], PyArrowTableDataSource(mock_data)).batches()
    )
    assert batch.to_pydict() == {"first": [1, 2, 3], "b": [4, 5, 6]}


def test_select_same_column_twice_with_rename(mock_data):
    batch = next(
        SelectNode(["a", ("a2", "a")], PyArrowTableDataSource(mock_data)).batches()
    )
    assert batch.to_pydict() == {"a": [1, 2, 3], "a2": [1, 2, 3]}


def test_exclude_columns(mock_data):
    batch = next(SelectNode(["-b"], PyArrowTableDataSource(mock_data)).batches())
    assert batch.column_names == ["a", "c"]
    assert batch.num_rows == 3


def test_exclude_multiple_columns(mock_data):
    batch = next(SelectNode(["-c", "-a"], PyArrowTableDataSource(mock_data)).batches())
    assert batch.column_names == ["b"]


def test_select_no_columns(mock_data):
    batch = next(SelectNode([], PyArrowTableDataSource(mock_data)).batches())
    assert batch.num_columns == 0


@pytest.mark.parametrize(
    "columns",
    [
        ["a", "-b"],
        [("x", "a"), "-b"],
        ["a", ("x", "y", "z")],
        ["a", 3],
        "a",
        ["a", "a"],
        [("x", "a"), ("x", "b")],
    ],
)
def test_invalid_selections(mock_data, columns):
    with pytest.raises(InvalidSpecification):
        SelectNode(columns, PyArrowTableDataSource(mock_data))


@pytest.mark.parametrize("columns", [["a", "missing"], ["-missing"], [("x", "missing")]])
def test_select_unknown_column(mock_data, columns):
    with pytest.raises(UnknownColumn) as excinfo:
        next(SelectNode(columns, PyArrowTableDataSource(mock_data)).batches())
    assert excinfo.value.name == "missing"


def test_select_resolve(mock_data):
    node = SelectNode(["-a"], PyArrowTableDataSource(mock_data))
    assert node.resolve(mock_data.schema) == [("b", "b"), ("c", "c")]


def test_mutate_init_and_str(mock_data):
    expressions = {"sum_ab": FunctionCallExpression(pc.add, col("a"), col("b"))}
    mutate_node = MutateNode(expressions, PyArrowTableDataSource(mock_data))
    assert (
        str(mutate_node)
        == "MutateNode(expressions={'sum_ab': pyarrow.compute.add(ColumnRef(a),ColumnRef(b))}, keys=[], child=PyArrowTableDataSource(columns=['a', 'b', 'c'], rows=3))"
    )


def test_mutate_appends_columns(mock_data):
    """Test projecting new columns using expressions."""
    expressions = {"sum_ab": FunctionCallExpression(pc.add, col("a"), col("b"))}
    batch = next(MutateNode(expressions, PyArrowTableDataSource(mock_data)).batches())
    assert batch.column_names == ["a", "b", "c", "sum_ab"]
    assert batch.column(3).to_pylist() == [5, 7, 9]


def test_mutate_sequential_expressions(mock_data):
    """Later expressions see the columns computed by the previous ones."""
    expressions = {
        "sum_ab": FunctionCallExpression(pc.add, col("a"), col("b")),
        "double_sum_ab": FunctionCallExpression(pc.multiply, col("sum_ab"), lit(2)),
    }
    batch = next(MutateNode(expressions, PyArrowTableDataSource(mock_data)).batches())
    assert batch.column_names == ["a", "b", "c", "sum_ab", "double_sum_ab"]
    assert batch.column(4).to_pylist() == [10, 14, 18]


def test_mutate_replaces_existing_column(mock_data):
    batch = next(
        MutateNode({"b": col("b") * 10}, PyArrowTableDataSource(mock_data)).batches()
    )
    assert batch.column_names == ["a", "b", "c"]
    assert batch.column(1).to_pylist() == [40, 50, 60]


def test_mutate_broadcasts_literals(mock_data):
    batch = next(
        MutateNode(
            {"flag": lit(True), "label": "x"}, PyArrowTableDataSource(mock_data)
        ).batches()
    )
    assert batch.column("flag").to_pylist() == [True, True, True]
    assert batch.column("label").to_pylist() == ["x", "x", "x"]


def test_mutate_ungrouped_aggregation(mock_data):
    batch = next(
        MutateNode(
            {"a_centered": col("a") - agg(MeanAggregation("a"))},
            PyArrowTableDataSource(mock_data),
        ).batches()
    )
    assert batch.column("a_centered").to_pylist() == [-1.0, 0.0, 1.0]


def test_mutate_grouped_aggregation():
    data = pa.record_batch(
        {
            "continent": ["Africa", "Asia", "Africa", "Asia", "Europe"],
            "pop": [1, 10, 3, 30, 5],
        }
    )
    batch = next(
        MutateNode(
            {
                "continent_pop": agg(SumAggregation("pop")),
                "share": col("pop") / col("continent_pop"),
            },
            PyArrowTableDataSource(data),
            keys=["continent"],
        ).batches()
    )
    # Rows are kept in their original order.
    assert batch.column("continent").to_pylist() == [
        "Africa",
        "Asia",
        "Africa",
        "Asia",
        "Europe",
    ]
    assert batch.column("continent_pop").to_pylist() == [4, 40, 4, 40, 5]
    assert batch.column("share").to_pylist() == [0.25, 0.25, 0.75, 0.75, 1.0]


def test_mutate_grouped_empty_data():
    data = pa.record_batch({"k": pa.array([], pa.string()), "v": pa.array([], pa.int64())})
    batch = next(
        MutateNode(
            {"total": agg(SumAggregation("v"))}, PyArrowTableDataSource(data), keys=["k"]
        ).batches()
    )
    assert batch.num_rows == 0
    assert batch.column_names == ["k", "v", "total"]


def test_mutate_cannot_replace_grouping_column(mock_data):
    with pytest.raises(InvalidSpecification):
        MutateNode({"a": lit(1)}, PyArrowTableDataSource(mock_data), keys=["a"])


def test_mutate_unknown_column(mock_data):
    with pytest.raises(UnknownColumn):
        next(
            MutateNode({"x": col("missing") + 1}, PyArrowTableDataSource(mock_data)).batches()
        )


def test_mutate_wrong_number_of_values(mock_data):
    with pytest.raises(InvalidSpecification):
        next(
            MutateNode({"x": pa.array([1, 2])}, PyArrowTableDataSource(mock_data)).batches()
        )
