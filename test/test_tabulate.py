import pyarrow as pa
import pytest

from dataverbs.utils.tabulate import format_value, tabulate


def test_tabulate():
    data = pa.record_batch({"name": ["Algeria", "Chad"], "flag": [True, None]})
    assert tabulate(data).split("\n") == [
        "name    | flag",
        "------- | ----",
        "Algeria | true",
        "Chad    | NA  ",
    ]


def test_tabulate_table():
    table = pa.table({"v": [1.5]})
    assert tabulate(table) == "v   \n----\n1.50"


def test_tabulate_max_rows():
    data = pa.record_batch({"v": [1, 2, 3, 4]})
    lines = tabulate(data, max_rows=2).split("\n")
    assert lines[2:] == ["1", "2", "... and 2 more rows"]


def test_tabulate_empty():
    data = pa.record_batch({"v": pa.array([], type=pa.int64())})
    assert tabulate(data) == "v\n-"


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, "NA"),
        (False, "false"),
        (3.14159, "3.14"),
        (7, "7"),
        ("short", "short"),
        ("a" * 40, "a" * 27 + "..."),
    ],
)
def test_format_value(value, expected):
    assert format_value(value) == expected


def test_format_value_width():
    assert format_value("Democratic Republic", max_width=10) == "Democra..."
