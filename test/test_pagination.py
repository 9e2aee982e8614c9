import pyarrow as pa
import pytest

from dataverbs.compute.base import QueryPlanNode
from dataverbs.compute.pagination import PaginateNode
from dataverbs.errors import InvalidSpecification


class MockQueryPlanNode(QueryPlanNode):
    def __init__(self, batches):
        self._batches = batches
        self.consumed = 0

    def batches(self):
        for batch in self._batches:
            self.consumed += 1
            yield batch

    def __str__(self):
        return "MockQueryPlanNode"


BATCHES = [
    pa.record_batch({"values": [1, 2, 3]}),
    pa.record_batch({"values": [4, 5, 6]}),
    pa.record_batch({"values": [7, 8, 9]}),
]


def paginate(offset, length, batches=BATCHES):
    node = PaginateNode(offset, length, MockQueryPlanNode(batches))
    return [v for batch in node.batches() for v in batch.column(0).to_pylist()]


@pytest.mark.parametrize(
    "offset,length,expected",
    [
        (0, 2, [1, 2]),
        (2, 3, [3, 4, 5]),
        (4, 10, [5, 6, 7, 8, 9]),
        (0, 0, []),
        (20, 5, []),
    ],
)
def test_paginate(offset, length, expected):
    assert paginate(offset, length) == expected


def test_paginate_stops_consuming_batches():
    child = MockQueryPlanNode(BATCHES)
    list(PaginateNode(0, 2, child).batches())
    assert child.consumed == 1


def test_paginate_always_emits_a_batch():
    node = PaginateNode(20, 5, MockQueryPlanNode(BATCHES))
    batches = list(node.batches())
    assert len(batches) == 1
    assert batches[0].num_rows == 0
    assert batches[0].schema == BATCHES[0].schema


def test_paginate_str():
    assert str(PaginateNode(1, 2, MockQueryPlanNode([]))) == "PaginateNode(1:3, MockQueryPlanNode)"


@pytest.mark.parametrize("offset,length", [(-1, 2), (0, -2)])
def test_paginate_negative(offset, length):
    with pytest.raises(InvalidSpecification):
        PaginateNode(offset, length, MockQueryPlanNode(BATCHES))
