import pyarrow as pa
import pyarrow.compute as pc
import pytest

from dataverbs.compute.grouping import GroupIndex
from dataverbs.errors import UnknownColumn

TEST_DATA = pa.record_batch(
    {
        "continent": ["Asia", "Africa", "Asia", "Europe", "Africa"],
        "year": [2007, 2007, 2002, 2007, 2007],
        "pop": [1, 2, 3, 4, 5],
    }
)


def test_single_key_first_seen_order():
    groups = GroupIndex(TEST_DATA, ["continent"])
    assert len(groups) == 3
    assert groups.group_ids.to_pylist() == [0, 1, 0, 2, 1]
    assert groups.first_rows == [0, 1, 3]
    assert groups.keys_batch().to_pydict() == {"continent": ["Asia", "Africa", "Europe"]}


def test_multi_key_first_seen_order():
    groups = GroupIndex(TEST_DATA, ["continent", "year"])
    assert len(groups) == 4
    assert groups.group_ids.to_pylist() == [0, 1, 2, 3, 1]
    assert groups.keys_batch().to_pydict() == {
        "continent": ["Asia", "Africa", "Asia", "Europe"],
        "year": [2007, 2007, 2002, 2007],
    }


@pytest.mark.parametrize("keys", [["continent"], ["continent", "year"]])
def test_groups_partition_all_rows(keys):
    groups = GroupIndex(TEST_DATA, keys)
    parts = groups.groups()
    assert len(parts) == len(groups)
    assert sum(part.num_rows for part in parts) == TEST_DATA.num_rows
    for part in parts:
        for key in keys:
            assert len(set(part.column(key).to_pylist())) == 1


def test_groups_keep_rows_order():
    groups = GroupIndex(TEST_DATA, ["continent"])
    assert [part.column("pop").to_pylist() for part in groups.groups()] == [
        [1, 3],
        [2, 5],
        [4],
    ]


def test_rows_order_restores_original_order():
    groups = GroupIndex(TEST_DATA, ["continent"])
    regrouped = pa.Table.from_batches(groups.groups()).combine_chunks()
    assert groups.rows_order().to_pylist() == [0, 2, 1, 4, 3]
    restored = regrouped.take(pc.sort_indices(groups.rows_order()))
    assert restored.column("pop").to_pylist() == [1, 2, 3, 4, 5]


def test_no_keys_is_a_single_group():
    groups = GroupIndex(TEST_DATA, [])
    assert len(groups) == 1
    assert groups.groups() == [TEST_DATA]
    assert groups.rows_order().to_pylist() == [0, 1, 2, 3, 4]


def test_no_keys_on_empty_data_is_still_a_group():
    groups = GroupIndex(TEST_DATA.slice(0, 0), [])
    assert len(groups) == 1
    assert groups.groups()[0].num_rows == 0


@pytest.mark.parametrize("keys", [["continent"], ["continent", "year"]])
def test_empty_data_has_no_groups(keys):
    groups = GroupIndex(TEST_DATA.slice(0, 0), keys)
    assert len(groups) == 0
    assert groups.groups() == []
    assert groups.keys_batch().num_rows == 0


def test_missing_values_form_their_own_group():
    data = pa.record_batch({"k": ["x", None, "x", None], "j": [1, None, 1, None]})
    assert GroupIndex(data, ["k"]).group_ids.to_pylist() == [0, 1, 0, 1]
    assert GroupIndex(data, ["k", "j"]).group_ids.to_pylist() == [0, 1, 0, 1]


def test_unknown_key():
    with pytest.raises(UnknownColumn):
        GroupIndex(TEST_DATA, ["country"])


@pytest.mark.parametrize("keys", [["k"], ["k", "j"]])
def test_nan_keys_form_one_group(keys):
    data = pa.record_batch({"k": [float("nan"), float("nan"), 1.0], "j": ["a"] * 3})
    groups = GroupIndex(data, keys)
    assert groups.group_ids.to_pylist() == [0, 0, 1]
    assert len(groups) == 2


@pytest.mark.parametrize("keys", [["k"], ["k", "j"]])
def test_signed_zero_keys_match_single_key_grouping(keys):
    data = pa.record_batch({"k": [0.0, -0.0, 0.0], "j": [1, 1, 1]})
    single_key = GroupIndex(data, ["k"])
    groups = GroupIndex(data, keys)
    assert groups.group_ids.to_pylist() == single_key.group_ids.to_pylist()
    assert groups.group_ids.to_pylist() == [0, 1, 0]
