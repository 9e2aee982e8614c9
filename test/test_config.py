import pytest

from dataverbs.config import Options, options
from dataverbs.dataframe import Dataframe
from dataverbs.errors import InvalidSpecification


@pytest.fixture
def restore_options():
    yield options
    options.reset()


def test_defaults(monkeypatch):
    for name in Options.DEFAULTS:
        monkeypatch.delenv(Options.ENV_PREFIX + name.upper(), raising=False)
    assert Options().as_dict() == {
        "display_max_rows": 20,
        "display_max_width": 30,
        "head_rows": 6,
        "csv_block_size": None,
    }


def test_environment_variables(monkeypatch):
    monkeypatch.setenv("DATAVERBS_HEAD_ROWS", "3")
    monkeypatch.setenv("DATAVERBS_CSV_BLOCK_SIZE", "1024")
    opts = Options()
    assert opts.head_rows == 3
    assert opts.csv_block_size == 1024


def test_overrides_win_over_environment(monkeypatch):
    monkeypatch.setenv("DATAVERBS_HEAD_ROWS", "3")
    assert Options(head_rows=10).head_rows == 10


def test_unknown_option():
    with pytest.raises(InvalidSpecification):
        Options(max_rows=10)


def test_repr():
    assert repr(Options(head_rows=2)).startswith("Options({")


def test_update_affects_library(restore_options):
    df = Dataframe({"a": list(range(10))})
    restore_options.update(head_rows=4, display_max_rows=2)
    assert df.head().num_rows == 4
    assert str(df).endswith("... and 8 more rows")


def test_reset(restore_options, monkeypatch):
    monkeypatch.delenv("DATAVERBS_HEAD_ROWS", raising=False)
    restore_options.update(head_rows=1)
    restore_options.reset()
    assert restore_options.head_rows == 6
