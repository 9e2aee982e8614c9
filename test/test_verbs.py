import pytest

from dataverbs.dataframe import Dataframe, GroupedDataframe, col, verbs
from dataverbs.dataframe import functions as F

GAPMINDER = {
    "country": ["Algeria", "Egypt", "China", "Japan", "Italy"],
    "continent": ["Africa", "Africa", "Asia", "Asia", "Europe"],
    "year": [2007, 2007, 2007, 2002, 2007],
    "gdpPercap": [6223, 5581, 4959, 28605, 28570],
}


@pytest.fixture
def gapminder():
    return Dataframe(GAPMINDER)


def test_verbs_match_methods(gapminder):
    assert verbs.select(gapminder, ["country"]) == gapminder.select(["country"])
    assert verbs.filter(gapminder, col("year") == 2007) == gapminder.filter(
        col("year") == 2007
    )
    assert verbs.arrange(gapminder, ["gdpPercap"]) == gapminder.arrange(["gdpPercap"])
    assert verbs.count(gapminder, ["continent"], sort=True) == gapminder.count(
        ["continent"], sort=True
    )
    assert verbs.head(gapminder, 2) == gapminder.head(2)
    assert verbs.slice(gapminder, 1, 3) == gapminder.slice(1, 3)


def test_grouping_verbs(gapminder):
    grouped = verbs.group_by(gapminder, ["continent"])
    assert isinstance(grouped, GroupedDataframe)
    assert not verbs.ungroup(grouped).is_grouped


def test_functional_pipeline(gapminder):
    result = verbs.arrange(
        verbs.summarize(
            verbs.group_by(verbs.filter(gapminder, col("year") == 2007), ["continent"]),
            mean_gdp=F.mean("gdpPercap"),
        ),
        [("mean_gdp", "descending")],
    )
    assert result.to_pydict() == {
        "continent": ["Europe", "Africa", "Asia"],
        "mean_gdp": [28570.0, 5902.0, 4959.0],
    }


def test_pipe_with_verbs(gapminder):
    result = (
        gapminder.pipe(verbs.group_by, ["continent"])
        .pipe(verbs.mutate, best=F.max("gdpPercap"))
        .pipe(verbs.filter, col("gdpPercap") == col("best"))
    )
    assert result.to_pydict()["country"] == ["Algeria", "Japan", "Italy"]


def test_summarize_with_mapping(gapminder):
    result = verbs.summarize(gapminder, {"countries": F.n_distinct("country")})
    assert result.to_pydict() == {"countries": [5]}
