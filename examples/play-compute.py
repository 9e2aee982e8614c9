from dataverbs.compute import (
    AggregateNode,
    CSVDataSource,
    FilterNode,
    MeanAggregation,
    SortNode,
    col,
)

query = SortNode(
    ["mean_gdp"],
    [True],
    AggregateNode(
        ["continent"],
        {"mean_gdp": MeanAggregation("gdpPercap")},
        FilterNode(col("year") == 2007, CSVDataSource("data/gapminder.csv")),
    ),
)
for batch in query.batches():
    print("---")
    print(batch)
