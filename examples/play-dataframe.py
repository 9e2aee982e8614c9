import logging

from dataverbs.dataframe import Dataframe, col
from dataverbs.dataframe import functions as F

logging.basicConfig(level=logging.INFO)

gapminder = Dataframe.read_csv("data/gapminder.csv")

print(
    gapminder
    .filter(col("year") == 2007)
    .group_by(["continent"])
    .summarize(mean_gdp=F.mean("gdpPercap"), sd_gdp=F.sd("gdpPercap"), countries=F.n())
    .arrange([("mean_gdp", "descending")])
)
print()

print(gapminder.count(["continent"], sort=True))
print()

print(
    gapminder
    .group_by(["country"])
    .mutate(gdp_growth=col("gdpPercap") / F.min("gdpPercap"))
    .filter(col("year") == 2007)
    .select(["continent", "gdp_growth"])
    .arrange([("gdp_growth", "descending")])
    .head()
)
