"""Dataframe library built on top of the dataverbs compute engine.

A dataframe library is a tool designed to handle and manipulate structured data,
typically in the form of tables (i.e., rows and columns).
It allows users to load data from various sources (like CSV files),
explore it, apply transformations, and analyze it.

The dataverbs dataframe exposes the verbs most data
analysis tutorials teach:

* ``select`` columns.
* ``filter`` rows.
* ``group_by`` one or more columns.
* ``summarize`` each group to a single row.
* ``mutate`` to compute new columns.
* ``arrange`` to sort rows.
* ``count`` rows per group.

Verbs can be chained, as each one returns a new dataframe:

>>> from dataverbs.dataframe import Dataframe, col, functions as F
>>> gapminder = Dataframe({
...     "continent": ["Africa", "Africa", "Asia"],
...     "gdpPercap": [100, 300, 200],
... })
>>> (gapminder
...     .group_by(["continent"])
...     .summarize(mean_gdp=F.mean("gdpPercap"))
...     .arrange([("mean_gdp", "descending")])
...     .to_pylist())
[{'continent': 'Africa', 'mean_gdp': 200.0}, {'continent': 'Asia', 'mean_gdp': 200.0}]

The same verbs are available as functions in :mod:`dataverbs.dataframe.verbs`.
"""

from ..compute import agg, col, lit
from . import functions, verbs
from .dataframe import Dataframe, GroupedDataframe

__all__ = (
    "Dataframe",
    "GroupedDataframe",
    "col",
    "lit",
    "agg",
    "functions",
    "verbs",
)
