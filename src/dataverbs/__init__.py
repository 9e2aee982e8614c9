"""dataverbs

Tabular data transformations built from scratch on Apache Arrow,
for learning and teaching purposes.

dataverbs implements the handful of verbs that most data analysis
tutorials rely on (``select``, ``filter``, ``group_by``, ``summarize``,
``mutate``, ``arrange`` and ``count``) and the way they are
chained one after the other.

The library is constituted by multiple components, each isolated within its own
package and each self documented in literate programming style.

The primary components are:

* The Compute Engine, in charge of executing transformations on the data.
* The Dataframe API, which provides an high level API for the compute engine.

For the user guide and code documentation of each component, refer to the
component itself.

The library logs through the standard :mod:`logging` module,
under the ``dataverbs`` logger, and never configures handlers itself.
"""

import logging

from . import compute, dataframe, errors
from .config import options
from .dataframe import Dataframe, GroupedDataframe, agg, col, functions, lit
from .errors import DataVerbsError, InvalidSpecification, TypeMismatch, UnknownColumn

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = (
    "compute",
    "dataframe",
    "errors",
    "options",
    "Dataframe",
    "GroupedDataframe",
    "col",
    "lit",
    "agg",
    "functions",
    "DataVerbsError",
    "InvalidSpecification",
    "TypeMismatch",
    "UnknownColumn",
)
