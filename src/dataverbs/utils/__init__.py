"""Generic utilities and helpers.

This is a collection of generic utilities and helpers
that can be helpful in the other parts of the codebase
and are not specifically bound to the verbs or the compute engine.

* :mod:`dataverbs.utils.inspect` gives readable names to Python objects.
* :mod:`dataverbs.utils.tabulate` renders tables as text.
"""

from . import inspect, tabulate

__all__ = ("inspect", "tabulate")
