"""Errors raised by the dataverbs verbs and compute engine.

All errors are raised synchronously by the call that triggers them,
a verb either produces a complete new table or raises one of these
errors and produces nothing.

The errors also inherit from the closest builtin exception,
so that code catching ``KeyError``, ``ValueError`` or ``TypeError``
keeps working as it would with plain Python containers.
"""

from typing import Iterable


class DataVerbsError(Exception):
    """Base class for all dataverbs errors."""


class UnknownColumn(DataVerbsError, KeyError):
    """An operation referenced a column that is not part of the table."""

    def __init__(self, name: str, available: Iterable[str] = ()) -> None:
        """
        :param name: The name of the column that was not found.
        :param available: The columns that the table actually has.
        """
        self.name = name
        self.available = list(available)
        super().__init__(
            f"Unknown column {name!r}, available columns are {self.available}"
        )

    def __str__(self) -> str:
        # KeyError would quote the whole message.
        return self.args[0]


class InvalidSpecification(DataVerbsError, ValueError):
    """The arguments of an operation are malformed or contradictory."""


class TypeMismatch(DataVerbsError, TypeError):
    """An expression or aggregation was applied to data of an incompatible type."""
