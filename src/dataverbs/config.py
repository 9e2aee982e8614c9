"""Library wide options.

Options have a default value which can be overridden through
environment variables or at runtime via :meth:`Options.update`::

    DATAVERBS_DISPLAY_MAX_ROWS=50 python analysis.py

The module level :data:`options` instance is the one consulted
by the library:

>>> from dataverbs.config import options
>>> options.update(display_max_rows=10)
>>> options.display_max_rows
10
>>> options.reset()
"""

import logging
import os
from typing import Any

from .errors import InvalidSpecification

logger = logging.getLogger(__name__)


class Options:
    """Configuration of the dataverbs library."""

    ENV_PREFIX = "DATAVERBS_"

    #: option name -> (converter, default)
    DEFAULTS: dict[str, tuple[type, Any]] = {
        "display_max_rows": (int, 20),
        "display_max_width": (int, 30),
        "head_rows": (int, 6),
        "csv_block_size": (int, None),
    }

    def __init__(self, **overrides: Any) -> None:
        """
        :param overrides: Values to use instead of the defaults
                          and of the environment variables.
        """
        self.reset()
        self.update(**overrides)

    def reset(self) -> None:
        """Restore every option to its default or environment value."""
        for name, (converter, default) in self.DEFAULTS.items():
            value = os.getenv(self.ENV_PREFIX + name.upper())
            setattr(self, name, converter(value) if value is not None else default)

    def update(self, **overrides: Any) -> None:
        """Change the value of one or more options.

        :param overrides: The options to change in the form ``name=value``.
        """
        for name, value in overrides.items():
            if name not in self.DEFAULTS:
                raise InvalidSpecification(
                    f"Unknown option {name!r}, valid options are {list(self.DEFAULTS)}"
                )
            logger.debug("Setting option %s=%r", name, value)
            setattr(self, name, value)

    def as_dict(self) -> dict[str, Any]:
        """The current value of all options."""
        return {name: getattr(self, name) for name in self.DEFAULTS}

    def __repr__(self) -> str:
        return f"Options({self.as_dict()})"


options = Options()
