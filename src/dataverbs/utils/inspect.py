"""Readable names for Python objects."""

import inspect
from typing import Any


def get_qualname(obj: Any) -> str:
    """Dotted path identifying ``obj``, starting from its module.

    Expressions use it to show which function they call,
    so ``pc.add(col("a"), 1)`` reads as ``pyarrow.compute.add``.
    Bound methods are named after the class of the instance
    they are bound to.

    >>> class Reducer:
    ...   def method(self, arg):
    ...     pass
    >>> get_qualname(Reducer.method)
    'dataverbs.utils.inspect.Reducer.method'
    >>> import pyarrow.compute
    >>> get_qualname(pyarrow.compute.add)
    'pyarrow.compute.add'
    """
    owner = inspect.getmodule(obj)
    module = owner.__name__ if owner is not None else "<unknown>"
    if inspect.ismodule(obj):
        return obj.__name__
    if inspect.ismethod(obj) or inspect.isfunction(obj):
        bound_to = getattr(obj, "__self__", None)
        if bound_to is not None:
            return f"{module}.{type(bound_to).__name__}.{obj.__name__}"
        return f"{module}.{obj.__qualname__}"
    if inspect.isclass(obj) or (callable(obj) and hasattr(obj, "__name__")):
        # classes, builtins and C extension functions
        return f"{module}.{obj.__name__}"
    return f"{module}.{type(obj).__name__}"
