"""Plain text rendering of Arrow data.

This is what ``str(dataframe)`` shows: a header with the
column names, a dashed separator and one line per row,
with the columns padded to a common width.

Example:

    >>> import pyarrow as pa
    >>> data = {
    ...     "gdpPercap": [6223.367465, 5581.180998, None],
    ...     "country": ["Algeria", "Egypt", "China"],
    ...     "year": [2007, 2007, 2007],
    ... }
    >>> table = pa.RecordBatch.from_pydict(data)
    >>> print(tabulate(table))
    gdpPercap | country | year
    --------- | ------- | ----
    6223.37   | Algeria | 2007
    5581.18   | Egypt   | 2007
    NA        | China   | 2007
"""

from typing import Any

import pyarrow as pa

from ..config import options

#: How missing values are displayed.
MISSING = "NA"


def tabulate(
    data: pa.Table | pa.RecordBatch,
    max_rows: int | None = None,
    max_width: int | None = None,
) -> str:
    """Render ``data`` as a text table.

    Rows beyond ``max_rows`` are left out and replaced by
    a trailer line telling how many were omitted::

        continent | mean_gdp
        --------- | --------
        Africa    | 200.00
        ... and 3 more rows

    :param data: The table or batch to render.
    :param max_rows: Rows shown at most, the ``display_max_rows``
                     option when not provided.
    :param max_width: Cell text longer than this is cut, the
                      ``display_max_width`` option when not provided.
    """
    max_rows = options.display_max_rows if max_rows is None else max_rows
    max_width = options.display_max_width if max_width is None else max_width

    names = data.column_names
    cells = [
        [format_value(record[name], max_width) for name in names]
        for record in data.slice(0, max_rows).to_pylist()
    ]

    widths = [len(name) for name in names]
    for line in cells:
        widths = [max(width, len(cell)) for width, cell in zip(widths, line)]

    lines = [_pad(names, widths), _pad(["-"] * len(names), widths, "-")]
    lines.extend(_pad(line, widths) for line in cells)
    if data.num_rows > max_rows:
        lines.append(f"... and {data.num_rows - max_rows} more rows")
    return "\n".join(lines)


def _pad(cells: list[str], widths: list[int], fill: str = " ") -> str:
    return " | ".join(cell.ljust(width, fill) for cell, width in zip(cells, widths))


def format_value(v: Any, max_width: int = 30) -> str:
    """Text of a single cell.

    Missing values become ``NA``, booleans are lowercase,
    floats keep two decimals and anything else is converted
    with :func:`str` and cut to ``max_width`` characters.
    """
    if v is None:
        return MISSING
    elif isinstance(v, bool):
        return "true" if v else "false"
    elif isinstance(v, float):
        return f"{v:.2f}"

    v = str(v)
    if len(v) > max_width:
        v = v[: max_width - 3] + "..."
    return v
