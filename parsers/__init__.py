"""
File parsers module.

Turn uploaded files into a header row plus raw string rows.
"""

from parsers.grid_parser import (
    read_grid,
    grid_from_mapped_rows,
    TabularGrid,
)

__all__ = [
    "read_grid",
    "grid_from_mapped_rows",
    "TabularGrid",
]
