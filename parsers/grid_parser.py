"""
Grid parser for product import uploads.

Decodes an Excel or CSV file into a header row plus raw string rows.
No type conversion happens here: every cell stays a string and is
parsed later by the import engine.
"""

from dataclasses import dataclass, field
from io import BytesIO, StringIO
from pathlib import Path
from typing import Union

import pandas as pd
import structlog

from exceptions import GridParseError

logger = structlog.get_logger(__name__)

EXCEL_EXTENSIONS = {".xlsx", ".xlsm"}
TEXT_EXTENSIONS = {".csv", ".txt", ".tsv"}
SUPPORTED_EXTENSIONS = EXCEL_EXTENSIONS | TEXT_EXTENSIONS
CSV_SEPARATORS = (",", ";", "\t")


@dataclass
class TabularGrid:
    """Decoded table: header plus data rows, all strings."""
    header: list[str]
    rows: list[list[str]] = field(default_factory=list)

    def as_grid(self) -> list[list[str]]:
        """Header followed by rows, as stored on an inventory session."""
        return [list(self.header)] + [list(row) for row in self.rows]


def read_grid(file: Union[bytes, BytesIO], filename: str) -> TabularGrid:
    """
    Decode an uploaded file.

    Args:
        file: File contents
        filename: Original file name; the extension picks the decoder

    Returns:
        TabularGrid with a stripped header and raw cells

    Raises:
        GridParseError: If the file type is unsupported, unreadable or empty
    """
    suffix = Path(filename or "").suffix.lower()
    logger.info("parsing_grid", filename=filename, file_type=suffix)

    if suffix not in SUPPORTED_EXTENSIONS:
        raise GridParseError(
            f"Unsupported file type '{suffix or filename}'",
            details={"supported": sorted(SUPPORTED_EXTENSIONS)}
        )

    if isinstance(file, bytes):
        file = BytesIO(file)

    try:
        if suffix in EXCEL_EXTENSIONS:
            df = pd.read_excel(
                file,
                sheet_name=0,
                header=None,
                dtype=str,
                na_filter=False,
                engine="openpyxl",
            )
        else:
            text = file.read().decode("utf-8-sig")
            separator = _guess_separator(text)
            df = pd.read_csv(
                StringIO(text),
                header=None,
                names=range(_widest_line(text, separator)),
                dtype=str,
                na_filter=False,
                sep=separator,
                skip_blank_lines=True,
            )
    except Exception as e:
        logger.error("grid_read_failed", filename=filename, error=str(e))
        raise GridParseError(
            "Failed to read file",
            details={"original_error": str(e)}
        )

    grid = grid_from_frame(df)

    logger.info(
        "grid_parsed",
        filename=filename,
        columns=len(grid.header),
        rows=len(grid.rows)
    )

    return grid


def _guess_separator(text: str) -> str:
    """Most frequent candidate separator on the first line."""
    first_line = text.split("\n", 1)[0]
    return max(CSV_SEPARATORS, key=first_line.count)


def _widest_line(text: str, separator: str) -> int:
    """
    Column count of the longest line.

    Quoted separators can overcount; the extra columns come back empty
    and are trimmed by grid_from_frame.
    """
    return max(
        (line.count(separator) + 1 for line in text.splitlines() if line.strip()),
        default=1
    )


def grid_from_frame(df: pd.DataFrame) -> TabularGrid:
    """
    Split a header-less DataFrame into header and rows.

    Fully blank rows are dropped. Trailing empty cells are trimmed off
    the header, and off data rows past the header width; cells beyond
    the header that hold a value are kept.

    Raises:
        GridParseError: If there is no header row
    """
    rows = [
        ["" if value is None else str(value) for value in record]
        for record in df.itertuples(index=False, name=None)
    ]
    rows = [row for row in rows if any(cell.strip() for cell in row)]

    if not rows:
        raise GridParseError("File contains no rows")

    header = _trim_trailing_empty([cell.strip() for cell in rows[0]], keep=0)
    data_rows = [_trim_trailing_empty(row, keep=len(header)) for row in rows[1:]]
    return TabularGrid(header=header, rows=data_rows)


def _trim_trailing_empty(row: list[str], keep: int) -> list[str]:
    """Drop empty cells from the end of a row, never below keep cells."""
    end = len(row)
    while end > keep and not row[end - 1].strip():
        end -= 1
    return row[:end]


def grid_from_mapped_rows(rows: list[dict[str, str]]) -> TabularGrid:
    """
    Build a grid from column-keyed rows.

    Header is the ordered union of keys; missing keys become "".
    """
    header: list[str] = []
    for row in rows:
        for key in row:
            if key not in header:
                header.append(key)

    return TabularGrid(
        header=header,
        rows=[[row.get(column, "") for column in header] for row in rows],
    )
