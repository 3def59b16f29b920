"""
Fixed-width table rendering for search reports.

Columns have a minimum width. Shorter values are right-padded with spaces,
longer values are emitted as they are, so an overlong value shifts the
columns that follow it.
"""

from dataclasses import dataclass
from typing import List, Sequence

from ..core.data_models import DeviceRecord


@dataclass(frozen=True)
class Column:
    """
    One report column.

    Attributes:
        header: Text shown in the header row
        attribute: DeviceRecord attribute rendered in this column
        width: Minimum column width
    """
    header: str
    attribute: str
    width: int


ADDRESS = Column("IP address", "address", 17)
MODEL = Column("Model", "model", 25)
MANUFACTURER = Column("Manufacturer", "manufacturer", 25)
SERIAL_NUMBER = Column("SerialNumber", "serial_number", 25)
IDENTIFIER = Column("UDN", "identifier", 25)

VERBOSE_COLUMNS = (ADDRESS, MODEL, MANUFACTURER, SERIAL_NUMBER, IDENTIFIER)
COMPACT_COLUMNS = (ADDRESS, MODEL, SERIAL_NUMBER)


def fixed_width(value: str, width: int) -> str:
    """
    Pad a value with trailing spaces up to the given width.

    Args:
        value: Text to pad
        width: Target width

    Returns:
        The padded value, or the value unchanged if it is already that wide
    """
    if len(value) >= width:
        return value
    return value + " " * (width - len(value))


def format_table(rows: Sequence[Sequence[str]], gutter: int = 4,
                 min_widths: Sequence[int] = ()) -> str:
    """
    Lay out rows as an aligned text table.

    Each column is as wide as its longest cell (or its minimum width, if
    larger) plus the gutter. Every line, including the last, ends in a
    newline.

    Args:
        rows: Table rows, the first one usually being the header
        gutter: Extra spaces between columns
        min_widths: Optional minimum width per column

    Returns:
        The rendered table
    """
    if not rows:
        return ""

    column_count = max(len(row) for row in rows)
    widths = []
    for index in range(column_count):
        longest = max(len(row[index]) for row in rows if index < len(row))
        minimum = min_widths[index] if index < len(min_widths) else 0
        widths.append(max(longest, minimum) + gutter)

    lines = []
    for row in rows:
        cells = [fixed_width(cell, widths[index]) for index, cell in enumerate(row)]
        lines.append("".join(cells) + "\n")
    return "".join(lines)


class TableFormatter:
    """Renders device records with the verbose or compact column set."""

    def __init__(self, verbose: bool = False, gutter: int = 4):
        self.verbose = verbose
        self.gutter = gutter
        self.columns: Sequence[Column] = VERBOSE_COLUMNS if verbose else COMPACT_COLUMNS

    def header_cells(self) -> List[str]:
        return [column.header for column in self.columns]

    def row_cells(self, record: DeviceRecord) -> List[str]:
        return [getattr(record, column.attribute) for column in self.columns]

    def header_line(self) -> str:
        """Header as one fixed-width line, without a trailing newline."""
        return "".join(
            fixed_width(column.header, column.width) for column in self.columns
        )

    def row_line(self, record: DeviceRecord) -> str:
        """One record as a fixed-width line, without a trailing newline."""
        return "".join(
            fixed_width(value, column.width)
            for value, column in zip(self.row_cells(record), self.columns)
        )

    def table(self, records: Sequence[DeviceRecord]) -> str:
        """
        Render a header row plus one row per record as an aligned table.

        Args:
            records: Records in the order they should appear

        Returns:
            The rendered table, every line newline-terminated
        """
        rows = [self.header_cells()]
        rows.extend(self.row_cells(record) for record in records)
        return format_table(
            rows,
            gutter=self.gutter,
            min_widths=[column.width for column in self.columns],
        )
