"""Pure helpers for composing rows of the month/day partitioned ledger sheet."""

from .layout import (
    SheetLayout,
    column_letter,
    format_ledger_date,
    format_vnd,
    month_column_range,
    sheet_range,
)
from .rows import (
    TableRow,
    build_data_row,
    compose_rows,
    find_last_date_header,
    is_date_header,
)

__all__ = [
    "SheetLayout",
    "TableRow",
    "build_data_row",
    "column_letter",
    "compose_rows",
    "find_last_date_header",
    "format_ledger_date",
    "format_vnd",
    "is_date_header",
    "month_column_range",
    "sheet_range",
]
