"""
Table data structures shared by readers, the join engine and writers.

excel_lookup_matcher/core/table_models.py
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class SheetData:
    """
    One sheet of a workbook as header list plus row dictionaries.

    Rows are dicts keyed by header name in header order. Empty cells are None.
    """
    name: str
    headers: list = field(default_factory=list)
    rows: list = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    def has_column(self, column: str) -> bool:
        return column in self.headers


@dataclass
class WorkbookData:
    """All sheets read from one file, in workbook order."""
    name: str
    path: str
    sheets: list = field(default_factory=list)

    @property
    def sheet_names(self) -> list:
        return [sheet.name for sheet in self.sheets]

    def get_sheet(self, sheet_name: str) -> Optional[SheetData]:
        """Return the sheet with this exact name, or None."""
        for sheet in self.sheets:
            if sheet.name == sheet_name:
                return sheet
        return None

    def first_sheet(self) -> Optional[SheetData]:
        return self.sheets[0] if self.sheets else None


def collect_headers(rows: list, headers: Optional[list] = None) -> list:
    """
    Build the column order for a list of row dicts.

    Starts from the given headers (or the first row's keys) and appends any
    other column names in the order they are first seen.
    """
    ordered = list(headers) if headers else []
    seen = set(ordered)

    for row in rows:
        for column in row.keys():
            if column not in seen:
                seen.add(column)
                ordered.append(column)

    return ordered
