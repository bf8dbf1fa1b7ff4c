"""
Sheet resolution and configuration checks run before a match.

excel_lookup_matcher/core/match_setup.py

The join engine trusts its inputs: it never raises for a missing key column
and simply marks every row '#N/A'. Checks here catch those mistakes early
with messages listing what is actually available.
"""

import logging

from typing import Optional

from excel_lookup_matcher.core.join_engine import COLLISION_SUFFIX, MatchConfig
from excel_lookup_matcher.core.table_models import SheetData, WorkbookData


logger = logging.getLogger(__name__)


class MatchSetupError(Exception):
    """Raised when a match configuration does not fit the loaded sheets."""
    pass


def resolve_sheet(workbook: WorkbookData, sheet_name: Optional[str] = None) -> SheetData:
    """
    Pick a sheet by name, or the first sheet when no name is given.

    Raises:
        MatchSetupError: If the workbook has no sheets or the name is unknown
    """
    if not workbook.sheets:
        raise MatchSetupError(f"File '{workbook.name}' contains no sheets")

    if not sheet_name:
        return workbook.first_sheet()

    sheet = workbook.get_sheet(sheet_name)
    if sheet is None:
        raise MatchSetupError(
            f"Sheet '{sheet_name}' not found in '{workbook.name}'. "
            f"Available sheets: {workbook.sheet_names}"
        )
    return sheet


def resolve_lookup_sheet(workbook: WorkbookData, sheet_name: Optional[str] = None,
                         master_sheet: Optional[SheetData] = None) -> SheetData:
    """
    Pick the lookup sheet.

    When matching within one file and no sheet is named, the first sheet that
    is not the master sheet is used so the table is not matched against itself.
    """
    if sheet_name or master_sheet is None:
        return resolve_sheet(workbook, sheet_name)

    for sheet in workbook.sheets:
        if sheet.name != master_sheet.name:
            logger.debug(f"Using sheet '{sheet.name}' as lookup sheet")
            return sheet

    return resolve_sheet(workbook)


def validate_match_setup(config: MatchConfig, master_sheet: SheetData, lookup_sheet: SheetData) -> None:
    """
    Check keys and append columns against the sheets' headers.

    Raises:
        MatchSetupError: Listing every problem found
    """
    problems = []

    if not config.master_key:
        problems.append("Master key column is required")
    elif not master_sheet.has_column(config.master_key):
        problems.append(
            f"Master key '{config.master_key}' not found in sheet '{master_sheet.name}'. "
            f"Available columns: {master_sheet.headers}"
        )

    if not config.lookup_key:
        problems.append("Lookup key column is required")
    elif not lookup_sheet.has_column(config.lookup_key):
        problems.append(
            f"Lookup key '{config.lookup_key}' not found in sheet '{lookup_sheet.name}'. "
            f"Available columns: {lookup_sheet.headers}"
        )

    if not config.append_columns:
        problems.append("Select at least one column to append from the lookup sheet")
    else:
        missing = [column for column in config.append_columns if not lookup_sheet.has_column(column)]
        if missing:
            problems.append(
                f"Columns to append not found in lookup sheet '{lookup_sheet.name}': {missing}. "
                f"Available columns: {lookup_sheet.headers}"
            )

    if problems:
        raise MatchSetupError("Match setup is invalid:\n" + "\n".join(f"  • {problem}" for problem in problems))

    collisions = [column for column in config.append_columns if master_sheet.has_column(column)]
    if collisions:
        logger.info(f"Columns already in master sheet will be suffixed '{COLLISION_SUFFIX}': {collisions}")


# End of file #
