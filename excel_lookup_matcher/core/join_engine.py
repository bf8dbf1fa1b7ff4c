"""
VLOOKUP-style join between a master table and a lookup table.

excel_lookup_matcher/core/join_engine.py

Every master row produces exactly one output row (left join):
- Lookup rows are indexed by normalized key, first occurrence wins
- Blank keys never match, on either side
- Appended columns that already exist in the master row get a '_matched' suffix
- Unmatched rows get '#N/A' in every appended column

Bad keys and missing columns are never raised; they show up as '#N/A' in the
result so the whole table still renders.
"""

import logging

from dataclasses import dataclass, field, replace
from typing import Optional

from excel_lookup_matcher.core.key_normalizer import is_absent, normalize_key
from excel_lookup_matcher.core.table_models import SheetData, collect_headers


logger = logging.getLogger(__name__)

NOT_FOUND = '#N/A'
COLLISION_SUFFIX = '_matched'
DEFAULT_OUTPUT_SHEET = 'MatchedResult'

# Columns matching less than this share of master rows are flagged in the log
LOW_MATCH_RATE = 50.0


@dataclass(frozen=True)
class MatchConfig:
    """
    Everything needed to run one match.

    Sheets may be None until resolved against the loaded workbooks
    (first sheet by default).
    """
    master_file: str
    lookup_file: str
    master_key: str
    lookup_key: str
    append_columns: tuple = ()
    fuzzy: bool = True
    master_sheet: Optional[str] = None
    lookup_sheet: Optional[str] = None
    output_file: Optional[str] = None
    output_sheet: str = DEFAULT_OUTPUT_SHEET

    def __post_init__(self):
        # Frozen: lists from YAML or argparse are stored as tuples
        object.__setattr__(self, 'append_columns', tuple(self.append_columns or ()))

    def with_changes(self, **changes) -> 'MatchConfig':
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    @property
    def same_file(self) -> bool:
        return str(self.master_file) == str(self.lookup_file)


@dataclass
class ColumnStats:
    """Fill statistics for one appended column."""
    column: str
    target_column: str
    filled: int = 0
    empty: int = 0
    not_found: int = 0


@dataclass
class MatchSummary:
    """Counts describing one join run."""
    master_rows: int = 0
    lookup_rows: int = 0
    indexed_keys: int = 0
    duplicate_lookup_keys: int = 0
    blank_lookup_keys: int = 0
    blank_master_keys: int = 0
    matched_rows: int = 0
    column_stats: list = field(default_factory=list)

    @property
    def unmatched_rows(self) -> int:
        return self.master_rows - self.matched_rows

    @property
    def match_rate(self) -> float:
        if self.master_rows == 0:
            return 0.0
        return self.matched_rows / self.master_rows * 100


@dataclass
class MatchResult:
    """Output rows with their column order and run statistics."""
    rows: list
    headers: list
    summary: MatchSummary


def target_column_name(row: dict, column: str) -> str:
    """Name an appended column gets in this row ('<name>_matched' on collision)."""
    if column in row:
        return f"{column}{COLLISION_SUFFIX}"
    return column


def _index_lookup_rows(lookup_rows, lookup_key_column: str, fuzzy: bool):
    """Index lookup rows by normalized key and count skipped rows."""
    index = {}
    duplicates = 0
    blanks = 0

    for row in lookup_rows:
        key = normalize_key(row.get(lookup_key_column), fuzzy)
        if not key:
            blanks += 1
        elif key in index:
            duplicates += 1
        else:
            index[key] = row

    return index, duplicates, blanks


def build_lookup_index(lookup_rows, lookup_key_column: str, fuzzy: bool) -> dict:
    """
    Map normalized key -> first lookup row with that key.

    Rows whose key normalizes to '' are left out.
    """
    index, _, _ = _index_lookup_rows(lookup_rows, lookup_key_column, fuzzy)
    return index


def _iter_joined_rows(master_rows, index: dict, master_key_column: str,
                      append_columns, fuzzy: bool):
    """
    Yield one tuple per master row, in order:
    (output_row, matched_lookup_row_or_None, master_key, target_columns)
    """
    for master_row in master_rows:
        key = normalize_key(master_row.get(master_key_column), fuzzy)
        matched_row = index.get(key) if key else None

        new_row = dict(master_row)
        targets = []
        for column in append_columns:
            target = target_column_name(new_row, column)
            targets.append(target)
            if matched_row is not None:
                new_row[target] = matched_row.get(column)
            else:
                new_row[target] = NOT_FOUND

        yield new_row, matched_row, key, targets


def join_tables(master_rows, lookup_rows, master_key_column: str, lookup_key_column: str,
                append_columns, fuzzy: bool) -> list:
    """
    Append lookup columns to every master row.

    Args:
        master_rows: Rows of the master table (dicts), left untouched
        lookup_rows: Rows of the lookup table (dicts), left untouched
        master_key_column: Key column in the master rows
        lookup_key_column: Key column in the lookup rows
        append_columns: Lookup columns to copy, in output order
        fuzzy: Compare normalized keys instead of exact strings

    Returns:
        One new row per master row, in master order
    """
    index = build_lookup_index(lookup_rows, lookup_key_column, fuzzy)
    return [
        joined[0] for joined in _iter_joined_rows(master_rows, index, master_key_column, append_columns, fuzzy)
    ]


class LookupJoiner:
    """
    Runs a MatchConfig against two loaded sheets and reports statistics.

    Assumes the configuration was validated against the sheets beforehand
    (see match_setup.validate_match_setup).
    """

    def __init__(self, config: MatchConfig):
        self.config = config

    def run(self, master_sheet: SheetData, lookup_sheet: SheetData) -> MatchResult:
        """Join the sheets and return rows, headers and summary."""
        config = self.config
        mode = 'fuzzy' if config.fuzzy else 'exact'
        logger.info(
            f"Matching '{master_sheet.name}' ({master_sheet.row_count} rows) against "
            f"'{lookup_sheet.name}' ({lookup_sheet.row_count} rows) using {mode} keys"
        )

        index, duplicates, blanks = _index_lookup_rows(
            lookup_sheet.rows, config.lookup_key, config.fuzzy
        )
        logger.debug(f"Indexed {len(index)} lookup keys, skipped {duplicates} duplicates "
                     f"and {blanks} blank keys")

        summary = MatchSummary(
            master_rows=master_sheet.row_count,
            lookup_rows=lookup_sheet.row_count,
            indexed_keys=len(index),
            duplicate_lookup_keys=duplicates,
            blank_lookup_keys=blanks,
        )
        stats = {}

        rows = []
        for new_row, matched_row, key, targets in _iter_joined_rows(
                master_sheet.rows, index, config.master_key, config.append_columns, config.fuzzy):
            rows.append(new_row)

            if not key:
                summary.blank_master_keys += 1
            if matched_row is not None:
                summary.matched_rows += 1

            self._count_columns(stats, targets, matched_row)

        summary.column_stats = [stats[position] for position in sorted(stats)]
        headers = collect_headers(rows, master_sheet.headers)

        self._log_summary(summary)
        return MatchResult(rows=rows, headers=headers, summary=summary)

    def _count_columns(self, stats: dict, targets: list, matched_row) -> None:
        """Update per-column fill counts for one output row."""
        for position, column in enumerate(self.config.append_columns):
            if position not in stats:
                stats[position] = ColumnStats(column=column, target_column=targets[position])

            column_stats = stats[position]
            if matched_row is None:
                column_stats.not_found += 1
            elif is_absent(matched_row.get(column)):
                column_stats.empty += 1
            else:
                column_stats.filled += 1

    def _log_summary(self, summary: MatchSummary) -> None:
        """Log overall and per-column match statistics."""
        logger.info(f"Matched {summary.matched_rows:,} of {summary.master_rows:,} rows "
                    f"({summary.match_rate:.1f}%), {summary.unmatched_rows:,} marked {NOT_FOUND}")

        if summary.duplicate_lookup_keys:
            logger.info(f"   {summary.duplicate_lookup_keys:,} duplicate lookup keys ignored (first match wins)")
        if summary.blank_lookup_keys or summary.blank_master_keys:
            logger.info(f"   Blank keys: {summary.blank_master_keys:,} master, "
                        f"{summary.blank_lookup_keys:,} lookup (never matched)")

        if summary.column_stats:
            logger.info("📊 Lookup Results by Column:")
        for column_stats in summary.column_stats:
            renamed = ''
            if column_stats.target_column != column_stats.column:
                renamed = f" → '{column_stats.target_column}'"
            logger.info(f"   📈 {column_stats.column}{renamed}: {column_stats.filled:,} filled, "
                        f"{column_stats.empty:,} empty, {column_stats.not_found:,} {NOT_FOUND}")

        if summary.master_rows and summary.match_rate < LOW_MATCH_RATE:
            hint = '' if self.config.fuzzy else ' (try fuzzy matching)'
            logger.warning(f"⚠️  Low match rate: {summary.match_rate:.1f}%{hint}")


# End of file #
