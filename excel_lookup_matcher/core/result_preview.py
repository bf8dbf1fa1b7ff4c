"""
Plain-text preview of matched rows for the terminal.

excel_lookup_matcher/core/result_preview.py
"""

from excel_lookup_matcher.core.key_normalizer import coerce_to_text
from excel_lookup_matcher.core.table_models import collect_headers


DEFAULT_PREVIEW_ROWS = 100
MAX_CELL_WIDTH = 24


def _cell_text(value, max_width: int) -> str:
    text = coerce_to_text(value).replace('\n', ' ')
    if len(text) > max_width:
        return text[:max_width - 1] + '…'
    return text


def render_preview(rows: list, headers: list = None, limit: int = DEFAULT_PREVIEW_ROWS,
                   max_width: int = MAX_CELL_WIDTH) -> str:
    """
    Render the first rows as an aligned text table.

    '#N/A' markers are shown as-is, empty cells are blank and long values
    are cut to max_width characters.
    """
    headers = collect_headers(rows, headers)
    shown = rows[:max(limit, 0)]

    if len(rows) > len(shown):
        lines = [f"Found {len(rows)} rows. Showing first {len(shown)} below."]
    else:
        lines = [f"Found {len(rows)} rows."]

    if not headers:
        return lines[0]

    table = [[_cell_text(header, max_width) for header in headers]]
    for row in shown:
        table.append([_cell_text(row.get(header), max_width) for header in headers])

    widths = [max(len(line[position]) for line in table) for position in range(len(headers))]

    def format_line(cells):
        return ' | '.join(cell.ljust(width) for cell, width in zip(cells, widths)).rstrip()

    lines.append(format_line(table[0]))
    lines.append('-+-'.join('-' * width for width in widths))
    lines.extend(format_line(cells) for cells in table[1:])

    return '\n'.join(lines)
