#!/usr/bin/env python3
"""
Excel Lookup Matcher - Command Line Interface

Append columns from a lookup sheet to a master sheet, VLOOKUP style,
with exact or fuzzy (trimmed, case-insensitive, numeric-canonical) keys.
"""

import sys
import argparse

from excel_lookup_matcher import __version__, __description__
from excel_lookup_matcher.core.main import run_main


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""

    epilog_for_argparse = """
examples:
  BASIC MATCHING:
    # Add Name and Region from customers.xlsx to every order
    %(prog)s orders.xlsx customers.xlsx --master-key Customer_ID --lookup-key ID \\
        --column Name --column Region --output orders_enriched.xlsx

    # Match two sheets of the same workbook
    %(prog)s report.xlsx --master-sheet Orders --lookup-sheet Customers \\
        --master-key Customer_ID --lookup-key ID --column Name

    # Exact string keys (keeps '007' and '7' apart)
    %(prog)s orders.csv codes.csv --master-key Code --lookup-key Code --column Label --exact

  GUIDED SETUP:
    # Prompt for sheets, keys and columns, with suggested keys pre-filled
    %(prog)s orders.xlsx customers.xlsx --interactive

    # Ask Gemini for the key columns (needs GEMINI_API_KEY)
    %(prog)s orders.xlsx customers.xlsx --interactive --suggest gemini

  MATCH FILES:
    # Run a saved match configuration
    %(prog)s --config monthly_match.yaml

    # Same configuration, different output
    %(prog)s --config monthly_match.yaml --output march.xlsx

  INSPECTING FILES:
    %(prog)s orders.xlsx customers.xlsx --list-sheets

note: Unmatched rows get '#N/A' in every appended column. Appended columns
      whose name already exists in the master sheet are written as
      '<name>_matched'. With duplicate lookup keys the first row wins.
"""

    parser = argparse.ArgumentParser(
        description=f"{__description__}",
        prog="excel-lookup-matcher",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog_for_argparse
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'excel_lookup_matcher {__version__}'
    )

    # Input files
    parser.add_argument(
        'master_file',
        nargs='?',
        metavar='MASTER',
        help='Master file (.xlsx, .xls, .xlsm, .csv, .tsv) whose rows are kept and enriched'
    )

    parser.add_argument(
        'lookup_file',
        nargs='?',
        metavar='LOOKUP',
        help='Lookup file to copy columns from (default: same file as MASTER)'
    )

    # Sheet and key selection
    parser.add_argument('--master-sheet', metavar='SHEET', help='Master sheet name (default: first sheet)')
    parser.add_argument('--lookup-sheet', metavar='SHEET',
                        help='Lookup sheet name (default: first sheet, or the first other sheet of the same file)')
    parser.add_argument('--master-key', metavar='COLUMN', help='Key column in the master sheet')
    parser.add_argument('--lookup-key', metavar='COLUMN', help='Key column in the lookup sheet')

    parser.add_argument(
        '--column', '-c',
        action='append',
        dest='columns',
        metavar='COLUMN',
        help='Lookup column to append (repeatable, in output order)'
    )

    parser.add_argument(
        '--exact',
        action='store_true',
        help='Compare keys as exact strings instead of fuzzy normalization'
    )

    # Configuration file
    parser.add_argument(
        '--config',
        metavar='MATCH.yaml',
        help='YAML/JSON match file; command line options override its values'
    )

    # Output
    parser.add_argument('--output', '-o', metavar='FILE',
                        help='Output file (.xlsx, .csv, .tsv). Default: matched_result_<date>.xlsx')
    parser.add_argument('--output-sheet', metavar='NAME', help='Sheet name for Excel output (default: MatchedResult)')
    parser.add_argument('--backup', action='store_true', help='Back up an existing output file before overwriting')

    parser.add_argument(
        '--preview',
        type=int,
        default=10,
        metavar='N',
        help='Print the first N result rows (default: 10, 0 to disable)'
    )

    # Guided setup
    parser.add_argument(
        '--interactive', '-i',
        action='store_true',
        help='Prompt for any sheet, key or column not given on the command line'
    )

    parser.add_argument(
        '--suggest',
        choices=['heuristic', 'gemini', 'none'],
        default='heuristic',
        help='How to suggest missing key columns (default: heuristic)'
    )

    parser.add_argument(
        '--list-sheets',
        action='store_true',
        help='List sheets, row counts and columns of the given files and exit'
    )

    # Verbose logging
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output and debug logging'
    )

    return parser


def main() -> int:
    """Main entry point for the command line interface."""

    parser = create_argument_parser()

    # Special case: no arguments shows help instead of error
    if len(sys.argv) == 1:
        parser.print_help()
        return 0

    try:
        args = parser.parse_args()
        return run_main(args)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 1


if __name__ == '__main__':
    sys.exit(main())
