"""Main functionality for excel_lookup_matcher package."""

import logging
import traceback

from argparse import Namespace

from excel_lookup_matcher.config.match_config_loader import MatchConfigLoader, ConfigValidationError
from excel_lookup_matcher.core.file_reader import FileReader, FileReaderError
from excel_lookup_matcher.core.file_writer import FileWriter, FileWriterError, default_output_filename
from excel_lookup_matcher.core.interactive_setup import InteractiveMatchSetup, InteractiveSetupError
from excel_lookup_matcher.core.join_engine import DEFAULT_OUTPUT_SHEET, LookupJoiner, MatchConfig
from excel_lookup_matcher.core.match_setup import (
    MatchSetupError,
    resolve_lookup_sheet,
    resolve_sheet,
    validate_match_setup
)
from excel_lookup_matcher.core.result_preview import render_preview
from excel_lookup_matcher.suggestions.suggestion_service import apply_suggestion, create_suggestion_service

# Set up logging
logger = logging.getLogger(__name__)

HANDLED_ERRORS = (
    ConfigValidationError,
    FileReaderError,
    FileWriterError,
    InteractiveSetupError,
    MatchSetupError,
    FileNotFoundError,
)


def run_main(args: Namespace) -> int:
    """
    Main entry point for the package functionality.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    verbose = getattr(args, 'verbose', False)

    # Set up logging level
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format='%(levelname)s: %(message)s')
    else:
        logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')

    try:
        if getattr(args, 'list_sheets', False):
            return list_sheets(args)

        if not getattr(args, 'master_file', None) and not getattr(args, 'config', None):
            print("Error: a master file or --config match file is required")
            print("Usage: python -m excel_lookup_matcher MASTER.xlsx [LOOKUP.xlsx] --master-key ID "
                  "--lookup-key ID --column Name")
            print("Use --help for full usage information")
            return 1

        return process_match(args)

    except HANDLED_ERRORS as e:
        print(f"Error: {e}")
        return 1
    except Exception as e:
        # For unexpected errors, always show them clearly
        print(f"Unexpected error: {e}")
        if verbose:
            traceback.print_exc()
        return 1


def list_sheets(args: Namespace) -> int:
    """Print every sheet of the given files with row counts and headers."""
    filenames = [name for name in (args.master_file, getattr(args, 'lookup_file', None)) if name]
    if not filenames:
        print("Error: --list-sheets needs at least one file")
        return 1

    for filename in filenames:
        workbook = FileReader.read_workbook(filename)
        print(f"\n{workbook.name}")
        for sheet in workbook.sheets:
            print(f"  • {sheet.name}: {sheet.row_count} rows")
            print(f"    Columns: {', '.join(sheet.headers)}")

    return 0


def collect_settings(args: Namespace) -> dict:
    """
    Merge match file settings with command line values.

    Command line values win. Missing values stay None.
    """
    settings = {
        'master_file': None, 'master_sheet': None, 'master_key': None,
        'lookup_file': None, 'lookup_sheet': None, 'lookup_key': None,
        'append_columns': None, 'fuzzy': None, 'output_file': None, 'output_sheet': None,
    }

    config_path = getattr(args, 'config', None)
    if config_path:
        loader = MatchConfigLoader()
        loader.load_file(config_path)
        settings.update(loader.get_match_settings())

    cli_values = {
        'master_file': getattr(args, 'master_file', None),
        'master_sheet': getattr(args, 'master_sheet', None),
        'master_key': getattr(args, 'master_key', None),
        'lookup_file': getattr(args, 'lookup_file', None),
        'lookup_sheet': getattr(args, 'lookup_sheet', None),
        'lookup_key': getattr(args, 'lookup_key', None),
        'append_columns': getattr(args, 'columns', None),
        'fuzzy': False if getattr(args, 'exact', False) else None,
        'output_file': getattr(args, 'output', None),
        'output_sheet': getattr(args, 'output_sheet', None),
    }
    for name, value in cli_values.items():
        if value is not None:
            settings[name] = value

    if not settings['lookup_file']:
        settings['lookup_file'] = settings['master_file']

    return settings


def process_match(args: Namespace) -> int:
    """
    Load both tables, complete the configuration, run the match and save it.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    settings = collect_settings(args)
    interactive = getattr(args, 'interactive', False)
    prompter = InteractiveMatchSetup() if interactive else None

    if not settings['master_file']:
        raise ConfigValidationError("Master file is required")

    # Load tables (same file is only read once)
    master_book = FileReader.read_workbook(settings['master_file'])
    if str(settings['lookup_file']) == str(settings['master_file']):
        lookup_book = master_book
    else:
        lookup_book = FileReader.read_workbook(settings['lookup_file'])

    # Pick sheets
    if prompter and not settings['master_sheet']:
        master_sheet = prompter.choose_sheet(master_book, 'Master')
    else:
        master_sheet = resolve_sheet(master_book, settings['master_sheet'])

    if prompter and not settings['lookup_sheet']:
        default_lookup = resolve_lookup_sheet(
            lookup_book, None, master_sheet if lookup_book is master_book else None
        )
        lookup_sheet = prompter.choose_sheet(lookup_book, 'Lookup', default=default_lookup.name)
    else:
        lookup_sheet = resolve_lookup_sheet(
            lookup_book, settings['lookup_sheet'], master_sheet if lookup_book is master_book else None
        )

    logger.info(f"Master: '{master_book.name}' / '{master_sheet.name}', "
                f"lookup: '{lookup_book.name}' / '{lookup_sheet.name}'")

    # Suggest keys for whatever was not chosen
    suggested_master_key, suggested_lookup_key = None, None
    if not settings['master_key'] or not settings['lookup_key']:
        service = create_suggestion_service(getattr(args, 'suggest', 'none'))
        if service is not None:
            suggestion = service.suggest(
                master_book.name, master_sheet.headers, lookup_book.name, lookup_sheet.headers
            )
            suggested_master_key, suggested_lookup_key = apply_suggestion(
                suggestion, master_sheet.headers, lookup_sheet.headers
            )
            if suggested_master_key or suggested_lookup_key:
                InteractiveMatchSetup.show_suggestion(suggestion)

    # Fill in keys, columns and mode
    if prompter:
        if not settings['master_key']:
            settings['master_key'] = prompter.choose_column(master_sheet, 'Master key column', suggested_master_key)
        if not settings['lookup_key']:
            settings['lookup_key'] = prompter.choose_column(lookup_sheet, 'Lookup key column', suggested_lookup_key)
        if not settings['append_columns']:
            settings['append_columns'] = prompter.choose_columns(lookup_sheet, 'Columns to append')
        if settings['fuzzy'] is None:
            settings['fuzzy'] = prompter.ask_fuzzy(default=True)
    else:
        settings['master_key'] = settings['master_key'] or suggested_master_key
        settings['lookup_key'] = settings['lookup_key'] or suggested_lookup_key

    config = MatchConfig(
        master_file=settings['master_file'],
        lookup_file=settings['lookup_file'],
        master_key=settings['master_key'] or '',
        lookup_key=settings['lookup_key'] or '',
        append_columns=settings['append_columns'] or (),
        fuzzy=True if settings['fuzzy'] is None else settings['fuzzy'],
        master_sheet=master_sheet.name,
        lookup_sheet=lookup_sheet.name,
        output_file=settings['output_file'] or default_output_filename(),
        output_sheet=settings['output_sheet'] or DEFAULT_OUTPUT_SHEET,
    )

    validate_match_setup(config, master_sheet, lookup_sheet)

    result = LookupJoiner(config).run(master_sheet, lookup_sheet)

    preview_rows = getattr(args, 'preview', 0) or 0
    if preview_rows > 0:
        print()
        print(render_preview(result.rows, result.headers, limit=preview_rows))
        print()

    written = FileWriter.write_rows(
        result.rows, config.output_file, sheet_name=config.output_sheet, headers=result.headers,
        create_backup=getattr(args, 'backup', False)
    )

    summary = result.summary
    print("✓ Match completed successfully")
    print(f"  Rows matched: {summary.matched_rows} of {summary.master_rows} ({summary.match_rate:.1f}%)")
    print(f"  Output written: {written}")

    return 0
