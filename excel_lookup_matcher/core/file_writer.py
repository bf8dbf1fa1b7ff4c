"""
Central file writing coordination for Excel Lookup Matcher.

The table sink: serializes matched rows to Excel, CSV or TSV with automatic
format detection. Column order follows the given headers (or the first row),
'#N/A' markers are written literally and empty cells are left blank.
"""

import pandas as pd
import logging

from datetime import date
from pathlib import Path

from excel_lookup_matcher.core.join_engine import DEFAULT_OUTPUT_SHEET
from excel_lookup_matcher.core.table_models import collect_headers
from excel_lookup_matcher.writers.excel_writer import ExcelWriter, ExcelWriterError

logger = logging.getLogger(__name__)


class FileWriterError(Exception):
    """Raised when file writing operations fail."""
    pass


def default_output_filename(today=None) -> str:
    """Default result file name, e.g. 'matched_result_2024-05-01.xlsx'."""
    today = today or date.today()
    return f"matched_result_{today.isoformat()}.xlsx"


class FileWriter:
    """
    Central coordinator for writing files in various formats.

    Handles format auto-detection, and delegates to ExcelWriter or pandas
    for different file types. All methods are static.
    """

    # Logical format categories (without dots) - matches FileReader
    EXCEL_FORMATS = {'xlsx', 'xlsm'}
    CSV_FORMATS = {'csv'}
    TSV_FORMATS = {'tsv'}

    ALL_FORMATS = EXCEL_FORMATS | CSV_FORMATS | TSV_FORMATS

    EXTENSION_TO_FORMAT = {
        '.xlsx': 'xlsx',
        '.xlsm': 'xlsm',
        '.csv': 'csv',
        '.tsv': 'tsv',
        '.txt': 'tsv',  # .txt files are written as TSV
    }

    @staticmethod
    def write_rows(rows, filename, sheet_name=DEFAULT_OUTPUT_SHEET, headers=None,
                   create_backup=False, explicit_format=None, encoding='utf-8', separator=','):
        """
        Write row dictionaries to file with automatic format detection.

        Args:
            rows: List of row dicts (e.g. join output)
            filename: Output file path
            sheet_name: Sheet name for Excel files (default: 'MatchedResult')
            headers: Column order; defaults to first row order plus later extras
            create_backup: Create backup if file exists (default: False)
            explicit_format: Override format detection ('xlsx', 'csv', 'tsv')
            encoding: Text encoding for CSV/TSV files (default: 'utf-8')
            separator: Column separator for CSV files (default: ',')

        Returns:
            Filename actually written

        Raises:
            FileWriterError: If file writing fails
        """
        try:
            if rows is None or isinstance(rows, (str, bytes, dict)):
                raise FileWriterError(f"Rows must be a list of dictionaries, got: {type(rows)}")

            data = FileWriter.rows_to_dataframe(rows, headers)
            return FileWriter.write_dataframe(
                data, filename, sheet_name=sheet_name, create_backup=create_backup,
                explicit_format=explicit_format, encoding=encoding, separator=separator
            )

        except FileWriterError:
            raise
        except Exception as e:
            raise FileWriterError(f"Unexpected error writing file '{filename}': {e}")

    @staticmethod
    def rows_to_dataframe(rows, headers=None) -> pd.DataFrame:
        """Build a DataFrame whose columns follow the output column order."""
        rows = list(rows)
        columns = collect_headers(rows, headers)
        return pd.DataFrame.from_records(rows, columns=columns)

    @staticmethod
    def write_dataframe(data, filename, sheet_name=DEFAULT_OUTPUT_SHEET, create_backup=False,
                        explicit_format=None, encoding='utf-8', separator=','):
        """
        Write a DataFrame to file with automatic format detection.

        Returns:
            Filename actually written

        Raises:
            FileWriterError: If file writing fails
        """
        try:
            FileWriter._validate_dataframe(data)

            if not filename:
                raise FileWriterError("Output filename cannot be empty")

            file_format = FileWriter._determine_format(filename, explicit_format)

            if create_backup:
                FileWriter._create_backup_if_exists(filename)

            if file_format in FileWriter.EXCEL_FORMATS:
                filename = FileWriter._write_excel_file(data, filename, sheet_name)
            elif file_format in FileWriter.CSV_FORMATS:
                FileWriter._ensure_directory_exists(filename)
                FileWriter._write_delimited_file(data, filename, encoding, separator)
            elif file_format in FileWriter.TSV_FORMATS:
                FileWriter._ensure_directory_exists(filename)
                FileWriter._write_delimited_file(data, filename, encoding, '\t')
            else:
                raise FileWriterError(f"Unsupported file format: {file_format}")

            logger.info(f"Wrote {len(data)} rows to '{filename}' ({file_format} format)")
            return str(filename)

        except FileWriterError:
            raise
        except Exception as e:
            raise FileWriterError(f"Unexpected error writing file '{filename}': {e}")

    @staticmethod
    def create_backup(filename):
        """
        Create a backup copy of an existing file.

        Returns:
            Path to backup file

        Raises:
            FileWriterError: If backup creation fails
        """
        try:
            backup_path = ExcelWriter().create_backup(filename)
            return str(backup_path)

        except ExcelWriterError as e:
            raise FileWriterError(f"Backup creation error: {e}")

    # =============================================================================
    # PRIVATE HELPER METHODS
    # =============================================================================

    @staticmethod
    def _validate_dataframe(data):
        """Validate that data is a proper DataFrame."""
        if not isinstance(data, pd.DataFrame):
            raise FileWriterError(f"Data must be a pandas DataFrame, got: {type(data)}")

        # Empty results are allowed - just warn
        if data.empty:
            logger.warning("Writing empty result table")

    @staticmethod
    def _ensure_directory_exists(filename):
        """Ensure the output directory exists."""
        Path(filename).parent.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _create_backup_if_exists(filename):
        """Create backup of existing file if it exists."""
        if Path(filename).exists():
            FileWriter.create_backup(filename)

    @staticmethod
    def _determine_format(filename, explicit_format):
        """
        Determine logical format from extension or explicit override.

        Returns logical format without dots: 'xlsx', 'csv', 'tsv', etc.
        """
        if explicit_format:
            explicit_lower = explicit_format.lower()
            if explicit_lower in FileWriter.ALL_FORMATS:
                return explicit_lower
            raise FileWriterError(f"Unsupported explicit format: {explicit_format}")

        extension = Path(filename).suffix.lower()

        if not extension:
            return 'xlsx'

        if extension in FileWriter.EXTENSION_TO_FORMAT:
            logical_format = FileWriter.EXTENSION_TO_FORMAT[extension]
            logger.debug(f"Extension {extension} → logical format {logical_format}")
            return logical_format

        raise FileWriterError(
            f"Unsupported output extension '{extension}'. "
            f"Supported: {', '.join(FileWriter.EXTENSION_TO_FORMAT.keys())}"
        )

    @staticmethod
    def _write_excel_file(data, filename, sheet_name):
        """Write DataFrame to Excel file using ExcelWriter."""
        try:
            return ExcelWriter().write_file(data, filename, sheet_name=sheet_name, index=False)

        except ExcelWriterError as e:
            raise FileWriterError(f"Excel writing error for '{filename}': {e}")

    @staticmethod
    def _write_delimited_file(data: pd.DataFrame, filename, encoding, separator):
        """Write DataFrame to a CSV/TSV file."""
        try:
            data.to_csv(
                filename,
                index=False,
                encoding=encoding,
                sep=separator,
                na_rep='',
                lineterminator='\n'  # Consistent line endings
            )

        except Exception as e:
            raise FileWriterError(f"Delimited file writing error for '{filename}': {e}")
