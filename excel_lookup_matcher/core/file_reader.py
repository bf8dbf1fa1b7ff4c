"""
Central file reading coordination for Excel Lookup Matcher.

Reads spreadsheet-like files into WorkbookData (named sheets of headers and
row dictionaries) with automatic format detection and consistent error
handling. This is the table source the join engine consumes.
"""

import pandas as pd
import logging

from pathlib import Path

from excel_lookup_matcher.core.key_normalizer import is_absent
from excel_lookup_matcher.core.table_models import SheetData, WorkbookData
from excel_lookup_matcher.readers.excel_reader import ExcelReader, ExcelReaderError


logger = logging.getLogger(__name__)


class FileReaderError(Exception):
    """Raised when file reading operations fail."""
    pass


class FileReader:
    """
    Central coordinator for reading files in various formats.

    Handles format auto-detection, and delegates to ExcelReader or pandas
    for different file types. All methods are static.
    """

    # Logical format categories (without dots)
    EXCEL_FORMATS = {'xlsx', 'xls', 'xlsm', 'xlsb'}
    CSV_FORMATS = {'csv'}
    TSV_FORMATS = {'tsv'}

    ALL_FORMATS = EXCEL_FORMATS | CSV_FORMATS | TSV_FORMATS

    # Extension to logical format mapping
    EXTENSION_TO_FORMAT = {
        '.xlsx': 'xlsx',
        '.xls': 'xls',
        '.xlsm': 'xlsm',
        '.xlsb': 'xlsb',
        '.csv': 'csv',
        '.tsv': 'tsv',
        '.txt': 'tsv',  # .txt files are processed as TSV
    }

    @staticmethod
    def read_workbook(filename, encoding='utf-8', separator=',', explicit_format=None) -> WorkbookData:
        """
        Read every sheet of a file.

        Excel files give one SheetData per worksheet. CSV/TSV files give a
        single sheet named after the file stem.

        Args:
            filename: Path to file
            encoding: Text encoding for CSV/TSV files (default: 'utf-8')
            separator: Column separator for CSV files (default: ',')
            explicit_format: Override format detection ('xlsx', 'csv', 'tsv')

        Returns:
            WorkbookData with all sheets in file order

        Raises:
            FileReaderError: If file reading fails
        """
        try:
            FileReader._validate_file_exists(filename)
            file_format = FileReader._determine_format(filename, explicit_format)
            file_path = Path(filename)

            if file_format in FileReader.EXCEL_FORMATS:
                frames = FileReader._read_excel_sheets(filename)
            elif file_format in FileReader.CSV_FORMATS:
                frames = {file_path.stem: FileReader._read_delimited_file(filename, encoding, separator)}
            elif file_format in FileReader.TSV_FORMATS:
                frames = {file_path.stem: FileReader._read_delimited_file(filename, encoding, '\t')}
            else:
                raise FileReaderError(f"Unsupported file format: {file_format}")

            sheets = [FileReader.dataframe_to_sheet(name, df) for name, df in frames.items()]
            workbook = WorkbookData(name=file_path.name, path=str(file_path), sheets=sheets)

            logger.info(f"Loaded '{file_path.name}': {len(sheets)} sheet(s)")
            for sheet in sheets:
                logger.debug(f"  Sheet '{sheet.name}': {sheet.row_count} rows, {len(sheet.headers)} columns")

            return workbook

        except FileReaderError:
            raise
        except Exception as e:
            raise FileReaderError(f"Unexpected error reading file '{filename}': {e}")

    @staticmethod
    def get_sheet_names(filename) -> list:
        """
        Get the sheet names a file would produce.

        Args:
            filename: Path to file

        Returns:
            List of sheet names (file stem for CSV/TSV)

        Raises:
            FileReaderError: If the file cannot be inspected
        """
        try:
            FileReader._validate_file_exists(filename)
            file_format = FileReader._determine_format(filename, None)

            if file_format not in FileReader.EXCEL_FORMATS:
                return [Path(filename).stem]

            return ExcelReader().get_sheet_names(filename)

        except ExcelReaderError as e:
            raise FileReaderError(f"Error reading Excel sheets from '{filename}': {e}")
        except FileReaderError:
            raise
        except Exception as e:
            raise FileReaderError(f"Unexpected error getting sheets from '{filename}': {e}")

    @staticmethod
    def dataframe_to_sheet(sheet_name, df: pd.DataFrame) -> SheetData:
        """
        Convert a DataFrame into header list plus row dictionaries.

        Column labels become strings; empty cells become None.
        """
        headers = [str(column) for column in df.columns]
        rows = []

        for values in df.itertuples(index=False, name=None):
            row = {}
            for header, value in zip(headers, values):
                row[header] = None if is_absent(value) else value
            rows.append(row)

        return SheetData(name=str(sheet_name), headers=headers, rows=rows)

    # =============================================================================
    # PRIVATE HELPER METHODS
    # =============================================================================

    @staticmethod
    def _validate_file_exists(filename):
        """Validate that a file exists."""
        if not filename:
            raise FileReaderError("File path cannot be empty")

        file_path = Path(filename)

        if not file_path.exists():
            raise FileReaderError(f"File not found: {filename}")

        if not file_path.is_file():
            raise FileReaderError(f"Path is not a file: {filename}")

    @staticmethod
    def _determine_format(filename, explicit_format):
        """
        Determine logical format from extension or explicit override.

        Returns logical format without dots: 'xlsx', 'csv', 'tsv', etc.
        """
        if explicit_format:
            explicit_lower = explicit_format.lower()
            if explicit_lower in FileReader.ALL_FORMATS:
                return explicit_lower
            raise FileReaderError(f"Unsupported explicit format: {explicit_format}")

        extension = Path(filename).suffix.lower()

        if extension in FileReader.EXTENSION_TO_FORMAT:
            logical_format = FileReader.EXTENSION_TO_FORMAT[extension]
            logger.debug(f"Extension {extension} → logical format {logical_format}")
            return logical_format

        # Unknown extension - default to Excel with warning
        logger.warning(f"Unknown file extension '{extension}' for '{filename}', assuming Excel format")
        return 'xlsx'

    @staticmethod
    def _read_excel_sheets(filename) -> dict:
        """Read all sheets of an Excel file using ExcelReader."""
        try:
            return ExcelReader().read_all_sheets(filename)
        except ExcelReaderError as e:
            raise FileReaderError(f"Excel reading error for '{filename}': {e}")

    @staticmethod
    def _read_delimited_file(filename, encoding, separator) -> pd.DataFrame:
        """
        Read a CSV/TSV file with every cell kept as text.

        Values are not converted to numbers so codes like '007' survive for
        exact matching; fuzzy matching canonicalizes numbers itself.
        """
        try:
            data = pd.read_csv(
                filename,
                encoding=encoding,
                sep=separator,
                dtype=str,
                keep_default_na=False,
                na_values=[''],
                low_memory=False
            )

            logger.debug(f"Read delimited file '{filename}', shape: {data.shape}")
            return data

        except pd.errors.EmptyDataError:
            raise FileReaderError(f"File appears to be empty: {filename}")
        except Exception as e:
            raise FileReaderError(f"Delimited file reading error for '{filename}': {e}")
