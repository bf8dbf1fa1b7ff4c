"""
Excel file reader for loading workbook sheets into pandas DataFrames.

Cells keep the types the workbook stores (ints stay ints) and literal
text such as '#N/A' or 'NULL' is never turned into a missing value.
"""

import logging
from pathlib import Path

import pandas as pd

logger = logging.getLogger(__name__)


class ExcelReaderError(Exception):
    """Raised when Excel reading operations fail."""
    pass


class ExcelReader:
    """
    Handles reading Excel files into pandas DataFrames.

    Provides a clean interface for loading Excel data with proper
    error handling and validation.
    """

    VALID_EXTENSIONS = {'.xlsx', '.xls', '.xlsm', '.xlsb'}

    # Keep cell types as stored and only blank cells as missing
    READ_OPTIONS = {
        'dtype': object,
        'keep_default_na': False,
        'na_values': [''],
    }

    def get_sheet_names(self, file_path) -> list:
        """
        Get list of sheet names in an Excel file.

        Args:
            file_path: Path to the Excel file

        Returns:
            List of sheet names

        Raises:
            ExcelReaderError: If unable to read sheet names
        """
        file_path = self._validate_path(file_path)

        try:
            with pd.ExcelFile(file_path) as excel_file:
                sheet_names = [str(name) for name in excel_file.sheet_names]

            logger.debug(f"Found {len(sheet_names)} sheets: {sheet_names}")
            return sheet_names

        except Exception as e:
            raise ExcelReaderError(f"Error reading sheet names from {file_path}: {e}")

    def read_all_sheets(self, file_path) -> dict:
        """
        Read every sheet of an Excel file.

        Args:
            file_path: Path to the Excel file

        Returns:
            Dictionary mapping sheet names to DataFrames, in workbook order

        Raises:
            ExcelReaderError: If reading fails
        """
        file_path = self._validate_path(file_path)

        logger.info(f"Reading all sheets from: '{file_path}'")

        try:
            with pd.ExcelFile(file_path) as excel_file:
                result = {}
                for sheet_name in excel_file.sheet_names:
                    df = pd.read_excel(excel_file, sheet_name=sheet_name, **self.READ_OPTIONS)
                    result[str(sheet_name)] = df
                    logger.debug(f"Read sheet '{sheet_name}': {len(df)} rows")

        except PermissionError:
            raise ExcelReaderError(f"Permission denied reading file: {file_path}")
        except Exception as e:
            raise ExcelReaderError(f"Error reading sheets from {file_path}: {e}")

        if not result:
            raise ExcelReaderError(f"No sheets found in Excel file: {file_path}")

        logger.info(f"Successfully read {len(result)} sheets")
        return result

    def _validate_path(self, file_path) -> Path:
        """Check that the path points at an existing Excel file."""
        if not file_path:
            raise ExcelReaderError("File path cannot be empty")

        file_path = Path(file_path)

        if not file_path.exists():
            raise ExcelReaderError(f"Excel file not found: {file_path}")

        if not file_path.is_file():
            raise ExcelReaderError(f"Path is not a file: {file_path}")

        if file_path.suffix.lower() not in self.VALID_EXTENSIONS:
            raise ExcelReaderError(
                f"Invalid file extension: {file_path.suffix}. "
                f"Expected one of: {', '.join(sorted(self.VALID_EXTENSIONS))}"
            )

        return file_path
