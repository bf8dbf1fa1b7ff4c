"""
Excel file writer for saving pandas DataFrames to Excel files.

Handles writing DataFrames to Excel with error handling and backups.
"""

import shutil
import logging
from pathlib import Path

import pandas as pd

logger = logging.getLogger(__name__)


class ExcelWriterError(Exception):
    """Raised when Excel writing operations fail."""
    pass


class ExcelWriter:
    """
    Handles writing pandas DataFrames to Excel files.

    Provides a clean interface for saving data with proper
    error handling.
    """

    VALID_EXTENSIONS = {'.xlsx', '.xlsm'}

    def write_file(self, df: pd.DataFrame, output_path, sheet_name: str = 'Sheet1',
                   index: bool = False, **kwargs) -> Path:
        """
        Write a DataFrame to an Excel file.

        Args:
            df: pandas DataFrame to write
            output_path: Path where the Excel file should be saved
            sheet_name: Name of the sheet to create
            index: Whether to include DataFrame index in output
            **kwargs: Additional arguments passed to pandas.to_excel()

        Returns:
            Path actually written (an .xlsx suffix is added when missing)

        Raises:
            ExcelWriterError: If file writing fails
        """
        # Guard clauses
        if not isinstance(df, pd.DataFrame):
            raise ExcelWriterError("Data must be a pandas DataFrame")

        if df.empty:
            logger.warning("Writing empty DataFrame to Excel file")

        if not output_path:
            raise ExcelWriterError("Output path cannot be empty")

        if not isinstance(sheet_name, str) or not sheet_name.strip():
            raise ExcelWriterError("Sheet name must be a non-empty string")

        # Excel limits sheet names to 31 characters
        if len(sheet_name) > 31:
            raise ExcelWriterError(f"Sheet name longer than 31 characters: '{sheet_name}'")

        output_path = Path(output_path)

        # Add .xlsx extension if no extension provided
        if not output_path.suffix:
            output_path = output_path.with_suffix('.xlsx')

        if output_path.suffix.lower() not in self.VALID_EXTENSIONS:
            raise ExcelWriterError(
                f"Invalid file extension: {output_path.suffix}. "
                f"Expected one of: {', '.join(sorted(self.VALID_EXTENSIONS))}"
            )

        # Ensure output directory exists
        output_path.parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Writing DataFrame to Excel: {output_path}")

        try:
            with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
                df.to_excel(writer, sheet_name=sheet_name, index=index, **kwargs)
                self._keep_text_cells(writer.sheets[sheet_name])

            logger.info(
                f"Successfully wrote {len(df)} rows, {len(df.columns)} columns "
                f"to sheet '{sheet_name}' in {output_path}"
            )
            return output_path

        except PermissionError:
            raise ExcelWriterError(
                f"Permission denied writing to: {output_path}. "
                "File may be open in another application."
            )
        except Exception as e:
            raise ExcelWriterError(f"Error writing Excel file: {e}")

    @staticmethod
    def _keep_text_cells(worksheet) -> None:
        """
        Store every text value as a plain text cell.

        openpyxl turns '=...' strings into formulas and '#N/A' into an error
        cell. Both are written as text instead, so data from CSV files never
        becomes a live formula and '#N/A' markers read back as text.
        """
        for row in worksheet.iter_rows():
            for cell in row:
                if cell.data_type in ('f', 'e') and isinstance(cell.value, str):
                    cell.data_type = 's'

    def create_backup(self, file_path) -> Path:
        """
        Create a backup copy of an existing file.

        Args:
            file_path: Path to file to backup

        Returns:
            Path to the backup file

        Raises:
            ExcelWriterError: If backup creation fails
        """
        if not file_path:
            raise ExcelWriterError("File path cannot be empty")

        file_path = Path(file_path)

        if not file_path.exists():
            raise ExcelWriterError(f"File not found: {file_path}")

        # Generate backup filename
        backup_path = file_path.with_suffix(f'{file_path.suffix}.backup')

        # If backup already exists, add a number
        counter = 1
        while backup_path.exists():
            backup_path = file_path.with_suffix(f'{file_path.suffix}.backup{counter}')
            counter += 1

        try:
            shutil.copy2(file_path, backup_path)

            logger.info(f"Created backup: {backup_path}")
            return backup_path

        except Exception as e:
            raise ExcelWriterError(f"Error creating backup: {e}")
