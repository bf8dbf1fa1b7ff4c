"""
Interactive match setup for the command line.

excel_lookup_matcher/core/interactive_setup.py

Prompts for any selection not given as an argument: sheets, key columns and
columns to append. Key prompts are pre-filled from a suggestion when one is
available. Uses prompt_toolkit so defaults can be edited in place.
"""

import logging

from typing import Optional

from prompt_toolkit import prompt

from excel_lookup_matcher.core.table_models import SheetData, WorkbookData


logger = logging.getLogger(__name__)


class InteractiveSetupError(Exception):
    """Raised when interactive setup is cancelled or keeps getting invalid answers."""
    pass


def enhanced_input(prompt_text: str, default_value: Optional[str] = None) -> str:
    """
    Read one answer with an editable default.

    Args:
        prompt_text: Text to display as prompt
        default_value: Default value pre-filled in the input line

    Returns:
        User input string, stripped
    """
    try:
        return prompt(prompt_text, default=default_value or '').strip()
    except (EOFError, KeyboardInterrupt):
        raise InteractiveSetupError("Setup cancelled by user")


class InteractiveMatchSetup:
    """
    Walks the user through the match selections one question at a time.

    Answers can be names or 1-based numbers from the printed lists.
    """

    def __init__(self, input_func=None, max_attempts: int = 3):
        """
        Initialize interactive setup.

        Args:
            input_func: Callable(prompt_text, default_value) -> str, defaults to enhanced_input
            max_attempts: Invalid answers allowed per question before giving up
        """
        self.input_func = input_func or enhanced_input
        self.max_attempts = max_attempts

    def choose_sheet(self, workbook: WorkbookData, label: str, default: Optional[str] = None) -> SheetData:
        """Ask which sheet of a workbook to use (skipped for single-sheet files)."""
        if len(workbook.sheets) == 1:
            return workbook.sheets[0]

        print(f"\n{label} sheets in '{workbook.name}':")
        for number, sheet in enumerate(workbook.sheets, 1):
            print(f"  {number}. {sheet.name} ({sheet.row_count} rows)")

        default = default or workbook.sheets[0].name
        name = self._ask_choice(f"{label} sheet: ", workbook.sheet_names, default)
        return workbook.get_sheet(name)

    def choose_column(self, sheet: SheetData, label: str, default: Optional[str] = None) -> str:
        """Ask for one column of a sheet."""
        self._print_headers(sheet, label)
        return self._ask_choice(f"{label}: ", sheet.headers, default)

    def choose_columns(self, sheet: SheetData, label: str, default: Optional[list] = None) -> list:
        """Ask for one or more columns as a comma-separated list."""
        self._print_headers(sheet, label)
        default_text = ', '.join(default) if default else None

        for _ in range(self.max_attempts):
            answer = self.input_func(f"{label} (comma-separated): ", default_text)
            parts = [part.strip() for part in answer.split(',') if part.strip()]

            columns = []
            invalid = []
            for part in parts:
                column = self._match_option(part, sheet.headers)
                if column is None:
                    invalid.append(part)
                elif column not in columns:
                    columns.append(column)

            if columns and not invalid:
                return columns

            if invalid:
                print(f"  Unknown column(s): {invalid}")
            else:
                print("  Select at least one column")

        raise InteractiveSetupError(f"No valid answer for '{label}' after {self.max_attempts} attempts")

    def ask_fuzzy(self, default: bool = True) -> bool:
        """Ask whether keys should be compared in fuzzy mode."""
        default_text = 'y' if default else 'n'

        for _ in range(self.max_attempts):
            answer = self.input_func("Fuzzy key matching (trim, ignore case, 1.0 = 1)? [y/n]: ", default_text)
            answer = (answer or default_text).lower()
            if answer in ('y', 'yes'):
                return True
            if answer in ('n', 'no'):
                return False
            print("  Please answer y or n")

        raise InteractiveSetupError(f"No valid answer for fuzzy matching after {self.max_attempts} attempts")

    @staticmethod
    def show_suggestion(suggestion) -> None:
        """Print a key suggestion and its reasoning."""
        if suggestion is None:
            return
        print(f"\n💡 Suggested keys: '{suggestion.left_key}' ↔ '{suggestion.right_key}'")
        if suggestion.reasoning:
            print(f"   {suggestion.reasoning}")

    # =============================================================================
    # PRIVATE HELPER METHODS
    # =============================================================================

    def _ask_choice(self, prompt_text: str, options: list, default: Optional[str]) -> str:
        """Ask until the answer names (or numbers) one of the options."""
        if not options:
            raise InteractiveSetupError(f"Nothing to choose from for '{prompt_text.strip()}'")

        for _ in range(self.max_attempts):
            answer = self.input_func(prompt_text, default)
            if not answer and default:
                answer = default

            choice = self._match_option(answer, options)
            if choice is not None:
                logger.debug(f"Selected '{choice}' for {prompt_text.strip()}")
                return choice

            print(f"  '{answer}' is not one of the listed options")

        raise InteractiveSetupError(f"No valid answer for '{prompt_text.strip()}' after {self.max_attempts} attempts")

    @staticmethod
    def _match_option(answer: str, options: list) -> Optional[str]:
        """Resolve an answer to an option by exact name, 1-based number, or case-insensitive name."""
        if answer in options:
            return answer

        if answer.isdigit():
            number = int(answer)
            if 1 <= number <= len(options):
                return options[number - 1]

        lowered = [option.lower() for option in options]
        if lowered.count(answer.lower()) == 1:
            return options[lowered.index(answer.lower())]

        return None

    @staticmethod
    def _print_headers(sheet: SheetData, label: str) -> None:
        print(f"\n{label}: columns in '{sheet.name}':")
        for number, header in enumerate(sheet.headers, 1):
            print(f"  {number}. {header}")


# End of file #
