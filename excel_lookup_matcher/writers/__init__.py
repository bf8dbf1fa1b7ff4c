"""Spreadsheet writers used by core.file_writer."""
