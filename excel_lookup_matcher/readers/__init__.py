"""Spreadsheet readers used by core.file_reader."""
