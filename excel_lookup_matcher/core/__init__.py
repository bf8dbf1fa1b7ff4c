"""
Core modules for Excel Lookup Matcher.

Key normalization and the join engine, plus the file reading, writing,
setup and preview code that surrounds them.
"""
