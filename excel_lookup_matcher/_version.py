"""Version information for excel_lookup_matcher package."""

__version__ = '0.3.0'
__author__ = 'Excel Lookup Matcher Contributors'
__email__ = ''
__description__ = 'VLOOKUP-style matching between Excel and CSV sheets with fuzzy key normalization'
