"""
excel_lookup_matcher: VLOOKUP-style matching between spreadsheet tables
"""

from ._version import __version__, __author__, __email__, __description__

from excel_lookup_matcher.core.key_normalizer import normalize_key
from excel_lookup_matcher.core.join_engine import (
    COLLISION_SUFFIX,
    NOT_FOUND,
    LookupJoiner,
    MatchConfig,
    build_lookup_index,
    join_tables
)

__all__ = [
    '__version__',
    '__author__',
    '__email__',
    '__description__',
    'COLLISION_SUFFIX',
    'NOT_FOUND',
    'LookupJoiner',
    'MatchConfig',
    'build_lookup_index',
    'join_tables',
    'normalize_key',
]
