"""
Key normalization for lookup matching.

excel_lookup_matcher/core/key_normalizer.py

Turns raw cell values into comparison keys:
- Exact mode: plain string coercion, nothing trimmed or lower-cased
- Fuzzy mode: whitespace trimming, case folding and numeric format cleanup
  (1001 vs "1001.0" vs " 1001 ")

Fuzzy mode is NOT approximate string matching. "Smith" and "Smyth" never match.

Leading zeros are lost for numeric-looking identifiers in fuzzy mode:
"007" and "7" normalize to the same key. Use exact mode when zero-padded
codes must stay distinct.
"""

import math
import numbers
import re
import logging

from decimal import Decimal

import numpy as np
import pandas as pd


logger = logging.getLogger(__name__)

# Plain ASCII decimal or exponential notation, no hex/octal/binary, no trailing garbage
NUMERIC_LITERAL_PATTERN = re.compile(r'^[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?$')

# Integral floats at or above this magnitude keep exponent notation
MAX_PLAIN_INTEGER = 1e21


def is_absent(value) -> bool:
    """Return True for empty cells: None, NaN, pd.NA and NaT."""
    if value is None:
        return True

    if not pd.api.types.is_scalar(value):
        return False

    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _format_float(number: float) -> str:
    """Render a float the way a spreadsheet shows it (7.0 -> '7')."""
    if math.isfinite(number) and number.is_integer() and abs(number) < MAX_PLAIN_INTEGER:
        return str(int(number))
    return repr(number)


def coerce_to_text(value) -> str:
    """
    Coerce a cell value to its plain string representation.

    Args:
        value: Cell value (str, int, float, bool, Decimal, date or absent)

    Returns:
        String form used for exact-mode comparison. Absent cells give ''.
    """
    if is_absent(value):
        return ''

    if isinstance(value, str):
        return value

    # bool before Integral: True is an int
    if isinstance(value, (bool, np.bool_)):
        return 'true' if value else 'false'

    if isinstance(value, numbers.Integral):
        return str(int(value))

    if isinstance(value, numbers.Real):
        return _format_float(float(value))

    if isinstance(value, Decimal):
        if value.is_finite():
            return format(value.normalize(), 'f')
        return str(value)

    return str(value)


def canonical_number_text(text: str):
    """
    Canonical decimal form of a numeric literal, or None if text is not one.

    "123", "123.0", "+123.00" and "1.23e2" all give "123".
    """
    if not text or not NUMERIC_LITERAL_PATTERN.match(text):
        return None

    try:
        number = float(text)
    except (ValueError, OverflowError):
        return None

    if not math.isfinite(number):
        return None

    return _format_float(number)


def normalize_key(value, fuzzy: bool) -> str:
    """
    Map a raw cell value to a comparison key.

    Args:
        value: Raw cell value
        fuzzy: False for exact string comparison, True for trimmed,
               case-folded, numeric-canonical comparison

    Returns:
        Comparison key. '' means "no key": such rows never match.
    """
    text = coerce_to_text(value)

    if not fuzzy:
        return text

    text = text.strip()
    if not text:
        return ''

    numeric_text = canonical_number_text(text)
    if numeric_text is not None:
        return numeric_text

    return text.lower()


# End of file #
