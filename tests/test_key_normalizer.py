"""
Tests for key normalization.

tests/test_key_normalizer.py

Covers exact-mode string coercion and the fuzzy-mode rules: trimming,
case folding and numeric canonicalization (the "1001.0" vs "1001" problem).
"""

import math

from decimal import Decimal

import numpy as np
import pandas as pd

from excel_lookup_matcher.core.key_normalizer import (
    canonical_number_text,
    coerce_to_text,
    is_absent,
    normalize_key
)


def test_exact_mode_is_plain_string_coercion():
    """Exact mode returns the string form, untouched."""
    print("\nTesting exact mode coercion...")

    for value in ['abc', ' ABC ', '007', '1001.0', 7, 7.5, True, '']:
        assert normalize_key(value, False) == coerce_to_text(value)

    assert normalize_key(' ABC ', False) == ' ABC '
    assert normalize_key('1001.0', False) == '1001.0'
    assert normalize_key(7, False) == '7'
    assert normalize_key('7', False) == normalize_key(7, False)

    print("✓ Exact mode keeps whitespace, case and number format")


def test_exact_mode_integral_floats_match_integers():
    """Spreadsheet readers hand back 7.0 for an integer cell."""
    assert normalize_key(7.0, False) == '7'
    assert normalize_key(np.float64(1001.0), False) == '1001'
    assert normalize_key(np.int64(42), False) == '42'


def test_fuzzy_numeric_forms_are_equivalent():
    """'123.0', 123 and ' 123 ' normalize identically."""
    print("\nTesting fuzzy numeric normalization...")

    expected = normalize_key(123, True)
    assert expected == '123'

    for value in ['123.0', ' 123 ', '123', 123.0, '+123.00', '1.23e2', Decimal('123.000')]:
        assert normalize_key(value, True) == expected, value

    assert normalize_key('0.50', True) == '0.5'
    assert normalize_key('-0', True) == '0'
    assert normalize_key('.5', True) == '0.5'

    print("✓ Numeric-looking keys share one canonical form")


def test_fuzzy_text_is_trimmed_and_lower_cased():
    assert normalize_key('ABC', True) == 'abc'
    assert normalize_key(' abc ', True) == 'abc'
    assert normalize_key('\tMixed Case\n', True) == 'mixed case'


def test_fuzzy_keeps_inner_whitespace_and_punctuation():
    """Fuzzy is not similarity matching: inner text is kept as-is."""
    assert normalize_key('A  B', True) == 'a  b'
    assert normalize_key('SKU-001', True) == 'sku-001'
    assert normalize_key('Smith', True) != normalize_key('Smyth', True)


def test_fuzzy_leading_zeros_are_dropped():
    """Zero-padded numeric codes collapse to the number (documented lossy behavior)."""
    assert normalize_key('007', True) == '7'
    assert normalize_key('007', True) == normalize_key(7, True)
    assert normalize_key('007', False) != normalize_key(7, False)


def test_fuzzy_rejects_numbers_with_trailing_garbage():
    """Partial numbers fall back to lower-cased text."""
    assert normalize_key('123 abc', True) == '123 abc'
    assert normalize_key('12.5kg', True) == '12.5kg'
    assert normalize_key('1,000', True) == '1,000'
    assert normalize_key('0x1F', True) == '0x1f'
    assert normalize_key('1_000', True) == '1_000'
    assert normalize_key('Infinity', True) == 'infinity'
    assert normalize_key('NaN', True) == 'nan'


def test_fuzzy_non_ascii_digits_stay_text():
    """Fullwidth and Arabic-Indic digits are not plain numbers."""
    assert normalize_key('１２３', True) == '１２３'
    assert normalize_key('١٢٣', True) == '١٢٣'
    assert canonical_number_text('１２３') is None
    assert normalize_key('１２３', True) != normalize_key(123, True)


def test_fuzzy_overflowing_number_falls_back_to_text():
    assert normalize_key('1e999', True) == '1e999'


def test_absent_values_normalize_to_empty():
    """None, NaN and pd.NA give '' in both modes."""
    for value in [None, float('nan'), np.nan, pd.NA, pd.NaT]:
        assert normalize_key(value, True) == ''
        assert normalize_key(value, False) == ''

    assert normalize_key('   ', True) == ''
    assert normalize_key('', True) == ''


def test_booleans():
    assert coerce_to_text(True) == 'true'
    assert coerce_to_text(np.bool_(False)) == 'false'
    assert normalize_key(True, True) == 'true'


def test_is_absent():
    assert is_absent(None)
    assert is_absent(float('nan'))
    assert is_absent(pd.NA)
    assert not is_absent('')
    assert not is_absent(0)
    assert not is_absent('nan')
    assert not is_absent([None])


def test_canonical_number_text():
    assert canonical_number_text('1001.0') == '1001'
    assert canonical_number_text('1e3') == '1000'
    assert canonical_number_text('2.50') == '2.5'
    assert canonical_number_text('abc') is None
    assert canonical_number_text('') is None
    assert canonical_number_text('.') is None
    assert canonical_number_text('1e') is None


def test_large_and_small_numbers():
    assert coerce_to_text(1e20) == '100000000000000000000'
    assert coerce_to_text(1e21) == '1e+21'
    assert coerce_to_text(0.1) == '0.1'
    assert coerce_to_text(float('inf')) == 'inf'
    assert math.isinf(float(coerce_to_text(float('inf'))))


def test_normalization_is_deterministic():
    values = ['  Foo ', 12.0, '12', None, 'ÄBC', True]
    first = [normalize_key(value, True) for value in values]
    second = [normalize_key(value, True) for value in values]
    assert first == second


def test_unusual_values_never_raise():
    """Dates and other objects still produce a key."""
    timestamp = pd.Timestamp('2024-01-15')
    assert normalize_key(timestamp, True) == str(timestamp).lower()
    assert normalize_key(object, False).startswith("<class")
