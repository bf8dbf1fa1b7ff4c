"""
Tests for the VLOOKUP-style join engine.

tests/test_join_engine.py
"""

import copy
import logging

from excel_lookup_matcher.core.join_engine import (
    COLLISION_SUFFIX,
    NOT_FOUND,
    LookupJoiner,
    MatchConfig,
    build_lookup_index,
    join_tables,
    target_column_name
)
from excel_lookup_matcher.core.table_models import SheetData


def create_master_rows():
    """Create master rows with a mix of numeric and text keys."""
    return [
        {'ID': 1001, 'Product': 'Widget'},
        {'ID': '1002 ', 'Product': 'Gadget'},
        {'ID': 'x9', 'Product': 'Thing'},
    ]


def create_lookup_rows():
    """Create lookup rows keyed by text IDs."""
    return [
        {'Code': '1001.0', 'Price': 9.99, 'Stock': 5},
        {'Code': '1002', 'Price': 4.5, 'Stock': 0},
    ]


def create_sheet(name, rows):
    headers = list(rows[0].keys()) if rows else []
    return SheetData(name=name, headers=headers, rows=rows)


def test_fuzzy_join_end_to_end():
    """Numeric and whitespace variants match in fuzzy mode."""
    print("\nTesting fuzzy join...")

    result = join_tables(create_master_rows(), create_lookup_rows(), 'ID', 'Code', ['Price'], True)

    assert result == [
        {'ID': 1001, 'Product': 'Widget', 'Price': 9.99},
        {'ID': '1002 ', 'Product': 'Gadget', 'Price': 4.5},
        {'ID': 'x9', 'Product': 'Thing', 'Price': NOT_FOUND},
    ]

    print("✓ Fuzzy join matched 2 of 3 rows")


def test_alice_and_bob_department_lookup():
    """One employee has a department row, the other gets '#N/A'."""
    master = [{'id': '1', 'name': 'Alice'}, {'id': '2', 'name': 'Bob'}]
    lookup = [{'id': '1', 'dept': 'Eng'}]

    result = join_tables(master, lookup, 'id', 'id', ['dept'], True)

    assert result == [
        {'id': '1', 'name': 'Alice', 'dept': 'Eng'},
        {'id': '2', 'name': 'Bob', 'dept': '#N/A'},
    ]


def test_duplicate_keys_first_row_wins_and_others_still_hit():
    """Lookup keys [A, A, B]: A takes the first row, B is still found."""
    master = [{'K': 'A'}, {'K': 'B'}]
    lookup = [{'K': 'A', 'V': 'first A'}, {'K': 'A', 'V': 'second A'}, {'K': 'B', 'V': 'only B'}]

    for fuzzy in (True, False):
        result = join_tables(master, lookup, 'K', 'K', ['V'], fuzzy)
        assert [row['V'] for row in result] == ['first A', 'only B']


def test_exact_join_same_inputs():
    """Exact mode keeps '1001' vs '1001.0' and '1002 ' vs '1002' apart."""
    result = join_tables(create_master_rows(), create_lookup_rows(), 'ID', 'Code', ['Price'], False)

    assert [row['Price'] for row in result] == [NOT_FOUND, NOT_FOUND, NOT_FOUND]


def test_exact_mode_matches_number_and_its_text():
    master = [{'K': 7}]
    lookup = [{'K': '7', 'V': 'seven'}]

    assert join_tables(master, lookup, 'K', 'K', ['V'], False)[0]['V'] == 'seven'


def test_fuzzy_fullwidth_digits_do_not_match_numbers():
    result = join_tables([{'K': '１２３'}], [{'K': 123, 'V': 'x'}], 'K', 'K', ['V'], True)
    assert result[0]['V'] == NOT_FOUND


def test_fuzzy_case_insensitive():
    master = [{'Name': 'ABC'}]
    lookup = [{'Name': ' abc ', 'Score': 10}]

    result = join_tables(master, lookup, 'Name', 'Name', ['Score'], True)
    assert result[0]['Score'] == 10

    result = join_tables(master, lookup, 'Name', 'Name', ['Score'], False)
    assert result[0]['Score'] == NOT_FOUND


def test_first_lookup_row_wins():
    """Duplicate lookup keys: the first occurrence is used."""
    master = [{'K': 'A'}]
    lookup = [{'K': 'A', 'V': 1}, {'K': 'A', 'V': 2}]

    assert join_tables(master, lookup, 'K', 'K', ['V'], True)[0]['V'] == 1
    assert join_tables(master, lookup, 'K', 'K', ['V'], False)[0]['V'] == 1


def test_first_wins_across_fuzzy_variants():
    master = [{'K': 'abc'}]
    lookup = [{'K': 'ABC', 'V': 'first'}, {'K': ' abc', 'V': 'second'}]

    assert join_tables(master, lookup, 'K', 'K', ['V'], True)[0]['V'] == 'first'


def test_collision_gets_matched_suffix():
    """Existing master columns are never overwritten."""
    print("\nTesting column collision...")

    master = [{'ID': 'A', 'Status': 'open'}]
    lookup = [{'ID': 'a', 'Status': 'closed'}]

    result = join_tables(master, lookup, 'ID', 'ID', ['Status'], True)

    assert result == [{'ID': 'A', 'Status': 'open', 'Status_matched': 'closed'}]
    assert list(result[0].keys()) == ['ID', 'Status', 'Status_matched']

    print("✓ Collision written as Status_matched")


def test_collision_on_unmatched_row():
    master = [{'ID': 'Z', 'Status': 'open'}]
    lookup = [{'ID': 'A', 'Status': 'closed'}]

    result = join_tables(master, lookup, 'ID', 'ID', ['Status'], True)
    assert result[0] == {'ID': 'Z', 'Status': 'open', 'Status_matched': NOT_FOUND}


def test_target_column_name():
    assert target_column_name({'A': 1}, 'A') == 'A' + COLLISION_SUFFIX
    assert target_column_name({'A': 1}, 'B') == 'B'


def test_blank_keys_never_match():
    """'' and whitespace keys never match, even each other."""
    master = [{'K': ''}, {'K': None}, {'K': '   '}, {'K': float('nan')}]
    lookup = [{'K': '', 'V': 'blank'}, {'K': '   ', 'V': 'spaces'}, {'K': None, 'V': 'none'}]

    for fuzzy in (True, False):
        result = join_tables(master, lookup, 'K', 'K', ['V'], fuzzy)
        # Exact mode keeps '   ' as a real key
        expected = [NOT_FOUND, NOT_FOUND, 'spaces' if not fuzzy else NOT_FOUND, NOT_FOUND]
        assert [row['V'] for row in result] == expected


def test_blank_keys_left_out_of_index():
    lookup = [{'K': ''}, {'K': None}, {'K': 'a'}]
    index = build_lookup_index(lookup, 'K', True)
    assert list(index.keys()) == ['a']


def test_order_and_count_preserved():
    master = [{'K': str(number)} for number in range(50)]
    lookup = [{'K': str(number), 'V': number * 2} for number in range(0, 50, 3)]

    result = join_tables(master, lookup, 'K', 'K', ['V'], True)

    assert len(result) == len(master)
    assert [row['K'] for row in result] == [row['K'] for row in master]
    for row in result:
        number = int(row['K'])
        assert row['V'] == (number * 2 if number % 3 == 0 else NOT_FOUND)


def test_multiple_columns_appended_in_order():
    master = [{'K': 1, 'Z': 'z'}]
    lookup = [{'K': 1, 'B': 'b', 'A': 'a', 'C': 'c'}]

    result = join_tables(master, lookup, 'K', 'K', ['C', 'A'], True)
    assert list(result[0].keys()) == ['K', 'Z', 'C', 'A']
    assert result[0]['C'] == 'c' and result[0]['A'] == 'a'


def test_unmatched_row_gets_not_found_in_every_column():
    result = join_tables([{'K': 'x'}], [{'K': 'y', 'A': 1, 'B': 2}], 'K', 'K', ['A', 'B'], True)
    assert result[0] == {'K': 'x', 'A': NOT_FOUND, 'B': NOT_FOUND}


def test_matched_row_with_empty_value():
    """A matched row copies absent values as-is, not '#N/A'."""
    master = [{'K': 1}]
    lookup = [{'K': 1, 'V': None}, {'K': 2}]

    result = join_tables(master, lookup, 'K', 'K', ['V'], True)
    assert result[0]['V'] is None

    result = join_tables([{'K': 2}], lookup, 'K', 'K', ['V'], True)
    assert result[0]['V'] is None


def test_missing_key_column_marks_everything_not_found():
    master = [{'A': 1}, {'A': 2}]
    lookup = [{'K': 1, 'V': 'one'}]

    result = join_tables(master, lookup, 'Missing', 'K', ['V'], True)
    assert [row['V'] for row in result] == [NOT_FOUND, NOT_FOUND]

    result = join_tables(master, lookup, 'A', 'Missing', ['V'], True)
    assert [row['V'] for row in result] == [NOT_FOUND, NOT_FOUND]


def test_empty_inputs():
    assert join_tables([], [{'K': 1, 'V': 1}], 'K', 'K', ['V'], True) == []

    result = join_tables([{'K': 1}], [], 'K', 'K', ['V'], True)
    assert result == [{'K': 1, 'V': NOT_FOUND}]

    result = join_tables([{'K': 1}], [{'K': 1, 'V': 1}], 'K', 'K', [], True)
    assert result == [{'K': 1}]


def test_inputs_not_mutated():
    master = create_master_rows()
    lookup = create_lookup_rows()
    master_before = copy.deepcopy(master)
    lookup_before = copy.deepcopy(lookup)

    result = join_tables(master, lookup, 'ID', 'Code', ['Price', 'Stock'], True)

    assert master == master_before
    assert lookup == lookup_before
    assert result[0] is not master[0]


def test_join_is_deterministic():
    first = join_tables(create_master_rows(), create_lookup_rows(), 'ID', 'Code', ['Price'], True)
    second = join_tables(create_master_rows(), create_lookup_rows(), 'ID', 'Code', ['Price'], True)
    assert first == second


def test_match_config_defaults():
    config = MatchConfig(master_file='a.xlsx', lookup_file='a.xlsx', master_key='ID',
                         lookup_key='ID', append_columns=['Name'])

    assert config.fuzzy is True
    assert config.append_columns == ('Name',)
    assert config.output_sheet == 'MatchedResult'
    assert config.same_file

    changed = config.with_changes(fuzzy=False, lookup_file='b.xlsx')
    assert changed.fuzzy is False
    assert not changed.same_file
    assert config.fuzzy is True


def test_lookup_joiner_summary(caplog):
    """LookupJoiner reports match counts and per-column fill statistics."""
    print("\nTesting LookupJoiner summary...")

    master = create_sheet('Orders', [
        {'ID': 1, 'Status': 'new'},
        {'ID': 2, 'Status': 'new'},
        {'ID': None, 'Status': 'new'},
        {'ID': 4, 'Status': 'new'},
    ])
    lookup = create_sheet('Customers', [
        {'ID': '1', 'Name': 'Ann', 'Status': 'gold'},
        {'ID': '2', 'Name': None, 'Status': 'silver'},
        {'ID': '2', 'Name': 'Dup', 'Status': 'bronze'},
        {'ID': '', 'Name': 'Blank', 'Status': 'none'},
    ])
    config = MatchConfig(master_file='orders.xlsx', lookup_file='customers.xlsx', master_key='ID',
                         lookup_key='ID', append_columns=['Name', 'Status'], fuzzy=True)

    with caplog.at_level(logging.INFO):
        result = LookupJoiner(config).run(master, lookup)

    summary = result.summary
    assert summary.master_rows == 4
    assert summary.lookup_rows == 4
    assert summary.indexed_keys == 2
    assert summary.duplicate_lookup_keys == 1
    assert summary.blank_lookup_keys == 1
    assert summary.blank_master_keys == 1
    assert summary.matched_rows == 2
    assert summary.unmatched_rows == 2
    assert summary.match_rate == 50.0

    name_stats, status_stats = summary.column_stats
    assert (name_stats.column, name_stats.target_column) == ('Name', 'Name')
    assert (name_stats.filled, name_stats.empty, name_stats.not_found) == (1, 1, 2)
    assert status_stats.target_column == 'Status_matched'
    assert (status_stats.filled, status_stats.empty, status_stats.not_found) == (2, 0, 2)

    assert result.headers == ['ID', 'Status', 'Name', 'Status_matched']
    assert result.rows[1] == {'ID': 2, 'Status': 'new', 'Name': None, 'Status_matched': 'silver'}
    assert 'Matched 2 of 4 rows' in caplog.text

    print("✓ Summary statistics correct")


def test_lookup_joiner_low_match_rate_warning(caplog):
    master = create_sheet('M', [{'K': 'a'}, {'K': 'b'}, {'K': 'c'}])
    lookup = create_sheet('L', [{'K': 'A', 'V': 1}])
    config = MatchConfig(master_file='m.csv', lookup_file='l.csv', master_key='K',
                         lookup_key='K', append_columns=['V'], fuzzy=False)

    with caplog.at_level(logging.WARNING):
        result = LookupJoiner(config).run(master, lookup)

    assert result.summary.matched_rows == 0
    assert 'Low match rate' in caplog.text
    assert 'try fuzzy matching' in caplog.text


def test_lookup_joiner_empty_master():
    config = MatchConfig(master_file='m.csv', lookup_file='l.csv', master_key='K',
                         lookup_key='K', append_columns=['V'])
    result = LookupJoiner(config).run(SheetData(name='M', headers=['K']),
                                      create_sheet('L', [{'K': 1, 'V': 2}]))

    assert result.rows == []
    assert result.headers == ['K']
    assert result.summary.match_rate == 0.0
