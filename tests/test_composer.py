"""
Tests for nemesis pair composition.

CRITICAL TESTS:
1. test_symmetric_duplicates_removed - (B, A) dropped after (A, B)
2. test_no_clock_pairs - Two clock nemeses never share a pair
3. test_deterministic - Same input lists give the same pairs, same order
"""

import pytest

from faultline.core.errors import ConfigurationError, ErrorCode
from faultline.matrix.composer import (
    nemesis_product,
    check_pair,
    clock_conflict,
    pair_names,
)
from faultline.nemesis.registry import ABSENT, NEMESES, get_nemeses


def refs(*names):
    return get_nemeses(names)


def names(pairs):
    return [tuple(r.name if r else None for r in p) for p in pairs]


class TestNemesisProduct:
    """Test the filtered cartesian product."""

    def test_symmetric_duplicates_removed(self):
        """[A, B] x [A, B] keeps only (A, B)."""
        a, b = refs('partitions', 'start-kill')
        pairs = nemesis_product([a, b], [a, b])
        assert names(pairs) == [('partitions', 'start-kill')]

    def test_symmetric_duplicates_with_clock_member(self):
        """[A, B] x [A, B] with only B affecting clocks keeps exactly (A, B)."""
        a, b = refs('partitions', 'small-skews')
        assert not a.affects_clocks and b.affects_clocks
        assert nemesis_product([a, b], [a, b]) == [(a, b)]

    def test_self_pairs_removed(self):
        """No pair has the same nemesis on both sides."""
        pairs = nemesis_product(refs('parts', 'topology'), refs('parts', 'topology'))
        for x, y in pairs:
            assert x != y

    def test_no_clock_pairs(self):
        """Two clock-affecting nemeses are never paired."""
        clocks = refs('small-skews', 'big-skews', 'strobe-skews')
        assert nemesis_product(clocks, clocks) == []

    def test_clock_with_non_clock_allowed(self):
        """A clock nemesis pairs with a network nemesis."""
        pairs = nemesis_product(refs('small-skews'), refs('partitions'))
        assert names(pairs) == [('small-skews', 'partitions')]

    def test_absent_secondary(self):
        """ABSENT pairs with everything, including clock nemeses."""
        pairs = nemesis_product(refs('none', 'huge-skews'), [ABSENT])
        assert names(pairs) == [('none', None), ('huge-skews', None)]

    def test_none_is_not_absent(self):
        """The no-op 'none' nemesis and ABSENT are distinct."""
        pairs = nemesis_product(refs('none'), [ABSENT, NEMESES['none']])
        assert names(pairs) == [('none', None)]

    def test_spec_example(self):
        """[none, partitions] x [none] gives one pair."""
        pairs = nemesis_product(refs('none', 'partitions'), refs('none'))
        assert names(pairs) == [('partitions', 'none')]

    def test_deterministic(self):
        """Output order follows primaries then secondaries."""
        primaries = refs('none', 'parts', 'small-skews', 'start-kill')
        secondaries = refs('partitions', 'big-skews', 'none')
        first = nemesis_product(primaries, secondaries)
        second = nemesis_product(primaries, secondaries)
        assert names(first) == names(second)
        assert names(first) == [
            ('none', 'partitions'),
            ('none', 'big-skews'),
            ('parts', 'partitions'),
            ('parts', 'big-skews'),
            ('parts', 'none'),
            ('small-skews', 'partitions'),
            ('small-skews', 'none'),
            ('start-kill', 'partitions'),
            ('start-kill', 'big-skews'),
            ('start-kill', 'none'),
        ]

    def test_no_unordered_duplicates(self):
        """Every unordered pair appears at most once."""
        all_refs = list(NEMESES.values())
        pairs = nemesis_product(all_refs, all_refs)
        keys = [frozenset(p) for p in pairs]
        assert len(keys) == len(set(keys))

    def test_duplicate_inputs_collapse(self):
        """Repeating a name in the primaries adds no pairs."""
        once = nemesis_product(refs('parts'), refs('none'))
        twice = nemesis_product(refs('parts', 'parts'), refs('none'))
        assert names(once) == names(twice)

    def test_empty_lists(self):
        assert nemesis_product([], refs('none')) == []
        assert nemesis_product(refs('none'), []) == []


class TestCheckPair:
    """Test the materialization-time pair check."""

    def test_accepts_valid_pair(self):
        pair = tuple(refs('parts', 'small-skews'))
        assert check_pair(pair) == pair

    def test_rejects_self_pair(self):
        with pytest.raises(ConfigurationError) as exc:
            check_pair(tuple(refs('parts', 'parts')))
        assert exc.value.codes == [ErrorCode.E2001_SELF_PAIR]

    def test_rejects_clock_pair(self):
        with pytest.raises(ConfigurationError) as exc:
            check_pair(tuple(refs('small-skews', 'big-skews')))
        assert exc.value.codes == [ErrorCode.E2002_CLOCK_CONFLICT]

    def test_clock_conflict(self):
        small, big, parts = refs('small-skews', 'big-skews', 'parts')
        assert clock_conflict(small, big)
        assert not clock_conflict(small, parts)
        assert not clock_conflict(small, ABSENT)


class TestPairNames:

    def test_absent_dropped(self):
        assert pair_names(tuple(refs('parts', None))) == ['parts']
        assert pair_names(tuple(refs('none', 'parts'))) == ['none', 'parts']
