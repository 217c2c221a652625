"""Tests for the triad matcher."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from sandwich_scan.matcher import find_sandwiches, group_by_block, is_match
from sandwich_scan.types import Swap, Token

TOKEN0 = Token(address="0x" + "11" * 20, name="Token Zero", symbol="TZ", decimals=18)
TOKEN1 = Token(address="0x" + "22" * 20, name="Token One", symbol="TO", decimals=6)

ONE = 10**18


def swap(idx, block=1, in0=0, in1=0, out0=0, out1=0):
    return Swap(
        block_number=block,
        tx_hash=f"0x{idx:064x}",
        tx_index=idx,
        amount0_in=in0,
        amount1_in=in1,
        amount0_out=out0,
        amount1_out=out1,
    )


class TestIsMatch:
    def test_exact_token0_roundtrip(self):
        assert is_match(swap(1, in0=ONE), swap(3, out0=ONE), TOKEN0, TOKEN1)

    def test_token1_axis_matches_on_its_own(self):
        a = swap(1, in1=20_000 * 10**6)
        b = swap(3, out1=19_900 * 10**6)
        assert is_match(a, b, TOKEN0, TOKEN1)

    def test_upper_bound_is_inclusive(self):
        a = swap(1, in0=101 * 10**16)
        b = swap(3, out0=ONE)
        assert is_match(a, b, TOKEN0, TOKEN1)

    def test_lower_bound_is_inclusive(self):
        a = swap(1, in0=ONE)
        b = swap(3, out0=101 * 10**16)
        assert is_match(a, b, TOKEN0, TOKEN1)

    def test_outside_band_does_not_match(self):
        a = swap(1, in0=102 * 10**16)
        b = swap(3, out0=ONE)
        assert not is_match(a, b, TOKEN0, TOKEN1)

    def test_zero_denominator_is_no_match(self):
        a = swap(1, in0=ONE, in1=10**6)
        b = swap(3)
        assert not is_match(a, b, TOKEN0, TOKEN1)

    def test_zero_denominator_on_one_axis_checks_the_other(self):
        a = swap(1, in0=ONE, in1=5 * 10**6)
        b = swap(3, out1=5 * 10**6)
        assert is_match(a, b, TOKEN0, TOKEN1)

    def test_zero_over_nonzero_does_not_match(self):
        a = swap(1)
        b = swap(3, out0=ONE)
        assert not is_match(a, b, TOKEN0, TOKEN1)

    def test_custom_tolerance(self):
        a = swap(1, in0=105 * 10**16)
        b = swap(3, out0=ONE)
        assert not is_match(a, b, TOKEN0, TOKEN1)
        assert is_match(a, b, TOKEN0, TOKEN1, tolerance=1.05)


class TestFindSandwiches:
    def test_single_triad(self, pair, sandwich_swaps):
        found = find_sandwiches(sandwich_swaps, pair.token0, pair.token1)

        assert len(found) == 1
        assert [s.tx_index for s in found[0].legs] == [10, 11, 12]
        assert found[0].frontrun is sandwich_swaps[0]
        assert found[0].block_number == 100

    def test_three_unrelated_swaps_are_discarded(self):
        bundle = [swap(1, in0=ONE), swap(2, in0=ONE), swap(3, out1=10**6)]
        assert find_sandwiches(bundle, TOKEN0, TOKEN1) == []

    def test_fewer_than_three_swaps(self):
        bundle = [swap(1, in0=ONE), swap(2, out0=ONE)]
        assert find_sandwiches(bundle, TOKEN0, TOKEN1) == []

    def test_greedy_consumption(self):
        # (1,3) and (3,5) both match; index 3 goes to the first triad
        bundle = [
            swap(1, in0=ONE),
            swap(2),
            swap(3, in0=2 * ONE, out0=ONE),
            swap(4),
            swap(5, out0=2 * ONE),
        ]
        found = find_sandwiches(bundle, TOKEN0, TOKEN1)

        assert len(found) == 1
        assert [s.tx_index for s in found[0].legs] == [1, 2, 3]

    def test_slides_past_non_matching_start(self):
        bundle = [
            swap(1, in1=10**6),
            swap(2, in0=ONE),
            swap(3),
            swap(4, out0=ONE),
        ]
        found = find_sandwiches(bundle, TOKEN0, TOKEN1)

        assert [s.tx_index for s in found[0].legs] == [2, 3, 4]

    def test_two_sandwiches_back_to_back(self):
        bundle = [
            swap(1, in0=ONE),
            swap(2),
            swap(3, out0=ONE),
            swap(4, in1=10**6),
            swap(5),
            swap(6, out1=10**6),
        ]
        found = find_sandwiches(bundle, TOKEN0, TOKEN1)

        assert [[s.tx_index for s in f.legs] for f in found] == [[1, 2, 3], [4, 5, 6]]

    def test_idempotent(self, pair, sandwich_swaps):
        first = find_sandwiches(sandwich_swaps, pair.token0, pair.token1)
        second = find_sandwiches(sandwich_swaps, pair.token0, pair.token1)
        assert first == second

    @given(
        amounts=st.lists(
            st.tuples(
                st.integers(min_value=0, max_value=5),
                st.integers(min_value=0, max_value=5),
            ),
            max_size=30,
        )
    )
    def test_sandwiches_never_share_a_swap(self, amounts):
        bundle = [
            swap(i, in0=a * ONE, out0=b * ONE) for i, (a, b) in enumerate(amounts)
        ]
        found = find_sandwiches(bundle, TOKEN0, TOKEN1)

        used = [leg.tx_index for s in found for leg in s.legs]
        assert len(used) == len(set(used))
        for s in found:
            assert s.frontrun.tx_index < s.lunchmeat.tx_index < s.backrun.tx_index
            assert is_match(s.frontrun, s.backrun, TOKEN0, TOKEN1)


class TestGroupByBlock:
    def test_drops_blocks_with_fewer_than_three_swaps(self):
        swaps = [swap(0, block=5), swap(1, block=5), swap(0, block=6)]
        assert group_by_block(swaps) == {}

    def test_sorts_each_group_by_tx_index(self):
        swaps = [swap(7, block=9), swap(2, block=9), swap(4, block=9)]
        groups = group_by_block(swaps)
        assert [s.tx_index for s in groups[9]] == [2, 4, 7]

    def test_blocks_in_ascending_order(self):
        swaps = [swap(i, block=b) for b in (30, 10, 20) for i in range(3)]
        assert list(group_by_block(swaps)) == [10, 20, 30]

    @pytest.mark.parametrize("min_swaps,expected", [(1, [1, 2]), (2, [2])])
    def test_custom_minimum(self, min_swaps, expected):
        swaps = [swap(0, block=1), swap(0, block=2), swap(1, block=2)]
        assert list(group_by_block(swaps, min_swaps=min_swaps)) == expected
